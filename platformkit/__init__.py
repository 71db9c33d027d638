"""Building blocks for backend services: errors, logging, lifecycle, databases and HTTP."""

__version__ = "0.1.0"