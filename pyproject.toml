[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "platformkit"
version = "0.1.0"
description = "Building blocks for backend services: coded errors, JSON logging, lifecycle management, MongoDB and PostgreSQL wrappers, and a WSGI HTTP server toolkit."
requires-python = ">=3.10"
keywords = ["errors", "logging", "mongodb", "postgresql", "wsgi", "service", "framework"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Libraries :: Application Frameworks",
    "Topic :: Internet :: WWW/HTTP :: WSGI :: Application",
    "Topic :: Database :: Front-Ends",
]
dependencies = [
    "pymongo",
    "werkzeug",
    "sqlalchemy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["platformkit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
ignore_missing_imports = true
