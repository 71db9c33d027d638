"""Configuration and wire models for the HTTP server."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

REQUEST_ID_HEADER_NAME = "X-Request-ID"
HEADER_CONTENT_TYPE = "Content-Type"
HEADER_CONTENT_LENGTH = "Content-Length"
HEADER_X_CONTENT_TYPE_OPTIONS = "X-Content-Type-Options"

READY_URL = "/readyz"
HEALTH_URL = "/healthz"

Handler = Callable[..., Any]
WSGIApp = Callable[..., Any]
Middleware = Callable[[WSGIApp], WSGIApp]


@dataclass
class CORS:
    """Allowed headers and origins for cross-origin requests."""

    allowed_headers: list[str] = field(default_factory=list)
    allowed_origins: list[str] = field(default_factory=list)

    def add_header(self, *headers: str) -> None:
        self.allowed_headers.extend(headers)

    def add_origin(self, *origins: str) -> None:
        self.allowed_origins.extend(origins)


@dataclass(frozen=True)
class RequestHandler:
    """A handler bound to an HTTP method and a route."""

    method: str
    route: str
    handler: Handler


@dataclass
class HttpConfig:
    """Server timeouts, port, handlers and middlewares.

    Read, write and idle timeouts are in milliseconds; the shutdown timeout is in seconds.
    """

    read_timeout: int = 0
    write_timeout: int = 0
    idle_timeout: int = 0
    shutdown_timeout: int = 0
    port: int = 0
    cors: CORS = field(default_factory=CORS)
    public_handlers: list[RequestHandler] = field(default_factory=list)
    private_handlers: list[RequestHandler] = field(default_factory=list)
    middlewares: list[Middleware] = field(default_factory=list)

    @classmethod
    def default(cls, port: int) -> HttpConfig:
        return cls(
            read_timeout=30,
            write_timeout=30,
            idle_timeout=2 * 30,
            shutdown_timeout=10,
            port=port,
        )

    def register_public_handler(self, method: str, route: str, handler: Handler) -> None:
        self.public_handlers.append(RequestHandler(method, route, handler))

    def register_private_handler(self, method: str, route: str, handler: Handler) -> None:
        self.private_handlers.append(RequestHandler(method, route, handler))

    def register_middleware(self, middleware: Middleware) -> None:
        self.middlewares.append(middleware)

    def has_middlewares(self) -> bool:
        return bool(self.middlewares)


@dataclass(frozen=True)
class ErrorResponseData:
    """One error as reported to an HTTP client."""

    http_code: int
    error_code: str
    text: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "responseCode": self.http_code,
            "errorCode": self.error_code,
            "text": self.text,
        }


@dataclass
class ErrorResponse:
    """The body of an error reply."""

    errors: list[ErrorResponseData] = field(default_factory=list)

    @classmethod
    def single(cls, data: ErrorResponseData) -> ErrorResponse:
        return cls([data])

    def first_http_code(self) -> int:
        """Return the HTTP code of the first error; raise IndexError if there is none."""
        return self.errors[0].http_code

    def to_dict(self) -> dict[str, Any]:
        return {"errors": [item.to_dict() for item in self.errors]}