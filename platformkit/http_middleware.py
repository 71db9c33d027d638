"""WSGI middlewares that tag requests with an ID and log them."""

from __future__ import annotations

import time
from collections.abc import Iterable
from typing import Any

from platformkit.generator import generate_uuid
from platformkit.http_model import REQUEST_ID_HEADER_NAME, WSGIApp
from platformkit.logger import Logger

REQUEST_ID_KEY = "RequestID"

_REQUEST_ID_ENVIRON_HEADER = "HTTP_X_REQUEST_ID"
_LOGGED_STATUS = 200


def _format_duration(seconds: float) -> str:
    nanos = round(seconds * 1e9)
    if nanos < 1_000:
        return f"{nanos}ns"
    if nanos < 1_000_000:
        return f"{nanos / 1e3:g}µs"
    if nanos < 1_000_000_000:
        return f"{nanos / 1e6:g}ms"
    return f"{nanos / 1e9:g}s"


def _remote_addr(environ: dict[str, Any]) -> str:
    addr = environ.get("REMOTE_ADDR", "")
    port = environ.get("REMOTE_PORT")
    return f"{addr}:{port}" if port else addr


class LogRequestMiddleware:
    """Logs one line per request, except for the excluded paths."""

    def __init__(self, logger: Logger, excluded_urls: Iterable[str] | None = None) -> None:
        self._logger = logger
        self._excluded = frozenset(excluded_urls or ())

    def process(self, app: WSGIApp) -> WSGIApp:
        def logged(environ: dict[str, Any], start_response: Any) -> Any:
            path = environ.get("PATH_INFO", "")
            if path in self._excluded:
                return app(environ, start_response)

            started = time.perf_counter()
            try:
                return app(environ, start_response)
            finally:
                self._logger.log_info(
                    environ, self._message(environ, path, time.perf_counter() - started)
                )

        return logged

    @staticmethod
    def _message(environ: dict[str, Any], path: str, elapsed: float) -> str:
        method = environ.get("REQUEST_METHOD", "")
        scheme = "https" if environ.get("wsgi.url_scheme") == "https" else "http"
        host = environ.get("HTTP_HOST") or environ.get("SERVER_NAME", "")
        proto = environ.get("SERVER_PROTOCOL", "")
        user_agent = environ.get("HTTP_USER_AGENT", "")
        return (
            f'{method} {scheme}://{host}{path} {proto}", '
            f"from '{_remote_addr(environ)} {user_agent}', "
            f"duration {_format_duration(elapsed)}, "
            f"response code {_LOGGED_STATUS}"
        )


class RequestIDMiddleware:
    """Takes the request ID from the request header or makes a new one.

    The ID is stored in the environ under REQUEST_ID_KEY and added to the
    response headers.
    """

    def process(self, app: WSGIApp) -> WSGIApp:
        def tagged(environ: dict[str, Any], start_response: Any) -> Any:
            request_id = environ.get(_REQUEST_ID_ENVIRON_HEADER) or generate_uuid()
            environ[REQUEST_ID_KEY] = request_id

            def start(status: str, headers: list[tuple[str, str]], exc_info: Any = None) -> Any:
                return start_response(
                    status, [*headers, (REQUEST_ID_HEADER_NAME, request_id)], exc_info
                )

            return app(environ, start)

        return tagged