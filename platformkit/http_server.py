"""An HTTP server with health and readiness probes and registered handlers."""

from __future__ import annotations

import threading
from collections.abc import Mapping
from http import HTTPStatus
from typing import Any

from werkzeug.exceptions import HTTPException
from werkzeug.routing import Map, Rule
from werkzeug.serving import BaseWSGIServer, WSGIRequestHandler, make_server
from werkzeug.wrappers import Request, Response

from platformkit.errors import AppError, ErrorList
from platformkit.http_middleware import LogRequestMiddleware, RequestIDMiddleware
from platformkit.http_model import HEALTH_URL, READY_URL, Handler, HttpConfig, WSGIApp
from platformkit.http_response import ErrorWriter, ResponseWriter
from platformkit.logger import Logger

ERR_LOGGER_IS_REQUIRED = AppError("SYS", "Logger is required")
ERR_HTTP_CONFIG_IS_REQUIRED = AppError("SYS", "HttpConfig is required")

Context = Mapping[str, Any] | None

_ROUTE_KEY = "platformkit.route"
_LISTEN_HOST = "0.0.0.0"
_POLL_INTERVAL = 0.1
_SHUTDOWN_GRACE = 2 * _POLL_INTERVAL

# Probe state is shared by every server in the process.
_healthy = threading.Event()
_ready = threading.Event()


def _empty_handler(request: Request, **_: Any) -> None:
    return None


class HttpServer:
    """Serves the configured public handlers behind request-ID and logging middleware.

    Handlers are called as ``handler(request, **route_values)`` and return a
    werkzeug Response, or None for an empty 200 reply. Routes use werkzeug
    rule syntax. The read timeout, in milliseconds, applies to client sockets.
    """

    def __init__(
        self,
        logger: Logger,
        config: HttpConfig,
        response_writer: ResponseWriter | None,
        error_writer: ErrorWriter | None,
    ) -> None:
        self._logger = logger
        self._config = config
        self._response_writer = response_writer
        self._error_writer = error_writer
        self._url_map = Map()
        self._handlers: dict[str, Handler] = {}
        self._app: WSGIApp = self._dispatch
        self._server: BaseWSGIServer | None = None
        self._thread: threading.Thread | None = None
        self._started = False

    def start(self, ctx: Context) -> None:
        """Register routes, start listening in the background and mark the server healthy."""
        try:
            self._start_worker(ctx)
        except Exception as exc:
            self._logger.log_error(ctx, exc)
            raise
        self._logger.log_info(
            ctx, f"Http server is successfully started on port: {self._config.port}"
        )

    def stop(self, ctx: Context) -> None:
        """Shut the listener down within the shutdown timeout and mark the server unhealthy."""
        if not self._started:
            raise RuntimeError("HTTP server is not started")
        try:
            self._stop_server(ctx)
        except Exception as exc:
            self._logger.log_error(ctx, exc)
            raise
        self._logger.log_info(ctx, "HTTP server is successfully stopped")

    def wsgi_app(self, environ: dict[str, Any], start_response: Any) -> Any:
        adapter = self._url_map.bind_to_environ(environ)
        try:
            endpoint, values = adapter.match()
        except HTTPException as exc:
            return exc(environ, start_response)
        environ[_ROUTE_KEY] = (self._handlers[endpoint], values)
        return self._app(environ, start_response)

    __call__ = wsgi_app

    def _start_worker(self, ctx: Context) -> None:
        self._init_handlers_and_middlewares()
        self._init_server(ctx)
        self._start_listener(ctx)
        _healthy.set()
        _ready.set()
        self._started = True

    def _init_handlers_and_middlewares(self) -> None:
        rules = [
            Rule(HEALTH_URL, methods=["GET"], endpoint="health"),
            Rule(READY_URL, methods=["GET"], endpoint="ready"),
            Rule("/", methods=["OPTIONS"], endpoint="options"),
            Rule("/<path:_rest>", methods=["OPTIONS"], endpoint="options"),
        ]
        handlers: dict[str, Handler] = {
            "health": self._probe_handler(_healthy),
            "ready": self._probe_handler(_ready),
            "options": _empty_handler,
        }
        for number, item in enumerate(self._config.public_handlers):
            endpoint = f"public:{number}"
            rules.append(Rule(item.route, methods=[item.method.upper()], endpoint=endpoint))
            handlers[endpoint] = item.handler

        self._url_map = Map(rules, strict_slashes=False, merge_slashes=False)
        self._handlers = handlers

        middlewares = [
            *self._config.middlewares,
            RequestIDMiddleware().process,
            LogRequestMiddleware(self._logger, []).process,
        ]
        app: WSGIApp = self._dispatch
        for middleware in reversed(middlewares):
            app = middleware(app)
        self._app = app

    def _init_server(self, ctx: Context) -> None:
        read_timeout = self._config.read_timeout
        handler_class = type(
            "_TimedRequestHandler",
            (WSGIRequestHandler,),
            {"timeout": read_timeout / 1000 if read_timeout > 0 else None},
        )
        try:
            self._server = make_server(
                _LISTEN_HOST,
                self._config.port,
                self.wsgi_app,
                threaded=True,
                request_handler=handler_class,
            )
        except OSError as exc:
            self._server = None
            self._log_error(ctx, "ListenAndServe", exc)

    def _start_listener(self, ctx: Context) -> None:
        server = self._server
        if server is None:
            self._thread = None
            return
        self._thread = threading.Thread(
            target=self._serve, args=(server, ctx), name="http-server", daemon=True
        )
        self._thread.start()

    def _serve(self, server: BaseWSGIServer, ctx: Context) -> None:
        try:
            server.serve_forever(poll_interval=_POLL_INTERVAL)
        except Exception as exc:
            self._log_error(ctx, "ListenAndServe", exc)

    def _stop_server(self, ctx: Context) -> None:
        server, thread = self._server, self._thread
        if server is not None and thread is not None:
            threading.Thread(target=server.shutdown, daemon=True).start()
            thread.join(self._config.shutdown_timeout + _SHUTDOWN_GRACE)
            if thread.is_alive():
                err = TimeoutError("context deadline exceeded")
                self._log_error(ctx, "HTTP server graceful shutdown failed", err)
                raise err
        self._server = None
        self._thread = None
        self._started = False
        _healthy.clear()
        _ready.clear()

    def _dispatch(self, environ: dict[str, Any], start_response: Any) -> Any:
        handler, values = environ[_ROUTE_KEY]
        response = handler(Request(environ), **values)
        if response is None:
            response = Response(b"", status=HTTPStatus.OK)
        return response(environ, start_response)

    def _probe_handler(self, flag: threading.Event) -> Handler:
        def probe(request: Request, **_: Any) -> Response:
            if not flag.is_set():
                return Response(status=HTTPStatus.SERVICE_UNAVAILABLE)
            try:
                return self._response_writer.json_response(
                    request, {"status": "OK"}, HTTPStatus.OK
                )
            except AppError as exc:
                return self._error_writer.error_response(request, exc)

        return probe

    def _log_error(self, ctx: Context, message: str, err: BaseException) -> None:
        self._logger.log_error(ctx, RuntimeError(f"{message}: {err}"))


class HttpServerBuilder:
    """Collects the server's parts and builds an :class:`HttpServer`."""

    def __init__(self) -> None:
        self._logger: Logger | None = None
        self._config: HttpConfig | None = None
        self._response_writer: ResponseWriter | None = None
        self._error_writer: ErrorWriter | None = None

    def logger(self, logger: Logger | None) -> HttpServerBuilder:
        self._logger = logger
        return self

    def config(self, config: HttpConfig | None) -> HttpServerBuilder:
        self._config = config
        return self

    def response_writer(self, writer: ResponseWriter | None) -> HttpServerBuilder:
        self._response_writer = writer
        return self

    def error_response_writer(self, writer: ErrorWriter | None) -> HttpServerBuilder:
        self._error_writer = writer
        return self

    def build(self) -> HttpServer:
        """Build the server; raise ErrorList naming every missing required part."""
        errors = ErrorList()
        if self._logger is None:
            errors.add_error(ERR_LOGGER_IS_REQUIRED)
        if self._config is None:
            errors.add_error(ERR_HTTP_CONFIG_IS_REQUIRED)
        if errors.is_present():
            raise errors
        return HttpServer(
            self._logger, self._config, self._response_writer, self._error_writer
        )