"""Writers of JSON, raw, streamed and error HTTP responses."""

from __future__ import annotations

import dataclasses
import json
from collections.abc import Iterable, Iterator
from typing import Any, Protocol

from werkzeug.wrappers import Request, Response

from platformkit.errors import AppError, ErrorList
from platformkit.http_model import (
    HEADER_CONTENT_LENGTH,
    HEADER_CONTENT_TYPE,
    HEADER_X_CONTENT_TYPE_OPTIONS,
    ErrorResponse,
    ErrorResponseData,
)
from platformkit.http_resolver import ErrorResolver
from platformkit.logger import Logger

ERR_LOGGER_IS_REQUIRED = AppError("SYS", "Logger is required")
ERR_ERROR_RESOLVER_IS_REQUIRED = AppError("SYS", "Error resolver is required")
ERR_WRITE_RESPONSE = AppError("546e893f-001", "An error occurred at write http response")

JSON_CONTENT_TYPE = "application/json; charset=utf-8"

_STREAM_CHUNK_SIZE = 64 * 1024


class Upstream(Protocol):
    """A readable body to be passed through to the client."""

    def read(self, size: int = -1) -> bytes:
        ...

    def close(self) -> None:
        ...


def _json_default(value: Any) -> Any:
    to_dict = getattr(value, "to_dict", None)
    if callable(to_dict):
        return to_dict()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _json_headers() -> dict[str, str]:
    return {
        HEADER_CONTENT_TYPE: JSON_CONTENT_TYPE,
        HEADER_X_CONTENT_TYPE_OPTIONS: "nosniff",
    }


def _log_error(logger: Logger, request: Request, message: str, err: BaseException) -> None:
    logger.log_error(request.environ, RuntimeError(f"{message}: {err}"))


class ResponseWriter:
    """Builds successful responses and logs what goes wrong while doing so."""

    def __init__(self, logger: Logger | None) -> None:
        if logger is None:
            raise ERR_LOGGER_IS_REQUIRED
        self._logger = logger

    def json_response(self, request: Request, result: Any, status: int) -> Response:
        """Serialise ``result`` as JSON; None and "" give an empty body.

        Raises ERR_WRITE_RESPONSE when ``result`` cannot be serialised.
        """
        try:
            body = self._marshal_body(result)
        except (TypeError, ValueError) as exc:
            _log_error(self._logger, request, "Marshal json error", exc)
            raise ERR_WRITE_RESPONSE from exc
        return self.response(request, body, status)

    def response(self, request: Request, body: bytes, status: int) -> Response:
        return Response(body, status=status, headers=_json_headers())

    def stream_response(self, request: Request, upstream: Upstream) -> Response:
        """Pass ``upstream`` through in chunks, closing it once it is consumed.

        Content type and length are taken from the incoming request's headers.
        """
        headers = {HEADER_CONTENT_TYPE: request.headers.get(HEADER_CONTENT_TYPE, "")}
        length = request.headers.get(HEADER_CONTENT_LENGTH)
        if length is not None:
            headers[HEADER_CONTENT_LENGTH] = length
        return Response(self._copy(request, upstream), headers=headers)

    def _copy(self, request: Request, upstream: Upstream) -> Iterator[bytes]:
        try:
            while True:
                chunk = upstream.read(_STREAM_CHUNK_SIZE)
                if not chunk:
                    break
                yield chunk
        except Exception as exc:
            _log_error(self._logger, request, "Copying response body failed", exc)
        finally:
            try:
                upstream.close()
            except Exception as exc:
                _log_error(self._logger, request, "Response Body Close Error", exc)

    @staticmethod
    def _marshal_body(result: Any) -> bytes:
        if result is None or result == "":
            return b""
        text = json.dumps(
            result,
            default=_json_default,
            ensure_ascii=False,
            allow_nan=False,
            separators=(",", ":"),
        )
        return text.encode("utf-8")


class ErrorWriter:
    """Turns errors into a pretty-printed JSON error response."""

    def __init__(self, logger: Logger | None, resolver: ErrorResolver | None) -> None:
        if logger is None:
            raise ERR_LOGGER_IS_REQUIRED
        if resolver is None:
            raise ERR_ERROR_RESOLVER_IS_REQUIRED
        self._logger = logger
        self._resolver = resolver

    def errors_response(self, request: Request, errs: Iterable[BaseException]) -> Response:
        """Report every error; the status is that of the first one.

        Raises IndexError when there is nothing to report.
        """
        body = self._create_error_response(errs)
        return self._write(request, body)

    def error_response(self, request: Request, err: BaseException) -> Response:
        return self.errors_response(request, [err])

    def _create_error_response(self, errs: Iterable[BaseException]) -> ErrorResponse:
        data: list[ErrorResponseData] = []
        for err in errs:
            if isinstance(err, ErrorList):
                data.extend(self._response_data(item) for item in err.to_list())
            else:
                data.append(self._response_data(err))
        return ErrorResponse(data)

    def _response_data(self, err: BaseException) -> ErrorResponseData:
        return ErrorResponseData(
            http_code=self._resolver.get_http_code(err),
            error_code=self._resolver.get_error_code(err),
            text=self._resolver.get_error_text(err),
        )

    def _write(self, request: Request, body: ErrorResponse) -> Response:
        status = body.first_http_code()
        try:
            text = json.dumps(body.to_dict(), indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            _log_error(self._logger, request, "JSON marshal failed", exc)
            return Response(b"", status=500)
        return Response(text.encode("utf-8"), status=status, headers=_json_headers())