"""Shared plumbing for HTTP request handlers."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

from werkzeug.wrappers import Request, Response

from platformkit.errors import AppError, ErrorCode
from platformkit.http_resolver import RequestModel
from platformkit.http_response import ErrorWriter, ResponseWriter
from platformkit.logger import Logger

ERR_LOGGER_IS_REQUIRED = AppError("SYS", "Logger is required")
ERR_RESPONSE_WRITER_IS_REQUIRED = AppError("SYS", "ResponseWriter is required")
ERR_ERROR_RESPONSE_WRITER_IS_REQUIRED = AppError("SYS", "Error response writer is required")

UNMARSHAL_REQUEST_ERROR_CODE: ErrorCode = "316ad077-001"


def err_unmarshal_request(cause_description: str) -> AppError:
    """Build the error reported for a request body that cannot be read."""
    return AppError(
        UNMARSHAL_REQUEST_ERROR_CODE, f"Malformed request. Cause - {cause_description}"
    )


class BaseController:
    """Reads request bodies and writes responses through the configured writers."""

    def __init__(
        self,
        response_writer: ResponseWriter | None,
        error_writer: ErrorWriter | None,
        logger: Logger | None,
    ) -> None:
        if response_writer is None:
            raise ERR_RESPONSE_WRITER_IS_REQUIRED
        if error_writer is None:
            raise ERR_ERROR_RESPONSE_WRITER_IS_REQUIRED
        if logger is None:
            raise ERR_LOGGER_IS_REQUIRED
        self._response_writer = response_writer
        self._error_writer = error_writer
        self._logger = logger

    def fill_request_model(self, request: Request, model: RequestModel) -> None:
        """Fill ``model`` from the request body; a failure raises an unmarshal error."""
        body = self.get_request_body(request)
        try:
            model.fill_from_bytes(body)
        except Exception as exc:
            raise err_unmarshal_request(str(exc)) from exc

    def get_request_body(self, request: Request) -> bytes:
        if request.environ.get("wsgi.input") is None:
            raise err_unmarshal_request("Request body is nil")
        return request.get_data()

    def error_response_with_log(self, request: Request, *errs: BaseException) -> Response:
        for err in errs:
            self._logger.log_error(request.environ, err)
        return self.errors_response(request, errs)

    def response(self, request: Request, body: bytes, status: int) -> Response:
        return self._response_writer.response(request, body, status)

    def json_response(self, request: Request, result: Any, status: int) -> Response:
        """Write ``result`` as JSON, or an error response if it cannot be serialised."""
        try:
            return self._response_writer.json_response(request, result, status)
        except AppError as exc:
            return self._error_writer.error_response(request, exc)

    def errors_response(self, request: Request, errs: Iterable[BaseException]) -> Response:
        return self._error_writer.errors_response(request, errs)

    def error_response(self, request: Request, err: BaseException) -> Response:
        return self._error_writer.error_response(request, err)