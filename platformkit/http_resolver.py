"""Mapping of errors to HTTP status codes and client-facing codes and texts."""

from __future__ import annotations

from http import HTTPStatus
from typing import Protocol

from platformkit.errors import AppError, ErrorCode

UNMARSHAL_REQUEST_ERROR_CODE: ErrorCode = "5aba411c-001"
UNKNOWN_ERROR_CODE = "UNKNOWN_CODE"


class RequestModel(Protocol):
    """A request body model that fills itself from raw bytes."""

    def fill_from_bytes(self, data: bytes) -> None:
        """Fill the model; raise on malformed input."""


class ErrorResolver(Protocol):
    """Tells how an error is reported to an HTTP client."""

    def get_error_code(self, err: BaseException) -> str:
        ...

    def get_error_text(self, err: BaseException) -> str:
        ...

    def get_http_code(self, err: BaseException) -> int:
        ...


def _find_app_error(err: BaseException | None) -> AppError | None:
    seen: set[int] = set()
    current = err
    while current is not None and id(current) not in seen:
        if isinstance(current, AppError):
            return current
        seen.add(id(current))
        current = current.__cause__
    return None


class DefaultErrorResolver:
    """Reports AppError codes and messages; anything else is an internal error."""

    def get_error_code(self, err: BaseException) -> str:
        if isinstance(err, AppError):
            return str(err.code)
        return UNKNOWN_ERROR_CODE

    def get_error_text(self, err: BaseException) -> str:
        if isinstance(err, AppError):
            return err.message
        return str(err)

    def get_http_code(self, err: BaseException) -> int:
        found = _find_app_error(err)
        if found is None:
            return HTTPStatus.INTERNAL_SERVER_ERROR.value
        if found.code == UNMARSHAL_REQUEST_ERROR_CODE:
            return HTTPStatus.BAD_REQUEST.value
        return HTTPStatus.UNPROCESSABLE_ENTITY.value