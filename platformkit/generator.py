"""Random numbers, random strings and UUID helpers."""

from __future__ import annotations

import json
import secrets
import string
import uuid

from platformkit.errors import AppError, ErrorCode

PARSE_UUID_ERROR_CODE: ErrorCode = "12a8df9e-001"

_DEFAULT_MIN_NUMBER = 0
_DEFAULT_MAX_NUMBER = 100
_DEFAULT_STR_LENGTH = 15
_LETTERS = string.ascii_lowercase + string.ascii_uppercase


def _quote(value: str) -> str:
    return json.dumps(value, ensure_ascii=False)


def err_parse_uuid(invalid_uuid_str: str, cause: BaseException) -> AppError:
    """Build the error reported when a string is not a valid UUID."""
    message = (
        f"Fail create uuid from string = {_quote(invalid_uuid_str)}. "
        f"Cause: {_quote(str(cause))}"
    )
    return AppError(PARSE_UUID_ERROR_CODE, message)


def random_default_number() -> int:
    """Return a cryptographically random number in [0, 100)."""
    return random_number(_DEFAULT_MIN_NUMBER, _DEFAULT_MAX_NUMBER)


def random_number(min_number: int, max_number: int) -> int:
    """Return a cryptographically random number in [min_number, max_number).

    Raises ValueError when the range is empty.
    """
    return min_number + secrets.randbelow(max_number - min_number)


def random_default_str() -> str:
    return random_str(_DEFAULT_STR_LENGTH)


def random_str(length: int) -> str:
    """Return ``length`` random ASCII letters."""
    return "".join(
        _LETTERS[random_number(0, len(_LETTERS) - 1)] for _ in range(length)
    )


def generate_uuid() -> str:
    return str(uuid.uuid4())


def uuid_from(uuid_str: str) -> str:
    """Return the canonical form of ``uuid_str``; raise AppError if it is invalid."""
    try:
        value = uuid.UUID(uuid_str)
    except (ValueError, TypeError, AttributeError) as exc:
        raise err_parse_uuid(uuid_str, exc) from exc
    return str(value)