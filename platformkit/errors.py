"""Coded application errors and ordered collections of them."""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from typing import TypeVar

ErrorCode = str

UNKNOWN_ERROR_CODE: ErrorCode = "unknown_error"

_E = TypeVar("_E", bound=BaseException)


def _find(err: BaseException | None, kind: type[_E]) -> _E | None:
    """Return the first exception of ``kind`` in the explicit cause chain of ``err``."""
    seen: set[int] = set()
    current = err
    while current is not None and id(current) not in seen:
        if isinstance(current, kind):
            return current
        seen.add(id(current))
        current = current.__cause__
    return None


class AppError(Exception):
    """An error identified by a code and a human readable message."""

    def __init__(self, code: ErrorCode, message: str) -> None:
        super().__init__(code, message)
        self.code = code
        self.message = message

    def __str__(self) -> str:
        return f"{self.code}: {self.message}."

    def __repr__(self) -> str:
        return f"AppError(code={self.code!r}, message={self.message!r})"

    def equals(self, other: object) -> bool:
        """Tell whether ``other`` carries the same code and message."""
        if not isinstance(other, AppError):
            return False
        return self.code == other.code and self.message == other.message


class ErrorList(Exception):
    """An ordered collection of :class:`AppError` that can itself be raised."""

    def __init__(self) -> None:
        super().__init__()
        self._errors: list[AppError] = []

    def add_error(self, err: BaseException) -> None:
        """Add an error; nested lists are flattened, foreign errors are wrapped."""
        if err is None:
            raise TypeError("cannot add None to an error list")
        single = _find(err, AppError)
        if single is not None:
            self._errors.append(single)
            return
        group = _find(err, ErrorList)
        if group is not None:
            self._errors.extend(group._errors)
            return
        self._errors.append(AppError(UNKNOWN_ERROR_CODE, str(err)))

    def create_and_add_error(self, code: ErrorCode, message: str) -> None:
        self.add_error(AppError(code, message))

    def add_errors(self, errs: Iterable[BaseException]) -> None:
        for err in errs:
            self.add_error(err)

    def is_empty(self) -> bool:
        return not self._errors

    def is_present(self) -> bool:
        return bool(self._errors)

    def __len__(self) -> int:
        return len(self._errors)

    def __iter__(self) -> Iterator[AppError]:
        return iter(list(self._errors))

    def contains(self, err: object) -> bool:
        """Tell whether an equal :class:`AppError` is held; other errors never match."""
        if not isinstance(err, AppError):
            return False
        return any(item.equals(err) for item in self._errors)

    def contains_by_code(self, code: ErrorCode) -> bool:
        return any(item.code == code for item in self._errors)

    def to_list(self) -> list[AppError]:
        """Return a copy of the held errors."""
        return list(self._errors)

    def __str__(self) -> str:
        return "\n".join(str(item) for item in self._errors)

    def __repr__(self) -> str:
        return f"ErrorList({self._errors!r})"


def error_from(err: BaseException | None) -> AppError | None:
    """Return ``err`` as an :class:`AppError`, wrapping it with the unknown code."""
    return cast_or_wrap(err, UNKNOWN_ERROR_CODE)


def errors_from(*errs: BaseException) -> ErrorList:
    result = ErrorList()
    result.add_errors(errs)
    return result


def cast_or_wrap(err: BaseException | None, or_code: ErrorCode) -> AppError | None:
    """Find an :class:`AppError` in ``err`` or wrap ``err`` in a new one with ``or_code``."""
    if err is None:
        return None
    found = _find(err, AppError)
    if found is not None:
        return found
    return AppError(or_code, str(err))


def contain_by_code(err: BaseException | None, code: ErrorCode) -> bool:
    """Tell whether ``err`` is, or holds, an error with ``code``."""
    if err is None:
        return False
    single = _find(err, AppError)
    if single is not None:
        return equal_by_code(single, code)
    group = _find(err, ErrorList)
    if group is not None:
        return group.contains_by_code(code)
    return False


def equal_by_code(err: BaseException | None, code: ErrorCode) -> bool:
    """Tell whether ``err`` is an :class:`AppError` with ``code``."""
    if err is None:
        return False
    found = _find(err, AppError)
    if found is None:
        return False
    return found.code == code