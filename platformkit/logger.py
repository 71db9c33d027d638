"""Structured JSON logging with request correlation."""

from __future__ import annotations

import json
import os
import sys
import threading
import traceback
from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import datetime
from enum import IntEnum
from itertools import islice
from typing import Any, Protocol, TextIO

FIELD_ERR_KEY = "error"
FIELD_COMPONENT_KEY = "component"
FIELD_FILENAME_KEY = "filename"

REQUEST_ID_CTX_KEY = "requestID"

_HOST_TAG = "service_name"
_MESSAGE_TAG = "correlation_id"
_TIME_TAG = "timestamp"
_UNKNOWN_REQUEST_ID = "unknown"
_MAX_STACK_TRACE_LEVEL = 21

NIL_ERROR_MESSAGE = (
    "unexpected behaviour in logger: was received nil-error for logging"
)


class Level(IntEnum):
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    FATAL = 5


_LEVEL_NAMES = {
    Level.DEBUG: "debug",
    Level.INFO: "info",
    Level.WARN: "warn",
    Level.ERROR: "error",
    Level.FATAL: "fatal",
}


@dataclass
class Field:
    """A payload field; only non-zero integer, float and string values are written."""

    key: str
    integer: int = 0
    float: float = 0.0
    string: str = ""
    object: Any = None


@dataclass
class LogData:
    ctx: Mapping[str, Any] | None
    msg: str
    fields: list[Field] = field(default_factory=list)
    level: Level = Level.INFO


def error_data(ctx: Mapping[str, Any] | None, msg: str, err: str) -> LogData:
    return LogData(ctx, msg, [Field(key=FIELD_ERR_KEY, string=err)], Level.ERROR)


def warn_data(ctx: Mapping[str, Any] | None, msg: str) -> LogData:
    return LogData(ctx, msg, [], Level.WARN)


def info_data(ctx: Mapping[str, Any] | None, msg: str) -> LogData:
    return LogData(ctx, msg, [], Level.INFO)


def debug_data(ctx: Mapping[str, Any] | None, msg: str) -> LogData:
    return LogData(ctx, msg, [], Level.DEBUG)


class Logger(Protocol):
    """What the platform components need from a logger."""

    def log_error(self, ctx: Mapping[str, Any] | None, *errs: BaseException | None) -> None:
        ...

    def log_warn(self, ctx: Mapping[str, Any] | None, *messages: str) -> None:
        ...

    def log_info(self, ctx: Mapping[str, Any] | None, *messages: str) -> None:
        ...

    def log_debug(self, ctx: Mapping[str, Any] | None, *messages: str) -> None:
        ...


def _stack_filenames() -> list[str]:
    # Innermost first; skip this helper and the log-data factory that called it.
    frames = reversed(traceback.extract_stack())
    return [
        f"{os.path.basename(frame.filename)}:{frame.lineno}"
        for frame in islice(frames, 2, _MAX_STACK_TRACE_LEVEL + 1)
    ]


def _create_err_log_data(
    ctx: Mapping[str, Any] | None, err: BaseException | None
) -> LogData:
    if err is None:
        return LogData(ctx, NIL_ERROR_MESSAGE, [], Level.ERROR)
    filenames = _stack_filenames()
    fields = [Field(key=FIELD_FILENAME_KEY, string=" <- ".join(filenames))]
    return LogData(ctx, str(err), fields, Level.ERROR)


def _request_id(ctx: Mapping[str, Any] | None) -> str:
    value = ctx.get(REQUEST_ID_CTX_KEY) if isinstance(ctx, Mapping) else None
    return value if isinstance(value, str) else _UNKNOWN_REQUEST_ID


def _timestamp() -> str:
    stamp = datetime.now().astimezone().isoformat(timespec="seconds")
    return stamp.replace("+00:00", "Z")


class JsonLogger:
    """Writes one JSON object per line, tagged with the service name.

    Warnings and debug messages are written at info level.
    """

    def __init__(self, app_id: str, stream: TextIO | None = None) -> None:
        self._app_id = app_id
        self._stream = stream
        self._lock = threading.Lock()

    def log_error(self, ctx: Mapping[str, Any] | None, *errs: BaseException | None) -> None:
        for err in errs:
            self._emit(_create_err_log_data(ctx, err))

    def log_warn(self, ctx: Mapping[str, Any] | None, *messages: str) -> None:
        for message in messages:
            self._emit(info_data(ctx, message))

    def log_info(self, ctx: Mapping[str, Any] | None, *messages: str) -> None:
        for message in messages:
            self._emit(info_data(ctx, message))

    def log_debug(self, ctx: Mapping[str, Any] | None, *messages: str) -> None:
        for message in messages:
            self._emit(info_data(ctx, message))

    def _emit(self, data: LogData) -> None:
        payload: dict[str, Any] = {"message": data.msg}
        for item in data.fields:
            if item.integer != 0:
                payload[item.key] = item.integer
            if item.string != "":
                payload[item.key] = item.string
            if item.float != 0.0:
                payload[item.key] = item.float

        record = {
            "level": _LEVEL_NAMES[data.level],
            _TIME_TAG: _timestamp(),
            _MESSAGE_TAG: _request_id(data.ctx),
            _HOST_TAG: self._app_id,
            "payload": payload,
        }
        line = json.dumps(record, ensure_ascii=False, default=str)
        stream = self._stream if self._stream is not None else sys.stdout
        with self._lock:
            stream.write(line + "\n")
            stream.flush()

        if data.level is Level.FATAL:
            raise SystemExit(1)