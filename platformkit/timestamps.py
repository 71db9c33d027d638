"""A nanosecond-precision instant that reads as zero when unset."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone, tzinfo
from typing import Union

LAYOUT_DATE_DMY_BY_POINT = "%d.%m.%Y"
LAYOUT_DATE_DMY_BY_SLASH = "%d/%m/%Y"
LAYOUT_DATE_YMD_BY_DASH = "%Y-%m-%d"
LAYOUT_DATETIME_DMY_MM_BY_POINT = "%d.%m.%Y %H:%M"
LAYOUT_DATETIME_DMY_SS_BY_POINT = "%d.%m.%Y %H:%M:%S"
LAYOUT_RFC3339 = "%Y-%m-%dT%H:%M:%S%z"
LAYOUT_RFC3339_MICRO = "%Y-%m-%dT%H:%M:%S.%f%z"

Duration = Union[timedelta, int]

_NANOS_PER_SECOND = 10**9
_NANOS_PER_MILLI = 10**6
_NANOS_PER_MICRO = 1000
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _timedelta_nanos(value: timedelta) -> int:
    return (
        (value.days * 86400 + value.seconds) * _NANOS_PER_SECOND
        + value.microseconds * _NANOS_PER_MICRO
    )


def _duration_nanos(duration: Duration) -> int:
    if isinstance(duration, timedelta):
        return _timedelta_nanos(duration)
    return int(duration)


def _local_tz() -> tzinfo:
    local = datetime.now().astimezone().tzinfo
    assert local is not None
    return local


# The zero instant is 0001-01-01T00:00:00 UTC.
_ZERO_NANOS = _timedelta_nanos(datetime(1, 1, 1, tzinfo=timezone.utc) - _EPOCH)


@dataclass(frozen=True)
class Time:
    """An instant in nanoseconds since the Unix epoch, shown in ``tz``."""

    nanoseconds: int = _ZERO_NANOS
    tz: tzinfo = timezone.utc

    @classmethod
    def now(cls) -> Time:
        return cls.from_datetime(datetime.now(timezone.utc)) if False else cls(
            _current_nanos(), timezone.utc
        )

    @classmethod
    def empty(cls) -> Time:
        return cls()

    @classmethod
    def from_datetime(cls, value: datetime) -> Time:
        """Build a UTC instant from a datetime; naive values are read as local time."""
        if value.tzinfo is None:
            value = value.astimezone()
        return cls(_timedelta_nanos(value - _EPOCH), timezone.utc)

    @classmethod
    def from_unix_nano(cls, nanoseconds: int) -> Time:
        if nanoseconds == 0:
            return cls.empty()
        return cls(nanoseconds, timezone.utc)

    @classmethod
    def from_unix_millis(cls, milliseconds: int) -> Time:
        if milliseconds == 0:
            return cls.empty()
        return cls(milliseconds * _NANOS_PER_MILLI, timezone.utc)

    @classmethod
    def parse(cls, layout: str, value: str) -> Time:
        """Parse ``value`` with a strptime ``layout``; values without a zone are UTC."""
        parsed = datetime.strptime(value, layout)
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return cls.from_datetime(parsed)

    def is_zero(self) -> bool:
        return self.nanoseconds == _ZERO_NANOS

    def to_datetime(self) -> datetime:
        """Return the instant as an aware datetime, truncated to microseconds."""
        utc = _EPOCH + timedelta(microseconds=self.nanoseconds // _NANOS_PER_MICRO)
        return utc.astimezone(self.tz)

    def local(self) -> Time:
        return Time(self.unix_nano(), _local_tz())

    def add(self, duration: Duration) -> Time:
        return Time(self.nanoseconds + _duration_nanos(duration), self.tz)

    def sub(self, duration: Duration) -> Time:
        return Time(self.nanoseconds - _duration_nanos(duration), self.tz)

    def equal(self, other: Time) -> bool:
        return self.nanoseconds == other.nanoseconds

    def before(self, other: Time) -> bool:
        return self.nanoseconds < other.nanoseconds

    def after(self, other: Time) -> bool:
        return self.nanoseconds > other.nanoseconds

    def unix(self) -> int:
        return 0 if self.is_zero() else self.nanoseconds // _NANOS_PER_SECOND

    def unix_milli(self) -> int:
        return 0 if self.is_zero() else self.nanoseconds // _NANOS_PER_MILLI

    def unix_nano(self) -> int:
        return 0 if self.is_zero() else self.nanoseconds


def _current_nanos() -> int:
    import time as _clock

    return _clock.time_ns()