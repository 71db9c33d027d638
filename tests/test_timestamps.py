from datetime import datetime, timedelta, timezone

import pytest

from platformkit.timestamps import (
    LAYOUT_DATE_DMY_BY_POINT,
    LAYOUT_RFC3339_MICRO,
    Time,
)

SECOND = timedelta(seconds=1)
NANOS_IN_SECOND = 1_000_000_000


def test_now():
    now = Time.now()
    first = now.unix_nano()
    second = now.unix_nano()
    assert now.tz == timezone.utc
    assert first == second
    assert first > 0


def test_empty():
    empty = Time.empty()
    assert empty.unix_nano() == 0
    assert empty.is_zero()


def test_from_datetime():
    expected = datetime.now(timezone.utc)
    actual = Time.from_datetime(expected)
    assert actual.tz == timezone.utc
    assert actual.to_datetime() == expected
    assert not actual.is_zero()


def test_from_datetime_naive_is_local():
    naive = datetime(2019, 3, 22, 17, 1, 31)
    assert Time.from_datetime(naive) == Time.from_datetime(naive.astimezone())


def test_from_unix_nano_valid():
    expected = Time.now()
    actual = Time.from_unix_nano(expected.unix_nano())
    assert actual.tz == timezone.utc
    assert actual == expected


def test_from_unix_nano_zero_is_empty():
    assert Time.from_unix_nano(0) == Time.empty()


def test_from_unix_millis_zero_is_empty():
    assert Time.from_unix_millis(0) == Time.empty()


def test_parse_round_trip():
    now = Time.now()
    expected = Time.from_unix_nano(now.unix_nano() // 1000 * 1000)
    text = expected.to_datetime().strftime(LAYOUT_RFC3339_MICRO)
    assert Time.parse(LAYOUT_RFC3339_MICRO, text) == expected


def test_parse_date_layout():
    parsed = Time.parse(LAYOUT_DATE_DMY_BY_POINT, "22.03.2019")
    assert parsed.to_datetime() == datetime(2019, 3, 22, tzinfo=timezone.utc)


def test_parse_invalid_raises():
    with pytest.raises(ValueError):
        Time.parse(LAYOUT_DATE_DMY_BY_POINT, "2019-03-22")


def test_local():
    now = Time.now()
    local = now.local()
    assert now.tz == timezone.utc
    assert local.tz.utcoffset(None) == datetime.now().astimezone().utcoffset()
    assert local.unix_nano() == now.unix_nano()


def test_local_of_empty_is_epoch():
    local = Time.empty().local()
    assert not local.is_zero()
    assert local.unix_nano() == 0


def test_add():
    now = Time.now()
    expected = now.unix_nano() + NANOS_IN_SECOND
    actual = now.add(SECOND)
    assert actual.unix_nano() == expected
    assert actual.unix_nano() != now.unix_nano()


def test_add_integer_nanoseconds():
    now = Time.now()
    assert now.add(NANOS_IN_SECOND) == now.add(SECOND)


def test_sub():
    now = Time.now()
    expected = now.unix_nano() - NANOS_IN_SECOND
    actual = now.sub(SECOND)
    assert actual.unix_nano() == expected
    assert actual.unix_nano() != now.unix_nano()


def test_equal_when_equal():
    now = Time.now()
    t1 = Time.from_unix_nano(now.unix_nano())
    t2 = Time.from_unix_nano(now.unix_nano())
    assert t1.equal(t2)


def test_equal_when_not_equal():
    now = Time.now()
    t1 = Time.from_unix_nano(now.unix_nano())
    t2 = Time.from_unix_nano(now.unix_nano() + NANOS_IN_SECOND)
    assert not t1.equal(t2)


def test_before_true():
    now = Time.now()
    assert now.sub(SECOND).before(now)


def test_before_false():
    now = Time.now()
    assert not now.add(SECOND).before(now)


def test_after_true():
    now = Time.now()
    assert now.add(SECOND).after(now)


def test_after_false():
    now = Time.now()
    assert not now.sub(SECOND).after(now)


def test_unix_zero():
    assert Time.empty().unix() == 0


def test_unix_not_zero():
    expected_nsec = Time.now().unix_nano()
    actual = Time.from_unix_nano(expected_nsec)
    assert actual.unix() == expected_nsec // NANOS_IN_SECOND


def test_unix_nano_zero():
    assert Time.empty().unix_nano() == 0


def test_unix_nano_not_zero():
    expected_nsec = Time.now().unix_nano()
    assert Time.from_unix_nano(expected_nsec).unix_nano() == expected_nsec


def test_unix_milli_zero():
    assert Time.empty().unix_milli() == 0


def test_unix_milli_not_zero():
    expected_msec = Time.now().unix_milli()
    assert Time.from_unix_millis(expected_msec).unix_milli() == expected_msec