"""Tests for cell value coercion."""

from datetime import date, datetime, time, timedelta
from decimal import Decimal

import pytest

from database import NULL_SENTINEL, coerce_row, coerce_value


class Unprintable:
    def __str__(self):
        raise RuntimeError("no text form")


def test_null_and_undecodable_bytes_collide() -> None:
    assert coerce_value(None) == NULL_SENTINEL
    assert coerce_value(b"\xff\xfe\x00") == NULL_SENTINEL
    assert NULL_SENTINEL == "NULL"


@pytest.mark.parametrize(
    "value, expected",
    [
        ("plain", "plain"),
        ("", ""),
        (b"caf\xc3\xa9", "café"),
        (bytearray(b"abc"), "abc"),
        (memoryview(b"xyz"), "xyz"),
        (42, "42"),
        (-7, "-7"),
        (1.5, "1.5"),
        (Decimal("10.50"), "10.50"),
        (True, "1"),
        (False, "0"),
    ],
)
def test_scalar_values(value, expected) -> None:
    assert coerce_value(value) == expected


def test_temporal_values() -> None:
    assert coerce_value(datetime(2024, 1, 2, 3, 4, 5)) == "2024-01-02 03:04:05"
    assert coerce_value(datetime(2024, 1, 2, 3, 4, 5, 120000)) == "2024-01-02 03:04:05.120000"
    assert coerce_value(time(13, 30, 0, 5)) == "13:30:00.000005"
    assert coerce_value(date(2024, 1, 2)) == "2024-01-02"
    assert coerce_value(time(13, 30)) == "13:30:00"


def test_timedelta_renders_like_mysql_time() -> None:
    assert coerce_value(timedelta(hours=1, minutes=2, seconds=3)) == "01:02:03"
    assert coerce_value(timedelta(hours=26, minutes=5)) == "26:05:00"
    assert coerce_value(timedelta(hours=-1)) == "-01:00:00"
    assert coerce_value(timedelta(hours=-838, minutes=-59, seconds=-59)) == "-838:59:59"
    assert coerce_value(timedelta(seconds=1, microseconds=500)) == "00:00:01.000500"


def test_decimal_is_fixed_point() -> None:
    assert coerce_value(Decimal("0E-10")) == "0.0000000000"
    assert coerce_value(Decimal("1.000E-7")) == "0.0000001000"
    assert coerce_value(Decimal("12345678901234567890.5")) == "12345678901234567890.5"


def test_float_exponent_like_mysql() -> None:
    assert coerce_value(1e-07) == "1e-7"
    assert coerce_value(1e20) == "1e20"
    assert coerce_value(2.5e-300) == "2.5e-300"
    assert coerce_value(0.1) == "0.1"


def test_unconvertible_object_becomes_sentinel() -> None:
    assert coerce_value(Unprintable()) == NULL_SENTINEL


def test_coerce_row_keeps_order() -> None:
    assert coerce_row((1, None, "x", b"\x80")) == ["1", "NULL", "x", "NULL"]
