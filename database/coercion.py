"""
Cell value coercion.

Turns whatever the driver hands back for a cell into the string shown in
the results grid. Coercion never fails: values that cannot be rendered as
text become the NULL sentinel, the same string used for SQL NULL.
"""

import logging
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any, Iterable, List

logger = logging.getLogger(__name__)

NULL_SENTINEL = "NULL"


def _format_timedelta(value: timedelta) -> str:
    """Render a timedelta the way MySQL renders TIME values ([-]HH:MM:SS[.ffffff])."""
    sign = "-" if value < timedelta(0) else ""
    value = abs(value)
    total_seconds = value.days * 86400 + value.seconds
    hours, remainder = divmod(total_seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    text = f"{sign}{hours:02d}:{minutes:02d}:{seconds:02d}"
    if value.microseconds:
        text += f".{value.microseconds:06d}"
    return text


def _format_float(value: float) -> str:
    """Render a float with a MySQL-style exponent (1e-7, 1e20)."""
    text = repr(value)
    if "e" in text:
        mantissa, exponent = text.split("e")
        text = f"{mantissa}e{int(exponent)}"
    return text


def coerce_value(value: Any) -> str:
    """
    Convert one native cell value into a display string.

    Args:
        value: Cell value as returned by the driver

    Returns:
        Text representation, or NULL_SENTINEL for NULL and for values
        that cannot be decoded
    """
    if value is None:
        return NULL_SENTINEL

    if isinstance(value, str):
        return value

    if isinstance(value, (bytes, bytearray, memoryview)):
        try:
            return bytes(value).decode("utf-8")
        except UnicodeDecodeError:
            logger.debug(f"Undecodable binary value ({len(value)} bytes) shown as {NULL_SENTINEL}")
            return NULL_SENTINEL

    # bool before int: MySQL renders booleans as 1/0
    if isinstance(value, bool):
        return "1" if value else "0"

    if isinstance(value, int):
        return str(value)

    if isinstance(value, float):
        return _format_float(value)

    # Fixed-point, never scientific: Decimal("0E-10") is shown as 0.0000000000
    if isinstance(value, Decimal):
        return format(value, "f")

    if isinstance(value, datetime):
        return value.isoformat(sep=" ")

    if isinstance(value, (date, time)):
        return value.isoformat()

    if isinstance(value, timedelta):
        return _format_timedelta(value)

    try:
        return str(value)
    except Exception as e:
        logger.debug(f"Could not convert {type(value).__name__} value: {e}")
        return NULL_SENTINEL


def coerce_row(row: Iterable[Any]) -> List[str]:
    """Coerce every cell of a row, preserving column order."""
    return [coerce_value(value) for value in row]
