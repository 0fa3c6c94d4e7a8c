"""Result parsers applied to terminal acknowledgments of read commands.

The portal returns the value of a read setting in the ``msg`` field of the
acknowledgment, always as a string. Each parser turns that raw payload into a
normalized Python value or raises ``ResultParseError``.
"""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Callable, Mapping, Union

from ..errors import ResultParseError

ResultParser = Callable[[Mapping[str, Any]], Any]

_DATETIME_FORMATS = ("%Y-%m-%d %H:%M:%S", "%Y-%m-%d %H:%M", "%Y-%m-%d")


def _message(payload: Mapping[str, Any]) -> str:
    value = payload.get("msg")
    if value is None:
        raise ResultParseError("Acknowledgment carries no value", payload=payload)
    return str(value).strip()


def parse_message(payload: Mapping[str, Any]) -> str:
    """Return the raw value string."""
    return _message(payload)


def parse_number(payload: Mapping[str, Any]) -> Union[int, float]:
    text = _message(payload)
    try:
        number = float(text)
    except ValueError as exc:
        raise ResultParseError(
            f"Expected a numeric value, got {text!r}", payload=payload
        ) from exc
    if not math.isfinite(number):
        raise ResultParseError(
            f"Expected a finite numeric value, got {text!r}", payload=payload
        )
    if number.is_integer() and "." not in text and "e" not in text.lower():
        return int(text)
    return number


def parse_on_off(payload: Mapping[str, Any]) -> bool:
    text = _message(payload).lower()
    if text in ("1", "on", "true", "enabled"):
        return True
    if text in ("0", "off", "false", "disabled"):
        return False
    raise ResultParseError(f"Expected an on/off value, got {text!r}", payload=payload)


def parse_datetime(payload: Mapping[str, Any]) -> datetime:
    text = _message(payload)
    for fmt in _DATETIME_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    raise ResultParseError(f"Expected a date-time value, got {text!r}", payload=payload)
