"""Semantic parameter types used by command schemas.

Each type knows how to turn a caller-supplied value into the exact string the
portal expects on the wire. Conversion is pure: the same input always yields
the same output, which keeps retried requests byte-identical.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Mapping, Optional

DATETIME_FORMAT = "%Y-%m-%d %H:%M:%S"


class ParamValueError(ValueError):
    """Raised when a value does not fit a semantic type."""


class ParamType:
    """Base class for semantic parameter types."""

    name = "value"

    def encode(self, value: Any) -> str:
        raise NotImplementedError

    def describe(self) -> Dict[str, Any]:
        return {"type": self.name}


@dataclass(frozen=True, slots=True)
class BoundedInt(ParamType):
    minimum: int
    maximum: int

    @property
    def name(self) -> str:  # type: ignore[override]
        return f"int({self.minimum}-{self.maximum})"

    def encode(self, value: Any) -> str:
        if isinstance(value, bool):
            raise ParamValueError("booleans are not integers")
        if isinstance(value, str):
            text = value.strip()
            try:
                number = int(text, 10)
            except ValueError as exc:
                raise ParamValueError(f"{value!r} is not an integer") from exc
        elif isinstance(value, int):
            number = value
        elif isinstance(value, float) and value.is_integer():
            number = int(value)
        else:
            raise ParamValueError(f"{value!r} is not an integer")

        if number < self.minimum or number > self.maximum:
            raise ParamValueError(
                f"{number} is outside {self.minimum}..{self.maximum}"
            )
        return str(number)

    def describe(self) -> Dict[str, Any]:
        return {"type": "int", "min": self.minimum, "max": self.maximum}


@dataclass(frozen=True, slots=True)
class FixedPoint(ParamType):
    minimum: Decimal
    maximum: Decimal
    places: int = 1

    @property
    def name(self) -> str:  # type: ignore[override]
        return f"decimal({self.minimum}-{self.maximum}, {self.places} places)"

    def encode(self, value: Any) -> str:
        if isinstance(value, bool):
            raise ParamValueError("booleans are not numbers")
        try:
            number = Decimal(str(value).strip())
        except (InvalidOperation, ValueError) as exc:
            raise ParamValueError(f"{value!r} is not a number") from exc
        if not number.is_finite():
            raise ParamValueError(f"{value!r} is not a finite number")

        if number < self.minimum or number > self.maximum:
            raise ParamValueError(
                f"{value!r} is outside {self.minimum}..{self.maximum}"
            )

        quantum = Decimal(1).scaleb(-self.places)
        try:
            rounded = number.quantize(quantum, rounding=ROUND_HALF_UP)
        except InvalidOperation as exc:
            raise ParamValueError(f"{value!r} cannot be represented") from exc
        if rounded != number:
            raise ParamValueError(
                f"{value!r} has more than {self.places} decimal places"
            )
        return format(rounded, "f")

    def describe(self) -> Dict[str, Any]:
        return {
            "type": "decimal",
            "min": str(self.minimum),
            "max": str(self.maximum),
            "places": self.places,
        }


class EnumCode(ParamType):
    """Enumerated wire code, accepted either as the code or as its label."""

    name = "enum"

    def __init__(self, codes: Mapping[str, str]) -> None:
        if not codes:
            raise ValueError("EnumCode requires at least one code")
        self.codes: Dict[str, str] = dict(codes)
        self._by_label = {label.lower(): code for code, label in self.codes.items()}

    def encode(self, value: Any) -> str:
        if isinstance(value, bool):
            value = int(value)
        text = str(value).strip()
        if text in self.codes:
            return text
        code = self._by_label.get(text.lower())
        if code is None:
            allowed = ", ".join(f"{code}={label}" for code, label in self.codes.items())
            raise ParamValueError(f"{value!r} is not one of {allowed}")
        return code

    def describe(self) -> Dict[str, Any]:
        return {"type": "enum", "values": dict(self.codes)}

    def __eq__(self, other: object) -> bool:
        return isinstance(other, EnumCode) and other.codes == self.codes

    def __repr__(self) -> str:
        return f"EnumCode({self.codes!r})"


ON_OFF = EnumCode({"0": "off", "1": "on"})
DISABLED_ENABLED = EnumCode({"0": "disabled", "1": "enabled"})


@dataclass(frozen=True, slots=True)
class RawString(ParamType):
    max_length: Optional[int] = None

    @property
    def name(self) -> str:  # type: ignore[override]
        return "string"

    def encode(self, value: Any) -> str:
        if not isinstance(value, str):
            raise ParamValueError(f"{value!r} is not a string")
        if self.max_length is not None and len(value) > self.max_length:
            raise ParamValueError(f"longer than {self.max_length} characters")
        return value

    def describe(self) -> Dict[str, Any]:
        return {"type": "string", "maxLength": self.max_length}


@dataclass(frozen=True, slots=True)
class DateTimeValue(ParamType):
    @property
    def name(self) -> str:  # type: ignore[override]
        return "datetime"

    def encode(self, value: Any) -> str:
        if isinstance(value, datetime):
            return value.strftime(DATETIME_FORMAT)
        if isinstance(value, str):
            try:
                parsed = datetime.strptime(value.strip(), DATETIME_FORMAT)
            except ValueError as exc:
                raise ParamValueError(
                    f"{value!r} does not match YYYY-MM-DD HH:MM:SS"
                ) from exc
            return parsed.strftime(DATETIME_FORMAT)
        raise ParamValueError(f"{value!r} is not a date-time")

    def describe(self) -> Dict[str, Any]:
        return {"type": "datetime", "format": "YYYY-MM-DD HH:MM:SS"}
