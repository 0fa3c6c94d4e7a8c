"""Domain models for device commands."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping, Optional, Tuple


class DeviceType(str, Enum):
    """Closed set of device categories that accept commands through the bridge."""

    INVERTER = "inverter"
    STORAGE = "storage"
    MAX = "max"
    TLX = "tlx"
    MIX = "mix"
    SPA = "spa"


class Direction(str, Enum):
    """Whether a command reads a setting or writes one."""

    READ = "read"
    WRITE = "write"


class CommandState(str, Enum):
    """Lifecycle of a single command against the bridge."""

    VALIDATING = "validating"
    QUEUED = "queued"
    EXECUTING = "executing"
    RETRYING = "retrying"
    RESOLVED = "resolved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (CommandState.RESOLVED, CommandState.REJECTED)


@dataclass(frozen=True, slots=True)
class Command:
    device_type: DeviceType
    function: str
    serial_number: str
    direction: Direction
    values: Mapping[str, Any] = field(default_factory=dict)
    sub_address: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "values", MappingProxyType(dict(self.values)))

    @property
    def label(self) -> str:
        target = self.serial_number
        if self.sub_address:
            target = f"{target}@{self.sub_address}"
        return f"{self.direction.value} {self.device_type.value}.{self.function} ({target})"


@dataclass(frozen=True, slots=True)
class EncodedRequest:
    """Wire-ready form of a command; identical for every retry of that command."""

    action: str
    param_id: Optional[str]
    fields: Tuple[Tuple[str, str], ...]

    def as_form(self) -> list[tuple[str, str]]:
        return list(self.fields)
