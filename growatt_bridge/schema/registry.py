"""Read-only catalog of device types and their invocable functions."""

from __future__ import annotations

import copy
import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple, Union

from ..core.models import DeviceType, Direction
from ..errors import SchemaNotFoundError
from .param_types import ParamType
from .parsers import ResultParser

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ParamSpec:
    type: ParamType
    description: str = ""


@dataclass(frozen=True, slots=True)
class FunctionDescriptor:
    name: str
    label: str
    directions: FrozenSet[Direction]
    param_id: Optional[str] = None
    params: Mapping[str, ParamSpec] = field(default_factory=dict)
    result_parser: Optional[ResultParser] = None
    write_parser: Optional[ResultParser] = None
    sub_reads: Tuple[str, ...] = ()
    is_sub_read: bool = False

    def supports(self, direction: Direction) -> bool:
        return direction in self.directions

    def parser_for(self, direction: Direction) -> Optional[ResultParser]:
        """Parser applied to the terminal acknowledgment for ``direction``."""
        if direction is Direction.READ:
            return self.result_parser
        return self.write_parser


@dataclass(frozen=True, slots=True)
class DeviceTypeSchema:
    device_type: DeviceType
    read_action: str
    write_action: str
    functions: Mapping[str, FunctionDescriptor]
    address_field: Optional[str] = None

    def action_for(self, direction: Direction) -> str:
        return self.read_action if direction is Direction.READ else self.write_action


class SchemaRegistry:
    """Validated, immutable lookup table from device type to function schemas.

    The registry is built once and never mutated afterwards; lookups fail fast
    with ``SchemaNotFoundError`` before any command reaches the queue.
    """

    def __init__(self, schemas: Iterable[DeviceTypeSchema]) -> None:
        table: Dict[DeviceType, DeviceTypeSchema] = {}
        for schema in schemas:
            if schema.device_type in table:
                raise ValueError(f"Duplicate schema for {schema.device_type.value}")
            _validate_schema(schema)
            table[schema.device_type] = DeviceTypeSchema(
                device_type=schema.device_type,
                read_action=schema.read_action,
                write_action=schema.write_action,
                functions=MappingProxyType(dict(schema.functions)),
                address_field=schema.address_field,
            )
        self._schemas: Mapping[DeviceType, DeviceTypeSchema] = MappingProxyType(table)
        LOGGER.debug(
            "Schema registry built with %d device types", len(self._schemas)
        )

    @property
    def device_types(self) -> Tuple[DeviceType, ...]:
        return tuple(self._schemas)

    def device_schema(self, device_type: Union[DeviceType, str]) -> DeviceTypeSchema:
        resolved = resolve_device_type(device_type)
        schema = self._schemas.get(resolved)
        if schema is None:
            raise SchemaNotFoundError(
                f"No command schema for device type {resolved.value}",
                device_type=resolved.value,
            )
        return schema

    def lookup(
        self,
        device_type: Union[DeviceType, str],
        function: str,
        direction: Optional[Direction] = None,
    ) -> Tuple[DeviceTypeSchema, FunctionDescriptor]:
        schema = self.device_schema(device_type)
        descriptor = schema.functions.get(function)
        if descriptor is None:
            raise SchemaNotFoundError(
                f"The function {function} is unknown for device type "
                f"{schema.device_type.value}",
                device_type=schema.device_type.value,
                function=function,
            )
        if direction is not None and not descriptor.supports(direction):
            raise SchemaNotFoundError(
                f"The function {function} on device type "
                f"{schema.device_type.value} does not support {direction.value}",
                device_type=schema.device_type.value,
                function=function,
            )
        return schema, descriptor

    def describe(self, device_type: Union[DeviceType, str]) -> Mapping[str, Any]:
        """Return a read-only description of the functions of a device type."""

        schema = self.device_schema(device_type)
        result: Dict[str, Any] = {}
        for key, descriptor in schema.functions.items():
            entry: Dict[str, Any] = {
                "name": descriptor.label,
                "directions": sorted(d.value for d in descriptor.directions),
                "param": {
                    name: {**spec.type.describe(), "description": spec.description}
                    for name, spec in descriptor.params.items()
                },
            }
            if descriptor.is_sub_read:
                entry["isSubread"] = True
            if descriptor.sub_reads:
                entry["subRead"] = list(descriptor.sub_reads)
            result[key] = entry
        return MappingProxyType(copy.deepcopy(result))


def resolve_device_type(device_type: Union[DeviceType, str]) -> DeviceType:
    if isinstance(device_type, DeviceType):
        return device_type
    try:
        return DeviceType(str(device_type).strip().lower())
    except ValueError as exc:
        raise SchemaNotFoundError(
            f"Unknown device type {device_type!r}", device_type=str(device_type)
        ) from exc


def _validate_schema(schema: DeviceTypeSchema) -> None:
    tag = schema.device_type.value
    for key, descriptor in schema.functions.items():
        if key != descriptor.name:
            raise ValueError(f"{tag}: function key {key} does not match {descriptor.name}")
        if not descriptor.directions:
            raise ValueError(f"{tag}.{key}: no directions declared")
        if descriptor.param_id is None and not descriptor.sub_reads:
            raise ValueError(f"{tag}.{key}: parameter identifier is required")
        if descriptor.sub_reads and descriptor.directions != {Direction.READ}:
            raise ValueError(f"{tag}.{key}: composite reads cannot be written")
        if descriptor.supports(Direction.WRITE) and not descriptor.params:
            raise ValueError(f"{tag}.{key}: writable function declares no parameters")
        for sub in descriptor.sub_reads:
            target = schema.functions.get(sub)
            if target is None or not target.supports(Direction.READ):
                raise ValueError(f"{tag}.{key}: sub-read {sub} is not a readable function")
