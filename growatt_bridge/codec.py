"""Validation and wire encoding of device commands.

The codec never performs I/O and never touches the portal session. Given the
same schema entry and the same caller values it always produces the same
``EncodedRequest``, so a request can be re-sent verbatim while the bridge is
still confirming it.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Tuple, Union

from .constants import SERIAL_ADDRESS_SEPARATOR
from .core.models import Command, DeviceType, Direction, EncodedRequest
from .errors import MissingParameterError, ValidationError
from .schema.param_types import ParamValueError
from .schema.registry import DeviceTypeSchema, FunctionDescriptor, SchemaRegistry

LOGGER = logging.getLogger(__name__)

SERIAL_FIELD = "serialNum"


def split_serial(serial_number: str) -> Tuple[str, Optional[str]]:
    """Split ``SN@addr`` into the serial number and the optional sub-address."""

    text = str(serial_number).strip()
    if SERIAL_ADDRESS_SEPARATOR in text:
        serial, address = text.split(SERIAL_ADDRESS_SEPARATOR, 1)
        return serial.strip(), address.strip() or None
    return text, None


def encode_params(
    descriptor: FunctionDescriptor,
    values: Mapping[str, Any],
    *,
    device_type: Union[DeviceType, str],
) -> Tuple[Tuple[str, str], ...]:
    """Validate caller values and return ``param1..N`` wire fields in order."""

    tag = device_type.value if isinstance(device_type, DeviceType) else str(device_type)
    fields = []
    for index, (name, spec) in enumerate(descriptor.params.items(), start=1):
        if name not in values or values[name] is None:
            raise MissingParameterError(name, function=descriptor.name, device_type=tag)
        try:
            encoded = spec.type.encode(values[name])
        except ParamValueError as exc:
            raise ValidationError(
                name,
                type_name=spec.type.name,
                function=descriptor.name,
                device_type=tag,
                value=values[name],
                reason=str(exc),
            ) from exc
        fields.append((f"param{index}", encoded))
    return tuple(fields)


def encode_command(
    schema: DeviceTypeSchema, descriptor: FunctionDescriptor, command: Command
) -> EncodedRequest:
    action = schema.action_for(command.direction)
    if not command.serial_number:
        raise ValidationError(
            SERIAL_FIELD,
            type_name="string",
            function=descriptor.name,
            device_type=schema.device_type.value,
            value=command.serial_number,
            reason="serial number is empty",
        )

    if command.direction is Direction.READ:
        fields = [
            ("action", action),
            ("paramId", descriptor.param_id or ""),
            (SERIAL_FIELD, command.serial_number),
            ("startAddr", "-1"),
            ("endAddr", "-1"),
        ]
    else:
        fields = [
            ("action", action),
            (SERIAL_FIELD, command.serial_number),
            ("type", descriptor.param_id or ""),
        ]
        fields.extend(
            encode_params(descriptor, command.values, device_type=schema.device_type)
        )

    if command.sub_address:
        if schema.address_field is None:
            raise ValidationError(
                SERIAL_FIELD,
                type_name="serial",
                function=descriptor.name,
                device_type=schema.device_type.value,
                value=command.sub_address,
                reason="device type does not take a sub-address",
            )
        fields.append((schema.address_field, command.sub_address))

    return EncodedRequest(
        action=action,
        param_id=descriptor.param_id,
        fields=tuple(fields),
    )


def prepare_command(
    registry: SchemaRegistry,
    device_type: Union[DeviceType, str],
    function: str,
    serial_number: str,
    direction: Direction,
    values: Optional[Mapping[str, Any]] = None,
) -> Tuple[Command, FunctionDescriptor, EncodedRequest]:
    """Look up, validate and encode a command without touching the network."""

    schema, descriptor = registry.lookup(device_type, function, direction)
    serial, address = split_serial(serial_number)
    command = Command(
        device_type=schema.device_type,
        function=descriptor.name,
        serial_number=serial,
        direction=direction,
        values=values or {},
        sub_address=address,
    )
    request = encode_command(schema, descriptor, command)
    LOGGER.debug("Encoded %s as %s", command.label, request.action)
    return command, descriptor, request
