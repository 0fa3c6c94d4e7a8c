"""Public command surface: read and write device settings through the bridge."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional, Union

from .codec import prepare_command
from .config import CommandConfig
from .core.models import DeviceType, Direction
from .core.protocols import BridgeTransport
from .executor import CommandExecutor
from .schema.device_types import DEFAULT_REGISTRY
from .schema.registry import SchemaRegistry

LOGGER = logging.getLogger(__name__)


class GrowattCommandClient:
    """Validates device commands and serializes them onto the bridge.

    Schema and parameter errors are raised before a command is queued, so they
    never hold the bridge slot. Every admitted command terminates exactly once;
    cancelling the awaiting caller does not abort it.

    Usage:
        async with PortalClient(config.portal) as portal:
            await portal.login(account, password)
            client = GrowattCommandClient(portal)
            rate = await client.read_setting("tlx", "pv_active_p_rate", "AB12345678")
            await client.write_setting(
                "tlx", "time_segment1", "AB12345678",
                {"mode": "battery first", "startHour": 1, "startMinute": 0,
                 "endHour": 5, "endMinute": 0, "enabled": 1},
            )
    """

    def __init__(
        self,
        transport: BridgeTransport,
        *,
        registry: Optional[SchemaRegistry] = None,
        config: Optional[CommandConfig] = None,
    ) -> None:
        command_config = config or CommandConfig()
        self._transport = transport
        self._registry = registry or DEFAULT_REGISTRY
        self._executor = CommandExecutor(
            transport,
            max_retries=command_config.max_retries,
            retry_delay_seconds=command_config.retry_delay_seconds,
        )

    @property
    def registry(self) -> SchemaRegistry:
        return self._registry

    @property
    def pending_count(self) -> int:
        return self._executor.queue.pending_count

    def is_connected(self) -> bool:
        return self._transport.is_connected()

    def describe_communication(
        self, device_type: Union[DeviceType, str]
    ) -> Mapping[str, Any]:
        """Describe the functions of a device type for building forms and UIs."""
        return self._registry.describe(device_type)

    async def read_setting(
        self,
        device_type: Union[DeviceType, str],
        function: str,
        serial_number: str,
    ) -> Any:
        _, descriptor = self._registry.lookup(device_type, function, Direction.READ)
        if descriptor.sub_reads:
            return await self.read_settings(device_type, function, serial_number)
        return await self._submit(device_type, function, serial_number, Direction.READ)

    async def read_settings(
        self,
        device_type: Union[DeviceType, str],
        function: str,
        serial_number: str,
    ) -> Dict[str, Any]:
        """Read a composite setting by reading each of its parts in order."""

        _, descriptor = self._registry.lookup(device_type, function, Direction.READ)
        names = descriptor.sub_reads or (descriptor.name,)
        futures = [
            self._admit(device_type, name, serial_number, Direction.READ)
            for name in names
        ]
        results = await asyncio.gather(
            *(asyncio.shield(future) for future in futures), return_exceptions=True
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return dict(zip(names, results))

    async def write_setting(
        self,
        device_type: Union[DeviceType, str],
        function: str,
        serial_number: str,
        values: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        return await self._submit(
            device_type, function, serial_number, Direction.WRITE, values
        )

    async def drain(self) -> None:
        """Wait for every admitted command to terminate."""
        await self._executor.drain()

    async def _submit(
        self,
        device_type: Union[DeviceType, str],
        function: str,
        serial_number: str,
        direction: Direction,
        values: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        future = self._admit(device_type, function, serial_number, direction, values)
        return await asyncio.shield(future)

    def _admit(
        self,
        device_type: Union[DeviceType, str],
        function: str,
        serial_number: str,
        direction: Direction,
        values: Optional[Mapping[str, Any]] = None,
    ) -> asyncio.Future:
        command, descriptor, request = prepare_command(
            self._registry, device_type, function, serial_number, direction, values
        )
        future = self._executor.submit(command, request, descriptor)
        future.add_done_callback(_retrieve_outcome)
        return future


def _retrieve_outcome(future: asyncio.Future) -> None:
    # Marks the outcome as observed when the caller stopped waiting for it.
    if not future.cancelled():
        future.exception()
