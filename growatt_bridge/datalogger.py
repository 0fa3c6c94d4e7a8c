"""Maintenance commands for the data logger that bridges devices to the portal.

These go straight to the portal's logger endpoint and are not serialized
through the device command queue.
"""

from __future__ import annotations

import json
import logging
from enum import IntEnum
from typing import Any, Union

from .constants import DATALOGGER_COMMAND_PATH
from .core.protocols import BridgeTransport
from .errors import NotConnectedError, ServerRejection, TransportError

LOGGER = logging.getLogger(__name__)


class LoggerRegister(IntEnum):
    INTERVAL = 4
    SERVER_IP = 17
    SERVER_PORT = 18


class LoggerFunction(IntEnum):
    REGISTER = 0
    SERVER_IP = 1
    SERVER_NAME = 2
    SERVER_PORT = 3


class DataLoggerCommands:
    def __init__(self, transport: BridgeTransport) -> None:
        self._transport = transport

    async def read_register(self, datalog_sn: str, register: Union[int, LoggerRegister]) -> dict[str, Any]:
        return await self._send(
            [
                ("action", "readDatalogParam"),
                ("dataLogSn", datalog_sn),
                ("paramType", "set_any_reg"),
                ("addr", str(int(register))),
            ]
        )

    async def write_register(
        self, datalog_sn: str, register: Union[int, LoggerRegister], value: Any
    ) -> dict[str, Any]:
        return await self._send(
            [
                ("action", "setDatalogParam"),
                ("dataLogSn", datalog_sn),
                ("paramType", str(int(LoggerFunction.REGISTER))),
                ("param_1", str(int(register))),
                ("param_2", str(value)),
            ]
        )

    async def set_param(
        self, datalog_sn: str, function: Union[int, LoggerFunction], value: Any
    ) -> dict[str, Any]:
        return await self._send(
            [
                ("action", "setDatalogParam"),
                ("dataLogSn", datalog_sn),
                ("paramType", str(int(function))),
                ("param_1", str(value)),
                ("param_2", ""),
            ]
        )

    async def set_interval(self, datalog_sn: str, minutes: int) -> dict[str, Any]:
        if isinstance(minutes, bool) or not 1 <= int(minutes) <= 60:
            raise ValueError("interval must be between 1 and 60 minutes")
        return await self.write_register(datalog_sn, LoggerRegister.INTERVAL, int(minutes))

    async def restart(self, datalog_sn: str) -> dict[str, Any]:
        return await self._send([("action", "restartDatalog"), ("dataLogSn", datalog_sn)])

    async def check_firmware(self, device_type_indicate: str, version: str) -> dict[str, Any]:
        return await self._send(
            [
                ("action", "checkFirmwareVersion"),
                ("deviceTypeIndicate", device_type_indicate),
                ("firmwareVersion", version),
            ]
        )

    async def _send(self, fields: list[tuple[str, str]]) -> dict[str, Any]:
        if not self._transport.is_connected():
            raise NotConnectedError("The server is not connected")

        action = fields[0][1]
        LOGGER.debug("Data logger command %s", action)
        try:
            payload = await self._transport.send(DATALOGGER_COMMAND_PATH, fields)
        except TransportError:
            self._transport.session.mark_disconnected()
            raise

        if "success" not in payload:
            raise ServerRejection(json.dumps(payload, default=str), payload=payload)
        return payload
