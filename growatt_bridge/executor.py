"""Request/acknowledgment protocol for device commands.

Each command granted the bridge slot is driven through an explicit loop:

    queued -> executing -> (retrying -> executing)* -> resolved | rejected

An acknowledgment with an empty ``msg`` means the portal accepted the command
but the device has not confirmed it yet; the identical request is re-sent
until a terminal answer arrives. By default there is no cap on those
round-trips, so termination relies on the bridge eventually answering or on
the transport's own per-call timeout surfacing as ``TransportError``. A cap and
a delay between round-trips can be configured through ``CommandConfig``.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Mapping, Optional, Set

from .constants import DEVICE_COMMAND_PATH
from .core.command_queue import CommandQueue, QueueEntry
from .core.models import Command, CommandState, EncodedRequest
from .core.protocols import BridgeTransport
from .errors import (
    AcknowledgmentLimitError,
    GrowattBridgeError,
    IncompleteAcknowledgment,
    NotConnectedError,
    ServerRejection,
    TransportError,
)
from .schema.registry import FunctionDescriptor

LOGGER = logging.getLogger(__name__)


def completion_flag(payload: Mapping[str, Any]) -> Optional[bool]:
    """Return the normalized completion indicator, or None when absent."""

    if "success" in payload:
        return bool(payload["success"])
    if "result" in payload:
        return payload["result"] == 1
    return None


def interpret_acknowledgment(payload: Any) -> Mapping[str, Any]:
    """Classify a portal answer.

    Returns the payload when it is a terminal success. Raises
    ``IncompleteAcknowledgment`` while the device has not confirmed, and
    ``ServerRejection`` when the portal refused the command.
    """

    if not isinstance(payload, Mapping):
        raise ServerRejection(
            "The server sent an unexpected response", payload=payload
        )

    flag = completion_flag(payload)
    if flag is None:
        raise ServerRejection(_dump(payload), payload=payload)
    if payload.get("msg") == "":
        raise IncompleteAcknowledgment(payload)
    if not flag:
        raise ServerRejection(
            str(payload.get("msg") or _dump(payload)), payload=payload
        )
    return payload


def _dump(payload: Any) -> str:
    try:
        return json.dumps(payload, default=str)
    except (TypeError, ValueError):
        return repr(payload)


class CommandExecutor:
    """Drives queued commands against the bridge, one at a time."""

    def __init__(
        self,
        transport: BridgeTransport,
        *,
        max_retries: Optional[int] = None,
        retry_delay_seconds: float = 0.0,
        path: str = DEVICE_COMMAND_PATH,
    ) -> None:
        if max_retries is not None and max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        self._transport = transport
        self._max_retries = max_retries
        self._retry_delay = max(0.0, retry_delay_seconds)
        self._path = path
        self._queue = CommandQueue(self._on_grant)
        self._tasks: Set[asyncio.Task[None]] = set()

    @property
    def queue(self) -> CommandQueue:
        return self._queue

    def submit(
        self,
        command: Command,
        request: EncodedRequest,
        descriptor: Optional[FunctionDescriptor] = None,
    ) -> asyncio.Future:
        """Admit an already validated command and return its completion future."""

        return self._queue.enqueue(command, request, descriptor=descriptor)

    async def drain(self) -> None:
        """Wait until every admitted command has terminated."""

        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def _on_grant(self, entry: QueueEntry) -> None:
        task = asyncio.create_task(self._run(entry))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, entry: QueueEntry) -> None:
        try:
            value = await self._drive(entry)
        except asyncio.CancelledError:
            entry.transition(CommandState.REJECTED)
            entry.completion.cancel()
            raise
        except GrowattBridgeError as exc:
            entry.transition(CommandState.REJECTED)
            LOGGER.info("Command #%d %s failed: %s", entry.order, entry.command.label, exc)
            _settle(entry.completion, error=exc)
        except Exception as exc:
            entry.transition(CommandState.REJECTED)
            LOGGER.exception(
                "Unexpected error while executing #%d %s", entry.order, entry.command.label
            )
            _settle(entry.completion, error=exc)
        else:
            entry.transition(CommandState.RESOLVED)
            LOGGER.debug(
                "Command #%d %s resolved after %d attempt(s)",
                entry.order,
                entry.command.label,
                entry.attempts,
            )
            _settle(entry.completion, value=value)
        finally:
            self._queue.complete()

    async def _drive(self, entry: QueueEntry) -> Any:
        if not self._transport.is_connected():
            raise NotConnectedError("The server is not connected")

        while True:
            entry.transition(CommandState.EXECUTING)
            entry.attempts += 1
            LOGGER.debug(
                "Sending #%d %s (attempt %d)",
                entry.order,
                entry.command.label,
                entry.attempts,
            )
            try:
                payload = await self._transport.send(self._path, entry.request.as_form())
            except TransportError:
                self._transport.session.mark_disconnected()
                raise

            try:
                terminal = interpret_acknowledgment(payload)
            except IncompleteAcknowledgment as pending:
                if self._max_retries is not None and entry.attempts > self._max_retries:
                    raise AcknowledgmentLimitError(
                        entry.attempts, payload=pending.payload
                    ) from pending
                entry.transition(CommandState.RETRYING)
                LOGGER.debug(
                    "Bridge has not confirmed #%d yet, re-sending", entry.order
                )
                if self._retry_delay:
                    await asyncio.sleep(self._retry_delay)
                continue

            return _finalize(entry, terminal)


def _finalize(entry: QueueEntry, payload: Mapping[str, Any]) -> Any:
    descriptor = entry.descriptor
    parser = None
    if descriptor is not None:
        parser = descriptor.parser_for(entry.command.direction)
    if parser is None:
        return dict(payload)
    return parser(payload)


def _settle(
    future: asyncio.Future, *, value: Any = None, error: Optional[BaseException] = None
) -> None:
    if future.done():
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(value)
