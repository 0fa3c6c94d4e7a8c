"""Single-flight, FIFO admission of commands onto the shared bridge channel.

The portal bridge relays one device command at a time. ``CommandQueue`` is the
only mutual-exclusion mechanism guarding it: entries are granted the slot in
strict submission order, and the next entry is admitted only once the
executing one has reached a terminal state, however many round-trips that
took.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Any, Callable, Deque, Optional

from .models import Command, CommandState, EncodedRequest

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class QueueEntry:
    command: Command
    request: EncodedRequest
    completion: asyncio.Future
    order: int
    descriptor: Any = None
    state: CommandState = CommandState.QUEUED
    attempts: int = 0
    history: list[CommandState] = field(default_factory=list)

    def transition(self, state: CommandState) -> None:
        self.state = state
        self.history.append(state)


GrantCallback = Callable[[QueueEntry], None]


class CommandQueue:
    """Ordered waiting list with exactly one execution slot."""

    def __init__(self, on_grant: GrantCallback) -> None:
        self._on_grant = on_grant
        self._entries: Deque[QueueEntry] = deque()
        self._executing = False
        self._order = itertools.count(1)

    @property
    def active(self) -> Optional[QueueEntry]:
        """Entry currently holding the slot, if any."""
        if self._executing and self._entries:
            return self._entries[0]
        return None

    @property
    def pending_count(self) -> int:
        """Number of admitted entries, including the one executing."""
        return len(self._entries)

    def enqueue(
        self,
        command: Command,
        request: EncodedRequest,
        *,
        descriptor: Any = None,
    ) -> asyncio.Future:
        """Append a command to the tail and return its completion future."""

        loop = asyncio.get_running_loop()
        entry = QueueEntry(
            command=command,
            request=request,
            completion=loop.create_future(),
            order=next(self._order),
            descriptor=descriptor,
        )
        entry.transition(CommandState.QUEUED)
        self._entries.append(entry)
        LOGGER.debug(
            "Queued #%d %s (%d waiting)", entry.order, command.label, len(self._entries)
        )

        if not self._executing:
            self._grant_head()
        return entry.completion

    def complete(self) -> None:
        """Release the slot held by the head entry and admit the next one.

        Must only be called once the head entry has reached a terminal state.
        """

        if not self._executing or not self._entries:
            raise RuntimeError("No command holds the bridge slot")

        finished = self._entries.popleft()
        self._executing = False
        LOGGER.debug(
            "Released #%d %s as %s", finished.order, finished.command.label, finished.state.value
        )

        if self._entries:
            self._grant_head()

    def _grant_head(self) -> None:
        entry = self._entries[0]
        self._executing = True
        LOGGER.debug("Granted slot to #%d %s", entry.order, entry.command.label)
        self._on_grant(entry)
