"""Core primitives for growatt-bridge."""

from .command_queue import CommandQueue, QueueEntry
from .models import Command, CommandState, DeviceType, Direction, EncodedRequest
from .protocols import BridgeTransport
from .session import Session

__all__ = [
    "BridgeTransport",
    "Command",
    "CommandQueue",
    "CommandState",
    "DeviceType",
    "Direction",
    "EncodedRequest",
    "QueueEntry",
    "Session",
]
