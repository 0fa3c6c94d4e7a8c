"""Command client for inverters and storage units behind the Growatt portal."""

from .adapters import PortalClient
from .client import GrowattCommandClient
from .core import DeviceType, Direction, Session
from .datalogger import DataLoggerCommands
from .errors import (
    AcknowledgmentLimitError,
    GrowattBridgeError,
    MissingParameterError,
    NotConnectedError,
    ResultParseError,
    SchemaNotFoundError,
    ServerRejection,
    TransportError,
    ValidationError,
)

__version__ = "0.1.0"

__all__ = [
    "AcknowledgmentLimitError",
    "DataLoggerCommands",
    "DeviceType",
    "Direction",
    "GrowattBridgeError",
    "GrowattCommandClient",
    "MissingParameterError",
    "NotConnectedError",
    "PortalClient",
    "ResultParseError",
    "SchemaNotFoundError",
    "ServerRejection",
    "Session",
    "TransportError",
    "ValidationError",
]
