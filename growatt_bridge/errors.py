"""Exception hierarchy for device command handling."""

from __future__ import annotations

from typing import Any, Mapping, Optional


class GrowattBridgeError(RuntimeError):
    """Base class for every error raised by growatt-bridge."""


class SchemaNotFoundError(GrowattBridgeError):
    """Raised when a device type or function is not in the schema registry."""

    def __init__(
        self,
        message: str,
        *,
        device_type: Optional[str] = None,
        function: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.device_type = device_type
        self.function = function


class MissingParameterError(GrowattBridgeError):
    """Raised when a declared parameter was not supplied by the caller."""

    def __init__(self, field: str, *, function: str, device_type: str) -> None:
        super().__init__(
            f"The value {field} is missing for send function {function} "
            f"on device type {device_type}"
        )
        self.field = field
        self.function = function
        self.device_type = device_type


class ValidationError(GrowattBridgeError):
    """Raised when a supplied value does not satisfy its semantic type."""

    def __init__(
        self,
        field: str,
        *,
        type_name: str,
        function: str,
        device_type: str,
        value: Any = None,
        reason: Optional[str] = None,
    ) -> None:
        message = (
            f"The value {field} is incorrect for {type_name} for function "
            f"{function} on device type {device_type}"
        )
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.field = field
        self.type_name = type_name
        self.function = function
        self.device_type = device_type
        self.value = value


class NotConnectedError(GrowattBridgeError):
    """Raised when a command is granted the bridge while the session is down."""


class TransportError(GrowattBridgeError):
    """Raised by the transport on network, HTTP or protocol-level failure."""


class ServerRejection(GrowattBridgeError):
    """Raised when the portal explicitly refuses a command."""

    def __init__(self, message: str, *, payload: Any = None) -> None:
        super().__init__(message)
        self.payload = payload


class ResultParseError(ServerRejection):
    """Raised by a result parser that cannot interpret a terminal payload."""


class AcknowledgmentLimitError(GrowattBridgeError):
    """Raised when a configured retry cap is exhausted before completion."""

    def __init__(self, attempts: int, *, payload: Optional[Mapping[str, Any]] = None) -> None:
        super().__init__(
            f"The bridge did not confirm completion after {attempts} attempts"
        )
        self.attempts = attempts
        self.payload = payload


class IncompleteAcknowledgment(GrowattBridgeError):
    """Internal signal: the bridge accepted the command but has not finished."""

    def __init__(self, payload: Mapping[str, Any]) -> None:
        super().__init__("The bridge accepted the command but has not confirmed it yet")
        self.payload = payload
