"""Protocol definitions for the transport collaborator."""

from __future__ import annotations

from typing import Any, Iterable, Protocol

from .session import Session


class BridgeTransport(Protocol):
    """Minimal contract the command core needs from the portal transport."""

    session: Session

    def is_connected(self) -> bool:
        """Return whether the portal session is currently usable."""
        ...

    async def send(self, path: str, fields: Iterable[tuple[str, str]]) -> dict[str, Any]:
        """Post urlencoded form fields and return the decoded JSON object.

        Raises:
            TransportError: On any network, HTTP or protocol-level failure.
        """
        ...
