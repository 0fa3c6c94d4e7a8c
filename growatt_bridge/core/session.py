"""Portal session state owned by a single client instance."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class Session:
    connected: bool = False
    token: str = ""

    def establish(self, token: str) -> None:
        self.token = token
        self.connected = True

    def mark_disconnected(self) -> None:
        self.connected = False

    def reset(self) -> None:
        self.token = ""
        self.connected = False
