from __future__ import annotations

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class SessionState:
    host: Optional[str] = None
    token: Optional[str] = None
    connected: bool = False


class SessionStore:
    """Holds the one active vCAV session of a client."""

    def __init__(self):
        self._host: Optional[str] = None
        self._token: Optional[str] = None
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    def set(self, host: str, token: str) -> None:
        if not host:
            raise ValueError("host is required")
        if not token:
            raise ValueError("token is required")
        self._host = host
        self._token = token
        self._connected = True

    def get(self) -> SessionState:
        return SessionState(host=self._host, token=self._token, connected=self._connected)

    def clear(self) -> None:
        self._host = None
        self._token = None
        self._connected = False
