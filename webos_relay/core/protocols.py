"""Protocol definitions for the collaborators of the connection supervisor."""

from __future__ import annotations

from typing import Optional, Protocol

from .models import WebOSCommand, WebOSResponse


class TelevisionSession(Protocol):
    """An established, paired connection to the television."""

    @property
    def client_key(self) -> Optional[str]:
        """Pairing credential negotiated during registration, if any."""
        ...

    async def request(self, command: WebOSCommand) -> WebOSResponse:
        """Send a command and wait for the matching response."""
        ...

    async def close(self) -> None:
        """Release the underlying connection."""
        ...


class SessionConnector(Protocol):
    async def connect(
        self, address: str, client_key: Optional[str]
    ) -> TelevisionSession:
        """Open and register a session with the television at ``address``.

        Raises:
            Exception: Any failure; the caller stays disconnected and retries.
        """
        ...


class AddressResolver(Protocol):
    async def resolve(self) -> Optional[str]:
        """Return the television's current IP address, or None if unknown."""
        ...


class AudioGate(Protocol):
    async def is_active(self) -> bool:
        """Whether the television is the host's active audio output."""
        ...


class CredentialStore(Protocol):
    def load(self) -> Optional[str]:
        ...

    def save(self, key: str) -> None:
        ...
