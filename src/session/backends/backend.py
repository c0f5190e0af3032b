from abc import ABC, abstractmethod
from typing import Optional

from ..identifier import SessionIdentifier, random_identifier


class SessionBackend(ABC):
    """
    Storage for encoded session payloads.

    A backend handle is owned by exactly one in-flight request. Backends never
    retry; storage failures are raised as `BackendError`.
    """

    def random_identifier(self) -> SessionIdentifier:
        """Mint an identifier for a new session."""
        return random_identifier()

    @abstractmethod
    async def read_session(self, identifier: SessionIdentifier) -> Optional[bytes]:
        """Return the stored payload, or None if there is no record for the identifier."""
        pass

    @abstractmethod
    async def persist_session(self, identifier: SessionIdentifier, payload: bytes) -> None:
        """Store the payload, overwriting any existing record."""
        pass


class NewBackend(ABC):
    """Factory producing backend handles. One factory is kept per worker."""

    @abstractmethod
    def new_backend(self) -> SessionBackend:
        """Return a backend handle, raising `ConfigError` if one can't be built."""
        pass
