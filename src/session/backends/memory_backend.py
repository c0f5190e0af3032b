import logging
import threading
from typing import Dict, Optional

from .backend import NewBackend, SessionBackend
from ..identifier import SessionIdentifier

logger = logging.getLogger(__name__)


class MemoryBackend(NewBackend):
    """
    Keeps session payloads in a dict shared by every handle it creates.

    Records are never expired. Intended for tests and single-process development.
    """

    def __init__(self):
        self._storage: Dict[SessionIdentifier, bytes] = {}
        self._lock = threading.Lock()

    def new_backend(self) -> "MemorySessionBackend":
        return MemorySessionBackend(self._storage, self._lock)

    def __len__(self) -> int:
        with self._lock:
            return len(self._storage)


class MemorySessionBackend(SessionBackend):
    def __init__(self, storage: Dict[SessionIdentifier, bytes], lock: threading.Lock):
        self._storage = storage
        self._lock = lock

    async def read_session(self, identifier: SessionIdentifier) -> Optional[bytes]:
        with self._lock:
            return self._storage.get(identifier)

    async def persist_session(self, identifier: SessionIdentifier, payload: bytes) -> None:
        with self._lock:
            self._storage[identifier] = bytes(payload)
        logger.debug(f"Session {identifier} stored in memory ({len(payload)} bytes)")
