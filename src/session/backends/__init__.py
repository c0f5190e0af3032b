from .backend import SessionBackend, NewBackend
from .memory_backend import MemoryBackend, MemorySessionBackend
from .redis_backend import RedisBackend, RedisBackendFactory

__all__ = [
    "SessionBackend",
    "NewBackend",
    "MemoryBackend",
    "MemorySessionBackend",
    "RedisBackend",
    "RedisBackendFactory",
]
