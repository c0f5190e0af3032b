"""Server-side, cookie-keyed HTTP sessions for Starlette and FastAPI applications."""

from .identifier import SessionIdentifier, random_identifier
from .errors import SessionError, BackendError, DeserializeError, SerializeError, ConfigError
from .config import SessionCookieConfig, DecodeFailurePolicy, get_backend_factory
from .backends import SessionBackend, NewBackend, MemoryBackend, RedisBackend, RedisBackendFactory
from .codec import SessionCodec, PydanticMsgpackCodec
from .data import SessionData, CookieState, DataState
from .state import put_session, take_session, borrow_session
from .dependencies import session_dependency
from .middleware import SessionMiddleware

__all__ = [
    "SessionIdentifier",
    "random_identifier",
    "SessionError",
    "BackendError",
    "DeserializeError",
    "SerializeError",
    "ConfigError",
    "SessionCookieConfig",
    "DecodeFailurePolicy",
    "get_backend_factory",
    "SessionBackend",
    "NewBackend",
    "MemoryBackend",
    "RedisBackend",
    "RedisBackendFactory",
    "SessionCodec",
    "PydanticMsgpackCodec",
    "SessionData",
    "CookieState",
    "DataState",
    "put_session",
    "take_session",
    "borrow_session",
    "session_dependency",
    "SessionMiddleware",
]
