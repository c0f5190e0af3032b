"""Error types raised by the session layer."""

from fastapi_sessions.backends.session_backend import BackendError as _LibraryBackendError


class SessionError(Exception):
    """Base class for every session failure."""


class BackendError(SessionError, _LibraryBackendError):
    """The storage provider failed to read or persist a session."""


class DeserializeError(SessionError):
    """A stored payload could not be decoded into the session value type."""


class SerializeError(SessionError):
    """A session value could not be encoded for storage."""


class ConfigError(SessionError):
    """A backend factory could not produce a backend."""


__all__ = [
    "SessionError",
    "BackendError",
    "DeserializeError",
    "SerializeError",
    "ConfigError",
]
