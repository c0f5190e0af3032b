"""
Configuration for the session middleware.

Cookie settings and backend selection are read from environment variables:
- SESSION_COOKIE_NAME: name of the session cookie (default `_gotham_session`)
- SECURE_COOKIES: add the `secure` attribute to issued cookies (default true)
- SESSION_DECODE_FAILURE: `fail` or `reset` when a stored payload cannot be decoded
- REDIS_URL: use the Redis backend instead of the in-memory one
- SESSION_REDIS_PREFIX / SESSION_TTL_SECONDS: Redis key prefix and expiry
"""
import os
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .identifier import SessionIdentifier
from .errors import ConfigError
from .backends.backend import NewBackend
from .backends.memory_backend import MemoryBackend
from .backends.redis_backend import RedisBackendFactory, DEFAULT_KEY_PREFIX

logger = logging.getLogger('session.config')

DEFAULT_COOKIE_NAME = "_gotham_session"


class DecodeFailurePolicy(str, Enum):
    """What to do when stored bytes don't decode into the session type."""

    FAIL = "fail"
    RESET = "reset"


@dataclass(frozen=True)
class SessionCookieConfig:
    """Cookie settings shared, read-only, by every session of one middleware."""

    name: str = DEFAULT_COOKIE_NAME
    secure: bool = True

    @classmethod
    def insecure(cls, name: str = DEFAULT_COOKIE_NAME) -> "SessionCookieConfig":
        """Cookie config without the `secure` attribute, for plain HTTP development."""
        return cls(name=name, secure=False)

    @classmethod
    def from_env(cls) -> "SessionCookieConfig":
        return cls(
            name=os.getenv("SESSION_COOKIE_NAME", DEFAULT_COOKIE_NAME),
            secure=os.getenv("SECURE_COOKIES", "true").lower() == "true",
        )

    def set_cookie_header(self, identifier: SessionIdentifier) -> str:
        """Render the Set-Cookie value issued for a newly minted session."""
        if self.secure:
            return f"{self.name}={identifier.value}; secure; HttpOnly"
        return f"{self.name}={identifier.value}; HttpOnly"


def get_decode_failure_policy() -> DecodeFailurePolicy:
    raw = os.getenv("SESSION_DECODE_FAILURE", DecodeFailurePolicy.FAIL.value).lower()
    try:
        return DecodeFailurePolicy(raw)
    except ValueError:
        raise ConfigError(f"SESSION_DECODE_FAILURE must be 'fail' or 'reset', got '{raw}'")


def get_backend_factory(redis_url: Optional[str] = None) -> NewBackend:
    """
    Pick the session backend factory for this process.

    Redis is used when a URL is given or REDIS_URL is set, otherwise sessions
    are kept in memory and are lost when the worker exits.

    Raises:
        ConfigError: if the Redis settings are invalid
    """
    redis_url = redis_url or os.getenv("REDIS_URL")
    if not redis_url:
        logger.warning("REDIS_URL not set, falling back to MemoryBackend for sessions")
        return MemoryBackend()

    ttl = os.getenv("SESSION_TTL_SECONDS")
    try:
        ttl_seconds = int(ttl) if ttl else None
    except ValueError:
        raise ConfigError(f"SESSION_TTL_SECONDS must be an integer, got '{ttl}'")

    return RedisBackendFactory(
        redis_url,
        key_prefix=os.getenv("SESSION_REDIS_PREFIX", DEFAULT_KEY_PREFIX),
        ttl_seconds=ttl_seconds,
    )


__all__ = [
    "DEFAULT_COOKIE_NAME",
    "DecodeFailurePolicy",
    "SessionCookieConfig",
    "get_decode_failure_policy",
    "get_backend_factory",
]
