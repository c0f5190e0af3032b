from typing import Optional
import logging

import redis.asyncio as aioredis
from redis import RedisError, ConnectionError as RedisConnectionError

from .backend import NewBackend, SessionBackend
from ..errors import BackendError, ConfigError
from ..identifier import SessionIdentifier

logger = logging.getLogger(__name__)

DEFAULT_KEY_PREFIX = "session:"


class RedisBackend(SessionBackend):
    def __init__(
        self,
        redis_client: aioredis.Redis,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        ttl_seconds: Optional[int] = None,
    ):
        """Initialize the Redis backend with an async Redis client returning raw bytes."""
        self.redis_client = redis_client
        self.key_prefix = key_prefix
        self.ttl_seconds = ttl_seconds

    def _key(self, identifier: SessionIdentifier) -> str:
        return f"{self.key_prefix}{identifier.value}"

    def _handle_redis_error(self, operation: str, identifier: SessionIdentifier, error: Exception) -> None:
        """Centralized error handling for Redis operations."""
        if isinstance(error, RedisConnectionError):
            logger.error(f"Redis connection failed during {operation} for session {identifier}: {error}")
            raise BackendError(f"Database connection error during {operation}") from error
        elif isinstance(error, RedisError):
            logger.error(f"Redis error during {operation} for session {identifier}: {error}")
            raise BackendError(f"Database error during {operation}") from error
        else:
            logger.error(f"Unexpected error during {operation} for session {identifier}: {error}")
            raise BackendError(f"Unexpected error during {operation}") from error

    async def read_session(self, identifier: SessionIdentifier) -> Optional[bytes]:
        try:
            payload = await self.redis_client.get(self._key(identifier))
        except Exception as e:
            self._handle_redis_error("session read", identifier, e)
            raise  # Never reached, but helps type checker

        if payload is None:
            logger.debug(f"No stored record for session {identifier}")
            return None
        return payload

    async def persist_session(self, identifier: SessionIdentifier, payload: bytes) -> None:
        try:
            await self.redis_client.set(self._key(identifier), payload, ex=self.ttl_seconds)
            logger.debug(f"Session {identifier} persisted successfully")
        except Exception as e:
            self._handle_redis_error("session persist", identifier, e)


class RedisBackendFactory(NewBackend):
    """Shares one connection pool across every backend handle of a worker."""

    def __init__(
        self,
        redis_url: str,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        ttl_seconds: Optional[int] = None,
        redis_client: Optional[aioredis.Redis] = None,
    ):
        self.redis_url = redis_url
        self.key_prefix = key_prefix
        self.ttl_seconds = ttl_seconds
        self._client = redis_client

    def _get_client(self) -> aioredis.Redis:
        if self._client is None:
            logger.info(f"Creating session Redis client with: URL {self.redis_url}")
            try:
                self._client = aioredis.from_url(self.redis_url, decode_responses=False)
            except ValueError as e:
                raise ConfigError(f"Invalid Redis URL for sessions: {e}") from e
        return self._client

    def new_backend(self) -> RedisBackend:
        return RedisBackend(self._get_client(), key_prefix=self.key_prefix, ttl_seconds=self.ttl_seconds)
