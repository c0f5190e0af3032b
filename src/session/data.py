"""
Per-request session state.

A `SessionData` is built by the middleware at the start of a request, handed
to the route through the request state, and finalized once after the route
has produced its response. The cookie state and identifier are fixed when it
is built; the data state only ever moves from CLEAN to DIRTY.
"""
import logging
from enum import Enum
from typing import Generic, Optional, TypeVar

from .backends.backend import SessionBackend
from .codec import SessionCodec
from .config import DecodeFailurePolicy, SessionCookieConfig
from .errors import DeserializeError
from .identifier import SessionIdentifier

logger = logging.getLogger('session.data')

T = TypeVar("T")


class CookieState(Enum):
    NEW = "new"
    EXISTING = "existing"


class DataState(Enum):
    CLEAN = "clean"
    DIRTY = "dirty"


class SessionData(Generic[T]):
    """
    A session value plus the bookkeeping needed to write it back.

    Read the value through `value`. Any change must go through `borrow_mut()`
    or `replace()`, which mark the session dirty so it is persisted at the
    end of the request. Mutating the object returned by `value` directly is
    not tracked and will be lost.
    """

    def __init__(
        self,
        value: T,
        cookie_state: CookieState,
        data_state: DataState,
        identifier: SessionIdentifier,
        backend: SessionBackend,
        cookie_config: SessionCookieConfig,
        codec: SessionCodec[T],
    ):
        if cookie_state is CookieState.NEW and data_state is not DataState.DIRTY:
            raise ValueError("A new session must start dirty")
        self._value = value
        self._cookie_state = cookie_state
        self._data_state = data_state
        self._identifier = identifier
        self._backend = backend
        self._cookie_config = cookie_config
        self._codec = codec

    @classmethod
    def new(
        cls,
        backend: SessionBackend,
        cookie_config: SessionCookieConfig,
        codec: SessionCodec[T],
    ) -> "SessionData[T]":
        """Start a fresh session. It is always persisted, even if never touched."""
        identifier = backend.random_identifier()
        logger.debug(f"No existing session, assigning new identifier ({identifier})")
        return cls(
            value=codec.default(),
            cookie_state=CookieState.NEW,
            data_state=DataState.DIRTY,
            identifier=identifier,
            backend=backend,
            cookie_config=cookie_config,
            codec=codec,
        )

    @classmethod
    def construct(
        cls,
        backend: SessionBackend,
        cookie_config: SessionCookieConfig,
        codec: SessionCodec[T],
        identifier: SessionIdentifier,
        payload: Optional[bytes],
        on_decode_error: DecodeFailurePolicy = DecodeFailurePolicy.FAIL,
    ) -> "SessionData[T]":
        """
        Build a session from the payload read for a client-supplied identifier.

        A missing payload starts a new session under a freshly minted
        identifier; the client's identifier is not reused.

        Raises:
            DeserializeError: if the payload can't be decoded and the policy is FAIL
        """
        if payload is None:
            return cls.new(backend, cookie_config, codec)

        try:
            value = codec.decode(payload)
        except DeserializeError:
            logger.error(f"Failed to deserialize session data ({identifier})")
            if on_decode_error is DecodeFailurePolicy.RESET:
                logger.warning(f"Discarding undecodable session ({identifier}), starting a new one")
                return cls.new(backend, cookie_config, codec)
            raise

        logger.debug(f"Successfully deserialized session data ({identifier})")
        return cls(
            value=value,
            cookie_state=CookieState.EXISTING,
            data_state=DataState.CLEAN,
            identifier=identifier,
            backend=backend,
            cookie_config=cookie_config,
            codec=codec,
        )

    @property
    def value(self) -> T:
        return self._value

    def borrow_mut(self) -> T:
        """Return the value for modification and mark the session dirty."""
        self._data_state = DataState.DIRTY
        return self._value

    def replace(self, value: T) -> None:
        self._data_state = DataState.DIRTY
        self._value = value

    @property
    def identifier(self) -> SessionIdentifier:
        return self._identifier

    @property
    def cookie_state(self) -> CookieState:
        return self._cookie_state

    @property
    def data_state(self) -> DataState:
        return self._data_state

    @property
    def cookie_config(self) -> SessionCookieConfig:
        return self._cookie_config

    @property
    def value_type(self) -> type:
        return self._codec.value_type

    @property
    def is_new(self) -> bool:
        return self._cookie_state is CookieState.NEW

    @property
    def is_dirty(self) -> bool:
        return self._data_state is DataState.DIRTY

    def set_cookie_header(self) -> str:
        return self._cookie_config.set_cookie_header(self._identifier)

    async def persist(self) -> None:
        """
        Encode the value and write it to the owned backend.

        Raises:
            SerializeError: if the value can't be encoded
            BackendError: if the backend fails to store it
        """
        payload = self._codec.encode(self._value)
        await self._backend.persist_session(self._identifier, payload)
        logger.debug(f"Persisted session successfully ({self._identifier})")

    def __repr__(self) -> str:
        return (
            f"SessionData(identifier={self._identifier.value[:8]}..., "
            f"cookie_state={self._cookie_state.value}, data_state={self._data_state.value})"
        )
