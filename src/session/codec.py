"""
Encoding of session values for storage.

Session values are pydantic models, so a default value can always be
constructed and stored payloads are validated on the way back in. Payloads
are MessagePack to keep backend records small.
"""
import logging
from abc import ABC, abstractmethod
from typing import Generic, Type, TypeVar

import msgpack
from pydantic import BaseModel, ValidationError

from .errors import DeserializeError, SerializeError

logger = logging.getLogger('session.codec')

T = TypeVar("T")
ModelT = TypeVar("ModelT", bound=BaseModel)


class SessionCodec(ABC, Generic[T]):
    """Default construction plus encode/decode for one session value type."""

    value_type: type

    @abstractmethod
    def default(self) -> T:
        pass

    @abstractmethod
    def encode(self, value: T) -> bytes:
        """Raises `SerializeError` if the value can't be encoded."""
        pass

    @abstractmethod
    def decode(self, payload: bytes) -> T:
        """Raises `DeserializeError` if the payload isn't a valid encoded value."""
        pass


class PydanticMsgpackCodec(SessionCodec[ModelT]):
    def __init__(self, model_cls: Type[ModelT]):
        self.value_type = model_cls

    def default(self) -> ModelT:
        return self.value_type()

    def encode(self, value: ModelT) -> bytes:
        try:
            return msgpack.packb(value.model_dump(mode="json"), use_bin_type=True)
        except (TypeError, ValueError, OverflowError) as e:
            logger.error(f"Failed to encode {self.value_type.__name__} session value: {e}")
            raise SerializeError(f"Could not encode {self.value_type.__name__}") from e

    def decode(self, payload: bytes) -> ModelT:
        try:
            raw = msgpack.unpackb(payload, raw=False)
        except (ValueError, TypeError, msgpack.UnpackException) as e:
            raise DeserializeError(f"Stored payload is not valid MessagePack: {e}") from e

        try:
            return self.value_type.model_validate(raw)
        except ValidationError as e:
            raise DeserializeError(
                f"Stored payload does not match {self.value_type.__name__}: {e.error_count()} errors"
            ) from e
