from datetime import datetime, timezone
from typing import List, Optional

import msgpack
import pytest
from pydantic import BaseModel

from session import PydanticMsgpackCodec, DeserializeError, SerializeError


class ProfileSession(BaseModel):
    user_id: Optional[str] = None
    visits: int = 0
    tags: List[str] = []
    last_seen: Optional[datetime] = None


@pytest.fixture
def codec():
    return PydanticMsgpackCodec(ProfileSession)


def test_default_constructs_model(codec):
    assert codec.default() == ProfileSession()


def test_encode_is_binary_msgpack(codec):
    payload = codec.encode(ProfileSession(user_id="u1", visits=3))
    assert isinstance(payload, bytes)
    assert msgpack.unpackb(payload, raw=False)["visits"] == 3


def test_round_trip(codec):
    value = ProfileSession(
        user_id="alice",
        visits=42,
        tags=["a", "b"],
        last_seen=datetime(2024, 5, 1, 12, 30, tzinfo=timezone.utc),
    )
    assert codec.decode(codec.encode(value)) == value


@pytest.mark.parametrize("payload", [
    b"",
    b"\xc1",
    msgpack.packb({"visits": 1})[:-1],
    msgpack.packb({"visits": 1}) + b"\x00",
])
def test_malformed_payload_raises(codec, payload):
    with pytest.raises(DeserializeError):
        codec.decode(payload)


def test_payload_of_wrong_shape_raises(codec):
    with pytest.raises(DeserializeError, match="does not match ProfileSession"):
        codec.decode(msgpack.packb({"visits": "many"}))

    with pytest.raises(DeserializeError):
        codec.decode(msgpack.packb([1, 2, 3]))


def test_unencodable_value_raises(codec):
    # Wider than the 64 bit integers MessagePack can represent
    value = ProfileSession(visits=2 ** 70)
    with pytest.raises(SerializeError):
        codec.encode(value)
