"""
Request-scoped slots holding session data, one slot per session value type.

Slots live on Starlette's `request.state`, which is shared by every
middleware and the route handling the same request.
"""
from typing import Dict, Optional, Type, TypeVar

from starlette.requests import HTTPConnection

from .data import SessionData

T = TypeVar("T")

_SLOTS_ATTR = "session_slots"


def _slots(connection: HTTPConnection) -> Dict[type, SessionData]:
    slots = getattr(connection.state, _SLOTS_ATTR, None)
    if slots is None:
        slots = {}
        setattr(connection.state, _SLOTS_ATTR, slots)
    return slots


def put_session(connection: HTTPConnection, session: SessionData) -> None:
    """Store the session, replacing any session of the same value type."""
    _slots(connection)[session.value_type] = session


def take_session(connection: HTTPConnection, value_type: Type[T]) -> Optional[SessionData[T]]:
    """Remove and return the session for `value_type`, if any."""
    return _slots(connection).pop(value_type, None)


def borrow_session(connection: HTTPConnection, value_type: Type[T]) -> Optional[SessionData[T]]:
    return _slots(connection).get(value_type)
