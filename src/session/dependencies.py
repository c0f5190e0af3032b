"""
FastAPI dependencies for reaching the current session from a route.
"""
import logging
from typing import Callable, Type, TypeVar

from fastapi import HTTPException, Request

from .data import SessionData
from .state import borrow_session

logger = logging.getLogger('session.dependencies')

T = TypeVar("T")


def session_dependency(value_type: Type[T]) -> Callable[[Request], SessionData[T]]:
    """
    Build a dependency returning the request's `SessionData` for `value_type`.

    Usage:
        @app.get("/visits")
        async def visits(session: SessionData[Visits] = Depends(session_dependency(Visits))):
            session.borrow_mut().count += 1
    """
    def get_session_data(request: Request) -> SessionData[T]:
        session = borrow_session(request, value_type)
        if session is None:
            logger.error(f"No {value_type.__name__} session on request; is SessionMiddleware installed?")
            raise HTTPException(status_code=500, detail="Session unavailable")
        return session

    return get_session_data
