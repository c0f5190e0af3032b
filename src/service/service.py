import logging
from typing import Optional

from fastapi import FastAPI, Depends

from session import (
    NewBackend,
    SessionCookieConfig,
    SessionData,
    DecodeFailurePolicy,
    get_backend_factory,
    session_dependency,
)
from session.config import get_decode_failure_policy

from .middleware import setup_middleware
from .session_models import VisitSession

logger = logging.getLogger('service')


def create_app(
    backend: Optional[NewBackend] = None,
    cookie_config: Optional[SessionCookieConfig] = None,
    on_decode_error: Optional[DecodeFailurePolicy] = None,
) -> FastAPI:
    """
    Build the demo application.

    Settings not passed in are read from the environment (see `session.config`).
    """
    if backend is None:
        backend = get_backend_factory()
    if cookie_config is None:
        cookie_config = SessionCookieConfig.from_env()
    if on_decode_error is None:
        on_decode_error = get_decode_failure_policy()

    app = FastAPI(title="Session Service")
    setup_middleware(app, backend, VisitSession, cookie_config, on_decode_error)

    @app.get("/status")
    async def get_status():
        return {"status": "ok"}

    @app.get("/visits")
    async def get_visits(session: SessionData[VisitSession] = Depends(session_dependency(VisitSession))):
        """Read the visit counter without changing the session."""
        return {"visits": session.value.visits, "last_path": session.value.last_path}

    @app.post("/visits")
    async def record_visit(session: SessionData[VisitSession] = Depends(session_dependency(VisitSession))):
        visit = session.borrow_mut()
        visit.visits += 1
        visit.last_path = "/visits"
        logger.debug(f"Recorded visit {visit.visits} for session {session.identifier.value[:8]}")
        return {"visits": visit.visits}

    return app
