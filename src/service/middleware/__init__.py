import logging as log
from fastapi import FastAPI

from session import SessionMiddleware, SessionCookieConfig, DecodeFailurePolicy, NewBackend

from .logging import RequestResponseLoggingMiddleware
from .error_handling import ErrorHandlingMiddleware

logger = log.getLogger('service.middleware')


def setup_middleware(
    app: FastAPI,
    backend: NewBackend,
    session_type: type,
    cookie_config: SessionCookieConfig,
    on_decode_error: DecodeFailurePolicy = DecodeFailurePolicy.FAIL,
):
    """
    Setup all middleware for the FastAPI application.

    Middleware are added in reverse order (last added = first executed).
    Current order of execution:
    1. RequestResponseLoggingMiddleware (logs requests/responses)
    2. ErrorHandlingMiddleware (turns session load failures into a 500)
    3. SessionMiddleware (loads the session, issues cookies, persists changes)

    Raises:
        ConfigError: if the backend factory can't produce a backend
    """
    # Starlette builds middleware on the first request, so check the backend here
    backend.new_backend()

    app.add_middleware(
        SessionMiddleware,
        backend=backend,
        value_type=session_type,
        cookie_config=cookie_config,
        on_decode_error=on_decode_error,
    )

    app.add_middleware(ErrorHandlingMiddleware)

    app.add_middleware(RequestResponseLoggingMiddleware, cookie_name=cookie_config.name)

    logger.info(f"Session cookie '{cookie_config.name}' configured (secure={cookie_config.secure})")


__all__ = [
    'setup_middleware',
    'RequestResponseLoggingMiddleware',
    'ErrorHandlingMiddleware',
]
