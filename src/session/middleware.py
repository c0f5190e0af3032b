"""
Session middleware.

For each request the middleware looks up the session cookie, loads or creates
the session, places it in the request state for the route, and once the
route has responded issues the cookie for new sessions and writes dirty
sessions back to the backend.
"""
import logging
from typing import Optional, Type

from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import JSONResponse, Response
from starlette.types import ASGIApp

from .backends.backend import NewBackend
from .codec import PydanticMsgpackCodec, SessionCodec
from .config import DEFAULT_COOKIE_NAME, DecodeFailurePolicy, SessionCookieConfig
from .data import SessionData
from .errors import SessionError
from .identifier import SessionIdentifier
from .state import put_session, take_session

logger = logging.getLogger('session.middleware')


def internal_error_response() -> Response:
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error occurred",
            "error_code": "internal_error",
            "message": "An unexpected error occurred. Please try again later.",
        },
    )


class SessionMiddleware(BaseHTTPMiddleware):
    """
    Cookie-keyed server-side sessions for one session value type.

    Args:
        app: the wrapped ASGI application
        backend: factory producing a backend handle per request
        value_type: pydantic model used as the session value
        codec: custom codec, used instead of `value_type`
        cookie_config: shared cookie settings; built from `cookie_name` and `secure` if omitted
        on_decode_error: FAIL (default) aborts the request when a stored
            payload can't be decoded, RESET starts a new session instead

    Raises:
        ConfigError: if the backend factory can't produce a backend
    """

    def __init__(
        self,
        app: ASGIApp,
        backend: NewBackend,
        value_type: Optional[Type] = None,
        codec: Optional[SessionCodec] = None,
        cookie_config: Optional[SessionCookieConfig] = None,
        cookie_name: str = DEFAULT_COOKIE_NAME,
        secure: bool = True,
        on_decode_error: DecodeFailurePolicy = DecodeFailurePolicy.FAIL,
    ):
        super().__init__(app)
        if codec is None:
            if value_type is None:
                raise ValueError("SessionMiddleware needs either value_type or codec")
            codec = PydanticMsgpackCodec(value_type)
        self.codec = codec
        if cookie_config is None:
            cookie_config = SessionCookieConfig(name=cookie_name, secure=secure)
        self.cookie_config = cookie_config
        self.on_decode_error = DecodeFailurePolicy(on_decode_error)
        self.new_backend = backend

        # Surface a broken backend configuration before any request is served
        self.new_backend.new_backend()
        logger.info(
            f"Session middleware configured: cookie '{self.cookie_config.name}', "
            f"secure={self.cookie_config.secure}, type {self.codec.value_type.__name__}"
        )

    def _session_identifier(self, request: Request) -> Optional[SessionIdentifier]:
        value = request.cookies.get(self.cookie_config.name)
        if not value:
            return None
        return SessionIdentifier(value)

    async def _load_session(self, request: Request) -> SessionData:
        backend = self.new_backend.new_backend()
        identifier = self._session_identifier(request)

        if identifier is None:
            return SessionData.new(backend, self.cookie_config, self.codec)

        # BackendError and DeserializeError propagate and fail the request
        payload = await backend.read_session(identifier)
        return SessionData.construct(
            backend,
            self.cookie_config,
            self.codec,
            identifier,
            payload,
            on_decode_error=self.on_decode_error,
        )

    async def _finalize(self, session: SessionData, response: Response) -> Response:
        if session.is_new:
            response.headers.append("set-cookie", session.set_cookie_header())

        if not session.is_dirty:
            return response

        try:
            await session.persist()
        except SessionError as e:
            logger.error(f"Failed to persist session ({session.identifier}): {e}")
            return internal_error_response()
        return response

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        session = await self._load_session(request)
        put_session(request, session)

        response = await call_next(request)

        session = take_session(request, self.codec.value_type)
        if session is None:
            return response
        return await self._finalize(session, response)
