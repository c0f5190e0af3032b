import logging
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request

logger = logging.getLogger('service.middleware')


class RequestResponseLoggingMiddleware(BaseHTTPMiddleware):
    """Logs requests and responses along with whether a session cookie was sent or issued"""

    def __init__(self, app, cookie_name: str):
        super().__init__(app)
        self.cookie_name = cookie_name

    async def dispatch(self, request: Request, call_next):
        logger.debug(f"REQUEST_DEBUG: {request.method} {request.url}")

        session_cookie_value = request.cookies.get(self.cookie_name)
        logger.debug(f"REQUEST_DEBUG: Session cookie present: {bool(session_cookie_value)}")

        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error(f"UNEXPECTED_EXCEPTION_DEBUG: {type(exc)}: {str(exc)}")
            raise

        logger.debug(f"RESPONSE_DEBUG: Status {response.status_code}")
        issued = any(
            value.startswith(f"{self.cookie_name}=")
            for value in response.headers.getlist("set-cookie")
        )
        logger.debug(f"RESPONSE_DEBUG: Session cookie issued: {issued}")

        if response.status_code >= 400:
            logger.error(f"ERROR_RESPONSE_DEBUG: Status {response.status_code} for {request.url}")

        return response
