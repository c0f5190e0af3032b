import logging
from starlette.middleware.base import BaseHTTPMiddleware
from fastapi import Request, HTTPException
from fastapi.responses import JSONResponse

from session import SessionError, DeserializeError

logger = logging.getLogger('service.middleware')


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turns unhandled failures, including session load failures, into a generic 500 response"""

    async def dispatch(self, request: Request, call_next):
        try:
            response = await call_next(request)
            return response
        except HTTPException:
            # Http Exceptions should be handled by fastapi's default handler
            raise
        except SessionError as exc:
            error_code = "session_corrupted" if isinstance(exc, DeserializeError) else "session_unavailable"
            logger.error(f"Session error for {request.url}: {str(exc)}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error occurred",
                    "error_code": error_code,
                    "message": "Your session could not be loaded. Please try again later.",
                }
            )
        except Exception as exc:
            logger.error(f"Unexpected error for {request.url}: {str(exc)}", exc_info=True)
            return JSONResponse(
                status_code=500,
                content={
                    "error": "Internal server error occurred",
                    "error_code": "internal_error",
                    "message": "An unexpected error occurred. Please try again later.",
                }
            )
