"""Request correlation, access logging and security headers.

Every request gets a request id: the caller's ``X-Request-ID`` when present,
otherwise a new UUID. The id is bound into structlog's context variables, so
every log line written while the request is handled carries it, and it is
echoed back on the response.
"""

import logging
import time
import uuid
from collections.abc import Callable

import structlog
from fastapi import Request, status
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

logger = logging.getLogger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"

SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "X-XSS-Protection": "1; mode=block",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "Content-Security-Policy": "default-src 'self'",
}


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Bind a request id, log one access line per request and set security headers.

    Register it last so it wraps every other middleware and the exception handlers.
    """

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        """Run the request with its id bound to the logging context.

        Args:
            request: The incoming request
            call_next: The next middleware or route handler

        Returns:
            The response, carrying ``X-Request-ID`` and the security headers

        """
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        request.state.request_id = request_id

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id=request_id)
        started = time.perf_counter()

        try:
            response: Response = await call_next(request)
            response.headers[REQUEST_ID_HEADER] = request_id
            for name, value in SECURITY_HEADERS.items():
                response.headers.setdefault(name, value)
            logger.info(
                "request completed",
                extra=self._access_fields(request, request_id, response.status_code, started),
            )
            return response
        except Exception:
            logger.exception(
                "request failed",
                extra=self._access_fields(request, request_id, status.HTTP_500_INTERNAL_SERVER_ERROR, started),
            )
            raise
        finally:
            structlog.contextvars.clear_contextvars()

    @staticmethod
    def _access_fields(request: Request, request_id: str, status_code: int, started: float) -> dict:
        return {
            "method": request.method,
            "path": request.url.path,
            "status": status_code,
            "duration_ms": round((time.perf_counter() - started) * 1000, 2),
            "client_ip": request.client.host if request.client else None,
            "user_agent": request.headers.get("user-agent"),
            "request_id": request_id,
        }
