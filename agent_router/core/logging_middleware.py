"""Request logging middleware that tags every record with a request id"""

import time
import uuid

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

from agent_router.core.logging import clear_request_id, get_logger, set_request_id

logger = get_logger(__name__)

REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log each HTTP request and echo its request id in the response"""

    async def dispatch(self, request: Request, call_next):
        # Reuse a caller-supplied id so logs line up across services
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        set_request_id(request_id)
        request.state.request_id = request_id

        request_logger = logger.bind(method=request.method, path=request.url.path)
        request_logger.info(
            "HTTP request received",
            client_ip=request.client.host if request.client else None,
        )

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
            request_logger.info(
                "HTTP request completed",
                status_code=response.status_code,
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        except Exception as e:
            request_logger.error(
                "HTTP request failed",
                duration_ms=round((time.perf_counter() - start_time) * 1000, 2),
                error=str(e),
                error_type=type(e).__name__,
            )
            raise
        finally:
            clear_request_id()
