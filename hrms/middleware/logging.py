import time
import logging
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from hrms.core.request_context import get_request_context

logger = logging.getLogger("access")

class LoggingMiddleware(BaseHTTPMiddleware):
    """Access log line per request with its processing time"""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        context = get_request_context(request)

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"{context['endpoint']} - Status: {response.status_code} - "
            f"Client: {context['ip_address'] or 'unknown'} - "
            f"Request: {context['request_id'] or '-'} - Time: {process_time:.4f}s"
        )
        response.headers["X-Process-Time"] = f"{process_time:.4f}"
        return response
