from fastapi import Request
import logging
import time
from starlette.middleware.base import BaseHTTPMiddleware

logger = logging.getLogger("app")

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()

        path = request.url.path
        query_string = request.url.query
        method = request.method
        has_auth = "Authorization" in request.headers

        logger.info(f"Request: {method} {path} {query_string} (auth={'yes' if has_auth else 'no'})")

        response = await call_next(request)

        process_time = time.perf_counter() - start_time
        response.headers["X-Process-Time"] = f"{process_time:.4f}"

        if response.status_code >= 500:
            logger.error(f"Response: {response.status_code} for {method} {path} in {process_time:.4f}s")
        else:
            logger.info(f"Response: {response.status_code} for {method} {path} in {process_time:.4f}s")

        return response
