import time
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Logs one line per request: method, path, status and elapsed time (ms).
    Requests that blow up past the exception handlers are logged as errors.
    """

    async def dispatch(self, request: Request, call_next):
        start = time.perf_counter()
        try:
            response: Response = await call_next(request)
        except Exception:
            elapsed_ms = (time.perf_counter() - start) * 1000.0
            logger.error(
                "{} {} failed after {:.1f} ms",
                request.method, request.url.path, elapsed_ms,
            )
            raise

        elapsed_ms = (time.perf_counter() - start) * 1000.0
        logger.info(
            "{} {} -> {} ({:.1f} ms)",
            request.method, request.url.path, response.status_code, elapsed_ms,
        )
        return response
