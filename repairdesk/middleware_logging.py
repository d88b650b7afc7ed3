import logging
import time
from typing import Callable
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"

# Polled by monitors; only logged at DEBUG
QUIET_PATHS = {"/health"}

logger = logging.getLogger("repairdesk.request")


def configure_logging(level: str = "INFO") -> None:
    """Install the root handler; a no-op if logging is already configured."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)


def _level_for(path: str, status_code: int) -> int:
    if status_code >= 500:
        return logging.WARNING
    if path in QUIET_PATHS:
        return logging.DEBUG
    return logging.INFO


class RequestLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: Callable):
        start = time.perf_counter()
        client = request.client.host if request.client else "-"
        target = request.url.path + (f"?{request.url.query}" if request.url.query else "")

        def elapsed_ms() -> float:
            return (time.perf_counter() - start) * 1000.0

        try:
            response = await call_next(request)
        except Exception:
            logger.exception(
                "client=%s %s %s status=500 duration_ms=%.2f UNHANDLED",
                client, request.method, target, elapsed_ms()
            )
            raise

        logger.log(
            _level_for(request.url.path, response.status_code),
            "client=%s %s %s status=%s duration_ms=%.2f",
            client, request.method, target, response.status_code, elapsed_ms()
        )
        return response


def register_request_logging(app):
    app.add_middleware(RequestLogMiddleware)
