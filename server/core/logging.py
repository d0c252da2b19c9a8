# server/core/logging.py

import logging
import sys
import time
from uuid import uuid4
from fastapi import Request
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware


class InterceptHandler(logging.Handler):
    """
    Forwards records from the standard logging module (uvicorn,
    sqlalchemy) into loguru.
    """

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def setup_logging(level: str = "INFO") -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="<dim>{time:HH:mm:ss}</dim> | <level>{level: <8}</level> | {extra[request_id]} | {message}",
    )
    logger.configure(extra={"request_id": "-"})

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in ["httpx", "httpcore", "uvicorn.access"]:
        logging.getLogger(name).setLevel(logging.WARNING)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Logs one line per request and echoes the request id back."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get("X-Request-ID") or uuid4().hex[:8]
        start_time = time.perf_counter()

        with logger.contextualize(request_id=request_id):
            status_code = 500
            try:
                response = await call_next(request)
                status_code = response.status_code
            finally:
                duration = time.perf_counter() - start_time
                logger.info(
                    "{} {} {} {:.1f}ms",
                    request.method, request.url.path, status_code, duration * 1000,
                )

        response.headers["X-Request-ID"] = request_id
        return response
