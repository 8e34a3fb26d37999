"""Request logging middleware."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from typing import Any

logger = logging.getLogger(__name__)

WSGIApp = Callable[[dict[str, Any], Callable[..., Any]], Iterable[bytes]]


def logging_middleware(app: WSGIApp) -> WSGIApp:
    """Log each request's method, path, status and duration once its body is sent."""

    def wrapped(environ, start_response):
        start = time.perf_counter()
        status = 200

        def recording(status_line, headers, exc_info=None):
            nonlocal status
            status = int(status_line.split(None, 1)[0])
            return start_response(status_line, headers, exc_info)

        result = app(environ, recording)
        try:
            yield from result
        finally:
            close = getattr(result, "close", None)
            if close is not None:
                close()
            logger.info(
                "http request method=%s path=%s status=%d duration=%.6fs",
                environ.get("REQUEST_METHOD", ""),
                environ.get("PATH_INFO", ""),
                status,
                time.perf_counter() - start,
            )

    return wrapped