"""
Global middleware.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)


def register_middleware(app: FastAPI, auth_prefix: str = "/auth") -> None:
    """
    Attach the app-level middleware.

    Responses under ``auth_prefix`` carry session tokens, profiles or
    redirects with ``?token=``, so they are marked uncacheable.
    """

    @app.middleware("http")
    async def auth_response_guard(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"
        if request.url.path.startswith(auth_prefix):
            response.headers["Cache-Control"] = "no-store"
            response.headers["Pragma"] = "no-cache"
        # Path only: OAuth callbacks carry codes in the query string.
        logger.debug(
            "%s %s -> %d (%.3fs)",
            request.method,
            request.url.path,
            response.status_code,
            elapsed,
        )
        return response
