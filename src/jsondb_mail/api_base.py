# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""Plumbing shared by the store and relay FastAPI applications.

Provides:
- ``build_app()``: FastAPI instance with permissive CORS and a request body
  size limit
- ``metrics_response()``: Prometheus text exposition
"""

from __future__ import annotations

from typing import AsyncContextManager, Callable, Sequence

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from .logger import get_logger

DEFAULT_MAX_BODY_BYTES = 50 * 1024 * 1024
PROMETHEUS_CONTENT_TYPE = "text/plain; version=0.0.4"

logger = get_logger("API")


def build_app(
    title: str,
    *,
    lifespan: Callable[[FastAPI], AsyncContextManager] | None = None,
    cors_origins: Sequence[str] | None = None,
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES,
) -> FastAPI:
    """Create a FastAPI application with the middleware both services share."""
    api = FastAPI(title=title, lifespan=lifespan)
    api.state.max_body_bytes = max_body_bytes

    @api.middleware("http")
    async def limit_body_size(request: Request, call_next):
        """Reject requests whose body exceeds ``max_body_bytes``.

        A declared ``Content-Length`` is checked before anything is read.
        Bodies sent without one (chunked) are read here and measured; the
        buffered body is replayed to the route.
        """
        limit = api.state.max_body_bytes
        length = request.headers.get("content-length")
        if length is not None and length.isdigit():
            size = int(length)
        else:
            size = len(await request.body())
        if size > limit:
            logger.warning(
                "Rejected %s %s: body of %s bytes exceeds limit", request.method, request.url.path, size
            )
            return JSONResponse(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                content={"success": False, "error": "Request body too large"},
            )
        return await call_next(request)

    # CORS is added last so it wraps the size check and 413s keep their headers
    api.add_middleware(
        CORSMiddleware,
        allow_origins=list(cors_origins or ["*"]),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    return api


def metrics_response(payload: bytes) -> Response:
    return Response(content=payload, media_type=PROMETHEUS_CONTENT_TYPE)
