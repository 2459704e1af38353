# Copyright 2025 Softwell S.r.l. - SPDX-License-Identifier: Apache-2.0
"""FastAPI application factory for the collection store.

Every response carries a ``success`` flag. Errors raised by
:class:`~jsondb_mail.store.CollectionStore` are mapped to
``{"success": false, "error": ...}`` with the status of the error class:
400 for invalid input, 404 for a missing collection on delete, 500 for
filesystem failures. Reading a collection that does not exist is not an
error: it answers 200 with empty data.

Example:
    Creating and running the API application::

        from jsondb_mail.db_api import create_db_app
        from jsondb_mail.store import CollectionStore

        app = create_db_app(CollectionStore("/data/database"))
        uvicorn.run(app, host="0.0.0.0", port=3002)
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Sequence

from fastapi import APIRouter, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from .api_base import DEFAULT_MAX_BODY_BYTES, build_app, metrics_response
from .errors import InvalidInput, JsonDbMailError
from .logger import get_logger
from .models import (
    CollectionsResponse,
    ConfigDataResponse,
    ConfigSavePayload,
    MessageResponse,
    ProductivityResponse,
    ProductivitySavePayload,
    SaveResponse,
    StatsResponse,
)
from .store import CollectionStore

logger = get_logger("DbAPI")


def _is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def create_db_app(
    store: CollectionStore,
    *,
    cors_origins: Sequence[str] | None = None,
    max_body_bytes: int = DEFAULT_MAX_BODY_BYTES,
) -> FastAPI:
    """Create the collection store application.

    The store directory is initialized by the application lifespan, once,
    before the first request is served.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        store.initialize()
        logger.info("Collection store ready at %s", store.base_path)
        yield

    api = build_app(
        "JSON Collection Store",
        lifespan=lifespan,
        cors_origins=cors_origins,
        max_body_bytes=max_body_bytes,
    )
    api.state.store = store
    router = APIRouter(prefix="/api/db", tags=["db"])

    @api.exception_handler(JsonDbMailError)
    async def store_error_handler(request: Request, exc: JsonDbMailError):
        if exc.status_code >= 500:
            logger.error("Error on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse(status_code=exc.status_code, content={"success": False, "error": exc.message})

    @api.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Answer malformed bodies as invalid input rather than 422."""
        logger.warning("Validation error on %s %s: %s", request.method, request.url.path, exc.errors())
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"success": False, "error": "Invalid request body"},
        )

    @router.post("/productividad/save", response_model=SaveResponse)
    def save_productivity(payload: ProductivitySavePayload):
        """Replace the productivity collection with the given array."""
        count = store.save_productivity(payload.data)
        return SaveResponse(success=True, count=count, message="Productivity saved successfully")

    @router.get("/productividad/get", response_model=ProductivityResponse)
    def get_productivity():
        data = store.get_productivity()
        count = len(data) if isinstance(data, list) else 0
        return ProductivityResponse(success=True, data=data, count=count)

    @router.post("/config/save", response_model=MessageResponse)
    def save_config(payload: ConfigSavePayload):
        """Save any JSON value under the given collection name."""
        if _is_missing(payload.collection) or payload.data is None:
            raise InvalidInput("Both collection and data are required")
        store.save(payload.collection, payload.data)
        return MessageResponse(success=True, message=f"{payload.collection} saved successfully")

    @router.get("/config/get/{collection}", response_model=ConfigDataResponse)
    def get_config(collection: str):
        """Return the collection document, or ``null`` when it does not exist."""
        return ConfigDataResponse(success=True, data=store.get(collection))

    @router.get("/collections", response_model=CollectionsResponse)
    def list_collections():
        return CollectionsResponse.model_validate({"success": True, "collections": store.list_collections()})

    @router.delete("/delete/{collection}", response_model=MessageResponse)
    def delete_collection(collection: str):
        """Back up and remove a collection; 404 when it does not exist."""
        store.delete(collection)
        return MessageResponse(success=True, message=f"{collection} deleted successfully")

    @router.post("/backup/{collection}", response_model=MessageResponse)
    def backup_collection(collection: str):
        """Snapshot a collection. A missing collection still reports success."""
        store.backup(collection)
        return MessageResponse(success=True, message=f"Backup of {collection} created successfully")

    @router.get("/stats", response_model=StatsResponse)
    def stats():
        return StatsResponse.model_validate({"success": True, "stats": store.stats()})

    @api.get("/metrics")
    def metrics():
        """Expose Prometheus metrics collected by the store."""
        return metrics_response(store.metrics.generate_latest())

    api.include_router(router)
    return api
