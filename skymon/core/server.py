#!/usr/bin/env python3
"""
skymon FastAPI application factory
"""

import logging
import sqlite3
from contextlib import asynccontextmanager
from typing import Optional

import peewee
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from .config import ServerConfig
from .exceptions import QueryValidationError, SkymonError
from ..api.queries import FrameMetricStore, MetricQueryEngine, MetricStore, SqliteMetricStore
from ..api.routes import create_metrics_routes
from ..api.schemas import HealthResponse
from ..models import DatabaseManager

logger = logging.getLogger("skymon.server")


def create_store(config: ServerConfig) -> MetricStore:
    """Build the backing store selected in the config."""
    if config.store == "csv":
        if not config.csv_path:
            raise ValueError("csv_path is required when store is 'csv'")
        return FrameMetricStore.from_csv(config.csv_path, query_timeout=config.query_timeout)

    manager = DatabaseManager(config.db_path, config.collection)
    return SqliteMetricStore(manager, query_timeout=config.query_timeout)


def _register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(QueryValidationError)
    async def bad_request(request: Request, exc: QueryValidationError):
        return JSONResponse(status_code=400, content={"message": str(exc)})

    @app.exception_handler(SkymonError)
    async def server_error(request: Request, exc: SkymonError):
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
        return JSONResponse(status_code=500, content={"message": str(exc)})

    @app.exception_handler(peewee.PeeweeException)
    @app.exception_handler(sqlite3.Error)
    async def store_error(request: Request, exc: Exception):
        logger.error(f"{request.method} {request.url.path} store error: {exc}")
        return JSONResponse(status_code=500, content={"message": f"error while retrieving data: {exc}"})


def create_app(config: ServerConfig, store: Optional[MetricStore] = None) -> FastAPI:
    """Create the FastAPI app serving metrics from the configured store."""
    store = store or create_store(config)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store.ensure_schema()
        logger.info(f"skymon ready ({config.store} store)")
        yield
        store.close()

    app = FastAPI(title="skymon", lifespan=lifespan)
    app.state.store = store
    _register_error_handlers(app)

    @app.get("/health", response_model=HealthResponse)
    def health():
        return HealthResponse(status="ok", store=config.store)

    engine = MetricQueryEngine(store)
    app.include_router(create_metrics_routes(engine))
    return app
