#!/usr/bin/env python3
"""
kwarchive FastAPI application factory
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from .config import ServerConfig
from ..models import ArchiveStore
from ..api.routes import create_admin_routes, create_catalog_routes, create_query_routes

logger = logging.getLogger("kwarchive.server")


def create_app(config: ServerConfig, store: Optional[ArchiveStore] = None) -> FastAPI:
    """Build the app; the archive store lives as long as the app does."""
    store = store or ArchiveStore.from_settings(config.datasource)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        store.init()
        try:
            yield
        finally:
            store.teardown()

    app = FastAPI(title="kwarchive", lifespan=lifespan)
    app.state.store = store

    app.include_router(create_query_routes(store, config.query_timeout))
    app.include_router(create_catalog_routes(store))
    app.include_router(create_admin_routes(store, config.datasource))

    logger.info(f"kwarchive app created for {config.datasource.server}/{config.datasource.database}")
    return app
