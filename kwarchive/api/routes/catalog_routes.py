#!/usr/bin/env python3
"""
Catalog Routes - Services and Keywords Listing for the Query Editor
"""

import logging

from fastapi import APIRouter, Query
from fastapi.responses import JSONResponse

from ...core.errors import ArchiveError
from ...models import ArchiveStore
from ..queries import list_keywords, list_services

logger = logging.getLogger("kwarchive.server")


def _error(e: Exception) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": str(e)})


def create_catalog_routes(store: ArchiveStore) -> APIRouter:
    """Create the services/keywords resource routes."""
    router = APIRouter()

    @router.get("/api/services")
    def get_services():
        """All archived services, name -> name."""
        try:
            with store.session():
                return {"services": list_services(store)}
        except ArchiveError as e:
            return _error(e)

    @router.get("/api/keywords")
    def get_keywords(service: str = Query("")):
        """Keywords of one service, bare keyword -> service.keyword."""
        logger.debug(f"keywords requested for service={service}")
        try:
            with store.session():
                return {"keywords": list_keywords(store, service)}
        except ArchiveError as e:
            return _error(e)

    return router
