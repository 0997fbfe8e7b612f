#!/usr/bin/env python3
"""
Admin Routes - Health Checks
"""

import logging
from typing import Optional

from fastapi import APIRouter

from ...core.config import DatasourceSettings
from ...models import ArchiveStore
from ..queries import check_health
from ..schemas import HealthResponse

logger = logging.getLogger("kwarchive.server")


def create_admin_routes(store: ArchiveStore, settings: Optional[DatasourceSettings] = None) -> APIRouter:
    """Create admin routes."""
    router = APIRouter()

    @router.get("/health", response_model=HealthResponse)
    def health():
        """Ping the archive and report its connection settings."""
        result = check_health(store, settings)
        return {"status": result.status, "message": result.message}

    return router
