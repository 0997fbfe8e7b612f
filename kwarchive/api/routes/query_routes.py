#!/usr/bin/env python3
"""
Query Routes - Batch Keyword Time-Series Queries
"""

import logging
import time
from typing import Optional

from fastapi import APIRouter, HTTPException

from ...core.errors import ArchiveConnectionError, ConfigError
from ...models import ArchiveStore
from ..queries import QueryPipeline
from ..schemas import QueryDataRequest, QueryDataResponse

logger = logging.getLogger("kwarchive.server")


def create_query_routes(store: ArchiveStore, query_timeout: Optional[float] = None) -> APIRouter:
    """Create the batch query route."""
    router = APIRouter()
    pipeline = QueryPipeline(store)

    @router.post("/api/query", response_model=QueryDataResponse)
    def query_data(body: QueryDataRequest):
        """
        Run every query of the batch against the archive.
        Per-query failures are reported in their own slot; only an
        unreachable store fails the request.
        """
        deadline = time.monotonic() + query_timeout if query_timeout else None
        try:
            responses = pipeline.run_batch(body.queries, body.range, deadline=deadline)
        except ConfigError as e:
            logger.error(f"settings error: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        except ArchiveConnectionError as e:
            raise HTTPException(status_code=503, detail=str(e))

        return {"results": {ref_id: r.to_dict() for ref_id, r in responses.items()}}

    return router
