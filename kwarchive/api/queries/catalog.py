"""
Archive catalog: services, keywords and store health.

Plain pass-through queries on the metadata relation.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional

import peewee

from ...core.config import DatasourceSettings
from ...core.errors import ArchiveError, MetadataLookupError
from ...models import ArchiveStore

logger = logging.getLogger("kwarchive.server")


def list_services(store: ArchiveStore) -> Dict[str, str]:
    """All services, keyed and valued by name."""
    meta = store.meta_model
    try:
        rows = (meta.select(meta.service)
                .distinct()
                .order_by(meta.service.asc())
                .tuples())
        return {service: service for (service,) in rows}
    except peewee.PeeweeException as e:
        logger.error(f"services retrieval failure: {e}")
        raise MetadataLookupError(f"services retrieval failure: {e}") from e


def list_keywords(store: ArchiveStore, service: str) -> Dict[str, str]:
    """Keywords of a service: bare keyword -> "service.keyword" display label."""
    meta = store.meta_model
    try:
        rows = (meta.select(meta.keyword)
                .where(meta.service == service)
                .order_by(meta.keyword.asc())
                .tuples())
        return {keyword: f"{service}.{keyword}" for (keyword,) in rows}
    except peewee.PeeweeException as e:
        logger.error(f"keywords retrieval failure for {service}: {e}")
        raise MetadataLookupError(f"keywords retrieval failure: {e}") from e


@dataclass
class HealthResult:
    status: str
    message: str

    @property
    def ok(self) -> bool:
        return self.status == "ok"


def check_health(store: ArchiveStore, settings: Optional[DatasourceSettings] = None) -> HealthResult:
    """Open a connection and ping the archive."""
    try:
        with store.session():
            store.ping()
    except (ArchiveError, peewee.PeeweeException) as e:
        logger.warning(f"health check failed: {e}")
        return HealthResult(status="error", message=f"Failure to ping db: {e}")

    settings = settings or store.settings
    if settings is None:
        return HealthResult(status="ok", message=f"confirmed: {store.metatable}")
    return HealthResult(
        status="ok",
        message=(f"confirmed: {settings.server}:{settings.role}:"
                 f"{settings.database}:{settings.metatable}"),
    )
