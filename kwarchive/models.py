#!/usr/bin/env python3
"""
kwarchive Database Models - Peewee over the keyword archive

Schema (owned by the archiver, read-only here):
- metadata relation (default "ktlmeta"): (service, keyword, type)
  type "KTL_STRING" marks string-valued keywords, anything else is scalar
- one relation per service: (time DOUBLE, keyword TEXT, binvalue TEXT)

Notes:
- Models are built per store so that the metadata table name and the
  per-service table names come from configuration and query text.
- Connections are scoped to one batch request via ArchiveStore.session().
"""

import logging
from contextlib import contextmanager
from typing import Dict, Iterable, Iterator, Optional, Type

import peewee
from peewee import Model, PostgresqlDatabase, TextField, DoubleField

from .core.config import DatasourceSettings
from .core.errors import ArchiveConnectionError, ConfigError

logger = logging.getLogger("kwarchive.models")


class ArchiveModel(Model):
    class Meta:
        legacy_table_names = False


def metadata_model(db: peewee.Database, table: str) -> Type[ArchiveModel]:
    """Keyword metadata rows bound to ``db``."""

    class KeywordMeta(ArchiveModel):
        service = TextField()
        keyword = TextField()
        type = TextField(null=True)

        class Meta:
            database = db
            table_name = table
            primary_key = False
            indexes = (
                (("service", "keyword"), False),
            )

    return KeywordMeta


def service_model(db: peewee.Database, table: str) -> Type[ArchiveModel]:
    """Samples of every keyword of one service, bound to ``db``."""

    class ServiceSample(ArchiveModel):
        time = DoubleField()
        keyword = TextField()
        binvalue = TextField(null=True)  # raw text, may carry whitespace

        class Meta:
            database = db
            table_name = table
            primary_key = False
            indexes = (
                (("keyword", "time"), False),
            )

    return ServiceSample


class ArchiveStore:
    """Store lifecycle + per-batch connection scope."""

    def __init__(self, database: peewee.Database, metatable: str = "ktlmeta") -> None:
        self.database = database
        self.metatable = metatable
        self.settings: Optional[DatasourceSettings] = None
        self._meta_model: Optional[Type[ArchiveModel]] = None
        self._service_models: Dict[str, Type[ArchiveModel]] = {}

    @classmethod
    def from_settings(cls, settings: DatasourceSettings) -> "ArchiveStore":
        if not settings.database:
            raise ConfigError("datasource database name is required")
        database = PostgresqlDatabase(
            settings.database,
            host=settings.server,
            port=settings.port,
            user=settings.role,
            password=settings.password,
            sslmode=settings.sslmode,
            autoconnect=False,
        )
        store = cls(database, metatable=settings.metatable)
        store.settings = settings
        return store

    # ---- lifecycle ----

    @property
    def initialized(self) -> bool:
        return self._meta_model is not None

    def init(self) -> None:
        if self.initialized:
            return
        self._meta_model = metadata_model(self.database, self.metatable)
        logger.info(f"archive store initialized (metatable={self.metatable})")

    def teardown(self) -> None:
        if not self.database.is_closed():
            self.database.close()
        self._service_models.clear()
        self._meta_model = None
        logger.info("archive store closed")

    @contextmanager
    def session(self) -> Iterator["ArchiveStore"]:
        """Hold one connection for the duration of a batch, always released."""
        if not self.initialized:
            raise ArchiveConnectionError("archive store is not initialized")
        try:
            opened = self.database.connect(reuse_if_open=True)
        except (peewee.PeeweeException, peewee.ImproperlyConfigured) as e:
            logger.error(f"DB connection failure: {e}")
            raise ArchiveConnectionError(f"cannot connect to archive: {e}") from e
        try:
            yield self
        finally:
            if opened:
                self.database.close()

    # ---- models ----

    @property
    def meta_model(self) -> Type[ArchiveModel]:
        if self._meta_model is None:
            raise ArchiveConnectionError("archive store is not initialized")
        return self._meta_model

    def service_model(self, service: str) -> Type[ArchiveModel]:
        model = self._service_models.get(service)
        if model is None:
            model = service_model(self.database, service)
            self._service_models[service] = model
        return model

    def create_schema(self, services: Iterable[str] = ()) -> None:
        """Create the metadata and service tables if missing (dev/test archives)."""
        models = [self.meta_model] + [self.service_model(s) for s in services]
        self.database.create_tables(models, safe=True)

    # ---- probes ----

    def ping(self) -> None:
        self.database.execute_sql("SELECT 1")

    def set_statement_timeout(self, seconds: float) -> None:
        """Bound every following statement on this connection (PostgreSQL only)."""
        if not isinstance(self.database, PostgresqlDatabase):
            return
        ms = max(1, int(seconds * 1000))
        self.database.execute_sql(
            "SELECT set_config('statement_timeout', %s, false)", (str(ms),)
        )
