"""
Per-query retrieval pipeline.

metadata lookup -> count + ordered fetch -> unit conversion -> transform -> frame

A batch holds one store connection and runs its queries one after the
other. A failing query only fills its own response slot; failing to
reach the store aborts the batch before any query runs.
"""

import logging
import threading
import time
from typing import Any, Dict, List, Optional

import peewee
from pydantic import ValidationError

from ...core.errors import (
    ArchiveError, FATAL_ERRORS, KeywordNotFound, MalformedQuery, QueryCancelled,
    ScanError,
)
from ...models import ArchiveStore
from ..schemas import QuerySpec, TimeRange
from .conversions import UnitConversion, convert
from .fetch import fetch_series
from .frames import DataResponse, empty_response, error_response, series_response
from .metadata import resolve_kind
from .series import KeywordKind
from .transforms import Transform, apply_transform

logger = logging.getLogger("kwarchive.server")


class CancelScope:
    """Deadline (time.monotonic() seconds) and/or event shared by a batch."""

    def __init__(self, deadline: Optional[float] = None,
                 event: Optional[threading.Event] = None):
        self.deadline = deadline
        self.event = event

    @property
    def cancelled(self) -> bool:
        if self.event is not None and self.event.is_set():
            return True
        return self.deadline is not None and time.monotonic() >= self.deadline

    def remaining(self) -> Optional[float]:
        if self.deadline is None:
            return None
        return max(0.0, self.deadline - time.monotonic())

    def check(self) -> None:
        if self.cancelled:
            raise QueryCancelled()


def _slot_key(payload: Any, index: int) -> str:
    if isinstance(payload, dict) and payload.get("refId"):
        return str(payload["refId"])
    return str(index)


class QueryPipeline:
    """Runs batches of keyword queries against one archive store."""

    def __init__(self, store: ArchiveStore):
        self.store = store

    def run_batch(
        self,
        payloads: List[Any],
        time_range: TimeRange,
        deadline: Optional[float] = None,
        cancel: Optional[threading.Event] = None,
    ) -> Dict[str, DataResponse]:
        """
        Run every query of a batch, in order.

        Args:
            payloads: Raw query payloads (dicts as sent by the query editor)
            time_range: Range used by queries that carry no timeRange of their own
            deadline: time.monotonic() value after which remaining work is cancelled
            cancel: Event that cancels remaining work when set

        Returns:
            Mapping of refId (or position, when missing) to the query's response

        Raises:
            ArchiveConnectionError: the store could not be reached
        """
        logger.info(f"QueryData: {len(payloads)} queries")
        scope = CancelScope(deadline, cancel)
        responses: Dict[str, DataResponse] = {}

        with self.store.session():
            for index, payload in enumerate(payloads):
                key = _slot_key(payload, index)
                if scope.cancelled:
                    responses[key] = DataResponse(error=QueryCancelled())
                    continue
                try:
                    responses[key] = self.run_query(payload, time_range, scope)
                except FATAL_ERRORS:
                    raise
                except Exception as e:
                    logger.exception(f"Unexpected failure in query {key}")
                    responses[key] = DataResponse(error=e)

        return responses

    def run_query(self, payload: Any, time_range: TimeRange,
                  scope: Optional[CancelScope] = None) -> DataResponse:
        """Run a single query; needs an open store session."""
        scope = scope or CancelScope()
        try:
            query = QuerySpec.model_validate(payload)
        except ValidationError as e:
            logger.error(f"Invalid query payload: {e}")
            return DataResponse(error=MalformedQuery(f"invalid query payload: {e}"))

        # Hidden queries keep their slot but carry nothing
        if query.hide:
            return DataResponse()

        window = query.time_range or time_range
        if not query.query_text:
            return empty_response(window, query.ref_id)

        if not query.format:
            logger.warning("format is empty, defaulting to time series")

        try:
            return self._execute(query, window, scope)
        except KeywordNotFound:
            return empty_response(window, query.ref_id)
        except FATAL_ERRORS:
            raise
        except ArchiveError as e:
            error = e
            if scope.cancelled and not isinstance(e, QueryCancelled):
                error = QueryCancelled(f"query cancelled: {e}")
            logger.error(f"Query {query.ref_id or query.query_text} failed: {error}")
            return error_response(error, window, query.ref_id)

    def _execute(self, query: QuerySpec, window: TimeRange, scope: CancelScope) -> DataResponse:
        service, keyword = query.keyword_path()
        conversion = UnitConversion.from_code(query.unit_conversion)
        transform = Transform.from_code(query.transform)

        self._checkpoint(scope)
        kind = resolve_kind(self.store, service, keyword)

        self._checkpoint(scope)
        series = fetch_series(
            self.store, service, keyword, kind,
            window.unix_start, window.unix_end,
            checkpoint=lambda: self._checkpoint(scope),
        )

        if kind is KeywordKind.SCALAR and conversion is not UnitConversion.NONE:
            series.data["value"] = convert(series.data["value"].to_numpy(), conversion)

        series = apply_transform(series, transform)
        return series_response(series, query)

    def _checkpoint(self, scope: CancelScope) -> None:
        """Raise if cancelled, else bound the next statements by the time left."""
        scope.check()
        remaining = scope.remaining()
        if remaining is not None:
            try:
                self.store.set_statement_timeout(remaining)
            except peewee.PeeweeException as e:
                raise ScanError(f"cannot set statement timeout: {e}") from e
