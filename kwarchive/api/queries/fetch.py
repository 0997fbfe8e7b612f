"""
Time-series sample retrieval.

Two-phase protocol against a per-service relation:
1. count the rows of the keyword inside the window,
2. read them back in ascending time, consuming at most that many rows.

The count is a read-time snapshot: rows inserted between the two
statements are not returned.
"""

import itertools
import logging
import math
from typing import Callable, Iterator, Optional, Tuple

import pandas as pd
import peewee
from peewee import fn, __exception_wrapper__ as exception_wrapper

from ...core.errors import RowIterationError, ScanError
from ...models import ArchiveStore
from .series import KeywordKind, Series

logger = logging.getLogger("kwarchive.server")

NANOS_PER_SECOND = 1_000_000_000


def _window(model, keyword: str, start: float, end: float):
    return (model.keyword == keyword) & (model.time >= start) & (model.time <= end)


def _count_rows(model, keyword: str, start: float, end: float) -> int:
    count = (model.select(fn.COUNT(model.time))
             .where(_window(model, keyword, start, end))
             .scalar())
    return int(count or 0)


def _ordered_rows(model, keyword: str, start: float, end: float) -> Iterator[Tuple]:
    query = (model.select(model.time, fn.TRIM(model.binvalue))
             .where(_window(model, keyword, start, end))
             .order_by(model.time.asc())
             .tuples())
    return query.iterator()


def decode_time(unix_seconds: float) -> int:
    """Float Unix time -> integer nanoseconds, split as whole seconds + fraction."""
    frac, sec = math.modf(unix_seconds)
    return int(sec) * NANOS_PER_SECOND + int(frac * 1e9)


def decode_value(raw, kind: KeywordKind):
    if raw is None:
        raise ScanError("NULL value in archive row")
    if kind is KeywordKind.STRING:
        return raw
    try:
        return float(raw)
    except (TypeError, ValueError) as e:
        raise ScanError(f"cannot parse {raw!r} as float: {e}") from e


def fetch_series(
    store: ArchiveStore,
    service: str,
    keyword: str,
    kind: KeywordKind,
    start: float,
    end: float,
    checkpoint: Optional[Callable[[], None]] = None,
) -> Series:
    """
    Fetch the samples of service.keyword with start <= time <= end.

    Args:
        store: Archive store with an open session
        service: Service name (the relation to read)
        keyword: Bare keyword name
        kind: Keyword kind from the metadata lookup
        start: Window start, Unix seconds
        end: Window end, Unix seconds
        checkpoint: Called between the count and the fetch; may raise to abort

    Returns:
        Series ordered by time. ``iteration_error`` is set when the cursor
        failed part way; the rows read before the failure are kept.

    Raises:
        ScanError: a statement failed or a row could not be decoded
    """
    model = store.service_model(service)

    try:
        count = _count_rows(model, keyword, start, end)
    except peewee.PeeweeException as e:
        logger.error(f"Count query failed for {service}.{keyword}: {e}")
        raise ScanError(f"count query failed for {service}.{keyword}: {e}") from e
    logger.debug(f"query yielded {count} rows")

    if checkpoint is not None:
        checkpoint()

    if count == 0:
        return Series.empty(kind)

    try:
        rows = _ordered_rows(model, keyword, start, end)
    except peewee.PeeweeException as e:
        logger.error(f"Query retrieval error for {service}.{keyword}: {e}")
        raise ScanError(f"query retrieval error for {service}.{keyword}: {e}") from e

    times = []
    values = []
    iteration_error = None
    try:
        with exception_wrapper:
            for unix_time, raw in itertools.islice(rows, count):
                if unix_time is None:
                    raise ScanError("NULL time in archive row")
                times.append(decode_time(unix_time))
                values.append(decode_value(raw, kind))
    except ScanError as e:
        logger.error(f"Query scan error for {service}.{keyword}: {e}")
        raise
    except peewee.PeeweeException as e:
        logger.error(f"Query row error for {service}.{keyword} after {len(times)} rows: {e}")
        iteration_error = RowIterationError(f"row query error: {e}")

    dtype = "float64" if kind is KeywordKind.SCALAR else "object"
    data = pd.DataFrame({
        "time": pd.to_datetime(times, unit="ns", utc=True),
        "value": pd.Series(values, dtype=dtype),
    })
    return Series(kind=kind, data=data, iteration_error=iteration_error)
