"""Pytest configuration and shared fixtures"""
from datetime import datetime, timezone

import pandas as pd
import pytest
from peewee import SqliteDatabase

from kwarchive.api.queries.series import KeywordKind, Series
from kwarchive.api.schemas import TimeRange
from kwarchive.models import ArchiveStore

# 2024-01-01T00:00:00Z
T0 = 1704067200.0


def utc(unix_seconds: float) -> datetime:
    return datetime.fromtimestamp(unix_seconds, tz=timezone.utc)


def add_metadata(store, rows):
    """rows: (service, keyword, type)"""
    meta = store.meta_model
    meta.insert_many(
        [{"service": s, "keyword": k, "type": t} for s, k, t in rows]
    ).execute()


def add_samples(store, service, keyword, rows):
    """rows: (unix time, raw binvalue)"""
    model = store.service_model(service)
    model.insert_many(
        [{"time": t, "keyword": keyword, "binvalue": v} for t, v in rows]
    ).execute()


def make_series(seconds, values, kind=KeywordKind.SCALAR) -> Series:
    """Build a Series from Unix seconds offsets relative to T0."""
    dtype = "float64" if kind is KeywordKind.SCALAR else "object"
    data = pd.DataFrame({
        "time": pd.to_datetime([T0 + s for s in seconds], unit="s", utc=True),
        "value": pd.Series(values, dtype=dtype),
    })
    return Series(kind=kind, data=data)


@pytest.fixture
def store(tmp_path):
    """Empty archive in a temporary SQLite file"""
    database = SqliteDatabase(str(tmp_path / "archive.db"), autoconnect=False)
    archive = ArchiveStore(database, metatable="ktlmeta")
    archive.init()
    with archive.session():
        archive.create_schema(["dcs", "tcs"])

    yield archive

    archive.teardown()


@pytest.fixture
def archive(store):
    """Archive with a handful of scalar and string keywords"""
    with store.session():
        add_metadata(store, [
            ("dcs", "AZ", "KTL_DOUBLE"),
            ("dcs", "CONST", "KTL_DOUBLE"),
            ("dcs", "NAME", "KTL_STRING"),
            ("dcs", "BAD", "KTL_DOUBLE"),
            ("dcs", "SINGLE", "KTL_DOUBLE"),
            ("dcs", "EMPTY", "KTL_DOUBLE"),
            ("tcs", "TEMP", "KTL_FLOAT"),
        ])

        # AZ: 1.0, 2.0, 4.0 one second apart, whitespace around binvalue
        add_samples(store, "dcs", "AZ", [
            (T0 - 100, "0.0"),          # before the window
            (T0, "1.0"),
            (T0 + 1, " 2.0 "),
            (T0 + 2, "4.0\n"),
            (T0 + 1000, "99.0"),        # after the window
        ])
        add_samples(store, "dcs", "CONST", [(T0 + i * 0.5, "3.0") for i in range(5)])
        add_samples(store, "dcs", "NAME", [
            (T0, "open"),
            (T0 + 1, "closed"),
            (T0 + 2, "open"),
        ])
        add_samples(store, "dcs", "BAD", [(T0, "1.0"), (T0 + 1, "abc")])
        add_samples(store, "dcs", "SINGLE", [(T0 + 1, "7.5")])
        add_samples(store, "tcs", "TEMP", [(T0, "0.0"), (T0 + 1, "100.0")])

    return store


@pytest.fixture
def time_range():
    """Window covering T0-10s .. T0+10s"""
    return TimeRange(start=utc(T0 - 10), end=utc(T0 + 10))
