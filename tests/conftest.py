"""Pytest configuration and shared fixtures"""
import pandas as pd
import pytest
from peewee import SqliteDatabase

from skymon.models import MetricSample, DEFAULT_COLLECTION
from skymon.api.queries import SqliteMetricStore, FrameMetricStore

COLUMNS = ["timestamp", "cpu_load", "concurrency"]


@pytest.fixture
def test_db():
    """Create an in-memory test database"""
    # Use in-memory SQLite for fast tests
    test_database = SqliteDatabase(':memory:')

    MetricSample._meta.set_table_name(DEFAULT_COLLECTION)
    test_database.bind([MetricSample], bind_refs=False, bind_backrefs=False)
    test_database.connect()
    test_database.create_tables([MetricSample])

    yield test_database

    # Cleanup
    test_database.drop_tables([MetricSample])
    test_database.close()


@pytest.fixture(params=["sqlite", "frame"])
def make_store(request, test_db):
    """Factory loading (timestamp, cpu_load, concurrency) rows into each store backend"""
    def _make(rows, **kwargs):
        if request.param == "sqlite":
            if rows:
                MetricSample.insert_many([dict(zip(COLUMNS, row)) for row in rows]).execute()
            return SqliteMetricStore(**kwargs)
        return FrameMetricStore(pd.DataFrame(rows, columns=COLUMNS), **kwargs)
    return _make


@pytest.fixture
def seed_rows():
    """One sample per minute from 2017-08-02 14:44:20 UTC to 14:49:20 UTC"""
    return [
        (1501685060, 48.0, 365984),
        (1501685120, 66.0, 125847),
        (1501685180, 55.0, 500000),
        (1501685240, 100.0, 5),
        (1501685300, 50.0, 12589),
        (1501685360, 1.0, 10000),
    ]


@pytest.fixture
def hourly_rows():
    """Four samples inside 14:00-15:00 UTC on 2017-08-02, one before and one after"""
    return [
        (1501682100, 90.0, 900),   # 13:55
        (1501682700, 10.0, 100),   # 14:05
        (1501683600, 20.0, 200),   # 14:20
        (1501684500, 30.0, 300),   # 14:35
        (1501685400, 40.0, 400),   # 14:50
        (1501690200, 70.0, 700),   # 16:10
    ]


@pytest.fixture
def calendar_rows():
    """Samples spread over months and years"""
    return [
        (1484438400, 10.0, 1),   # 2017-01-15
        (1484870400, 30.0, 3),   # 2017-01-20
        (1486080000, 50.0, 5),   # 2017-02-03
        (1519862400, 70.0, 7),   # 2018-03-01
    ]


@pytest.fixture
def sparse_rows():
    """Samples that only recorded one of the two metrics"""
    return [
        (1501685060, 10.0, None),
        (1501685120, None, 40),
        (1501685180, 30.0, None),
    ]
