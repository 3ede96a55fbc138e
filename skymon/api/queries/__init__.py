"""
Metric Query Modules

Organized by concern:
- model.py: Query value, MetricType and Frequency enums
- filters.py: Request parameters -> Query
- store.py: Backing store interface
- sqlite_store.py: peewee/SQLite store
- frame_store.py: pandas snapshot store
- engine.py: MetricQueryEngine (series and averages)
"""

from .model import Frequency, MetricType, Query, METRIC_FIELDS, BUCKET_UNITS
from .filters import build_query
from .store import MetricStore
from .sqlite_store import SqliteMetricStore
from .frame_store import FrameMetricStore
from .engine import MetricQueryEngine

__all__ = [
    # Query model
    'Frequency',
    'MetricType',
    'Query',
    'METRIC_FIELDS',
    'BUCKET_UNITS',

    # Request parsing
    'build_query',

    # Stores
    'MetricStore',
    'SqliteMetricStore',
    'FrameMetricStore',

    # Engine
    'MetricQueryEngine',
]
