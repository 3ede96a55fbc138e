"""
SQLite-backed metric store (peewee).

Every lookup runs under a time budget enforced through the sqlite3 progress
handler, so a runaway aggregation is interrupted instead of blocking a worker.
"""

import logging
import sqlite3
import time
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import List, Optional, Sequence

import peewee
from peewee import fn

from ...core.exceptions import QueryTimeout
from ...models import DatabaseManager, MetricSample
from .store import MetricStore, Row

logger = logging.getLogger("skymon.queries")

# strftime patterns truncating a unixepoch timestamp to the start of its bucket (UTC)
BUCKET_FORMATS = {
    "hour": "%Y-%m-%d %H:00:00",
    "day": "%Y-%m-%d 00:00:00",
    "month": "%Y-%m-01 00:00:00",
    "year": "%Y-01-01 00:00:00",
}


def _epoch(value: datetime) -> int:
    return int(value.timestamp())


def _utc(seconds: int) -> datetime:
    return datetime.fromtimestamp(seconds, tz=timezone.utc)


class SqliteMetricStore(MetricStore):
    """MetricStore over the MetricSample table."""

    def __init__(
        self,
        manager: Optional[DatabaseManager] = None,
        query_timeout: float = 2.0,
        progress_steps: int = 1000,
    ) -> None:
        self.manager = manager
        self.query_timeout = query_timeout
        self.progress_steps = progress_steps

    def ensure_schema(self) -> None:
        if self.manager is not None:
            self.manager.ensure_schema()

    def close(self) -> None:
        if self.manager is not None:
            self.manager.close()

    @contextmanager
    def _time_budget(self):
        conn = MetricSample._meta.database.connection()
        deadline = time.monotonic() + self.query_timeout
        conn.set_progress_handler(lambda: int(time.monotonic() > deadline), self.progress_steps)
        try:
            yield
        except (peewee.OperationalError, sqlite3.OperationalError) as e:
            if "interrupted" in str(e) and time.monotonic() > deadline:
                raise QueryTimeout(self.query_timeout) from e
            raise
        finally:
            conn.set_progress_handler(None, self.progress_steps)

    @staticmethod
    def _in_range(start_at: datetime, end_at: datetime):
        return MetricSample.timestamp.between(_epoch(start_at), _epoch(end_at))

    @staticmethod
    def _bucket(unit: str):
        fmt = BUCKET_FORMATS[unit]
        truncated = fn.strftime(fmt, MetricSample.timestamp, "unixepoch")
        return fn.strftime("%s", truncated).cast("INTEGER")

    def range_query(self, start_at: datetime, end_at: datetime, fields: Sequence[str]) -> List[Row]:
        columns = [getattr(MetricSample, name) for name in fields]
        query = (MetricSample
                 .select(MetricSample.timestamp, *columns)
                 .where(self._in_range(start_at, end_at))
                 .order_by(MetricSample.timestamp, MetricSample.id)
                 .dicts())

        with self._time_budget():
            rows = list(query)

        for row in rows:
            row["timestamp"] = _utc(row["timestamp"])
        return rows

    def bucketed_aggregate(
        self, start_at: datetime, end_at: datetime, unit: str, fields: Sequence[str]
    ) -> List[Row]:
        bucket = self._bucket(unit)
        averages = [fn.AVG(getattr(MetricSample, name)).alias(name) for name in fields]
        query = (MetricSample
                 .select(bucket.alias("bucket"), *averages)
                 .where(self._in_range(start_at, end_at))
                 .group_by(bucket)
                 .order_by(bucket)
                 .dicts())

        with self._time_budget():
            rows = list(query)

        return [
            {"timestamp": _utc(row.pop("bucket")), **row}
            for row in rows
        ]

    def whole_range_aggregate(self, start_at: datetime, end_at: datetime, fields: Sequence[str]) -> List[Row]:
        averages = [fn.AVG(getattr(MetricSample, name)).alias(name) for name in fields]
        query = (MetricSample
                 .select(fn.COUNT(MetricSample.id).alias("samples"), *averages)
                 .where(self._in_range(start_at, end_at))
                 .dicts())

        with self._time_budget():
            rows = list(query)

        # an ungrouped aggregate always yields one row; an empty range means no group at all
        return [
            {name: row[name] for name in fields}
            for row in rows if row["samples"]
        ]
