"""
In-memory metric store over a pandas DataFrame.

Serves a read-only snapshot, typically exported to CSV with the columns
``timestamp`` (epoch seconds), ``cpu_load`` and ``concurrency``.
"""

import logging
import time
from datetime import datetime
from typing import Any, List, Sequence

import numpy as np
import pandas as pd

from ...core.exceptions import QueryTimeout, StoreUnavailable
from .model import CONCURRENCY_FIELD, METRIC_FIELDS
from .store import MetricStore, Row

logger = logging.getLogger("skymon.queries")

REQUIRED_COLUMNS = ("timestamp",) + METRIC_FIELDS

# pandas period aliases for each bucket unit
PERIODS = {
    "hour": "h",
    "day": "D",
    "month": "M",
    "year": "Y",
}


def _value(value: Any) -> Any:
    if pd.isna(value):
        return None
    return float(value)


class FrameMetricStore(MetricStore):
    """MetricStore over a DataFrame held in memory."""

    def __init__(self, frame: pd.DataFrame, query_timeout: float = 2.0) -> None:
        self.query_timeout = query_timeout
        self._check_columns(frame)
        self.frame = self._normalize(frame)

    @classmethod
    def from_csv(cls, path: str, query_timeout: float = 2.0) -> "FrameMetricStore":
        try:
            frame = pd.read_csv(path)
        except (OSError, pd.errors.ParserError, pd.errors.EmptyDataError) as e:
            raise StoreUnavailable(f"failed to load metrics snapshot {path}: {e}", e) from e
        logger.info(f"loaded {len(frame)} samples from {path}")
        return cls(frame, query_timeout=query_timeout)

    @staticmethod
    def _check_columns(frame: pd.DataFrame) -> None:
        missing = [c for c in REQUIRED_COLUMNS if c not in frame.columns]
        if missing:
            raise StoreUnavailable(f"metrics snapshot is missing columns: {', '.join(missing)}")

    @staticmethod
    def _normalize(frame: pd.DataFrame) -> pd.DataFrame:
        out = pd.DataFrame()
        if pd.api.types.is_numeric_dtype(frame["timestamp"]):
            out["timestamp"] = pd.to_datetime(frame["timestamp"], unit="s", utc=True)
        else:
            out["timestamp"] = pd.to_datetime(frame["timestamp"], utc=True)
        for name in METRIC_FIELDS:
            out[name] = pd.to_numeric(frame[name], errors="coerce").astype(np.float64)
        return out.sort_values("timestamp", kind="stable").reset_index(drop=True)

    def ensure_schema(self) -> None:
        self._check_columns(self.frame)

    def _select(self, start_at: datetime, end_at: datetime) -> pd.DataFrame:
        stamps = self.frame["timestamp"]
        return self.frame.loc[stamps.between(pd.Timestamp(start_at), pd.Timestamp(end_at))]

    def _check_budget(self, started: float) -> None:
        if time.monotonic() - started > self.query_timeout:
            raise QueryTimeout(self.query_timeout)

    @staticmethod
    def _rows(frame: pd.DataFrame, fields: Sequence[str]) -> List[Row]:
        return [
            {"timestamp": record["timestamp"].to_pydatetime(),
             **{name: _value(record[name]) for name in fields}}
            for record in frame.to_dict("records")
        ]

    def range_query(self, start_at: datetime, end_at: datetime, fields: Sequence[str]) -> List[Row]:
        started = time.monotonic()
        subset = self._select(start_at, end_at)
        rows = self._rows(subset, fields)
        for row in rows:
            # stored counts come back as whole numbers
            if row.get(CONCURRENCY_FIELD) is not None:
                row[CONCURRENCY_FIELD] = int(row[CONCURRENCY_FIELD])
        self._check_budget(started)
        return rows

    def bucketed_aggregate(
        self, start_at: datetime, end_at: datetime, unit: str, fields: Sequence[str]
    ) -> List[Row]:
        started = time.monotonic()
        subset = self._select(start_at, end_at)
        if subset.empty:
            return []

        naive = subset["timestamp"].dt.tz_convert(None)
        buckets = naive.dt.to_period(PERIODS[unit]).dt.start_time.dt.tz_localize("UTC")
        grouped = subset[list(fields)].groupby(buckets.rename("timestamp"), sort=True).mean()

        rows = self._rows(grouped.reset_index(), fields)
        self._check_budget(started)
        return rows

    def whole_range_aggregate(self, start_at: datetime, end_at: datetime, fields: Sequence[str]) -> List[Row]:
        started = time.monotonic()
        subset = self._select(start_at, end_at)
        if subset.empty:
            return []

        means = subset[list(fields)].mean()
        rows = [{name: _value(means[name]) for name in fields}]
        self._check_budget(started)
        return rows
