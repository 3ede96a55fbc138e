"""Unit tests for the metrics HTTP routes

Runs the FastAPI app through TestClient, over an in-memory DataFrame store,
a SQLite file, or a mocked store when an error path is under test.
"""
from datetime import datetime
from unittest.mock import Mock

import pandas as pd
import peewee
import pytest
from fastapi.testclient import TestClient

from skymon.api.queries import FrameMetricStore, MetricStore
from skymon.core.config import ServerConfig
from skymon.core.exceptions import InconsistentAggregate, QueryTimeout
from skymon.core.server import create_app
from skymon.models import MetricSample


def parse_ts(value):
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


@pytest.fixture
def client(seed_rows):
    frame = pd.DataFrame(seed_rows, columns=["timestamp", "cpu_load", "concurrency"])
    app = create_app(ServerConfig(store="csv"), store=FrameMetricStore(frame))
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def failing_client():
    """App over a mocked store; tests set side effects on app.state.store"""
    store = Mock(spec=MetricStore)
    app = create_app(ServerConfig(), store=store)
    with TestClient(app) as test_client:
        yield test_client, store


RANGE = {"start": "1501685060", "end": "1501685360"}


class TestTimeline:
    """Test GET /metrics and /metrics/{type}"""

    def test_all_metrics(self, client):
        resp = client.get("/metrics", params=RANGE)

        assert resp.status_code == 200
        body = resp.json()
        assert len(body) == 6
        assert body[0]["cpu_load"] == 48.0
        assert body[0]["concurrency"] == 365984
        assert parse_ts(body[0]["timestamp"]).timestamp() == 1501685060

    def test_cpu_load_rows_omit_concurrency(self, client):
        resp = client.get("/metrics/cpu_load", params={**RANGE, "frequency": "minutes"})

        assert resp.status_code == 200
        assert all(set(row) == {"timestamp", "cpu_load"} for row in resp.json())

    def test_concurrency_rows_omit_cpu_load(self, client):
        resp = client.get("/metrics/concurrency", params=RANGE)

        assert resp.status_code == 200
        assert all(set(row) == {"timestamp", "concurrency"} for row in resp.json())

    def test_timeline_is_ordered(self, client):
        resp = client.get("/metrics", params=RANGE)

        stamps = [parse_ts(row["timestamp"]) for row in resp.json()]
        assert stamps == sorted(stamps)

    def test_hourly_bucket(self, client):
        resp = client.get("/metrics/cpu_load", params={**RANGE, "frequency": "hours"})

        assert resp.status_code == 200
        body = resp.json()
        assert len(body) == 1
        assert body[0]["cpu_load"] == pytest.approx(320.0 / 6)
        assert parse_ts(body[0]["timestamp"]).timestamp() == 1501682400

    def test_no_data_is_not_found(self, client):
        resp = client.get("/metrics", params={"start": "0", "end": "60"})

        assert resp.status_code == 404
        assert resp.json()["message"].startswith("data for specified filter does not exist")


class TestAverage:
    """Test GET /metrics/average and /metrics/{type}/average"""

    def test_average_of_all_metrics(self, client):
        resp = client.get("/metrics/average", params={"start": "1501685000", "end": "1501690000"})

        assert resp.status_code == 200
        body = resp.json()
        assert parse_ts(body["start"]).timestamp() == 1501685000
        assert parse_ts(body["end"]).timestamp() == 1501690000
        assert body["cpu_load"] == pytest.approx(320.0 / 6)
        assert body["concurrency"] == pytest.approx(1014425.0 / 6)

    def test_average_of_one_type_omits_the_other(self, client):
        resp = client.get("/metrics/concurrency/average", params=RANGE)

        assert resp.status_code == 200
        assert set(resp.json()) == {"start", "end", "concurrency"}

    def test_empty_range_is_not_found(self, client):
        resp = client.get("/metrics/cpu_load/average", params={"start": "0", "end": "60"})

        assert resp.status_code == 404


class TestInputErrors:
    """Test caller-input errors map to 400 and never reach the store"""

    def test_missing_range(self, failing_client):
        client, store = failing_client

        resp = client.get("/metrics", params={"start": "1501685060"})

        assert resp.status_code == 400
        assert resp.json() == {"message": "timerange wasn't specified"}
        store.range_query.assert_not_called()

    def test_invalid_timestamp(self, failing_client):
        client, store = failing_client

        resp = client.get("/metrics/average", params={"start": "now", "end": "1501685360"})

        assert resp.status_code == 400
        assert "received now" in resp.json()["message"]
        store.whole_range_aggregate.assert_not_called()

    def test_invalid_frequency(self, failing_client):
        client, store = failing_client

        resp = client.get("/metrics", params={**RANGE, "frequency": "weeks"})

        assert resp.status_code == 400
        assert resp.json() == {"message": "frequency value is not valid; received weeks"}
        store.range_query.assert_not_called()
        store.bucketed_aggregate.assert_not_called()

    def test_invalid_metric_type(self, failing_client):
        client, store = failing_client

        resp = client.get("/metrics/memory", params=RANGE)

        assert resp.status_code == 400
        assert "memory" in resp.json()["message"]


class TestServerErrors:
    """Test store, timeout and invariant errors map to 500"""

    def test_inconsistent_aggregate(self, failing_client):
        client, store = failing_client
        store.whole_range_aggregate.side_effect = InconsistentAggregate(2)

        resp = client.get("/metrics/average", params=RANGE)

        assert resp.status_code == 500
        assert "only one aggregation is expected" in resp.json()["message"]

    def test_query_timeout(self, failing_client):
        client, store = failing_client
        store.bucketed_aggregate.side_effect = QueryTimeout(2.0)

        resp = client.get("/metrics", params={**RANGE, "frequency": "days"})

        assert resp.status_code == 500
        assert "time budget" in resp.json()["message"]

    def test_store_error(self, failing_client):
        client, store = failing_client
        store.range_query.side_effect = peewee.OperationalError("disk I/O error")

        resp = client.get("/metrics", params=RANGE)

        assert resp.status_code == 500
        assert "disk I/O error" in resp.json()["message"]


class TestSqliteApp:
    """Test the app end to end over a SQLite file"""

    def test_serves_samples_from_sqlite(self, tmp_path, seed_rows):
        config = ServerConfig(db_path=str(tmp_path / "skymon.db"), collection="samples")
        app = create_app(config)

        with TestClient(app) as client:
            MetricSample.insert_many([
                {"timestamp": t, "cpu_load": c, "concurrency": n} for t, c, n in seed_rows
            ]).execute()

            health = client.get("/health")
            series = client.get("/metrics/cpu_load", params=RANGE)
            average = client.get("/metrics/average", params=RANGE)

        assert health.json() == {"status": "ok", "store": "sqlite"}
        assert series.status_code == 200
        assert len(series.json()) == 6
        assert average.json()["cpu_load"] == pytest.approx(320.0 / 6)
