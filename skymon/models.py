#!/usr/bin/env python3
"""
skymon Database Models - Peewee over SQLite

- One row per sample: epoch-seconds timestamp, optional cpu_load, optional concurrency
- The table name is the configured "collection" and is set before the schema is provisioned
- Provisioning is idempotent: an existing table is left alone
"""

import logging
from pathlib import Path

import peewee
from peewee import Model, SqliteDatabase, IntegerField, FloatField

from .core.exceptions import StoreUnavailable

logger = logging.getLogger("skymon.models")

# Global DB handle (initialized in DatabaseManager.connect)
database = SqliteDatabase(None)

DEFAULT_COLLECTION = "metrics"


class BaseModel(Model):
    class Meta:
        database = database
        legacy_table_names = False


class MetricSample(BaseModel):
    """A single stored sample; a missing field means it was not recorded."""
    timestamp = IntegerField(index=True)
    cpu_load = FloatField(null=True)
    concurrency = IntegerField(null=True)

    class Meta:
        table_name = DEFAULT_COLLECTION


class DatabaseManager:
    """DB lifecycle + schema provisioning."""

    def __init__(self, db_path: str = "./skymon.db", collection: str = DEFAULT_COLLECTION) -> None:
        self.db_path = Path(db_path)
        self.collection = collection
        self.connected = False

    def connect(self) -> None:
        try:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            database.init(str(self.db_path), pragmas={
                "journal_mode": "wal",
                "synchronous": "normal",
                "cache_size": 10000,
            })
            database.connect(reuse_if_open=True)
            self.connected = True
            logger.info(f"database connected: {self.db_path}")
        except (OSError, peewee.PeeweeException) as e:
            raise StoreUnavailable(f"failed to open connection to db {self.db_path}: {e}", e) from e

    def ensure_schema(self) -> None:
        """Create the samples table if absent; an existing table counts as success."""
        if not self.connected:
            self.connect()

        MetricSample.bind(database, bind_refs=False, bind_backrefs=False)
        MetricSample._meta.set_table_name(self.collection)
        try:
            MetricSample.create_table(safe=False)
        except peewee.OperationalError as e:
            if "already exists" not in str(e):
                raise StoreUnavailable(f"failed to provision collection {self.collection}: {e}", e) from e
            logger.info(f"collection {self.collection} already exists, do nothing")

        if not database.table_exists(self.collection):
            raise StoreUnavailable(f"collection {self.collection} missing after provisioning")
        logger.info(f"collection ready: {self.collection}")

    def close(self) -> None:
        if self.connected:
            database.close()
            self.connected = False
            logger.info("database connection closed")
