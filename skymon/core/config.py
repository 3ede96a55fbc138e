#!/usr/bin/env python3
"""
skymon Server Configuration Management

store: sqlite (default)
    samples live in the `collection` table of the SQLite file at `db_path`
store: csv
    samples are served read-only from the snapshot at `csv_path`
"""

import logging
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field

logger = logging.getLogger("skymon.server")


class ServerConfig(BaseModel):
    host: str = "0.0.0.0"
    port: int = 8080
    log_level: str = "INFO"
    # Backing store
    store: Literal["sqlite", "csv"] = "sqlite"
    db_path: str = "./skymon.db"
    collection: str = "metrics"
    csv_path: Optional[str] = None
    # Upper bound for a single store lookup, seconds
    query_timeout: float = Field(2.0, gt=0)


def load_config_from(path: Optional[str]) -> ServerConfig:
    """Load server configuration from YAML file; defaults when the file is absent."""
    if not path or not Path(path).exists():
        logger.info(f"config file not found ({path}), using defaults")
        return ServerConfig()

    with open(path, "r") as f:
        data = yaml.safe_load(f) or {}
    logger.info(f"loaded configuration from: {path}")
    return ServerConfig(**data)
