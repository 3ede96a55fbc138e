#!/usr/bin/env python3
"""
skymon server entry point

Loads the YAML config, applies command line overrides and runs the API with uvicorn.
"""

import argparse
import logging

import uvicorn

from .core.config import load_config_from
from .core.server import create_app


def main():
    """Main entry point for skymon server."""
    parser = argparse.ArgumentParser(description="skymon metrics API")
    parser.add_argument("-c", "--config", help="Path to YAML config", default="config.yaml")
    parser.add_argument("--db-path", help="SQLite file holding the samples")
    parser.add_argument("--collection", help="Table holding the samples")
    parser.add_argument("--csv", dest="csv_path", help="Serve a read-only CSV snapshot instead of SQLite")
    args = parser.parse_args()

    config = load_config_from(args.config)
    overrides = {k: v for k, v in vars(args).items() if k != "config" and v is not None}
    if args.csv_path:
        overrides["store"] = "csv"
    if overrides:
        config = config.model_copy(update=overrides)

    logging.basicConfig(
        level=getattr(logging, config.log_level.upper(), logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = create_app(config)
    uvicorn.run(app, host=config.host, port=config.port, reload=False, access_log=False)


if __name__ == "__main__":
    main()
