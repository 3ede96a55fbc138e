"""skymon - time-series metrics API (CPU load, concurrency)."""

__version__ = "0.1.0"
