#!/usr/bin/env python3
"""
skymon API Schemas - Pydantic Models for Responses
"""

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class Metric(BaseModel):
    """A stored sample, or one bucket of a bucketed series."""
    timestamp: datetime
    cpu_load: Optional[float] = None
    # whole count for stored samples, mean for buckets
    concurrency: Optional[Union[int, float]] = None


class MetricAverage(BaseModel):
    """Average of the metrics over the requested time range."""
    model_config = ConfigDict(populate_by_name=True)

    start_time: datetime = Field(..., alias="start")
    end_time: datetime = Field(..., alias="end")
    cpu_load: Optional[float] = None
    concurrency: Optional[float] = None


class ErrorResponse(BaseModel):
    message: str


class HealthResponse(BaseModel):
    status: str
    store: str
