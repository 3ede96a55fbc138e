#!/usr/bin/env python3
"""
Metrics Routes - Time Series and Averages

accepted query parameters:
* start, end - epoch seconds (required)
* frequency - seconds, minutes, hours, days, months or years
path segment {metric_type}: cpu_load or concurrency; omitted for all metrics
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Query as QueryParam
from fastapi.responses import JSONResponse

from ..queries import MetricQueryEngine, build_query
from ..schemas import ErrorResponse, Metric, MetricAverage

logger = logging.getLogger("skymon.server")

ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def _not_found(query) -> JSONResponse:
    return JSONResponse(
        status_code=404,
        content={"message": f"data for specified filter does not exist; filter: {query}"},
    )


def create_metrics_routes(engine: MetricQueryEngine) -> APIRouter:
    """Create metrics query routes."""
    router = APIRouter()

    def timeline(metric_type, start, end, frequency):
        query = build_query(start, end, frequency, metric_type)
        series = engine.get_series(query)
        if not series:
            return _not_found(query)
        return series

    def average(metric_type, start, end, frequency):
        query = build_query(start, end, frequency, metric_type)
        data = engine.get_average(query)
        if data is None:
            return _not_found(query)
        return data

    # /metrics/average must be registered before /metrics/{metric_type}
    @router.get("/metrics", response_model=List[Metric],
                response_model_exclude_none=True, responses=ERROR_RESPONSES)
    def get_timeline(
        start: Optional[str] = QueryParam(None),
        end: Optional[str] = QueryParam(None),
        frequency: Optional[str] = QueryParam(None),
    ):
        """Series of all metrics for the time range."""
        return timeline(None, start, end, frequency)

    @router.get("/metrics/average", response_model=MetricAverage,
                response_model_exclude_none=True, responses=ERROR_RESPONSES)
    def get_average(
        start: Optional[str] = QueryParam(None),
        end: Optional[str] = QueryParam(None),
        frequency: Optional[str] = QueryParam(None),
    ):
        """Average of all metrics for the time range."""
        return average(None, start, end, frequency)

    @router.get("/metrics/{metric_type}", response_model=List[Metric],
                response_model_exclude_none=True, responses=ERROR_RESPONSES)
    def get_type_timeline(
        metric_type: str,
        start: Optional[str] = QueryParam(None),
        end: Optional[str] = QueryParam(None),
        frequency: Optional[str] = QueryParam(None),
    ):
        """Series of one metric type for the time range."""
        return timeline(metric_type, start, end, frequency)

    @router.get("/metrics/{metric_type}/average", response_model=MetricAverage,
                response_model_exclude_none=True, responses=ERROR_RESPONSES)
    def get_type_average(
        metric_type: str,
        start: Optional[str] = QueryParam(None),
        end: Optional[str] = QueryParam(None),
        frequency: Optional[str] = QueryParam(None),
    ):
        """Average of one metric type for the time range."""
        return average(metric_type, start, end, frequency)

    return router
