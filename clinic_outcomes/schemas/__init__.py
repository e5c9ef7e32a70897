"""
Pydantic schemas for API request/response validation.

This module contains all Pydantic models used at API boundaries.
"""
from clinic_outcomes.schemas.metrics import (
    Gmi,
    GmiDistribution,
    MetricsSnapshot,
    ReportingPeriod,
    TimeInRange,
    period_label,
)
from clinic_outcomes.schemas.dashboard import (
    DashboardLabelsResponse,
    DashboardStateResponse,
    LabelSpecResponse,
    PeriodSelection,
    PointResponse,
)

__all__ = [
    # Metrics schemas
    "Gmi",
    "GmiDistribution",
    "MetricsSnapshot",
    "ReportingPeriod",
    "TimeInRange",
    "period_label",
    # Dashboard schemas
    "DashboardLabelsResponse",
    "DashboardStateResponse",
    "LabelSpecResponse",
    "PeriodSelection",
    "PointResponse",
]
