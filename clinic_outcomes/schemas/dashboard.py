"""
Pydantic schemas for dashboard API requests and responses.
"""
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from clinic_outcomes.schemas.metrics import MetricsSnapshot


class PeriodSelection(BaseModel):
    """Request body for switching the displayed reporting period."""

    period: int = Field(..., description="Reporting period in days (30, 60 or 90)", examples=[60])


class PointResponse(BaseModel):
    x: float
    y: float


class LabelSpecResponse(BaseModel):
    """One computed overlay label."""

    text: str = Field(..., examples=["82%"])
    anchor: PointResponse
    connector: List[PointResponse] = Field(default_factory=list)
    align: str = Field("center", examples=["left"])
    mask_radius: Optional[float] = None


class DashboardStateResponse(BaseModel):
    """Lifecycle state after a period switch."""

    state: str = Field(..., description="Lifecycle state", examples=["live"])
    period: int = Field(..., examples=[60])
    live_charts: List[str] = Field(default_factory=list, description="Surface ids with a live chart")
    snapshot: MetricsSnapshot


class DashboardLabelsResponse(BaseModel):
    """Overlay labels of every live chart, keyed by surface id."""

    period: Optional[int] = None
    labels: Dict[str, List[LabelSpecResponse]] = Field(default_factory=dict)
