"""
Pydantic schemas for reporting-period metrics.

The static period resources are camelCase JSON documents:

    {
      "patientCount": 120,
      "reportingPeriod": "30 days",
      "dateRange": "01/01/2024 - 01/31/2024",
      "lastUpdated": "01/06/2024, 3:00 PM",
      "timeInRange": {"inRange": 82, "aboveRange": 15, "belowRange": 2},
      "gmi": {"average": 6.7, "distribution": {"optimal": 72, "suboptimal": 23, "poor": 5}}
    }

Models accept that shape, expose snake_case attributes in Python, and are
frozen: a snapshot is never mutated once handed to the charts.
"""
from enum import IntEnum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class ReportingPeriod(IntEnum):
    """Reporting periods with a published results resource."""

    THIRTY_DAYS = 30
    SIXTY_DAYS = 60
    NINETY_DAYS = 90

    @property
    def label(self) -> str:
        return period_label(self.value)


def period_label(period: int) -> str:
    """Display string for a period, e.g. ``"60 days"``."""
    return f"{period} days"


class _SnapshotModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )


class TimeInRange(_SnapshotModel):
    """Percentage of readings below, within and above the target band."""

    below_range: float = Field(0, ge=0, le=100, description="Percent below range", examples=[2])
    in_range: float = Field(0, ge=0, le=100, description="Percent in range", examples=[82])
    above_range: float = Field(0, ge=0, le=100, description="Percent above range", examples=[15])


class GmiDistribution(_SnapshotModel):
    """Share of patients per GMI band (≤7%, 7-8%, ≥8%)."""

    optimal: float = Field(0, ge=0, le=100, examples=[72])
    suboptimal: float = Field(0, ge=0, le=100, examples=[23])
    poor: float = Field(0, ge=0, le=100, examples=[5])


class Gmi(_SnapshotModel):
    """Glucose Management Indicator summary."""

    average: float = Field(0, ge=0, description="Clinic-wide average GMI (%)", examples=[6.7])
    distribution: GmiDistribution = Field(default_factory=GmiDistribution)


class MetricsSnapshot(_SnapshotModel):
    """One reporting period's results, as rendered by every chart."""

    patient_count: int = Field(0, ge=0, description="Number of patients in the period", examples=[120])
    reporting_period: str = Field(..., description="Period display string", examples=["30 days"])
    date_range: str = Field("", description="Date range display string", examples=["01/01/2024 - 01/31/2024"])
    last_updated: str = Field("", description="Last update display string", examples=["01/06/2024, 3:00 PM"])
    time_in_range: TimeInRange = Field(default_factory=TimeInRange)
    gmi: Gmi = Field(default_factory=Gmi)
