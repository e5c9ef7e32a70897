"""
Service layer for the dashboard.

This module contains the data provider, chart, export and orchestration services.
"""
from clinic_outcomes.services.dashboard_service import DashboardService
from clinic_outcomes.services.data_provider import MetricsDataProvider, default_snapshot
from clinic_outcomes.services.export_service import ExportResult, ExportService

__all__ = [
    "DashboardService",
    "ExportResult",
    "ExportService",
    "MetricsDataProvider",
    "default_snapshot",
]
