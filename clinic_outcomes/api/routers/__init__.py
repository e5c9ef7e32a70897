"""
API routers module.

This module contains all API route definitions organized by domain.
"""
from clinic_outcomes.api.routers.dashboard import router as dashboard_router
from clinic_outcomes.api.routers.health import router as health_router

__all__ = ["dashboard_router", "health_router"]
