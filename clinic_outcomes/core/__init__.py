"""
Core module for application configuration, logging, and shared constants.

This module provides:
- Settings: Application configuration via pydantic-settings
- Exceptions: Domain-specific exception classes with HTTP status codes
- Logging: Structured JSON logging with request id propagation

Dependency functions live in clinic_outcomes.core.dependencies; they are not
re-exported here to avoid circular imports with the service layer.
"""
from clinic_outcomes.core.config import (
    ALL_SURFACES,
    API_HOST,
    API_PORT,
    API_RELOAD,
    SUPPORTED_PERIODS,
    Settings,
    settings,
)
from clinic_outcomes.core.exceptions import (
    ChartDestroyedError,
    ClinicOutcomesError,
    ExportError,
    LifecycleError,
    setup_exception_handlers,
)
from clinic_outcomes.core.logging_config import setup_logging

__all__ = [
    # Settings
    "settings",
    "Settings",
    "SUPPORTED_PERIODS",
    "ALL_SURFACES",
    "API_HOST",
    "API_PORT",
    "API_RELOAD",
    # Exceptions
    "ClinicOutcomesError",
    "LifecycleError",
    "ChartDestroyedError",
    "ExportError",
    "setup_exception_handlers",
    # Logging
    "setup_logging",
]
