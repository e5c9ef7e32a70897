"""
Shared exception classes and error handling utilities for the dashboard service.

This module provides:
- Custom exception hierarchy for domain-specific errors
- Consistent error response formatting
- Exception handlers for FastAPI integration

Data-fetch failures never appear here: the data provider recovers them with a
zero-filled snapshot. Only lifecycle misuse and a total export failure surface
as exceptions.

Usage:
    from clinic_outcomes.core.exceptions import ExportError

    raise ExportError(reason="kaleido unavailable")

    # In FastAPI - register handlers via setup_exception_handlers(app)
"""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


# =============================================================================
# BASE EXCEPTION CLASS
# =============================================================================

class ClinicOutcomesError(Exception):
    """
    Base exception for all dashboard domain errors.

    Provides consistent error structure with status code and detail message.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    detail: str = "An unexpected error occurred"

    def __init__(
        self,
        detail: Optional[str] = None,
        status_code: Optional[int] = None,
        **kwargs: Any
    ):
        """
        Initialize the exception.

        Args:
            detail: Human-readable error message. Uses class default if not provided.
            status_code: HTTP status code. Uses class default if not provided.
            **kwargs: Additional context to include in error response.
        """
        self.detail = detail or self.__class__.detail
        self.status_code = status_code or self.__class__.status_code
        self.context = kwargs
        super().__init__(self.detail)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        result: Dict[str, Any] = {"detail": self.detail}
        if self.context:
            result["context"] = self.context
        return result


# =============================================================================
# CHART LIFECYCLE EXCEPTIONS
# =============================================================================

class LifecycleError(ClinicOutcomesError):
    """Raised when charts are requested from a manager that was torn down."""

    status_code = status.HTTP_409_CONFLICT
    detail = "Dashboard charts have been torn down"

    def __init__(self, state: Optional[str] = None, **kwargs: Any):
        detail = f"Cannot render charts in state '{state}'" if state else self.detail
        super().__init__(detail=detail, state=state, **kwargs)


class ChartDestroyedError(ClinicOutcomesError):
    """Raised when a released chart handle is used."""

    status_code = status.HTTP_410_GONE
    detail = "Chart has been destroyed"

    def __init__(self, surface_id: Optional[str] = None, **kwargs: Any):
        detail = f"Chart on surface '{surface_id}' has been destroyed" if surface_id else self.detail
        super().__init__(detail=detail, surface_id=surface_id, **kwargs)


# =============================================================================
# EXPORT EXCEPTIONS
# =============================================================================

class ExportError(ClinicOutcomesError):
    """Raised when both the primary and the fallback capture methods fail."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    detail = "Screenshot capture is not supported on this server"


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

async def clinic_outcomes_exception_handler(
    request: Request,
    exc: ClinicOutcomesError
) -> JSONResponse:
    """Log a domain error and return its JSON representation."""
    logger.warning(
        f"ClinicOutcomesError: {exc.detail}",
        extra={
            "status_code": exc.status_code,
            "path": request.url.path,
            "method": request.method,
            "context": exc.context
        }
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict()
    )


def setup_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers with the FastAPI application.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(ClinicOutcomesError, clinic_outcomes_exception_handler)
