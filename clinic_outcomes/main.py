"""
FastAPI application entry point for the Clinic Outcomes dashboard.

This module configures and creates the FastAPI application with:
- Structured JSON Logging: Request/response logging with request ids
- Dependency Injection: Services injected via Depends()
- Exception Handling: Consistent error responses via setup_exception_handlers()
- Static Resources: Bundled period results served under /resource
- Lifespan Management: Live charts are destroyed on shutdown

Architecture Overview:
    ┌─────────────────────────────────────────────────────────────┐
    │                     FastAPI Application                      │
    ├─────────────────────────────────────────────────────────────┤
    │  Middleware Stack                                           │
    │    ├── LoggingMiddleware  - Request logging                 │
    │    └── CORSMiddleware     - Cross-origin support            │
    ├─────────────────────────────────────────────────────────────┤
    │  Routers (api/routers/)                                     │
    │    ├── health.py     - /health                              │
    │    └── dashboard.py  - page, period, labels, export         │
    ├─────────────────────────────────────────────────────────────┤
    │  Services (services/)     ← Injected via Depends()          │
    │    ├── DashboardService      - Orchestration                │
    │    ├── MetricsDataProvider   - Period results fetch         │
    │    ├── ChartLifecycleManager - Live chart ownership         │
    │    └── ExportService         - PNG capture                  │
    └─────────────────────────────────────────────────────────────┘
"""
import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
import uvicorn

from clinic_outcomes import __version__
from clinic_outcomes.api.routers import dashboard_router, health_router
from clinic_outcomes.core.config import API_HOST, API_PORT, API_RELOAD, settings
from clinic_outcomes.core.dependencies import get_lifecycle_manager
from clinic_outcomes.core.exceptions import setup_exception_handlers
from clinic_outcomes.core.logging_config import setup_logging
from clinic_outcomes.core.middleware import LoggingMiddleware

RESOURCE_DIR = Path(__file__).parent / "resource"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Lifespan context manager for FastAPI application.

    Startup:
        - Configures structured JSON logging
        - Logs the dashboard configuration

    Shutdown:
        - Destroys every live chart
    """
    setup_logging(level="INFO", json_format=True)

    logger = logging.getLogger(__name__)
    logger.info(
        "Starting Clinic Outcomes dashboard...",
        extra={
            "data_base_url": settings.clinic_data_base_url,
            "default_period": settings.clinic_default_period,
            "surfaces": settings.surface_list,
        }
    )

    yield

    get_lifecycle_manager().close()
    logger.info("Clinic Outcomes dashboard shutting down...")


app = FastAPI(
    title="Clinic Outcomes",
    description="Population glucose outcomes dashboard: Time in Range and GMI distribution "
                "for 30, 60 and 90 day reporting periods.",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================
setup_exception_handlers(app)

# =============================================================================
# MIDDLEWARE
# =============================================================================
# Executed in reverse order of registration.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware)

# =============================================================================
# ROUTERS
# =============================================================================
app.include_router(health_router)
app.include_router(dashboard_router)
app.mount("/resource", StaticFiles(directory=RESOURCE_DIR), name="resource")


if __name__ == "__main__":
    uvicorn.run(
        "clinic_outcomes.main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_RELOAD
    )
