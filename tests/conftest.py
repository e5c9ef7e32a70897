"""
Shared pytest fixtures for the dashboard tests.

Key patterns:

1. Network Isolation: The data provider talks to an httpx.MockTransport that
   serves the bundled resource files, so no server is needed
2. DI Override: Use app.dependency_overrides to inject test dependencies
3. Service Injection: Services are created with test collaborators

Fixture Hierarchy:
    resource_transport → data_provider → lifecycle_manager → dashboard_service → test_app → client
"""
import json
from pathlib import Path

import httpx
import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from clinic_outcomes.core import dependencies as deps
from clinic_outcomes.core.exceptions import setup_exception_handlers
from clinic_outcomes.schemas import MetricsSnapshot
from clinic_outcomes.services.charts import ChartLifecycleManager, PlotlyBuilder
from clinic_outcomes.services.dashboard_service import DashboardService
from clinic_outcomes.services.data_provider import MetricsDataProvider
from clinic_outcomes.services.export_service import ExportService

RESOURCE_DIR = Path(__file__).resolve().parent.parent / "clinic_outcomes" / "resource"
TEST_BASE_URL = "http://test-server"


def load_resource(period: int) -> dict:
    """Read a bundled period results document."""
    return json.loads((RESOURCE_DIR / f"{period}day-results.json").read_text(encoding="utf-8"))


def serve_resources(request: httpx.Request) -> httpx.Response:
    """MockTransport handler answering /resource/<n>day-results.json from disk."""
    path = RESOURCE_DIR / Path(request.url.path).name
    if request.url.path.startswith("/resource/") and path.is_file():
        return httpx.Response(200, content=path.read_bytes(), headers={"content-type": "application/json"})
    return httpx.Response(404, json={"detail": "Not Found"})


@pytest.fixture
def snapshot() -> MetricsSnapshot:
    """The 30-day sample snapshot: 2/82/15 time in range, 72/23/5 GMI distribution."""
    return MetricsSnapshot.model_validate(load_resource(30))


@pytest.fixture
def resource_transport() -> httpx.MockTransport:
    return httpx.MockTransport(serve_resources)


@pytest.fixture
def data_provider(resource_transport) -> MetricsDataProvider:
    return MetricsDataProvider(base_url=TEST_BASE_URL, transport=resource_transport)


@pytest.fixture
def lifecycle_manager():
    """Lifecycle manager with no render delay; closed after the test."""
    manager = ChartLifecycleManager(builder=PlotlyBuilder())
    yield manager
    manager.close()


@pytest.fixture
def export_service() -> ExportService:
    return ExportService(scale=1.0, fallback_width=320, fallback_height=200)


@pytest.fixture
def dashboard_service(data_provider, lifecycle_manager, export_service) -> DashboardService:
    return DashboardService(
        data_provider=data_provider,
        lifecycle_manager=lifecycle_manager,
        export_service=export_service,
        default_period=30,
    )


@pytest.fixture
def test_app(data_provider, lifecycle_manager, export_service, dashboard_service):
    """
    Create a FastAPI test app with dependency overrides.

    Uses the real routers and registers the production exception handlers.
    """
    from clinic_outcomes.api.routers import dashboard_router, health_router

    app = FastAPI(title="Clinic Outcomes Test")
    setup_exception_handlers(app)

    app.dependency_overrides[deps.get_data_provider] = lambda: data_provider
    app.dependency_overrides[deps.get_lifecycle_manager] = lambda: lifecycle_manager
    app.dependency_overrides[deps.get_export_service] = lambda: export_service
    app.dependency_overrides[deps.get_dashboard_service] = lambda: dashboard_service

    app.include_router(health_router)
    app.include_router(dashboard_router)

    yield app

    app.dependency_overrides.clear()


@pytest.fixture
def client(test_app):
    """Create a test client for the API."""
    return TestClient(test_app)
