"""
API endpoint tests using FastAPI TestClient with dependency overrides.
"""
import asyncio
import re
import time
from io import BytesIO
from unittest.mock import patch

import httpx
import plotly.graph_objects as go
import pytest
from PIL import Image

from clinic_outcomes.services.charts import SURFACES


def _png(width: int, height: int) -> bytes:
    buffer = BytesIO()
    with Image.new("RGB", (width, height), "#8bc34a") as image:
        image.save(buffer, format="PNG")
    return buffer.getvalue()


SLOW_PNG = _png(40, 30)


# =============================================================================
# HEALTH
# =============================================================================

class TestHealthEndpoint:

    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["version"] == "1.0.0"
        assert data["lifecycle_state"] == "empty"
        assert data["live_charts"] == 0
        assert re.match(r"\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}Z", data["timestamp"])

    def test_health_reports_live_charts(self, client):
        client.post("/api/v1/dashboard/period", json={"period": 30})

        data = client.get("/health").json()

        assert data["lifecycle_state"] == "live"
        assert data["live_charts"] == len(SURFACES)


# =============================================================================
# METRICS
# =============================================================================

class TestMetricsEndpoint:

    def test_get_metrics_camel_case(self, client):
        response = client.get("/api/v1/metrics/30")

        assert response.status_code == 200
        data = response.json()
        assert data["patientCount"] == 120
        assert data["reportingPeriod"] == "30 days"
        assert data["timeInRange"]["inRange"] == 82
        assert data["gmi"]["distribution"]["optimal"] == 72

    def test_unknown_period_returns_zero_snapshot(self, client):
        response = client.get("/api/v1/metrics/45")

        assert response.status_code == 200
        data = response.json()
        assert data["patientCount"] == 0
        assert data["reportingPeriod"] == "45 days"
        assert data["dateRange"] == "No data available"

    def test_non_integer_period_rejected(self, client):
        response = client.get("/api/v1/metrics/thirty")

        assert response.status_code == 422


# =============================================================================
# DASHBOARD
# =============================================================================

class TestDashboardEndpoints:

    def test_page_loads_default_period(self, client):
        response = client.get("/")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        for surface_id in SURFACES:
            assert f'id="{surface_id}"' in response.text
        assert "30 days" in response.text

    def test_page_period_query(self, client):
        response = client.get("/", params={"period": 90, "tooltip": "true"})

        assert response.status_code == 200
        assert "90 days" in response.text
        assert 'class="tooltip"' in response.text

    def test_select_period(self, client):
        response = client.post("/api/v1/dashboard/period", json={"period": 60})

        assert response.status_code == 200
        data = response.json()
        assert data["state"] == "live"
        assert data["period"] == 60
        assert data["live_charts"] == list(SURFACES)
        assert data["snapshot"]["reportingPeriod"] == "60 days"

    def test_select_period_missing_body(self, client):
        response = client.post("/api/v1/dashboard/period", json={})

        assert response.status_code == 422

    def test_select_period_after_teardown(self, client, lifecycle_manager):
        lifecycle_manager.close()

        response = client.post("/api/v1/dashboard/period", json={"period": 30})

        assert response.status_code == 409
        assert "destroyed" in response.json()["detail"]

    def test_labels(self, client):
        client.post("/api/v1/dashboard/period", json={"period": 30})

        response = client.get("/api/v1/dashboard/labels")

        assert response.status_code == 200
        data = response.json()
        assert data["period"] == 30
        pie = data["labels"]["gmiPieChart"]
        assert [label["text"] for label in pie] == ["72%", "23%", "5%"]
        assert len(pie[0]["connector"]) == 3
        assert pie[0]["mask_radius"] > 0
        assert data["labels"]["timeInRangeHorizontal"] == []

    def test_labels_load_default_period(self, client):
        data = client.get("/api/v1/dashboard/labels").json()

        assert data["period"] == 30
        assert set(data["labels"]) == set(SURFACES)

    def test_export_fallback(self, client):
        with patch.object(go.Figure, "to_image", side_effect=RuntimeError("no renderer")):
            response = client.get("/api/v1/dashboard/export")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.headers["x-export-method"] == "fallback"
        assert re.match(
            r'attachment; filename="clinic-outcomes-\d{4}-\d{2}-\d{2}T\d{2}-\d{2}-\d{2}\.png"',
            response.headers["content-disposition"],
        )
        assert response.content.startswith(b"\x89PNG")

    def test_export_failure_returns_503(self, client, export_service):
        with patch.object(go.Figure, "to_image", side_effect=RuntimeError("no renderer")), \
                patch.object(export_service, "_capture_fallback", side_effect=OSError("no display")):
            response = client.get("/api/v1/dashboard/export")

        assert response.status_code == 503
        assert response.json()["detail"] == "Screenshot capture is not supported on this server"


class TestExportConcurrency:

    @pytest.mark.asyncio
    async def test_event_loop_keeps_ticking_during_export(self, test_app):
        """A slow chart rasterization must not freeze other requests."""
        def slow_to_image(*args, **kwargs):
            time.sleep(0.15)
            return SLOW_PNG

        async def ticker(stop: asyncio.Event, gaps: list):
            loop = asyncio.get_running_loop()
            last = loop.time()
            while not stop.is_set():
                await asyncio.sleep(0.05)
                now = loop.time()
                gaps.append(now - last)
                last = now

        transport = httpx.ASGITransport(app=test_app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
            await client.post("/api/v1/dashboard/period", json={"period": 30})

            stop, gaps = asyncio.Event(), []
            ticking = asyncio.create_task(ticker(stop, gaps))
            with patch.object(go.Figure, "to_image", side_effect=slow_to_image):
                response = await client.get("/api/v1/dashboard/export")
            stop.set()
            await ticking

        assert response.status_code == 200
        assert response.headers["x-export-method"] == "kaleido"
        assert max(gaps) < 0.3
