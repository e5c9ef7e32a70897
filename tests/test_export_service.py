"""
Tests for ExportService.

Kaleido is patched out: figure rasterization is replaced by small Pillow
images so the tests do not need a headless browser.
"""
from datetime import datetime, timedelta, timezone
from io import BytesIO
from unittest.mock import patch

import plotly.graph_objects as go
import pytest
from PIL import Image

from clinic_outcomes.core.exceptions import ExportError
from clinic_outcomes.services.export_service import ExportService, build_export_filename

PNG_MAGIC = b"\x89PNG\r\n\x1a\n"
CAPTURE_TIME = datetime(2024, 1, 6, 15, 0, 0, 123000, tzinfo=timezone.utc)


def png_bytes(width: int, height: int, color: str = "#f44336") -> bytes:
    buffer = BytesIO()
    with Image.new("RGB", (width, height), color) as image:
        image.save(buffer, format="PNG")
    return buffer.getvalue()


def open_png(content: bytes) -> Image.Image:
    assert content.startswith(PNG_MAGIC)
    return Image.open(BytesIO(content))


class TestExportFilename:

    def test_utc_timestamp_without_fraction(self):
        assert build_export_filename(CAPTURE_TIME) == "clinic-outcomes-2024-01-06T15-00-00.png"

    def test_converted_to_utc(self):
        moment = datetime(2024, 1, 6, 10, 0, 0, tzinfo=timezone(timedelta(hours=-5)))

        assert build_export_filename(moment) == "clinic-outcomes-2024-01-06T15-00-00.png"

    def test_naive_time_taken_as_utc(self):
        assert build_export_filename(datetime(2024, 1, 6, 15, 0, 0)) == "clinic-outcomes-2024-01-06T15-00-00.png"

    def test_no_colons_or_dots_in_stamp(self):
        name = build_export_filename(CAPTURE_TIME)
        stem = name[:-len(".png")]

        assert ":" not in stem and "." not in stem


class TestCapture:

    def test_charts_are_stacked_on_one_page(self):
        service = ExportService(scale=1.0)
        figures = [go.Figure(), go.Figure()]

        with patch.object(go.Figure, "to_image", return_value=png_bytes(100, 50)) as mock_to_image:
            result = service.capture(figures, now=CAPTURE_TIME)

        assert mock_to_image.call_count == 2
        assert result.method == "kaleido"
        assert result.media_type == "image/png"
        assert result.filename == "clinic-outcomes-2024-01-06T15-00-00.png"
        with open_png(result.content) as page:
            assert page.size == (100 + 2 * 20, 2 * 50 + 16 + 2 * 20)

    def test_scale_is_passed_to_renderer(self):
        service = ExportService(scale=2.0)

        with patch.object(go.Figure, "to_image", return_value=png_bytes(20, 10)) as mock_to_image:
            service.capture([go.Figure()], now=CAPTURE_TIME)

        mock_to_image.assert_called_once_with(format="png", scale=2.0)

    def test_renderer_failure_uses_fallback(self):
        service = ExportService(fallback_width=320, fallback_height=200)

        with patch.object(go.Figure, "to_image", side_effect=RuntimeError("Kaleido requires Google Chrome")):
            result = service.capture([go.Figure()], now=CAPTURE_TIME)

        assert result.method == "fallback"
        assert result.filename == "clinic-outcomes-2024-01-06T15-00-00.png"
        with open_png(result.content) as page:
            assert page.size == (320, 200)

    def test_no_live_charts_uses_fallback(self):
        result = ExportService(fallback_width=64, fallback_height=48).capture([], now=CAPTURE_TIME)

        assert result.method == "fallback"
        with open_png(result.content) as page:
            assert page.size == (64, 48)

    def test_both_methods_failing_raises_export_error(self):
        service = ExportService()

        with patch.object(go.Figure, "to_image", side_effect=RuntimeError("no renderer")), \
                patch.object(ExportService, "_capture_fallback", side_effect=OSError("no font")):
            with pytest.raises(ExportError) as exc_info:
                service.capture([go.Figure()], now=CAPTURE_TIME)

        assert exc_info.value.status_code == 503
        assert exc_info.value.detail == "Screenshot capture is not supported on this server"
        assert exc_info.value.context == {"reason": "no font"}
