"""
Dashboard export to PNG.

Capture order:
1. Render every live chart with kaleido and stack the images on a white page
2. If that is unavailable or fails, draw a plain Pillow placeholder page
3. If that fails too, raise ExportError so the user gets a notification
"""
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from io import BytesIO
from typing import List, Optional, Sequence

import plotly.graph_objects as go
from PIL import Image, ImageDraw, ImageFont

from clinic_outcomes.core.exceptions import ExportError

logger = logging.getLogger(__name__)

BACKGROUND = '#ffffff'
TEXT_COLOR = '#333333'
CHART_GAP = 16
PAGE_MARGIN = 20


@dataclass(frozen=True)
class ExportResult:
    filename: str
    content: bytes
    method: str  # "kaleido" or "fallback"

    media_type: str = "image/png"


def build_export_filename(moment: datetime) -> str:
    """
    File name for an export taken at ``moment``.

    The UTC ISO-8601 timestamp has ':' and '.' replaced by '-' and is cut
    to whole seconds: ``clinic-outcomes-2024-01-06T15-00-00.png``.
    Naive datetimes are taken as UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    stamp = moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S")
    return f"clinic-outcomes-{stamp}.png"


class ExportService:
    """Rasterizes the live dashboard figures to a single PNG."""

    def __init__(
        self,
        scale: float = 2.0,
        fallback_width: int = 1280,
        fallback_height: int = 720,
    ):
        self.scale = scale
        self.fallback_width = fallback_width
        self.fallback_height = fallback_height

    def capture(self, figures: Sequence[go.Figure], now: Optional[datetime] = None) -> ExportResult:
        """
        Capture the dashboard.

        Raises:
            ExportError: If both the chart capture and the fallback capture fail.
        """
        now = now or datetime.now(timezone.utc)
        filename = build_export_filename(now)

        try:
            content = self._capture_charts(figures)
            method = "kaleido"
        except Exception as e:
            logger.error(f"Screenshot capture failed: {e} - using fallback capture")
            try:
                content = self._capture_fallback(now)
                method = "fallback"
            except Exception as fallback_error:
                logger.exception("Fallback screenshot failed")
                raise ExportError(reason=str(fallback_error)) from fallback_error

        logger.info(
            "Dashboard exported",
            extra={"export_filename": filename, "method": method, "bytes": len(content)}
        )
        return ExportResult(filename=filename, content=content, method=method)

    def _capture_charts(self, figures: Sequence[go.Figure]) -> bytes:
        if not figures:
            raise ValueError("No live charts to capture")

        images: List[Image.Image] = []
        try:
            for fig in figures:
                png = fig.to_image(format="png", scale=self.scale)
                images.append(Image.open(BytesIO(png)).convert("RGB"))

            margin = int(PAGE_MARGIN * self.scale)
            gap = int(CHART_GAP * self.scale)
            width = max(img.width for img in images) + 2 * margin
            height = sum(img.height for img in images) + gap * (len(images) - 1) + 2 * margin

            with Image.new("RGB", (width, height), BACKGROUND) as page:
                y = margin
                for img in images:
                    page.paste(img, (margin, y))
                    y += img.height + gap
                return self._to_png(page)
        finally:
            for img in images:
                img.close()

    def _capture_fallback(self, now: datetime) -> bytes:
        """Plain page naming the dashboard and the capture time."""
        with Image.new("RGB", (self.fallback_width, self.fallback_height), BACKGROUND) as page:
            draw = ImageDraw.Draw(page)
            font = ImageFont.load_default()
            generated = now.astimezone().strftime("%m/%d/%Y, %I:%M:%S %p")
            draw.text((20, 24), "Clinic Outcomes Dashboard", fill=TEXT_COLOR, font=font)
            draw.text((20, 54), f"Generated on: {generated}", fill=TEXT_COLOR, font=font)
            return self._to_png(page)

    @staticmethod
    def _to_png(image: Image.Image) -> bytes:
        buffer = BytesIO()
        image.save(buffer, format="PNG")
        return buffer.getvalue()
