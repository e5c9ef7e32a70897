"""
Data provider for reporting-period metrics.

Resolves a reporting period to a MetricsSnapshot by fetching the period's
static results document. Callers never see a fetch failure: any transport,
status or parse error is logged and answered with a zero-filled snapshot
for the requested period.
"""
import logging
from datetime import datetime
from typing import Callable, Dict, Optional

import httpx
from pydantic import ValidationError

from clinic_outcomes.schemas.metrics import MetricsSnapshot, period_label

logger = logging.getLogger(__name__)

# Period (days) -> results resource path
RESOURCE_PATHS: Dict[int, str] = {
    30: "/resource/30day-results.json",
    60: "/resource/60day-results.json",
    90: "/resource/90day-results.json",
}


def format_last_updated(moment: datetime) -> str:
    """Local display timestamp, e.g. ``01/06/2024, 03:00:00 PM``."""
    return moment.strftime("%m/%d/%Y, %I:%M:%S %p")


def default_snapshot(period: int, now: Optional[datetime] = None) -> MetricsSnapshot:
    """Zero-filled snapshot stamped with the requested period and the current time."""
    return MetricsSnapshot(
        patient_count=0,
        reporting_period=period_label(period),
        date_range="No data available",
        last_updated=format_last_updated(now or datetime.now()),
    )


class MetricsDataProvider:
    """
    Fetches period results from ``{base_url}/resource/<n>day-results.json``.

    Usage:
        provider = MetricsDataProvider(base_url="http://localhost:8000")
        snapshot = await provider.resolve(60)
    """

    def __init__(
        self,
        base_url: str,
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        """
        Initialize the provider.

        Args:
            base_url: Server hosting the static results documents.
            timeout: Request timeout in seconds.
            transport: Optional httpx transport (tests pass httpx.MockTransport).
            clock: Source of the current time for fallback snapshots.
        """
        if not base_url:
            raise ValueError("base_url must be set")
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._clock = clock

    def resource_url(self, period: int) -> Optional[str]:
        """URL of a period's results document, or None for an unknown period."""
        path = RESOURCE_PATHS.get(period)
        if path is None:
            return None
        return f"{self.base_url}{path}"

    async def resolve(self, period: int) -> MetricsSnapshot:
        """
        Resolve a period to its snapshot.

        Unknown periods get the default snapshot without a network call.
        """
        url = self.resource_url(period)
        if url is None:
            logger.warning("Unknown reporting period - using default data", extra={"period": period})
            return default_snapshot(period, self._clock())

        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                response = await client.get(url)
                response.raise_for_status()
                snapshot = MetricsSnapshot.model_validate(response.json())
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Clinic data request failed with status {e.response.status_code}",
                extra={"period": period, "url": url}
            )
            return default_snapshot(period, self._clock())
        except httpx.HTTPError as e:
            logger.error(f"Clinic data request error: {e}", extra={"period": period, "url": url})
            return default_snapshot(period, self._clock())
        except ValidationError as e:
            logger.error(
                "Clinic data failed validation",
                extra={"period": period, "errors": e.error_count()}
            )
            return default_snapshot(period, self._clock())
        except ValueError as e:
            logger.error(f"Clinic data is not valid JSON: {e}", extra={"period": period})
            return default_snapshot(period, self._clock())

        logger.info(
            "Loaded clinic data",
            extra={"period": period, "patient_count": snapshot.patient_count}
        )
        return snapshot
