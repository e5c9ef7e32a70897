"""
Configuration module for the Clinic Outcomes dashboard service.
Uses Pydantic BaseSettings for validation - values come from the environment or a .env file.
"""
import logging
from typing import List, Optional

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

SUPPORTED_PERIODS = (30, 60, 90)

ALL_SURFACES = (
    "timeInRangeVerticalStacked",
    "timeInRangeHorizontalScale",
    "timeInRangeHorizontal",
    "gmiPieChart",
    "gmiRanges",
)


class Settings(BaseSettings):
    """
    Application settings with validation.
    Every field has a default so the dashboard starts with no configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # API Configuration
    clinic_host: str = Field(default="0.0.0.0", description="API host")
    clinic_port: int = Field(default=8000, description="API port")
    clinic_reload: bool = Field(default=False, description="Enable hot reload")

    # Data Provider Configuration
    clinic_data_base_url: Optional[str] = Field(
        default=None,
        description="Base URL serving the /resource/<n>day-results.json documents. "
                    "Defaults to this service on 127.0.0.1:CLINIC_PORT",
    )
    clinic_fetch_timeout: float = Field(default=10.0, gt=0, description="Fetch timeout in seconds")
    clinic_default_period: int = Field(default=30, description="Reporting period shown on first load")

    # Chart Configuration
    clinic_render_delay_ms: int = Field(
        default=100, ge=0, description="Delay before charts are built, lets surfaces settle"
    )
    clinic_surfaces: str = Field(
        default=",".join(ALL_SURFACES),
        description="Mounted drawing surfaces (comma-separated surface ids)",
    )

    # Export Configuration
    clinic_export_scale: float = Field(default=2.0, gt=0, description="Raster scale for PNG export")
    clinic_export_fallback_width: int = Field(default=1280, gt=0, description="Fallback capture width")
    clinic_export_fallback_height: int = Field(default=720, gt=0, description="Fallback capture height")

    @model_validator(mode="after")
    def validate_dashboard(self) -> "Settings":
        """Reset unsupported values to safe defaults with a warning instead of failing startup."""
        if not self.clinic_data_base_url:
            # Period resources are served by this app's own /resource mount
            self.clinic_data_base_url = f"http://127.0.0.1:{self.clinic_port}"

        if self.clinic_default_period not in SUPPORTED_PERIODS:
            logger.warning(
                "CLINIC_DEFAULT_PERIOD is not a supported period - using 30",
                extra={"configured": self.clinic_default_period},
            )
            self.clinic_default_period = 30

        unknown = [s for s in self.surface_list if s not in ALL_SURFACES]
        if unknown:
            logger.warning(
                "CLINIC_SURFACES contains unknown surface ids - they will never be rendered",
                extra={"unknown": unknown},
            )
        return self

    @property
    def surface_list(self) -> List[str]:
        """Get the mounted surface ids as a list."""
        return [s.strip() for s in self.clinic_surfaces.split(",") if s.strip()]

    @property
    def render_delay_seconds(self) -> float:
        """Get the chart construction delay in seconds."""
        return self.clinic_render_delay_ms / 1000.0


# Create global settings instance
settings = Settings()

API_HOST = settings.clinic_host
API_PORT = settings.clinic_port
API_RELOAD = settings.clinic_reload
