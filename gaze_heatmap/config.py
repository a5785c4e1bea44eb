"""Application configuration loaded from environment variables."""

from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    app_name: str = "gaze-heatmap"
    debug: bool = False
    log_level: str = "INFO"

    # Aggregation
    grid_size: int = Field(default=5, gt=0)
    noise_floor_percent: float = Field(default=0.1, ge=0)

    # Publishing
    publish_interval_ms: int = Field(default=100, gt=0)

    # Viewing surface
    surface_width: float = Field(default=1920, gt=0)
    surface_height: float = Field(default=1080, gt=0)

    # Initial control state
    tracking_active: bool = True
    heatmap_visible: bool = True

    model_config = {"env_prefix": "GAZE_"}


settings = Settings()
