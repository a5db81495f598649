"""
Application settings.

Values come from environment variables prefixed ``CLIMATOLOGY_`` (or a
``.env`` file), falling back to the defaults below.
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Density classes (animals per nmi) used on the report maps
DEFAULT_CLASS_BREAKS: tuple[float, ...] = (0.0, 0.1, 0.5, 1.0, 5.0, 10.0, 50.0)


class Settings(BaseSettings):
    """Runtime configuration for a climatology report run."""

    model_config = SettingsConfigDict(
        env_prefix="CLIMATOLOGY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "survey-climatology"
    app_env: str = "development"
    debug: bool = False

    data_dir: Path = Path("data")

    # Grid: Alaska Albers equal-area, Bering/Chukchi survey region
    crs: str = "EPSG:3338"
    extent: tuple[float, float, float, float] = (-1_200_000.0, 400_000.0, 800_000.0, 2_400_000.0)
    resolution: float = Field(default=40_000.0, gt=0)

    max_effort_nmi: float = Field(default=1000.0, gt=0)
    class_breaks: tuple[float, ...] = DEFAULT_CLASS_BREAKS

    @field_validator("extent")
    @classmethod
    def _extent_not_empty(cls, v: tuple[float, float, float, float]) -> tuple[float, ...]:
        xmin, ymin, xmax, ymax = v
        if xmax <= xmin or ymax <= ymin:
            msg = f"extent must be (xmin, ymin, xmax, ymax) with max > min, got {v}"
            raise ValueError(msg)
        return v


@lru_cache
def get_settings() -> Settings:
    """Return the cached settings instance."""
    return Settings()
