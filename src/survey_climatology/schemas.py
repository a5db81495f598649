"""
Domain models for survey climatology.

Pydantic models for the point tables handed over by upstream ingestion.
These define the canonical schema - table loaders normalize DataFrame rows
to these.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

# =============================================================================
# Core
# =============================================================================


class Result(BaseModel):
    """Generic result wrapper for operations."""

    success: bool
    message: str
    data: dict[str, Any] | None = None
    error: str | None = None


# =============================================================================
# Survey records
# =============================================================================


class Observation(BaseModel):
    """A sighting of one species at a point on a survey trackline.

    ``lon``/``lat`` are the x/y coordinates in the CRS the record is currently
    expressed in: geographic degrees as delivered, projected units after
    ``reproject_points``.
    """

    model_config = {"frozen": True, "str_strip_whitespace": True}

    species: str = Field(..., min_length=1, description="Species code")
    year: int
    lon: float
    lat: float
    count: float = Field(..., ge=0, description="Number of animals sighted")


class EffortInterval(BaseModel):
    """A surveyed trackline segment and the distance it covered."""

    model_config = {"frozen": True}

    year: int
    lon: float
    lat: float
    distance_nmi: float = Field(..., ge=0, description="Distance surveyed (nautical miles)")
