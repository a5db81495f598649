"""Grid template, grid-aligned layers, and point rasterization.

Public API:
  - grid: GridTemplate, build_grid, reproject_points
  - layers: LayerKey, RasterLayer, LayerSet, Climatology
  - rasterize: rasterize_effort, rasterize_observations, by_species
"""

from survey_climatology.raster.grid import (
    GEOGRAPHIC_CRS,
    GridTemplate,
    build_grid,
    reproject_points,
)
from survey_climatology.raster.layers import (
    NODATA,
    Climatology,
    LayerKey,
    LayerSet,
    RasterLayer,
)
from survey_climatology.raster.rasterize import (
    MAX_EFFORT_NMI,
    by_species,
    rasterize_effort,
    rasterize_observations,
)

__all__ = [
    "GEOGRAPHIC_CRS",
    "MAX_EFFORT_NMI",
    "NODATA",
    "Climatology",
    "GridTemplate",
    "LayerKey",
    "LayerSet",
    "RasterLayer",
    "build_grid",
    "by_species",
    "rasterize_effort",
    "rasterize_observations",
    "reproject_points",
]
