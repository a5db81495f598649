"""Survey Climatology - effort-normalized density maps from survey sightings.

Architecture::

    schemas.py     Pydantic models for observation and effort records
    tables.py      DataFrame/CSV -> record models
    raster/        Grid template, keyed layer sets, point rasterization
    analysis/      Effort normalization, multi-year averaging, classification
    reference/     Species code -> common-name reporting groups
    store.py       Layer stacks (.npz + sidecar metadata) and JSON outputs
    flows/         Prefect orchestration (build climatology)

Data flow: tables -> raster (effort, counts) -> analysis -> store

Map styling, legends and report rendering live outside this package; they
consume the classified LayerSets and ``GridTemplate.metadata()``.
"""

__version__ = "0.1.0"

from survey_climatology.config import Settings
from survey_climatology.schemas import EffortInterval, Observation

__all__ = ["EffortInterval", "Observation", "Settings", "__version__"]
