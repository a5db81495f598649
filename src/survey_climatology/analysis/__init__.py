"""Effort normalization, multi-year averaging, and classification.

Each module is a pure transformation from one LayerSet to a new one.

Dependency rule: analysis/ imports from raster/ only. It never reads
tables, touches the store, or renders anything.

Modules:
  - normalize: counts + effort -> density (count per nmi)
  - climatology: density by (year, group) -> mean density by group
  - classify: continuous layers -> ordered class indices

Adding an analysis step
-----------------------
1. Create ``analysis/{name}.py`` with a pure function taking and returning
   ``LayerSet``s. Build a new set; never mutate an input layer.
2. Wire it into ``flows/climatology.py`` as a ``@task``.
3. Re-export here and add tests in ``tests/test_{name}.py``.
"""

from survey_climatology.analysis.classify import ClassBreaks, classify, classify_layer
from survey_climatology.analysis.climatology import average_climatology, mean_of_layers
from survey_climatology.analysis.normalize import (
    check_effort_years,
    iter_normalized,
    normalize,
    normalize_layer,
)

__all__ = [
    "ClassBreaks",
    "average_climatology",
    "check_effort_years",
    "classify",
    "classify_layer",
    "iter_normalized",
    "mean_of_layers",
    "normalize",
    "normalize_layer",
]
