"""Effort normalization: observed counts divided by surveyed distance."""

from __future__ import annotations

from collections.abc import Iterator

import numpy as np

from survey_climatology.errors import MissingEffortYear
from survey_climatology.raster.layers import LayerKey, LayerSet, RasterLayer


def normalize_layer(counts: RasterLayer, effort: RasterLayer) -> RasterLayer:
    """Cell-wise ``counts / effort``; cells with zero effort become no-data."""
    surveyed = effort.values > 0
    with np.errstate(divide="ignore", invalid="ignore"):
        density = np.where(surveyed, counts.values / effort.values, np.nan)
    return RasterLayer(counts.grid, density)


def iter_normalized(observed: LayerSet, effort: LayerSet) -> Iterator[tuple[LayerKey, RasterLayer]]:
    """
    Yield normalized layers one at a time.

    Lets callers average or persist each layer without holding the whole
    normalized set in memory.

    Raises:
        MisalignedGrid: The two sets were built on different grids.
        MissingEffortYear: No effort layer for an observed year.
    """
    effort.check_aligned(observed)
    for key in observed:
        effort_key = LayerKey(year=key.year)
        if effort_key not in effort:
            raise MissingEffortYear(key.year)
        yield key, normalize_layer(observed[key], effort[effort_key])


def check_effort_years(observed: LayerSet, effort: LayerSet) -> None:
    """Fail before any work if grids differ or an observed year has no effort."""
    effort.check_aligned(observed)
    for year in observed.years():
        if LayerKey(year=year) not in effort:
            raise MissingEffortYear(year)


def normalize(observed: LayerSet, effort: LayerSet) -> LayerSet:
    """Normalize every (year, group) layer by the effort layer of its year.

    Missing years are checked before any layer is computed so a run fails
    without doing partial work.
    """
    check_effort_years(observed, effort)
    return LayerSet(observed.grid, iter_normalized(observed, effort))
