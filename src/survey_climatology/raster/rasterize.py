"""Point-table rasterization: sum effort or counts per grid cell.

Both rasterizers take records already reprojected into the template CRS and
return a ``LayerSet``. Cells with no records are 0.0 here; no-data only enters
the pipeline at normalization.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

import numpy as np

from survey_climatology.raster.layers import LayerKey, LayerSet, RasterLayer

if TYPE_CHECKING:
    from collections.abc import Callable

    from survey_climatology.raster.grid import GridTemplate
    from survey_climatology.schemas import EffortInterval, Observation

    GroupKey = Callable[[Observation], str | None]

logger = logging.getLogger(__name__)

#: Intervals longer than this are gaps in the track log, not surveyed distance.
MAX_EFFORT_NMI = 1000.0


def by_species(obs: Observation) -> str:
    """Group observations by their raw species code."""
    return obs.species


def _sum_to_grid(
    grid: GridTemplate,
    xs: Sequence[float],
    ys: Sequence[float],
    weights: Sequence[float],
    label: LayerKey,
) -> RasterLayer:
    rows, cols, inside = grid.cell_indices(xs, ys)
    dropped = int(np.count_nonzero(~inside))
    if dropped:
        logger.info("%s: %d record(s) outside grid extent dropped", label, dropped)

    out = np.zeros(grid.shape, dtype=np.float64)
    np.add.at(out, (rows[inside], cols[inside]), np.asarray(weights, dtype=np.float64)[inside])
    return RasterLayer(grid, out)


def _group_points(
    records: Iterable[tuple[LayerKey, float, float, float]],
) -> dict[LayerKey, tuple[list[float], list[float], list[float]]]:
    grouped: dict[LayerKey, tuple[list[float], list[float], list[float]]] = {}
    for key, x, y, w in records:
        xs, ys, ws = grouped.setdefault(key, ([], [], []))
        xs.append(x)
        ys.append(y)
        ws.append(w)
    return grouped


def rasterize_effort(
    intervals: Sequence[EffortInterval],
    grid: GridTemplate,
    max_distance_nmi: float = MAX_EFFORT_NMI,
) -> LayerSet:
    """
    Sum survey distance per cell, one layer per year.

    Args:
        intervals: Effort intervals in the grid CRS.
        grid: Shared grid template.
        max_distance_nmi: Intervals with a longer distance are discarded.

    Returns:
        LayerSet keyed by ``LayerKey(year=...)``.
    """
    kept = [iv for iv in intervals if iv.distance_nmi <= max_distance_nmi]
    if len(kept) < len(intervals):
        logger.warning(
            "Dropped %d effort interval(s) longer than %g nmi",
            len(intervals) - len(kept),
            max_distance_nmi,
        )

    grouped = _group_points(
        (LayerKey(year=iv.year), iv.lon, iv.lat, iv.distance_nmi) for iv in kept
    )
    layers = {key: _sum_to_grid(grid, *pts, label=key) for key, pts in grouped.items()}
    logger.info("Rasterized effort for %d year(s)", len(layers))
    return LayerSet(grid, layers)


def rasterize_observations(
    observations: Sequence[Observation],
    grid: GridTemplate,
    key: GroupKey = by_species,
) -> LayerSet:
    """
    Sum observed counts per cell, one layer per (year, group).

    Args:
        observations: Observations in the grid CRS.
        grid: Shared grid template.
        key: Maps an observation to its reporting group. Returning None drops
            the record (e.g. a species code outside every reporting group).

    Returns:
        LayerSet keyed by ``LayerKey(year=..., group=...)``.
    """
    records: list[tuple[LayerKey, float, float, float]] = []
    unmatched: set[str] = set()
    for obs in observations:
        group = key(obs)
        if group is None:
            unmatched.add(obs.species)
            continue
        records.append((LayerKey(year=obs.year, group=group), obs.lon, obs.lat, obs.count))
    if unmatched:
        logger.info("No reporting group for species code(s): %s", ", ".join(sorted(unmatched)))

    grouped = _group_points(records)
    layers = {k: _sum_to_grid(grid, *pts, label=k) for k, pts in grouped.items()}
    logger.info("Rasterized %d observation layer(s)", len(layers))
    return LayerSet(grid, layers)
