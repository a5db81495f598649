"""Multi-year averaging of normalized density layers.

Each cell's climatology is the mean over only the years in which that cell
was surveyed, so a group seen in few years is not diluted by years without
coverage. Layers are folded into per-group running sum/count arrays as they
arrive, so the input may be a lazy stream such as ``iter_normalized``.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Iterable
from typing import TYPE_CHECKING

import numpy as np

from survey_climatology.errors import EmptyGroupWarning, MisalignedGrid
from survey_climatology.raster.layers import LayerKey, LayerSet, RasterLayer

if TYPE_CHECKING:
    from survey_climatology.raster.grid import GridTemplate

logger = logging.getLogger(__name__)


class _RunningMean:
    """NaN-aware running mean over layers on one grid."""

    def __init__(self, grid: GridTemplate) -> None:
        self.grid = grid
        self.total = np.zeros(grid.shape, dtype=np.float64)
        self.count = np.zeros(grid.shape, dtype=np.int64)
        self.n = 0

    def add(self, layer: RasterLayer) -> None:
        valid = ~np.isnan(layer.values)
        self.total[valid] += layer.values[valid]
        self.count += valid
        self.n += 1

    def result(self) -> RasterLayer:
        with np.errstate(invalid="ignore", divide="ignore"):
            mean = np.where(self.count > 0, self.total / self.count, np.nan)
        return RasterLayer(self.grid, mean)


def mean_of_layers(layers: Iterable[RasterLayer], grid: GridTemplate) -> tuple[RasterLayer, int]:
    """NaN-aware mean of layers.

    Returns:
        ``(layer, n_layers)``. Cells with no valid value in any layer are
        no-data; with zero layers the result is all no-data.
    """
    acc = _RunningMean(grid)
    for layer in layers:
        acc.add(layer)
    return acc.result(), acc.n


def average_climatology(
    normalized: LayerSet | Iterable[tuple[LayerKey, RasterLayer]],
    groups: Iterable[str] | None = None,
    *,
    grid: GridTemplate | None = None,
) -> LayerSet:
    """
    Average normalized layers across years for each group.

    Args:
        normalized: LayerSet keyed by (year, group), or a stream of
            ``(key, layer)`` pairs (e.g. ``iter_normalized(...)``).
        groups: Groups to average. Defaults to every group seen.
        grid: Expected grid; required for a stream. A layer on any other
            grid raises ``MisalignedGrid``.

    Returns:
        Climatology keyed by ``LayerKey(group=...)``. Requested groups with no
        layers get an all-no-data layer and a warning on ``.warnings``.
    """
    if isinstance(normalized, LayerSet):
        if grid is not None and grid != normalized.grid:
            detail = f"grid {normalized.grid.metadata()} != {grid.metadata()}"
            raise MisalignedGrid(detail)
        grid = normalized.grid
        pairs: Iterable[tuple[LayerKey, RasterLayer]] = normalized.items()
    elif grid is None:
        msg = "grid is required when averaging a stream of layers"
        raise ValueError(msg)
    else:
        pairs = normalized

    targets = None if groups is None else list(dict.fromkeys(groups))
    running: dict[str, _RunningMean] = {}
    for key, layer in pairs:
        if layer.grid != grid:
            raise MisalignedGrid("layer grid differs from climatology grid", key=key)
        group = key.group or ""
        if targets is not None and group not in targets:
            continue
        running.setdefault(group, _RunningMean(grid)).add(layer)

    layers: dict[LayerKey, RasterLayer] = {}
    messages: list[str] = []
    for group in targets if targets is not None else sorted(running):
        acc = running.get(group)
        if acc is None:
            msg = f"Group {group!r} has no observations; climatology is all no-data"
            logger.warning(msg)
            warnings.warn(msg, EmptyGroupWarning, stacklevel=2)
            messages.append(msg)
            layers[LayerKey(group=group)] = RasterLayer.empty(grid)
        else:
            logger.debug("Averaged %s over %d year(s)", group, acc.n)
            layers[LayerKey(group=group)] = acc.result()

    return LayerSet(grid, layers, messages)
