"""Breakpoint classification of continuous layers into ordered classes.

Bins are right-open: class ``i`` holds ``breaks[i] <= v < breaks[i + 1]`` and
values at or above the last break form the open top class. Values below the
first break are excluded (no-data), as is no-data input.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import numpy as np

from survey_climatology.errors import InvalidBreakpoints
from survey_climatology.raster.layers import LayerSet, RasterLayer


@dataclass(frozen=True)
class ClassBreaks:
    """Strictly ascending, non-empty breakpoints."""

    values: tuple[float, ...]

    def __init__(self, values: Iterable[float]) -> None:
        vals = tuple(float(v) for v in values)
        if not vals:
            msg = "Class breaks must not be empty"
            raise InvalidBreakpoints(msg)
        if any(np.isnan(v) for v in vals):
            msg = f"Class breaks must be finite numbers: {vals}"
            raise InvalidBreakpoints(msg)
        if any(b <= a for a, b in zip(vals, vals[1:])):
            msg = f"Class breaks must be strictly ascending: {vals}"
            raise InvalidBreakpoints(msg)
        object.__setattr__(self, "values", vals)

    def __len__(self) -> int:
        return len(self.values)

    def class_of(self, value: float) -> int | None:
        """Class index for a single value, or None if excluded."""
        if np.isnan(value) or value < self.values[0]:
            return None
        return int(np.searchsorted(self.values, value, side="right")) - 1

    def labels(self) -> list[str]:
        """Legend text for each class, e.g. ``["[0, 0.1)", ..., ">= 10"]``."""
        fmt = "{:g}".format
        out = [
            f"[{fmt(lo)}, {fmt(hi)})" for lo, hi in zip(self.values, self.values[1:])
        ]
        out.append(f">= {fmt(self.values[-1])}")
        return out


def classify_layer(layer: RasterLayer, breaks: ClassBreaks) -> RasterLayer:
    """Map each cell to its class index (as float); excluded cells are NaN."""
    vals = layer.values
    idx = np.searchsorted(np.asarray(breaks.values), vals, side="right") - 1
    excluded = np.isnan(vals) | (idx < 0)
    return RasterLayer(layer.grid, np.where(excluded, np.nan, idx.astype(np.float64)))


def classify(layers: LayerSet, breaks: ClassBreaks) -> LayerSet:
    """Classify every layer in a set; keys and warnings carry over."""
    return LayerSet(
        layers.grid,
        ((k, classify_layer(v, breaks)) for k, v in layers.items()),
        layers.warnings,
    )
