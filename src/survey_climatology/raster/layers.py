"""Grid-aligned layers and keyed layer sets.

A ``RasterLayer`` is a read-only float array on a ``GridTemplate`` with NaN as
the no-data marker. A ``LayerSet`` maps structured ``LayerKey`` values to
layers that all share one grid.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

import numpy as np

from survey_climatology.errors import MisalignedGrid

if TYPE_CHECKING:
    from survey_climatology.raster.grid import GridTemplate

NODATA = np.nan


@dataclass(frozen=True)
class LayerKey:
    """Identity of a layer: a survey year, a species/group, or both."""

    year: int | None = None
    group: str | None = None

    def __str__(self) -> str:
        parts = [str(p) for p in (self.year, self.group) if p is not None]
        return "/".join(parts) or "<all>"


@dataclass(frozen=True, eq=False)
class RasterLayer:
    """Dense cell values on a grid; NaN marks no-data."""

    grid: GridTemplate
    values: np.ndarray = field(repr=False)

    def __post_init__(self) -> None:
        arr = np.array(self.values, dtype=np.float64)
        if arr.shape != self.grid.shape:
            msg = f"Layer shape {arr.shape} does not match grid {self.grid.shape}"
            raise MisalignedGrid(msg)
        arr.setflags(write=False)
        object.__setattr__(self, "values", arr)

    @classmethod
    def empty(cls, grid: GridTemplate) -> RasterLayer:
        """All-no-data layer."""
        return cls(grid, np.full(grid.shape, NODATA))

    @property
    def nodata_mask(self) -> np.ndarray:
        return np.isnan(self.values)

    @property
    def valid_count(self) -> int:
        return int(np.count_nonzero(~self.nodata_mask))

    def total(self) -> float:
        """Sum of all valid cells."""
        return float(np.nansum(self.values))

    def cell(self, row: int, col: int) -> float | None:
        """Cell value, or None for no-data."""
        v = float(self.values[row, col])
        return None if np.isnan(v) else v


class LayerSet(Mapping[LayerKey, RasterLayer]):
    """Immutable mapping of ``LayerKey`` to grid-aligned layers.

    Every layer must share the set's grid; a mismatch raises ``MisalignedGrid``
    at construction. Recoverable warnings raised while building the set are
    carried in ``warnings`` so reports can render "no data" panels.
    """

    def __init__(
        self,
        grid: GridTemplate,
        layers: Mapping[LayerKey, RasterLayer] | Iterable[tuple[LayerKey, RasterLayer]] = (),
        warnings: Iterable[str] = (),
    ) -> None:
        items = dict(layers)
        for key, layer in items.items():
            if layer.grid != grid:
                raise MisalignedGrid("layer grid differs from layer set grid", key=key)
        self.grid = grid
        self._layers: Mapping[LayerKey, RasterLayer] = MappingProxyType(items)
        self.warnings: tuple[str, ...] = tuple(warnings)

    def __getitem__(self, key: LayerKey) -> RasterLayer:
        return self._layers[key]

    def __iter__(self) -> Iterator[LayerKey]:
        return iter(self._layers)

    def __len__(self) -> int:
        return len(self._layers)

    def __repr__(self) -> str:
        return f"LayerSet({len(self)} layers, grid={self.grid.shape}, warnings={len(self.warnings)})"

    def get_layer(self, key: LayerKey) -> RasterLayer:
        """Return the layer for ``key``; raises KeyError naming the key."""
        try:
            return self._layers[key]
        except KeyError:
            msg = f"No layer for key {key}"
            raise KeyError(msg) from None

    def list_keys(self) -> set[LayerKey]:
        return set(self._layers)

    def years(self) -> list[int]:
        """Distinct years present, ascending."""
        return sorted({k.year for k in self._layers if k.year is not None})

    def groups(self) -> list[str]:
        """Distinct groups present, sorted."""
        return sorted({k.group for k in self._layers if k.group is not None})

    def select(self, *, year: int | None = None, group: str | None = None) -> LayerSet:
        """Subset by year and/or group."""
        return LayerSet(
            self.grid,
            (
                (k, v)
                for k, v in self._layers.items()
                if (year is None or k.year == year) and (group is None or k.group == group)
            ),
            self.warnings,
        )

    def check_aligned(self, other: LayerSet) -> None:
        """Raise MisalignedGrid if ``other`` was built on a different grid."""
        if other.grid != self.grid:
            detail = f"grid {other.grid.metadata()} != {self.grid.metadata()}"
            raise MisalignedGrid(detail)


#: A climatology is a LayerSet keyed by group only.
Climatology = LayerSet
