"""Shared regular grid used by every rasterization in a report run.

Row 0 is the northern-most row and column 0 the western-most. Cells include
their west and north edges; the outer east and south edges of the grid are
inclusive so points lying exactly on them land in the last column/row.
"""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, TypeVar

import numpy as np
from pydantic import BaseModel
from pyproj import CRS, Transformer

RecordT = TypeVar("RecordT", bound=BaseModel)

#: Upstream tables are delivered in geographic WGS84 coordinates.
GEOGRAPHIC_CRS = "EPSG:4326"


@dataclass(frozen=True)
class GridTemplate:
    """Regular grid definition: CRS, covered extent, resolution and shape."""

    crs: CRS
    xmin: float
    ymin: float
    xmax: float
    ymax: float
    resolution: float
    nrows: int
    ncols: int

    @property
    def shape(self) -> tuple[int, int]:
        return (self.nrows, self.ncols)

    @property
    def extent(self) -> tuple[float, float, float, float]:
        return (self.xmin, self.ymin, self.xmax, self.ymax)

    def metadata(self) -> dict[str, Any]:
        """Grid description for downstream renderers."""
        return {
            "crs": self.crs.to_string(),
            "extent": list(self.extent),
            "resolution": self.resolution,
            "dimensions": [self.nrows, self.ncols],
        }

    @classmethod
    def from_metadata(cls, meta: dict[str, Any]) -> GridTemplate:
        """Rebuild a template from ``metadata()`` output."""
        xmin, ymin, xmax, ymax = (float(v) for v in meta["extent"])
        nrows, ncols = (int(v) for v in meta["dimensions"])
        return cls(
            crs=CRS.from_user_input(meta["crs"]),
            xmin=xmin,
            ymin=ymin,
            xmax=xmax,
            ymax=ymax,
            resolution=float(meta["resolution"]),
            nrows=nrows,
            ncols=ncols,
        )

    def cell_center(self, row: int, col: int) -> tuple[float, float]:
        """Return the (x, y) center of a cell in CRS units."""
        if not (0 <= row < self.nrows and 0 <= col < self.ncols):
            msg = f"Cell ({row}, {col}) outside {self.nrows}x{self.ncols} grid"
            raise IndexError(msg)
        x = self.xmin + (col + 0.5) * self.resolution
        y = self.ymax - (row + 0.5) * self.resolution
        return x, y

    def cell_centers(self) -> tuple[np.ndarray, np.ndarray]:
        """Return (x, y) center arrays, each of shape ``(nrows, ncols)``."""
        xs = self.xmin + (np.arange(self.ncols) + 0.5) * self.resolution
        ys = self.ymax - (np.arange(self.nrows) + 0.5) * self.resolution
        return np.tile(xs, (self.nrows, 1)), np.repeat(ys[:, None], self.ncols, axis=1)

    def cell_indices(
        self, x: np.ndarray | Sequence[float], y: np.ndarray | Sequence[float]
    ) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """Vectorized point-to-cell lookup.

        Returns:
            ``(rows, cols, inside)`` where ``inside`` flags points within the
            extent. Row/column values are meaningless where ``inside`` is False.
        """
        xa = np.asarray(x, dtype=np.float64)
        ya = np.asarray(y, dtype=np.float64)
        inside = (xa >= self.xmin) & (xa <= self.xmax) & (ya >= self.ymin) & (ya <= self.ymax)
        with np.errstate(invalid="ignore"):
            cols = np.floor((xa - self.xmin) / self.resolution)
            rows = np.floor((self.ymax - ya) / self.resolution)
        cols = np.where(inside, np.minimum(cols, self.ncols - 1), 0).astype(np.intp)
        rows = np.where(inside, np.minimum(rows, self.nrows - 1), 0).astype(np.intp)
        return rows, cols, inside

    def cell_index(self, x: float, y: float) -> tuple[int, int] | None:
        """Return the (row, col) holding a point, or None if it lies outside."""
        rows, cols, inside = self.cell_indices([x], [y])
        if not inside[0]:
            return None
        return int(rows[0]), int(cols[0])


def build_grid(
    extent: Sequence[float],
    resolution: float,
    crs: CRS | str,
) -> GridTemplate:
    """
    Build the grid template for a report run.

    When the extent is not a whole multiple of the resolution, the grid grows
    east and south so the requested extent is still fully covered.

    Args:
        extent: ``(xmin, ymin, xmax, ymax)`` in CRS units.
        resolution: Cell size in CRS linear units.
        crs: Projection definition (EPSG code, WKT, proj string or ``CRS``).

    Returns:
        GridTemplate with the covered extent.
    """
    if len(extent) != 4:
        msg = f"Extent must be (xmin, ymin, xmax, ymax), got {extent!r}"
        raise ValueError(msg)
    xmin, ymin, xmax, ymax = (float(v) for v in extent)
    if resolution <= 0:
        msg = f"Resolution must be positive, got {resolution}"
        raise ValueError(msg)
    if xmax <= xmin or ymax <= ymin:
        msg = f"Empty extent: {extent!r}"
        raise ValueError(msg)

    ncols = math.ceil((xmax - xmin) / resolution)
    nrows = math.ceil((ymax - ymin) / resolution)
    return GridTemplate(
        crs=CRS.from_user_input(crs),
        xmin=xmin,
        ymin=ymax - nrows * resolution,
        xmax=xmin + ncols * resolution,
        ymax=ymax,
        resolution=float(resolution),
        nrows=nrows,
        ncols=ncols,
    )


def reproject_points(
    records: Sequence[RecordT],
    grid: GridTemplate,
    source_crs: CRS | str = GEOGRAPHIC_CRS,
) -> list[RecordT]:
    """Return copies of ``records`` with lon/lat transformed into the grid CRS."""
    if not records:
        return []
    transformer = Transformer.from_crs(
        CRS.from_user_input(source_crs), grid.crs, always_xy=True
    )
    lons = np.array([r.lon for r in records], dtype=np.float64)  # type: ignore[attr-defined]
    lats = np.array([r.lat for r in records], dtype=np.float64)  # type: ignore[attr-defined]
    xs, ys = transformer.transform(lons, lats)
    return [
        r.model_copy(update={"lon": float(x), "lat": float(y)})
        for r, x, y in zip(records, xs, ys, strict=True)
    ]
