"""Layer store for climatology runs.

Manages read/write of run outputs under a base directory, organized by tier:
  - inputs/: Copies of the point tables a run was built from
  - layers/: Intermediate LayerSets (effort, counts, normalized)
  - derived/: Final products (climatologies, classified layers, summaries)

JSON files are wrapped in a metadata envelope (``meta`` + ``data``).

LayerSets are written as a tagged stack: an ``.npz`` file holding one
grid-aligned array per layer, plus a sidecar ``.meta.json`` carrying the
layer keys, grid metadata and warnings.
"""

from __future__ import annotations

import json
import shutil
from datetime import UTC, datetime
from pathlib import Path  # noqa: TC003 — used at runtime, not just annotations
from typing import Any

import numpy as np

from survey_climatology.raster.grid import GridTemplate
from survey_climatology.raster.layers import LayerKey, LayerSet, RasterLayer


class DataStore:
    """Manages read/write of run outputs with metadata."""

    def __init__(self, base_dir: Path) -> None:
        self.base = base_dir
        self.inputs = base_dir / "inputs"
        self.layers = base_dir / "layers"
        self.derived = base_dir / "derived"

    def read(self, path: Path) -> Any | None:
        """Read data payload from a metadata-enveloped JSON file.

        Returns the ``data`` field, or None if the file doesn't exist.
        """
        full = self._resolve(path)
        if not full.exists():
            return None
        with full.open() as f:
            envelope: dict[str, Any] = json.load(f)
        return envelope.get("data", envelope)

    def read_raw(self, path: Path) -> dict[str, Any] | None:
        """Read the full envelope (meta + data) from a JSON file."""
        full = self._resolve(path)
        if not full.exists():
            return None
        with full.open() as f:
            result: dict[str, Any] = json.load(f)
        return result

    def write(self, path: Path, data: Any, source: str, **params: Any) -> Path:
        """Write data wrapped in a metadata envelope.

        Args:
            path: Relative path under base_dir (e.g. ``derived/summary.json``).
            data: Payload to store under the ``data`` key.
            source: Producer identifier (e.g. ``"build-climatology"``).
            **params: Extra metadata fields (grid, grouping, etc.).

        Returns:
            Absolute path of the written file.
        """
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)

        envelope = {"meta": self._meta(source, params), "data": data}
        with full.open("w") as f:
            json.dump(envelope, f, indent=2)

        return full

    def write_file(self, path: Path, src: Path, source: str, **params: Any) -> Path:
        """Store a copy of a non-JSON file (e.g. an input CSV) with sidecar metadata.

        Args:
            path: Relative destination path (e.g. ``inputs/effort.csv``).
            src: Source file to copy into the store.
            source: Producer identifier.
            **params: Extra metadata fields.

        Returns:
            Absolute path of the stored file.
        """
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(src, full)

        meta = self._meta(source, params)
        meta["original_path"] = str(src)
        with self._sidecar(full).open("w") as f:
            json.dump({"meta": meta}, f, indent=2)

        return full

    def write_layers(self, path: Path, layers: LayerSet, source: str, **params: Any) -> Path:
        """Store a LayerSet as ``.npz`` arrays with a sidecar ``.meta.json``.

        Array names in the archive are positional (``layer_0``, ...); the
        sidecar maps each to its structured key.
        """
        full = self._resolve(path)
        full.parent.mkdir(parents=True, exist_ok=True)

        keys = list(layers)
        arrays = {f"layer_{i}": layers[k].values for i, k in enumerate(keys)}
        with full.open("wb") as f:
            np.savez_compressed(f, **arrays)

        meta = self._meta(source, params)
        meta["grid"] = layers.grid.metadata()
        meta["keys"] = [{"year": k.year, "group": k.group} for k in keys]
        meta["warnings"] = list(layers.warnings)
        with self._sidecar(full).open("w") as f:
            json.dump({"meta": meta}, f, indent=2)

        return full

    def read_layers(self, path: Path) -> LayerSet | None:
        """Load a LayerSet written by ``write_layers``, or None if missing."""
        full = self._resolve(path)
        sidecar = self._sidecar(full)
        if not full.exists() or not sidecar.exists():
            return None

        with sidecar.open() as f:
            meta: dict[str, Any] = json.load(f)["meta"]
        grid = GridTemplate.from_metadata(meta["grid"])
        with np.load(full) as archive:
            layers = {
                LayerKey(year=k["year"], group=k["group"]): RasterLayer(grid, archive[f"layer_{i}"])
                for i, k in enumerate(meta["keys"])
            }
        return LayerSet(grid, layers, meta.get("warnings", []))

    def _meta(self, source: str, params: dict[str, Any]) -> dict[str, Any]:
        meta: dict[str, Any] = {
            "source": source,
            "written_at": datetime.now(UTC).isoformat(),
        }
        if params:
            meta.update(params)
        return meta

    @staticmethod
    def _sidecar(full: Path) -> Path:
        return full.with_suffix(full.suffix + ".meta.json")

    def _resolve(self, path: Path) -> Path:
        full = self.base / path if not path.is_absolute() else path
        try:
            full.resolve().relative_to(self.base.resolve())
        except ValueError:
            msg = f"Path escapes store base directory: {path}"
            raise ValueError(msg) from None
        return full
