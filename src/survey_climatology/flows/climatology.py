"""
Prefect flow for building density climatologies from survey tables.

point tables -> grid -> effort/count layers -> normalized density ->
multi-year climatology -> density classes -> store

Run locally:
    python -m survey_climatology.flows.climatology observations.csv effort.csv
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from prefect import flow, task
from prefect.cache_policies import NO_CACHE

from survey_climatology.analysis.classify import ClassBreaks, classify
from survey_climatology.analysis.climatology import average_climatology
from survey_climatology.analysis.normalize import check_effort_years, iter_normalized
from survey_climatology.config import get_settings
from survey_climatology.raster.grid import GEOGRAPHIC_CRS, GridTemplate, build_grid, reproject_points
from survey_climatology.raster.layers import LayerKey, LayerSet, RasterLayer
from survey_climatology.raster.rasterize import by_species, rasterize_effort, rasterize_observations
from survey_climatology.reference.taxonomy import DEFAULT_SPECIES_GROUPS
from survey_climatology.schemas import EffortInterval, Observation
from survey_climatology.store import DataStore
from survey_climatology.tables import read_effort_csv, read_observations_csv

# Relative paths within the store
OBSERVATIONS_INPUT_PATH = Path("inputs/observations.csv")
EFFORT_INPUT_PATH = Path("inputs/effort.csv")
EFFORT_LAYERS_PATH = Path("layers/effort.npz")
DENSITY_LAYERS_DIR = Path("layers/density")
CLIMATOLOGY_PATH = Path("derived/climatology.npz")
CLASSES_PATH = Path("derived/climatology_classes.npz")
SUMMARY_PATH = Path("derived/summary.json")

GROUPINGS = ("species", "common-name")
SOURCE = "build-climatology"


def get_store() -> DataStore:
    """Output store rooted at the configured data directory."""
    return DataStore(get_settings().data_dir)


def density_path(year: int) -> Path:
    """Store path of the normalized density layers for one year."""
    return DENSITY_LAYERS_DIR / f"{year}.npz"


# =============================================================================
# Loading tasks
# =============================================================================


@task(name="load-observations")
def load_observations(path: Path) -> list[Observation]:
    """Load the observation table."""
    return read_observations_csv(path)


@task(name="load-effort")
def load_effort(path: Path) -> list[EffortInterval]:
    """Load the effort table."""
    return read_effort_csv(path)


@task(name="build-grid")
def make_grid(
    extent: tuple[float, float, float, float], resolution: float, crs: str
) -> GridTemplate:
    """Build the grid template shared by every layer in the run."""
    return build_grid(extent, resolution, crs)


# =============================================================================
# Layer tasks
# =============================================================================


@task(name="rasterize-effort", cache_policy=NO_CACHE)
def effort_layers(
    intervals: list[EffortInterval], grid: GridTemplate, source_crs: str, max_distance_nmi: float
) -> LayerSet:
    """Reproject and rasterize survey effort by year."""
    return rasterize_effort(reproject_points(intervals, grid, source_crs), grid, max_distance_nmi)


@task(name="rasterize-observations", cache_policy=NO_CACHE)
def count_layers(
    observations: list[Observation], grid: GridTemplate, source_crs: str, grouping: str
) -> LayerSet:
    """Reproject and rasterize observed counts by (year, group)."""
    key = DEFAULT_SPECIES_GROUPS if grouping == "common-name" else by_species
    return rasterize_observations(reproject_points(observations, grid, source_crs), grid, key)


def _stream_density(
    counts: LayerSet, effort: LayerSet, store: DataStore
) -> Iterator[tuple[LayerKey, RasterLayer]]:
    # One year of density is held at a time; each is persisted before the
    # next is computed.
    for year in counts.years():
        density = LayerSet(counts.grid, iter_normalized(counts.select(year=year), effort))
        store.write_layers(density_path(year), density, source=SOURCE, year=year)
        yield from density.items()


@task(name="normalize-and-average", cache_policy=NO_CACHE)
def climatology_layers(
    counts: LayerSet, effort: LayerSet, groups: list[str] | None = None
) -> LayerSet:
    """Normalize counts by effort year by year and fold them into per-group means.

    Every observed year is checked for effort before any density layer is
    written, so a missing year fails the run without partial output.
    """
    check_effort_years(counts, effort)
    density = _stream_density(counts, effort, get_store())
    return average_climatology(density, groups, grid=counts.grid)


@task(name="classify", cache_policy=NO_CACHE)
def class_layers(climatology: LayerSet, breaks: tuple[float, ...]) -> LayerSet:
    """Bucket climatology values into density classes."""
    return classify(climatology, ClassBreaks(breaks))


@task(name="write-outputs", cache_policy=NO_CACHE)
def write_outputs(
    inputs: tuple[Path, Path],
    effort: LayerSet,
    climatology: LayerSet,
    classes: LayerSet,
    summary: dict[str, Any],
) -> Path:
    """Persist the input tables, layer stacks and the run summary."""
    store = get_store()
    observations_csv, effort_csv = inputs
    store.write_file(OBSERVATIONS_INPUT_PATH, observations_csv, source=SOURCE)
    store.write_file(EFFORT_INPUT_PATH, effort_csv, source=SOURCE)
    store.write_layers(EFFORT_LAYERS_PATH, effort, source=SOURCE)
    store.write_layers(CLIMATOLOGY_PATH, climatology, source=SOURCE)
    store.write_layers(CLASSES_PATH, classes, source=SOURCE)
    return store.write(SUMMARY_PATH, summary, source=SOURCE)


# =============================================================================
# Main flow
# =============================================================================


@flow(name="build-climatology", log_prints=True)
def build_climatology(
    observations_csv: Path,
    effort_csv: Path,
    grouping: str = "species",
    groups: list[str] | None = None,
    source_crs: str = GEOGRAPHIC_CRS,
) -> dict[str, Any]:
    """
    Build density climatologies for every species or common-name group.

    Fatal pipeline errors (missing effort year, misaligned grid, invalid
    class breaks) propagate and fail the flow run.
    """
    if grouping not in GROUPINGS:
        msg = f"grouping must be one of {GROUPINGS}, got {grouping!r}"
        raise ValueError(msg)
    settings = get_settings()

    print(f"Loading observations from {observations_csv}...")
    observations = load_observations(observations_csv)
    print(f"Loading effort from {effort_csv}...")
    intervals = load_effort(effort_csv)
    print(f"Loaded {len(observations)} observations, {len(intervals)} effort intervals")

    grid = make_grid(settings.extent, settings.resolution, settings.crs)
    print(f"Grid: {grid.nrows}x{grid.ncols} cells at {grid.resolution:g} ({settings.crs})")

    effort = effort_layers(intervals, grid, source_crs, settings.max_effort_nmi)
    print(f"Effort layers for years: {effort.years()}")

    counts = count_layers(observations, grid, source_crs, grouping)
    print(f"Count layers: {len(counts)} (year, {grouping}) combinations")

    if groups is None and grouping == "common-name":
        groups = DEFAULT_SPECIES_GROUPS.groups
    climatology = climatology_layers(counts, effort, groups)
    for warning in climatology.warnings:
        print(f"Warning: {warning}")

    classes = class_layers(climatology, settings.class_breaks)

    summary: dict[str, Any] = {
        "grid": grid.metadata(),
        "grouping": grouping,
        "years": effort.years(),
        "groups": climatology.groups(),
        "class_breaks": list(settings.class_breaks),
        "class_labels": ClassBreaks(settings.class_breaks).labels(),
        "warnings": list(climatology.warnings),
    }
    output_path = write_outputs(
        (observations_csv, effort_csv), effort, climatology, classes, summary
    )
    print(f"Climatology written: {output_path}")

    return {
        "years": summary["years"],
        "groups": summary["groups"],
        "layers": len(counts),
        "warnings": summary["warnings"],
        "output": str(output_path),
    }


if __name__ == "__main__":
    result = build_climatology(Path(sys.argv[1]), Path(sys.argv[2]))
    print(f"Flow complete: {result}")
