"""Tabular input: pandas DataFrames / CSV files -> survey record models.

Column names follow the upstream table contract:

    observations: species, year, lon, lat, count
    effort:       year, lon, lat, distance_nmi
"""

from __future__ import annotations

from pathlib import Path  # noqa: TC003 — used at runtime, not just annotations

import pandas as pd

from survey_climatology.schemas import EffortInterval, Observation

OBSERVATION_COLUMNS = ("species", "year", "lon", "lat", "count")
EFFORT_COLUMNS = ("year", "lon", "lat", "distance_nmi")


def _require_columns(df: pd.DataFrame, columns: tuple[str, ...], table: str) -> None:
    missing = [c for c in columns if c not in df.columns]
    if missing:
        msg = f"{table} table is missing column(s): {', '.join(missing)}"
        raise ValueError(msg)


def observations_from_frame(df: pd.DataFrame) -> list[Observation]:
    """Convert an observation table to ``Observation`` records."""
    _require_columns(df, OBSERVATION_COLUMNS, "Observation")
    rows = df.loc[:, list(OBSERVATION_COLUMNS)].to_dict(orient="records")
    return [Observation.model_validate(row) for row in rows]


def effort_from_frame(df: pd.DataFrame) -> list[EffortInterval]:
    """Convert an effort table to ``EffortInterval`` records."""
    _require_columns(df, EFFORT_COLUMNS, "Effort")
    rows = df.loc[:, list(EFFORT_COLUMNS)].to_dict(orient="records")
    return [EffortInterval.model_validate(row) for row in rows]


def read_observations_csv(path: Path) -> list[Observation]:
    """Load observations from a CSV file."""
    return observations_from_frame(pd.read_csv(path, dtype={"species": str}))


def read_effort_csv(path: Path) -> list[EffortInterval]:
    """Load effort intervals from a CSV file."""
    return effort_from_frame(pd.read_csv(path))
