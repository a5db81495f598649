"""Error taxonomy for the climatology pipeline.

Fatal conditions subclass ``ClimatologyError`` and abort the run. Empty
groups are recoverable and surface as ``EmptyGroupWarning`` instead.
"""

from __future__ import annotations

from typing import Any


class ClimatologyError(Exception):
    """Base class for fatal pipeline errors."""


class MissingEffortYear(ClimatologyError):
    """No effort layer exists for a year present in the observation set."""

    def __init__(self, year: int | None) -> None:
        self.year = year
        super().__init__(f"No effort layer for year {year}")


class MisalignedGrid(ClimatologyError):
    """A layer was built against a different GridTemplate."""

    def __init__(self, detail: str, key: Any = None) -> None:
        self.key = key
        msg = f"Misaligned grid for {key}: {detail}" if key is not None else detail
        super().__init__(msg)


class InvalidBreakpoints(ClimatologyError, ValueError):
    """Class breaks are empty or not strictly ascending."""


class EmptyGroupWarning(UserWarning):
    """A requested group matched no layers; its output is all no-data."""
