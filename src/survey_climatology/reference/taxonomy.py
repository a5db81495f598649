"""Species codes and the common-name reporting groups they roll up into.

Group membership is an explicit code -> group table. A ``SpeciesGroups``
instance doubles as the grouping key for ``rasterize_observations``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from survey_climatology.schemas import Observation


@dataclass(frozen=True)
class SpeciesGroups:
    """Mapping of species code to common-name reporting group."""

    codes: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(
            self, "codes", MappingProxyType({c.upper(): g for c, g in self.codes.items()})
        )

    @classmethod
    def from_groups(cls, groups: Mapping[str, Iterable[str]]) -> SpeciesGroups:
        """Build from ``{group: [codes...]}``; a code may belong to one group only."""
        codes: dict[str, str] = {}
        for group, members in groups.items():
            for code in members:
                key = code.upper()
                if key in codes and codes[key] != group:
                    msg = f"Species code {code} assigned to both {codes[key]!r} and {group!r}"
                    raise ValueError(msg)
                codes[key] = group
        return cls(codes)

    def __call__(self, obs: Observation) -> str | None:
        return self.group_for(obs.species)

    def group_for(self, code: str) -> str | None:
        """Group name for a species code, or None if the code is not reported."""
        return self.codes.get(code.upper())

    def members(self, group: str) -> frozenset[str]:
        """Species codes that roll up into ``group``."""
        return frozenset(c for c, g in self.codes.items() if g == group)

    @property
    def groups(self) -> list[str]:
        return sorted(set(self.codes.values()))


# Seabird reporting groups used for the at-sea survey climatology maps.
# Unidentified-to-species codes are merged into the group they were resolved to.
DEFAULT_SPECIES_GROUPS = SpeciesGroups.from_groups(
    {
        "Murres": ["COMU", "TBMU", "UNMU"],
        "Kittiwakes": ["BLKI", "RLKI", "UNKI"],
        "Short-tailed/Sooty Shearwaters": ["STSH", "SOSH", "UNSH"],
        "Northern Fulmar": ["NOFU"],
        "Puffins": ["TUPU", "HOPU", "UNPU"],
        "Auklets": ["CRAU", "LEAU", "PAAU", "WHAU", "UNAU"],
        "Storm-Petrels": ["FTSP", "LHSP", "UNSP"],
        "Albatrosses": ["LAAL", "BFAL", "STAL"],
    }
)
