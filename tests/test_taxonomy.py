"""Tests for species code -> common-name groups."""

from __future__ import annotations

import pytest

from survey_climatology.reference.taxonomy import DEFAULT_SPECIES_GROUPS, SpeciesGroups
from survey_climatology.schemas import Observation


class TestSpeciesGroups:
    """Test SpeciesGroups."""

    def test_group_for(self) -> None:
        groups = SpeciesGroups.from_groups({"Murres": ["COMU", "TBMU", "UNMU"]})
        assert groups.group_for("COMU") == "Murres"
        assert groups.group_for("comu") == "Murres"
        assert groups.group_for("NOFU") is None

    def test_members(self) -> None:
        groups = SpeciesGroups.from_groups({"Murres": ["COMU", "TBMU"], "Fulmar": ["NOFU"]})
        assert groups.members("Murres") == frozenset({"COMU", "TBMU"})
        assert groups.members("Nothing") == frozenset()
        assert groups.groups == ["Fulmar", "Murres"]

    def test_callable_as_group_key(self) -> None:
        obs = Observation(species="TBMU", year=2012, lon=0.0, lat=0.0, count=1)
        assert DEFAULT_SPECIES_GROUPS(obs) == "Murres"

    def test_code_in_two_groups_rejected(self) -> None:
        with pytest.raises(ValueError, match="COMU"):
            SpeciesGroups.from_groups({"Murres": ["COMU"], "Other": ["COMU"]})

    def test_mapping_is_read_only(self) -> None:
        with pytest.raises(TypeError):
            DEFAULT_SPECIES_GROUPS.codes["XXXX"] = "Other"  # type: ignore[index]

    def test_default_groups_cover_unidentified_codes(self) -> None:
        assert DEFAULT_SPECIES_GROUPS.group_for("UNKI") == "Kittiwakes"
        assert DEFAULT_SPECIES_GROUPS.group_for("UNSH") == "Short-tailed/Sooty Shearwaters"
