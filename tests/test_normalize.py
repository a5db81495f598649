"""Tests for effort normalization."""

from __future__ import annotations

import types

import numpy as np
import pytest

from survey_climatology.analysis.normalize import (
    check_effort_years,
    iter_normalized,
    normalize,
    normalize_layer,
)
from survey_climatology.errors import MisalignedGrid, MissingEffortYear
from survey_climatology.raster.grid import GridTemplate, build_grid
from survey_climatology.raster.layers import LayerKey, LayerSet, RasterLayer

GRID = build_grid((0.0, 0.0, 100.0, 100.0), 50.0, "EPSG:3338")


def _set(layers: dict[LayerKey, list[list[float]]], grid: GridTemplate = GRID) -> LayerSet:
    return LayerSet(grid, {k: RasterLayer(grid, np.array(v)) for k, v in layers.items()})


EFFORT = _set(
    {
        LayerKey(year=2012): [[10.0, 0.0], [4.0, 0.0]],
        LayerKey(year=2013): [[2.0, 2.0], [2.0, 2.0]],
    }
)


class TestNormalizeLayer:
    """Test normalize_layer."""

    def test_divides_counts_by_effort(self) -> None:
        counts = RasterLayer(GRID, np.array([[5.0, 0.0], [2.0, 0.0]]))
        effort = EFFORT.get_layer(LayerKey(year=2012))
        out = normalize_layer(counts, effort)
        assert out.cell(0, 0) == 0.5
        assert out.cell(1, 0) == 0.5

    def test_zero_effort_is_nodata_regardless_of_count(self) -> None:
        counts = RasterLayer(GRID, np.array([[0.0, 7.0], [0.0, 0.0]]))
        out = normalize_layer(counts, EFFORT.get_layer(LayerKey(year=2012)))
        assert out.cell(0, 1) is None
        assert out.cell(1, 1) is None

    def test_surveyed_without_sightings_is_true_zero(self) -> None:
        counts = RasterLayer(GRID, np.zeros((2, 2)))
        out = normalize_layer(counts, EFFORT.get_layer(LayerKey(year=2012)))
        assert out.cell(0, 0) == 0.0


class TestNormalize:
    """Test normalize over layer sets."""

    def test_keys_preserved(self) -> None:
        counts = _set(
            {
                LayerKey(2012, "X"): [[5, 0], [0, 0]],
                LayerKey(2013, "X"): [[1, 1], [1, 1]],
                LayerKey(2013, "Y"): [[4, 0], [0, 0]],
            }
        )
        out = normalize(counts, EFFORT)
        assert out.list_keys() == counts.list_keys()
        np.testing.assert_array_equal(
            out.get_layer(LayerKey(2013, "X")).values, [[0.5, 0.5], [0.5, 0.5]]
        )

    def test_zero_effort_cells_nodata_for_every_group(self) -> None:
        counts = _set(
            {
                LayerKey(2012, "X"): [[5, 3], [0, 9]],
                LayerKey(2012, "Y"): [[0, 1], [1, 0]],
            }
        )
        out = normalize(counts, EFFORT)
        zero_effort = EFFORT.get_layer(LayerKey(year=2012)).values == 0
        for layer in out.values():
            assert np.isnan(layer.values[zero_effort]).all()

    def test_missing_effort_year(self) -> None:
        counts = _set({LayerKey(2014, "X"): [[1, 0], [0, 0]]})
        with pytest.raises(MissingEffortYear) as exc:
            normalize(counts, EFFORT)
        assert exc.value.year == 2014
        assert "2014" in str(exc.value)

    def test_misaligned_grid(self) -> None:
        other = build_grid((0.0, 0.0, 100.0, 100.0), 50.0, "EPSG:3857")
        counts = _set({LayerKey(2012, "X"): [[1, 0], [0, 0]]}, grid=other)
        with pytest.raises(MisalignedGrid):
            normalize(counts, EFFORT)

    def test_inputs_unchanged(self) -> None:
        counts = _set({LayerKey(2012, "X"): [[5, 1], [0, 0]]})
        before = counts.get_layer(LayerKey(2012, "X")).values.copy()
        normalize(counts, EFFORT)
        np.testing.assert_array_equal(counts.get_layer(LayerKey(2012, "X")).values, before)


class TestIterNormalized:
    """Test the incremental normalizer."""

    def test_is_lazy(self) -> None:
        counts = _set({LayerKey(2012, "X"): [[5, 0], [0, 0]]})
        gen = iter_normalized(counts, EFFORT)
        assert isinstance(gen, types.GeneratorType)
        key, layer = next(gen)
        assert key == LayerKey(2012, "X")
        assert layer.cell(0, 0) == 0.5

    def test_raises_on_missing_year_when_reached(self) -> None:
        counts = _set({LayerKey(2015, "X"): [[5, 0], [0, 0]]})
        with pytest.raises(MissingEffortYear):
            list(iter_normalized(counts, EFFORT))


class TestCheckEffortYears:
    """Test the upfront effort check."""

    def test_passes_when_every_year_has_effort(self) -> None:
        counts = _set(
            {LayerKey(2012, "X"): [[1, 0], [0, 0]], LayerKey(2013, "Y"): [[0, 0], [0, 1]]}
        )
        check_effort_years(counts, EFFORT)

    def test_reports_missing_year_before_any_layer(self) -> None:
        counts = _set(
            {LayerKey(2012, "X"): [[1, 0], [0, 0]], LayerKey(2016, "X"): [[1, 0], [0, 0]]}
        )
        with pytest.raises(MissingEffortYear) as exc:
            check_effort_years(counts, EFFORT)
        assert exc.value.year == 2016

    def test_misaligned_grid(self) -> None:
        other = build_grid((0.0, 0.0, 100.0, 100.0), 50.0, "EPSG:3857")
        counts = _set({LayerKey(2012, "X"): [[1, 0], [0, 0]]}, grid=other)
        with pytest.raises(MisalignedGrid):
            check_effort_years(counts, EFFORT)
