"""Tests for RasterLayer and LayerSet."""

from __future__ import annotations

import numpy as np
import pytest

from survey_climatology.errors import MisalignedGrid
from survey_climatology.raster.grid import build_grid
from survey_climatology.raster.layers import LayerKey, LayerSet, RasterLayer

GRID = build_grid((0.0, 0.0, 100.0, 100.0), 50.0, "EPSG:3338")
OTHER_GRID = build_grid((0.0, 0.0, 100.0, 100.0), 25.0, "EPSG:3338")


def _layer(values: list[list[float]]) -> RasterLayer:
    return RasterLayer(GRID, np.array(values))


class TestLayerKey:
    """Test structured layer keys."""

    def test_keys_compare_by_value(self) -> None:
        assert LayerKey(2012, "X") == LayerKey(year=2012, group="X")
        assert LayerKey(year=2012) != LayerKey(year=2012, group="X")
        assert len({LayerKey(2012, "X"), LayerKey(2012, "X")}) == 1

    def test_str(self) -> None:
        assert str(LayerKey(2012, "X")) == "2012/X"
        assert str(LayerKey(group="Murres")) == "Murres"


class TestRasterLayer:
    """Test RasterLayer."""

    def test_values_read_only(self) -> None:
        layer = _layer([[1.0, 2.0], [3.0, 4.0]])
        with pytest.raises(ValueError, match="read-only"):
            layer.values[0, 0] = 9.0

    def test_copies_input(self) -> None:
        src = np.zeros((2, 2))
        layer = RasterLayer(GRID, src)
        src[0, 0] = 5.0
        assert layer.values[0, 0] == 0.0

    def test_shape_mismatch(self) -> None:
        with pytest.raises(MisalignedGrid):
            RasterLayer(GRID, np.zeros((3, 3)))

    def test_empty_is_all_nodata(self) -> None:
        layer = RasterLayer.empty(GRID)
        assert layer.nodata_mask.all()
        assert layer.valid_count == 0

    def test_cell_and_total(self) -> None:
        layer = _layer([[1.5, np.nan], [0.0, 2.0]])
        assert layer.cell(0, 0) == 1.5
        assert layer.cell(0, 1) is None
        assert layer.cell(1, 0) == 0.0
        assert layer.total() == 3.5
        assert layer.valid_count == 3


class TestLayerSet:
    """Test LayerSet."""

    def test_get_layer_and_list_keys(self) -> None:
        a = _layer([[1, 0], [0, 0]])
        ls = LayerSet(GRID, {LayerKey(2012, "X"): a})
        assert ls.get_layer(LayerKey(2012, "X")) is a
        assert ls.list_keys() == {LayerKey(2012, "X")}

    def test_get_layer_missing(self) -> None:
        ls = LayerSet(GRID)
        with pytest.raises(KeyError, match="2013/Y"):
            ls.get_layer(LayerKey(2013, "Y"))

    def test_rejects_layer_on_other_grid(self) -> None:
        bad = RasterLayer(OTHER_GRID, np.zeros(OTHER_GRID.shape))
        with pytest.raises(MisalignedGrid) as exc:
            LayerSet(GRID, {LayerKey(2012, "X"): bad})
        assert exc.value.key == LayerKey(2012, "X")

    def test_is_immutable(self) -> None:
        ls = LayerSet(GRID, {LayerKey(2012): _layer([[0, 0], [0, 0]])})
        with pytest.raises(TypeError):
            ls._layers[LayerKey(2013)] = _layer([[0, 0], [0, 0]])  # type: ignore[index]

    def test_years_groups_select(self) -> None:
        zero = _layer([[0, 0], [0, 0]])
        ls = LayerSet(
            GRID,
            {
                LayerKey(2012, "X"): zero,
                LayerKey(2013, "X"): zero,
                LayerKey(2013, "Y"): zero,
            },
            warnings=["note"],
        )
        assert ls.years() == [2012, 2013]
        assert ls.groups() == ["X", "Y"]
        assert ls.select(group="X").list_keys() == {LayerKey(2012, "X"), LayerKey(2013, "X")}
        assert ls.select(year=2013, group="Y").list_keys() == {LayerKey(2013, "Y")}
        assert ls.select(year=2012).warnings == ("note",)

    def test_check_aligned(self) -> None:
        with pytest.raises(MisalignedGrid):
            LayerSet(GRID).check_aligned(LayerSet(OTHER_GRID))
        LayerSet(GRID).check_aligned(LayerSet(build_grid((0, 0, 100, 100), 50.0, "EPSG:3338")))
