"""Tests for the synthetic Cartesian grid generator."""

import numpy as np
import pytest

from cornerpoint.config import Config
from cornerpoint.errors import ValidationError
from cornerpoint.grdecl.reader import parse_grdecl
from cornerpoint.grdecl.writer import format_grdecl
from cornerpoint.grids.cartesian import (
    build_cartesian_grid,
    cartesian_geometry,
    validate_grid_size,
)
from cornerpoint.grids.geometry import build_geometry, load_geometry


class TestBuildCartesianGrid:
    def test_array_sizes(self):
        data = build_cartesian_grid(3, 2, 4)
        assert data.dimensions.shape == (3, 2, 4)
        assert data.coord.shape == (12, 6)
        assert data.zcorn.size == 8 * 3 * 2 * 4
        np.testing.assert_array_equal(data.actnum, np.ones(24))

    def test_default_spacing(self):
        data = build_cartesian_grid(2, 1, 3)
        # Pillar (2, 1) is the last one
        np.testing.assert_array_equal(data.coord[-1], [20, 10, 0, 20, 10, 3])

    def test_pillars_are_vertical_and_ordered(self):
        data = build_cartesian_grid(2, 2, 1, spacing=(1, 1, 1))
        np.testing.assert_array_equal(data.coord[:, 0], data.coord[:, 3])
        np.testing.assert_array_equal(data.coord[:, 1], data.coord[:, 4])
        np.testing.assert_array_equal(data.coord[:3, 0], [0, 1, 2])
        np.testing.assert_array_equal(data.coord[::3, 1], [0, 1, 2])

    def test_zcorn_layout(self):
        data = build_cartesian_grid(1, 1, 2, spacing=(1, 1, 5))
        np.testing.assert_array_equal(
            data.zcorn, [0] * 4 + [5] * 4 + [5] * 4 + [10] * 4
        )

    def test_origin(self):
        data = build_cartesian_grid(1, 1, 1, spacing=(2, 3, 4), origin=(100, 200, 1000))
        np.testing.assert_array_equal(data.coord[0], [100, 200, 1000, 100, 200, 1004])
        np.testing.assert_array_equal(data.coord[-1], [102, 203, 1000, 102, 203, 1004])

    def test_spacing_from_config(self):
        data = build_cartesian_grid(1, 1, 1, config=Config(cell_spacing=(5, 5, 2)))
        np.testing.assert_array_equal(data.coord[-1], [5, 5, 0, 5, 5, 2])

    def test_round_trip_through_grdecl_text(self):
        data = build_cartesian_grid(3, 2, 2, spacing=(25.0, 12.5, 0.75))
        assert parse_grdecl(format_grdecl(data)) == data


class TestCartesianGeometry:
    def test_two_by_two_by_two(self):
        geometry = cartesian_geometry(2, 2, 2, spacing=(1, 1, 1))
        assert geometry.active_cell_count == 8
        assert geometry.vertex_count == 27

    def test_vertex_count_formula(self):
        geometry = cartesian_geometry(4, 3, 2)
        assert geometry.vertex_count == 5 * 4 * 3

    def test_cell_corners(self):
        geometry = cartesian_geometry(2, 1, 1, spacing=(10, 10, 1))
        corners = geometry.corners(1, 0, 0)
        np.testing.assert_array_equal(corners[0], [10, 0, 0])
        np.testing.assert_array_equal(corners[2], [20, 10, 0])
        np.testing.assert_array_equal(corners[7], [10, 10, 1])

    def test_matches_reconstruction_of_generated_arrays(self):
        data = build_cartesian_grid(2, 3, 1)
        assert cartesian_geometry(2, 3, 1) == build_geometry(data)

    def test_matches_hand_written_two_by_two_box(self, two_by_two_text):
        generated = cartesian_geometry(2, 2, 2, spacing=(1, 1, 1))
        parsed = load_geometry(two_by_two_text)
        assert generated.active_cell_count == parsed.active_cell_count == 8
        assert {tuple(v) for v in generated.vertices.tolist()} == {
            tuple(v) for v in parsed.vertices.tolist()
        }
        np.testing.assert_array_equal(generated.cell_corners, parsed.cell_corners)


class TestGridSizeLimits:
    def test_valid_size(self):
        assert validate_grid_size(10, 10, 10).cell_count == 1000

    @pytest.mark.parametrize("dims", [(0, 1, 1), (1, -2, 1), (1, 1, 0)])
    def test_non_positive_dimensions(self, dims):
        with pytest.raises(ValidationError):
            build_cartesian_grid(*dims)

    def test_axis_limit(self):
        config = Config(max_cells_per_axis=5)
        with pytest.raises(ValidationError, match="must not exceed 5"):
            build_cartesian_grid(6, 1, 1, config=config)

    def test_cell_count_limit(self):
        config = Config(max_cell_count=100)
        with pytest.raises(ValidationError, match="more than the allowed 100"):
            build_cartesian_grid(5, 5, 5, config=config)

    def test_default_limits(self):
        with pytest.raises(ValidationError):
            validate_grid_size(1001, 1, 1)
        with pytest.raises(ValidationError):
            validate_grid_size(1000, 1000, 2)

    def test_non_positive_spacing(self):
        with pytest.raises(ValidationError, match="spacing"):
            build_cartesian_grid(1, 1, 1, spacing=(1, 0, 1))
