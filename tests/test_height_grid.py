"""Tests for the HeightGrid height-field model."""

import pytest

from surface_drape.models import HeightGrid


class TestHeightGridValidation:
    """Tests for grid shape checks."""

    def test_rejects_single_column(self):
        with pytest.raises(ValueError):
            HeightGrid(xs=[0.0], ys=[0.0, 1.0], z=[[0.0], [0.0]])

    def test_rejects_non_increasing_axis(self):
        with pytest.raises(ValueError):
            HeightGrid(xs=[0.0, 0.0], ys=[0.0, 1.0], z=[[0.0, 0.0], [0.0, 0.0]])

    def test_rejects_wrong_row_count(self):
        with pytest.raises(ValueError):
            HeightGrid(xs=[0.0, 1.0], ys=[0.0, 1.0], z=[[0.0, 0.0]])

    def test_rejects_wrong_row_length(self):
        with pytest.raises(ValueError):
            HeightGrid(xs=[0.0, 1.0], ys=[0.0, 1.0], z=[[0.0, 0.0], [0.0]])


class TestHeightGridInterpolation:
    """Tests for cell lookup and bilinear interpolation."""

    @pytest.fixture
    def ramp(self):
        return HeightGrid(xs=[0.0, 1.0], ys=[0.0, 1.0], z=[[0.0, 1.0], [2.0, 4.0]])

    def test_flat_grid_is_exact(self, flat_grid):
        for x, y in [(0.0, 0.0), (3.3, 7.1), (10.0, 10.0), (9.999, 0.001)]:
            assert flat_grid.interpolate(x, y) == 10.0

    def test_bilinear_value(self, ramp):
        # bottom edge 0.75, top edge 3.5, a quarter of the way up
        assert ramp.interpolate(0.75, 0.25) == pytest.approx(1.4375)

    def test_corners_match_samples(self, ramp):
        assert ramp.interpolate(0.0, 0.0) == pytest.approx(0.0)
        assert ramp.interpolate(1.0, 0.0) == pytest.approx(1.0)
        assert ramp.interpolate(0.0, 1.0) == pytest.approx(2.0)
        assert ramp.interpolate(1.0, 1.0) == pytest.approx(4.0)

    def test_outside_is_none(self, ramp):
        assert ramp.interpolate(1.5, 0.5) is None
        assert ramp.interpolate(0.5, -0.1) is None
        assert ramp.interpolate(float('nan'), 0.5) is None

    def test_far_edge_belongs_to_last_cell(self):
        grid = HeightGrid.flat((0.0, 2.0), (0.0, 1.0), z=0.0, nx=3)
        assert grid.locate_cell(2.0, 1.0) == (1, 0)
        assert grid.locate_cell(1.0, 0.5) == (1, 0)
        assert grid.locate_cell(0.5, 0.5) == (0, 0)

    def test_sampler_takes_precedence(self):
        grid = HeightGrid.from_function(lambda x, y: x * x, [0.0, 2.0], [0.0, 1.0])
        assert grid.sample_height(1.0, 0.5) == pytest.approx(1.0)
        assert grid.interpolate(1.0, 0.5) == pytest.approx(2.0)


class TestHeightGridMesh:
    """Tests for grid triangulation."""

    def test_counts(self, flat_grid_3x3):
        mesh = flat_grid_3x3.to_mesh()
        assert mesh.vertex_count == 9
        assert mesh.face_count == 8

    def test_mesh_keeps_grid(self, flat_grid):
        mesh = flat_grid.to_mesh()
        assert mesh.grid_backed
        assert mesh.get_height_field() is flat_grid

    def test_vertex_order(self, flat_grid_3x3):
        mesh = flat_grid_3x3.to_mesh()
        # index j * nx + i
        assert mesh.vertices[5] == (10.0, 5.0, 10.0)

    def test_bbox(self, flat_grid):
        bbox = flat_grid.bbox
        assert (bbox.min_x, bbox.min_y, bbox.max_x, bbox.max_y) == (0.0, 0.0, 10.0, 10.0)

    def test_shape(self, flat_grid_3x3):
        assert flat_grid_3x3.shape == (3, 3)
