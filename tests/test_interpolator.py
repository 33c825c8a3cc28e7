"""Tests for height-field interpolation."""

import math

import pytest

from surface_drape.models import HeightGrid, InputLine, SurfaceMesh
from surface_drape.processing.interpolator import HeightFieldInterpolator, drape_line
from surface_drape.processing.spatial_index import GridSpatialIndex

from .helpers import grid_axis, strip_grid


class TestFlatSurface:
    """A flat surface must reproduce its height exactly."""

    POINTS = [(0.0, 0.0), (10.0, 10.0), (5.0, 5.0), (3.3, 7.7), (9.99, 0.01), (0.0, 6.2)]

    def test_grid_backed(self, flat_grid_3x3):
        interp = HeightFieldInterpolator(flat_grid_3x3.to_mesh())
        for x, y in self.POINTS:
            assert interp.height_at(x, y) == 10.0

    def test_irregular(self, flat_grid_3x3):
        interp = HeightFieldInterpolator(strip_grid(flat_grid_3x3.to_mesh()))
        assert interp.grid is None
        for x, y in self.POINTS:
            assert interp.height_at(x, y) == 10.0


class TestSlopedSurface:
    """Piecewise-linear interpolation is exact on planes."""

    def test_plane(self):
        grid = HeightGrid.from_function(
            lambda x, y: 2 * x + 3 * y + 1, grid_axis(0, 4, 5), grid_axis(0, 4, 5)
        )
        interp = HeightFieldInterpolator(strip_grid(grid.to_mesh()))
        for x, y in [(0.5, 0.5), (1.25, 3.75), (4.0, 0.0)]:
            assert interp.height_at(x, y) == pytest.approx(2 * x + 3 * y + 1)

    def test_grid_uses_bilinear(self):
        grid = HeightGrid(xs=[0.0, 1.0], ys=[0.0, 1.0], z=[[0.0, 1.0], [2.0, 4.0]])
        assert HeightFieldInterpolator(grid.to_mesh()).height_at(0.75, 0.25) == \
            pytest.approx(1.4375)
        # the same triangles without the grid follow the triangle plane
        assert HeightFieldInterpolator(strip_grid(grid.to_mesh())).height_at(0.75, 0.25) == \
            pytest.approx(1.5)


class TestOutside:
    """Tests for points that miss the surface."""

    def test_outside_extent(self, flat_mesh):
        interp = HeightFieldInterpolator(flat_mesh)
        assert interp.height_at(20.0, 5.0) is None
        assert interp.stats.points_outside == 1

    def test_inside_bbox_outside_triangles(self, single_triangle):
        interp = HeightFieldInterpolator(single_triangle)
        assert interp.height_at(0.9, 0.9) is None
        assert interp.height_at(0.2, 0.2) == 0.0

    def test_empty_mesh(self):
        interp = HeightFieldInterpolator(SurfaceMesh())
        assert interp.height_at(0.0, 0.0) is None


class TestNonHeightField:
    """Overlapping and vertical triangles."""

    @pytest.fixture
    def stacked(self):
        vertices = [
            (0.0, 0.0, 0.0), (4.0, 0.0, 0.0), (0.0, 4.0, 0.0),
            (0.0, 0.0, 5.0), (4.0, 0.0, 5.0), (0.0, 4.0, 5.0),
            (1.0, 1.0, 0.0), (2.0, 1.0, 0.0), (1.0, 1.0, 9.0),
        ]
        faces = [(0, 1, 2), (3, 4, 5), (6, 7, 8)]
        return SurfaceMesh(vertices=vertices, faces=faces)

    def test_topmost_wins(self, stacked):
        assert HeightFieldInterpolator(stacked).height_at(1.0, 1.0) == 5.0

    def test_vertical_triangle_ignored(self, stacked):
        assert HeightFieldInterpolator(stacked).height_at(1.5, 1.0) == 5.0


class TestDrapeRun:
    """Tests for draping runs."""

    def test_offset_applied(self, flat_mesh):
        run = InputLine.from_xy([0, 10], [5, 5]).runs()[0]
        points = drape_line(flat_mesh, run, z_offset=2.0)
        assert [p.z for p in points] == [12.0, 12.0]

    def test_outside_point_is_break(self, flat_mesh):
        run = InputLine.from_xy([1, 20, 3], [1, 1, 1]).runs()[0]
        points = HeightFieldInterpolator(flat_mesh).drape_run(run)
        assert len(points) == 3
        assert points[1].is_break()
        assert math.isnan(points[1].x)
        assert points[2].to_tuple() == (3.0, 1.0, 10.0)


class TestGridSpatialIndex:
    """Tests for the triangle spatial index."""

    def test_query_point(self, unit_square):
        index = GridSpatialIndex(unit_square.triangles(), cells_per_side=4)
        from surface_drape.models import Point2D

        assert index.query_point(Point2D(0.9, 0.1)) != []
        assert index.query_point(Point2D(2.0, 2.0)) == []

    def test_stats(self, unit_square):
        stats = GridSpatialIndex(unit_square.triangles(), cells_per_side=4).get_stats()
        assert stats['num_triangles'] == 2
        assert stats['num_cells'] > 0

    def test_interpolator_indexes_mesh_extent(self):
        mesh = SurfaceMesh(
            vertices=[(0.0, 0.0, 1.0), (4.0, 0.0, 1.0), (0.0, 2.0, 1.0), (8.0, 8.0, 1.0)],
            faces=[(0, 1, 2)],
        )
        interp = HeightFieldInterpolator(mesh, cells_per_side=8)
        bounds = interp.spatial_index.bounds
        assert (bounds.min_x, bounds.min_y, bounds.max_x, bounds.max_y) == (0.0, 0.0, 8.0, 8.0)
        assert interp.spatial_index.cell_size == 1.0
        assert interp.height_at(1.0, 0.5) == 1.0
        assert interp.height_at(6.0, 6.0) is None
