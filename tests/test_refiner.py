"""Tests for mesh refinement."""

import pytest

from surface_drape.models import HeightGrid
from surface_drape.processing.refiner import MeshRefiner, refine_mesh, subdivide


class TestSubdivide:
    """Tests for one round of 1-to-4 subdivision."""

    def test_single_triangle(self, single_triangle):
        mesh = subdivide(single_triangle)
        assert mesh.vertex_count == 6
        assert mesh.face_count == 4

    def test_shared_edge_gets_one_midpoint(self, unit_square):
        # 4 vertices + 5 distinct edges
        mesh = subdivide(unit_square)
        assert mesh.vertex_count == 9
        assert mesh.face_count == 8
        assert len(set(mesh.vertices)) == mesh.vertex_count

    def test_input_untouched(self, unit_square):
        subdivide(unit_square)
        assert unit_square.vertex_count == 4
        assert unit_square.face_count == 2

    def test_linear_midpoints_without_height_field(self, single_triangle):
        mesh = subdivide(single_triangle)
        assert (0.5, 0.0, 0.0) in mesh.vertices
        assert (0.5, 0.5, 0.0) in mesh.vertices

    def test_height_field_is_resampled(self):
        grid = HeightGrid.from_function(lambda x, y: x * x, [0.0, 2.0], [0.0, 2.0])
        mesh = subdivide(grid.to_mesh())
        midpoint = [v for v in mesh.vertices if v[0] == 1.0 and v[1] == 0.0]
        assert midpoint == [(1.0, 0.0, 1.0)]
        assert mesh.height_field is grid
        assert not mesh.grid_backed

    def test_winding_preserved(self, single_triangle):
        mesh = subdivide(single_triangle)
        for a, b, c in mesh.faces:
            pa, pb, pc = mesh.vertices[a], mesh.vertices[b], mesh.vertices[c]
            signed = (pb[0] - pa[0]) * (pc[1] - pa[1]) - (pb[1] - pa[1]) * (pc[0] - pa[0])
            assert signed > 0


class TestMeshRefiner:
    """Tests for refining to a target vertex count."""

    def test_no_refinement_needed(self, unit_square):
        result = MeshRefiner().refine(unit_square, 4)
        assert result.mesh is unit_square
        assert result.rounds == 0
        assert result.reached_target

    def test_reaches_target(self, unit_square):
        result = MeshRefiner().refine(unit_square, 50)
        assert result.reached_target
        assert result.final_vertices >= 50
        assert result.mesh.vertex_count == result.final_vertices
        assert result.initial_vertices == 4

    def test_counts_never_decrease(self, unit_square):
        mesh = unit_square
        counts = [mesh.vertex_count]
        for _ in range(3):
            mesh = subdivide(mesh)
            counts.append(mesh.vertex_count)
        assert counts == sorted(counts)
        assert len(set(counts)) == len(counts)

    def test_round_cap(self, single_triangle):
        result = MeshRefiner(max_rounds=2).refine(single_triangle, 10 ** 6)
        assert result.rounds == 2
        assert not result.reached_target
        # 3 -> 6 -> 15
        assert result.final_vertices == 15

    def test_empty_mesh_unchanged(self):
        from surface_drape.models import SurfaceMesh

        empty = SurfaceMesh()
        result = MeshRefiner().refine(empty, 10)
        assert result.mesh is empty
        assert not result.reached_target

    def test_negative_rounds_rejected(self):
        with pytest.raises(ValueError):
            MeshRefiner(max_rounds=-1)

    def test_refine_mesh_function(self, single_triangle):
        mesh = refine_mesh(single_triangle, 6)
        assert mesh.vertex_count == 6
