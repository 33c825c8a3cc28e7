"""Tests for the drape engine."""

import dataclasses
import math

import pytest

from surface_drape import DrapeConfig, DrapeEngine, drape
from surface_drape.engine import MODE_INTERSECTION, MODE_LINE, as_input_line, select_mode
from surface_drape.errors import EmptyMesh, InvalidInputLine, InvalidMesh
from surface_drape.functions import plane, sphere
from surface_drape.models import HeightGrid, InputLine, MeshStore, SurfaceMesh

from .helpers import RecordingRenderer, grid_axis


class TupleStore(MeshStore):
    """External mesh store backed by tuples."""

    def __init__(self, mesh):
        self.mesh = mesh

    def get_vertices(self):
        return tuple(self.mesh.vertices)

    def get_faces(self):
        return tuple(self.mesh.faces)

    def get_bounding_box(self):
        return self.mesh.get_bounding_box()


class TestModeSelection:
    """Tests for choosing line or intersection mode."""

    def test_function_is_intersection(self):
        assert select_mode(plane(1, 0, 0, 0)) == MODE_INTERSECTION
        assert select_mode(lambda p: p[0]) == MODE_INTERSECTION

    def test_data_is_line(self):
        assert select_mode({'x': [0], 'y': [0]}) == MODE_LINE
        assert select_mode([(0, 0)]) == MODE_LINE

    def test_as_input_line(self):
        line = InputLine.from_xy([0], [0])
        assert as_input_line(line) is line
        assert len(as_input_line({'x': [0, 1], 'y': [0, 1]})) == 2
        assert len(as_input_line([(0, 0), None])) == 2

    def test_mapping_without_y(self):
        with pytest.raises(InvalidInputLine):
            as_input_line({'x': [0, 1]})

    def test_not_iterable(self):
        with pytest.raises(InvalidInputLine):
            as_input_line(3.5)


class TestLineMode:
    """Draping lines over height fields."""

    def test_flat_grid_with_offset(self, flat_mesh):
        table = DrapeEngine().run(flat_mesh, {'x': [0, 10], 'y': [5, 5]}, z_offset=2)
        assert table.mode == "line"
        assert table.x == [0.0, 10.0]
        assert table.z == [12.0, 12.0]

    def test_break_position_preserved(self, flat_mesh):
        engine = DrapeEngine()
        line = [(1, 1), (2, 2), None, (3, 3), (4, 4)]
        polyline = engine.drape_line(flat_mesh, as_input_line(line))
        assert len(polyline) == 5
        assert polyline.break_indices() == [2]
        assert polyline.run_count == 2
        assert engine.report.input_runs == 2
        assert engine.report.output_runs == 2

    def test_point_off_surface_splits_run(self, flat_mesh):
        engine = DrapeEngine()
        table = engine.run(flat_mesh, [(1, 1), (20, 5), (3, 3)])
        assert math.isnan(table.z[1])
        assert table.z[0] == 10.0 and table.z[2] == 10.0
        assert engine.report.points_outside == 1
        assert engine.report.output_runs == 2

    def test_empty_mesh_gives_all_nan(self):
        engine = DrapeEngine()
        table = engine.run(SurfaceMesh(), [(0, 0), (1, 1)])
        assert len(table) == 2
        assert all(math.isnan(z) for z in table.z)
        assert engine.report.warnings

    def test_log_axes(self):
        mesh = HeightGrid.flat((0.0, 2.0), (0.0, 2.0), z=3.0).to_mesh()
        table = DrapeEngine().run(mesh, {'x': [1, 10, 100], 'y': [1, 1, 1]}, log_axes="x")
        assert table.x == pytest.approx([0.0, 1.0, 2.0])
        assert table.z == [3.0, 3.0, 3.0]

    def test_refinement_follows_sampler(self):
        grid = HeightGrid.from_function(lambda x, y: x * x, [0.0, 2.0], [0.0, 2.0])
        mesh = grid.to_mesh()
        coarse = DrapeEngine().run(mesh, [(1.0, 1.0)])
        assert coarse.z[0] == pytest.approx(2.0)

        engine = DrapeEngine()
        fine = engine.run(mesh, [(1.0, 1.0)], min_vertices=100)
        assert fine.z[0] == pytest.approx(1.0)
        assert engine.report.refined_vertices >= 100
        assert engine.report.refine_rounds > 0
        assert mesh.vertex_count == 4

    def test_refinement_round_cap_warns(self, flat_mesh):
        engine = DrapeEngine(DrapeConfig(max_refine_rounds=1))
        engine.run(flat_mesh, [(1, 1)], min_vertices=1000)
        assert engine.report.refine_rounds == 1
        assert any("Refinement" in w for w in engine.report.warnings)

    def test_external_store(self, flat_mesh):
        table = DrapeEngine().run(TupleStore(flat_mesh), [(5, 5)])
        assert table.z == [10.0]

    def test_invalid_mesh(self):
        mesh = SurfaceMesh(vertices=[(0.0, 0.0, 0.0)], faces=[(0, 1, 2)])
        with pytest.raises(InvalidMesh):
            DrapeEngine().run(mesh, [(0, 0)])

    def test_drape_function(self, flat_mesh):
        assert drape(flat_mesh, [(5, 5)], z_offset=1.0).z == [11.0]


class TestIntersectionMode:
    """Intersecting implicit functions with meshes."""

    def test_segments_table(self, flat_grid_3x3):
        engine = DrapeEngine()
        table = engine.run(flat_grid_3x3.to_mesh(), plane(1, 0, 0, -2.5))
        assert table.mode == "segments"
        assert len(table) == 8
        assert engine.report.segments == 4
        assert engine.report.mode == MODE_INTERSECTION

    def test_no_crossing_is_empty(self, flat_mesh):
        table = DrapeEngine().run(flat_mesh, plane(0, 0, 1, 5))
        assert len(table) == 0

    def test_empty_mesh_raises(self):
        with pytest.raises(EmptyMesh):
            DrapeEngine().run(SurfaceMesh(), plane(1, 0, 0, 0))

    def test_refinement_improves_accuracy(self):
        axis = grid_axis(-2.0, 2.0, 5)
        mesh = HeightGrid.from_function(lambda x, y: 0.0, axis, axis).to_mesh()
        func = sphere((0.05, 0.1, 0.0), 1.3)

        def worst_error(table):
            return max(
                abs(math.hypot(x - 0.05, y - 0.1) - 1.3)
                for x, y in zip(table.x, table.y)
            )

        coarse = DrapeEngine().run(mesh, func)
        fine = DrapeEngine().run(mesh, func, min_vertices=2000)
        assert len(fine) > len(coarse)
        assert worst_error(fine) < worst_error(coarse)
        assert worst_error(fine) < 0.01


class TestRendering:
    """Plotting through a renderer."""

    def test_polyline_forwarded(self, flat_mesh, renderer):
        handle = DrapeEngine(renderer=renderer).run(
            flat_mesh, [(1, 1), (2, 2)], plot=True, color="red", width=2
        )
        assert handle == "handle-1"
        kind, polyline, style = renderer.calls[0]
        assert kind == 'polyline'
        assert len(polyline) == 2
        assert style == {'color': 'red', 'width': 2}

    def test_segments_forwarded(self, flat_grid_3x3):
        renderer = RecordingRenderer()
        handle = DrapeEngine(renderer=renderer).run(
            flat_grid_3x3.to_mesh(), plane(1, 0, 0, -2.5), plot=True, linestyle="--"
        )
        assert handle == "handle-1"
        kind, segments, style = renderer.calls[0]
        assert kind == 'segments'
        assert len(segments) == 4
        assert style == {'linestyle': '--'}

    def test_plot_without_renderer(self, flat_mesh):
        with pytest.raises(ValueError):
            DrapeEngine().run(flat_mesh, [(1, 1)], plot=True)


class TestConfig:
    """Tests for DrapeConfig validation."""

    def test_defaults(self):
        config = DrapeConfig()
        assert config.max_refine_rounds > 0

    def test_rejects_negative_rounds(self):
        with pytest.raises(ValueError):
            DrapeConfig(max_refine_rounds=-1)

    def test_has_no_logging_fields(self):
        names = {f.name for f in dataclasses.fields(DrapeConfig)}
        assert "verbose" not in names
        assert {"max_refine_rounds", "chain_tolerance"} <= names
