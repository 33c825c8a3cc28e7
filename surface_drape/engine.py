"""
Drape engine for Surface Drape.

Orchestrates one call: select the mode from the target, refine the
mesh if asked to, compute geometry, then either hand it to a Renderer
or return it as an x, y, z table.

Modes:
- line: the target is line data; each run is draped over the surface
  as a height field and the runs are reassembled in input order.
- intersection: the target is an implicit function; its zero set on
  the mesh is returned as unordered segments.

Every call is synchronous and self-contained. The input mesh is never
modified and any failure aborts the call without partial results.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, List, Optional, Union
import logging
import time

from .config import DrapeConfig, DEFAULT_CONFIG
from .errors import InvalidInputLine
from .functions import ImplicitFunction, as_implicit_function
from .io.renderer import Renderer
from .models.line import InputLine
from .models.mesh import MeshStore, SurfaceMesh
from .models.results import DrapeTable, Polyline3D, SegmentSet
from .processing.assembler import assemble_polyline, assemble_segments
from .processing.interpolator import HeightFieldInterpolator
from .processing.intersector import ImplicitIntersector
from .processing.refiner import MeshRefiner

logger = logging.getLogger(__name__)

MODE_LINE = "line"
MODE_INTERSECTION = "intersection"


@dataclass
class DrapeReport:
    """Statistics from the last engine call."""
    mode: str = ""
    mesh_vertices: int = 0
    mesh_faces: int = 0
    refined_vertices: int = 0
    refine_rounds: int = 0
    input_points: int = 0
    input_runs: int = 0
    output_runs: int = 0
    points_outside: int = 0
    segments: int = 0
    processing_time_ms: int = 0
    warnings: List[str] = field(default_factory=list)


class DrapeEngine:
    """
    Projects lines and implicit-function intersections onto meshes.

    Args:
        config: Runtime configuration
        renderer: Optional renderer used when plot=True
    """

    def __init__(
        self,
        config: DrapeConfig = DEFAULT_CONFIG,
        renderer: Optional[Renderer] = None
    ):
        self.config = config
        self.renderer = renderer
        self.refiner = MeshRefiner(config.max_refine_rounds)
        self.report = DrapeReport()

    # -------------------------------------------------------------------------
    # Public entry points
    # -------------------------------------------------------------------------

    def run(
        self,
        mesh: MeshStore,
        target: Any,
        z_offset: float = 0.0,
        min_vertices: int = 0,
        plot: bool = False,
        log_axes: str = "",
        **style: Any
    ) -> Union[DrapeTable, Any]:
        """
        Drape a line or intersect a function, then emit the result.

        Args:
            mesh: Surface to project onto (read-only)
            target: ImplicitFunction or callable for intersection mode;
                InputLine, {'x': [...], 'y': [...]} mapping or sequence
                of (x, y) pairs (None for a break) for line mode
            z_offset: Height added to draped points (line mode only)
            min_vertices: Refine the mesh to at least this many vertices
            plot: Send the geometry to the renderer instead of returning it
            log_axes: Axes ("x", "y", "xy") to log10-transform in line mode
            **style: Passed through to the renderer untouched

        Returns:
            Renderer handle if plot is True, otherwise a DrapeTable

        Raises:
            DrapeError subclasses for invalid meshes, lines or functions
            ValueError: plot requested without a renderer
        """
        if plot and self.renderer is None:
            raise ValueError("plot=True requires a renderer")

        if select_mode(target) == MODE_INTERSECTION:
            result = self.intersect(mesh, target, min_vertices=min_vertices)
            if plot:
                return self.renderer.draw_segments(result, **style)
            return result.to_table()

        line = as_input_line(target)
        result = self.drape_line(
            mesh, line, z_offset=z_offset,
            min_vertices=min_vertices, log_axes=log_axes
        )
        if plot:
            return self.renderer.draw_polyline(result, **style)
        return result.to_table()

    def drape_line(
        self,
        mesh: MeshStore,
        line: InputLine,
        z_offset: float = 0.0,
        min_vertices: int = 0,
        log_axes: str = ""
    ) -> Polyline3D:
        """
        Drape a line over a height-field surface.

        Returns:
            Polyline3D aligned point-for-point with the input line
        """
        start_time = time.time()
        self.report = DrapeReport(mode=MODE_LINE)

        surface = self._prepare(mesh, min_vertices)

        if log_axes:
            line = line.log_transform(log_axes)

        runs = line.runs()
        self.report.input_points = len(line)
        self.report.input_runs = len(runs)

        interpolator = HeightFieldInterpolator(
            surface, cells_per_side=self.config.index_cells_per_side
        )
        draped = [
            (run.start, interpolator.drape_run(run, z_offset))
            for run in runs
        ]
        polyline = assemble_polyline(draped, len(line))

        self.report.points_outside = interpolator.stats.points_outside
        self.report.output_runs = polyline.run_count
        self.report.processing_time_ms = int((time.time() - start_time) * 1000)

        if surface.is_empty() and len(line):
            self._warn("Mesh has no faces; every point is outside the surface")
        elif self.report.points_outside:
            logger.info(f"{self.report.points_outside} points fell outside the surface")

        logger.info(
            f"Draped {self.report.input_points} points in {self.report.input_runs} runs "
            f"into {self.report.output_runs} output runs"
        )
        return polyline

    def intersect(
        self,
        mesh: MeshStore,
        func: Any,
        min_vertices: int = 0
    ) -> SegmentSet:
        """
        Intersect an implicit function with a surface.

        Returns:
            Unordered SegmentSet

        Raises:
            EmptyMesh: the mesh has no faces
            InvalidFunctionContract: func breaks the batch contract
        """
        start_time = time.time()
        self.report = DrapeReport(mode=MODE_INTERSECTION)

        func = as_implicit_function(func)
        surface = self._prepare(mesh, min_vertices)

        intersector = ImplicitIntersector(self.config.degenerate_area_eps)
        segments = assemble_segments(intersector.intersect(surface, func))

        self.report.segments = len(segments)
        self.report.processing_time_ms = int((time.time() - start_time) * 1000)
        if segments.is_empty():
            logger.info(f"{func!r} does not cross the surface")
        return segments

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _prepare(self, mesh: MeshStore, min_vertices: int) -> SurfaceMesh:
        """Snapshot, validate and optionally refine the mesh."""
        surface = SurfaceMesh.from_store(mesh)
        surface.ensure_valid()

        self.report.mesh_vertices = surface.vertex_count
        self.report.mesh_faces = surface.face_count

        if min_vertices > 0 and surface.vertex_count < min_vertices:
            result = self.refiner.refine(surface, min_vertices)
            surface = result.mesh
            self.report.refine_rounds = result.rounds
            if not result.reached_target and not surface.is_empty():
                self._warn(
                    f"Refinement reached {result.final_vertices} of "
                    f"{min_vertices} requested vertices"
                )

        self.report.refined_vertices = surface.vertex_count
        return surface

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.report.warnings.append(message)


def select_mode(target: Any) -> str:
    """Intersection mode for functions, line mode for everything else."""
    if isinstance(target, ImplicitFunction) or callable(target):
        return MODE_INTERSECTION
    return MODE_LINE


def as_input_line(target: Any) -> InputLine:
    """
    Convert line data to an InputLine.

    Accepts an InputLine, a mapping with 'x' and 'y' sequences, or an
    iterable of (x, y) pairs where None marks a break.
    """
    if isinstance(target, InputLine):
        return target
    if isinstance(target, Mapping):
        if "x" not in target or "y" not in target:
            raise InvalidInputLine("Line mapping needs both 'x' and 'y' entries")
        return InputLine.from_xy(target["x"], target["y"])
    try:
        pairs = iter(target)
    except TypeError:
        raise InvalidInputLine(f"Cannot read line data from {type(target).__name__}")
    return InputLine.from_pairs(pairs)


def drape(
    mesh: MeshStore,
    target: Any,
    z_offset: float = 0.0,
    min_vertices: int = 0,
    config: DrapeConfig = DEFAULT_CONFIG
) -> DrapeTable:
    """
    Convenience function: drape or intersect and return the table.

    Args:
        mesh: Surface to project onto
        target: Line data or implicit function (see DrapeEngine.run)
        z_offset: Height added to draped points
        min_vertices: Refine the mesh to at least this many vertices
        config: Runtime configuration

    Returns:
        DrapeTable of x, y, z values
    """
    return DrapeEngine(config).run(
        mesh, target, z_offset=z_offset, min_vertices=min_vertices
    )
