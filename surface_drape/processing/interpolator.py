"""
Height-field interpolation for Surface Drape.

Computes z for (x, y) query points against a mesh representing
z = f(x, y). Grid-backed meshes are sampled bilinearly after locating
the cell by index arithmetic; other meshes are searched through a
spatial index and interpolated on the plane of the containing triangle.

Meshes that are not single-valued height fields (folds, overhangs)
have no canonical answer. The policy here is to take the topmost
surface: when several triangles contain (x, y) in projection, the
largest z wins. Vertical triangles never contribute.
"""

from dataclasses import dataclass
from typing import List, Optional
import logging

from ..config import INDEX_CELLS_PER_SIDE
from ..models.geometry import Point2D, Point3D, BREAK_POINT
from ..models.line import LineRun
from ..models.mesh import SurfaceMesh
from .spatial_index import GridSpatialIndex

logger = logging.getLogger(__name__)


@dataclass
class DrapeStats:
    """Counters from draping one or more runs."""
    points_queried: int = 0
    points_outside: int = 0
    triangles_checked: int = 0


class HeightFieldInterpolator:
    """
    Interpolates surface height for query points.

    Builds its point-location structure once per mesh and can then
    drape any number of runs.
    """

    def __init__(
        self,
        mesh: SurfaceMesh,
        cells_per_side: int = INDEX_CELLS_PER_SIDE
    ):
        """
        Initialize interpolator.

        Args:
            mesh: Surface to sample (borrowed, never modified)
            cells_per_side: Spatial index resolution for irregular meshes
        """
        self.mesh = mesh
        self.stats = DrapeStats()
        self.grid = mesh.height_field if mesh.grid_backed else None

        if self.grid is None:
            self.triangles = mesh.triangles()
            self.spatial_index = GridSpatialIndex(
                self.triangles,
                bounds=mesh.get_bounding_box(),
                cells_per_side=cells_per_side
            )
            skipped = mesh.face_count - len(self.triangles)
            if skipped:
                logger.warning(f"Skipped {skipped} degenerate triangles")
        else:
            self.triangles = []
            self.spatial_index = None

    def height_at(self, x: float, y: float) -> Optional[float]:
        """
        Surface height at (x, y).

        Returns:
            Interpolated z, or None if (x, y) is outside the surface.
        """
        self.stats.points_queried += 1

        if self.grid is not None:
            z = self.grid.interpolate(x, y)
        else:
            z = self._query_triangles(Point2D(x, y))

        if z is None:
            self.stats.points_outside += 1
        return z

    def _query_triangles(self, point: Point2D) -> Optional[float]:
        """Topmost z among triangles containing point, or None."""
        candidates = self.spatial_index.query_point(point)
        self.stats.triangles_checked += len(candidates)

        best: Optional[float] = None
        for tri_idx in candidates:
            triangle = self.triangles[tri_idx]

            if triangle.is_vertical or not triangle.contains_point_2d(point):
                continue

            z = triangle.z_at_xy(point.x, point.y)
            if z is not None and (best is None or z > best):
                best = z

        return best

    def drape_run(self, run: LineRun, z_offset: float = 0.0) -> List[Point3D]:
        """
        Drape one run over the surface.

        Args:
            run: Consecutive valid input points
            z_offset: Added to every interpolated height

        Returns:
            One Point3D per input point; points outside the surface are
            break markers, which splits the run at that position.
        """
        result = []
        for p in run.points:
            z = self.height_at(p.x, p.y)
            if z is None:
                result.append(BREAK_POINT)
            else:
                result.append(Point3D(p.x, p.y, z + z_offset))
        return result


def drape_line(mesh: SurfaceMesh, run: LineRun, z_offset: float = 0.0) -> List[Point3D]:
    """
    Convenience function to drape a single run.

    Args:
        mesh: Surface to drape over
        run: Input run
        z_offset: Added to every interpolated height

    Returns:
        Draped points, with break markers outside the surface
    """
    return HeightFieldInterpolator(mesh).drape_run(run, z_offset)
