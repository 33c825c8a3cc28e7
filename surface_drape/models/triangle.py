"""
Triangle model for Surface Drape.

Provides SurfaceTriangle, a single mesh face with a precomputed plane
equation for fast height lookup at any (x, y) inside its projection.
"""

from dataclasses import dataclass
from typing import Optional, Tuple
import math

from .geometry import Point2D, Point3D, BBox
from ..config import VERTICAL_NORMAL_EPS, POINT_IN_TRIANGLE_EPS


@dataclass
class SurfaceTriangle:
    """
    A single mesh triangle with precomputed plane equation.

    The plane equation is: nx*x + ny*y + nz*z = d
    This allows fast computation of Z at any (x,y) point.

    Attributes:
        v0, v1, v2: Triangle vertices
        bbox: 2D bounding box for spatial queries
        normal: Unit normal vector (nx, ny, nz)
        d: Plane equation constant
        index: Face index in the owning mesh
    """
    v0: Point3D
    v1: Point3D
    v2: Point3D
    bbox: BBox
    normal: Tuple[float, float, float]
    d: float
    index: int = 0

    @property
    def is_vertical(self) -> bool:
        """True if the triangle has no area in XY projection."""
        return abs(self.normal[2]) < VERTICAL_NORMAL_EPS

    def z_at_xy(self, x: float, y: float) -> Optional[float]:
        """
        Compute Z at (x,y) using plane equation.

        Returns:
            Z value at the given (x,y), or None if plane is vertical.
        """
        nx, ny, nz = self.normal

        if abs(nz) < VERTICAL_NORMAL_EPS:
            return None

        # Solve for z: nx*x + ny*y + nz*z = d
        return (self.d - nx * x - ny * y) / nz

    def contains_point_2d(self, p: Point2D) -> bool:
        """
        Check if 2D point is inside triangle (XY projection).

        Points on an edge or vertex count as inside.
        """
        return _point_in_triangle_2d(
            p,
            Point2D(self.v0.x, self.v0.y),
            Point2D(self.v1.x, self.v1.y),
            Point2D(self.v2.x, self.v2.y)
        )

    @staticmethod
    def from_vertices(v0: Point3D, v1: Point3D, v2: Point3D,
                      index: int = 0) -> Optional['SurfaceTriangle']:
        """
        Create a SurfaceTriangle from three vertices.

        Returns:
            SurfaceTriangle with precomputed plane equation,
            or None if triangle is degenerate.
        """
        # Edge vectors
        e1 = v1 - v0
        e2 = v2 - v0

        # Cross product for normal
        nx = e1.y * e2.z - e1.z * e2.y
        ny = e1.z * e2.x - e1.x * e2.z
        nz = e1.x * e2.y - e1.y * e2.x

        length = math.sqrt(nx * nx + ny * ny + nz * nz)
        if length < 1e-12:
            return None

        nx /= length
        ny /= length
        nz /= length

        # Plane constant: n dot v0
        d = nx * v0.x + ny * v0.y + nz * v0.z

        xs = [v0.x, v1.x, v2.x]
        ys = [v0.y, v1.y, v2.y]
        bbox = BBox(min(xs), min(ys), max(xs), max(ys))

        return SurfaceTriangle(
            v0=v0, v1=v1, v2=v2,
            bbox=bbox,
            normal=(nx, ny, nz),
            d=d,
            index=index
        )


def _point_in_triangle_2d(p: Point2D, v0: Point2D, v1: Point2D, v2: Point2D) -> bool:
    """
    Check if 2D point is inside triangle using sign of cross products.

    Returns True if point is inside or on edge. The tolerance is scaled
    by the doubled triangle area so points on a shared edge are found
    in at least one of the two neighbours.
    """
    def sign(p1: Point2D, p2: Point2D, p3: Point2D) -> float:
        return (p1.x - p3.x) * (p2.y - p3.y) - (p2.x - p3.x) * (p1.y - p3.y)

    tol = POINT_IN_TRIANGLE_EPS * abs((v1 - v0).cross(v2 - v0))

    d1 = sign(p, v0, v1)
    d2 = sign(p, v1, v2)
    d3 = sign(p, v2, v0)

    has_neg = (d1 < -tol) or (d2 < -tol) or (d3 < -tol)
    has_pos = (d1 > tol) or (d2 > tol) or (d3 > tol)

    return not (has_neg and has_pos)
