"""
Core geometry types for Surface Drape.

Provides Point2D, Point3D and BBox used throughout the engine for
query points, mesh vertices and horizontal extents.
"""

from dataclasses import dataclass
from typing import Iterable, Tuple
import math


@dataclass(frozen=True, slots=True)
class Point2D:
    """2D point in the XY plane."""
    x: float
    y: float

    def __sub__(self, other: 'Point2D') -> 'Point2D':
        """Vector subtraction."""
        return Point2D(self.x - other.x, self.y - other.y)

    def cross(self, other: 'Point2D') -> float:
        """2D cross product (returns scalar z-component)."""
        return self.x * other.y - self.y * other.x


@dataclass(frozen=True, slots=True)
class Point3D:
    """3D point; a NaN coordinate marks a break."""
    x: float
    y: float
    z: float

    def to_tuple(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def is_break(self) -> bool:
        """True if this point is a break marker."""
        return math.isnan(self.x) or math.isnan(self.y) or math.isnan(self.z)

    def __sub__(self, other: 'Point3D') -> 'Point3D':
        """Vector subtraction."""
        return Point3D(self.x - other.x, self.y - other.y, self.z - other.z)


BREAK_POINT = Point3D(math.nan, math.nan, math.nan)


@dataclass(slots=True)
class BBox:
    """Axis-aligned bounding box in 2D."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    def contains_point(self, p: Point2D) -> bool:
        """Check if point is inside bbox (inclusive)."""
        return (
            self.min_x <= p.x <= self.max_x and
            self.min_y <= p.y <= self.max_y
        )

    @property
    def width(self) -> float:
        """Width in X direction."""
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        """Height in Y direction."""
        return self.max_y - self.min_y

    @staticmethod
    def from_xyz(vertices: Iterable[Tuple[float, float, float]]) -> 'BBox':
        """Create 2D bbox from (x, y, z) tuples (ignores Z)."""
        vertices = list(vertices)
        if not vertices:
            raise ValueError("Cannot create BBox from empty point list")

        xs = [v[0] for v in vertices]
        ys = [v[1] for v in vertices]
        return BBox(min(xs), min(ys), max(xs), max(ys))
