"""
Spatial indexing for triangle point location.

Provides efficient lookup of mesh triangles whose XY projection may
contain a query point, using a grid-based spatial index. Used for
irregular meshes; grid-backed meshes locate cells by index arithmetic.
"""

from abc import ABC, abstractmethod
from typing import List, Set, Tuple, Dict, Optional
import math

from ..config import INDEX_CELLS_PER_SIDE, INDEX_MIN_CELL_SIZE
from ..models.geometry import Point2D, BBox
from ..models.triangle import SurfaceTriangle


class SpatialIndex(ABC):
    """Abstract base class for spatial indexing."""

    @abstractmethod
    def query_point(self, point: Point2D) -> List[int]:
        """
        Query triangles that may contain the given point.

        Args:
            point: Point to query

        Returns:
            List of positions in the indexed triangle list
        """
        pass


class GridSpatialIndex(SpatialIndex):
    """
    Grid-based spatial index for mesh triangles.

    Divides the mesh extent into a regular grid and maps each cell
    to the triangles whose bbox overlaps it.
    """

    def __init__(
        self,
        triangles: List[SurfaceTriangle],
        cell_size: Optional[float] = None,
        bounds: Optional[BBox] = None,
        cells_per_side: int = INDEX_CELLS_PER_SIDE
    ):
        """
        Initialize spatial index.

        Args:
            triangles: List of triangles to index
            cell_size: Size of grid cells (derived from bounds if None)
            bounds: Optional bounds to use (computed from triangles if None)
            cells_per_side: Target cell count along the longer side when
                cell_size is derived
        """
        self.triangles = triangles

        # Compute bounds if not provided
        if bounds is not None:
            self.bounds = bounds
        elif triangles:
            min_x = min(t.bbox.min_x for t in triangles)
            min_y = min(t.bbox.min_y for t in triangles)
            max_x = max(t.bbox.max_x for t in triangles)
            max_y = max(t.bbox.max_y for t in triangles)
            self.bounds = BBox(min_x, min_y, max_x, max_y)
        else:
            self.bounds = BBox(0, 0, 0, 0)

        if cell_size is None:
            extent = max(self.bounds.width, self.bounds.height)
            cell_size = extent / max(1, cells_per_side)
        self.cell_size = max(cell_size, INDEX_MIN_CELL_SIZE)

        # Build grid
        self.grid: Dict[Tuple[int, int], Set[int]] = {}
        self._build_index()

    def _build_index(self) -> None:
        """Build the spatial index grid."""
        for tri_idx, triangle in enumerate(self.triangles):
            for cell in self._get_cells_for_bbox(triangle.bbox):
                if cell not in self.grid:
                    self.grid[cell] = set()
                self.grid[cell].add(tri_idx)

    def _get_cell(self, x: float, y: float) -> Tuple[int, int]:
        """Get grid cell coordinates for a point."""
        cell_x = int(math.floor((x - self.bounds.min_x) / self.cell_size))
        cell_y = int(math.floor((y - self.bounds.min_y) / self.cell_size))
        return (cell_x, cell_y)

    def _get_cells_for_bbox(self, bbox: BBox) -> List[Tuple[int, int]]:
        """Get all grid cells that overlap a bounding box."""
        min_cell = self._get_cell(bbox.min_x, bbox.min_y)
        max_cell = self._get_cell(bbox.max_x, bbox.max_y)

        cells = []
        for cx in range(min_cell[0], max_cell[0] + 1):
            for cy in range(min_cell[1], max_cell[1] + 1):
                cells.append((cx, cy))

        return cells

    def query_point(self, point: Point2D) -> List[int]:
        """
        Query triangles that may contain the given point.

        Args:
            point: Point to query

        Returns:
            Sorted list of triangle positions
        """
        if not self.bounds.contains_point(point):
            return []

        cell = self._get_cell(point.x, point.y)
        if cell in self.grid:
            return sorted(self.grid[cell])

        return []

    def get_stats(self) -> Dict[str, int]:
        """Get index statistics."""
        total_entries = sum(len(tris) for tris in self.grid.values())

        return {
            'num_triangles': len(self.triangles),
            'num_cells': len(self.grid),
            'total_entries': total_entries,
            'avg_per_cell': total_entries // max(1, len(self.grid)),
        }
