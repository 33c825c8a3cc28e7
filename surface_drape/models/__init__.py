"""
Data models for Surface Drape.
"""

from .geometry import Point2D, Point3D, BBox, BREAK_POINT
from .height_grid import HeightGrid
from .triangle import SurfaceTriangle
from .mesh import MeshStore, SurfaceMesh
from .line import InputLine, LineRun
from .results import DrapeTable, Polyline3D, SegmentSet

__all__ = [
    'Point2D', 'Point3D', 'BBox', 'BREAK_POINT',
    'HeightGrid',
    'SurfaceTriangle',
    'MeshStore', 'SurfaceMesh',
    'InputLine', 'LineRun',
    'DrapeTable', 'Polyline3D', 'SegmentSet',
]
