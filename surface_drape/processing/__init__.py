"""
Processing modules for Surface Drape.

Contains spatial indexing, mesh refinement, height interpolation,
implicit-function intersection and segment assembly.
"""

from .spatial_index import SpatialIndex, GridSpatialIndex
from .refiner import MeshRefiner, RefineResult, refine_mesh, subdivide
from .interpolator import HeightFieldInterpolator, DrapeStats, drape_line
from .intersector import (
    ImplicitIntersector,
    EdgeCrossing,
    IntersectStats,
    compute_edge_crossings,
    intersect_mesh,
)
from .assembler import (
    assemble_polyline,
    assemble_segments,
    chain_segments,
    chains_to_polyline,
    SegmentChain,
)

__all__ = [
    'SpatialIndex',
    'GridSpatialIndex',
    'MeshRefiner',
    'RefineResult',
    'refine_mesh',
    'subdivide',
    'HeightFieldInterpolator',
    'DrapeStats',
    'drape_line',
    'ImplicitIntersector',
    'EdgeCrossing',
    'IntersectStats',
    'compute_edge_crossings',
    'intersect_mesh',
    'assemble_polyline',
    'assemble_segments',
    'chain_segments',
    'chains_to_polyline',
    'SegmentChain',
]
