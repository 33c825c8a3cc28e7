"""
Surface Drape

Projects curves onto triangulated 3D surfaces:
- drapes 2D lines over height fields so they follow the terrain
- intersects implicit scalar functions (planes, spheres, ...) with meshes

Can be used as:
- Library: from surface_drape import DrapeEngine
- CLI tool: python -m surface_drape.main
"""

__version__ = "0.1.0"
__author__ = "Surface Drape Team"

from .config import DrapeConfig, DEFAULT_CONFIG
from .engine import DrapeEngine, DrapeReport, drape
from .errors import (
    DrapeError,
    InvalidFunctionContract,
    EmptyMesh,
    InvalidMesh,
    InvalidInputLine,
    MeshLoadError,
)
from .functions import ImplicitFunction, FunctionAdapter, plane, sphere, paraboloid
from .models import (
    HeightGrid,
    InputLine,
    MeshStore,
    SurfaceMesh,
    DrapeTable,
    Polyline3D,
    SegmentSet,
)

__all__ = [
    'DrapeConfig', 'DEFAULT_CONFIG',
    'DrapeEngine', 'DrapeReport', 'drape',
    'DrapeError', 'InvalidFunctionContract', 'EmptyMesh', 'InvalidMesh',
    'InvalidInputLine', 'MeshLoadError',
    'ImplicitFunction', 'FunctionAdapter', 'plane', 'sphere', 'paraboloid',
    'HeightGrid', 'InputLine', 'MeshStore', 'SurfaceMesh',
    'DrapeTable', 'Polyline3D', 'SegmentSet',
]
