"""
Input/Output modules for Surface Drape.
"""

from .renderer import Renderer
from .mesh_loader import load_mesh
from .line_reader import load_line_csv
from .obj_exporter import (
    ExportStats,
    ObjLineRenderer,
    export_table_csv,
    validate_obj_file,
)

__all__ = [
    # Renderer contract
    'Renderer',
    # Mesh loading
    'load_mesh',
    # Line input
    'load_line_csv',
    # Export
    'ExportStats',
    'ObjLineRenderer',
    'export_table_csv',
    'validate_obj_file',
]
