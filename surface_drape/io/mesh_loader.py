"""
OBJ mesh loader for Surface Drape.

Loads triangulated surfaces from Wavefront OBJ files as SurfaceMesh.
Quads are split into two triangles and larger polygons are fanned, so
terrain exports made of quad grids load directly.
"""

from pathlib import Path
from typing import List, Tuple
import logging

from ..errors import MeshLoadError
from ..models.mesh import SurfaceMesh, Vertex, Face

logger = logging.getLogger(__name__)


def load_mesh(filepath: str) -> SurfaceMesh:
    """
    Load a mesh from an OBJ file.

    Supported records:
        - Vertices: v x y z
        - Faces: f a b c [d ...] with 1-based or negative (relative)
          indices, in any of the v, v/vt, v//vn, v/vt/vn forms

    Everything else (normals, texture coordinates, groups, materials)
    is ignored.

    Args:
        filepath: Path to .obj file

    Returns:
        SurfaceMesh with 0-based triangle faces

    Raises:
        MeshLoadError: file missing, a vertex record is malformed, or
            the file contains no vertices/faces
        InvalidMesh: a face references a vertex that does not exist
    """
    path = Path(filepath)
    if not path.exists():
        raise MeshLoadError(f"Mesh file not found: {filepath}")

    logger.info(f"Loading mesh from {filepath}")

    vertices: List[Vertex] = []
    faces: List[Face] = []
    polygons_split = 0

    with open(path, 'r', encoding='utf-8') as f:
        for line_num, line in enumerate(f, 1):
            line = line.strip()

            if not line or line.startswith('#'):
                continue

            if line.startswith('v '):
                try:
                    parts = line.split()
                    vertices.append((float(parts[1]), float(parts[2]), float(parts[3])))
                except (IndexError, ValueError):
                    raise MeshLoadError(f"Invalid vertex at line {line_num}: {line}")

            elif line.startswith('f '):
                try:
                    indices = [
                        _resolve_index(part, len(vertices))
                        for part in line.split()[1:]
                    ]
                except ValueError:
                    logger.warning(f"Invalid face at line {line_num}: {line}")
                    continue

                if len(indices) < 3:
                    logger.warning(
                        f"Face with {len(indices)} vertices at line {line_num}, skipped"
                    )
                    continue

                faces.extend(_fan(indices))
                if len(indices) > 3:
                    polygons_split += 1

    if not vertices:
        raise MeshLoadError(f"No vertices found in mesh file: {filepath}")

    if not faces:
        raise MeshLoadError(f"No faces found in mesh file: {filepath}")

    mesh = SurfaceMesh(vertices=vertices, faces=faces)
    mesh.ensure_valid()

    logger.info(
        f"Loaded {mesh.vertex_count} vertices and {mesh.face_count} triangles"
        + (f" ({polygons_split} polygons split)" if polygons_split else "")
    )
    return mesh


def _resolve_index(part: str, vertex_count: int) -> int:
    """Convert one OBJ face index to a 0-based vertex index."""
    idx = int(part.split('/')[0])
    if idx < 0:
        # Negative indices are relative to the vertices read so far
        return vertex_count + idx
    if idx == 0:
        raise ValueError("OBJ indices start at 1")
    return idx - 1


def _fan(indices: List[int]) -> List[Tuple[int, int, int]]:
    """
    Triangulate a convex polygon as a fan around its first vertex.

    A quad (0, 1, 2, 3) becomes (0, 1, 2) and (0, 2, 3).
    """
    first = indices[0]
    return [
        (first, indices[k], indices[k + 1])
        for k in range(1, len(indices) - 1)
    ]
