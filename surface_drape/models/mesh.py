"""
Mesh data model for Surface Drape.

Provides the MeshStore interface consumed from the scene and the
SurfaceMesh class the engine works on: an arena of vertices with
index-based triangle faces.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple
import math

from .geometry import BBox, Point3D
from .height_grid import HeightGrid
from .triangle import SurfaceTriangle
from ..errors import InvalidMesh

Vertex = Tuple[float, float, float]
Face = Tuple[int, int, int]


class MeshStore(ABC):
    """Read-only view over a triangulated surface owned by the scene."""

    @abstractmethod
    def get_vertices(self) -> Sequence[Vertex]:
        """Vertex positions as (x, y, z)."""
        pass

    @abstractmethod
    def get_faces(self) -> Sequence[Face]:
        """Triangles as 0-based vertex index triples."""
        pass

    @abstractmethod
    def get_bounding_box(self) -> Optional[BBox]:
        """Horizontal extent, or None for an empty mesh."""
        pass

    def get_height_field(self) -> Optional[HeightGrid]:
        """Underlying height field, if the surface is one."""
        return None


@dataclass
class SurfaceMesh(MeshStore):
    """
    Triangulated surface.

    Attributes:
        vertices: List of (x, y, z) vertex positions
        faces: List of (a, b, c) vertex indices (0-based)
        height_field: Optional grid/function the surface samples
        grid_backed: True when vertices and faces are exactly the
            triangulation of height_field, so cell lookup by index
            arithmetic is valid

    The engine never mutates a SurfaceMesh it was given; refinement
    builds a new one.
    """
    vertices: List[Vertex] = field(default_factory=list)
    faces: List[Face] = field(default_factory=list)
    height_field: Optional[HeightGrid] = None
    grid_backed: bool = False

    # MeshStore interface

    def get_vertices(self) -> List[Vertex]:
        return self.vertices

    def get_faces(self) -> List[Face]:
        return self.faces

    def get_bounding_box(self) -> Optional[BBox]:
        if not self.vertices:
            return None
        return BBox.from_xyz(self.vertices)

    def get_height_field(self) -> Optional[HeightGrid]:
        return self.height_field

    @property
    def vertex_count(self) -> int:
        """Number of vertices."""
        return len(self.vertices)

    @property
    def face_count(self) -> int:
        """Number of triangles."""
        return len(self.faces)

    def is_empty(self) -> bool:
        """Check if mesh has no faces."""
        return len(self.faces) == 0

    def triangles(self) -> List[SurfaceTriangle]:
        """
        Build SurfaceTriangles for every non-degenerate face.

        Triangle.index is the face index, so skipped faces leave gaps.
        """
        result = []
        for i, (a, b, c) in enumerate(self.faces):
            tri = SurfaceTriangle.from_vertices(
                Point3D(*self.vertices[a]),
                Point3D(*self.vertices[b]),
                Point3D(*self.vertices[c]),
                index=i,
            )
            if tri is not None:
                result.append(tri)
        return result

    def validate(self) -> List[str]:
        """
        Validate mesh integrity.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []
        max_idx = len(self.vertices)

        for i, v in enumerate(self.vertices):
            if len(v) != 3:
                errors.append(f"Vertex {i} has {len(v)} coordinates, expected 3")
            elif not all(math.isfinite(c) for c in v):
                errors.append(f"Vertex {i} has non-finite coordinates {v}")

        for i, face in enumerate(self.faces):
            if len(face) != 3:
                errors.append(f"Face {i} has {len(face)} vertices, expected 3")
                continue

            for idx in face:
                if idx < 0 or idx >= max_idx:
                    errors.append(
                        f"Face {i} has invalid vertex index {idx} "
                        f"(valid range: 0-{max_idx - 1})"
                    )

        return errors

    def ensure_valid(self) -> None:
        """Raise InvalidMesh listing the first problems, if any."""
        errors = self.validate()
        if errors:
            shown = "; ".join(errors[:5])
            more = f" (+{len(errors) - 5} more)" if len(errors) > 5 else ""
            raise InvalidMesh(f"Invalid mesh: {shown}{more}")

    @staticmethod
    def from_store(store: MeshStore) -> 'SurfaceMesh':
        """
        Take a snapshot of any MeshStore as a SurfaceMesh.

        A SurfaceMesh is returned as-is; other stores are copied so the
        engine works on its own arrays.
        """
        if isinstance(store, SurfaceMesh):
            return store

        vertices = [tuple(float(c) for c in v) for v in store.get_vertices()]
        faces = [tuple(int(i) for i in f) for f in store.get_faces()]
        return SurfaceMesh(
            vertices=vertices,
            faces=faces,
            height_field=store.get_height_field(),
        )

    def __repr__(self) -> str:
        kind = ", grid" if self.grid_backed else ""
        return f"SurfaceMesh(vertices={len(self.vertices)}, faces={len(self.faces)}{kind})"
