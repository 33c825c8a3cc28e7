"""
Mesh refinement for Surface Drape.

Subdivides a triangle mesh until it reaches a target vertex count so
that piecewise-linear interpolation and contouring follow nonlinear
surfaces and functions more closely.

Each round splits every triangle into four by inserting its three edge
midpoints. Midpoints are keyed by their sorted vertex pair, so an edge
shared by two triangles gets one vertex and the mesh stays crack-free.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import logging

from ..config import REFINE_MAX_ROUNDS
from ..models.height_grid import HeightGrid
from ..models.mesh import SurfaceMesh, Vertex, Face

logger = logging.getLogger(__name__)

EdgeKey = Tuple[int, int]


@dataclass
class RefineResult:
    """Result of mesh refinement."""
    mesh: SurfaceMesh
    rounds: int
    initial_vertices: int
    final_vertices: int
    reached_target: bool


class MeshRefiner:
    """
    Refines meshes by uniform 1-to-4 subdivision.

    New vertices of a height-field-backed mesh are re-sampled from the
    height field; otherwise they are the linear midpoint of their edge.
    """

    def __init__(self, max_rounds: int = REFINE_MAX_ROUNDS):
        """
        Initialize refiner.

        Args:
            max_rounds: Upper bound on subdivision rounds per call
        """
        if max_rounds < 0:
            raise ValueError("max_rounds must be non-negative")
        self.max_rounds = max_rounds

    def refine(self, mesh: SurfaceMesh, min_vertex_count: int) -> RefineResult:
        """
        Subdivide until mesh has at least min_vertex_count vertices.

        Stops early at the round cap; that is not an error, the last
        achieved density is returned. The input mesh is not modified.

        Args:
            mesh: Mesh to refine
            min_vertex_count: Target vertex count

        Returns:
            RefineResult with the (possibly unchanged) mesh
        """
        initial = mesh.vertex_count

        if initial >= min_vertex_count or mesh.is_empty():
            return RefineResult(
                mesh=mesh,
                rounds=0,
                initial_vertices=initial,
                final_vertices=initial,
                reached_target=initial >= min_vertex_count,
            )

        current = mesh
        rounds = 0
        while current.vertex_count < min_vertex_count and rounds < self.max_rounds:
            current = subdivide(current)
            rounds += 1
            logger.debug(
                f"Refinement round {rounds}: {current.vertex_count} vertices, "
                f"{current.face_count} faces"
            )

        reached = current.vertex_count >= min_vertex_count
        if not reached:
            logger.warning(
                f"Refinement stopped at round cap ({self.max_rounds}) with "
                f"{current.vertex_count} of {min_vertex_count} requested vertices"
            )

        logger.info(
            f"Refined mesh from {initial} to {current.vertex_count} vertices "
            f"in {rounds} rounds"
        )

        return RefineResult(
            mesh=current,
            rounds=rounds,
            initial_vertices=initial,
            final_vertices=current.vertex_count,
            reached_target=reached,
        )


def subdivide(mesh: SurfaceMesh) -> SurfaceMesh:
    """
    One round of 1-to-4 subdivision.

    Triangle (a, b, c) with edge midpoints ab, bc, ca becomes
    (a, ab, ca), (ab, b, bc), (ca, bc, c) and (ab, bc, ca), which
    keeps the winding of the original face.

    Args:
        mesh: Mesh to subdivide

    Returns:
        New SurfaceMesh; the input is left untouched
    """
    vertices: List[Vertex] = list(mesh.vertices)
    faces: List[Face] = []
    midpoint_cache: Dict[EdgeKey, int] = {}
    height_field = mesh.height_field

    def get_midpoint(i: int, j: int) -> int:
        key = (i, j) if i < j else (j, i)
        idx = midpoint_cache.get(key)
        if idx is not None:
            return idx

        # Always interpolate from the lower index so the result does not
        # depend on which triangle reaches the edge first
        p = mesh.vertices[key[0]]
        q = mesh.vertices[key[1]]
        vertices.append(_midpoint(p, q, height_field))
        idx = len(vertices) - 1
        midpoint_cache[key] = idx
        return idx

    for a, b, c in mesh.faces:
        ab = get_midpoint(a, b)
        bc = get_midpoint(b, c)
        ca = get_midpoint(c, a)
        faces.append((a, ab, ca))
        faces.append((ab, b, bc))
        faces.append((ca, bc, c))
        faces.append((ab, bc, ca))

    return SurfaceMesh(
        vertices=vertices,
        faces=faces,
        height_field=height_field,
        grid_backed=False,
    )


def _midpoint(p: Vertex, q: Vertex, height_field: Optional[HeightGrid]) -> Vertex:
    """Edge midpoint, with z re-sampled from the height field if any."""
    x = (p[0] + q[0]) / 2.0
    y = (p[1] + q[1]) / 2.0
    z = (p[2] + q[2]) / 2.0

    if height_field is not None:
        sampled = height_field.sample_height(x, y)
        if sampled is not None:
            z = sampled

    return (x, y, z)


def refine_mesh(
    mesh: SurfaceMesh,
    min_vertex_count: int,
    max_rounds: int = REFINE_MAX_ROUNDS
) -> SurfaceMesh:
    """
    Convenience function to refine a mesh to a target vertex count.

    Args:
        mesh: Mesh to refine
        min_vertex_count: Target vertex count
        max_rounds: Upper bound on subdivision rounds

    Returns:
        Refined mesh (the input mesh if no refinement was needed)
    """
    return MeshRefiner(max_rounds).refine(mesh, min_vertex_count).mesh
