"""
Implicit function / mesh intersection (contouring) for Surface Drape.

The function is evaluated once, in batch, over all mesh vertices. Each
triangle then contributes at most one segment of the zero-level set:

- every vertex whose value is exactly zero is a point of the zero set;
- every edge whose endpoint values have strictly opposite signs
  contributes the zero of the linear interpolant along that edge.

A triangle with exactly two distinct such points yields a segment.
One point (a zero vertex touching the level set) or three points (a
face lying in the level set) yield nothing. Crossings are computed
once per undirected edge, so neighbouring triangles share identical
endpoints, and a segment reported by two triangles is kept once.
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, List, Set, Tuple
import logging

import numpy as np

from ..config import DEGENERATE_AREA_EPS
from ..errors import EmptyMesh
from ..functions import ImplicitFunction, as_implicit_function, evaluate_function
from ..models.geometry import Point3D
from ..models.mesh import SurfaceMesh
from ..models.results import SegmentSet

logger = logging.getLogger(__name__)

# Identity of a zero-set point: ('v', i) for a vertex, ('e', i, j) for an edge
PointKey = Tuple
EdgeKey = Tuple[int, int]


@dataclass
class EdgeCrossing:
    """A mesh edge on which the function changes sign."""
    edge: EdgeKey
    t: float
    point: Point3D


@dataclass
class IntersectStats:
    """Counters from one intersection."""
    triangles: int = 0
    degenerate_triangles: int = 0
    undefined_triangles: int = 0
    crossing_edges: int = 0
    segments: int = 0
    duplicate_segments: int = 0


class ImplicitIntersector:
    """
    Computes the zero set of an implicit function on a mesh.

    The mesh is borrowed read-only; values, crossing tables and
    segment lists live only for the duration of intersect().
    """

    def __init__(self, degenerate_area_eps: float = DEGENERATE_AREA_EPS):
        """
        Initialize intersector.

        Args:
            degenerate_area_eps: Triangles with smaller area are skipped
        """
        self.degenerate_area_eps = degenerate_area_eps
        self.stats = IntersectStats()

    def intersect(self, mesh: SurfaceMesh, func) -> SegmentSet:
        """
        Intersect an implicit function with a mesh.

        Args:
            mesh: Triangulated surface
            func: ImplicitFunction or callable taking a (3, N) array

        Returns:
            Unordered SegmentSet

        Raises:
            EmptyMesh: mesh has no faces
            InvalidFunctionContract: func breaks the batch contract
        """
        if mesh.is_empty():
            raise EmptyMesh("Cannot intersect a mesh with zero faces")

        func: ImplicitFunction = as_implicit_function(func)
        self.stats = IntersectStats(triangles=mesh.face_count)

        vertices = np.asarray(mesh.vertices, dtype=float).reshape(-1, 3)
        faces = np.asarray(mesh.faces, dtype=np.int64).reshape(-1, 3)

        values = evaluate_function(func, vertices.T)
        signs = np.sign(values)

        valid = self._valid_faces(vertices, faces, values)
        crossings = compute_edge_crossings(vertices, faces[valid], values)
        self.stats.crossing_edges = len(crossings)

        segments: List[Tuple[Point3D, Point3D]] = []
        seen: Set[FrozenSet[PointKey]] = set()

        for a, b, c in faces[valid].tolist():
            keys = _triangle_zero_points(a, b, c, signs, crossings)
            if len(keys) != 2:
                continue

            key = frozenset(keys)
            if key in seen:
                self.stats.duplicate_segments += 1
                continue
            seen.add(key)

            p, q = (self._resolve(k, vertices, crossings) for k in keys)
            if p == q:
                continue
            segments.append((p, q))

        self.stats.segments = len(segments)
        logger.info(
            f"Intersected {func!r} with {mesh.face_count} faces: "
            f"{len(segments)} segments from {len(crossings)} crossing edges"
        )
        return SegmentSet(segments)

    def _valid_faces(self, vertices: np.ndarray, faces: np.ndarray,
                     values: np.ndarray) -> np.ndarray:
        """Mask of faces with non-zero area and defined values."""
        p0 = vertices[faces[:, 0]]
        p1 = vertices[faces[:, 1]]
        p2 = vertices[faces[:, 2]]
        area2 = np.linalg.norm(np.cross(p1 - p0, p2 - p0), axis=1)
        non_degenerate = area2 > 2.0 * self.degenerate_area_eps

        defined = ~np.isnan(values[faces]).any(axis=1)

        self.stats.degenerate_triangles = int(np.count_nonzero(~non_degenerate))
        self.stats.undefined_triangles = int(np.count_nonzero(non_degenerate & ~defined))
        if self.stats.degenerate_triangles:
            logger.debug(f"Skipped {self.stats.degenerate_triangles} degenerate triangles")
        if self.stats.undefined_triangles:
            logger.warning(
                f"Skipped {self.stats.undefined_triangles} triangles with NaN function values"
            )

        return non_degenerate & defined

    @staticmethod
    def _resolve(key: PointKey, vertices: np.ndarray,
                 crossings: Dict[EdgeKey, EdgeCrossing]) -> Point3D:
        if key[0] == 'v':
            x, y, z = vertices[key[1]].tolist()
            return Point3D(x, y, z)
        return crossings[(key[1], key[2])].point


def compute_edge_crossings(
    vertices: np.ndarray,
    faces: np.ndarray,
    values: np.ndarray
) -> Dict[EdgeKey, EdgeCrossing]:
    """
    Build the edge-crossing table for a set of faces.

    Every undirected edge with strictly opposite endpoint signs gets one
    entry keyed by its sorted vertex pair. The crossing is interpolated
    from the lower-indexed endpoint.

    Args:
        vertices: (N, 3) vertex positions
        faces: (F, 3) vertex indices
        values: (N,) function values

    Returns:
        Map of (i, j) with i < j to EdgeCrossing
    """
    if len(faces) == 0:
        return {}

    edges = np.concatenate([faces[:, [0, 1]], faces[:, [1, 2]], faces[:, [2, 0]]])
    edges = np.unique(np.sort(edges, axis=1), axis=0)

    vi = values[edges[:, 0]]
    vj = values[edges[:, 1]]
    crossing = np.sign(vi) * np.sign(vj) < 0
    edges = edges[crossing]
    vi = vi[crossing]
    vj = vj[crossing]

    t = vi / (vi - vj)
    pi = vertices[edges[:, 0]]
    pj = vertices[edges[:, 1]]
    points = pi + t[:, None] * (pj - pi)

    table: Dict[EdgeKey, EdgeCrossing] = {}
    for (i, j), ti, (x, y, z) in zip(edges.tolist(), t.tolist(), points.tolist()):
        table[(i, j)] = EdgeCrossing(edge=(i, j), t=ti, point=Point3D(x, y, z))
    return table


def _triangle_zero_points(
    a: int, b: int, c: int,
    signs: np.ndarray,
    crossings: Dict[EdgeKey, EdgeCrossing]
) -> List[PointKey]:
    """Distinct zero-set point keys of one triangle."""
    keys: List[PointKey] = []

    for v in (a, b, c):
        if signs[v] == 0:
            keys.append(('v', v))

    for i, j in ((a, b), (b, c), (c, a)):
        edge = (i, j) if i < j else (j, i)
        if edge in crossings:
            keys.append(('e', edge[0], edge[1]))

    return keys


def intersect_mesh(
    mesh: SurfaceMesh,
    func,
    degenerate_area_eps: float = DEGENERATE_AREA_EPS
) -> SegmentSet:
    """
    Convenience function to intersect a mesh with an implicit function.

    Args:
        mesh: Triangulated surface
        func: ImplicitFunction or callable taking a (3, N) array
        degenerate_area_eps: Area threshold for skipping triangles

    Returns:
        Unordered SegmentSet
    """
    return ImplicitIntersector(degenerate_area_eps).intersect(mesh, func)
