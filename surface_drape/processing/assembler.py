"""
Segment assembly for Surface Drape.

Line mode places draped runs back at their ordinal positions, with
break rows wherever the input had a break or a point fell off the
surface. Segment mode passes the unordered intersection segments
through untouched.

chain_segments() is an optional utility on top of segment mode: it
stitches segments into polylines by matching endpoints. The engine
never calls it.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple
import logging

from ..config import CHAIN_TOLERANCE
from ..models.geometry import Point3D, BREAK_POINT
from ..models.results import Polyline3D, SegmentSet

logger = logging.getLogger(__name__)

NodeKey = Tuple[int, int, int]


# =============================================================================
# LINE MODE
# =============================================================================

def assemble_polyline(
    draped_runs: Sequence[Tuple[int, List[Point3D]]],
    length: int
) -> Polyline3D:
    """
    Concatenate draped runs into one polyline with break rows.

    Args:
        draped_runs: (start ordinal, draped points) per input run
        length: Length of the input line

    Returns:
        Polyline3D of exactly `length` points; positions not covered by
        a run are break rows

    Raises:
        ValueError: runs overlap or extend past `length`
    """
    points: List[Point3D] = [BREAK_POINT] * length
    covered = 0

    for start, run_points in draped_runs:
        stop = start + len(run_points)
        if start < covered or stop > length:
            raise ValueError(
                f"Run [{start}, {stop}) overlaps a previous run or exceeds "
                f"line length {length}"
            )
        points[start:stop] = run_points
        covered = stop

    return Polyline3D(points)


# =============================================================================
# SEGMENT MODE
# =============================================================================

def assemble_segments(segments: SegmentSet) -> SegmentSet:
    """
    Segment-mode assembly: an unordered set of independent segments.

    No chaining is performed; every segment is drawable on its own.
    """
    return SegmentSet(list(segments.segments))


# =============================================================================
# OPTIONAL CHAINING
# =============================================================================

@dataclass
class SegmentChain:
    """
    A polyline stitched from segments.

    Attributes:
        points: Ordered points (closed chains repeat the first point)
        closed: True if the chain returned to its start
    """
    points: List[Point3D] = field(default_factory=list)
    closed: bool = False


def chain_segments(
    segments: SegmentSet,
    tolerance: float = CHAIN_TOLERANCE
) -> List[SegmentChain]:
    """
    Stitch unordered segments into polylines.

    Algorithm:
    1. Quantise endpoints to `tolerance` and build an endpoint index
       mapping node keys to segments
    2. Start a chain at an unused segment, preferring segments with a
       dangling end so open chains are walked from one end
    3. Extend by matching endpoints, reversing segments as needed
    4. Mark the chain closed when it returns to its start node

    Branching nodes (more than two segments) are resolved by taking the
    first unused segment; the remaining branches start new chains.

    Args:
        segments: Unordered segments
        tolerance: Endpoint matching tolerance (must be > 0)

    Returns:
        List of SegmentChain
    """
    if tolerance <= 0:
        raise ValueError("tolerance must be positive")

    segs = segments.segments
    if not segs:
        return []

    keys: List[Tuple[NodeKey, NodeKey]] = [
        (_node_key(a, tolerance), _node_key(b, tolerance)) for a, b in segs
    ]

    # Maps node key -> list of (segment_index, is_first_endpoint)
    endpoint_index: Dict[NodeKey, List[Tuple[int, bool]]] = {}
    for i, (ka, kb) in enumerate(keys):
        endpoint_index.setdefault(ka, []).append((i, True))
        endpoint_index.setdefault(kb, []).append((i, False))

    # Walk open chains from their dangling ends first
    order = sorted(
        range(len(segs)),
        key=lambda i: (
            min(len(endpoint_index[keys[i][0]]), len(endpoint_index[keys[i][1]])) != 1,
            i,
        )
    )

    used: Set[int] = set()
    chains: List[SegmentChain] = []

    for start_idx in order:
        if start_idx in used:
            continue
        used.add(start_idx)

        a, b = segs[start_idx]
        ka, kb = keys[start_idx]

        # Orient the first segment so a dangling end comes first
        if len(endpoint_index[ka]) != 1 and len(endpoint_index[kb]) == 1:
            a, b = b, a
            ka, kb = kb, ka

        points = [a, b]
        start_key = ka
        current_key = kb
        closed = False

        while True:
            if current_key == start_key:
                closed = True
                break

            next_seg = _find_connecting_segment(endpoint_index, current_key, used)
            if next_seg is None:
                break

            seg_idx, is_first = next_seg
            used.add(seg_idx)

            p, q = segs[seg_idx]
            kp, kq = keys[seg_idx]
            if not is_first:
                p, q = q, p
                kp, kq = kq, kp

            points.append(q)
            current_key = kq

        if closed:
            # Snap the closing point onto the first so the loop is exact
            points[-1] = points[0]

        chains.append(SegmentChain(points=points, closed=closed))

    logger.debug(
        f"Chained {len(segs)} segments into {len(chains)} chains "
        f"({sum(1 for c in chains if c.closed)} closed)"
    )
    return chains


def _find_connecting_segment(
    endpoint_index: Dict[NodeKey, List[Tuple[int, bool]]],
    target: NodeKey,
    used: Set[int]
) -> Optional[Tuple[int, bool]]:
    """
    Find an unused segment that touches the target node.

    Returns:
        (segment_index, target_is_first_endpoint) or None
    """
    for seg_idx, is_first in endpoint_index.get(target, ()):
        if seg_idx not in used:
            return (seg_idx, is_first)
    return None


def _node_key(p: Point3D, tolerance: float) -> NodeKey:
    return (
        int(round(p.x / tolerance)),
        int(round(p.y / tolerance)),
        int(round(p.z / tolerance)),
    )


def chains_to_polyline(chains: List[SegmentChain]) -> Polyline3D:
    """Join chains into one polyline, separated by break rows."""
    points: List[Point3D] = []
    for i, chain in enumerate(chains):
        if i:
            points.append(BREAK_POINT)
        points.extend(chain.points)
    return Polyline3D(points)
