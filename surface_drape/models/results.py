"""
Output geometry for Surface Drape.

Polyline3D holds draped lines (NaN rows separate runs), SegmentSet holds
the unordered segments of an intersection. Both flatten to a DrapeTable
of x, y, z columns for callers that do not plot.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Tuple

from .geometry import Point3D
from ..config import CHAIN_TOLERANCE

Segment = Tuple[Point3D, Point3D]


@dataclass
class DrapeTable:
    """
    Columnar x, y, z output.

    Attributes:
        x, y, z: Coordinate columns of equal length
        mode: "line" (NaN rows separate runs) or "segments"
            (rows grouped in consecutive pairs)
    """
    x: List[float] = field(default_factory=list)
    y: List[float] = field(default_factory=list)
    z: List[float] = field(default_factory=list)
    mode: str = "line"

    def __len__(self) -> int:
        return len(self.x)

    def append(self, p: Point3D) -> None:
        self.x.append(p.x)
        self.y.append(p.y)
        self.z.append(p.z)

    def rows(self) -> List[Tuple[float, float, float]]:
        """Table rows as (x, y, z) tuples."""
        return list(zip(self.x, self.y, self.z))

    def as_dict(self) -> Dict[str, List[float]]:
        return {'x': self.x, 'y': self.y, 'z': self.z}


@dataclass
class Polyline3D:
    """
    Draped line, point-for-point aligned with its input line.

    Break rows (NaN in x, y and z) sit at the ordinal positions of
    input breaks and of points outside the surface.
    """
    points: List[Point3D] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.points)

    def runs(self) -> List[List[Point3D]]:
        """Maximal stretches of valid points."""
        runs: List[List[Point3D]] = []
        current: List[Point3D] = []
        for p in self.points:
            if p.is_break():
                if current:
                    runs.append(current)
                current = []
            else:
                current.append(p)
        if current:
            runs.append(current)
        return runs

    @property
    def run_count(self) -> int:
        return len(self.runs())

    @property
    def valid_count(self) -> int:
        """Number of non-break points."""
        return sum(1 for p in self.points if not p.is_break())

    def break_indices(self) -> List[int]:
        """Ordinal positions of break rows."""
        return [i for i, p in enumerate(self.points) if p.is_break()]

    def to_table(self) -> DrapeTable:
        table = DrapeTable(mode="line")
        for p in self.points:
            table.append(p)
        return table


@dataclass
class SegmentSet:
    """
    Unordered collection of independent 3D segments.

    No connectivity between segments is implied; use chain() to
    reconstruct polylines when a connected path is needed.
    """
    segments: List[Segment] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.segments)

    def is_empty(self) -> bool:
        return not self.segments

    def points(self) -> List[Point3D]:
        """All segment endpoints, two per segment."""
        return [p for seg in self.segments for p in seg]

    def to_table(self) -> DrapeTable:
        """Rows grouped in consecutive pairs, one pair per segment."""
        table = DrapeTable(mode="segments")
        for a, b in self.segments:
            table.append(a)
            table.append(b)
        return table

    def chain(self, tolerance: float = CHAIN_TOLERANCE) -> Polyline3D:
        """
        Chain segments into polylines separated by break rows.

        Closed loops repeat their first point at the end.
        """
        from ..processing.assembler import chain_segments, chains_to_polyline

        return chains_to_polyline(chain_segments(self, tolerance))
