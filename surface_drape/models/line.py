"""
Input line model for Surface Drape.

An InputLine is an ordered sequence of (x, y) pairs in which a missing
value (None or NaN) marks a break. The breaks partition the line into
runs, each of which is draped as one continuous curve.
"""

from dataclasses import dataclass, field
from numbers import Real
from typing import Iterable, List, Optional, Sequence, Tuple
import math

from .geometry import Point2D
from ..errors import InvalidInputLine


@dataclass
class LineRun:
    """
    A maximal stretch of valid input points.

    Attributes:
        start: Ordinal index of the first point in the input line
        points: Points of the run, in input order
    """
    start: int
    points: List[Point2D] = field(default_factory=list)

    @property
    def stop(self) -> int:
        """Ordinal index one past the last point."""
        return self.start + len(self.points)

    def __len__(self) -> int:
        return len(self.points)


@dataclass
class InputLine:
    """
    Ordered (x, y) coordinates with NaN break markers.

    Attributes:
        xs: X coordinates (NaN marks a break)
        ys: Y coordinates (NaN marks a break)
    """
    xs: List[float]
    ys: List[float]

    def __post_init__(self):
        if len(self.xs) != len(self.ys):
            raise InvalidInputLine(
                f"x and y have different lengths ({len(self.xs)} vs {len(self.ys)})"
            )

    def __len__(self) -> int:
        return len(self.xs)

    def point(self, i: int) -> Optional[Point2D]:
        """Point at ordinal i, or None if it is a break."""
        x, y = self.xs[i], self.ys[i]
        if math.isnan(x) or math.isnan(y):
            return None
        return Point2D(x, y)

    def runs(self) -> List[LineRun]:
        """
        Split the line into runs at every break.

        Consecutive breaks produce no empty runs.
        """
        runs: List[LineRun] = []
        current: Optional[LineRun] = None

        for i in range(len(self.xs)):
            p = self.point(i)
            if p is None:
                current = None
                continue
            if current is None:
                current = LineRun(start=i)
                runs.append(current)
            current.points.append(p)

        return runs

    def log_transform(self, axes: str) -> 'InputLine':
        """
        Return a copy with base-10 log applied to the named axes.

        Args:
            axes: Any combination of "x" and "y" ("" is a no-op)

        Non-positive values cannot be transformed and become breaks.
        """
        unknown = set(axes) - {"x", "y"}
        if unknown:
            raise ValueError(f"Unknown log axes: {''.join(sorted(unknown))}")

        xs = [_log10(v) for v in self.xs] if "x" in axes else list(self.xs)
        ys = [_log10(v) for v in self.ys] if "y" in axes else list(self.ys)
        return InputLine(xs, ys)

    @staticmethod
    def from_xy(xs: Sequence, ys: Sequence) -> 'InputLine':
        """
        Build a line from parallel x and y sequences.

        None or NaN in either sequence marks a break.

        Raises:
            InvalidInputLine: lengths differ or a value is not numeric
        """
        xs = list(xs)
        ys = list(ys)
        if len(xs) != len(ys):
            raise InvalidInputLine(
                f"x and y have different lengths ({len(xs)} vs {len(ys)})"
            )
        return InputLine(
            [_coerce(v, i, "x") for i, v in enumerate(xs)],
            [_coerce(v, i, "y") for i, v in enumerate(ys)],
        )

    @staticmethod
    def from_pairs(pairs: Iterable[Optional[Tuple[float, float]]]) -> 'InputLine':
        """
        Build a line from (x, y) pairs; a None pair is a break.

        Raises:
            InvalidInputLine: a pair does not have exactly two values
        """
        xs: List = []
        ys: List = []
        for i, pair in enumerate(pairs):
            if pair is None:
                xs.append(None)
                ys.append(None)
                continue
            try:
                x, y = pair
            except (TypeError, ValueError):
                raise InvalidInputLine(f"Item {i} is not an (x, y) pair: {pair!r}")
            xs.append(x)
            ys.append(y)
        return InputLine.from_xy(xs, ys)


def _coerce(value, index: int, axis: str) -> float:
    """Convert one coordinate to float, mapping None to NaN."""
    if value is None:
        return math.nan
    if isinstance(value, bool) or not isinstance(value, Real):
        # numpy scalars are Real; strings and objects are not
        raise InvalidInputLine(
            f"Non-numeric {axis} value at index {index}: {value!r}"
        )
    value = float(value)
    if math.isinf(value):
        return math.nan
    return value


def _log10(value: float) -> float:
    if math.isnan(value) or value <= 0:
        return math.nan
    return math.log10(value)
