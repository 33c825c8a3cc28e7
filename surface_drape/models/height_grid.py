"""
Regular height-field model for Surface Drape.

A HeightGrid stores z = f(x, y) samples on a rectilinear grid and,
optionally, the closed-form function that produced them. Meshes built
from a grid keep a reference to it so refinement can re-sample heights
instead of averaging them.
"""

from bisect import bisect_right
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, TYPE_CHECKING

from .geometry import BBox

if TYPE_CHECKING:
    from .mesh import SurfaceMesh

HeightSampler = Callable[[float, float], float]


@dataclass
class HeightGrid:
    """
    Height samples on a rectilinear grid.

    Attributes:
        xs: Strictly increasing X coordinates of the grid columns
        ys: Strictly increasing Y coordinates of the grid rows
        z: Heights, z[j][i] is the sample at (xs[i], ys[j])
        sampler: Optional closed-form height function z = f(x, y)
    """
    xs: List[float]
    ys: List[float]
    z: List[List[float]]
    sampler: Optional[HeightSampler] = None

    def __post_init__(self):
        """Validate grid shape."""
        if len(self.xs) < 2 or len(self.ys) < 2:
            raise ValueError("HeightGrid needs at least 2 columns and 2 rows")

        for values, name in ((self.xs, "xs"), (self.ys, "ys")):
            for a, b in zip(values, values[1:]):
                if not b > a:
                    raise ValueError(f"HeightGrid {name} must be strictly increasing")

        if len(self.z) != len(self.ys):
            raise ValueError(
                f"HeightGrid has {len(self.z)} rows of z, expected {len(self.ys)}"
            )
        for j, row in enumerate(self.z):
            if len(row) != len(self.xs):
                raise ValueError(
                    f"HeightGrid row {j} has {len(row)} values, expected {len(self.xs)}"
                )

    @property
    def bbox(self) -> BBox:
        """Horizontal extent of the grid."""
        return BBox(self.xs[0], self.ys[0], self.xs[-1], self.ys[-1])

    @property
    def shape(self) -> Tuple[int, int]:
        """(columns, rows)"""
        return (len(self.xs), len(self.ys))

    def locate_cell(self, x: float, y: float) -> Optional[Tuple[int, int]]:
        """
        Find the grid cell containing (x, y).

        Cells are indexed by their lower-left sample. Points on the far
        edges belong to the last cell.

        Returns:
            (i, j) cell index, or None if outside the grid.
        """
        i = _cell_index(self.xs, x)
        j = _cell_index(self.ys, y)
        if i is None or j is None:
            return None
        return (i, j)

    def interpolate(self, x: float, y: float) -> Optional[float]:
        """
        Bilinear interpolation of the grid samples at (x, y).

        Returns:
            Interpolated height, or None if (x, y) is outside the grid.
        """
        cell = self.locate_cell(x, y)
        if cell is None:
            return None

        i, j = cell
        x0, x1 = self.xs[i], self.xs[i + 1]
        y0, y1 = self.ys[j], self.ys[j + 1]
        tx = (x - x0) / (x1 - x0)
        ty = (y - y0) / (y1 - y0)

        z00 = self.z[j][i]
        z10 = self.z[j][i + 1]
        z01 = self.z[j + 1][i]
        z11 = self.z[j + 1][i + 1]

        # Constant cells must come back exact
        if z00 == z10 == z01 == z11:
            return z00

        bottom = z00 + (z10 - z00) * tx
        top = z01 + (z11 - z01) * tx
        return bottom + (top - bottom) * ty

    def sample_height(self, x: float, y: float) -> Optional[float]:
        """
        Height at (x, y) from the best available model.

        Uses the closed-form sampler when present, otherwise
        bilinear interpolation of the grid.
        """
        if self.sampler is not None:
            return float(self.sampler(x, y))
        return self.interpolate(x, y)

    def to_mesh(self) -> 'SurfaceMesh':
        """
        Triangulate the grid into a SurfaceMesh.

        Each cell (i, j) becomes two triangles split along the
        (i, j) - (i+1, j+1) diagonal. Vertex index of sample (i, j)
        is j * len(xs) + i.
        """
        from .mesh import SurfaceMesh

        nx = len(self.xs)
        vertices = [
            (x, y, float(self.z[j][i]))
            for j, y in enumerate(self.ys)
            for i, x in enumerate(self.xs)
        ]

        faces = []
        for j in range(len(self.ys) - 1):
            for i in range(nx - 1):
                v00 = j * nx + i
                v10 = v00 + 1
                v01 = v00 + nx
                v11 = v01 + 1
                faces.append((v00, v10, v11))
                faces.append((v00, v11, v01))

        return SurfaceMesh(
            vertices=vertices,
            faces=faces,
            height_field=self,
            grid_backed=True,
        )

    @staticmethod
    def from_function(f: HeightSampler,
                      xs: Sequence[float],
                      ys: Sequence[float]) -> 'HeightGrid':
        """
        Sample a height function on a grid, keeping it for re-sampling.

        Args:
            f: Height function z = f(x, y)
            xs, ys: Grid coordinates (strictly increasing)

        Returns:
            HeightGrid with sampler set to f
        """
        xs = [float(x) for x in xs]
        ys = [float(y) for y in ys]
        z = [[float(f(x, y)) for x in xs] for y in ys]
        return HeightGrid(xs=xs, ys=ys, z=z, sampler=f)

    @staticmethod
    def flat(x_range: Tuple[float, float],
             y_range: Tuple[float, float],
             z: float,
             nx: int = 2,
             ny: int = 2) -> 'HeightGrid':
        """Constant-height grid with nx by ny samples."""
        xs = _linspace(x_range[0], x_range[1], nx)
        ys = _linspace(y_range[0], y_range[1], ny)
        return HeightGrid(xs=xs, ys=ys, z=[[float(z)] * nx for _ in ys])


def _cell_index(coords: List[float], value: float) -> Optional[int]:
    """Index of the interval of coords containing value, or None."""
    if not (coords[0] <= value <= coords[-1]):
        return None
    i = bisect_right(coords, value) - 1
    return min(i, len(coords) - 2)


def _linspace(start: float, stop: float, num: int) -> List[float]:
    if num < 2:
        raise ValueError("A grid axis needs at least 2 samples")
    step = (stop - start) / (num - 1)
    values = [start + k * step for k in range(num)]
    values[-1] = float(stop)
    return values
