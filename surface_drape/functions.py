"""
Implicit scalar functions for Surface Drape.

An implicit function is a batched evaluator: it takes a 3xN array of
points (rows x, y, z) and returns N values. Its zero-level set is the
surface intersected with the mesh. Plain callables are accepted and
wrapped in FunctionAdapter; evaluate_function enforces the contract.
"""

from abc import ABC, abstractmethod
from typing import Callable, Sequence
import logging

import numpy as np

from .errors import InvalidFunctionContract

logger = logging.getLogger(__name__)


class ImplicitFunction(ABC):
    """Batched scalar field f(p) whose zero set is intersected."""

    @abstractmethod
    def evaluate(self, points: np.ndarray) -> np.ndarray:
        """
        Evaluate the function at a batch of points.

        Args:
            points: Array of shape (3, N)

        Returns:
            Array of N values
        """
        pass

    def __call__(self, points: np.ndarray) -> np.ndarray:
        return self.evaluate(points)


class FunctionAdapter(ImplicitFunction):
    """Wraps a plain callable taking a (3, N) array."""

    def __init__(self, func: Callable[[np.ndarray], Sequence[float]], name: str = ""):
        if not callable(func):
            raise InvalidFunctionContract(f"Implicit function is not callable: {func!r}")
        self.func = func
        self.name = name or getattr(func, '__name__', 'function')

    def evaluate(self, points: np.ndarray) -> np.ndarray:
        return self.func(points)

    def __repr__(self) -> str:
        return f"FunctionAdapter({self.name})"


class PlaneFunction(ImplicitFunction):
    """f(p) = n . p + d (a*x + b*y + c*z + d)."""

    def __init__(self, a: float, b: float, c: float, d: float):
        if a == 0 and b == 0 and c == 0:
            raise ValueError("Plane normal must be non-zero")
        self.coefficients = np.array([a, b, c], dtype=float)
        self.d = float(d)

    def evaluate(self, points: np.ndarray) -> np.ndarray:
        return self.coefficients @ points + self.d

    def __repr__(self) -> str:
        a, b, c = self.coefficients
        return f"PlaneFunction({a}, {b}, {c}, {self.d})"


class SphereFunction(ImplicitFunction):
    """f(p) = |p - center|^2 - radius^2."""

    def __init__(self, center: Sequence[float], radius: float):
        if radius <= 0:
            raise ValueError("Sphere radius must be positive")
        self.center = np.asarray(center, dtype=float).reshape(3, 1)
        self.radius = float(radius)

    def evaluate(self, points: np.ndarray) -> np.ndarray:
        diff = points - self.center
        return np.einsum('ij,ij->j', diff, diff) - self.radius ** 2

    def __repr__(self) -> str:
        return f"SphereFunction({self.center.ravel().tolist()}, {self.radius})"


class ParaboloidFunction(ImplicitFunction):
    """f(p) = (z - z0) - scale * ((x - x0)^2 + (y - y0)^2)."""

    def __init__(self, apex: Sequence[float], scale: float = 1.0):
        self.apex = np.asarray(apex, dtype=float).reshape(3)
        self.scale = float(scale)

    def evaluate(self, points: np.ndarray) -> np.ndarray:
        x0, y0, z0 = self.apex
        r2 = (points[0] - x0) ** 2 + (points[1] - y0) ** 2
        return (points[2] - z0) - self.scale * r2

    def __repr__(self) -> str:
        return f"ParaboloidFunction({self.apex.tolist()}, {self.scale})"


def plane(a: float, b: float, c: float, d: float) -> PlaneFunction:
    """Plane a*x + b*y + c*z + d = 0."""
    return PlaneFunction(a, b, c, d)


def sphere(center: Sequence[float], radius: float) -> SphereFunction:
    """Sphere of given center and radius."""
    return SphereFunction(center, radius)


def paraboloid(apex: Sequence[float], scale: float = 1.0) -> ParaboloidFunction:
    """Upward paraboloid z = z0 + scale * r^2 around apex."""
    return ParaboloidFunction(apex, scale)


def as_implicit_function(target) -> ImplicitFunction:
    """Return target as an ImplicitFunction, wrapping plain callables."""
    if isinstance(target, ImplicitFunction):
        return target
    return FunctionAdapter(target)


def evaluate_function(func: ImplicitFunction, points: np.ndarray) -> np.ndarray:
    """
    Evaluate an implicit function and check the batch contract.

    Args:
        func: Function to evaluate
        points: Array of shape (3, N)

    Returns:
        Float array of shape (N,)

    Raises:
        InvalidFunctionContract: the call fails or does not return N numbers
    """
    points = np.asarray(points, dtype=float)
    if points.ndim != 2 or points.shape[0] != 3:
        raise ValueError(f"Points must have shape (3, N), got {points.shape}")
    n = points.shape[1]

    try:
        raw = func.evaluate(points)
    except Exception as e:
        raise InvalidFunctionContract(
            f"Implicit function {func!r} failed on a 3x{n} batch: {e}"
        ) from e

    try:
        values = np.asarray(raw, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidFunctionContract(
            f"Implicit function {func!r} returned non-numeric values"
        ) from e

    if values.size != n or (values.ndim > 1 and max(values.shape) != n):
        raise InvalidFunctionContract(
            f"Implicit function {func!r} returned {values.size} values "
            f"with shape {values.shape}, expected {n}"
        )

    values = values.reshape(n)
    nan_count = int(np.count_nonzero(np.isnan(values)))
    if nan_count:
        logger.debug(f"Implicit function returned {nan_count} NaN values")
    return values
