"""Shared fixtures for Surface Drape tests."""

import pytest

from surface_drape.models import HeightGrid, SurfaceMesh

from .helpers import RecordingRenderer


@pytest.fixture
def flat_grid():
    """2x2 grid at z=10 spanning [0, 10] x [0, 10]."""
    return HeightGrid.flat((0.0, 10.0), (0.0, 10.0), z=10.0)


@pytest.fixture
def flat_mesh(flat_grid):
    return flat_grid.to_mesh()


@pytest.fixture
def flat_grid_3x3():
    """3x3 grid at z=10 with samples at 0, 5 and 10."""
    return HeightGrid.flat((0.0, 10.0), (0.0, 10.0), z=10.0, nx=3, ny=3)


@pytest.fixture
def single_triangle():
    return SurfaceMesh(
        vertices=[(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (0.0, 1.0, 0.0)],
        faces=[(0, 1, 2)],
    )


@pytest.fixture
def unit_square():
    """Two triangles sharing the (0, 2) diagonal."""
    return SurfaceMesh(
        vertices=[(0.0, 0.0, 0.0), (1.0, 0.0, 0.0), (1.0, 1.0, 0.0), (0.0, 1.0, 0.0)],
        faces=[(0, 1, 2), (0, 2, 3)],
    )


@pytest.fixture
def renderer():
    return RecordingRenderer()
