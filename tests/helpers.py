"""Helpers shared by the test modules."""

from surface_drape.io.renderer import Renderer
from surface_drape.models import SurfaceMesh


class RecordingRenderer(Renderer):
    """Renderer that remembers every draw call."""

    def __init__(self):
        self.calls = []

    def draw_polyline(self, polyline, **style):
        self.calls.append(('polyline', polyline, style))
        return f"handle-{len(self.calls)}"

    def draw_segments(self, segments, **style):
        self.calls.append(('segments', segments, style))
        return f"handle-{len(self.calls)}"


def strip_grid(mesh: SurfaceMesh) -> SurfaceMesh:
    """Same triangles, but without the height-field shortcut."""
    return SurfaceMesh(vertices=list(mesh.vertices), faces=list(mesh.faces))


def grid_axis(start, stop, num):
    step = (stop - start) / (num - 1)
    return [start + k * step for k in range(num)]
