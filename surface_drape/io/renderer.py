"""
Renderer contract for Surface Drape.

The engine hands finished geometry to a Renderer together with style
attributes (color, width, ...) it does not interpret, and returns
whatever handle the renderer gives back.
"""

from abc import ABC, abstractmethod
from typing import Any

from ..models.results import Polyline3D, SegmentSet


class Renderer(ABC):
    """Draws polylines and disjoint segments."""

    @abstractmethod
    def draw_polyline(self, polyline: Polyline3D, **style: Any) -> Any:
        """
        Draw a polyline; break rows separate independent runs.

        Returns:
            Opaque handle identifying the drawn object
        """
        pass

    @abstractmethod
    def draw_segments(self, segments: SegmentSet, **style: Any) -> Any:
        """
        Draw disjoint point pairs, one line per segment.

        Returns:
            Opaque handle identifying the drawn object
        """
        pass
