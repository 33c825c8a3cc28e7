"""
Line geometry exporters for Surface Drape.

ObjLineRenderer is a Renderer that collects draped lines and
intersection segments and writes them to a Wavefront OBJ file using
'l' (polyline) elements, one named group per drawn object. Runs of a
single point are written as 'p' (point) elements.
export_table_csv writes the unplotted x, y, z table.
"""

import csv
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
import logging

from ..config import EXPORT_PRECISION, CSV_BREAK_MARKER
from ..models.geometry import Point3D
from ..models.results import DrapeTable, Polyline3D, SegmentSet
from .renderer import Renderer

logger = logging.getLogger(__name__)


@dataclass
class ExportStats:
    """Statistics from OBJ export."""
    total_vertices: int = 0
    total_lines: int = 0
    total_points: int = 0
    total_objects: int = 0
    file_size_bytes: int = 0


@dataclass
class _DrawnObject:
    """Lines of one draw call, as lists of points."""
    name: str
    kind: str
    lines: List[List[Point3D]]
    style: Dict[str, Any] = field(default_factory=dict)


class ObjLineRenderer(Renderer):
    """
    Renderer that accumulates line objects for OBJ export.

    Each draw call becomes one group; its handle is the group name.
    Style attributes are not interpreted, only recorded as comments.
    """

    def __init__(self, precision: int = EXPORT_PRECISION):
        self.precision = precision
        self.objects: List[_DrawnObject] = []

    def _next_name(self, kind: str, style: Dict[str, Any]) -> str:
        name = style.get('name')
        if name:
            return str(name)
        return f"{kind}_{len(self.objects) + 1}"

    def draw_polyline(self, polyline: Polyline3D, **style: Any) -> str:
        """Add one OBJ line element per run; single-point runs become point elements."""
        name = self._next_name("polyline", style)
        runs = polyline.runs()
        self.objects.append(_DrawnObject(name, "polyline", runs, dict(style)))
        logger.debug(f"Drew polyline '{name}' with {len(runs)} runs")
        return name

    def draw_segments(self, segments: SegmentSet, **style: Any) -> str:
        """Add one two-point OBJ line element per segment."""
        name = self._next_name("segments", style)
        lines = [[a, b] for a, b in segments.segments]
        self.objects.append(_DrawnObject(name, "segments", lines, dict(style)))
        logger.debug(f"Drew segment set '{name}' with {len(lines)} segments")
        return name

    def write(self, filepath: str, comment: Optional[str] = None) -> ExportStats:
        """
        Write all drawn objects to an OBJ file.

        Args:
            filepath: Output file path (.obj)
            comment: Optional comment to include in file header

        Returns:
            ExportStats with export statistics
        """
        stats = ExportStats(total_objects=len(self.objects))
        stats.total_vertices = sum(
            len(line) for obj in self.objects for line in obj.lines
        )
        stats.total_lines = sum(
            1 for obj in self.objects for line in obj.lines if len(line) >= 2
        )
        stats.total_points = sum(
            1 for obj in self.objects for line in obj.lines if len(line) == 1
        )

        os.makedirs(os.path.dirname(filepath) or '.', exist_ok=True)
        prec = self.precision

        with open(filepath, 'w', encoding='utf-8') as f:
            f.write("# Surface Drape OBJ Export\n")
            f.write(f"# Vertices: {stats.total_vertices}\n")
            f.write(f"# Lines: {stats.total_lines}\n")
            f.write(f"# Points: {stats.total_points}\n")
            f.write(f"# Objects: {stats.total_objects}\n")

            if comment:
                f.write(f"# {comment}\n")

            vertex_offset = 0
            for obj in self.objects:
                f.write(f"\ng {obj.name}\n")
                for key, value in sorted(obj.style.items()):
                    if key != 'name':
                        f.write(f"# {key}: {value}\n")

                for line in obj.lines:
                    for p in line:
                        f.write(f"v {p.x:.{prec}f} {p.y:.{prec}f} {p.z:.{prec}f}\n")

                for line in obj.lines:
                    # OBJ indices are 1-based
                    indices = range(vertex_offset + 1, vertex_offset + len(line) + 1)
                    element = "l" if len(line) >= 2 else "p"
                    f.write(f"{element} " + " ".join(str(i) for i in indices) + "\n")
                    vertex_offset += len(line)

        stats.file_size_bytes = os.path.getsize(filepath)

        logger.info(
            f"Exported OBJ: {stats.total_vertices} vertices, "
            f"{stats.total_lines} lines, {stats.total_points} points, "
            f"{stats.total_objects} objects"
        )
        return stats


def export_table_csv(
    table: DrapeTable,
    filepath: str,
    precision: int = EXPORT_PRECISION
) -> int:
    """
    Write an x, y, z table as CSV.

    Break rows are written with the NA marker in every column.
    Segment tables get an extra 'segment' column grouping row pairs.

    Args:
        table: Table to write
        filepath: Output file path (.csv)
        precision: Decimal places

    Returns:
        Number of data rows written
    """
    os.makedirs(os.path.dirname(filepath) or '.', exist_ok=True)
    segments = table.mode == "segments"

    def fmt(value: float) -> str:
        if value != value:  # NaN
            return CSV_BREAK_MARKER
        return f"{value:.{precision}f}"

    with open(filepath, 'w', encoding='utf-8', newline='') as f:
        writer = csv.writer(f)
        writer.writerow(['x', 'y', 'z', 'segment'] if segments else ['x', 'y', 'z'])
        for i, (x, y, z) in enumerate(table.rows()):
            row = [fmt(x), fmt(y), fmt(z)]
            if segments:
                row.append(i // 2)
            writer.writerow(row)

    logger.info(f"Exported {len(table)} rows to {filepath}")
    return len(table)


def validate_obj_file(filepath: str) -> List[str]:
    """
    Validate an OBJ line file for common issues.

    Args:
        filepath: Path to OBJ file

    Returns:
        List of error messages (empty if valid)
    """
    errors = []

    if not os.path.exists(filepath):
        errors.append(f"File does not exist: {filepath}")
        return errors

    vertex_count = 0
    max_vertex_ref = 0

    with open(filepath, 'r', encoding='utf-8') as f:
        for line_num, line in enumerate(f, 1):
            parts = line.split()
            if not parts or parts[0].startswith('#'):
                continue

            if parts[0] == 'v':
                vertex_count += 1
                if len(parts) < 4:
                    errors.append(f"Line {line_num}: Vertex has < 3 coordinates")

            elif parts[0] in ('l', 'f', 'p'):
                min_vertices = 1 if parts[0] == 'p' else 2
                if len(parts) - 1 < min_vertices:
                    errors.append(
                        f"Line {line_num}: Element has < {min_vertices} vertices"
                    )

                for part in parts[1:]:
                    idx_str = part.split('/')[0]
                    try:
                        max_vertex_ref = max(max_vertex_ref, int(idx_str))
                    except ValueError:
                        errors.append(
                            f"Line {line_num}: Invalid vertex index '{idx_str}'"
                        )

    if max_vertex_ref > vertex_count:
        errors.append(
            f"Element references vertex {max_vertex_ref} but only {vertex_count} vertices exist"
        )

    return errors
