"""
CSV line reader for Surface Drape.

Reads an input line from a CSV file with x and y columns. Empty cells
and NA / NaN markers are breaks.
"""

import csv
from pathlib import Path
from typing import List, Optional
import logging

from ..errors import InvalidInputLine
from ..models.line import InputLine

logger = logging.getLogger(__name__)

BREAK_TOKENS = {'', 'na', 'nan', 'null', 'none'}


def load_line_csv(filepath: str) -> InputLine:
    """
    Load an input line from CSV.

    The file must have a header row containing 'x' and 'y' columns
    (case-insensitive); other columns are ignored.

    Args:
        filepath: Path to .csv file

    Returns:
        InputLine with NaN breaks

    Raises:
        FileNotFoundError: file doesn't exist
        InvalidInputLine: missing columns or non-numeric values
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Line file not found: {filepath}")

    xs: List[Optional[float]] = []
    ys: List[Optional[float]] = []

    with open(path, 'r', encoding='utf-8', newline='') as f:
        reader = csv.DictReader(f)
        columns = {name.strip().lower(): name for name in (reader.fieldnames or [])}
        if 'x' not in columns or 'y' not in columns:
            raise InvalidInputLine(
                f"Line file {filepath} needs 'x' and 'y' columns, "
                f"found {reader.fieldnames}"
            )

        for row_num, row in enumerate(reader, 2):
            xs.append(_parse_cell(row[columns['x']], row_num, 'x'))
            ys.append(_parse_cell(row[columns['y']], row_num, 'y'))

    line = InputLine.from_xy(xs, ys)
    logger.info(f"Loaded line with {len(line)} points and {len(line.runs())} runs")
    return line


def _parse_cell(cell: Optional[str], row_num: int, axis: str) -> Optional[float]:
    text = (cell or '').strip()
    if text.lower() in BREAK_TOKENS:
        return None
    try:
        return float(text)
    except ValueError:
        raise InvalidInputLine(
            f"Row {row_num}: non-numeric {axis} value '{text}'"
        )
