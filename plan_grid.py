"""
Grid codec for training plan CSV files.
Parses plan text into a lossless grid of string cells, detects the column
layout, writes edited weeks back into the grid and serializes it again.
"""

import csv
import io
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from loguru import logger

HEADER_ROW_INDEX = 9
FIRST_DATA_ROW_INDEX = 10
SHIFTED_MIN_HEADER_LENGTH = 15
LINE_TERMINATOR = '\r\n'


class MalformedInput(ValueError):
    """Raised when plan text cannot be split into cells (unterminated quote)."""


class LayoutVariant(Enum):
    """Known column layouts of a plan file."""
    STANDARD = 'standard'
    SHIFTED = 'shifted'


@dataclass(frozen=True)
class ColumnMap:
    """Column indices of every week field for one layout variant."""
    weeks_until_race: int
    fraction_of_peak: int
    q1_description: int
    q1_notes: int
    q2_description: int
    q2_notes: int
    weekly_easy_mileage: int
    actual_mileage: int
    difference: int
    weekly_notes: int
    min_columns: int


# Shifted files carry spacer columns at 7 and 10 (e.g. " for Q1", " for Q2").
COLUMN_MAPS: Dict[LayoutVariant, ColumnMap] = {
    LayoutVariant.STANDARD: ColumnMap(3, 4, 5, 6, 7, 8, 9, 10, 11, 12, min_columns=13),
    LayoutVariant.SHIFTED: ColumnMap(3, 4, 5, 6, 8, 9, 11, 12, 13, 14, min_columns=15),
}

RawGrid = List[List[str]]


def parse_raw_csv(csv_text: str) -> RawGrid:
    """
    Parse plan text into a raw grid of string cells.

    Cells keep their exact text (no trimming, no type coercion) and every
    line is kept, blank lines included as zero-cell rows.

    Args:
        csv_text: Full CSV file content

    Returns:
        List of rows, each a list of cell strings

    Raises:
        MalformedInput: If a quoted field is never closed
    """
    try:
        grid = _read_rows(csv_text, strict=True)
    except csv.Error as e:
        if 'unexpected end of data' in str(e):
            raise MalformedInput(f"Unterminated quoted field in plan CSV: {e}") from e
        # Stray quotes inside unquoted cells are kept as literal text
        grid = _read_rows(csv_text, strict=False)
        if _ends_inside_quotes(csv_text, len(grid)):
            raise MalformedInput("Unterminated quoted field in plan CSV") from e

    logger.debug("Parsed plan CSV into {} rows", len(grid))
    return grid


def _read_rows(csv_text: str, strict: bool) -> RawGrid:
    return [row for row in csv.reader(io.StringIO(csv_text, newline=''), strict=strict)]


def _ends_inside_quotes(csv_text: str, row_count: int) -> bool:
    """Check whether the lenient reader finished inside an open quoted field."""
    # Line breaks appended to an open quoted field become part of it and add no rows
    return len(_read_rows(csv_text + '\n\n', strict=False)) == row_count


def detect_layout(grid: RawGrid) -> LayoutVariant:
    """Pick the layout variant from the header row's cell count."""
    if len(grid) <= HEADER_ROW_INDEX:
        return LayoutVariant.STANDARD

    header_row = grid[HEADER_ROW_INDEX]
    if len(header_row) >= SHIFTED_MIN_HEADER_LENGTH:
        return LayoutVariant.SHIFTED
    return LayoutVariant.STANDARD


def column_map_for(grid: RawGrid) -> ColumnMap:
    """Return the column map matching the grid's detected layout."""
    return COLUMN_MAPS[detect_layout(grid)]


def format_number(value: Optional[float]) -> str:
    """
    Render a number the way it should appear in a cell.

    Integral values drop the trailing ".0"; ``None`` renders as an empty cell.
    """
    if value is None:
        return ''
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))


def update_raw_data(grid: RawGrid, week_index: int, week) -> RawGrid:
    """
    Write the editable fields of a week back into a copy of the grid.

    Only the actual mileage, difference, Q1 notes, Q2 notes and weekly notes
    cells of the target row are written. Every other row is shared with the
    original grid; the original grid and its rows are left untouched.

    Args:
        grid: Grid the week was projected from
        week_index: Position of the week in the projected list
        week: Edited TrainingWeek

    Returns:
        New grid, or the input grid itself if the index is out of range
    """
    target_row_index = FIRST_DATA_ROW_INDEX + week_index
    if week_index < 0 or target_row_index >= len(grid):
        logger.warning("Week index {} is outside the plan grid ({} rows); nothing updated",
                       week_index, len(grid))
        return grid

    columns = column_map_for(grid)

    new_row = list(grid[target_row_index])
    if len(new_row) < columns.min_columns:
        new_row.extend([''] * (columns.min_columns - len(new_row)))

    new_row[columns.actual_mileage] = format_number(week.actual_mileage)
    new_row[columns.difference] = format_number(week.difference)
    new_row[columns.q1_notes] = week.q1.notes or ''
    new_row[columns.q2_notes] = week.q2.notes or ''
    new_row[columns.weekly_notes] = week.notes or ''

    new_grid = list(grid)
    new_grid[target_row_index] = new_row
    logger.debug("Updated grid row {} for week index {}", target_row_index, week_index)
    return new_grid


def raw_to_csv(grid: RawGrid) -> str:
    """Serialize a grid to CSV text with every field quoted."""
    buffer = io.StringIO(newline='')
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator=LINE_TERMINATOR)
    writer.writerows(grid)
    return buffer.getvalue()
