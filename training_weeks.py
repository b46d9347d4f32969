"""
Typed weekly records projected from a plan grid, plus the small set of
operations the editor applies to them before they are written back.
"""

import math
import re
from dataclasses import dataclass, field, replace
from typing import List, Optional, Union

from loguru import logger

from plan_grid import FIRST_DATA_ROW_INDEX, RawGrid, column_map_for
from workout_distance import extract_distance, round_half_up

# A row needs at least this many cells to be read as a week
MIN_WEEK_ROW_CELLS = 5

LEADING_NUMBER_PATTERN = re.compile(r'^\s*([+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?)')


@dataclass
class Workout:
    """A quality session slot (Q1 or Q2)."""
    description: str = ''
    notes: str = ''
    target_distance: float = 0.0


@dataclass
class TrainingWeek:
    """One row of the plan, weeks counted down to race day."""
    weeks_until_race: int = 0
    fraction_of_peak: float = 0.0
    q1: Workout = field(default_factory=Workout)
    q2: Workout = field(default_factory=Workout)
    weekly_easy_mileage: float = 0.0
    actual_mileage: Optional[float] = None
    difference: Optional[float] = None
    notes: str = ''


def parse_number(text: Optional[str]) -> Optional[float]:
    """
    Read the leading number of a cell.

    Trailing text is ignored ("12 km" -> 12.0). Empty or non-numeric cells
    return None instead of raising.
    """
    if not text:
        return None
    match = LEADING_NUMBER_PATTERN.match(text)
    if not match:
        return None
    value = float(match.group(1))
    return value if math.isfinite(value) else None


def _cell(row: List[str], index: int) -> str:
    return row[index] if index < len(row) else ''


def _is_trailing_blank(week: TrainingWeek) -> bool:
    return week.weeks_until_race == 0 and week.q1.description == ''


def project_weeks(grid: RawGrid) -> List[TrainingWeek]:
    """
    Project the data rows of a grid into TrainingWeek records.

    Rows with fewer than five cells are skipped. The first row with zero
    weeks until race and no Q1 description marks the end of the plan; rows
    below it are left in the grid but not projected.

    Args:
        grid: Raw plan grid

    Returns:
        Weeks in file order
    """
    columns = column_map_for(grid)
    weeks = []

    for row_index in range(FIRST_DATA_ROW_INDEX, len(grid)):
        row = grid[row_index]
        if not row or len(row) < MIN_WEEK_ROW_CELLS:
            continue

        q1_description = _cell(row, columns.q1_description)
        q2_description = _cell(row, columns.q2_description)

        week = TrainingWeek(
            weeks_until_race=int(parse_number(_cell(row, columns.weeks_until_race)) or 0),
            fraction_of_peak=parse_number(_cell(row, columns.fraction_of_peak)) or 0.0,
            q1=Workout(
                description=q1_description,
                notes=_cell(row, columns.q1_notes),
                target_distance=extract_distance(q1_description),
            ),
            q2=Workout(
                description=q2_description,
                notes=_cell(row, columns.q2_notes),
                target_distance=extract_distance(q2_description),
            ),
            weekly_easy_mileage=parse_number(_cell(row, columns.weekly_easy_mileage)) or 0.0,
            actual_mileage=parse_number(_cell(row, columns.actual_mileage)),
            difference=parse_number(_cell(row, columns.difference)),
            notes=_cell(row, columns.weekly_notes),
        )

        if _is_trailing_blank(week):
            logger.debug("End of plan reached at grid row {}", row_index)
            break
        weeks.append(week)

    logger.debug("Projected {} training weeks", len(weeks))
    return weeks


def planned_total(week: TrainingWeek) -> float:
    """Planned weekly volume: easy mileage plus both quality sessions."""
    return (week.weekly_easy_mileage or 0) + (week.q1.target_distance or 0) + (week.q2.target_distance or 0)


def record_actual_mileage(week: TrainingWeek, value: Union[float, str, None]) -> TrainingWeek:
    """
    Log the distance actually run in a week.

    The difference to the planned total is recomputed and rounded to one
    decimal. A value of None, or text that is not a number, clears both the
    actual mileage and the difference.

    Args:
        week: Week being edited
        value: Distance in km, or the raw text typed by the user

    Returns:
        Updated copy of the week
    """
    actual = parse_number(value) if isinstance(value, str) else value
    if actual is None:
        return replace(week, actual_mileage=None, difference=None)

    difference = round_half_up(actual - planned_total(week))
    return replace(week, actual_mileage=actual, difference=difference)


def with_notes(week: TrainingWeek, notes: Optional[str] = None,
               q1_notes: Optional[str] = None, q2_notes: Optional[str] = None) -> TrainingWeek:
    """Return a copy of the week with the given note fields replaced."""
    updated = week
    if notes is not None:
        updated = replace(updated, notes=notes)
    if q1_notes is not None:
        updated = replace(updated, q1=replace(updated.q1, notes=q1_notes))
    if q2_notes is not None:
        updated = replace(updated, q2=replace(updated.q2, notes=q2_notes))
    return updated


def is_completed(week: TrainingWeek) -> bool:
    return week.actual_mileage is not None and week.actual_mileage > 0


def current_week_index(weeks: List[TrainingWeek]) -> int:
    """Index of the first week without logged mileage, -1 if all are logged."""
    for index, week in enumerate(weeks):
        if not week.actual_mileage:
            return index
    return -1
