# Rev 0.1.0
"""Calendar grid for the timeline header.

Intervals are inclusive date ranges clipped to the requested window, so the
sequence tiles [start, end] with no gaps or overlaps. Each interval carries a
primary label (bottom header row) and a secondary label (top row); runs of
equal secondary labels are merged into spans.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import List, Tuple

from ..models.types import TIME_SCALES
from .dates import add_days, days_between
from .errors import InvalidRangeError

_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")
_WEEKDAYS = ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun")


@dataclass(frozen=True)
class GridInterval:
    start: date
    end: date
    label: str
    secondary_label: str

    @property
    def days(self) -> int:
        return days_between(self.start, self.end) + 1


@dataclass(frozen=True)
class LabelSpan:
    label: str
    first_index: int
    count: int

    def left(self, cell_width: float) -> float:
        return self.first_index * cell_width

    def width(self, cell_width: float) -> float:
        return self.count * cell_width


@dataclass(frozen=True)
class Grid:
    scale: str
    start: date
    end: date
    intervals: Tuple[GridInterval, ...]
    spans: Tuple[LabelSpan, ...]

    def header_width(self, cell_width: float) -> float:
        return len(self.intervals) * cell_width


# --- calendar units ---------------------------------------------------------

def _week_start(d: date) -> date:
    # Sunday-start weeks
    return d - timedelta(days=(d.weekday() + 1) % 7)


def _unit_start(d: date, scale: str) -> date:
    if scale == "day":
        return d
    if scale == "week":
        return _week_start(d)
    if scale == "month":
        return d.replace(day=1)
    if scale == "quarter":
        return date(d.year, ((d.month - 1) // 3) * 3 + 1, 1)
    return date(d.year, 1, 1)


def _next_unit_start(unit: date, scale: str) -> date:
    if scale == "day":
        return add_days(unit, 1)
    if scale == "week":
        return add_days(unit, 7)
    if scale == "month":
        return date(unit.year + (unit.month == 12), unit.month % 12 + 1, 1)
    if scale == "quarter":
        month = unit.month + 3
        return date(unit.year + (month > 12), (month - 1) % 12 + 1, 1)
    return date(unit.year + 1, 1, 1)


def week_number(d: date) -> int:
    """Week of year; weeks start on Sunday and week 1 contains 1 January."""
    sow = _week_start(d)
    if add_days(sow, 6).year > sow.year:
        return 1
    first = _week_start(date(sow.year, 1, 1))
    return days_between(first, sow) // 7 + 1


def _labels(unit: date, scale: str) -> Tuple[str, str]:
    if scale == "day":
        return str(unit.day), _WEEKDAYS[unit.weekday()]
    if scale == "week":
        return f"W{week_number(unit)}", f"{_MONTHS[unit.month - 1]} {unit.year}"
    if scale == "month":
        return _MONTHS[unit.month - 1], str(unit.year)
    if scale == "quarter":
        return f"Q{(unit.month - 1) // 3 + 1}", str(unit.year)
    return str(unit.year), ""


# --- public API -------------------------------------------------------------

def generate_intervals(start: date, end: date, scale: str) -> List[GridInterval]:
    if scale not in TIME_SCALES:
        raise ValueError(f"Unknown time scale: {scale!r}")
    if start > end:
        raise InvalidRangeError(start, end)

    out: List[GridInterval] = []
    cur = start
    while cur <= end:
        unit = _unit_start(cur, scale)
        nxt = _next_unit_start(unit, scale)
        label, secondary = _labels(unit, scale)
        out.append(GridInterval(cur, min(add_days(nxt, -1), end), label, secondary))
        cur = nxt
    return out


def merge_secondary_labels(intervals: List[GridInterval]) -> List[LabelSpan]:
    spans: List[LabelSpan] = []
    for idx, iv in enumerate(intervals):
        if spans and spans[-1].label == iv.secondary_label:
            last = spans[-1]
            spans[-1] = LabelSpan(last.label, last.first_index, last.count + 1)
        else:
            spans.append(LabelSpan(iv.secondary_label, idx, 1))
    return spans


def generate_grid(start: date, end: date, scale: str) -> Grid:
    intervals = generate_intervals(start, end, scale)
    return Grid(scale, start, end, tuple(intervals), tuple(merge_secondary_labels(intervals)))
