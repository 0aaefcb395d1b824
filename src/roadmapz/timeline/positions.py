# Rev 0.1.0
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, Optional, Sequence

from ..models.entities import Milestone, TimelineItem
from .date_range import DateRange
from .dates import add_days, days_between, parse_date, today as _today

_log = logging.getLogger(__name__)

DEFAULT_DURATION_DAYS = 7
EMPTY_CONTENT_HEIGHT = 200


@dataclass(frozen=True)
class PositionedRect:
    left: float
    top: float
    width: float
    height: float

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height

    @property
    def center_x(self) -> float:
        return self.left + self.width / 2

    @property
    def center_y(self) -> float:
        return self.top + self.height / 2


@dataclass(frozen=True)
class LayoutMetrics:
    cell_width: float = 150
    row_height: float = 60
    header_height: float = 50
    padding: float = 10
    row_gap: float = 10
    undated: str = "today"      # "today" places undated items at today; "skip" leaves them out

    @property
    def row_pitch(self) -> float:
        return self.row_height + self.row_gap


def effective_dates(item: TimelineItem, *, today: Optional[date] = None) -> tuple[Optional[date], Optional[date]]:
    """(start, end) used for placement; None start means the item has no usable start."""
    start = parse_date(item.start_date)
    if start is None:
        start = today
    if start is None:
        return None, None
    end = parse_date(item.end_date) or add_days(start, DEFAULT_DURATION_DAYS)
    return start, end


def item_rect(start: date, end: date, row_index: int, range_start: date, metrics: LayoutMetrics) -> PositionedRect:
    offset = max(0, days_between(range_start, start))
    duration = max(1, days_between(start, end) + 1)
    return PositionedRect(
        left=offset * metrics.cell_width,
        top=metrics.header_height + metrics.padding + row_index * metrics.row_pitch,
        width=duration * metrics.cell_width,
        height=metrics.row_height,
    )


def layout_items(
    items: Sequence[TimelineItem],
    range_start: date,
    metrics: LayoutMetrics = LayoutMetrics(),
    *,
    today: Optional[date] = None,
    log: Optional[logging.Logger] = None,
) -> Dict[int, PositionedRect]:
    """Rectangles keyed by item id; row index follows input order."""
    log = log or _log
    fallback = (today or _today()) if metrics.undated == "today" else None
    out: Dict[int, PositionedRect] = {}
    for row, item in enumerate(items):
        if item.start_date not in (None, "") and parse_date(item.start_date) is None:
            log.warning("Item %s has invalid start date %r", item.id, item.start_date)
        start, end = effective_dates(item, today=fallback)
        if start is None:
            log.debug("Item %s has no start date; left out", item.id)
            continue
        if start < range_start:
            log.debug("Item %s starts before %s; clamped to the range start", item.id, range_start)
        out[item.id] = item_rect(start, end, row, range_start, metrics)
    return out


def content_height(item_count: int, metrics: LayoutMetrics) -> float:
    if item_count <= 0:
        return EMPTY_CONTENT_HEIGHT
    return item_count * metrics.row_pitch


def layout_milestones(
    milestones: Iterable[Milestone],
    range_start: date,
    item_count: int,
    metrics: LayoutMetrics = LayoutMetrics(),
    *,
    log: Optional[logging.Logger] = None,
) -> Dict[int, PositionedRect]:
    log = log or _log
    height = content_height(item_count, metrics)
    out: Dict[int, PositionedRect] = {}
    for ms in milestones:
        d = parse_date(ms.date)
        if d is None:
            log.warning("Milestone %s has invalid date %r; not placed", ms.id, ms.date)
            continue
        out[ms.id] = PositionedRect(
            left=max(0, days_between(range_start, d)) * metrics.cell_width,
            top=0,
            width=0,
            height=height,
        )
    return out


def content_width(date_range: DateRange, cell_width: float) -> float:
    return (days_between(date_range.start, date_range.end) + 1) * cell_width


def date_to_x(d: date, range_start: date, cell_width: float) -> float:
    return days_between(range_start, d) * cell_width
