# Rev 0.1.0
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional

from ..models.entities import Milestone, TimelineItem
from .dates import add_days, parse_date, today as _today
from .errors import InvalidRangeError

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def __post_init__(self):
        if self.start > self.end:
            raise InvalidRangeError(self.start, self.end)

    def __contains__(self, d: date) -> bool:
        return self.start <= d <= self.end


@dataclass(frozen=True)
class RangePolicy:
    """Padding applied around the data, and the window used when there is no data."""
    before_days: int = 7
    after_days: int = 30
    fallback_before_days: int = 30
    fallback_after_days: int = 90


def _known_dates(items: Iterable[TimelineItem], milestones: Iterable[Milestone], log: logging.Logger) -> List[date]:
    found: List[date] = []
    for item in items:
        for field_name in ("start_date", "end_date"):
            raw = getattr(item, field_name)
            if raw is None or raw == "":
                continue
            d = parse_date(raw)
            if d is None:
                log.warning("Skipping invalid %s %r on item %s", field_name, raw, item.id)
                continue
            found.append(d)
    for ms in milestones:
        d = parse_date(ms.date)
        if d is None:
            log.warning("Skipping invalid date %r on milestone %s", ms.date, ms.id)
            continue
        found.append(d)
    return found


def calculate_date_range(
    items: Iterable[TimelineItem],
    milestones: Iterable[Milestone],
    policy: RangePolicy = RangePolicy(),
    *,
    today: Optional[date] = None,
    undated_at: Optional[date] = None,
    log: Optional[logging.Logger] = None,
) -> DateRange:
    """Visible window covering every known date, padded by `policy`.

    Falls back to [today - 30, today + 90] when nothing carries a valid date.
    `undated_at` is the date items without a usable start are drawn at; it is
    kept inside the window whenever such an item is present.
    """
    log = log or _log
    items = list(items)
    dates = _known_dates(items, milestones, log)
    if not dates:
        anchor = today or _today()
        return DateRange(
            add_days(anchor, -policy.fallback_before_days),
            add_days(anchor, policy.fallback_after_days),
        )
    if undated_at is not None and any(parse_date(i.start_date) is None for i in items):
        log.debug("Widening range to include %s for undated items", undated_at)
        dates.append(undated_at)
    return DateRange(
        add_days(min(dates), -policy.before_days),
        add_days(max(dates), policy.after_days),
    )
