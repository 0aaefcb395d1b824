# Rev 0.1.0
"""One full layout pass: range -> grid -> item/milestone rects -> connectors."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from typing import Dict, Optional, Sequence, Tuple

from ..models.entities import Dependency, Milestone, Post
from .connectors import Connector, route_dependencies
from .date_range import DateRange, RangePolicy, calculate_date_range
from .dates import today as _today
from .positions import (
    LayoutMetrics,
    PositionedRect,
    content_height,
    content_width,
    layout_items,
    layout_milestones,
)
from .scale import Grid, generate_grid


@dataclass(frozen=True)
class TimelineLayout:
    date_range: DateRange
    grid: Grid
    metrics: LayoutMetrics
    rows: Tuple[Post, ...]
    items: Dict[int, PositionedRect]
    milestones: Dict[int, PositionedRect]
    connectors: Tuple[Connector, ...]
    width: float
    height: float


def build_layout(
    rows: Sequence[Post],
    milestones: Sequence[Milestone],
    dependencies: Sequence[Dependency],
    *,
    scale: str = "month",
    metrics: LayoutMetrics = LayoutMetrics(),
    policy: RangePolicy = RangePolicy(),
    date_range: Optional[DateRange] = None,
    today: Optional[date] = None,
    log: Optional[logging.Logger] = None,
) -> TimelineLayout:
    """Pure function of its inputs; callers recompute it on every change."""
    undated_at = (today or _today()) if metrics.undated == "today" else None
    rng = date_range or calculate_date_range(rows, milestones, policy, today=today, undated_at=undated_at, log=log)
    grid = generate_grid(rng.start, rng.end, scale)
    items = layout_items(rows, rng.start, metrics, today=today, log=log)
    ms = layout_milestones(milestones, rng.start, len(rows), metrics, log=log)
    connectors = route_dependencies(dependencies, items, {p.id: p for p in rows}, log=log)
    return TimelineLayout(
        date_range=rng,
        grid=grid,
        metrics=metrics,
        rows=tuple(rows),
        items=items,
        milestones=ms,
        connectors=tuple(connectors),
        width=content_width(rng, metrics.cell_width),
        height=metrics.header_height + metrics.padding + content_height(len(rows), metrics),
    )
