# Rev 0.1.0
from __future__ import annotations

from dataclasses import dataclass, replace

MIN_CELL_WIDTH = 60
MAX_CELL_WIDTH = 300
ZOOM_STEP = 30
DEFAULT_BUFFER_PCT = 50


@dataclass(frozen=True)
class ViewportState:
    visible_start: float = 0
    visible_end: float = 0
    container_width: float = 0
    scroll_position: float = 0
    is_scrolling: bool = False

    def with_scrolling(self, flag: bool) -> "ViewportState":
        return replace(self, is_scrolling=flag)


def visible_window(scroll: float, container_width: float, buffer_pct: float = DEFAULT_BUFFER_PCT) -> tuple[float, float]:
    """[scroll - buffer, scroll + width + buffer]; buffer is a percentage of the width."""
    buffer = container_width * buffer_pct / 100
    return max(0.0, scroll - buffer), scroll + container_width + buffer


def max_scroll(total_width: float, container_width: float) -> float:
    return max(0.0, total_width - container_width)


def clamp_scroll(position: float, total_width: float, container_width: float) -> float:
    return max(0.0, min(position, max_scroll(total_width, container_width)))


def clamp_cell_width(width: float, lo: float = MIN_CELL_WIDTH, hi: float = MAX_CELL_WIDTH) -> float:
    return max(lo, min(width, hi))


def compute_viewport(
    scroll: float,
    container_width: float,
    buffer_pct: float = DEFAULT_BUFFER_PCT,
    *,
    is_scrolling: bool = False,
) -> ViewportState:
    start, end = visible_window(scroll, container_width, buffer_pct)
    return ViewportState(start, end, container_width, scroll, is_scrolling)


def is_in_viewport(left: float, width: float, state: ViewportState) -> bool:
    # inclusive interval overlap
    return left <= state.visible_end and left + width >= state.visible_start
