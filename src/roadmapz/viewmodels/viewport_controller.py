# Rev 0.1.0
"""Scroll/zoom state of the timeline canvas.

User scrolling (wheel, drag) is throttled: the position always follows the
input, but viewportChanged is emitted at most once per throttle interval and
once more when scrolling goes idle. Programmatic jumps emit immediately.
"""
from __future__ import annotations

import time
from datetime import date
from typing import Callable, Optional

from PySide6.QtCore import QObject, QTimer, Signal

from ..timeline.positions import date_to_x
from ..timeline.viewport import (
    ViewportState,
    clamp_cell_width,
    clamp_scroll,
    compute_viewport,
    is_in_viewport,
)
from ..utils.config import TimelineSettings
from ..utils.logging_setup import get_logger

log = get_logger("viewport")

REVEAL_MARGIN_CELLS = 2


class ViewportController(QObject):
    viewportChanged = Signal(object)    # ViewportState
    zoomChanged = Signal(int)           # new cell width
    scrollingChanged = Signal(bool)

    def __init__(
        self,
        settings: TimelineSettings = TimelineSettings(),
        *,
        clock: Optional[Callable[[], float]] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._cfg = settings
        self._clock = clock or time.monotonic
        self._cell_width = clamp_cell_width(settings.cell_width, settings.min_cell_width, settings.max_cell_width)
        self._container_width = 0.0
        self._content_width = 0.0
        self._scroll = 0.0
        self._is_scrolling = False
        self._last_emit: Optional[float] = None
        self._drag: Optional[tuple[float, float]] = None   # (press x, scroll at press)
        self._state = ViewportState()

        self._idle = QTimer(self)
        self._idle.setSingleShot(True)
        self._idle.setInterval(settings.scroll_idle_ms)
        self._idle.timeout.connect(self.finish_scroll)

    # ---- read-only state
    @property
    def state(self) -> ViewportState:
        return self._state

    @property
    def cell_width(self) -> int:
        return int(self._cell_width)

    @property
    def scroll_position(self) -> float:
        return self._scroll

    @property
    def is_scrolling(self) -> bool:
        return self._is_scrolling

    # ---- sizes
    def set_container_width(self, width: float) -> None:
        self._container_width = max(0.0, float(width))
        self._apply_scroll(self._scroll, user=False)

    def set_content_width(self, width: float) -> None:
        self._content_width = max(0.0, float(width))
        self._apply_scroll(self._scroll, user=False)

    # ---- scrolling
    def scroll_to(self, position: float, *, user: bool = False) -> None:
        self._apply_scroll(position, user=user)

    def scroll_by(self, delta: float) -> None:
        self._apply_scroll(self._scroll + delta, user=True)

    def center_on(self, x: float) -> None:
        self._apply_scroll(x - self._container_width / 2, user=False)

    def scroll_to_date(self, d: date, range_start: date) -> None:
        self.center_on(date_to_x(d, range_start, self._cell_width))

    def reveal(self, left: float) -> None:
        """Bring a content x into view with a margin of two cells before it."""
        self._apply_scroll(left - REVEAL_MARGIN_CELLS * self._cell_width, user=False)

    # ---- drag to pan
    def press(self, x: float) -> None:
        self._drag = (x, self._scroll)

    def move(self, x: float) -> None:
        if self._drag is None:
            return
        origin_x, origin_scroll = self._drag
        self._apply_scroll(origin_scroll - (x - origin_x), user=True)

    def release(self) -> None:
        self._drag = None

    @property
    def is_dragging(self) -> bool:
        return self._drag is not None

    # ---- zoom
    def zoom_in(self) -> bool:
        return self.set_cell_width(self._cell_width + self._cfg.zoom_step)

    def zoom_out(self) -> bool:
        return self.set_cell_width(self._cell_width - self._cfg.zoom_step)

    def set_cell_width(self, width: float) -> bool:
        new = clamp_cell_width(width, self._cfg.min_cell_width, self._cfg.max_cell_width)
        if new == self._cell_width:
            return False
        ratio = new / self._cell_width
        # keep the date under the viewport center in place
        center = self._scroll + self._container_width / 2
        self._cell_width = new
        self._content_width *= ratio
        self._scroll = center * ratio - self._container_width / 2
        log.debug("Zoom to %s px per cell", new)
        self.zoomChanged.emit(int(new))
        self._apply_scroll(self._scroll, user=False)
        return True

    # ---- visibility
    def is_item_visible(self, left: float, width: float) -> bool:
        return is_in_viewport(left, width, self._state)

    # ---- internals
    def finish_scroll(self) -> None:
        if not self._is_scrolling:
            return
        self._is_scrolling = False
        self._emit_state()
        self.scrollingChanged.emit(False)

    def _apply_scroll(self, position: float, *, user: bool) -> None:
        self._scroll = clamp_scroll(position, self._content_width, self._container_width)
        if not user:
            self._emit_state()
            return
        if not self._is_scrolling:
            self._is_scrolling = True
            self.scrollingChanged.emit(True)
        self._idle.start()
        now = self._clock()
        if self._last_emit is None or (now - self._last_emit) * 1000 >= self._cfg.scroll_throttle_ms:
            self._emit_state()

    def _emit_state(self) -> None:
        self._last_emit = self._clock()
        self._state = compute_viewport(
            self._scroll,
            self._container_width,
            self._cfg.viewport_buffer_pct,
            is_scrolling=self._is_scrolling,
        )
        self.viewportChanged.emit(self._state)
