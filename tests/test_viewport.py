# tests/test_viewport.py
from __future__ import annotations

import pytest

from roadmapz.timeline.viewport import (
    ViewportState,
    clamp_cell_width,
    clamp_scroll,
    compute_viewport,
    is_in_viewport,
    max_scroll,
    visible_window,
)


def test_visible_window_adds_buffer_on_both_sides():
    assert visible_window(1000, 800) == (600, 2200)
    assert visible_window(1000, 800, buffer_pct=0) == (1000, 1800)


def test_visible_window_start_never_negative():
    assert visible_window(100, 800) == (0, 1300)


@pytest.mark.parametrize("pos", [-500, -1, 0, 250, 1200, 10_000])
def test_clamp_scroll_stays_in_bounds(pos):
    clamped = clamp_scroll(pos, total_width=2000, container_width=800)
    assert 0 <= clamped <= max(0, 2000 - 800)


def test_clamp_scroll_when_content_fits():
    assert max_scroll(500, 800) == 0
    assert clamp_scroll(300, 500, 800) == 0


def test_clamp_cell_width_bounds():
    assert clamp_cell_width(10) == 60
    assert clamp_cell_width(150) == 150
    assert clamp_cell_width(999) == 300


def test_overlap_is_inclusive():
    state = compute_viewport(1000, 800, buffer_pct=0)
    assert state == ViewportState(1000, 1800, 800, 1000, False)
    assert is_in_viewport(900, 100, state)        # touches the left edge
    assert is_in_viewport(1800, 50, state)        # touches the right edge
    assert not is_in_viewport(850, 100, state)
    assert not is_in_viewport(1801, 10, state)


def test_with_scrolling_copies_state():
    state = compute_viewport(0, 400)
    moving = state.with_scrolling(True)
    assert moving.is_scrolling and not state.is_scrolling
    assert moving.visible_end == state.visible_end
