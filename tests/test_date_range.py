# tests/test_date_range.py
from __future__ import annotations

import logging
from datetime import date

import pytest

from conftest import make_milestone, make_post
from roadmapz.timeline.date_range import DateRange, RangePolicy, calculate_date_range
from roadmapz.timeline.errors import InvalidRangeError, TimelineError


def test_range_pads_items_and_milestones():
    items = [make_post(1, "2024-01-01", "2024-03-01")]
    milestones = [make_milestone(1, "2024-02-01")]
    rng = calculate_date_range(items, milestones)
    assert rng.start <= date(2023, 12, 25)
    assert rng.end >= date(2024, 3, 31)
    assert rng == DateRange(date(2023, 12, 25), date(2024, 3, 31))


def test_range_covers_every_known_date():
    items = [
        make_post(1, "2024-05-10", "2024-05-20"),
        make_post(2, "2024-04-01", None),
    ]
    milestones = [make_milestone(1, "2024-07-04")]
    rng = calculate_date_range(items, milestones)
    for d in (date(2024, 4, 1), date(2024, 5, 20), date(2024, 7, 4)):
        assert d in rng
    assert rng.start == date(2024, 3, 25)
    assert rng.end == date(2024, 8, 3)


def test_empty_input_uses_fallback_window(fixed_today):
    rng = calculate_date_range([], [], today=fixed_today)
    assert rng.start == date(2023, 12, 16)
    assert rng.end == date(2024, 4, 14)


def test_custom_policy_is_applied(fixed_today):
    policy = RangePolicy(before_days=1, after_days=2, fallback_before_days=3, fallback_after_days=4)
    rng = calculate_date_range([make_post(1, "2024-06-10", "2024-06-12")], [], policy)
    assert rng == DateRange(date(2024, 6, 9), date(2024, 6, 14))
    empty = calculate_date_range([], [], policy, today=fixed_today)
    assert empty == DateRange(date(2024, 1, 12), date(2024, 1, 19))


def test_invalid_dates_are_skipped_with_warning(caplog, fixed_today):
    items = [make_post(1, "garbage", "2024-02-10"), make_post(2, "also-bad", "nope")]
    with caplog.at_level(logging.WARNING):
        rng = calculate_date_range(items, [make_milestone(9, "bad")], today=fixed_today)
    assert rng == DateRange(date(2024, 2, 3), date(2024, 3, 11))
    assert sum("Skipping invalid" in r.message for r in caplog.records) == 4


def test_all_invalid_dates_fall_back(fixed_today):
    rng = calculate_date_range([make_post(1, "x", "y")], [], today=fixed_today)
    assert rng == DateRange(date(2023, 12, 16), date(2024, 4, 14))


def test_injected_logger_receives_warnings():
    seen = []

    class _Capture(logging.Handler):
        def emit(self, record):
            seen.append(record.getMessage())

    log = logging.getLogger("test.injected")
    log.addHandler(_Capture())
    log.propagate = False
    calculate_date_range([make_post(1, "bad", None)], [], log=log)
    assert seen and "bad" in seen[0]


def test_inverted_range_raises():
    with pytest.raises(InvalidRangeError) as err:
        DateRange(date(2024, 2, 1), date(2024, 1, 1))
    assert isinstance(err.value, TimelineError)
    assert isinstance(err.value, ValueError)


def test_undated_anchor_is_kept_inside_the_range(fixed_today):
    items = [make_post(1, "2025-03-01", "2025-03-05"), make_post(2)]
    assert calculate_date_range(items, [], today=fixed_today).start == date(2025, 2, 22)
    rng = calculate_date_range(items, [], today=fixed_today, undated_at=fixed_today)
    assert rng == DateRange(date(2024, 1, 8), date(2025, 4, 4))


def test_undated_anchor_ignored_when_every_item_has_a_start(fixed_today):
    items = [make_post(1, "2025-03-01", "2025-03-05")]
    rng = calculate_date_range(items, [], undated_at=fixed_today)
    assert rng == DateRange(date(2025, 2, 22), date(2025, 4, 4))
