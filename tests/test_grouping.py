# tests/test_grouping.py
from __future__ import annotations

from datetime import date

import pytest

from conftest import make_post
from roadmapz.models.entities import Status, User
from roadmapz.timeline.grouping import (
    FilterState,
    active_filter_count,
    apply_filters,
    flatten_groups,
    group_posts,
)


@pytest.fixture()
def posts():
    return [
        make_post(1, "2024-01-01", "2024-01-10", title="Design API", status_id=10, priority="high",
                  assignee_id="alice", tags=["backend"]),
        make_post(2, "2024-02-01", "2024-02-05", title="Write docs", description="API reference",
                  status_id=11, priority="low", tags=["docs"]),
        make_post(3, "2024-03-01", None, title="Launch", status_id=None, priority="urgent",
                  assignee_id="bob", tags=["backend", "release"]),
        make_post(4, None, None, title="Someday", priority=None),
    ]


def test_empty_filter_keeps_everything(posts):
    assert apply_filters(posts, FilterState()) == posts
    assert active_filter_count(FilterState()) == 0


def test_search_matches_title_and_description(posts):
    hits = apply_filters(posts, FilterState(search_term="api"))
    assert [p.id for p in hits] == [1, 2]


def test_filters_combine(posts):
    f = FilterState(tags=frozenset({"backend"}), priorities=frozenset({"urgent"}))
    assert [p.id for p in apply_filters(posts, f)] == [3]
    assert f.active_count == 2


def test_status_and_assignee_filters(posts):
    assert [p.id for p in apply_filters(posts, FilterState(status_ids=frozenset({10, 11})))] == [1, 2]
    assert [p.id for p in apply_filters(posts, FilterState(assignee_ids=frozenset({"bob"})))] == [3]


def test_date_window_keeps_overlapping_posts(posts):
    f = FilterState(start_date=date(2024, 1, 5), end_date=date(2024, 2, 2))
    assert [p.id for p in apply_filters(posts, f)] == [1, 2]
    assert active_filter_count(f) == 2


def test_group_none_is_single_group(posts):
    groups = group_posts(posts, "none")
    assert len(groups) == 1
    assert groups[0].label == "All Items"
    assert groups[0].posts == posts


def test_group_by_priority_order(posts):
    groups = group_posts(posts, "priority")
    assert [g.key for g in groups] == ["urgent", "high", "low", "none"]
    assert groups[-1].label == "No Priority"
    assert groups[0].label == "Urgent"


def test_group_by_status_uses_names(posts):
    statuses = [Status(10, 1, "To Do", "#4299e1"), Status(11, 1, "Done", "#48bb78")]
    groups = group_posts(posts, "status", statuses)
    assert [(g.label, g.color) for g in groups] == [
        ("To Do", "#4299e1"), ("Done", "#48bb78"), ("No Status", None),
    ]
    assert [p.id for p in groups[2].posts] == [3, 4]


def test_group_by_assignee_labels(posts):
    users = [User("alice", "alice@example.com", "Alice")]
    labels = [g.label for g in group_posts(posts, "assignee", users=users)]
    assert labels == ["Alice", "Unassigned", "bob"]


def test_unknown_grouping_raises(posts):
    with pytest.raises(ValueError):
        group_posts(posts, "color")


def test_collapsed_groups_contribute_no_rows(posts):
    groups = group_posts(posts, "priority")
    rows = flatten_groups(groups, collapsed={"urgent", "none"})
    assert [p.id for p in rows] == [1, 2]
