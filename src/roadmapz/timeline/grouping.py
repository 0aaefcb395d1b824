# Rev 0.1.0
"""Row filtering and grouping for the timeline.

Both keep the relative input order of posts, so row indices (and with them the
dependency arrows) do not move between renders unless the data does.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from ..models.entities import Post, Status, User
from .dates import parse_date

PRIORITY_ORDER = {"urgent": 0, "high": 1, "medium": 2, "low": 3, "none": 4}
PRIORITY_COLORS = {
    "urgent": "#b91c1c",
    "high": "#ef4444",
    "medium": "#f97316",
    "low": "#3b82f6",
}


@dataclass(frozen=True)
class FilterState:
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    status_ids: frozenset = frozenset()
    assignee_ids: frozenset = frozenset()
    priorities: frozenset = frozenset()
    tags: frozenset = frozenset()
    search_term: str = ""

    @property
    def active_count(self) -> int:
        n = sum(1 for d in (self.start_date, self.end_date) if d is not None)
        n += len(self.status_ids) + len(self.assignee_ids) + len(self.priorities) + len(self.tags)
        return n + (1 if self.search_term else 0)

    @property
    def is_empty(self) -> bool:
        return self.active_count == 0


def active_filter_count(filters: FilterState) -> int:
    return filters.active_count


def matches(post: Post, f: FilterState) -> bool:
    if f.search_term:
        needle = f.search_term.lower()
        haystack = f"{post.title or ''}\n{post.description or ''}".lower()
        if needle not in haystack:
            return False
    if f.status_ids and post.status_id not in f.status_ids:
        return False
    if f.assignee_ids and post.assignee_id not in f.assignee_ids:
        return False
    if f.priorities and post.priority not in f.priorities:
        return False
    if f.tags and not f.tags.intersection(post.tags or ()):
        return False
    if f.start_date or f.end_date:
        start = parse_date(post.start_date)
        end = parse_date(post.end_date) or start
        if start is None:
            return False
        # keep posts whose span overlaps the requested window
        if f.start_date and end < f.start_date:
            return False
        if f.end_date and start > f.end_date:
            return False
    return True


def apply_filters(posts: Iterable[Post], filters: FilterState) -> List[Post]:
    if filters.is_empty:
        return list(posts)
    return [p for p in posts if matches(p, filters)]


@dataclass
class PostGroup:
    key: str
    label: str
    color: Optional[str] = None
    posts: List[Post] = field(default_factory=list)


def _group_key(post: Post, group_by: str) -> str:
    if group_by == "status":
        return str(post.status_id) if post.status_id is not None else "none"
    if group_by == "assignee":
        return post.assignee_id or "none"
    return post.priority or "none"


def group_posts(
    posts: Sequence[Post],
    group_by: str = "none",
    statuses: Iterable[Status] = (),
    users: Iterable[User] = (),
) -> List[PostGroup]:
    if group_by == "none":
        return [PostGroup("all", "All Items", None, list(posts))]
    if group_by not in ("status", "assignee", "priority"):
        raise ValueError(f"Unknown grouping: {group_by!r}")

    status_by_key: Mapping[str, Status] = {str(s.id): s for s in statuses}
    user_by_key: Mapping[str, User] = {u.id: u for u in users}
    groups: Dict[str, PostGroup] = {}

    for post in posts:
        key = _group_key(post, group_by)
        grp = groups.get(key)
        if grp is None:
            if group_by == "status":
                st = status_by_key.get(key)
                grp = PostGroup(key, st.name if st else "No Status", st.color if st else None)
            elif group_by == "assignee":
                user = user_by_key.get(key)
                grp = PostGroup(key, user.label if user else ("Unassigned" if key == "none" else key))
            else:
                label = key.capitalize() if key != "none" else "No Priority"
                grp = PostGroup(key, label, PRIORITY_COLORS.get(key))
            groups[key] = grp
        grp.posts.append(post)

    ordered = list(groups.values())
    if group_by == "priority":
        ordered.sort(key=lambda g: PRIORITY_ORDER.get(g.key, 999))
    return ordered


def flatten_groups(groups: Iterable[PostGroup], collapsed: Iterable[str] = ()) -> List[Post]:
    """Row order for the timeline; collapsed groups contribute no rows."""
    hidden = set(collapsed)
    rows: List[Post] = []
    for grp in groups:
        if grp.key not in hidden:
            rows.extend(grp.posts)
    return rows
