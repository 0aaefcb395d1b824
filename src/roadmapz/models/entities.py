# Rev 0.1.0
"""Lightweight entities aligned with schema Rev 0.1.1 (data/migrations/0001_init.sql, 0002_comments.sql)"""
from __future__ import annotations
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from .types import DateLike


def _pick(cls, row: Mapping[str, Any]) -> Dict[str, Any]:
    return {k: row[k] for k in cls.__dataclass_fields__ if k in row}


@dataclass
class User:
    id: str
    email: str
    display_name: Optional[str] = None

    @property
    def label(self) -> str:
        return self.display_name or self.email


@dataclass
class Roadmap:
    id: int | None
    title: str
    owner_id: str
    description: Optional[str] = None
    is_public: bool = False
    created_at_utc: Optional[str] = None
    updated_at_utc: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Roadmap":
        data = _pick(cls, row)
        data["is_public"] = bool(data.get("is_public"))
        return cls(**data)


@dataclass
class Status:
    id: int | None
    roadmap_id: int
    name: str
    color: str = "#64748b"
    order_index: int = 0

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Status":
        return cls(**_pick(cls, row))


@dataclass
class Tag:
    id: int | None
    roadmap_id: int
    name: str
    color: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Tag":
        return cls(**_pick(cls, row))


@dataclass
class Post:
    """A dated unit of work; rendered as a bar on the timeline."""
    id: int | None
    roadmap_id: int
    title: str
    description: Optional[str] = None
    status_id: Optional[int] = None
    assignee_id: Optional[str] = None
    priority: Optional[str] = None      # low | medium | high | urgent
    start_date: DateLike = None         # ISO date
    end_date: DateLike = None           # ISO date, start + 7 days when absent
    progress: int = 0                   # 0..100
    order_index: int = 0
    tags: List[str] = field(default_factory=list)
    created_at_utc: Optional[str] = None
    updated_at_utc: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Post":
        data = _pick(cls, row)
        data["tags"] = list(data.get("tags") or [])
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return _jsonable(asdict(self))


# The layout engine speaks about items; posts are the only kind of item.
TimelineItem = Post


@dataclass
class Milestone:
    """Single-date marker; rendered as a full-height vertical line."""
    id: int | None
    roadmap_id: int
    title: str
    date: DateLike
    description: Optional[str] = None
    color: Optional[str] = None
    is_completed: bool = False

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Milestone":
        data = _pick(cls, row)
        data["is_completed"] = bool(data.get("is_completed"))
        return cls(**data)

    def to_dict(self) -> Dict[str, Any]:
        return _jsonable(asdict(self))


@dataclass
class Dependency:
    id: int | None
    roadmap_id: int
    source_id: int
    target_id: int
    dependency_type: str = "finish-to-start"

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Dependency":
        return cls(**_pick(cls, row))

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class Comment:
    id: int | None
    post_id: int
    user_id: str
    content: str
    parent_id: Optional[int] = None
    is_edited: bool = False
    created_at_utc: Optional[str] = None
    updated_at_utc: Optional[str] = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Comment":
        data = _pick(cls, row)
        data["is_edited"] = bool(data.get("is_edited"))
        return cls(**data)


def _jsonable(data: Dict[str, Any]) -> Dict[str, Any]:
    # date objects become ISO strings so json.dumps does not choke
    return {k: (v.isoformat() if hasattr(v, "isoformat") else v) for k, v in data.items()}
