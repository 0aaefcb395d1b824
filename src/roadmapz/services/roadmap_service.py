# Rev 0.1.0

"""Roadmap actions (Rev 0.1.0)
- One entry point per user action; every call returns an ActionResult
- Ownership is checked through services.permissions before touching rows
- Storage and validation failures are logged and returned, never raised
"""
from __future__ import annotations

import functools
import logging
import sqlite3
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Sequence

from ..models.entities import Comment, Dependency, Milestone, Post, Roadmap, Status, Tag, User
from ..models.types import DEPENDENCY_TYPES, PRIORITIES
from ..repositories.sqlite_comment_repository import SQLiteCommentRepository
from ..repositories.sqlite_dependency_repository import SQLiteDependencyRepository
from ..repositories.sqlite_milestone_repository import SQLiteMilestoneRepository
from ..repositories.sqlite_post_repository import SQLitePostRepository
from ..repositories.sqlite_roadmap_repository import SQLiteRoadmapRepository
from ..repositories.sqlite_status_repository import SQLiteStatusRepository
from ..repositories.sqlite_user_repository import SQLiteUserRepository
from .permissions import has_permission

log = logging.getLogger(__name__)

DEFAULT_STATUSES = (
    ("To Do", "#4299e1"),
    ("In Progress", "#ed8936"),
    ("Done", "#48bb78"),
)


@dataclass
class ActionResult:
    success: bool
    data: Any = None
    error: Optional[str] = None

    @classmethod
    def ok(cls, data: Any = None) -> "ActionResult":
        return cls(True, data, None)

    @classmethod
    def fail(cls, error: str) -> "ActionResult":
        return cls(False, None, error)


class ActionError(Exception):
    """Validation or authorization failure; message is shown to the user."""


def action(name: str):
    """Wrap a service method so it returns ActionResult instead of raising."""
    def deco(fn):
        @functools.wraps(fn)
        def wrapper(self, *args, **kwargs) -> ActionResult:
            try:
                return ActionResult.ok(fn(self, *args, **kwargs))
            except ActionError as exc:
                log.warning("%s refused: %s", name, exc)
                return ActionResult.fail(str(exc))
            except (sqlite3.Error, ValueError) as exc:
                log.error("%s failed: %s", name, exc)
                return ActionResult.fail(f"Failed to {name}")
        return wrapper
    return deco


def _iso(value) -> Optional[str]:
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    return date.fromisoformat(str(value)[:10]).isoformat()


class RoadmapService:
    def __init__(self, db, user_id: str):
        self._db = db
        self.user_id = user_id
        self.roadmaps = SQLiteRoadmapRepository(db)
        self.statuses = SQLiteStatusRepository(db)
        self.posts = SQLitePostRepository(db)
        self.milestones = SQLiteMilestoneRepository(db)
        self.dependencies = SQLiteDependencyRepository(db)
        self.users = SQLiteUserRepository(db)
        self.comments = SQLiteCommentRepository(db)

    # ---- authorization
    def _roadmap(self, roadmap_id: int) -> Roadmap:
        rec = self.roadmaps.get_roadmap(roadmap_id)
        if rec is None:
            raise ActionError("Roadmap not found")
        return Roadmap.from_row(rec)

    def _require(self, roadmap_id: int, what: str) -> Roadmap:
        rm = self._roadmap(roadmap_id)
        if not has_permission(self.user_id, rm, what):
            raise ActionError("You do not have permission to do that")
        return rm

    def _row_or_fail(self, rec: Optional[Dict[str, Any]], label: str) -> Dict[str, Any]:
        if rec is None:
            raise ActionError(f"{label} not found")
        return rec

    # ---- roadmaps
    @action("list roadmaps")
    def list_roadmaps(self) -> List[Roadmap]:
        return [Roadmap.from_row(r) for r in self.roadmaps.list_roadmaps_for(self.user_id)]

    @action("load roadmap")
    def get_roadmap(self, roadmap_id: int) -> Roadmap:
        return self._require(roadmap_id, "read")

    @action("create roadmap")
    def create_roadmap(self, title: str, description: Optional[str] = None, is_public: bool = False) -> Roadmap:
        title = (title or "").strip()
        if not title:
            raise ActionError("Title is required")
        with self._db.tx():
            rid = self.roadmaps.create_roadmap(
                title=title, owner_id=self.user_id, description=description, is_public=is_public
            )
            self._seed_statuses(rid)
        log.info("Roadmap %s created by %s", rid, self.user_id)
        return Roadmap.from_row(self.roadmaps.get_roadmap(rid))

    @action("update roadmap")
    def update_roadmap(self, roadmap_id: int, **fields: Any) -> Roadmap:
        self._require(roadmap_id, "edit")
        if "title" in fields and not (fields["title"] or "").strip():
            raise ActionError("Title is required")
        self.roadmaps.update_roadmap(roadmap_id, **fields)
        return Roadmap.from_row(self.roadmaps.get_roadmap(roadmap_id))

    @action("delete roadmap")
    def delete_roadmap(self, roadmap_id: int) -> bool:
        self._require(roadmap_id, "delete")
        return self.roadmaps.delete_roadmap(roadmap_id)

    # ---- statuses
    def _seed_statuses(self, roadmap_id: int) -> None:
        for idx, (name, color) in enumerate(DEFAULT_STATUSES):
            self.statuses.create_status(roadmap_id=roadmap_id, name=name, color=color, order_index=idx)

    @action("load statuses")
    def list_statuses(self, roadmap_id: int) -> List[Status]:
        rm = self._require(roadmap_id, "read")
        rows = self.statuses.list_statuses(roadmap_id)
        if not rows and has_permission(self.user_id, rm, "manage_statuses"):
            log.info("Seeding default statuses for roadmap %s", roadmap_id)
            with self._db.tx():
                self._seed_statuses(roadmap_id)
            rows = self.statuses.list_statuses(roadmap_id)
        return [Status.from_row(r) for r in rows]

    @action("create status")
    def create_status(self, roadmap_id: int, name: str, color: str = "#64748b") -> Status:
        self._require(roadmap_id, "manage_statuses")
        if not (name or "").strip():
            raise ActionError("Status name is required")
        sid = self.statuses.create_status(roadmap_id=roadmap_id, name=name.strip(), color=color)
        return Status.from_row(self.statuses.get_status(sid))

    @action("update status")
    def update_status(self, status_id: int, **fields: Any) -> Status:
        rec = self._row_or_fail(self.statuses.get_status(status_id), "Status")
        self._require(rec["roadmap_id"], "manage_statuses")
        self.statuses.update_status(status_id, **fields)
        return Status.from_row(self.statuses.get_status(status_id))

    @action("delete status")
    def delete_status(self, status_id: int) -> bool:
        rec = self._row_or_fail(self.statuses.get_status(status_id), "Status")
        self._require(rec["roadmap_id"], "manage_statuses")
        in_use = self.statuses.count_posts(status_id)
        if in_use:
            raise ActionError(f"Cannot delete status with {in_use} post(s); move them first")
        return self.statuses.delete_status(status_id)

    @action("reorder statuses")
    def reorder_statuses(self, roadmap_id: int, ordered_ids: Sequence[int]) -> List[Status]:
        self._require(roadmap_id, "manage_statuses")
        self.statuses.set_order(roadmap_id, [(sid, idx) for idx, sid in enumerate(ordered_ids)])
        return [Status.from_row(r) for r in self.statuses.list_statuses(roadmap_id)]

    # ---- posts
    def _validate_post_fields(self, fields: Dict[str, Any]) -> Dict[str, Any]:
        out = dict(fields)
        if "title" in out and not (out["title"] or "").strip():
            raise ActionError("Title is required")
        if out.get("priority") is not None and out["priority"] not in PRIORITIES:
            raise ActionError(f"Unknown priority {out['priority']!r}")
        if "progress" in out and not 0 <= int(out["progress"]) <= 100:
            raise ActionError("Progress must be between 0 and 100")
        for key in ("start_date", "end_date"):
            if key in out:
                out[key] = _iso(out[key])
        return out

    def _check_span(self, start: Optional[str], end: Optional[str]) -> None:
        if start and end and end < start:
            raise ActionError("End date must be on or after start date")

    def _check_status(self, roadmap_id: int, status_id: Optional[int]) -> None:
        if status_id is None:
            return
        st = self.statuses.get_status(status_id)
        if st is None or st["roadmap_id"] != roadmap_id:
            raise ActionError("Status does not belong to this roadmap")

    @action("load posts")
    def list_posts(self, roadmap_id: int) -> List[Post]:
        self._require(roadmap_id, "read")
        return [Post.from_row(r) for r in self.posts.list_posts(roadmap_id)]

    @action("load post")
    def get_post(self, post_id: int) -> Post:
        rec = self._row_or_fail(self.posts.get_post(post_id), "Post")
        self._require(rec["roadmap_id"], "read")
        return Post.from_row(rec)

    @action("create post")
    def create_post(self, roadmap_id: int, title: str, *, tags: Iterable[str] = (), **fields: Any) -> Post:
        self._require(roadmap_id, "edit")
        fields = self._validate_post_fields({"title": title, **fields})
        self._check_span(fields.get("start_date"), fields.get("end_date"))
        self._check_status(roadmap_id, fields.get("status_id"))
        fields["title"] = fields["title"].strip()
        with self._db.tx():
            pid = self.posts.create_post(roadmap_id=roadmap_id, **fields)
            if tags:
                self.posts.set_post_tags(pid, tags)
        return Post.from_row(self.posts.get_post(pid))

    @action("update post")
    def update_post(self, post_id: int, *, tags: Optional[Iterable[str]] = None, **fields: Any) -> Post:
        rec = self._row_or_fail(self.posts.get_post(post_id), "Post")
        self._require(rec["roadmap_id"], "edit")
        fields = self._validate_post_fields(fields)
        self._check_span(fields.get("start_date", rec["start_date"]), fields.get("end_date", rec["end_date"]))
        if "status_id" in fields:
            self._check_status(rec["roadmap_id"], fields["status_id"])
        with self._db.tx():
            self.posts.update_post_fields(post_id, **fields)
            if tags is not None:
                self.posts.set_post_tags(post_id, tags)
        return Post.from_row(self.posts.get_post(post_id))

    @action("delete post")
    def delete_post(self, post_id: int) -> bool:
        rec = self._row_or_fail(self.posts.get_post(post_id), "Post")
        self._require(rec["roadmap_id"], "edit")
        return self.posts.delete_post(post_id)

    @action("update post status")
    def update_post_status(self, post_id: int, status_id: int, order_index: Optional[int] = None) -> Post:
        rec = self._row_or_fail(self.posts.get_post(post_id), "Post")
        self._require(rec["roadmap_id"], "edit")
        self._check_status(rec["roadmap_id"], status_id)
        self.posts.set_post_status(post_id, status_id, order_index)
        return Post.from_row(self.posts.get_post(post_id))

    # ---- tags
    @action("load tags")
    def list_tags(self, roadmap_id: int) -> List[Tag]:
        self._require(roadmap_id, "read")
        return [Tag.from_row(r) for r in self.posts.list_tags(roadmap_id)]

    @action("create tag")
    def create_tag(self, roadmap_id: int, name: str, color: Optional[str] = None) -> Tag:
        self._require(roadmap_id, "edit")
        name = self._tag_name(roadmap_id, name)
        tid = self.posts.create_tag(roadmap_id=roadmap_id, name=name, color=color)
        return Tag(tid, roadmap_id, name, color)

    def _tag_name(self, roadmap_id: int, name: Optional[str], tag_id: Optional[int] = None) -> str:
        name = (name or "").strip()
        if not name:
            raise ActionError("Tag name is required")
        clash = self.posts.find_tag(roadmap_id, name)
        if clash is not None and clash["id"] != tag_id:
            raise ActionError(f"A tag named {name!r} already exists")
        return name

    @action("update tag")
    def update_tag(self, tag_id: int, **fields: Any) -> Tag:
        rec = self._row_or_fail(self.posts.get_tag(tag_id), "Tag")
        self._require(rec["roadmap_id"], "edit")
        if "name" in fields:
            fields["name"] = self._tag_name(rec["roadmap_id"], fields["name"], tag_id)
        self.posts.update_tag(tag_id, **fields)
        return Tag.from_row(self.posts.get_tag(tag_id))

    @action("delete tag")
    def delete_tag(self, tag_id: int) -> bool:
        rec = self._row_or_fail(self.posts.get_tag(tag_id), "Tag")
        self._require(rec["roadmap_id"], "edit")
        return self.posts.delete_tag(tag_id)

    @action("set post tags")
    def set_post_tags(self, post_id: int, names: Iterable[str]) -> List[str]:
        rec = self._row_or_fail(self.posts.get_post(post_id), "Post")
        self._require(rec["roadmap_id"], "edit")
        return self.posts.set_post_tags(post_id, names)

    # ---- milestones
    @action("load milestones")
    def list_milestones(self, roadmap_id: int) -> List[Milestone]:
        self._require(roadmap_id, "read")
        return [Milestone.from_row(r) for r in self.milestones.list_milestones(roadmap_id)]

    @action("create milestone")
    def create_milestone(
        self,
        roadmap_id: int,
        title: str,
        date,
        description: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Milestone:
        self._require(roadmap_id, "edit")
        if not (title or "").strip():
            raise ActionError("Title is required")
        iso = _iso(date)
        if iso is None:
            raise ActionError("Milestone date is required")
        mid = self.milestones.create_milestone(
            roadmap_id=roadmap_id, title=title.strip(), date=iso,
            description=description, color=color, created_by=self.user_id,
        )
        return Milestone.from_row(self.milestones.get_milestone(mid))

    @action("update milestone")
    def update_milestone(self, milestone_id: int, **patch: Any) -> Milestone:
        rec = self._row_or_fail(self.milestones.get_milestone(milestone_id), "Milestone")
        self._require(rec["roadmap_id"], "edit")
        if "date" in patch:
            patch["date"] = _iso(patch["date"])
            if patch["date"] is None:
                raise ActionError("Milestone date is required")
        self.milestones.update_milestone(milestone_id, **patch)
        return Milestone.from_row(self.milestones.get_milestone(milestone_id))

    @action("delete milestone")
    def delete_milestone(self, milestone_id: int) -> bool:
        rec = self._row_or_fail(self.milestones.get_milestone(milestone_id), "Milestone")
        self._require(rec["roadmap_id"], "edit")
        return self.milestones.delete_milestone(milestone_id)

    # ---- dependencies
    @action("load dependencies")
    def list_dependencies(self, roadmap_id: int) -> List[Dependency]:
        self._require(roadmap_id, "read")
        return [Dependency.from_row(r) for r in self.dependencies.list_dependencies(roadmap_id)]

    @action("create dependency")
    def create_dependency(
        self,
        roadmap_id: int,
        source_id: int,
        target_id: int,
        dependency_type: str = "finish-to-start",
    ) -> Dependency:
        self._require(roadmap_id, "edit")
        if dependency_type not in DEPENDENCY_TYPES:
            raise ActionError(f"Unknown dependency type {dependency_type!r}")
        if source_id == target_id:
            raise ActionError("A post cannot depend on itself")
        if self.posts.count_in_roadmap(roadmap_id, {source_id, target_id}) != 2:
            raise ActionError("Both posts must belong to this roadmap")
        if self.dependencies.find_dependency(source_id, target_id) is not None:
            raise ActionError("This dependency already exists")
        did = self.dependencies.create_dependency(
            roadmap_id=roadmap_id, source_id=source_id, target_id=target_id,
            dependency_type=dependency_type, created_by=self.user_id,
        )
        return Dependency.from_row(self.dependencies.get_dependency(did))

    @action("update dependency")
    def update_dependency_type(self, dependency_id: int, dependency_type: str) -> Dependency:
        rec = self._row_or_fail(self.dependencies.get_dependency(dependency_id), "Dependency")
        self._require(rec["roadmap_id"], "edit")
        if dependency_type not in DEPENDENCY_TYPES:
            raise ActionError(f"Unknown dependency type {dependency_type!r}")
        self.dependencies.update_dependency_type(dependency_id, dependency_type)
        return Dependency.from_row(self.dependencies.get_dependency(dependency_id))

    @action("delete dependency")
    def delete_dependency(self, dependency_id: int) -> bool:
        rec = self._row_or_fail(self.dependencies.get_dependency(dependency_id), "Dependency")
        self._require(rec["roadmap_id"], "edit")
        return self.dependencies.delete_dependency(dependency_id)

    # ---- comments
    def _comment_post(self, post_id: int) -> Dict[str, Any]:
        return self._row_or_fail(self.posts.get_post(post_id), "Post")

    @action("load comments")
    def list_comments(self, post_id: int) -> List[Comment]:
        self._require(self._comment_post(post_id)["roadmap_id"], "read")
        return [Comment.from_row(r) for r in self.comments.list_comments(post_id)]

    @action("create comment")
    def create_comment(self, post_id: int, content: str, parent_id: Optional[int] = None) -> Comment:
        # anyone who can read the roadmap may comment on it
        self._require(self._comment_post(post_id)["roadmap_id"], "read")
        content = (content or "").strip()
        if not content:
            raise ActionError("Comment cannot be empty")
        if parent_id is not None:
            parent = self.comments.get_comment(parent_id)
            if parent is None or parent["post_id"] != post_id:
                raise ActionError("Reply must belong to the same post")
        cid = self.comments.create_comment(
            post_id=post_id, user_id=self.user_id, content=content, parent_id=parent_id
        )
        return Comment.from_row(self.comments.get_comment(cid))

    @action("update comment")
    def update_comment(self, comment_id: int, content: str) -> Comment:
        rec = self._row_or_fail(self.comments.get_comment(comment_id), "Comment")
        if rec["user_id"] != self.user_id:
            raise ActionError("You can only edit your own comments")
        content = (content or "").strip()
        if not content:
            raise ActionError("Comment cannot be empty")
        self.comments.update_content(comment_id, content)
        return Comment.from_row(self.comments.get_comment(comment_id))

    @action("delete comment")
    def delete_comment(self, comment_id: int) -> bool:
        rec = self._row_or_fail(self.comments.get_comment(comment_id), "Comment")
        if rec["user_id"] != self.user_id:
            # the roadmap owner may remove any comment
            rm = self._roadmap(self._comment_post(rec["post_id"])["roadmap_id"])
            if not has_permission(self.user_id, rm, "delete"):
                raise ActionError("You can only delete your own comments")
        return self.comments.delete_comment(comment_id)

    # ---- users
    @action("load users")
    def list_users(self) -> List[User]:
        return [User(**r) for r in self.users.list_users()]
