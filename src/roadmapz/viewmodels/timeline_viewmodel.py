# Rev 0.1.0
from __future__ import annotations

import itertools
from dataclasses import replace
from datetime import date
from pathlib import Path
from typing import Any, Callable, List, Optional

from PySide6.QtCore import QObject, Signal

from ..models.entities import Dependency, Milestone, Post, Status, User
from ..models.types import TIME_SCALES
from ..services.roadmap_service import ActionResult
from ..timeline.date_range import RangePolicy
from ..timeline.dates import parse_date, today as _today
from ..timeline.export import EXPORT_FORMATS, export_filename, render_export, write_export
from ..timeline.grouping import FilterState, PostGroup, apply_filters, flatten_groups, group_posts
from ..timeline.layout import TimelineLayout, build_layout
from ..timeline.positions import LayoutMetrics
from ..utils.config import TimelineSettings
from ..utils.logging_setup import get_logger
from .viewport_controller import ViewportController

log = get_logger("timeline")

_MILESTONE_PATCHABLE = frozenset(Milestone.__dataclass_fields__) - {"id", "roadmap_id"}


class TimelineViewModel(QObject):
    """
    Owns the loaded roadmap data and the derived TimelineLayout.
    Every change of data, filters, grouping, scale or zoom produces a new
    layout snapshot (layoutChanged). Mutations are optimistic: the local
    change is shown first and rolled back if the service refuses it.
    """

    layoutChanged = Signal(object)      # TimelineLayout
    dataLoaded = Signal(int)            # roadmap id
    mutationFailed = Signal(str)
    filtersChanged = Signal(object)     # FilterState

    def __init__(
        self,
        service,
        settings: TimelineSettings = TimelineSettings(),
        *,
        viewport: Optional[ViewportController] = None,
        today: Optional[Callable[[], date]] = None,
        parent: Optional[QObject] = None,
    ):
        super().__init__(parent)
        self._service = service
        self._cfg = settings
        self._today = today or _today
        self.viewport = viewport or ViewportController(settings, parent=self)
        self.viewport.zoomChanged.connect(self._on_zoom)

        self._roadmap_id: Optional[int] = None
        self._roadmap_name = "Roadmap"
        self._posts: List[Post] = []
        self._milestones: List[Milestone] = []
        self._dependencies: List[Dependency] = []
        self._statuses: List[Status] = []
        self._users: List[User] = []

        self._scale = settings.scale if settings.scale in TIME_SCALES else "month"
        self._filters = FilterState()
        self._group_by = "none"
        self._collapsed: set[str] = set()
        self._show_posts = True
        self._show_milestones = True
        self._show_dependencies = True

        self._temp_ids = itertools.count(-1, -1)
        self._layout: Optional[TimelineLayout] = None

    # ---- read-only state
    @property
    def roadmap_id(self) -> Optional[int]:
        return self._roadmap_id

    @property
    def roadmap_name(self) -> str:
        return self._roadmap_name

    @property
    def posts(self) -> List[Post]:
        return list(self._posts)

    @property
    def milestones(self) -> List[Milestone]:
        return list(self._milestones)

    @property
    def dependencies(self) -> List[Dependency]:
        return list(self._dependencies)

    @property
    def statuses(self) -> List[Status]:
        return list(self._statuses)

    @property
    def layout(self) -> Optional[TimelineLayout]:
        return self._layout

    @property
    def scale(self) -> str:
        return self._scale

    @property
    def filters(self) -> FilterState:
        return self._filters

    @property
    def group_by(self) -> str:
        return self._group_by

    def today(self) -> date:
        return self._today()

    @property
    def show_posts(self) -> bool:
        return self._show_posts

    @property
    def show_milestones(self) -> bool:
        return self._show_milestones

    @property
    def show_dependencies(self) -> bool:
        return self._show_dependencies

    # ---- loading
    def _fetch(self, label: str, result: ActionResult) -> list:
        if result.success:
            return list(result.data or [])
        log.warning("Could not load %s for roadmap %s: %s", label, self._roadmap_id, result.error)
        return []

    def load(self, roadmap_id: int) -> None:
        self._roadmap_id = roadmap_id
        rm = self._service.get_roadmap(roadmap_id)
        self._roadmap_name = rm.data.title if rm.success else "Roadmap"
        self._posts = self._fetch("posts", self._service.list_posts(roadmap_id))
        self._milestones = self._fetch("milestones", self._service.list_milestones(roadmap_id))
        self._dependencies = self._fetch("dependencies", self._service.list_dependencies(roadmap_id))
        self._statuses = self._fetch("statuses", self._service.list_statuses(roadmap_id))
        self._users = self._fetch("users", self._service.list_users())
        self._collapsed.clear()
        log.info(
            "Loaded roadmap %s: %d posts, %d milestones, %d dependencies",
            roadmap_id, len(self._posts), len(self._milestones), len(self._dependencies),
        )
        self.dataLoaded.emit(roadmap_id)
        self.relayout()

    def reload(self) -> None:
        if self._roadmap_id is not None:
            self.load(self._roadmap_id)

    # ---- rows
    def groups(self) -> List[PostGroup]:
        visible = apply_filters(self._posts, self._filters)
        return group_posts(visible, self._group_by, self._statuses, self._users)

    def rows(self) -> List[Post]:
        if not self._show_posts:
            return []
        return flatten_groups(self.groups(), self._collapsed)

    # ---- layout
    def _metrics(self) -> LayoutMetrics:
        return LayoutMetrics(
            cell_width=self.viewport.cell_width,
            row_height=self._cfg.row_height,
            header_height=self._cfg.header_height,
            padding=self._cfg.row_padding,
            row_gap=self._cfg.row_gap,
            undated=self._cfg.undated_items,
        )

    def _policy(self) -> RangePolicy:
        return RangePolicy(
            before_days=self._cfg.padding_before_days,
            after_days=self._cfg.padding_after_days,
            fallback_before_days=self._cfg.fallback_before_days,
            fallback_after_days=self._cfg.fallback_after_days,
        )

    def relayout(self) -> TimelineLayout:
        self._layout = build_layout(
            self.rows(),
            self._milestones if self._show_milestones else [],
            self._dependencies if self._show_dependencies else [],
            scale=self._scale,
            metrics=self._metrics(),
            policy=self._policy(),
            today=self._today(),
            log=log,
        )
        self.viewport.set_content_width(self._layout.width)
        self.layoutChanged.emit(self._layout)
        return self._layout

    def _on_zoom(self, _cell_width: int) -> None:
        self.relayout()

    # ---- view options
    def set_scale(self, scale: str) -> None:
        if scale not in TIME_SCALES:
            raise ValueError(f"Unknown time scale: {scale!r}")
        if scale != self._scale:
            self._scale = scale
            self.relayout()

    def set_show_posts(self, on: bool) -> None:
        self._show_posts = bool(on)
        self.relayout()

    def set_show_milestones(self, on: bool) -> None:
        self._show_milestones = bool(on)
        self.relayout()

    def set_show_dependencies(self, on: bool) -> None:
        self._show_dependencies = bool(on)
        self.relayout()

    def set_filters(self, filters: FilterState) -> None:
        self._filters = filters
        self.filtersChanged.emit(filters)
        self.relayout()

    def clear_filters(self) -> None:
        self.set_filters(FilterState())

    def set_group_by(self, group_by: str) -> None:
        if group_by not in ("none", "status", "assignee", "priority"):
            raise ValueError(f"Unknown grouping: {group_by!r}")
        self._group_by = group_by
        self._collapsed.clear()
        self.relayout()

    def toggle_group(self, key: str) -> None:
        if key in self._collapsed:
            self._collapsed.remove(key)
        else:
            self._collapsed.add(key)
        self.relayout()

    # ---- viewport helpers
    def visible_item_ids(self) -> List[int]:
        if self._layout is None:
            return []
        return [
            pid for pid, rect in self._layout.items.items()
            if self.viewport.is_item_visible(rect.left, rect.width)
        ]

    def scroll_to_today(self) -> None:
        if self._layout is not None:
            self.viewport.scroll_to_date(self._today(), self._layout.date_range.start)

    def reveal_first_item(self) -> None:
        if self._layout is not None and self._layout.items:
            self.viewport.reveal(min(r.left for r in self._layout.items.values()))

    # ---- optimistic mutations
    def _snapshot(self):
        return list(self._posts), list(self._milestones), list(self._dependencies)

    def _restore(self, snap) -> None:
        self._posts, self._milestones, self._dependencies = (list(x) for x in snap)

    def _optimistic(
        self,
        label: str,
        apply: Callable[[], None],
        call: Callable[[], ActionResult],
        settle: Optional[Callable[[Any], None]] = None,
    ) -> ActionResult:
        if self._roadmap_id is None:
            return ActionResult.fail("No roadmap loaded")
        snap = self._snapshot()
        apply()
        self.relayout()
        result = call()
        if not result.success:
            log.warning("%s rolled back: %s", label, result.error)
            self._restore(snap)
            self.relayout()
            self.mutationFailed.emit(result.error or f"Failed to {label}")
            return result
        if settle is not None:
            settle(result.data)
            self.relayout()
        return result

    @staticmethod
    def _swap(seq: list, obj_id: int, new) -> None:
        for i, obj in enumerate(seq):
            if obj.id == obj_id:
                seq[i] = new
                return

    def create_milestone(self, title: str, on, description: Optional[str] = None, color: Optional[str] = None) -> ActionResult:
        temp = Milestone(
            id=next(self._temp_ids), roadmap_id=self._roadmap_id, title=title,
            date=parse_date(on) or on, description=description, color=color,
        )
        return self._optimistic(
            "create milestone",
            lambda: self._milestones.append(temp),
            lambda: self._service.create_milestone(self._roadmap_id, title, on, description=description, color=color),
            lambda saved: self._swap(self._milestones, temp.id, saved),
        )

    def _refuse(self, label: str, error: str) -> ActionResult:
        log.warning("%s refused: %s", label, error)
        self.mutationFailed.emit(error)
        return ActionResult.fail(error)

    def update_milestone(self, milestone_id: int, **patch: Any) -> ActionResult:
        unknown = set(patch) - _MILESTONE_PATCHABLE
        if unknown:
            return self._refuse("update milestone", f"Unknown milestone fields: {sorted(unknown)}")

        def apply():
            for m in self._milestones:
                if m.id == milestone_id:
                    self._swap(self._milestones, milestone_id, replace(m, **patch))
                    break
        return self._optimistic(
            "update milestone",
            apply,
            lambda: self._service.update_milestone(milestone_id, **patch),
            lambda saved: self._swap(self._milestones, milestone_id, saved),
        )

    def delete_milestone(self, milestone_id: int) -> ActionResult:
        def apply():
            self._milestones = [m for m in self._milestones if m.id != milestone_id]
        return self._optimistic("delete milestone", apply, lambda: self._service.delete_milestone(milestone_id))

    def create_dependency(self, source_id: int, target_id: int, dependency_type: str = "finish-to-start") -> ActionResult:
        temp = Dependency(next(self._temp_ids), self._roadmap_id, source_id, target_id, dependency_type)
        return self._optimistic(
            "create dependency",
            lambda: self._dependencies.append(temp),
            lambda: self._service.create_dependency(self._roadmap_id, source_id, target_id, dependency_type),
            lambda saved: self._swap(self._dependencies, temp.id, saved),
        )

    def delete_dependency(self, dependency_id: int) -> ActionResult:
        def apply():
            self._dependencies = [d for d in self._dependencies if d.id != dependency_id]
        return self._optimistic("delete dependency", apply, lambda: self._service.delete_dependency(dependency_id))

    def update_post_status(self, post_id: int, status_id: int, order_index: Optional[int] = None) -> ActionResult:
        def apply():
            for p in self._posts:
                if p.id == post_id:
                    patch = {"status_id": status_id}
                    if order_index is not None:
                        patch["order_index"] = order_index
                    self._swap(self._posts, post_id, replace(p, **patch))
                    break
        return self._optimistic(
            "update post status",
            apply,
            lambda: self._service.update_post_status(post_id, status_id, order_index),
            lambda saved: self._swap(self._posts, post_id, saved),
        )

    # ---- export
    def export(self, fmt: str) -> str:
        if fmt not in EXPORT_FORMATS:
            raise ValueError(f"Unsupported export format: {fmt!r}")
        return render_export(
            fmt,
            apply_filters(self._posts, self._filters),
            self._milestones,
            self._dependencies,
            self._roadmap_name,
        )

    def suggested_export_name(self, fmt: str) -> str:
        return export_filename(self._roadmap_name, fmt, self._today())

    def export_to(self, path: Path | str, fmt: Optional[str] = None) -> Path:
        path = Path(path)
        fmt = fmt or path.suffix.lstrip(".").lower()
        written = write_export(path, self.export(fmt))
        log.info("Exported roadmap %s as %s to %s", self._roadmap_id, fmt, written)
        return written
