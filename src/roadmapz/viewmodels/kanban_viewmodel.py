# Rev 0.1.0
from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from PySide6.QtCore import QObject, Signal

from ..models.entities import Post, Status
from ..services.roadmap_service import ActionResult
from ..utils.logging_setup import get_logger

log = get_logger("kanban")


@dataclass
class KanbanColumn:
    status: Status
    posts: List[Post] = field(default_factory=list)


class KanbanViewModel(QObject):
    """Board of posts by status. Cross-column moves persist; in-column reorder is local."""

    columnsChanged = Signal(object)     # List[KanbanColumn]
    moveFailed = Signal(str)

    def __init__(self, service, parent: Optional[QObject] = None):
        super().__init__(parent)
        self._service = service
        self._roadmap_id: Optional[int] = None
        self._statuses: List[Status] = []
        self._cards: Dict[int, List[Post]] = {}

    def load(self, roadmap_id: int) -> None:
        self._roadmap_id = roadmap_id
        st = self._service.list_statuses(roadmap_id)
        ps = self._service.list_posts(roadmap_id)
        if not st.success:
            log.warning("Could not load statuses for roadmap %s: %s", roadmap_id, st.error)
        if not ps.success:
            log.warning("Could not load posts for roadmap %s: %s", roadmap_id, ps.error)
        self._statuses = sorted(st.data or [], key=lambda s: (s.order_index, s.id))
        self._cards = self._build(self._statuses, ps.data or [])
        self.columnsChanged.emit(self.columns())

    @staticmethod
    def _build(statuses: List[Status], posts: List[Post]) -> Dict[int, List[Post]]:
        cards: Dict[int, List[Post]] = {s.id: [] for s in statuses}
        if not statuses:
            return cards
        first = statuses[0].id
        for p in sorted(posts, key=lambda p: (p.order_index, p.id)):
            cards[p.status_id if p.status_id in cards else first].append(p)
        return cards

    def columns(self) -> List[KanbanColumn]:
        return [KanbanColumn(s, list(self._cards.get(s.id, []))) for s in self._statuses]

    def column_of(self, post_id: int) -> Optional[int]:
        for sid, posts in self._cards.items():
            if any(p.id == post_id for p in posts):
                return sid
        return None

    def move_post(self, post_id: int, to_status_id: int, to_index: int) -> ActionResult:
        from_status_id = self.column_of(post_id)
        if from_status_id is None or to_status_id not in self._cards:
            return ActionResult.fail("Unknown post or column")

        snapshot = {sid: list(posts) for sid, posts in self._cards.items()}
        source = self._cards[from_status_id]
        post = next(p for p in source if p.id == post_id)
        source.remove(post)
        target = self._cards[to_status_id]
        index = max(0, min(to_index, len(target)))

        if from_status_id == to_status_id:
            target.insert(index, post)
            self.columnsChanged.emit(self.columns())
            return ActionResult.ok(post)

        target.insert(index, replace(post, status_id=to_status_id, order_index=index))
        self.columnsChanged.emit(self.columns())

        result = self._service.update_post_status(post_id, to_status_id, index)
        if not result.success:
            log.warning("Move of post %s rolled back: %s", post_id, result.error)
            self._cards = snapshot
            self.columnsChanged.emit(self.columns())
            self.moveFailed.emit(result.error or "Failed to move post")
            return result
        if isinstance(result.data, Post):
            target[index] = result.data
        return result
