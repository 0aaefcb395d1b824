# Rev 0.1.0
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .base import SQLiteRepository

_MILESTONE_COLS = "id, roadmap_id, title, description, date, color, is_completed, created_by"
_EDITABLE = {"title", "description", "date", "color", "is_completed"}


class SQLiteMilestoneRepository(SQLiteRepository):

    def list_milestones(self, roadmap_id: int) -> List[Dict[str, Any]]:
        return self._fetch_all(
            f"SELECT {_MILESTONE_COLS} FROM milestones WHERE roadmap_id = ? ORDER BY date, id",
            (roadmap_id,),
        )

    def get_milestone(self, milestone_id: int) -> Optional[Dict[str, Any]]:
        return self._fetch_one(f"SELECT {_MILESTONE_COLS} FROM milestones WHERE id = ?", (milestone_id,))

    def create_milestone(
        self,
        *,
        roadmap_id: int,
        title: str,
        date: str,
        description: Optional[str] = None,
        color: Optional[str] = None,
        is_completed: bool = False,
        created_by: Optional[str] = None,
    ) -> int:
        cur = self._conn().execute(
            """
            INSERT INTO milestones(roadmap_id, title, description, date, color, is_completed,
                                   created_by, created_at_utc, updated_at_utc)
            VALUES (?, ?, ?, ?, ?, ?, ?, datetime('now'), datetime('now'))
            """,
            (roadmap_id, title, description, date, color, int(bool(is_completed)), created_by),
        )
        return int(cur.lastrowid)

    def update_milestone(self, milestone_id: int, **fields: Any) -> bool:
        unknown = set(fields) - _EDITABLE
        if unknown:
            raise ValueError(f"Unknown milestone fields: {sorted(unknown)}")
        if "is_completed" in fields:
            fields["is_completed"] = int(bool(fields["is_completed"]))
        return self._update_fields("milestones", milestone_id, fields)

    def delete_milestone(self, milestone_id: int) -> bool:
        cur = self._conn().execute("DELETE FROM milestones WHERE id = ?", (milestone_id,))
        return cur.rowcount > 0
