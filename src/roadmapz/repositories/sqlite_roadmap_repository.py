# Rev 0.1.0
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .base import SQLiteRepository

_ROADMAP_COLS = "id, title, description, is_public, owner_id, created_at_utc, updated_at_utc"
_EDITABLE = {"title", "description", "is_public"}


class SQLiteRoadmapRepository(SQLiteRepository):
    """Roadmap CRUD + per-user listing (own roadmaps first, then public ones)."""

    def create_roadmap(
        self,
        *,
        title: str,
        owner_id: str,
        description: Optional[str] = None,
        is_public: bool = False,
    ) -> int:
        cur = self._conn().execute(
            """
            INSERT INTO roadmaps(title, description, is_public, owner_id,
                                 created_at_utc, updated_at_utc)
            VALUES (?, ?, ?, ?, datetime('now'), datetime('now'))
            """,
            (title, description, int(bool(is_public)), owner_id),
        )
        return int(cur.lastrowid)

    def get_roadmap(self, roadmap_id: int) -> Optional[Dict[str, Any]]:
        return self._fetch_one(f"SELECT {_ROADMAP_COLS} FROM roadmaps WHERE id = ?", (roadmap_id,))

    def list_roadmaps_for(self, user_id: str) -> List[Dict[str, Any]]:
        return self._fetch_all(
            f"""
            SELECT {_ROADMAP_COLS}
            FROM roadmaps
            WHERE owner_id = ? OR is_public = 1
            ORDER BY (owner_id = ?) DESC, updated_at_utc DESC, id DESC
            """,
            (user_id, user_id),
        )

    def update_roadmap(self, roadmap_id: int, **fields: Any) -> bool:
        unknown = set(fields) - _EDITABLE
        if unknown:
            raise ValueError(f"Unknown roadmap fields: {sorted(unknown)}")
        if "is_public" in fields:
            fields["is_public"] = int(bool(fields["is_public"]))
        return self._update_fields("roadmaps", roadmap_id, fields)

    def delete_roadmap(self, roadmap_id: int) -> bool:
        cur = self._conn().execute("DELETE FROM roadmaps WHERE id = ?", (roadmap_id,))
        return cur.rowcount > 0
