# Rev 0.1.0
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .base import SQLiteRepository

_DEP_COLS = "id, roadmap_id, source_id, target_id, dependency_type, created_by, created_at_utc"


class SQLiteDependencyRepository(SQLiteRepository):
    """
    Directed post-to-post links. The schema rejects self links and duplicate
    (source, target) pairs; callers validate first to return friendly errors.
    """

    def list_dependencies(self, roadmap_id: int) -> List[Dict[str, Any]]:
        return self._fetch_all(
            f"SELECT {_DEP_COLS} FROM dependencies WHERE roadmap_id = ? ORDER BY id",
            (roadmap_id,),
        )

    def get_dependency(self, dependency_id: int) -> Optional[Dict[str, Any]]:
        return self._fetch_one(f"SELECT {_DEP_COLS} FROM dependencies WHERE id = ?", (dependency_id,))

    def find_dependency(self, source_id: int, target_id: int) -> Optional[Dict[str, Any]]:
        return self._fetch_one(
            f"SELECT {_DEP_COLS} FROM dependencies WHERE source_id = ? AND target_id = ?",
            (source_id, target_id),
        )

    def create_dependency(
        self,
        *,
        roadmap_id: int,
        source_id: int,
        target_id: int,
        dependency_type: str,
        created_by: Optional[str] = None,
    ) -> int:
        cur = self._conn().execute(
            """
            INSERT INTO dependencies(roadmap_id, source_id, target_id, dependency_type,
                                     created_by, created_at_utc)
            VALUES (?, ?, ?, ?, ?, datetime('now'))
            """,
            (roadmap_id, source_id, target_id, dependency_type, created_by),
        )
        return int(cur.lastrowid)

    def update_dependency_type(self, dependency_id: int, dependency_type: str) -> bool:
        cur = self._conn().execute(
            "UPDATE dependencies SET dependency_type = ? WHERE id = ?", (dependency_type, dependency_id)
        )
        return cur.rowcount > 0

    def delete_dependency(self, dependency_id: int) -> bool:
        cur = self._conn().execute("DELETE FROM dependencies WHERE id = ?", (dependency_id,))
        return cur.rowcount > 0
