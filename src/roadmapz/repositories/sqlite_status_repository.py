# Rev 0.1.0
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple

from .base import SQLiteRepository

_EDITABLE = {"name", "color", "order_index"}


class SQLiteStatusRepository(SQLiteRepository):
    """
    Kanban columns of a roadmap.
    Expected schema: statuses(id, roadmap_id, name, color, order_index)
    """

    # --- public API ---------------------------------------------------------

    def list_statuses(self, roadmap_id: int) -> List[Dict[str, Any]]:
        return self._fetch_all(
            "SELECT id, roadmap_id, name, color, order_index FROM statuses "
            "WHERE roadmap_id = ? ORDER BY order_index, id;",
            (roadmap_id,),
        )

    def get_status(self, status_id: int) -> Optional[Dict[str, Any]]:
        return self._fetch_one(
            "SELECT id, roadmap_id, name, color, order_index FROM statuses WHERE id = ?;",
            (status_id,),
        )

    def next_order_index(self, roadmap_id: int) -> int:
        row = self._conn().execute(
            "SELECT MAX(order_index) FROM statuses WHERE roadmap_id = ?", (roadmap_id,)
        ).fetchone()
        return 0 if row is None or row[0] is None else int(row[0]) + 1

    def create_status(self, *, roadmap_id: int, name: str, color: str, order_index: Optional[int] = None) -> int:
        if order_index is None:
            order_index = self.next_order_index(roadmap_id)
        cur = self._conn().execute(
            "INSERT INTO statuses(roadmap_id, name, color, order_index) VALUES (?, ?, ?, ?)",
            (roadmap_id, name, color, order_index),
        )
        return int(cur.lastrowid)

    def update_status(self, status_id: int, **fields: Any) -> bool:
        unknown = set(fields) - _EDITABLE
        if unknown:
            raise ValueError(f"Unknown status fields: {sorted(unknown)}")
        return self._update_fields("statuses", status_id, fields, touch=False)

    def count_posts(self, status_id: int) -> int:
        row = self._conn().execute("SELECT COUNT(1) FROM posts WHERE status_id = ?", (status_id,)).fetchone()
        return int(row[0]) if row and row[0] is not None else 0

    def delete_status(self, status_id: int) -> bool:
        cur = self._conn().execute("DELETE FROM statuses WHERE id = ?", (status_id,))
        return cur.rowcount > 0

    def set_order(self, roadmap_id: int, order: Iterable[Tuple[int, int]]) -> None:
        """Apply (status_id, order_index) pairs atomically."""
        con = self._conn()
        con.execute("BEGIN;")
        try:
            for status_id, order_index in order:
                con.execute(
                    "UPDATE statuses SET order_index = ? WHERE id = ? AND roadmap_id = ?",
                    (order_index, status_id, roadmap_id),
                )
        except Exception:
            con.execute("ROLLBACK;")
            raise
        else:
            con.execute("COMMIT;")
