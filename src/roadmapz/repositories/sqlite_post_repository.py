# Rev 0.1.0
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from .base import SQLiteRepository

_POST_COLS = (
    "id, roadmap_id, title, description, status_id, assignee_id, priority, "
    "start_date, end_date, progress, order_index, created_at_utc, updated_at_utc"
)
_EDITABLE = {
    "title", "description", "status_id", "assignee_id", "priority",
    "start_date", "end_date", "progress", "order_index",
}


class SQLitePostRepository(SQLiteRepository):
    """
    Post (timeline item) CRUD, status moves and tag assignment.
    Rows come back as dicts with a `tags` list of tag names.
    """

    # -------------------------
    # CRUD
    # -------------------------
    def create_post(
        self,
        *,
        roadmap_id: int,
        title: str,
        description: Optional[str] = None,
        status_id: Optional[int] = None,
        assignee_id: Optional[str] = None,
        priority: Optional[str] = None,
        start_date: Optional[str] = None,
        end_date: Optional[str] = None,
        progress: int = 0,
        order_index: Optional[int] = None,
    ) -> int:
        con = self._conn()
        if order_index is None:
            row = con.execute(
                "SELECT COALESCE(MAX(order_index), -1) + 1 FROM posts WHERE roadmap_id = ?", (roadmap_id,)
            ).fetchone()
            order_index = int(row[0])
        cur = con.execute(
            """
            INSERT INTO posts(roadmap_id, title, description, status_id, assignee_id, priority,
                              start_date, end_date, progress, order_index,
                              created_at_utc, updated_at_utc)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, datetime('now'), datetime('now'))
            """,
            (roadmap_id, title, description, status_id, assignee_id, priority,
             start_date, end_date, progress, order_index),
        )
        return int(cur.lastrowid)

    def get_post(self, post_id: int) -> Optional[Dict[str, Any]]:
        rec = self._fetch_one(f"SELECT {_POST_COLS} FROM posts WHERE id = ?", (post_id,))
        if rec is None:
            return None
        rec["tags"] = self.tags_for_post(post_id)
        return rec

    def list_posts(self, roadmap_id: int) -> List[Dict[str, Any]]:
        rows = self._fetch_all(
            f"SELECT {_POST_COLS} FROM posts WHERE roadmap_id = ? ORDER BY order_index, id",
            (roadmap_id,),
        )
        tags = self._tags_by_post(roadmap_id)
        for r in rows:
            r["tags"] = tags.get(r["id"], [])
        return rows

    def count_in_roadmap(self, roadmap_id: int, post_ids: Iterable[int]) -> int:
        ids = list(post_ids)
        if not ids:
            return 0
        marks = ", ".join("?" * len(ids))
        row = self._conn().execute(
            f"SELECT COUNT(1) FROM posts WHERE roadmap_id = ? AND id IN ({marks})",
            (roadmap_id, *ids),
        ).fetchone()
        return int(row[0])

    def update_post_fields(self, post_id: int, **fields: Any) -> bool:
        unknown = set(fields) - _EDITABLE
        if unknown:
            raise ValueError(f"Unknown post fields: {sorted(unknown)}")
        return self._update_fields("posts", post_id, fields)

    def set_post_status(self, post_id: int, status_id: int, order_index: Optional[int] = None) -> bool:
        fields: Dict[str, Any] = {"status_id": status_id}
        if order_index is not None:
            fields["order_index"] = order_index
        return self._update_fields("posts", post_id, fields)

    def delete_post(self, post_id: int) -> bool:
        cur = self._conn().execute("DELETE FROM posts WHERE id = ?", (post_id,))
        return cur.rowcount > 0

    # -------------------------
    # Tags
    # -------------------------
    def list_tags(self, roadmap_id: int) -> List[Dict[str, Any]]:
        return self._fetch_all(
            "SELECT id, roadmap_id, name, color FROM tags WHERE roadmap_id = ? ORDER BY name",
            (roadmap_id,),
        )

    def create_tag(self, *, roadmap_id: int, name: str, color: Optional[str] = None) -> int:
        cur = self._conn().execute(
            "INSERT INTO tags(roadmap_id, name, color) VALUES (?, ?, ?)", (roadmap_id, name, color)
        )
        return int(cur.lastrowid)

    def get_tag(self, tag_id: int) -> Optional[Dict[str, Any]]:
        return self._fetch_one("SELECT id, roadmap_id, name, color FROM tags WHERE id = ?", (tag_id,))

    def find_tag(self, roadmap_id: int, name: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one(
            "SELECT id, roadmap_id, name, color FROM tags WHERE roadmap_id = ? AND name = ?",
            (roadmap_id, name),
        )

    def update_tag(self, tag_id: int, **fields: Any) -> bool:
        unknown = set(fields) - {"name", "color"}
        if unknown:
            raise ValueError(f"Unknown tag fields: {sorted(unknown)}")
        return self._update_fields("tags", tag_id, fields, touch=False)

    def delete_tag(self, tag_id: int) -> bool:
        # post_tags rows go with it (ON DELETE CASCADE)
        cur = self._conn().execute("DELETE FROM tags WHERE id = ?", (tag_id,))
        return cur.rowcount > 0

    def tags_for_post(self, post_id: int) -> List[str]:
        rows = self._conn().execute(
            "SELECT t.name FROM post_tags pt JOIN tags t ON t.id = pt.tag_id "
            "WHERE pt.post_id = ? ORDER BY t.name",
            (post_id,),
        ).fetchall()
        return [r[0] for r in rows]

    def set_post_tags(self, post_id: int, names: Iterable[str]) -> List[str]:
        """Replace the post's tags; unknown names are created in the post's roadmap."""
        con = self._conn()
        row = con.execute("SELECT roadmap_id FROM posts WHERE id = ?", (post_id,)).fetchone()
        if row is None:
            return []
        roadmap_id = row[0]
        wanted = sorted({n.strip() for n in names if n and n.strip()})
        # joins the caller's transaction when one is open
        own_tx = not con.in_transaction
        if own_tx:
            con.execute("BEGIN;")
        try:
            con.execute("DELETE FROM post_tags WHERE post_id = ?", (post_id,))
            for name in wanted:
                con.execute("INSERT OR IGNORE INTO tags(roadmap_id, name) VALUES (?, ?)", (roadmap_id, name))
                con.execute(
                    "INSERT INTO post_tags(post_id, tag_id) "
                    "SELECT ?, id FROM tags WHERE roadmap_id = ? AND name = ?",
                    (post_id, roadmap_id, name),
                )
        except Exception:
            if own_tx:
                con.execute("ROLLBACK;")
            raise
        else:
            if own_tx:
                con.execute("COMMIT;")
        return wanted

    # -------------------------
    # internals
    # -------------------------
    def _tags_by_post(self, roadmap_id: int) -> Dict[int, List[str]]:
        rows = self._conn().execute(
            """
            SELECT pt.post_id, t.name
            FROM post_tags pt
            JOIN tags t ON t.id = pt.tag_id
            WHERE t.roadmap_id = ?
            ORDER BY pt.post_id, t.name
            """,
            (roadmap_id,),
        ).fetchall()
        out: Dict[int, List[str]] = {}
        for post_id, name in rows:
            out.setdefault(post_id, []).append(name)
        return out
