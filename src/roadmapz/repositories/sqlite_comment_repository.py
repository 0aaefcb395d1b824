# Rev 0.1.1
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .base import SQLiteRepository

_COMMENT_COLS = "id, post_id, user_id, content, parent_id, is_edited, created_at_utc, updated_at_utc"


class SQLiteCommentRepository(SQLiteRepository):
    """Comments on posts, oldest first. Edits flag the row with is_edited."""

    def list_comments(self, post_id: int) -> List[Dict[str, Any]]:
        return self._fetch_all(
            f"SELECT {_COMMENT_COLS} FROM comments WHERE post_id = ? ORDER BY created_at_utc, id",
            (post_id,),
        )

    def get_comment(self, comment_id: int) -> Optional[Dict[str, Any]]:
        return self._fetch_one(f"SELECT {_COMMENT_COLS} FROM comments WHERE id = ?", (comment_id,))

    def create_comment(self, *, post_id: int, user_id: str, content: str, parent_id: Optional[int] = None) -> int:
        cur = self._conn().execute(
            """
            INSERT INTO comments(post_id, user_id, content, parent_id, created_at_utc, updated_at_utc)
            VALUES (?, ?, ?, ?, datetime('now'), datetime('now'))
            """,
            (post_id, user_id, content, parent_id),
        )
        return int(cur.lastrowid)

    def update_content(self, comment_id: int, content: str) -> bool:
        return self._update_fields("comments", comment_id, {"content": content, "is_edited": 1})

    def delete_comment(self, comment_id: int) -> bool:
        cur = self._conn().execute("DELETE FROM comments WHERE id = ?", (comment_id,))
        return cur.rowcount > 0
