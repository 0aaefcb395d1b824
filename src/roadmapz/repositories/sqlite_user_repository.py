# Rev 0.1.0
from __future__ import annotations

from typing import Any, Dict, List, Optional

from .base import SQLiteRepository


class SQLiteUserRepository(SQLiteRepository):
    """Local user directory used for assignee names; identity comes from settings."""

    def upsert_user(self, *, user_id: str, email: str, display_name: Optional[str] = None) -> None:
        self._conn().execute(
            """
            INSERT INTO users(id, email, display_name) VALUES (?, ?, ?)
            ON CONFLICT(id) DO UPDATE SET email = excluded.email,
                                          display_name = COALESCE(excluded.display_name, users.display_name)
            """,
            (user_id, email, display_name),
        )

    def get_user(self, user_id: str) -> Optional[Dict[str, Any]]:
        return self._fetch_one("SELECT id, email, display_name FROM users WHERE id = ?", (user_id,))

    def list_users(self) -> List[Dict[str, Any]]:
        return self._fetch_all("SELECT id, email, display_name FROM users ORDER BY email")
