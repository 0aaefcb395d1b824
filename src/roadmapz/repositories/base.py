# Rev 0.1.0
from __future__ import annotations

import sqlite3
from typing import Any, Dict, List, Optional, Union


class SQLiteRepository:
    """
    Shared connection handling for the table repositories.
    Accepts a raw sqlite3.Connection or a wrapper exposing `.conn`
    (repositories/db.py Database).
    """

    def __init__(self, db_or_conn: Union[sqlite3.Connection, Any]):
        self._db_or_conn = db_or_conn

    # -------------------------
    # Connection handling
    # -------------------------
    def _conn(self) -> sqlite3.Connection:
        if isinstance(self._db_or_conn, sqlite3.Connection):
            return self._db_or_conn
        c = getattr(self._db_or_conn, "conn", None)
        if isinstance(c, sqlite3.Connection):
            return c
        raise RuntimeError(
            f"{type(self).__name__}: could not obtain sqlite3.Connection "
            "(expected .conn on wrapper, or a raw Connection)."
        )

    @staticmethod
    def _row_to_dict(cur: sqlite3.Cursor, row) -> Dict[str, Any]:
        if isinstance(row, sqlite3.Row):
            return dict(row)
        cols = [d[0] for d in cur.description]
        return {cols[i]: row[i] for i in range(len(cols))}

    def _fetch_all(self, sql: str, params: tuple = ()) -> List[Dict[str, Any]]:
        cur = self._conn().execute(sql, params)
        return [self._row_to_dict(cur, r) for r in cur.fetchall()]

    def _fetch_one(self, sql: str, params: tuple = ()) -> Optional[Dict[str, Any]]:
        cur = self._conn().execute(sql, params)
        row = cur.fetchone()
        return self._row_to_dict(cur, row) if row else None

    def _update_fields(self, table: str, row_id: int, fields: Dict[str, Any], *, touch: bool = True) -> bool:
        """UPDATE only the given columns; returns True when a row changed."""
        if not fields:
            return False
        sets = [f"{col} = ?" for col in fields]
        params = list(fields.values())
        if touch:
            sets.append("updated_at_utc = datetime('now')")
        params.append(row_id)
        cur = self._conn().execute(f"UPDATE {table} SET {', '.join(sets)} WHERE id = ?", params)
        return cur.rowcount > 0
