# Rev 0.1.0

"""SQLite connection & migration runner (Rev 0.1.0)
- WAL mode, foreign_keys=ON, sqlite3.Row rows
- Applies SQL files in roadmapz/data/migrations in lexical order
- Tracks applied files in schema_migrations(filename TEXT PRIMARY KEY, applied_at UTC)
"""
from __future__ import annotations
import logging
import sqlite3
from contextlib import contextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterator

from ..utils.paths import DB_PATH, MIGRATIONS_DIR

log = logging.getLogger(__name__)


class Database:
    def __init__(self, path: Path | str = DB_PATH) -> None:
        self.path = Path(path)
        if str(self.path) != ":memory:":
            self.path.parent.mkdir(parents=True, exist_ok=True)
        self.conn = sqlite3.connect(self.path, isolation_level=None, check_same_thread=False)
        self.conn.row_factory = sqlite3.Row
        self.conn.execute("PRAGMA journal_mode=WAL;")
        self.conn.execute("PRAGMA foreign_keys=ON;")
        self.conn.execute(
            "CREATE TABLE IF NOT EXISTS schema_migrations (filename TEXT PRIMARY KEY, applied_at TEXT NOT NULL)"
        )
        log.info("SQLite open %s", self.path)

    def close(self) -> None:
        self.conn.close()

    def applied(self) -> set[str]:
        rows = self.conn.execute("SELECT filename FROM schema_migrations").fetchall()
        return {r[0] for r in rows}

    def apply_sql(self, sql: str) -> None:
        self.conn.executescript(sql)

    def run_migrations(self, migrations_dir: Path = MIGRATIONS_DIR) -> list[str]:
        applied = self.applied()
        to_apply = [p for p in sorted(migrations_dir.glob("*.sql")) if p.name not in applied]
        for p in to_apply:
            log.info("Applying migration %s", p.name)
            self.apply_sql(p.read_text(encoding="utf-8"))
            self.conn.execute(
                "INSERT INTO schema_migrations(filename, applied_at) VALUES(?, ?)",
                (p.name, datetime.now(timezone.utc).isoformat()),
            )
        return [p.name for p in to_apply]

    @contextmanager
    def tx(self) -> Iterator[sqlite3.Connection]:
        """Explicit transaction; the connection runs in autocommit otherwise."""
        self.conn.execute("BEGIN;")
        try:
            yield self.conn
        except Exception:
            self.conn.execute("ROLLBACK;")
            raise
        else:
            self.conn.execute("COMMIT;")
