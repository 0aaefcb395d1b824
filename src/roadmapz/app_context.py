# roadmapZ application context
# Rev 0.1.0

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from .repositories.db import Database
from .repositories.sqlite_user_repository import SQLiteUserRepository
from .services.roadmap_service import RoadmapService
from .utils.config import TimelineSettings, current_user_id, load_settings
from .utils.logging_setup import get_logger
from .utils.paths import DB_PATH

DEFAULT_ROADMAP_TITLE = "My Roadmap"


@dataclass
class AppContext:
    """Central container for shared app resources."""
    db: Database
    settings: Dict[str, Any]
    user_id: str
    service: RoadmapService

    @property
    def timeline_settings(self) -> TimelineSettings:
        return TimelineSettings.from_settings(self.settings)

    @classmethod
    def create(cls, db_path: Optional[Path] = None, settings: Optional[Dict[str, Any]] = None) -> "AppContext":
        """Open + migrate the DB, register the local user and build the service."""
        log = get_logger("AppContext")
        settings = settings if settings is not None else load_settings()
        db = Database(db_path or DB_PATH)
        applied = db.run_migrations()
        if applied:
            log.info("Applied migrations: %s", ", ".join(applied))

        user_id = current_user_id(settings)
        email = (settings.get("user") or {}).get("email") or f"{user_id}@localhost"
        SQLiteUserRepository(db).upsert_user(user_id=user_id, email=email)

        service = RoadmapService(db, user_id)
        log.info("AppContext ready; DB=%s user=%s", db.path, user_id)
        return cls(db=db, settings=settings, user_id=user_id, service=service)

    def default_roadmap_id(self) -> int:
        """First roadmap visible to the user; creates one when there is none."""
        listed = self.service.list_roadmaps()
        if listed.success and listed.data:
            return listed.data[0].id
        created = self.service.create_roadmap(DEFAULT_ROADMAP_TITLE)
        if not created.success:
            raise RuntimeError(f"Could not create a roadmap: {created.error}")
        return created.data.id

    def close(self) -> None:
        self.db.close()
