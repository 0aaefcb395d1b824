# Rev 0.1.0

"""Pytest fixtures for roadmapZ (Rev 0.1.0)"""
from __future__ import annotations
import os
from datetime import date
from pathlib import Path

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from roadmapz.models.entities import Dependency, Milestone, Post
from roadmapz.repositories.db import Database
from roadmapz.repositories.sqlite_user_repository import SQLiteUserRepository
from roadmapz.services.roadmap_service import RoadmapService

OWNER = "alice"
OTHER = "bob"


@pytest.fixture()
def db(tmp_path: Path):
    database = Database(path=tmp_path / "test.db")
    try:
        database.run_migrations()
        users = SQLiteUserRepository(database)
        users.upsert_user(user_id=OWNER, email="alice@example.com", display_name="Alice")
        users.upsert_user(user_id=OTHER, email="bob@example.com")
        yield database
    finally:
        database.close()


@pytest.fixture()
def service(db) -> RoadmapService:
    return RoadmapService(db, OWNER)


@pytest.fixture()
def roadmap_id(service) -> int:
    return service.create_roadmap("Launch plan").data.id


@pytest.fixture(scope="session")
def qapp():
    from PySide6.QtWidgets import QApplication
    app = QApplication.instance() or QApplication([])
    yield app


@pytest.fixture()
def fixed_today() -> date:
    return date(2024, 1, 15)


def make_post(pid: int, start=None, end=None, **kw) -> Post:
    return Post(id=pid, roadmap_id=1, title=kw.pop("title", f"Post {pid}"), start_date=start, end_date=end, **kw)


def make_milestone(mid: int, on, **kw) -> Milestone:
    return Milestone(id=mid, roadmap_id=1, title=kw.pop("title", f"Milestone {mid}"), date=on, **kw)


def make_dependency(did: int, source: int, target: int, kind: str = "finish-to-start") -> Dependency:
    return Dependency(id=did, roadmap_id=1, source_id=source, target_id=target, dependency_type=kind)
