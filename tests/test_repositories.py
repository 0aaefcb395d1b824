# tests/test_repositories.py
# Integration tests for the SQLite repositories against the shipped migrations

from __future__ import annotations

import sqlite3

import pytest

from roadmapz.repositories.sqlite_comment_repository import SQLiteCommentRepository
from roadmapz.repositories.sqlite_dependency_repository import SQLiteDependencyRepository
from roadmapz.repositories.sqlite_milestone_repository import SQLiteMilestoneRepository
from roadmapz.repositories.sqlite_post_repository import SQLitePostRepository
from roadmapz.repositories.sqlite_roadmap_repository import SQLiteRoadmapRepository
from roadmapz.repositories.sqlite_status_repository import SQLiteStatusRepository
from roadmapz.repositories.sqlite_user_repository import SQLiteUserRepository


@pytest.fixture()
def rid(db) -> int:
    return SQLiteRoadmapRepository(db).create_roadmap(title="Plan", owner_id="alice")


def test_migrations_are_recorded_once(db):
    assert {"0001_init.sql", "0002_comments.sql"} <= db.applied()
    assert db.run_migrations() == []


def test_roadmap_listing_puts_own_first(db):
    repo = SQLiteRoadmapRepository(db)
    public = repo.create_roadmap(title="Open", owner_id="bob", is_public=True)
    private = repo.create_roadmap(title="Secret", owner_id="bob")
    mine = repo.create_roadmap(title="Mine", owner_id="alice")
    ids = [r["id"] for r in repo.list_roadmaps_for("alice")]
    assert ids == [mine, public]
    assert private not in ids


def test_roadmap_update_rejects_unknown_fields(db, rid):
    repo = SQLiteRoadmapRepository(db)
    assert repo.update_roadmap(rid, title="Renamed", is_public=True)
    row = repo.get_roadmap(rid)
    assert row["title"] == "Renamed" and row["is_public"] == 1
    with pytest.raises(ValueError):
        repo.update_roadmap(rid, owner_id="mallory")


def test_status_order_and_counts(db, rid):
    repo = SQLiteStatusRepository(db)
    a = repo.create_status(roadmap_id=rid, name="A", color="#111111")
    b = repo.create_status(roadmap_id=rid, name="B", color="#222222")
    assert [s["order_index"] for s in repo.list_statuses(rid)] == [0, 1]
    repo.set_order(rid, [(a, 1), (b, 0)])
    assert [s["name"] for s in repo.list_statuses(rid)] == ["B", "A"]
    SQLitePostRepository(db).create_post(roadmap_id=rid, title="x", status_id=a)
    assert repo.count_posts(a) == 1
    assert repo.count_posts(b) == 0


def test_post_roundtrip_with_tags(db, rid):
    repo = SQLitePostRepository(db)
    pid = repo.create_post(roadmap_id=rid, title="Build", start_date="2024-01-01", priority="high")
    assert repo.set_post_tags(pid, ["ui", " backend ", "ui", ""]) == ["backend", "ui"]
    post = repo.get_post(pid)
    assert post["tags"] == ["backend", "ui"]
    assert [t["name"] for t in repo.list_tags(rid)] == ["backend", "ui"]
    repo.set_post_tags(pid, ["ui"])
    assert repo.list_posts(rid)[0]["tags"] == ["ui"]


def test_post_order_index_is_appended(db, rid):
    repo = SQLitePostRepository(db)
    first = repo.create_post(roadmap_id=rid, title="one")
    second = repo.create_post(roadmap_id=rid, title="two")
    assert [p["id"] for p in repo.list_posts(rid)] == [first, second]
    assert repo.get_post(second)["order_index"] == 1


def test_post_schema_checks(db, rid):
    repo = SQLitePostRepository(db)
    with pytest.raises(sqlite3.IntegrityError):
        repo.create_post(roadmap_id=rid, title="bad", priority="critical")
    with pytest.raises(sqlite3.IntegrityError):
        repo.create_post(roadmap_id=rid, title="bad", progress=101)
    with pytest.raises(ValueError):
        repo.update_post_fields(1, roadmap_id=99)


def test_set_post_status(db, rid):
    statuses = SQLiteStatusRepository(db)
    sid = statuses.create_status(roadmap_id=rid, name="Done", color="#48bb78")
    posts = SQLitePostRepository(db)
    pid = posts.create_post(roadmap_id=rid, title="x")
    assert posts.set_post_status(pid, sid, 4)
    row = posts.get_post(pid)
    assert (row["status_id"], row["order_index"]) == (sid, 4)


def test_milestone_crud(db, rid):
    repo = SQLiteMilestoneRepository(db)
    mid = repo.create_milestone(roadmap_id=rid, title="Beta", date="2024-02-01", created_by="alice")
    assert repo.update_milestone(mid, is_completed=True, title="Beta 1")
    row = repo.get_milestone(mid)
    assert (row["title"], row["is_completed"]) == ("Beta 1", 1)
    assert repo.delete_milestone(mid)
    assert repo.list_milestones(rid) == []


def test_dependency_constraints(db, rid):
    posts = SQLitePostRepository(db)
    a = posts.create_post(roadmap_id=rid, title="a")
    b = posts.create_post(roadmap_id=rid, title="b")
    deps = SQLiteDependencyRepository(db)
    did = deps.create_dependency(roadmap_id=rid, source_id=a, target_id=b, dependency_type="finish-to-start")
    assert deps.find_dependency(a, b)["id"] == did
    assert deps.find_dependency(b, a) is None
    with pytest.raises(sqlite3.IntegrityError):
        deps.create_dependency(roadmap_id=rid, source_id=a, target_id=b, dependency_type="start-to-start")
    with pytest.raises(sqlite3.IntegrityError):
        deps.create_dependency(roadmap_id=rid, source_id=a, target_id=a, dependency_type="finish-to-start")
    assert deps.update_dependency_type(did, "start-to-finish")
    assert deps.get_dependency(did)["dependency_type"] == "start-to-finish"


def test_deleting_post_cascades_dependencies(db, rid):
    posts = SQLitePostRepository(db)
    a = posts.create_post(roadmap_id=rid, title="a")
    b = posts.create_post(roadmap_id=rid, title="b")
    deps = SQLiteDependencyRepository(db)
    deps.create_dependency(roadmap_id=rid, source_id=a, target_id=b, dependency_type="finish-to-start")
    posts.delete_post(a)
    assert deps.list_dependencies(rid) == []


def test_user_upsert_keeps_display_name(db):
    users = SQLiteUserRepository(db)
    users.upsert_user(user_id="alice", email="new@example.com")
    row = users.get_user("alice")
    assert row["email"] == "new@example.com"
    assert row["display_name"] == "Alice"


def test_post_tags_join_an_open_transaction(db, rid):
    repo = SQLitePostRepository(db)
    pid = repo.create_post(roadmap_id=rid, title="Build")
    with pytest.raises(RuntimeError):
        with db.tx():
            repo.set_post_tags(pid, ["api"])
            raise RuntimeError("abort")
    assert repo.tags_for_post(pid) == []
    assert repo.list_tags(rid) == []


def test_tag_rename_and_delete(db, rid):
    repo = SQLitePostRepository(db)
    pid = repo.create_post(roadmap_id=rid, title="Build")
    repo.set_post_tags(pid, ["api", "ui"])
    api = repo.find_tag(rid, "api")
    assert repo.update_tag(api["id"], name="backend", color="#2b6cb0")
    assert repo.get_tag(api["id"])["color"] == "#2b6cb0"
    assert repo.tags_for_post(pid) == ["backend", "ui"]
    with pytest.raises(ValueError):
        repo.update_tag(api["id"], roadmap_id=99)
    assert repo.delete_tag(api["id"])
    assert repo.tags_for_post(pid) == ["ui"]
    assert repo.find_tag(rid, "backend") is None


def test_comment_crud(db, rid):
    pid = SQLitePostRepository(db).create_post(roadmap_id=rid, title="Build")
    repo = SQLiteCommentRepository(db)
    first = repo.create_comment(post_id=pid, user_id="alice", content="first")
    reply = repo.create_comment(post_id=pid, user_id="bob", content="second", parent_id=first)
    assert [c["id"] for c in repo.list_comments(pid)] == [first, reply]
    assert repo.update_content(first, "first, edited")
    row = repo.get_comment(first)
    assert (row["content"], row["is_edited"]) == ("first, edited", 1)
    assert repo.delete_comment(first)
    assert repo.get_comment(reply)["parent_id"] is None
