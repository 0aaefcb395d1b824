# tests/test_timeline_viewmodel.py
from __future__ import annotations

import json
from dataclasses import replace
from datetime import date

import pytest

from conftest import make_dependency, make_milestone, make_post
from roadmapz.models.entities import Roadmap, Status
from roadmapz.services.roadmap_service import ActionResult
from roadmapz.timeline.grouping import FilterState
from roadmapz.utils.config import TimelineSettings
from roadmapz.viewmodels.timeline_viewmodel import TimelineViewModel

TODAY = date(2024, 1, 15)


class _StubService:
    """In-memory stand-in; `fail` names calls that should return an error."""

    def __init__(self):
        self.fail: set[str] = set()
        self.calls: list[str] = []
        self.posts = [
            make_post(1, "2024-01-01", "2024-01-08", title="Design", status_id=10, priority="high"),
            make_post(2, "2024-01-09", "2024-01-20", title="Build", status_id=11, priority="low"),
        ]
        self.milestones = [make_milestone(5, "2024-02-01", title="Beta")]
        self.dependencies = [make_dependency(7, 1, 2)]
        self.statuses = [Status(10, 1, "To Do"), Status(11, 1, "Done")]
        self._next_id = 100

    def _result(self, name, data):
        self.calls.append(name)
        if name in self.fail:
            return ActionResult.fail(f"{name} exploded")
        return ActionResult.ok(data)

    def get_roadmap(self, rid):
        return self._result("get_roadmap", Roadmap(rid, "Launch Plan", "alice"))

    def list_posts(self, rid):
        return self._result("list_posts", list(self.posts))

    def list_milestones(self, rid):
        return self._result("list_milestones", list(self.milestones))

    def list_dependencies(self, rid):
        return self._result("list_dependencies", list(self.dependencies))

    def list_statuses(self, rid):
        return self._result("list_statuses", list(self.statuses))

    def list_users(self):
        return self._result("list_users", [])

    def create_milestone(self, rid, title, on, description=None, color=None):
        self._next_id += 1
        return self._result("create_milestone", make_milestone(self._next_id, str(on), title=title))

    def update_milestone(self, mid, **patch):
        return self._result("update_milestone", replace(self.milestones[0], **patch))

    def delete_milestone(self, mid):
        return self._result("delete_milestone", True)

    def create_dependency(self, rid, source_id, target_id, dependency_type):
        self._next_id += 1
        return self._result("create_dependency", make_dependency(self._next_id, source_id, target_id, dependency_type))

    def delete_dependency(self, did):
        return self._result("delete_dependency", True)

    def update_post_status(self, pid, status_id, order_index=None):
        return self._result("update_post_status", replace(self.posts[0], status_id=status_id))


@pytest.fixture()
def stub():
    return _StubService()


@pytest.fixture()
def vm(qapp, stub):
    model = TimelineViewModel(stub, TimelineSettings(), today=lambda: TODAY)
    model.viewport.set_container_width(1000)
    model.load(1)
    return model


def test_load_builds_layout(vm):
    layout = vm.layout
    assert vm.roadmap_name == "Launch Plan"
    assert set(layout.items) == {1, 2}
    assert set(layout.milestones) == {5}
    assert [c.dependency_id for c in layout.connectors] == [7]
    assert vm.viewport.state.container_width == 1000


def test_failed_fetch_degrades_to_empty(qapp, stub, caplog):
    stub.fail = {"list_posts", "list_dependencies"}
    model = TimelineViewModel(stub, today=lambda: TODAY)
    model.load(1)
    assert model.posts == []
    assert model.layout.items == {}
    assert model.layout.connectors == ()
    assert set(model.layout.milestones) == {5}
    assert "Could not load posts" in caplog.text


def test_layout_signal_on_every_change(vm):
    seen = []
    vm.layoutChanged.connect(seen.append)
    vm.set_scale("week")
    vm.set_show_dependencies(False)
    vm.viewport.zoom_in()
    assert len(seen) == 3
    assert seen[0].grid.scale == "week"
    assert seen[1].connectors == ()
    assert seen[2].metrics.cell_width == 180


def test_unknown_scale_is_rejected(vm):
    with pytest.raises(ValueError):
        vm.set_scale("fortnight")


def test_hiding_posts_keeps_milestones(vm):
    vm.set_show_posts(False)
    assert vm.layout.items == {}
    assert vm.layout.milestones[5].height == 200


def test_filters_and_grouping_drive_rows(vm):
    vm.set_filters(FilterState(priorities=frozenset({"low"})))
    assert [p.id for p in vm.layout.rows] == [2]
    vm.clear_filters()
    vm.set_group_by("priority")
    assert [p.id for p in vm.layout.rows] == [1, 2]
    vm.toggle_group("high")
    assert [p.id for p in vm.layout.rows] == [2]
    # row 0 again once the first group is collapsed
    assert vm.layout.items[2].top == 60


def test_create_milestone_replaces_optimistic_record(vm, stub):
    res = vm.create_milestone("GA", date(2024, 3, 1))
    assert res.success
    ids = [m.id for m in vm.milestones]
    assert ids == [5, 101]
    assert 101 in vm.layout.milestones


def test_failed_create_rolls_back_and_notifies(vm, stub):
    stub.fail = {"create_milestone"}
    errors, layouts = [], []
    vm.mutationFailed.connect(errors.append)
    vm.layoutChanged.connect(layouts.append)
    before = vm.milestones
    res = vm.create_milestone("GA", date(2024, 3, 1))
    assert not res.success
    assert errors == ["create_milestone exploded"]
    assert vm.milestones == before
    # optimistic render, then the rollback render
    assert len(layouts[0].milestones) == 2
    assert len(layouts[-1].milestones) == 1


def test_failed_delete_restores_dependency(vm, stub):
    stub.fail = {"delete_dependency"}
    vm.delete_dependency(7)
    assert [d.id for d in vm.dependencies] == [7]
    assert [c.dependency_id for c in vm.layout.connectors] == [7]


def test_failed_milestone_update_restores_exact_value(vm, stub):
    stub.fail = {"update_milestone"}
    vm.update_milestone(5, title="Renamed")
    assert vm.milestones[0].title == "Beta"


def test_milestone_update_with_unknown_field_fails_cleanly(vm, stub):
    errors = []
    vm.mutationFailed.connect(errors.append)
    res = vm.update_milestone(5, bogus=1)
    assert not res.success
    assert errors == ["Unknown milestone fields: ['bogus']"]
    assert vm.milestones[0].title == "Beta"
    assert "update_milestone" not in stub.calls


def test_delete_and_create_dependency(vm):
    assert vm.delete_dependency(7).success
    assert vm.layout.connectors == ()
    assert vm.create_dependency(2, 1, "start-to-start").success
    assert vm.dependencies[0].dependency_type == "start-to-start"
    assert vm.dependencies[0].id > 0


def test_update_post_status_rollback(vm, stub):
    stub.fail = {"update_post_status"}
    vm.update_post_status(1, 11, 0)
    assert vm.posts[0].status_id == 10


def test_mutation_without_roadmap_fails(qapp, stub):
    model = TimelineViewModel(stub, today=lambda: TODAY)
    assert not model.delete_milestone(5).success
    assert stub.calls == []


def test_visible_items_follow_viewport(vm):
    # window [0, 1500]: Design starts at 1050, Build at 2250
    assert vm.visible_item_ids() == [1]
    vm.viewport.scroll_to(1500)
    assert set(vm.visible_item_ids()) == {1, 2}
    vm.viewport.scroll_to(vm.layout.width)
    assert vm.visible_item_ids() == []


def test_reveal_first_item_scrolls_before_it(vm):
    vm.viewport.scroll_to(5000)
    vm.reveal_first_item()
    # earliest bar starts 7 days in; reveal leaves two cells of margin
    assert vm.viewport.scroll_position == 7 * 150 - 2 * 150


def test_export_csv_and_json(vm, tmp_path):
    csv_text = vm.export("csv")
    assert csv_text.splitlines()[1].startswith('Post,1,"Design"')
    data = json.loads(vm.export("json"))
    assert data["roadmapName"] == "Launch Plan"
    assert vm.suggested_export_name("csv") == "launch-plan-timeline-2024-01-15.csv"
    written = vm.export_to(tmp_path / "plan.json")
    assert json.loads(written.read_text(encoding="utf-8"))["dependencies"][0]["id"] == 7
    with pytest.raises(ValueError):
        vm.export("pdf")
