# tests/test_app_shell.py
# Smoke tests for the context wiring and the timeline window (offscreen Qt)

from __future__ import annotations

from roadmapz.app_context import DEFAULT_ROADMAP_TITLE, AppContext
from roadmapz.ui.timeline_canvas import painter_path
from roadmapz.ui.timeline_window import TimelineWindow
from roadmapz.utils.config import load_settings
from roadmapz.viewmodels.timeline_viewmodel import TimelineViewModel


def _context(tmp_path):
    settings = load_settings(tmp_path / "missing.json")
    settings["user"]["id"] = "carol"
    return AppContext.create(tmp_path / "app.db", settings)


def test_context_creates_default_roadmap(tmp_path):
    ctx = _context(tmp_path)
    try:
        rid = ctx.default_roadmap_id()
        assert ctx.service.get_roadmap(rid).data.title == DEFAULT_ROADMAP_TITLE
        assert ctx.default_roadmap_id() == rid
        assert ctx.service.users.get_user("carol")["email"] == "carol@localhost"
    finally:
        ctx.close()


def test_window_renders_and_reports_failures(qapp, tmp_path):
    ctx = _context(tmp_path)
    try:
        rid = ctx.default_roadmap_id()
        a = ctx.service.create_post(rid, "Design", start_date="2024-01-01", end_date="2024-01-08").data
        b = ctx.service.create_post(rid, "Build", start_date="2024-01-09").data
        ctx.service.create_dependency(rid, a.id, b.id)
        ctx.service.create_milestone(rid, "Beta", "2024-02-01")

        vm = TimelineViewModel(ctx.service, ctx.timeline_settings)
        win = TimelineWindow(vm, export_dir=tmp_path)
        vm.load(rid)
        win.resize(900, 500)
        win.show()
        qapp.processEvents()
        win.canvas.grab()

        assert "My Roadmap" in win.windowTitle()
        win.scale_combo.setCurrentIndex(win.scale_combo.findData("week"))
        assert vm.scale == "week"
        win.act_deps.setChecked(False)
        assert vm.layout.connectors == ()
        win.act_zoom_in.trigger()
        assert vm.viewport.cell_width == 180

        # duplicate dependency is refused by the service and rolled back
        vm.create_dependency(a.id, b.id)
        assert "already exists" in win.statusBar().currentMessage()
        assert len(vm.dependencies) == 1
        win.close()
    finally:
        ctx.close()


def test_painter_path_parses_connector_paths():
    qp = painter_path("M 150 120 C 150 170, 450 80, 450 130")
    assert qp.elementCount() == 4
    assert (qp.elementAt(0).x, qp.elementAt(0).y) == (150, 120)
    assert (qp.elementAt(3).x, qp.elementAt(3).y) == (450, 130)
