# Rev 0.1.0
# roadmapZ — Timeline window
# Toolbar: Scale | Zoom - | Zoom + | Today | Posts | Milestones | Dependencies | Group | Export

from __future__ import annotations
from dataclasses import replace
from pathlib import Path
from typing import Optional

from PySide6.QtCore import Qt
from PySide6.QtGui import QAction
from PySide6.QtWidgets import (
    QComboBox, QFileDialog, QLabel, QLineEdit, QMainWindow, QScrollArea, QToolBar
)

from ..models.types import TIME_SCALES
from ..timeline.export import EXPORT_FORMATS
from ..utils.logging_setup import get_logger
from ..viewmodels.timeline_viewmodel import TimelineViewModel
from .timeline_canvas import TimelineCanvas

log = get_logger("ui.timeline")

_GROUPINGS = (("No grouping", "none"), ("Status", "status"), ("Assignee", "assignee"), ("Priority", "priority"))
STATUS_TIMEOUT_MS = 5000


class TimelineWindow(QMainWindow):
    def __init__(self, vm: TimelineViewModel, *, export_dir: Optional[Path] = None, parent=None):
        super().__init__(parent)
        self._vm = vm
        self._export_dir = export_dir or Path.home()
        self.setWindowTitle("roadmapZ — Timeline")
        self.resize(1280, 760)

        self.canvas = TimelineCanvas(vm, self)
        scroll = QScrollArea(self)
        scroll.setWidgetResizable(True)
        scroll.setHorizontalScrollBarPolicy(Qt.ScrollBarAlwaysOff)
        scroll.setWidget(self.canvas)
        self.setCentralWidget(scroll)

        self._build_toolbar()
        self._summary = QLabel("")
        self.statusBar().addPermanentWidget(self._summary)

        vm.layoutChanged.connect(self._on_layout)
        vm.dataLoaded.connect(lambda _rid: self.setWindowTitle(f"roadmapZ — {vm.roadmap_name}"))
        vm.mutationFailed.connect(self.show_error)
        vm.viewport.zoomChanged.connect(self._on_zoom)

    # -------------------- toolbar --------------------

    def _build_toolbar(self) -> None:
        tb = QToolBar("Timeline", self)
        tb.setObjectName("TimelineToolbar")
        tb.setMovable(False)
        self.addToolBar(tb)

        self.scale_combo = QComboBox(tb)
        for s in TIME_SCALES:
            self.scale_combo.addItem(s.capitalize(), s)
        self.scale_combo.setCurrentIndex(TIME_SCALES.index(self._vm.scale))
        self.scale_combo.currentIndexChanged.connect(
            lambda i: self._vm.set_scale(self.scale_combo.itemData(i))
        )
        tb.addWidget(self.scale_combo)

        self.act_zoom_out = QAction("Zoom −", self)
        self.act_zoom_out.triggered.connect(self._vm.viewport.zoom_out)
        self.act_zoom_in = QAction("Zoom +", self)
        self.act_zoom_in.triggered.connect(self._vm.viewport.zoom_in)
        self.act_today = QAction("Today", self)
        self.act_today.triggered.connect(self._vm.scroll_to_today)
        for a in (self.act_zoom_out, self.act_zoom_in, self.act_today):
            tb.addAction(a)
        self._zoom_label = QLabel(f" {self._vm.viewport.cell_width}px ")
        tb.addWidget(self._zoom_label)
        tb.addSeparator()

        self.act_posts = self._toggle("Posts", self._vm.show_posts, self._vm.set_show_posts)
        self.act_milestones = self._toggle("Milestones", self._vm.show_milestones, self._vm.set_show_milestones)
        self.act_deps = self._toggle("Dependencies", self._vm.show_dependencies, self._vm.set_show_dependencies)
        for a in (self.act_posts, self.act_milestones, self.act_deps):
            tb.addAction(a)
        tb.addSeparator()

        self.group_combo = QComboBox(tb)
        for label, key in _GROUPINGS:
            self.group_combo.addItem(label, key)
        self.group_combo.currentIndexChanged.connect(
            lambda i: self._vm.set_group_by(self.group_combo.itemData(i))
        )
        tb.addWidget(self.group_combo)

        self.search = QLineEdit(tb)
        self.search.setPlaceholderText("Search posts…")
        self.search.setClearButtonEnabled(True)
        self.search.textChanged.connect(self._on_search)
        tb.addWidget(self.search)
        tb.addSeparator()

        for fmt in EXPORT_FORMATS:
            act = QAction(f"Export {fmt.upper()}", self)
            act.triggered.connect(lambda _checked=False, f=fmt: self.export_dialog(f))
            tb.addAction(act)

    def _toggle(self, text: str, on: bool, slot) -> QAction:
        act = QAction(text, self)
        act.setCheckable(True)
        act.setChecked(on)
        act.toggled.connect(slot)
        return act

    # -------------------- handlers --------------------

    def _on_search(self, text: str) -> None:
        self._vm.set_filters(replace(self._vm.filters, search_term=text.strip()))

    def _on_zoom(self, cell_width: int) -> None:
        self._zoom_label.setText(f" {cell_width}px ")

    def _on_layout(self, layout) -> None:
        rng = layout.date_range
        self._summary.setText(
            f"{len(layout.rows)} posts · {len(layout.milestones)} milestones · "
            f"{rng.start.isoformat()} → {rng.end.isoformat()}"
        )

    def show_error(self, message: str) -> None:
        self.statusBar().showMessage(message, STATUS_TIMEOUT_MS)

    def export_dialog(self, fmt: str) -> Optional[Path]:
        suggested = str(self._export_dir / self._vm.suggested_export_name(fmt))
        path, _ = QFileDialog.getSaveFileName(self, f"Export {fmt.upper()}", suggested, f"{fmt.upper()} (*.{fmt})")
        if not path:
            return None
        try:
            written = self._vm.export_to(path, fmt)
        except OSError as exc:
            log.error("Export to %s failed: %s", path, exc)
            self.show_error(f"Export failed: {exc}")
            return None
        self.statusBar().showMessage(f"Exported to {written}", STATUS_TIMEOUT_MS)
        return written
