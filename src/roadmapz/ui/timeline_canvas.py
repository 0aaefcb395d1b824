# Rev 0.1.0
# roadmapZ — timeline canvas: header, grid, bars, milestones, dependency arrows

from __future__ import annotations
from typing import Optional

from PySide6.QtCore import QPointF, QRectF, Qt
from PySide6.QtGui import QColor, QFont, QPainter, QPainterPath, QPen
from PySide6.QtWidgets import QSizePolicy, QWidget

from ..timeline.connectors import Connector
from ..timeline.grouping import PRIORITY_COLORS
from ..timeline.layout import TimelineLayout
from ..timeline.positions import date_to_x
from ..viewmodels.timeline_viewmodel import TimelineViewModel

_BG       = "#ffffff"
_HEADER   = "#f8fafc"
_GRID     = "#e2e8f0"
_TEXT     = "#1e293b"
_MUTED    = "#64748b"
_BAR      = "#64748b"
_TODAY    = "#ef4444"
_MILESTONE = "#8b5cf6"


def painter_path(path: str) -> QPainterPath:
    """QPainterPath from 'M sx sy C c1x c1y, c2x c2y, tx ty'."""
    tokens = path.replace(",", " ").split()
    nums = [float(t) for t in tokens if t not in ("M", "C")]
    qp = QPainterPath(QPointF(nums[0], nums[1]))
    qp.cubicTo(QPointF(nums[2], nums[3]), QPointF(nums[4], nums[5]), QPointF(nums[6], nums[7]))
    return qp


class TimelineCanvas(QWidget):
    def __init__(self, vm: TimelineViewModel, parent=None):
        super().__init__(parent)
        self._vm = vm
        self._layout: Optional[TimelineLayout] = vm.layout
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)
        self.setMouseTracking(False)
        self.setMinimumHeight(240)

        vm.layoutChanged.connect(self._on_layout)
        vm.viewport.viewportChanged.connect(lambda _state: self.update())

    def _on_layout(self, layout: TimelineLayout) -> None:
        self._layout = layout
        self.setMinimumHeight(int(layout.height) + 20)
        self.update()

    # ---- input → viewport controller
    def resizeEvent(self, event):
        self._vm.viewport.set_container_width(self.width())
        super().resizeEvent(event)

    def mousePressEvent(self, event):
        if event.button() == Qt.LeftButton:
            self._vm.viewport.press(event.position().x())
            self.setCursor(Qt.ClosedHandCursor)

    def mouseMoveEvent(self, event):
        if self._vm.viewport.is_dragging:
            self._vm.viewport.move(event.position().x())

    def mouseReleaseEvent(self, event):
        self._vm.viewport.release()
        self.unsetCursor()

    def wheelEvent(self, event):
        delta = event.angleDelta()
        if event.modifiers() & Qt.ControlModifier:
            if delta.y() > 0:
                self._vm.viewport.zoom_in()
            elif delta.y() < 0:
                self._vm.viewport.zoom_out()
            return
        step = delta.x() or delta.y()
        self._vm.viewport.scroll_by(-step)

    # ---- painting
    def paintEvent(self, event):
        p = QPainter(self)
        p.setRenderHint(QPainter.Antialiasing)
        p.fillRect(self.rect(), QColor(_BG))
        layout = self._layout
        if layout is None:
            p.end()
            return
        p.translate(-self._vm.viewport.scroll_position, 0)
        self._paint_header(p, layout)
        self._paint_today(p, layout)
        if self._vm.show_milestones:
            self._paint_milestones(p, layout)
        if self._vm.show_dependencies:
            for c in layout.connectors:
                self._paint_connector(p, c)
        self._paint_items(p, layout)
        p.end()

    def _paint_header(self, p: QPainter, layout: TimelineLayout) -> None:
        cw = layout.metrics.cell_width
        half = layout.metrics.header_height / 2
        width = max(layout.grid.header_width(cw), layout.width)
        p.fillRect(QRectF(0, 0, width, layout.metrics.header_height), QColor(_HEADER))

        p.setPen(QColor(_MUTED))
        for span in layout.grid.spans:
            if span.label:
                p.drawText(QRectF(span.left(cw) + 6, 0, span.width(cw) - 6, half), Qt.AlignVCenter, span.label)

        bold = QFont(p.font())
        bold.setBold(True)
        p.setFont(bold)
        grid_pen = QPen(QColor(_GRID))
        for idx, iv in enumerate(layout.grid.intervals):
            x = idx * cw
            p.setPen(QColor(_TEXT))
            p.drawText(QRectF(x, half, cw, half), Qt.AlignCenter, iv.label)
            p.setPen(grid_pen)
            p.drawLine(QPointF(x, half), QPointF(x, layout.height))
        p.setFont(QFont(self.font()))
        p.setPen(grid_pen)
        p.drawLine(QPointF(0, layout.metrics.header_height), QPointF(width, layout.metrics.header_height))

    def _paint_today(self, p: QPainter, layout: TimelineLayout) -> None:
        today = self._vm.today()
        if today not in layout.date_range:
            return
        x = date_to_x(today, layout.date_range.start, layout.metrics.cell_width)
        pen = QPen(QColor(_TODAY), 2)
        p.setPen(pen)
        p.drawLine(QPointF(x, layout.metrics.header_height), QPointF(x, layout.height))

    def _paint_items(self, p: QPainter, layout: TimelineLayout) -> None:
        visible = set(self._vm.visible_item_ids())
        for post in layout.rows:
            rect = layout.items.get(post.id)
            if rect is None or post.id not in visible:
                continue
            r = QRectF(rect.left + 1, rect.top, rect.width - 2, rect.height)
            color = QColor(PRIORITY_COLORS.get(post.priority or "", _BAR))
            p.setPen(Qt.NoPen)
            p.setBrush(color.lighter(160))
            p.drawRoundedRect(r, 6, 6)
            if post.progress:
                done = QRectF(r.left(), r.top(), r.width() * min(post.progress, 100) / 100, r.height())
                p.setBrush(color)
                p.drawRoundedRect(done, 6, 6)
            p.setPen(QColor(_TEXT))
            p.drawText(r.adjusted(8, 0, -8, 0), Qt.AlignLeft | Qt.AlignVCenter, post.title)

    def _paint_milestones(self, p: QPainter, layout: TimelineLayout) -> None:
        top = layout.metrics.header_height
        by_id = {m.id: m for m in self._vm.milestones}
        for mid, rect in layout.milestones.items():
            ms = by_id.get(mid)
            if ms is None or not self._vm.viewport.is_item_visible(rect.left, 0):
                continue
            color = QColor(ms.color or _MILESTONE)
            pen = QPen(color, 2, Qt.SolidLine if ms.is_completed else Qt.DashLine)
            p.setPen(pen)
            p.drawLine(QPointF(rect.left, top), QPointF(rect.left, top + rect.height))
            diamond = QPainterPath()
            diamond.moveTo(rect.left, top - 8)
            diamond.lineTo(rect.left + 6, top - 2)
            diamond.lineTo(rect.left, top + 4)
            diamond.lineTo(rect.left - 6, top - 2)
            diamond.closeSubpath()
            p.fillPath(diamond, color)
            p.drawText(QPointF(rect.left + 8, top + 14), ms.title)

    def _paint_connector(self, p: QPainter, c: Connector) -> None:
        pen = QPen(QColor(c.color), 2, Qt.DashLine if c.dash else Qt.SolidLine)
        p.setPen(pen)
        p.setBrush(Qt.NoBrush)
        p.drawPath(painter_path(c.path))
        ex, ey = c.end
        p.setBrush(QColor(c.color))
        p.drawEllipse(QPointF(ex, ey), 3, 3)
