"""Main PyQt application entry point."""
from __future__ import annotations

import argparse
import logging
import sys
from datetime import date, datetime, timezone
from pathlib import Path
from typing import Callable, Iterable, List, Optional

from PyQt6.QtCore import QRectF, Qt, pyqtSignal
from PyQt6.QtGui import QAction, QCloseEvent, QColor, QKeySequence, QPainter, QPen
from PyQt6.QtWidgets import (
    QApplication,
    QFileDialog,
    QMainWindow,
    QMessageBox,
    QLabel,
    QScrollArea,
    QWidget,
)

from .dates import add_days
from .drag import DragController, DragMode, GhostPreview
from .exporters import export_as_csv
from .grid import GridMetrics
from .layout import (
    GHOST_BORDER_COLOR,
    GHOST_COLOR,
    TODAY_COLOR,
    TODAY_LABEL,
    TimelineLayout,
    build_layout,
)
from .models import Project, ProjectRange, Task
from .storage import load_project, save_project

logger = logging.getLogger(__name__)

_STATUS_MESSAGE_MS = 3000
_NEW_PROJECT_DAYS = 30
_EMPTY_MESSAGE = "No tasks to show on the timeline."

_DRAG_CURSORS = {
    DragMode.MOVE: Qt.CursorShape.ClosedHandCursor,
    DragMode.RESIZE_START: Qt.CursorShape.SizeHorCursor,
    DragMode.RESIZE_END: Qt.CursorShape.SizeHorCursor,
}
_HOVER_CURSORS = {
    DragMode.MOVE: Qt.CursorShape.OpenHandCursor,
    DragMode.RESIZE_START: Qt.CursorShape.SizeHorCursor,
    DragMode.RESIZE_END: Qt.CursorShape.SizeHorCursor,
}


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


class TimelineWidget(QWidget):
    """Gantt timeline where bars can be dragged or resized to reschedule tasks.

    Committed changes are only announced through `task_dates_changed`; the
    owner is expected to persist them and hand the updated tasks back with
    `set_tasks`.
    """

    task_dates_changed = pyqtSignal(str, str, str)

    def __init__(
        self,
        date_range: ProjectRange,
        tasks: Iterable[Task] = (),
        *,
        editable: bool = True,
        metrics: Optional[GridMetrics] = None,
        clock: Optional[Callable[[], date]] = None,
        parent: Optional[QWidget] = None,
    ) -> None:
        super().__init__(parent)
        self.metrics = metrics or GridMetrics()
        self._clock = clock or utc_today
        self._tasks: List[Task] = list(tasks)
        self._controller = DragController(
            date_range, self.task_dates_changed.emit, editable=editable, metrics=self.metrics
        )
        self.setMouseTracking(True)
        self._refresh_size()

    @property
    def controller(self) -> DragController:
        return self._controller

    @property
    def date_range(self) -> ProjectRange:
        return self._controller.date_range

    def is_editable(self) -> bool:
        return self._controller.editable

    def tasks(self) -> List[Task]:
        return list(self._tasks)

    def set_project(self, date_range: ProjectRange, tasks: Iterable[Task]) -> None:
        """Swap in a different project; any gesture in progress is dropped."""
        self._controller.teardown()
        self._controller = DragController(
            date_range,
            self.task_dates_changed.emit,
            editable=self._controller.editable,
            metrics=self.metrics,
        )
        self.unsetCursor()
        self.set_tasks(tasks)

    def set_tasks(self, tasks: Iterable[Task]) -> None:
        self._tasks = list(tasks)
        self._refresh_size()
        self.update()

    def set_editable(self, editable: bool) -> None:
        self._controller.editable = editable
        if not self._controller.is_dragging:
            self.unsetCursor()
        self.update()

    def current_layout(self) -> TimelineLayout:
        """Layout for this paint pass; `today` is re-read from the clock each time."""
        session = self._controller.session
        return build_layout(
            self._tasks,
            self.date_range,
            today=self._clock(),
            editable=self.is_editable(),
            metrics=self.metrics,
            ghost=self._controller.ghost,
            dragging_task_id=session.task_id if session else None,
        )

    def _refresh_size(self) -> None:
        layout = self.current_layout()
        self.setMinimumSize(layout.width, layout.height)
        self.resize(layout.width, layout.height)

    # Drag handling -----------------------------------------------------
    def press_at(self, x: float, y: float) -> bool:
        """Start a drag for the bar under `(x, y)`; returns False if none starts."""
        hit = self.current_layout().hit_test(x, y)
        if hit is None:
            return False
        bar, mode = hit
        task = self._tasks[bar.row_index]
        if not self._controller.begin(task, bar.row_index, mode, x):
            return False
        self.setCursor(_DRAG_CURSORS[mode])
        self.update()
        return True

    def drag_to(self, x: float) -> Optional[GhostPreview]:
        ghost = self._controller.update(x)
        if ghost is not None:
            self.update()
        return ghost

    def release(self) -> bool:
        """Finish the active drag; True when new dates were committed."""
        if not self._controller.is_dragging:
            return False
        committed = self._controller.release()
        self.unsetCursor()
        self.update()
        return committed

    def hover_at(self, x: float, y: float) -> None:
        layout = self.current_layout()
        self.setToolTip(layout.tooltip_at(x, y))
        hit = layout.hit_test(x, y)
        if hit is None:
            self.unsetCursor()
        else:
            self.setCursor(_HOVER_CURSORS[hit[1]])

    def mousePressEvent(self, event):  # type: ignore[override]
        if event.button() == Qt.MouseButton.LeftButton:
            position = event.position()
            if self.press_at(position.x(), position.y()):
                event.accept()
                return
        super().mousePressEvent(event)

    def mouseMoveEvent(self, event):  # type: ignore[override]
        position = event.position()
        if self._controller.is_dragging:
            self.drag_to(position.x())
            event.accept()
            return
        self.hover_at(position.x(), position.y())
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):  # type: ignore[override]
        if event.button() == Qt.MouseButton.LeftButton and self.release():
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def hideEvent(self, event):  # type: ignore[override]
        self._controller.teardown()
        self.unsetCursor()
        super().hideEvent(event)

    # Painting ----------------------------------------------------------
    def paintEvent(self, event):  # type: ignore[override]
        layout = self.current_layout()
        painter = QPainter(self)
        painter.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        painter.fillRect(self.rect(), QColor("white"))
        self._paint_headers(painter, layout)
        self._paint_grid(painter, layout)
        if not self._tasks:
            painter.setPen(QColor("#6b7280"))
            body = QRectF(0, layout.metrics.bars_top, max(layout.width, self.width()), 80)
            painter.drawText(body, Qt.AlignmentFlag.AlignCenter, _EMPTY_MESSAGE)
        self._paint_today(painter, layout)
        self._paint_bars(painter, layout)
        self._paint_ghost(painter, layout)
        painter.end()

    def _paint_headers(self, painter: QPainter, layout: TimelineLayout) -> None:
        half = layout.metrics.header_height / 2
        painter.setPen(QPen(QColor("#d1d5db")))
        for month in layout.month_headers:
            rect = QRectF(month.left, 0, month.width, half)
            painter.drawRect(rect)
            painter.setPen(QColor("#4b5563"))
            painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, month.label)
            painter.setPen(QPen(QColor("#d1d5db")))
        for day in layout.day_headers:
            rect = QRectF(day.left, half, day.width, half)
            painter.fillRect(rect, QColor("#f3f4f6") if day.weekend else QColor("white"))
            painter.drawRect(rect)
            painter.setPen(QColor("#4b5563"))
            painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, str(day.day.day))
            painter.setPen(QPen(QColor("#d1d5db")))

    def _paint_grid(self, painter: QPainter, layout: TimelineLayout) -> None:
        painter.setPen(QPen(QColor("#e5e7eb")))
        top = layout.metrics.header_height
        for day in layout.day_headers:
            x = day.left + day.width
            painter.drawLine(int(x), top, int(x), layout.height)

    def _paint_today(self, painter: QPainter, layout: TimelineLayout) -> None:
        marker = layout.today_marker
        if marker is None:
            return
        pen = QPen(QColor(TODAY_COLOR))
        pen.setWidth(2)
        painter.setPen(pen)
        top = int(layout.metrics.header_height / 2)
        painter.drawLine(int(marker.x), top, int(marker.x), layout.height)
        painter.drawText(QRectF(marker.x - 30, 0, 60, top), Qt.AlignmentFlag.AlignCenter, TODAY_LABEL)

    def _paint_bars(self, painter: QPainter, layout: TimelineLayout) -> None:
        handle = layout.metrics.handle_width
        for bar in layout.bars:
            painter.setOpacity(0.5 if bar.dimmed else 1.0)
            rect = QRectF(bar.left, bar.top, max(0, bar.width - 1), bar.height)
            painter.fillRect(rect, QColor(bar.color))
            if bar.progress > 0:
                done = QRectF(rect.left(), rect.top(), rect.width() * bar.progress, rect.height())
                painter.fillRect(done, QColor(0, 0, 0, 40))
            text_rect = rect.adjusted(handle + 4, 0, -(handle + 4), 0)
            label = painter.fontMetrics().elidedText(
                bar.label, Qt.TextElideMode.ElideRight, max(0, int(text_rect.width()))
            )
            painter.setPen(QColor("white"))
            painter.drawText(text_rect, Qt.AlignmentFlag.AlignVCenter | Qt.AlignmentFlag.AlignLeft, label)
        painter.setOpacity(1.0)

    def _paint_ghost(self, painter: QPainter, layout: TimelineLayout) -> None:
        ghost = layout.ghost
        if ghost is None:
            return
        rect = QRectF(ghost.left, ghost.top, max(0, ghost.width - 1), ghost.height)
        painter.setOpacity(0.7)
        painter.fillRect(rect, QColor(GHOST_COLOR))
        pen = QPen(QColor(GHOST_BORDER_COLOR))
        pen.setWidth(2)
        pen.setStyle(Qt.PenStyle.DashLine)
        painter.setPen(pen)
        painter.drawRect(rect)
        painter.setOpacity(1.0)
        painter.setPen(QColor("#1d4ed8"))
        painter.drawText(rect, Qt.AlignmentFlag.AlignCenter, ghost.label)


def _untitled_project(today: date) -> Project:
    return Project(
        name="Untitled",
        date_range=ProjectRange(today, add_days(today, _NEW_PROJECT_DAYS - 1)),
    )


class MainWindow(QMainWindow):
    """Primary window with menus and the scrollable timeline."""

    def __init__(
        self,
        project: Optional[Project] = None,
        *,
        editable: bool = True,
        path: Optional[Path] = None,
    ) -> None:
        super().__init__()
        self.project = project or _untitled_project(utc_today())
        self.current_path: Optional[Path] = Path(path) if path else None
        self.timeline = TimelineWidget(
            self.project.date_range, self.project.snapshot_tasks(), editable=editable
        )
        self.timeline.task_dates_changed.connect(self._handle_task_dates_changed)
        self.summary_label = QLabel()
        self.undo_action: QAction | None = None
        self.editable_action: QAction | None = None
        self._build_layout()
        self._build_menu()
        self.statusBar().addPermanentWidget(self.summary_label)
        self._update_summary()
        self._update_title()
        self.resize(1000, 600)

    def _build_layout(self) -> None:
        scroll = QScrollArea()
        scroll.setWidget(self.timeline)
        scroll.setWidgetResizable(True)
        self.setCentralWidget(scroll)

    def _build_menu(self) -> None:
        """Create File/Edit/View menus along with shortcuts."""
        menu = self.menuBar()
        file_menu = menu.addMenu("File")

        open_action = QAction("Open", self)
        open_action.setShortcut(QKeySequence.StandardKey.Open)
        open_action.triggered.connect(self.action_open)
        file_menu.addAction(open_action)

        save_action = QAction("Save", self)
        save_action.setShortcut(QKeySequence.StandardKey.Save)
        save_action.triggered.connect(self.action_save)
        file_menu.addAction(save_action)

        save_as_action = QAction("Save As...", self)
        save_as_action.triggered.connect(self.action_save_as)
        file_menu.addAction(save_as_action)

        export_action = QAction("Export CSV", self)
        export_action.triggered.connect(self.action_export)
        file_menu.addAction(export_action)

        file_menu.addSeparator()
        quit_action = QAction("Quit", self)
        quit_action.setShortcut(QKeySequence.StandardKey.Quit)
        quit_action.triggered.connect(self.close)
        file_menu.addAction(quit_action)

        edit_menu = menu.addMenu("Edit")
        undo_action = QAction("Undo reschedule", self)
        undo_action.setShortcut("Ctrl+Z")
        undo_action.setEnabled(False)
        undo_action.triggered.connect(self._handle_undo_request)
        edit_menu.addAction(undo_action)
        self.undo_action = undo_action

        view_menu = menu.addMenu("View")
        editable_action = QAction("Allow editing", self)
        editable_action.setCheckable(True)
        editable_action.setChecked(self.timeline.is_editable())
        editable_action.toggled.connect(self.timeline.set_editable)
        view_menu.addAction(editable_action)
        self.editable_action = editable_action

    def _update_title(self) -> None:
        self.setWindowTitle(f"{self.project.name} - Timeline Planner")

    def _sync_project_state(self) -> None:
        """Refresh undo availability and the progress summary after a change."""
        if self.undo_action is not None:
            self.undo_action.setEnabled(self.project.can_undo)
        self._update_summary()

    def _update_summary(self) -> None:
        counts = self.project.status_counts()
        breakdown = ", ".join(f"{status.value} {count}" for status, count in counts.items())
        self.summary_label.setText(f"Progress {self.project.progress_percent()}% ({breakdown})")

    def _show_project(self, project: Project) -> None:
        self.project = project
        self.timeline.set_project(project.date_range, project.snapshot_tasks())
        self._sync_project_state()
        self._update_title()

    def _handle_task_dates_changed(self, task_id: str, start: str, due: str) -> None:
        """Persist a committed reschedule and push the new dates back to the view."""
        try:
            changed = self.project.update_task_dates(task_id, start, due)
        except KeyError:
            logger.warning("Committed dates for unknown task %s", task_id)
            return
        if not changed:
            return
        self.timeline.set_tasks(self.project.snapshot_tasks())
        self._sync_project_state()
        self.statusBar().showMessage(f"Rescheduled to {start} - {due}", _STATUS_MESSAGE_MS)

    def _handle_undo_request(self) -> None:
        task = self.project.undo_last_change()
        self._sync_project_state()
        if task is None:
            return
        self.timeline.set_tasks(self.project.snapshot_tasks())
        self.statusBar().showMessage(f"Restored dates of {task.label}", _STATUS_MESSAGE_MS)

    # Menu actions ------------------------------------------------------
    def action_open(self) -> None:  # pragma: no cover - interactive
        """Load a saved CSV project file into the timeline."""
        path, _ = QFileDialog.getOpenFileName(self, "Open project", filter="CSV Files (*.csv)")
        if not path:
            return
        try:
            project = load_project(path)
        except (OSError, ValueError) as exc:
            QMessageBox.critical(self, "Open failed", str(exc))
            return
        self._show_project(project)
        self.current_path = Path(path)
        self.statusBar().showMessage(f"Loaded project from {path}", _STATUS_MESSAGE_MS)

    def action_save(self) -> None:  # pragma: no cover - interactive
        if not self.current_path:
            self.action_save_as()
            return
        self._save_to(self.current_path)

    def action_save_as(self) -> None:  # pragma: no cover - interactive
        path, _ = QFileDialog.getSaveFileName(
            self,
            "Save project",
            filter="CSV Files (*.csv)",
            initialFilter="CSV Files (*.csv)",
        )
        if not path:
            return
        self._save_to(Path(path))

    def _save_to(self, path: Path) -> None:
        try:
            save_project(path, self.project)
        except OSError as exc:
            QMessageBox.critical(self, "Save failed", str(exc))
            return
        self.current_path = path
        self.statusBar().showMessage(f"Saved to {path}", _STATUS_MESSAGE_MS)

    def action_export(self) -> None:  # pragma: no cover - interactive
        """Export the day-by-day CSV used for sharing."""
        path, _ = QFileDialog.getSaveFileName(self, "Export timeline", filter="CSV Files (*.csv)")
        if not path:
            return
        try:
            export_as_csv(path, self.project)
        except OSError as exc:
            QMessageBox.critical(self, "Export failed", str(exc))
            return
        self.statusBar().showMessage(f"Exported CSV to {path}", _STATUS_MESSAGE_MS)

    def closeEvent(self, event: QCloseEvent) -> None:  # pragma: no cover - requires UI
        """Ask for confirmation before closing the application."""
        if QMessageBox.question(self, "Quit", "Close Timeline Planner?") == QMessageBox.StandardButton.Yes:
            event.accept()
        else:
            event.ignore()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="timeline-planner", description="Interactive project timeline.")
    parser.add_argument("path", nargs="?", type=Path, default=None, help="project CSV to open")
    parser.add_argument("--read-only", action="store_true", help="show the timeline without editing")
    parser.add_argument("--clamp", action="store_true", help="pull task dates into the project range on load")
    parser.add_argument("--verbose", action="store_true", help="log debug diagnostics")
    return parser


def run(argv: Optional[List[str]] = None) -> None:
    """Entry point used by `python -m timeline_planner`."""
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    project = None
    if args.path is not None:
        try:
            project = load_project(args.path, clamp=args.clamp)
        except (OSError, ValueError) as exc:
            parser.error(f"cannot open {args.path}: {exc}")
    app = QApplication(sys.argv[:1])
    window = MainWindow(project, editable=not args.read_only, path=args.path)
    window.show()
    app.exec()


if __name__ == "__main__":
    run()
