from datetime import date

from PyQt6.QtCore import Qt
from PyQt6.QtWidgets import QApplication

from timeline_planner.app import MainWindow, TimelineWidget, build_parser
from timeline_planner.models import Project, ProjectRange, Task, TaskStatus

BAR_Y = 80


def _widget(january, tasks, **kwargs) -> TimelineWidget:
    return TimelineWidget(january, tasks, clock=lambda: date(2024, 1, 15), **kwargs)


def test_drag_emits_committed_dates(qapp: QApplication, january, t1) -> None:
    widget = _widget(january, [t1])
    received = []
    widget.task_dates_changed.connect(lambda *args: received.append(args))

    assert widget.press_at(240, BAR_Y)
    ghost = widget.drag_to(240 + 3 * 35)
    assert ghost.start_date == date(2024, 1, 8)
    assert widget.current_layout().bars[0].dimmed

    assert widget.release()
    assert received == [("T1", "2024-01-08", "2024-01-13")]
    assert widget.current_layout().ghost is None


def test_resize_handle_drag_clamps(qapp: QApplication, january, t1) -> None:
    widget = _widget(january, [t1])
    received = []
    widget.task_dates_changed.connect(lambda *args: received.append(args))

    assert widget.press_at(346, BAR_Y)
    widget.drag_to(346 + 40 * 35)
    widget.release()

    assert received == [("T1", "2024-01-05", "2024-01-31")]


def test_read_only_widget_ignores_presses(qapp: QApplication, january, t1) -> None:
    widget = _widget(january, [t1], editable=False)
    received = []
    widget.task_dates_changed.connect(lambda *args: received.append(args))

    assert widget.press_at(240, BAR_Y) is False
    assert widget.release() is False
    assert received == []

    widget.set_editable(True)
    assert widget.press_at(240, BAR_Y)


def test_widget_size_follows_layout(qapp: QApplication, january, t1) -> None:
    widget = _widget(january, [t1])

    assert widget.minimumWidth() == 31 * 35
    assert widget.current_layout().today_marker is not None


def test_set_project_drops_active_drag(qapp: QApplication, january, t1) -> None:
    widget = _widget(january, [t1])
    received = []
    widget.task_dates_changed.connect(lambda *args: received.append(args))
    widget.press_at(240, BAR_Y)

    widget.set_project(ProjectRange(date(2024, 2, 1), date(2024, 2, 29)), [])

    assert not widget.controller.is_dragging
    assert widget.release() is False
    assert received == []


def test_main_window_applies_and_undoes_reschedule(qapp: QApplication, january, t1) -> None:
    other = Task(task_id="T2", name="Review", start_date=date(2024, 1, 11), due_date=date(2024, 1, 12))
    project = Project(name="Launch", date_range=january, tasks=[t1, other])
    window = MainWindow(project)

    timeline = window.timeline
    assert timeline.press_at(240, BAR_Y)
    timeline.drag_to(240 - 2 * 35)
    timeline.release()

    assert (t1.start_date, t1.due_date) == (date(2024, 1, 3), date(2024, 1, 8))
    assert timeline.tasks()[0].start_date == date(2024, 1, 3)
    assert window.undo_action.isEnabled()

    window._handle_undo_request()

    assert t1.start_date == date(2024, 1, 5)
    assert not window.undo_action.isEnabled()


def test_main_window_read_only_toggle(qapp: QApplication, january, t1) -> None:
    window = MainWindow(Project(name="Launch", date_range=january, tasks=[t1]), editable=False)

    assert not window.editable_action.isChecked()
    window.editable_action.setChecked(True)

    assert window.timeline.is_editable()


def test_parser_flags() -> None:
    args = build_parser().parse_args(["plan.csv", "--read-only"])

    assert args.read_only and not args.verbose
    assert str(args.path) == "plan.csv"


def _has_cursor(widget: TimelineWidget) -> bool:
    return widget.testAttribute(Qt.WidgetAttribute.WA_SetCursor)


def test_cursor_reflects_drag_mode_and_resets_on_release(qapp: QApplication, january, t1) -> None:
    widget = _widget(january, [t1])

    assert widget.press_at(240, BAR_Y)
    assert widget.cursor().shape() == Qt.CursorShape.ClosedHandCursor
    widget.release()
    assert not _has_cursor(widget)

    assert widget.press_at(141, BAR_Y)
    assert widget.cursor().shape() == Qt.CursorShape.SizeHorCursor
    widget.release()
    assert not _has_cursor(widget)


def test_hover_cursor_only_when_editable(qapp: QApplication, january, t1) -> None:
    widget = _widget(january, [t1])

    widget.hover_at(240, BAR_Y)
    assert widget.cursor().shape() == Qt.CursorShape.OpenHandCursor
    widget.hover_at(346, BAR_Y)
    assert widget.cursor().shape() == Qt.CursorShape.SizeHorCursor

    widget.set_editable(False)
    widget.hover_at(240, BAR_Y)
    assert not _has_cursor(widget)
    assert widget.toolTip().startswith("T-001 - Draft outline")


def test_widget_paints_bars_ghost_and_empty_state(qapp: QApplication, january, t1) -> None:
    widget = _widget(january, [t1])
    widget.press_at(240, BAR_Y)
    widget.drag_to(240 + 35)

    assert not widget.grab().isNull()

    widget.release()
    widget.set_tasks([])
    assert not widget.grab().isNull()


def test_main_window_shows_progress_summary(qapp: QApplication, january, t1) -> None:
    done = Task(
        task_id="T2",
        name="Review",
        start_date=date(2024, 1, 11),
        due_date=date(2024, 1, 12),
        status=TaskStatus.COMPLETED,
    )
    window = MainWindow(Project(name="Launch", date_range=january, tasks=[t1, done]))

    assert window.summary_label.text() == "Progress 50% (not-started 0, in-progress 1, completed 1)"

    window.project.tasks[0].status = TaskStatus.COMPLETED
    window.timeline.press_at(240, BAR_Y)
    window.timeline.drag_to(240 + 35)
    window.timeline.release()

    assert window.summary_label.text().startswith("Progress 100%")


def test_parser_clamp_flag() -> None:
    assert build_parser().parse_args(["plan.csv", "--clamp"]).clamp
    assert not build_parser().parse_args([]).clamp
