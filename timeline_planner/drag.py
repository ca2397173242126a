"""Drag-to-reschedule state machine for timeline bars.

A gesture moves the controller from idle to dragging on pointer-down and back
to idle on pointer-up. Every pointer move recomputes the ghost preview from the
baseline captured at pointer-down, never from the previous move, so the preview
always matches the total pointer displacement.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date
from enum import Enum
from typing import Optional, Tuple

from .commit import CommitGate, TaskDatesCallback
from .dates import add_days, format_date, inclusive_days
from .grid import GridMetrics, offset_to_day_delta, position_of
from .models import ProjectRange, Task

logger = logging.getLogger(__name__)


class DragMode(str, Enum):
    MOVE = "move"
    RESIZE_START = "resize-start"
    RESIZE_END = "resize-end"


@dataclass(frozen=True)
class DragSession:
    """Baseline captured when a gesture starts."""

    task_id: str
    mode: DragMode
    baseline_start: date
    baseline_due: date
    pointer_origin_x: float
    origin_left: int
    origin_width: int
    row_index: int


@dataclass(frozen=True)
class GhostPreview:
    left: int
    width: int
    start_date: date
    due_date: date
    top: int

    @property
    def label(self) -> str:
        return f"{format_date(self.start_date)} - {format_date(self.due_date)}"


def propose_dates(session: DragSession, day_offset: int, date_range: ProjectRange) -> Tuple[date, date]:
    """Apply `day_offset` to the session baseline under the mode's clamping rules."""
    start = session.baseline_start
    due = session.baseline_due

    if session.mode is DragMode.MOVE:
        duration = inclusive_days(start, due)
        start = add_days(start, day_offset)
        due = add_days(start, duration - 1)
        if start < date_range.start:
            start = date_range.start
            due = add_days(start, duration - 1)
        if due > date_range.due:
            due = date_range.due
            start = add_days(due, -(duration - 1))
            # Longer than the whole range: anchor to the range start.
            if start < date_range.start:
                start = date_range.start
                due = min(add_days(start, duration - 1), date_range.due)
    elif session.mode is DragMode.RESIZE_START:
        start = add_days(start, day_offset)
        if start < date_range.start:
            start = date_range.start
        if start > due:
            start = due
    else:
        due = add_days(due, day_offset)
        if due > date_range.due:
            due = date_range.due
        if due < start:
            due = start

    return start, due


def compute_ghost(
    session: DragSession,
    pointer_x: float,
    date_range: ProjectRange,
    metrics: GridMetrics,
) -> GhostPreview:
    """Ghost preview for the pointer at `pointer_x`; a pure function of its inputs."""
    day_offset = offset_to_day_delta(pointer_x - session.pointer_origin_x, metrics.day_width)
    start, due = propose_dates(session, day_offset, date_range)
    geometry = position_of(start, due, date_range.start, metrics.day_width)
    return GhostPreview(
        left=geometry.left,
        width=geometry.width,
        start_date=start,
        due_date=due,
        top=metrics.row_top(session.row_index),
    )


class DragController:
    """Owns at most one drag session and routes its outcome through a CommitGate."""

    def __init__(
        self,
        date_range: ProjectRange,
        on_task_dates_change: TaskDatesCallback,
        *,
        editable: bool,
        metrics: Optional[GridMetrics] = None,
    ) -> None:
        self.date_range = date_range
        self.metrics = metrics or GridMetrics()
        self.editable = editable
        self._gate = CommitGate(date_range, on_task_dates_change)
        self._session: Optional[DragSession] = None
        self._ghost: Optional[GhostPreview] = None

    @property
    def session(self) -> Optional[DragSession]:
        return self._session

    @property
    def ghost(self) -> Optional[GhostPreview]:
        return self._ghost

    @property
    def is_dragging(self) -> bool:
        return self._session is not None

    def begin(self, task: Task, row_index: int, mode: DragMode, pointer_x: float) -> bool:
        """Start a gesture on `task`; returns False when the drag is refused."""
        if not self.editable:
            logger.debug("Ignoring drag on %s: timeline is read-only", task.task_id)
            return False
        if self._session is not None:
            logger.warning(
                "Ignoring drag on %s: %s is already being dragged", task.task_id, self._session.task_id
            )
            return False
        if not task.has_valid_span():
            logger.warning("Ignoring drag on %s: task dates are inverted", task.task_id)
            return False
        geometry = position_of(task.start_date, task.due_date, self.date_range.start, self.metrics.day_width)

        self._session = DragSession(
            task_id=task.task_id,
            mode=mode,
            baseline_start=task.start_date,
            baseline_due=task.due_date,
            pointer_origin_x=pointer_x,
            origin_left=geometry.left,
            origin_width=geometry.width,
            row_index=row_index,
        )
        self._ghost = GhostPreview(
            left=geometry.left,
            width=geometry.width,
            start_date=task.start_date,
            due_date=task.due_date,
            top=self.metrics.row_top(row_index),
        )
        return True

    def update(self, pointer_x: float) -> Optional[GhostPreview]:
        if self._session is None:
            return None
        self._ghost = compute_ghost(self._session, pointer_x, self.date_range, self.metrics)
        return self._ghost

    def release(self) -> bool:
        """Finish the gesture; returns True when the proposed dates were committed."""
        session, ghost = self._session, self._ghost
        self._session = None
        self._ghost = None
        if session is None or ghost is None:
            return False
        return self._gate.submit(session.task_id, ghost.start_date, ghost.due_date)

    def teardown(self) -> None:
        """Drop any active gesture without committing it."""
        if self._session is not None:
            logger.debug("Dropping drag on %s without committing", self._session.task_id)
        self._session = None
        self._ghost = None
