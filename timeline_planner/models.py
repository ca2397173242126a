"""Data models shared across the timeline application."""
from __future__ import annotations

import math
from dataclasses import dataclass, field, replace
from datetime import date
from enum import Enum
from typing import Dict, List, Optional, Tuple

from .dates import day_range, format_date, inclusive_days, parse_date

_UNDO_STACK_LIMIT = 20


class TaskStatus(str, Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"

    @property
    def bar_color(self) -> str:
        return _STATUS_BAR_COLORS[self]

    @property
    def progress(self) -> float:
        """Fraction of the bar drawn as completed work."""
        return _STATUS_PROGRESS[self]

    @classmethod
    def parse(cls, text: str) -> "TaskStatus":
        try:
            return cls(text.strip())
        except ValueError as exc:
            raise ValueError(f"Unknown task status {text!r}") from exc


_STATUS_BAR_COLORS = {
    TaskStatus.NOT_STARTED: "#9ca3af",
    TaskStatus.IN_PROGRESS: "#60a5fa",
    TaskStatus.COMPLETED: "#4ade80",
}

_STATUS_PROGRESS = {
    TaskStatus.NOT_STARTED: 0.0,
    TaskStatus.IN_PROGRESS: 0.5,
    TaskStatus.COMPLETED: 1.0,
}


@dataclass(frozen=True)
class ProjectRange:
    """Closed interval of calendar days a project's tasks must fall within."""

    start: date
    due: date

    def __post_init__(self) -> None:
        if self.start > self.due:
            raise ValueError(
                f"Project start {format_date(self.start)} is after due date {format_date(self.due)}"
            )

    @classmethod
    def from_strings(cls, start: str, due: str) -> "ProjectRange":
        return cls(parse_date(start), parse_date(due))

    @property
    def total_days(self) -> int:
        return inclusive_days(self.start, self.due)

    def contains(self, value: date) -> bool:
        return self.start <= value <= self.due

    def clamp(self, value: date) -> date:
        return max(self.start, min(value, self.due))

    def days(self) -> List[date]:
        return day_range(self.start, self.due)


@dataclass
class Task:
    """A scheduled unit of work shown as one timeline bar."""

    task_id: str
    name: str
    start_date: date
    due_date: date
    status: TaskStatus = TaskStatus.NOT_STARTED
    code: str = ""

    @property
    def label(self) -> str:
        return f"{self.code} - {self.name}" if self.code else self.name

    def has_valid_span(self) -> bool:
        """Return True when the start date does not come after the due date."""
        return self.start_date <= self.due_date

    def clamp_to_range(self, date_range: ProjectRange) -> None:
        """Ensure the task stays within the project range and start <= due."""
        self.start_date = date_range.clamp(self.start_date)
        self.due_date = date_range.clamp(self.due_date)
        if self.start_date > self.due_date:
            self.start_date, self.due_date = self.due_date, self.start_date


@dataclass
class Project:
    """In-memory project that receives committed date changes from the timeline."""

    name: str
    date_range: ProjectRange
    tasks: List[Task] = field(default_factory=list)
    _undo_stack: List[Tuple[str, date, date]] = field(default_factory=list, repr=False, compare=False)

    def find_task(self, task_id: str) -> Optional[Task]:
        for task in self.tasks:
            if task.task_id == task_id:
                return task
        return None

    def update_task_dates(self, task_id: str, start: str, due: str) -> bool:
        """Apply committed `YYYY-MM-DD` dates; False when nothing changed."""
        task = self.find_task(task_id)
        if task is None:
            raise KeyError(task_id)
        new_start = parse_date(start)
        new_due = parse_date(due)
        if (task.start_date, task.due_date) == (new_start, new_due):
            return False
        self._undo_stack.append((task_id, task.start_date, task.due_date))
        if len(self._undo_stack) > _UNDO_STACK_LIMIT:
            self._undo_stack.pop(0)
        task.start_date = new_start
        task.due_date = new_due
        return True

    def status_counts(self) -> Dict[TaskStatus, int]:
        """Number of tasks in each status, including statuses with none."""
        counts = {status: 0 for status in TaskStatus}
        for task in self.tasks:
            counts[task.status] += 1
        return counts

    def progress_percent(self) -> int:
        """Share of completed tasks as a whole percentage; 0 without tasks."""
        if not self.tasks:
            return 0
        completed = self.status_counts()[TaskStatus.COMPLETED]
        return math.floor(completed / len(self.tasks) * 100 + 0.5)

    @property
    def can_undo(self) -> bool:
        return bool(self._undo_stack)

    def undo_last_change(self) -> Optional[Task]:
        """Restore the dates replaced by the most recent update, if any."""
        while self._undo_stack:
            task_id, start, due = self._undo_stack.pop()
            task = self.find_task(task_id)
            if task is None:
                continue
            task.start_date = start
            task.due_date = due
            return task
        return None

    def snapshot_tasks(self) -> List[Task]:
        """Copies of the current tasks, safe to hand to the view."""
        return [replace(task) for task in self.tasks]
