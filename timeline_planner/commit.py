"""Final validation before handing rescheduled dates to the task owner."""
from __future__ import annotations

import logging
from datetime import date
from typing import Callable

from .dates import format_date
from .models import ProjectRange

logger = logging.getLogger(__name__)

TaskDatesCallback = Callable[[str, str, str], None]


def is_commit_valid(start: date, due: date, date_range: ProjectRange) -> bool:
    return start >= date_range.start and due <= date_range.due and start <= due


class CommitGate:
    """Forwards valid `(task_id, start, due)` proposals to `on_task_dates_change`.

    The callback receives `YYYY-MM-DD` strings and is fire-and-forget: its
    outcome is not observed, and a failure is logged rather than propagated.
    """

    def __init__(self, date_range: ProjectRange, on_task_dates_change: TaskDatesCallback) -> None:
        self.date_range = date_range
        self._on_task_dates_change = on_task_dates_change

    def submit(self, task_id: str, start: date, due: date) -> bool:
        if not is_commit_valid(start, due, self.date_range):
            logger.warning(
                "Discarding reschedule of %s: %s..%s is outside %s..%s",
                task_id,
                format_date(start),
                format_date(due),
                format_date(self.date_range.start),
                format_date(self.date_range.due),
            )
            return False
        # Outcome is not observed; the owner pushes committed dates back down.
        try:
            self._on_task_dates_change(task_id, format_date(start), format_date(due))
        except Exception:
            logger.exception("Task date update for %s failed", task_id)
        return True
