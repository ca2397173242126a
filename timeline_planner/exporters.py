"""Export helpers for sharing a timeline outside the application."""
from __future__ import annotations

import csv
from pathlib import Path

from .dates import format_date
from .models import Project, TaskStatus

CSV_HEADERS = ["Task", "Start", "Due", "Status"]
CSV_STATUS_MARKERS = {
    TaskStatus.NOT_STARTED: "T",
    TaskStatus.IN_PROGRESS: "P",
    TaskStatus.COMPLETED: "C",
}


def export_as_csv(path: Path | str, project: Project) -> None:
    """Export a day-by-day CSV with one status marker per covered day."""
    csv_path = Path(path)
    csv_path.parent.mkdir(parents=True, exist_ok=True)

    days = project.date_range.days()
    header = CSV_HEADERS + [format_date(day) for day in days]
    with csv_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(header)
        for task in project.tasks:
            row = [task.label, format_date(task.start_date), format_date(task.due_date), task.status.value]
            marker = CSV_STATUS_MARKERS[task.status]
            markers = [marker if task.start_date <= day <= task.due_date else "" for day in days]
            writer.writerow(row + markers)
