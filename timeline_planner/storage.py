"""CSV persistence helpers."""
from __future__ import annotations

import csv
from pathlib import Path
from typing import List, Set

from .dates import format_date, parse_date
from .models import Project, ProjectRange, Task, TaskStatus


_PROJECT_PREFIX = "#project"
_TASK_HEADER = ["id", "code", "name", "start_date", "due_date", "status"]


def save_project(path: Path | str, project: Project) -> None:
    """Persist the project to CSV."""
    csv_path = Path(path)
    csv_path.parent.mkdir(parents=True, exist_ok=True)

    with csv_path.open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow([
            _PROJECT_PREFIX,
            project.name,
            format_date(project.date_range.start),
            format_date(project.date_range.due),
        ])
        writer.writerow(_TASK_HEADER)
        for task in project.tasks:
            writer.writerow([
                task.task_id,
                task.code,
                task.name,
                format_date(task.start_date),
                format_date(task.due_date),
                task.status.value,
            ])


def load_project(path: Path | str, *, clamp: bool = False) -> Project:
    """Load a project from CSV.

    With `clamp`, task dates are pulled into the project range and inverted
    spans are swapped; otherwise tasks are kept exactly as stored.
    """
    csv_path = Path(path)
    with csv_path.open("r", newline="", encoding="utf-8") as handle:
        reader = csv.reader(handle)
        project_line = next(reader, None)
        if not project_line or project_line[0] != _PROJECT_PREFIX or len(project_line) < 4:
            raise ValueError("Invalid timeline CSV: missing project line")
        _, name, start_raw, due_raw = project_line[:4]
        date_range = ProjectRange.from_strings(start_raw, due_raw)

        header = next(reader, None)
        if header != _TASK_HEADER:
            raise ValueError("Invalid timeline CSV: missing task header")

        tasks: List[Task] = []
        seen_ids: Set[str] = set()
        for line_number, row in enumerate(reader, start=3):
            if len(row) < len(_TASK_HEADER):
                continue
            task_id, code, task_name, start_raw, due_raw, status_raw = row[: len(_TASK_HEADER)]
            task_id = task_id.strip()
            if not task_id:
                continue
            if task_id in seen_ids:
                raise ValueError(f"Invalid timeline CSV line {line_number}: duplicate id {task_id!r}")
            seen_ids.add(task_id)
            try:
                task = Task(
                    task_id=task_id,
                    code=code.strip(),
                    name=task_name,
                    start_date=parse_date(start_raw),
                    due_date=parse_date(due_raw),
                    status=TaskStatus.parse(status_raw),
                )
            except ValueError as exc:
                raise ValueError(f"Invalid timeline CSV line {line_number}: {exc}") from exc
            if clamp:
                task.clamp_to_range(date_range)
            tasks.append(task)

        return Project(name=name, date_range=date_range, tasks=tasks)
