from datetime import date
from pathlib import Path

import pytest

from timeline_planner.models import Project, Task, TaskStatus
from timeline_planner.storage import load_project, save_project


def test_save_and_load_roundtrip(tmp_path: Path, january, t1) -> None:
    path = tmp_path / "nested" / "launch.csv"
    project = Project(
        name="Launch, phase 1",
        date_range=january,
        tasks=[
            t1,
            Task(task_id="T2", name="Review", start_date=date(2024, 1, 11), due_date=date(2024, 1, 12)),
        ],
    )

    save_project(path, project)
    loaded = load_project(path)

    assert loaded == project


def test_save_project_writes_project_line_and_header(tmp_path: Path, january, t1) -> None:
    path = tmp_path / "launch.csv"
    save_project(path, Project(name="Launch", date_range=january, tasks=[t1]))

    text = path.read_text().splitlines()
    assert text[0] == "#project,Launch,2024-01-01,2024-01-31"
    assert text[1] == "id,code,name,start_date,due_date,status"
    assert text[2] == "T1,T-001,Draft outline,2024-01-05,2024-01-10,in-progress"


def test_load_keeps_inverted_tasks_and_skips_short_rows(tmp_path: Path) -> None:
    path = tmp_path / "draft.csv"
    path.write_text(
        "#project,Draft,2024-01-01,2024-01-31\n"
        "id,code,name,start_date,due_date,status\n"
        "A,,Broken,2024-02-01,2024-01-30,not-started\n"
        "B,,Too short\n"
        ",,,2024-01-01,2024-01-02,completed\n",
        encoding="utf-8",
    )

    project = load_project(path)

    assert [task.task_id for task in project.tasks] == ["A"]
    assert project.tasks[0].status is TaskStatus.NOT_STARTED
    assert not project.tasks[0].has_valid_span()


def test_load_rejects_missing_project_line(tmp_path: Path) -> None:
    path = tmp_path / "bad.csv"
    path.write_text("id,code,name,start_date,due_date,status\n", encoding="utf-8")

    with pytest.raises(ValueError, match="project line"):
        load_project(path)


def test_load_reports_line_of_bad_date(tmp_path: Path) -> None:
    path = tmp_path / "bad_date.csv"
    path.write_text(
        "#project,Draft,2024-01-01,2024-01-31\n"
        "id,code,name,start_date,due_date,status\n"
        "A,,Ok,2024-01-02,2024-01-03,completed\n"
        "B,,Bad,01/05/2024,2024-01-06,completed\n",
        encoding="utf-8",
    )

    with pytest.raises(ValueError, match="line 4"):
        load_project(path)


def test_load_rejects_duplicate_task_ids(tmp_path: Path) -> None:
    path = tmp_path / "duplicate.csv"
    path.write_text(
        "#project,Draft,2024-01-01,2024-01-31\n"
        "id,code,name,start_date,due_date,status\n"
        "A,,First,2024-01-05,2024-01-10,not-started\n"
        "A,,Second,2024-01-15,2024-01-20,not-started\n",
        encoding="utf-8",
    )

    with pytest.raises(ValueError, match="line 4: duplicate id 'A'"):
        load_project(path)


def test_load_with_clamp_pulls_tasks_into_range(tmp_path: Path) -> None:
    path = tmp_path / "loose.csv"
    path.write_text(
        "#project,Draft,2024-01-01,2024-01-31\n"
        "id,code,name,start_date,due_date,status\n"
        "A,,Early,2023-12-20,2024-01-03,not-started\n"
        "B,,Inverted,2024-02-10,2024-01-25,completed\n",
        encoding="utf-8",
    )

    stored = load_project(path)
    clamped = load_project(path, clamp=True)

    assert stored.tasks[0].start_date == date(2023, 12, 20)
    assert (clamped.tasks[0].start_date, clamped.tasks[0].due_date) == (date(2024, 1, 1), date(2024, 1, 3))
    assert (clamped.tasks[1].start_date, clamped.tasks[1].due_date) == (date(2024, 1, 25), date(2024, 1, 31))
    assert all(task.has_valid_span() for task in clamped.tasks)
