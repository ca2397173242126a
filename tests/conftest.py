import os
from datetime import date

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from PyQt6.QtWidgets import QApplication  # noqa: E402

from timeline_planner.models import ProjectRange, Task, TaskStatus  # noqa: E402


@pytest.fixture(scope="session")
def qapp():
    """Provide a shared QApplication for tests that instantiate widgets."""
    app = QApplication.instance()
    if app is None:
        app = QApplication([])
    return app


@pytest.fixture
def january() -> ProjectRange:
    return ProjectRange(date(2024, 1, 1), date(2024, 1, 31))


@pytest.fixture
def t1() -> Task:
    return Task(
        task_id="T1",
        code="T-001",
        name="Draft outline",
        start_date=date(2024, 1, 5),
        due_date=date(2024, 1, 10),
        status=TaskStatus.IN_PROGRESS,
    )
