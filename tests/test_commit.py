import logging
from datetime import date

from timeline_planner.commit import CommitGate, is_commit_valid


def test_is_commit_valid_checks_bounds_and_order(january) -> None:
    assert is_commit_valid(date(2024, 1, 1), date(2024, 1, 31), january)
    assert is_commit_valid(date(2024, 1, 9), date(2024, 1, 9), january)
    assert not is_commit_valid(date(2023, 12, 31), date(2024, 1, 5), january)
    assert not is_commit_valid(date(2024, 1, 5), date(2024, 2, 1), january)
    assert not is_commit_valid(date(2024, 1, 10), date(2024, 1, 5), january)


def test_submit_formats_dates_for_callback(january) -> None:
    received = []
    gate = CommitGate(january, lambda *args: received.append(args))

    assert gate.submit("T1", date(2024, 1, 8), date(2024, 1, 13)) is True
    assert received == [("T1", "2024-01-08", "2024-01-13")]


def test_submit_discards_invalid_dates_with_warning(january, caplog) -> None:
    received = []
    gate = CommitGate(january, lambda *args: received.append(args))

    with caplog.at_level(logging.WARNING, logger="timeline_planner.commit"):
        assert gate.submit("T1", date(2024, 1, 20), date(2024, 1, 10)) is False

    assert received == []
    assert "Discarding reschedule of T1" in caplog.text


def test_submit_logs_failing_callback(january, caplog) -> None:
    def broken(task_id: str, start: str, due: str) -> None:
        raise RuntimeError("store offline")

    gate = CommitGate(january, broken)

    with caplog.at_level(logging.ERROR, logger="timeline_planner.commit"):
        assert gate.submit("T1", date(2024, 1, 2), date(2024, 1, 3)) is True

    assert "Task date update for T1 failed" in caplog.text
