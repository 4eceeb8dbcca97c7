from datetime import datetime, timezone
import logging

import pytest

from smart_scheduler.core.config.settings import SchedulerSettings
from smart_scheduler.core.errors import CycleDetectedError, InvalidInputError
from smart_scheduler.core.model import ScheduleTask
from smart_scheduler.core.schedule.service import calculate_schedule, check_schedule


def _t(title, *deps, hours=1, due=None):
    return ScheduleTask(title=title, estimated_hours=hours, due_date=due, dependencies=tuple(deps))


def test_calculate_schedule_result_and_message():
    result = calculate_schedule([_t("A"), _t("B", "A"), _t("C", "A", "B")])
    assert result.recommended_order == ["A", "B", "C"]
    assert result.message == "Successfully scheduled 3 tasks"
    assert result.to_dict() == {
        "recommendedOrder": ["A", "B", "C"],
        "message": "Successfully scheduled 3 tasks",
    }


def test_calculate_schedule_unknown_dependency():
    with pytest.raises(InvalidInputError) as ei:
        calculate_schedule([_t("A", "Ghost")])
    assert "A" in str(ei.value) and "Ghost" in str(ei.value)


def test_calculate_schedule_cycle_logs_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="smart_scheduler.core.schedule.service"):
        with pytest.raises(CycleDetectedError):
            calculate_schedule([_t("A", "B"), _t("B", "A")])
    assert "cycle" in caplog.text


def test_calculate_schedule_collapse_counts_distinct_titles():
    settings = SchedulerSettings(duplicate_titles="collapse")
    result = calculate_schedule([_t("Setup"), _t("Deploy", "Setup"), _t("Setup")], settings=settings)
    assert result.recommended_order == ["Setup", "Deploy"]
    assert result.message == "Successfully scheduled 2 tasks"


def test_check_schedule_reports_late_task():
    now = datetime(2026, 1, 1, tzinfo=timezone.utc)
    tasks = [_t("A", hours=2), _t("B", "A", hours=3, due=datetime(2026, 1, 1, 4, tzinfo=timezone.utc))]
    result, report = check_schedule(tasks, now=now)
    assert result.recommended_order == ["A", "B"]
    assert report.feasible is False
    assert report.late_task == "B"
