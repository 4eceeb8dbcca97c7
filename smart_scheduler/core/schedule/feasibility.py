from __future__ import annotations

from datetime import datetime, timedelta
from typing import Sequence

from smart_scheduler.core.errors import InvalidInputError
from smart_scheduler.core.model import FeasibilityReport, ScheduleTask, TaskTiming
from smart_scheduler.core.timestamps import as_utc


def simulate(
    tasks: Sequence[ScheduleTask],
    order: Sequence[str],
    now: datetime,
) -> FeasibilityReport:
    """Run the order on a single worker starting at `now`.

    A task starts at `now` or when the last of its already simulated
    dependencies finishes; dependencies placed later in `order` are ignored.
    Stops at the first task that finishes after its due date.
    """

    by_title = {t.title: t for t in tasks}
    for i, title in enumerate(order):
        if title not in by_title:
            raise InvalidInputError(
                code="E_UNKNOWN_ORDER_TITLE",
                message=f"order references unknown task: '{title}'",
                path=f"order[{i}]",
            )

    start_at = as_utc(now)
    finished: dict[str, datetime] = {}
    steps: list[TaskTiming] = []

    for title in order:
        task = by_title[title]
        start = start_at
        for dep in task.dependencies:
            done = finished.get(dep)
            if done is not None and done > start:
                start = done

        finish = start + timedelta(hours=task.estimated_hours)
        finished[title] = finish
        due = as_utc(task.due_date) if task.due_date is not None else None
        step = TaskTiming(title=title, start=start, finish=finish, due_date=due)
        steps.append(step)

        if step.late:
            return FeasibilityReport(feasible=False, steps=steps, late_task=title)

    return FeasibilityReport(feasible=True, steps=steps)


def is_feasible(tasks: Sequence[ScheduleTask], order: Sequence[str], now: datetime) -> bool:
    return simulate(tasks, order, now).feasible
