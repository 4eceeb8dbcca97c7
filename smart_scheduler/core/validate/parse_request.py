from __future__ import annotations

from typing import Any, Iterable, Optional, cast

from smart_scheduler.core.config.settings import DEFAULT_SETTINGS, SchedulerSettings
from smart_scheduler.core.errors import InvalidInputError
from smart_scheduler.core.io.load_request import normalize_task
from smart_scheduler.core.model import ScheduleTask
from smart_scheduler.core.timestamps import parse_timestamp


def parse_request(
    request: dict[str, Any],
    *,
    settings: SchedulerSettings = DEFAULT_SETTINGS,
) -> tuple[Optional[list[ScheduleTask]], list[InvalidInputError]]:
    """Check the shape of a schedule request and build ScheduleTask values.

    Returns (tasks, errors). Tasks is None when errors exist. Dependency
    references are not resolved here; the graph builder owns that.
    """

    file = cast(Optional[str], request.get("__file__"))
    errors: list[InvalidInputError] = []

    raw_tasks = request.get("tasks")
    if not isinstance(raw_tasks, list):
        errors.append(
            InvalidInputError(
                code="E_REQUIRED_FIELD",
                message="tasks is required and must be an array",
                file=file,
                path="tasks",
            )
        )
        return None, errors

    if not raw_tasks:
        errors.append(
            InvalidInputError(
                code="E_EMPTY_REQUEST",
                message="at least one task is required",
                file=file,
                path="tasks",
            )
        )
        return None, errors

    tasks: list[ScheduleTask] = []
    for i, raw in enumerate(raw_tasks):
        task_path = f"tasks[{i}]"
        if not isinstance(raw, dict):
            errors.append(
                InvalidInputError(
                    code="E_INVALID_TYPE",
                    message="task must be an object",
                    file=file,
                    path=task_path,
                )
            )
            continue
        raw = normalize_task(raw)

        ok = True

        title = raw.get("title")
        if not isinstance(title, str):
            errors.append(
                InvalidInputError(
                    code="E_REQUIRED_FIELD",
                    message="title is required and must be a string",
                    file=file,
                    path=f"{task_path}.title",
                )
            )
            ok = False
        elif not title.strip():
            errors.append(
                InvalidInputError(
                    code="E_BLANK_TITLE",
                    message="all tasks must have a title",
                    file=file,
                    path=f"{task_path}.title",
                )
            )
            ok = False

        hours = raw.get("estimated_hours")
        if isinstance(hours, bool) or not isinstance(hours, int):
            errors.append(
                InvalidInputError(
                    code="E_INVALID_TYPE",
                    message="estimated_hours is required and must be an integer",
                    file=file,
                    path=f"{task_path}.estimated_hours",
                )
            )
            ok = False
        elif not settings.min_hours <= hours <= settings.max_hours:
            errors.append(
                InvalidInputError(
                    code="E_OUT_OF_RANGE",
                    message=(
                        f"estimated hours must be between {settings.min_hours} "
                        f"and {settings.max_hours}, got {hours}"
                    ),
                    file=file,
                    path=f"{task_path}.estimated_hours",
                )
            )
            ok = False

        due_raw = raw.get("due_date")
        due_date = None
        if due_raw is not None:
            try:
                due_date = parse_timestamp(due_raw)
            except ValueError as e:
                errors.append(
                    InvalidInputError(
                        code="E_INVALID_TIMESTAMP",
                        message=str(e),
                        file=file,
                        path=f"{task_path}.due_date",
                    )
                )
                ok = False

        deps = raw.get("dependencies")
        if deps is None:
            deps = []
        if not isinstance(deps, list) or any(not isinstance(d, str) for d in deps):
            errors.append(
                InvalidInputError(
                    code="E_INVALID_TYPE",
                    message="dependencies must be an array of strings",
                    file=file,
                    path=f"{task_path}.dependencies",
                )
            )
            ok = False

        if ok:
            tasks.append(
                ScheduleTask(
                    title=cast(str, title),
                    estimated_hours=cast(int, hours),
                    due_date=due_date,
                    dependencies=tuple(cast(list[str], deps)),
                )
            )

    if errors:
        return None, _sorted(errors)
    return tasks, []


def _sorted(errors: Iterable[InvalidInputError]) -> list[InvalidInputError]:
    return sorted(
        list(errors),
        key=lambda e: (
            e.file or "",
            e.path or "",
            e.code,
        ),
    )
