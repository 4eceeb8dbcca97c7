from __future__ import annotations

import logging
from datetime import datetime
from typing import Sequence

from smart_scheduler.core.config.settings import DEFAULT_SETTINGS, SchedulerSettings
from smart_scheduler.core.errors import CycleDetectedError
from smart_scheduler.core.model import FeasibilityReport, ScheduleResult, ScheduleTask
from smart_scheduler.core.schedule.feasibility import simulate
from smart_scheduler.core.schedule.graph import build_graph
from smart_scheduler.core.schedule.kahn import schedule

logger = logging.getLogger(__name__)


def calculate_schedule(
    tasks: Sequence[ScheduleTask],
    *,
    settings: SchedulerSettings = DEFAULT_SETTINGS,
) -> ScheduleResult:
    """Validate, build and order a task set.

    Raises InvalidInputError or CycleDetectedError; never returns a partial order.
    """
    graph = build_graph(tasks, duplicate_titles=settings.duplicate_titles)
    logger.debug(
        "built dependency graph: %d nodes, %d edges", len(graph.nodes), graph.edge_count()
    )

    # Collapsed duplicates share one node; counting inputs here would turn
    # every duplicate into a spurious cycle error.
    task_count = len(graph.nodes) if settings.duplicate_titles == "collapse" else len(tasks)
    try:
        order = schedule(graph, task_count)
    except CycleDetectedError:
        logger.warning("dependency cycle among %d tasks", len(graph.nodes))
        raise

    logger.info("scheduled %d tasks", len(order))
    return ScheduleResult(
        recommended_order=order,
        message=f"Successfully scheduled {len(order)} tasks",
    )


def check_schedule(
    tasks: Sequence[ScheduleTask],
    *,
    now: datetime,
    settings: SchedulerSettings = DEFAULT_SETTINGS,
) -> tuple[ScheduleResult, FeasibilityReport]:
    result = calculate_schedule(tasks, settings=settings)
    report = simulate(tasks, result.recommended_order, now)
    if not report.feasible:
        logger.info("schedule misses due date of %s", report.late_task)
    return result, report
