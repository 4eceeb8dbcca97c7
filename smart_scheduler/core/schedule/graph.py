from __future__ import annotations

from typing import Sequence

from smart_scheduler.core.config.settings import DuplicateTitlePolicy
from smart_scheduler.core.errors import InvalidInputError
from smart_scheduler.core.model import DependencyGraph, ScheduleTask


def build_graph(
    tasks: Sequence[ScheduleTask],
    *,
    duplicate_titles: DuplicateTitlePolicy = "reject",
) -> DependencyGraph:
    """Build the dependency graph for one scheduling request.

    Edges point from a dependency to its dependent. Every check runs before
    the graph is handed back, so callers never see a partial structure.
    """

    if not tasks:
        raise InvalidInputError(
            code="E_EMPTY_REQUEST",
            message="at least one task is required",
            path="tasks",
        )

    nodes: list[str] = []
    adjacency: dict[str, list[str]] = {}
    in_degree: dict[str, int] = {}

    for i, task in enumerate(tasks):
        if not task.title or not task.title.strip():
            raise InvalidInputError(
                code="E_BLANK_TITLE",
                message="all tasks must have a title",
                path=f"tasks[{i}].title",
            )
        if task.title in adjacency:
            if duplicate_titles == "reject":
                raise InvalidInputError(
                    code="E_DUPLICATE_TITLE",
                    message=f"duplicate task title: '{task.title}'",
                    path=f"tasks[{i}].title",
                )
            continue
        nodes.append(task.title)
        adjacency[task.title] = []
        in_degree[task.title] = 0

    for i, task in enumerate(tasks):
        for di, dep in enumerate(task.dependencies):
            if not dep or not dep.strip():
                continue
            if dep not in adjacency:
                raise InvalidInputError(
                    code="E_UNKNOWN_DEPENDENCY",
                    message=f"task '{task.title}' has an unknown dependency: '{dep}'",
                    path=f"tasks[{i}].dependencies[{di}]",
                )
            # Repeated entries add repeated edges; in-degree stays consistent.
            adjacency[dep].append(task.title)
            in_degree[task.title] += 1

    return DependencyGraph(nodes=tuple(nodes), adjacency=adjacency, in_degree=in_degree)
