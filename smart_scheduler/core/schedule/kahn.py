from __future__ import annotations

from collections import deque

from smart_scheduler.core.errors import CycleDetectedError
from smart_scheduler.core.model import DependencyGraph


def schedule(graph: DependencyGraph, task_count: int) -> list[str]:
    """Topologically order the graph with Kahn's algorithm.

    Ties among ready tasks are broken by first-seen input order: the worklist
    is seeded in graph.nodes order and is strictly FIFO afterwards.
    """

    remaining = dict(graph.in_degree)
    q: deque[str] = deque(nid for nid in graph.nodes if remaining[nid] == 0)
    order: list[str] = []

    while q:
        cur = q.popleft()
        order.append(cur)
        for nxt in graph.adjacency[cur]:
            remaining[nxt] -= 1
            if remaining[nxt] == 0:
                q.append(nxt)

    if len(order) != task_count:
        raise CycleDetectedError(
            code="E_CYCLE_DETECTED",
            message=(
                "circular dependency detected; tasks cannot be scheduled "
                "due to dependency cycles"
            ),
            path="tasks",
        )
    return order
