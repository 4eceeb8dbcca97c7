from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional


@dataclass(frozen=True)
class ScheduleTask:
    title: str
    estimated_hours: int
    due_date: Optional[datetime] = None
    dependencies: tuple[str, ...] = ()


@dataclass(frozen=True)
class DependencyGraph:
    nodes: tuple[str, ...]  # first-seen input order; seeds the worklist
    adjacency: dict[str, list[str]]  # dependency -> dependents
    in_degree: dict[str, int]

    def edge_count(self) -> int:
        return sum(len(v) for v in self.adjacency.values())


@dataclass(frozen=True)
class ScheduleResult:
    recommended_order: list[str]
    message: str

    def to_dict(self) -> dict[str, Any]:
        return {"recommendedOrder": list(self.recommended_order), "message": self.message}


@dataclass(frozen=True)
class TaskTiming:
    title: str
    start: datetime
    finish: datetime
    due_date: Optional[datetime] = None

    @property
    def late(self) -> bool:
        return self.due_date is not None and self.finish > self.due_date


@dataclass(frozen=True)
class FeasibilityReport:
    feasible: bool
    steps: list[TaskTiming] = field(default_factory=list)
    late_task: Optional[str] = None
