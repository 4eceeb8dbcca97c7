from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Optional


@dataclass(frozen=True)
class SchedulerError(Exception):
    """Coded error raised by the core and rendered by the CLI.

    `code` is stable (E_* for request problems, L_* for lint advice);
    `file`/`path` locate the offending value, e.g. "tasks[2].dependencies[0]".
    """

    code: str
    message: str
    file: Optional[str] = None
    path: Optional[str] = None

    source: ClassVar[str] = "validate"

    def __str__(self) -> str:
        loc = ":".join(p for p in (self.file, self.path) if p) or "<request>"
        return f"{loc}: {self.code}: {self.message}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "file": self.file,
            "path": self.path,
            "severity": "error",
            "source": "lint" if self.code.startswith("L_") else self.source,
        }


class RequestLoadError(SchedulerError):
    source = "load"


class InvalidInputError(SchedulerError):
    pass


class CycleDetectedError(SchedulerError):
    source = "schedule"
