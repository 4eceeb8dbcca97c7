from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from smart_scheduler.core.errors import RequestLoadError


# ScheduleRequest wire payloads use camelCase; YAML written by hand usually
# uses snake_case. Everything past the loader sees snake_case.
WIRE_KEYS: dict[str, str] = {
    "estimatedHours": "estimated_hours",
    "dueDate": "due_date",
}

SUPPORTED_SUFFIXES: dict[str, str] = {
    ".yaml": "yaml",
    ".yml": "yaml",
    ".json": "json",
}


def normalize_task(raw: Any) -> Any:
    """Return a copy of a raw task mapping with wire keys renamed.

    Non-mappings pass through untouched for the parser to report. When both
    spellings are present the snake_case value wins.
    """
    if not isinstance(raw, dict):
        return raw
    out = dict(raw)
    for wire, name in WIRE_KEYS.items():
        if wire in out:
            value = out.pop(wire)
            out.setdefault(name, value)
    return out


def normalize_request(data: dict[str, Any]) -> dict[str, Any]:
    tasks = data.get("tasks")
    if isinstance(tasks, list):
        tasks = [normalize_task(t) for t in tasks]
    return {"tasks": tasks}


def load_request(path: str) -> dict[str, Any]:
    """Read a schedule request file and normalise its task keys.

    Returns {"tasks": ..., "__file__": ...}. Values are not coerced; shape
    checks belong to parse_request, so a malformed `tasks` is passed along.
    """

    p = Path(path)
    if not p.is_file():
        raise RequestLoadError(code="E_FILE_NOT_FOUND", message="file does not exist", file=str(p))

    kind = SUPPORTED_SUFFIXES.get(p.suffix.lower())
    if kind is None:
        raise RequestLoadError(
            code="E_UNSUPPORTED_FORMAT",
            message=f"supported formats are {', '.join(sorted(SUPPORTED_SUFFIXES))}",
            file=str(p),
        )

    try:
        raw_text = p.read_text(encoding="utf-8")
    except OSError as e:  # pragma: no cover
        raise RequestLoadError(code="E_FILE_READ", message=str(e), file=str(p)) from e

    try:
        data = yaml.safe_load(raw_text) if kind == "yaml" else json.loads(raw_text)
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise RequestLoadError(code=f"E_{kind.upper()}_PARSE", message=str(e), file=str(p)) from e

    if not isinstance(data, dict):
        raise RequestLoadError(
            code="E_INVALID_TOP_LEVEL",
            message="top-level document must be a mapping/object",
            file=str(p),
        )

    request = normalize_request(data)
    request["__file__"] = str(p)
    return request
