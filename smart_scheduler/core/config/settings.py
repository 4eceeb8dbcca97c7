from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Literal

import yaml


DuplicateTitlePolicy = Literal["reject", "collapse"]

ENV_CONFIG_PATH = "SMART_SCHEDULER_CONFIG"

ALLOWED_DUPLICATE_POLICIES: set[str] = {"reject", "collapse"}


@dataclass(frozen=True)
class SchedulerSettings:
    duplicate_titles: DuplicateTitlePolicy = "reject"
    min_hours: int = 1
    max_hours: int = 1000


DEFAULT_SETTINGS = SchedulerSettings()


class SettingsError(ValueError):
    pass


def load_settings_file(path: str | Path) -> dict[str, Any]:
    """Load settings overrides from a YAML file.

    Format:
      duplicate_titles: reject|collapse
      min_hours: 1
      max_hours: 1000

    Returns only the keys present in the file, type-checked.
    """
    p = Path(path)
    raw = yaml.safe_load(p.read_text(encoding="utf-8"))
    if raw is None:
        return {}
    if not isinstance(raw, dict):
        raise SettingsError("settings file must be a mapping")

    out: dict[str, Any] = {}
    for k, v in raw.items():
        if k == "duplicate_titles":
            if not isinstance(v, str) or v not in ALLOWED_DUPLICATE_POLICIES:
                raise SettingsError(
                    f"duplicate_titles must be one of {sorted(ALLOWED_DUPLICATE_POLICIES)}"
                )
            out[k] = v
        elif k in ("min_hours", "max_hours"):
            if isinstance(v, bool) or not isinstance(v, int) or v < 1:
                raise SettingsError(f"{k} must be a positive integer")
            out[k] = v
        else:
            raise SettingsError(f"unknown setting: {k}")
    return out


def merged_settings(overrides: dict[str, Any] | None = None) -> SchedulerSettings:
    """Return DEFAULT_SETTINGS with overrides applied."""
    settings = replace(DEFAULT_SETTINGS, **(overrides or {}))
    if settings.min_hours > settings.max_hours:
        raise SettingsError("min_hours must not exceed max_hours")
    return settings


def load_settings(path: str | None = None) -> SchedulerSettings:
    path = path or os.getenv(ENV_CONFIG_PATH)
    if not path:
        return merged_settings()
    return merged_settings(load_settings_file(path))
