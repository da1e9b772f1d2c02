"""Convenience helpers for loading the default regulatory schedule."""

from __future__ import annotations

import functools
import logging
import pathlib
from typing import Any, Mapping

from src.cbam.schedule.pack import ScheduleConfig, load_schedule
from src.cbam.settings import get_settings

logger = logging.getLogger(__name__)

_PROJECT_ROOT = pathlib.Path(__file__).resolve().parents[3]
DEFAULT_SCHEDULE_PATH = _PROJECT_ROOT / "data" / "schedules" / "cbam_default.yaml"


def _resolve(path: str | pathlib.Path) -> pathlib.Path:
    candidate = pathlib.Path(path)
    if candidate.is_absolute():
        return candidate
    return _PROJECT_ROOT / candidate


@functools.lru_cache(maxsize=1)
def load_default_schedule(
    source: str | pathlib.Path | None = None,
) -> ScheduleConfig:
    """Load the configured schedule, optionally overriding the source path."""

    configured = get_settings().schedule_path
    target = _resolve(source or configured) if (source or configured) else DEFAULT_SCHEDULE_PATH
    schedule = load_schedule(target)
    logger.info("Loaded schedule %s (version %s) from %s", schedule.id, schedule.version, target)
    return schedule


def resolve_schedule(
    schedule: ScheduleConfig | Mapping[str, Any] | None = None,
) -> ScheduleConfig:
    """Return ``schedule`` as a :class:`ScheduleConfig`, defaulting to the configured one."""

    if schedule is None:
        return load_default_schedule()
    if isinstance(schedule, ScheduleConfig):
        return schedule
    return load_schedule(schedule)


__all__ = ["DEFAULT_SCHEDULE_PATH", "load_default_schedule", "resolve_schedule"]
