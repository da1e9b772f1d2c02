"""Regulatory schedule loading utilities."""

from .pack import Deadline, EmissionsRange, ScheduleConfig, load_schedule
from .defaults import DEFAULT_SCHEDULE_PATH, load_default_schedule, resolve_schedule

__all__ = [
    "DEFAULT_SCHEDULE_PATH",
    "Deadline",
    "EmissionsRange",
    "ScheduleConfig",
    "load_default_schedule",
    "load_schedule",
    "resolve_schedule",
]
