"""Schedule lookup shared by the API routes."""

from __future__ import annotations

import logging

from fastapi import HTTPException

from src.cbam.schedule.defaults import load_default_schedule
from src.cbam.schedule.pack import ScheduleConfig

logger = logging.getLogger(__name__)


def active_schedule() -> ScheduleConfig:
    """Return the configured schedule or answer 503 when it cannot be loaded."""

    try:
        return load_default_schedule()
    except FileNotFoundError as exc:
        logger.error("Schedule file missing: %s", exc)
        raise HTTPException(status_code=503, detail="Regulatory schedule unavailable") from exc
    except ValueError as exc:
        logger.error("Schedule is invalid: %s", exc)
        raise HTTPException(status_code=503, detail="Regulatory schedule is invalid") from exc


__all__ = ["active_schedule"]
