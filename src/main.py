"""Entrypoint for the CBAM validation service (``uvicorn src.main:app``)."""

from __future__ import annotations

from src.cbam.api.main import app, health

__all__ = ["app", "health"]
