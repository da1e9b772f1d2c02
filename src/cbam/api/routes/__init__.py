"""API routers."""

from .calculation import router as calculation_router
from .validation import router as validation_router

__all__ = ["calculation_router", "validation_router"]
