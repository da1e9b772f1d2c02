"""Emission and certificate calculations supporting the rules."""

from .defaults import (
    MaterialityResult,
    assess_materiality,
    declared_base_value,
    default_value_with_markup,
    mark_up_percent,
)
from .free_allocation import (
    Benchmark,
    FreeAllocationResult,
    calculate_free_allocation,
    find_benchmark,
)

__all__ = [
    "Benchmark",
    "FreeAllocationResult",
    "MaterialityResult",
    "assess_materiality",
    "calculate_free_allocation",
    "declared_base_value",
    "default_value_with_markup",
    "find_benchmark",
    "mark_up_percent",
]
