"""Functional-unit handling built on top of :mod:`pint`."""

from __future__ import annotations

from functools import lru_cache
from typing import Any

import pint

# Declared functional units -> pint expressions. Nitrogen content and clinker
# mass are plain masses once the declaration has fixed what is being weighed.
FUNCTIONAL_UNITS: dict[str, str] = {
    "tonnes": "tonne",
    "tonne": "tonne",
    "t": "tonne",
    "kg": "kilogram",
    "kg_nitrogen": "kilogram",
    "tonnes_clinker": "tonne",
    "kwh": "kilowatt_hour",
    "mwh": "megawatt_hour",
}


@lru_cache(maxsize=1)
def ureg() -> pint.UnitRegistry:
    """Return a process-wide :class:`~pint.UnitRegistry` instance."""

    return pint.UnitRegistry()


def resolve_unit(unit: str) -> str:
    """Map a declared functional unit onto a pint unit expression."""

    cleaned = unit.strip()
    return FUNCTIONAL_UNITS.get(cleaned.lower(), cleaned)


def to_quantity(value: Any, unit: str) -> pint.Quantity:
    """Create a :class:`~pint.Quantity` from ``value`` and a functional unit."""

    return float(value) * ureg()(resolve_unit(unit))


def convert_value(value: float, src_unit: str, dst_unit: str) -> float:
    """Convert ``value`` between two functional units.

    Raises :class:`pint.DimensionalityError` when the units measure different
    things (mass vs. energy) and :class:`pint.UndefinedUnitError` for unknown
    units.
    """

    quantity = to_quantity(value, src_unit)
    return float(quantity.to(resolve_unit(dst_unit)).magnitude)


def is_compatible(src_unit: str, dst_unit: str) -> bool | None:
    """Return whether two units share a dimension, ``None`` if either is unknown."""

    registry = ureg()
    try:
        src = registry(resolve_unit(src_unit)).dimensionality
        dst = registry(resolve_unit(dst_unit)).dimensionality
    except (
        pint.PintError,
        AttributeError,
        ValueError,
        SyntaxError,
        TypeError,
        ZeroDivisionError,
        OverflowError,
    ):
        return None
    return src == dst


__all__ = [
    "FUNCTIONAL_UNITS",
    "convert_value",
    "is_compatible",
    "resolve_unit",
    "to_quantity",
    "ureg",
]
