"""Utility helpers for the compliance engine."""

from .coerce import as_bool, as_date, as_float, as_int, as_str, as_tuple
from .units import (
    FUNCTIONAL_UNITS,
    convert_value,
    is_compatible,
    resolve_unit,
    ureg,
)

__all__ = [
    "FUNCTIONAL_UNITS",
    "as_bool",
    "as_date",
    "as_float",
    "as_int",
    "as_str",
    "as_tuple",
    "convert_value",
    "is_compatible",
    "resolve_unit",
    "ureg",
]
