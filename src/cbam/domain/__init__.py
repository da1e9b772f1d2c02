"""Entity snapshots consumed by the rule engine."""

from .entities import (
    ACTUAL_VALUES,
    COMBINED,
    DEFAULT_VALUES,
    ComplianceReport,
    EmissionEntry,
    Precursor,
    coerce_entry,
    coerce_report,
)

__all__ = [
    "ACTUAL_VALUES",
    "COMBINED",
    "ComplianceReport",
    "DEFAULT_VALUES",
    "EmissionEntry",
    "Precursor",
    "coerce_entry",
    "coerce_report",
]
