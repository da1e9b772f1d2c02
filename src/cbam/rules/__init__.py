"""Compliance rule engine for CBAM emission entries and reports."""

from __future__ import annotations

from .engine import evaluate_entry, evaluate_report, rule_catalogue
from .findings import (
    EntryValidationResult,
    Finding,
    ReportValidationResult,
    Severity,
    compliance_score,
)
from .precursors import PrecursorChainResult, PrecursorYearDeviation, evaluate_precursor_chain

__all__ = [
    "EntryValidationResult",
    "Finding",
    "PrecursorChainResult",
    "PrecursorYearDeviation",
    "ReportValidationResult",
    "Severity",
    "compliance_score",
    "evaluate_entry",
    "evaluate_precursor_chain",
    "evaluate_report",
    "rule_catalogue",
]
