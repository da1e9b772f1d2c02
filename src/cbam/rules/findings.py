"""Findings produced by the compliance rules and the result containers."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable, Mapping

SCORE_START = 100
PENALTY_CRITICAL = 25
PENALTY_WARNING = 10
PENALTY_INFO = 2


class Severity(str, Enum):
    """Finding severity; ``critical`` blocks submission."""

    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


@dataclass(slots=True, frozen=True)
class Finding:
    """Single rule outcome worth surfacing to a reviewer."""

    severity: Severity
    rule_id: str
    message: str
    citation: str | None = None
    field: str | None = None
    entity_id: str | None = None

    def as_payload(self) -> dict[str, Any]:
        return {
            "severity": self.severity.value,
            "rule_id": self.rule_id,
            "message": self.message,
            "citation": self.citation,
            "field": self.field,
            "entity_id": self.entity_id,
        }


def critical(rule_id: str, message: str, **kwargs: Any) -> Finding:
    return Finding(Severity.CRITICAL, rule_id, message, **kwargs)


def warning(rule_id: str, message: str, **kwargs: Any) -> Finding:
    return Finding(Severity.WARNING, rule_id, message, **kwargs)


def info(rule_id: str, message: str, **kwargs: Any) -> Finding:
    return Finding(Severity.INFO, rule_id, message, **kwargs)


def compliance_score(errors: int, warnings: int, infos: int) -> int:
    """Linear penalty score, floored at zero."""

    score = SCORE_START
    score -= errors * PENALTY_CRITICAL
    score -= warnings * PENALTY_WARNING
    score -= infos * PENALTY_INFO
    return max(0, score)


def partition(findings: Iterable[Finding]) -> tuple[list[Finding], list[Finding], list[Finding]]:
    """Split findings into (errors, warnings, info), preserving order."""

    errors: list[Finding] = []
    warnings: list[Finding] = []
    infos: list[Finding] = []
    for item in findings:
        if item.severity is Severity.CRITICAL:
            errors.append(item)
        elif item.severity is Severity.WARNING:
            warnings.append(item)
        else:
            infos.append(item)
    return errors, warnings, infos


@dataclass(slots=True)
class EntryValidationResult:
    """Outcome of evaluating one emission entry."""

    errors: list[Finding]
    warnings: list[Finding]
    info: list[Finding]
    entity_id: str | None = None

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def score(self) -> int:
        return compliance_score(len(self.errors), len(self.warnings), len(self.info))

    @property
    def findings(self) -> list[Finding]:
        return [*self.errors, *self.warnings, *self.info]

    def as_payload(self) -> dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "is_valid": self.is_valid,
            "score": self.score,
            "errors": [item.as_payload() for item in self.errors],
            "warnings": [item.as_payload() for item in self.warnings],
            "info": [item.as_payload() for item in self.info],
        }


@dataclass(slots=True)
class ReportValidationResult:
    """Outcome of evaluating a report together with its linked entries."""

    errors: list[Finding]
    warnings: list[Finding]
    info: list[Finding]
    entry_error_count: int
    entry_warning_count: int
    entry_results: Mapping[str, EntryValidationResult] = field(default_factory=dict)
    entity_id: str | None = None

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def ready_for_submission(self) -> bool:
        return not self.errors and self.entry_error_count == 0

    def as_payload(self) -> dict[str, Any]:
        return {
            "entity_id": self.entity_id,
            "is_valid": self.is_valid,
            "ready_for_submission": self.ready_for_submission,
            "errors": [item.as_payload() for item in self.errors],
            "warnings": [item.as_payload() for item in self.warnings],
            "info": [item.as_payload() for item in self.info],
            "entry_error_count": self.entry_error_count,
            "entry_warning_count": self.entry_warning_count,
            "entries": {key: result.as_payload() for key, result in self.entry_results.items()},
        }


__all__ = [
    "EntryValidationResult",
    "Finding",
    "PENALTY_CRITICAL",
    "PENALTY_INFO",
    "PENALTY_WARNING",
    "ReportValidationResult",
    "SCORE_START",
    "Severity",
    "compliance_score",
    "critical",
    "info",
    "partition",
    "warning",
]
