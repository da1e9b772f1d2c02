"""Precursor chain coherence for complex goods.

A precursor's reporting year defaults to the complex good's year. A different
year is only acceptable with a recorded deviation carrying a justification and
evidence; until that deviation is approved it stays a warning.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping

from src.cbam.domain.entities import EmissionEntry, Precursor, coerce_entry
from src.cbam.rules.findings import Finding, Severity, critical, info, partition, warning
from src.cbam.utils.coerce import as_int, as_str

MIN_JUSTIFICATION_LENGTH = 20
APPROVED = "approved"
PENDING = "pending_approval"
_CITATION = "CBAM Art. 14(2) & C(2025) 8151 Art. 13-15"


@dataclass(frozen=True)
class PrecursorYearDeviation:
    """Recorded request to report a precursor under a different year."""

    precursor_cn_code: str | None
    precursor_year: int | None
    justification: str | None = None
    evidence_reference: str | None = None
    status: str = PENDING
    approved_by: str | None = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "PrecursorYearDeviation":
        return cls(
            precursor_cn_code=as_str(payload.get("precursor_cn_code")),
            precursor_year=as_int(payload.get("precursor_year")),
            justification=as_str(payload.get("justification")),
            evidence_reference=as_str(payload.get("evidence_reference")),
            status=as_str(payload.get("status")) or PENDING,
            approved_by=as_str(payload.get("approved_by")),
        )

    def validate(self) -> list[Finding]:
        """Check the request is complete enough to be reviewed."""

        problems: list[Finding] = []
        if len(self.justification or "") < MIN_JUSTIFICATION_LENGTH:
            problems.append(
                critical(
                    "precursor.deviation_justification",
                    f"Justification must be at least {MIN_JUSTIFICATION_LENGTH} characters",
                    citation=_CITATION,
                    field="justification",
                )
            )
        if not self.evidence_reference:
            problems.append(
                critical(
                    "precursor.deviation_evidence",
                    "Evidence reference (document/certificate) required",
                    citation=_CITATION,
                    field="evidence_reference",
                )
            )
        return problems


@dataclass(slots=True)
class PrecursorChainResult:
    """Outcome of the precursor chain check for one entry."""

    required: bool
    findings: list[Finding] = field(default_factory=list)

    @property
    def blocking_count(self) -> int:
        return sum(1 for item in self.findings if item.severity is Severity.CRITICAL)

    @property
    def warning_count(self) -> int:
        return sum(1 for item in self.findings if item.severity is Severity.WARNING)

    @property
    def complete(self) -> bool:
        return self.blocking_count == 0


def _find_deviation(
    precursor: Precursor,
    deviations: Iterable[PrecursorYearDeviation],
) -> PrecursorYearDeviation | None:
    for deviation in deviations:
        if (
            deviation.precursor_cn_code == precursor.precursor_cn_code
            and deviation.precursor_year == precursor.reporting_period_year
        ):
            return deviation
    return None


def _year_findings(
    entry: EmissionEntry,
    precursor: Precursor,
    index: int,
    deviations: list[PrecursorYearDeviation],
) -> list[Finding]:
    slot = f"precursors_used[{index}].reporting_period_year"
    label = precursor.precursor_cn_code or f"#{index}"
    own_year = precursor.reporting_period_year
    parent_year = entry.reporting_period_year

    if own_year is None:
        return [
            critical(
                "precursor.year_missing",
                f"Precursor {label} has no reporting year",
                citation="C(2025) 8151 Art. 14(2)",
                field=slot,
                entity_id=entry.id,
            )
        ]
    if own_year == parent_year:
        return []

    deviation = _find_deviation(precursor, deviations)
    if deviation is None:
        return [
            critical(
                "precursor.year_mismatch",
                f"Year mismatch: precursor {own_year} vs complex good {parent_year}. "
                "Justification and evidence required.",
                citation=_CITATION,
                field=slot,
                entity_id=entry.id,
            )
        ]
    if deviation.status != APPROVED:
        return [
            warning(
                "precursor.year_mismatch",
                f"Year mismatch justified but pending review: {deviation.justification}",
                citation=_CITATION,
                field=slot,
                entity_id=entry.id,
            )
        ]
    return [
        info(
            "precursor.year_mismatch",
            f"Year mismatch approved with evidence: {deviation.justification}",
            citation=_CITATION,
            field=slot,
            entity_id=entry.id,
        )
    ]


def evaluate_precursor_chain(
    entry: EmissionEntry | Mapping[str, Any] | None,
    deviations: Iterable[PrecursorYearDeviation | Mapping[str, Any]] = (),
) -> PrecursorChainResult:
    """Check year alignment, installation traceability and emission data of precursors."""

    snapshot = coerce_entry(entry)
    if not snapshot.precursors_used:
        return PrecursorChainResult(required=False)

    known = [
        item if isinstance(item, PrecursorYearDeviation) else PrecursorYearDeviation.from_mapping(item)
        for item in deviations
    ]

    findings: list[Finding] = []
    for index, precursor in enumerate(snapshot.precursors_used):
        label = precursor.precursor_cn_code or f"#{index}"
        findings.extend(_year_findings(snapshot, precursor, index, known))

        if not precursor.production_installation_id:
            findings.append(
                warning(
                    "precursor.installation",
                    f"Precursor {label} is missing an installation reference",
                    citation="C(2025) 8151 Art. 14(3)",
                    field=f"precursors_used[{index}].production_installation_id",
                    entity_id=snapshot.id,
                )
            )
        if precursor.emissions_embedded is None and precursor.emissions_intensity_factor is None:
            findings.append(
                critical(
                    "precursor.emissions",
                    f"Precursor {label} is missing emission data",
                    citation="C(2025) 8151 Art. 13",
                    field=f"precursors_used[{index}].emissions_embedded",
                    entity_id=snapshot.id,
                )
            )

    errors, warnings, infos = partition(findings)
    return PrecursorChainResult(required=True, findings=[*errors, *warnings, *infos])


__all__ = [
    "APPROVED",
    "MIN_JUSTIFICATION_LENGTH",
    "PENDING",
    "PrecursorChainResult",
    "PrecursorYearDeviation",
    "evaluate_precursor_chain",
]
