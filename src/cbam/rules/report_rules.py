"""Checks applied once per CBAM report, independent of the entry checks."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Callable, Iterable, Iterator, Sequence

from src.cbam.domain.entities import ComplianceReport, EmissionEntry
from src.cbam.rules.findings import Finding, critical, info, warning
from src.cbam.schedule.pack import ScheduleConfig

REQUIRED_LANGUAGE = "English"


@dataclass(frozen=True)
class ReportContext:
    schedule: ScheduleConfig
    entries: Sequence[EmissionEntry]


@dataclass(frozen=True)
class ReportRule:
    id: str
    title: str
    check: Callable[[ComplianceReport, ReportContext], Iterable[Finding]]


def check_reporting_year(report: ComplianceReport, ctx: ReportContext) -> Iterator[Finding]:
    minimum = ctx.schedule.min_reporting_year
    if report.reporting_year is None or report.reporting_year < minimum:
        yield critical(
            "report.reporting_year",
            f"Reporting year must be {minimum} or later (calendar year)",
            citation="C(2025) 8151 Art. 7 - Reporting period",
            field="reporting_year",
        )


def check_language(report: ComplianceReport, ctx: ReportContext) -> Iterator[Finding]:
    if report.language and report.language != REQUIRED_LANGUAGE:
        yield critical(
            "report.language",
            f"Reports must be submitted in {REQUIRED_LANGUAGE} (got {report.language})",
            citation="C(2025) 8151 Art. 5(6), 10(4) - Language requirement",
            field="language",
        )


def check_cbam_factor(report: ComplianceReport, ctx: ReportContext) -> Iterator[Finding]:
    expected = ctx.schedule.cbam_factor_for(report.reporting_year)
    declared = report.cbam_factor_applied
    if expected is None or not declared:
        return
    if abs(declared - expected) > ctx.schedule.cbam_factor_tolerance:
        yield warning(
            "report.cbam_factor",
            f"CBAM factor for {report.reporting_year} should be {expected * 100:g}% "
            f"(declared {declared * 100:g}%)",
            citation="Free Allocation Regulation - Phase-in schedule",
            field="cbam_factor_applied",
        )


def check_certificate_pricing(report: ComplianceReport, ctx: ReportContext) -> Iterator[Finding]:
    if report.reporting_year in ctx.schedule.quarterly_pricing_years and not report.certificate_price_avg:
        yield info(
            "report.certificate_pricing",
            f"{report.reporting_year} uses quarterly certificate pricing; "
            "later years use weekly pricing",
            citation="C(2025) 8560 Art. 1 & 5",
            field="certificate_price_avg",
        )


def check_has_entries(report: ComplianceReport, ctx: ReportContext) -> Iterator[Finding]:
    if not ctx.entries:
        yield critical(
            "report.entries_present",
            "Report contains no emission entries",
            citation="Art. 35.1 - Information requirements",
            field="entries",
        )


def required_certificates(report: ComplianceReport, entries: Sequence[EmissionEntry]) -> int:
    """Certificates owed for the report, rounded up to whole certificates."""

    if report.certificates_required is not None:
        return math.ceil(report.certificates_required)
    if report.total_emissions is not None:
        return math.ceil(report.total_emissions)
    return math.ceil(sum(entry.total_embedded_emissions or 0.0 for entry in entries))


def check_certificate_balance(report: ComplianceReport, ctx: ReportContext) -> Iterator[Finding]:
    surrendered = report.certificates_surrendered
    if surrendered is None:
        return
    required = required_certificates(report, ctx.entries)
    if surrendered < required:
        yield warning(
            "report.certificate_balance",
            f"Insufficient certificates surrendered ({surrendered:g}/{required})",
            citation="Art. 31 - Certificate surrender requirement",
            field="certificates_surrendered",
        )


def check_submission_deadline(report: ComplianceReport, ctx: ReportContext) -> Iterator[Finding]:
    if report.submission_date is None:
        return
    deadline = ctx.schedule.deadline_for(report.period, report.period_year)
    if deadline is not None and report.submission_date > deadline:
        yield warning(
            "report.submission_deadline",
            f"Submission after deadline ({deadline.isoformat()}) - penalties may apply",
            citation="Art. 35.3 - Reporting deadlines",
            field="submission_date",
        )


REPORT_RULES: tuple[ReportRule, ...] = (
    ReportRule("report.reporting_year", "Reporting year", check_reporting_year),
    ReportRule("report.language", "Submission language", check_language),
    ReportRule("report.cbam_factor", "CBAM factor phase-in", check_cbam_factor),
    ReportRule("report.certificate_pricing", "Certificate pricing cadence", check_certificate_pricing),
    ReportRule("report.entries_present", "Linked entries", check_has_entries),
    ReportRule("report.certificate_balance", "Certificate balance", check_certificate_balance),
    ReportRule("report.submission_deadline", "Submission deadline", check_submission_deadline),
)


__all__ = ["REPORT_RULES", "REQUIRED_LANGUAGE", "ReportContext", "ReportRule", "required_certificates"]
