"""Evaluation engine that applies the compliance rules to entries and reports."""

from __future__ import annotations

import logging
from datetime import date
from typing import Any, Collection, Iterable, Iterator, Mapping, Sequence

from src.cbam.domain.entities import (
    ComplianceReport,
    EmissionEntry,
    coerce_entry,
    coerce_report,
)
from src.cbam.rules.entry_rules import ENTRY_RULES, EntryContext, EntryRule
from src.cbam.rules.findings import (
    EntryValidationResult,
    Finding,
    ReportValidationResult,
    critical,
    partition,
    warning,
)
from src.cbam.rules.report_rules import REPORT_RULES, ReportContext, ReportRule
from src.cbam.schedule.pack import ScheduleConfig

logger = logging.getLogger(__name__)

EntryLike = EmissionEntry | Mapping[str, Any]
ReportLike = ComplianceReport | Mapping[str, Any]


def _selected(
    rules: Iterable[EntryRule | ReportRule],
    schedule: ScheduleConfig,
    rule_ids: Collection[str] | None,
) -> Iterator[EntryRule | ReportRule]:
    for rule in rules:
        if rule.id in schedule.disabled_rules:
            continue
        if rule_ids is not None and rule.id not in rule_ids:
            continue
        yield rule


def _run(rule: EntryRule | ReportRule, subject: Any, ctx: Any, entity_id: str | None) -> list[Finding]:
    try:
        findings = list(rule.check(subject, ctx))
    except Exception as exc:  # a broken check must not hide the others
        logger.exception("Rule %s failed for %s", rule.id, entity_id or "<unidentified>")
        return [
            critical(
                "engine.rule_failure",
                f"Rule '{rule.id}' could not be evaluated: {exc}",
                citation=rule.title,
                entity_id=entity_id,
            )
        ]
    if entity_id is None:
        return findings
    return [_with_entity(item, entity_id) for item in findings]


def _with_entity(item: Finding, entity_id: str) -> Finding:
    if item.entity_id is not None:
        return item
    return Finding(
        severity=item.severity,
        rule_id=item.rule_id,
        message=item.message,
        citation=item.citation,
        field=item.field,
        entity_id=entity_id,
    )


def evaluate_entry(
    entry: EntryLike | None,
    schedule: ScheduleConfig,
    *,
    rule_ids: Collection[str] | None = None,
    as_of: date | None = None,
) -> EntryValidationResult:
    """Evaluate one emission entry against the schedule.

    ``rule_ids`` restricts evaluation to the named rules; rules listed in the
    schedule's ``disabled_rules`` never run. ``as_of`` anchors the recency
    checks and defaults to today.
    """

    snapshot = coerce_entry(entry)
    ctx = EntryContext(
        schedule=schedule,
        as_of=as_of or date.today(),
        category=snapshot.goods_category or schedule.category_for_cn(snapshot.cn_code),
    )

    collected: list[Finding] = []
    for rule in _selected(ENTRY_RULES, schedule, rule_ids):
        collected.extend(_run(rule, snapshot, ctx, snapshot.id))

    errors, warnings, infos = partition(collected)
    result = EntryValidationResult(errors=errors, warnings=warnings, info=infos, entity_id=snapshot.id)
    logger.debug(
        "Entry %s evaluated: %d errors, %d warnings, %d info (score %d)",
        snapshot.id,
        len(errors),
        len(warnings),
        len(infos),
        result.score,
    )
    return result


def entry_key(entry: EmissionEntry, index: int) -> str:
    return entry.id or f"#{index}"


def evaluate_report(
    report: ReportLike | None,
    entries: Sequence[EntryLike] | None,
    schedule: ScheduleConfig,
    *,
    rule_ids: Collection[str] | None = None,
    as_of: date | None = None,
) -> ReportValidationResult:
    """Evaluate a report and its resolved entries.

    Entry issues are folded into the report as two rolled-up findings; the
    per-entry results are kept on the returned object for drill-down.
    ``rule_ids`` applies to the report rules only.
    """

    snapshot = coerce_report(report)
    linked = [coerce_entry(item) for item in (entries or ())]
    ctx = ReportContext(schedule=schedule, entries=linked)

    collected: list[Finding] = []
    for rule in _selected(REPORT_RULES, schedule, rule_ids):
        collected.extend(_run(rule, snapshot, ctx, snapshot.id))

    entry_results: dict[str, EntryValidationResult] = {}
    entry_errors = 0
    entry_warnings = 0
    for index, entry in enumerate(linked):
        outcome = evaluate_entry(entry, schedule, as_of=as_of)
        key = entry_key(entry, index)
        entry_results[f"{key}#{index}" if key in entry_results else key] = outcome
        entry_errors += len(outcome.errors)
        entry_warnings += len(outcome.warnings)

    if entry_errors:
        collected.append(
            critical(
                "report.entries",
                f"{entry_errors} critical validation errors found in emission entries",
                citation="Data quality requirements",
                field="entries",
                entity_id=snapshot.id,
            )
        )
    if entry_warnings:
        collected.append(
            warning(
                "report.entries",
                f"{entry_warnings} warnings found in emission entries - review recommended",
                citation="Data quality recommendations",
                field="entries",
                entity_id=snapshot.id,
            )
        )

    errors, warnings, infos = partition(collected)
    result = ReportValidationResult(
        errors=errors,
        warnings=warnings,
        info=infos,
        entry_error_count=entry_errors,
        entry_warning_count=entry_warnings,
        entry_results=entry_results,
        entity_id=snapshot.id,
    )
    logger.debug(
        "Report %s evaluated: %d errors, %d warnings across %d entries (ready=%s)",
        snapshot.id,
        len(errors),
        len(warnings),
        len(linked),
        result.ready_for_submission,
    )
    return result


def rule_catalogue() -> list[dict[str, str]]:
    """Identifiers and titles of every registered rule, entry rules first."""

    return [
        {"id": rule.id, "title": rule.title, "scope": scope}
        for scope, rules in (("entry", ENTRY_RULES), ("report", REPORT_RULES))
        for rule in rules
    ]


__all__ = ["entry_key", "evaluate_entry", "evaluate_report", "rule_catalogue"]
