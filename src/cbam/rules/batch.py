"""Batch evaluation helpers producing tabular findings."""

from __future__ import annotations

from datetime import date
from typing import Any, Mapping, Sequence

import pandas as pd

from src.cbam.domain.entities import coerce_entry
from src.cbam.rules.engine import EntryLike, entry_key, evaluate_entry
from src.cbam.rules.findings import EntryValidationResult
from src.cbam.schedule.pack import ScheduleConfig

FINDING_COLUMNS = ["entry_id", "severity", "rule_id", "field", "message", "citation"]


def evaluate_entries(
    entries: Sequence[EntryLike],
    schedule: ScheduleConfig,
    *,
    as_of: date | None = None,
) -> dict[str, EntryValidationResult]:
    """Evaluate each entry, keyed by entry id (or ``#<index>`` when missing)."""

    results: dict[str, EntryValidationResult] = {}
    for index, raw in enumerate(entries):
        entry = coerce_entry(raw)
        key = entry_key(entry, index)
        if key in results:
            key = f"{key}#{index}"
        results[key] = evaluate_entry(entry, schedule, as_of=as_of)
    return results


def findings_frame(results: Mapping[str, EntryValidationResult]) -> pd.DataFrame:
    """Flatten per-entry findings into one row per finding."""

    rows = [
        {
            "entry_id": key,
            "severity": item.severity.value,
            "rule_id": item.rule_id,
            "field": item.field,
            "message": item.message,
            "citation": item.citation,
        }
        for key, result in results.items()
        for item in result.findings
    ]
    return pd.DataFrame(rows, columns=FINDING_COLUMNS)


def scores_frame(results: Mapping[str, EntryValidationResult]) -> pd.DataFrame:
    """One row per entry with finding counts and score."""

    frame = pd.DataFrame(
        [
            {
                "entry_id": key,
                "is_valid": result.is_valid,
                "errors": len(result.errors),
                "warnings": len(result.warnings),
                "info": len(result.info),
                "score": result.score,
            }
            for key, result in results.items()
        ],
        columns=["entry_id", "is_valid", "errors", "warnings", "info", "score"],
    )
    return frame.set_index("entry_id")


def readiness_summary(results: Mapping[str, EntryValidationResult]) -> dict[str, Any]:
    """Summarise whether a set of entries can go into a report."""

    scores = scores_frame(results)
    total = int(len(scores))
    validated = int(scores["is_valid"].sum()) if total else 0
    blocked = scores.index[~scores["is_valid"].astype(bool)].tolist() if total else []
    return {
        "total_entries": total,
        "validated": validated,
        "blocked": len(blocked),
        "blocking_entries": blocked,
        "ready_for_reporting": total > 0 and not blocked,
        "compliance_rate": round(validated / total * 100, 1) if total else 0.0,
        "average_score": round(float(scores["score"].mean()), 1) if total else 0.0,
    }


__all__ = [
    "FINDING_COLUMNS",
    "evaluate_entries",
    "findings_frame",
    "readiness_summary",
    "scores_frame",
]
