"""Default values with mark-up and the materiality assessment."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from src.cbam.domain.entities import EmissionEntry, coerce_entry
from src.cbam.rules.findings import Finding, warning
from src.cbam.schedule.pack import ScheduleConfig


def mark_up_percent(year: int, schedule: ScheduleConfig) -> float:
    """Scheduled mark-up for ``year``; later years keep the last scheduled value."""

    scheduled = schedule.mark_up_for(year)
    if scheduled is not None:
        return scheduled
    years = sorted(schedule.mark_up_by_year)
    return schedule.mark_up_by_year[years[-1] if year > years[-1] else years[0]]


def default_value_with_markup(base_value: float, year: int, schedule: ScheduleConfig) -> float:
    return base_value * (1 + mark_up_percent(year, schedule) / 100.0)


def declared_base_value(entry: EmissionEntry | Mapping[str, Any], schedule: ScheduleConfig) -> float | None:
    """Strip the mark-up back out of the entry's declared ``default_value_with_markup``.

    The applied mark-up is used when declared, otherwise the scheduled one.
    """

    snapshot = coerce_entry(entry)
    declared = snapshot.default_value_with_markup
    if not declared:
        return None
    percent = snapshot.mark_up_percentage_applied
    if percent is None:
        year = snapshot.reporting_period_year or schedule.min_reporting_year
        percent = mark_up_percent(year, schedule)
    factor = 1 + percent / 100.0
    if factor <= 0:
        return None
    return declared / factor


@dataclass(frozen=True)
class MaterialityResult:
    variance_percent: float
    threshold_percent: float
    reported: float
    benchmark: float
    findings: tuple[Finding, ...] = ()

    @property
    def exceeds_threshold(self) -> bool:
        return self.variance_percent > self.threshold_percent


def assess_materiality(
    entry: EmissionEntry | Mapping[str, Any],
    default_value: float | None,
    schedule: ScheduleConfig,
) -> MaterialityResult | None:
    """Compare reported emissions with ``default_value`` x quantity.

    Returns ``None`` when the entry has no reported emissions. A missing or
    zero default value yields a result with a warning instead of a variance.
    """

    snapshot = coerce_entry(entry)
    reported = snapshot.total_embedded_emissions
    if not reported:
        return None

    threshold = schedule.materiality_threshold_percent
    benchmark = (default_value or 0.0) * (snapshot.quantity or 1.0)
    if benchmark <= 0:
        return MaterialityResult(
            variance_percent=0.0,
            threshold_percent=threshold,
            reported=reported,
            benchmark=0.0,
            findings=(
                warning(
                    "entry.materiality",
                    "No benchmark available for materiality assessment",
                    citation="C(2025) 8150",
                    field="benchmark",
                    entity_id=snapshot.id,
                ),
            ),
        )

    variance = abs(reported - benchmark) / benchmark * 100.0
    findings: tuple[Finding, ...] = ()
    if variance > threshold:
        findings = (
            warning(
                "entry.materiality",
                f"Variance {variance:.1f}% exceeds {threshold:g}% materiality threshold "
                "- documentation required",
                citation="C(2025) 8150",
                field="total_embedded_emissions",
                entity_id=snapshot.id,
            ),
        )
    return MaterialityResult(
        variance_percent=round(variance, 2),
        threshold_percent=threshold,
        reported=reported,
        benchmark=benchmark,
        findings=findings,
    )


__all__ = [
    "MaterialityResult",
    "assess_materiality",
    "declared_base_value",
    "default_value_with_markup",
    "mark_up_percent",
]
