"""Checks applied to a single CBAM emission entry.

Every check receives the entry snapshot and an :class:`EntryContext` and
yields findings. Checks never look at each other's output and must tolerate
any field being ``None``.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Callable, Iterable, Iterator

import pint

from src.cbam.domain.entities import ACTUAL_VALUES, COMBINED, DEFAULT_VALUES, EmissionEntry
from src.cbam.rules.findings import Finding, critical, info, warning
from src.cbam.schedule.pack import ScheduleConfig
from src.cbam.utils.units import convert_value, is_compatible

WEIGHTED_AVERAGE_ROUTE = "Weighted_average_all_routes"

# Reference units for specific emissions (tCO2e per tonne or per MWh).
_SPECIFIC_UNITS = ("tonnes", "MWh")


@dataclass(frozen=True)
class EntryContext:
    """Inputs shared by all entry checks for one evaluation."""

    schedule: ScheduleConfig
    as_of: date
    category: str | None


@dataclass(frozen=True)
class EntryRule:
    """Registered entry check."""

    id: str
    title: str
    check: Callable[[EmissionEntry, EntryContext], Iterable[Finding]]


def _fmt(value: float) -> str:
    return f"{value:g}"


def check_reporting_period(entry: EmissionEntry, ctx: EntryContext) -> Iterator[Finding]:
    minimum = ctx.schedule.min_reporting_year
    year = entry.reporting_period_year
    if year is None or year < minimum:
        yield critical(
            "entry.reporting_period",
            f"Reporting period must be calendar year {minimum} or later",
            citation=f"C(2025) 8151 Art. 7 - Cannot be before {minimum}",
            field="reporting_period_year",
        )


def check_cn_code(entry: EmissionEntry, ctx: EntryContext) -> Iterator[Finding]:
    length = ctx.schedule.cn_code_length
    code = entry.cn_code
    if not code:
        yield critical(
            "entry.cn_code",
            "CN code is required",
            citation="Reg 2023/956 Annex I",
            field="cn_code",
        )
    elif len(code) != length or not code.isdigit():
        yield critical(
            "entry.cn_code",
            f"CN code must be {length} digits per Reg 2023/956 Annex I (got '{code}')",
            citation="C(2025) 8151 Art. 4",
            field="cn_code",
        )


def check_functional_unit(entry: EmissionEntry, ctx: EntryContext) -> Iterator[Finding]:
    if not entry.functional_unit:
        yield critical(
            "entry.functional_unit",
            "Functional unit required (tonnes, kWh, kg_nitrogen, or tonnes_clinker)",
            citation="C(2025) 8151 Art. 4",
            field="functional_unit",
        )
    else:
        expected = ctx.schedule.functional_units.get(ctx.category or "")
        if expected and is_compatible(entry.functional_unit, expected) is False:
            yield warning(
                "entry.functional_unit",
                f"Functional unit '{entry.functional_unit}' does not measure the same "
                f"quantity as '{expected}' expected for {ctx.category}",
                citation="C(2025) 8151 Art. 4",
                field="functional_unit",
            )

    if entry.quantity is None or entry.quantity <= 0:
        yield critical(
            "entry.quantity",
            "Quantity (activity level) required per functional unit",
            citation="C(2025) 8151 Art. 1(2) - Activity level",
            field="quantity",
        )


def check_mark_up(entry: EmissionEntry, ctx: EntryContext) -> Iterator[Finding]:
    if entry.calculation_method != DEFAULT_VALUES:
        return
    expected = ctx.schedule.mark_up_for(entry.reporting_period_year)
    applied = entry.mark_up_percentage_applied
    if expected is not None and not applied:
        yield critical(
            "entry.mark_up",
            f"Default values MUST include {_fmt(expected)}% mark-up in {entry.reporting_period_year}",
            citation="C(2025) 8552 Art. 4-6 - Phased mark-up",
            field="mark_up_percentage_applied",
        )

    cap = ctx.schedule.mark_up_caps.get(ctx.category or "")
    if cap is not None and applied is not None and applied > cap:
        yield info(
            "entry.mark_up_cap",
            f"{ctx.category} may use a mark-up of at most {_fmt(cap)}% (applied {_fmt(applied)}%)",
            citation="C(2025) 8552 Art. 6",
            field="mark_up_percentage_applied",
        )


def check_weighted_route(entry: EmissionEntry, ctx: EntryContext) -> Iterator[Finding]:
    if entry.production_route == WEIGHTED_AVERAGE_ROUTE and len(entry.production_routes_included) < 2:
        yield warning(
            "entry.production_route_weighted",
            "Weighted average must encompass all routes within installation",
            citation="C(2025) 8151 Art. 4(6) - Single process for multiple routes",
            field="production_routes_included",
        )


def check_country_of_origin(entry: EmissionEntry, ctx: EntryContext) -> Iterator[Finding]:
    if not entry.country_of_origin:
        yield critical(
            "entry.country_of_origin",
            "Country of origin is mandatory",
            citation="Art. 6.2(b) - Origin declaration",
            field="country_of_origin",
        )


def check_installation(entry: EmissionEntry, ctx: EntryContext) -> Iterator[Finding]:
    if not entry.installation_id:
        yield warning(
            "entry.installation",
            "Installation not linked - required for definitive period",
            citation="Art. 7 - Installation identification",
            field="installation_id",
        )


def check_verification_materiality(entry: EmissionEntry, ctx: EntryContext) -> Iterator[Finding]:
    status = (entry.verification_status or "").lower()
    if "accredited" in status and not entry.materiality_assessment_5_percent:
        yield warning(
            "entry.verification_materiality",
            f"Verification must apply {_fmt(ctx.schedule.materiality_threshold_percent)}% "
            "materiality threshold per CN code",
            citation="C(2025) 8150 Art. 5 - Materiality levels",
            field="materiality_assessment_5_percent",
        )


def check_actual_values(entry: EmissionEntry, ctx: EntryContext) -> Iterator[Finding]:
    if entry.calculation_method != ACTUAL_VALUES:
        return
    if not entry.direct_emissions_specific:
        yield critical(
            "entry.actual_values",
            "Direct emissions required for actual values method",
            citation="C(2025) 8151 Chapter 2 - Actual values",
            field="direct_emissions_specific",
        )
    if not entry.monitoring_plan_id:
        yield critical(
            "entry.actual_values",
            "Monitoring plan required for actual values (must be in English)",
            citation="C(2025) 8151 Art. 5(5-6) - Monitoring plan requirement",
            field="monitoring_plan_id",
        )
    if not entry.operator_report_id:
        yield warning(
            "entry.actual_values",
            "Operator emission report recommended (must be in English)",
            citation="C(2025) 8151 Art. 10 - Operator's emissions report",
            field="operator_report_id",
        )
    if not entry.production_route:
        yield warning(
            "entry.actual_values",
            "Production route should be specified for actual data",
            citation="Section 5.2 - Production routes",
            field="production_route",
        )


def check_precursors(entry: EmissionEntry, ctx: EntryContext) -> Iterator[Finding]:
    for index, precursor in enumerate(entry.precursors_used):
        if precursor.reporting_period_year is None:
            yield info(
                "entry.precursors",
                "Precursor reporting period defaults to complex good year "
                "(can override with evidence)",
                citation="C(2025) 8151 Art. 13",
                field=f"precursors_used[{index}].reporting_period_year",
            )
        if entry.calculation_method == COMBINED and not precursor.value_type:
            yield warning(
                "entry.precursors",
                "Specify if precursor uses actual or default values",
                citation="C(2025) 8151 Art. 15 - Combined use",
                field=f"precursors_used[{index}].value_type",
            )


def check_default_values(entry: EmissionEntry, ctx: EntryContext) -> Iterator[Finding]:
    if entry.calculation_method != DEFAULT_VALUES:
        return
    if not entry.cbam_benchmark:
        yield critical(
            "entry.default_values",
            "CBAM benchmark value required for default calculation",
            citation="Annex - Default benchmark values",
            field="cbam_benchmark",
        )
    if entry.cbam_factor is None or entry.cbam_factor <= 0:
        yield warning(
            "entry.default_values",
            "CBAM factor missing - using default value of 1.0",
            citation="Art. 10a - CBAM Factor",
            field="cbam_factor",
        )


def check_carbon_price(entry: EmissionEntry, ctx: EntryContext) -> Iterator[Finding]:
    paid = entry.carbon_price_paid
    if paid is None or paid <= 0:
        return
    if not entry.carbon_price_country:
        yield warning(
            "entry.carbon_price",
            "Country where carbon price was paid should be specified",
            citation="Art. 9 - Carbon price documentation",
            field="carbon_price_country",
        )
    if not entry.carbon_price_proof_url:
        yield warning(
            "entry.carbon_price",
            "Proof of carbon price payment recommended",
            citation="Art. 9 - Verification requirements",
            field="carbon_price_proof_url",
        )
    limit = ctx.schedule.reference_ets_price * ctx.schedule.carbon_price_ratio_limit
    if paid > limit:
        yield warning(
            "entry.carbon_price",
            f"Carbon price (EUR {_fmt(paid)}) exceeds "
            f"{_fmt(ctx.schedule.carbon_price_ratio_limit * 100)}% of EU ETS price "
            f"(EUR {_fmt(ctx.schedule.reference_ets_price)}) - verify accuracy",
            citation="Art. 9.3 - Price verification",
            field="carbon_price_paid",
        )


def check_evidence(entry: EmissionEntry, ctx: EntryContext) -> Iterator[Finding]:
    if not entry.evidence_documents:
        yield info(
            "entry.evidence",
            "Supporting documentation recommended (customs declarations, emission verification)",
            citation="Art. 6.3 - Documentation requirements",
            field="evidence_documents",
        )


def check_validation_status(entry: EmissionEntry, ctx: EntryContext) -> Iterator[Finding]:
    if (entry.validation_status or "").lower() == "pending":
        yield info(
            "entry.validation_status",
            "Entry pending validation - automated or manual review recommended",
            citation="Internal QA process",
            field="validation_status",
        )


def check_free_allocation(entry: EmissionEntry, ctx: EntryContext) -> Iterator[Finding]:
    if entry.calculation_method == ACTUAL_VALUES and entry.sefa is None:
        yield warning(
            "entry.free_allocation",
            "SEFA (Specific Embedded Free Allocation) not calculated",
            citation="Art. 31 - Free allocation adjustment",
            field="sefa",
        )


def _specific_quantity(entry: EmissionEntry) -> float | None:
    quantity = entry.quantity
    if quantity is None or quantity <= 0:
        return None
    unit = entry.functional_unit
    if not unit:
        return quantity
    for reference in _SPECIFIC_UNITS:
        if is_compatible(unit, reference):
            try:
                return convert_value(quantity, unit, reference)
            except (pint.PintError, ValueError):
                return quantity
    return quantity


def check_specific_emissions(entry: EmissionEntry, ctx: EntryContext) -> Iterator[Finding]:
    total = entry.total_embedded_emissions
    if not total:
        return
    band = ctx.schedule.emissions_ranges.get(ctx.category or "")
    quantity = _specific_quantity(entry)
    if band is None or quantity is None:
        return
    specific = total / quantity
    if not band.contains(specific):
        yield warning(
            "entry.specific_emissions",
            f"Specific emissions ({specific:.2f} tCO2e/t) outside typical range for "
            f"{ctx.category} ({_fmt(band.minimum)}-{_fmt(band.maximum)})",
            citation="Data quality check",
            field="total_embedded_emissions",
        )


def check_production_year(entry: EmissionEntry, ctx: EntryContext) -> Iterator[Finding]:
    year = entry.production_year
    if year is None:
        return
    current = ctx.as_of.year
    if year > current:
        yield critical(
            "entry.production_year",
            "Production year cannot be in the future",
            citation="Art. 7 - Reporting period",
            field="production_year",
        )
    if current - year > ctx.schedule.production_year_max_age:
        yield warning(
            "entry.production_year",
            f"Production data older than {ctx.schedule.production_year_max_age} years - verify accuracy",
            citation="Art. 7 - Data recency",
            field="production_year",
        )


ENTRY_RULES: tuple[EntryRule, ...] = (
    EntryRule("entry.reporting_period", "Reporting period year", check_reporting_period),
    EntryRule("entry.cn_code", "CN code format", check_cn_code),
    EntryRule("entry.functional_unit", "Functional unit and quantity", check_functional_unit),
    EntryRule("entry.mark_up", "Default value mark-up", check_mark_up),
    EntryRule("entry.production_route_weighted", "Weighted-average route", check_weighted_route),
    EntryRule("entry.country_of_origin", "Country of origin", check_country_of_origin),
    EntryRule("entry.installation", "Installation linkage", check_installation),
    EntryRule("entry.verification_materiality", "Verification materiality", check_verification_materiality),
    EntryRule("entry.actual_values", "Actual values evidence", check_actual_values),
    EntryRule("entry.precursors", "Precursor declarations", check_precursors),
    EntryRule("entry.default_values", "Default values inputs", check_default_values),
    EntryRule("entry.carbon_price", "Carbon price paid abroad", check_carbon_price),
    EntryRule("entry.evidence", "Evidence documents", check_evidence),
    EntryRule("entry.validation_status", "Pending validation", check_validation_status),
    EntryRule("entry.free_allocation", "Free allocation adjustment", check_free_allocation),
    EntryRule("entry.specific_emissions", "Specific emissions plausibility", check_specific_emissions),
    EntryRule("entry.production_year", "Production year recency", check_production_year),
)


__all__ = ["ENTRY_RULES", "EntryContext", "EntryRule"]
