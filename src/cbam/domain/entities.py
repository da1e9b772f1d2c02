"""Read-only snapshots of the entities owned by the external entity store."""

from __future__ import annotations

import re
from dataclasses import dataclass
from datetime import date
from typing import Any, Mapping

from src.cbam.utils.coerce import as_bool, as_date, as_float, as_int, as_str, as_tuple

_PERIOD_YEAR = re.compile(r"(\d{4})")

ACTUAL_VALUES = "actual_values"
DEFAULT_VALUES = "default_values"
COMBINED = "combined_actual_default"


def _cn_text(value: Any) -> str | None:
    # Spreadsheet imports deliver CN codes as floats (72081000.0).
    if isinstance(value, float):
        number = as_int(value)
        return None if number is None else str(number)
    return as_str(value)


@dataclass(frozen=True)
class Precursor:
    """Precursor consumed in the production of a complex good."""

    precursor_cn_code: str | None = None
    reporting_period_year: int | None = None
    value_type: str | None = None
    production_installation_id: str | None = None
    emissions_embedded: float | None = None
    emissions_intensity_factor: float | None = None
    evidence_url: str | None = None

    @classmethod
    def from_mapping(cls, payload: Any) -> "Precursor":
        if isinstance(payload, Precursor):
            return payload
        if not isinstance(payload, Mapping):
            return cls(precursor_cn_code=as_str(payload))
        return cls(
            precursor_cn_code=as_str(payload.get("precursor_cn_code") or payload.get("cn_code")),
            reporting_period_year=as_int(payload.get("reporting_period_year")),
            value_type=as_str(payload.get("value_type")),
            production_installation_id=as_str(payload.get("production_installation_id")),
            emissions_embedded=as_float(payload.get("emissions_embedded")),
            emissions_intensity_factor=as_float(payload.get("emissions_intensity_factor")),
            evidence_url=as_str(payload.get("evidence_url")),
        )


@dataclass(frozen=True)
class EmissionEntry:
    """One cross-border import line declared for CBAM."""

    id: str | None = None
    cn_code: str | None = None
    reporting_period_year: int | None = None
    functional_unit: str | None = None
    quantity: float | None = None
    calculation_method: str | None = None
    country_of_origin: str | None = None
    installation_id: str | None = None
    mark_up_percentage_applied: float | None = None
    production_route: str | None = None
    production_routes_included: tuple[str, ...] = ()
    verification_status: str | None = None
    materiality_assessment_5_percent: bool | None = None
    direct_emissions_specific: float | None = None
    monitoring_plan_id: str | None = None
    operator_report_id: str | None = None
    precursors_used: tuple[Precursor, ...] = ()
    cbam_benchmark: float | None = None
    cbam_factor: float | None = None
    carbon_price_paid: float | None = None
    carbon_price_country: str | None = None
    carbon_price_proof_url: str | None = None
    evidence_documents: tuple[Any, ...] = ()
    validation_status: str | None = None
    sefa: float | None = None
    total_embedded_emissions: float | None = None
    goods_category: str | None = None
    production_year: int | None = None
    default_value_with_markup: float | None = None

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "EmissionEntry":
        return cls(
            id=as_str(payload.get("id")),
            cn_code=_cn_text(payload.get("cn_code")),
            reporting_period_year=as_int(payload.get("reporting_period_year")),
            functional_unit=as_str(payload.get("functional_unit")),
            quantity=as_float(payload.get("quantity")),
            calculation_method=as_str(payload.get("calculation_method")),
            country_of_origin=as_str(payload.get("country_of_origin")),
            installation_id=as_str(payload.get("installation_id")),
            mark_up_percentage_applied=as_float(payload.get("mark_up_percentage_applied")),
            production_route=as_str(payload.get("production_route")),
            production_routes_included=tuple(
                str(route) for route in as_tuple(payload.get("production_routes_included"))
            ),
            verification_status=as_str(payload.get("verification_status")),
            materiality_assessment_5_percent=as_bool(payload.get("materiality_assessment_5_percent")),
            direct_emissions_specific=as_float(payload.get("direct_emissions_specific")),
            monitoring_plan_id=as_str(payload.get("monitoring_plan_id")),
            operator_report_id=as_str(payload.get("operator_report_id")),
            precursors_used=tuple(
                Precursor.from_mapping(item) for item in as_tuple(payload.get("precursors_used"))
            ),
            cbam_benchmark=as_float(payload.get("cbam_benchmark")),
            cbam_factor=as_float(payload.get("cbam_factor")),
            carbon_price_paid=as_float(payload.get("carbon_price_paid")),
            carbon_price_country=as_str(payload.get("carbon_price_country")),
            carbon_price_proof_url=as_str(payload.get("carbon_price_proof_url")),
            evidence_documents=as_tuple(payload.get("evidence_documents")),
            validation_status=as_str(payload.get("validation_status")),
            sefa=as_float(payload.get("sefa")),
            total_embedded_emissions=as_float(payload.get("total_embedded_emissions")),
            goods_category=as_str(
                payload.get("goods_category")
                or payload.get("aggregated_goods_category")
                or payload.get("goods_type")
            ),
            production_year=as_int(payload.get("production_year")),
            default_value_with_markup=as_float(payload.get("default_value_with_markup")),
        )


@dataclass(frozen=True)
class ComplianceReport:
    """Quarterly or annual CBAM declaration aggregating emission entries."""

    id: str | None = None
    reporting_year: int | None = None
    year: int | None = None
    period: str | None = None
    language: str | None = None
    cbam_factor_applied: float | None = None
    certificate_price_avg: float | None = None
    total_emissions: float | None = None
    certificates_required: float | None = None
    certificates_surrendered: float | None = None
    submission_date: date | None = None

    @property
    def period_year(self) -> int | None:
        """Calendar year the period deadline is anchored to."""

        if self.year is not None:
            return self.year
        if self.period:
            match = _PERIOD_YEAR.search(self.period)
            if match:
                return int(match.group(1))
        return self.reporting_year

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "ComplianceReport":
        return cls(
            id=as_str(payload.get("id")),
            reporting_year=as_int(payload.get("reporting_year")),
            year=as_int(payload.get("year")),
            period=as_str(payload.get("period")),
            language=as_str(payload.get("language")),
            cbam_factor_applied=as_float(payload.get("cbam_factor_applied")),
            certificate_price_avg=as_float(payload.get("certificate_price_avg")),
            total_emissions=as_float(payload.get("total_emissions")),
            certificates_required=as_float(payload.get("certificates_required")),
            certificates_surrendered=as_float(payload.get("certificates_surrendered")),
            submission_date=as_date(payload.get("submission_date")),
        )


def coerce_entry(entry: EmissionEntry | Mapping[str, Any] | None) -> EmissionEntry:
    if isinstance(entry, EmissionEntry):
        return entry
    if isinstance(entry, Mapping):
        return EmissionEntry.from_mapping(entry)
    return EmissionEntry()


def coerce_report(report: ComplianceReport | Mapping[str, Any] | None) -> ComplianceReport:
    if isinstance(report, ComplianceReport):
        return report
    if isinstance(report, Mapping):
        return ComplianceReport.from_mapping(report)
    return ComplianceReport()


__all__ = [
    "ACTUAL_VALUES",
    "COMBINED",
    "DEFAULT_VALUES",
    "ComplianceReport",
    "EmissionEntry",
    "Precursor",
    "coerce_entry",
    "coerce_report",
]
