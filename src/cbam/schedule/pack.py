"""Loading of regulatory schedules expressed as JSON or YAML."""

from __future__ import annotations

import json
import pathlib
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Mapping, Sequence

import yaml


@dataclass(slots=True, frozen=True)
class EmissionsRange:
    """Plausible specific-emissions band for a goods category."""

    minimum: float
    maximum: float

    def contains(self, value: float) -> bool:
        return self.minimum <= value <= self.maximum


@dataclass(slots=True, frozen=True)
class Deadline:
    """Submission deadline for a reporting period, relative to the period year."""

    month: int
    day: int
    year_offset: int = 0

    def for_year(self, year: int) -> date:
        return date(year + self.year_offset, self.month, self.day)


@dataclass(slots=True, frozen=True)
class ScheduleConfig:
    """Versioned, year-indexed regulatory parameters consumed by the rules."""

    id: str
    version: str | None
    title: str
    min_reporting_year: int
    cn_code_length: int
    mark_up_by_year: Mapping[int, float]
    mark_up_caps: Mapping[str, float]
    cbam_factor_by_year: Mapping[int, float]
    cbam_factor_tolerance: float
    functional_units: Mapping[str, str]
    emissions_ranges: Mapping[str, EmissionsRange]
    cn_categories: Mapping[str, str]
    reference_ets_price: float
    carbon_price_ratio_limit: float
    production_year_max_age: int
    submission_deadlines: Mapping[str, Deadline]
    quarterly_pricing_years: frozenset[int]
    materiality_threshold_percent: float
    disabled_rules: frozenset[str] = field(default_factory=frozenset)

    def mark_up_for(self, year: int | None) -> float | None:
        if year is None:
            return None
        return self.mark_up_by_year.get(year)

    def cbam_factor_for(self, year: int | None) -> float | None:
        if year is None:
            return None
        return self.cbam_factor_by_year.get(year)

    def category_for_cn(self, cn_code: str | None) -> str | None:
        """Resolve a goods category from the longest matching CN prefix."""

        if not cn_code:
            return None
        for prefix in sorted(self.cn_categories, key=len, reverse=True):
            if cn_code.startswith(prefix):
                return self.cn_categories[prefix]
        return None

    def deadline_for(self, period: str | None, year: int | None) -> date | None:
        if not period or year is None:
            return None
        quarter = period.split("-")[0].strip().upper()
        deadline = self.submission_deadlines.get(quarter)
        if deadline is None:
            return None
        return deadline.for_year(year)

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "ScheduleConfig":
        schedule_id = str(payload.get("id") or "").strip()
        if not schedule_id:
            raise ValueError("Schedule is missing an 'id'.")

        mark_up = _year_table(payload, "mark_up_by_year", required=True)
        factors = _year_table(payload, "cbam_factor_by_year", required=True)

        ranges: dict[str, EmissionsRange] = {}
        for category, band in _mapping(payload, "emissions_ranges").items():
            if not isinstance(band, Mapping):
                raise ValueError(f"Emissions range for '{category}' must be a mapping.")
            low = _number(band.get("min"), f"emissions_ranges.{category}.min")
            high = _number(band.get("max"), f"emissions_ranges.{category}.max")
            if low > high:
                raise ValueError(f"Emissions range for '{category}' has min above max.")
            ranges[str(category)] = EmissionsRange(minimum=low, maximum=high)

        deadlines: dict[str, Deadline] = {}
        for quarter, entry in _mapping(payload, "submission_deadlines").items():
            if not isinstance(entry, Mapping):
                raise ValueError(f"Deadline for '{quarter}' must be a mapping.")
            deadline = Deadline(
                month=int(_number(entry.get("month"), f"submission_deadlines.{quarter}.month")),
                day=int(_number(entry.get("day"), f"submission_deadlines.{quarter}.day")),
                year_offset=int(entry.get("year_offset") or 0),
            )
            try:
                deadline.for_year(2000)
            except ValueError as exc:
                raise ValueError(f"Deadline for '{quarter}' is not a calendar date.") from exc
            deadlines[str(quarter).upper()] = deadline

        pricing_years = payload.get("quarterly_pricing_years") or []
        if not isinstance(pricing_years, Sequence) or isinstance(pricing_years, str):
            raise ValueError("'quarterly_pricing_years' must be a list of years.")

        disabled = payload.get("disabled_rules") or []
        if not isinstance(disabled, Sequence) or isinstance(disabled, str):
            raise ValueError("'disabled_rules' must be a list of rule identifiers.")

        return cls(
            id=schedule_id,
            version=str(payload.get("version") or "") or None,
            title=str(payload.get("title") or schedule_id),
            min_reporting_year=int(_number(payload.get("min_reporting_year", 2026), "min_reporting_year")),
            cn_code_length=int(_number(payload.get("cn_code_length", 8), "cn_code_length")),
            mark_up_by_year=mark_up,
            mark_up_caps={
                str(key): _number(value, f"mark_up_caps.{key}")
                for key, value in _mapping(payload, "mark_up_caps").items()
            },
            cbam_factor_by_year=factors,
            cbam_factor_tolerance=_number(payload.get("cbam_factor_tolerance", 0.001), "cbam_factor_tolerance"),
            functional_units={
                str(key): str(value) for key, value in _mapping(payload, "functional_units").items()
            },
            emissions_ranges=ranges,
            cn_categories={
                str(key): str(value) for key, value in _mapping(payload, "cn_categories").items()
            },
            reference_ets_price=_number(payload.get("reference_ets_price", 95.0), "reference_ets_price"),
            carbon_price_ratio_limit=_number(
                payload.get("carbon_price_ratio_limit", 1.5), "carbon_price_ratio_limit"
            ),
            production_year_max_age=int(
                _number(payload.get("production_year_max_age", 2), "production_year_max_age")
            ),
            submission_deadlines=deadlines,
            quarterly_pricing_years=frozenset(
                int(_number(year, "quarterly_pricing_years")) for year in pricing_years
            ),
            materiality_threshold_percent=_number(
                payload.get("materiality_threshold_percent", 5.0), "materiality_threshold_percent"
            ),
            disabled_rules=frozenset(str(rule) for rule in disabled),
        )

    def as_payload(self) -> dict[str, Any]:
        """Return the schedule as a JSON-serialisable mapping."""

        return {
            "id": self.id,
            "version": self.version,
            "title": self.title,
            "min_reporting_year": self.min_reporting_year,
            "cn_code_length": self.cn_code_length,
            "mark_up_by_year": {str(k): v for k, v in sorted(self.mark_up_by_year.items())},
            "mark_up_caps": dict(self.mark_up_caps),
            "cbam_factor_by_year": {str(k): v for k, v in sorted(self.cbam_factor_by_year.items())},
            "cbam_factor_tolerance": self.cbam_factor_tolerance,
            "functional_units": dict(self.functional_units),
            "emissions_ranges": {
                key: {"min": band.minimum, "max": band.maximum}
                for key, band in self.emissions_ranges.items()
            },
            "cn_categories": dict(self.cn_categories),
            "reference_ets_price": self.reference_ets_price,
            "carbon_price_ratio_limit": self.carbon_price_ratio_limit,
            "production_year_max_age": self.production_year_max_age,
            "submission_deadlines": {
                key: {"month": d.month, "day": d.day, "year_offset": d.year_offset}
                for key, d in self.submission_deadlines.items()
            },
            "quarterly_pricing_years": sorted(self.quarterly_pricing_years),
            "materiality_threshold_percent": self.materiality_threshold_percent,
            "disabled_rules": sorted(self.disabled_rules),
        }


def _mapping(payload: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    value = payload.get(key) or {}
    if not isinstance(value, Mapping):
        raise ValueError(f"'{key}' must be a mapping.")
    return value


def _number(value: Any, name: str) -> float:
    if isinstance(value, bool) or value is None:
        raise ValueError(f"'{name}' must be numeric.")
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise ValueError(f"'{name}' must be numeric.") from exc


def _year_table(payload: Mapping[str, Any], key: str, *, required: bool) -> dict[int, float]:
    raw = _mapping(payload, key)
    if required and not raw:
        raise ValueError(f"Schedule must define a non-empty '{key}' table.")
    table: dict[int, float] = {}
    for year, value in raw.items():
        try:
            year_number = int(year)
        except (TypeError, ValueError) as exc:
            raise ValueError(f"'{key}' has a non-integer year '{year}'.") from exc
        table[year_number] = _number(value, f"{key}.{year}")
    return table


def _read_source(source: str | pathlib.Path) -> tuple[str, str]:
    path = pathlib.Path(source)
    text = path.read_text(encoding="utf-8")
    suffix = path.suffix.lower()
    return text, suffix


def _parse_text(text: str, *, suffix: str) -> Mapping[str, Any]:
    if suffix in {".yaml", ".yml"}:
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ValueError(f"Schedule YAML could not be parsed: {exc}") from exc
    else:
        data = json.loads(text)

    if not isinstance(data, Mapping):
        raise ValueError("Schedule payload must be a mapping.")
    return data


def load_schedule(source: str | pathlib.Path | Mapping[str, Any]) -> ScheduleConfig:
    """Load a :class:`ScheduleConfig` from a path or mapping."""

    if isinstance(source, Mapping):
        payload = source
    else:
        text, suffix = _read_source(source)
        payload = _parse_text(text, suffix=suffix)

    return ScheduleConfig.from_mapping(payload)


__all__ = ["Deadline", "EmissionsRange", "ScheduleConfig", "load_schedule"]
