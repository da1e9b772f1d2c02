"""Typed request and response models for the validation API."""

from __future__ import annotations

from datetime import date
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from src.cbam.rules.findings import Severity


class FindingModel(BaseModel):
    """Single rule outcome as served over the API."""

    model_config = ConfigDict(extra="ignore")

    severity: Severity
    rule_id: str
    message: str
    citation: str | None = None
    field: str | None = None
    entity_id: str | None = None


class EntryValidationRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    entry: dict[str, Any] = Field(description="Emission entry record")
    rule_ids: list[str] | None = Field(default=None, description="Restrict evaluation to these rules")
    as_of: date | None = Field(default=None, description="Reference date for recency checks")


class EntryValidationResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    entity_id: str | None = None
    is_valid: bool
    score: int
    errors: list[FindingModel]
    warnings: list[FindingModel]
    info: list[FindingModel]


class ReportValidationRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    report: dict[str, Any] = Field(description="Compliance report record")
    entries: list[dict[str, Any]] = Field(default_factory=list, description="Linked emission entries")
    rule_ids: list[str] | None = None
    as_of: date | None = None


class ReportValidationResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    entity_id: str | None = None
    is_valid: bool
    ready_for_submission: bool
    errors: list[FindingModel]
    warnings: list[FindingModel]
    info: list[FindingModel]
    entry_error_count: int
    entry_warning_count: int
    entries: dict[str, EntryValidationResponse]


class BatchValidationRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    entries: list[dict[str, Any]]
    as_of: date | None = None


class ReadinessSummary(BaseModel):
    model_config = ConfigDict(extra="ignore")

    total_entries: int
    validated: int
    blocked: int
    blocking_entries: list[str]
    ready_for_reporting: bool
    compliance_rate: float
    average_score: float


class BatchValidationResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    summary: ReadinessSummary
    results: dict[str, EntryValidationResponse]


class PrecursorCheckRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    entry: dict[str, Any]
    deviations: list[dict[str, Any]] = Field(default_factory=list)


class PrecursorCheckResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    required: bool
    complete: bool
    blocking_count: int
    warning_count: int
    findings: list[FindingModel]


class CalculationRequest(BaseModel):
    model_config = ConfigDict(extra="ignore")

    entry: dict[str, Any]
    benchmarks: list[dict[str, Any]] = Field(default_factory=list, description="Free-allocation benchmarks")
    default_value: float | None = Field(default=None, description="Default value before mark-up")
    year: int | None = Field(default=None, description="Defaults to the entry reporting year")


class MaterialityModel(BaseModel):
    model_config = ConfigDict(extra="ignore")

    variance_percent: float
    threshold_percent: float
    exceeds_threshold: bool
    findings: list[FindingModel]


class CalculationResponse(BaseModel):
    model_config = ConfigDict(extra="ignore")

    year: int
    mark_up_percent: float
    default_value: float | None = None
    default_value_with_markup: float | None = None
    benchmark_value: float
    cbam_factor: float
    free_allocation: float
    certificates_required: float
    materiality: MaterialityModel | None = None


__all__ = [
    "BatchValidationRequest",
    "BatchValidationResponse",
    "CalculationRequest",
    "CalculationResponse",
    "EntryValidationRequest",
    "EntryValidationResponse",
    "FindingModel",
    "MaterialityModel",
    "PrecursorCheckRequest",
    "PrecursorCheckResponse",
    "ReadinessSummary",
    "ReportValidationRequest",
    "ReportValidationResponse",
]
