"""API payload models and export helpers."""

from .export import findings_csv_bytes
from .schemas import (
    BatchValidationRequest,
    BatchValidationResponse,
    CalculationRequest,
    CalculationResponse,
    EntryValidationRequest,
    EntryValidationResponse,
    FindingModel,
    MaterialityModel,
    PrecursorCheckRequest,
    PrecursorCheckResponse,
    ReadinessSummary,
    ReportValidationRequest,
    ReportValidationResponse,
)

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
    "findings_csv_bytes",
]
