"""Validation endpoints for emission entries, reports and batches."""

from __future__ import annotations

import io

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from src.cbam.api.schedule import active_schedule
from src.cbam.reporting.export import findings_csv_bytes
from src.cbam.reporting.schemas import (
    BatchValidationRequest,
    BatchValidationResponse,
    EntryValidationRequest,
    EntryValidationResponse,
    PrecursorCheckRequest,
    PrecursorCheckResponse,
    ReportValidationRequest,
    ReportValidationResponse,
)
from src.cbam.rules.batch import evaluate_entries, readiness_summary
from src.cbam.rules.engine import evaluate_entry, evaluate_report, rule_catalogue
from src.cbam.rules.precursors import evaluate_precursor_chain

router = APIRouter(prefix="/api", tags=["validation"])


@router.get("/schedule")
def get_schedule() -> dict:
    """Return the active regulatory schedule."""

    return active_schedule().as_payload()


@router.get("/rules")
def list_rules() -> list[dict[str, str]]:
    """Return the registered rules, entry rules first."""

    return rule_catalogue()


@router.post("/validate/entry", response_model=EntryValidationResponse)
def validate_entry(request: EntryValidationRequest) -> EntryValidationResponse:
    result = evaluate_entry(
        request.entry,
        active_schedule(),
        rule_ids=request.rule_ids,
        as_of=request.as_of,
    )
    return EntryValidationResponse.model_validate(result.as_payload())


@router.post("/validate/report", response_model=ReportValidationResponse)
def validate_report(request: ReportValidationRequest) -> ReportValidationResponse:
    result = evaluate_report(
        request.report,
        request.entries,
        active_schedule(),
        rule_ids=request.rule_ids,
        as_of=request.as_of,
    )
    return ReportValidationResponse.model_validate(result.as_payload())


@router.post("/validate/batch", response_model=BatchValidationResponse)
def validate_batch(request: BatchValidationRequest) -> BatchValidationResponse:
    results = evaluate_entries(request.entries, active_schedule(), as_of=request.as_of)
    return BatchValidationResponse.model_validate(
        {
            "summary": readiness_summary(results),
            "results": {key: result.as_payload() for key, result in results.items()},
        }
    )


@router.post("/validate/export")
def export_findings(request: BatchValidationRequest) -> StreamingResponse:
    """Download batch findings as CSV."""

    results = evaluate_entries(request.entries, active_schedule(), as_of=request.as_of)
    return StreamingResponse(
        io.BytesIO(findings_csv_bytes(results)),
        media_type="text/csv",
        headers={"Content-Disposition": 'attachment; filename="cbam_findings.csv"'},
    )


@router.post("/validate/precursors", response_model=PrecursorCheckResponse)
def validate_precursors(request: PrecursorCheckRequest) -> PrecursorCheckResponse:
    outcome = evaluate_precursor_chain(request.entry, request.deviations)
    return PrecursorCheckResponse(
        required=outcome.required,
        complete=outcome.complete,
        blocking_count=outcome.blocking_count,
        warning_count=outcome.warning_count,
        findings=[item.as_payload() for item in outcome.findings],
    )


__all__ = ["router"]
