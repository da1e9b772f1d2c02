from __future__ import annotations

from src.cbam.rules import PrecursorYearDeviation, evaluate_precursor_chain


def _entry(*precursors: dict) -> dict:
    return {
        "id": "complex-1",
        "cn_code": "73089098",
        "reporting_period_year": 2026,
        "precursors_used": list(precursors),
    }


def _precursor(**overrides) -> dict:
    payload = {
        "precursor_cn_code": "72081000",
        "reporting_period_year": 2026,
        "production_installation_id": "inst-9",
        "emissions_embedded": 1.9,
    }
    payload.update(overrides)
    return payload


def _ids(result) -> list[str]:
    return [item.rule_id for item in result.findings]


def test_entry_without_precursors_needs_no_chain() -> None:
    result = evaluate_precursor_chain({"id": "simple"})
    assert result.required is False
    assert result.complete is True
    assert result.findings == []


def test_aligned_precursor_is_complete() -> None:
    result = evaluate_precursor_chain(_entry(_precursor()))
    assert result.required is True
    assert result.complete is True
    assert result.findings == []


def test_missing_precursor_year_blocks() -> None:
    result = evaluate_precursor_chain(_entry(_precursor(reporting_period_year=None)))
    assert _ids(result) == ["precursor.year_missing"]
    assert result.blocking_count == 1


def test_year_mismatch_without_deviation_blocks() -> None:
    result = evaluate_precursor_chain(_entry(_precursor(reporting_period_year=2025)))
    assert _ids(result) == ["precursor.year_mismatch"]
    assert result.complete is False


def test_year_mismatch_with_pending_deviation_warns() -> None:
    deviation = {
        "precursor_cn_code": "72081000",
        "precursor_year": 2025,
        "justification": "Slabs produced in December 2025 and stored before rolling",
        "evidence_reference": "stock-ledger-2025-12",
    }
    result = evaluate_precursor_chain(_entry(_precursor(reporting_period_year=2025)), [deviation])
    assert result.complete is True
    assert result.warning_count == 1
    assert "pending review" in result.findings[0].message


def test_year_mismatch_with_approved_deviation_is_informational() -> None:
    deviation = PrecursorYearDeviation(
        precursor_cn_code="72081000",
        precursor_year=2025,
        justification="Slabs produced in December 2025 and stored before rolling",
        evidence_reference="stock-ledger-2025-12",
        status="approved",
        approved_by="verifier@example.org",
    )
    result = evaluate_precursor_chain(_entry(_precursor(reporting_period_year=2025)), [deviation])
    assert result.complete is True
    assert result.warning_count == 0
    assert [item.severity.value for item in result.findings] == ["info"]


def test_traceability_gaps() -> None:
    result = evaluate_precursor_chain(
        _entry(_precursor(production_installation_id=None, emissions_embedded=None))
    )
    assert _ids(result) == ["precursor.emissions", "precursor.installation"]
    assert result.blocking_count == 1
    assert result.warning_count == 1

    intensity_only = evaluate_precursor_chain(
        _entry(_precursor(emissions_embedded=None, emissions_intensity_factor=2.1))
    )
    assert intensity_only.findings == []


def test_deviation_request_needs_justification_and_evidence() -> None:
    problems = PrecursorYearDeviation(
        precursor_cn_code="72081000", precursor_year=2025, justification="late"
    ).validate()
    assert [item.rule_id for item in problems] == [
        "precursor.deviation_justification",
        "precursor.deviation_evidence",
    ]

    complete = PrecursorYearDeviation.from_mapping(
        {
            "precursor_cn_code": "72081000",
            "precursor_year": "2025",
            "justification": "Slabs produced in December 2025 and stored before rolling",
            "evidence_reference": "stock-ledger-2025-12",
        }
    )
    assert complete.validate() == []
    assert complete.status == "pending_approval"
