from __future__ import annotations

import io

import pandas as pd
import pytest
from fastapi.testclient import TestClient

from src.cbam.api import schedule as api_schedule
from src.main import app

client = TestClient(app)

AS_OF = "2026-10-19"
BASIC_RULES = [
    "entry.reporting_period",
    "entry.cn_code",
    "entry.functional_unit",
    "entry.mark_up",
    "entry.production_route_weighted",
    "entry.country_of_origin",
]


def _entry(**overrides) -> dict:
    payload = {
        "id": "alu-1",
        "cn_code": "76011000",
        "reporting_period_year": 2026,
        "functional_unit": "tonnes",
        "quantity": 50,
        "calculation_method": "actual_values",
        "country_of_origin": "NO",
        "installation_id": "inst-7",
        "direct_emissions_specific": 8.0,
        "monitoring_plan_id": "mp-7",
        "operator_report_id": "op-7",
        "production_route": "Primary",
        "evidence_documents": ["verification.pdf"],
        "sefa": 1.1,
        "total_embedded_emissions": 400,
    }
    payload.update(overrides)
    return payload


def test_schedule_endpoint_serves_active_schedule() -> None:
    response = client.get("/api/schedule")
    assert response.status_code == 200
    payload = response.json()
    assert payload["id"] == "cbam_default"
    assert payload["mark_up_by_year"]["2026"] == 10
    assert payload["submission_deadlines"]["Q4"]["year_offset"] == 1


def test_rules_endpoint_lists_catalogue() -> None:
    response = client.get("/api/rules")
    assert response.status_code == 200
    ids = [item["id"] for item in response.json()]
    assert ids[0] == "entry.reporting_period"
    assert "report.language" in ids


def test_validate_entry_missing_mark_up() -> None:
    response = client.post(
        "/api/validate/entry",
        json={
            "entry": {
                "cn_code": "72081000",
                "reporting_period_year": 2026,
                "quantity": 10,
                "functional_unit": "tonnes",
                "calculation_method": "default_values",
                "mark_up_percentage_applied": 0,
                "country_of_origin": "CN",
            },
            "rule_ids": BASIC_RULES,
            "as_of": AS_OF,
        },
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["is_valid"] is False
    assert payload["score"] == 75
    assert [item["rule_id"] for item in payload["errors"]] == ["entry.mark_up"]


def test_validate_entry_requires_entry_body() -> None:
    response = client.post("/api/validate/entry", json={"as_of": AS_OF})
    assert response.status_code == 422


def test_validate_report_in_wrong_language() -> None:
    response = client.post(
        "/api/validate/report",
        json={"report": {"reporting_year": 2026, "language": "French"}, "as_of": AS_OF},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["is_valid"] is False
    assert payload["ready_for_submission"] is False
    assert "report.language" in [item["rule_id"] for item in payload["errors"]]


def test_validate_report_with_entries() -> None:
    response = client.post(
        "/api/validate/report",
        json={
            "report": {
                "id": "r-1",
                "reporting_year": 2026,
                "language": "English",
                "cbam_factor_applied": 0.025,
                "certificate_price_avg": 78.5,
            },
            "entries": [_entry()],
            "as_of": AS_OF,
        },
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["ready_for_submission"] is True
    assert payload["entries"]["alu-1"]["score"] == 100


def test_validate_batch_summary() -> None:
    response = client.post(
        "/api/validate/batch",
        json={"entries": [_entry(), _entry(id="alu-2", cn_code="7601")], "as_of": AS_OF},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["summary"]["total_entries"] == 2
    assert payload["summary"]["blocking_entries"] == ["alu-2"]
    assert payload["results"]["alu-2"]["errors"][0]["rule_id"] == "entry.cn_code"


def test_export_findings_as_csv() -> None:
    response = client.post(
        "/api/validate/export",
        json={"entries": [_entry(country_of_origin=None)], "as_of": AS_OF},
    )
    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert "cbam_findings.csv" in response.headers["content-disposition"]

    frame = pd.read_csv(io.StringIO(response.text))
    assert list(frame.columns) == ["entry_id", "severity", "rule_id", "field", "message", "citation"]
    assert frame.loc[0, "rule_id"] == "entry.country_of_origin"


def test_validate_precursor_chain() -> None:
    response = client.post(
        "/api/validate/precursors",
        json={
            "entry": {
                "id": "complex-1",
                "reporting_period_year": 2026,
                "precursors_used": [{"precursor_cn_code": "72081000", "reporting_period_year": 2025}],
            }
        },
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["required"] is True
    assert payload["complete"] is False
    assert {item["rule_id"] for item in payload["findings"]} == {
        "precursor.year_mismatch",
        "precursor.installation",
        "precursor.emissions",
    }


def test_schedule_unavailable_returns_503(monkeypatch) -> None:
    def missing():
        raise FileNotFoundError("data/schedules/cbam_default.yaml")

    monkeypatch.setattr(api_schedule, "load_default_schedule", missing)
    response = client.post("/api/validate/entry", json={"entry": _entry()})
    assert response.status_code == 503
    assert response.json()["detail"] == "Regulatory schedule unavailable"


def test_calculation_route_rejects_unreadable_schedule(monkeypatch) -> None:
    def invalid():
        raise ValueError("'mark_up_by_year' must be a mapping.")

    monkeypatch.setattr(api_schedule, "load_default_schedule", invalid)
    response = client.post("/api/calculate/entry", json={"entry": _entry()})
    assert response.status_code == 503
    assert response.json()["detail"] == "Regulatory schedule is invalid"


def test_oversized_quantity_is_reported_not_raised() -> None:
    body = '{"entry": {"id": "huge", "cn_code": "76011000", "quantity": ' + "9" * 400 + '}, "as_of": "2026-10-19"}'
    response = client.post(
        "/api/validate/entry", content=body, headers={"content-type": "application/json"}
    )
    assert response.status_code == 200
    payload = response.json()
    assert "entry.quantity" in [item["rule_id"] for item in payload["errors"]]


def test_calculate_entry_with_benchmark() -> None:
    steel = {
        "cn_code": "72081000",
        "reporting_period_year": 2026,
        "quantity": 100,
        "total_embedded_emissions": 180,
        "production_route": "BF-BOF",
    }
    response = client.post(
        "/api/calculate/entry",
        json={"entry": steel, "benchmarks": [{"cn_code": "72081000", "cbam_benchmark_2026": 1.5}]},
    )
    assert response.status_code == 200
    payload = response.json()
    assert payload["year"] == 2026
    assert payload["mark_up_percent"] == 10
    assert payload["default_value_with_markup"] == pytest.approx(1.65)
    assert payload["free_allocation"] == pytest.approx(146.25)
    assert payload["certificates_required"] == pytest.approx(0.84375)
    assert payload["materiality"]["exceeds_threshold"] is True
    assert payload["materiality"]["findings"][0]["rule_id"] == "entry.materiality"


def test_calculate_entry_falls_back_to_declared_default_value() -> None:
    entry = {
        "cn_code": "72081000",
        "reporting_period_year": 2026,
        "quantity": 100,
        "total_embedded_emissions": 180,
        "calculation_method": "default_values",
        "mark_up_percentage_applied": 10,
        "default_value_with_markup": 2.2,
    }
    response = client.post("/api/calculate/entry", json={"entry": entry})
    assert response.status_code == 200
    payload = response.json()
    assert payload["default_value"] == pytest.approx(2.0)
    assert payload["free_allocation"] == 0.0
    assert payload["materiality"]["variance_percent"] == pytest.approx(10.0)


def test_calculate_entry_rejects_malformed_benchmark() -> None:
    response = client.post(
        "/api/calculate/entry",
        json={"entry": _entry(), "benchmarks": [{"cbam_benchmark_2026": 1.5}]},
    )
    assert response.status_code == 422
    assert "cn_code" in response.json()["detail"]
