from __future__ import annotations

import pytest

from src.cbam.calculation import (
    Benchmark,
    assess_materiality,
    calculate_free_allocation,
    declared_base_value,
    default_value_with_markup,
    find_benchmark,
    mark_up_percent,
)
from src.cbam.domain import EmissionEntry
from src.cbam.schedule import DEFAULT_SCHEDULE_PATH, load_schedule

SCHEDULE = load_schedule(DEFAULT_SCHEDULE_PATH)


def test_default_value_mark_up_follows_schedule() -> None:
    assert default_value_with_markup(2.0, 2026, SCHEDULE) == pytest.approx(2.2)
    assert default_value_with_markup(2.0, 2028, SCHEDULE) == pytest.approx(2.6)


def test_mark_up_outside_schedule_uses_nearest_year() -> None:
    assert mark_up_percent(2035, SCHEDULE) == 30
    assert mark_up_percent(2024, SCHEDULE) == 10


def test_materiality_variance_above_threshold() -> None:
    entry = {"id": "e-1", "quantity": 100, "total_embedded_emissions": 110}
    result = assess_materiality(entry, 1.0, SCHEDULE)
    assert result is not None
    assert result.variance_percent == pytest.approx(10.0)
    assert result.exceeds_threshold is True
    assert [item.rule_id for item in result.findings] == ["entry.materiality"]
    assert result.findings[0].entity_id == "e-1"


def test_materiality_within_threshold() -> None:
    result = assess_materiality({"quantity": 100, "total_embedded_emissions": 103}, 1.0, SCHEDULE)
    assert result is not None
    assert result.exceeds_threshold is False
    assert result.findings == ()


def test_materiality_without_benchmark_warns() -> None:
    result = assess_materiality({"quantity": 100, "total_embedded_emissions": 103}, None, SCHEDULE)
    assert result is not None
    assert result.findings[0].message == "No benchmark available for materiality assessment"
    assert assess_materiality({"quantity": 100}, 1.0, SCHEDULE) is None


def test_free_allocation_reduces_certificate_obligation() -> None:
    benchmark = Benchmark(cn_code="72081000", value_2026=1.5, value_from_2027=1.4)
    entry = EmissionEntry(cn_code="72081000", quantity=100, total_embedded_emissions=180)

    result = calculate_free_allocation(entry, benchmark, 2026, SCHEDULE)
    assert result.cbam_factor == 0.025
    assert result.free_allocation == pytest.approx(146.25)
    assert result.certificates_required == pytest.approx(0.84375)

    later = calculate_free_allocation(entry, benchmark, 2027, SCHEDULE)
    assert later.benchmark_value == 1.4


def test_free_allocation_after_phase_in_uses_last_factor() -> None:
    benchmark = Benchmark(cn_code="72081000", value_2026=1.5)
    entry = {"cn_code": "72081000", "quantity": 100, "total_embedded_emissions": 180}
    result = calculate_free_allocation(entry, benchmark, 2034, SCHEDULE)
    assert result.cbam_factor == 1.0
    assert result.free_allocation == 0.0
    assert result.certificates_required == pytest.approx(180.0)


def test_free_allocation_without_benchmark_is_zero() -> None:
    result = calculate_free_allocation({"quantity": 100}, None, 2026, SCHEDULE)
    assert result.free_allocation == 0.0
    assert result.certificates_required == 0.0
    assert result.correction_factor == 1.0


def test_benchmark_lookup_prefers_production_route() -> None:
    general = Benchmark.from_mapping({"cn_code": "72081000", "cbam_benchmark_2026": 1.5})
    eaf = Benchmark.from_mapping(
        {"cn_code": "72081000", "production_route": "EAF", "cbam_benchmark_2026": 0.3}
    )
    benchmarks = [general, eaf]

    assert find_benchmark(EmissionEntry(cn_code="72081000", production_route="EAF"), benchmarks) is eaf
    assert find_benchmark(EmissionEntry(cn_code="72081000", production_route="BF-BOF"), benchmarks) is general
    assert find_benchmark(EmissionEntry(cn_code="76011000"), benchmarks) is None


def test_benchmark_requires_cn_code_and_value() -> None:
    with pytest.raises(ValueError, match="cn_code"):
        Benchmark.from_mapping({"cbam_benchmark_2026": 1.5})
    with pytest.raises(ValueError, match="numeric"):
        Benchmark.from_mapping({"cn_code": "72081000", "cbam_benchmark_2026": "n/a"})


def test_declared_default_value_has_mark_up_removed() -> None:
    applied = {"default_value_with_markup": 2.2, "mark_up_percentage_applied": 10}
    assert declared_base_value(applied, SCHEDULE) == pytest.approx(2.0)

    scheduled = {"default_value_with_markup": 2.6, "reporting_period_year": 2028}
    assert declared_base_value(scheduled, SCHEDULE) == pytest.approx(2.0)

    assert declared_base_value({"mark_up_percentage_applied": 10}, SCHEDULE) is None
    assert declared_base_value({"default_value_with_markup": 2.0, "mark_up_percentage_applied": -100}, SCHEDULE) is None
