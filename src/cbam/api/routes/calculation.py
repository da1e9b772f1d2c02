"""Certificate obligation and default-value calculations for one entry."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException

from src.cbam.api.schedule import active_schedule
from src.cbam.calculation import (
    Benchmark,
    assess_materiality,
    calculate_free_allocation,
    declared_base_value,
    default_value_with_markup,
    find_benchmark,
    mark_up_percent,
)
from src.cbam.domain.entities import coerce_entry
from src.cbam.reporting.schemas import CalculationRequest, CalculationResponse

router = APIRouter(prefix="/api/calculate", tags=["calculation"])


@router.post("/entry", response_model=CalculationResponse)
def calculate_entry(request: CalculationRequest) -> CalculationResponse:
    """Free allocation, certificates owed and materiality for ``request.entry``.

    The default value comes from the request, else the matching benchmark,
    else the entry's declared value with the mark-up removed.
    """

    schedule = active_schedule()
    entry = coerce_entry(request.entry)
    year = request.year or entry.reporting_period_year or schedule.min_reporting_year

    try:
        benchmarks = [Benchmark.from_mapping(item) for item in request.benchmarks]
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc
    benchmark = find_benchmark(entry, benchmarks)
    allocation = calculate_free_allocation(entry, benchmark, year, schedule)

    base = request.default_value
    if base is None and benchmark is not None:
        base = benchmark.value_for(year)
    if base is None:
        base = declared_base_value(entry, schedule)

    materiality = assess_materiality(entry, base, schedule)
    return CalculationResponse(
        year=year,
        mark_up_percent=mark_up_percent(year, schedule),
        default_value=base,
        default_value_with_markup=None if base is None else default_value_with_markup(base, year, schedule),
        benchmark_value=allocation.benchmark_value,
        cbam_factor=allocation.cbam_factor,
        free_allocation=allocation.free_allocation,
        certificates_required=allocation.certificates_required,
        materiality=None
        if materiality is None
        else {
            "variance_percent": materiality.variance_percent,
            "threshold_percent": materiality.threshold_percent,
            "exceeds_threshold": materiality.exceeds_threshold,
            "findings": [item.as_payload() for item in materiality.findings],
        },
    )


__all__ = ["router"]
