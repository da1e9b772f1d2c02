"""Free-allocation adjustment and certificate obligation per entry."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from src.cbam.domain.entities import EmissionEntry, coerce_entry
from src.cbam.schedule.pack import ScheduleConfig
from src.cbam.utils.coerce import as_float, as_str

GENERAL_ROUTE = "General"


@dataclass(frozen=True)
class Benchmark:
    """Free-allocation benchmark for a CN code and production route."""

    cn_code: str
    production_route: str = GENERAL_ROUTE
    value_2026: float = 0.0
    value_from_2027: float | None = None
    cross_sectoral_correction_factor: float = 1.0

    def value_for(self, year: int) -> float:
        if year <= 2026 or self.value_from_2027 is None:
            return self.value_2026
        return self.value_from_2027

    @classmethod
    def from_mapping(cls, payload: Mapping[str, Any]) -> "Benchmark":
        cn_code = as_str(payload.get("cn_code"))
        if not cn_code:
            raise ValueError("Benchmark is missing a 'cn_code'.")
        value_2026 = as_float(payload.get("cbam_benchmark_2026", payload.get("value")))
        if value_2026 is None:
            raise ValueError(f"Benchmark for '{cn_code}' has no numeric value.")
        return cls(
            cn_code=cn_code,
            production_route=as_str(payload.get("production_route")) or GENERAL_ROUTE,
            value_2026=value_2026,
            value_from_2027=as_float(payload.get("cbam_benchmark_2027_onwards")),
            cross_sectoral_correction_factor=as_float(payload.get("cross_sectoral_correction_factor")) or 1.0,
        )


@dataclass(frozen=True)
class FreeAllocationResult:
    free_allocation: float
    certificates_required: float
    cbam_factor: float
    benchmark_value: float
    correction_factor: float


def find_benchmark(entry: EmissionEntry, benchmarks: list[Benchmark]) -> Benchmark | None:
    """Pick the route-specific benchmark for the entry, falling back to the general one."""

    general: Benchmark | None = None
    for benchmark in benchmarks:
        if benchmark.cn_code != entry.cn_code:
            continue
        if entry.production_route and benchmark.production_route == entry.production_route:
            return benchmark
        if benchmark.production_route == GENERAL_ROUTE and general is None:
            general = benchmark
    return general


def calculate_free_allocation(
    entry: EmissionEntry | Mapping[str, Any],
    benchmark: Benchmark | None,
    year: int,
    schedule: ScheduleConfig,
) -> FreeAllocationResult:
    """Free allocation = benchmark x (1 - CBAM factor) x quantity x correction.

    Certificates required = max(0, embedded - free allocation) x CBAM factor.
    Without a benchmark nothing is allocated and nothing is computed.
    """

    snapshot = coerce_entry(entry)
    if benchmark is None:
        return FreeAllocationResult(0.0, 0.0, 0.0, 0.0, 1.0)

    factor = schedule.cbam_factor_for(year)
    if factor is None:
        years = sorted(schedule.cbam_factor_by_year)
        # outside the phase-in table the nearest scheduled factor applies
        factor = schedule.cbam_factor_by_year[years[-1] if year > years[-1] else years[0]]
    value = benchmark.value_for(year)
    quantity = snapshot.quantity or 0.0
    allocation = value * (1 - factor) * quantity * benchmark.cross_sectoral_correction_factor
    embedded = snapshot.total_embedded_emissions or 0.0
    certificates = max(0.0, embedded - allocation) * factor
    return FreeAllocationResult(
        free_allocation=allocation,
        certificates_required=certificates,
        cbam_factor=factor,
        benchmark_value=value,
        correction_factor=benchmark.cross_sectoral_correction_factor,
    )


__all__ = [
    "Benchmark",
    "FreeAllocationResult",
    "GENERAL_ROUTE",
    "calculate_free_allocation",
    "find_benchmark",
]
