"""Time and cost aggregation over a project snapshot.

Every function here is pure and can be called on its own, so callers can ask
for a single figure (for example the time breakdown) without evaluating the
cost formulas.  Preconditions are checked only by the formulas that depend on
them; a violated precondition raises a :class:`CostInputError` subclass
instead of returning ``inf``/``nan``.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

import numpy as np

from .complexity import HIGH_COMPLEXITY_THRESHOLD, complexity_multiplier
from .models import HarnessSpecs, Operation, ProjectParameters, WorkstationConfig

LOGGER = logging.getLogger(__name__)

LOW_EFFICIENCY_THRESHOLD = 70.0

WARNING_NO_OPERATIONS = "no_operations"
WARNING_EXCEEDS_SHIFT = "exceeds_shift"
WARNING_HIGH_COMPLEXITY = "high_complexity"
WARNING_LOW_EFFICIENCY = "low_efficiency"

WARNING_MESSAGES = {
    WARNING_NO_OPERATIONS: "No operations selected",
    WARNING_EXCEEDS_SHIFT: "Production time exceeds shift duration",
    WARNING_HIGH_COMPLEXITY: "High complexity harness",
    WARNING_LOW_EFFICIENCY: "Low efficiency rate",
}


class CostInputError(ValueError):
    """Base class for parameter values a cost formula cannot work with."""


class InvalidEfficiencyRate(CostInputError):
    pass


class InvalidShiftDuration(CostInputError):
    pass


class InvalidProductionVolume(CostInputError):
    pass


class InvalidProductionTime(CostInputError):
    pass


class NonFiniteParameter(CostInputError):
    pass


def _require_finite(name: str, value: float) -> float:
    numeric = float(value)
    if not np.isfinite(numeric):
        raise NonFiniteParameter(f"{name} must be a finite number, got {value!r}")
    return numeric


def _require_positive(name: str, value: float, error: type[CostInputError]) -> float:
    numeric = _require_finite(name, value)
    if numeric <= 0:
        raise error(f"{name} must be greater than zero, got {value!r}")
    return numeric


def setup_time(operations: Sequence[Operation]) -> float:
    return float(sum(op.setup_minutes * op.effective_quantity for op in operations))


def base_labor_time(
    operations: Sequence[Operation],
    specs: HarnessSpecs,
    workstation: WorkstationConfig,
) -> float:
    """Labour minutes scaled by per-operation and harness complexity, then by the workstation."""

    multiplier = complexity_multiplier(specs)
    total = sum(op.labor_minutes * op.effective_quantity * op.complexity_factor * multiplier for op in operations)
    return float(total * workstation.efficiency_multiplier)


def effective_labor_time(
    operations: Sequence[Operation],
    specs: HarnessSpecs,
    workstation: WorkstationConfig,
    parameters: ProjectParameters,
) -> float:
    efficiency = _require_positive("efficiency_rate", parameters.efficiency_rate, InvalidEfficiencyRate)
    return base_labor_time(operations, specs, workstation) * 100 / efficiency


def total_production_time(
    operations: Sequence[Operation],
    specs: HarnessSpecs,
    workstation: WorkstationConfig,
    parameters: ProjectParameters,
) -> float:
    # Inspection and handling are counted once on the aggregate, not per unit of volume.
    inspection = _require_finite("quality_inspection_time", parameters.quality_inspection_time)
    handling = _require_finite("material_handling_time", parameters.material_handling_time)
    return setup_time(operations) + effective_labor_time(operations, specs, workstation, parameters) + inspection + handling


def split_hours(total_minutes: float, shift_duration: float) -> Tuple[float, float]:
    """Split production minutes into (regular, overtime) hours for one shift."""

    shift_hours = _require_positive("shift_duration", shift_duration, InvalidShiftDuration) / 60
    total_hours = total_minutes / 60
    return min(total_hours, shift_hours), max(total_hours - shift_hours, 0.0)


def labor_cost(
    operations: Sequence[Operation],
    specs: HarnessSpecs,
    workstation: WorkstationConfig,
    parameters: ProjectParameters,
) -> float:
    rate = _require_finite("labor_rate", parameters.labor_rate)
    overtime_multiplier = _require_finite("overtime_multiplier", parameters.overtime_multiplier)
    volume = _require_finite("production_volume", parameters.production_volume)
    regular_hours, overtime_hours = split_hours(
        total_production_time(operations, specs, workstation, parameters),
        parameters.shift_duration,
    )
    regular = regular_hours * rate
    overtime = overtime_hours * rate * overtime_multiplier
    return (regular + overtime) * volume


def setup_cost(operations: Sequence[Operation], parameters: ProjectParameters) -> float:
    per_operation = _require_finite("setup_cost_per_operation", parameters.setup_cost_per_operation)
    volume = _require_finite("production_volume", parameters.production_volume)
    return len(operations) * per_operation * volume


def total_cost(
    operations: Sequence[Operation],
    specs: HarnessSpecs,
    workstation: WorkstationConfig,
    parameters: ProjectParameters,
) -> float:
    return labor_cost(operations, specs, workstation, parameters) + setup_cost(operations, parameters)


def cost_per_unit(
    operations: Sequence[Operation],
    specs: HarnessSpecs,
    workstation: WorkstationConfig,
    parameters: ProjectParameters,
) -> float:
    volume = _require_positive("production_volume", parameters.production_volume, InvalidProductionVolume)
    return total_cost(operations, specs, workstation, parameters) / volume


def units_per_shift(
    operations: Sequence[Operation],
    specs: HarnessSpecs,
    workstation: WorkstationConfig,
    parameters: ProjectParameters,
) -> int:
    shift = _require_positive("shift_duration", parameters.shift_duration, InvalidShiftDuration)
    per_unit = total_production_time(operations, specs, workstation, parameters)
    if per_unit <= 0:
        raise InvalidProductionTime(f"total production time must be greater than zero, got {per_unit!r}")
    return math.floor(shift / per_unit)


def collect_warnings(
    operations_count: int,
    production_time: float,
    multiplier: float,
    parameters: ProjectParameters,
) -> List[str]:
    """Advisory checks over already-derived values; never raises."""

    warnings: List[str] = []
    if production_time > parameters.shift_duration:
        warnings.append(WARNING_EXCEEDS_SHIFT)
    if operations_count == 0:
        warnings.append(WARNING_NO_OPERATIONS)
    if multiplier > HIGH_COMPLEXITY_THRESHOLD:
        warnings.append(WARNING_HIGH_COMPLEXITY)
    if parameters.efficiency_rate < LOW_EFFICIENCY_THRESHOLD:
        warnings.append(WARNING_LOW_EFFICIENCY)
    return warnings


@dataclass(frozen=True)
class TimeBreakdown:
    setup_time: float
    base_labor_time: float
    effective_labor_time: float
    quality_inspection_time: float
    material_handling_time: float
    total_production_time: float


@dataclass(frozen=True)
class CostReport:
    time: TimeBreakdown
    complexity_multiplier: float
    operations_count: int
    regular_hours: float
    overtime_hours: float
    labor_cost: float
    setup_cost: float
    total_cost: float
    cost_per_unit: float
    units_per_shift: int
    production_volume: int
    warnings: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "setup_time": self.time.setup_time,
            "base_labor_time": self.time.base_labor_time,
            "effective_labor_time": self.time.effective_labor_time,
            "quality_inspection_time": self.time.quality_inspection_time,
            "material_handling_time": self.time.material_handling_time,
            "total_production_time": self.time.total_production_time,
            "complexity_multiplier": self.complexity_multiplier,
            "operations_count": self.operations_count,
            "regular_hours": self.regular_hours,
            "overtime_hours": self.overtime_hours,
            "labor_cost": self.labor_cost,
            "setup_cost": self.setup_cost,
            "total_cost": self.total_cost,
            "cost_per_unit": self.cost_per_unit,
            "units_per_shift": self.units_per_shift,
            "production_volume": self.production_volume,
            "warnings": list(self.warnings),
        }


def time_breakdown(
    operations: Sequence[Operation],
    specs: HarnessSpecs,
    workstation: WorkstationConfig,
    parameters: ProjectParameters,
) -> TimeBreakdown:
    return TimeBreakdown(
        setup_time=setup_time(operations),
        base_labor_time=base_labor_time(operations, specs, workstation),
        effective_labor_time=effective_labor_time(operations, specs, workstation, parameters),
        quality_inspection_time=float(parameters.quality_inspection_time),
        material_handling_time=float(parameters.material_handling_time),
        total_production_time=total_production_time(operations, specs, workstation, parameters),
    )


def estimate_costs(
    operations: Sequence[Operation],
    specs: HarnessSpecs,
    workstation: WorkstationConfig,
    parameters: ProjectParameters,
) -> CostReport:
    """Evaluate every figure of the cost report for one snapshot."""

    times = time_breakdown(operations, specs, workstation, parameters)
    multiplier = complexity_multiplier(specs)
    regular_hours, overtime_hours = split_hours(times.total_production_time, parameters.shift_duration)
    labor = labor_cost(operations, specs, workstation, parameters)
    setup = setup_cost(operations, parameters)
    report = CostReport(
        time=times,
        complexity_multiplier=multiplier,
        operations_count=len(operations),
        regular_hours=regular_hours,
        overtime_hours=overtime_hours,
        labor_cost=labor,
        setup_cost=setup,
        total_cost=labor + setup,
        cost_per_unit=cost_per_unit(operations, specs, workstation, parameters),
        units_per_shift=units_per_shift(operations, specs, workstation, parameters),
        production_volume=int(parameters.production_volume),
        warnings=collect_warnings(len(operations), times.total_production_time, multiplier, parameters),
    )
    LOGGER.debug(
        "Cost estimate => total_time=%.1fmin | total=$%.2f | per_unit=$%.2f | units_per_shift=%s",
        times.total_production_time,
        report.total_cost,
        report.cost_per_unit,
        report.units_per_shift,
    )
    return report


__all__ = [
    "CostInputError",
    "CostReport",
    "InvalidEfficiencyRate",
    "InvalidProductionTime",
    "InvalidProductionVolume",
    "InvalidShiftDuration",
    "NonFiniteParameter",
    "TimeBreakdown",
    "WARNING_MESSAGES",
    "base_labor_time",
    "collect_warnings",
    "cost_per_unit",
    "effective_labor_time",
    "estimate_costs",
    "labor_cost",
    "setup_cost",
    "setup_time",
    "split_hours",
    "time_breakdown",
    "total_cost",
    "total_production_time",
    "units_per_shift",
]
