from __future__ import annotations

from dataclasses import replace

import pytest

from harnesscost import costing
from harnesscost.costing import (
    InvalidEfficiencyRate,
    InvalidProductionTime,
    InvalidProductionVolume,
    InvalidShiftDuration,
    NonFiniteParameter,
    estimate_costs,
)
from harnesscost.models import HarnessSpecs, ProjectParameters, WorkstationConfig

MANUAL = WorkstationConfig.preset("Manual")
SIMPLE = HarnessSpecs()


def test_single_operation_report(make_operation, plain_parameters):
    ops = [make_operation(setup=10, labor=5, quantity=1)]
    report = estimate_costs(ops, SIMPLE, MANUAL, plain_parameters)

    assert report.time.setup_time == pytest.approx(10)
    assert report.time.base_labor_time == pytest.approx(5)
    assert report.time.effective_labor_time == pytest.approx(5)
    assert report.time.total_production_time == pytest.approx(15)
    assert report.regular_hours == pytest.approx(0.25)
    assert report.overtime_hours == 0
    assert report.labor_cost == pytest.approx(625)
    assert report.setup_cost == 0
    assert report.total_cost == pytest.approx(625)
    assert report.cost_per_unit == pytest.approx(6.25)
    assert report.units_per_shift == 32
    assert report.warnings == []


def test_efficiency_rate_divides_labor(make_operation, plain_parameters):
    ops = [make_operation(setup=10, labor=5, quantity=1)]
    params = replace(plain_parameters, efficiency_rate=50)
    assert costing.effective_labor_time(ops, SIMPLE, MANUAL, params) == pytest.approx(10)
    assert costing.total_production_time(ops, SIMPLE, MANUAL, params) == pytest.approx(20)


def test_workstation_and_factor_scale_labor_only(make_operation, plain_parameters):
    ops = [make_operation(setup=10, labor=4, quantity=3, complexity_factor=1.5)]
    semi = WorkstationConfig.preset("Semi-Auto")
    assert costing.setup_time(ops) == pytest.approx(30)
    assert costing.base_labor_time(ops, SIMPLE, semi) == pytest.approx(4 * 3 * 1.5 * 0.7)


def test_inspection_and_handling_added_once(make_operation, plain_parameters):
    ops = [make_operation(setup=0, labor=10, quantity=1)]
    params = replace(plain_parameters, quality_inspection_time=10, material_handling_time=15, production_volume=500)
    assert costing.total_production_time(ops, SIMPLE, MANUAL, params) == pytest.approx(35)


def test_overtime_split_and_premium(make_operation, plain_parameters):
    ops = [make_operation(setup=0, labor=600, quantity=1)]
    params = replace(plain_parameters, production_volume=1)
    report = estimate_costs(ops, SIMPLE, MANUAL, params)

    assert report.regular_hours == pytest.approx(8)
    assert report.overtime_hours == pytest.approx(2)
    assert report.labor_cost == pytest.approx(8 * 25 + 2 * 25 * 1.5)
    assert report.units_per_shift == 0
    assert report.warnings == ["exceeds_shift"]


def test_setup_cost_counts_operations_not_quantity(make_operation, plain_parameters):
    ops = [make_operation(quantity=5), make_operation(quantity=1)]
    params = replace(plain_parameters, setup_cost_per_operation=5, production_volume=10)
    assert costing.setup_cost(ops, params) == pytest.approx(100)


def test_zero_efficiency_rate_is_rejected(make_operation, plain_parameters):
    ops = [make_operation()]
    params = replace(plain_parameters, efficiency_rate=0)
    with pytest.raises(InvalidEfficiencyRate):
        estimate_costs(ops, SIMPLE, MANUAL, params)
    # Setup time does not depend on the efficiency rate.
    assert costing.setup_time(ops) == pytest.approx(10)


def test_zero_volume_only_breaks_cost_per_unit(make_operation, plain_parameters):
    ops = [make_operation()]
    params = replace(plain_parameters, production_volume=0)
    assert costing.total_cost(ops, SIMPLE, MANUAL, params) == 0
    with pytest.raises(InvalidProductionVolume):
        costing.cost_per_unit(ops, SIMPLE, MANUAL, params)
    with pytest.raises(InvalidProductionVolume):
        estimate_costs(ops, SIMPLE, MANUAL, params)


def test_shift_duration_must_be_positive(make_operation, plain_parameters):
    params = replace(plain_parameters, shift_duration=0)
    with pytest.raises(InvalidShiftDuration):
        costing.units_per_shift([make_operation()], SIMPLE, MANUAL, params)


def test_units_per_shift_needs_positive_production_time(plain_parameters):
    with pytest.raises(InvalidProductionTime):
        costing.units_per_shift([], SIMPLE, MANUAL, plain_parameters)


def test_non_finite_parameters_are_rejected(make_operation, plain_parameters):
    params = replace(plain_parameters, labor_rate=float("nan"))
    with pytest.raises(NonFiniteParameter):
        costing.labor_cost([make_operation()], SIMPLE, MANUAL, params)


def test_cost_input_errors_are_value_errors():
    assert issubclass(InvalidEfficiencyRate, ValueError)
    assert issubclass(NonFiniteParameter, costing.CostInputError)


def test_warnings_order_and_thresholds():
    params = ProjectParameters(efficiency_rate=60, shift_duration=480)
    assert costing.collect_warnings(0, 500, 2.0, params) == [
        "exceeds_shift",
        "no_operations",
        "high_complexity",
        "low_efficiency",
    ]
    boundary = ProjectParameters(efficiency_rate=70, shift_duration=480)
    assert costing.collect_warnings(3, 480, 1.8, boundary) == []


def test_empty_operations_still_report_with_overhead():
    report = estimate_costs([], SIMPLE, MANUAL, ProjectParameters())
    assert report.time.total_production_time == pytest.approx(25)
    assert report.operations_count == 0
    assert "no_operations" in report.warnings
    assert report.to_dict()["units_per_shift"] == 19
