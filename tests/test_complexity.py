from __future__ import annotations

import pytest

from harnesscost.complexity import (
    UnknownComplexityLevel,
    complexity_breakdown,
    complexity_multiplier,
    max_multiplier,
)
from harnesscost.models import COMPLEXITY_LEVELS, HarnessSpecs


def test_empty_simple_harness_is_neutral():
    assert complexity_multiplier(HarnessSpecs()) == pytest.approx(1.0)


def test_factors_combine_multiplicatively():
    specs = HarnessSpecs(
        total_wires=100,
        total_connectors=20,
        total_branches=10,
        total_splices=5,
        complexity_level="Medium",
    )
    breakdown = complexity_breakdown(specs)
    assert breakdown.wire_factor == pytest.approx(1.1)
    assert breakdown.connector_factor == pytest.approx(1.1)
    assert breakdown.branch_factor == pytest.approx(1.15)
    assert breakdown.splice_factor == pytest.approx(1.2)
    assert complexity_multiplier(specs) == pytest.approx(1.2 * 1.1 * 1.1 * 1.15 * 1.2)


@pytest.mark.parametrize("field", ["total_wires", "total_connectors", "total_branches", "total_splices"])
def test_multiplier_grows_with_each_count(field):
    previous = complexity_multiplier(HarnessSpecs())
    for count in (1, 5, 10, 20):
        current = complexity_multiplier(HarnessSpecs(**{field: count}))
        assert current > previous
        previous = current


def test_factors_saturate_at_their_caps():
    specs = HarnessSpecs(total_wires=10_000, total_connectors=10_000, total_branches=10_000, total_splices=10_000)
    breakdown = complexity_breakdown(specs)
    assert (breakdown.wire_factor, breakdown.connector_factor, breakdown.branch_factor, breakdown.splice_factor) == (
        1.5,
        1.3,
        1.4,
        1.6,
    )


def test_product_is_not_capped_for_very_complex():
    specs = HarnessSpecs(
        total_wires=5000,
        total_connectors=500,
        total_branches=100,
        total_splices=100,
        complexity_level="Very Complex",
    )
    assert complexity_multiplier(specs) == pytest.approx(8.736)
    assert max_multiplier("Very Complex") == pytest.approx(8.736)


@pytest.mark.parametrize("level", COMPLEXITY_LEVELS)
def test_multiplier_never_exceeds_tier_maximum(level):
    for count in (0, 7, 50, 999):
        specs = HarnessSpecs(
            total_wires=count,
            total_connectors=count,
            total_branches=count,
            total_splices=count,
            complexity_level=level,
        )
        assert complexity_multiplier(specs) <= max_multiplier(level) + 1e-9


def test_unknown_tier_raises():
    with pytest.raises(UnknownComplexityLevel):
        complexity_multiplier(HarnessSpecs(complexity_level="Extreme"))
