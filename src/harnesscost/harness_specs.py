"""Derive harness metrics from BOM and wire cut list snapshots."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence, Tuple

from .models import COMPLEX, CONNECTOR, MEDIUM, SIMPLE, VERY_COMPLEX, BOMItem, HarnessSpecs, WireCutItem

LOGGER = logging.getLogger(__name__)

SPLICE_MARKER = "splice"

# (tier, wires >, connectors >, branches >) evaluated in ascending order;
# a later match overrides an earlier one.
COMPLEXITY_THRESHOLDS: Tuple[Tuple[str, int, int, int], ...] = (
    (MEDIUM, 50, 10, 5),
    (COMPLEX, 100, 20, 10),
    (VERY_COMPLEX, 200, 40, 20),
)


@dataclass(frozen=True)
class HarnessSpecEstimate:
    """Candidate values computed from the current snapshots."""

    wire_count: int
    connector_count: int
    estimated_branches: int
    estimated_splices: int
    total_length: float
    complexity_level: str


def classify_complexity(wire_count: int, connector_count: int, branches: int) -> str:
    level = SIMPLE
    for tier, wire_limit, connector_limit, branch_limit in COMPLEXITY_THRESHOLDS:
        if wire_count > wire_limit or connector_count > connector_limit or branches > branch_limit:
            level = tier
    return level


def estimate_harness_specs(
    bom_items: Sequence[BOMItem],
    wire_cut_items: Sequence[WireCutItem],
) -> HarnessSpecEstimate:
    wire_count = sum(item.quantity for item in wire_cut_items)
    connector_count = sum(item.quantity for item in bom_items if item.category == CONNECTOR)
    # One origin point is the harness root; every further distinct origin implies a branch.
    origins = {item.from_point for item in wire_cut_items}
    branches = max(len(origins) - 1, 0)
    splices = sum(
        1
        for item in wire_cut_items
        if SPLICE_MARKER in item.from_point.lower() or SPLICE_MARKER in item.to_point.lower()
    )
    total_length = float(sum(item.length * item.quantity for item in wire_cut_items))
    return HarnessSpecEstimate(
        wire_count=wire_count,
        connector_count=connector_count,
        estimated_branches=branches,
        estimated_splices=splices,
        total_length=total_length,
        complexity_level=classify_complexity(wire_count, connector_count, branches),
    )


def apply_estimate(previous: HarnessSpecs, estimate: HarnessSpecEstimate) -> HarnessSpecs:
    """Merge ``estimate`` into ``previous``; zero-valued estimates keep the stored value."""

    if estimate.wire_count > 0 or estimate.connector_count > 0:
        complexity_level = estimate.complexity_level
    else:
        complexity_level = previous.complexity_level
    return HarnessSpecs(
        total_wires=estimate.wire_count or previous.total_wires,
        total_connectors=estimate.connector_count or previous.total_connectors,
        total_branches=estimate.estimated_branches or previous.total_branches,
        total_splices=estimate.estimated_splices or previous.total_splices,
        harness_length=estimate.total_length or previous.harness_length,
        complexity_level=complexity_level,
    )


def recompute_harness_specs(
    previous: HarnessSpecs,
    bom_items: Sequence[BOMItem],
    wire_cut_items: Sequence[WireCutItem],
) -> HarnessSpecs:
    """Re-derive specs after the BOM or wire cut list changed."""

    estimate = estimate_harness_specs(bom_items, wire_cut_items)
    specs = apply_estimate(previous, estimate)
    LOGGER.debug(
        "Harness specs recomputed => wires=%s | connectors=%s | branches=%s | splices=%s | length=%.1fmm | %s",
        specs.total_wires,
        specs.total_connectors,
        specs.total_branches,
        specs.total_splices,
        specs.harness_length,
        specs.complexity_level,
    )
    return specs


__all__ = [
    "COMPLEXITY_THRESHOLDS",
    "HarnessSpecEstimate",
    "apply_estimate",
    "classify_complexity",
    "estimate_harness_specs",
    "recompute_harness_specs",
]
