from __future__ import annotations

from dataclasses import dataclass

from .models import COMPLEX, MEDIUM, SIMPLE, VERY_COMPLEX, HarnessSpecs

BASE_MULTIPLIERS = {
    SIMPLE: 1.0,
    MEDIUM: 1.2,
    COMPLEX: 1.5,
    VERY_COMPLEX: 2.0,
}

# (divisor, step, cap) per scaling metric
WIRE_SCALE = (100.0, 0.1, 1.5)
CONNECTOR_SCALE = (20.0, 0.1, 1.3)
BRANCH_SCALE = (10.0, 0.15, 1.4)
SPLICE_SCALE = (5.0, 0.2, 1.6)

HIGH_COMPLEXITY_THRESHOLD = 1.8


class UnknownComplexityLevel(KeyError):
    """Raised when a harness carries a tier outside the known ladder."""


@dataclass(frozen=True)
class ComplexityBreakdown:
    base: float
    wire_factor: float
    connector_factor: float
    branch_factor: float
    splice_factor: float

    @property
    def multiplier(self) -> float:
        return self.base * self.wire_factor * self.connector_factor * self.branch_factor * self.splice_factor


def _scale(count: float, scale: tuple[float, float, float]) -> float:
    divisor, step, cap = scale
    return min(1 + (count / divisor) * step, cap)


def base_multiplier(complexity_level: str) -> float:
    try:
        return BASE_MULTIPLIERS[complexity_level]
    except KeyError:
        raise UnknownComplexityLevel(complexity_level) from None


def complexity_breakdown(specs: HarnessSpecs) -> ComplexityBreakdown:
    return ComplexityBreakdown(
        base=base_multiplier(specs.complexity_level),
        wire_factor=_scale(specs.total_wires, WIRE_SCALE),
        connector_factor=_scale(specs.total_connectors, CONNECTOR_SCALE),
        branch_factor=_scale(specs.total_branches, BRANCH_SCALE),
        splice_factor=_scale(specs.total_splices, SPLICE_SCALE),
    )


def complexity_multiplier(specs: HarnessSpecs) -> float:
    """Combine the tier base with the four saturating scale factors.

    Each factor is capped individually; the product itself is not capped, so
    a Very Complex harness saturating every factor reaches about 8.74.
    """

    return complexity_breakdown(specs).multiplier


def max_multiplier(complexity_level: str) -> float:
    return base_multiplier(complexity_level) * WIRE_SCALE[2] * CONNECTOR_SCALE[2] * BRANCH_SCALE[2] * SPLICE_SCALE[2]


__all__ = [
    "BASE_MULTIPLIERS",
    "ComplexityBreakdown",
    "HIGH_COMPLEXITY_THRESHOLD",
    "UnknownComplexityLevel",
    "base_multiplier",
    "complexity_breakdown",
    "complexity_multiplier",
    "max_multiplier",
]
