from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime
from typing import Mapping, Optional, Tuple

# BOM categories are open-world strings; these are the built-in ones.
WIRE = "Wire"
CONNECTOR = "Connector"
TERMINAL = "Terminal"
PROTECTION = "Protection"
HARDWARE = "Hardware"
OTHER = "Other"
ALL_CATEGORIES = "All"

BUILTIN_BOM_CATEGORIES: Tuple[str, ...] = (WIRE, CONNECTOR, TERMINAL, PROTECTION, HARDWARE, OTHER)

OPERATION_CATEGORIES: Tuple[str, ...] = ("Pre-Production", "Assembly", "Testing", "Finishing")

SIMPLE = "Simple"
MEDIUM = "Medium"
COMPLEX = "Complex"
VERY_COMPLEX = "Very Complex"
COMPLEXITY_LEVELS: Tuple[str, ...] = (SIMPLE, MEDIUM, COMPLEX, VERY_COMPLEX)

# Keep tuple structure to preserve order for display
WORKSTATION_PRESETS: Tuple[Tuple[str, float, str], ...] = (
    ("Manual", 1.0, "Hand tools and manual processes"),
    ("Semi-Auto", 0.7, "Semi-automated equipment"),
    ("Automated", 0.4, "Fully automated systems"),
)
WORKSTATION_MULTIPLIERS = {name: multiplier for name, multiplier, _ in WORKSTATION_PRESETS}


@dataclass(frozen=True)
class Operation:
    """One manufacturing step.

    ``id`` is ``None`` for operations held by templates; the boundary assigns
    ids when operations are placed on a project.
    """

    name: str
    category: str
    setup_minutes: float
    labor_minutes: float
    is_manual: bool = True
    complexity_factor: float = 1.0
    quantity: Optional[int] = None
    bom_category: Optional[str] = None
    id: Optional[str] = None

    @property
    def effective_quantity(self) -> int:
        return self.quantity or 1

    def as_template(self) -> "Operation":
        if self.id is None:
            return self
        return replace(self, id=None)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "setup_minutes": self.setup_minutes,
            "labor_minutes": self.labor_minutes,
            "is_manual": self.is_manual,
            "complexity_factor": self.complexity_factor,
            "quantity": self.quantity,
            "bom_category": self.bom_category,
        }

    @classmethod
    def from_dict(cls, raw: Mapping[str, object]) -> "Operation":
        quantity = _pick(raw, "quantity")
        return cls(
            name=str(_pick(raw, "name", default="")),
            category=str(_pick(raw, "category", default="")),
            setup_minutes=float(_pick(raw, "setup_minutes", "setupMinutes", default=0.0)),
            labor_minutes=float(_pick(raw, "labor_minutes", "laborMinutes", default=0.0)),
            is_manual=bool(_pick(raw, "is_manual", "isManual", default=True)),
            complexity_factor=float(_pick(raw, "complexity_factor", "complexityFactor", default=1.0)),
            quantity=int(quantity) if quantity is not None else None,
            bom_category=_pick(raw, "bom_category", "bomCategory"),
            id=_pick(raw, "id"),
        )


@dataclass(frozen=True)
class BOMItem:
    id: str
    part_number: str
    description: str
    quantity: int
    category: str
    length: Optional[float] = None
    wire_gauge: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Mapping[str, object]) -> "BOMItem":
        length = _pick(raw, "length")
        return cls(
            id=str(_pick(raw, "id", default="")),
            part_number=str(_pick(raw, "part_number", "partNumber", default="")),
            description=str(_pick(raw, "description", default="")),
            quantity=int(_pick(raw, "quantity", default=1)),
            category=str(_pick(raw, "category", default=OTHER)),
            length=float(length) if length is not None else None,
            wire_gauge=_pick(raw, "wire_gauge", "wireGauge"),
        )


@dataclass(frozen=True)
class WireCutItem:
    wire_id: str
    from_point: str
    to_point: str
    length: float
    quantity: int = 1
    wire_gauge: str = ""
    color: str = ""
    id: Optional[str] = None

    @property
    def total_length(self) -> float:
        return self.length * self.quantity

    @classmethod
    def from_dict(cls, raw: Mapping[str, object]) -> "WireCutItem":
        return cls(
            wire_id=str(_pick(raw, "wire_id", "wireId", default="")),
            from_point=str(_pick(raw, "from_point", "fromPoint", default="")),
            to_point=str(_pick(raw, "to_point", "toPoint", default="")),
            length=float(_pick(raw, "length", default=0.0)),
            quantity=int(_pick(raw, "quantity", default=1)),
            wire_gauge=str(_pick(raw, "wire_gauge", "wireGauge", default="")),
            color=str(_pick(raw, "color", default="")),
            id=_pick(raw, "id"),
        )


@dataclass(frozen=True)
class HarnessSpecs:
    total_wires: int = 0
    total_connectors: int = 0
    total_branches: int = 0
    total_splices: int = 0
    harness_length: float = 0.0
    complexity_level: str = SIMPLE

    @classmethod
    def from_dict(cls, raw: Mapping[str, object]) -> "HarnessSpecs":
        return cls(
            total_wires=int(_pick(raw, "total_wires", "totalWires", default=0)),
            total_connectors=int(_pick(raw, "total_connectors", "totalConnectors", default=0)),
            total_branches=int(_pick(raw, "total_branches", "totalBranches", default=0)),
            total_splices=int(_pick(raw, "total_splices", "totalSplices", default=0)),
            harness_length=float(_pick(raw, "harness_length", "harnessLength", default=0.0)),
            complexity_level=str(_pick(raw, "complexity_level", "complexityLevel", default=SIMPLE)),
        )


@dataclass(frozen=True)
class WorkstationConfig:
    type: str = "Manual"
    efficiency_multiplier: float = 1.0

    @classmethod
    def preset(cls, workstation_type: str) -> "WorkstationConfig":
        """Return the canonical multiplier pairing for ``workstation_type``."""

        if workstation_type not in WORKSTATION_MULTIPLIERS:
            raise ValueError(f"Unknown workstation type: {workstation_type!r}")
        return cls(type=workstation_type, efficiency_multiplier=WORKSTATION_MULTIPLIERS[workstation_type])

    @classmethod
    def from_dict(cls, raw: Mapping[str, object]) -> "WorkstationConfig":
        workstation_type = str(_pick(raw, "type", default="Manual"))
        multiplier = _pick(raw, "efficiency_multiplier", "efficiencyMultiplier")
        if multiplier is None:
            multiplier = WORKSTATION_MULTIPLIERS.get(workstation_type, 1.0)
        return cls(type=workstation_type, efficiency_multiplier=float(multiplier))


@dataclass(frozen=True)
class ProjectParameters:
    labor_rate: float = 25.0
    shift_duration: float = 480.0
    production_volume: int = 100
    efficiency_rate: float = 85.0
    quality_inspection_time: float = 10.0
    overtime_multiplier: float = 1.5
    setup_cost_per_operation: float = 5.0
    material_handling_time: float = 15.0

    @classmethod
    def from_dict(cls, raw: Mapping[str, object]) -> "ProjectParameters":
        defaults = cls()
        return cls(
            labor_rate=float(_pick(raw, "labor_rate", "laborRate", default=defaults.labor_rate)),
            shift_duration=float(_pick(raw, "shift_duration", "shiftDuration", default=defaults.shift_duration)),
            production_volume=int(
                _pick(raw, "production_volume", "productionVolume", default=defaults.production_volume)
            ),
            efficiency_rate=float(_pick(raw, "efficiency_rate", "efficiencyRate", default=defaults.efficiency_rate)),
            quality_inspection_time=float(
                _pick(raw, "quality_inspection_time", "qualityInspectionTime", default=defaults.quality_inspection_time)
            ),
            overtime_multiplier=float(
                _pick(raw, "overtime_multiplier", "overtimeMultiplier", default=defaults.overtime_multiplier)
            ),
            setup_cost_per_operation=float(
                _pick(
                    raw,
                    "setup_cost_per_operation",
                    "setupCostPerOperation",
                    default=defaults.setup_cost_per_operation,
                )
            ),
            material_handling_time=float(
                _pick(raw, "material_handling_time", "materialHandlingTime", default=defaults.material_handling_time)
            ),
        )


@dataclass(frozen=True)
class HarnessTemplate:
    """Saved, reusable set of operations plus the harness metadata used for matching."""

    id: str
    name: str
    description: str
    harness_type: str
    operations: Tuple[Operation, ...]
    bom_categories: Tuple[str, ...]
    complexity: str
    estimated_wire_count: int
    estimated_connector_count: int
    created_at: datetime
    last_used: Optional[datetime] = None


def _pick(raw: Mapping[str, object], *keys: str, default=None):
    for key in keys:
        if key in raw and raw[key] is not None:
            return raw[key]
    return default


__all__ = [
    "ALL_CATEGORIES",
    "BUILTIN_BOM_CATEGORIES",
    "COMPLEXITY_LEVELS",
    "OPERATION_CATEGORIES",
    "WORKSTATION_PRESETS",
    "BOMItem",
    "HarnessSpecs",
    "HarnessTemplate",
    "Operation",
    "ProjectParameters",
    "WireCutItem",
    "WorkstationConfig",
]
