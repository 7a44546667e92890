"""Manufacturing time and cost estimation for wire harnesses."""

from .complexity import complexity_multiplier
from .costing import CostInputError, CostReport, estimate_costs
from .expansion import expand_for_bom, preview_expansion
from .harness_specs import estimate_harness_specs, recompute_harness_specs
from .models import BOMItem, HarnessSpecs, HarnessTemplate, Operation, ProjectParameters, WireCutItem, WorkstationConfig
from .quantity import resolve_quantity, split_operations_by_bom
from .session import EstimatorSession
from .templates import TemplateLibrary, match_templates

__all__ = [
    "BOMItem",
    "CostInputError",
    "CostReport",
    "EstimatorSession",
    "HarnessSpecs",
    "HarnessTemplate",
    "Operation",
    "ProjectParameters",
    "TemplateLibrary",
    "WireCutItem",
    "WorkstationConfig",
    "complexity_multiplier",
    "estimate_costs",
    "estimate_harness_specs",
    "expand_for_bom",
    "match_templates",
    "preview_expansion",
    "recompute_harness_specs",
    "resolve_quantity",
    "split_operations_by_bom",
]
