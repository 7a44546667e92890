"""Single-owner project state for an estimating session."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Iterable, List, Optional, Sequence

from .costing import CostReport, estimate_costs, time_breakdown, TimeBreakdown
from .harness_specs import recompute_harness_specs
from .models import BOMItem, HarnessSpecs, Operation, ProjectParameters, WireCutItem, WorkstationConfig
from .quantity import (
    IdFactory,
    create_operation,
    duplicate_operation,
    find_operation,
    new_operation_id,
    recalculate_quantities,
    split_operations_by_bom,
)
from .templates import TemplateLibrary

LOGGER = logging.getLogger(__name__)


@dataclass
class EstimatorSession:
    """Holds one project snapshot and keeps derived harness specs current.

    Specs are recomputed inside :meth:`set_bom_items` and
    :meth:`set_wire_cut_items`, so any later :meth:`report` sees them.
    """

    operations: List[Operation] = field(default_factory=list)
    bom_items: List[BOMItem] = field(default_factory=list)
    wire_cut_items: List[WireCutItem] = field(default_factory=list)
    specs: HarnessSpecs = field(default_factory=HarnessSpecs)
    workstation: WorkstationConfig = field(default_factory=WorkstationConfig)
    parameters: ProjectParameters = field(default_factory=ProjectParameters)
    id_factory: IdFactory = new_operation_id

    def set_bom_items(self, bom_items: Iterable[BOMItem]) -> None:
        self.bom_items = list(bom_items)
        self._refresh_specs()

    def set_wire_cut_items(self, wire_cut_items: Iterable[WireCutItem]) -> None:
        self.wire_cut_items = list(wire_cut_items)
        self._refresh_specs()

    def _refresh_specs(self) -> None:
        self.specs = recompute_harness_specs(self.specs, self.bom_items, self.wire_cut_items)

    def set_specs(self, specs: HarnessSpecs) -> None:
        """Manual edit; overwritten field-by-field by the next non-zero estimate."""
        self.specs = specs

    def set_workstation(self, workstation_type: str) -> None:
        self.workstation = WorkstationConfig.preset(workstation_type)

    def set_parameters(self, parameters: ProjectParameters) -> None:
        self.parameters = parameters

    def add_operation(self, template: Operation) -> Operation:
        operation = create_operation(template, self.bom_items, self.id_factory)
        self.operations.append(operation)
        LOGGER.debug("Added %s (qty %d)", operation.name, operation.effective_quantity)
        return operation

    def add_operations(self, templates: Sequence[Operation]) -> List[Operation]:
        return [self.add_operation(template) for template in templates]

    def duplicate_operation(self, operation_id: str) -> Optional[Operation]:
        source = find_operation(self.operations, operation_id)
        if source is None:
            return None
        copy = duplicate_operation(source, self.bom_items, self.id_factory)
        self.operations.append(copy)
        return copy

    def update_operation(self, operation_id: str, **changes) -> Optional[Operation]:
        source = find_operation(self.operations, operation_id)
        if source is None:
            return None
        updated = replace(source, **changes)
        self.operations = [updated if op.id == operation_id else op for op in self.operations]
        return updated

    def remove_operation(self, operation_id: str) -> bool:
        remaining = [op for op in self.operations if op.id != operation_id]
        removed = len(remaining) != len(self.operations)
        self.operations = remaining
        return removed

    def clear_operations(self) -> None:
        self.operations = []

    def recalculate_quantities(self) -> None:
        self.operations = recalculate_quantities(self.operations, self.bom_items)

    def split_by_bom(self) -> int:
        """Split BOM-driven operations per matching line; returns the number of operations added."""
        before = len(self.operations)
        self.operations = split_operations_by_bom(self.operations, self.bom_items)
        added = len(self.operations) - before
        LOGGER.info("Split operations by BOM: %d -> %d", before, len(self.operations))
        return added

    def apply_template(
        self,
        library: TemplateLibrary,
        template_id: str,
        auto_repeat: bool = True,
        auto_quantity: bool = True,
    ) -> List[Operation]:
        """Append the template expanded for the BOM after the current operations; returns the added ones."""
        expanded = library.apply_template(template_id, self.bom_items, auto_repeat, auto_quantity)
        added = [replace(op, id=self.id_factory()) for op in expanded]
        self.operations.extend(added)
        return added

    def save_as_template(
        self,
        library: TemplateLibrary,
        name: str,
        description: str = "",
        harness_type: str = "",
    ):
        return library.save_template(name, description, harness_type, self.operations, self.bom_items, self.specs)

    def times(self) -> TimeBreakdown:
        return time_breakdown(self.operations, self.specs, self.workstation, self.parameters)

    def report(self) -> CostReport:
        return estimate_costs(self.operations, self.specs, self.workstation, self.parameters)


__all__ = ["EstimatorSession"]
