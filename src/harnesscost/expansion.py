"""Expand template operations against a BOM snapshot.

When a template is applied, an operation tied to a specific BOM category can
be repeated once per distinct part number in that category (auto-repeat)
and/or have its quantity taken from the BOM (auto-quantity).  The preview
shown before applying a template is computed from the same plan, so the
numbers it reports are exactly what :func:`expand_for_bom` generates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Dict, List, Sequence, Tuple

from .models import ALL_CATEGORIES, BOMItem, Operation

LOGGER = logging.getLogger(__name__)

UNASSIGNED = "Unassigned"


@dataclass(frozen=True)
class PartInfo:
    part_number: str
    quantity: int
    description: str


@dataclass(frozen=True)
class PreviewRow:
    category: str
    unique_parts: int
    template_operations: int
    generated_operations: int
    total_quantity: int


@dataclass(frozen=True)
class ExpansionPreview:
    total_operations: int
    total_quantity: int
    breakdown: Tuple[PreviewRow, ...]


def group_bom_by_category(bom_items: Sequence[BOMItem]) -> Dict[str, Dict[str, PartInfo]]:
    """Map category -> part number -> part info; a repeated part number keeps the last line."""

    grouped: Dict[str, Dict[str, PartInfo]] = {}
    for item in bom_items:
        grouped.setdefault(item.category, {})[item.part_number] = PartInfo(
            part_number=item.part_number,
            quantity=item.quantity,
            description=item.description,
        )
    return grouped


def _plan_operation(
    operation: Operation,
    bom_items: Sequence[BOMItem],
    grouped: Dict[str, Dict[str, PartInfo]],
    auto_repeat: bool,
    auto_quantity: bool,
) -> List[Tuple[str, int]]:
    """Return ``(name, quantity)`` for each operation generated from ``operation``."""

    category = operation.bom_category
    if auto_repeat and category and category != ALL_CATEGORIES and category in grouped:
        parts = list(grouped[category].values())
        planned = []
        for part in parts:
            name = f"{operation.name} ({part.part_number})" if len(parts) > 1 else operation.name
            planned.append((name, part.quantity if auto_quantity else 1))
        return planned

    quantity = operation.quantity or 1
    if auto_quantity:
        if category == ALL_CATEGORIES:
            quantity = sum(item.quantity for item in bom_items)
        elif category and category in grouped:
            # Summed per BOM line, not per unique part.
            quantity = sum(item.quantity for item in bom_items if item.category == category)
    return [(operation.name, quantity)]


def _plan(
    template_operations: Sequence[Operation],
    bom_items: Sequence[BOMItem],
    auto_repeat: bool,
    auto_quantity: bool,
) -> List[Tuple[Operation, List[Tuple[str, int]]]]:
    if (not auto_repeat and not auto_quantity) or not bom_items:
        return [(op, [(op.name, op.quantity or 1)]) for op in template_operations]
    grouped = group_bom_by_category(bom_items)
    return [
        (op, _plan_operation(op, bom_items, grouped, auto_repeat, auto_quantity))
        for op in template_operations
    ]


def expand_for_bom(
    template_operations: Sequence[Operation],
    bom_items: Sequence[BOMItem],
    auto_repeat: bool = True,
    auto_quantity: bool = True,
) -> List[Operation]:
    """Generate the operation list applied when a template is used.

    Returned operations carry no ids; the caller assigns them when placing
    the operations on a project.
    """

    expanded: List[Operation] = []
    for operation, planned in _plan(template_operations, bom_items, auto_repeat, auto_quantity):
        if len(planned) > 1:
            LOGGER.debug("Repeating %s for %d part numbers", operation.name, len(planned))
        for name, quantity in planned:
            expanded.append(replace(operation, id=None, name=name, quantity=quantity))
    return expanded


def preview_expansion(
    template_operations: Sequence[Operation],
    bom_items: Sequence[BOMItem],
    auto_repeat: bool = True,
    auto_quantity: bool = True,
) -> ExpansionPreview:
    grouped = group_bom_by_category(bom_items)
    rows: Dict[str, Dict[str, int]] = {}
    total_operations = 0
    total_quantity = 0
    for operation, planned in _plan(template_operations, bom_items, auto_repeat, auto_quantity):
        key = operation.bom_category or UNASSIGNED
        generated = len(planned)
        quantity = sum(qty for _, qty in planned)
        row = rows.setdefault(key, {"template_operations": 0, "generated_operations": 0, "total_quantity": 0})
        row["template_operations"] += 1
        row["generated_operations"] += generated
        row["total_quantity"] += quantity
        total_operations += generated
        total_quantity += quantity

    breakdown = tuple(
        PreviewRow(
            category=key,
            unique_parts=len(grouped.get(key, {})) if key not in (ALL_CATEGORIES, UNASSIGNED) else 1,
            template_operations=row["template_operations"],
            generated_operations=row["generated_operations"],
            total_quantity=row["total_quantity"],
        )
        for key, row in rows.items()
    )
    return ExpansionPreview(total_operations=total_operations, total_quantity=total_quantity, breakdown=breakdown)


__all__ = [
    "ExpansionPreview",
    "PartInfo",
    "PreviewRow",
    "expand_for_bom",
    "group_bom_by_category",
    "preview_expansion",
]
