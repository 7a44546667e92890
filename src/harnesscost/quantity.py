"""Resolve operation quantities from a BOM snapshot."""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, replace
from typing import Callable, List, Optional, Sequence, Tuple

from .models import ALL_CATEGORIES, BOMItem, Operation

LOGGER = logging.getLogger(__name__)

IdFactory = Callable[[], str]


def new_operation_id() -> str:
    return f"op-{uuid.uuid4().hex[:12]}"


def _explicit_quantity(operation: Operation) -> int:
    if operation.quantity is not None and operation.quantity >= 1:
        return int(operation.quantity)
    return 1


def matching_bom_items(operation: Operation, bom_items: Sequence[BOMItem]) -> List[BOMItem]:
    """Return the BOM lines ``operation`` is tied to.

    ``"All"`` selects every line; a specific category selects lines whose
    category matches exactly.  Operations without a BOM category match nothing.
    """

    if not operation.bom_category or not bom_items:
        return []
    if operation.bom_category == ALL_CATEGORIES:
        return list(bom_items)
    return [item for item in bom_items if item.category == operation.bom_category]


def resolve_quantity(operation: Operation, bom_items: Sequence[BOMItem]) -> int:
    """Compute the effective quantity of ``operation`` for the given BOM.

    Parameters
    ----------
    operation:
        Operation whose ``bom_category`` selects the relevant BOM lines.
    bom_items:
        Current BOM snapshot.

    Returns
    -------
    int
        Sum of matching BOM quantities, or the operation's own quantity
        (default 1) when the operation is not BOM-driven or nothing matches.
    """

    if not operation.bom_category or not bom_items:
        return _explicit_quantity(operation)
    if operation.bom_category == ALL_CATEGORIES:
        return sum(item.quantity for item in bom_items)
    matches = matching_bom_items(operation, bom_items)
    if not matches:
        return _explicit_quantity(operation)
    return sum(item.quantity for item in matches)


def recalculate_quantities(operations: Sequence[Operation], bom_items: Sequence[BOMItem]) -> List[Operation]:
    return [replace(op, quantity=resolve_quantity(op, bom_items)) for op in operations]


def create_operation(
    template: Operation,
    bom_items: Sequence[BOMItem],
    id_factory: IdFactory = new_operation_id,
) -> Operation:
    """Place a catalog/custom operation on the project with a resolved quantity."""

    seeded = replace(template, quantity=template.quantity or 1)
    return replace(seeded, id=id_factory(), quantity=resolve_quantity(seeded, bom_items))


def duplicate_operation(
    operation: Operation,
    bom_items: Sequence[BOMItem],
    id_factory: IdFactory = new_operation_id,
) -> Operation:
    return replace(
        operation,
        id=id_factory(),
        name=f"{operation.name} (Copy)",
        quantity=resolve_quantity(operation, bom_items),
    )


def split_operations_by_bom(operations: Sequence[Operation], bom_items: Sequence[BOMItem]) -> List[Operation]:
    """Replace each BOM-driven operation with one instance per matching BOM line.

    Operations with a single matching line keep their identity and take that
    line's quantity; operations without matches are left unchanged.
    """

    result: List[Operation] = []
    for operation in operations:
        matches = matching_bom_items(operation, bom_items)
        if not matches:
            result.append(operation)
        elif len(matches) == 1:
            result.append(replace(operation, quantity=matches[0].quantity))
        else:
            LOGGER.debug("Splitting %s into %d operations", operation.name, len(matches))
            for index, item in enumerate(matches):
                result.append(
                    replace(
                        operation,
                        id=f"{operation.id}-split-{index}",
                        name=f"{operation.name} ({item.part_number})",
                        quantity=item.quantity,
                    )
                )
    return result


@dataclass(frozen=True)
class SplitPreviewRow:
    operation: str
    current_count: int
    new_count: int
    bom_items: Tuple[BOMItem, ...]


def split_preview(operations: Sequence[Operation], bom_items: Sequence[BOMItem]) -> List[SplitPreviewRow]:
    """Describe which operations :func:`split_operations_by_bom` would multiply."""

    rows: List[SplitPreviewRow] = []
    for operation in operations:
        matches = matching_bom_items(operation, bom_items)
        if len(matches) > 1:
            rows.append(
                SplitPreviewRow(
                    operation=operation.name,
                    current_count=1,
                    new_count=len(matches),
                    bom_items=tuple(matches),
                )
            )
    return rows


def find_operation(operations: Sequence[Operation], operation_id: str) -> Optional[Operation]:
    return next((op for op in operations if op.id == operation_id), None)


__all__ = [
    "create_operation",
    "duplicate_operation",
    "find_operation",
    "matching_bom_items",
    "new_operation_id",
    "recalculate_quantities",
    "resolve_quantity",
    "split_operations_by_bom",
    "split_preview",
    "SplitPreviewRow",
]
