"""
Built-in catalog of standard wire-harness manufacturing operations.

The catalog ships as ``data/operation_catalog.csv`` so it can be extended by
hand; :func:`load_catalog` also accepts an alternative CSV with the same
columns (for example a shop-specific catalog pointed to by configuration).
"""

from __future__ import annotations

import csv
from functools import lru_cache
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from .models import ALL_CATEGORIES, BUILTIN_BOM_CATEGORIES, BOMItem, Operation

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "data" / "operation_catalog.csv"

_TRUE = {"1", "true", "yes", "y"}


@lru_cache(maxsize=None)
def _load_catalog_file(path: Path) -> Tuple[Operation, ...]:
    operations: List[Operation] = []
    with path.open(newline="", encoding="utf-8") as f:
        for row in csv.DictReader(f):
            operations.append(
                Operation(
                    name=row["name"].strip(),
                    category=row["category"].strip(),
                    setup_minutes=float(row["setup_minutes"]),
                    labor_minutes=float(row["labor_minutes"]),
                    is_manual=row.get("is_manual", "true").strip().lower() in _TRUE,
                    complexity_factor=float(row.get("complexity_factor") or 1.0),
                    bom_category=(row.get("bom_category") or "").strip() or None,
                )
            )
    return tuple(operations)


def load_catalog(path: Optional[Path] = None) -> List[Operation]:
    return list(_load_catalog_file(Path(path or DEFAULT_CATALOG_PATH).resolve()))


def filter_catalog(operations: Iterable[Operation], bom_category: str = ALL_CATEGORIES) -> List[Operation]:
    """Operations relevant to ``bom_category``; ``"All"`` returns everything.

    Operations tied to every BOM line (``"All"``) are relevant to any filter.
    """

    if bom_category == ALL_CATEGORIES:
        return list(operations)
    return [op for op in operations if op.bom_category in (bom_category, ALL_CATEGORIES)]


def available_bom_categories(bom_items: Sequence[BOMItem]) -> List[str]:
    """Selectable BOM categories: ``"All"``, the built-ins, then custom categories from the BOM."""

    custom = [c for c in dict.fromkeys(item.category for item in bom_items) if c not in BUILTIN_BOM_CATEGORIES]
    return [ALL_CATEGORIES, *BUILTIN_BOM_CATEGORIES, *custom]


def operation_categories(operations: Iterable[Operation]) -> List[str]:
    return list(dict.fromkeys(op.category for op in operations))


__all__ = [
    "DEFAULT_CATALOG_PATH",
    "available_bom_categories",
    "filter_catalog",
    "load_catalog",
    "operation_categories",
]
