from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Sequence

import pandas as pd

from .models import BOMItem, WireCutItem


@dataclass(frozen=True)
class WireAnalysis:
    total_wires: int
    total_length: float
    average_length: float
    unique_gauges: int


@dataclass(frozen=True)
class BOMAnalysis:
    total_items: int
    unique_parts: int
    quantity_by_category: Dict[str, int]


def wire_cut_frame(wire_cut_items: Sequence[WireCutItem]) -> pd.DataFrame:
    columns = ["WIRE_ID", "FROM_POINT", "TO_POINT", "WIRE_GAUGE", "COLOR", "LENGTH", "QUANTITY"]
    rows = [
        (item.wire_id, item.from_point, item.to_point, item.wire_gauge, item.color, item.length, item.quantity)
        for item in wire_cut_items
    ]
    return pd.DataFrame(rows, columns=columns)


def bom_frame(bom_items: Sequence[BOMItem]) -> pd.DataFrame:
    columns = ["PART_NUMBER", "DESCRIPTION", "CATEGORY", "QUANTITY"]
    rows = [(item.part_number, item.description, item.category, item.quantity) for item in bom_items]
    return pd.DataFrame(rows, columns=columns)


def wire_analysis(wire_cut_items: Sequence[WireCutItem]) -> WireAnalysis:
    df = wire_cut_frame(wire_cut_items)
    if df.empty:
        return WireAnalysis(total_wires=0, total_length=0.0, average_length=0.0, unique_gauges=0)
    total_wires = int(df["QUANTITY"].sum())
    total_length = float((df["LENGTH"] * df["QUANTITY"]).sum())
    average = total_length / total_wires if total_wires else 0.0
    return WireAnalysis(
        total_wires=total_wires,
        total_length=total_length,
        average_length=average,
        unique_gauges=int(df["WIRE_GAUGE"].nunique()),
    )


def bom_analysis(bom_items: Sequence[BOMItem]) -> BOMAnalysis:
    df = bom_frame(bom_items)
    if df.empty:
        return BOMAnalysis(total_items=0, unique_parts=0, quantity_by_category={})
    by_category = df.groupby("CATEGORY", sort=False)["QUANTITY"].sum()
    return BOMAnalysis(
        total_items=int(df["QUANTITY"].sum()),
        unique_parts=len(df),
        quantity_by_category={str(k): int(v) for k, v in by_category.items()},
    )


__all__ = ["BOMAnalysis", "WireAnalysis", "bom_analysis", "bom_frame", "wire_analysis", "wire_cut_frame"]
