from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Dict, Sequence

import pandas as pd

from .complexity import complexity_multiplier
from .costing import WARNING_MESSAGES, CostReport
from .models import HarnessSpecs, Operation, WorkstationConfig

LOGGER = logging.getLogger(__name__)

OPERATION_COLUMNS = [
    "NAME",
    "CATEGORY",
    "BOM_CATEGORY",
    "QUANTITY",
    "SETUP_MINUTES",
    "LABOR_MINUTES",
    "COMPLEXITY_FACTOR",
    "SETUP_TOTAL",
    "LABOR_TOTAL",
]


def operations_frame(
    operations: Sequence[Operation],
    specs: HarnessSpecs,
    workstation: WorkstationConfig,
) -> pd.DataFrame:
    """Per-operation setup and adjusted labour minutes (before the efficiency rate)."""

    rows = [
        {
            "NAME": op.name,
            "CATEGORY": op.category,
            "BOM_CATEGORY": op.bom_category or "",
            "QUANTITY": op.effective_quantity,
            "SETUP_MINUTES": op.setup_minutes,
            "LABOR_MINUTES": op.labor_minutes,
            "COMPLEXITY_FACTOR": op.complexity_factor,
        }
        for op in operations
    ]
    df = pd.DataFrame(rows, columns=OPERATION_COLUMNS[:7])
    if df.empty:
        return pd.DataFrame(columns=OPERATION_COLUMNS)
    multiplier = complexity_multiplier(specs) * workstation.efficiency_multiplier
    df["SETUP_TOTAL"] = df["SETUP_MINUTES"] * df["QUANTITY"]
    df["LABOR_TOTAL"] = df["LABOR_MINUTES"] * df["QUANTITY"] * df["COMPLEXITY_FACTOR"] * multiplier
    return df


def summary_frame(report: CostReport) -> pd.DataFrame:
    data = report.to_dict()
    data["warnings"] = "; ".join(report.warnings)
    return pd.DataFrame({"METRIC": list(data.keys()), "VALUE": list(data.values())})


def make_summary_text(report: CostReport, operations_df: pd.DataFrame | None = None) -> str:
    times = report.time
    lines = [
        f"Total production time: {times.total_production_time:,.1f} min "
        f"(setup {times.setup_time:,.1f} | labor {times.effective_labor_time:,.1f} | "
        f"QC {times.quality_inspection_time:,.1f} | handling {times.material_handling_time:,.1f}).",
        f"Complexity multiplier: {report.complexity_multiplier:.2f}x across {report.operations_count} operations.",
        f"Labor cost ${report.labor_cost:,.2f} + setup cost ${report.setup_cost:,.2f} = ${report.total_cost:,.2f}.",
        f"Cost per unit: ${report.cost_per_unit:,.2f} | Units per shift: {report.units_per_shift}.",
    ]
    if report.overtime_hours > 0:
        lines.append(f"Overtime per unit: {report.overtime_hours:,.2f} h.")
    if operations_df is not None and not operations_df.empty:
        top = operations_df.sort_values("LABOR_TOTAL", ascending=False).head(5)[
            ["NAME", "QUANTITY", "SETUP_TOTAL", "LABOR_TOTAL"]
        ]
        lines.append(f"Top time drivers:\n{top.to_string(index=False)}")
    for tag in report.warnings:
        lines.append(f"Warning: {WARNING_MESSAGES.get(tag, tag)}")
    return "\n".join(lines) + "\n"


def write_report(report: CostReport, operations_df: pd.DataFrame, output_dir: Path) -> Dict[str, Path]:
    """Write the XLSX workbook, the operations CSV and a JSON summary to ``output_dir``."""

    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    xlsx_path = output_dir / "Cost_Breakdown.xlsx"
    csv_path = output_dir / "Cost_Breakdown.csv"
    json_path = output_dir / "cost_summary.json"

    with pd.ExcelWriter(xlsx_path, engine="openpyxl") as writer:
        summary_frame(report).to_excel(writer, sheet_name="Summary", index=False)
        operations_df.to_excel(writer, sheet_name="Operations", index=False)
    operations_df.to_csv(csv_path, index=False)
    with json_path.open("w", encoding="utf-8") as fh:
        json.dump(report.to_dict(), fh, indent=2)

    LOGGER.info("Report written to %s", output_dir)
    return {"xlsx": xlsx_path, "csv": csv_path, "summary": json_path}


__all__ = ["make_summary_text", "operations_frame", "summary_frame", "write_report"]
