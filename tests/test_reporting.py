from __future__ import annotations

import json

import pandas as pd
import pytest

from harnesscost.costing import estimate_costs
from harnesscost.models import HarnessSpecs, ProjectParameters, WorkstationConfig
from harnesscost.reporting import make_summary_text, operations_frame, write_report


@pytest.fixture
def sample(make_operation):
    ops = [
        make_operation("Cut", setup=15, labor=2, quantity=10),
        make_operation("Insert", setup=10, labor=3, quantity=4, complexity_factor=1.2),
    ]
    specs = HarnessSpecs()
    workstation = WorkstationConfig.preset("Semi-Auto")
    report = estimate_costs(ops, specs, workstation, ProjectParameters(efficiency_rate=60))
    return ops, specs, workstation, report


def test_operations_frame_totals(sample):
    ops, specs, workstation, _ = sample
    frame = operations_frame(ops, specs, workstation)

    assert list(frame["NAME"]) == ["Cut", "Insert"]
    assert list(frame["SETUP_TOTAL"]) == [150, 40]
    assert frame["LABOR_TOTAL"].tolist() == pytest.approx([2 * 10 * 0.7, 3 * 4 * 1.2 * 0.7])


def test_operations_frame_empty():
    frame = operations_frame([], HarnessSpecs(), WorkstationConfig())
    assert frame.empty
    assert "LABOR_TOTAL" in frame.columns


def test_summary_text_lists_drivers_and_warnings(sample):
    ops, specs, workstation, report = sample
    text = make_summary_text(report, operations_frame(ops, specs, workstation))

    assert "Total production time" in text
    assert "Top time drivers" in text
    assert "Warning: Low efficiency rate" in text


def test_write_report_outputs(tmp_path, sample):
    ops, specs, workstation, report = sample
    frame = operations_frame(ops, specs, workstation)
    outputs = write_report(report, frame, tmp_path / "out")

    assert all(path.exists() for path in outputs.values())
    summary = json.loads(outputs["summary"].read_text(encoding="utf-8"))
    assert summary["total_cost"] == pytest.approx(report.total_cost)
    assert summary["warnings"] == ["low_efficiency"]

    sheets = pd.read_excel(outputs["xlsx"], sheet_name=None)
    assert set(sheets) == {"Summary", "Operations"}
    assert list(sheets["Operations"]["NAME"]) == ["Cut", "Insert"]
    assert list(pd.read_csv(outputs["csv"])["QUANTITY"]) == [10, 4]
