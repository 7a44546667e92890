from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from harnesscost.config import load_config


def test_defaults_match_project_parameters(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    cfg = load_config({})
    params = cfg.parameters()

    assert params.labor_rate == 25
    assert params.shift_duration == 480
    assert params.production_volume == 100
    assert params.efficiency_rate == 85
    assert cfg.workstation().type == "Manual"
    assert cfg.template_dir == (tmp_path / "templates").resolve()
    assert cfg.output_dir == (tmp_path / "outputs").resolve()
    assert cfg.auto_repeat and cfg.auto_quantity


def test_environment_values(tmp_path):
    env = {
        "HARNESS_LABOR_RATE": "$32.50",
        "HARNESS_SHIFT_MINUTES": "600",
        "HARNESS_PRODUCTION_VOLUME": "1,000",
        "HARNESS_EFFICIENCY_RATE": "90",
        "HARNESS_WORKSTATION": "Semi-Auto",
        "HARNESS_TEMPLATE_DIR": str(tmp_path / "tpl"),
        "HARNESS_AUTO_REPEAT": "off",
        "HARNESS_AUTO_QUANTITY": "yes",
    }
    cfg = load_config(env)

    assert cfg.labor_rate == pytest.approx(32.5)
    assert cfg.shift_duration == 600
    assert cfg.production_volume == 1000
    assert cfg.efficiency_rate == 90
    assert cfg.workstation().efficiency_multiplier == pytest.approx(0.7)
    assert cfg.template_dir == (tmp_path / "tpl").resolve()
    assert cfg.auto_repeat is False
    assert cfg.auto_quantity is True


def test_unparseable_values_fall_back():
    cfg = load_config(
        {
            "HARNESS_LABOR_RATE": "cheap",
            "HARNESS_PRODUCTION_VOLUME": "",
            "HARNESS_WORKSTATION": "Robot",
            "HARNESS_AUTO_QUANTITY": "maybe",
        }
    )
    assert cfg.labor_rate == 25
    assert cfg.production_volume == 100
    assert cfg.workstation_type == "Manual"
    assert cfg.auto_quantity is True


def test_cli_options_override_environment(tmp_path):
    args = SimpleNamespace(
        labor_rate=40.0,
        efficiency_rate=None,
        production_volume=5,
        workstation="Automated",
        output_dir=str(tmp_path / "out"),
        verbose=True,
    )
    cfg = load_config({"HARNESS_LABOR_RATE": "30", "HARNESS_EFFICIENCY_RATE": "75"}, args)

    assert cfg.labor_rate == 40
    assert cfg.efficiency_rate == 75
    assert cfg.production_volume == 5
    assert cfg.workstation_type == "Automated"
    assert cfg.output_dir == Path(tmp_path / "out").resolve()
    assert cfg.verbose is True
