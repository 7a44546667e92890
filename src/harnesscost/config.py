from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Mapping, Optional

from .models import WORKSTATION_MULTIPLIERS, ProjectParameters, WorkstationConfig

_BOOLEAN_TRUE = {"1", "true", "yes", "on"}
_BOOLEAN_FALSE = {"0", "false", "no", "off"}


@dataclass(frozen=True)
class Config:
    """Runtime configuration assembled from environment variables and CLI options."""

    labor_rate: float
    shift_duration: float
    production_volume: int
    efficiency_rate: float
    quality_inspection_time: float
    overtime_multiplier: float
    setup_cost_per_operation: float
    material_handling_time: float
    workstation_type: str
    template_dir: Path
    output_dir: Path
    auto_repeat: bool = True
    auto_quantity: bool = True
    verbose: bool = False

    def parameters(self) -> ProjectParameters:
        return ProjectParameters(
            labor_rate=self.labor_rate,
            shift_duration=self.shift_duration,
            production_volume=self.production_volume,
            efficiency_rate=self.efficiency_rate,
            quality_inspection_time=self.quality_inspection_time,
            overtime_multiplier=self.overtime_multiplier,
            setup_cost_per_operation=self.setup_cost_per_operation,
            material_handling_time=self.material_handling_time,
        )

    def workstation(self) -> WorkstationConfig:
        return WorkstationConfig.preset(self.workstation_type)


def _text(value: object | None) -> Optional[str]:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _env_path(value: object | None, default: Path) -> Path:
    text = _text(value)
    if text is None:
        return default
    return Path(text).expanduser().resolve()


def _env_number(value: object | None, default, cast=float):
    """Parse a number such as ``$1,250.50``; anything unparseable yields ``default``."""

    text = _text(value)
    if text is None:
        return default
    try:
        return cast(float(text.replace("$", "").replace(",", "")))
    except ValueError:
        return default


def _flag(value: object | None, default: bool = False) -> bool:
    if isinstance(value, bool):
        return value
    text = (_text(value) or "").lower()
    if text in _BOOLEAN_TRUE:
        return True
    if text in _BOOLEAN_FALSE:
        return False
    return default


def _cli_options(cli_args: object | None) -> Dict[str, object]:
    """Options explicitly given on the command line (``None`` values dropped)."""

    raw = vars(cli_args) if hasattr(cli_args, "__dict__") else {}
    return {key: value for key, value in raw.items() if value is not None}


def load_config(env: Mapping[str, str], cli_args: object | None = None) -> Config:
    """Build a runtime :class:`Config` from environment variables and CLI options.

    Values that cannot be parsed fall back to the project defaults.
    """

    defaults = ProjectParameters()
    base_dir = Path.cwd()

    workstation_type = _text(env.get("HARNESS_WORKSTATION")) or "Manual"
    if workstation_type not in WORKSTATION_MULTIPLIERS:
        workstation_type = "Manual"

    values: Dict[str, object] = {
        "labor_rate": _env_number(env.get("HARNESS_LABOR_RATE"), defaults.labor_rate),
        "shift_duration": _env_number(env.get("HARNESS_SHIFT_MINUTES"), defaults.shift_duration),
        "production_volume": _env_number(env.get("HARNESS_PRODUCTION_VOLUME"), defaults.production_volume, int),
        "efficiency_rate": _env_number(env.get("HARNESS_EFFICIENCY_RATE"), defaults.efficiency_rate),
        "quality_inspection_time": _env_number(env.get("HARNESS_QC_MINUTES"), defaults.quality_inspection_time),
        "overtime_multiplier": _env_number(env.get("HARNESS_OVERTIME_MULTIPLIER"), defaults.overtime_multiplier),
        "setup_cost_per_operation": _env_number(env.get("HARNESS_SETUP_COST"), defaults.setup_cost_per_operation),
        "material_handling_time": _env_number(env.get("HARNESS_HANDLING_MINUTES"), defaults.material_handling_time),
        "workstation_type": workstation_type,
        "template_dir": _env_path(env.get("HARNESS_TEMPLATE_DIR"), (base_dir / "templates").resolve()),
        "output_dir": _env_path(env.get("HARNESS_OUTPUT_DIR"), (base_dir / "outputs").resolve()),
        "auto_repeat": _flag(env.get("HARNESS_AUTO_REPEAT"), default=True),
        "auto_quantity": _flag(env.get("HARNESS_AUTO_QUANTITY"), default=True),
        "verbose": False,
    }

    options = _cli_options(cli_args)
    if "labor_rate" in options:
        values["labor_rate"] = float(options["labor_rate"])
    if "efficiency_rate" in options:
        values["efficiency_rate"] = float(options["efficiency_rate"])
    if "production_volume" in options:
        values["production_volume"] = int(options["production_volume"])
    if options.get("workstation"):
        values["workstation_type"] = str(options["workstation"])
    for key in ("template_dir", "output_dir"):
        if _text(options.get(key)):
            values[key] = _env_path(options[key], values[key])
    values["verbose"] = bool(options.get("verbose", False))

    return Config(**values)


__all__ = ["Config", "load_config"]
