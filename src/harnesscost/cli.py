import argparse
import json
import logging
import os
import re
from dataclasses import asdict, replace
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

from dotenv import load_dotenv

from .catalog import filter_catalog, load_catalog
from .config import Config
from .config import load_config as load_runtime_config
from .costing import WARNING_MESSAGES, CostInputError
from .models import (
    ALL_CATEGORIES,
    WORKSTATION_MULTIPLIERS,
    BOMItem,
    HarnessSpecs,
    Operation,
    ProjectParameters,
    WireCutItem,
    WorkstationConfig,
)
from .reporting import make_summary_text, operations_frame, write_report
from .session import EstimatorSession
from .templates import JsonFileStore, TemplateLibrary

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_INVALID_INPUT = 2

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _snake(key: str) -> str:
    return _CAMEL_BOUNDARY.sub("_", key).lower()


def read_project(path: Path) -> Dict[str, Any]:
    with Path(path).open(encoding="utf-8") as fh:
        raw = json.load(fh)
    if not isinstance(raw, dict):
        raise ValueError(f"Project file {path} must contain a JSON object")
    return {_snake(key): value for key, value in raw.items()}


def build_parameters(config: Config, raw: Optional[Dict[str, Any]], args: argparse.Namespace) -> ProjectParameters:
    """Environment defaults, then the project file, then explicit CLI options."""

    values = asdict(config.parameters())
    for key, value in (raw or {}).items():
        name = _snake(key)
        if name in values and value is not None:
            values[name] = value
    for name in ("labor_rate", "efficiency_rate", "production_volume"):
        override = getattr(args, name, None)
        if override is not None:
            values[name] = override
    return ProjectParameters.from_dict(values)


def build_workstation(config: Config, raw: Optional[Dict[str, Any]], args: argparse.Namespace) -> WorkstationConfig:
    if getattr(args, "workstation", None):
        return WorkstationConfig.preset(args.workstation)
    if raw:
        return WorkstationConfig.from_dict(raw)
    return config.workstation()


def build_session(project: Dict[str, Any], config: Config, args: argparse.Namespace) -> EstimatorSession:
    """Load a project snapshot; specs are re-derived from the BOM and wire cut list."""

    session = EstimatorSession(
        specs=HarnessSpecs.from_dict(project.get("harness_specs") or {}),
        workstation=build_workstation(config, project.get("workstation"), args),
        parameters=build_parameters(config, project.get("parameters"), args),
    )
    session.set_bom_items(BOMItem.from_dict(item) for item in project.get("bom_items") or [])
    session.set_wire_cut_items(WireCutItem.from_dict(item) for item in project.get("wire_cut_items") or [])
    operations = [Operation.from_dict(op) for op in project.get("operations") or []]
    session.operations = [op if op.id else replace(op, id=session.id_factory()) for op in operations]
    return session


def run_estimate(args: argparse.Namespace, config: Config) -> int:
    project = read_project(Path(args.project))
    session = build_session(project, config, args)
    try:
        report = session.report()
    except CostInputError as exc:
        logger.error("Cannot estimate %s: %s", args.project, exc)
        return EXIT_INVALID_INPUT

    frame = operations_frame(session.operations, session.specs, session.workstation)
    logger.info(make_summary_text(report, frame))
    for tag in report.warnings:
        logger.warning("Warning: %s", WARNING_MESSAGES.get(tag, tag))
    outputs = write_report(report, frame, config.output_dir)
    for label, path in outputs.items():
        logger.info("  %s: %s", label, path)
    return EXIT_OK


def run_templates(args: argparse.Namespace, config: Config) -> int:
    project = read_project(Path(args.project))
    session = build_session(project, config, args)
    library = TemplateLibrary(JsonFileStore(config.template_dir))
    suggestions = library.suggest(session.bom_items, session.specs)
    if not suggestions:
        logger.info("No matching templates in %s", config.template_dir)
        return EXIT_OK
    logger.info("Matching templates (%s, %d wires, %d connectors):", session.specs.complexity_level,
                session.specs.total_wires, session.specs.total_connectors)
    for template in suggestions:
        preview = library.preview(template.id, session.bom_items, config.auto_repeat, config.auto_quantity)
        logger.info(
            "  %s  %s [%s] -> %d operations, total qty %d",
            template.id,
            template.name,
            template.harness_type,
            preview.total_operations,
            preview.total_quantity,
        )
    return EXIT_OK


def run_catalog(args: argparse.Namespace, config: Config) -> int:
    operations = filter_catalog(load_catalog(), args.bom_category)
    for op in operations:
        logger.info(
            "%-32s %-15s setup %5.1f  labor %5.1f  x%.1f  %s",
            op.name,
            op.category,
            op.setup_minutes,
            op.labor_minutes,
            op.complexity_factor,
            op.bom_category or "-",
        )
    logger.info("%d operations", len(operations))
    return EXIT_OK


COMMANDS = {
    "estimate": run_estimate,
    "templates": run_templates,
    "catalog": run_catalog,
}


def run(args: argparse.Namespace, runtime_config: Optional[Config] = None) -> int:
    config = runtime_config or load_runtime_config(os.environ, args)
    return COMMANDS[args.command](args, config)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("-v", "--verbose", action="store_true", help="Increase logging verbosity")
    parser = argparse.ArgumentParser(description="Estimate wire-harness manufacturing time and cost")
    subparsers = parser.add_subparsers(dest="command", required=True)

    estimate = subparsers.add_parser("estimate", parents=[common], help="Compute the cost report for a project file")
    estimate.add_argument("project", help="Project JSON snapshot")
    estimate.add_argument("--output-dir", help="Directory for generated outputs")
    estimate.add_argument("--workstation", choices=list(WORKSTATION_MULTIPLIERS), help="Workstation preset")
    estimate.add_argument("--efficiency-rate", type=float, help="Operator efficiency in percent")
    estimate.add_argument("--production-volume", type=int, help="Units to build")
    estimate.add_argument("--labor-rate", type=float, help="Hourly labor rate")

    templates = subparsers.add_parser("templates", parents=[common], help="List saved templates matching a project")
    templates.add_argument("project", help="Project JSON snapshot")
    templates.add_argument("--template-dir", help="Directory holding saved templates")

    catalog = subparsers.add_parser("catalog", parents=[common], help="List built-in operations")
    catalog.add_argument("--bom-category", default=ALL_CATEGORIES, help="Only operations relevant to this BOM category")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    load_dotenv()
    args = parse_args(argv)
    runtime_cfg = load_runtime_config(os.environ, args)
    log_level = logging.DEBUG if runtime_cfg.verbose else logging.INFO
    logging.basicConfig(level=log_level, format="%(message)s")
    try:
        return run(args, runtime_config=runtime_cfg)
    except Exception:  # pragma: no cover
        logger.exception("Fatal error during harness cost estimation")
        return EXIT_FAILURE


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
