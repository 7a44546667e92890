"""Saved harness templates: matching, lifecycle and persistence."""

from __future__ import annotations

import json
import logging
import uuid
from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Protocol, Sequence

import pandas as pd

from .expansion import ExpansionPreview, expand_for_bom, preview_expansion
from .models import COMPLEXITY_LEVELS, BOMItem, HarnessSpecs, HarnessTemplate, Operation, _pick

LOGGER = logging.getLogger(__name__)

TEMPLATES_KEY = "harness_templates"
MATCH_TOLERANCE = 0.2
CATEGORY_OVERLAP_RATIO = 0.7
MAX_SUGGESTIONS = 3


class TemplateImportError(ValueError):
    """Raised when an import payload is not a list of template records."""


class TemplateNotFound(KeyError):
    pass


class KeyValueStore(Protocol):
    def load(self, key: str) -> Optional[str]:
        ...

    def save(self, key: str, value: str) -> None:
        ...


class MemoryStore:
    """In-process store; contents vanish with the object."""

    def __init__(self, initial: Optional[Dict[str, str]] = None) -> None:
        self._data: Dict[str, str] = dict(initial or {})

    def load(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def save(self, key: str, value: str) -> None:
        self._data[key] = value


class JsonFileStore:
    """Stores each key as ``<directory>/<key>.json``."""

    def __init__(self, directory: Path) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    def load(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    def save(self, key: str, value: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        self._path(key).write_text(value, encoding="utf-8")


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_template_id(prefix: str = "template") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def parse_timestamp(value: object) -> Optional[datetime]:
    """Parse an ISO-ish timestamp; naive values are taken as UTC."""

    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        stamp = pd.Timestamp(value)
    else:
        stamp = pd.Timestamp(str(value))
    if stamp.tzinfo is None:
        stamp = stamp.tz_localize("UTC")
    return stamp.to_pydatetime()


def template_to_dict(template: HarnessTemplate) -> dict:
    operations = []
    for op in template.operations:
        payload = op.to_dict()
        payload.pop("id", None)
        operations.append(payload)
    return {
        "id": template.id,
        "name": template.name,
        "description": template.description,
        "harness_type": template.harness_type,
        "operations": operations,
        "bom_categories": list(template.bom_categories),
        "complexity": template.complexity,
        "estimated_wire_count": template.estimated_wire_count,
        "estimated_connector_count": template.estimated_connector_count,
        "created_at": template.created_at.isoformat(),
        "last_used": template.last_used.isoformat() if template.last_used else None,
    }


def template_from_dict(raw: dict, default_created_at: datetime) -> HarnessTemplate:
    """Build a template from a persisted record.

    Accepts both snake_case and the camelCase keys written by the browser
    version of the estimator.
    """

    created_at = parse_timestamp(_pick(raw, "created_at", "createdAt")) or default_created_at
    operations = raw.get("operations") or []
    if not isinstance(operations, list) or not all(isinstance(op, dict) for op in operations):
        raise TypeError("operations must be a list of objects")
    return HarnessTemplate(
        id=str(_pick(raw, "id", default="")),
        name=str(_pick(raw, "name", default="")),
        description=str(_pick(raw, "description", default="")),
        harness_type=str(_pick(raw, "harness_type", "harnessType", default="")),
        operations=tuple(Operation.from_dict(op).as_template() for op in operations),
        bom_categories=tuple(_pick(raw, "bom_categories", "bomCategories", default=[])),
        complexity=str(_pick(raw, "complexity", default=COMPLEXITY_LEVELS[0])),
        estimated_wire_count=int(_pick(raw, "estimated_wire_count", "estimatedWireCount", default=0)),
        estimated_connector_count=int(
            _pick(raw, "estimated_connector_count", "estimatedConnectorCount", default=0)
        ),
        created_at=created_at,
        last_used=parse_timestamp(_pick(raw, "last_used", "lastUsed")),
    )


def dump_templates(templates: Iterable[HarnessTemplate]) -> str:
    return json.dumps([template_to_dict(t) for t in templates], indent=2)


def load_templates(text: str, clock: Callable[[], datetime] = utcnow) -> List[HarnessTemplate]:
    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise TemplateImportError(f"Template payload is not valid JSON: {exc}") from exc
    if not isinstance(raw, list):
        raise TemplateImportError("Template payload must be a list of template records")
    now = clock()
    templates = []
    for index, record in enumerate(raw):
        if not isinstance(record, dict):
            raise TemplateImportError(f"Template record {index} is not an object")
        try:
            templates.append(template_from_dict(record, now))
        except (ValueError, TypeError, AttributeError) as exc:
            raise TemplateImportError(f"Template record {index} is invalid: {exc}") from exc
    return templates


def bom_categories(bom_items: Sequence[BOMItem]) -> List[str]:
    """Distinct categories in first-seen order."""

    return list(dict.fromkeys(item.category for item in bom_items))


def _within_tolerance(estimate: int, actual: int) -> bool:
    return abs(estimate - actual) <= estimate * MATCH_TOLERANCE


def is_match(template: HarnessTemplate, current_categories: Sequence[str], specs: HarnessSpecs) -> bool:
    if template.complexity != specs.complexity_level:
        return False
    if not _within_tolerance(template.estimated_wire_count, specs.total_wires):
        return False
    if not _within_tolerance(template.estimated_connector_count, specs.total_connectors):
        return False
    current = set(current_categories)
    overlap = sum(1 for category in template.bom_categories if category in current)
    return overlap >= max(1, len(template.bom_categories) * CATEGORY_OVERLAP_RATIO)


def _recency_key(template: HarnessTemplate):
    # Recently used first, then never-used templates by creation date.
    if template.last_used is not None:
        return (0, -template.last_used.timestamp())
    return (1, -template.created_at.timestamp())


def match_templates(
    templates: Sequence[HarnessTemplate],
    current_bom_categories: Sequence[str],
    specs: HarnessSpecs,
    limit: int = MAX_SUGGESTIONS,
) -> List[HarnessTemplate]:
    """Rank saved templates that fit the current harness, most relevant first."""

    matches = [t for t in templates if is_match(t, current_bom_categories, specs)]
    return sorted(matches, key=_recency_key)[:limit]


class TemplateLibrary:
    """Owns the saved template collection and writes it back after every change."""

    def __init__(
        self,
        store: KeyValueStore,
        key: str = TEMPLATES_KEY,
        clock: Callable[[], datetime] = utcnow,
        id_factory: Callable[[str], str] = new_template_id,
    ) -> None:
        self.store = store
        self.key = key
        self.clock = clock
        self.id_factory = id_factory
        self._templates: List[HarnessTemplate] = self._load()

    def _load(self) -> List[HarnessTemplate]:
        text = self.store.load(self.key)
        if not text:
            return []
        try:
            return load_templates(text, self.clock)
        except TemplateImportError:
            LOGGER.error("Stored templates under %r could not be read; starting empty", self.key, exc_info=True)
            return []

    def _persist(self) -> None:
        self.store.save(self.key, dump_templates(self._templates))

    @property
    def templates(self) -> List[HarnessTemplate]:
        return list(self._templates)

    def get(self, template_id: str) -> HarnessTemplate:
        for template in self._templates:
            if template.id == template_id:
                return template
        raise TemplateNotFound(template_id)

    def save_template(
        self,
        name: str,
        description: str,
        harness_type: str,
        operations: Sequence[Operation],
        bom_items: Sequence[BOMItem],
        specs: HarnessSpecs,
    ) -> HarnessTemplate:
        if not name.strip():
            raise ValueError("Template name must not be blank")
        if not operations:
            raise ValueError("Cannot save a template without operations")
        template = HarnessTemplate(
            id=self.id_factory("template"),
            name=name,
            description=description,
            harness_type=harness_type,
            operations=tuple(op.as_template() for op in operations),
            bom_categories=tuple(bom_categories(bom_items)),
            complexity=specs.complexity_level,
            estimated_wire_count=specs.total_wires,
            estimated_connector_count=specs.total_connectors,
            created_at=self.clock(),
        )
        self._templates.append(template)
        self._persist()
        LOGGER.info("Saved template %s (%d operations)", template.name, len(template.operations))
        return template

    def update_template(
        self,
        template_id: str,
        name: Optional[str] = None,
        description: Optional[str] = None,
        harness_type: Optional[str] = None,
    ) -> HarnessTemplate:
        """Edit the descriptive fields; operations and matching metadata are fixed at save time."""

        current = self.get(template_id)
        updated = replace(
            current,
            name=current.name if name is None else name,
            description=current.description if description is None else description,
            harness_type=current.harness_type if harness_type is None else harness_type,
        )
        self._replace(updated)
        return updated

    def delete_template(self, template_id: str) -> None:
        self.get(template_id)
        self._templates = [t for t in self._templates if t.id != template_id]
        self._persist()
        LOGGER.info("Deleted template %s", template_id)

    def apply_template(
        self,
        template_id: str,
        bom_items: Sequence[BOMItem],
        auto_repeat: bool = True,
        auto_quantity: bool = True,
    ) -> List[Operation]:
        """Mark the template as used and return its operations expanded for the BOM."""

        template = replace(self.get(template_id), last_used=self.clock())
        self._replace(template)
        expanded = expand_for_bom(template.operations, bom_items, auto_repeat, auto_quantity)
        LOGGER.info("Applied template %s => %d operations", template.name, len(expanded))
        return expanded

    def preview(
        self,
        template_id: str,
        bom_items: Sequence[BOMItem],
        auto_repeat: bool = True,
        auto_quantity: bool = True,
    ) -> ExpansionPreview:
        return preview_expansion(self.get(template_id).operations, bom_items, auto_repeat, auto_quantity)

    def suggest(self, bom_items: Sequence[BOMItem], specs: HarnessSpecs) -> List[HarnessTemplate]:
        if not bom_items and specs.total_wires <= 0:
            return []
        return match_templates(self._templates, bom_categories(bom_items), specs)

    def search_templates(self, term: str = "", complexity: Optional[str] = None) -> List[HarnessTemplate]:
        needle = term.lower()
        results = []
        for template in self._templates:
            haystack = (template.name, template.description, template.harness_type)
            if needle and not any(needle in text.lower() for text in haystack):
                continue
            if complexity and complexity != "All" and template.complexity != complexity:
                continue
            results.append(template)
        return results

    def export_json(self) -> str:
        return dump_templates(self._templates)

    def import_json(self, text: str) -> List[HarnessTemplate]:
        """Append templates from an export payload under fresh ids."""

        imported = [
            replace(template, id=self.id_factory("imported"))
            for template in load_templates(text, self.clock)
        ]
        self._templates.extend(imported)
        self._persist()
        LOGGER.info("Imported %d templates", len(imported))
        return imported

    def _replace(self, template: HarnessTemplate) -> None:
        self._templates = [template if t.id == template.id else t for t in self._templates]
        self._persist()


__all__ = [
    "JsonFileStore",
    "KeyValueStore",
    "MemoryStore",
    "TemplateImportError",
    "TemplateLibrary",
    "TemplateNotFound",
    "bom_categories",
    "dump_templates",
    "is_match",
    "load_templates",
    "match_templates",
    "parse_timestamp",
]
