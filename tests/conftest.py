from __future__ import annotations

import itertools
from datetime import datetime, timedelta, timezone
from typing import Callable

import pytest

from harnesscost.models import BOMItem, Operation, ProjectParameters, WireCutItem


@pytest.fixture
def make_operation() -> Callable[..., Operation]:
    def _make(name: str = "Op", setup: float = 10.0, labor: float = 5.0, **kwargs) -> Operation:
        kwargs.setdefault("category", "Assembly")
        return Operation(name=name, setup_minutes=setup, labor_minutes=labor, **kwargs)

    return _make


@pytest.fixture
def make_bom_item() -> Callable[..., BOMItem]:
    counter = itertools.count(1)

    def _make(part_number: str, category: str, quantity: int = 1, description: str = "") -> BOMItem:
        return BOMItem(
            id=f"bom-{next(counter)}",
            part_number=part_number,
            description=description or part_number,
            quantity=quantity,
            category=category,
        )

    return _make


@pytest.fixture
def make_wire() -> Callable[..., WireCutItem]:
    counter = itertools.count(1)

    def _make(from_point: str = "A", to_point: str = "B", length: float = 100.0, quantity: int = 1, gauge: str = "18"):
        return WireCutItem(
            wire_id=f"W{next(counter)}",
            from_point=from_point,
            to_point=to_point,
            length=length,
            quantity=quantity,
            wire_gauge=gauge,
        )

    return _make


@pytest.fixture
def plain_parameters() -> ProjectParameters:
    """Parameters with no overhead so the arithmetic is easy to follow."""

    return ProjectParameters(
        labor_rate=25,
        shift_duration=480,
        production_volume=100,
        efficiency_rate=100,
        quality_inspection_time=0,
        overtime_multiplier=1.5,
        setup_cost_per_operation=0,
        material_handling_time=0,
    )


@pytest.fixture
def id_sequence() -> Callable[..., str]:
    counter = itertools.count(1)

    def _next(prefix: str = "op") -> str:
        return f"{prefix}-{next(counter)}"

    return _next


class FakeClock:
    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc))
