from __future__ import annotations

import pytest

from harnesscost.analysis import bom_analysis, wire_analysis
from harnesscost.catalog import available_bom_categories, filter_catalog, load_catalog, operation_categories


def test_builtin_catalog_loads():
    catalog = load_catalog()
    assert len(catalog) >= 25
    names = {op.name for op in catalog}
    assert {"Wire Cutting", "Connector Insertion", "Continuity Testing"} <= names
    assert all(op.id is None and op.quantity is None for op in catalog)
    assert operation_categories(catalog) == ["Pre-Production", "Assembly", "Testing", "Finishing"]


def test_filter_keeps_all_category_operations():
    catalog = load_catalog()
    connector_ops = filter_catalog(catalog, "Connector")
    assert connector_ops
    assert {op.bom_category for op in connector_ops} <= {"Connector", "All"}
    assert len(filter_catalog(catalog)) == len(catalog)


def test_custom_catalog_file(tmp_path):
    path = tmp_path / "shop.csv"
    path.write_text(
        "name,category,setup_minutes,labor_minutes,is_manual,complexity_factor,bom_category\n"
        "Potting,Finishing,30,6,no,1.4,\n",
        encoding="utf-8",
    )
    (op,) = load_catalog(path)
    assert op.name == "Potting"
    assert op.is_manual is False
    assert op.complexity_factor == pytest.approx(1.4)
    assert op.bom_category is None


def test_available_categories_append_custom(make_bom_item):
    bom = [make_bom_item("X", "Sensor"), make_bom_item("W", "Wire"), make_bom_item("Y", "Sensor")]
    assert available_bom_categories(bom) == [
        "All",
        "Wire",
        "Connector",
        "Terminal",
        "Protection",
        "Hardware",
        "Other",
        "Sensor",
    ]


def test_wire_analysis(make_wire):
    wires = [make_wire(length=100, quantity=2, gauge="18"), make_wire(length=50, quantity=2, gauge="20")]
    result = wire_analysis(wires)
    assert result.total_wires == 4
    assert result.total_length == pytest.approx(300)
    assert result.average_length == pytest.approx(75)
    assert result.unique_gauges == 2


def test_wire_analysis_empty():
    result = wire_analysis([])
    assert (result.total_wires, result.total_length, result.average_length, result.unique_gauges) == (0, 0.0, 0.0, 0)


def test_bom_analysis(make_bom_item):
    bom = [make_bom_item("W", "Wire", 3), make_bom_item("C", "Connector", 2), make_bom_item("W2", "Wire", 4)]
    result = bom_analysis(bom)
    assert result.total_items == 9
    assert result.unique_parts == 3
    assert list(result.quantity_by_category.items()) == [("Wire", 7), ("Connector", 2)]
