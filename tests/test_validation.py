"""
Tests for record and dimension validation.
"""

import logging
import re

from src.config.models import EngineSettings
from src.observability import DiagnosticsSink
from src.series.models import Dimension
from src.series.validation import (
    dimension_names,
    is_strict_int,
    resolve_label,
    validate_all,
    validate_dimensions,
    validate_record,
)


def test_is_strict_int():
    """Test bools and floats are not accepted as integers."""
    assert is_strict_int(0) is True
    assert is_strict_int(-3) is True
    assert is_strict_int(True) is False
    assert is_strict_int(1.0) is False
    assert is_strict_int("1") is False
    assert is_strict_int(None) is False


def test_validate_all_keeps_well_formed_records(raw_tasks):
    """Test malformed records are dropped and order is preserved."""
    records = validate_all(raw_tasks)
    assert [r.id for r in records] == [1, 2, 3, 4, 5]
    assert [r.date for r in records] == [
        "2025-02-03",
        "2025-02-03",
        "2025-02-14",
        "2025-03-01",
        "2024-12-31",
    ]


def test_validate_all_output_dates_are_canonical(raw_tasks):
    """Test every output date matches YYYY-MM-DD."""
    records = validate_all(raw_tasks)
    assert len(records) <= len(raw_tasks)
    assert all(re.fullmatch(r"\d{4}-\d{2}-\d{2}", r.date) for r in records)


def test_validate_all_substitutes_unspecified_label(raw_tasks):
    """Test null labels become the sentinel and labels are trimmed."""
    records = {r.id: r for r in validate_all(raw_tasks)}
    assert records[4].dimension_label == "HQ"
    assert records[5].dimension_label == "unspecified"


def test_validate_all_blank_and_missing_labels():
    """Test blank, missing and non-string labels keep the record."""
    raw = [
        {"id": 1, "created_at": "2025-01-01", "status": 0},
        {"id": 2, "created_at": "2025-01-01", "status": 0, "dimension_label": "   "},
        {"id": 3, "created_at": "2025-01-01", "status": 0, "dimension_label": 42},
    ]
    records = validate_all(raw)
    assert [r.dimension_label for r in records] == ["unspecified"] * 3


def test_validate_all_custom_unspecified_label():
    """Test the sentinel label comes from settings."""
    settings = EngineSettings(unspecified_label="ไม่ระบุสาขา")
    records = validate_all(
        [{"id": 1, "created_at": "2025-01-01", "status": 0}], settings=settings
    )
    assert records[0].dimension_label == "ไม่ระบุสาขา"


def test_validate_all_rejects_bad_types():
    """Test id and status must be integers and bools are rejected."""
    raw = [
        {"id": 1.0, "created_at": "2025-01-01", "status": 0},
        {"id": True, "created_at": "2025-01-01", "status": 0},
        {"id": 1, "created_at": "2025-01-01", "status": "0"},
        {"id": 1, "created_at": "2025-01-01", "status": None},
        {"id": 1, "created_at": "2025-01-01"},
        {"id": 1, "created_at": 20250101, "status": 0},
        {"created_at": "2025-01-01", "status": 0},
        "not a record",
        None,
    ]
    assert validate_all(raw) == []


def test_validate_all_non_list_input():
    """Test non-list batches degrade to an empty list."""
    assert validate_all(None) == []
    assert validate_all({"id": 1}) == []
    assert validate_all("records") == []


def test_validate_all_empty():
    """Test an empty batch gives an empty list."""
    assert validate_all([]) == []


def test_validate_all_carries_attributes():
    """Test extra raw fields are kept as attributes."""
    raw = [
        {
            "id": 9,
            "created_at": "2025-05-05",
            "status": 1,
            "branch_name": "HQ",
            "system_name": "Payroll",
            "department_id": 4,
        }
    ]
    record = validate_all(raw)[0]
    assert record.attributes == {"system_name": "Payroll", "department_id": 4}
    assert record.field_value("system_name") == "Payroll"
    assert record.field_value("dimension_label") == "HQ"
    assert record.field_value("missing") is None


def test_validate_all_does_not_mutate_input(raw_tasks):
    """Test the raw batch is left untouched."""
    snapshot = [dict(r) for r in raw_tasks]
    validate_all(raw_tasks)
    assert raw_tasks == snapshot


def test_validate_all_reports_drops_to_sink(raw_tasks):
    """Test each dropped record produces a diagnostic."""
    sink = DiagnosticsSink()
    validate_all(raw_tasks, sink=sink)
    counts = sink.counts()
    assert counts["validation.invalid_created_at"] == 1
    assert counts["validation.invalid_id"] == 1
    assert counts["validation.missing_created_at"] == 1


def test_validate_all_logs_drop_summary(caplog, raw_tasks):
    """Test a single summary line is logged for dropped records."""
    caplog.set_level(logging.INFO, logger="src.series.validation")
    validate_all(raw_tasks)
    assert "validation.records_dropped" in caplog.text


def test_validate_record_single():
    """Test validating a single record."""
    record = validate_record(
        {"id": 1, "created_at": "2025-03-02T00:00:00Z", "dimension_label": "HQ", "status": 2}
    )
    assert record is not None
    assert (record.id, record.date, record.dimension_label, record.status) == (
        1,
        "2025-03-02",
        "HQ",
        2,
    )


def test_resolve_label_key_order():
    """Test the first configured key present in the record wins."""
    assert resolve_label({"dimension_label": "A", "branch_name": "B"}) == "A"
    assert resolve_label({"branch_name": "B"}) == "B"
    assert resolve_label({"dimension_label": None, "branch_name": "B"}) == "unspecified"
    settings = EngineSettings(label_fields=("department_name",))
    assert resolve_label({"department_name": "IT"}, settings) == "IT"


# ============================================================================
# Dimension catalog
# ============================================================================


def test_validate_dimensions_filters_invalid_entries():
    """Test the catalog keeps only id/name entries with usable names."""
    catalog = [
        {"id": 1, "name": " HQ "},
        {"id": 2, "name": ""},
        {"id": "3", "name": "North"},
        {"id": 4},
        Dimension(id=5, name="South"),
        {"id": 6, "name": "HQ"},
        "East",
    ]
    dims = validate_dimensions(catalog)
    assert [(d.id, d.name) for d in dims] == [(1, "HQ"), (5, "South")]


def test_validate_dimensions_non_list():
    """Test a non-list catalog gives an empty list."""
    assert validate_dimensions(None) == []


def test_dimension_names_accepts_mixed_entries():
    """Test names are extracted from strings, models and mappings."""
    names = dimension_names(
        ["HQ", Dimension(id=2, name="North"), {"id": 3, "name": "South"}, "HQ", "  ", None]
    )
    assert names == ["HQ", "North", "South"]


def test_dimension_names_single_string():
    """Test a bare string is treated as one dimension."""
    assert dimension_names("HQ") == ["HQ"]
