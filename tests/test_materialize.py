"""
Tests for dense series materialization.
"""

from datetime import date

import pytest

from src.series.aggregation import aggregate
from src.series.materialize import (
    materialize_daily,
    materialize_range,
    materialize_yearly,
    series_field,
)
from src.series.models import Dimension
from src.series.periods import filter_by_period
from src.series.validation import validate_all


def _daily(raw, period, dims, **kwargs):
    records = filter_by_period(validate_all(raw), period)
    return materialize_daily(aggregate(records), period, dims, **kwargs)


# ============================================================================
# materialize_daily() tests
# ============================================================================


def test_scenario_single_record_end_of_february():
    """Test one record on Feb 28 yields 28 points with a single non-zero."""
    raw = [{"id": 1, "created_at": "2025-02-28 10:00:00", "dimension_label": "HQ", "status": 0}]
    points = _daily(raw, "2025-02", ["HQ"])
    assert len(points) == 28
    assert points[27] == {"unit": "2025-02-28", "unit_ordinal": 28, "HQ_total": 1}
    assert all(p["HQ_total"] == 0 for p in points[:27])


def test_scenario_invalid_date_gives_zero_series():
    """Test an impossible date is dropped and the series is all zeros."""
    raw = [{"id": 1, "created_at": "2025-02-30 10:00:00", "dimension_label": "HQ", "status": 0}]
    assert validate_all(raw) == []
    points = _daily(raw, "2025-02", ["HQ"])
    assert len(points) == 28
    assert all(p["HQ_total"] == 0 for p in points)


@pytest.mark.parametrize(
    "period,expected",
    [("2025-02", 28), ("2024-02", 29), ("2025-01", 31), ("2025-04", 30), ("2025-12", 31)],
)
def test_daily_length_matches_month(period, expected):
    """Test the number of points equals the days in the month."""
    points = materialize_daily({}, period, ["HQ"])
    assert len(points) == expected


def test_daily_units_are_ascending_and_complete():
    """Test units cover every day once, in order."""
    points = materialize_daily({}, "2024-02", ["HQ"])
    assert [p["unit_ordinal"] for p in points] == list(range(1, 30))
    assert [p["unit"] for p in points] == [f"2024-02-{d:02d}" for d in range(1, 30)]


def test_daily_zero_fills_dimension_without_records():
    """Test a declared dimension with no records is present and zero everywhere."""
    raw = [{"id": 1, "created_at": "2025-03-05", "dimension_label": "HQ", "status": 0}]
    points = _daily(raw, "2025-03", [{"id": 1, "name": "HQ"}, {"id": 2, "name": "North"}])
    assert all("North_total" in p for p in points)
    assert all(p["North_total"] == 0 for p in points)
    assert sum(p["HQ_total"] for p in points) == 1


def test_daily_ignores_dimensions_not_declared():
    """Test observed labels outside the catalog do not get fields."""
    raw = [{"id": 1, "created_at": "2025-03-05", "dimension_label": "Ghost", "status": 0}]
    points = _daily(raw, "2025-03", ["HQ"])
    assert all(set(p) == {"unit", "unit_ordinal", "HQ_total"} for p in points)


def test_daily_status_metrics():
    """Test pending/solved fields per dimension."""
    raw = [
        {"id": 1, "created_at": "2025-03-05", "dimension_label": "HQ", "status": 0},
        {"id": 2, "created_at": "2025-03-05", "dimension_label": "HQ", "status": 1},
        {"id": 3, "created_at": "2025-03-05", "dimension_label": "HQ", "status": 1},
        {"id": 4, "created_at": "2025-03-05", "dimension_label": "HQ", "status": 5},
    ]
    points = _daily(raw, "2025-03", ["HQ"], metrics=("total", "pending", "solved"))
    day5 = points[4]
    assert day5["HQ_total"] == 4
    assert day5["HQ_pending"] == 1
    assert day5["HQ_solved"] == 2


def test_daily_accepts_dimension_models():
    """Test Dimension objects are accepted as the catalog."""
    points = materialize_daily({}, "2025-03", [Dimension(id=1, name="HQ")])
    assert points[0] == {"unit": "2025-03-01", "unit_ordinal": 1, "HQ_total": 0}


def test_daily_duplicate_dimensions_collapse():
    """Test repeated dimension names produce one field."""
    points = materialize_daily({}, "2025-03", ["HQ", "HQ"])
    assert set(points[0]) == {"unit", "unit_ordinal", "HQ_total"}


def test_daily_empty_dimensions():
    """Test no dimensions gives an empty series."""
    assert materialize_daily({}, "2025-03", []) == []


@pytest.mark.parametrize("period", ["2025-3", "2025", "2025-13", "", None])
def test_daily_malformed_period(period):
    """Test malformed periods give an empty series."""
    assert materialize_daily({}, period, ["HQ"]) == []


def test_daily_unknown_metrics_are_skipped():
    """Test unknown metrics are dropped and an all-unknown list gives []."""
    points = materialize_daily({}, "2025-03", ["HQ"], metrics=("total", "median"))
    assert set(points[0]) == {"unit", "unit_ordinal", "HQ_total"}
    assert materialize_daily({}, "2025-03", ["HQ"], metrics=("median",)) == []


def test_daily_single_metric_string():
    """Test a single metric may be passed as a string."""
    points = materialize_daily({}, "2025-03", ["HQ"], metrics="solved")
    assert "HQ_solved" in points[0]


def test_daily_is_deterministic():
    """Test repeated materialization returns equal output."""
    aggregated = {"2025-03-05": {"HQ": {0: 1}}}
    assert materialize_daily(aggregated, "2025-03", ["HQ"]) == materialize_daily(
        aggregated, "2025-03", ["HQ"]
    )


def test_daily_does_not_mutate_aggregation():
    """Test the sparse input stays sparse."""
    aggregated = {"2025-03-05": {"HQ": {0: 1}}}
    materialize_daily(aggregated, "2025-03", ["HQ", "North"])
    assert aggregated == {"2025-03-05": {"HQ": {0: 1}}}


def test_series_field():
    """Test field naming."""
    assert series_field("สาขาใหญ่", "total") == "สาขาใหญ่_total"


# ============================================================================
# materialize_yearly() tests
# ============================================================================


def test_yearly_always_twelve_points():
    """Test twelve points regardless of data."""
    points = materialize_yearly({}, "2025", ["HQ"])
    assert len(points) == 12
    assert [p["unit_ordinal"] for p in points] == list(range(1, 13))
    assert [p["unit"] for p in points][:2] == ["2025-01", "2025-02"]
    assert all(p["HQ_total"] == 0 for p in points)


def test_yearly_counts_by_month():
    """Test monthly counts land on the right ordinal."""
    raw = [
        {"id": 1, "created_at": "2025-07-01", "dimension_label": "HQ", "status": 0},
        {"id": 2, "created_at": "2025-07-31 10:00:00", "dimension_label": "HQ", "status": 1},
        {"id": 3, "created_at": "2025-12-24", "dimension_label": "North", "status": 1},
        {"id": 4, "created_at": "2024-07-01", "dimension_label": "HQ", "status": 1},
    ]
    records = filter_by_period(validate_all(raw), "2025")
    points = materialize_yearly(
        aggregate(records, granularity="month"), "2025", ["HQ", "North"], locale="en"
    )
    assert points[6] == {
        "unit": "2025-07",
        "unit_ordinal": 7,
        "label": "July",
        "HQ_total": 2,
        "North_total": 0,
    }
    assert points[11]["North_total"] == 1
    assert sum(p["HQ_total"] for p in points) == 2


def test_yearly_thai_month_labels():
    """Test the default locale labels months in Thai."""
    points = materialize_yearly({}, "2025", ["HQ"])
    assert points[0]["label"] == "มกราคม"
    assert points[11]["label"] == "ธันวาคม"


@pytest.mark.parametrize("year", ["25", "2025-01", "abcd", None])
def test_yearly_malformed_year(year):
    """Test malformed years give an empty series."""
    assert materialize_yearly({}, year, ["HQ"]) == []


def test_yearly_empty_dimensions():
    """Test no dimensions gives an empty series."""
    assert materialize_yearly({}, "2025", []) == []


# ============================================================================
# materialize_range() tests
# ============================================================================


def test_range_spans_month_boundary():
    """Test a range crossing months has one point per date, zero-filled."""
    records = validate_all(
        [
            {"id": 1, "created_at": "2025-02-20", "branch_name": "HQ", "status": 0},
            {"id": 2, "created_at": "2025-03-02", "branch_name": "HQ", "status": 1},
        ]
    )
    points = materialize_range(aggregate(records), "2025-02-03", "2025-03-05", ["HQ"])
    assert len(points) == 31
    assert [p["unit_ordinal"] for p in points] == list(range(1, 32))
    assert points[0]["unit"] == "2025-02-03"
    assert points[-1]["unit"] == "2025-03-05"
    assert sum(p["HQ_total"] for p in points) == 2
    by_unit = {p["unit"]: p["HQ_total"] for p in points}
    assert by_unit["2025-02-20"] == 1
    assert by_unit["2025-03-02"] == 1


def test_range_across_leap_day():
    """Test Feb 29 appears only in leap years."""
    leap = materialize_range({}, "2024-02-28", "2024-03-01", ["HQ"])
    plain = materialize_range({}, "2025-02-28", "2025-03-01", ["HQ"])
    assert [p["unit"] for p in leap] == ["2024-02-28", "2024-02-29", "2024-03-01"]
    assert [p["unit"] for p in plain] == ["2025-02-28", "2025-03-01"]


def test_range_single_day_and_status_metrics():
    """Test a one-day range with pending/solved fields."""
    aggregated = {"2025-03-01": {"HQ": {0: 2, 1: 1}}}
    points = materialize_range(
        aggregated, date(2025, 3, 1), date(2025, 3, 1), ["HQ"], metrics=("pending", "solved")
    )
    assert points == [
        {"unit": "2025-03-01", "unit_ordinal": 1, "HQ_pending": 2, "HQ_solved": 1}
    ]


@pytest.mark.parametrize(
    "start,end",
    [("2025-03-05", "2025-03-01"), ("bad", "2025-03-01"), ("2025-03-01", None)],
)
def test_range_invalid_bounds(start, end):
    """Test reversed or invalid bounds give an empty series."""
    assert materialize_range({}, start, end, ["HQ"]) == []


def test_range_empty_dimensions():
    """Test no dimensions gives an empty series."""
    assert materialize_range({}, "2025-03-01", "2025-03-05", []) == []
