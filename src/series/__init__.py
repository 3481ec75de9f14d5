"""
Time-series aggregation engine for ticket charts.

Every function in this package is a pure, synchronous transform: records go
in, new values come out, inputs are never mutated and no clock is read.

Modules
-------
dates
    Timestamp normalization to ``YYYY-MM-DD`` and calendar helpers
validation
    Raw record and dimension catalog validation
labels
    Locale rules for month and year labels (Thai Buddhist era, English)
periods
    Month/year catalogs, default period selection, period and window filters
aggregation
    Sparse ``[unit][dimension][status]`` counting
materialize
    Dense, zero-filled daily, rolling-window and yearly series
summary
    Per-dimension totals, percentage breakdowns and status cross-tabs
pipeline
    ``SeriesEngine`` facade chaining the stages with memoization
"""

from .aggregation import aggregate, collapse_dimensions, metric_count, total_per
from .dates import days_in_month, normalize_date
from .materialize import materialize_daily, materialize_range, materialize_yearly
from .models import BreakdownSlice, Dimension, PeriodOption, StatusBreakdown, ValidatedRecord
from .periods import (
    build_month_catalog,
    build_year_catalog,
    filter_by_period,
    filter_by_window,
    select_default_period,
    window_bounds,
)
from .pipeline import SeriesEngine
from .summary import (
    percentage_breakdown,
    round_half_up,
    status_breakdown,
    totals_by_dimension,
)
from .validation import validate_all, validate_dimensions

__all__ = [
    "BreakdownSlice",
    "Dimension",
    "PeriodOption",
    "SeriesEngine",
    "StatusBreakdown",
    "ValidatedRecord",
    "aggregate",
    "build_month_catalog",
    "build_year_catalog",
    "collapse_dimensions",
    "days_in_month",
    "filter_by_period",
    "filter_by_window",
    "materialize_daily",
    "materialize_range",
    "materialize_yearly",
    "metric_count",
    "normalize_date",
    "percentage_breakdown",
    "round_half_up",
    "select_default_period",
    "status_breakdown",
    "total_per",
    "totals_by_dimension",
    "validate_all",
    "validate_dimensions",
    "window_bounds",
]
