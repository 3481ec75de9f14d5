"""
Series engine facade.

Chains the engine stages (validate, filter, aggregate, materialize,
summarize) behind one object so chart widgets stop reimplementing the
pipeline. Dense series are memoized per engine; the cache only ever holds
derived values, so results are identical with caching disabled.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import (
    Any,
    Callable,
    Dict,
    Hashable,
    Iterable,
    List,
    Optional,
    Sequence,
    Tuple,
    Union,
)

from ..config.models import EngineSettings, resolve_settings
from ..observability.diagnostics import DiagnosticsSink
from ..utils.cache import SeriesCache
from .aggregation import Granularity, Metric, aggregate, collapse_dimensions
from .dates import parse_month_key, parse_year_key
from .materialize import MetricArg, materialize_daily, materialize_range, materialize_yearly
from .models import (
    BreakdownSlice,
    DenseSeries,
    PeriodKey,
    PeriodOption,
    StatusBreakdown,
    ValidatedRecord,
)
from .periods import (
    build_month_catalog,
    build_year_catalog,
    filter_by_period,
    filter_by_window,
    select_default_period,
    window_bounds,
)
from .summary import percentage_breakdown, status_breakdown, totals_by_dimension
from .validation import dimension_names, validate_all

logger = logging.getLogger(__name__)

ALL_DIMENSIONS_LABEL = "all"
STATUS_METRICS = (Metric.PENDING, Metric.SOLVED)


def records_fingerprint(records: Sequence[ValidatedRecord]) -> Tuple[Hashable, ...]:
    """Return a hashable key covering every field the series depend on."""
    return tuple(
        (record.id, record.date, record.dimension_label, record.status)
        for record in records
    )


def _metric_key(metrics: Iterable[MetricArg]) -> Tuple[str, ...]:
    if isinstance(metrics, (str, Metric)):
        metrics = [metrics]
    return tuple(
        metric.value if isinstance(metric, Metric) else str(metric)
        for metric in metrics or ()
    )


class SeriesEngine:
    """Chart-facing entry point over raw ticket records.

    Parameters
    ----------
    settings: EngineSettings, optional
        Engine settings; defaults to the process-wide settings.
    cache_maxsize: int, optional
        Overrides ``settings.cache_maxsize``. 0 disables memoization.
    sink: DiagnosticsSink, optional
        Receives validation diagnostics for every call.

    Every method accepts the raw record list as returned by the record
    source and validates it first, so callers never handle malformed data.
    """

    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        *,
        cache_maxsize: Optional[int] = None,
        sink: Optional[DiagnosticsSink] = None,
    ) -> None:
        self.settings = resolve_settings(settings)
        maxsize = self.settings.cache_maxsize if cache_maxsize is None else cache_maxsize
        self.cache: SeriesCache[Tuple[Hashable, ...], Any] = SeriesCache(maxsize=maxsize)
        self.sink = sink

    # -- validation and catalogs -------------------------------------------

    def _valid_period(self, period: Any, parse: Callable[..., Any]) -> bool:
        # Malformed keys may be unhashable, so they must not reach the cache
        if parse(period, self.settings) is None:
            logger.warning("pipeline.invalid_period", extra={"period": repr(period)})
            return False
        return True

    def validate(self, raw_records: Any) -> List[ValidatedRecord]:
        """Validate raw records with this engine's settings and sink."""
        return validate_all(raw_records, settings=self.settings, sink=self.sink)

    def month_catalog(
        self, raw_records: Any, *, locale: Optional[str] = None
    ) -> List[PeriodOption]:
        return build_month_catalog(
            self.validate(raw_records), locale=locale, settings=self.settings
        )

    def year_catalog(
        self, raw_records: Any, *, locale: Optional[str] = None
    ) -> List[PeriodOption]:
        return build_year_catalog(
            self.validate(raw_records), locale=locale, settings=self.settings
        )

    def default_month(self, raw_records: Any, current_period: Optional[str]) -> Optional[str]:
        """Default month selection; ``current_period`` comes from the caller's clock."""
        return select_default_period(self.month_catalog(raw_records), current_period)

    def default_year(self, raw_records: Any, current_period: Optional[str]) -> Optional[str]:
        """Default year selection; ``current_period`` comes from the caller's clock."""
        return select_default_period(self.year_catalog(raw_records), current_period)

    # -- dense series --------------------------------------------------------

    def daily_series(
        self,
        raw_records: Any,
        period: PeriodKey,
        dimensions: Iterable[Any],
        metrics: Iterable[MetricArg] = (Metric.TOTAL,),
    ) -> DenseSeries:
        """Zero-filled daily series for a ``YYYY-MM`` period, one field per dimension."""
        if not self._valid_period(period, parse_month_key):
            return []
        records = filter_by_period(self.validate(raw_records), period, settings=self.settings)
        names = dimension_names(dimensions)
        metric_names = _metric_key(metrics)
        key = ("daily", records_fingerprint(records), period, tuple(names), metric_names)
        return self.cache.get_or_compute(
            key,
            lambda: materialize_daily(
                aggregate(records, granularity=Granularity.DAY),
                period,
                names,
                metrics=metric_names,
                settings=self.settings,
            ),
        )

    def yearly_series(
        self,
        raw_records: Any,
        year: PeriodKey,
        dimensions: Iterable[Any],
        metrics: Iterable[MetricArg] = (Metric.TOTAL,),
        *,
        locale: Optional[str] = None,
    ) -> DenseSeries:
        """Twelve monthly points for a ``YYYY`` period, one field per dimension."""
        if not self._valid_period(year, parse_year_key):
            return []
        records = filter_by_period(self.validate(raw_records), year, settings=self.settings)
        names = dimension_names(dimensions)
        loc = locale or self.settings.locale
        metric_names = _metric_key(metrics)
        key = (
            "yearly",
            records_fingerprint(records),
            year,
            tuple(names),
            metric_names,
            loc,
        )
        return self.cache.get_or_compute(
            key,
            lambda: materialize_yearly(
                aggregate(records, granularity=Granularity.MONTH),
                year,
                names,
                metrics=metric_names,
                locale=loc,
                settings=self.settings,
            ),
        )

    def status_daily_series(self, raw_records: Any, period: PeriodKey) -> DenseSeries:
        """
        Pending/solved daily series across all dimensions for one month.

        Fields are ``all_pending`` and ``all_solved``.
        """
        if not self._valid_period(period, parse_month_key):
            return []
        records = filter_by_period(self.validate(raw_records), period, settings=self.settings)
        key = ("status_daily", records_fingerprint(records), period)
        return self.cache.get_or_compute(
            key,
            lambda: materialize_daily(
                collapse_dimensions(aggregate(records), ALL_DIMENSIONS_LABEL),
                period,
                [ALL_DIMENSIONS_LABEL],
                metrics=STATUS_METRICS,
                settings=self.settings,
            ),
        )

    def status_window_series(
        self, raw_records: Any, today: Union[date, str], days: int
    ) -> DenseSeries:
        """
        Pending/solved daily series for the last ``days`` days.

        One point per date from ``today - days`` through ``today``, so a
        30-day window spanning two months is counted in full. ``today``
        comes from the caller's clock.
        """
        bounds = window_bounds(today, days)
        if bounds is None:
            return []
        start, end = bounds
        records = filter_by_window(self.validate(raw_records), end, days)
        key = ("status_window", records_fingerprint(records), start, end)
        return self.cache.get_or_compute(
            key,
            lambda: materialize_range(
                collapse_dimensions(aggregate(records), ALL_DIMENSIONS_LABEL),
                start,
                end,
                [ALL_DIMENSIONS_LABEL],
                metrics=STATUS_METRICS,
                settings=self.settings,
            ),
        )

    # -- summaries -----------------------------------------------------------

    def dimension_totals(
        self,
        raw_records: Any,
        period: PeriodKey,
        dimensions: Iterable[Any],
    ) -> Dict[str, int]:
        """Per-dimension totals for the daily series of ``period``."""
        names = dimension_names(dimensions)
        return totals_by_dimension(self.daily_series(raw_records, period, names), names)

    def breakdown(
        self,
        raw_records: Any,
        group_by: str,
        *,
        period: Optional[PeriodKey] = None,
        top_n: Optional[int] = None,
    ) -> List[BreakdownSlice]:
        """Percentage breakdown, optionally restricted to one period."""
        records = self.validate(raw_records)
        if period is not None:
            records = filter_by_period(records, period, settings=self.settings)
        return percentage_breakdown(records, group_by, top_n=top_n, settings=self.settings)

    def status_breakdown(
        self,
        raw_records: Any,
        group_by: str,
        *,
        period: Optional[PeriodKey] = None,
    ) -> List[StatusBreakdown]:
        """Pending/solved counts per group, optionally restricted to one period."""
        records = self.validate(raw_records)
        if period is not None:
            records = filter_by_period(records, period, settings=self.settings)
        return status_breakdown(records, group_by, settings=self.settings)

    def clear_cache(self) -> None:
        self.cache.clear()

