"""
Dense series materialization.

Turns sparse aggregations into chart-ready rows in ascending order: one row
per calendar day of a month or rolling window, or one per month of a year.
Each row has one integer field ``"<dimension>_<metric>"`` per requested
dimension and metric. Missing data is filled with zero so every line in a
chart is continuous.
"""

import logging
from datetime import date, timedelta
from typing import Any, Iterable, List, Optional, Sequence, Union

from ..config.models import EngineSettings, resolve_settings
from .aggregation import Metric, metric_count
from .dates import coerce_date, days_in_month, parse_month_key, parse_year_key
from .labels import month_name
from .models import AggregatedCounts, DenseSeries, DenseSeriesPoint
from .validation import dimension_names

logger = logging.getLogger(__name__)

MetricArg = Union[Metric, str]


def series_field(dimension: str, metric: MetricArg) -> str:
    """
    Return the field name carrying ``metric`` for ``dimension``.

    Examples
    --------
    >>> series_field("HQ", "total")
    'HQ_total'
    """
    return f"{dimension}_{Metric(metric).value}"


def _resolve_metrics(metrics: Iterable[MetricArg]) -> List[Metric]:
    if isinstance(metrics, (str, Metric)):
        metrics = [metrics]
    resolved: List[Metric] = []
    for metric in metrics or ():
        try:
            value = Metric(metric)
        except ValueError:
            logger.warning("materialize.unknown_metric", extra={"metric": repr(metric)})
            continue
        if value not in resolved:
            resolved.append(value)
    return resolved


def _fill_point(
    point: DenseSeriesPoint,
    aggregated: AggregatedCounts,
    unit: str,
    names: Sequence[str],
    metrics: Sequence[Metric],
    settings: EngineSettings,
) -> DenseSeriesPoint:
    for name in names:
        for metric in metrics:
            point[series_field(name, metric)] = metric_count(
                aggregated, unit, name, metric, settings=settings
            )
    return point


def materialize_daily(
    aggregated: AggregatedCounts,
    period: str,
    dimensions: Iterable[Any],
    *,
    metrics: Iterable[MetricArg] = (Metric.TOTAL,),
    settings: Optional[EngineSettings] = None,
) -> DenseSeries:
    """
    Materialize one point per day of a month.

    Parameters
    ----------
    aggregated : AggregatedCounts
        Day-granularity counts from :func:`~src.series.aggregation.aggregate`
    period : str
        Month key, ``YYYY-MM``
    dimensions : Iterable
        Dimension names, :class:`Dimension` objects or ``{"name": ...}``
        mappings; every one of them gets fields on every point
    metrics : Iterable[Metric or str], default=("total",)
        Metrics to emit per dimension
    settings : EngineSettings, optional
        Status codes and year bounds

    Returns
    -------
    List[dict]
        ``days_in_month(period)`` points with ``unit`` (``YYYY-MM-DD``),
        ``unit_ordinal`` (day of month) and the dimension fields. Empty when
        the period is malformed or no dimension/metric is usable.

    Examples
    --------
    >>> points = materialize_daily({"2025-02-28": {"HQ": {0: 1}}}, "2025-02", ["HQ"])
    >>> len(points)
    28
    >>> points[-1]
    {'unit': '2025-02-28', 'unit_ordinal': 28, 'HQ_total': 1}
    >>> points[0]["HQ_total"]
    0
    """
    cfg = resolve_settings(settings)
    parsed = parse_month_key(period, cfg)
    if parsed is None:
        logger.warning("materialize.invalid_period", extra={"period": repr(period)})
        return []

    names = dimension_names(dimensions)
    resolved = _resolve_metrics(metrics)
    if not names or not resolved:
        return []

    year, month = parsed
    counts = aggregated or {}
    series: DenseSeries = []
    for day in range(1, days_in_month(year, month) + 1):
        unit = f"{period}-{day:02d}"
        point: DenseSeriesPoint = {"unit": unit, "unit_ordinal": day}
        series.append(_fill_point(point, counts, unit, names, resolved, cfg))

    return series


def materialize_yearly(
    aggregated_by_month: AggregatedCounts,
    year: str,
    dimensions: Iterable[Any],
    *,
    metrics: Iterable[MetricArg] = (Metric.TOTAL,),
    locale: Optional[str] = None,
    settings: Optional[EngineSettings] = None,
) -> DenseSeries:
    """
    Materialize exactly twelve monthly points for a year.

    ``aggregated_by_month`` is keyed by ``YYYY-MM`` (aggregate with
    ``granularity="month"``). Each point carries ``unit`` (``YYYY-MM``),
    ``unit_ordinal`` (1-12), ``label`` (localized month name) and the
    dimension fields, zero-filled for months without data.

    Examples
    --------
    >>> points = materialize_yearly({"2025-07": {"HQ": {1: 4}}}, "2025", ["HQ"], locale="en")
    >>> len(points)
    12
    >>> points[6]
    {'unit': '2025-07', 'unit_ordinal': 7, 'label': 'July', 'HQ_total': 4}
    """
    cfg = resolve_settings(settings)
    if parse_year_key(year, cfg) is None:
        logger.warning("materialize.invalid_year", extra={"year": repr(year)})
        return []

    names = dimension_names(dimensions)
    resolved = _resolve_metrics(metrics)
    if not names or not resolved:
        return []

    loc = locale or cfg.locale
    counts = aggregated_by_month or {}
    series: DenseSeries = []
    for month in range(1, 13):
        unit = f"{year}-{month:02d}"
        point: DenseSeriesPoint = {
            "unit": unit,
            "unit_ordinal": month,
            "label": month_name(month, loc),
        }
        series.append(_fill_point(point, counts, unit, names, resolved, cfg))

    return series


def materialize_range(
    aggregated: AggregatedCounts,
    start: Union[date, str],
    end: Union[date, str],
    dimensions: Iterable[Any],
    *,
    metrics: Iterable[MetricArg] = (Metric.TOTAL,),
    settings: Optional[EngineSettings] = None,
) -> DenseSeries:
    """
    Materialize one point per day from ``start`` through ``end`` inclusive.

    Used for rolling windows ("last 30 days"), which cross month
    boundaries. ``unit`` is the ``YYYY-MM-DD`` date and ``unit_ordinal``
    the 1-based position in the range. A start before the configured
    ``min_year`` is clamped to January 1st of that year.

    Returns
    -------
    List[dict]
        Zero-filled points in ascending date order. Empty when either bound
        is invalid, ``start`` is after ``end``, or no dimension/metric is
        usable.

    Examples
    --------
    >>> points = materialize_range(
    ...     {"2025-03-01": {"HQ": {0: 2}}}, "2025-02-27", "2025-03-02", ["HQ"]
    ... )
    >>> [(p["unit"], p["HQ_total"]) for p in points]
    [('2025-02-27', 0), ('2025-02-28', 0), ('2025-03-01', 2), ('2025-03-02', 0)]
    """
    cfg = resolve_settings(settings)
    first, last = coerce_date(start), coerce_date(end)
    if first is None or last is None:
        logger.warning(
            "materialize.invalid_range",
            extra={"start": repr(start), "end": repr(end)},
        )
        return []

    first = max(first, date(cfg.min_year, 1, 1))
    if first > last:
        return []

    names = dimension_names(dimensions)
    resolved = _resolve_metrics(metrics)
    if not names or not resolved:
        return []

    counts = aggregated or {}
    series: DenseSeries = []
    for offset in range((last - first).days + 1):
        unit = (first + timedelta(days=offset)).isoformat()
        point: DenseSeriesPoint = {"unit": unit, "unit_ordinal": offset + 1}
        series.append(_fill_point(point, counts, unit, names, resolved, cfg))

    return series
