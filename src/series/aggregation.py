"""
Dimensional aggregation of validated ticket records.

Counts records into a sparse ``[unit][dimension][status]`` mapping, where the
unit is a calendar date (daily charts) or a ``YYYY-MM`` month key (yearly
charts). Zero counts are never stored: densification happens later in
:mod:`src.series.materialize`.
"""

import logging
from enum import Enum
from typing import Dict, Iterable, Optional, Union

from ..config.models import EngineSettings, resolve_settings
from .models import AggregatedCounts, ValidatedRecord

logger = logging.getLogger(__name__)


class Granularity(Enum):
    """Unit used as the outer key of an aggregation."""

    DAY = "day"  # YYYY-MM-DD
    MONTH = "month"  # YYYY-MM


class Metric(Enum):
    """Per-unit value that a dense series field can carry."""

    TOTAL = "total"  # All statuses combined
    PENDING = "pending"  # Status configured as pending
    SOLVED = "solved"  # Status configured as solved


_UNIT_LENGTH = {Granularity.DAY: 10, Granularity.MONTH: 7}


def aggregate(
    records: Iterable[ValidatedRecord],
    *,
    granularity: Union[Granularity, str] = Granularity.DAY,
) -> AggregatedCounts:
    """
    Count records per unit, dimension and status.

    Parameters
    ----------
    records : Iterable[ValidatedRecord]
        Validated (usually period-filtered) records
    granularity : Granularity or str, default=DAY
        ``"day"`` keys by ``YYYY-MM-DD``, ``"month"`` by ``YYYY-MM``

    Returns
    -------
    Dict[str, Dict[str, Dict[int, int]]]
        Sparse counts; empty for empty input or an unknown granularity

    Examples
    --------
    >>> from src.series.validation import validate_all
    >>> records = validate_all([
    ...     {"id": 1, "created_at": "2025-03-01", "dimension_label": "HQ", "status": 0},
    ...     {"id": 2, "created_at": "2025-03-01", "dimension_label": "HQ", "status": 1},
    ...     {"id": 3, "created_at": "2025-03-01", "dimension_label": "HQ", "status": 1},
    ... ])
    >>> aggregate(records)
    {'2025-03-01': {'HQ': {0: 1, 1: 2}}}
    """
    try:
        unit_length = _UNIT_LENGTH[Granularity(granularity)]
    except ValueError:
        logger.warning(
            "aggregation.invalid_granularity",
            extra={"granularity": repr(granularity)},
        )
        return {}

    counts: AggregatedCounts = {}
    for record in records or ():
        unit = record.date[:unit_length]
        by_dimension = counts.setdefault(unit, {})
        by_status = by_dimension.setdefault(record.dimension_label, {})
        by_status[record.status] = by_status.get(record.status, 0) + 1

    return counts


def total_per(aggregated: AggregatedCounts, unit: str, dimension: str) -> int:
    """Return the count for ``(unit, dimension)`` summed over all statuses."""
    return sum(aggregated.get(unit, {}).get(dimension, {}).values())


def metric_count(
    aggregated: AggregatedCounts,
    unit: str,
    dimension: str,
    metric: Union[Metric, str],
    *,
    settings: Optional[EngineSettings] = None,
) -> int:
    """
    Return one metric for ``(unit, dimension)``, 0 when there is no data.

    ``total`` sums every status; ``pending`` and ``solved`` read the status
    codes configured in :class:`EngineSettings`.
    """
    metric = Metric(metric)
    if metric is Metric.TOTAL:
        return total_per(aggregated, unit, dimension)

    cfg = resolve_settings(settings)
    status = cfg.pending_status if metric is Metric.PENDING else cfg.solved_status
    return aggregated.get(unit, {}).get(dimension, {}).get(status, 0)


def collapse_dimensions(aggregated: AggregatedCounts, label: str = "all") -> AggregatedCounts:
    """
    Merge every dimension of each unit into a single ``label`` dimension.

    Used by the all-branch pending/solved chart.

    Examples
    --------
    >>> collapse_dimensions({"2025-03-01": {"HQ": {0: 1}, "North": {0: 2, 1: 1}}})
    {'2025-03-01': {'all': {0: 3, 1: 1}}}
    """
    collapsed: AggregatedCounts = {}
    for unit, by_dimension in aggregated.items():
        merged: Dict[int, int] = {}
        for by_status in by_dimension.values():
            for status, count in by_status.items():
                merged[status] = merged.get(status, 0) + count
        if merged:
            collapsed[unit] = {label: merged}
    return collapsed
