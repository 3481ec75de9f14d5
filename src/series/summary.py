"""
Summary calculations over dense series and filtered records.

Provides per-dimension totals (toggle-button badges), percentage
breakdowns (pie charts and legends) and group-by-status cross-tabs (grouped
bar charts).
"""

import logging
from collections import Counter
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, Iterable, List, Optional, Sequence, Set

from ..config.models import EngineSettings, resolve_settings
from .aggregation import Metric
from .materialize import MetricArg, series_field
from .models import BreakdownSlice, DenseSeriesPoint, StatusBreakdown, ValidatedRecord
from .validation import dimension_names, is_strict_int

logger = logging.getLogger(__name__)


def round_half_up(value: float) -> int:
    """
    Round to the nearest integer, halves away from zero.

    Examples
    --------
    >>> round_half_up(66.5)
    67
    >>> round_half_up(2.5)
    3
    >>> round_half_up(33.3)
    33
    """
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def totals_by_dimension(
    series: Sequence[DenseSeriesPoint],
    dimensions: Iterable[Any],
    *,
    metric: MetricArg = "total",
) -> Dict[str, int]:
    """
    Sum one metric across a dense series for every dimension.

    Parameters
    ----------
    series : Sequence[dict]
        Points from :func:`materialize_daily` or :func:`materialize_yearly`
    dimensions : Iterable
        Dimension names or catalog entries
    metric : Metric or str, default="total"
        Metric whose field is summed

    Returns
    -------
    Dict[str, int]
        Dimension name to sum. Values that are missing, non-integer or
        negative are skipped.

    Examples
    --------
    >>> totals_by_dimension(
    ...     [{"HQ_total": 2, "North_total": 0}, {"HQ_total": 1, "North_total": 4}],
    ...     ["HQ", "North"],
    ... )
    {'HQ': 3, 'North': 4}
    """
    try:
        metric = Metric(metric)
    except ValueError:
        logger.warning("summary.unknown_metric", extra={"metric": repr(metric)})
        return {}

    totals: Dict[str, int] = {}
    for name in dimension_names(dimensions):
        field = series_field(name, metric)
        total = 0
        for point in series or ():
            if not isinstance(point, dict):
                continue
            value = point.get(field)
            if is_strict_int(value) and value >= 0:
                total += value
            elif value is not None:
                logger.warning(
                    "summary.invalid_series_value",
                    extra={"field": field, "value": repr(value)},
                )
        totals[name] = total
    return totals


def _group_label(value: Any, unspecified_label: str) -> str:
    if value is None:
        return unspecified_label
    if isinstance(value, str):
        return value.strip() or unspecified_label
    return str(value)


def _fold_label(prefix: str, folded: int, taken: Set[str]) -> str:
    # A real group may already be called "other (2)"
    label = f"{prefix} ({folded})"
    suffix = 2
    while label in taken:
        label = f"{prefix} ({folded}) #{suffix}"
        suffix += 1
    return label


def percentage_breakdown(
    records: Iterable[ValidatedRecord],
    group_by: str,
    *,
    top_n: Optional[int] = None,
    other_label: Optional[str] = None,
    unspecified_label: Optional[str] = None,
    settings: Optional[EngineSettings] = None,
) -> List[BreakdownSlice]:
    """
    Group records by a field and compute each group's share.

    Parameters
    ----------
    records : Iterable[ValidatedRecord]
        Filtered records
    group_by : str
        ``id``, ``date``, ``dimension_label``, ``status`` or any raw attribute
        name (e.g. ``system_name``). Blank or missing values are grouped
        under the unspecified label.
    top_n : int, optional
        Keep the ``top_n`` largest groups and fold the rest into one
        ``"<other_label> (<n>)"`` slice, suffixed ``" #2"``, ``" #3"``... if a
        kept group already has that label. Defaults to the configured limit.
    other_label : str, optional
        Prefix of the folded slice label
    unspecified_label : str, optional
        Label for blank or missing values
    settings : EngineSettings, optional
        Engine settings

    Returns
    -------
    List[BreakdownSlice]
        Slices sorted by count descending, then label ascending. Each
        percentage is ``round_half_up(100 * count / total)`` computed
        independently, so the percentages need not sum to exactly 100.

    Examples
    --------
    >>> from src.series.validation import validate_all
    >>> records = validate_all([
    ...     {"id": 1, "created_at": "2025-03-01", "status": 0, "system_name": "A"},
    ...     {"id": 2, "created_at": "2025-03-01", "status": 0, "system_name": "A"},
    ...     {"id": 3, "created_at": "2025-03-02", "status": 1, "system_name": "B"},
    ... ])
    >>> [(s.label, s.value, s.percentage) for s in percentage_breakdown(records, "system_name")]
    [('A', 2, 67), ('B', 1, 33)]
    """
    cfg = resolve_settings(settings)
    unspecified = unspecified_label or cfg.unspecified_label
    fold_label = other_label or cfg.other_label
    limit = top_n if top_n is not None else cfg.breakdown_top_n

    counts: Counter = Counter(
        _group_label(record.field_value(group_by), unspecified) for record in records or ()
    )
    total = sum(counts.values())
    if total == 0:
        return []

    ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))

    if limit is not None and limit >= 1 and len(ordered) > limit:
        kept, folded = ordered[:limit], ordered[limit:]
        ordered = kept + [
            (
                _fold_label(fold_label, len(folded), {label for label, _ in kept}),
                sum(count for _, count in folded),
            )
        ]

    return [
        BreakdownSlice(
            label=label,
            value=count,
            percentage=round_half_up(100 * count / total),
        )
        for label, count in ordered
    ]


def status_breakdown(
    records: Iterable[ValidatedRecord],
    group_by: str,
    *,
    unspecified_label: Optional[str] = None,
    settings: Optional[EngineSettings] = None,
) -> List[StatusBreakdown]:
    """
    Cross-tabulate records by a field and by status.

    Parameters
    ----------
    records : Iterable[ValidatedRecord]
        Filtered records
    group_by : str
        Field to group on, as for :func:`percentage_breakdown`
    unspecified_label : str, optional
        Label for blank or missing values
    settings : EngineSettings, optional
        Supplies the pending/solved status codes

    Returns
    -------
    List[StatusBreakdown]
        One entry per group, sorted by total descending, then label
        ascending. ``total`` counts every status, so it can exceed
        ``pending + solved`` when other status codes occur.

    Examples
    --------
    >>> from src.series.validation import validate_all
    >>> records = validate_all([
    ...     {"id": 1, "created_at": "2025-03-01", "status": 0, "department": "IT"},
    ...     {"id": 2, "created_at": "2025-03-01", "status": 1, "department": "IT"},
    ...     {"id": 3, "created_at": "2025-03-02", "status": 1, "department": "HR"},
    ... ])
    >>> [(r.label, r.pending, r.solved, r.total) for r in status_breakdown(records, "department")]
    [('IT', 1, 1, 2), ('HR', 0, 1, 1)]
    """
    cfg = resolve_settings(settings)
    unspecified = unspecified_label or cfg.unspecified_label

    groups: Dict[str, Counter] = {}
    for record in records or ():
        label = _group_label(record.field_value(group_by), unspecified)
        groups.setdefault(label, Counter())[record.status] += 1

    rows = [
        StatusBreakdown(
            label=label,
            pending=statuses[cfg.pending_status],
            solved=statuses[cfg.solved_status],
            total=sum(statuses.values()),
        )
        for label, statuses in groups.items()
    ]
    return sorted(rows, key=lambda row: (-row.total, row.label))
