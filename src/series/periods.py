"""
Period catalogs and period filters.

Builds the month/year options shown in chart selectors (newest first, with
record counts), picks the default selection, and filters validated records
down to one period or a rolling window of days.
"""

import logging
from collections import Counter
from datetime import date, timedelta
from typing import Callable, Iterable, List, Optional, Sequence, Tuple, Union

from ..config.models import EngineSettings, resolve_settings
from .dates import coerce_date, parse_month_key, parse_year_key
from .labels import format_month_label, format_year_label
from .models import PeriodKey, PeriodOption, ValidatedRecord

logger = logging.getLogger(__name__)


def _build_catalog(
    records: Iterable[ValidatedRecord],
    key_length: int,
    formatter: Callable[[str], str],
) -> List[PeriodOption]:
    counts: Counter = Counter(record.date[:key_length] for record in records or ())
    return [
        PeriodOption(value=key, label=formatter(key), record_count=count)
        for key, count in sorted(counts.items(), key=lambda item: item[0], reverse=True)
    ]


def build_month_catalog(
    records: Iterable[ValidatedRecord],
    *,
    locale: Optional[str] = None,
    settings: Optional[EngineSettings] = None,
) -> List[PeriodOption]:
    """
    Build the month selector catalog.

    Parameters
    ----------
    records : Iterable[ValidatedRecord]
        Validated records
    locale : str, optional
        Label locale ("th" or "en"); defaults to the configured locale
    settings : EngineSettings, optional
        Engine settings

    Returns
    -------
    List[PeriodOption]
        One option per ``YYYY-MM`` that has records, newest first

    Examples
    --------
    >>> from src.series.validation import validate_all
    >>> records = validate_all([
    ...     {"id": 1, "created_at": "2025-01-03", "status": 0},
    ...     {"id": 2, "created_at": "2025-02-01", "status": 1},
    ...     {"id": 3, "created_at": "2025-02-09", "status": 1},
    ... ])
    >>> [(o.value, o.record_count) for o in build_month_catalog(records)]
    [('2025-02', 2), ('2025-01', 1)]
    """
    cfg = resolve_settings(settings)
    loc = locale or cfg.locale
    return _build_catalog(
        records, 7, lambda key: format_month_label(key, loc, cfg)
    )


def build_year_catalog(
    records: Iterable[ValidatedRecord],
    *,
    locale: Optional[str] = None,
    settings: Optional[EngineSettings] = None,
) -> List[PeriodOption]:
    """Build the year selector catalog: one option per ``YYYY``, newest first."""
    cfg = resolve_settings(settings)
    loc = locale or cfg.locale
    return _build_catalog(
        records, 4, lambda key: format_year_label(key, loc, cfg)
    )


def select_default_period(
    catalog: Sequence[PeriodOption],
    current_period: Optional[PeriodKey] = None,
) -> Optional[PeriodKey]:
    """
    Pick the default selector value.

    The caller's current period wins when the catalog contains it; otherwise
    the first (newest) option is selected. An empty catalog selects nothing.

    Examples
    --------
    >>> options = [
    ...     PeriodOption(value="2025-02", label="", record_count=2),
    ...     PeriodOption(value="2025-01", label="", record_count=1),
    ... ]
    >>> select_default_period(options, "2025-01")
    '2025-01'
    >>> select_default_period(options, "2024-12")
    '2025-02'
    >>> select_default_period([], "2025-01") is None
    True
    """
    if not catalog:
        return None
    if current_period is not None:
        for option in catalog:
            if option.value == current_period:
                return option.value
    return catalog[0].value


def filter_by_period(
    records: Iterable[ValidatedRecord],
    period: PeriodKey,
    *,
    settings: Optional[EngineSettings] = None,
) -> List[ValidatedRecord]:
    """
    Select the records whose date falls in ``period``.

    ``period`` is either ``YYYY-MM`` or ``YYYY``; matching is exact string
    equality on the corresponding date prefix. A malformed or out-of-range
    key matches nothing.

    Examples
    --------
    >>> from src.series.validation import validate_all
    >>> records = validate_all([
    ...     {"id": 1, "created_at": "2025-01-03", "status": 0},
    ...     {"id": 2, "created_at": "2025-02-01", "status": 1},
    ... ])
    >>> [r.id for r in filter_by_period(records, "2025-02")]
    [2]
    >>> [r.id for r in filter_by_period(records, "2025")]
    [1, 2]
    >>> filter_by_period(records, "2025-2")
    []
    """
    if parse_month_key(period, settings) is not None:
        prefix_length = 7
    elif parse_year_key(period, settings) is not None:
        prefix_length = 4
    else:
        logger.warning("periods.invalid_period_key", extra={"period": repr(period)})
        return []

    return [record for record in records or () if record.date[:prefix_length] == period]


def window_bounds(today: Union[date, str], days: int) -> Optional[Tuple[date, date]]:
    """Return the inclusive ``(today - days, today)`` range, or None if invalid."""
    end = coerce_date(today)
    if end is None or not isinstance(days, int) or isinstance(days, bool) or days < 0:
        logger.warning(
            "periods.invalid_window",
            extra={"today": repr(today), "days": repr(days)},
        )
        return None

    try:
        start = end - timedelta(days=days)
    except OverflowError:
        start = date.min
    return start, end


def filter_by_window(
    records: Iterable[ValidatedRecord],
    today: Union[date, str],
    days: int,
) -> List[ValidatedRecord]:
    """
    Select the records dated within the last ``days`` days.

    The window runs from ``today - days`` through ``today``, both inclusive,
    so ``days=7`` spans eight calendar dates. ``today`` is supplied by the
    caller; the engine never reads the clock.

    Parameters
    ----------
    records : Iterable[ValidatedRecord]
        Validated records
    today : date or str
        Reference date, a ``date`` or ``YYYY-MM-DD`` string
    days : int
        Number of days to look back (e.g. 7, 30, 90)

    Returns
    -------
    List[ValidatedRecord]
        Records inside the window, in input order. Empty when ``today`` is
        invalid or ``days`` is negative.
    """
    bounds = window_bounds(today, days)
    if bounds is None:
        return []

    start, end = bounds
    # ISO dates compare correctly as strings
    start_key, end_key = start.isoformat(), end.isoformat()
    return [record for record in records or () if start_key <= record.date <= end_key]
