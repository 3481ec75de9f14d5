"""
Timestamp normalization and calendar utilities.

Ticket ``created_at`` values arrive in several encodings
(``"2025-07-22 04:49:39"``, ``"2025-07-22T04:49:39Z"``, ``"2025-07-22"``).
This module reduces them to a canonical ``YYYY-MM-DD`` calendar date and
provides the calendar arithmetic used by the later stages. Nothing here
raises on bad input: invalid values come back as ``None``.
"""

import logging
import re
from datetime import date, datetime, timedelta
from typing import Any, Optional, Tuple, Union

from ..config.models import EngineSettings, resolve_settings
from ..observability.diagnostics import DiagnosticsSink, emit

logger = logging.getLogger(__name__)

_DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$", re.ASCII)
_MONTH_KEY_RE = re.compile(r"^\d{4}-\d{2}$", re.ASCII)
_YEAR_KEY_RE = re.compile(r"^\d{4}$", re.ASCII)


def _reject(
    sink: Optional[DiagnosticsSink], code: str, message: str, **context: Any
) -> None:
    logger.debug(code, extra=context)
    emit(sink, code, message, **context)


def normalize_date(
    raw: Any,
    *,
    settings: Optional[EngineSettings] = None,
    sink: Optional[DiagnosticsSink] = None,
) -> Optional[str]:
    """
    Normalize a raw timestamp to a ``YYYY-MM-DD`` calendar date.

    The date part is the text before the first space, else before the first
    ``"T"``, else the whole (trimmed) string. It must match ``YYYY-MM-DD``,
    fall inside the configured year bounds and denote a real calendar day.

    Parameters
    ----------
    raw : Any
        The raw ``created_at`` value
    settings : EngineSettings, optional
        Year bounds; defaults to the process-wide settings
    sink : DiagnosticsSink, optional
        Receives one event when the value is rejected

    Returns
    -------
    str or None
        Canonical date string, or None if the value is invalid

    Examples
    --------
    >>> normalize_date("2025-07-22 04:49:39")
    '2025-07-22'
    >>> normalize_date("2025-07-22T04:49:39Z")
    '2025-07-22'
    >>> normalize_date("2025-02-30") is None
    True
    """
    if not isinstance(raw, str):
        _reject(sink, "dates.not_a_string", "timestamp is not a string",
                value_type=type(raw).__name__)
        return None

    trimmed = raw.strip()
    if not trimmed:
        _reject(sink, "dates.empty", "timestamp is empty")
        return None

    if " " in trimmed:
        date_part = trimmed.split(" ", 1)[0]
    elif "T" in trimmed:
        date_part = trimmed.split("T", 1)[0]
    else:
        date_part = trimmed

    if not _DATE_RE.match(date_part):
        _reject(sink, "dates.invalid_format", "date part is not YYYY-MM-DD",
                value=raw, date_part=date_part)
        return None

    year, month, day = (int(part) for part in date_part.split("-"))
    cfg = resolve_settings(settings)

    if year < cfg.min_year or year > cfg.max_year:
        _reject(sink, "dates.year_out_of_range", "year outside accepted bounds",
                value=raw, year=year)
        return None
    if month < 1 or month > 12:
        _reject(sink, "dates.month_out_of_range", "month outside 1..12",
                value=raw, month=month)
        return None
    if day < 1 or day > 31:
        _reject(sink, "dates.day_out_of_range", "day outside 1..31", value=raw, day=day)
        return None

    # Catches combinations such as Feb 30 or Apr 31
    if day > days_in_month(year, month):
        _reject(sink, "dates.invalid_calendar_day", "no such calendar day", value=raw)
        return None

    return date_part


def days_in_month(year: int, month: int) -> int:
    """
    Return the number of days in ``month`` of ``year``.

    Computed by stepping to the first day of the following month and going
    back one day, so leap years follow the Gregorian rule.

    Examples
    --------
    >>> days_in_month(2024, 2)
    29
    >>> days_in_month(2025, 2)
    28
    """
    if month == 12:
        first_of_next = date(year + 1, 1, 1)
    else:
        first_of_next = date(year, month + 1, 1)
    return (first_of_next - timedelta(days=1)).day


def parse_month_key(
    key: Any, settings: Optional[EngineSettings] = None
) -> Optional[Tuple[int, int]]:
    """Parse a ``YYYY-MM`` key into ``(year, month)``, or None if malformed."""
    if not isinstance(key, str) or not _MONTH_KEY_RE.match(key):
        return None
    year, month = int(key[:4]), int(key[5:7])
    cfg = resolve_settings(settings)
    if year < cfg.min_year or year > cfg.max_year or month < 1 or month > 12:
        return None
    return year, month


def parse_year_key(key: Any, settings: Optional[EngineSettings] = None) -> Optional[int]:
    """Parse a ``YYYY`` key into the year, or None if malformed."""
    if not isinstance(key, str) or not _YEAR_KEY_RE.match(key):
        return None
    year = int(key)
    cfg = resolve_settings(settings)
    if year < cfg.min_year or year > cfg.max_year:
        return None
    return year


def period_granularity(
    key: Any, settings: Optional[EngineSettings] = None
) -> Optional[str]:
    """Return ``"month"`` or ``"year"`` for a valid period key, else None."""
    if parse_month_key(key, settings) is not None:
        return "month"
    if parse_year_key(key, settings) is not None:
        return "year"
    return None


def coerce_date(value: Union[date, str, None]) -> Optional[date]:
    """Return a ``date`` from a ``date`` or ``YYYY-MM-DD`` string, else None."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    normalized = normalize_date(value) if isinstance(value, str) else None
    if normalized is None:
        return None
    return date.fromisoformat(normalized)
