"""
Locale rules for period labels.

Two locales are supported: ``"th"`` renders Thai month names with Buddhist-era
years (Gregorian year + 543), ``"en"`` renders English month names with the
Gregorian year. Malformed keys are returned unchanged so a selector always has
something to show.
"""

from typing import Optional

from ..config.models import EngineSettings, resolve_settings
from .dates import parse_month_key, parse_year_key

BUDDHIST_ERA_OFFSET = 543

THAI_MONTH_NAMES = (
    "มกราคม",
    "กุมภาพันธ์",
    "มีนาคม",
    "เมษายน",
    "พฤษภาคม",
    "มิถุนายน",
    "กรกฎาคม",
    "สิงหาคม",
    "กันยายน",
    "ตุลาคม",
    "พฤศจิกายน",
    "ธันวาคม",
)

ENGLISH_MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)


def _locale(locale: Optional[str], settings: Optional[EngineSettings]) -> str:
    return locale if locale is not None else resolve_settings(settings).locale


def month_name(
    month: int,
    locale: Optional[str] = None,
    settings: Optional[EngineSettings] = None,
) -> str:
    """Return the month name for ``month`` (1-12) in the given locale."""
    names = THAI_MONTH_NAMES if _locale(locale, settings) == "th" else ENGLISH_MONTH_NAMES
    if 1 <= month <= 12:
        return names[month - 1]
    return str(month)


def format_year(
    year: int,
    locale: Optional[str] = None,
    settings: Optional[EngineSettings] = None,
) -> str:
    """Return the display year: Buddhist era for "th", Gregorian otherwise."""
    if _locale(locale, settings) == "th":
        return str(year + BUDDHIST_ERA_OFFSET)
    return str(year)


def format_month_label(
    month_key: str,
    locale: Optional[str] = None,
    settings: Optional[EngineSettings] = None,
) -> str:
    """
    Format a ``YYYY-MM`` key for display.

    Examples
    --------
    >>> format_month_label("2025-01", "th")
    'มกราคม 2568'
    >>> format_month_label("2025-01", "en")
    'January 2025'
    >>> format_month_label("2025-13", "en")
    '2025-13'
    """
    parsed = parse_month_key(month_key, settings)
    if parsed is None:
        return month_key if isinstance(month_key, str) else ""
    year, month = parsed
    loc = _locale(locale, settings)
    return f"{month_name(month, loc)} {format_year(year, loc)}"


def format_year_label(
    year_key: str,
    locale: Optional[str] = None,
    settings: Optional[EngineSettings] = None,
) -> str:
    """
    Format a ``YYYY`` key for display.

    Examples
    --------
    >>> format_year_label("2025", "th")
    'พ.ศ. 2568'
    >>> format_year_label("2025", "en")
    '2025'
    """
    year = parse_year_key(year_key, settings)
    if year is None:
        return year_key if isinstance(year_key, str) else ""
    loc = _locale(locale, settings)
    if loc == "th":
        return f"พ.ศ. {format_year(year, loc)}"
    return format_year(year, loc)
