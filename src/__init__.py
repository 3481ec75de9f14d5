"""
Ticket series engine package.

This package hosts the time-series aggregation engine used by the ticket
dashboard charts: timestamp normalization, record validation, period
catalogs, dimensional aggregation, dense series materialization, and summary
calculations. See README.md for usage.
"""

from .__version__ import __series_format_version__, __version__

__all__ = ["__version__", "__series_format_version__"]
