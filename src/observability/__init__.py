"""Observability utilities: logging setup and the diagnostics sink.

This module configures standard logging and, if available, integrates
`structlog` for structured logs. The dependency on `structlog` is optional to
keep the base runtime lightweight.
"""

from __future__ import annotations

import importlib
import logging

from .diagnostics import DiagnosticEvent, DiagnosticsSink

__all__ = ["DiagnosticEvent", "DiagnosticsSink", "setup_logging"]


def setup_logging(level: str = "INFO") -> None:
    """Configure application logging.

    Parameters
    ----------
    level: str
        Logging level name (e.g., "DEBUG", "INFO"). Defaults to "INFO".

    Behavior
    --------
    - Initializes Python's logging with the requested level.
    - If `structlog` is installed, configures it with a filtering bound logger.
    - Keeps the engine loggers at the requested level even when the root
      logger was configured earlier by the host application.
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(
        level=numeric_level,
        format=("%(asctime)s %(levelname)s %(name)s - %(message)s"),
        datefmt="%Y-%m-%dT%H:%M:%S",
    )

    engine_loggers = [
        "src.series",
        "src.series.dates",
        "src.series.validation",
        "src.series.periods",
        "src.series.aggregation",
        "src.series.materialize",
        "src.series.summary",
        "src.series.pipeline",
    ]
    for logger_name in engine_loggers:
        logging.getLogger(logger_name).setLevel(numeric_level)

    try:  # optional structlog
        structlog = importlib.import_module("structlog")
        structlog.configure(
            wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        )
    except ModuleNotFoundError:  # pragma: no cover
        pass
