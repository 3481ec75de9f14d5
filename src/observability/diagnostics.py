"""Injectable diagnostics sink.

Engine stages never raise on bad data; they drop the offending input and keep
going. A :class:`DiagnosticsSink` passed to a stage receives one
:class:`DiagnosticEvent` per drop or degradation so callers (and tests) can
inspect what was discarded without scraping log output.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DiagnosticEvent:
    """
    A single diagnostic emitted by an engine stage.

    Attributes
    ----------
    code : str
        Dotted event code, e.g. ``"validation.invalid_created_at"``
    message : str
        Human-readable description
    context : dict
        Structured details (record index, offending value, ...)
    """

    code: str
    message: str
    context: Dict[str, Any] = field(default_factory=dict)


class DiagnosticsSink:
    """Collects diagnostic events emitted by engine stages.

    Parameters
    ----------
    forward_to_log: bool
        When True, every event is also logged at DEBUG level through this
        module's logger.
    """

    def __init__(self, forward_to_log: bool = False) -> None:
        self._events: List[DiagnosticEvent] = []
        self._forward_to_log = forward_to_log

    def emit(self, code: str, message: str, **context: Any) -> None:
        """Record an event."""
        event = DiagnosticEvent(code=code, message=message, context=dict(context))
        self._events.append(event)
        if self._forward_to_log:
            logger.debug(code, extra={"diagnostic": message, **_safe_extra(context)})

    @property
    def events(self) -> List[DiagnosticEvent]:
        """Return a copy of the recorded events, oldest first."""
        return list(self._events)

    def counts(self) -> Dict[str, int]:
        """Return the number of recorded events per code."""
        return dict(Counter(event.code for event in self._events))

    def clear(self) -> None:
        self._events.clear()

    def __len__(self) -> int:
        return len(self._events)


def emit(sink: Optional[DiagnosticsSink], code: str, message: str, **context: Any) -> None:
    """Forward an event to ``sink`` if one was supplied."""
    if sink is not None:
        sink.emit(code, message, **context)


# LogRecord attributes that ``extra`` must not overwrite
_RESERVED = frozenset(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime"}


def _safe_extra(context: Dict[str, Any]) -> Dict[str, Any]:
    return {
        (f"ctx_{key}" if key in _RESERVED else key): value
        for key, value in context.items()
    }
