"""
Validation utilities for raw ticket records and dimension catalogs.

Raw records come from an untrusted REST source. Validation never raises and
never aborts a batch: malformed records are dropped (and reported to an
optional diagnostics sink), well-formed ones are converted to
:class:`~src.series.models.ValidatedRecord` in their original order.
"""

import logging
from collections.abc import Mapping
from typing import Any, Iterable, List, Optional

from ..config.models import EngineSettings, resolve_settings
from ..observability.diagnostics import DiagnosticsSink, emit
from .dates import normalize_date
from .models import Dimension, ValidatedRecord

logger = logging.getLogger(__name__)

_CORE_FIELDS = ("id", "created_at", "status")


def is_strict_int(value: Any) -> bool:
    """
    Check that a value is an integer and not a bool.

    Examples
    --------
    >>> is_strict_int(3)
    True
    >>> is_strict_int(True)
    False
    >>> is_strict_int(3.0)
    False
    """
    return isinstance(value, int) and not isinstance(value, bool)


def resolve_label(
    record: Mapping,
    settings: Optional[EngineSettings] = None,
) -> str:
    """
    Return the trimmed dimension label of a raw record.

    The configured ``label_fields`` are consulted in order and the first key
    present in the record is used. Missing, null, non-string or blank labels
    resolve to the unspecified sentinel.
    """
    cfg = resolve_settings(settings)
    for key in cfg.label_fields:
        if key in record:
            value = record[key]
            if isinstance(value, str) and value.strip():
                return value.strip()
            return cfg.unspecified_label
    return cfg.unspecified_label


def validate_record(
    raw: Any,
    index: int = 0,
    *,
    settings: Optional[EngineSettings] = None,
    sink: Optional[DiagnosticsSink] = None,
) -> Optional[ValidatedRecord]:
    """
    Validate a single raw record.

    Parameters
    ----------
    raw : Any
        Raw record, expected to be a mapping
    index : int, default=0
        Position of the record in its batch, used for diagnostics
    settings : EngineSettings, optional
        Year bounds, label keys and sentinel label
    sink : DiagnosticsSink, optional
        Receives one event if the record is dropped

    Returns
    -------
    ValidatedRecord or None
        The validated record, or None if it must be dropped
    """
    if not isinstance(raw, Mapping):
        emit(sink, "validation.not_a_mapping", "record is not a mapping",
             index=index, value_type=type(raw).__name__)
        return None

    record_id = raw.get("id")
    if not is_strict_int(record_id):
        emit(sink, "validation.invalid_id", "id is missing or not an integer",
             index=index)
        return None

    status = raw.get("status")
    if not is_strict_int(status):
        emit(sink, "validation.invalid_status",
             "status is missing or not an integer", index=index, id=record_id)
        return None

    created_at = raw.get("created_at")
    if not isinstance(created_at, str) or not created_at.strip():
        emit(sink, "validation.missing_created_at",
             "created_at is missing or empty", index=index, id=record_id)
        return None

    cfg = resolve_settings(settings)
    normalized = normalize_date(created_at, settings=cfg, sink=sink)
    if normalized is None:
        emit(sink, "validation.invalid_created_at", "created_at did not normalize",
             index=index, id=record_id, value=created_at)
        return None

    skip = set(_CORE_FIELDS) | set(cfg.label_fields)
    attributes = {key: value for key, value in raw.items() if key not in skip}

    return ValidatedRecord(
        id=record_id,
        date=normalized,
        dimension_label=resolve_label(raw, cfg),
        status=status,
        attributes=attributes,
    )


def validate_all(
    raw_records: Any,
    *,
    settings: Optional[EngineSettings] = None,
    sink: Optional[DiagnosticsSink] = None,
) -> List[ValidatedRecord]:
    """
    Validate a batch of raw records, keeping only well-formed ones.

    Parameters
    ----------
    raw_records : list or tuple
        Raw records from the record source. Any other type yields ``[]``.
    settings : EngineSettings, optional
        Validation settings; defaults to the process-wide settings
    sink : DiagnosticsSink, optional
        Receives one event per dropped record

    Returns
    -------
    List[ValidatedRecord]
        Validated records in input order; never longer than the input

    Examples
    --------
    >>> records = validate_all([
    ...     {"id": 1, "created_at": "2025-07-22 04:49:39", "status": 0},
    ...     {"id": 2, "created_at": "2025-02-30", "status": 0},
    ... ])
    >>> [(r.id, r.date, r.dimension_label) for r in records]
    [(1, '2025-07-22', 'unspecified')]
    """
    if not isinstance(raw_records, (list, tuple)):
        if raw_records is not None:
            logger.warning(
                "validation.records_not_a_list",
                extra={"value_type": type(raw_records).__name__},
            )
        emit(sink, "validation.records_not_a_list", "record batch is not a list")
        return []

    cfg = resolve_settings(settings)
    validated: List[ValidatedRecord] = []
    dropped = 0

    for index, raw in enumerate(raw_records):
        record = validate_record(raw, index, settings=cfg, sink=sink)
        if record is None:
            dropped += 1
            continue
        validated.append(record)

    if dropped:
        logger.info(
            "validation.records_dropped",
            extra={"dropped": dropped, "total": len(raw_records)},
        )

    return validated


def validate_dimensions(
    dimensions: Any,
    *,
    sink: Optional[DiagnosticsSink] = None,
) -> List[Dimension]:
    """
    Validate the caller-supplied dimension catalog (e.g. branches).

    Entries may be :class:`Dimension` objects or mappings with an integer
    ``id`` and a non-blank string ``name``. Names are trimmed and the first
    entry wins when two share a name. Invalid entries are dropped.

    Examples
    --------
    >>> [d.name for d in validate_dimensions([
    ...     {"id": 1, "name": " HQ "},
    ...     {"id": 2, "name": ""},
    ...     {"id": "3", "name": "North"},
    ... ])]
    ['HQ']
    """
    if not isinstance(dimensions, (list, tuple)):
        emit(sink, "validation.dimensions_not_a_list", "dimension catalog is not a list")
        return []

    valid: List[Dimension] = []
    seen = set()

    for index, entry in enumerate(dimensions):
        if isinstance(entry, Dimension):
            dim_id, name = entry.id, entry.name
        elif isinstance(entry, Mapping):
            dim_id, name = entry.get("id"), entry.get("name")
        else:
            emit(sink, "validation.invalid_dimension", "dimension is not a mapping",
                 index=index)
            continue

        if not is_strict_int(dim_id) or not isinstance(name, str) or not name.strip():
            emit(sink, "validation.invalid_dimension",
                 "dimension needs an integer id and a non-blank name", index=index)
            continue

        name = name.strip()
        if name in seen:
            emit(sink, "validation.duplicate_dimension", "duplicate dimension name",
                 index=index, name=name)
            continue
        seen.add(name)
        valid.append(Dimension(id=dim_id, name=name))

    return valid


def dimension_names(dimensions: Iterable[Any]) -> List[str]:
    """
    Return unique, trimmed dimension names in first-seen order.

    Accepts plain strings, :class:`Dimension` objects or ``{"name": ...}``
    mappings; anything without a usable name is skipped.
    """
    if isinstance(dimensions, str):
        dimensions = [dimensions]
    names: List[str] = []
    seen = set()
    for entry in dimensions or ():
        if isinstance(entry, Dimension):
            name = entry.name
        elif isinstance(entry, Mapping):
            name = entry.get("name")
        else:
            name = entry
        if not isinstance(name, str) or not name.strip():
            continue
        name = name.strip()
        if name not in seen:
            seen.add(name)
            names.append(name)
    return names
