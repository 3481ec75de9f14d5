"""Canonical data model shared by the engine stages.

These Pydantic models describe validated ticket records and the values handed
to selector and chart code. Dense series points are intentionally plain dicts:
their field names (``"<dimension>_<metric>"``) depend on the caller's
dimension catalog and are consumed directly by chart libraries.
"""

from __future__ import annotations

from typing import Any, Dict, List, Union

from pydantic import BaseModel, ConfigDict, Field

# "YYYY-MM-DD", guaranteed to be a real calendar day
CalendarDate = str
# "YYYY-MM" or "YYYY"
PeriodKey = str
DimensionLabel = str
StatusCode = int

# [unit][dimension][status] -> count
AggregatedCounts = Dict[str, Dict[DimensionLabel, Dict[StatusCode, int]]]
DenseSeriesPoint = Dict[str, Union[str, int]]
DenseSeries = List[DenseSeriesPoint]


class ValidatedRecord(BaseModel):
    """Ticket record that passed validation.

    Attributes
    ----------
    id: int
        Ticket identifier from the source system.
    date: str
        Normalized creation date, ``YYYY-MM-DD``.
    dimension_label: str
        Trimmed dimension (branch) label, or the unspecified sentinel.
    status: int
        Raw status code.
    attributes: Dict[str, Any]
        Every other field of the raw record, copied.
    """

    model_config = ConfigDict(frozen=True)

    id: int
    date: CalendarDate
    dimension_label: DimensionLabel
    status: StatusCode
    attributes: Dict[str, Any] = Field(default_factory=dict)

    @property
    def month_key(self) -> PeriodKey:
        return self.date[:7]

    @property
    def year_key(self) -> PeriodKey:
        return self.date[:4]

    def field_value(self, name: str) -> Any:
        """Return a model field or, failing that, a raw attribute."""
        if name in ("id", "date", "dimension_label", "status"):
            return getattr(self, name)
        return self.attributes.get(name)


class Dimension(BaseModel):
    """Entry of the caller-supplied dimension catalog (e.g. a branch)."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: DimensionLabel


class PeriodOption(BaseModel):
    """Selectable period for month/year pickers.

    Attributes
    ----------
    value: str
        Period key, ``YYYY-MM`` or ``YYYY``.
    label: str
        Locale-formatted rendering of ``value``.
    record_count: int
        Number of validated records falling in the period.
    """

    model_config = ConfigDict(frozen=True)

    value: PeriodKey
    label: str
    record_count: int = Field(..., ge=1)


class BreakdownSlice(BaseModel):
    """One group of a percentage breakdown (pie/legend entry)."""

    model_config = ConfigDict(frozen=True)

    label: str
    value: int = Field(..., ge=0)
    percentage: int = Field(..., ge=0)


class StatusBreakdown(BaseModel):
    """Pending/solved counts for one group (grouped bar chart entry)."""

    model_config = ConfigDict(frozen=True)

    label: str
    pending: int = Field(..., ge=0)
    solved: int = Field(..., ge=0)
    total: int = Field(..., ge=0)
