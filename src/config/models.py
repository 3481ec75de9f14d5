"""Config models and loader.

This module defines the environment-driven settings for the series engine.
Every engine function accepts an explicit ``settings`` argument; when it is
omitted the process-wide default from :func:`get_settings` is used, which reads
``TICKET_SERIES_*`` environment variables and an optional ``.env`` file.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal, Optional, Tuple

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class EngineSettings(BaseSettings):
    """Environment-driven settings and .env support.

    Attributes
    ----------
    log_level: str
        Logging level name (e.g., "DEBUG", "INFO"). Defaults to "INFO".
    min_year: int
        Lowest calendar year accepted by the date normalizer.
    max_year: int
        Highest calendar year accepted by the date normalizer.
    unspecified_label: str
        Dimension label substituted for records without a usable label, and
        the group label used by breakdowns for blank values.
    label_fields: Tuple[str, ...]
        Raw record keys consulted, in order, for the dimension label.
    pending_status: int
        Status code counted by the ``pending`` metric.
    solved_status: int
        Status code counted by the ``solved`` metric.
    locale: str
        Label locale for period catalogs and yearly series ("th" or "en").
    other_label: str
        Label prefix of the folded slice produced by top-N breakdowns.
    breakdown_top_n: Optional[int]
        Default top-N limit for breakdowns. None keeps every group.
    cache_maxsize: int
        Entries retained by the pipeline series cache. 0 disables caching.
    """

    model_config = SettingsConfigDict(env_file=".env", env_prefix="TICKET_SERIES_")

    log_level: str = Field("INFO")

    min_year: int = Field(1900, ge=1, description="Lowest accepted year")
    max_year: int = Field(2200, le=9998, description="Highest accepted year")

    unspecified_label: str = Field(
        "unspecified",
        min_length=1,
        description="Sentinel label for records without a dimension label",
    )
    label_fields: Tuple[str, ...] = Field(
        ("dimension_label", "branch_name"),
        description="Raw record keys holding the dimension label",
    )

    pending_status: int = Field(0, description="Status code of pending tickets")
    solved_status: int = Field(1, description="Status code of solved tickets")

    locale: Literal["th", "en"] = Field(
        "th", description="Label locale for periods and months"
    )
    other_label: str = Field(
        "other", min_length=1, description="Label of the folded breakdown slice"
    )
    breakdown_top_n: Optional[int] = Field(
        None, ge=1, description="Default number of breakdown groups to keep"
    )
    cache_maxsize: int = Field(
        128, ge=0, description="Maximum cached series per engine (0 disables)"
    )

    @model_validator(mode="after")
    def _check_consistency(self) -> "EngineSettings":
        if self.min_year > self.max_year:
            raise ValueError("min_year must not exceed max_year")
        if self.pending_status == self.solved_status:
            raise ValueError("pending_status and solved_status must differ")
        if not self.label_fields:
            raise ValueError("label_fields must name at least one key")
        return self


@lru_cache(maxsize=1)
def get_settings() -> EngineSettings:
    """Return the process-wide default settings."""

    return EngineSettings()  # type: ignore[call-arg]


def resolve_settings(settings: Optional[EngineSettings]) -> EngineSettings:
    """Return ``settings`` when given, otherwise the process-wide default."""

    return settings if settings is not None else get_settings()
