"""Pytest configuration for test suite.

Ensures the project root is on ``sys.path`` so imports like ``import src``
resolve correctly regardless of the working directory pytest chooses.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

import pytest


def _ensure_project_root_on_syspath() -> None:
    project_root = Path(__file__).resolve().parents[1]
    project_root_str = str(project_root)
    if project_root_str not in sys.path:
        # Prepend to prefer local sources over site-packages
        sys.path.insert(0, project_root_str)


_ensure_project_root_on_syspath()


@pytest.fixture(autouse=True)
def reset_default_settings(monkeypatch):
    """Clear engine env vars and the cached default settings around each test.

    This ensures each test starts from the documented defaults, regardless of
    the shell environment or a stray ``.env`` file.
    """
    from src.config.models import get_settings

    for name in list(os.environ):
        if name.startswith("TICKET_SERIES_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(Path(__file__).resolve().parent)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def branches():
    """Dimension catalog shaped like the branches API response."""
    return [
        {"id": 1, "name": "HQ"},
        {"id": 2, "name": "North"},
    ]


@pytest.fixture
def raw_tasks():
    """Raw ticket records mixing timestamp encodings and bad rows."""
    return [
        {"id": 1, "created_at": "2025-02-03 09:15:00", "branch_name": "HQ", "status": 0,
         "system_name": "Payroll"},
        {"id": 2, "created_at": "2025-02-03T11:00:00Z", "branch_name": "HQ", "status": 1,
         "system_name": "Payroll"},
        {"id": 3, "created_at": "2025-02-14", "branch_name": "North", "status": 1,
         "system_name": "Inventory"},
        {"id": 4, "created_at": "2025-03-01 08:00:00", "branch_name": " HQ ", "status": 0,
         "system_name": None},
        {"id": 5, "created_at": "2024-12-31 23:59:59", "branch_name": None, "status": 1,
         "system_name": "Payroll"},
        {"id": 6, "created_at": "2025-02-30 10:00:00", "branch_name": "HQ", "status": 0},
        {"id": "7", "created_at": "2025-02-05", "branch_name": "HQ", "status": 0},
        {"id": 8, "created_at": "", "branch_name": "HQ", "status": 0},
    ]
