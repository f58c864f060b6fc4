"""Pytest configuration and fixtures."""

from __future__ import annotations

import os
import sys

from pathlib import Path
from typing import TYPE_CHECKING, Any

import pytest


if TYPE_CHECKING:
    from collections.abc import Generator


# Add pydatagrid to path for imports
package_root = Path(__file__).parent.parent
if str(package_root) not in sys.path:
    sys.path.insert(0, str(package_root))


@pytest.fixture(autouse=True)
def isolated_config(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> Generator[Path, None, None]:
    """Run every test without user config files or PYDATAGRID_* variables.

    The working directory and home directory both point at an empty temp dir,
    and the cached settings are cleared before and after the test.
    """
    from pydatagrid.config import clear_settings

    for key in list(os.environ):
        if key.startswith("PYDATAGRID_"):
            monkeypatch.delenv(key, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    monkeypatch.chdir(tmp_path)

    clear_settings()
    yield tmp_path
    clear_settings()


@pytest.fixture
def people() -> list[dict[str, Any]]:
    """Twenty-five people with a mix of ages, statuses and a few gaps."""
    statuses = ["active", "inactive", "pending"]
    return [
        {
            "id": i,
            "name": f"Person {i}",
            "age": 20 + (i * 7) % 30,
            "status": statuses[i % 3],
            "email": None if i % 10 == 0 else f"person{i}@example.com",
        }
        for i in range(1, 26)
    ]


@pytest.fixture
def people_columns() -> list[dict[str, Any]]:
    """Column set for the ``people`` rows."""
    return [
        {"field": "id", "type": "number"},
        {"field": "name", "headerName": "Name"},
        {"field": "age", "type": "number"},
        {"field": "status", "type": "list", "options": ["active", "inactive", "pending"]},
        {"field": "email"},
    ]
