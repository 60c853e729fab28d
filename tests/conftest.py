"""Pytest configuration and shared fixtures for nesting tests."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest


FIXTURES_PATH = Path(__file__).parent / "fixtures" / "jobs"


# =============================================================================
# Job data fixtures
# =============================================================================


@pytest.fixture
def sheet_job_data() -> dict[str, Any]:
    """Minimal valid sheet nesting job (scenario: one part on one sheet)."""
    return {
        "schema_version": "1.0",
        "kind": "sheet",
        "settings": {"rotation": "none"},
        "sheets": [
            {"length": 1000, "width": 500, "thickness": 3, "grade": "MS", "quantity": 1}
        ],
        "parts": [
            {"name": "Plate", "length": 400, "width": 300, "thickness": 3, "grade": "MS"}
        ],
    }


@pytest.fixture
def linear_job_data() -> dict[str, Any]:
    """Minimal valid linear nesting job (scenario: three cuts on one bar)."""
    return {
        "schema_version": "1.0",
        "kind": "linear",
        "settings": {"stock_length": 6000},
        "parts": [
            {"raw_material": "RHS 50x50", "length": 2000, "quantity": 2},
            {"raw_material": "RHS 50x50", "length": 1000, "quantity": 1},
        ],
    }


@pytest.fixture
def write_job(tmp_path: Path) -> Callable[[dict[str, Any], str], Path]:
    """Factory writing job data to a JSON file under tmp_path."""

    def _write(data: dict[str, Any], name: str = "job.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def sheet_job_file() -> Path:
    """Path to the multi-grade sheet job fixture."""
    return FIXTURES_PATH / "sheet_job.json"


@pytest.fixture
def linear_job_file() -> Path:
    """Path to the multi-material linear job fixture."""
    return FIXTURES_PATH / "linear_job.json"
