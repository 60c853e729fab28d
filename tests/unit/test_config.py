"""Tests for job file loading, schema validation, adapters and advisories."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest

from stocknest.application import NestSheetsCommand
from stocknest.application.config import (
    ConfigError,
    LinearNestingJob,
    SheetNestingJob,
    job_to_density_table,
    job_to_linear_config,
    job_to_linear_parts,
    job_to_parts,
    job_to_sheet_config,
    job_to_sheets,
    load_job,
    load_job_from_dict,
    resolve_part_ids,
    validate_job,
)
from stocknest.application.config.loader import _format_json_path
from stocknest.domain import OptimizationGoal, RotationOption


# =============================================================================
# Loader
# =============================================================================


class TestLoadJob:
    """Tests for load_job() error handling."""

    def test_load_sheet_job(
        self,
        sheet_job_data: dict[str, Any],
        write_job: Callable[..., Path],
    ) -> None:
        """A valid sheet job file loads as a SheetNestingJob."""
        job = load_job(write_job(sheet_job_data))
        assert isinstance(job, SheetNestingJob)
        assert job.parts[0].name == "Plate"

    def test_load_linear_job(
        self,
        linear_job_data: dict[str, Any],
        write_job: Callable[..., Path],
    ) -> None:
        """A valid linear job file loads as a LinearNestingJob."""
        job = load_job(write_job(linear_job_data))
        assert isinstance(job, LinearNestingJob)
        assert job.settings.stock_length == 6000

    def test_file_not_found(self, tmp_path: Path) -> None:
        """Missing files raise file_not_found."""
        with pytest.raises(ConfigError) as exc_info:
            load_job(tmp_path / "missing.json")
        assert exc_info.value.error_type == "file_not_found"
        assert "not found" in str(exc_info.value)

    def test_invalid_json(self, tmp_path: Path) -> None:
        """Malformed JSON raises json_parse with line details."""
        path = tmp_path / "bad.json"
        path.write_text('{"kind": "sheet",\n  oops}', encoding="utf-8")
        with pytest.raises(ConfigError) as exc_info:
            load_job(path)
        error = exc_info.value
        assert error.error_type == "json_parse"
        assert error.details[0]["line"] == 2

    def test_unknown_kind(self, write_job: Callable[..., Path]) -> None:
        """An unknown kind is a validation error at path 'kind'."""
        with pytest.raises(ConfigError) as exc_info:
            load_job(write_job({"schema_version": "1.0", "kind": "tube"}))
        error = exc_info.value
        assert error.error_type == "validation"
        assert error.details[0]["path"] == "kind"

    def test_non_object_root(self, write_job: Callable[..., Path]) -> None:
        """A JSON array is rejected."""
        with pytest.raises(ConfigError) as exc_info:
            load_job(write_job([1, 2, 3]))  # type: ignore[arg-type]
        assert exc_info.value.error_type == "validation"

    def test_validation_error_paths(self, sheet_job_data: dict[str, Any]) -> None:
        """Field errors report JSON paths with list indices."""
        sheet_job_data["parts"][0]["length"] = -5
        with pytest.raises(ConfigError) as exc_info:
            load_job_from_dict(sheet_job_data)
        paths = [d["path"] for d in exc_info.value.details]
        assert "parts[0].length" in paths
        assert "Job validation failed" in exc_info.value.message

    def test_format_json_path(self) -> None:
        """Location tuples render as dotted paths with indices."""
        assert _format_json_path(("settings", "kerf")) == "settings.kerf"
        assert _format_json_path(("parts", 2, "length")) == "parts[2].length"


# =============================================================================
# Schema
# =============================================================================


class TestSheetSchema:
    """Tests for sheet job schema rules."""

    def test_defaults(self, sheet_job_data: dict[str, Any]) -> None:
        """Settings and densities default sensibly."""
        del sheet_job_data["settings"]
        job = load_job_from_dict(sheet_job_data)
        assert isinstance(job, SheetNestingJob)
        assert job.settings.rotation is RotationOption.FREE
        assert job.settings.part_clearance == 0
        assert job.densities == {}

    def test_sheets_required(self, sheet_job_data: dict[str, Any]) -> None:
        """At least one sheet definition is required."""
        sheet_job_data["sheets"] = []
        with pytest.raises(ConfigError):
            load_job_from_dict(sheet_job_data)

    def test_extra_fields_forbidden(self, sheet_job_data: dict[str, Any]) -> None:
        """Unknown fields are rejected."""
        sheet_job_data["parts"][0]["colour"] = "red"
        with pytest.raises(ConfigError):
            load_job_from_dict(sheet_job_data)

    def test_negative_density_rejected(self, sheet_job_data: dict[str, Any]) -> None:
        """Density overrides must be positive."""
        sheet_job_data["densities"] = {"MS": -1}
        with pytest.raises(ConfigError):
            load_job_from_dict(sheet_job_data)

    @pytest.mark.parametrize("version", ["1.0", "1.3"])
    def test_supported_versions(
        self, sheet_job_data: dict[str, Any], version: str
    ) -> None:
        """Known versions and newer minors of a known major are accepted."""
        sheet_job_data["schema_version"] = version
        assert load_job_from_dict(sheet_job_data).schema_version == version

    @pytest.mark.parametrize("version", ["2.0", "one"])
    def test_unsupported_versions(
        self, sheet_job_data: dict[str, Any], version: str
    ) -> None:
        """Other majors and malformed versions are rejected."""
        sheet_job_data["schema_version"] = version
        with pytest.raises(ConfigError):
            load_job_from_dict(sheet_job_data)


class TestLinearSchema:
    """Tests for linear job schema rules."""

    def test_defaults(self, linear_job_data: dict[str, Any]) -> None:
        """Goal defaults to speed with 50 search iterations."""
        job = load_job_from_dict(linear_job_data)
        assert isinstance(job, LinearNestingJob)
        assert job.settings.goal is OptimizationGoal.PRIORITIZE_SPEED
        assert job.settings.search_iterations == 50
        assert job.settings.seed is None

    def test_settings_required(self, linear_job_data: dict[str, Any]) -> None:
        """Linear jobs need settings with a stock length."""
        del linear_job_data["settings"]
        with pytest.raises(ConfigError):
            load_job_from_dict(linear_job_data)

    def test_allowances_must_leave_usable_length(
        self, linear_job_data: dict[str, Any]
    ) -> None:
        """End allowances consuming the whole bar are rejected."""
        linear_job_data["settings"].update(left_allowance=3000, right_allowance=3000)
        with pytest.raises(ConfigError) as exc_info:
            load_job_from_dict(linear_job_data)
        assert "allowances" in exc_info.value.message

    def test_goal_from_string(self, linear_job_data: dict[str, Any]) -> None:
        """Goal parses from its JSON value."""
        linear_job_data["settings"]["goal"] = "waste"
        job = load_job_from_dict(linear_job_data)
        assert job.settings.goal is OptimizationGoal.MINIMIZE_WASTE


# =============================================================================
# Adapters
# =============================================================================


class TestSheetAdapter:
    """Tests for sheet job conversion to domain objects."""

    def test_parts_default_ids(self, sheet_job_data: dict[str, Any]) -> None:
        """Rows without ids take their 1-based row number."""
        sheet_job_data["parts"].append(
            {"id": 40, "length": 100, "width": 100, "thickness": 3, "grade": "MS"}
        )
        sheet_job_data["parts"].append(
            {"length": 50, "width": 50, "thickness": 3, "grade": "MS", "original_id": 1}
        )
        parts = job_to_parts(load_job_from_dict(sheet_job_data))
        assert [(p.id, p.original_id) for p in parts] == [(1, 1), (40, 40), (3, 1)]

    def test_default_ids_skip_explicit_ids(
        self, sheet_job_data: dict[str, Any]
    ) -> None:
        """A row number already taken by an explicit id moves to the next free one."""
        sheet_job_data["parts"] = [
            {"length": 10, "width": 10, "thickness": 3, "grade": "MS"},
            {"id": 1, "length": 50, "width": 50, "thickness": 3, "grade": "MS"},
            {"id": 2, "length": 20, "width": 20, "thickness": 3, "grade": "MS"},
            {"length": 30, "width": 30, "thickness": 3, "grade": "MS"},
        ]
        parts = job_to_parts(load_job_from_dict(sheet_job_data))
        assert [p.id for p in parts] == [3, 1, 2, 4]

    def test_default_and_explicit_ids_stay_separate(
        self, sheet_job_data: dict[str, Any]
    ) -> None:
        """Unplaced quantities are not merged across a defaulted and an explicit id."""
        sheet_job_data["sheets"][0]["quantity"] = 0
        sheet_job_data["parts"] = [
            {"length": 10, "width": 10, "thickness": 3, "grade": "MS", "quantity": 2},
            {
                "id": 1,
                "length": 50,
                "width": 50,
                "thickness": 3,
                "grade": "MS",
                "quantity": 3,
            },
        ]
        job = load_job_from_dict(sheet_job_data)
        assert isinstance(job, SheetNestingJob)

        assert validate_job(job).errors == []
        result = NestSheetsCommand().execute(job)
        unplaced = {p.id: (p.length, p.quantity) for p in result.unplaced_parts}
        assert unplaced == {1: (50, 3), 2: (10, 2)}

    def test_resolve_part_ids_keeps_explicit_duplicates(
        self, sheet_job_data: dict[str, Any]
    ) -> None:
        """Explicit duplicates are returned as-is for the validator to report."""
        part = dict(sheet_job_data["parts"][0], id=5)
        sheet_job_data["parts"] = [part, dict(part), sheet_job_data["parts"][0]]
        job = load_job_from_dict(sheet_job_data)
        assert resolve_part_ids(job.parts) == [5, 5, 3]

    def test_zero_quantity_dropped(self, sheet_job_data: dict[str, Any]) -> None:
        """Zero-quantity rows do not reach the packer."""
        sheet_job_data["parts"][0]["quantity"] = 0
        assert job_to_parts(load_job_from_dict(sheet_job_data)) == []

    def test_sheets_and_config(self, sheet_job_data: dict[str, Any]) -> None:
        """Sheets and settings map onto domain objects."""
        sheet_job_data["settings"] = {
            "part_clearance": 5,
            "edge_clearance": 10,
            "rotation": "ninety",
        }
        job = load_job_from_dict(sheet_job_data)
        sheets = job_to_sheets(job)
        config = job_to_sheet_config(job)

        assert sheets[0].quantity == 1
        assert sheets[0].key == "1000x500x3-MS"
        assert config.part_clearance == 5
        assert config.edge_clearance == 10
        assert config.rotation is RotationOption.NINETY

    def test_density_table(self, sheet_job_data: dict[str, Any]) -> None:
        """Job densities override the standard table."""
        sheet_job_data["densities"] = {"MS": 7800}
        table = job_to_density_table(load_job_from_dict(sheet_job_data))
        assert table.density_for("MS") == 7800
        assert table.density_for("AL") == 2700


class TestLinearAdapter:
    """Tests for linear job conversion to domain objects."""

    def test_kerf_applied(self, linear_job_data: dict[str, Any]) -> None:
        """Kerf is added to effective length only."""
        linear_job_data["settings"]["kerf"] = 3
        parts = job_to_linear_parts(load_job_from_dict(linear_job_data))
        assert [(p.id, p.length, p.effective_length) for p in parts] == [
            (1, 2000, 2003),
            (2, 1000, 1003),
        ]

    def test_default_ids_skip_explicit_ids(
        self, linear_job_data: dict[str, Any]
    ) -> None:
        """A defaulted row never reuses an id given explicitly on another row."""
        linear_job_data["parts"][1]["id"] = 1
        parts = job_to_linear_parts(load_job_from_dict(linear_job_data))
        assert [p.id for p in parts] == [2, 1]

    def test_config(self, linear_job_data: dict[str, Any]) -> None:
        """Settings map onto LinearNestingConfig."""
        linear_job_data["settings"].update(
            left_allowance=10, right_allowance=20, goal="waste", search_iterations=5
        )
        config = job_to_linear_config(load_job_from_dict(linear_job_data))
        assert config.usable_length == 5970
        assert config.goal is OptimizationGoal.MINIMIZE_WASTE
        assert config.search_iterations == 5


# =============================================================================
# Validator
# =============================================================================


class TestValidateJob:
    """Tests for whole-job advisories."""

    def test_clean_sheet_job(self, sheet_job_data: dict[str, Any]) -> None:
        """A feasible job has no errors or warnings."""
        result = validate_job(load_job_from_dict(sheet_job_data))
        assert result.is_valid
        assert not result.has_warnings
        assert result.exit_code == 0

    def test_duplicate_ids(self, sheet_job_data: dict[str, Any]) -> None:
        """Duplicate explicit ids are errors."""
        part = dict(sheet_job_data["parts"][0], id=7)
        sheet_job_data["parts"] = [part, dict(part)]
        result = validate_job(load_job_from_dict(sheet_job_data))
        assert result.exit_code == 1
        assert result.errors[0].path == "parts[1].id"

    def test_missing_sheet_definition(self, sheet_job_data: dict[str, Any]) -> None:
        """Parts without a matching sheet produce a warning."""
        sheet_job_data["parts"][0]["grade"] = "SS"
        result = validate_job(load_job_from_dict(sheet_job_data))
        assert result.exit_code == 2
        assert result.warnings[0].path == "parts[0]"

    def test_part_too_large(self, sheet_job_data: dict[str, Any]) -> None:
        """Parts too large for every matching sheet produce a warning."""
        sheet_job_data["parts"][0]["length"] = 1200
        result = validate_job(load_job_from_dict(sheet_job_data))
        assert result.exit_code == 2
        assert "does not fit" in result.warnings[0].message

    def test_rotation_rescues_fit(self, sheet_job_data: dict[str, Any]) -> None:
        """A part that fits only rotated warns only when rotation is off."""
        sheet_job_data["parts"][0].update(length=450, width=900)
        assert validate_job(load_job_from_dict(sheet_job_data)).exit_code == 2
        sheet_job_data["settings"]["rotation"] = "free"
        assert validate_job(load_job_from_dict(sheet_job_data)).exit_code == 0

    def test_linear_too_long(self, linear_job_data: dict[str, Any]) -> None:
        """Cuts longer than the usable bar (with kerf) produce a warning."""
        linear_job_data["settings"]["kerf"] = 5
        linear_job_data["parts"].append({"raw_material": "RHS 50x50", "length": 5996})
        result = validate_job(load_job_from_dict(linear_job_data))
        assert result.exit_code == 2
        assert result.warnings[0].path == "parts[2].length"
