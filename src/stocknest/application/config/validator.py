"""Validation structures and feasibility advisories for nesting jobs.

Schema validation happens when a job is loaded. The checks here look at the
job as a whole: duplicate identities are errors, while parts that can never
be placed are warnings (the packers report them as unplaced).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from stocknest.application.config.adapter import resolve_part_ids
from stocknest.application.config.schema import LinearNestingJob, SheetNestingJob


@dataclass
class ValidationError:
    """A blocking validation error.

    Attributes:
        path: JSON path to the invalid field (e.g., "parts[2].id")
        message: Human-readable description of the error
        value: The invalid value that caused the error
    """

    path: str
    message: str
    value: Any = None


@dataclass
class ValidationWarning:
    """A non-blocking validation warning.

    Attributes:
        path: JSON path to the concerning field
        message: Human-readable description of the concern
        suggestion: Optional suggested remediation
    """

    path: str
    message: str
    suggestion: str | None = None


@dataclass
class ValidationResult:
    """Container for validation errors and warnings."""

    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationWarning] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    @property
    def has_warnings(self) -> bool:
        return len(self.warnings) > 0

    @property
    def exit_code(self) -> int:
        """CLI exit code: 0 clean, 1 errors, 2 warnings only."""
        if self.errors:
            return 1
        if self.warnings:
            return 2
        return 0

    def add_error(
        self, path: str, message: str, value: Any = None
    ) -> "ValidationResult":
        self.errors.append(ValidationError(path=path, message=message, value=value))
        return self

    def add_warning(
        self, path: str, message: str, suggestion: str | None = None
    ) -> "ValidationResult":
        self.warnings.append(
            ValidationWarning(path=path, message=message, suggestion=suggestion)
        )
        return self


def _check_duplicate_ids(
    ids: list[int],
    result: ValidationResult,
) -> None:
    """Flag ids shared by more than one row, after defaults are filled in."""
    seen: set[int] = set()
    for index, part_id in enumerate(ids):
        if part_id in seen:
            result.add_error(f"parts[{index}].id", "Duplicate part id", part_id)
        seen.add(part_id)


def _fits_sheet(
    length: float,
    width: float,
    sheet_length: float,
    sheet_width: float,
    edge_clearance: float,
    allow_rotation: bool,
) -> bool:
    usable_length = sheet_length - 2 * edge_clearance
    usable_width = sheet_width - 2 * edge_clearance
    if length <= usable_length and width <= usable_width:
        return True
    return allow_rotation and width <= usable_length and length <= usable_width


def validate_sheet_job(job: SheetNestingJob) -> ValidationResult:
    """Check a sheet job for duplicate ids and parts that cannot be placed."""
    result = ValidationResult()
    _check_duplicate_ids(resolve_part_ids(job.parts), result)

    settings = job.settings
    allow_rotation = settings.rotation.allows_rotation

    for index, part in enumerate(job.parts):
        if part.quantity == 0:
            continue
        matching = [
            s
            for s in job.sheets
            if s.grade == part.grade and s.thickness == part.thickness
        ]
        path = f"parts[{index}]"
        if not matching:
            result.add_warning(
                path,
                f"No sheet definition for grade '{part.grade}' "
                f"thickness {part.thickness:g}; the part will be unplaced",
                suggestion="Add a sheet with the same grade and thickness",
            )
            continue
        if not any(
            _fits_sheet(
                part.length,
                part.width,
                s.length,
                s.width,
                settings.edge_clearance,
                allow_rotation,
            )
            for s in matching
        ):
            result.add_warning(
                path,
                f"Part {part.length:g} x {part.width:g} does not fit any "
                f"{part.grade} {part.thickness:g} sheet",
                suggestion=None if allow_rotation else "Allow rotation",
            )

    return result


def validate_linear_job(job: LinearNestingJob) -> ValidationResult:
    """Check a linear job for duplicate ids and parts longer than the stock."""
    result = ValidationResult()
    _check_duplicate_ids(resolve_part_ids(job.parts), result)

    settings = job.settings
    usable = settings.stock_length - settings.left_allowance - settings.right_allowance
    for index, part in enumerate(job.parts):
        if part.quantity == 0:
            continue
        effective = part.length + settings.kerf
        if effective > usable:
            result.add_warning(
                f"parts[{index}].length",
                f"Cut length {effective:g} (including kerf) exceeds usable "
                f"stock length {usable:g}; the part will be unplaced",
            )

    return result


def validate_job(job: SheetNestingJob | LinearNestingJob) -> ValidationResult:
    if isinstance(job, SheetNestingJob):
        return validate_sheet_job(job)
    return validate_linear_job(job)
