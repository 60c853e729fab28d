"""Job file loader with comprehensive error handling.

This module loads and parses JSON nesting job files. It handles file system
errors, JSON parsing errors, and Pydantic validation errors with clear,
actionable error messages.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from stocknest.application.config.schema import (
    JOB_MODELS,
    LinearNestingJob,
    SheetNestingJob,
)


class ConfigError(Exception):
    """Exception raised for job file errors.

    Attributes:
        message: The primary error message
        error_type: Category of error (file_not_found, json_parse, validation)
        path: Path to the job file (if applicable)
        details: Additional error details (line/column for JSON, validation errors, etc.)
    """

    def __init__(
        self,
        message: str,
        error_type: str = "unknown",
        path: Path | None = None,
        details: list[dict[str, Any]] | None = None,
    ) -> None:
        self.message = message
        self.error_type = error_type
        self.path = path
        self.details = details or []
        super().__init__(message)

    def __str__(self) -> str:
        return self.message


def _format_json_path(loc: tuple[str | int, ...]) -> str:
    """Format a Pydantic location tuple as a JSON path string.

    Examples:
        >>> _format_json_path(("settings", "kerf"))
        'settings.kerf'
        >>> _format_json_path(("parts", 2, "length"))
        'parts[2].length'
    """
    parts: list[str] = []
    for segment in loc:
        if isinstance(segment, int):
            if parts:
                parts[-1] = f"{parts[-1]}[{segment}]"
            else:
                parts.append(f"[{segment}]")
        else:
            parts.append(str(segment))
    return ".".join(parts)


def _extract_validation_errors(
    error: PydanticValidationError,
) -> list[dict[str, Any]]:
    """Flatten a Pydantic ValidationError into path/message/value dicts."""
    details: list[dict[str, Any]] = []
    for err in error.errors():
        details.append(
            {
                "path": _format_json_path(err["loc"]),
                "message": err["msg"],
                "value": err.get("input"),
                "error_type": err["type"],
            }
        )
    return details


def _format_validation_error_message(details: list[dict[str, Any]]) -> str:
    lines = ["Job validation failed:"]
    for detail in details:
        path = detail["path"]
        message = detail["message"]
        value = detail.get("value")
        if value is not None:
            lines.append(f"  - {path}: {message} (got: {value!r})")
        else:
            lines.append(f"  - {path}: {message}")
    return "\n".join(lines)


def _validate_job(
    data: Any,
    path: Path | None = None,
) -> SheetNestingJob | LinearNestingJob:
    """Select the job model by its "kind" and validate the data."""
    if not isinstance(data, dict):
        details = [
            {
                "path": "",
                "message": "Job must be a JSON object",
                "value": None,
                "error_type": "model_type",
            }
        ]
        raise ConfigError(
            message=_format_validation_error_message(details),
            error_type="validation",
            path=path,
            details=details,
        )

    kind = data.get("kind")
    model = JOB_MODELS.get(kind) if isinstance(kind, str) else None
    if model is None:
        details = [
            {
                "path": "kind",
                "message": f"Job kind must be one of {sorted(JOB_MODELS)}",
                "value": kind,
                "error_type": "union_tag_invalid",
            }
        ]
        raise ConfigError(
            message=_format_validation_error_message(details),
            error_type="validation",
            path=path,
            details=details,
        )

    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        details = _extract_validation_errors(e)
        raise ConfigError(
            message=_format_validation_error_message(details),
            error_type="validation",
            path=path,
            details=details,
        )


def load_job(path: Path) -> SheetNestingJob | LinearNestingJob:
    """Load and validate a nesting job from a JSON file.

    Args:
        path: Path to the JSON job file

    Returns:
        A validated SheetNestingJob or LinearNestingJob

    Raises:
        ConfigError: If the file cannot be loaded or validated.
            The error_type attribute indicates the specific error category:
            - "file_not_found": File does not exist
            - "json_parse": Invalid JSON syntax
            - "validation": Schema validation failed
    """
    if not path.exists():
        raise ConfigError(
            message=f"Job file not found: {path}",
            error_type="file_not_found",
            path=path,
        )

    try:
        content = path.read_text(encoding="utf-8")
    except PermissionError:
        raise ConfigError(
            message=f"Permission denied reading job file: {path}",
            error_type="permission_denied",
            path=path,
        )
    except OSError as e:
        raise ConfigError(
            message=f"Error reading job file: {path}: {e}",
            error_type="file_read_error",
            path=path,
        )

    try:
        data = json.loads(content)
    except json.JSONDecodeError as e:
        raise ConfigError(
            message=f"Invalid JSON in job file: {path} (line {e.lineno}, column {e.colno}): {e.msg}",
            error_type="json_parse",
            path=path,
            details=[
                {
                    "line": e.lineno,
                    "column": e.colno,
                    "message": e.msg,
                }
            ],
        )

    return _validate_job(data, path)


def load_job_from_dict(data: dict[str, Any]) -> SheetNestingJob | LinearNestingJob:
    """Load and validate a nesting job from a dictionary.

    Raises:
        ConfigError: If the data fails validation.
    """
    return _validate_job(data)
