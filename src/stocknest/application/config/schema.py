"""Pydantic models for nesting job files.

A job file is a JSON document with a ``kind`` discriminator selecting either
a sheet nesting job or a bar (linear) nesting job. All lengths are in the
shop's base unit (millimetres).
"""

from __future__ import annotations

from typing import Literal

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from stocknest.domain.materials import DEFAULT_DENSITY
from stocknest.domain.value_objects import OptimizationGoal, RotationOption


# Version 1.0: Initial job schema (sheet and linear jobs)
SUPPORTED_VERSIONS: frozenset[str] = frozenset({"1.0"})


def _validate_schema_version(v: str) -> str:
    """Accept supported versions and newer minors of a supported major."""
    if v in SUPPORTED_VERSIONS:
        return v

    major_version = int(v.split(".")[0])
    supported_majors = {int(sv.split(".")[0]) for sv in SUPPORTED_VERSIONS}
    if major_version in supported_majors:
        return v

    raise ValueError(
        f"Unsupported schema version '{v}'. "
        f"Supported versions: {sorted(SUPPORTED_VERSIONS)}"
    )


# =============================================================================
# Sheet Nesting
# =============================================================================


class SheetConfig(BaseModel):
    """A purchasable sheet definition.

    Attributes:
        id: Optional identifier for reports.
        length: Sheet length.
        width: Sheet width.
        thickness: Sheet thickness.
        grade: Material grade key.
        quantity: Sheets available; omit for unlimited supply.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    id: str = ""
    length: float = Field(..., gt=0)
    width: float = Field(..., gt=0)
    thickness: float = Field(..., gt=0)
    grade: str = Field(..., min_length=1)
    quantity: int | None = Field(
        default=None, ge=0, description="Sheets available (null for unlimited)"
    )


class SheetPartConfig(BaseModel):
    """A rectangular part row.

    Attributes:
        id: Row identity; defaults to the 1-based row number.
        original_id: Identity shared by duplicate rows; defaults to id.
        name: Display name.
        length: Part length.
        width: Part width.
        thickness: Part thickness.
        grade: Material grade key.
        quantity: Units required; zero-quantity rows are ignored.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    id: int | None = Field(default=None, ge=0)
    original_id: int | None = Field(default=None, ge=0)
    name: str = ""
    length: float = Field(..., gt=0)
    width: float = Field(..., gt=0)
    thickness: float = Field(..., gt=0)
    grade: str = Field(..., min_length=1)
    quantity: int = Field(default=1, ge=0)


class SheetSettingsConfig(BaseModel):
    """Clearance, rotation and density settings for sheet nesting."""

    model_config = ConfigDict(extra="forbid")

    part_clearance: float = Field(default=0.0, ge=0, description="Gap between parts")
    edge_clearance: float = Field(
        default=0.0, ge=0, description="Gap between parts and sheet edges"
    )
    rotation: RotationOption = RotationOption.FREE
    default_density: float = Field(
        default=DEFAULT_DENSITY, gt=0, description="Fallback density in kg/m^3"
    )


class SheetNestingJob(BaseModel):
    """Root model for a sheet nesting job.

    Example:
        >>> job = SheetNestingJob(
        ...     schema_version="1.0",
        ...     kind="sheet",
        ...     sheets=[SheetConfig(length=2500, width=1250, thickness=3, grade="MS")],
        ... )
    """

    model_config = ConfigDict(extra="forbid")

    schema_version: str = Field(..., pattern=r"^\d+\.\d+$")
    kind: Literal["sheet"]
    settings: SheetSettingsConfig = Field(default_factory=SheetSettingsConfig)
    densities: dict[str, float] = Field(
        default_factory=dict, description="Density overrides by grade (kg/m^3)"
    )
    sheets: list[SheetConfig] = Field(..., min_length=1)
    parts: list[SheetPartConfig] = Field(default_factory=list)

    @field_validator("schema_version")
    @classmethod
    def validate_supported_version(cls, v: str) -> str:
        return _validate_schema_version(v)

    @field_validator("densities")
    @classmethod
    def validate_densities_positive(cls, v: dict[str, float]) -> dict[str, float]:
        for grade, density in v.items():
            if density <= 0:
                raise ValueError(f"Density for '{grade}' must be positive")
        return v


# =============================================================================
# Linear Nesting
# =============================================================================


class LinearPartConfig(BaseModel):
    """A bar part row.

    Attributes:
        id: Part identity; defaults to the 1-based row number.
        raw_material: Raw material key.
        length: Nominal cut length.
        quantity: Units required; zero-quantity rows are ignored.
    """

    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    id: int | None = Field(default=None, ge=0)
    raw_material: str = Field(..., min_length=1)
    length: float = Field(..., gt=0)
    quantity: int = Field(default=1, ge=0)


class LinearSettingsConfig(BaseModel):
    """Stock, allowance and search settings for bar nesting.

    Attributes:
        stock_length: Nominal length of one stock bar.
        kerf: Saw kerf added to every part's length.
        left_allowance: Unusable length at the left end of a bar.
        right_allowance: Unusable length at the right end of a bar.
        goal: "speed" (first-fit decreasing) or "waste" (adds search).
        search_iterations: Shuffled trials per bar in waste mode.
        seed: Random seed for reproducible waste-mode results.
    """

    model_config = ConfigDict(extra="forbid")

    stock_length: float = Field(..., gt=0)
    kerf: float = Field(default=0.0, ge=0)
    left_allowance: float = Field(default=0.0, ge=0)
    right_allowance: float = Field(default=0.0, ge=0)
    goal: OptimizationGoal = OptimizationGoal.PRIORITIZE_SPEED
    search_iterations: int = Field(default=50, ge=0, le=10_000)
    seed: int | None = None

    @model_validator(mode="after")
    def validate_allowances(self) -> "LinearSettingsConfig":
        """Validate that the end allowances leave usable bar length."""
        if self.left_allowance + self.right_allowance >= self.stock_length:
            raise ValueError(
                f"End allowances ({self.left_allowance} + {self.right_allowance}) "
                f"must be less than stock_length ({self.stock_length})"
            )
        return self


class LinearNestingJob(BaseModel):
    """Root model for a bar nesting job."""

    model_config = ConfigDict(extra="forbid")

    schema_version: str = Field(..., pattern=r"^\d+\.\d+$")
    kind: Literal["linear"]
    settings: LinearSettingsConfig
    parts: list[LinearPartConfig] = Field(default_factory=list)

    @field_validator("schema_version")
    @classmethod
    def validate_supported_version(cls, v: str) -> str:
        return _validate_schema_version(v)


# Job model per "kind" value
JOB_MODELS: dict[str, type[SheetNestingJob] | type[LinearNestingJob]] = {
    "sheet": SheetNestingJob,
    "linear": LinearNestingJob,
}
