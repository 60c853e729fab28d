"""Value objects for sheet and bar nesting.

All value objects are frozen dataclasses that validate their invariants on
construction. Lengths are in the caller's base unit (millimetres).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class RotationOption(str, Enum):
    """Rotation freedom for parts placed on a sheet."""

    NONE = "none"
    NINETY = "ninety"
    FREE = "free"

    @property
    def allows_rotation(self) -> bool:
        """True if the 90 degree orientation may be tried."""
        return self is not RotationOption.NONE


class OptimizationGoal(str, Enum):
    """Optimization goal for linear nesting."""

    PRIORITIZE_SPEED = "speed"
    MINIMIZE_WASTE = "waste"


@dataclass(frozen=True, order=True)
class InstanceKey:
    """Identity of one expanded unit of a part row.

    Attributes:
        part_id: Identity of the row the unit was expanded from.
        index: Zero-based unit index, unique per part_id within one run.
    """

    part_id: int
    index: int

    def __str__(self) -> str:
        return f"{self.part_id}-{self.index}"


@dataclass(frozen=True)
class Part:
    """A rectangular part to be nested on sheet stock.

    Attributes:
        id: Row identity.
        length: Part length (vertical extent when not rotated).
        width: Part width (horizontal extent when not rotated).
        thickness: Material thickness.
        grade: Material grade key (e.g. "MS").
        quantity: Number of units required.
        name: Display name.
        original_id: Stable identity shared by duplicate rows. Defaults to id.
        instance_index: Unit index, set only on expanded unit instances.
    """

    id: int
    length: float
    width: float
    thickness: float
    grade: str
    quantity: int = 1
    name: str = ""
    original_id: int | None = None
    instance_index: int | None = None

    def __post_init__(self) -> None:
        if self.length <= 0 or self.width <= 0:
            raise ValueError("Part dimensions must be positive")
        if self.thickness <= 0:
            raise ValueError("Part thickness must be positive")
        if self.quantity < 0:
            raise ValueError("Part quantity must be non-negative")
        if self.original_id is None:
            object.__setattr__(self, "original_id", self.id)

    @property
    def area(self) -> float:
        """Area of a single unit."""
        return self.length * self.width

    @property
    def instance_key(self) -> InstanceKey | None:
        """Unit identity, or None for an unexpanded row."""
        if self.instance_index is None:
            return None
        return InstanceKey(self.original_id, self.instance_index)

    @property
    def group_key(self) -> tuple[str, float]:
        """Compatibility key: parts sharing it may share a sheet."""
        return (self.grade, self.thickness)


@dataclass(frozen=True)
class SheetCapacity:
    """One purchasable sheet type with a bounded (or unbounded) supply.

    Attributes:
        length: Sheet length (vertical axis).
        width: Sheet width (horizontal axis).
        thickness: Sheet thickness.
        grade: Material grade key.
        quantity: Number of sheets available, None for unbounded.
        id: Optional caller identifier.
    """

    length: float
    width: float
    thickness: float
    grade: str
    quantity: int | None = None
    id: str = ""

    def __post_init__(self) -> None:
        if self.length <= 0 or self.width <= 0:
            raise ValueError("Sheet dimensions must be positive")
        if self.thickness <= 0:
            raise ValueError("Sheet thickness must be positive")
        if self.quantity is not None and self.quantity < 0:
            raise ValueError("Sheet quantity must be non-negative")

    @property
    def area(self) -> float:
        return self.length * self.width

    @property
    def key(self) -> str:
        """Usage-count key, e.g. "2500x1250x3-MS"."""
        return f"{self.length:g}x{self.width:g}x{self.thickness:g}-{self.grade}"

    def accepts(self, part: Part) -> bool:
        """True if the part's grade and thickness match this sheet."""
        return self.grade == part.grade and self.thickness == part.thickness


@dataclass(frozen=True)
class LinearPart:
    """A bar part to be cut from stock lengths.

    Attributes:
        id: Part identity.
        raw_material: Raw material key (e.g. "RHS 50x50").
        length: Nominal cut length.
        quantity: Number of units required.
        effective_length: Length consumed on the bar, nominal plus kerf.
            Defaults to the nominal length.
    """

    id: int
    raw_material: str
    length: float
    quantity: int = 1
    effective_length: float | None = None

    def __post_init__(self) -> None:
        if self.length <= 0:
            raise ValueError("Part length must be positive")
        if self.quantity < 0:
            raise ValueError("Part quantity must be non-negative")
        if self.effective_length is None:
            object.__setattr__(self, "effective_length", self.length)
        elif self.effective_length < self.length:
            raise ValueError("Effective length cannot be less than nominal length")

    @classmethod
    def with_kerf(
        cls,
        id: int,
        raw_material: str,
        length: float,
        quantity: int = 1,
        kerf: float = 0.0,
    ) -> LinearPart:
        """Build a part whose effective length includes the saw kerf."""
        if kerf < 0:
            raise ValueError("Kerf must be non-negative")
        return cls(
            id=id,
            raw_material=raw_material,
            length=length,
            quantity=quantity,
            effective_length=length + kerf,
        )


@dataclass(frozen=True)
class CutInstance:
    """A single unit of a LinearPart during bar packing."""

    id: int
    length: float
    effective_length: float
    instance_id: InstanceKey
    raw_material: str
