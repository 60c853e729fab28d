"""Sheet nesting data models and the bottom-left placement engine.

Parts are packed onto sheet definitions grouped by grade and thickness using
first-fit decreasing: units are sorted by area (largest first) and each is
placed at the lowest, then leftmost, feasible corner candidate on the current
sheet.

Sheet coordinates: x runs along the sheet width, y along the sheet length.
An unrotated part spans its width horizontally and its length vertically.

All result dataclasses are frozen (immutable).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Callable, Sequence

from stocknest.domain.materials import DEFAULT_DENSITY
from stocknest.domain.value_objects import Part, RotationOption, SheetCapacity

logger = logging.getLogger(__name__)

DensityLookup = Callable[[str], "float | None"]


@dataclass(frozen=True)
class SheetNestingConfig:
    """Configuration for sheet nesting.

    Attributes:
        part_clearance: Minimum gap between any two placed parts.
        edge_clearance: Minimum gap between a part and the sheet boundary.
        rotation: Whether parts may be turned 90 degrees.
        default_density: Density (kg/m^3) used when no lookup result exists.
    """

    part_clearance: float = 0.0
    edge_clearance: float = 0.0
    rotation: RotationOption = RotationOption.FREE
    default_density: float = DEFAULT_DENSITY

    def __post_init__(self) -> None:
        if self.part_clearance < 0:
            raise ValueError("Part clearance must be non-negative")
        if self.edge_clearance < 0:
            raise ValueError("Edge clearance must be non-negative")
        if self.default_density <= 0:
            raise ValueError("Default density must be positive")


@dataclass(frozen=True)
class Placement:
    """A feasible position returned by find_best_position()."""

    x: float
    y: float
    rotated: bool = False


@dataclass(frozen=True)
class PlacedPart:
    """A part unit placed at a specific position on a sheet.

    Attributes:
        part: The unit being placed (quantity 1).
        x: Horizontal position of the part corner.
        y: Vertical position of the part corner.
        rotated: True if the part is turned 90 degrees.
    """

    part: Part
    x: float
    y: float
    rotated: bool = False

    def __post_init__(self) -> None:
        if self.x < 0 or self.y < 0:
            raise ValueError("Position coordinates must be non-negative")

    @property
    def placed_width(self) -> float:
        """Horizontal extent as placed (accounts for rotation)."""
        return self.part.length if self.rotated else self.part.width

    @property
    def placed_height(self) -> float:
        """Vertical extent as placed (accounts for rotation)."""
        return self.part.width if self.rotated else self.part.length

    @property
    def right_edge(self) -> float:
        return self.x + self.placed_width

    @property
    def top_edge(self) -> float:
        return self.y + self.placed_height

    @property
    def area(self) -> float:
        return self.part.area


def _weight(area: float, thickness: float, density: float) -> float:
    """Weight in kg of a plate: mm^2 area, mm thickness, kg/m^3 density."""
    return (area / 1_000_000) * thickness * density / 1000


@dataclass(frozen=True)
class SheetLayout:
    """Layout of parts on one physical sheet.

    Attributes:
        sheet_index: One-based index of this sheet in the nesting result.
        sheet: The sheet definition this sheet was taken from.
        placements: Placed part units, in placement order.
        density: Material density (kg/m^3) used for weights.
    """

    sheet_index: int
    sheet: SheetCapacity
    placements: tuple[PlacedPart, ...]
    density: float = DEFAULT_DENSITY

    def __post_init__(self) -> None:
        if self.sheet_index < 1:
            raise ValueError("Sheet index must be at least 1")

    @property
    def sheet_area(self) -> float:
        return self.sheet.area

    @property
    def used_area(self) -> float:
        """Total area covered by placed parts."""
        return sum(p.area for p in self.placements)

    @property
    def waste_area(self) -> float:
        return self.sheet_area - self.used_area

    @property
    def waste_percentage(self) -> float:
        """Percentage of the sheet area that is waste."""
        if self.sheet_area == 0:
            return 0.0
        return self.waste_area / self.sheet_area * 100

    @property
    def used_weight(self) -> float:
        return _weight(self.used_area, self.sheet.thickness, self.density)

    @property
    def waste_weight(self) -> float:
        return _weight(self.waste_area, self.sheet.thickness, self.density)

    @property
    def piece_count(self) -> int:
        return len(self.placements)


@dataclass(frozen=True)
class SheetNestingResult:
    """Complete result of sheet nesting.

    Attributes:
        layouts: Sheet layouts in the order they were built.
        unplaced_parts: Parts that could not be placed, one entry per
            original_id with the unplaced quantity.
        sheets_used: Count of sheets used per sheet definition key.
    """

    layouts: tuple[SheetLayout, ...] = ()
    unplaced_parts: tuple[Part, ...] = ()
    sheets_used: dict[str, int] = field(default_factory=dict)

    @property
    def total_sheets(self) -> int:
        return len(self.layouts)

    @property
    def total_parts_placed(self) -> int:
        return sum(layout.piece_count for layout in self.layouts)

    @property
    def total_sheet_area(self) -> float:
        return sum(layout.sheet_area for layout in self.layouts)

    @property
    def total_used_area(self) -> float:
        return sum(layout.used_area for layout in self.layouts)

    @property
    def total_waste_area(self) -> float:
        return self.total_sheet_area - self.total_used_area

    @property
    def total_used_weight(self) -> float:
        return sum(layout.used_weight for layout in self.layouts)

    @property
    def total_waste_weight(self) -> float:
        return sum(layout.waste_weight for layout in self.layouts)

    @property
    def total_waste_percentage(self) -> float:
        """Waste across all sheets as a percentage of total sheet area."""
        total = self.total_sheet_area
        if total == 0:
            return 0.0
        return self.total_waste_area / total * 100

    @property
    def has_unplaced(self) -> bool:
        return any(p.quantity > 0 for p in self.unplaced_parts)


def _overlaps(
    x: float,
    y: float,
    width: float,
    height: float,
    other: PlacedPart,
    gap: float,
) -> bool:
    """Check clearance-inflated bounding boxes for intersection."""
    return (
        x < other.x + other.placed_width + gap
        and other.x < x + width + gap
        and y < other.y + other.placed_height + gap
        and other.y < y + height + gap
    )


def _can_place(
    width: float,
    height: float,
    x: float,
    y: float,
    sheet: SheetCapacity,
    placed: Sequence[PlacedPart],
    part_clearance: float,
    edge_clearance: float,
) -> bool:
    if x < edge_clearance or y < edge_clearance:
        return False
    if x + width > sheet.width - edge_clearance:
        return False
    if y + height > sheet.length - edge_clearance:
        return False
    return not any(
        _overlaps(x, y, width, height, other, part_clearance) for other in placed
    )


def find_best_position(
    part: Part,
    sheet: SheetCapacity,
    placed: Sequence[PlacedPart],
    part_clearance: float = 0.0,
    edge_clearance: float = 0.0,
    rotation: RotationOption = RotationOption.FREE,
) -> Placement | None:
    """Find the bottom-left feasible position for a part on a sheet.

    Candidate anchors are the clearance-offset sheet origin plus, for every
    placed part, the corner to its right and the corner above it. The
    feasible candidate with the smallest y, then smallest x, wins. When
    rotation is allowed the unrotated orientation is evaluated first, so a
    rotated candidate must be strictly better to replace it.

    Args:
        part: The part to place (its quantity is ignored).
        sheet: The sheet definition bounding the placement.
        placed: Parts already on the sheet.
        part_clearance: Minimum gap between parts.
        edge_clearance: Minimum gap to the sheet boundary.
        rotation: Rotation freedom.

    Returns:
        The best Placement, or None if the part fits nowhere.
    """
    candidates = [(edge_clearance, edge_clearance)]
    for other in placed:
        candidates.append((other.right_edge + part_clearance, other.y))
        candidates.append((other.x, other.top_edge + part_clearance))

    orientations = [(part.width, part.length, False)]
    if rotation.allows_rotation:
        orientations.append((part.length, part.width, True))

    best: Placement | None = None
    for width, height, rotated in orientations:
        for x, y in candidates:
            if not _can_place(
                width, height, x, y, sheet, placed, part_clearance, edge_clearance
            ):
                continue
            if best is None or y < best.y or (y == best.y and x < best.x):
                best = Placement(x=x, y=y, rotated=rotated)

    return best


class SheetPacker:
    """First-fit decreasing sheet nesting with bottom-left placement.

    Parts are grouped by grade and thickness. Each group consumes the
    matching sheet definitions in caller order, opening sheets while parts
    remain and the definition's supply lasts.

    Attributes:
        config: Clearance, rotation and density settings.
    """

    def __init__(
        self,
        config: SheetNestingConfig | None = None,
        density_lookup: DensityLookup | None = None,
    ) -> None:
        """Initialize the packer.

        Args:
            config: Nesting configuration. Defaults to SheetNestingConfig().
            density_lookup: Optional callable mapping a grade to a density
                in kg/m^3, or None when unknown.
        """
        self.config = config or SheetNestingConfig()
        self.density_lookup = density_lookup

    def pack(
        self,
        parts: Sequence[Part],
        sheets: Sequence[SheetCapacity],
    ) -> SheetNestingResult:
        """Nest parts onto the supplied sheet definitions.

        Args:
            parts: Part rows (quantity may exceed 1).
            sheets: Candidate sheet definitions, consumed in order.

        Returns:
            SheetNestingResult with layouts, unplaced remainder and usage.
        """
        layouts: list[SheetLayout] = []
        unplaced: list[Part] = []
        sheets_used: dict[str, int] = {}
        counters: dict[int, int] = {}

        groups = self._group_parts(parts)
        logger.debug("Nesting %d part rows in %d groups", len(parts), len(groups))

        for (grade, thickness), group in groups.items():
            pool = self._sort_by_area(self._expand_parts(group, counters))
            definitions = [
                s for s in sheets if s.grade == grade and s.thickness == thickness
            ]

            if not definitions:
                logger.warning(
                    "No sheet definition for grade '%s' thickness %g; "
                    "%d parts unplaced",
                    grade,
                    thickness,
                    len(pool),
                )
                unplaced.extend(pool)
                continue

            for sheet in definitions:
                if not pool:
                    break

                used = 0
                while pool and (sheet.quantity is None or used < sheet.quantity):
                    placements, remaining = self._pack_single_sheet(pool, sheet)

                    if not placements:
                        # Nothing left fits this sheet type; try the next one
                        logger.debug(
                            "No remaining part fits sheet %s, moving on", sheet.key
                        )
                        break

                    layout = SheetLayout(
                        sheet_index=len(layouts) + 1,
                        sheet=sheet,
                        placements=tuple(placements),
                        density=self._density_for(sheet.grade),
                    )
                    layouts.append(layout)
                    used += 1
                    sheets_used[sheet.key] = sheets_used.get(sheet.key, 0) + 1
                    pool = self._sort_by_area(remaining)

                    logger.debug(
                        "Sheet %d (%s): %d parts, %.1f%% waste",
                        layout.sheet_index,
                        sheet.key,
                        layout.piece_count,
                        layout.waste_percentage,
                    )

            unplaced.extend(pool)

        result = SheetNestingResult(
            layouts=tuple(layouts),
            unplaced_parts=tuple(self._consolidate_unplaced(unplaced)),
            sheets_used=sheets_used,
        )
        logger.info(
            "Sheet nesting: %d sheets, %d parts placed, %d unplaced, %.1f%% waste",
            result.total_sheets,
            result.total_parts_placed,
            len(unplaced),
            result.total_waste_percentage,
        )
        return result

    def find_position(
        self,
        part: Part,
        sheet: SheetCapacity,
        placed: Sequence[PlacedPart],
    ) -> Placement | None:
        """find_best_position() with this packer's clearances and rotation."""
        return find_best_position(
            part,
            sheet,
            placed,
            part_clearance=self.config.part_clearance,
            edge_clearance=self.config.edge_clearance,
            rotation=self.config.rotation,
        )

    def fill_layout(
        self,
        layout: SheetLayout,
        fillers: Sequence[Part],
    ) -> tuple[SheetLayout, list[Part]]:
        """Place secondary filler parts into leftover space on a layout.

        Only fillers matching the sheet's grade and thickness are tried.
        Each pass places a single unit of the largest filler that still
        fits; passes repeat until nothing more fits.

        Args:
            layout: An already-built layout.
            fillers: Filler part rows with the quantities available.

        Returns:
            Tuple of (filled layout, filler rows with remaining quantity > 0).
        """
        remaining = [f.quantity for f in fillers]
        order = sorted(
            (i for i, f in enumerate(fillers) if layout.sheet.accepts(f)),
            key=lambda i: fillers[i].area,
            reverse=True,
        )
        placements = list(layout.placements)
        next_index: dict[int, int] = {}
        for placement in placements:
            unit = placement.part
            if unit.instance_index is not None:
                next_index[unit.original_id] = max(
                    next_index.get(unit.original_id, 0), unit.instance_index + 1
                )

        placed_something = True
        while placed_something:
            placed_something = False
            for i in order:
                if remaining[i] <= 0:
                    continue
                filler = fillers[i]
                position = self.find_position(filler, layout.sheet, placements)
                if position is None:
                    continue

                index = next_index.get(filler.original_id, 0)
                next_index[filler.original_id] = index + 1
                unit = replace(filler, quantity=1, instance_index=index)
                placements.append(
                    PlacedPart(
                        part=unit, x=position.x, y=position.y, rotated=position.rotated
                    )
                )
                remaining[i] -= 1
                placed_something = True
                break

        added = len(placements) - layout.piece_count
        if added:
            logger.debug(
                "Filled sheet %d with %d filler parts", layout.sheet_index, added
            )

        filled = replace(layout, placements=tuple(placements))
        leftover = [
            replace(f, quantity=qty)
            for f, qty in zip(fillers, remaining)
            if qty > 0
        ]
        return filled, leftover

    def _pack_single_sheet(
        self,
        pool: list[Part],
        sheet: SheetCapacity,
    ) -> tuple[list[PlacedPart], list[Part]]:
        """Place as many pooled units as possible onto one new sheet.

        Returns:
            Tuple of (placed parts, units that did not fit).
        """
        placed: list[PlacedPart] = []
        remaining: list[Part] = []

        for unit in pool:
            position = self.find_position(unit, sheet, placed)
            if position is None:
                remaining.append(unit)
                continue
            placed.append(
                PlacedPart(part=unit, x=position.x, y=position.y, rotated=position.rotated)
            )

        return placed, remaining

    def _group_parts(
        self,
        parts: Sequence[Part],
    ) -> dict[tuple[str, float], list[Part]]:
        """Group parts by (grade, thickness), preserving first-seen order."""
        groups: dict[tuple[str, float], list[Part]] = {}
        for part in parts:
            groups.setdefault(part.group_key, []).append(part)
        return groups

    def _expand_parts(
        self,
        parts: Sequence[Part],
        counters: dict[int, int],
    ) -> list[Part]:
        """Expand rows into unit instances keyed by (original_id, index).

        Args:
            parts: Part rows to expand.
            counters: Next unit index per original_id, shared across groups
                so that every unit key in a run is unique.

        Returns:
            List of units, each with quantity 1.
        """
        expanded: list[Part] = []
        for part in parts:
            for _ in range(part.quantity):
                index = counters.get(part.original_id, 0)
                counters[part.original_id] = index + 1
                expanded.append(replace(part, quantity=1, instance_index=index))
        return expanded

    def _sort_by_area(self, parts: list[Part]) -> list[Part]:
        """Sort units by area, largest first (stable)."""
        return sorted(parts, key=lambda p: p.area, reverse=True)

    def _consolidate_unplaced(self, units: list[Part]) -> list[Part]:
        """Fold unplaced units back into one row per original_id."""
        rows: dict[int, Part] = {}
        counts: dict[int, int] = {}
        for unit in units:
            if unit.original_id not in rows:
                rows[unit.original_id] = unit
                counts[unit.original_id] = 0
            counts[unit.original_id] += unit.quantity

        return [
            replace(row, quantity=counts[oid], instance_index=None)
            for oid, row in rows.items()
        ]

    def _density_for(self, grade: str) -> float:
        if self.density_lookup is not None:
            density = self.density_lookup(grade)
            if density is not None:
                return density
        return self.config.default_density
