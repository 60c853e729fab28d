"""Bar nesting (1D cutting stock) data models and packing engine.

Each bar is filled greedily: first-fit decreasing gives a baseline, and in
waste-minimization mode a fixed number of shuffled greedy fills compete with
it. The lowest-waste fill is committed and the loop repeats on what is left.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, replace
from typing import Sequence

from stocknest.domain.value_objects import (
    CutInstance,
    InstanceKey,
    LinearPart,
    OptimizationGoal,
)

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_ITERATIONS = 50


@dataclass(frozen=True)
class LinearNestingConfig:
    """Configuration for bar nesting.

    Attributes:
        stock_length: Nominal length of one stock bar.
        left_allowance: Unusable length at the left end of every bar.
        right_allowance: Unusable length at the right end of every bar.
        goal: Speed (FFD only) or waste minimization (FFD plus search).
        search_iterations: Shuffled trials per bar in waste mode.
    """

    stock_length: float
    left_allowance: float = 0.0
    right_allowance: float = 0.0
    goal: OptimizationGoal = OptimizationGoal.PRIORITIZE_SPEED
    search_iterations: int = DEFAULT_SEARCH_ITERATIONS

    def __post_init__(self) -> None:
        if self.stock_length <= 0:
            raise ValueError("Stock length must be positive")
        if self.left_allowance < 0 or self.right_allowance < 0:
            raise ValueError("End allowances must be non-negative")
        if self.search_iterations < 0:
            raise ValueError("Search iterations must be non-negative")

    @property
    def usable_length(self) -> float:
        """Bar length available for cuts after end allowances."""
        return self.stock_length - self.left_allowance - self.right_allowance


@dataclass(frozen=True)
class StockLayout:
    """Cuts assigned to one stock bar.

    Attributes:
        stock_index: One-based index of this bar in the nesting result.
        stock_length: Nominal bar length.
        cuts: Cut instances in the order they were assigned.
        raw_material: Raw material of the bar.
    """

    stock_index: int
    stock_length: float
    cuts: tuple[CutInstance, ...]
    raw_material: str

    @property
    def used_length(self) -> float:
        """Sum of the effective lengths of all cuts."""
        return sum(cut.effective_length for cut in self.cuts)

    @property
    def waste_length(self) -> float:
        return self.stock_length - self.used_length

    @property
    def waste_percentage(self) -> float:
        if self.stock_length == 0:
            return 0.0
        return self.waste_length / self.stock_length * 100

    @property
    def cut_count(self) -> int:
        return len(self.cuts)


@dataclass(frozen=True)
class LinearNestingResult:
    """Complete result of bar nesting.

    Attributes:
        layouts: Bar layouts across all raw materials.
        unplaced_parts: Parts not cut, one entry per id with summed quantity.
    """

    layouts: tuple[StockLayout, ...] = ()
    unplaced_parts: tuple[LinearPart, ...] = ()

    @property
    def total_stock_used(self) -> int:
        return len(self.layouts)

    @property
    def total_stock_length(self) -> float:
        return sum(layout.stock_length for layout in self.layouts)

    @property
    def total_waste(self) -> float:
        return sum(layout.waste_length for layout in self.layouts)

    @property
    def total_waste_percentage(self) -> float:
        total = self.total_stock_length
        if total == 0:
            return 0.0
        return self.total_waste / total * 100

    @property
    def has_unplaced(self) -> bool:
        return any(p.quantity > 0 for p in self.unplaced_parts)


def _greedy_fill(
    instances: Sequence[CutInstance],
    usable_length: float,
) -> tuple[list[CutInstance], float]:
    """Take instances in order while they fit; return (cuts, used length)."""
    cuts: list[CutInstance] = []
    used = 0.0
    for instance in instances:
        if used + instance.effective_length <= usable_length:
            cuts.append(instance)
            used += instance.effective_length
    return cuts, used


class LinearPacker:
    """Greedy bar packer with optional randomized-restart search.

    Attributes:
        config: Stock length, allowances and optimization goal.
    """

    def __init__(
        self,
        config: LinearNestingConfig,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the packer.

        Args:
            config: Bar nesting configuration.
            rng: Random source for the waste-minimization search. Pass a
                seeded random.Random for reproducible results.
        """
        self.config = config
        self._rng = rng if rng is not None else random.Random()

    def pack(self, parts: Sequence[LinearPart]) -> LinearNestingResult:
        """Assign parts to stock bars.

        Args:
            parts: Bar parts (quantity may exceed 1).

        Returns:
            LinearNestingResult with bar layouts and the unplaced remainder.
        """
        usable = self.config.usable_length
        layouts: list[StockLayout] = []
        unplaced: list[LinearPart] = []
        counters: dict[int, int] = {}

        for raw_material, group in self._group_parts(parts).items():
            instances: list[CutInstance] = []
            for part in group:
                if part.quantity == 0:
                    continue
                if part.effective_length > usable:
                    logger.warning(
                        "Part %s (%g) exceeds usable stock length %g",
                        part.id,
                        part.effective_length,
                        usable,
                    )
                    unplaced.append(part)
                else:
                    instances.extend(self._expand_part(part, counters))

            while instances:
                cuts = self._select_bar(instances, usable)

                if not cuts:
                    unplaced.extend(self._consolidate_instances(instances, group))
                    break

                layout = StockLayout(
                    stock_index=len(layouts) + 1,
                    stock_length=self.config.stock_length,
                    cuts=tuple(cuts),
                    raw_material=raw_material,
                )
                layouts.append(layout)
                logger.debug(
                    "Bar %d (%s): %d cuts, %g waste",
                    layout.stock_index,
                    raw_material,
                    layout.cut_count,
                    layout.waste_length,
                )

                taken = {cut.instance_id for cut in cuts}
                instances = [i for i in instances if i.instance_id not in taken]

        result = LinearNestingResult(
            layouts=tuple(layouts),
            unplaced_parts=tuple(self._consolidate_unplaced(unplaced)),
        )
        logger.info(
            "Linear nesting: %d bars, %.1f%% waste, %d part rows unplaced",
            result.total_stock_used,
            result.total_waste_percentage,
            len(result.unplaced_parts),
        )
        return result

    def _select_bar(
        self,
        instances: list[CutInstance],
        usable: float,
    ) -> list[CutInstance]:
        """Choose the cuts for the next bar.

        First-fit decreasing sets the baseline. In waste mode, shuffled
        greedy fills replace it only on strictly lower waste, so the
        earliest minimum wins ties.
        """
        ordered = sorted(instances, key=lambda i: i.effective_length, reverse=True)
        best_cuts, used = _greedy_fill(ordered, usable)
        best_waste = usable - used

        if (
            self.config.goal is OptimizationGoal.MINIMIZE_WASTE
            and len(instances) > 1
        ):
            shuffled = list(instances)
            for trial in range(self.config.search_iterations):
                self._rng.shuffle(shuffled)
                cuts, used = _greedy_fill(shuffled, usable)
                waste = usable - used
                if waste < best_waste:
                    logger.debug(
                        "Trial %d improved bar waste %g -> %g",
                        trial,
                        best_waste,
                        waste,
                    )
                    best_waste = waste
                    best_cuts = cuts

        return best_cuts

    def _group_parts(
        self,
        parts: Sequence[LinearPart],
    ) -> dict[str, list[LinearPart]]:
        """Group parts by raw material, preserving first-seen order."""
        groups: dict[str, list[LinearPart]] = {}
        for part in parts:
            groups.setdefault(part.raw_material, []).append(part)
        return groups

    def _expand_part(
        self,
        part: LinearPart,
        counters: dict[int, int],
    ) -> list[CutInstance]:
        """Expand a row into cut instances; indices continue per part id."""
        start = counters.get(part.id, 0)
        counters[part.id] = start + part.quantity
        return [
            CutInstance(
                id=part.id,
                length=part.length,
                effective_length=part.effective_length,
                instance_id=InstanceKey(part.id, start + i),
                raw_material=part.raw_material,
            )
            for i in range(part.quantity)
        ]

    def _consolidate_instances(
        self,
        instances: list[CutInstance],
        group: list[LinearPart],
    ) -> list[LinearPart]:
        """Roll leftover instances back into part rows with counts."""
        originals: dict[int, LinearPart] = {}
        for part in group:
            originals.setdefault(part.id, part)
        counts: dict[int, int] = {}
        for instance in instances:
            counts[instance.id] = counts.get(instance.id, 0) + 1
        return [
            replace(originals[part_id], quantity=count)
            for part_id, count in counts.items()
        ]

    def _consolidate_unplaced(self, parts: list[LinearPart]) -> list[LinearPart]:
        """Merge unplaced rows by id, summing quantities."""
        merged: dict[int, LinearPart] = {}
        for part in parts:
            if part.id in merged:
                existing = merged[part.id]
                merged[part.id] = replace(
                    existing, quantity=existing.quantity + part.quantity
                )
            else:
                merged[part.id] = part
        return list(merged.values())
