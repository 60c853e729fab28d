"""Domain layer - parts, stock definitions and material data."""

from .materials import DEFAULT_DENSITY, STANDARD_DENSITIES, DensityTable
from .value_objects import (
    CutInstance,
    InstanceKey,
    LinearPart,
    OptimizationGoal,
    Part,
    RotationOption,
    SheetCapacity,
)

__all__ = [
    "CutInstance",
    "DEFAULT_DENSITY",
    "DensityTable",
    "InstanceKey",
    "LinearPart",
    "OptimizationGoal",
    "Part",
    "RotationOption",
    "STANDARD_DENSITIES",
    "SheetCapacity",
]
