"""Infrastructure layer - packing engines and formatters."""

from .formatters import (
    LinearNestingReportFormatter,
    NestingJsonExporter,
    SheetNestingReportFormatter,
)
from .linear_packing import (
    DEFAULT_SEARCH_ITERATIONS,
    LinearNestingConfig,
    LinearNestingResult,
    LinearPacker,
    StockLayout,
)
from .sheet_packing import (
    PlacedPart,
    Placement,
    SheetLayout,
    SheetNestingConfig,
    SheetNestingResult,
    SheetPacker,
    find_best_position,
)

__all__ = [
    # Sheet nesting
    "PlacedPart",
    "Placement",
    "SheetLayout",
    "SheetNestingConfig",
    "SheetNestingResult",
    "SheetPacker",
    "find_best_position",
    # Bar nesting
    "DEFAULT_SEARCH_ITERATIONS",
    "LinearNestingConfig",
    "LinearNestingResult",
    "LinearPacker",
    "StockLayout",
    # Formatters
    "LinearNestingReportFormatter",
    "NestingJsonExporter",
    "SheetNestingReportFormatter",
]
