"""Material density lookup used for sheet weight metrics.

Densities are in kg/m^3. Lookups never fail: unknown grades fall back to
DEFAULT_DENSITY so weight figures are always defined.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

logger = logging.getLogger(__name__)

DEFAULT_DENSITY = 7850.0

STANDARD_DENSITIES: dict[str, float] = {
    "MS": 7850.0,
    "SS": 8000.0,
    "AL": 2700.0,
    "GI": 7850.0,
}

# Keyword aliases checked in order when no exact grade matches.
# Galvanized precedes aluminium: both spellings contain "AL".
_KEYWORD_DENSITIES: tuple[tuple[tuple[str, ...], float], ...] = (
    (("MS", "MILD STEEL"), 7850.0),
    (("SS", "STAINLESS"), 8000.0),
    (("GI", "GALVANIZED", "GALVANISED"), 7850.0),
    (("AL", "ALUMINIUM", "ALUMINUM"), 2700.0),
)


class DensityTable:
    """Grade to density lookup with keyword matching and a fallback.

    Custom entries take precedence over the standard table. Grade keys are
    matched case-insensitively.

    Attributes:
        default: Density returned by density_for() for unknown grades.
    """

    def __init__(
        self,
        custom: Mapping[str, float] | None = None,
        default: float = DEFAULT_DENSITY,
    ) -> None:
        if default <= 0:
            raise ValueError("Default density must be positive")
        self.default = default
        self._table: dict[str, float] = {
            k.upper(): v for k, v in STANDARD_DENSITIES.items()
        }
        for grade, density in (custom or {}).items():
            if density <= 0:
                raise ValueError(f"Density for '{grade}' must be positive")
            self._table[grade.strip().upper()] = density

    def lookup(self, grade: str) -> float | None:
        """Return the density for a grade, or None if it is unknown."""
        key = grade.strip().upper()
        if key in self._table:
            return self._table[key]
        for keywords, density in _KEYWORD_DENSITIES:
            if any(word in key for word in keywords):
                return density
        return None

    def density_for(self, grade: str) -> float:
        """Return the density for a grade, falling back to the default."""
        density = self.lookup(grade)
        if density is None:
            logger.debug(
                "Unknown grade '%s', using default density %.1f", grade, self.default
            )
            return self.default
        return density

    def __call__(self, grade: str) -> float | None:
        return self.lookup(grade)
