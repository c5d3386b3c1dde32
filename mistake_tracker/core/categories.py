"""
Category policy: retest cadence per error category.

Each category maps to a display label, a UI colour token and the day
offsets (from the moment a mistake is logged) at which retests are due.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType

from mistake_tracker.core.records import ErrorCategory


@dataclass(frozen=True)
class CategoryPolicy:
    """Immutable retest policy for one error category."""

    label: str
    color: str
    retest_days: tuple[int, ...]


CATEGORY_POLICIES: MappingProxyType[ErrorCategory, CategoryPolicy] = MappingProxyType(
    {
        ErrorCategory.CONCEPTUAL: CategoryPolicy("Conceptual", "primary", (1, 3, 7)),
        ErrorCategory.PROCEDURAL: CategoryPolicy("Procedural", "secondary", (1, 3, 7)),
        ErrorCategory.CARELESS: CategoryPolicy("Careless", "warning", (1, 3)),
        ErrorCategory.KNOWLEDGE: CategoryPolicy("Knowledge Gap", "accent", (1, 3, 7, 14)),
    }
)


def policy_for(category: ErrorCategory | str) -> CategoryPolicy:
    """Return the policy entry for a category."""
    return CATEGORY_POLICIES[ErrorCategory(category)]


def offsets_for(category: ErrorCategory | str) -> tuple[int, ...]:
    """Return the ascending retest day offsets for a category."""
    return policy_for(category).retest_days
