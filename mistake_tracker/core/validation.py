"""
Boundary validation for mistake and retest input.

Every check runs before a problem is raised so callers get the full list
of problems in one ValidationError.
"""

from __future__ import annotations

from dataclasses import dataclass

from mistake_tracker.core.exceptions import ValidationError
from mistake_tracker.core.records import ErrorCategory, RetestResult


@dataclass(frozen=True)
class MistakeFields:
    """Validated user-editable fields of a mistake."""

    title: str
    description: str
    category: ErrorCategory
    root_cause: str | None = None
    corrected_principle: str | None = None


def _optional_text(value: str | None) -> str | None:
    if value is None:
        return None
    value = value.strip()
    return value or None


def validate_mistake_fields(
    title: str | None,
    description: str | None,
    category: ErrorCategory | str | None,
    root_cause: str | None = None,
    corrected_principle: str | None = None,
) -> MistakeFields:
    """
    Validate and normalise the editable fields of a mistake.

    Title and description must contain non-whitespace text; optional notes
    that are blank are stored as None.

    Raises:
        ValidationError: listing every failing field
    """
    errors: list[str] = []

    if not title or not title.strip():
        errors.append("Title is required")
    if not description or not description.strip():
        errors.append("Description is required")

    parsed_category: ErrorCategory | None = None
    try:
        parsed_category = ErrorCategory(category)
    except ValueError:
        allowed = ", ".join(c.value for c in ErrorCategory)
        errors.append(f"Invalid category {category!r} (expected one of: {allowed})")

    if errors:
        raise ValidationError(errors)

    return MistakeFields(
        title=title.strip(),
        description=description.strip(),
        category=parsed_category,
        root_cause=_optional_text(root_cause),
        corrected_principle=_optional_text(corrected_principle),
    )


def validate_result(result: RetestResult | str | None) -> RetestResult:
    """Parse a retest result, raising ValidationError for anything else."""
    try:
        return RetestResult(result)
    except ValueError:
        raise ValidationError(
            f"Invalid result {result!r} (expected 'correct' or 'incorrect')"
        ) from None
