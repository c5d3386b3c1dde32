"""Error taxonomy for tracker operations."""

from __future__ import annotations


class TrackerError(Exception):
    """Base class for errors raised by tracker operations."""


class ValidationError(TrackerError):
    """Raised when input fields are missing or malformed."""

    def __init__(self, errors: list[str] | str):
        self.errors = [errors] if isinstance(errors, str) else list(errors)
        super().__init__("; ".join(self.errors))


class RetestAlreadyCompletedError(ValidationError):
    """Raised when a retest that already has a result is completed again."""

    def __init__(self, retest_id: str):
        self.retest_id = retest_id
        super().__init__(f"Retest {retest_id} is already completed")


class NotFoundError(TrackerError):
    """Raised when an operation references an id with no matching record."""

    def __init__(self, kind: str, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"{kind} not found: {record_id}")
