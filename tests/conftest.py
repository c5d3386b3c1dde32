"""
Pytest Configuration and Fixtures.

This file configures pytest and provides shared fixtures for all tests.
"""
import sys
from datetime import UTC, datetime, timedelta
from pathlib import Path

import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from mistake_tracker.core.mastery import MasteryEvaluator  # noqa: E402
from mistake_tracker.core.scheduler import RetestScheduler  # noqa: E402
from mistake_tracker.service.tracker import MistakeTracker  # noqa: E402
from mistake_tracker.storage.memory import InMemoryRepository  # noqa: E402

# Wednesday; its week runs Mon 2024-05-13 .. Sun 2024-05-19
REFERENCE_TIME = datetime(2024, 5, 15, 10, 0, tzinfo=UTC)


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line("markers", "unit: Unit tests")
    config.addinivalue_line("markers", "integration: Integration tests (API, SQL storage)")
    config.addinivalue_line("markers", "smoke: Smoke tests for CLI commands")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark based on test file location
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
        elif "smoke" in str(item.fspath):
            item.add_marker(pytest.mark.smoke)


class FixedClock:
    """Manually advanced clock for deterministic timestamps."""

    def __init__(self, start: datetime = REFERENCE_TIME):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now

    def set(self, value: datetime) -> datetime:
        self.now = value
        return self.now


@pytest.fixture
def clock():
    """Clock starting at REFERENCE_TIME."""
    return FixedClock()


@pytest.fixture
def repository():
    """Fresh in-memory repository per test."""
    return InMemoryRepository()


@pytest.fixture
def tracker(repository, clock):
    """Tracker over a fresh in-memory store with a fixed clock."""
    return MistakeTracker(
        repository=repository,
        scheduler=RetestScheduler(),
        evaluator=MasteryEvaluator(),
        clock=clock,
    )


@pytest.fixture
def sample_mistake_fields():
    """Provide sample mistake input for testing."""
    return {
        "title": "Forgot to square the radius",
        "description": "Computed circle area as pi * r",
        "category": "conceptual",
        "root_cause": "Rushed through the formula",
        "corrected_principle": "Area of a circle is pi * r^2",
    }
