"""API routers for the mistake tracker."""

from mistake_tracker.api.routers import (
    mistakes_router,
    quiz_router,
    retests_router,
    stats_router,
)

__all__ = [
    "mistakes_router",
    "retests_router",
    "stats_router",
    "quiz_router",
]
