"""FastAPI dependencies."""

from __future__ import annotations

from fastapi import Request

from mistake_tracker.service.tracker import MistakeTracker


def get_tracker(request: Request) -> MistakeTracker:
    """The tracker built for this application instance."""
    return request.app.state.tracker
