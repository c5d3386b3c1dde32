"""
FastAPI application for the mistake tracker.

Provides REST API for:
- Mistake logging (create, edit, delete)
- Retest schedule and completion
- Weekly statistics
- Quiz generation
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import UTC, datetime
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from config import Settings, get_settings
from mistake_tracker import __version__
from mistake_tracker.core.categories import CATEGORY_POLICIES
from mistake_tracker.core.exceptions import NotFoundError, ValidationError
from mistake_tracker.db.database import check_database_health
from mistake_tracker.service.factory import build_tracker
from mistake_tracker.service.tracker import MistakeTracker


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan handler for startup/shutdown events."""
    settings: Settings = app.state.settings
    logger.info("Starting mistake-tracker service...")
    logger.info(f"Service started on {settings.api_host}:{settings.api_port}")

    yield

    logger.info("Shutting down mistake-tracker service...")


# ========================================
# Error Handlers
# ========================================


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"error": jsonable_encoder(exc.errors())},
    )


async def _validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    logger.debug(f"Rejected {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": exc.errors})


async def _not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": f"{exc.kind} not found"},
    )


async def _unexpected_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Internal server error"},
    )


def create_app(
    settings: Settings | None = None,
    tracker: MistakeTracker | None = None,
) -> FastAPI:
    """
    Build the application around one tracker instance.

    Args:
        settings: Defaults to the cached environment settings
        tracker: Defaults to a tracker built from settings
    """
    settings = settings or get_settings()

    app = FastAPI(
        title="Mistake Tracker",
        description="""
        Log mistakes, retest them on a spaced schedule and track mastery.

        ## Features

        - **Mistakes**: Log what went wrong, its category, root cause and corrected principle
        - **Retests**: Automatic schedule per category, follow-up after every failure
        - **Mastery**: Three correct retests in a row marks a mistake as mastered
        - **Stats**: Weekly counts, top error patterns and 7-day activity
        """,
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.tracker = tracker or build_tracker(settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_allow_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(ValidationError, _validation_handler)
    app.add_exception_handler(NotFoundError, _not_found_handler)
    app.add_exception_handler(Exception, _unexpected_handler)

    _register_health_routes(app)

    from mistake_tracker.api.routers import (
        mistakes_router,
        quiz_router,
        retests_router,
        stats_router,
    )

    app.include_router(mistakes_router.router, prefix="/api/mistakes", tags=["Mistakes"])
    app.include_router(retests_router.router, prefix="/api/retests", tags=["Retests"])
    app.include_router(stats_router.router, prefix="/api/stats", tags=["Stats"])
    app.include_router(quiz_router.router, prefix="/api/quiz", tags=["Quiz"])

    return app


# ========================================
# Health & Status Endpoints
# ========================================


def _register_health_routes(app: FastAPI) -> None:
    @app.get("/", tags=["Health"])
    def root() -> dict[str, str]:
        """Root endpoint returning service info."""
        return {
            "service": "mistake-tracker",
            "version": __version__,
            "status": "ok",
        }

    @app.get("/health", tags=["Health"])
    def health_check() -> dict[str, Any]:
        """Health check including storage reachability and record counts."""
        tracker: MistakeTracker = app.state.tracker
        storage_status, storage_error = "ok", None

        engine = getattr(tracker.repository, "engine", None)
        if engine is not None:
            storage_status, storage_error = check_database_health(engine)

        result: dict[str, Any] = {
            "status": "healthy" if storage_status == "ok" else "unhealthy",
            "timestamp": datetime.now(UTC).isoformat(),
            "components": {"storage": storage_status},
        }
        if storage_status == "ok":
            result["records"] = tracker.health()
        if storage_error:
            result["errors"] = {"storage": storage_error}
        return result

    @app.get("/config", tags=["Health"])
    def get_config() -> dict[str, Any]:
        """Get current configuration (non-sensitive)."""
        settings: Settings = app.state.settings
        return {
            "storage_backend": settings.storage_backend,
            "scheduling": settings.get_scheduling_config(),
            "stats": settings.get_stats_config(),
            "categories": {
                category.value: {
                    "label": policy.label,
                    "color": policy.color,
                    "retestDays": list(policy.retest_days),
                }
                for category, policy in CATEGORY_POLICIES.items()
            },
        }
