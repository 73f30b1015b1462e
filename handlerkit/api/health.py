"""api/health.py — Health check endpoint.

Routes (mounted at root, no prefix):
    GET /health        Liveness check, returns env, version, timestamp

Registered through the Handler like any other route, so the payload comes
back in whichever envelope the app is configured for.
"""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from handlerkit import __version__
from handlerkit.core.config import Settings
from handlerkit.handler.dispatcher import Handler


def build_health_router(handler: Handler, settings: Settings) -> APIRouter:
    router = APIRouter(tags=["health"])

    @handler.route(router, "/health", summary="Liveness check")
    def health(request: Request) -> dict:
        """Returns environment, version, and current UTC timestamp."""
        return {
            "status": "ok",
            "environment": settings.environment,
            "version": __version__,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    return router
