"""API routes."""

from timecard_engine.api.routes.calculations import router as calculations_router
from timecard_engine.api.routes.health import router as health_router

__all__ = ["calculations_router", "health_router"]
