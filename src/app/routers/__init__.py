"""API routers for the Monster Spawner API."""

from app.routers.effects import router as effects_router
from app.routers.info import router as info_router
from app.routers.spawn import router as spawn_router

__all__ = ["effects_router", "info_router", "spawn_router"]
