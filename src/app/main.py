"""Monster Spawner API — HTTP gateway into the simulation tick loop.

Main FastAPI application.  ``create_app()`` wires a BridgeContext (and,
when running headless, the TickDriver that feeds it) into the app state;
routers reach them through ``request.app.state`` only.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings, settings as default_settings
from app.routers import effects_router, info_router, spawn_router
from spawnbridge.simulation import BridgeContext, TickDriver

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
    "Access-Control-Allow-Headers": "Content-Type",
}


def create_app(
    context: BridgeContext | None,
    *,
    driver: TickDriver | None = None,
    cfg: Settings | None = None,
) -> FastAPI:
    cfg = cfg or default_settings

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if driver is not None:
            driver.start()
        logger.info(f"HTTP API started for location '{context.world.location_name if context else '?'}'")
        logger.info("Available endpoints:")
        logger.info("   POST /api/spawn - Spawn monsters with custom names")
        logger.info("   POST /api/effects - Apply buff effects")
        yield
        if context is not None:
            logger.info(f"Bridge status: {context.status()}")
        if driver is not None:
            driver.stop()
        logger.info("HTTP API stopped")

    app = FastAPI(
        title=cfg.app_name,
        description="External control plane for spawning monsters and applying buffs",
        version=cfg.version,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        redirect_slashes=False,
    )
    app.state.context = context
    app.state.settings = cfg

    app.include_router(info_router)
    app.include_router(spawn_router)
    app.include_router(effects_router)

    @app.middleware("http")
    async def cors_and_errors(request: Request, call_next):
        """Answer preflights, stamp CORS headers and contain unexpected failures."""
        # Paths match case-insensitively.
        request.scope["path"] = request.scope["path"].lower()
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("Error processing request")
            response = JSONResponse({"error": "Internal server error"}, status_code=500)
        response.headers.update(CORS_HEADERS)
        return response

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        # Unknown paths and wrong methods both read as "not found".
        if exc.status_code in (404, 405):
            return JSONResponse({"error": "Endpoint not found"}, status_code=404)
        return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)

    return app
