"""FastAPI application factory with lifespan management."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from gridbot.api.dependencies import set_engine_manager
from gridbot.api.engine_manager import EngineManager
from gridbot.api.routes import api_router
from gridbot.config import EngineConfig
from gridbot.core.level import LevelError
from gridbot.engine.errors import InvalidTargetError
from gridbot.utils.logging import setup_logging

logger = logging.getLogger(__name__)


def create_app(config: EngineConfig | None = None) -> FastAPI:
    """Build and return the fully-configured FastAPI application."""
    if config is None:
        config = EngineConfig()

    _config = config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        setup_logging(_config.log_level)
        manager = EngineManager(_config)
        set_engine_manager(manager)
        logger.info("API server started — level %s loaded.", manager.levels.current.id)
        yield
        await manager.shutdown()
        set_engine_manager(None)
        logger.info("API server shutting down.")

    app = FastAPI(
        title="Grid Bot Engine",
        description=(
            "Turn-paced grid robot game — scripting API.\n\n"
            "## API Groups\n\n"
            "- **State** — Robot, enemies, coins, events and sensor readings\n"
            "- **Map** — Static level map (fetch once per level)\n"
            "- **Levels** — Built-in levels and level progression\n"
            "- **Control** — Run lifecycle: start, stop, reset, enemy preview\n"
            "- **Actions** — Single robot actions and whole programs\n"
            "- **Config** — Read-only engine configuration\n"
        ),
        version="0.1.0",
        lifespan=lifespan,
        openapi_tags=[
            {"name": "State", "description": "Live game state polled by the frontend."},
            {"name": "Map", "description": "Static level map. Does not change while a level is loaded."},
            {"name": "Levels", "description": "Built-in level list, level loading and progression."},
            {"name": "Control", "description": "Start, stop, reset and enemy-movement preview."},
            {"name": "Actions", "description": "Robot actions. Each call returns once the action and its enemy turn are done."},
            {"name": "Config", "description": "Read-only engine configuration (pacing, health, damage)."},
        ],
    )

    # CORS: allow any origin in dev
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(InvalidTargetError)
    async def _invalid_target(request: Request, exc: InvalidTargetError) -> JSONResponse:
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(LevelError)
    async def _level_error(request: Request, exc: LevelError) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    app.include_router(api_router)

    return app
