"""FastAPI dependency injection — the EngineManager singleton and its engine."""

from __future__ import annotations

from fastapi import Depends

from gridbot.api.engine_manager import EngineManager
from gridbot.engine.game_engine import GameEngine

_engine_manager: EngineManager | None = None


def set_engine_manager(manager: EngineManager | None) -> None:
    global _engine_manager
    _engine_manager = manager


def get_engine_manager() -> EngineManager:
    if _engine_manager is None:
        raise RuntimeError("EngineManager not initialized — lifespan has not run.")
    return _engine_manager


def get_engine(manager: EngineManager = Depends(get_engine_manager)) -> GameEngine:
    """The single GameEngine behind the API."""
    return manager.engine
