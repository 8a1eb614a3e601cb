"""POST /api/v1/control/{action} — run lifecycle controls."""

from __future__ import annotations

from enum import Enum

from fastapi import APIRouter, Depends, Query

from gridbot.api.dependencies import get_engine, get_engine_manager
from gridbot.api.engine_manager import EngineManager
from gridbot.api.schemas import ControlResponse
from gridbot.engine.game_engine import GameEngine

router = APIRouter()


class ControlAction(str, Enum):
    start = "start"
    stop = "stop"
    reset = "reset"
    abort_preview = "abort_preview"


def _mode(engine: GameEngine) -> str:
    return engine.mode.name.lower()


@router.post("/control/preview", response_model=ControlResponse)
async def preview(
    cycles: int | None = Query(None, ge=1, le=20, description="Script cycles per enemy"),
    manager: EngineManager = Depends(get_engine_manager),
) -> ControlResponse:
    if cycles is None:
        cycles = manager.config.default_preview_cycles
    manager.preview(cycles)
    return ControlResponse(status="ok", message=f"Previewing {cycles} cycle(s).", mode=_mode(manager.engine))


@router.post("/control/{action}", response_model=ControlResponse)
async def control(
    action: ControlAction,
    engine: GameEngine = Depends(get_engine),
) -> ControlResponse:
    match action:
        case ControlAction.start:
            if engine.running:
                return ControlResponse(status="noop", message="Already running.", mode=_mode(engine))
            engine.start_game()
            return ControlResponse(status="ok", message="Game started.", mode=_mode(engine))

        case ControlAction.stop:
            if not engine.running and not engine.previewing:
                return ControlResponse(status="noop", message="Not running.", mode=_mode(engine))
            engine.stop_game()
            return ControlResponse(status="ok", message="Game stopped.", mode=_mode(engine))

        case ControlAction.reset:
            engine.reset()
            return ControlResponse(status="ok", message="Level reset.", mode=_mode(engine))

        case ControlAction.abort_preview:
            if not engine.previewing:
                return ControlResponse(status="noop", message="No preview in progress.", mode=_mode(engine))
            engine.abort_preview()
            return ControlResponse(status="ok", message="Preview aborted.", mode=_mode(engine))
