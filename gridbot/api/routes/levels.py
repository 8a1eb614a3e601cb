"""GET/POST /api/v1/levels — built-in levels and progression."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from gridbot.api.dependencies import get_engine_manager
from gridbot.api.engine_manager import EngineManager
from gridbot.api.schemas import ControlResponse, LevelListResponse, LevelSummarySchema

router = APIRouter()


@router.get("/levels", response_model=LevelListResponse)
def list_levels(manager: EngineManager = Depends(get_engine_manager)) -> LevelListResponse:
    return LevelListResponse(
        current=manager.levels.current.id,
        levels=[
            LevelSummarySchema(
                id=lv.id,
                name=lv.name,
                description=lv.description,
                hint=lv.hint,
                story=lv.story,
                enemies=len(lv.enemies),
                coins=len(lv.coins),
            )
            for lv in manager.levels.levels
        ],
    )


@router.post("/levels/next", response_model=ControlResponse)
async def next_level(manager: EngineManager = Depends(get_engine_manager)) -> ControlResponse:
    level = manager.next_level()
    if level is None:
        return ControlResponse(status="noop", message="Already on the last level.", mode=manager.engine.mode.name.lower())
    return ControlResponse(status="ok", message=f"Loaded {level.name}.", mode=manager.engine.mode.name.lower())


@router.post("/levels/{level_id}/load", response_model=ControlResponse)
async def load_level(
    level_id: str,
    manager: EngineManager = Depends(get_engine_manager),
) -> ControlResponse:
    # Unknown ids raise LevelError, mapped to 404 by the app
    level = manager.load_level(level_id)
    return ControlResponse(status="ok", message=f"Loaded {level.name}.", mode=manager.engine.mode.name.lower())
