"""GET /api/v1/map — static level map (fetch once per level)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException

from gridbot.api.dependencies import get_engine_manager
from gridbot.api.engine_manager import EngineManager
from gridbot.api.schemas import MapResponse, PositionSchema

router = APIRouter()


@router.get("/map", response_model=MapResponse)
def get_map(manager: EngineManager = Depends(get_engine_manager)) -> MapResponse:
    engine = manager.engine
    world = engine.world
    if world is None or engine.level is None:
        raise HTTPException(status_code=503, detail="No level loaded yet.")

    goals = list(engine.level.goals)
    goal = engine.level.win_condition.goal
    if goal is not None and goal not in goals:
        goals.append(goal)

    origin = world.origin
    return MapResponse(
        level_id=engine.level.id,
        width=world.width,
        height=world.height,
        rows=world.rows(),
        origin=PositionSchema(x=origin.x, y=origin.y),
        goals=[PositionSchema(x=g.x, y=g.y) for g in goals],
    )
