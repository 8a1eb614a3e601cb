"""GET /api/v1/state, /events, /sensors — dynamic game data (polled by UI)."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query

from gridbot.api.dependencies import get_engine, get_engine_manager
from gridbot.api.engine_manager import EngineManager
from gridbot.api.schemas import (
    EnemySchema,
    EventSchema,
    EventsResponse,
    GameStateResponse,
    PositionSchema,
    RobotSchema,
    SensorResponse,
)
from gridbot.engine.game_engine import GameEngine

router = APIRouter()


def serialize_state(manager: EngineManager) -> GameStateResponse:
    engine = manager.engine
    state = engine.state
    if state is None or engine.level is None:
        raise HTTPException(status_code=503, detail="No level loaded yet.")

    robot = state.robot
    rel = engine.world.to_relative(robot.pos)
    coins = sorted(engine.level.coin_positions() - state.collected, key=lambda p: (p.y, p.x))

    return GameStateResponse(
        level_id=engine.level.id,
        mode=engine.mode.name.lower(),
        robot=RobotSchema(
            x=robot.pos.x,
            y=robot.pos.y,
            dx=robot.direction.x,
            dy=robot.direction.y,
            rel_x=rel.x,
            rel_y=rel.y,
            health=robot.health,
            max_health=engine.get_player_max_health(),
        ),
        enemies=[
            EnemySchema(
                id=e.id,
                x=e.pos.x,
                y=e.pos.y,
                dx=e.direction.x,
                dy=e.direction.y,
                health=e.health,
                alive=e.alive,
                behavior=[a.value for a in e.behavior],
                behavior_index=e.behavior_index,
            )
            for e in state.enemies
        ],
        coins=[PositionSchema(x=p.x, y=p.y) for p in coins],
        collected=len(state.collected),
        total_coins=engine.total_coins,
        defeated=state.defeated,
        level_completed=engine.level_completed,
        program_running=manager.program_running,
        preview_running=manager.preview_running,
        fingerprint=state.fingerprint(),
    )


@router.get("/state", response_model=GameStateResponse)
def get_state(manager: EngineManager = Depends(get_engine_manager)) -> GameStateResponse:
    return serialize_state(manager)


@router.get("/events", response_model=EventsResponse)
def get_events(
    since: int = Query(0, ge=0, description="Only return events with seq greater than this"),
    manager: EngineManager = Depends(get_engine_manager),
) -> EventsResponse:
    log = manager.event_log
    return EventsResponse(
        events=[
            EventSchema(seq=ev.seq, kind=ev.kind.value, message=ev.message, duration=ev.duration, data=ev.data)
            for ev in log.since(since)
        ],
        last_seq=log.last_seq,
    )


@router.get("/sensors", response_model=SensorResponse)
def get_sensors(engine: GameEngine = Depends(get_engine)) -> SensorResponse:
    if not engine.initialized:
        raise HTTPException(status_code=503, detail="No level loaded yet.")
    pos = engine.get_position()
    return SensorResponse(
        is_enemy_adjacent=engine.is_enemy_adjacent(),
        enemy_x=engine.get_enemy_x(),
        enemy_y=engine.get_enemy_y(),
        x=pos.x,
        y=pos.y,
        health=engine.get_player_health(),
        max_health=engine.get_player_max_health(),
    )
