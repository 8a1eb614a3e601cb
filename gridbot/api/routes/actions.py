"""POST /api/v1/actions/* and /program — drive the robot.

An action request returns once the action, its pacing delay and the enemy
turn it triggers have finished.  A run stopped mid-action answers
``status="stopped"``; a single action sent while a program runs answers
``status="busy"``; an impossible move target answers HTTP 422.
"""

from __future__ import annotations

from enum import Enum
from typing import Awaitable, Callable

from fastapi import APIRouter, Depends

from gridbot.api.dependencies import get_engine_manager
from gridbot.api.engine_manager import EngineManager
from gridbot.api.routes.state import serialize_state
from gridbot.api.schemas import (
    ActionResponse,
    ControlResponse,
    MoveToRequest,
    ProgramRequest,
    ProgramStatusResponse,
    RunResultSchema,
    SayRequest,
)
from gridbot.engine.errors import EngineCancelled

router = APIRouter()


class SimpleAction(str, Enum):
    move_forward = "move_forward"
    turn_left = "turn_left"
    turn_right = "turn_right"
    attack = "attack"
    face_enemy = "face_enemy"
    move_to_nearest_enemy = "move_to_nearest_enemy"


async def _perform(manager: EngineManager, name: str, call: Callable[[], Awaitable[None]]) -> ActionResponse:
    if manager.program_running:
        return ActionResponse(status="busy", message="A program is running.", state=serialize_state(manager))
    if not manager.engine.running:
        return ActionResponse(status="noop", message="Game is not running.", state=serialize_state(manager))
    try:
        await call()
    except EngineCancelled as exc:
        return ActionResponse(status="stopped", message=str(exc), state=serialize_state(manager))
    return ActionResponse(status="ok", message=f"{name} done.", state=serialize_state(manager))


@router.post("/actions/move_to", response_model=ActionResponse)
async def move_to(
    body: MoveToRequest,
    manager: EngineManager = Depends(get_engine_manager),
) -> ActionResponse:
    return await _perform(manager, "move_to", lambda: manager.engine.move_to_position(body.x, body.y))


@router.post("/actions/say", response_model=ActionResponse)
async def say(
    body: SayRequest,
    manager: EngineManager = Depends(get_engine_manager),
) -> ActionResponse:
    return await _perform(manager, "say", lambda: manager.engine.say_message(body.text, body.seconds))


@router.post("/actions/{action}", response_model=ActionResponse)
async def simple_action(
    action: SimpleAction,
    manager: EngineManager = Depends(get_engine_manager),
) -> ActionResponse:
    return await _perform(manager, action.value, getattr(manager.engine, action.value))


@router.post("/program", response_model=ControlResponse)
async def run_program(
    body: ProgramRequest,
    manager: EngineManager = Depends(get_engine_manager),
) -> ControlResponse:
    manager.run_program(body.steps)
    return ControlResponse(
        status="ok",
        message=f"Program of {len(body.steps)} step(s) started.",
        mode=manager.engine.mode.name.lower(),
    )


@router.get("/program", response_model=ProgramStatusResponse)
def program_status(manager: EngineManager = Depends(get_engine_manager)) -> ProgramStatusResponse:
    result = manager.last_result
    return ProgramStatusResponse(
        running=manager.program_running,
        last_result=None if result is None else RunResultSchema(
            status=result.status.value,
            steps_executed=result.steps_executed,
            level_completed=result.level_completed,
            error=result.error,
        ),
    )
