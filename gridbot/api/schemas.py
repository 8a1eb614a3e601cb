"""Pydantic response models for the REST API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field


# --- Entities ---

class PositionSchema(BaseModel):
    x: int
    y: int


class RobotSchema(BaseModel):
    x: int
    y: int
    dx: int
    dy: int
    # Position relative to the map's top-left walkable cell
    rel_x: int
    rel_y: int
    health: float
    max_health: float


class EnemySchema(BaseModel):
    id: int
    x: int
    y: int
    dx: int
    dy: int
    health: float
    alive: bool
    behavior: list[str] = Field(default_factory=list)
    behavior_index: int = 0


class GameStateResponse(BaseModel):
    level_id: str
    mode: str
    robot: RobotSchema
    enemies: list[EnemySchema]
    coins: list[PositionSchema]                # Uncollected coins
    collected: int = 0
    total_coins: int = 0
    defeated: int = 0
    level_completed: bool = False
    program_running: bool = False
    preview_running: bool = False
    fingerprint: str = ""


# --- Map ---

class MapResponse(BaseModel):
    level_id: str
    width: int
    height: int
    rows: list[str]
    origin: PositionSchema
    goals: list[PositionSchema] = Field(default_factory=list)


# --- Events ---

class EventSchema(BaseModel):
    seq: int
    kind: str
    message: str = ""
    duration: float = 0.0
    data: dict[str, Any] = Field(default_factory=dict)


class EventsResponse(BaseModel):
    events: list[EventSchema]
    last_seq: int


# --- Levels ---

class LevelSummarySchema(BaseModel):
    id: str
    name: str
    description: str = ""
    hint: str | None = None
    story: str | None = None
    enemies: int = 0
    coins: int = 0


class LevelListResponse(BaseModel):
    current: str
    levels: list[LevelSummarySchema]


# --- Sensors ---

class SensorResponse(BaseModel):
    is_enemy_adjacent: bool
    enemy_x: int
    enemy_y: int
    x: int
    y: int
    health: float
    max_health: float


# --- Control / actions ---

class ControlResponse(BaseModel):
    status: str  # "ok" | "noop" | "stopped" | "error"
    message: str = ""
    mode: str = "stopped"


class ActionResponse(BaseModel):
    status: str  # "ok" | "stopped" | "noop" | "busy"
    message: str = ""
    state: GameStateResponse


class MoveToRequest(BaseModel):
    x: int
    y: int


class SayRequest(BaseModel):
    text: str
    seconds: float = Field(3.0, ge=0.0, le=60.0)


class ProgramRequest(BaseModel):
    steps: list[dict[str, Any]]


class RunResultSchema(BaseModel):
    status: str
    steps_executed: int = 0
    level_completed: bool = False
    error: str | None = None


class ProgramStatusResponse(BaseModel):
    running: bool
    last_result: RunResultSchema | None = None


# --- Config ---

class EngineConfigResponse(BaseModel):
    default_level: str
    robot_max_health: float
    enemy_max_health: float
    normal_damage: float
    back_attack_damage: float
    enemy_attack_damage: float
    player_move_delay: float
    player_attack_delay: float
    enemy_move_delay: float
    enemy_attack_delay: float
    enemy_telegraph_delay: float
    time_scale: float
    default_preview_cycles: int
