"""Level definitions — the immutable template a run is populated from.

Levels arrive from an authoring collaborator as plain data (JSON or dicts in
the camelCase authoring format).  They are validated into frozen pydantic
dataclasses, then checked against their own map:

  - rows form a rectangle of known characters
  - robot start, enemies and coins sit on walkable cells
  - all directions are unit vectors

The engine never mutates a ``LevelDefinition``; every load/reset copies the
values it needs into a fresh ``EntityState``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ConfigDict, Field, TypeAdapter, ValidationError, field_validator
from pydantic.dataclasses import dataclass as pydantic_dataclass

from gridbot.core.enums import EnemyAction
from gridbot.core.grid import WorldMap
from gridbot.core.models import Vector2, is_unit_direction

_CONFIG = ConfigDict(populate_by_name=True)


class LevelError(ValueError):
    """A level definition is malformed or refers to an unknown level."""


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------

@pydantic_dataclass(frozen=True, config=_CONFIG)
class PositionDef:
    x: int
    y: int

    def to_vector(self) -> Vector2:
        return Vector2(self.x, self.y)


@pydantic_dataclass(frozen=True, config=_CONFIG)
class DirectionDef:
    dx: int
    dy: int

    def to_vector(self) -> Vector2:
        return Vector2(self.dx, self.dy)


@pydantic_dataclass(frozen=True, config=_CONFIG)
class RobotStart:
    position: PositionDef
    direction: DirectionDef


@pydantic_dataclass(frozen=True, config=_CONFIG)
class EnemyTemplate:
    id: int
    position: PositionDef
    direction: DirectionDef
    health: float = 2.0
    behavior: tuple[EnemyAction, ...] = ()

    @field_validator("behavior", mode="before")
    @classmethod
    def _unwrap_actions(cls, value: Any) -> Any:
        # Authoring format wraps each step: {"action": "move_forward"}
        if isinstance(value, (list, tuple)):
            return tuple(v["action"] if isinstance(v, dict) else v for v in value)
        return value


@pydantic_dataclass(frozen=True, config=_CONFIG)
class WinCondition:
    """All specified subgoals must hold; an absent subgoal is vacuously met."""

    required_coins: int | None = Field(default=None, alias="requiredCoins")
    required_enemies: int | None = Field(default=None, alias="requiredEnemies")
    goal: PositionDef | None = None


@pydantic_dataclass(frozen=True, config=_CONFIG)
class LevelDefinition:
    id: str
    name: str
    map: tuple[str, ...]
    robot_start: RobotStart = Field(alias="robotStart")
    win_condition: WinCondition = Field(default_factory=WinCondition, alias="winCondition")
    enemies: tuple[EnemyTemplate, ...] = ()
    coins: tuple[PositionDef, ...] = ()
    goals: tuple[PositionDef, ...] = ()
    description: str = ""
    hint: str | None = None
    story: str | None = None

    def build_map(self) -> WorldMap:
        return WorldMap.from_rows(self.map)

    def coin_positions(self) -> frozenset[Vector2]:
        return frozenset(c.to_vector() for c in self.coins)


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------

_level_ta = TypeAdapter(LevelDefinition)


def validate_level(level: LevelDefinition) -> WorldMap:
    """Check *level* against its own map and return the built map."""
    try:
        world = level.build_map()
    except ValueError as exc:
        raise LevelError(f"level {level.id!r}: {exc}") from exc

    def _require_walkable(what: str, pos: Vector2) -> None:
        if not world.is_walkable(pos):
            raise LevelError(f"level {level.id!r}: {what} at {pos} is not a walkable cell")

    def _require_unit(what: str, d: Vector2) -> None:
        if not is_unit_direction(d):
            raise LevelError(f"level {level.id!r}: {what} direction {d} is not a unit vector")

    _require_walkable("robot start", level.robot_start.position.to_vector())
    _require_unit("robot start", level.robot_start.direction.to_vector())

    seen_ids: set[int] = set()
    for enemy in level.enemies:
        if enemy.id in seen_ids:
            raise LevelError(f"level {level.id!r}: duplicate enemy id {enemy.id}")
        seen_ids.add(enemy.id)
        _require_walkable(f"enemy {enemy.id}", enemy.position.to_vector())
        _require_unit(f"enemy {enemy.id}", enemy.direction.to_vector())

    for coin in level.coins:
        _require_walkable("coin", coin.to_vector())

    goal = level.win_condition.goal
    if goal is not None:
        _require_walkable("goal", goal.to_vector())

    return world


def parse_level(data: dict[str, Any]) -> LevelDefinition:
    """Validate raw level data into a ``LevelDefinition``."""
    try:
        level = _level_ta.validate_python(data)
    except ValidationError as exc:
        raise LevelError(str(exc)) from exc
    validate_level(level)
    return level


def load_level_file(path: str | Path) -> LevelDefinition:
    """Read a JSON level file."""
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    return parse_level(raw)


def dump_level(level: LevelDefinition) -> dict[str, Any]:
    return _level_ta.dump_python(level, mode="json", by_alias=True)
