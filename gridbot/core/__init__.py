"""Core data models, world map and level definitions."""

from gridbot.core.entity_state import EntityState
from gridbot.core.enums import CellKind, EnemyAction, NotificationKind, RunMode, TickOutcome
from gridbot.core.grid import WorldMap
from gridbot.core.level import LevelDefinition, LevelError, parse_level, validate_level
from gridbot.core.levels import LEVEL_REGISTRY, LevelManager, get_level
from gridbot.core.models import Enemy, Robot, Vector2

__all__ = [
    "CellKind",
    "Enemy",
    "EnemyAction",
    "EntityState",
    "LEVEL_REGISTRY",
    "LevelDefinition",
    "LevelError",
    "LevelManager",
    "NotificationKind",
    "Robot",
    "RunMode",
    "TickOutcome",
    "Vector2",
    "WorldMap",
    "get_level",
    "parse_level",
    "validate_level",
]
