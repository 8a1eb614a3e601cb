"""Enumerations used throughout the engine."""

from __future__ import annotations

from enum import Enum, IntEnum, unique


@unique
class CellKind(IntEnum):
    """Cell classification on the world map."""

    FLOOR = 0
    WALL = 1
    HEALTH_RESTORE = 2


# Level map characters -> cell kind
CELL_CHARS: dict[str, CellKind] = {
    "#": CellKind.WALL,
    ".": CellKind.FLOOR,
    " ": CellKind.FLOOR,
    "H": CellKind.HEALTH_RESTORE,
}


@unique
class RunMode(IntEnum):
    """Engine run mode. Only RUNNING executes actions and the NPC loop."""

    STOPPED = 0
    RUNNING = 1
    PREVIEWING = 2


@unique
class EnemyAction(str, Enum):
    """Primitive step in an enemy's cyclic behavior script."""

    MOVE_FORWARD = "move_forward"
    TURN_LEFT = "turn_left"
    TURN_RIGHT = "turn_right"


@unique
class TickOutcome(IntEnum):
    """What the acting enemy did during one NPC tick."""

    IDLE = 0
    MOVE = 1
    ATTACK = 2


@unique
class NotificationKind(str, Enum):
    """Observable outputs for rendering / notification collaborators."""

    STATE_CHANGED = "state_changed"
    COIN_COUNTER = "coin_counter"
    RUN_STATE = "run_state"
    BACK_ATTACK = "back_attack"
    ENEMY_DEFEATED = "enemy_defeated"
    HEALTH_RESTORED = "health_restored"
    LEVEL_COMPLETE = "level_complete"
    PLAYER_DEFEATED = "player_defeated"
    MESSAGE = "message"
