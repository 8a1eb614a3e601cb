"""EnemyBehaviorEngine — scripted enemy AI.

One NPC tick acts with at most one enemy:

  1. Engagement — the first living enemy (list order) that has the robot on
     one of its three non-back neighbors turns to face the robot and attacks.
  2. Script — otherwise the first living enemy runs the next step of its
     cyclic behavior script (MOVE_FORWARD / TURN_LEFT / TURN_RIGHT).

A blocked MOVE_FORWARD reorients the enemy (clockwise, counter-clockwise,
reverse) without moving.  An engaged enemy never drifts on a scripted
MOVE_FORWARD; its play-head still advances.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Awaitable, Callable

from gridbot.core.enums import EnemyAction, NotificationKind, TickOutcome
from gridbot.core.models import CARDINALS

if TYPE_CHECKING:
    from gridbot.config import EngineConfig
    from gridbot.core.entity_state import EntityState
    from gridbot.core.grid import WorldMap
    from gridbot.core.models import Enemy, Robot, Vector2
    from gridbot.utils.event_log import EventLog

logger = logging.getLogger(__name__)

Suspend = Callable[[float], Awaitable[None]]


@dataclass(frozen=True, slots=True)
class TickReport:
    """What happened during one NPC tick."""

    outcome: TickOutcome
    enemy_id: int | None = None
    hit: bool = False
    player_defeated: bool = False


IDLE = TickReport(outcome=TickOutcome.IDLE)


class EnemyBehaviorEngine:
    """Stateless enemy AI; all state lives in the EntityState it is handed."""

    __slots__ = ("_config", "_events")

    def __init__(self, config: EngineConfig, events: EventLog) -> None:
        self._config = config
        self._events = events

    # -- perception --

    @staticmethod
    def is_engaged(enemy: Enemy, robot: Robot) -> bool:
        """Robot on one of the enemy's orthogonal neighbors, except directly behind it."""
        if not enemy.alive:
            return False
        if enemy.pos.manhattan(robot.pos) != 1:
            return False
        return robot.pos != enemy.back

    # -- tick --

    async def tick(self, state: EntityState, world: WorldMap, suspend: Suspend) -> TickReport:
        """Run one NPC decision-and-act cycle."""
        robot = state.robot
        for enemy in state.living_enemies():
            if self.is_engaged(enemy, robot):
                self.face_towards(enemy, robot.pos)
                return await self.enemy_attack(enemy, state, suspend)

        enemy = next(state.living_enemies(), None)
        if enemy is None or not enemy.behavior:
            return IDLE
        self.execute_behavior(enemy, state, world)
        return TickReport(outcome=TickOutcome.MOVE, enemy_id=enemy.id)

    # -- scripted movement --

    def execute_behavior(self, enemy: Enemy, state: EntityState, world: WorldMap) -> None:
        """Run the enemy's next script step and advance its play-head."""
        action = enemy.next_action()
        if action is None:
            return

        if action is EnemyAction.MOVE_FORWARD:
            if self.is_engaged(enemy, state.robot):
                logger.debug("Enemy %d engaged; holding position", enemy.id)
            else:
                target = enemy.front
                if self._is_open(target, state, world):
                    enemy.pos = target
                else:
                    self.reorient_to_open_direction(enemy, state, world)
        elif action is EnemyAction.TURN_LEFT:
            enemy.direction = enemy.direction.turned_left()
        elif action is EnemyAction.TURN_RIGHT:
            enemy.direction = enemy.direction.turned_right()

        enemy.advance_behavior()

    def reorient_to_open_direction(self, enemy: Enemy, state: EntityState, world: WorldMap) -> bool:
        """Face the first open neighbor: clockwise, counter-clockwise, then reverse."""
        try:
            idx = CARDINALS.index(enemy.direction)
        except ValueError:
            logger.warning("Enemy %d has non-cardinal direction %s", enemy.id, enemy.direction)
            return False
        for offset in (1, 3, 2):
            d = CARDINALS[(idx + offset) % 4]
            if self._is_open(enemy.pos + d, state, world):
                enemy.direction = d
                logger.debug("Enemy %d blocked; now facing %s", enemy.id, d)
                return True
        return False

    @staticmethod
    def _is_open(pos: Vector2, state: EntityState, world: WorldMap) -> bool:
        return world.is_walkable(pos) and state.enemy_at(pos) is None

    # -- combat --

    @staticmethod
    def face_towards(enemy: Enemy, target: Vector2) -> None:
        d = target - enemy.pos
        if d != enemy.direction:
            enemy.direction = d

    async def enemy_attack(self, enemy: Enemy, state: EntityState, suspend: Suspend) -> TickReport:
        """Telegraph, then hit the robot if it still stands in front of the enemy."""
        await suspend(self._config.enemy_telegraph_delay)

        robot = state.robot
        if not enemy.alive or robot.pos != enemy.front:
            logger.debug("Enemy %d attack missed", enemy.id)
            return TickReport(outcome=TickOutcome.ATTACK, enemy_id=enemy.id)

        robot.health -= self._config.enemy_attack_damage
        logger.info("Enemy %d hits robot for %s [HP: %s]", enemy.id, self._config.enemy_attack_damage, robot.health)

        if robot.health <= 0:
            logger.info("Robot defeated by enemy %d", enemy.id)
            self._events.emit(
                NotificationKind.PLAYER_DEFEATED,
                "Game Over! You were defeated!",
                duration=self._config.toast_long,
                enemy_id=enemy.id,
            )
            return TickReport(outcome=TickOutcome.ATTACK, enemy_id=enemy.id, hit=True, player_defeated=True)

        return TickReport(outcome=TickOutcome.ATTACK, enemy_id=enemy.id, hit=True)
