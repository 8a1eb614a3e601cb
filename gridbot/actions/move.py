"""MoveAction — validates and applies robot forward steps.

Entering a cell triggers its on-enter effects in order: coin pickup, then
health restore.  Win evaluation is left to the caller.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from gridbot.core.enums import NotificationKind

if TYPE_CHECKING:
    from gridbot.config import EngineConfig
    from gridbot.core.entity_state import EntityState
    from gridbot.core.grid import WorldMap
    from gridbot.core.models import Vector2
    from gridbot.utils.event_log import EventLog

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class StepResult:
    moved: bool
    coin_collected: bool = False
    healed: bool = False


BLOCKED = StepResult(moved=False)


class MoveAction:
    """Robot step rules for one loaded level."""

    __slots__ = ("_world", "_coins", "_config", "_events")

    def __init__(
        self,
        world: WorldMap,
        coins: frozenset[Vector2],
        config: EngineConfig,
        events: EventLog,
    ) -> None:
        self._world = world
        self._coins = coins
        self._config = config
        self._events = events

    @property
    def total_coins(self) -> int:
        return len(self._coins)

    def validate(self, state: EntityState, target: Vector2) -> bool:
        if not self._world.is_walkable(target):
            logger.debug("Robot blocked by terrain at %s", target)
            return False
        if state.enemy_at(target) is not None:
            logger.debug("Robot blocked by enemy at %s", target)
            return False
        return True

    def apply(self, state: EntityState, target: Vector2) -> StepResult:
        state.robot.pos = target
        return StepResult(
            moved=True,
            coin_collected=self._collect_coin(state, target),
            healed=self._restore_health(state, target),
        )

    def step_forward(self, state: EntityState) -> StepResult:
        target = state.robot.front
        if not self.validate(state, target):
            return BLOCKED
        return self.apply(state, target)

    # -- on-enter effects --

    def _collect_coin(self, state: EntityState, pos: Vector2) -> bool:
        if pos not in self._coins or pos in state.collected:
            return False
        state.collected.add(pos)
        logger.info("Collected coin at %s. Total collected: %d", pos, len(state.collected))
        self._events.emit(
            NotificationKind.COIN_COUNTER,
            collected=len(state.collected),
            total=self.total_coins,
        )
        return True

    def _restore_health(self, state: EntityState, pos: Vector2) -> bool:
        robot = state.robot
        max_health = self._config.robot_max_health
        if not self._world.is_health_restore(pos) or robot.health >= max_health:
            return False
        robot.health = max_health
        logger.info("Health restored at %s", pos)
        self._events.emit(
            NotificationKind.HEALTH_RESTORED,
            "Health fully restored!",
            duration=self._config.toast_short,
        )
        return True
