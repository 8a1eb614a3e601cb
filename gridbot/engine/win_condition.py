"""Win-condition evaluation."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from gridbot.core.enums import NotificationKind

if TYPE_CHECKING:
    from gridbot.config import EngineConfig
    from gridbot.core.entity_state import EntityState
    from gridbot.core.level import WinCondition
    from gridbot.utils.event_log import EventLog

logger = logging.getLogger(__name__)


def is_satisfied(condition: WinCondition, state: EntityState) -> bool:
    """True iff every specified subgoal holds. Unset subgoals are vacuously met.

    ``required_coins`` of 0 counts as unset.
    """
    if condition.required_coins and len(state.collected) < condition.required_coins:
        return False
    if condition.required_enemies is not None and state.defeated < condition.required_enemies:
        return False
    if condition.goal is not None and state.robot.pos != condition.goal.to_vector():
        return False
    return True


class WinConditionEvaluator:
    """Latches level completion the first time the condition holds."""

    __slots__ = ("_condition", "_config", "_events", "completed")

    def __init__(self, condition: WinCondition, config: EngineConfig, events: EventLog) -> None:
        self._condition = condition
        self._config = config
        self._events = events
        self.completed = False

    def reset(self) -> None:
        self.completed = False

    def check(self, state: EntityState, level_name: str = "") -> bool:
        """Evaluate after a mutation. Returns True only on first satisfaction."""
        if self.completed or not is_satisfied(self._condition, state):
            return False
        self.completed = True
        logger.info("Level completed: %s", level_name or "<unnamed>")
        self._events.emit(
            NotificationKind.LEVEL_COMPLETE,
            "Level Complete!",
            duration=self._config.toast_long,
            level=level_name,
        )
        return True
