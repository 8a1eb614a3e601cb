"""CombatResolver — attack legality and damage for robot-on-enemy hits.

An attack connects iff the defender is alive and stands exactly one step
ahead of the attacker along the attacker's facing.  A hit on a defender whose
facing points directly away from the attacker is a back-attack:

    defender.pos - defender.direction == attacker.pos

Defeated enemies are soft-deleted: they stay in the list with health <= 0 and
every collision, AI and targeting query skips them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from gridbot.core.enums import NotificationKind

if TYPE_CHECKING:
    from gridbot.config import EngineConfig
    from gridbot.core.entity_state import EntityState
    from gridbot.core.models import Enemy, Robot
    from gridbot.utils.event_log import EventLog

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class AttackResult:
    """Outcome of one attack resolution."""

    hit: bool
    target_id: int | None = None
    damage: float = 0.0
    back_attack: bool = False
    defeated: bool = False


MISS = AttackResult(hit=False)


def is_back_attack(attacker: Robot, defender: Enemy) -> bool:
    return defender.back == attacker.pos


class CombatResolver:
    """Stateless handler for robot attacks."""

    def __init__(self, config: EngineConfig, events: EventLog) -> None:
        self._config = config
        self._events = events

    def damage_for(self, attacker: Robot, defender: Enemy) -> float:
        if is_back_attack(attacker, defender):
            return self._config.back_attack_damage
        return self._config.normal_damage

    def resolve(self, state: EntityState) -> AttackResult:
        """Apply the robot's attack against whatever stands in front of it."""
        robot = state.robot
        defender = state.enemy_at(robot.front)
        if defender is None:
            logger.debug("Attack at %s hit nothing", robot.front)
            return MISS

        back = is_back_attack(robot, defender)
        damage = self.damage_for(robot, defender)
        defender.health -= damage
        logger.info(
            "Robot hits enemy %d at %s for %s%s [HP: %s]",
            defender.id, defender.pos, damage,
            " (back attack)" if back else "",
            defender.health,
        )
        if back:
            self._events.emit(
                NotificationKind.BACK_ATTACK,
                f"Back attack! +{damage - self._config.normal_damage:g} damage",
                duration=self._config.toast_short,
                enemy_id=defender.id,
            )

        defeated = defender.health <= 0
        if defeated:
            state.defeated += 1
            logger.info("Enemy %d defeated. Total defeated: %d", defender.id, state.defeated)
            self._events.emit(
                NotificationKind.ENEMY_DEFEATED,
                "Enemy defeated!",
                duration=self._config.toast_short,
                enemy_id=defender.id,
                defeated=state.defeated,
            )

        return AttackResult(
            hit=True,
            target_id=defender.id,
            damage=damage,
            back_attack=back,
            defeated=defeated,
        )
