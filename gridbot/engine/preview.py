"""Enemy-movement preview on a scratch copy of the entity state.

The engine swaps the scratch copy in for the duration of the preview and
restores the original on completion or abort.  Only scripted steps run here:
no engagement, no attacks, no player.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from gridbot.engine.errors import PreviewAborted

if TYPE_CHECKING:
    from gridbot.ai.behavior import EnemyBehaviorEngine
    from gridbot.config import EngineConfig
    from gridbot.core.entity_state import EntityState
    from gridbot.core.grid import WorldMap
    from gridbot.engine.cancellation import CancelToken

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PreviewSession:
    """One preview run. ``closed`` flips once the original state is back."""

    original: EntityState
    scratch: EntityState
    token: CancelToken
    closed: bool = False


class PreviewSimulator:
    """Steps every living enemy through its script *cycles* times."""

    __slots__ = ("_behavior", "_config")

    def __init__(self, behavior: EnemyBehaviorEngine, config: EngineConfig) -> None:
        self._behavior = behavior
        self._config = config

    async def run(
        self,
        session: PreviewSession,
        world: WorldMap,
        cycles: int,
        on_step: Callable[[], None] | None = None,
    ) -> int:
        """Simulate until each enemy's play-head has wrapped to 0 *cycles* times.

        Returns the number of enemy steps executed.
        """
        state = session.scratch
        token = session.token
        pace = self._config.scaled(self._config.enemy_move_delay)
        steps = 0

        for cycle in range(max(cycles, 0)):
            completed = [not e.alive or not e.behavior for e in state.enemies]
            while not all(completed):
                for i, enemy in enumerate(state.enemies):
                    if token.cancelled:
                        raise PreviewAborted()
                    if completed[i]:
                        continue
                    self._behavior.execute_behavior(enemy, state, world)
                    steps += 1
                    if on_step is not None:
                        on_step()
                    if await token.sleep(pace):
                        raise PreviewAborted()
                    if enemy.behavior_index == 0:
                        completed[i] = True
            logger.debug("Preview cycle %d complete", cycle + 1)

        logger.info("Preview finished after %d enemy step(s)", steps)
        return steps
