"""EngineManager — owns the GameEngine, the level cursor and background runs.

Everything lives on the server's event loop.  Long-running work (a program or
a preview) runs as a background task so the API can keep answering state
polls and accept a stop/abort while it is suspended.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import TYPE_CHECKING, Any

from gridbot.core.levels import LevelManager
from gridbot.engine.errors import EngineCancelled
from gridbot.engine.game_engine import GameEngine
from gridbot.engine.script_runner import RunResult, ScriptRunner
from gridbot.utils.event_log import EventLog

if TYPE_CHECKING:
    from gridbot.config import EngineConfig
    from gridbot.core.level import LevelDefinition

logger = logging.getLogger(__name__)


class EngineManager:
    """Single game view served over HTTP."""

    def __init__(self, config: EngineConfig, levels: LevelManager | None = None) -> None:
        self.config = config
        self.levels = levels or LevelManager()
        self._event_log = EventLog()
        self.engine = GameEngine(config, events=self._event_log)
        self.runner = ScriptRunner(self.engine)

        self._program_task: asyncio.Task[RunResult] | None = None
        self._preview_task: asyncio.Task[Any] | None = None
        self.last_result: RunResult | None = None

        if self.levels.by_id(config.default_level) is not None:
            self.levels.select(config.default_level)
        else:
            logger.warning("Unknown default level %r; starting on %s", config.default_level, self.levels.current.id)
        self.engine.load_level(self.levels.current)

    # -- public properties --

    @property
    def event_log(self) -> EventLog:
        return self._event_log

    @property
    def program_running(self) -> bool:
        return self._program_task is not None and not self._program_task.done()

    @property
    def preview_running(self) -> bool:
        return self._preview_task is not None and not self._preview_task.done()

    # -- levels --

    def load_level(self, level_id: str) -> LevelDefinition:
        level = self.levels.select(level_id)
        self.engine.load_level(level)
        return level

    def next_level(self) -> LevelDefinition | None:
        level = self.levels.advance()
        if level is not None:
            self.engine.load_level(level)
        return level

    # -- background work --

    def run_program(self, program: list[dict[str, Any]]) -> None:
        """Start *program* in the background, replacing any program in flight."""
        self.engine.stop_game()
        self._program_task = asyncio.get_running_loop().create_task(
            self._run_program(program), name="program",
        )

    async def _run_program(self, program: list[dict[str, Any]]) -> RunResult:
        result = await self.runner.run(program)
        self.last_result = result
        logger.info("Program finished: %s (%d steps)", result.status.value, result.steps_executed)
        return result

    def preview(self, cycles: int) -> None:
        self._preview_task = asyncio.get_running_loop().create_task(
            self._run_preview(cycles), name="preview",
        )

    async def _run_preview(self, cycles: int) -> None:
        try:
            await self.engine.preview_enemy_movement(cycles)
        except EngineCancelled as exc:
            logger.info("Preview ended early: %s", exc)

    async def shutdown(self) -> None:
        await self.engine.shutdown()
        for task in (self._program_task, self._preview_task):
            if task is not None and not task.done():
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
        logger.info("EngineManager shut down.")
