"""ScriptRunner — drives a GameEngine through a JSON step program.

A program is a list of steps ``{"op": <name>, ...args}``.  Action ops map onto
the engine's Action API; two control ops nest further step lists:

    {"op": "repeat", "times": 3, "body": [...]}
    {"op": "while_enemy_adjacent", "body": [...], "max_iterations": 50}

camelCase names (``moveForward``, ``moveToPosition``...) are accepted too.

Outcome classification:
    completed — every step ran
    stopped   — the run was cancelled (stop/reset/defeat); no error text
    error     — a ScriptFault (bad target, unknown op, bad arguments)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any

from gridbot.core.enums import NotificationKind
from gridbot.engine.errors import EngineCancelled, ScriptFault

if TYPE_CHECKING:
    from gridbot.engine.game_engine import GameEngine

logger = logging.getLogger(__name__)

Step = dict[str, Any]

_ALIASES: dict[str, str] = {
    "moveForward": "move_forward",
    "turnLeft": "turn_left",
    "turnRight": "turn_right",
    "faceEnemy": "face_enemy",
    "moveToNearestEnemy": "move_to_nearest_enemy",
    "moveToPosition": "move_to",
    "move_to_position": "move_to",
    "sayMessage": "say",
    "say_message": "say",
    "whileEnemyAdjacent": "while_enemy_adjacent",
}

_SIMPLE_OPS = ("move_forward", "turn_left", "turn_right", "attack", "face_enemy", "move_to_nearest_enemy")


class RunStatus(str, Enum):
    COMPLETED = "completed"
    STOPPED = "stopped"
    ERROR = "error"


@dataclass(slots=True)
class RunResult:
    status: RunStatus
    steps_executed: int = 0
    level_completed: bool = False
    error: str | None = None


class ScriptRunner:
    """Runs one program at a time against an engine."""

    def __init__(self, engine: GameEngine, max_loop_iterations: int = 1000) -> None:
        self._engine = engine
        self._max_loop_iterations = max_loop_iterations
        self._steps = 0

    async def run(self, program: list[Step], start: bool = True) -> RunResult:
        """Start the game (unless *start* is False) and execute *program*.

        The engine is left running after a completed program.
        """
        engine = self._engine
        self._steps = 0
        if start:
            engine.start_game()

        try:
            await self._run_block(program)
        except EngineCancelled as exc:
            logger.info("Program stopped after %d step(s): %s", self._steps, exc)
            return RunResult(RunStatus.STOPPED, self._steps, engine.level_completed)
        except ScriptFault as exc:
            logger.warning("Program failed after %d step(s): %s", self._steps, exc)
            engine.events.emit(
                NotificationKind.MESSAGE,
                f"Execution error: {exc}",
                duration=engine.config.toast_long,
            )
            engine.stop_game()
            return RunResult(RunStatus.ERROR, self._steps, engine.level_completed, error=str(exc))

        logger.info("Program completed: %d step(s)", self._steps)
        return RunResult(RunStatus.COMPLETED, self._steps, engine.level_completed)

    # -- interpretation --

    async def _run_block(self, block: list[Step]) -> None:
        if not isinstance(block, list):
            raise ScriptFault(f"expected a list of steps, got {type(block).__name__}")
        for step in block:
            await self._run_step(step)

    async def _run_step(self, step: Step) -> None:
        if not isinstance(step, dict) or "op" not in step:
            raise ScriptFault(f"malformed step: {step!r}")
        op = _ALIASES.get(step["op"], step["op"])
        engine = self._engine

        if op in _SIMPLE_OPS:
            self._steps += 1
            await getattr(engine, op)()
        elif op == "move_to":
            self._steps += 1
            await engine.move_to_position(_int_arg(step, "x"), _int_arg(step, "y"))
        elif op == "say":
            self._steps += 1
            await engine.say_message(str(step.get("text", "")), float(step.get("seconds", 3.0)))
        elif op == "repeat":
            for _ in range(_int_arg(step, "times")):
                await self._run_block(step.get("body", []))
        elif op == "while_enemy_adjacent":
            limit = int(step.get("max_iterations", self._max_loop_iterations))
            iterations = 0
            while engine.running and engine.is_enemy_adjacent():
                if iterations >= limit:
                    logger.warning("while_enemy_adjacent hit its iteration limit (%d)", limit)
                    break
                iterations += 1
                await self._run_block(step.get("body", []))
        else:
            raise ScriptFault(f"unknown program op: {step['op']!r}")


def _int_arg(step: Step, name: str) -> int:
    try:
        return int(step[name])
    except KeyError:
        raise ScriptFault(f"{step['op']!r} needs argument {name!r}") from None
    except (TypeError, ValueError):
        raise ScriptFault(f"{step['op']!r} argument {name!r} must be an integer") from None
