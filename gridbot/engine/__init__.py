"""Engine layer: turn scheduling, cancellation, preview and program runs."""

from gridbot.engine.errors import (
    EngineCancelled,
    GameStopped,
    InvalidTargetError,
    PreviewAborted,
    ScriptFault,
)
from gridbot.engine.game_engine import GameEngine
from gridbot.engine.script_runner import RunResult, RunStatus, ScriptRunner

__all__ = [
    "EngineCancelled",
    "GameEngine",
    "GameStopped",
    "InvalidTargetError",
    "PreviewAborted",
    "RunResult",
    "RunStatus",
    "ScriptFault",
    "ScriptRunner",
]
