"""Engine exceptions.

Two families:

  EngineCancelled — a voluntary stop.  The driving script should unwind quietly.
  ScriptFault     — the script asked for something impossible.  Surface it.

Ordinary gameplay outcomes (blocked step, missed attack, acting while stopped)
are not exceptions at all; they are logged no-ops.
"""

from __future__ import annotations


class EngineCancelled(Exception):
    """Base for cancellation outcomes."""


class GameStopped(EngineCancelled):
    """The run left RUNNING while a caller was suspended."""

    def __init__(self, message: str = "Game stopped") -> None:
        super().__init__(message)


class PreviewAborted(EngineCancelled):
    """An enemy-movement preview was cancelled."""

    def __init__(self, message: str = "Preview aborted") -> None:
        super().__init__(message)


class ScriptFault(Exception):
    """Base for genuine script errors."""


class InvalidTargetError(ScriptFault, ValueError):
    """A move target lies outside the map or on a wall."""
