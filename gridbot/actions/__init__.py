"""Robot actions: stepping and combat resolution."""

from gridbot.actions.combat import AttackResult, CombatResolver
from gridbot.actions.move import MoveAction, StepResult

__all__ = ["AttackResult", "CombatResolver", "MoveAction", "StepResult"]
