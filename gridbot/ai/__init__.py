"""AI layer: scripted enemy behavior and pathfinding."""

from gridbot.ai.behavior import EnemyBehaviorEngine, TickReport
from gridbot.ai.pathfinding import Pathfinder, plan_turn

__all__ = ["EnemyBehaviorEngine", "Pathfinder", "TickReport", "plan_turn"]
