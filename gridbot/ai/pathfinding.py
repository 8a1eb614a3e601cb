"""Breadth-first pathfinding on the four-connected walkable grid.

Provides a `Pathfinder` that returns the shortest route as a list of unit
direction steps, and `plan_turn` which turns a facing change into the
left/right turn sequence the robot has to issue.

Usage:
    pf = Pathfinder(world)
    steps = pf.find_path(start, goal, occupied)   # list[Vector2] or None
    turns = plan_turn(robot.direction, steps[0])  # e.g. ("right",)
"""

from __future__ import annotations

import logging
from collections import deque
from typing import TYPE_CHECKING, Collection

from gridbot.core.models import CARDINALS, RIGHT, UP, Vector2

if TYPE_CHECKING:
    from gridbot.core.grid import WorldMap

logger = logging.getLogger(__name__)

TURN_LEFT = "left"
TURN_RIGHT = "right"


class Pathfinder:
    """BFS pathfinder operating on a WorldMap.

    Neighbors are explored in fixed order (up, right, down, left), so among
    equally short paths the result is deterministic.
    """

    __slots__ = ("_world",)

    def __init__(self, world: WorldMap) -> None:
        self._world = world

    def find_path(
        self,
        start: Vector2,
        goal: Vector2,
        occupied: Collection[Vector2] | None = None,
        exclude_goal_from_occupied: bool = True,
    ) -> list[Vector2] | None:
        """Compute the shortest step sequence from *start* to *goal*.

        Returns a list of unit direction vectors (empty when already there),
        or None if the goal is unreachable.

        Cells in *occupied* are impassable.  The goal cell itself stays
        enterable when *exclude_goal_from_occupied* is set.
        """
        if start == goal:
            return []

        world = self._world
        if not world.is_walkable(goal):
            return None

        occ = occupied or ()

        came_from: dict[Vector2, tuple[Vector2, Vector2]] = {}
        visited: set[Vector2] = {start}
        queue: deque[Vector2] = deque([start])

        while queue:
            current = queue.popleft()
            for d in CARDINALS:
                nxt = current + d
                if nxt in visited or not world.is_walkable(nxt):
                    continue
                if nxt in occ and not (exclude_goal_from_occupied and nxt == goal):
                    continue
                visited.add(nxt)
                came_from[nxt] = (current, d)
                if nxt == goal:
                    return self._reconstruct(came_from, goal)
                queue.append(nxt)

        logger.debug("No path from %s to %s", start, goal)
        return None

    @staticmethod
    def _reconstruct(
        came_from: dict[Vector2, tuple[Vector2, Vector2]],
        current: Vector2,
    ) -> list[Vector2]:
        """Walk back through came_from to build the step list."""
        steps: list[Vector2] = []
        while current in came_from:
            prev, d = came_from[current]
            steps.append(d)
            current = prev
        steps.reverse()
        return steps


def plan_turn(current: Vector2, target: Vector2) -> tuple[str, ...]:
    """Turn sequence that rotates *current* onto *target*.

    A 180 degree turn goes right-right when facing right or up, otherwise
    left-left.
    """
    if current == target:
        return ()
    if current.turned_left() == target:
        return (TURN_LEFT,)
    if current.turned_right() == target:
        return (TURN_RIGHT,)
    if -current == target:
        if current in (RIGHT, UP):
            return (TURN_RIGHT, TURN_RIGHT)
        return (TURN_LEFT, TURN_LEFT)
    logger.warning("Cannot plan turn from %s to %s", current, target)
    return ()
