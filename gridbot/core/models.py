"""Core data models: Vector2, Robot, Enemy."""

from __future__ import annotations

from dataclasses import dataclass, field

from gridbot.core.enums import EnemyAction


@dataclass(frozen=True, slots=True)
class Vector2:
    """Immutable 2D integer coordinate, also used for unit directions."""

    x: int = 0
    y: int = 0

    def __add__(self, other: Vector2) -> Vector2:
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector2) -> Vector2:
        return Vector2(self.x - other.x, self.y - other.y)

    def __neg__(self) -> Vector2:
        return Vector2(-self.x, -self.y)

    def manhattan(self, other: Vector2) -> int:
        return abs(self.x - other.x) + abs(self.y - other.y)

    def distance_sq(self, other: Vector2) -> int:
        dx = self.x - other.x
        dy = self.y - other.y
        return dx * dx + dy * dy

    def turned_left(self) -> Vector2:
        """Rotate 90 degrees counter-clockwise (screen coordinates, y down)."""
        return Vector2(self.y, -self.x)

    def turned_right(self) -> Vector2:
        """Rotate 90 degrees clockwise (screen coordinates, y down)."""
        return Vector2(-self.y, self.x)

    def __repr__(self) -> str:
        return f"({self.x}, {self.y})"


UP = Vector2(0, -1)
RIGHT = Vector2(1, 0)
DOWN = Vector2(0, 1)
LEFT = Vector2(-1, 0)

# Clockwise order, also the fixed neighbor order for adjacency scans and BFS
CARDINALS: tuple[Vector2, ...] = (UP, RIGHT, DOWN, LEFT)


def is_unit_direction(v: Vector2) -> bool:
    return v in CARDINALS


@dataclass(slots=True)
class Robot:
    """The player-controlled agent."""

    pos: Vector2
    direction: Vector2
    health: float = 6.0

    @property
    def alive(self) -> bool:
        return self.health > 0

    @property
    def front(self) -> Vector2:
        return self.pos + self.direction

    def copy(self) -> Robot:
        return Robot(pos=self.pos, direction=self.direction, health=self.health)


@dataclass(slots=True)
class Enemy:
    """A scripted opponent. Defeated enemies stay in the list with health <= 0."""

    id: int
    pos: Vector2
    direction: Vector2
    health: float = 2.0
    behavior: tuple[EnemyAction, ...] = field(default_factory=tuple)
    behavior_index: int = 0

    @property
    def alive(self) -> bool:
        return self.health > 0

    @property
    def front(self) -> Vector2:
        return self.pos + self.direction

    @property
    def back(self) -> Vector2:
        return self.pos - self.direction

    def next_action(self) -> EnemyAction | None:
        if not self.behavior:
            return None
        return self.behavior[self.behavior_index]

    def advance_behavior(self) -> None:
        if self.behavior:
            self.behavior_index = (self.behavior_index + 1) % len(self.behavior)

    def copy(self) -> Enemy:
        return Enemy(
            id=self.id,
            pos=self.pos,
            direction=self.direction,
            health=self.health,
            behavior=tuple(self.behavior),
            behavior_index=self.behavior_index,
        )
