"""Mutable per-run entity state — only mutated through the engine."""

from __future__ import annotations

import math
import struct
from typing import TYPE_CHECKING, Iterator

import xxhash

from gridbot.core.models import CARDINALS, Enemy, Robot, Vector2

if TYPE_CHECKING:
    from gridbot.config import EngineConfig
    from gridbot.core.level import LevelDefinition


class EntityState:
    """Robot, enemies, collected coins and the defeat counter for one run."""

    __slots__ = ("robot", "enemies", "collected", "defeated")

    def __init__(
        self,
        robot: Robot,
        enemies: list[Enemy],
        collected: set[Vector2] | None = None,
        defeated: int = 0,
    ) -> None:
        self.robot: Robot = robot
        self.enemies: list[Enemy] = enemies
        self.collected: set[Vector2] = collected if collected is not None else set()
        self.defeated: int = defeated

    @classmethod
    def from_level(cls, level: LevelDefinition, config: EngineConfig) -> EntityState:
        """Fresh state from the level template. Values only; nothing is aliased."""
        start = level.robot_start
        robot = Robot(
            pos=start.position.to_vector(),
            direction=start.direction.to_vector(),
            health=config.robot_max_health,
        )
        enemies = [
            Enemy(
                id=t.id,
                pos=t.position.to_vector(),
                direction=t.direction.to_vector(),
                health=config.enemy_max_health,
                behavior=tuple(t.behavior),
                behavior_index=0,
            )
            for t in level.enemies
        ]
        return cls(robot=robot, enemies=enemies)

    def clone(self) -> EntityState:
        """Deep copy for preview scratch runs and snapshots."""
        return EntityState(
            robot=self.robot.copy(),
            enemies=[e.copy() for e in self.enemies],
            collected=set(self.collected),
            defeated=self.defeated,
        )

    # -- queries --

    def living_enemies(self) -> Iterator[Enemy]:
        return (e for e in self.enemies if e.alive)

    def enemy_at(self, pos: Vector2) -> Enemy | None:
        """Living enemy occupying *pos*, if any."""
        for e in self.enemies:
            if e.alive and e.pos == pos:
                return e
        return None

    def occupied(self) -> set[Vector2]:
        return {e.pos for e in self.enemies if e.alive}

    def adjacent_enemy_direction(self, pos: Vector2) -> Vector2 | None:
        """First direction (up, right, down, left) from *pos* onto a living enemy."""
        for d in CARDINALS:
            if self.enemy_at(pos + d) is not None:
                return d
        return None

    def nearest_enemy(self, pos: Vector2) -> Enemy | None:
        """Closest living enemy by Euclidean distance; ties keep list order."""
        best: Enemy | None = None
        best_dist = math.inf
        for e in self.enemies:
            if not e.alive:
                continue
            dist = math.sqrt(e.pos.distance_sq(pos))
            if dist < best_dist:
                best_dist = dist
                best = e
        return best

    # -- fingerprint --

    def fingerprint(self) -> str:
        """Exact digest of the entity state; equal digests mean equal state."""
        h = xxhash.xxh64()
        r = self.robot
        h.update(struct.pack("<4q", r.pos.x, r.pos.y, r.direction.x, r.direction.y))
        h.update(float(r.health).hex().encode())
        for e in self.enemies:
            h.update(struct.pack(
                "<6q", e.id, e.pos.x, e.pos.y, e.direction.x, e.direction.y, e.behavior_index,
            ))
            h.update(float(e.health).hex().encode())
            h.update(",".join(a.value for a in e.behavior).encode())
        for c in sorted(self.collected, key=lambda v: (v.x, v.y)):
            h.update(struct.pack("<2q", c.x, c.y))
        h.update(struct.pack("<q", self.defeated))
        return h.hexdigest()
