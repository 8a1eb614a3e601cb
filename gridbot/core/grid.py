"""World map: immutable cell geometry."""

from __future__ import annotations

from typing import Sequence

from gridbot.core.enums import CELL_CHARS, CellKind
from gridbot.core.models import Vector2


class WorldMap:
    """2D cell grid backed by a flat tuple. Built once per level, never mutated."""

    __slots__ = ("width", "height", "_cells", "_origin")

    def __init__(self, width: int, height: int, cells: Sequence[CellKind]) -> None:
        if len(cells) != width * height:
            raise ValueError(f"expected {width * height} cells, got {len(cells)}")
        self.width = width
        self.height = height
        self._cells: tuple[CellKind, ...] = tuple(cells)
        self._origin = self._find_origin()

    @classmethod
    def from_rows(cls, rows: Sequence[str]) -> WorldMap:
        """Parse a character grid ('#' wall, '.'/' ' floor, 'H' health restore)."""
        if not rows:
            raise ValueError("map has no rows")
        width = len(rows[0])
        cells: list[CellKind] = []
        for y, row in enumerate(rows):
            if len(row) != width:
                raise ValueError(f"row {y} has length {len(row)}, expected {width}")
            for x, ch in enumerate(row):
                kind = CELL_CHARS.get(ch)
                if kind is None:
                    raise ValueError(f"unknown map character {ch!r} at ({x}, {y})")
                cells.append(kind)
        return cls(width, len(rows), cells)

    # -- access --

    def in_bounds(self, pos: Vector2) -> bool:
        return 0 <= pos.x < self.width and 0 <= pos.y < self.height

    def kind_at(self, pos: Vector2) -> CellKind:
        if not self.in_bounds(pos):
            return CellKind.WALL
        return self._cells[pos.y * self.width + pos.x]

    def is_walkable(self, pos: Vector2) -> bool:
        return self.in_bounds(pos) and self.kind_at(pos) != CellKind.WALL

    def is_health_restore(self, pos: Vector2) -> bool:
        return self.kind_at(pos) == CellKind.HEALTH_RESTORE

    # -- relative coordinates --

    def _find_origin(self) -> Vector2:
        # Min x and min y are taken independently over plain floor cells;
        # health-restore tiles do not shift the origin.
        min_x, min_y = self.width, self.height
        for y in range(self.height):
            for x in range(self.width):
                if self._cells[y * self.width + x] == CellKind.FLOOR:
                    min_x = min(min_x, x)
                    min_y = min(min_y, y)
        return Vector2(min_x, min_y)

    @property
    def origin(self) -> Vector2:
        """Top-left walkable floor cell; (0, 0) in script coordinates."""
        return self._origin

    def to_absolute(self, rel: Vector2) -> Vector2:
        return rel + self._origin

    def to_relative(self, pos: Vector2) -> Vector2:
        return pos - self._origin

    # -- export --

    def rows(self) -> list[str]:
        chars = {CellKind.FLOOR: ".", CellKind.WALL: "#", CellKind.HEALTH_RESTORE: "H"}
        return [
            "".join(chars[self._cells[y * self.width + x]] for x in range(self.width))
            for y in range(self.height)
        ]
