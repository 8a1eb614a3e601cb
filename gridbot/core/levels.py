"""Built-in level registry and current-level navigation."""

from __future__ import annotations

from gridbot.core.level import LevelDefinition, LevelError, parse_level

# ---------------------------------------------------------------------------
# Level registry: every built-in level definition lives here
# ---------------------------------------------------------------------------

LEVEL_REGISTRY: dict[str, LevelDefinition] = {}


def _reg(data: dict) -> LevelDefinition:
    level = parse_level(data)
    LEVEL_REGISTRY[level.id] = level
    return level


_PATROL = [
    {"action": "move_forward"},
    {"action": "move_forward"},
    {"action": "turn_left"},
    {"action": "turn_left"},
    {"action": "move_forward"},
    {"action": "move_forward"},
    {"action": "turn_left"},
    {"action": "turn_left"},
]

_reg({
    "id": "level1",
    "name": "First Awakening",
    "description": "Basic capability test. Collect the data cards, defeat the guard, reach the exit.",
    "hint": (
        "Use 'move to X Y' to reach (1,0) and (5,2), approach the guard with "
        "'move to nearest enemy', then face it and attack while it is adjacent. "
        "Finish at (6,1)."
    ),
    "map": [
        "#########",
        "#.......#",
        "#.......#",
        "#.......#",
        "#########",
    ],
    "robotStart": {"position": {"x": 1, "y": 1}, "direction": {"dx": 1, "dy": 0}},
    "goals": [{"x": 7, "y": 2}],
    "enemies": [
        {
            "id": 1,
            "position": {"x": 5, "y": 1},
            "direction": {"dx": 0, "dy": 1},
            "health": 2,
            "behavior": _PATROL,
        },
    ],
    "coins": [{"x": 2, "y": 1}, {"x": 6, "y": 3}],
    "winCondition": {"requiredEnemies": 1, "requiredCoins": 2, "goal": {"x": 7, "y": 2}},
})

_reg({
    "id": "level2",
    "name": "Data Abyss",
    "description": "A maze of firewalls with two patrolling guards and a repair station.",
    "hint": (
        "Collect the cards in order, step on the repair tile at the top when "
        "health runs low, and watch the guards' patrol before engaging."
    ),
    "map": [
        "#################",
        "#.#....H#.....#.#",
        "#.#.#.#.#.#.#.#.#",
        "#...#.#...#.#...#",
        "#.#.#.#.#.#.#.#.#",
        "#################",
    ],
    "robotStart": {"position": {"x": 1, "y": 1}, "direction": {"dx": 1, "dy": 0}},
    "goals": [{"x": 15, "y": 4}],
    "enemies": [
        {
            "id": 1,
            "position": {"x": 5, "y": 3},
            "direction": {"dx": 0, "dy": 1},
            "health": 2,
            "behavior": _PATROL,
        },
        {
            "id": 2,
            "position": {"x": 9, "y": 2},
            "direction": {"dx": 0, "dy": 1},
            "health": 2,
            "behavior": _PATROL,
        },
    ],
    "coins": [{"x": 3, "y": 2}, {"x": 7, "y": 3}, {"x": 11, "y": 2}, {"x": 13, "y": 4}],
    "winCondition": {"requiredEnemies": 2, "requiredCoins": 4, "goal": {"x": 15, "y": 4}},
})


def get_level(level_id: str) -> LevelDefinition:
    level = LEVEL_REGISTRY.get(level_id)
    if level is None:
        raise LevelError(f"unknown level {level_id!r}")
    return level


class LevelManager:
    """Ordered level list with a current-level cursor."""

    __slots__ = ("_levels", "_index")

    def __init__(self, levels: list[LevelDefinition] | None = None) -> None:
        self._levels: list[LevelDefinition] = list(levels) if levels is not None else list(LEVEL_REGISTRY.values())
        if not self._levels:
            raise LevelError("level manager needs at least one level")
        self._index = 0

    @property
    def current(self) -> LevelDefinition:
        return self._levels[self._index]

    @property
    def current_index(self) -> int:
        return self._index

    @property
    def levels(self) -> list[LevelDefinition]:
        return list(self._levels)

    def __len__(self) -> int:
        return len(self._levels)

    def by_id(self, level_id: str) -> LevelDefinition | None:
        return next((lv for lv in self._levels if lv.id == level_id), None)

    def select(self, level_id: str) -> LevelDefinition:
        """Make *level_id* current and return it."""
        for i, lv in enumerate(self._levels):
            if lv.id == level_id:
                self._index = i
                return lv
        raise LevelError(f"unknown level {level_id!r}")

    def has_next(self) -> bool:
        return self._index < len(self._levels) - 1

    def advance(self) -> LevelDefinition | None:
        """Move to the next level; None when already on the last one."""
        if not self.has_next():
            return None
        self._index += 1
        return self.current
