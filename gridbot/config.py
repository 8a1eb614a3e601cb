"""Engine configuration with sensible defaults."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class EngineConfig:
    """Immutable configuration for a game engine instance."""

    # Level
    default_level: str = "level1"

    # Health
    robot_max_health: float = 6.0
    enemy_max_health: float = 2.0

    # Combat
    normal_damage: float = 1.0
    back_attack_damage: float = 4.0
    enemy_attack_damage: float = 1.2

    # Pacing (seconds, before time_scale)
    player_move_delay: float = 0.3
    player_attack_delay: float = 0.3
    enemy_move_delay: float = 0.5           # NPC pace after a scripted step
    enemy_attack_delay: float = 0.3         # NPC pace after an attack
    enemy_telegraph_delay: float = 0.3      # Pause before an enemy hit lands
    say_delay_per_second: float = 0.25      # sayMessage suspends this much per requested second

    # Multiplier applied to every delay; 0 makes the engine run without waiting
    time_scale: float = 1.0

    # Free-running NPC task between player actions
    autonomous_npc: bool = True

    # Notification durations (seconds)
    toast_short: float = 2.0
    toast_long: float = 5.0

    # Preview
    default_preview_cycles: int = 2

    # Logging
    log_level: str = "INFO"

    def scaled(self, seconds: float) -> float:
        return max(seconds * self.time_scale, 0.0)
