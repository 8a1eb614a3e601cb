"""Tests for the scripted enemy AI: engagement, scripts and enemy attacks."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import pytest

from gridbot.ai.behavior import EnemyBehaviorEngine
from gridbot.core.entity_state import EntityState
from gridbot.core.enums import NotificationKind, TickOutcome
from gridbot.core.models import DOWN, LEFT, RIGHT, UP, Vector2
from tests.helpers.arena import Arena


async def _no_wait(seconds: float) -> None:
    return None


def _build(arena: Arena):
    level = arena.level()
    state = EntityState.from_level(level, arena.config)
    return state, level.build_map(), EnemyBehaviorEngine(arena.config, arena.events)


class TestEngagement:
    def _pair(self, robot, enemy_facing):
        arena = Arena(robot=robot)
        arena.add_enemy(1, pos=(3, 2), facing=enemy_facing)
        state, _, _ = _build(arena)
        return state.enemies[0], state.robot

    def test_robot_in_front(self):
        enemy, robot = self._pair((2, 2), LEFT)
        assert EnemyBehaviorEngine.is_engaged(enemy, robot)

    def test_robot_beside(self):
        enemy, robot = self._pair((3, 1), LEFT)
        assert EnemyBehaviorEngine.is_engaged(enemy, robot)

    def test_robot_behind(self):
        enemy, robot = self._pair((4, 2), LEFT)
        assert not EnemyBehaviorEngine.is_engaged(enemy, robot)

    def test_robot_too_far(self):
        enemy, robot = self._pair((1, 2), LEFT)
        assert not EnemyBehaviorEngine.is_engaged(enemy, robot)

    def test_diagonal_is_not_adjacent(self):
        enemy, robot = self._pair((2, 1), LEFT)
        assert not EnemyBehaviorEngine.is_engaged(enemy, robot)


class TestScript:
    def test_move_forward(self):
        arena = Arena(robot=(1, 3))
        arena.add_enemy(1, pos=(2, 1), facing=RIGHT, behavior=["move_forward", "turn_left"])
        state, world, ai = _build(arena)
        enemy = state.enemies[0]
        ai.execute_behavior(enemy, state, world)
        assert enemy.pos == Vector2(3, 1)
        assert enemy.behavior_index == 1

    def test_turns_and_wraparound(self):
        arena = Arena(robot=(1, 3))
        arena.add_enemy(1, pos=(3, 2), facing=RIGHT, behavior=["turn_left", "turn_right", "turn_right"])
        state, world, ai = _build(arena)
        enemy = state.enemies[0]
        ai.execute_behavior(enemy, state, world)
        assert enemy.direction == UP
        ai.execute_behavior(enemy, state, world)
        assert enemy.direction == RIGHT
        ai.execute_behavior(enemy, state, world)
        assert enemy.direction == DOWN
        assert enemy.behavior_index == 0

    def test_blocked_turns_clockwise_first(self):
        arena = Arena(robot=(5, 3))
        arena.add_enemy(1, pos=(1, 1), facing=UP, behavior=["move_forward"])
        state, world, ai = _build(arena)
        enemy = state.enemies[0]
        ai.execute_behavior(enemy, state, world)
        assert enemy.pos == Vector2(1, 1)
        assert enemy.direction == RIGHT
        assert enemy.behavior_index == 0

    def test_blocked_falls_back_to_counter_clockwise(self):
        arena = Arena(robot=(1, 3))
        arena.add_enemy(1, pos=(5, 1), facing=UP, behavior=["move_forward"])
        state, world, ai = _build(arena)
        ai.execute_behavior(state.enemies[0], state, world)
        assert state.enemies[0].direction == LEFT

    def test_dead_end_reverses(self):
        arena = Arena(["#####", "#...#", "#####"], robot=(1, 1))
        arena.add_enemy(1, pos=(3, 1), facing=RIGHT, behavior=["move_forward", "turn_left"])
        state, world, ai = _build(arena)
        enemy = state.enemies[0]
        ai.execute_behavior(enemy, state, world)
        assert enemy.pos == Vector2(3, 1)
        assert enemy.direction == LEFT
        assert enemy.behavior_index == 1

    def test_boxed_in_keeps_direction_and_advances(self):
        arena = Arena(["#####", "#.#.#", "#####"], robot=(1, 1))
        arena.add_enemy(1, pos=(3, 1), facing=UP, behavior=["move_forward", "turn_left"])
        state, world, ai = _build(arena)
        enemy = state.enemies[0]
        ai.execute_behavior(enemy, state, world)
        assert enemy.pos == Vector2(3, 1)
        assert enemy.direction == UP
        assert enemy.behavior_index == 1

    def test_blocked_by_other_enemy(self):
        arena = Arena(robot=(1, 3))
        arena.add_enemy(1, pos=(2, 2), facing=RIGHT, behavior=["move_forward"])
        arena.add_enemy(2, pos=(3, 2), facing=UP)
        state, world, ai = _build(arena)
        enemy = state.enemies[0]
        ai.execute_behavior(enemy, state, world)
        assert enemy.pos == Vector2(2, 2)
        assert enemy.direction == DOWN

    def test_dead_enemy_does_not_block(self):
        arena = Arena(robot=(5, 3))
        arena.add_enemy(1, pos=(2, 2), facing=RIGHT, behavior=["move_forward"])
        arena.add_enemy(2, pos=(3, 2), facing=UP)
        state, world, ai = _build(arena)
        state.enemies[1].health = 0
        ai.execute_behavior(state.enemies[0], state, world)
        assert state.enemies[0].pos == Vector2(3, 2)

    def test_engaged_enemy_holds_position(self):
        arena = Arena(robot=(3, 1))
        arena.add_enemy(1, pos=(3, 2), facing=RIGHT, behavior=["move_forward", "turn_left"])
        state, world, ai = _build(arena)
        enemy = state.enemies[0]
        ai.execute_behavior(enemy, state, world)
        assert enemy.pos == Vector2(3, 2)
        assert enemy.behavior_index == 1


class TestTick:
    @pytest.mark.asyncio
    async def test_only_first_living_enemy_acts(self):
        arena = Arena(robot=(5, 3))
        arena.add_enemy(1, pos=(1, 1), facing=RIGHT, behavior=["move_forward"])
        arena.add_enemy(2, pos=(1, 2), facing=RIGHT, behavior=["move_forward"])
        state, world, ai = _build(arena)
        report = await ai.tick(state, world, _no_wait)
        assert report.outcome is TickOutcome.MOVE
        assert report.enemy_id == 1
        assert state.enemies[0].pos == Vector2(2, 1)
        assert state.enemies[1].pos == Vector2(1, 2)

    @pytest.mark.asyncio
    async def test_dead_first_enemy_is_skipped(self):
        arena = Arena(robot=(5, 3))
        arena.add_enemy(1, pos=(1, 1), facing=RIGHT, behavior=["move_forward"])
        arena.add_enemy(2, pos=(1, 2), facing=RIGHT, behavior=["move_forward"])
        state, world, ai = _build(arena)
        state.enemies[0].health = 0
        report = await ai.tick(state, world, _no_wait)
        assert report.enemy_id == 2
        assert state.enemies[1].pos == Vector2(2, 2)

    @pytest.mark.asyncio
    async def test_idle_without_enemies_or_script(self):
        arena = Arena()
        state, world, ai = _build(arena)
        assert (await ai.tick(state, world, _no_wait)).outcome is TickOutcome.IDLE

        arena = Arena(robot=(5, 3))
        arena.add_enemy(1, pos=(1, 1))
        state, world, ai = _build(arena)
        assert (await ai.tick(state, world, _no_wait)).outcome is TickOutcome.IDLE

    @pytest.mark.asyncio
    async def test_engaged_enemy_turns_and_attacks(self):
        arena = Arena(robot=(3, 1))
        arena.add_enemy(1, pos=(3, 2), facing=RIGHT, behavior=["move_forward"])
        state, world, ai = _build(arena)
        report = await ai.tick(state, world, _no_wait)
        assert report.outcome is TickOutcome.ATTACK
        assert report.hit
        assert state.enemies[0].direction == UP
        assert state.robot.health == pytest.approx(4.8)
        assert state.enemies[0].behavior_index == 0

    @pytest.mark.asyncio
    async def test_engaged_enemy_preempts_script_of_earlier_enemy(self):
        arena = Arena(robot=(5, 3))
        arena.add_enemy(1, pos=(1, 1), facing=RIGHT, behavior=["move_forward"])
        arena.add_enemy(2, pos=(5, 2), facing=DOWN)
        state, world, ai = _build(arena)
        report = await ai.tick(state, world, _no_wait)
        assert report.enemy_id == 2
        assert report.outcome is TickOutcome.ATTACK
        assert state.enemies[0].pos == Vector2(1, 1)

    @pytest.mark.asyncio
    async def test_attack_misses_if_robot_leaves_during_telegraph(self):
        arena = Arena(robot=(3, 1))
        arena.add_enemy(1, pos=(3, 2), facing=UP)
        state, world, ai = _build(arena)

        async def dodge(seconds: float) -> None:
            state.robot.pos = Vector2(4, 1)

        report = await ai.tick(state, world, dodge)
        assert report.outcome is TickOutcome.ATTACK
        assert not report.hit
        assert state.robot.health == 6.0

    @pytest.mark.asyncio
    async def test_telegraph_delay_requested(self):
        arena = Arena(robot=(3, 1))
        arena.add_enemy(1, pos=(3, 2), facing=UP)
        state, world, ai = _build(arena)
        requested = []

        async def record(seconds: float) -> None:
            requested.append(seconds)

        await ai.tick(state, world, record)
        assert requested == [arena.config.enemy_telegraph_delay]

    @pytest.mark.asyncio
    async def test_robot_defeated_on_fifth_hit(self):
        arena = Arena(robot=(3, 1))
        arena.add_enemy(1, pos=(3, 2), facing=UP)
        state, world, ai = _build(arena)
        for _ in range(4):
            report = await ai.tick(state, world, _no_wait)
            assert not report.player_defeated
        assert state.robot.alive
        report = await ai.tick(state, world, _no_wait)
        assert report.player_defeated
        assert not state.robot.alive
        assert len(arena.events_of(NotificationKind.PLAYER_DEFEATED)) == 1
