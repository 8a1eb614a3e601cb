"""Tests for the GameEngine Action API, pacing and run lifecycle.

Engines are built with time_scale=0 and without the autonomous NPC task, so
each awaited action runs exactly one enemy turn and nothing else.
"""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import asyncio

import pytest

from gridbot.core.entity_state import EntityState
from gridbot.core.enums import NotificationKind, RunMode
from gridbot.core.models import DOWN, LEFT, RIGHT, UP, Vector2
from gridbot.engine.errors import GameStopped, InvalidTargetError
from tests.helpers.arena import Arena


def _started(arena: Arena):
    engine = arena.engine()
    engine.start_game()
    return engine


class TestLifecycle:
    def test_load_builds_initial_state(self):
        engine = Arena().engine()
        assert engine.initialized
        assert engine.mode is RunMode.STOPPED
        assert engine.state.robot.pos == Vector2(1, 1)

    @pytest.mark.asyncio
    async def test_start_and_stop(self):
        arena = Arena()
        engine = _started(arena)
        assert engine.running
        engine.stop_game()
        assert engine.mode is RunMode.STOPPED
        modes = [e.data["mode"] for e in arena.events_of(NotificationKind.RUN_STATE)]
        assert modes == ["running", "stopped"]

    @pytest.mark.asyncio
    async def test_actions_are_noops_when_stopped(self):
        engine = Arena().engine()
        await engine.move_forward()
        await engine.turn_left()
        await engine.attack()
        assert engine.state.robot.pos == Vector2(1, 1)
        assert engine.state.robot.direction == RIGHT

    @pytest.mark.asyncio
    async def test_reset_restores_template(self):
        arena = Arena()
        arena.add_enemy(1, pos=(5, 3), facing=LEFT, behavior=["move_forward"])
        arena.add_coin((2, 1))
        engine = _started(arena)
        initial = EntityState.from_level(engine.level, engine.config).fingerprint()

        await engine.move_forward()
        await engine.turn_right()
        assert engine.state.fingerprint() != initial

        engine.reset()
        assert engine.mode is RunMode.STOPPED
        assert engine.state.fingerprint() == initial
        engine.reset()
        assert engine.state.fingerprint() == initial

    @pytest.mark.asyncio
    async def test_stop_during_delay_raises_game_stopped(self):
        engine = _started(Arena(time_scale=1.0, player_move_delay=10.0))
        task = asyncio.create_task(engine.move_forward())
        await asyncio.sleep(0.01)
        engine.stop_game()
        with pytest.raises(GameStopped):
            await task
        # The step itself landed before the delay
        assert engine.state.robot.pos == Vector2(2, 1)

    @pytest.mark.asyncio
    async def test_reset_during_delay_raises_game_stopped(self):
        engine = _started(Arena(time_scale=1.0, player_move_delay=10.0))
        task = asyncio.create_task(engine.turn_left())
        await asyncio.sleep(0.01)
        engine.reset()
        with pytest.raises(GameStopped):
            await task
        assert engine.state.robot.direction == RIGHT

    @pytest.mark.asyncio
    async def test_restart_unwinds_action_waiting_for_enemy_turn(self):
        arena = Arena()
        arena.add_enemy(1, pos=(5, 3), facing=LEFT, behavior=["move_forward"])
        engine = _started(arena)

        # Another tick holds the lock while the action reaches its enemy turn
        await engine._tick_lock.acquire()
        task = asyncio.create_task(engine.move_forward())
        for _ in range(5):
            await asyncio.sleep(0)
        assert not task.done()

        engine.stop_game()
        engine.start_game()
        engine._tick_lock.release()

        with pytest.raises(GameStopped):
            await task
        assert engine.running
        assert engine.state.enemies[0].pos == Vector2(5, 3)

    @pytest.mark.asyncio
    async def test_load_level_replaces_everything(self):
        arena = Arena()
        engine = _started(arena)
        await engine.move_forward()
        other = Arena(["####", "#..#", "####"], robot=(2, 1), facing=LEFT).level()
        engine.load_level(other)
        assert engine.mode is RunMode.STOPPED
        assert engine.world.width == 4
        assert engine.state.robot.pos == Vector2(2, 1)
        assert engine.state.robot.direction == LEFT


class TestMovement:
    @pytest.mark.asyncio
    async def test_two_steps_right(self):
        engine = _started(Arena())
        await engine.move_forward()
        await engine.move_forward()
        assert engine.state.robot.pos == Vector2(3, 1)
        assert (engine.get_x_position(), engine.get_y_position()) == (2, 0)

    @pytest.mark.asyncio
    async def test_wall_blocks(self):
        engine = _started(Arena(facing=UP))
        await engine.move_forward()
        assert engine.state.robot.pos == Vector2(1, 1)

    @pytest.mark.asyncio
    async def test_turns(self):
        engine = _started(Arena())
        await engine.turn_left()
        assert engine.state.robot.direction == UP
        await engine.turn_right()
        await engine.turn_right()
        assert engine.state.robot.direction == DOWN

    @pytest.mark.asyncio
    async def test_one_enemy_turn_per_action(self):
        arena = Arena()
        arena.add_enemy(1, pos=(5, 3), facing=LEFT, behavior=["move_forward"])
        engine = _started(arena)
        await engine.turn_left()
        assert engine.state.enemies[0].pos == Vector2(4, 3)
        await engine.turn_right()
        await engine.move_forward()
        assert engine.state.enemies[0].pos == Vector2(2, 3)

    @pytest.mark.asyncio
    async def test_coin_pickup(self):
        arena = Arena()
        arena.add_coin((2, 1))
        engine = _started(arena)
        await engine.move_forward()
        assert engine.state.collected == {Vector2(2, 1)}
        counters = [e.data for e in arena.events_of(NotificationKind.COIN_COUNTER)]
        assert counters[-1] == {"collected": 1, "total": 1}

    @pytest.mark.asyncio
    async def test_coin_counted_once(self):
        arena = Arena()
        arena.add_coin((2, 1))
        engine = _started(arena)
        await engine.move_forward()
        await engine.turn_left()
        await engine.turn_left()
        await engine.move_forward()
        await engine.turn_left()
        await engine.turn_left()
        await engine.move_forward()
        assert len(engine.state.collected) == 1

    @pytest.mark.asyncio
    async def test_health_restore_tile(self):
        arena = Arena(["#####", "#.H.#", "#####"])
        engine = _started(arena)
        engine.state.robot.health = 2.5
        await engine.move_forward()
        assert engine.state.robot.health == 6.0
        assert len(arena.events_of(NotificationKind.HEALTH_RESTORED)) == 1

    @pytest.mark.asyncio
    async def test_health_restore_skipped_at_full_health(self):
        arena = Arena(["#####", "#.H.#", "#####"])
        engine = _started(arena)
        await engine.move_forward()
        assert arena.events_of(NotificationKind.HEALTH_RESTORED) == []

    @pytest.mark.asyncio
    async def test_adjacent_enemy_turns_instead_of_moving(self):
        arena = Arena(facing=DOWN)
        arena.add_enemy(1, pos=(2, 1), facing=UP, behavior=["turn_left"])
        engine = _started(arena)
        await engine.move_forward()
        assert engine.state.robot.pos == Vector2(1, 1)
        assert engine.state.robot.direction == RIGHT
        # No enemy turn was taken
        assert engine.state.enemies[0].behavior_index == 0
        assert engine.state.robot.health == 6.0


class TestCombat:
    @pytest.mark.asyncio
    async def test_attack_attack_defeats_and_wins(self):
        arena = Arena()
        arena.add_enemy(1, pos=(2, 1), facing=LEFT)
        arena.win_when(enemies=1)
        engine = _started(arena)

        await engine.attack()
        assert engine.state.enemies[0].health == 1.0
        assert not engine.level_completed
        # The enemy answered once
        assert engine.state.robot.health == pytest.approx(4.8)

        await engine.attack()
        assert not engine.state.enemies[0].alive
        assert engine.state.defeated == 1
        assert engine.level_completed
        assert len(arena.events_of(NotificationKind.LEVEL_COMPLETE)) == 1

    @pytest.mark.asyncio
    async def test_attack_from_behind_deals_four(self):
        arena = Arena()
        arena.add_enemy(1, pos=(2, 1), facing=RIGHT)
        engine = _started(arena)
        await engine.attack()
        assert engine.state.enemies[0].health == -2.0
        assert engine.state.defeated == 1
        assert len(arena.events_of(NotificationKind.BACK_ATTACK)) == 1

    @pytest.mark.asyncio
    async def test_robot_defeat_stops_the_run(self):
        arena = Arena()
        arena.add_enemy(1, pos=(1, 2), facing=UP)
        engine = _started(arena)
        for _ in range(4):
            await engine.turn_right()
        assert engine.state.robot.alive
        with pytest.raises(GameStopped):
            await engine.turn_right()
        assert not engine.state.robot.alive
        assert engine.mode is RunMode.STOPPED
        assert len(arena.events_of(NotificationKind.PLAYER_DEFEATED)) == 1

    @pytest.mark.asyncio
    async def test_face_adjacent_enemy(self):
        arena = Arena(robot=(2, 2))
        arena.add_enemy(1, pos=(2, 3), facing=RIGHT)
        engine = _started(arena)
        await engine.face_enemy()
        assert engine.state.robot.direction == DOWN

    @pytest.mark.asyncio
    async def test_face_distant_enemy_dominant_axis(self):
        arena = Arena(robot=(1, 1), facing=UP)
        arena.add_enemy(1, pos=(4, 2))
        engine = _started(arena)
        await engine.face_enemy()
        assert engine.state.robot.direction == RIGHT

        arena = Arena(robot=(1, 1), facing=UP)
        arena.add_enemy(1, pos=(2, 3))
        engine = _started(arena)
        await engine.face_enemy()
        assert engine.state.robot.direction == DOWN

    @pytest.mark.asyncio
    async def test_face_enemy_without_enemies(self):
        engine = _started(Arena())
        await engine.face_enemy()
        assert engine.state.robot.direction == RIGHT


class TestPathMoves:
    @pytest.mark.asyncio
    async def test_move_to_position(self):
        engine = _started(Arena())
        await engine.move_to_position(2, 1)
        assert engine.state.robot.pos == Vector2(3, 2)
        assert engine.get_position() == Vector2(2, 1)
        assert engine.state.robot.direction == DOWN

    @pytest.mark.asyncio
    async def test_move_to_wall_raises(self):
        engine = _started(Arena())
        with pytest.raises(InvalidTargetError):
            await engine.move_to_position(-1, 0)

    @pytest.mark.asyncio
    async def test_move_out_of_bounds_raises(self):
        engine = _started(Arena())
        with pytest.raises(InvalidTargetError):
            await engine.move_to_position(40, 40)

    @pytest.mark.asyncio
    async def test_move_to_nearest_enemy_stops_adjacent(self):
        arena = Arena()
        arena.add_enemy(1, pos=(5, 1), facing=RIGHT)
        engine = _started(arena)
        await engine.move_to_nearest_enemy()
        assert engine.state.robot.pos == Vector2(4, 1)
        assert engine.is_enemy_adjacent()
        # Approached from behind
        await engine.attack()
        assert not engine.state.enemies[0].alive

    @pytest.mark.asyncio
    async def test_move_to_nearest_enemy_without_enemies(self):
        engine = _started(Arena())
        await engine.move_to_nearest_enemy()
        assert engine.state.robot.pos == Vector2(1, 1)


class TestSensorsAndMessages:
    def test_sensors(self):
        arena = Arena()
        arena.add_enemy(1, pos=(4, 2))
        engine = arena.engine()
        assert not engine.is_enemy_adjacent()
        assert (engine.get_enemy_x(), engine.get_enemy_y()) == (4, 2)
        assert engine.get_position() == Vector2(0, 0)
        assert engine.get_player_health() == 6.0
        assert engine.get_player_max_health() == 6.0

    def test_enemy_sensors_without_enemies(self):
        engine = Arena().engine()
        assert (engine.get_enemy_x(), engine.get_enemy_y()) == (-1, -1)

    @pytest.mark.asyncio
    async def test_say_message(self):
        arena = Arena()
        engine = _started(arena)
        await engine.say_message("hello", 2)
        messages = arena.events_of(NotificationKind.MESSAGE)
        assert len(messages) == 1
        assert messages[0].message == "hello"
        assert messages[0].duration == 2.0


class TestAutonomousEnemies:
    @pytest.mark.asyncio
    async def test_enemies_move_between_actions(self):
        arena = Arena(time_scale=1.0, autonomous_npc=True, enemy_move_delay=0.01)
        arena.add_enemy(1, pos=(5, 3), facing=UP, behavior=["turn_left"])
        engine = arena.engine()
        engine.start_game()
        assert engine.npc_task_pending
        await asyncio.sleep(0.1)
        assert len(arena.events_of(NotificationKind.STATE_CHANGED)) > 1
        await engine.shutdown()
        assert not engine.npc_task_pending

    @pytest.mark.asyncio
    async def test_stop_cancels_npc_task(self):
        arena = Arena(time_scale=1.0, autonomous_npc=True)
        arena.add_enemy(1, pos=(5, 3), behavior=["turn_left"])
        engine = arena.engine()
        engine.start_game()
        assert engine.npc_task_pending
        engine.stop_game()
        assert not engine.npc_task_pending

    @pytest.mark.asyncio
    async def test_no_npc_task_without_enemies(self):
        engine = Arena(autonomous_npc=True).engine()
        engine.start_game()
        assert not engine.npc_task_pending
