"""Tests for JSON program execution and outcome classification."""

import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

import asyncio

import pytest

from gridbot.core.enums import NotificationKind, RunMode
from gridbot.core.models import DOWN, UP, Vector2
from gridbot.engine.script_runner import RunStatus, ScriptRunner
from tests.helpers.arena import Arena


class TestCompleted:
    @pytest.mark.asyncio
    async def test_simple_program(self):
        engine = Arena().engine()
        result = await ScriptRunner(engine).run([
            {"op": "move_forward"},
            {"op": "repeat", "times": 2, "body": [{"op": "turnRight"}]},
        ])
        assert result.status is RunStatus.COMPLETED
        assert result.steps_executed == 3
        assert result.error is None
        assert engine.state.robot.pos == Vector2(2, 1)
        # Left running after completion
        assert engine.running

    @pytest.mark.asyncio
    async def test_solves_small_level(self):
        arena = Arena()
        arena.add_coin((2, 1))
        arena.add_enemy(1, pos=(4, 1))
        arena.win_when(coins=1, enemies=1, goal=(5, 1))
        engine = arena.engine()
        result = await ScriptRunner(engine).run([
            {"op": "moveToPosition", "x": 1, "y": 0},
            {"op": "move_to_nearest_enemy"},
            {"op": "attack"},
            {"op": "move_to", "x": 4, "y": 0},
        ])
        assert result.status is RunStatus.COMPLETED
        assert result.level_completed
        assert engine.state.robot.pos == Vector2(5, 1)

    @pytest.mark.asyncio
    async def test_while_enemy_adjacent(self):
        arena = Arena()
        arena.add_enemy(1, pos=(2, 1), facing=DOWN)
        engine = arena.engine()
        result = await ScriptRunner(engine).run([
            {"op": "while_enemy_adjacent", "body": [{"op": "attack"}]},
        ])
        assert result.status is RunStatus.COMPLETED
        assert result.steps_executed == 2
        assert engine.state.defeated == 1

    @pytest.mark.asyncio
    async def test_say(self):
        arena = Arena()
        engine = arena.engine()
        await ScriptRunner(engine).run([{"op": "say", "text": "hi", "seconds": 1}])
        assert arena.events_of(NotificationKind.MESSAGE)[0].message == "hi"


class TestErrors:
    @pytest.mark.asyncio
    async def test_unknown_op(self):
        arena = Arena()
        engine = arena.engine()
        result = await ScriptRunner(engine).run([{"op": "fly"}])
        assert result.status is RunStatus.ERROR
        assert "fly" in result.error
        assert engine.mode is RunMode.STOPPED
        assert arena.events_of(NotificationKind.MESSAGE)[-1].message.startswith("Execution error")

    @pytest.mark.asyncio
    async def test_invalid_target(self):
        engine = Arena().engine()
        result = await ScriptRunner(engine).run([{"op": "move_to", "x": -1, "y": 0}])
        assert result.status is RunStatus.ERROR

    @pytest.mark.asyncio
    async def test_missing_argument(self):
        engine = Arena().engine()
        result = await ScriptRunner(engine).run([{"op": "repeat", "body": []}])
        assert result.status is RunStatus.ERROR

    @pytest.mark.asyncio
    async def test_malformed_step(self):
        engine = Arena().engine()
        result = await ScriptRunner(engine).run(["move_forward"])
        assert result.status is RunStatus.ERROR


class TestStopped:
    @pytest.mark.asyncio
    async def test_defeat_is_a_quiet_stop(self):
        arena = Arena()
        arena.add_enemy(1, pos=(1, 2), facing=UP)
        engine = arena.engine()
        result = await ScriptRunner(engine).run([
            {"op": "repeat", "times": 10, "body": [{"op": "turn_left"}]},
        ])
        assert result.status is RunStatus.STOPPED
        assert result.steps_executed == 5
        assert result.error is None
        assert arena.events_of(NotificationKind.MESSAGE) == []

    @pytest.mark.asyncio
    async def test_external_stop(self):
        engine = Arena(time_scale=1.0, player_move_delay=10.0).engine()
        task = asyncio.create_task(ScriptRunner(engine).run([{"op": "move_forward"}] * 3))
        await asyncio.sleep(0.01)
        engine.stop_game()
        result = await task
        assert result.status is RunStatus.STOPPED
        assert result.steps_executed == 1
