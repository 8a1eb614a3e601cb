"""GameEngine — turn scheduler and Action API.

The external script drives the robot one awaited call at a time.  Each
action mutates the entity state, pays its pacing delay, then (while RUNNING)
runs exactly one NPC tick before returning, so from the caller's side every
action is atomic end-to-end.

Between player actions a single autonomous NPC task keeps the enemies moving:

    sleep(pace) -> tick -> sleep(pace) -> tick ...   while RUNNING

Ticks are serialized by one lock.  A player-driven NPC phase takes the lock,
cancels the pending autonomous task, ticks, waits its pace and schedules a
fresh task.  There is never more than one live task handle.

Every suspension waits on the run's CancelToken.  stop_game() / reset()
cancel the token and the task synchronously, so any suspended caller unwinds
with GameStopped and nothing stays scheduled.
"""

from __future__ import annotations

import asyncio
import contextlib
import functools
import logging
from typing import TYPE_CHECKING

from gridbot.actions.combat import CombatResolver
from gridbot.actions.move import MoveAction
from gridbot.ai.behavior import IDLE, EnemyBehaviorEngine, TickReport
from gridbot.ai.pathfinding import TURN_LEFT, Pathfinder, plan_turn
from gridbot.config import EngineConfig
from gridbot.core.entity_state import EntityState
from gridbot.core.enums import NotificationKind, RunMode, TickOutcome
from gridbot.core.level import validate_level
from gridbot.core.models import DOWN, LEFT, RIGHT, UP, Vector2
from gridbot.engine.cancellation import CancelToken
from gridbot.engine.errors import GameStopped, InvalidTargetError
from gridbot.engine.preview import PreviewSession, PreviewSimulator
from gridbot.engine.win_condition import WinConditionEvaluator
from gridbot.utils.event_log import EventLog

if TYPE_CHECKING:
    from gridbot.core.grid import WorldMap
    from gridbot.core.level import LevelDefinition

logger = logging.getLogger(__name__)


class GameEngine:
    """Owns the level, the entity state and all pacing for one game view."""

    def __init__(
        self,
        config: EngineConfig | None = None,
        level: LevelDefinition | None = None,
        events: EventLog | None = None,
    ) -> None:
        self._config = config or EngineConfig()
        self._events = events or EventLog()
        self._behavior = EnemyBehaviorEngine(self._config, self._events)
        self._combat = CombatResolver(self._config, self._events)
        self._previewer = PreviewSimulator(self._behavior, self._config)

        # Per-level components (built in load_level)
        self._level: LevelDefinition | None = None
        self._world: WorldMap | None = None
        self._moves: MoveAction | None = None
        self._pathfinder: Pathfinder | None = None
        self._win: WinConditionEvaluator | None = None
        self.state: EntityState | None = None

        # Run control
        self._mode = RunMode.STOPPED
        self._run_token: CancelToken | None = None
        self._npc_task: asyncio.Task[None] | None = None
        self._tick_lock = asyncio.Lock()
        self._preview: PreviewSession | None = None

        if level is not None:
            self.load_level(level)

    # -- public properties --

    @property
    def config(self) -> EngineConfig:
        return self._config

    @property
    def events(self) -> EventLog:
        return self._events

    @property
    def level(self) -> LevelDefinition | None:
        return self._level

    @property
    def world(self) -> WorldMap | None:
        return self._world

    @property
    def mode(self) -> RunMode:
        return self._mode

    @property
    def initialized(self) -> bool:
        return self._level is not None and self.state is not None

    @property
    def running(self) -> bool:
        return self._mode is RunMode.RUNNING

    @property
    def previewing(self) -> bool:
        return self._mode is RunMode.PREVIEWING

    @property
    def level_completed(self) -> bool:
        return self._win is not None and self._win.completed

    @property
    def total_coins(self) -> int:
        return self._moves.total_coins if self._moves else 0

    @property
    def npc_task_pending(self) -> bool:
        return self._npc_task is not None and not self._npc_task.done()

    # -- lifecycle --

    def load_level(self, level: LevelDefinition) -> None:
        """Replace map, win condition and template, then reset."""
        world = validate_level(level)
        self.stop_game()
        self._level = level
        self._world = world
        self._moves = MoveAction(world, level.coin_positions(), self._config, self._events)
        self._pathfinder = Pathfinder(world)
        self._win = WinConditionEvaluator(level.win_condition, self._config, self._events)
        logger.info("Loaded level %s (%s)", level.id, level.name)
        self.reset()

    def reset(self) -> None:
        """Stop, then rebuild every entity from the level template."""
        if self._level is None:
            logger.warning("reset ignored: no level loaded")
            return
        self.stop_game()
        self.state = EntityState.from_level(self._level, self._config)
        self._win.reset()
        logger.info("Reset level %s", self._level.id)
        self._emit_state_changed()
        self._events.emit(NotificationKind.COIN_COUNTER, collected=0, total=self.total_coins)

    def start_game(self) -> None:
        """Enter RUNNING and start the autonomous NPC task. Needs a running event loop."""
        if not self.initialized:
            logger.warning("start_game ignored: no level loaded")
            return
        if self._preview is not None:
            self.abort_preview()
        if self._mode is RunMode.RUNNING:
            return
        self._mode = RunMode.RUNNING
        self._run_token = CancelToken()
        self._cancel_npc_task()
        logger.info("Game started on level %s", self._level.id)
        self._events.emit(NotificationKind.RUN_STATE, mode=self._mode.name.lower())
        if self.state.enemies:
            self._schedule_npc_loop(0.0)

    def stop_game(self) -> None:
        """Leave RUNNING. Safe while a tick or delay is outstanding."""
        if self._preview is not None:
            self.abort_preview()
        was = self._mode
        self._mode = RunMode.STOPPED
        if self._run_token is not None:
            self._run_token.cancel("stopped")
        self._cancel_npc_task()
        if was is not RunMode.STOPPED:
            logger.info("Game stopped")
            self._events.emit(NotificationKind.RUN_STATE, mode=self._mode.name.lower())

    async def shutdown(self) -> None:
        """Stop and wait for the NPC task to unwind."""
        task = self._npc_task
        self.stop_game()
        if task is not None and task is not asyncio.current_task():
            with contextlib.suppress(asyncio.CancelledError):
                await task

    # -- suspension --

    async def _delay(self, seconds: float, token: CancelToken | None = None) -> None:
        """Pacing delay; raises GameStopped if the run ends before or during it.

        *token* pins the delay to the run that issued it; a stop followed by a
        restart still unwinds the older caller.
        """
        if token is None:
            token = self._run_token
        if not self._is_current_run(token):
            raise GameStopped()
        if await token.sleep(self._config.scaled(seconds)) or not self._is_current_run(token):
            raise GameStopped()

    def _is_current_run(self, token: CancelToken | None) -> bool:
        return (
            self._mode is RunMode.RUNNING
            and token is not None
            and token is self._run_token
            and not token.cancelled
        )

    # -- NPC scheduling --

    def _pace_for(self, report: TickReport) -> float:
        if report.outcome is TickOutcome.ATTACK:
            return self._config.enemy_attack_delay
        return self._config.enemy_move_delay

    def _cancel_npc_task(self) -> None:
        task, self._npc_task = self._npc_task, None
        if task is not None and not task.done() and task is not asyncio.current_task():
            task.cancel()

    def _schedule_npc_loop(self, first_delay: float) -> None:
        self._cancel_npc_task()
        if not self._config.autonomous_npc:
            return
        if self._mode is not RunMode.RUNNING or not self.state.robot.alive:
            return
        self._npc_task = asyncio.get_running_loop().create_task(
            self._npc_loop(first_delay), name="npc-loop",
        )

    async def _npc_loop(self, delay: float) -> None:
        token = self._run_token
        try:
            while self._is_current_run(token) and self.state.robot.alive:
                await self._delay(delay, token)
                async with self._tick_lock:
                    if not self._is_current_run(token):
                        break
                    report = await self._run_tick(token)
                delay = self._pace_for(report)
        except GameStopped:
            logger.debug("NPC loop unwound: game stopped")

    async def _run_tick(self, token: CancelToken) -> TickReport:
        report = await self._behavior.tick(
            self.state, self._world, functools.partial(self._delay, token=token),
        )
        if report.player_defeated:
            self.stop_game()
        if report is not IDLE:
            self._emit_state_changed()
        return report

    async def _npc_phase(self) -> None:
        """One player-triggered NPC tick plus its pace delay."""
        token = self._run_token
        if not self._is_current_run(token):
            return
        async with self._tick_lock:
            # Stopped (and maybe restarted) while waiting for the lock
            if not self._is_current_run(token):
                raise GameStopped()
            self._cancel_npc_task()
            report = await self._run_tick(token)
        pace = self._pace_for(report)
        await self._delay(pace, token)
        self._schedule_npc_loop(pace)

    # -- helpers --

    def _can_act(self, action: str) -> bool:
        if not self.initialized:
            logger.warning("%s ignored: no level loaded", action)
            return False
        if self._mode is not RunMode.RUNNING:
            logger.warning("%s ignored: game is not running", action)
            return False
        return True

    def _emit_state_changed(self) -> None:
        if self.state is None:
            return
        robot = self.state.robot
        self._events.emit(
            NotificationKind.STATE_CHANGED,
            x=robot.pos.x,
            y=robot.pos.y,
            health=robot.health,
            collected=len(self.state.collected),
            defeated=self.state.defeated,
        )

    def _check_win(self) -> bool:
        return self._win.check(self.state, self._level.name)

    # -- Action API: movement --

    async def move_forward(self) -> None:
        if not self._can_act("move_forward"):
            return
        state = self.state
        robot = state.robot

        if state.adjacent_enemy_direction(robot.pos) is not None:
            await self.face_enemy()
            return

        if state.enemy_at(robot.front) is not None:
            await self.face_enemy()
            await self._delay(self._config.player_move_delay)
            await self._npc_phase()
            return

        step = self._moves.step_forward(state)
        if step.moved:
            logger.debug("Robot moved to %s", robot.pos)
            self._check_win()
            self._emit_state_changed()

        await self._delay(self._config.player_move_delay)
        await self._npc_phase()

    async def turn_left(self) -> None:
        if not self._can_act("turn_left"):
            return
        robot = self.state.robot
        robot.direction = robot.direction.turned_left()
        await self._after_turn()

    async def turn_right(self) -> None:
        if not self._can_act("turn_right"):
            return
        robot = self.state.robot
        robot.direction = robot.direction.turned_right()
        await self._after_turn()

    async def _after_turn(self) -> None:
        self._emit_state_changed()
        await self._delay(self._config.player_move_delay)
        await self._npc_phase()

    async def turn_to_direction(self, target: Vector2) -> None:
        """Issue the left/right turns that face *target*."""
        for turn in plan_turn(self.state.robot.direction, target):
            if turn == TURN_LEFT:
                await self.turn_left()
            else:
                await self.turn_right()

    # -- Action API: combat --

    async def attack(self) -> None:
        if not self._can_act("attack"):
            return
        result = self._combat.resolve(self.state)
        if result.hit:
            self._check_win()
            self._emit_state_changed()
        await self._delay(self._config.player_attack_delay)
        await self._npc_phase()

    async def face_enemy(self) -> None:
        """Face an adjacent enemy, else the nearest one along its dominant axis."""
        if not self._can_act("face_enemy"):
            return
        token = self._run_token
        state = self.state
        robot = state.robot

        direction = state.adjacent_enemy_direction(robot.pos)
        if direction is None:
            target = state.nearest_enemy(robot.pos)
            if target is None:
                logger.debug("face_enemy: no living enemy")
                return
            d = target.pos - robot.pos
            if abs(d.x) >= abs(d.y):
                direction = RIGHT if d.x > 0 else LEFT
            else:
                direction = DOWN if d.y > 0 else UP

        if robot.direction != direction:
            robot.direction = direction
            self._emit_state_changed()
        # Yield to the event loop without pacing
        await asyncio.sleep(0)
        if not self._is_current_run(token):
            raise GameStopped()

    # -- Action API: pathfinding --

    async def move_to_position(self, x: int, y: int) -> None:
        """Walk the shortest path to (x, y), relative to the map's top-left walkable cell."""
        if not self._can_act("move_to_position"):
            return
        target = self._world.to_absolute(Vector2(x, y))
        if not self._world.in_bounds(target):
            raise InvalidTargetError(f"target ({x}, {y}) is outside the map (absolute {target})")
        if not self._world.is_walkable(target):
            raise InvalidTargetError(f"target ({x}, {y}) is a wall (absolute {target})")

        robot = self.state.robot
        steps = self._pathfinder.find_path(robot.pos, target, self.state.occupied())
        if steps is None:
            logger.warning("move_to_position: no path from %s to %s", robot.pos, target)
            return
        logger.info("Moving from %s to %s in %d steps", robot.pos, target, len(steps))
        await self._follow(steps, stop_when_adjacent=False)

    async def move_to_nearest_enemy(self) -> None:
        if not self._can_act("move_to_nearest_enemy"):
            return
        robot = self.state.robot
        target = self.state.nearest_enemy(robot.pos)
        if target is None:
            logger.warning("move_to_nearest_enemy: no living enemy")
            return
        steps = self._pathfinder.find_path(robot.pos, target.pos)
        if steps is None:
            logger.warning("move_to_nearest_enemy: no path from %s to %s", robot.pos, target.pos)
            return
        logger.info("Approaching enemy %d at %s in %d steps", target.id, target.pos, len(steps))
        await self._follow(steps, stop_when_adjacent=True)

    async def _follow(self, steps: list[Vector2], stop_when_adjacent: bool) -> None:
        for step in steps:
            if self._mode is not RunMode.RUNNING:
                logger.info("Path replay halted: game is not running")
                return
            await self.turn_to_direction(step)
            await self.move_forward()
            if stop_when_adjacent and self.is_enemy_adjacent():
                logger.debug("Adjacent to an enemy; stopping")
                return

    # -- Action API: misc --

    async def say_message(self, text: str, seconds: float = 3.0) -> None:
        if not self._can_act("say_message"):
            return
        self._events.emit(NotificationKind.MESSAGE, str(text), duration=float(seconds))
        await self._delay(seconds * self._config.say_delay_per_second)

    # -- sensors --

    def is_enemy_adjacent(self) -> bool:
        if not self.initialized:
            logger.warning("is_enemy_adjacent: no level loaded")
            return False
        return self.state.adjacent_enemy_direction(self.state.robot.pos) is not None

    def get_enemy_x(self) -> int:
        if not self.initialized:
            return -1
        enemy = self.state.nearest_enemy(self.state.robot.pos)
        return enemy.pos.x if enemy else -1

    def get_enemy_y(self) -> int:
        if not self.initialized:
            return -1
        enemy = self.state.nearest_enemy(self.state.robot.pos)
        return enemy.pos.y if enemy else -1

    def get_position(self) -> Vector2:
        """Robot position relative to the map's top-left walkable cell."""
        if not self.initialized:
            return Vector2(-1, -1)
        return self._world.to_relative(self.state.robot.pos)

    def get_x_position(self) -> int:
        return self.get_position().x

    def get_y_position(self) -> int:
        return self.get_position().y

    def get_player_health(self) -> float:
        if not self.initialized:
            return 0
        return self.state.robot.health

    def get_player_max_health(self) -> float:
        return self._config.robot_max_health

    # -- preview --

    async def preview_enemy_movement(self, cycles: int | None = None) -> int:
        """Play enemy scripts forward on a scratch copy, then restore.

        Returns the number of enemy steps simulated.  Raises PreviewAborted if
        cancelled; the original state is restored either way.
        """
        if not self.initialized:
            logger.warning("preview ignored: no level loaded")
            return 0
        if cycles is None:
            cycles = self._config.default_preview_cycles
        if self._preview is not None:
            self.abort_preview()
        self.stop_game()

        session = PreviewSession(original=self.state, scratch=self.state.clone(), token=CancelToken())
        self._preview = session
        self.state = session.scratch
        self._mode = RunMode.PREVIEWING
        logger.info("Previewing %d enemy cycle(s)", cycles)
        self._events.emit(NotificationKind.RUN_STATE, mode=self._mode.name.lower())
        try:
            return await self._previewer.run(session, self._world, cycles, on_step=self._emit_state_changed)
        finally:
            self._close_preview(session)

    def abort_preview(self) -> None:
        session = self._preview
        if session is None:
            return
        logger.info("Preview aborted")
        session.token.cancel("aborted")
        self._close_preview(session)

    def _close_preview(self, session: PreviewSession) -> None:
        if session.closed:
            return
        session.closed = True
        if self._preview is session:
            self._preview = None
        self.state = session.original
        self._cancel_npc_task()
        self._mode = RunMode.STOPPED
        self._emit_state_changed()
        self._events.emit(NotificationKind.RUN_STATE, mode=self._mode.name.lower())
