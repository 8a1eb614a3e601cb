"""Entry point: ``python -m gridbot``.

Supports two modes:
  - ``python -m gridbot serve``             → Launch the FastAPI server (default)
  - ``python -m gridbot run PROGRAM.json``  → Run one program headless and print the result
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Turn-paced grid robot game engine")
    sub = parser.add_subparsers(dest="command")

    # --- Server mode (default) ---
    srv = sub.add_parser("serve", help="Start the FastAPI server (default)")
    srv.add_argument("--host", type=str, default="127.0.0.1")
    srv.add_argument("--port", type=int, default=8000)
    srv.add_argument("--level", type=str, default="level1", help="Built-in level to load first")
    srv.add_argument("--time-scale", type=float, default=1.0, help="Multiplier applied to every delay")
    srv.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING"])

    # --- Headless program run ---
    run = sub.add_parser("run", help="Run a JSON program against a level")
    run.add_argument("program", type=str, help="Path to a JSON list of program steps")
    run.add_argument("--level", type=str, default="level1", help="Built-in level id or path to a level JSON file")
    run.add_argument("--time-scale", type=float, default=1.0, help="Multiplier applied to every delay")
    run.add_argument("--log-level", type=str, default="INFO", choices=["DEBUG", "INFO", "WARNING"])

    return parser


def _run_server(args: argparse.Namespace) -> None:
    import uvicorn

    from gridbot.api.app import create_app
    from gridbot.config import EngineConfig

    config = EngineConfig(
        default_level=args.level,
        time_scale=args.time_scale,
        log_level=args.log_level,
    )
    app = create_app(config)
    uvicorn.run(app, host=args.host, port=args.port, log_level=args.log_level.lower())


def _resolve_level(ref: str):
    from gridbot.core.level import load_level_file
    from gridbot.core.levels import get_level

    if ref.endswith(".json") or Path(ref).is_file():
        return load_level_file(ref)
    return get_level(ref)


async def _run_program(args: argparse.Namespace) -> int:
    from gridbot.config import EngineConfig
    from gridbot.engine.game_engine import GameEngine
    from gridbot.engine.script_runner import RunStatus, ScriptRunner

    config = EngineConfig(
        default_level=args.level,
        time_scale=args.time_scale,
        log_level=args.log_level,
    )
    level = _resolve_level(args.level)
    program = json.loads(Path(args.program).read_text(encoding="utf-8"))

    engine = GameEngine(config, level)
    try:
        result = await ScriptRunner(engine).run(program)
    finally:
        await engine.shutdown()

    state = engine.state
    summary = {
        "status": result.status.value,
        "steps_executed": result.steps_executed,
        "level_completed": result.level_completed,
        "error": result.error,
        "robot": {
            "x": engine.get_x_position(),
            "y": engine.get_y_position(),
            "health": state.robot.health,
        },
        "coins": len(state.collected),
        "defeated": state.defeated,
    }
    print(json.dumps(summary, indent=2))
    return 1 if result.status is RunStatus.ERROR else 0


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    # Default to serve mode if no subcommand given
    if args.command is None or args.command == "serve":
        if args.command is None:
            # Re-parse with serve defaults
            args = parser.parse_args(["serve"])
        _run_server(args)
    elif args.command == "run":
        from gridbot.utils.logging import setup_logging

        setup_logging(args.log_level)
        sys.exit(asyncio.run(_run_program(args)))


if __name__ == "__main__":
    main()
