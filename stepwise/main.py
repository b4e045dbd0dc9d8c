"""Main entry point for stepwise."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from stepwise.config import Settings, clear_settings_cache, get_settings
from stepwise.core import Outcome
from stepwise.games import PongGame
from stepwise.games import start as start_pong
from stepwise.host import AsyncioHost
from stepwise.utils.logger import console, print_banner, setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="stepwise - run long tasks one step per host frame",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        help="Path to config file (default: config/config.yaml)",
    )

    parser.add_argument(
        "--headless",
        action="store_true",
        help="Play an autopilot game without the TUI",
    )

    parser.add_argument(
        "--frames",
        type=int,
        metavar="N",
        help="Stop the headless game after N frames",
    )

    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed for the headless game",
    )

    parser.add_argument(
        "--history",
        action="store_true",
        help="Print the task's state history after a headless game",
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser.parse_args(argv)


async def run_headless(settings: Settings, seed: int | None = None, show_history: bool = False) -> int:
    """Play one autopilot game on an asyncio host."""
    loop = asyncio.get_running_loop()
    finished: asyncio.Future[tuple[PongGame, Outcome | None]] = loop.create_future()

    def on_finished(game: PongGame, outcome: Outcome | None) -> None:
        if not finished.done():
            finished.set_result((game, outcome))

    host = AsyncioHost(loop)
    _, tool = start_pong(
        host,
        settings.pong,
        on_finished=on_finished,
        autopilot=True,
        seed=seed,
        scheduler_config=settings.scheduler,
    )
    if not tool.started:
        console.print("[red]Another task is already running[/red]")
        return 1

    game, outcome = await finished

    console.print(f"\nFrames: {game.frames}  Steps: {tool.steps}  Redraws: {host.invalidations}")
    if show_history:
        console.print_json(data=tool.history())
    if outcome is None:
        console.print(f"[green]Game over![/green] {game.winner or 'nobody'} wins {game.score_left}:{game.score_right}")
        return 0

    console.print(f"[red]Game aborted![/red] {outcome}")
    return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    # Load settings
    clear_settings_cache()
    settings = get_settings(args.config)
    if args.frames is not None:
        # Leave the cached settings as loaded
        pong = settings.pong.model_copy(update={"max_frames": args.frames})
        settings = settings.model_copy(update={"pong": pong})

    log_level = logging.DEBUG if args.debug else logging.INFO
    setup_logging(settings.log_dir, level=log_level, log_to_file=settings.log_to_file)

    if args.headless:
        print_banner()
        return asyncio.run(run_headless(settings, seed=args.seed, show_history=args.history))

    # TUI mode
    from stepwise.ui import PongApp

    app = PongApp(settings)
    app.run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
