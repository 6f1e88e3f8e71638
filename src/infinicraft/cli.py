from __future__ import annotations

import argparse
import logging
import random
import sys

from .core.settings import load_settings
from .features.session import GameContext, RoomManager
from .play import run_play
from .ui.presenters import RichPresenter


def _add_common_args(p: argparse.ArgumentParser) -> None:
    p.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    p.add_argument("--api-key", default=None, help="Generation API key (default: $ANTHROPIC_API_KEY)")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="infinicraft", description="Combine two items to discover new ones")
    sub = parser.add_subparsers(dest="command")

    play = sub.add_parser("play", help="Craft in the terminal (default)")
    _add_common_args(play)
    play.add_argument("--name", default="", help="Room name shown in the header")
    play.add_argument("--seed", type=int, default=None, help="RNG seed for label choice (random if omitted)")
    play.add_argument("--no-color", action="store_true", help="Disable colored output (default is colored)")

    serve = sub.add_parser("serve", help="Run the HTTP API")
    _add_common_args(serve)
    serve.add_argument("--host", default=None, help="Bind address (default: $BIND or 0.0.0.0)")
    serve.add_argument("--port", type=int, default=None, help="Port (default: $PORT or 8000)")
    return parser


def main(argv: list[str] | None = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    # "play" is the default command.
    if not argv or argv[0] not in {"play", "serve", "-h", "--help"}:
        argv = ["play", *argv]

    args = _build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    settings = load_settings()
    if args.api_key:
        settings = settings.with_api_key(args.api_key)

    if args.command == "serve":
        from .web import app as web_app

        web_app.app.state.manager.set_api_key(settings.api_key)
        web_app.main(host=args.host, port=args.port)
        return

    rng = random.Random(args.seed) if args.seed is not None else None
    manager = RoomManager(GameContext.create(settings, rng=rng))
    run_play(manager, RichPresenter(no_color=args.no_color), name=args.name)


if __name__ == "__main__":
    main()
