import logging
import os
import sys
from argparse import ArgumentParser
from typing import Callable, List, Optional

from blessed import Terminal

from cfdk import __version__
from cfdk.errors import CfdkError
from cfdk.screen import BlessedSurface, Surface, default_esc_delay
from cfdk.session import FdkCommands, SessionResult, fdk_executable, hand_off, run_session
from cfdk.store import DEFAULT_PATH

logger = logging.getLogger(__name__)


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="cfdk", description="Change the active FDK context by picking its domain.")
    parser.add_argument("-c", "--config", default=os.environ.get("CFDK_CONFIG") or DEFAULT_PATH,
                        help=f"context file to edit (default: $CFDK_CONFIG or {DEFAULT_PATH})")
    parser.add_argument("--debug", action="store_true", default=_env_flag("CFDK_DEBUG"),
                        help="log what cfdk is doing to stderr (also: CFDK_DEBUG=1)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def setup_logging(debug: bool):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )


def announce(result: SessionResult, term: Optional[Terminal] = None):
    if result.cancelled or result.selected is None:
        return
    term = term or Terminal()
    print(f"You selected: {term.green(result.selected)}")


def main(argv: Optional[List[str]] = None,
         open_surface: Optional[Callable[[], Surface]] = None,
         commands: Optional[FdkCommands] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.debug)

    open_surface = open_surface or (lambda: BlessedSurface(esc_delay=default_esc_delay()))
    commands = commands or FdkCommands(fdk_executable())
    try:
        result = run_session(args.config, open_surface)
        announce(result)
        hand_off(result, commands)
    except CfdkError as e:
        logger.error("%s", e)
        return 1
    return 0


def run():
    sys.exit(main())
