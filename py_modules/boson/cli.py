"""
Command line entry point for Boson.

Steam runs a compatibility tool as `<tool> <verb> <game> [args...]`, with
the verb taken from toolmanifest.vdf. `run` and `waitforexitandrun` both
launch the game; `path` and `config` are diagnostics. Any other verb Steam
sends is logged and acknowledged with exit status 0.
"""
import argparse
import logging
import os
import sys
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config.store import ConfigStore, dump_config_file
from .errors import BosonError, NonZeroExit
from .launch.runtime import launch
from .utils.paths import resolve_install_path
from .utils.steam_env import SteamCompatContext

logger = logging.getLogger("boson")

DEFAULT_LOG_LEVEL = "INFO"
LAUNCH_VERBS = ("run", "waitforexitandrun")
COMMANDS = LAUNCH_VERBS + ("path", "config")


def setup_logging(level_name: Optional[str] = None) -> None:
    """Configure the root logger from BOSON_LOG (or an explicit level name)"""
    if level_name is None:
        level_name = os.environ.get("BOSON_LOG", DEFAULT_LOG_LEVEL)
    level = getattr(logging, level_name.upper(), None)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(
        level=level,
        format='[%(asctime)s] %(levelname)s - %(name)s: %(message)s',
        datefmt='%H:%M:%S'
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="boson",
        description="Steam compatibility tool for native Electron, LOVE and Linux games",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    for verb in LAUNCH_VERBS:
        run_parser = subparsers.add_parser(verb, help="Launch a game")
        run_parser.add_argument("game_path", type=Path, help="Game executable passed by Steam")
        run_parser.add_argument("additional_args", nargs=argparse.REMAINDER,
                                help="Arguments forwarded to the game")

    path_parser = subparsers.add_parser("path", help="Print the resolved game directory")
    path_parser.add_argument("path", type=Path)

    config_parser = subparsers.add_parser("config", help="Print a title's resolved config")
    config_parser.add_argument("title_id", type=int)

    return parser


def _exit_code_for(status: int) -> int:
    # Negative returncodes mean the game was killed by a signal
    if status < 0:
        return 128 - status
    return status


def main(argv: Optional[List[str]] = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    # Steam also sends verbs like getcompatpath / getnativepath
    if argv and not argv[0].startswith("-") and argv[0] not in COMMANDS:
        setup_logging()
        logger.info(f"[CLI] Ignoring unsupported verb '{argv[0]}'")
        return 0

    args = build_parser().parse_args(argv)
    setup_logging()

    if args.command == "path":
        print(resolve_install_path(args.path))
        return 0

    context = SteamCompatContext.from_environ()

    if args.command == "config":
        store = ConfigStore.load(context=context)
        print(dump_config_file({args.title_id: store.resolve(args.title_id)}), end="")
        return 0

    logger.debug(f"[CLI] args: {sys.argv}")
    title_id = context.app_id if context.app_id is not None else 0
    if context.app_id is None:
        logger.warning("[CLI] No SteamAppId in environment, using global defaults")

    try:
        return launch(title_id, args.game_path, args.additional_args, context=context)
    except NonZeroExit as e:
        logger.error(f"[CLI] {e}")
        return _exit_code_for(e.status)
    except BosonError as e:
        logger.error(f"[CLI] {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
