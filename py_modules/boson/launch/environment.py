"""Process environment composition for launched games"""
import logging
import os
from typing import Dict, List

from ..config.models import TitleConfig
from ..utils.paths import LIB_DIR_NAME
from ..utils.steam_env import SteamCompatContext

logger = logging.getLogger(__name__)

# Steam's overlay preload (gameoverlayrenderer.so)
OVERLAY_RENDERER = "gameoverlayrenderer"


def _without_overlay(entries: List[str]) -> List[str]:
    return [entry for entry in entries if OVERLAY_RENDERER not in entry]


def compose_ld_preload(config: TitleConfig, context: SteamCompatContext) -> str:
    """
    Build LD_PRELOAD for the game.

    Inherited entries are expanded and kept (minus the Steam overlay when the
    title disables it), then extra_preloads are appended as written.
    """
    preloads = context.split_path_list("LD_PRELOAD")
    if preloads:
        logger.debug(f"[Launcher] Existing LD_PRELOAD found: {preloads}")
    if config.disable_steam_overlay:
        preloads = _without_overlay(preloads)

    preloads.extend(config.extra_preloads)
    return os.pathsep.join(preloads)


def compose_ld_library_path(config: TitleConfig, context: SteamCompatContext) -> str:
    """
    Build LD_LIBRARY_PATH for the game.

    Inherited entries come first, followed by Boson's bundled lib directory
    when it exists. The overlay filter runs over the whole list.
    """
    paths = context.split_path_list("LD_LIBRARY_PATH")
    if paths:
        logger.debug(f"[Launcher] Existing LD_LIBRARY_PATH found: {paths}")

    lib_dir = context.install_dir / LIB_DIR_NAME
    if lib_dir.exists():
        paths.append(str(lib_dir))

    if config.disable_steam_overlay:
        paths = _without_overlay(paths)
    return os.pathsep.join(paths)


def compose_environment(config: TitleConfig, context: SteamCompatContext) -> Dict[str, str]:
    """
    Build the complete environment for the game process.

    Starts from the captured environment, sets the composed LD_PRELOAD and
    LD_LIBRARY_PATH, then applies the title's env_vars (values expanded).
    """
    env = dict(context.environ)
    env["LD_PRELOAD"] = compose_ld_preload(config, context)
    env["LD_LIBRARY_PATH"] = compose_ld_library_path(config, context)

    for key, value in config.env_vars.items():
        env[key] = context.expand(value)

    logger.debug(f"[Launcher] LD_PRELOAD={env['LD_PRELOAD']}")
    logger.debug(f"[Launcher] LD_LIBRARY_PATH={env['LD_LIBRARY_PATH']}")
    return env
