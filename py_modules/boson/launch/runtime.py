"""
Game launching for Boson.

The launcher takes a resolved TitleConfig and turns it into one process:

    <wrapper> <wrapper args...> <extra args...> <target>    (wrapped)
    <target> <extra args...>                                 (native)

where the target is the game executable, or the ASAR payload for Electron
titles, and the wrapper comes from the CompatibilityType, the config's
wrapper_command, or a deferred tool's toolmanifest.vdf.
"""
import logging
import subprocess
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional, Sequence, Tuple

from ..compat.proton_tools import find_tool, get_tool_search_roots, parse_wrapper
from ..config.models import CompatibilityType, TitleConfig
from ..config.store import ConfigStore
from ..errors import (
    ManifestParseError,
    NonZeroExit,
    PayloadNotFound,
    SpawnError,
    ToolNotConfigured,
    ToolNotFound,
)
from ..utils.paths import resolve_install_path
from ..utils.steam_env import SteamCompatContext
from .environment import compose_environment
from .payload import resolve_payload

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LaunchCommand:
    """A fully assembled process image"""
    executable: str
    args: Tuple[str, ...]
    cwd: Path
    env: Mapping[str, str] = field(default_factory=dict)

    @property
    def argv(self) -> List[str]:
        return [self.executable, *self.args]


class Launcher:
    """Builds and runs the process for one title launch."""

    def __init__(self, context: Optional[SteamCompatContext] = None):
        self.context = context if context is not None else SteamCompatContext.from_environ()

    def select_target(self, config: TitleConfig, install_path: Path) -> Path:
        """
        Get the path the wrapper (or the OS) is asked to run.

        Raises:
            PayloadNotFound: If an Electron title has no discoverable ASAR
        """
        if config.compatibility_type is not CompatibilityType.ELECTRON:
            return Path(install_path)

        payload_root = self.context.install_path
        if payload_root is not None:
            logger.info(f"[Launcher] STEAM_COMPAT_INSTALL_PATH found: {payload_root}")
        else:
            payload_root = resolve_install_path(install_path)

        payload = resolve_payload(payload_root, self.context.load_path)
        if payload is None:
            raise PayloadNotFound(payload_root)
        return payload

    def select_wrapper(self, config: TitleConfig) -> Tuple[Optional[str], List[str]]:
        """
        Get the wrapper executable and its arguments.

        Raises:
            ToolNotConfigured: DeferProton without a tool directory or library paths
            ToolNotFound: DeferProton tool missing from every search root
        """
        if config.compatibility_type is CompatibilityType.DEFER_PROTON:
            return self._deferred_wrapper(config)

        wrapper_default, default_args = config.compatibility_type.default_executable(self.context)
        wrapper = config.wrapper_command if config.wrapper_command is not None else wrapper_default
        return wrapper, list(config.wrapper_args) + default_args

    def _deferred_wrapper(self, config: TitleConfig) -> Tuple[Optional[str], List[str]]:
        if not config.compat_tool_dir:
            raise ToolNotConfigured("DeferProton requires compat_tool_dir")

        tool_dir = find_tool(config.compat_tool_dir, self.context)
        if tool_dir is None:
            raise ToolNotFound(config.compat_tool_dir, get_tool_search_roots(self.context))

        try:
            parsed = parse_wrapper(tool_dir, self.context)
        except ManifestParseError as e:
            logger.warning(f"[Launcher] {e}; launching without the tool's wrapper")
            parsed = None

        if parsed is None:
            return None, list(config.wrapper_args)

        wrapper, manifest_args = parsed
        return str(wrapper), manifest_args + list(config.wrapper_args)

    def build_command(self, config: TitleConfig, install_path: Path,
                      extra_args: Sequence[str] = ()) -> LaunchCommand:
        """Assemble the process image for a launch without starting it."""
        install_path = Path(install_path)
        target = self.select_target(config, install_path)
        wrapper, wrapper_args = self.select_wrapper(config)

        logger.debug(f"[Launcher] Wrapper executable: {wrapper}")
        logger.debug(f"[Launcher] Wrapper arguments: {wrapper_args}")
        logger.debug(f"[Launcher] Game executable path: {target}")
        logger.debug(f"[Launcher] Additional arguments: {list(extra_args)}")

        if wrapper is not None:
            executable = wrapper
            args = [*wrapper_args, *extra_args, str(target)]
        else:
            executable = str(target)
            args = list(extra_args)

        return LaunchCommand(
            executable=executable,
            args=tuple(args),
            cwd=resolve_install_path(install_path),
            env=compose_environment(config, self.context),
        )

    def launch_game(self, config: TitleConfig, install_path: Path,
                    extra_args: Sequence[str] = ()) -> int:
        """
        Launch a title and block until it exits.

        Returns:
            0 when the game exits cleanly

        Raises:
            SpawnError: If the process could not be started
            NonZeroExit: If the game exited with a nonzero status
        """
        command = self.build_command(config, install_path, extra_args)
        logger.info(f"[Launcher] Launching game with command: {command.argv}")

        try:
            process = subprocess.Popen(command.argv, cwd=command.cwd, env=dict(command.env))
        except OSError as e:
            raise SpawnError(command.executable, e) from e

        status = process.wait()
        if status != 0:
            raise NonZeroExit(status)

        logger.info("[Launcher] Game exited cleanly")
        return 0


def launch(title_id: int, install_path: Path, extra_args: Sequence[str] = (),
           store: Optional[ConfigStore] = None,
           context: Optional[SteamCompatContext] = None) -> int:
    """
    Resolve a title's configuration and launch it.

    Args:
        title_id: Steam app id
        install_path: Game executable (or directory) as passed by Steam
        extra_args: Arguments forwarded from Steam
        store: Loaded config store (loaded from disk if None)
        context: Environment snapshot (captured from os.environ if None)
    """
    if context is None:
        context = SteamCompatContext.from_environ()
    if store is None:
        store = ConfigStore.load(context=context)

    config = store.resolve(title_id)
    logger.info(
        f"[Launcher] App {title_id} using {config.compatibility_type.value} runtime"
    )
    return Launcher(context).launch_game(config, install_path, extra_args)
