"""
Per-title launch configuration for Boson.

Boson is meant to be a "native if possible" compatibility layer: it overrides
Steam titles that run poorly under Wine or that already have a native runtime
(Electron or LOVE games), and defers to Proton for everything else.

A title's effective configuration is a fold of three layers, each merged onto
the previous one with merge_config():
  1. Runtime defaults for its CompatibilityType
  2. The global default TitleConfig
  3. The title's override, if any

Electron titles get `--require <install_dir>/register-hook.js` only when that
hook script is installed next to the boson entry point. Boson does not ship
one (the Greenworks hook needs Node modules and a download step of its own),
so by default Electron games run without it.
"""
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from functools import reduce
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ..utils.paths import HOOK_SCRIPT_NAME
from ..utils.steam_env import SteamCompatContext

logger = logging.getLogger(__name__)

# Tool looked up in compatibilitytools.d / steamapps/common when nothing else is configured
DEFAULT_COMPAT_TOOL_DIR = "Proton - Experimental"


class CompatibilityType(Enum):
    """How Boson launches a title"""
    # Defer to another Steam compatibility tool, e.g. Proton
    DEFER_PROTON = "DeferProton"
    # Run the game executable directly (.NET apps, cross-platform binaries)
    FORCE_NATIVE = "ForceNative"
    # Wrap the game's ASAR with Boson's Electron runtime
    ELECTRON = "Electron"
    # Wrap the game with the system `love` runtime
    LOVE = "Love"

    @classmethod
    def from_name(cls, name: str) -> "CompatibilityType":
        for member in cls:
            if member.value == name:
                return member
        raise ValueError(
            f"unknown compat_type '{name}', expected one of {[m.value for m in cls]}"
        )

    def runtime_defaults(self) -> "TitleConfig":
        """Base defaults shared by every game using this runtime"""
        if self is CompatibilityType.DEFER_PROTON:
            return TitleConfig(
                compatibility_type=CompatibilityType.DEFER_PROTON,
                compat_tool_dir=DEFAULT_COMPAT_TOOL_DIR,
            )
        if self is CompatibilityType.FORCE_NATIVE:
            return TitleConfig(compatibility_type=CompatibilityType.FORCE_NATIVE)
        if self is CompatibilityType.ELECTRON:
            return TitleConfig(
                compatibility_type=CompatibilityType.ELECTRON,
                disable_steam_overlay=True,
            )
        if self is CompatibilityType.LOVE:
            return TitleConfig(
                compatibility_type=CompatibilityType.LOVE,
                disable_steam_overlay=False,
            )
        raise AssertionError(f"unhandled compatibility type {self!r}")

    def default_executable(self, context: SteamCompatContext) -> Tuple[Optional[str], List[str]]:
        """
        Get the default wrapper executable and its baseline arguments.

        DeferProton is resolved from the tool manifest by the launcher, so it
        has no implicit wrapper here, same as ForceNative.

        Returns:
            (wrapper or None, default wrapper arguments)
        """
        if self in (CompatibilityType.DEFER_PROTON, CompatibilityType.FORCE_NATIVE):
            return None, []
        if self is CompatibilityType.ELECTRON:
            args = ["--no-sandbox"]
            hook_path = context.install_dir / HOOK_SCRIPT_NAME
            if hook_path.is_file():
                args.extend(["--require", str(hook_path)])
            else:
                logger.info(f"[Config] No Electron hook at {hook_path}, skipping --require")
            return context.electron_path, args
        if self is CompatibilityType.LOVE:
            return "love", []
        raise AssertionError(f"unhandled compatibility type {self!r}")


@dataclass(frozen=True)
class TitleConfig:
    """Launch settings for one title (or the global default)"""
    compatibility_type: CompatibilityType = CompatibilityType.DEFER_PROTON
    # Overrides the CompatibilityType's default wrapper, e.g. a custom electron build
    wrapper_command: Optional[str] = None
    wrapper_args: Tuple[str, ...] = ()
    env_vars: Mapping[str, str] = field(default_factory=dict)
    append_args: Tuple[str, ...] = ()
    extra_preloads: Tuple[str, ...] = ()
    # Strip gameoverlayrenderer.so from LD_PRELOAD / LD_LIBRARY_PATH
    disable_steam_overlay: bool = False
    # Directory name of the tool DeferProton hands the game to
    compat_tool_dir: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TitleConfig":
        """
        Build a TitleConfig from one [override.<id>] table.

        Unknown keys are ignored, missing keys take the type defaults.

        Raises:
            ValueError: If a known key has the wrong type or value
        """
        if not isinstance(data, Mapping):
            raise ValueError(f"expected a table, got {type(data).__name__}")

        kwargs: Dict[str, Any] = {}

        if "compat_type" in data:
            kwargs["compatibility_type"] = CompatibilityType.from_name(
                _expect_str(data, "compat_type")
            )
        if "wrapper_command" in data:
            kwargs["wrapper_command"] = _expect_str(data, "wrapper_command")
        if "compat_tool_dir" in data:
            kwargs["compat_tool_dir"] = _expect_str(data, "compat_tool_dir")
        for key in ("wrapper_args", "append_args", "extra_preloads"):
            if key in data:
                kwargs[key] = _expect_str_list(data, key)
        if "env_vars" in data:
            env_vars = data["env_vars"]
            if not isinstance(env_vars, Mapping) or not all(
                isinstance(v, str) for v in env_vars.values()
            ):
                raise ValueError("'env_vars' must be a table of strings")
            kwargs["env_vars"] = dict(env_vars)
        if "disable_steam_overlay" in data:
            value = data["disable_steam_overlay"]
            if not isinstance(value, bool):
                raise ValueError("'disable_steam_overlay' must be a boolean")
            kwargs["disable_steam_overlay"] = value

        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Inverse of from_dict; unset optional fields are omitted"""
        data: Dict[str, Any] = {"compat_type": self.compatibility_type.value}
        if self.wrapper_command is not None:
            data["wrapper_command"] = self.wrapper_command
        data["wrapper_args"] = list(self.wrapper_args)
        data["env_vars"] = dict(self.env_vars)
        data["append_args"] = list(self.append_args)
        data["extra_preloads"] = list(self.extra_preloads)
        data["disable_steam_overlay"] = self.disable_steam_overlay
        if self.compat_tool_dir is not None:
            data["compat_tool_dir"] = self.compat_tool_dir
        return data


def _expect_str(data: Mapping[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise ValueError(f"'{key}' must be a string")
    return value


def _expect_str_list(data: Mapping[str, Any], key: str) -> Tuple[str, ...]:
    value = data[key]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ValueError(f"'{key}' must be an array of strings")
    return tuple(value)


def merge_config(base: TitleConfig, overlay: TitleConfig) -> TitleConfig:
    """
    Merge overlay onto base and return the result.

    Sequences are extended (base first, duplicates kept), env_vars are
    unioned with overlay keys winning, optional strings are replaced only
    when the overlay sets them, and disable_steam_overlay always takes the
    overlay's value.
    """
    env_vars = dict(base.env_vars)
    env_vars.update(overlay.env_vars)

    return replace(
        base,
        compatibility_type=overlay.compatibility_type,
        wrapper_command=(
            overlay.wrapper_command if overlay.wrapper_command is not None
            else base.wrapper_command
        ),
        wrapper_args=base.wrapper_args + overlay.wrapper_args,
        env_vars=env_vars,
        append_args=base.append_args + overlay.append_args,
        extra_preloads=base.extra_preloads + overlay.extra_preloads,
        disable_steam_overlay=overlay.disable_steam_overlay,
        compat_tool_dir=(
            overlay.compat_tool_dir if overlay.compat_tool_dir is not None
            else base.compat_tool_dir
        ),
    )


def resolve_layers(global_default: TitleConfig,
                   override: Optional[TitleConfig] = None) -> TitleConfig:
    """
    Fold runtime defaults, global defaults and an optional override.

    The runtime defaults are those of the override's compatibility type, or
    of the global default's when there is no override.
    """
    compat_type = (override or global_default).compatibility_type
    layers = [global_default]
    if override is not None:
        layers.append(override)

    resolved = reduce(merge_config, layers, compat_type.runtime_defaults())

    if resolved.compat_tool_dir is None:
        resolved = replace(resolved, compat_tool_dir=DEFAULT_COMPAT_TOOL_DIR)
    return resolved


# Embedded configs for well-known titles. Not meant to be exhaustive.
BUILTIN_TITLE_CONFIGS: Dict[int, TitleConfig] = {
    # Balatro: LOVE2D runtime.
    # Add liblovely.so to extra_preloads when running Steamodded or other mods.
    2379780: TitleConfig(compatibility_type=CompatibilityType.LOVE),
    # Cookie Clicker: Electron
    1454400: TitleConfig(
        compatibility_type=CompatibilityType.ELECTRON,
        disable_steam_overlay=True,
    ),
}
