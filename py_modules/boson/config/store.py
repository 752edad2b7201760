"""
Boson configuration store.

Holds the global default TitleConfig plus per-title overrides, seeded from
BUILTIN_TITLE_CONFIGS and extended by every *.toml descriptor found in the
search directories:

    [override.123456]  # Steam app id
    compat_type = "Electron"
    disable_steam_overlay = true
    wrapper_command = "/custom/path/to/electron"
"""
import logging
import tomllib
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional

import tomli_w

from ..errors import ConfigParseError
from ..utils.paths import CONFIG_FILE_SUFFIX, get_config_search_dirs
from ..utils.steam_env import SteamCompatContext
from .models import BUILTIN_TITLE_CONFIGS, TitleConfig, merge_config, resolve_layers

logger = logging.getLogger(__name__)

# Largest Steam app id (unsigned 32-bit)
MAX_TITLE_ID = 0xFFFFFFFF


def load_config_file(path: Path) -> Dict[int, TitleConfig]:
    """
    Load the overrides defined in one descriptor file.

    Args:
        path: Path to a TOML descriptor

    Returns:
        Mapping of title id to its override (empty if the file has none)

    Raises:
        ConfigParseError: If the file can't be read, isn't valid TOML, or an
            override table is malformed
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, ValueError) as e:
        # ValueError covers TOMLDecodeError and non-UTF-8 files
        raise ConfigParseError(path, str(e)) from e

    tables = data.get("override", {})
    if not isinstance(tables, dict):
        raise ConfigParseError(path, "'override' must be a table")

    overrides: Dict[int, TitleConfig] = {}
    for key, table in tables.items():
        if not (key.isascii() and key.isdecimal()) or int(key) > MAX_TITLE_ID:
            raise ConfigParseError(path, f"invalid title id '{key}'")
        try:
            overrides[int(key)] = TitleConfig.from_dict(table)
        except ValueError as e:
            raise ConfigParseError(path, f"override.{key}: {e}") from e
    return overrides


def dump_config_file(overrides: Mapping[int, TitleConfig]) -> str:
    """Serialize overrides to descriptor TOML (readable by load_config_file)"""
    data = {
        "override": {
            str(app_id): config.to_dict()
            for app_id, config in sorted(overrides.items())
        }
    }
    return tomli_w.dumps(data)


def _descriptor_files(config_dir: Path) -> List[Path]:
    """Immediate *.toml children of a directory, sorted by name"""
    return sorted(
        entry for entry in config_dir.iterdir()
        if entry.is_file() and entry.suffix == CONFIG_FILE_SUFFIX
    )


class ConfigStore:
    """Global default config plus per-title overrides, keyed by Steam app id"""

    def __init__(self, default_config: Optional[TitleConfig] = None,
                 overrides: Optional[Mapping[int, TitleConfig]] = None):
        self.default_config = default_config if default_config is not None else TitleConfig()
        self.overrides: Dict[int, TitleConfig] = dict(
            BUILTIN_TITLE_CONFIGS if overrides is None else overrides
        )
        # One entry per descriptor file that was skipped
        self.warnings: List[str] = []

    @classmethod
    def load(cls, search_dirs: Optional[Iterable[Path]] = None,
             context: Optional[SteamCompatContext] = None) -> "ConfigStore":
        """
        Build the store from built-in defaults and every discoverable descriptor.

        Args:
            search_dirs: Directories to scan, in priority order. Defaults to
                the user config dir followed by <install_dir>/data.
            context: Environment snapshot used to locate the default dirs
        """
        store = cls()

        if search_dirs is None:
            if context is None:
                context = SteamCompatContext.from_environ()
            search_dirs = get_config_search_dirs(context.install_dir, context.environ)

        for config_dir in search_dirs:
            config_dir = Path(config_dir)
            if not config_dir.is_dir():
                logger.debug(f"[Config] Config directory does not exist: {config_dir}")
                continue

            try:
                files = _descriptor_files(config_dir)
            except OSError as e:
                logger.warning(f"[Config] Could not list {config_dir}: {e}")
                store.warnings.append(f"Could not list {config_dir}: {e}")
                continue

            for file_path in files:
                logger.debug(f"[Config] Found TOML file: {file_path}")
                try:
                    overrides = load_config_file(file_path)
                except ConfigParseError as e:
                    logger.warning(f"[Config] {e}")
                    store.warnings.append(str(e))
                    continue

                logger.info(f"[Config] Loaded config from: {file_path}")
                store.add_overrides(overrides)

        logger.info(f"[Config] Loaded {len(store.overrides)} game overrides")
        return store

    def add_overrides(self, overrides: Mapping[int, TitleConfig]) -> None:
        """
        Add overrides, merging into any existing entry for the same id.

        Sequence fields accumulate with no de-duplication, so two files that
        both append the same argument produce it twice.
        """
        for app_id, config in overrides.items():
            existing = self.overrides.get(app_id)
            if existing is None:
                self.overrides[app_id] = config
            else:
                self.overrides[app_id] = merge_config(existing, config)

    def get_override(self, title_id: int) -> Optional[TitleConfig]:
        return self.overrides.get(title_id)

    def resolve(self, title_id: int) -> TitleConfig:
        """
        Get the effective configuration for a title.

        Merges runtime defaults, the global default and the title's override
        (when there is one), later layers winning.
        """
        override = self.overrides.get(title_id)
        resolved = resolve_layers(self.default_config, override)
        logger.debug(
            f"[Config] Resolved {title_id} -> {resolved.compatibility_type.value}"
            f" (override: {override is not None})"
        )
        return resolved
