"""
Centralized path utilities for Boson.

Boson is installed as a Steam compatibility tool, so everything it ships
(factory configs, bundled libraries, the Electron hook) lives next to the
entry script inside compatibilitytools.d/<tool>/.
"""
import os
import sys
import logging
from pathlib import Path
from typing import List, Mapping, Optional

logger = logging.getLogger(__name__)

# User config directory name (~/.config/boson.d)
CONFIG_DIR_NAME = "boson.d"

# Directories inside the install directory
DATA_DIR_NAME = "data"
LIB_DIR_NAME = "lib"

# Electron module hook shipped with the tool
HOOK_SCRIPT_NAME = "register-hook.js"

# Descriptor file extension picked up from the search directories
CONFIG_FILE_SUFFIX = ".toml"


def get_install_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    """
    Get the directory Boson is installed in.

    BOSON_INSTALL_DIR wins when set, otherwise it is the directory holding the
    running entry script.
    """
    if environ is None:
        environ = os.environ
    override = environ.get("BOSON_INSTALL_DIR")
    if override:
        return Path(override).expanduser()
    return Path(sys.argv[0]).resolve().parent


def get_user_config_dir(environ: Optional[Mapping[str, str]] = None) -> Path:
    """Get the per-user override directory ($XDG_CONFIG_HOME/boson.d)"""
    if environ is None:
        environ = os.environ
    config_home = environ.get("XDG_CONFIG_HOME")
    if config_home:
        return Path(config_home) / CONFIG_DIR_NAME
    return Path.home() / ".config" / CONFIG_DIR_NAME


def get_config_search_dirs(install_dir: Path,
                           environ: Optional[Mapping[str, str]] = None) -> List[Path]:
    """
    Get the ordered list of directories scanned for per-title descriptors.

    Load priority:
    - ~/.config/boson.d/*.toml
    - <install_dir>/data/*.toml

    Returns:
        List of directory paths, existing or not
    """
    paths = [get_user_config_dir(environ), install_dir / DATA_DIR_NAME]
    logger.debug(f"[Paths] Config load paths: {paths}")
    return paths


def resolve_install_path(path: Path) -> Path:
    """
    Normalize a path handed to us by Steam into the game's directory.

    Steam passes the game executable; strip the file name and canonicalize.
    A directory is canonicalized as-is.
    """
    path = Path(path)
    if path.is_file():
        return path.parent.resolve()
    return path.resolve()
