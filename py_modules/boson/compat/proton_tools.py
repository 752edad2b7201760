"""
Compatibility Tool Delegation

Lets a DeferProton title be handed over to another installed Steam
compatibility tool (Proton, GE-Proton, Steam Linux Runtime, ...).

Flow:
  1. find_tool() looks the configured tool directory up in every Steam
     library's steamapps/common and in the client's compatibilitytools.d
  2. parse_wrapper() reads the tool's toolmanifest.vdf and turns its
     commandline into a wrapper executable plus arguments
  3. The launcher runs <wrapper> <args...> <game>

A Proton manifest looks like:

    "manifest"
    {
      "version" "2"
      "commandline" "/proton %verb%"
      "commandline_waitforexitandrun" "/proton waitforexitandrun"
    }
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Tuple

import vdf

from ..errors import ManifestParseError, ToolNotConfigured
from ..utils.steam_env import SteamCompatContext

logger = logging.getLogger(__name__)

MANIFEST_FILE = "toolmanifest.vdf"

# Relative to each Steam library root
LIBRARY_COMMON_DIR = Path("steamapps") / "common"
# Relative to the Steam client install
COMPAT_TOOLS_DIR = "compatibilitytools.d"

# Placeholder Steam substitutes with the launch verb
VERB_PLACEHOLDER = "%verb%"
RUN_VERB = "run"


@dataclass(frozen=True)
class ToolManifest:
    """The parts of toolmanifest.vdf Boson cares about"""
    commandline: str
    # Used by Steam for "wait for exit and run" launches
    commandline_waitforexitandrun: Optional[str] = None


def get_tool_search_roots(context: SteamCompatContext) -> List[Path]:
    """
    Get the directories a compatibility tool may be installed in.

    Returns:
        <library>/steamapps/common for each STEAM_COMPAT_LIBRARY_PATHS entry,
        then <client>/compatibilitytools.d when the client path is known

    Raises:
        ToolNotConfigured: If STEAM_COMPAT_LIBRARY_PATHS is not set
    """
    if context.library_paths is None:
        raise ToolNotConfigured("STEAM_COMPAT_LIBRARY_PATHS is not set")

    roots = [
        Path(library) / LIBRARY_COMMON_DIR
        for library in context.library_paths.split(":")
        if library
    ]
    if context.client_install_path is not None:
        roots.append(context.client_install_path / COMPAT_TOOLS_DIR)
    return roots


def find_tool(name: str, context: SteamCompatContext) -> Optional[Path]:
    """Find the directory of the compatibility tool called `name`.

    Args:
        name: Tool directory name, e.g. "Proton - Experimental"
        context: Environment snapshot providing the search roots

    Returns:
        The first <root>/<name> that is a directory, or None

    Raises:
        ToolNotConfigured: If the library search roots are not available
    """
    for root in get_tool_search_roots(context):
        candidate = root / name
        logger.debug(f"[CompatTool] Checking {candidate}")
        if candidate.is_dir():
            logger.info(f"[CompatTool] Found '{name}' at {candidate}")
            return candidate

    logger.debug(f"[CompatTool] '{name}' not found in any search root")
    return None


def load_manifest(tool_dir: Path) -> ToolManifest:
    """Read and validate <tool_dir>/toolmanifest.vdf.

    Raises:
        ManifestParseError: If the file can't be read or lacks a commandline
    """
    manifest_path = Path(tool_dir) / MANIFEST_FILE
    try:
        with open(manifest_path, "r", encoding="utf-8", errors="ignore") as f:
            data = vdf.load(f)
    except (OSError, SyntaxError, ValueError) as e:
        raise ManifestParseError(manifest_path, str(e)) from e

    section = data.get("manifest")
    if not isinstance(section, dict):
        raise ManifestParseError(manifest_path, "missing 'manifest' section")

    commandline = section.get("commandline")
    if not isinstance(commandline, str):
        raise ManifestParseError(manifest_path, "missing 'commandline'")

    wait_commandline = section.get("commandline_waitforexitandrun")
    if not isinstance(wait_commandline, str):
        wait_commandline = None

    return ToolManifest(
        commandline=commandline,
        commandline_waitforexitandrun=wait_commandline,
    )


def parse_wrapper(tool_dir: Path,
                  context: SteamCompatContext) -> Optional[Tuple[Path, List[str]]]:
    """Build the wrapper invocation described by a tool's manifest.

    Each commandline token gets shell-style expansion (~, $VAR, ${VAR});
    a relative executable is resolved against tool_dir.

    Returns:
        (wrapper executable, wrapper arguments), or None if the manifest's
        commandline is empty

    Raises:
        ManifestParseError: If the manifest is unreadable or malformed
    """
    tool_dir = Path(tool_dir)
    manifest = load_manifest(tool_dir)

    commandline = manifest.commandline
    if commandline.startswith("/"):
        commandline = commandline[1:]

    tokens = [context.expand(token) for token in commandline.split()]
    if not tokens:
        logger.warning(f"[CompatTool] Empty commandline in {tool_dir / MANIFEST_FILE}")
        return None

    executable = Path(tokens[0])
    if not executable.is_absolute():
        executable = tool_dir / executable

    args = [token.replace(VERB_PLACEHOLDER, RUN_VERB) for token in tokens[1:]]

    logger.debug(f"[CompatTool] Wrapper {executable} with args {args}")
    return executable, args
