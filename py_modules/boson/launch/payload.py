"""
Payload discovery for Electron titles.

Finds the app an Electron runtime should load by checking the usual places
an ASAR (or its unpacked form) ends up inside a game's install directory.
BOSON_LOAD_PATH can point somewhere else entirely.
"""
import json
import logging
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Highest priority first; unpacked folders beat archives
ASAR_PATHS = (
    "resources/app.asar.unpacked",
    "resources/app",
    "app.asar",
    "resources/app.asar",
)


def scan_package_json(path: Path) -> bool:
    """
    Check whether an unpacked payload looks like an Electron app.

    Only logs what it finds; a missing or odd package.json never stops a launch.

    Returns:
        True if package.json exists and names a main script
    """
    if path.is_file():
        logger.info(f"[Payload] {path} is an archive, skipping package.json scan")
        return False

    package_json = path / "package.json"
    if not package_json.exists():
        logger.warning(
            f"[Payload] No package.json in {path}. This may not be the game directory."
        )
        return False

    try:
        with open(package_json, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"[Payload] Failed to read {package_json}: {e}")
        return False

    if not isinstance(data, dict) or "main" not in data:
        logger.warning(
            "[Payload] package.json does not specify a main script, "
            "it may not be a valid Electron package."
        )
        return False

    logger.info("[Payload] Validated package.json as an Electron package")
    return True


def resolve_payload(install_root: Path, env_override: Optional[str] = None) -> Optional[Path]:
    """
    Locate the Electron payload under a game's install root.

    Args:
        install_root: Game install directory
        env_override: BOSON_LOAD_PATH value, relative to install_root

    Returns:
        Path to the ASAR archive or unpacked app directory, or None
    """
    install_root = Path(install_root)

    if env_override:
        logger.info(f"[Payload] Using BOSON_LOAD_PATH override: {env_override}")
        return install_root / env_override

    # Already pointed at the payload itself
    if any(install_root.match(candidate) for candidate in ASAR_PATHS):
        logger.info(f"[Payload] Found ASAR at {install_root}")
        scan_package_json(install_root)
        return install_root

    for candidate in ASAR_PATHS:
        asar_path = install_root / candidate
        logger.debug(f"[Payload] Checking path: {asar_path}")
        if asar_path.exists():
            if asar_path.is_dir():
                logger.info(f"[Payload] Found unpacked ASAR at {asar_path}")
            else:
                logger.info(f"[Payload] Found ASAR at {asar_path}")
            scan_package_json(asar_path)
            return asar_path

    logger.debug(f"[Payload] No ASAR found under {install_root}")
    return None
