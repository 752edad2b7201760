"""
Boson error types.

Fatal errors propagate straight to the caller (normally the CLI), which
decides the user-facing message and the process exit code. The only
non-fatal ones are ConfigParseError (file skipped) and ManifestParseError
(launch continues without the tool's wrapper).
"""
from pathlib import Path
from typing import List, Optional


class BosonError(Exception):
    """Base class for every error raised by Boson"""


class ConfigParseError(BosonError):
    """A configuration descriptor file could not be read or parsed"""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to load config file {path}: {reason}")


class PayloadNotFound(BosonError):
    """No application payload was found under an Electron title's install root"""

    def __init__(self, root: Path):
        self.root = root
        super().__init__(f"Could not find ASAR path for Electron game under {root}")


class ToolNotConfigured(BosonError):
    """DeferProton was selected but the tool lookup cannot be performed"""


class ToolNotFound(BosonError):
    """The configured compatibility tool is absent from every search root"""

    def __init__(self, name: str, searched: Optional[List[Path]] = None):
        self.name = name
        self.searched = list(searched or [])
        super().__init__(
            f"Compatibility tool '{name}' not found in {[str(p) for p in self.searched]}"
        )


class ManifestParseError(BosonError):
    """A compatibility tool's toolmanifest.vdf is unreadable or malformed"""

    def __init__(self, path: Path, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Failed to parse tool manifest {path}: {reason}")


class SpawnError(BosonError):
    """The operating system refused to start the game process"""

    def __init__(self, executable: str, error: OSError):
        self.executable = executable
        self.error = error
        super().__init__(f"Failed to launch {executable}: {error}")


class NonZeroExit(BosonError):
    """The game ran and exited with a nonzero status"""

    def __init__(self, status: int):
        self.status = status
        super().__init__(f"Game exited with non-zero status: {status}")
