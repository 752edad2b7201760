# Boson: Steam compatibility tool for native runtimes
__version__ = "0.3.0"

from .errors import (
    BosonError,
    ConfigParseError,
    PayloadNotFound,
    ToolNotConfigured,
    ToolNotFound,
    ManifestParseError,
    SpawnError,
    NonZeroExit,
)
