"""
Steam compatibility tool environment.

Steam hands a compatibility tool everything it needs through environment
variables; see steam-compat-tool-interface.md in steam-runtime-tools for the
full list. SteamCompatContext takes one snapshot of those at launch start and
is passed explicitly from there on, so nothing downstream reads os.environ.
"""
import os
import logging
from dataclasses import dataclass, field
from pathlib import Path
from string import Template
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional

from .paths import get_install_dir

logger = logging.getLogger(__name__)

DEFAULT_ELECTRON = "electron"


class _EnvTemplate(Template):
    """$NAME / ${NAME} substitution with no $$ escape"""
    pattern = r"""
    \$(?:
      (?P<escaped>(?!))                   |
      (?P<named>[_a-z][_a-z0-9]*)         |
      {(?P<braced>[_a-z][_a-z0-9]*)}      |
      (?P<invalid>)
    )
    """


def _parse_app_id(value: Optional[str]) -> Optional[int]:
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        logger.debug(f"[SteamEnv] Ignoring non-numeric app id: {value}")
        return None


@dataclass(frozen=True)
class SteamCompatContext:
    """Read-only snapshot of the process environment relevant to a launch"""
    environ: Mapping[str, str] = field(default_factory=dict)
    home: str = ""
    install_dir: Path = Path(".")
    load_path: Optional[str] = None  # BOSON_LOAD_PATH
    electron_path: str = DEFAULT_ELECTRON  # ELECTRON_PATH
    library_paths: Optional[str] = None  # STEAM_COMPAT_LIBRARY_PATHS
    client_install_path: Optional[Path] = None  # STEAM_COMPAT_CLIENT_INSTALL_PATH
    install_path: Optional[Path] = None  # STEAM_COMPAT_INSTALL_PATH
    app_id: Optional[int] = None  # SteamAppId / STEAM_COMPAT_APP_ID

    @classmethod
    def from_environ(cls, environ: Optional[Mapping[str, str]] = None,
                     install_dir: Optional[Path] = None) -> "SteamCompatContext":
        """
        Capture a context from an environment mapping.

        Args:
            environ: Environment to read (defaults to os.environ)
            install_dir: Boson install directory (auto-detected if None)
        """
        snapshot: Dict[str, str] = dict(os.environ if environ is None else environ)

        if install_dir is None:
            install_dir = get_install_dir(snapshot)

        client_install = snapshot.get("STEAM_COMPAT_CLIENT_INSTALL_PATH")
        compat_install = snapshot.get("STEAM_COMPAT_INSTALL_PATH")

        app_id = _parse_app_id(snapshot.get("SteamAppId"))
        if app_id is None:
            app_id = _parse_app_id(snapshot.get("STEAM_COMPAT_APP_ID"))

        return cls(
            environ=MappingProxyType(snapshot),
            home=snapshot.get("HOME") or str(Path.home()),
            install_dir=Path(install_dir),
            load_path=snapshot.get("BOSON_LOAD_PATH") or None,
            electron_path=snapshot.get("ELECTRON_PATH") or DEFAULT_ELECTRON,
            library_paths=snapshot.get("STEAM_COMPAT_LIBRARY_PATHS"),
            client_install_path=Path(client_install) if client_install else None,
            install_path=Path(compat_install) if compat_install else None,
            app_id=app_id,
        )

    def get(self, name: str) -> Optional[str]:
        return self.environ.get(name)

    def expand(self, value: str) -> str:
        """
        Shell-style expansion of a single token.

        A leading ~ becomes the home directory, $NAME and ${NAME} become the
        matching environment value. Unknown variables are left as written.
        """
        if value == "~" or value.startswith("~/"):
            value = self.home + value[1:]
        return _EnvTemplate(value).safe_substitute(self.environ)

    def split_path_list(self, name: str) -> List[str]:
        """Split a colon-delimited variable, expanding entries and dropping empty ones"""
        existing = self.environ.get(name)
        if not existing:
            return []
        entries = (self.expand(entry) for entry in existing.split(os.pathsep))
        return [entry for entry in entries if entry]
