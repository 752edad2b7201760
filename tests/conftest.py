from __future__ import annotations

from pathlib import Path
import sys
from typing import Dict, Optional

import pytest

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))
# Boson's packages live under py_modules, same as the compat tool bundle
sys.path.insert(0, str(ROOT / "py_modules"))

from boson.utils.steam_env import SteamCompatContext


@pytest.fixture
def install_dir(tmp_path: Path) -> Path:
    """An empty Boson install directory (no lib/, data/ or hook script)"""
    path = tmp_path / "boson"
    path.mkdir()
    return path


@pytest.fixture
def make_context(install_dir: Path):
    """Build a SteamCompatContext from an explicit environment mapping"""
    def _make(environ: Optional[Dict[str, str]] = None) -> SteamCompatContext:
        env = {"HOME": "/home/deck"}
        env.update(environ or {})
        return SteamCompatContext.from_environ(env, install_dir=install_dir)
    return _make
