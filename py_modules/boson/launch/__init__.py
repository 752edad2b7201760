# Launch package
from .payload import resolve_payload, scan_package_json, ASAR_PATHS
from .environment import (
    compose_ld_preload,
    compose_ld_library_path,
    compose_environment,
    OVERLAY_RENDERER,
)
from .runtime import Launcher, LaunchCommand, launch
