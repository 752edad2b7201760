# Utils package
from .paths import (
    get_install_dir,
    get_user_config_dir,
    get_config_search_dirs,
    resolve_install_path,
    CONFIG_DIR_NAME,
    DATA_DIR_NAME,
    LIB_DIR_NAME,
    HOOK_SCRIPT_NAME,
)
from .steam_env import SteamCompatContext

__all__ = [
    'get_install_dir',
    'get_user_config_dir',
    'get_config_search_dirs',
    'resolve_install_path',
    'CONFIG_DIR_NAME',
    'DATA_DIR_NAME',
    'LIB_DIR_NAME',
    'HOOK_SCRIPT_NAME',
    'SteamCompatContext',
]
