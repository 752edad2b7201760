# Config package
from .models import (
    CompatibilityType,
    TitleConfig,
    merge_config,
    resolve_layers,
    BUILTIN_TITLE_CONFIGS,
    DEFAULT_COMPAT_TOOL_DIR,
)
from .store import ConfigStore, load_config_file, dump_config_file
