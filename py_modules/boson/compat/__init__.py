# Compat package
from .proton_tools import (
    ToolManifest,
    get_tool_search_roots,
    find_tool,
    load_manifest,
    parse_wrapper,
    MANIFEST_FILE,
    RUN_VERB,
)
