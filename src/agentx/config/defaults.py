"""Default configuration values."""

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    # Provider
    "provider": "claude",
    "model": "claude-sonnet-4-20250514",
    "max_tokens": 8192,

    # Agentic loop
    "max_iterations": 20,
    "legacy_max_iterations": 5,
    "enabled_tools": [
        "create_files",
        "ask_user",
        "read_file",
        "search_files",
        "list_directory",
        "run_command",
        "edit_file",
    ],
    "disabled_tools": [],

    # Permissions
    "permission_mode": "default",  # default | acceptEdits | plan | yolo
    "permission_allow": [],        # glob patterns auto-allowed in default mode
    "permission_deny": [],         # glob patterns always denied (except yolo)

    # Hooks ({event: [definition, ...]})
    "hooks": {},

    # Misc
    "dry_run": False,
    "debug": False,
}
