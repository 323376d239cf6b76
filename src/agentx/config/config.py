"""Configuration management."""

import copy
import json
import os
from pathlib import Path
from typing import Any

from .defaults import DEFAULT_CONFIG


class Config:
    """
    Layered configuration loader.
    Priority: CLI overrides > environment > project file > global file > defaults
    """

    ENV_PREFIX = "AGENTX_"

    def __init__(self, project_dir: str | Path | None = None) -> None:
        self.project_dir = Path(project_dir) if project_dir else Path.cwd()
        self._config: dict[str, Any] = {}
        self._load_defaults()
        self._load_global()
        self._load_project()
        self._load_env()

    def get(self, key: str, default: Any = None) -> Any:
        """Get a config value."""
        return self._config.get(key, default)

    def set(self, key: str, value: Any) -> None:
        """Set a value (used for CLI overrides)."""
        self._config[key] = value

    def __getitem__(self, key: str) -> Any:
        return self._config[key]

    def __contains__(self, key: str) -> bool:
        return key in self._config

    def _load_defaults(self) -> None:
        self._config.update(copy.deepcopy(DEFAULT_CONFIG))

    def _load_global(self) -> None:
        """Load the global config file (~/.agentx/config.json)."""
        self._load_file(Path.home() / ".agentx" / "config.json")

    def _load_project(self) -> None:
        """Load the project config file (.agentx.json)."""
        self._load_file(self.project_dir / ".agentx.json")

    def _load_file(self, path: Path) -> None:
        if not path.exists():
            return
        try:
            with open(path) as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError):
            return  # Ignore broken config files
        if isinstance(data, dict):
            self._config.update(data)

    def _load_env(self) -> None:
        """Load environment variables (AGENTX_*)."""
        for key, value in os.environ.items():
            if key.startswith(self.ENV_PREFIX):
                config_key = key[len(self.ENV_PREFIX):].lower()
                self._config[config_key] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse an environment value into bool/int/float/JSON list or string."""
        if value.lower() in ("true", "yes"):
            return True
        if value.lower() in ("false", "no"):
            return False

        try:
            return int(value)
        except ValueError:
            pass

        try:
            return float(value)
        except ValueError:
            pass

        # JSON arrays/objects (e.g. AGENTX_PERMISSION_DENY='["*.env"]')
        if value[:1] in ("[", "{"):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def to_dict(self) -> dict[str, Any]:
        """Return a copy of the resolved config."""
        return self._config.copy()
