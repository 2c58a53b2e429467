from __future__ import annotations

# SPDX-License-Identifier: Apache-2.0
# Copyright (c) 2025 Maurice Garcia
import json
import os
import shutil
from typing import Any, TypeVar

T = TypeVar("T")

CONFIG_ENV_VAR = "PYTWFL_CONFIG"


class ConfigManager:
    """
    Manages application configuration stored in JSON format.

    Resolution order for the config file:
    1. Explicit ``config_path`` argument.
    2. ``PYTWFL_CONFIG`` environment variable.
    3. ``settings/system.json`` one level above this file
       (Example: src/pytwfl/settings/system.json).
    """

    def __init__(self, config_path: str | None = None) -> None:

        CONFIG_NAME = "system.json"
        CONFIG_DIR = "settings"
        CONFIG_PATH = os.path.join(CONFIG_DIR, CONFIG_NAME)

        env_path = os.environ.get(CONFIG_ENV_VAR, "").strip()

        if config_path:
            self._config_path = config_path
        elif env_path:
            self._config_path = env_path
        else:
            current_dir = os.path.dirname(os.path.abspath(__file__))
            root_dir = os.path.abspath(os.path.join(current_dir, ".."))
            self._config_path = os.path.join(root_dir, CONFIG_PATH)

        self._config_data: dict[str, Any] = {}
        self._load()

    def get_config_path(self) -> str:
        """Returns the path to the configuration file."""
        return self._config_path

    def _load(self) -> None:
        """Loads the configuration JSON from disk."""
        actual_path = os.path.realpath(self._config_path)

        if not os.path.exists(actual_path):
            # Seed from a sibling template when one ships next to the missing file
            template = f"{actual_path}.template"
            if os.path.exists(template):
                os.makedirs(os.path.dirname(actual_path), exist_ok=True)
                shutil.copy(template, actual_path)

        if not os.path.exists(actual_path):
            raise FileNotFoundError(f"Config file not found: {self._config_path}")
        with open(actual_path, encoding="utf-8") as f:
            data = json.load(f)
        if not isinstance(data, dict):
            raise ValueError(f"Config file must hold a JSON object: {self._config_path}")
        self._config_data = data

    def get(self, *keys: str, fallback: T | None = None) -> T | None:
        """
        Retrieves a deeply nested value from the config.

        Args:
            *keys (str): Sequence of keys to traverse the nested dictionary.
            fallback (Optional[Any]): A value to return if any key is not found.

        Returns:
            Any: The value from the configuration or the fallback.

        Example:
            config.get("detection", "wave_speed_km_per_ms")
        """
        data = self._config_data
        for key in keys:
            if not isinstance(data, dict) or key not in data:
                return fallback
            data = data[key]
        return data

    def reload(self) -> None:
        """Reloads the configuration from disk."""
        self._load()

    def as_dict(self) -> dict[str, Any]:
        """Returns the entire configuration as a dictionary."""
        return self._config_data.copy()

    def save(self, new_config: dict[str, Any]) -> None:
        """Overwrites and saves the entire config."""
        self._config_data = new_config
        with open(self._config_path, "w", encoding="utf-8") as f:
            json.dump(self._config_data, f, indent=4)
