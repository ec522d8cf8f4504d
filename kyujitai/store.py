"""
Persistent key-value store for settings and the enable switch.

Values live in a local JSON file (``~/.kyujitai/settings.json`` by
default). The conversion engine only ever reads from it, once per page
load; writes come from the options surface (the CLI here).

Usage:
    from kyujitai.store import SettingsStore

    store = SettingsStore()
    settings = store.load_settings()
    store.save_settings(settings)
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from kyujitai.config import ENABLED_KEY, SETTING_KEYS, SETTINGS_FILE, Settings

logger = logging.getLogger("kyujitai-store")


class SettingsStore:
    """JSON-file backed store.

    Read problems (missing or corrupt file) yield defaults; write problems
    are logged and reported through the return value, never raised.
    """

    def __init__(self, path: str | Path | None = None):
        self.path = Path(path) if path else SETTINGS_FILE

    def read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Could not read %s, using defaults: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring %s: expected a JSON object", self.path)
            return {}
        return data

    def write(self, values: dict[str, Any]) -> bool:
        """Merge ``values`` into the file; returns False if the write failed."""
        data = self.read()
        data.update(values)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as e:
            logger.error("Save error for %s: %s", self.path, e)
            return False
        logger.info("Settings saved to %s", self.path)
        return True

    def load_settings(self) -> Settings:
        data = self.read()
        return Settings.from_mapping({key: data.get(key) for key in SETTING_KEYS})

    def save_settings(self, settings: Settings) -> bool:
        return self.write(settings.to_dict())

    def is_enabled(self) -> bool:
        """The enable switch; an unset switch counts as enabled."""
        value = self.read().get(ENABLED_KEY)
        return True if value is None else value is True

    def toggle_enabled(self) -> bool:
        """Flip and persist the enable switch; returns the new state."""
        enabled = not self.is_enabled()
        self.write({ENABLED_KEY: enabled})
        return enabled
