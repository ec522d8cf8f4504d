"""
Project-wide configuration: paths and the conversion settings value.

Module Contents:
    APP_NAME: Application name for display purposes
    CONFIG_DIR: Per-user directory holding the persistent store
    SETTINGS_FILE: JSON file backing the key-value store
    SETTING_KEYS: Names of the four conversion switches
    Settings: Immutable conversion settings for one page load

CONFIG_DIR defaults to ``~/.kyujitai`` and can be moved with the
``KYUJITAI_HOME`` environment variable (useful for tests and CI).

Example:
    >>> from kyujitai.config import Settings
    >>> settings = Settings.from_mapping({"avoidCompatibility": True})
    >>> settings.avoid_compatibility
    True
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

# Application name for display and identification
APP_NAME = "Kyujitai"

# Per-user configuration directory
CONFIG_DIR = Path(os.getenv("KYUJITAI_HOME", Path.home() / ".kyujitai"))

# Backing file of the persistent key-value store
SETTINGS_FILE = CONFIG_DIR / "settings.json"

# Store keys, in the order the options page lists them
SETTING_KEYS = (
    "convertOldToNew",
    "convertFormToOld",
    "convertCopyToNew",
    "avoidCompatibility",
)

# Store key of the host-side enable switch
ENABLED_KEY = "enabled"


@dataclass(frozen=True)
class Settings:
    """Conversion switches, read once per page load and never mutated.

    Attributes:
        convert_old_to_new: Toggle mode; old forms go back to new forms
            and new forms go to old forms.
        convert_form_to_old: Convert text typed into form fields.
        convert_copy_to_new: Copy selections as new forms.
        avoid_compatibility: Never emit compatibility or extension-block
            ideographs.
    """
    convert_old_to_new: bool = False
    convert_form_to_old: bool = False
    convert_copy_to_new: bool = False
    avoid_compatibility: bool = False

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "Settings":
        """Build settings from store keys; absent or falsy values read as False."""
        return cls(
            convert_old_to_new=data.get("convertOldToNew") is True,
            convert_form_to_old=data.get("convertFormToOld") is True,
            convert_copy_to_new=data.get("convertCopyToNew") is True,
            avoid_compatibility=data.get("avoidCompatibility") is True,
        )

    def to_dict(self) -> dict[str, bool]:
        """Serialize back to store keys."""
        return {
            "convertOldToNew": self.convert_old_to_new,
            "convertFormToOld": self.convert_form_to_old,
            "convertCopyToNew": self.convert_copy_to_new,
            "avoidCompatibility": self.avoid_compatibility,
        }
