"""Persisted voice settings (voice on/off, hands-free wake word mode).

Stored as one JSON record under the ``voice-settings`` key. Responses use
the ``{"success": ..., "data" | "error": ...}`` shape.
"""

from __future__ import annotations

import logging
from typing import Any

from souschef.storage import KeyValueStore

logger = logging.getLogger(__name__)

SETTINGS_KEY = "voice-settings"

# Defaults for a device with no saved settings
DEFAULT_PREFERENCES = {
    "voice_enabled": True,
    "wake_word_mode": False,
}


class VoicePreferences:
    """Read/update the device's voice settings record."""

    def __init__(self, store: KeyValueStore | None = None, key: str = SETTINGS_KEY):
        self._store = store or KeyValueStore()
        self._key = key

    def get_preferences(self) -> dict[str, Any]:
        saved = self._store.get_json(self._key)
        prefs = dict(DEFAULT_PREFERENCES)
        if isinstance(saved, dict):
            for key in DEFAULT_PREFERENCES:
                if key in saved:
                    prefs[key] = bool(saved[key])
        return {"success": True, "data": prefs}

    def update_preferences(self, updates: dict[str, Any]) -> dict[str, Any]:
        invalid = set(updates) - set(DEFAULT_PREFERENCES)
        if invalid:
            return {"success": False, "error": f"Invalid fields: {sorted(invalid)}"}
        if not updates:
            return {"success": False, "error": "No valid fields to update"}

        prefs = self.get_preferences()["data"]
        prefs.update({key: bool(value) for key, value in updates.items()})
        self._store.set_json(self._key, prefs)
        logger.debug("Voice preferences updated: %s", sorted(updates))
        return {"success": True, "data": prefs}

    @property
    def wake_word_mode(self) -> bool:
        return self.get_preferences()["data"]["wake_word_mode"]

    @property
    def voice_enabled(self) -> bool:
        return self.get_preferences()["data"]["voice_enabled"]

    def set_wake_word_mode(self, enabled: bool) -> dict[str, Any]:
        return self.update_preferences({"wake_word_mode": enabled})

    def set_voice_enabled(self, enabled: bool) -> dict[str, Any]:
        return self.update_preferences({"voice_enabled": enabled})
