"""JSON-backed settings store."""

from __future__ import annotations

import copy
import json
import logging
from pathlib import Path
from typing import Any

from nowplay.utils import xdg_config_home

log = logging.getLogger(__name__)

_SETTINGS_DIR = "nowplay"
_SETTINGS_FILE = "settings.json"

DEFAULTS: dict[str, Any] = {
    "library": {"base_dir": None},
    "copy": {"destination": None, "amount": "0", "unit": 0},
    "player": {
        "kind": "video",
        "audio_path": "",
        "video_path": "smplayer",
        "cast_path": "castnow",
        "subtitle_scale": 1.3,
    },
    "media": {
        "audio_extensions": None,
        "video_extensions": None,
        "playlist_extensions": None,
    },
}


class Settings:
    """Persistent settings backed by a JSON file.

    Uses dot-notation keys for nested access:
        settings.get("copy.destination")  # reads data["copy"]["destination"]
        settings.set("copy.unit", 2)  # writes + saves

    Keys missing from the file fall back to ``DEFAULTS``.
    """

    _instance: Settings | None = None

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or (xdg_config_home() / _SETTINGS_DIR / _SETTINGS_FILE)
        self._data: dict[str, Any] = {}
        self._load()

    @classmethod
    def instance(cls) -> Settings:
        """Return the singleton settings instance."""
        if cls._instance is None:
            cls._instance = cls()
        return cls._instance

    @property
    def path(self) -> Path:
        return self._path

    def get(self, key: str, default: Any = None) -> Any:
        """Get a value by dot-notation key."""
        found, value = _lookup(self._data, key)
        if found:
            return value
        if default is not None:
            return default
        return _lookup(DEFAULTS, key)[1]

    def set(self, key: str, value: Any) -> None:
        """Set a value by dot-notation key and persist to disk."""
        parts = key.split(".")
        node = self._data
        for part in parts[:-1]:
            if part not in node or not isinstance(node[part], dict):
                node[part] = {}
            node = node[part]
        node[parts[-1]] = value
        self._save()

    def as_dict(self) -> dict[str, Any]:
        """Return the effective settings, defaults merged with stored values."""
        merged = copy.deepcopy(DEFAULTS)
        _merge(merged, self._data)
        return merged

    def _load(self) -> None:
        """Load settings from disk, gracefully handling errors."""
        if not self._path.exists():
            return
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Could not load settings from %s: %s", self._path, e)
            return
        if isinstance(data, dict):
            self._data = data
        else:
            log.warning("Ignoring settings in %s: not a JSON object", self._path)

    def _save(self) -> None:
        """Persist settings to disk."""
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            self._path.write_text(
                json.dumps(self._data, indent=2, ensure_ascii=False) + "\n",
                encoding="utf-8",
            )
        except OSError as e:
            log.warning("Could not save settings to %s: %s", self._path, e)


def _lookup(data: dict[str, Any], key: str) -> tuple[bool, Any]:
    node: Any = data
    for part in key.split("."):
        if not isinstance(node, dict) or part not in node:
            return False, None
        node = node[part]
    return True, node


def _merge(target: dict[str, Any], source: dict[str, Any]) -> None:
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _merge(target[key], value)
        else:
            target[key] = value
