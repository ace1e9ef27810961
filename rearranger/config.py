"""
Rearranger — Local JSON settings.

Data is persisted in ``<project>/data/rearranger.json``.
"""

import json
import os

_DATA_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "..", "data")
_DATA_FILE = os.path.join(_DATA_DIR, "rearranger.json")

# ── Default settings ─────────────────────────────────────────────────────
DEFAULT_SETTINGS = {
    "history_size": 5,
    "strict_terms": False,          # raise on unrecognised term text
    "clamp_history_cursor": True,   # pin cursor to the tail after eviction
    "default_equation": "2x + 3 = 7",
    "log_level": "WARNING",
}


def _ensure_dir() -> None:
    os.makedirs(_DATA_DIR, exist_ok=True)


def _load_file() -> dict:
    if os.path.exists(_DATA_FILE):
        try:
            with open(_DATA_FILE, "r", encoding="utf-8") as f:
                data = json.load(f)
            if isinstance(data, dict):
                return data
        except (json.JSONDecodeError, OSError):
            pass
    return {}


def get_settings() -> dict:
    """Return the stored settings merged over the defaults."""
    merged = dict(DEFAULT_SETTINGS)
    merged.update(_load_file())
    return merged


def save_settings(settings: dict) -> None:
    """Persist *settings*; unknown keys are kept as-is."""
    _ensure_dir()
    with open(_DATA_FILE, "w", encoding="utf-8") as f:
        json.dump(settings, f, indent=2, ensure_ascii=False)


def reset_settings() -> None:
    save_settings(dict(DEFAULT_SETTINGS))
