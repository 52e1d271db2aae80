"""
User configuration persistence.

Stores timer and leaderboard tuning in a JSON file next to the data.
"""

import json
from pathlib import Path
from typing import TypedDict


class Config(TypedDict, total=False):
    """User configuration."""
    tick_interval: float  # Seconds between live timer samples
    min_turn_samples: int  # Completed turns needed before warnings show
    warning_grace_seconds: int  # No warnings until a turn runs longer than this
    leaderboard_size: int  # Entries kept per leaderboard category
    recent_window_days: int  # Window for "recent" sessions
    debug: bool


DEFAULT_CONFIG: Config = {
    "tick_interval": 1.0,
    "min_turn_samples": 3,
    "warning_grace_seconds": 10,
    "leaderboard_size": 10,
    "recent_window_days": 30,
    "debug": False,
}


def get_config_path(data_dir: Path | str = "data") -> Path:
    """Get path to config file."""
    return Path(data_dir) / ".turntally_config.json"


def load_config(data_dir: Path | str = "data") -> Config:
    """Load config from file, or return defaults if not found."""
    path = get_config_path(data_dir)

    if not path.exists():
        return DEFAULT_CONFIG.copy()

    try:
        with open(path, "r", encoding="utf-8") as f:
            saved = json.load(f)
        # Merge with defaults to handle missing keys
        config = DEFAULT_CONFIG.copy()
        config.update({k: v for k, v in saved.items() if k in DEFAULT_CONFIG})
        return config
    except (json.JSONDecodeError, IOError, AttributeError):
        return DEFAULT_CONFIG.copy()


def save_config(config: Config, data_dir: Path | str = "data") -> bool:
    """Save config to file. Returns True on success."""
    path = get_config_path(data_dir)
    path.parent.mkdir(parents=True, exist_ok=True)

    try:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(config, f, indent=2)
        return True
    except IOError:
        return False


def resolve_config(config: Config | None) -> Config:
    """Fill any missing keys of a partial config from the defaults."""
    resolved = DEFAULT_CONFIG.copy()
    if config:
        resolved.update(config)
    return resolved
