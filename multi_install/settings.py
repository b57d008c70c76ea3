"""Plugin settings stored as JSON in the data directory."""

import os
import json
import logging
from dataclasses import dataclass, asdict, fields
from typing import Dict, Any, Optional

from .utils.paths import SETTINGS_PATH

logger = logging.getLogger(__name__)


@dataclass
class Settings:
    host_url: str = "http://127.0.0.1:8765"     # Host library manager's local API
    poll_interval: float = 1.0                  # Seconds between installed-state checks
    item_timeout: float = 60.0                  # Max seconds to wait for a single game
    integrate_cooperating_addon: bool = True
    log_level: str = "INFO"
    event_reconnect_delay: float = 5.0          # Seconds before reconnecting the event stream

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Settings':
        """Build settings from a dict, ignoring unknown keys and keeping defaults for bad values."""
        settings = cls()
        for f in fields(cls):
            if f.name not in data:
                continue
            value = data[f.name]
            default = getattr(settings, f.name)
            try:
                if isinstance(default, bool):
                    if not isinstance(value, bool):
                        raise TypeError(f"expected bool, got {type(value).__name__}")
                elif isinstance(default, float):
                    value = float(value)
                    if value <= 0:
                        raise ValueError("must be positive")
                else:
                    value = str(value)
            except (TypeError, ValueError) as e:
                logger.warning(f"[Settings] Ignoring invalid value for {f.name}: {value!r} ({e})")
                continue
            setattr(settings, f.name, value)
        return settings


def load_settings(path: Optional[str] = None) -> Settings:
    """Load settings from disk, falling back to defaults.

    Args:
        path: Settings file path (defaults to SETTINGS_PATH)

    Returns:
        Settings instance
    """
    path = path or SETTINGS_PATH
    try:
        if os.path.exists(path):
            with open(path, 'r') as f:
                data = json.load(f)
            if isinstance(data, dict):
                return Settings.from_dict(data)
            logger.warning(f"[Settings] {path} does not contain an object, using defaults")
    except Exception as e:
        logger.error(f"[Settings] Error loading settings from {path}: {e}")
    return Settings()


def save_settings(settings: Settings, path: Optional[str] = None) -> bool:
    """Save settings to disk, keeping any keys this version does not know about."""
    path = path or SETTINGS_PATH
    try:
        os.makedirs(os.path.dirname(path), exist_ok=True)
        existing = {}
        if os.path.exists(path):
            with open(path, 'r') as f:
                existing = json.load(f)
            if not isinstance(existing, dict):
                existing = {}
        existing.update(settings.to_dict())
        with open(path, 'w') as f:
            json.dump(existing, f, indent=2)
        logger.info(f"[Settings] Saved settings to {path}")
        return True
    except Exception as e:
        logger.error(f"[Settings] Error saving settings: {e}")
        return False
