"""
Application settings.

Settings are read once from ``settings.json`` in the per-user config directory
and passed to the components that need them.
"""
import json
import logging
from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .utils.resource_loader import get_config_dir

logger = logging.getLogger(__name__)

SETTINGS_FILE = "settings.json"


@dataclass
class AppConfig:
    """All tunable values, with defaults matching the built-in behavior."""

    # View
    min_zoom: float = 0.5
    max_zoom: float = 3.0
    zoom_step: float = 0.25

    # New text boxes
    default_width: float = 200
    default_height: float = 60
    default_text: str = "Type here..."
    default_font_size: int = 14
    default_font_family: str = "Arial"
    default_color: str = "#000000"
    default_background: str = "#ffffff"
    duplicate_offset: float = 10

    # History
    history_limit: Optional[int] = None

    # Export
    exact_alignment: bool = False

    # Rasterizer
    antialias: int = 8

    # Logging
    log_level: str = "INFO"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _value_fits(default: Any, value: Any, name: str) -> bool:
    """Check that ``value`` has the same shape as the field default."""
    if name == 'history_limit':
        return value is None or (isinstance(value, int) and not isinstance(value, bool)
                                 and value > 0)
    if isinstance(default, bool):
        return isinstance(value, bool)
    if isinstance(default, (int, float)):
        return isinstance(value, (int, float)) and not isinstance(value, bool)
    if isinstance(default, str):
        return isinstance(value, str)
    return False


def config_from_dict(data: Dict[str, Any]) -> AppConfig:
    """
    Build a config from a dictionary, keeping defaults for bad values.

    Args:
        data: Parsed settings

    Returns:
        AppConfig with every valid override applied
    """
    config = AppConfig()
    known = {f.name for f in fields(AppConfig)}

    for key, value in data.items():
        if key not in known:
            logger.warning("Ignoring unknown setting %r", key)
            continue
        if not _value_fits(getattr(config, key), value, key):
            logger.warning("Ignoring setting %s=%r: wrong type", key, value)
            continue
        setattr(config, key, value)

    if config.min_zoom <= 0 or config.min_zoom > config.max_zoom:
        logger.warning("Invalid zoom range %s..%s; using defaults",
                       config.min_zoom, config.max_zoom)
        config.min_zoom, config.max_zoom = AppConfig.min_zoom, AppConfig.max_zoom

    return config


def load_config(path: Optional[Union[str, Path]] = None) -> AppConfig:
    """
    Load settings from disk.

    Args:
        path: Optional explicit settings file; defaults to the user config dir

    Returns:
        The loaded config, or defaults if the file is missing or unreadable
    """
    if path is None:
        path = get_config_dir(create=False) / SETTINGS_FILE
    path = Path(path)

    if not path.exists():
        return AppConfig()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Could not read settings from %s: %s", path, e)
        return AppConfig()

    if not isinstance(data, dict):
        logger.warning("Settings file %s does not contain an object", path)
        return AppConfig()

    return config_from_dict(data)
