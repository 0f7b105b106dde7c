"""Configuration management for taskday."""

import logging
import os
from dataclasses import dataclass
from pathlib import Path

logger = logging.getLogger(__name__)

TASKDAY_HOME = Path(os.environ.get("TASKDAY_HOME", Path.home() / ".taskday"))
CONFIG_FILE = TASKDAY_HOME / "config" / "taskday.conf"
DATA_DIR = TASKDAY_HOME / "data"


@dataclass
class Config:
    """taskday configuration."""

    # Seconds a resolved timezone stays cached per user
    timezone_cache_ttl: float = 30.0
    # Seconds bucket counts stay cached per (tenant, user)
    count_cache_ttl: float = 5.0
    # Keys inspected per cache write when evicting expired entries
    cache_sample_size: int = 20
    default_completed_window: int = 7
    max_page_size: int = 1000
    database_path: str = str(DATA_DIR / "tasks.sqlite3")
    preferences_path: str = str(DATA_DIR / "preferences.json")
    # When set, preferences come from the HTTP service instead of the JSON file
    preferences_url: str = ""
    preferences_token: str = ""


def _unquote(value: str) -> str:
    # Handle quoted values with inline comments: "value" # comment
    if value.startswith('"') or value.startswith("'"):
        quote = value[0]
        end_quote = value.find(quote, 1)
        return value[1:end_quote] if end_quote != -1 else value[1:]
    # Unquoted: strip inline comments
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _number(key: str, value: str, default, cast):
    try:
        parsed = cast(value)
    except ValueError:
        logger.warning(f"Invalid {key.upper()} value {value!r}, keeping {default}")
        return default
    if parsed < 0:
        logger.warning(f"Negative {key.upper()} value {value!r}, keeping {default}")
        return default
    return parsed


def load_config(path: Path | None = None) -> Config:
    """Load configuration from taskday.conf file."""
    config = Config()
    config_file = path or CONFIG_FILE

    if not config_file.exists():
        return config

    for line in config_file.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "timezone_cache_ttl":
                config.timezone_cache_ttl = _number(key, value, config.timezone_cache_ttl, float)
            case "count_cache_ttl":
                config.count_cache_ttl = _number(key, value, config.count_cache_ttl, float)
            case "cache_sample_size":
                config.cache_sample_size = _number(key, value, config.cache_sample_size, int)
            case "default_completed_window":
                config.default_completed_window = _number(key, value, config.default_completed_window, int)
            case "max_page_size":
                config.max_page_size = max(1, _number(key, value, config.max_page_size, int))
            case "database_path":
                config.database_path = value
            case "preferences_path":
                config.preferences_path = value
            case "preferences_url":
                config.preferences_url = value
            case "preferences_token":
                config.preferences_token = value
            case _:
                logger.debug(f"Ignoring unknown config key {key.upper()}")

    return config
