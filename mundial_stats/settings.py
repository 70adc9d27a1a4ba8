"""
Settings Loader

Loads the effective dashboard settings: compiled-in defaults from
``mundial_stats.config`` overlaid with the persisted override store.

The override store is a JSON document with two keys:
- MUNDIAL_DASHBOARD_URLS: partial source key -> URL mapping
- MUNDIAL_DASHBOARD_CONFIG: partial display-label mapping

The engine never writes settings itself; ``save_overrides`` and
``reset_overrides`` exist for the admin surface.

Usage:
    from mundial_stats.settings import load_settings
    settings = load_settings()
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from mundial_stats.config import (
    CONFIG_OVERRIDE_KEY,
    CSV_URLS,
    DEFAULT_APP_CONFIG,
    SETTINGS_FILE,
    URLS_OVERRIDE_KEY,
)
from mundial_stats.utils import atomic_write_json, setup_logging, validate_source_keys

# --- Module Logger ---
logger = setup_logging(__name__)

_OVERRIDES_CACHE: dict = {"path": None, "mtime": None, "overrides": {}}


@dataclass(frozen=True)
class AppConfig:
    """Display labels, passed through to presentation untouched."""
    title_part1: str = DEFAULT_APP_CONFIG["titlePart1"]
    title_part2: str = DEFAULT_APP_CONFIG["titlePart2"]
    subtitle: str = DEFAULT_APP_CONFIG["subtitle"]

    @classmethod
    def from_dict(cls, data: Mapping) -> "AppConfig":
        merged = {**DEFAULT_APP_CONFIG, **{k: v for k, v in data.items() if k in DEFAULT_APP_CONFIG}}
        return cls(
            title_part1=str(merged["titlePart1"]),
            title_part2=str(merged["titlePart2"]),
            subtitle=str(merged["subtitle"]),
        )

    def to_dict(self) -> dict:
        return {
            "titlePart1": self.title_part1,
            "titlePart2": self.title_part2,
            "subtitle": self.subtitle,
        }


@dataclass(frozen=True)
class DashboardSettings:
    """Everything a refresh needs: where each dataset lives, plus labels."""
    sources: Mapping[str, str] = field(default_factory=lambda: MappingProxyType(dict(CSV_URLS)))
    app: AppConfig = field(default_factory=AppConfig)

    @classmethod
    def from_overrides(cls, urls: Mapping | None = None, app: Mapping | None = None) -> "DashboardSettings":
        sources = dict(CSV_URLS)
        for key, url in (urls or {}).items():
            if key not in CSV_URLS:
                logger.warning(f"Ignoring override for unknown source '{key}'")
                continue
            if isinstance(url, str) and url.strip():
                sources[key] = url.strip()
        return cls(sources=MappingProxyType(sources), app=AppConfig.from_dict(app or {}))


def load_overrides(path: Path = SETTINGS_FILE) -> dict:
    """
    Read the override store with a lightweight mtime cache.

    A missing, unreadable or malformed file means "no overrides".

    Returns:
        Dict possibly holding URLS_OVERRIDE_KEY and CONFIG_OVERRIDE_KEY
    """
    if not path.exists():
        _OVERRIDES_CACHE.update(path=path, mtime=None, overrides={})
        return {}

    try:
        mtime = path.stat().st_mtime
    except OSError:
        mtime = None

    if _OVERRIDES_CACHE["path"] == path and mtime is not None and _OVERRIDES_CACHE["mtime"] == mtime:
        return _OVERRIDES_CACHE["overrides"]

    try:
        with open(path, encoding="utf-8") as f:
            overrides = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.warning(f"Could not read overrides from {path}: {e}")
        overrides = {}

    if not isinstance(overrides, dict):
        logger.warning(f"Skipping {path}: expected a JSON object")
        overrides = {}

    _OVERRIDES_CACHE.update(path=path, mtime=mtime, overrides=overrides)
    return overrides


def load_settings(path: Path = SETTINGS_FILE) -> DashboardSettings:
    """Build the effective settings: defaults overlaid with stored overrides."""
    overrides = load_overrides(path)

    urls = overrides.get(URLS_OVERRIDE_KEY)
    app = overrides.get(CONFIG_OVERRIDE_KEY)
    if urls is not None and not isinstance(urls, dict):
        logger.warning(f"Ignoring {URLS_OVERRIDE_KEY}: expected an object")
        urls = None
    if app is not None and not isinstance(app, dict):
        logger.warning(f"Ignoring {CONFIG_OVERRIDE_KEY}: expected an object")
        app = None

    return DashboardSettings.from_overrides(urls, app)


def save_overrides(urls: Mapping[str, str], app: AppConfig, path: Path = SETTINGS_FILE) -> DashboardSettings:
    """
    Persist source and label overrides atomically.

    Args:
        urls: Source key -> URL (subset of CSV_URLS keys)
        app: Display labels
        path: Override store location

    Returns:
        The settings a subsequent refresh will use

    Raises:
        ValueError: If urls contains an unknown source key
    """
    validate_source_keys(dict(urls))
    document = {
        URLS_OVERRIDE_KEY: dict(urls),
        CONFIG_OVERRIDE_KEY: app.to_dict(),
    }
    atomic_write_json(document, path)
    _OVERRIDES_CACHE.update(path=None, mtime=None, overrides={})
    logger.info(f"Saved overrides for {len(urls)} sources to {path}")
    return load_settings(path)


def reset_overrides(path: Path = SETTINGS_FILE) -> DashboardSettings:
    """Remove the override store; defaults apply from the next load."""
    if path.exists():
        path.unlink()
        logger.info(f"Removed overrides at {path}")
    _OVERRIDES_CACHE.update(path=None, mtime=None, overrides={})
    return DashboardSettings()
