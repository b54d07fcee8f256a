"""Configuration loading utilities for the resource store."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List

import yaml  # type: ignore

from . import paths
from .locks import LOCK_PROVIDERS
from .watcher import DEFAULT_DELAY, TimeUnit

logger = logging.getLogger(__name__)


class ConfigError(Exception):
    """Raised when the configuration file is missing or invalid."""


@dataclass
class StoreConfig:
    """Where the store lives and how resources are locked."""

    base_directory: Path
    lock_provider: str = "memory"


@dataclass
class WatcherConfig:
    """Poll interval of the change watcher."""

    delay: float = DEFAULT_DELAY
    unit: TimeUnit = TimeUnit.SECONDS


@dataclass
class AppConfig:
    """Top-level configuration structure."""

    store: StoreConfig
    watcher: WatcherConfig = field(default_factory=WatcherConfig)
    watch: List[str] = field(default_factory=list)


def load_config(path: Path) -> AppConfig:
    """Load and validate the YAML configuration file."""

    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as exc:  # pragma: no cover - logging helper
        raise ConfigError(f"Failed to parse YAML configuration: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError("Configuration root must be a mapping")

    store_cfg = _parse_store_config(data.get("store"), config_path=path)
    watcher_cfg = _parse_watcher_config(data.get("watcher"))
    watch = _parse_watch_paths(data.get("watch", []))

    return AppConfig(store=store_cfg, watcher=watcher_cfg, watch=watch)


def _parse_store_config(raw: Any, *, config_path: Path) -> StoreConfig:
    if not isinstance(raw, dict):
        raise ConfigError("'store' section must be a mapping")

    base_directory_raw = raw.get("base_directory")
    if not isinstance(base_directory_raw, str):
        raise ConfigError("store.base_directory must be a string")

    base_directory = Path(base_directory_raw).expanduser()
    if not base_directory.is_absolute():
        base_directory = (config_path.parent / base_directory).resolve()

    lock_provider = raw.get("lock_provider", "memory")
    if lock_provider not in LOCK_PROVIDERS:
        allowed = ", ".join(sorted(LOCK_PROVIDERS))
        raise ConfigError(f"store.lock_provider must be one of: {allowed}")

    return StoreConfig(base_directory=base_directory, lock_provider=lock_provider)


def _parse_watcher_config(raw: Any) -> WatcherConfig:
    if raw is None:
        return WatcherConfig()
    if not isinstance(raw, dict):
        raise ConfigError("'watcher' section must be a mapping")

    delay = raw.get("delay", DEFAULT_DELAY)
    if isinstance(delay, bool):
        raise ConfigError("watcher.delay must be numeric")
    try:
        delay_val = float(delay)
    except (TypeError, ValueError) as exc:
        raise ConfigError("watcher.delay must be numeric") from exc
    if delay_val <= 0:
        raise ConfigError("watcher.delay must be positive")

    unit_raw = raw.get("unit", TimeUnit.SECONDS.value)
    try:
        unit = TimeUnit(str(unit_raw).lower())
    except ValueError as exc:
        allowed = ", ".join(option.value for option in TimeUnit)
        raise ConfigError(f"watcher.unit must be one of: {allowed}") from exc

    logger.info("Watcher polls every %s %s", delay_val, unit.value)
    return WatcherConfig(delay=delay_val, unit=unit)


def _parse_watch_paths(raw: Any) -> List[str]:
    if raw is None:
        return []
    if isinstance(raw, str):
        raw = [raw]
    if not isinstance(raw, list):
        raise ConfigError("'watch' section must be a list of store paths")

    items: List[str] = []
    for index, elem in enumerate(raw):
        if not isinstance(elem, str):
            raise ConfigError(f"watch[{index}] must be a string")
        try:
            items.append(paths.valid(elem))
        except ValueError as exc:
            raise ConfigError(f"watch[{index}] is not a valid store path: {exc}") from exc
    return items
