"""Synchronizer configuration helpers."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

import yaml

from .constants import CONFIG_FILE, DEFAULT_MAX_WORKERS, ENV_CACHE_DIR, ENV_MAX_WORKERS

logger = logging.getLogger(__name__)


@dataclass
class SyncConfig:
    """Configuration for scanning and snapshot persistence."""

    cache_dir: Optional[Path] = None  # None -> platform cache directory
    max_workers: int = DEFAULT_MAX_WORKERS
    ignore: List[str] = field(default_factory=list)
    include_defaults: bool = True


def _coerce_workers(value, source: str) -> Optional[int]:
    try:
        workers = int(value)
    except (TypeError, ValueError):
        logger.warning("Ignoring non-integer max_workers from %s: %r", source, value)
        return None
    if workers < 1:
        logger.warning("Ignoring max_workers < 1 from %s: %r", source, value)
        return None
    return workers


def load_sync_config(root: Path) -> SyncConfig:
    """Load configuration from <root>/.codesync.yaml if present.

    Falls back to defaults if the file is missing or unreadable.
    Environment variables override file values.
    """
    config = SyncConfig()

    cfg_path = Path(root) / CONFIG_FILE
    if cfg_path.is_file():
        try:
            data = yaml.safe_load(cfg_path.read_text()) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.warning("Could not read %s, using defaults: %s", cfg_path, e)
            data = {}

        if not isinstance(data, dict):
            logger.warning("Expected a mapping in %s, using defaults", cfg_path)
            data = {}

        if data.get("cache_dir"):
            cache_dir = Path(str(data["cache_dir"])).expanduser()
            # Relative to the project, not the process working directory
            config.cache_dir = cache_dir if cache_dir.is_absolute() else Path(root) / cache_dir
        if "max_workers" in data:
            workers = _coerce_workers(data["max_workers"], str(cfg_path))
            if workers is not None:
                config.max_workers = workers
        ignore = data.get("ignore") or []
        if isinstance(ignore, list):
            config.ignore = [str(p) for p in ignore]
        config.include_defaults = bool(data.get("include_defaults", True))

    return _apply_env_overrides(config)


def _apply_env_overrides(config: SyncConfig) -> SyncConfig:
    """Apply environment variable overrides to config."""
    # CODESYNC_CACHE_DIR
    if cache_dir := os.environ.get(ENV_CACHE_DIR):
        config.cache_dir = Path(cache_dir).expanduser()

    # CODESYNC_MAX_WORKERS
    if workers := os.environ.get(ENV_MAX_WORKERS):
        coerced = _coerce_workers(workers, ENV_MAX_WORKERS)
        if coerced is not None:
            config.max_workers = coerced

    return config
