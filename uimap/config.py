"""Configuration loading for uimap (.uimap.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".uimap.yml"
DEFAULT_STATE_DIR = ".uimap"
DEFAULT_MAX_WORKERS = 8


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class ScannerSettings:
    """Settings under the ``scanner`` key: file discovery and classification workers."""

    max_workers: int = DEFAULT_MAX_WORKERS
    exclude_paths: List[str] = field(default_factory=list)
    extra_roots: List[str] = field(default_factory=list)
    follow_gitignore: bool = True


@dataclass
class CacheConfig:
    """Scan cache settings."""

    enabled: bool = True
    directory: str = DEFAULT_STATE_DIR


@dataclass
class ScannerConfig:
    """Represents the settings defined in .uimap.yml."""

    root: Path
    scanner: ScannerSettings = field(default_factory=ScannerSettings)
    cache: CacheConfig = field(default_factory=CacheConfig)


def load_config(config_path: Path) -> ScannerConfig:
    """Load configuration from disk, returning defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return ScannerConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    scanner = ScannerSettings()
    scanner_data = _as_dict(data.get("scanner"))
    if scanner_data:
        max_workers = _as_int(scanner_data.get("max_workers"))
        if max_workers is not None:
            if max_workers < 1:
                raise ConfigError("scanner.max_workers must be a positive integer")
            scanner.max_workers = max_workers
        scanner.exclude_paths = _as_str_list(scanner_data.get("exclude_paths"))
        scanner.extra_roots = _as_str_list(scanner_data.get("extra_roots"))
        follow = _as_bool(scanner_data.get("follow_gitignore"))
        if follow is not None:
            scanner.follow_gitignore = follow

    cache = CacheConfig()
    cache_data = _as_dict(data.get("cache"))
    if cache_data:
        enabled = _as_bool(cache_data.get("enabled"))
        if enabled is not None:
            cache.enabled = enabled
        directory = _as_str(cache_data.get("directory"))
        if directory:
            if Path(directory).is_absolute() or ".." in Path(directory).parts:
                raise ConfigError("cache.directory must be a relative path inside the project")
            cache.directory = directory

    return ScannerConfig(root=root, scanner=scanner, cache=cache)


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.name != CONFIG_FILENAME:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigError(f"Failed to read {path.name}: {exc}") from exc
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float)) and not isinstance(value, bool) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "CacheConfig",
    "ConfigError",
    "ScannerConfig",
    "ScannerSettings",
    "load_config",
]
