"""Persistent cache for assembled scan results."""

from __future__ import annotations

import json
import os
from datetime import UTC, datetime
from pathlib import Path
from typing import Dict, Optional

from ..config import DEFAULT_STATE_DIR
from ..errors import CacheCorrupted, CacheMismatch
from ..logging import get_logger
from ..models import ScanResult

_CACHE_VERSION = 1
_CACHE_FILENAME = "scan.json"

logger = get_logger("cache")


def normalise_project_path(project_path: Path | str) -> str:
    return str(Path(project_path).expanduser().resolve())


class ScanCache:
    """Stores one ScanResult per project under ``<project>/.uimap/scan.json``."""

    def __init__(self, directory: str = DEFAULT_STATE_DIR) -> None:
        self._directory = directory

    def path_for(self, project_path: Path | str) -> Path:
        return Path(normalise_project_path(project_path)) / self._directory / _CACHE_FILENAME

    def load(self, project_path: Path | str) -> Optional[ScanResult]:
        """Return the cached snapshot, or None when it is absent, corrupt or foreign."""
        try:
            return self.read(project_path)
        except FileNotFoundError:
            return None
        except CacheMismatch as exc:
            logger.info("Ignoring scan cache: %s", exc)
            return None
        except CacheCorrupted as exc:
            logger.warning("Ignoring corrupted scan cache: %s", exc)
            return None

    def read(self, project_path: Path | str) -> ScanResult:
        """Strict variant of :meth:`load` that raises the cache errors."""
        expected = normalise_project_path(project_path)
        cache_path = self.path_for(project_path)
        try:
            payload = json.loads(cache_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            raise
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise CacheCorrupted(f"{cache_path}: {exc}") from exc

        if not isinstance(payload, dict) or payload.get("version") != _CACHE_VERSION:
            raise CacheCorrupted(f"{cache_path}: unsupported cache layout")
        found = payload.get("projectPath")
        if found != expected:
            raise CacheMismatch(expected, found)
        try:
            result = ScanResult.from_dict(payload.get("scanResult"))
        except (TypeError, ValueError) as exc:
            raise CacheCorrupted(f"{cache_path}: {exc}") from exc
        if result.project_path != expected:
            raise CacheMismatch(expected, result.project_path)
        return result

    def save(self, project_path: Path | str, result: ScanResult) -> bool:
        payload: Dict[str, object] = {
            "version": _CACHE_VERSION,
            "projectPath": normalise_project_path(project_path),
            "scanResult": result.to_dict(),
            "cachedAt": datetime.now(UTC).isoformat().replace("+00:00", "Z"),
        }
        cache_path = self.path_for(project_path)
        tmp_path = cache_path.with_suffix(".json.tmp")
        try:
            cache_path.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")
            os.replace(tmp_path, cache_path)
        except OSError as exc:
            logger.warning("Failed to write scan cache %s: %s", cache_path, exc)
            return False
        return True

    def clear(self, project_path: Path | str) -> bool:
        """Remove the cached snapshot; True when a file was deleted."""
        cache_path = self.path_for(project_path)
        try:
            cache_path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            logger.warning("Failed to remove scan cache %s: %s", cache_path, exc)
            return False
        return True


__all__ = ["ScanCache", "normalise_project_path"]
