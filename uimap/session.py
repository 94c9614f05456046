"""Scan sessions: cache reuse and coalescing of concurrent scans per project."""

from __future__ import annotations

import threading
from concurrent.futures import Future
from pathlib import Path
from typing import Callable, Dict, Optional

from .logging import get_logger
from .models import ScanResult
from .scanner import ProjectScanner, load_project_config
from .stores import ScanCache, normalise_project_path
from .walker import check_project_root


class ScanSession:
    """Entry point for scans; at most one pipeline runs per project path.

    Callers that ask for a project already being scanned wait on the same
    future and receive the same :class:`ScanResult` object.
    """

    def __init__(
        self,
        *,
        cache: Optional[ScanCache] = None,
        scanner_factory: Callable[[], ProjectScanner] = ProjectScanner,
        use_cache: bool = True,
    ) -> None:
        self._cache = cache
        self._scanner_factory = scanner_factory
        self._use_cache = use_cache
        self._lock = threading.Lock()
        self._inflight: Dict[str, Future] = {}
        self._waiting: Dict[str, int] = {}
        self.logger = get_logger("session")

    def scan(self, project_path: Path | str, force_rescan: bool = False) -> ScanResult:
        key = normalise_project_path(project_path)
        with self._lock:
            future = self._inflight.get(key)
            owner = future is None
            if owner:
                future = Future()
                self._inflight[key] = future
            else:
                self._waiting[key] = self._waiting.get(key, 0) + 1

        if not owner:
            self.logger.debug("Joining in-flight scan of %s", key)
            try:
                return future.result()
            finally:
                with self._lock:
                    self._waiting[key] -= 1
                    if not self._waiting[key]:
                        del self._waiting[key]

        try:
            result = self._run(key, force_rescan)
        except BaseException as exc:
            future.set_exception(exc)
            raise
        else:
            future.set_result(result)
            return result
        finally:
            with self._lock:
                self._inflight.pop(key, None)

    def waiters(self, project_path: Path | str) -> int:
        """Number of callers currently waiting on an in-flight scan of ``project_path``."""
        with self._lock:
            return self._waiting.get(normalise_project_path(project_path), 0)

    def in_flight(self, project_path: Path | str) -> bool:
        with self._lock:
            return normalise_project_path(project_path) in self._inflight

    def clear_cache(self, project_path: Path | str) -> bool:
        root = Path(normalise_project_path(project_path))
        config, _ = load_project_config(root)
        return self._cache_for(config.cache.directory).clear(root)

    def _run(self, key: str, force_rescan: bool) -> ScanResult:
        root = check_project_root(Path(key))
        config, config_warning = load_project_config(root)
        cache = self._cache_for(config.cache.directory) if self._use_cache and config.cache.enabled else None

        if cache is not None and not force_rescan:
            cached = cache.load(root)
            if cached is not None:
                self.logger.info("Using cached scan for %s (scanned %s)", root, cached.scanned_at)
                return cached

        scanner = self._scanner_factory()
        result = scanner.scan(root, config=config, warnings=[config_warning] if config_warning else [])
        if cache is not None:
            cache.save(root, result)
        return result

    def _cache_for(self, directory: str) -> ScanCache:
        return self._cache if self._cache is not None else ScanCache(directory)


def scan_project(
    project_path: Path | str,
    *,
    force_rescan: bool = False,
    session: Optional[ScanSession] = None,
) -> ScanResult:
    """Scan ``project_path`` with ``session`` or a fresh session."""
    return (session or ScanSession()).scan(project_path, force_rescan=force_rescan)


__all__ = ["ScanSession", "scan_project"]
