"""Scan pipeline: walk, classify, resolve references and assemble."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .aliases import ModuleResolver
from .assembler import ScanResultAssembler
from .classifiers import Classification, EntityClassifier, SourceFile
from .config import ConfigError, ScannerConfig, ScannerSettings, load_config
from .errors import FileReadError, ProjectNotFoundError
from .logging import get_logger
from .models import EntityKind, PageInfo, ScanResult, ScanWarning
from .resolver import ReferenceResolver
from .router import RouterInfo, detect_router
from .syntax import ParsedModule, parse_module
from .walker import WalkResult, check_project_root, walk_project

Reader = Callable[[Path], str]
Walker = Callable[[Path, ScannerSettings], WalkResult]


def read_source(path: Path) -> str:
    return path.read_text(encoding="utf-8")


def load_project_config(root: Path) -> Tuple[ScannerConfig, Optional[ScanWarning]]:
    """Load ``.uimap.yml``, falling back to defaults with a warning when it is invalid."""
    try:
        return load_config(root), None
    except ConfigError as exc:
        get_logger("config").warning("Using default configuration: %s", exc)
        return ScannerConfig(root=root), ScanWarning(kind="config", message=str(exc), path=".uimap.yml")


class ProjectScanner:
    """Runs the full pipeline for one project and returns a fresh ScanResult.

    ``reader`` and ``walker`` replace file reads and directory listing, so
    callers can scan virtual trees or simulate I/O failures.
    """

    def __init__(
        self,
        *,
        reader: Reader = read_source,
        walker: Walker = walk_project,
        max_workers: Optional[int] = None,
    ) -> None:
        self._reader = reader
        self._walker = walker
        self._max_workers = max_workers
        self.logger = get_logger("scanner")

    def scan(
        self,
        project_path: Path | str,
        *,
        config: Optional[ScannerConfig] = None,
        warnings: Iterable[ScanWarning] = (),
    ) -> ScanResult:
        root = check_project_root(Path(project_path))
        collected: List[ScanWarning] = list(warnings)
        if config is None:
            config, config_warning = load_project_config(root)
            if config_warning is not None:
                collected.append(config_warning)

        self.logger.info("Scanning %s", root)
        walk = self._walker(root, config.scanner)
        collected.extend(walk.warnings)
        self.logger.debug("Walker found %d candidate files", len(walk.files))

        loader = _ModuleLoader(root, self._reader, self._log_exception)
        resolver = ModuleResolver(root, walk.files)
        workers = self._max_workers or config.scanner.max_workers

        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="uimap") as executor:
            router = detect_router(root, walk.files, loader.load, resolver)
            classifier = EntityClassifier(router)

            def _classify(path: Path) -> Optional[Classification]:
                module = loader.load(path)
                if module is None:
                    return None
                return classifier.classify(SourceFile(path, walk.relative(path), module))

            results = list(executor.map(_classify, walk.files))
            _ensure_root(root)

            classifications = [result for result in results if result is not None]
            entities = [item for item in classifications if item.kind is not EntityKind.SKIPPED]
            self.logger.debug(
                "Classified %d files (%d skipped)", len(entities), len(classifications) - len(entities)
            )

            reference = ReferenceResolver(entities, loader.modules, resolver, _known_routes(entities, router))
            usages = reference.resolve_all(executor)

        _ensure_root(root)
        collected.extend(loader.failures(walk.files))
        result = ScanResultAssembler(router).assemble(classifications, usages, collected)
        self.logger.info(
            "Scan of %s complete: %d pages, %d components, %d warnings",
            root,
            len(result.pages),
            len(result.components),
            len(result.warnings),
        )
        return result

    def _log_exception(self, message: str, exc: Exception) -> None:
        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.exception("%s: %s", message, exc)
        else:
            self.logger.warning("%s: %s", message, exc)


class _ModuleLoader:
    """Reads and parses each file at most once, shared across worker threads."""

    def __init__(self, root: Path, reader: Reader, log_exception: Callable[[str, Exception], None]) -> None:
        self._root = root
        self._reader = reader
        self._log_exception = log_exception
        self._lock = threading.Lock()
        self.modules: Dict[Path, ParsedModule] = {}
        self._failures: Dict[Path, ScanWarning] = {}

    def load(self, path: Path) -> Optional[ParsedModule]:
        with self._lock:
            if path in self.modules:
                return self.modules[path]
            if path in self._failures:
                return None

        relative = path.relative_to(self._root).as_posix()
        module: Optional[ParsedModule] = None
        failure: Optional[ScanWarning] = None
        try:
            text = self._reader(path)
        except (OSError, UnicodeDecodeError) as exc:
            error = FileReadError(relative, str(exc))
            self._log_exception("Skipping file", error)
            failure = ScanWarning(kind="file-read", message=str(error), path=relative)
        else:
            try:
                module = parse_module(path, text)
            except Exception as exc:  # pragma: no cover - parser guard
                self._log_exception(f"Failed to parse {relative}", exc)
                failure = ScanWarning(kind="classification", message=f"Could not parse {relative}: {exc}", path=relative)

        with self._lock:
            if module is not None:
                return self.modules.setdefault(path, module)
            self._failures.setdefault(path, failure)  # type: ignore[arg-type]
        return None

    def failures(self, order: Iterable[Path]) -> List[ScanWarning]:
        return [self._failures[path] for path in order if path in self._failures]


def _ensure_root(root: Path) -> None:
    if not root.is_dir():
        raise ProjectNotFoundError(str(root), "removed during scan")


def _known_routes(classifications: Iterable[Classification], router: RouterInfo) -> List[str]:
    routes = [
        entity.route
        for classification in classifications
        for entity in classification.entities
        if isinstance(entity, PageInfo)
    ]
    routes.extend(entry.route for entry in router.route_table.entries)
    return routes


__all__ = ["ProjectScanner", "load_project_config", "read_source"]
