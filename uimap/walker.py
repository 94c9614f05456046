"""Project file discovery for React and Next.js source trees."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, List, Optional, Sequence, Set

from .config import ScannerSettings
from .errors import ProjectNotFoundError
from .logging import get_logger
from .models import ScanWarning

logger = get_logger("walker")

SOURCE_SUFFIXES = (".ts", ".tsx", ".js", ".jsx")

CONVENTIONAL_ROOTS = (
    "app",
    "pages",
    "components",
    "hooks",
    "lib",
    "utils",
    "helpers",
    "context",
    "contexts",
    "providers",
    "store",
    "stores",
    "state",
    "redux",
    "features",
    "modules",
    "views",
    "screens",
    "routes",
    "ui",
    "widgets",
    "shared",
    "common",
    "actions",
)

ENTRY_STEMS = ("App", "main", "index", "routes", "router")

_EXCLUDED_DIRS = {
    "node_modules",
    "dist",
    "build",
    "out",
    "coverage",
    "__tests__",
    "__mocks__",
}

_EXCLUDED_MARKERS = (".test.", ".spec.", ".stories.")


@dataclass
class IgnoreRule:
    """Represents an ignore rule parsed from .gitignore or .uimap.yml."""

    pattern: str
    directory_only: bool
    anchored: bool
    negate: bool
    has_slash: bool

    def matches(self, rel_path: str, is_dir: bool) -> bool:
        if not self.pattern:
            return False
        if self.directory_only and not is_dir:
            return False

        if self.anchored or self.has_slash:
            if fnmatchcase(rel_path, self.pattern):
                return True
            return rel_path.startswith(f"{self.pattern}/")

        return any(fnmatchcase(part, self.pattern) for part in rel_path.split("/"))


@dataclass
class WalkResult:
    """Candidate source files of one project, in sorted walk order."""

    root: Path
    files: List[Path] = field(default_factory=list)
    warnings: List[ScanWarning] = field(default_factory=list)

    def relative(self, path: Path) -> str:
        return path.relative_to(self.root).as_posix()


def build_ignore_rule(pattern: str, negate: bool = False) -> Optional[IgnoreRule]:
    pattern = pattern.strip()
    if not pattern:
        return None

    directory_only = pattern.endswith("/")
    if directory_only:
        pattern = pattern[:-1]

    anchored = pattern.startswith("/")
    if anchored:
        pattern = pattern[1:]

    return IgnoreRule(
        pattern=pattern,
        directory_only=directory_only,
        anchored=anchored,
        negate=negate,
        has_slash="/" in pattern,
    )


def parse_gitignore(path: Path) -> List[IgnoreRule]:
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    except (OSError, UnicodeDecodeError) as exc:
        logger.debug("Ignoring unreadable %s: %s", path, exc)
        return []

    rules: List[IgnoreRule] = []
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        negate = line.startswith("!")
        if negate:
            line = line[1:]
        rule = build_ignore_rule(line, negate=negate)
        if rule is not None:
            rules.append(rule)
    return rules


def should_ignore(rel_path: str, is_dir: bool, rules: Sequence[IgnoreRule]) -> bool:
    ignored = False
    for rule in rules:
        if rule.matches(rel_path, is_dir):
            ignored = not rule.negate
    return ignored


def is_source_file(name: str) -> bool:
    if not name.endswith(SOURCE_SUFFIXES) or name.endswith(".d.ts"):
        return False
    return not any(marker in name for marker in _EXCLUDED_MARKERS)


def check_project_root(root: Path) -> Path:
    """Return the resolved project root or raise ProjectNotFoundError."""
    resolved = root.expanduser().resolve()
    if not resolved.exists():
        raise ProjectNotFoundError(str(root))
    if not resolved.is_dir():
        raise ProjectNotFoundError(str(root), "not a directory")
    if not os.access(resolved, os.R_OK | os.X_OK):
        raise ProjectNotFoundError(str(root), "permission denied")
    return resolved


def walk_project(root: Path, config: Optional[ScannerSettings] = None) -> WalkResult:
    """Collect candidate source files under the conventional roots of a project."""
    config = config or ScannerSettings()
    root = check_project_root(root)
    result = WalkResult(root=root)

    rules: List[IgnoreRule] = []
    if config.follow_gitignore:
        rules.extend(parse_gitignore(root / ".gitignore"))
    for pattern in config.exclude_paths:
        rule = build_ignore_rule(pattern)
        if rule is not None:
            rules.append(rule)

    seen: Set[Path] = set()
    for directory in _candidate_roots(root, config.extra_roots):
        for path in _iter_files(root, directory, rules, result):
            seen.add(path)

    for path in _entry_files(root):
        if not should_ignore(path.relative_to(root).as_posix(), False, rules):
            seen.add(path)

    if not root.is_dir():
        raise ProjectNotFoundError(str(root), "removed during scan")

    result.files = sorted(seen, key=lambda item: item.relative_to(root).as_posix())
    logger.debug("Discovered %d candidate files under %s", len(result.files), root)
    return result


def _candidate_roots(root: Path, extra_roots: Sequence[str]) -> Iterator[Path]:
    names = list(CONVENTIONAL_ROOTS)
    names.extend(name.strip("/") for name in extra_roots if name.strip("/"))
    emitted: Set[Path] = set()
    for base in (root, root / "src"):
        for name in names:
            candidate = base / name
            if candidate in emitted or not candidate.is_dir():
                continue
            emitted.add(candidate)
            yield candidate


def _entry_files(root: Path) -> Iterator[Path]:
    for base, stems in ((root, ("middleware",)), (root / "src", ENTRY_STEMS + ("middleware",))):
        if not base.is_dir():
            continue
        for stem in stems:
            for suffix in SOURCE_SUFFIXES:
                candidate = base / f"{stem}{suffix}"
                if candidate.is_file():
                    yield candidate


def _iter_files(
    root: Path, start: Path, rules: Sequence[IgnoreRule], result: WalkResult
) -> Iterator[Path]:
    start_rel = start.relative_to(root).as_posix()
    if should_ignore(start_rel, True, rules):
        return

    def _on_error(exc: OSError) -> None:
        failed = Path(exc.filename) if exc.filename else start
        if not root.is_dir():
            raise ProjectNotFoundError(str(root), "removed during scan") from exc
        rel = failed.relative_to(root).as_posix() if failed.is_relative_to(root) else str(failed)
        logger.warning("Skipping unreadable directory %s: %s", rel, exc.strerror or exc)
        result.warnings.append(
            ScanWarning(kind="file-read", path=rel, message=f"Unreadable directory: {exc.strerror or exc}")
        )

    for dirpath, dirnames, filenames in os.walk(start, onerror=_on_error):
        current_dir = Path(dirpath)
        rel_dir = current_dir.relative_to(root).as_posix()

        kept = []
        for name in sorted(dirnames):
            if name in _EXCLUDED_DIRS or name.startswith("."):
                continue
            if should_ignore(f"{rel_dir}/{name}", True, rules):
                continue
            kept.append(name)
        dirnames[:] = kept

        for filename in sorted(filenames):
            if not is_source_file(filename):
                continue
            if should_ignore(f"{rel_dir}/{filename}", False, rules):
                continue
            yield current_dir / filename


__all__ = [
    "CONVENTIONAL_ROOTS",
    "IgnoreRule",
    "SOURCE_SUFFIXES",
    "WalkResult",
    "check_project_root",
    "is_source_file",
    "walk_project",
]
