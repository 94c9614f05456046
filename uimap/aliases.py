"""Module specifier resolution for relative imports and tsconfig path aliases."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .logging import get_logger

logger = get_logger("aliases")

_CONFIG_FILES = ("tsconfig.json", "jsconfig.json")
_RESOLVE_SUFFIXES = (".tsx", ".ts", ".jsx", ".js")
_TRAILING_COMMA = re.compile(r",(\s*[}\]])")


def strip_json_comments(text: str) -> str:
    """Remove ``//`` and ``/* */`` comments outside of string literals."""
    result: List[str] = []
    index = 0
    length = len(text)
    in_string = False
    while index < length:
        char = text[index]
        if in_string:
            result.append(char)
            if char == "\\" and index + 1 < length:
                result.append(text[index + 1])
                index += 2
                continue
            if char == '"':
                in_string = False
            index += 1
            continue
        if char == '"':
            in_string = True
            result.append(char)
            index += 1
            continue
        if text.startswith("//", index):
            newline = text.find("\n", index)
            index = length if newline == -1 else newline
            continue
        if text.startswith("/*", index):
            end = text.find("*/", index + 2)
            index = length if end == -1 else end + 2
            continue
        result.append(char)
        index += 1
    return "".join(result)


def load_jsonc(path: Path) -> Dict[str, object]:
    """Parse a JSON-with-comments file such as tsconfig.json; {} on failure."""
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        return {}
    cleaned = _TRAILING_COMMA.sub(r"\1", strip_json_comments(text))
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as exc:
        logger.debug("Ignoring malformed %s: %s", path, exc)
        return {}
    return data if isinstance(data, dict) else {}


@dataclass
class AliasTable:
    """Path aliases keyed by pattern (``@/*``) with their target patterns."""

    base_url: Path
    paths: Dict[str, List[str]] = field(default_factory=dict)

    def candidates(self, specifier: str) -> Iterable[Path]:
        for pattern, targets in self.paths.items():
            if "*" in pattern:
                prefix, _, suffix = pattern.partition("*")
                if not (specifier.startswith(prefix) and specifier.endswith(suffix)):
                    continue
                if len(specifier) < len(prefix) + len(suffix):
                    continue
                captured = specifier[len(prefix) : len(specifier) - len(suffix)]
                for target in targets:
                    yield self.base_url / target.replace("*", captured, 1)
            elif specifier == pattern:
                for target in targets:
                    yield self.base_url / target


def load_alias_table(root: Path) -> AliasTable:
    """Read compilerOptions.paths from tsconfig/jsconfig, adding @/ and ~/ defaults."""
    options: Dict[str, object] = {}
    for name in _CONFIG_FILES:
        config_path = root / name
        if config_path.exists():
            options = _compiler_options(config_path, depth=0)
            break

    base_url = root
    raw_base = options.get("baseUrl")
    if isinstance(raw_base, str):
        base_url = (root / raw_base).resolve()

    table = AliasTable(base_url=base_url)
    raw_paths = options.get("paths")
    if isinstance(raw_paths, dict):
        for pattern, targets in raw_paths.items():
            if isinstance(pattern, str) and isinstance(targets, list):
                table.paths[pattern] = [str(target) for target in targets if isinstance(target, str)]

    default_base = root / "src" / "*" if (root / "src").is_dir() else root / "*"
    for pattern in ("@/*", "~/*"):
        if pattern not in table.paths:
            table.paths[pattern] = [str(default_base)]
    return table


def _compiler_options(path: Path, depth: int) -> Dict[str, object]:
    data = load_jsonc(path)
    options: Dict[str, object] = {}
    extends = data.get("extends")
    if isinstance(extends, str) and extends.startswith(".") and depth < 5:
        parent = (path.parent / extends).resolve()
        if parent.suffix != ".json":
            parent = parent.with_suffix(".json")
        if parent.exists():
            inherited = _compiler_options(parent, depth + 1)
            raw_base = inherited.get("baseUrl")
            if isinstance(raw_base, str):
                inherited["baseUrl"] = str((parent.parent / raw_base).resolve())
            options.update(inherited)
    compiler = data.get("compilerOptions")
    if isinstance(compiler, dict):
        options.update(compiler)
    return options


class ModuleResolver:
    """Maps import specifiers onto the set of known project files."""

    def __init__(self, root: Path, files: Sequence[Path], aliases: Optional[AliasTable] = None) -> None:
        self._root = root
        self._files: Set[Path] = set(files)
        self._aliases = aliases or load_alias_table(root)
        self._cache: Dict[Tuple[str, Path], Optional[Path]] = {}

    def is_local(self, specifier: str) -> bool:
        """True for relative specifiers or ones matching a configured alias."""
        if specifier.startswith((".", "/")):
            return True
        return any(True for _ in self._aliases.candidates(specifier))

    def resolve(self, specifier: str, importer: Path) -> Optional[Path]:
        key = (specifier, importer.parent)
        if key in self._cache:
            return self._cache[key]
        resolved = self._resolve(specifier, importer)
        self._cache[key] = resolved
        return resolved

    def _resolve(self, specifier: str, importer: Path) -> Optional[Path]:
        if specifier.startswith("."):
            bases: Iterable[Path] = [importer.parent / specifier]
        elif specifier.startswith("/"):
            bases = [self._root / specifier.lstrip("/")]
        else:
            bases = self._aliases.candidates(specifier)
        for base in bases:
            found = self._match(_normalise(base))
            if found is not None:
                return found
        return None

    def _match(self, base: Path) -> Optional[Path]:
        if base in self._files:
            return base
        stem = base.with_suffix("") if base.suffix in (".js", ".jsx") else base
        for suffix in _RESOLVE_SUFFIXES:
            candidate = stem.parent / f"{stem.name}{suffix}"
            if candidate in self._files:
                return candidate
        for suffix in _RESOLVE_SUFFIXES:
            candidate = base / f"index{suffix}"
            if candidate in self._files:
                return candidate
        return None


def _normalise(path: Path) -> Path:
    parts: List[str] = []
    for part in path.parts:
        if part == "..":
            if len(parts) > 1:
                parts.pop()
        elif part != ".":
            parts.append(part)
    return Path(*parts) if parts else path


__all__ = ["AliasTable", "ModuleResolver", "load_alias_table", "load_jsonc", "strip_json_comments"]
