"""Base classes and shared helpers for entity classifiers."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Tuple

from ..models import EntityKind, ScanWarning
from ..router import RouterInfo
from ..syntax import Declaration, ParsedModule

_PASCAL_CASE = re.compile(r"^[A-Z][A-Za-z0-9]*$")
_HOOK_NAME = re.compile(r"^use[A-Z0-9]\w*$")
CONTEXT_FACTORIES = frozenset({"createContext", "React.createContext"})


@dataclass
class SourceFile:
    """A parsed candidate file handed to the classifier chain."""

    path: Path
    relative_path: str
    module: ParsedModule

    @property
    def file_name(self) -> str:
        return self.path.name


@dataclass
class Classification:
    """Entities produced for one file, before any cross-file edges exist."""

    kind: EntityKind
    source: SourceFile
    entities: List[Any] = field(default_factory=list)
    warnings: List[ScanWarning] = field(default_factory=list)


class Classifier(ABC):
    """Contract for one category in the ordered classification chain."""

    kind: EntityKind

    @abstractmethod
    def classify(self, source: SourceFile, router: RouterInfo) -> Optional[Classification]:
        """Return a classification when the file belongs to this category."""


def is_pascal_case(name: str) -> bool:
    return bool(_PASCAL_CASE.match(name))


def is_hook_name(name: str) -> bool:
    return bool(_HOOK_NAME.match(name))


def declares_context(module: ParsedModule) -> bool:
    return any(declaration.initializer_call in CONTEXT_FACTORIES for declaration in module.declarations.values())


def module_stem(path: Path) -> str:
    """File stem, or the parent directory name for ``index`` files."""
    stem = path.name.split(".")[0]
    if stem == "index" and path.parent.name:
        return path.parent.name
    return stem


def pascal_from_path(path: Path) -> str:
    parts = re.split(r"[^A-Za-z0-9]+", module_stem(path))
    return "".join(part[:1].upper() + part[1:] for part in parts if part)


def export_names(module: ParsedModule) -> Tuple[str, ...]:
    names = list(module.exports)
    if module.default_export and module.default_export not in names:
        names.append(module.default_export)
    return tuple(names)


def _renders(declaration: Optional[Declaration]) -> bool:
    if declaration is None or not declaration.contains_jsx:
        return False
    return declaration.is_function or declaration.kind == "class"


def primary_component(module: ParsedModule, path: Path) -> Optional[Tuple[str, Declaration]]:
    """Name and declaration of the default or first exported JSX-returning component."""
    if module.has_default_export:
        declaration = module.default_declaration
        if _renders(declaration):
            name = module.default_export
            if not name or name == "default":
                name = declaration.name if declaration.name != "default" else pascal_from_path(path)
            if is_pascal_case(name):
                return name, declaration
    for declaration in module.exported_declarations():
        if is_pascal_case(declaration.name) and _renders(declaration):
            return declaration.name, declaration
    return None


__all__ = [
    "CONTEXT_FACTORIES",
    "Classification",
    "Classifier",
    "SourceFile",
    "declares_context",
    "export_names",
    "is_hook_name",
    "is_pascal_case",
    "module_stem",
    "pascal_from_path",
    "primary_component",
]
