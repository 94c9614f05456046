"""Router convention detection, route derivation and React Router route tables."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Set

from .aliases import ModuleResolver
from .logging import get_logger
from .models import Framework, RouterType
from .syntax import ParsedModule

logger = get_logger("router")

APP_ROOTS = ("app", "src/app")
PAGES_ROOTS = ("pages", "src/pages")
ENTRY_FILES = ("src/App", "src/main", "src/index", "src/routes", "src/router", "App", "main", "index")

_APP_ROUTE_MARKERS = {"page", "layout"}
_REACT_ROUTER_PACKAGES = ("react-router", "react-router-dom")

ModuleLoader = Callable[[Path], Optional[ParsedModule]]


def load_package_json(root: Path) -> Dict[str, object]:
    """Return the parsed package.json contents or an empty dict."""
    package_json = root / "package.json"
    if not package_json.exists():
        return {}
    try:
        data = json.loads(package_json.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError):
        return {}
    if isinstance(data, dict):
        return data
    return {}


def package_dependencies(package: Dict[str, object]) -> Set[str]:
    names: Set[str] = set()
    for key in ("dependencies", "devDependencies", "peerDependencies"):
        deps = package.get(key)
        if isinstance(deps, dict):
            names.update(name for name in deps if isinstance(name, str))
    return names


@dataclass(frozen=True)
class RouteEntry:
    """One declared React Router route and the file its element lives in."""

    route: str
    component: Optional[str]
    file: Optional[Path]
    declared_in: Path


@dataclass
class RouteTable:
    entries: List[RouteEntry] = field(default_factory=list)

    def add(self, entry: RouteEntry) -> None:
        for existing in self.entries:
            if existing.route == entry.route and existing.component == entry.component:
                return
        self.entries.append(entry)

    def entries_for(self, path: Path, component_name: Optional[str]) -> List[RouteEntry]:
        """Routes rendered by ``path``, matching by file first, then by name."""
        matched = [entry for entry in self.entries if entry.file == path]
        if component_name:
            matched.extend(
                entry
                for entry in self.entries
                if entry.file is None and entry.component == component_name
            )
        return matched

    def __len__(self) -> int:
        return len(self.entries)


@dataclass
class RouterInfo:
    """Router facts computed once per scan and shared by every classification."""

    router_type: RouterType
    framework: Framework
    root: Path
    router_root: Optional[Path] = None
    package: Dict[str, object] = field(default_factory=dict)
    route_table: RouteTable = field(default_factory=RouteTable)

    @property
    def project_name(self) -> str:
        name = self.package.get("name")
        return name if isinstance(name, str) and name else self.root.name

    def relative_to_router(self, path: Path) -> Optional[str]:
        if self.router_root is None:
            return None
        try:
            return path.relative_to(self.router_root).as_posix()
        except ValueError:
            return None


def detect_router(
    root: Path,
    files: Sequence[Path],
    load_module: ModuleLoader,
    resolver: ModuleResolver,
) -> RouterInfo:
    """Detect the routing convention of a project from its layout and manifest."""
    package = load_package_json(root)
    dependencies = package_dependencies(package)
    relative = {path.relative_to(root).as_posix(): path for path in files}

    router_type = RouterType.UNKNOWN
    router_root: Optional[Path] = None

    app_root = _find_router_root(relative, APP_ROOTS, lambda stem: stem in _APP_ROUTE_MARKERS)
    if app_root is not None:
        router_type, router_root = RouterType.NEXTJS_APP, root / app_root
    else:
        pages_root = _find_router_root(relative, PAGES_ROOTS, lambda stem: True)
        uses_react_router = any(name in dependencies for name in _REACT_ROUTER_PACKAGES)
        # a pages directory only means Next.js when the manifest agrees, or when there is none
        if pages_root is not None and ("next" in dependencies or not package):
            router_type, router_root = RouterType.NEXTJS_PAGES, root / pages_root
        elif uses_react_router or _entry_uses_router(root, relative, load_module):
            router_type = RouterType.REACT_ROUTER

    if router_type in (RouterType.NEXTJS_APP, RouterType.NEXTJS_PAGES) or "next" in dependencies:
        framework = Framework.NEXTJS
    elif router_type is RouterType.REACT_ROUTER or "react" in dependencies:
        framework = Framework.REACT
    else:
        framework = Framework.UNKNOWN

    info = RouterInfo(
        router_type=router_type,
        framework=framework,
        root=root,
        router_root=router_root,
        package=package,
    )
    if router_type is RouterType.REACT_ROUTER:
        info.route_table = build_route_table(root, relative, load_module, resolver)
    logger.debug("Detected router %s (framework %s)", router_type.value, framework.value)
    return info


def _find_router_root(
    relative: Dict[str, Path], candidates: Sequence[str], accept: Callable[[str], bool]
) -> Optional[str]:
    for candidate in candidates:
        prefix = f"{candidate}/"
        for rel_path in relative:
            if rel_path.startswith(prefix) and accept(Path(rel_path).stem):
                return candidate
    return None


def _entry_files(relative: Dict[str, Path]) -> List[Path]:
    entries: List[Path] = []
    for rel_path, path in relative.items():
        stem_path = rel_path.rsplit(".", 1)[0]
        if stem_path in ENTRY_FILES:
            entries.append(path)
    return entries


def _entry_uses_router(root: Path, relative: Dict[str, Path], load_module: ModuleLoader) -> bool:
    for path in _entry_files(relative):
        module = load_module(path)
        if module is None:
            continue
        if any(binding.source.startswith(_REACT_ROUTER_PACKAGES) for binding in module.imports):
            return True
    return False


def _route_definition_files(relative: Dict[str, Path]) -> List[Path]:
    entries = set(_entry_files(relative))
    found: Dict[str, Path] = {rel: path for rel, path in relative.items() if path in entries}
    for rel_path, path in relative.items():
        lowered = rel_path.lower()
        stem = Path(lowered).stem
        if "route" in stem or "/router/" in f"/{lowered}" or "/routes/" in f"/{lowered}":
            found[rel_path] = path
    return [found[key] for key in sorted(found)]


def build_route_table(
    root: Path, relative: Dict[str, Path], load_module: ModuleLoader, resolver: ModuleResolver
) -> RouteTable:
    """Collect declared routes and bind each element to the file defining it."""
    table = RouteTable()
    for path in _route_definition_files(relative):
        module = load_module(path)
        if module is None or not module.routes:
            continue
        imports = module.imported_names()
        for decl in module.routes:
            target: Optional[Path] = None
            if decl.lazy_source:
                target = resolver.resolve(decl.lazy_source, path)
            elif decl.component:
                head = decl.component.split(".")[0]
                if head in module.lazy_imports:
                    target = resolver.resolve(module.lazy_imports[head], path)
                elif head in imports:
                    target = resolver.resolve(imports[head].source, path)
                elif head in module.declarations:
                    target = path
            table.add(RouteEntry(route=decl.path, component=decl.component, file=target, declared_in=path))
    logger.debug("Collected %d React Router routes", len(table))
    return table


# ----------------------------------------------------------------------
# Next.js route derivation


def convert_segment(segment: str) -> str:
    """Translate a dynamic filesystem segment into route syntax."""
    if (segment.startswith("[[...") and segment.endswith("]]")) or (
        segment.startswith("[...") and segment.endswith("]")
    ):
        return "*"
    if segment.startswith("[") and segment.endswith("]"):
        return f":{segment[1:-1]}"
    return segment


def is_route_group(segment: str) -> bool:
    return (segment.startswith("(") and segment.endswith(")")) or segment.startswith("@")


def is_private_segment(segment: str) -> bool:
    return segment.startswith("_")


def _join(segments: Sequence[str]) -> str:
    return "/" + "/".join(segments) if segments else "/"


def derive_app_route(relative_path: str) -> str:
    """Route for an App Router file given its path relative to the app directory.

    >>> derive_app_route("blog/[slug]/page.tsx")
    '/blog/:slug'
    """
    directories = relative_path.split("/")[:-1]
    return _join([convert_segment(part) for part in directories if not is_route_group(part)])


def derive_pages_route(relative_path: str) -> str:
    """Route for a Pages Router file given its path relative to the pages directory.

    >>> derive_pages_route("blog/index.tsx")
    '/blog'
    """
    parts = relative_path.split("/")
    parts[-1] = parts[-1].rsplit(".", 1)[0]
    if parts[-1] == "index":
        parts = parts[:-1]
    return _join([convert_segment(part) for part in parts if not is_route_group(part)])


__all__ = [
    "RouteEntry",
    "RouteTable",
    "RouterInfo",
    "build_route_table",
    "convert_segment",
    "derive_app_route",
    "derive_pages_route",
    "detect_router",
    "load_package_json",
    "package_dependencies",
]
