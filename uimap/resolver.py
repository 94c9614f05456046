"""Cross-file reference resolution: usage edges, navigation and data dependencies."""

from __future__ import annotations

import re
from concurrent.futures import Executor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .aliases import ModuleResolver
from .classifiers import Classification
from .errors import ReferenceUnresolved
from .logging import get_logger
from .models import (
    ComponentInfo,
    ContextInfo,
    DataDependency,
    DependencyType,
    EntityKind,
    HookInfo,
    ScanWarning,
    ServerActionFile,
    ServerActionRef,
    StoreInfo,
    UtilityInfo,
)
from .syntax import ImportBinding, NavTarget, ParsedModule

logger = get_logger("resolver")

QUERY_HOOKS = {"useQuery", "useSWR", "useMutation", "useInfiniteQuery", "useSuspenseQuery"}
FRAMEWORK_FUNCTIONS = (
    "getServerSideProps",
    "getStaticProps",
    "getStaticPaths",
    "generateStaticParams",
    "generateMetadata",
    "loader",
    "action",
)
NAVIGATION_CALLS = {"navigate", "redirect", "permanentRedirect"}
_ROUTER_METHODS = {"push", "replace", "navigate", "prefetch"}
_HOOK_CALL = re.compile(r"^use[A-Z0-9]\w*$")
_SOURCE_SPECIFIER = re.compile(r"\.(?:css|scss|sass|less|svg|png|jpe?g|gif|webp|json|md|mdx)$")

# Tie-break order when one identifier names several entities.
_KIND_ORDER = (
    EntityKind.COMPONENT,
    EntityKind.HOOK,
    EntityKind.CONTEXT,
    EntityKind.STORE,
    EntityKind.UTILITY,
)


@dataclass(frozen=True)
class EntityRef:
    kind: EntityKind
    name: str


@dataclass
class FileUsage:
    """Forward edges found in one classified file."""

    path: Path
    components: List[str] = field(default_factory=list)
    hooks: List[str] = field(default_factory=list)
    contexts: List[str] = field(default_factory=list)
    stores: List[str] = field(default_factory=list)
    utilities: List[str] = field(default_factory=list)
    hook_calls: List[str] = field(default_factory=list)
    links: List[str] = field(default_factory=list)
    data_dependencies: List[DataDependency] = field(default_factory=list)
    server_actions: List[ServerActionRef] = field(default_factory=list)
    warnings: List[ScanWarning] = field(default_factory=list)

    def add(self, ref: EntityRef) -> None:
        bucket = {
            EntityKind.COMPONENT: self.components,
            EntityKind.HOOK: self.hooks,
            EntityKind.CONTEXT: self.contexts,
            EntityKind.STORE: self.stores,
            EntityKind.UTILITY: self.utilities,
        }[ref.kind]
        if ref.name not in bucket:
            bucket.append(ref.name)


class NameUniverse:
    """Lookup tables from identifiers to classified entities."""

    def __init__(self, classifications: Sequence[Classification]) -> None:
        self.by_file: Dict[Path, List[EntityRef]] = {}
        self.action_files: Dict[Path, ServerActionFile] = {}
        self._tables: Dict[EntityKind, Dict[str, str]] = {kind: {} for kind in _KIND_ORDER}
        self._exports: Dict[Path, Dict[str, EntityRef]] = {}

        for classification in classifications:
            path = classification.source.path
            for entity in classification.entities:
                ref = self._register(entity)
                if ref is None:
                    if isinstance(entity, ServerActionFile):
                        self.action_files[path] = entity
                    continue
                self.by_file.setdefault(path, []).append(ref)
                exported = self._exports.setdefault(path, {})
                for name in _identifiers_for(entity):
                    exported.setdefault(name, ref)

        self._folded = {
            kind: {name.lower(): target for name, target in table.items()}
            for kind, table in self._tables.items()
        }

    def _register(self, entity: object) -> Optional[EntityRef]:
        if isinstance(entity, ComponentInfo):
            kind = EntityKind.COMPONENT
        elif isinstance(entity, HookInfo):
            kind = EntityKind.HOOK
        elif isinstance(entity, ContextInfo):
            kind = EntityKind.CONTEXT
        elif isinstance(entity, StoreInfo):
            kind = EntityKind.STORE
        elif isinstance(entity, UtilityInfo):
            kind = EntityKind.UTILITY
        else:
            return None
        table = self._tables[kind]
        for name in _identifiers_for(entity):
            table[name] = entity.name
        return EntityRef(kind, entity.name)

    def match(self, name: str) -> Tuple[Optional[EntityRef], bool]:
        """Match an identifier by name; the flag is True for a case-insensitive hit."""
        for kind in _KIND_ORDER:
            target = self._tables[kind].get(name)
            if target is not None:
                return EntityRef(kind, target), False
        folded = name.lower()
        for kind in _KIND_ORDER:
            target = self._folded[kind].get(folded)
            if target is not None:
                return EntityRef(kind, target), True
        return None, False

    def in_file(self, path: Path, imported: str, default_name: Optional[str]) -> Optional[EntityRef]:
        """Entity bound by importing ``imported`` from the classified file ``path``."""
        refs = self.by_file.get(path)
        if not refs:
            return None
        if imported in ("default", "*"):
            if default_name:
                named = self._exports.get(path, {}).get(default_name)
                if named is not None:
                    return named
            return sorted(refs, key=lambda ref: _KIND_ORDER.index(ref.kind))[0]
        return self._exports.get(path, {}).get(imported)


def _identifiers_for(entity: object) -> List[str]:
    if isinstance(entity, ContextInfo):
        return [entity.name, entity.provider_name]
    if isinstance(entity, (StoreInfo, UtilityInfo)):
        names = list(entity.exports)
        if isinstance(entity, StoreInfo):
            names.insert(0, entity.name)
        return names
    if isinstance(entity, ComponentInfo):
        return [entity.name]
    return [getattr(entity, "name")]


class ReferenceResolver:
    """Extracts usage, navigation and data edges once every file is classified."""

    def __init__(
        self,
        classifications: Sequence[Classification],
        modules: Dict[Path, ParsedModule],
        resolver: ModuleResolver,
        routes: Iterable[str],
    ) -> None:
        self._classifications = list(classifications)
        self._modules = modules
        self._resolver = resolver
        self.universe = NameUniverse(self._classifications)
        known = set(routes)
        self._dynamic_routes = sorted(route for route in known if ":" in route or "*" in route)

    def resolve_all(self, executor: Optional[Executor] = None) -> Dict[Path, FileUsage]:
        if executor is None:
            usages = [self.resolve(classification) for classification in self._classifications]
        else:
            usages = list(executor.map(self.resolve, self._classifications))
        return {usage.path: usage for usage in usages}

    def resolve(self, classification: Classification) -> FileUsage:
        source = classification.source
        module = source.module
        usage = FileUsage(path=source.path)
        own = set(ref.name for ref in self.universe.by_file.get(source.path, []))

        bound: Dict[str, EntityRef] = {}
        actions: Dict[str, ServerActionRef] = {}
        for binding in module.imports:
            if binding.type_only:
                continue
            self._bind_import(source.path, source.relative_path, binding, bound, actions, usage)

        for ref in bound.values():
            if ref.name not in own:
                usage.add(ref)

        imported = set(module.imported_names())
        local = set(module.declarations)
        for tag in module.jsx_tags:
            head = tag.split(".")[0]
            if not head[:1].isupper() or head in imported or head in local:
                continue
            self._fallback(head, source.relative_path, own, usage)

        for call in module.calls:
            head = call.callee.split(".")[0]
            if _HOOK_CALL.match(call.callee) and call.callee not in usage.hook_calls:
                usage.hook_calls.append(call.callee)
            if "." in call.callee or head in imported or head in local:
                continue
            self._fallback(head, source.relative_path, own, usage)

        usage.links = self._links(module, source.relative_path)
        usage.data_dependencies = self._data_dependencies(module, actions)
        usage.server_actions = list(actions.values())
        return usage

    # ------------------------------------------------------------------
    # Usage edges

    def _bind_import(
        self,
        importer: Path,
        relative: str,
        binding: ImportBinding,
        bound: Dict[str, EntityRef],
        actions: Dict[str, ServerActionRef],
        usage: FileUsage,
    ) -> None:
        target = self._resolver.resolve(binding.source, importer)
        if target is None:
            if self._resolver.is_local(binding.source) and not _SOURCE_SPECIFIER.search(binding.source):
                name = binding.local if binding.imported in ("default", "*") else binding.imported
                ref, folded = self.universe.match(name)
                if ref is not None:
                    if folded:
                        self._soft_warning(usage, relative, name, ref)
                    bound[binding.local] = ref
                else:
                    logger.debug("%s", ReferenceUnresolved(binding.source, relative))
            return

        action_file = self.universe.action_files.get(target)
        if action_file is not None:
            function = binding.imported
            if function in ("default", "*"):
                target_module = self._modules.get(target)
                function = (target_module.default_export if target_module else None) or binding.local
            actions[binding.local] = ServerActionRef(
                function_name=function,
                import_path=binding.source,
                source_file_path=action_file.relative_path,
            )
            return

        ref = self._entity_in(target, binding.imported, depth=0)
        if ref is not None:
            bound[binding.local] = ref

    def _entity_in(self, path: Path, imported: str, depth: int) -> Optional[EntityRef]:
        module = self._modules.get(path)
        if module is not None and depth < 4:
            reexport = module.reexports.get(imported)
            if reexport is not None:
                target = self._resolver.resolve(reexport[0], path)
                if target is not None:
                    found = self._entity_in(target, reexport[1], depth + 1)
                    if found is not None:
                        return found
        default_name = module.default_export if module is not None else None
        ref = self.universe.in_file(path, imported, default_name)
        if ref is not None:
            return ref
        if module is not None and depth < 4 and imported not in ("default", "*"):
            for source in module.star_reexports:
                target = self._resolver.resolve(source, path)
                if target is not None:
                    found = self._entity_in(target, imported, depth + 1)
                    if found is not None:
                        return found
        return None

    def _fallback(self, name: str, relative: str, own: Set[str], usage: FileUsage) -> None:
        ref, folded = self.universe.match(name)
        if ref is None or ref.name in own:
            return
        if folded:
            self._soft_warning(usage, relative, name, ref)
        usage.add(ref)

    @staticmethod
    def _soft_warning(usage: FileUsage, relative: str, name: str, ref: EntityRef) -> None:
        message = f"Matched '{name}' to {ref.kind.value} '{ref.name}' ignoring case"
        logger.debug("%s: %s", relative, message)
        warning = ScanWarning(kind="reference", message=message, path=relative)
        if warning not in usage.warnings:
            usage.warnings.append(warning)

    # ------------------------------------------------------------------
    # Navigation

    def _links(self, module: ParsedModule, relative: str) -> List[str]:
        targets: List[NavTarget] = [link.target for link in module.links]
        for call in module.calls:
            if call.target is not None and is_navigation_call(call.callee):
                targets.append(call.target)

        links: List[str] = []
        for target in targets:
            route = self.route_for(target)
            if route is None:
                if not target.is_static:
                    logger.debug("%s", ReferenceUnresolved(target.display, relative))
                continue
            if route not in links:
                links.append(route)
        return links

    def route_for(self, target: NavTarget) -> Optional[str]:
        """Route addressed by a navigation target, or None when it cannot be pinned down."""
        pattern = "\x00".join(target.parts)
        pattern = re.split(r"[?#]", pattern, maxsplit=1)[0]
        if "\x00" not in pattern:
            return normalise_href(pattern)
        if not pattern.startswith("/"):
            return None
        regex = re.compile(
            "^" + "[^/]+".join(re.escape(piece) for piece in pattern.split("\x00")) + "/?$"
        )
        matches = [route for route in self._dynamic_routes if regex.match(route)]
        return matches[0] if len(matches) == 1 else None

    # ------------------------------------------------------------------
    # Data dependencies

    def _data_dependencies(self, module: ParsedModule, actions: Dict[str, ServerActionRef]) -> List[DataDependency]:
        found: List[DataDependency] = []

        def _add(kind: DependencyType, source: str) -> None:
            dependency = DataDependency(type=kind, source=source)
            if dependency not in found:
                found.append(dependency)

        for call in module.calls:
            head = call.callee.split(".")[0]
            last = call.callee.split(".")[-1]
            if call.callee == "fetch" or head == "axios":
                _add(DependencyType.FETCH, call.target.display if call.target else call.callee)
            elif last in QUERY_HOOKS:
                _add(DependencyType.QUERY_HOOK, last)
            elif head in actions:
                _add(DependencyType.SERVER_ACTION, actions[head].source_file_path)

        for local, ref in actions.items():
            if re.search(r"\b(?:action|formAction)=\{\s*" + re.escape(local) + r"\b", module.text):
                _add(DependencyType.SERVER_ACTION, ref.source_file_path)

        exported = set(module.exports)
        for name in FRAMEWORK_FUNCTIONS:
            if name in exported:
                _add(DependencyType.FRAMEWORK_DATA_FUNCTION, name)
        return found


def is_navigation_call(callee: str) -> bool:
    if callee in NAVIGATION_CALLS:
        return True
    head, _, method = callee.rpartition(".")
    return method in _ROUTER_METHODS and head.split(".")[-1].lower().endswith("router")


def normalise_href(href: str) -> Optional[str]:
    """Internal route for a static href, or None for external and relative targets."""
    if not href.startswith("/") or href.startswith("//"):
        return None
    if len(href) > 1:
        href = href.rstrip("/") or "/"
    return href


__all__ = [
    "EntityRef",
    "FileUsage",
    "NameUniverse",
    "ReferenceResolver",
    "is_navigation_call",
    "normalise_href",
]
