"""Assembly of classified entities and resolved edges into a frozen ScanResult."""

from __future__ import annotations

from dataclasses import replace
from datetime import UTC, datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple, TypeVar

from .classifiers import Classification
from .logging import get_logger
from .models import (
    ApiRouteInfo,
    ComponentInfo,
    ContextInfo,
    DependencySet,
    HookInfo,
    LayoutNode,
    MiddlewareInfo,
    PageInfo,
    ScanResult,
    ScanWarning,
    ServerActionFile,
    StoreInfo,
    UtilityInfo,
)
from .resolver import FileUsage
from .router import RouterInfo

logger = get_logger("assembler")

T = TypeVar("T")


def utc_timestamp() -> str:
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


class ScanResultAssembler:
    """Inserts forward and inverse edges together and freezes the snapshot."""

    def __init__(self, router: RouterInfo) -> None:
        self.router = router
        self.warnings: List[ScanWarning] = []

    def assemble(
        self,
        classifications: Sequence[Classification],
        usages: Dict[Path, FileUsage],
        warnings: Iterable[ScanWarning] = (),
    ) -> ScanResult:
        self.warnings = list(warnings)
        for classification in classifications:
            self.warnings.extend(classification.warnings)

        buckets: Dict[type, List[Tuple[object, Path]]] = {}
        for classification in classifications:
            for entity in classification.entities:
                buckets.setdefault(type(entity), []).append((entity, classification.source.path))

        components = self._dedupe(buckets.get(ComponentInfo, []), "component")
        hooks = self._dedupe(buckets.get(HookInfo, []), "hook")
        contexts = self._dedupe(buckets.get(ContextInfo, []), "context")
        stores = self._dedupe(buckets.get(StoreInfo, []), "store")
        utilities = self._dedupe(buckets.get(UtilityInfo, []), "utility")
        empty = FileUsage(path=Path())

        for usage in usages.values():
            self.warnings.extend(usage.warnings)

        known = {
            "components": {component.name for component, _ in components},
            "hooks": {hook.name for hook, _ in hooks},
            "contexts": {context.name for context, _ in contexts},
            "stores": {store.name for store, _ in stores},
            "utilities": {utility.name for utility, _ in utilities},
        }

        # Forward edges.
        pages: List[PageInfo] = []
        for page, path in buckets.get(PageInfo, []):
            usage = usages.get(path, empty)
            pages.append(
                replace(
                    page,
                    components=_sorted_known(usage.components, known["components"]),
                    links_to=tuple(sorted(set(usage.links))),
                    data_dependencies=tuple(usage.data_dependencies),
                )
            )
        pages.extend(self._unclaimed_routes(pages))

        forward: Dict[str, DependencySet] = {}
        for component, path in components:
            usage = usages.get(path, empty)
            forward[component.name] = DependencySet(
                components=_sorted_known(usage.components, known["components"] - {component.name}),
                hooks=_sorted_known(usage.hooks, known["hooks"]),
                contexts=_sorted_known(usage.contexts, known["contexts"]),
                utilities=_sorted_known(usage.utilities, known["utilities"]),
                stores=_sorted_known(usage.stores, known["stores"]),
            )

        # Inverse edges, derived from the forward sets above.
        pages_using: Dict[str, Set[str]] = {}
        for page in pages:
            for name in page.components:
                pages_using.setdefault(name, set()).add(page.route)
        users: Dict[Tuple[str, str], Set[str]] = {}
        for name, deps in forward.items():
            for field_name in ("components", "hooks", "contexts", "utilities", "stores"):
                for target in getattr(deps, field_name):
                    users.setdefault((field_name, target), set()).add(name)

        def _used(field_name: str, name: str) -> Tuple[str, ...]:
            return tuple(sorted(users.get((field_name, name), set())))

        closures = transitive_dependencies(forward)
        final_components = []
        for component, path in components:
            usage = usages.get(path, empty)
            final_components.append(
                replace(
                    component,
                    used_in_pages=tuple(sorted(pages_using.get(component.name, set()))),
                    used_in_components=_used("components", component.name),
                    dependencies=forward[component.name],
                    all_dependencies=closures[component.name],
                    data_dependencies=tuple(usage.data_dependencies),
                    server_actions=tuple(usage.server_actions),
                )
            )

        final_hooks = []
        for hook, path in hooks:
            usage = usages.get(path, empty)
            dependencies: List[str] = []
            for name in list(usage.hook_calls) + list(usage.hooks) + list(usage.utilities):
                if name != hook.name and name not in dependencies:
                    dependencies.append(name)
            final_hooks.append(
                replace(hook, dependencies=tuple(dependencies), used_in=_used("hooks", hook.name))
            )

        result = ScanResult(
            project_path=str(self.router.root),
            project_name=self.router.project_name,
            framework=self.router.framework,
            router_type=self.router.router_type,
            scanned_at=utc_timestamp(),
            pages=tuple(pages),
            components=tuple(final_components),
            hooks=tuple(final_hooks),
            contexts=tuple(replace(context, used_in=_used("contexts", context.name)) for context, _ in contexts),
            utilities=tuple(replace(utility, used_in=_used("utilities", utility.name)) for utility, _ in utilities),
            server_action_files=tuple(entity for entity, _ in buckets.get(ServerActionFile, [])),
            stores=tuple(replace(store, used_in=_used("stores", store.name)) for store, _ in stores),
            api_routes=tuple(entity for entity, _ in buckets.get(ApiRouteInfo, [])),
            middleware=self._middleware(buckets.get(MiddlewareInfo, [])),
            layout_hierarchy=build_layout_hierarchy(pages),
            warnings=tuple(self.warnings),
        )
        logger.debug(
            "Assembled %d pages, %d components, %d hooks, %d contexts, %d utilities",
            len(result.pages),
            len(result.components),
            len(result.hooks),
            len(result.contexts),
            len(result.utilities),
        )
        return result

    def _dedupe(self, entries: List[Tuple[T, Path]], label: str) -> List[Tuple[T, Path]]:
        """Keep the last definition per name, preserving walk order of the winners."""
        winners: Dict[str, int] = {}
        for index, (entity, path) in enumerate(entries):
            name = getattr(entity, "name")
            if name in winners:
                previous = entries[winners[name]][1]
                message = f"Duplicate {label} '{name}': {path.name} replaces {previous.name}"
                logger.warning("%s", message)
                self.warnings.append(
                    ScanWarning(kind="collision", message=message, path=self._relative(path))
                )
            winners[name] = index
        keep = set(winners.values())
        return [entry for index, entry in enumerate(entries) if index in keep]

    def _middleware(self, entries: List[Tuple[MiddlewareInfo, Path]]) -> Optional[MiddlewareInfo]:
        if not entries:
            return None
        if len(entries) > 1:
            for _, path in entries[:-1]:
                self.warnings.append(
                    ScanWarning(
                        kind="collision",
                        message=f"Multiple middleware files; {entries[-1][1].name} wins",
                        path=self._relative(path),
                    )
                )
        return entries[-1][0]

    def _unclaimed_routes(self, pages: List[PageInfo]) -> List[PageInfo]:
        claimed = {(page.route, page.component_name) for page in pages}
        claimed_files = {(page.route, page.file_path) for page in pages}
        extra: List[PageInfo] = []
        for entry in self.router.route_table.entries:
            if entry.file is not None and (entry.route, str(entry.file)) in claimed_files:
                continue
            if (entry.route, entry.component) in claimed:
                continue
            claimed.add((entry.route, entry.component))
            message = f"Route {entry.route} renders {entry.component or 'a lazy module'} whose file was not found"
            self.warnings.append(
                ScanWarning(kind="reference", message=message, path=self._relative(entry.declared_in))
            )
            extra.append(
                PageInfo(
                    route=entry.route,
                    file_name=entry.declared_in.name,
                    file_path=str(entry.declared_in),
                    component_name=entry.component,
                )
            )
        return extra

    def _relative(self, path: Path) -> str:
        try:
            return path.relative_to(self.router.root).as_posix()
        except ValueError:
            return str(path)


def _sorted_known(names: Iterable[str], known: Set[str]) -> Tuple[str, ...]:
    return tuple(sorted(set(name for name in names if name in known)))


def transitive_dependencies(forward: Dict[str, DependencySet]) -> Dict[str, DependencySet]:
    """Union of dependency sets over every component reachable from each component."""
    closures: Dict[str, DependencySet] = {}
    for name in forward:
        reachable: Set[str] = set()
        stack = list(forward[name].components)
        while stack:
            current = stack.pop()
            if current in reachable or current == name:
                continue
            reachable.add(current)
            if current in forward:
                stack.extend(forward[current].components)

        merged: Dict[str, Set[str]] = {
            "hooks": set(forward[name].hooks),
            "contexts": set(forward[name].contexts),
            "utilities": set(forward[name].utilities),
            "stores": set(forward[name].stores),
        }
        for current in reachable:
            deps = forward.get(current)
            if deps is None:
                continue
            for key, bucket in merged.items():
                bucket.update(getattr(deps, key))
        closures[name] = DependencySet(
            components=tuple(sorted(reachable)),
            **{key: tuple(sorted(values)) for key, values in merged.items()},
        )
    return closures


def build_layout_hierarchy(pages: Sequence[PageInfo]) -> Optional[LayoutNode]:
    """Nest layouts by directory: each layout's parent is the closest enclosing layout."""
    layouts = sorted(
        (page for page in pages if page.is_layout),
        key=lambda page: (len(Path(page.file_path).parent.parts), page.file_path),
    )
    if not layouts:
        return None

    children: Dict[str, List[PageInfo]] = {}
    roots: List[PageInfo] = []
    for layout in layouts:
        directory = Path(layout.file_path).parent
        parent = None
        for candidate in layouts:
            candidate_dir = Path(candidate.file_path).parent
            if candidate is layout or candidate_dir == directory:
                continue
            if directory.is_relative_to(candidate_dir):
                if parent is None or len(candidate_dir.parts) > len(Path(parent.file_path).parent.parts):
                    parent = candidate
        if parent is None:
            roots.append(layout)
        else:
            children.setdefault(parent.file_path, []).append(layout)

    def _node(layout: PageInfo) -> LayoutNode:
        return LayoutNode(
            route=layout.route,
            file_path=layout.file_path,
            children=tuple(_node(child) for child in children.get(layout.file_path, [])),
        )

    if len(roots) == 1:
        return _node(roots[0])
    return LayoutNode(route="/", file_path="", children=tuple(_node(root) for root in roots))


__all__ = [
    "ScanResultAssembler",
    "build_layout_hierarchy",
    "transitive_dependencies",
    "utc_timestamp",
]
