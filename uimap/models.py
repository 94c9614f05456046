"""Core data models shared across uimap components.

Every entity is a frozen dataclass whose collections are tuples, so an
assembled :class:`ScanResult` is a fixed snapshot. Field names serialise to
camelCase JSON (``file_path`` -> ``filePath``), the shape consumed by the
HTTP and editor layers.
"""

from __future__ import annotations

import dataclasses
import json
import typing
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional, Tuple


class RouterType(str, Enum):
    """Routing convention detected for a project."""

    NEXTJS_APP = "nextjs-app"
    NEXTJS_PAGES = "nextjs-pages"
    REACT_ROUTER = "react-router"
    UNKNOWN = "unknown"


class Framework(str, Enum):
    NEXTJS = "nextjs"
    REACT = "react"
    UNKNOWN = "unknown"


class DependencyType(str, Enum):
    """Category of a data dependency."""

    FETCH = "fetch"
    SERVER_ACTION = "server-action"
    FRAMEWORK_DATA_FUNCTION = "framework-data-function"
    QUERY_HOOK = "query-hook"


class EntityKind(str, Enum):
    """Outcome of classifying a single file."""

    PAGE = "page"
    API_ROUTE = "api-route"
    MIDDLEWARE = "middleware"
    HOOK = "hook"
    CONTEXT = "context"
    COMPONENT = "component"
    SERVER_ACTION = "server-action"
    STORE = "store"
    UTILITY = "utility"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class PropInfo:
    name: str
    type: str = "unknown"
    required: bool = True
    default_value: Optional[str] = None


@dataclass(frozen=True)
class DataDependency:
    type: DependencyType
    source: str


@dataclass(frozen=True)
class DependencySet:
    """Names of entities one component depends on, grouped by kind."""

    components: Tuple[str, ...] = ()
    hooks: Tuple[str, ...] = ()
    contexts: Tuple[str, ...] = ()
    utilities: Tuple[str, ...] = ()
    stores: Tuple[str, ...] = ()

    def is_empty(self) -> bool:
        return not (self.components or self.hooks or self.contexts or self.utilities or self.stores)


@dataclass(frozen=True)
class ServerActionRef:
    """A server action function imported by a component."""

    function_name: str
    import_path: str
    source_file_path: str


@dataclass(frozen=True)
class PageInfo:
    route: str
    file_name: str
    file_path: str
    is_layout: bool = False
    is_loading: bool = False
    is_error: bool = False
    is_template: bool = False
    is_not_found: bool = False
    component_name: Optional[str] = None
    components: Tuple[str, ...] = ()
    links_to: Tuple[str, ...] = ()
    data_dependencies: Tuple[DataDependency, ...] = ()

    @property
    def is_plain_page(self) -> bool:
        return not (
            self.is_layout or self.is_loading or self.is_error or self.is_template or self.is_not_found
        )


@dataclass(frozen=True)
class ComponentInfo:
    name: str
    file_name: str
    file_path: str
    is_client_component: bool = False
    props: Tuple[PropInfo, ...] = ()
    exports: Tuple[str, ...] = ()
    used_in_pages: Tuple[str, ...] = ()
    used_in_components: Tuple[str, ...] = ()
    dependencies: DependencySet = field(default_factory=DependencySet)
    all_dependencies: DependencySet = field(default_factory=DependencySet)
    data_dependencies: Tuple[DataDependency, ...] = ()
    server_actions: Tuple[ServerActionRef, ...] = ()


@dataclass(frozen=True)
class HookInfo:
    name: str
    file_name: str
    file_path: str
    dependencies: Tuple[str, ...] = ()
    used_in: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ContextInfo:
    name: str
    provider_name: str
    file_name: str
    file_path: str
    used_in: Tuple[str, ...] = ()


@dataclass(frozen=True)
class UtilityInfo:
    name: str
    file_name: str
    file_path: str
    exports: Tuple[str, ...] = ()
    used_in: Tuple[str, ...] = ()


@dataclass(frozen=True)
class StoreInfo:
    """State-management module (redux slice, zustand store, jotai atoms, ...)."""

    name: str
    file_name: str
    file_path: str
    type: str
    exports: Tuple[str, ...] = ()
    used_in: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ServerActionFile:
    file_path: str
    relative_path: str
    exported_functions: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ApiRouteInfo:
    route: str
    file_name: str
    file_path: str
    methods: Tuple[str, ...] = ()


@dataclass(frozen=True)
class MiddlewareInfo:
    file_name: str
    file_path: str
    matcher_patterns: Tuple[str, ...] = ()


@dataclass(frozen=True)
class LayoutNode:
    route: str
    file_path: str
    children: Tuple["LayoutNode", ...] = ()


@dataclass(frozen=True)
class ScanWarning:
    """A condition absorbed during a scan that reduced result completeness."""

    kind: str
    message: str
    path: Optional[str] = None


@dataclass(frozen=True)
class ScanResult:
    """Immutable snapshot of a project's UI architecture."""

    project_path: str
    project_name: str
    framework: Framework
    router_type: RouterType
    scanned_at: str
    pages: Tuple[PageInfo, ...] = ()
    components: Tuple[ComponentInfo, ...] = ()
    hooks: Tuple[HookInfo, ...] = ()
    contexts: Tuple[ContextInfo, ...] = ()
    utilities: Tuple[UtilityInfo, ...] = ()
    server_action_files: Tuple[ServerActionFile, ...] = ()
    stores: Tuple[StoreInfo, ...] = ()
    api_routes: Tuple[ApiRouteInfo, ...] = ()
    middleware: Optional[MiddlewareInfo] = None
    layout_hierarchy: Optional[LayoutNode] = None
    warnings: Tuple[ScanWarning, ...] = ()

    def component(self, name: str) -> Optional[ComponentInfo]:
        for component in self.components:
            if component.name == name:
                return component
        return None

    def pages_for(self, route: str) -> Tuple[PageInfo, ...]:
        return tuple(page for page in self.pages if page.route == route)

    def to_dict(self) -> Dict[str, Any]:
        return to_json_dict(self)

    def to_json(self, *, indent: int | None = 2) -> str:
        return json.dumps(self.to_dict(), indent=indent)

    @classmethod
    def from_dict(cls, payload: Any) -> "ScanResult":
        """Rebuild a snapshot from :meth:`to_dict` output.

        Raises ``ValueError`` when the payload does not have the expected shape.
        """
        return from_json_dict(cls, payload)


# ----------------------------------------------------------------------
# camelCase JSON codec


def camel_case(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part[:1].upper() + part[1:] for part in rest)


def to_json_dict(value: Any) -> Any:
    """Convert dataclasses, enums and tuples into JSON-ready structures."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            camel_case(item.name): to_json_dict(getattr(value, item.name))
            for item in dataclasses.fields(value)
        }
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [to_json_dict(item) for item in value]
    return value


_HINT_CACHE: Dict[type, Dict[str, Any]] = {}


def from_json_dict(cls: type, payload: Any) -> Any:
    if not isinstance(payload, dict):
        raise ValueError(f"Expected an object for {cls.__name__}, got {type(payload).__name__}")
    hints = _HINT_CACHE.get(cls)
    if hints is None:
        hints = typing.get_type_hints(cls)
        _HINT_CACHE[cls] = hints
    kwargs: Dict[str, Any] = {}
    for item in dataclasses.fields(cls):
        key = camel_case(item.name)
        if key not in payload:
            if item.default is dataclasses.MISSING and item.default_factory is dataclasses.MISSING:
                raise ValueError(f"Missing field '{key}' for {cls.__name__}")
            continue
        kwargs[item.name] = _decode(hints[item.name], payload[key], key)
    return cls(**kwargs)


def _decode(hint: Any, value: Any, key: str) -> Any:
    origin = typing.get_origin(hint)
    if origin is typing.Union:
        args = [arg for arg in typing.get_args(hint) if arg is not type(None)]
        if value is None:
            return None
        return _decode(args[0], value, key)
    if origin is tuple:
        if not isinstance(value, list):
            raise ValueError(f"Expected a list for '{key}'")
        item_hint = typing.get_args(hint)[0]
        return tuple(_decode(item_hint, item, key) for item in value)
    if isinstance(hint, type) and issubclass(hint, Enum):
        try:
            return hint(value)
        except ValueError as exc:
            raise ValueError(f"Invalid value {value!r} for '{key}'") from exc
    if dataclasses.is_dataclass(hint):
        return from_json_dict(hint, value)
    if hint is bool:
        if not isinstance(value, bool):
            raise ValueError(f"Expected a boolean for '{key}'")
        return value
    if hint is str:
        if not isinstance(value, str):
            raise ValueError(f"Expected a string for '{key}'")
        return value
    return value


__all__ = [
    "ApiRouteInfo",
    "ComponentInfo",
    "ContextInfo",
    "DataDependency",
    "DependencySet",
    "DependencyType",
    "EntityKind",
    "Framework",
    "HookInfo",
    "LayoutNode",
    "MiddlewareInfo",
    "PageInfo",
    "PropInfo",
    "RouterType",
    "ScanResult",
    "ScanWarning",
    "ServerActionFile",
    "ServerActionRef",
    "StoreInfo",
    "UtilityInfo",
    "camel_case",
]
