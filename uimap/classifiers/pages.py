"""Special-file classification: pages, API routes and middleware."""

from __future__ import annotations

import re
from typing import List, Optional, Tuple

from ..models import ApiRouteInfo, EntityKind, MiddlewareInfo, PageInfo, RouterType
from ..router import RouterInfo, derive_app_route, derive_pages_route, is_private_segment
from .base import Classification, Classifier, SourceFile, primary_component

HTTP_METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")

_APP_PAGE_FLAGS = {
    "page": None,
    "layout": "is_layout",
    "loading": "is_loading",
    "error": "is_error",
    "global-error": "is_error",
    "template": "is_template",
    "not-found": "is_not_found",
}
_PAGES_RESERVED = {"_app", "_document", "_error"}
_MIDDLEWARE_FILES = re.compile(r"^(?:src/)?middleware\.(?:ts|tsx|js|jsx)$")
_METHOD_CHECK = re.compile(r"""method\s*[!=]==?\s*['"]([A-Za-z]+)['"]""")
_METHOD_CASE = re.compile(r"""case\s+['"](GET|POST|PUT|PATCH|DELETE|HEAD|OPTIONS)['"]""")
_MATCHER = re.compile(r"""matcher\s*:\s*(\[[^\]]*\]|'[^']*'|"[^"]*")""", re.DOTALL)
_QUOTED = re.compile(r"'([^']*)'|\"([^\"]*)\"")


class RouteFileClassifier(Classifier):
    """Maps router convention files onto pages, API routes and middleware."""

    kind = EntityKind.PAGE

    def classify(self, source: SourceFile, router: RouterInfo) -> Optional[Classification]:
        if _MIDDLEWARE_FILES.match(source.relative_path):
            return Classification(
                kind=EntityKind.MIDDLEWARE,
                source=source,
                entities=[
                    MiddlewareInfo(
                        file_name=source.file_name,
                        file_path=str(source.path),
                        matcher_patterns=matcher_patterns(source.module.text),
                    )
                ],
            )

        if router.router_type is RouterType.NEXTJS_APP:
            return self._classify_app(source, router)
        if router.router_type is RouterType.NEXTJS_PAGES:
            return self._classify_pages(source, router)
        if router.router_type is RouterType.REACT_ROUTER:
            return self._classify_react_router(source, router)
        return None

    def _classify_app(self, source: SourceFile, router: RouterInfo) -> Optional[Classification]:
        relative = router.relative_to_router(source.path)
        if relative is None:
            return None
        parts = relative.split("/")
        if any(is_private_segment(part) for part in parts[:-1]):
            return None
        stem = parts[-1].rsplit(".", 1)[0]
        route = derive_app_route(relative)

        if stem == "route":
            methods = tuple(name for name in HTTP_METHODS if name in source.module.exports)
            return _api_route(source, route, methods)
        if stem not in _APP_PAGE_FLAGS:
            return None

        flag = _APP_PAGE_FLAGS[stem]
        flags = {flag: True} if flag else {}
        page = PageInfo(route=route, file_name=source.file_name, file_path=str(source.path), **flags)
        return Classification(kind=EntityKind.PAGE, source=source, entities=[page])

    def _classify_pages(self, source: SourceFile, router: RouterInfo) -> Optional[Classification]:
        relative = router.relative_to_router(source.path)
        if relative is None:
            return None
        parts = relative.split("/")
        if parts[0] == "api":
            return _api_route(source, derive_pages_route(relative), handler_methods(source.module.text))
        if parts[-1].rsplit(".", 1)[0] in _PAGES_RESERVED:
            return None
        page = PageInfo(
            route=derive_pages_route(relative),
            file_name=source.file_name,
            file_path=str(source.path),
        )
        return Classification(kind=EntityKind.PAGE, source=source, entities=[page])

    def _classify_react_router(self, source: SourceFile, router: RouterInfo) -> Optional[Classification]:
        component = primary_component(source.module, source.path)
        component_name = component[0] if component else None
        entries = router.route_table.entries_for(source.path, component_name)
        if not entries:
            return None
        pages = [
            PageInfo(
                route=entry.route,
                file_name=source.file_name,
                file_path=str(source.path),
                component_name=entry.component or component_name,
            )
            for entry in entries
        ]
        return Classification(kind=EntityKind.PAGE, source=source, entities=pages)


def _api_route(source: SourceFile, route: str, methods: Tuple[str, ...]) -> Classification:
    info = ApiRouteInfo(route=route, file_name=source.file_name, file_path=str(source.path), methods=methods)
    return Classification(kind=EntityKind.API_ROUTE, source=source, entities=[info])


def handler_methods(text: str) -> Tuple[str, ...]:
    """HTTP verbs a Pages Router API handler branches on; ``*`` when it serves all."""
    found: List[str] = []
    for match in list(_METHOD_CHECK.finditer(text)) + list(_METHOD_CASE.finditer(text)):
        method = match.group(1).upper()
        if method in HTTP_METHODS and method not in found:
            found.append(method)
    if not found:
        return ("*",)
    return tuple(method for method in HTTP_METHODS if method in found)


def matcher_patterns(text: str) -> Tuple[str, ...]:
    match = _MATCHER.search(text)
    if match is None:
        return ()
    return tuple(single or double for single, double in _QUOTED.findall(match.group(1)))


__all__ = ["HTTP_METHODS", "RouteFileClassifier", "handler_methods", "matcher_patterns"]
