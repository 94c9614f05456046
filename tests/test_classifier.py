"""Tests for the entity classifier chain."""

from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from uimap.classifiers import EntityClassifier, SourceFile, discover_classifiers
from uimap.classifiers.pages import handler_methods, matcher_patterns
from uimap.models import (
    ApiRouteInfo,
    ComponentInfo,
    ContextInfo,
    EntityKind,
    Framework,
    HookInfo,
    MiddlewareInfo,
    PageInfo,
    PropInfo,
    RouterType,
    ServerActionFile,
    StoreInfo,
    UtilityInfo,
)
from uimap.router import RouterInfo
from uimap.syntax import parse_module

ROOT = Path("/project")


def _router(router_type: RouterType = RouterType.NEXTJS_APP) -> RouterInfo:
    router_root = {
        RouterType.NEXTJS_APP: ROOT / "app",
        RouterType.NEXTJS_PAGES: ROOT / "pages",
    }.get(router_type)
    return RouterInfo(router_type=router_type, framework=Framework.NEXTJS, root=ROOT, router_root=router_root)


def _classify(relative: str, source: str, router_type: RouterType = RouterType.NEXTJS_APP):
    path = ROOT / relative
    module = parse_module(path, textwrap.dedent(source).lstrip("\n"))
    return EntityClassifier(_router(router_type)).classify(SourceFile(path, relative, module))


def test_app_router_files_become_pages_with_flags() -> None:
    page = _classify("app/blog/[slug]/page.tsx", "export default function Post() { return <article />; }\n")
    layout = _classify("app/(shop)/layout.tsx", "export default function Layout({ children }) { return <>{children}</>; }\n")
    loading = _classify("app/loading.tsx", "export default function Loading() { return <p />; }\n")

    assert page.kind is EntityKind.PAGE
    assert page.entities == [
        PageInfo(route="/blog/:slug", file_name="page.tsx", file_path="/project/app/blog/[slug]/page.tsx")
    ]
    assert layout.entities[0].route == "/"
    assert layout.entities[0].is_layout
    assert not layout.entities[0].is_plain_page
    assert loading.entities[0].is_loading


def test_app_router_route_handlers_become_api_routes() -> None:
    result = _classify(
        "app/api/users/route.ts",
        """
        export async function GET() { return Response.json([]); }
        export async function POST(request: Request) { return Response.json({}); }
        """,
    )

    assert result.kind is EntityKind.API_ROUTE
    assert result.entities == [
        ApiRouteInfo(
            route="/api/users",
            file_name="route.ts",
            file_path="/project/app/api/users/route.ts",
            methods=("GET", "POST"),
        )
    ]


def test_private_app_folders_are_not_routes() -> None:
    result = _classify(
        "app/_components/Banner.tsx", "export default function Banner() { return <div />; }\n"
    )

    assert result.kind is EntityKind.COMPONENT
    assert result.entities[0].name == "Banner"


def test_pages_router_special_files() -> None:
    page = _classify(
        "pages/blog/[id].tsx", "export default function Post() { return <div />; }\n", RouterType.NEXTJS_PAGES
    )
    api = _classify(
        "pages/api/login.ts",
        """
        export default function handler(req, res) {
          if (req.method === "POST") {
            res.status(200).json({});
          }
        }
        """,
        RouterType.NEXTJS_PAGES,
    )

    assert page.entities[0].route == "/blog/:id"
    assert api.kind is EntityKind.API_ROUTE
    assert api.entities[0].route == "/api/login"
    assert api.entities[0].methods == ("POST",)


def test_middleware_matcher_patterns() -> None:
    result = _classify(
        "middleware.ts",
        """
        export function middleware(request) {}

        export const config = {
          matcher: ["/dashboard/:path*", '/admin'],
        };
        """,
    )

    assert result.kind is EntityKind.MIDDLEWARE
    assert result.entities == [
        MiddlewareInfo(
            file_name="middleware.ts",
            file_path="/project/middleware.ts",
            matcher_patterns=("/dashboard/:path*", "/admin"),
        )
    ]


def test_hooks_are_exported_use_functions() -> None:
    result = _classify(
        "hooks/useAuth.ts",
        """
        import { useContext } from "react";
        export function useAuth() { return useContext(AuthContext); }
        export const useUser = () => useAuth().user;
        export const userKey = "user";
        """,
    )

    assert result.kind is EntityKind.HOOK
    assert result.entities == [
        HookInfo(name="useAuth", file_name="useAuth.ts", file_path="/project/hooks/useAuth.ts"),
        HookInfo(name="useUser", file_name="useAuth.ts", file_path="/project/hooks/useAuth.ts"),
    ]


def test_context_pairs_with_its_provider() -> None:
    result = _classify(
        "context/ThemeContext.tsx",
        """
        import { createContext } from "react";

        export const ThemeContext = createContext("light");

        export function ThemeProvider({ children }) {
          return <ThemeContext.Provider value="dark">{children}</ThemeContext.Provider>;
        }
        """,
    )

    assert result.kind is EntityKind.CONTEXT
    assert result.entities == [
        ContextInfo(
            name="ThemeContext",
            provider_name="ThemeProvider",
            file_name="ThemeContext.tsx",
            file_path="/project/context/ThemeContext.tsx",
        )
    ]



def test_context_file_keeps_its_hooks() -> None:
    result = _classify(
        "context/ThemeContext.tsx",
        """
        import { createContext, useContext } from "react";

        export const ThemeContext = createContext("light");

        export function ThemeProvider({ children }) {
          return <ThemeContext.Provider value="dark">{children}</ThemeContext.Provider>;
        }

        export function useTheme() {
          return useContext(ThemeContext);
        }
        """,
    )

    assert result.kind is EntityKind.CONTEXT
    assert [(type(entity).__name__, entity.name) for entity in result.entities] == [
        ("ContextInfo", "ThemeContext"),
        ("HookInfo", "useTheme"),
    ]
    assert result.entities[0].provider_name == "ThemeProvider"

def test_client_component_with_props() -> None:
    result = _classify(
        "components/Toggle.tsx",
        """
        "use client";

        type ToggleProps = { checked: boolean; label?: string };

        export function Toggle({ checked, label }: ToggleProps) {
          return <label>{label}<input type="checkbox" checked={checked} /></label>;
        }
        """,
    )

    assert result.kind is EntityKind.COMPONENT
    component = result.entities[0]
    assert isinstance(component, ComponentInfo)
    assert component.name == "Toggle"
    assert component.is_client_component
    assert component.exports == ("Toggle",)
    assert component.props == (PropInfo("checked", "boolean", True), PropInfo("label", "string", False))


def test_anonymous_default_component_takes_file_name() -> None:
    result = _classify("components/user-card/index.tsx", "export default () => <div />;\n")

    assert result.kind is EntityKind.COMPONENT
    assert result.entities[0].name == "UserCard"


def test_server_action_file_lists_exported_functions() -> None:
    result = _classify(
        "actions/todos.ts",
        """
        "use server";

        export async function createTodo(data: FormData) {}
        export async function deleteTodo(id: string) {}
        export const LIMIT = 10;
        """,
    )

    assert result.kind is EntityKind.SERVER_ACTION
    assert result.entities == [
        ServerActionFile(
            file_path="/project/actions/todos.ts",
            relative_path="actions/todos.ts",
            exported_functions=("createTodo", "deleteTodo"),
        )
    ]


@pytest.mark.parametrize(
    ("source", "store_type"),
    [
        (
            'import { create } from "zustand";\nexport const useCartStore = create(() => ({ items: [] }));\n',
            "zustand",
        ),
        (
            'import { createSlice } from "@reduxjs/toolkit";\n'
            'export const cartSlice = createSlice({ name: "cart", initialState: [], reducers: {} });\n',
            "redux",
        ),
        ('import { atom } from "jotai";\nexport const countAtom = atom(0);\n', "jotai"),
    ],
)
def test_store_detection(source: str, store_type: str) -> None:
    result = _classify("store/cart.ts", source)

    assert result.kind is EntityKind.STORE
    store = result.entities[0]
    assert isinstance(store, StoreInfo)
    assert store.type == store_type
    assert store.name == store.exports[0]


def test_helpers_fall_back_to_utilities() -> None:
    result = _classify(
        "lib/format.ts",
        """
        export function formatDate(value: Date) { return value.toISOString(); }
        export const currency = (amount: number) => `$${amount}`;
        """,
    )

    assert result.kind is EntityKind.UTILITY
    assert result.entities == [
        UtilityInfo(
            name="format",
            file_name="format.ts",
            file_path="/project/lib/format.ts",
            exports=("formatDate", "currency"),
        )
    ]


def test_unclassifiable_file_is_skipped_with_warning() -> None:
    result = _classify("lib/side-effect.ts", "console.log('loaded');\n")

    assert result.kind is EntityKind.SKIPPED
    assert result.entities == []
    assert result.warnings[0].kind == "classification"
    assert result.warnings[0].path == "lib/side-effect.ts"


def test_react_router_pages_come_from_the_route_table() -> None:
    from uimap.router import RouteEntry

    router = _router(RouterType.REACT_ROUTER)
    home = ROOT / "src/pages/Home.tsx"
    router.route_table.add(RouteEntry(route="/", component="Home", file=home, declared_in=ROOT / "src/App.tsx"))
    module = parse_module(home, "export default function Home() { return <h1 />; }\n")

    result = EntityClassifier(router).classify(SourceFile(home, "src/pages/Home.tsx", module))

    assert result.kind is EntityKind.PAGE
    assert [(page.route, page.component_name) for page in result.entities] == [("/", "Home")]


def test_discover_classifiers_rejects_unknown_names() -> None:
    assert [type(item).__name__ for item in discover_classifiers(["hooks", "utilities"])] == [
        "HookClassifier",
        "UtilityClassifier",
    ]
    with pytest.raises(ValueError):
        discover_classifiers(["widgets"])


def test_handler_methods_and_matchers() -> None:
    assert handler_methods("switch (req.method) { case 'GET': break; case 'DELETE': break; }") == ("GET", "DELETE")
    assert handler_methods("export default function handler(req, res) {}") == ("*",)
    assert matcher_patterns("export const config = { matcher: '/api/:path*' }") == ("/api/:path*",)
    assert matcher_patterns("export function middleware() {}") == ()
