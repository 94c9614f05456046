"""Tests for the tree-sitter module extractor."""

from __future__ import annotations

import textwrap

from uimap.models import PropInfo
from uimap.syntax import ImportBinding, NavTarget, join_route, parse_module


def _parse(source: str, name: str = "Component.tsx"):
    return parse_module(name, textwrap.dedent(source).lstrip("\n"))


def test_collects_import_bindings() -> None:
    module = _parse(
        """
        import React, { useState as useLocalState } from "react";
        import * as api from "@/lib/api";
        import type { User } from "../types";
        import { type Session, signIn } from "next-auth/react";
        import "./styles.css";
        """
    )

    assert module.imports == [
        ImportBinding("React", "default", "react"),
        ImportBinding("useLocalState", "useState", "react"),
        ImportBinding("api", "*", "@/lib/api"),
        ImportBinding("User", "User", "../types", type_only=True),
        ImportBinding("Session", "Session", "next-auth/react", type_only=True),
        ImportBinding("signIn", "signIn", "next-auth/react"),
    ]


def test_collects_exports_and_reexports() -> None:
    module = _parse(
        """
        export { default as Button } from "./Button";
        export { Card, CardHeader as Header } from "./Card";
        export * from "./forms";
        export const VERSION = "1";
        export function helper() {}
        """,
        name="index.ts",
    )

    assert module.exports == ["Button", "Card", "Header", "VERSION", "helper"]
    assert module.reexports["Button"] == ("./Button", "default")
    assert module.reexports["Header"] == ("./Card", "CardHeader")
    assert module.star_reexports == ["./forms"]
    assert module.has_default_export is False


def test_detects_directives_after_comments() -> None:
    client = _parse(
        """
        // Interactive widget
        "use client";

        export default function Counter() { return <button />; }
        """
    )
    server = _parse("'use server';\nexport async function save() {}\n", name="actions.ts")
    plain = _parse("const label = 'use client';\nexport default label;\n", name="label.ts")

    assert client.is_client and not client.is_server
    assert server.is_server and not server.is_client
    assert not plain.is_client


def test_extracts_props_from_interface_and_defaults() -> None:
    module = _parse(
        """
        interface ButtonProps {
          label: string;
          onClick?: () => void;
          size?: "sm" | "lg";
        }

        export default function Button({ label, onClick, size = "sm" }: ButtonProps) {
          return <button onClick={onClick}>{label}</button>;
        }
        """
    )

    declaration = module.default_declaration
    assert declaration is not None
    assert declaration.contains_jsx
    assert declaration.props == [
        PropInfo("label", "string", True),
        PropInfo("onClick", "() => void", False),
        PropInfo("size", '"sm" | "lg"', False, '"sm"'),
    ]


def test_extracts_props_from_fc_generic_and_destructuring() -> None:
    module = _parse(
        """
        type BaseProps = { id: string };
        type CardProps = BaseProps & { title: string };

        export const Card: React.FC<CardProps> = ({ id, title }) => <div id={id}>{title}</div>;

        export function Badge({ tone = "info", ...rest }) {
          return <span {...rest}>{tone}</span>;
        }
        """
    )

    card = module.declarations["Card"]
    assert card.is_function
    assert [prop.name for prop in card.props or []] == ["id", "title"]

    badge = module.declarations["Badge"]
    assert badge.props == [
        PropInfo("tone", "unknown", False, '"info"'),
        PropInfo("rest", "unknown", False),
    ]


def test_records_jsx_tags_links_and_navigation_calls() -> None:
    module = _parse(
        """
        import Link from "next/link";
        import { useRouter } from "next/navigation";

        export default function Nav({ post }) {
          const router = useRouter();
          return (
            <nav>
              <Link href="/about">About</Link>
              <Link href={`/blog/${post.slug}`}>Post</Link>
              <button onClick={() => router.push("/settings")}>Settings</button>
            </nav>
          );
        }
        """
    )

    assert module.has_jsx
    assert {"nav", "Link", "button"} <= set(module.jsx_tags)
    assert [(link.attribute, link.target) for link in module.links] == [
        ("href", NavTarget(("/about",))),
        ("href", NavTarget(("/blog/", ""))),
    ]
    pushes = [call for call in module.calls if call.callee == "router.push"]
    assert pushes and pushes[0].target == NavTarget(("/settings",))
    assert any(call.callee == "useRouter" for call in module.calls)


def test_collects_nested_jsx_routes() -> None:
    module = _parse(
        """
        import { Routes, Route } from "react-router-dom";

        export default function App() {
          return (
            <Routes>
              <Route path="/" element={<Home />} />
              <Route path="users" element={<UsersLayout />}>
                <Route index element={<UserList />} />
                <Route path=":id" element={<UserDetail />} />
              </Route>
              <Route path="*" element={<NotFound />} />
            </Routes>
          );
        }
        """,
        name="App.tsx",
    )

    assert [(route.path, route.component) for route in module.routes] == [
        ("/", "Home"),
        ("/users", "UsersLayout"),
        ("/users", "UserList"),
        ("/users/:id", "UserDetail"),
        ("/*", "NotFound"),
    ]


def test_collects_object_routes_and_lazy_imports() -> None:
    module = _parse(
        """
        import { lazy } from "react";
        import { createBrowserRouter } from "react-router-dom";

        const Settings = lazy(() => import("./pages/Settings"));

        export const router = createBrowserRouter([
          {
            path: "/",
            element: <Root />,
            children: [
              { index: true, element: <Home /> },
              { path: "about", Component: About },
              { path: "reports", lazy: () => import("./pages/Reports") },
              { path: "settings", element: <Settings /> },
            ],
          },
        ]);
        """,
        name="routes.tsx",
    )

    assert [(route.path, route.component, route.lazy_source) for route in module.routes] == [
        ("/", "Root", None),
        ("/", "Home", None),
        ("/about", "About", None),
        ("/reports", None, "./pages/Reports"),
        ("/settings", "Settings", None),
    ]
    assert module.lazy_imports == {"Settings": "./pages/Settings"}


def test_initializer_calls_mark_contexts_and_stores() -> None:
    module = _parse(
        """
        import { createContext } from "react";
        import { create } from "zustand";

        export const ThemeContext = createContext("light");
        export const useStore = create((set) => ({ count: 0 }));
        """,
        name="state.ts",
    )

    assert module.declarations["ThemeContext"].initializer_call == "createContext"
    store = module.declarations["useStore"]
    assert store.initializer_call == "create"
    assert store.is_function


def test_plain_typescript_files_use_the_typescript_grammar() -> None:
    module = _parse("export const double = <T,>(value: T) => value;\n", name="generic.ts")

    assert module.exports == ["double"]
    assert module.declarations["double"].is_function


def test_join_route() -> None:
    assert join_route("/", "users") == "/users"
    assert join_route("/users", ":id") == "/users/:id"
    assert join_route("/users", "/absolute") == "/absolute"
    assert join_route("/", "") == "/"
