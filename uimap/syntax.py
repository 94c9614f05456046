"""Tree-sitter powered extraction of module facts from JS/TS sources.

A :class:`ParsedModule` is plain data: imports, exports, top-level
declarations, rendered JSX tags, call sites, navigation targets and route
declarations. No tree-sitter node outlives :func:`parse_module`, so parsed
modules can be handed between worker threads freely.
"""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

import tree_sitter_typescript
from tree_sitter import Language, Node, Parser

from .models import PropInfo

TSX_LANGUAGE = Language(tree_sitter_typescript.language_tsx())
TYPESCRIPT_LANGUAGE = Language(tree_sitter_typescript.language_typescript())

_DIRECTIVE_PREFIX = r"\A(?:\s+|//[^\n]*(?:\n|\Z)|/\*.*?\*/)*"
_USE_CLIENT = re.compile(_DIRECTIVE_PREFIX + r"(['\"])use client\1", re.DOTALL)
_USE_SERVER = re.compile(_DIRECTIVE_PREFIX + r"(['\"])use server\1", re.DOTALL)

LINK_TAGS = {"Link", "NavLink", "Navigate"}
LINK_ATTRIBUTES = ("href", "to")

_FUNCTION_NODES = {"arrow_function", "function_expression", "function", "generator_function"}
_JSX_NODES = {"jsx_element", "jsx_self_closing_element"}
_ROUTE_WRAPPERS = {"Suspense", "React.Suspense", "Fragment", "React.Fragment"}

_thread_state = threading.local()


@dataclass(frozen=True)
class ImportBinding:
    """One local name introduced by an import statement."""

    local: str
    imported: str
    source: str
    type_only: bool = False


@dataclass(frozen=True)
class NavTarget:
    """A string or template-literal navigation target.

    ``parts`` holds the literal text between template substitutions, so a
    static string has exactly one part.
    """

    parts: Tuple[str, ...]

    @property
    def is_static(self) -> bool:
        return len(self.parts) == 1

    @property
    def display(self) -> str:
        return "${...}".join(self.parts)


@dataclass(frozen=True)
class CallSite:
    callee: str
    target: Optional[NavTarget] = None


@dataclass(frozen=True)
class JsxLink:
    tag: str
    attribute: str
    target: NavTarget


@dataclass
class Declaration:
    """A top-level binding of the module."""

    name: str
    kind: str
    is_function: bool = False
    is_async: bool = False
    contains_jsx: bool = False
    initializer_call: Optional[str] = None
    props: Optional[List[PropInfo]] = None


@dataclass(frozen=True)
class RouteDecl:
    """A route declared through ``<Route>`` JSX or a route object."""

    path: str
    component: Optional[str] = None
    lazy_source: Optional[str] = None


@dataclass
class ParsedModule:
    path: str
    text: str
    has_error: bool = False
    is_client: bool = False
    is_server: bool = False
    has_jsx: bool = False
    imports: List[ImportBinding] = field(default_factory=list)
    exports: List[str] = field(default_factory=list)
    default_export: Optional[str] = None
    has_default_export: bool = False
    anonymous_default: Optional[Declaration] = None
    reexports: Dict[str, Tuple[str, str]] = field(default_factory=dict)
    star_reexports: List[str] = field(default_factory=list)
    declarations: Dict[str, Declaration] = field(default_factory=dict)
    type_props: Dict[str, List[PropInfo]] = field(default_factory=dict)
    jsx_tags: List[str] = field(default_factory=list)
    calls: List[CallSite] = field(default_factory=list)
    links: List[JsxLink] = field(default_factory=list)
    routes: List[RouteDecl] = field(default_factory=list)
    lazy_imports: Dict[str, str] = field(default_factory=dict)

    @property
    def default_declaration(self) -> Optional[Declaration]:
        if self.default_export and self.default_export in self.declarations:
            return self.declarations[self.default_export]
        return self.anonymous_default

    @property
    def all_exports(self) -> List[str]:
        """Exported names, with ``default`` appended when present."""
        names = list(self.exports)
        if self.has_default_export:
            names.append("default")
        return names

    def exported_declarations(self) -> Iterator[Declaration]:
        for name in self.exports:
            declaration = self.declarations.get(name)
            if declaration is not None:
                yield declaration

    def imported_names(self) -> Dict[str, ImportBinding]:
        return {binding.local: binding for binding in self.imports}


def parse_module(path: Path | str, text: str) -> ParsedModule:
    """Parse ``text`` with the grammar matching ``path`` and extract its facts."""
    source = text.encode("utf-8")
    parser = _get_parser(Path(path).suffix.lower())
    tree = parser.parse(source)
    module = ParsedModule(
        path=str(path),
        text=text,
        has_error=tree.root_node.has_error,
        is_client=bool(_USE_CLIENT.match(text)),
        is_server=bool(_USE_SERVER.match(text)),
    )
    _ModuleExtractor(source, module).run(tree.root_node)
    return module


def _get_parser(suffix: str) -> Parser:
    parsers = getattr(_thread_state, "parsers", None)
    if parsers is None:
        parsers = {}
        _thread_state.parsers = parsers
    key = "typescript" if suffix == ".ts" else "tsx"
    parser = parsers.get(key)
    if parser is None:
        parser = Parser(TYPESCRIPT_LANGUAGE if key == "typescript" else TSX_LANGUAGE)
        parsers[key] = parser
    return parser


def join_route(base: str, segment: str) -> str:
    """Join a React Router path segment onto its parent route."""
    if segment.startswith("/"):
        combined = segment
    else:
        combined = f"{base.rstrip('/')}/{segment}"
    combined = re.sub(r"/{2,}", "/", combined)
    if len(combined) > 1:
        combined = combined.rstrip("/")
    return combined or "/"


class _ModuleExtractor:
    def __init__(self, source: bytes, module: ParsedModule) -> None:
        self._source = source
        self._module = module
        self._type_nodes: Dict[str, List[Node]] = {}

    def run(self, root: Node) -> None:
        statements = [child for child in root.named_children if child.type != "comment"]
        for statement in statements:
            self._collect_type(statement)
        for name in list(self._type_nodes):
            props = self._named_props(name, 0)
            if props is not None:
                self._module.type_props[name] = props

        for statement in statements:
            if statement.type == "import_statement":
                self._collect_import(statement)
            elif statement.type == "export_statement":
                self._collect_export(statement)
            else:
                self._collect_declaration(statement)

        self._walk(root)
        self._collect_routes(root, "/")

    # ------------------------------------------------------------------
    # Text helpers

    def _text(self, node: Node) -> str:
        return self._source[node.start_byte : node.end_byte].decode("utf-8", errors="ignore")

    def _string_value(self, node: Node) -> str:
        return self._text(node)[1:-1]

    @staticmethod
    def _first_named(node: Optional[Node]) -> Optional[Node]:
        if node is None:
            return None
        for child in node.named_children:
            if child.type != "comment":
                return child
        return None

    def _contains(self, node: Optional[Node], types: set) -> bool:
        if node is None:
            return False
        stack = [node]
        while stack:
            current = stack.pop()
            if current.type in types:
                return True
            stack.extend(current.named_children)
        return False

    # ------------------------------------------------------------------
    # Imports and exports

    def _collect_import(self, node: Node) -> None:
        source_node = node.child_by_field_name("source")
        if source_node is None:
            return
        source = self._string_value(source_node)
        type_only = any(child.type == "type" for child in node.children)
        clause = next((child for child in node.named_children if child.type == "import_clause"), None)
        if clause is None:
            return

        bindings = self._module.imports
        for child in clause.named_children:
            if child.type == "identifier":
                bindings.append(ImportBinding(self._text(child), "default", source, type_only))
            elif child.type == "namespace_import":
                identifier = self._first_named(child)
                if identifier is not None:
                    bindings.append(ImportBinding(self._text(identifier), "*", source, type_only))
            elif child.type == "named_imports":
                for spec in child.named_children:
                    if spec.type != "import_specifier":
                        continue
                    name_node = spec.child_by_field_name("name")
                    if name_node is None:
                        continue
                    alias_node = spec.child_by_field_name("alias")
                    imported = self._text(name_node)
                    local = self._text(alias_node) if alias_node is not None else imported
                    spec_type_only = type_only or any(item.type == "type" for item in spec.children)
                    bindings.append(ImportBinding(local, imported, source, spec_type_only))

    def _add_export(self, name: str) -> None:
        if name and name not in self._module.exports:
            self._module.exports.append(name)

    def _collect_export(self, node: Node) -> None:
        module = self._module
        is_default = any(child.type == "default" for child in node.children)

        declaration = node.child_by_field_name("declaration")
        if declaration is not None:
            names = self._collect_declaration(declaration)
            if is_default:
                module.has_default_export = True
                module.default_export = names[0] if names else None
            else:
                for name in names:
                    self._add_export(name)
            return

        value = node.child_by_field_name("value")
        if value is not None and is_default:
            module.has_default_export = True
            module.default_export = self._default_name(value)
            return

        source_node = node.child_by_field_name("source")
        source = self._string_value(source_node) if source_node is not None else None
        clause = next((child for child in node.named_children if child.type == "export_clause"), None)
        if clause is None:
            namespace = next((child for child in node.named_children if child.type == "namespace_export"), None)
            if namespace is not None:
                identifier = self._first_named(namespace)
                if identifier is not None:
                    self._add_export(self._text(identifier))
            elif source:
                module.star_reexports.append(source)
            return

        for spec in clause.named_children:
            if spec.type != "export_specifier":
                continue
            name_node = spec.child_by_field_name("name")
            if name_node is None:
                continue
            alias_node = spec.child_by_field_name("alias")
            name = self._text(name_node)
            exported = self._text(alias_node) if alias_node is not None else name
            if source:
                module.reexports[exported] = (source, name)
            if exported == "default":
                module.has_default_export = True
                module.default_export = None if source else name
                continue
            self._add_export(exported)

    def _default_name(self, value: Node) -> Optional[str]:
        """Name of the binding behind ``export default <value>``."""
        if value.type == "identifier":
            return self._text(value)
        if value.type in ("parenthesized_expression", "as_expression", "satisfies_expression"):
            inner = self._first_named(value)
            return self._default_name(inner) if inner is not None else None
        if value.type == "call_expression":
            arguments = value.child_by_field_name("arguments")
            first = self._first_named(arguments)
            if first is not None:
                name = self._default_name(first)
                if name is not None:
                    return name
            function = value.child_by_field_name("function")
            if function is not None and function.type == "call_expression":
                return self._default_name(function)
            return None
        if value.type in _FUNCTION_NODES or value.type == "class":
            name_node = value.child_by_field_name("name")
            declaration = Declaration(
                name=self._text(name_node) if name_node is not None else "default",
                kind="class" if value.type == "class" else "function",
                is_function=value.type != "class",
                is_async=any(child.type == "async" for child in value.children),
                contains_jsx=self._contains(value, _JSX_NODES),
                props=self._function_props(value, None) if value.type != "class" else None,
            )
            if name_node is not None:
                self._module.declarations.setdefault(declaration.name, declaration)
                return declaration.name
            self._module.anonymous_default = declaration
        return None

    # ------------------------------------------------------------------
    # Declarations

    def _collect_declaration(self, node: Node) -> List[str]:
        declarations = self._module.declarations
        kind = node.type
        if kind in ("function_declaration", "generator_function_declaration"):
            name_node = node.child_by_field_name("name")
            if name_node is None:
                return []
            name = self._text(name_node)
            declarations[name] = Declaration(
                name=name,
                kind="function",
                is_function=True,
                is_async=any(child.type == "async" for child in node.children),
                contains_jsx=self._contains(node, _JSX_NODES),
                props=self._function_props(node, None),
            )
            return [name]

        if kind in ("class_declaration", "abstract_class_declaration"):
            name_node = node.child_by_field_name("name")
            if name_node is None:
                return []
            name = self._text(name_node)
            declarations[name] = Declaration(
                name=name, kind="class", contains_jsx=self._contains(node, _JSX_NODES)
            )
            return [name]

        if kind in ("lexical_declaration", "variable_declaration"):
            names: List[str] = []
            for declarator in node.named_children:
                if declarator.type != "variable_declarator":
                    continue
                name_node = declarator.child_by_field_name("name")
                if name_node is None or name_node.type != "identifier":
                    continue
                name = self._text(name_node)
                declarations[name] = self._variable_declaration(name, declarator)
                names.append(name)
            return names

        if kind in ("interface_declaration", "type_alias_declaration", "enum_declaration"):
            name_node = node.child_by_field_name("name")
            if name_node is None:
                return []
            name = self._text(name_node)
            declarations.setdefault(
                name, Declaration(name=name, kind="variable" if kind == "enum_declaration" else "type")
            )
            return [name]
        return []

    def _variable_declaration(self, name: str, declarator: Node) -> Declaration:
        value = declarator.child_by_field_name("value")
        type_annotation = declarator.child_by_field_name("type")
        declaration = Declaration(name=name, kind="variable", contains_jsx=self._contains(value, _JSX_NODES))
        if value is None:
            return declaration
        if value.type in ("as_expression", "satisfies_expression", "parenthesized_expression"):
            value = self._first_named(value) or value

        if value.type in _FUNCTION_NODES:
            declaration.is_function = True
            declaration.is_async = any(child.type == "async" for child in value.children)
            declaration.props = self._function_props(value, type_annotation)
        elif value.type == "call_expression":
            function = value.child_by_field_name("function")
            if function is not None:
                declaration.initializer_call = "".join(self._text(function).split())
            arguments = value.child_by_field_name("arguments")
            wrapped = next(
                (arg for arg in (arguments.named_children if arguments else []) if arg.type in _FUNCTION_NODES),
                None,
            )
            if wrapped is not None:
                declaration.is_function = True
                declaration.props = self._function_props(wrapped, type_annotation)
            if declaration.initializer_call in ("lazy", "React.lazy"):
                source = self._dynamic_import_source(value)
                if source:
                    self._module.lazy_imports[name] = source
        return declaration

    # ------------------------------------------------------------------
    # Props

    def _collect_type(self, statement: Node) -> None:
        node = statement
        if node.type == "export_statement":
            node = node.child_by_field_name("declaration")
            if node is None:
                return
        if node.type == "interface_declaration":
            name_node = node.child_by_field_name("name")
            body = node.child_by_field_name("body")
            if name_node is None or body is None:
                return
            parts = [body]
            for child in node.named_children:
                if child.type in ("extends_type_clause", "extends_clause"):
                    parts.extend(child.named_children)
            self._type_nodes[self._text(name_node)] = parts
        elif node.type == "type_alias_declaration":
            name_node = node.child_by_field_name("name")
            value = node.child_by_field_name("value")
            if name_node is not None and value is not None:
                self._type_nodes[self._text(name_node)] = [value]

    def _named_props(self, name: str, depth: int) -> Optional[List[PropInfo]]:
        parts = self._type_nodes.get(name)
        if parts is None or depth > 5:
            return None
        merged: Optional[List[PropInfo]] = None
        for part in parts:
            props = self._props_from_type(part, depth + 1)
            if props is None:
                continue
            merged = _merge_props(merged or [], props)
        return merged

    def _props_from_type(self, node: Optional[Node], depth: int) -> Optional[List[PropInfo]]:
        if node is None or depth > 5:
            return None
        kind = node.type
        if kind in ("type_annotation", "parenthesized_type"):
            return self._props_from_type(self._first_named(node), depth)
        if kind in ("object_type", "interface_body"):
            return self._object_type_props(node)
        if kind == "type_identifier":
            return self._named_props(self._text(node), depth)
        if kind == "generic_type":
            for child in node.named_children:
                if child.type == "type_arguments":
                    return self._props_from_type(self._first_named(child), depth + 1)
            name_node = node.child_by_field_name("name")
            return self._named_props(self._text(name_node), depth) if name_node is not None else None
        if kind == "intersection_type":
            merged: Optional[List[PropInfo]] = None
            for child in node.named_children:
                props = self._props_from_type(child, depth + 1)
                if props is not None:
                    merged = _merge_props(merged or [], props)
            return merged
        return None

    def _object_type_props(self, node: Node) -> List[PropInfo]:
        props: List[PropInfo] = []
        for member in node.named_children:
            if member.type not in ("property_signature", "method_signature"):
                continue
            name_node = member.child_by_field_name("name")
            if name_node is None:
                continue
            optional = any(child.type == "?" for child in member.children)
            if member.type == "method_signature":
                type_text = "function"
            else:
                annotation = member.child_by_field_name("type")
                type_text = self._text(annotation).lstrip(":").strip() if annotation is not None else ""
            props.append(
                PropInfo(
                    name=self._text(name_node).strip("'\""),
                    type=" ".join(type_text.split()) or "unknown",
                    required=not optional,
                )
            )
        return props

    def _function_props(self, function: Node, declarator_type: Optional[Node]) -> Optional[List[PropInfo]]:
        parameter = self._first_parameter(function)
        if parameter is None and function.child_by_field_name("parameters") is not None:
            return []

        pattern: Optional[Node] = None
        type_node: Optional[Node] = None
        if parameter is not None:
            if parameter.type in ("required_parameter", "optional_parameter"):
                pattern = parameter.child_by_field_name("pattern")
                type_node = parameter.child_by_field_name("type")
            else:
                pattern = parameter
        if type_node is None and declarator_type is not None:
            type_node = self._generic_argument(declarator_type)

        declared = self._props_from_type(type_node, 0) if type_node is not None else None
        names: List[str] = []
        defaults: Dict[str, str] = {}
        rest: Optional[str] = None
        if pattern is not None and pattern.type == "object_pattern":
            names, defaults, rest = self._pattern_props(pattern)

        if declared is not None:
            props = [
                PropInfo(prop.name, prop.type, False, defaults[prop.name]) if prop.name in defaults else prop
                for prop in declared
            ]
        elif pattern is not None and pattern.type == "object_pattern":
            props = [
                PropInfo(name, "unknown", name not in defaults, defaults.get(name)) for name in names
            ]
        else:
            return None

        if rest and all(prop.name != rest for prop in props):
            props.append(PropInfo(rest, "unknown", False))
        return props

    def _first_parameter(self, function: Node) -> Optional[Node]:
        parameters = function.child_by_field_name("parameters")
        if parameters is None:
            return function.child_by_field_name("parameter")
        return self._first_named(parameters)

    def _generic_argument(self, annotation: Node) -> Optional[Node]:
        target = self._first_named(annotation) if annotation.type == "type_annotation" else annotation
        if target is None or target.type != "generic_type":
            return None
        for child in target.named_children:
            if child.type == "type_arguments":
                return self._first_named(child)
        return None

    def _pattern_props(self, pattern: Node) -> Tuple[List[str], Dict[str, str], Optional[str]]:
        names: List[str] = []
        defaults: Dict[str, str] = {}
        rest: Optional[str] = None
        for child in pattern.named_children:
            if child.type == "shorthand_property_identifier_pattern":
                names.append(self._text(child))
            elif child.type == "object_assignment_pattern":
                left = child.child_by_field_name("left")
                right = child.child_by_field_name("right")
                if left is None:
                    continue
                name = self._text(left)
                names.append(name)
                if right is not None:
                    defaults[name] = self._text(right)
            elif child.type == "pair_pattern":
                key = child.child_by_field_name("key")
                value = child.child_by_field_name("value")
                if key is None:
                    continue
                name = self._text(key).strip("'\"")
                names.append(name)
                if value is not None and value.type == "assignment_pattern":
                    right = value.child_by_field_name("right")
                    if right is not None:
                        defaults[name] = self._text(right)
            elif child.type == "rest_pattern":
                identifier = self._first_named(child)
                rest = self._text(identifier) if identifier is not None else "rest"
        return names, defaults, rest

    # ------------------------------------------------------------------
    # Usage: JSX, calls and navigation

    def _walk(self, root: Node) -> None:
        stack = [root]
        while stack:
            node = stack.pop()
            if node.type in ("jsx_opening_element", "jsx_self_closing_element"):
                self._visit_jsx(node)
            elif node.type == "call_expression":
                self._visit_call(node)
            elif node.type == "jsx_element":
                self._module.has_jsx = True
            stack.extend(reversed(node.named_children))

    def _visit_jsx(self, node: Node) -> None:
        self._module.has_jsx = True
        name_node = node.child_by_field_name("name")
        if name_node is None:
            return
        tag = self._text(name_node)
        self._module.jsx_tags.append(tag)
        if tag.split(".")[-1] not in LINK_TAGS:
            return
        attributes = self._jsx_attributes(node)
        for attribute in LINK_ATTRIBUTES:
            if attribute not in attributes:
                continue
            target = self._target_from_value(attributes[attribute])
            if target is not None:
                self._module.links.append(JsxLink(tag, attribute, target))

    def _visit_call(self, node: Node) -> None:
        function = node.child_by_field_name("function")
        if function is None or function.type not in ("identifier", "member_expression"):
            return
        callee = "".join(self._text(function).split()).replace("?.", ".")
        arguments = node.child_by_field_name("arguments")
        first = self._first_named(arguments) if arguments is not None and arguments.type == "arguments" else None
        target = self._target_from_value(first) if first is not None else None
        self._module.calls.append(CallSite(callee, target))

    def _jsx_attributes(self, element: Node) -> Dict[str, Optional[Node]]:
        attributes: Dict[str, Optional[Node]] = {}
        for child in element.named_children:
            if child.type != "jsx_attribute":
                continue
            named = child.named_children
            if not named:
                continue
            attributes[self._text(named[0])] = named[1] if len(named) > 1 else None
        return attributes

    def _target_from_value(self, value: Optional[Node]) -> Optional[NavTarget]:
        if value is not None and value.type == "jsx_expression":
            value = self._first_named(value)
        if value is None:
            return None
        if value.type == "string":
            return NavTarget((self._string_value(value),))
        if value.type == "template_string":
            parts: List[str] = []
            cursor = value.start_byte + 1
            for child in value.named_children:
                if child.type == "template_substitution":
                    parts.append(self._source[cursor : child.start_byte].decode("utf-8", errors="ignore"))
                    cursor = child.end_byte
            parts.append(self._source[cursor : value.end_byte - 1].decode("utf-8", errors="ignore"))
            return NavTarget(tuple(parts))
        return None

    # ------------------------------------------------------------------
    # React Router declarations

    def _collect_routes(self, node: Node, base: str) -> None:
        if node.type in _JSX_NODES:
            opening = self._opening(node)
            name_node = opening.child_by_field_name("name") if opening is not None else None
            if name_node is not None and self._text(name_node) == "Route":
                self._jsx_route(node, opening, base)
                return
        elif node.type == "object":
            pairs = self._object_pairs(node)
            if ("path" in pairs or "index" in pairs) and pairs.keys() & {"element", "Component", "lazy", "children"}:
                self._object_route(pairs, base)
                return
        for child in node.named_children:
            self._collect_routes(child, base)

    def _jsx_route(self, node: Node, opening: Node, base: str) -> None:
        attributes = self._jsx_attributes(opening)
        path = self._route_path(attributes.get("path"), "index" in attributes, base)
        component: Optional[str] = None
        element = attributes.get("element")
        if element is not None:
            inner = self._first_named(element) if element.type == "jsx_expression" else element
            component = self._element_component(inner) if inner is not None else None
        if component is None and attributes.get("Component") is not None:
            inner = self._first_named(attributes["Component"])
            if inner is not None and inner.type == "identifier":
                component = self._text(inner)
        if path is not None and component is not None:
            self._module.routes.append(RouteDecl(path=path, component=component))
        if node.type == "jsx_element":
            for child in node.named_children:
                if child.type in _JSX_NODES:
                    self._collect_routes(child, path or base)

    def _object_route(self, pairs: Dict[str, Node], base: str) -> None:
        index = pairs.get("index")
        is_index = index is not None and self._text(index) != "false"
        path = self._route_path(pairs.get("path"), is_index, base)
        component: Optional[str] = None
        lazy_source: Optional[str] = None
        element = pairs.get("element")
        if element is not None and element.type in _JSX_NODES:
            component = self._element_component(element)
        elif pairs.get("Component") is not None and pairs["Component"].type in ("identifier", "shorthand_property_identifier"):
            component = self._text(pairs["Component"])
        if pairs.get("lazy") is not None:
            lazy_source = self._dynamic_import_source(pairs["lazy"])
        if path is not None and (component is not None or lazy_source is not None):
            self._module.routes.append(RouteDecl(path=path, component=component, lazy_source=lazy_source))
        children = pairs.get("children")
        if children is not None and children.type == "array":
            for child in children.named_children:
                self._collect_routes(child, path or base)

    def _route_path(self, value: Optional[Node], is_index: bool, base: str) -> Optional[str]:
        if value is not None:
            if value.type == "jsx_expression":
                value = self._first_named(value)
            if value is not None and value.type == "string":
                return join_route(base, self._string_value(value))
            if value is not None and value.type == "template_string" and not value.named_children:
                return join_route(base, self._text(value)[1:-1])
            return None
        if is_index:
            return base
        return None

    def _element_component(self, node: Node) -> Optional[str]:
        """Component rendered by a route element, looking through wrappers."""
        if node.type == "jsx_self_closing_element":
            name_node = node.child_by_field_name("name")
            return self._text(name_node) if name_node is not None else None
        if node.type != "jsx_element":
            return None
        for child in node.named_children:
            if child.type in _JSX_NODES:
                found = self._element_component(child)
                if found is not None:
                    return found
        opening = self._opening(node)
        name_node = opening.child_by_field_name("name") if opening is not None else None
        if name_node is None:
            return None
        name = self._text(name_node)
        return None if name in _ROUTE_WRAPPERS else name

    @staticmethod
    def _opening(node: Node) -> Optional[Node]:
        if node.type == "jsx_self_closing_element":
            return node
        opening = node.child_by_field_name("open_tag")
        if opening is not None:
            return opening
        return next((child for child in node.named_children if child.type == "jsx_opening_element"), None)

    def _object_pairs(self, node: Node) -> Dict[str, Node]:
        pairs: Dict[str, Node] = {}
        for child in node.named_children:
            if child.type == "pair":
                key = child.child_by_field_name("key")
                value = child.child_by_field_name("value")
                if key is not None and value is not None:
                    pairs[self._text(key).strip("'\"")] = value
            elif child.type == "shorthand_property_identifier":
                pairs[self._text(child)] = child
        return pairs

    def _dynamic_import_source(self, node: Node) -> Optional[str]:
        stack = [node]
        while stack:
            current = stack.pop()
            if current.type == "call_expression":
                function = current.child_by_field_name("function")
                if function is not None and function.type == "import":
                    argument = self._first_named(current.child_by_field_name("arguments"))
                    if argument is not None and argument.type == "string":
                        return self._string_value(argument)
            stack.extend(current.named_children)
        return None


def _merge_props(existing: List[PropInfo], extra: List[PropInfo]) -> List[PropInfo]:
    seen = {prop.name for prop in existing}
    merged = list(existing)
    for prop in extra:
        if prop.name not in seen:
            merged.append(prop)
            seen.add(prop.name)
    return merged


__all__ = [
    "CallSite",
    "Declaration",
    "ImportBinding",
    "JsxLink",
    "NavTarget",
    "ParsedModule",
    "RouteDecl",
    "join_route",
    "parse_module",
]
