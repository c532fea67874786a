"""Compiled router with trie-based path matching and middleware scopes.

Handlers are registered into scopes during setup.  A scope groups
endpoints that share a middleware chain; a sub-scope inherits its
parent's chain and appends its own.  ``compile()`` resolves every
scope's chain into its endpoints and freezes the router.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from wren.errors import ConfigurationError, DuplicateRouteError, MethodNotAllowed, NotFound
from wren.routing.route import Endpoint, Handler, PathSegment, RouteMatch

# (regex_pattern, python_type) for each supported converter
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/]+", str),
    "int": (r"\d+", int),
    "float": (r"\d+(?:\.\d+)?", float),
    "path": (r".+", str),
}


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/v1/users"          -> [PathSegment("v1"), PathSegment("users")]
        "/v1/users/{id:int}" -> [..., PathSegment("{id:int}", is_param=True, param_type="int")]
    """
    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("{") and part.endswith("}"):
            inner = part[1:-1]
            param_name, _, param_type = inner.partition(":")
            param_type = param_type or "str"
            if param_type not in CONVERTERS:
                msg = f"Unknown path converter {param_type!r} in {path!r}"
                raise ConfigurationError(msg)
            segments.append(
                PathSegment(
                    value=part,
                    is_param=True,
                    param_name=param_name,
                    param_type=param_type,
                )
            )
        else:
            segments.append(PathSegment(value=part))
    return segments


class _TrieNode:
    """A node in the route trie. Mutable during compilation only."""

    __slots__ = ("catch_all", "children", "endpoints", "param_child")

    def __init__(self) -> None:
        self.children: dict[str, _TrieNode] = {}
        # Only one parameter pattern per level
        self.param_child: _ParamEdge | None = None
        self.catch_all: _CatchAllEdge | None = None
        self.endpoints: dict[str, Endpoint] = {}


@dataclass(slots=True)
class _ParamEdge:
    param_name: str
    regex: re.Pattern[str]
    node: _TrieNode


@dataclass(slots=True)
class _CatchAllEdge:
    """Consumes the remaining path."""

    param_name: str
    endpoints: dict[str, Endpoint]


class Scope:
    """A group of endpoints sharing a middleware chain.

    Usage::

        router = Router()
        api = router.scope()
        api.use(request_logger)
        private = api.subscope()
        private.use(auth)
        private.handle("GET", "/v1/me", me_handler)
    """

    __slots__ = ("_middleware", "_parent", "_pending", "_router")

    def __init__(self, router: Router, parent: Scope | None = None) -> None:
        self._router = router
        self._parent = parent
        self._middleware: list[Callable[..., Any]] = []
        self._pending: list[tuple[str, str, Handler]] = []

    def use(self, middleware: Callable[..., Any]) -> None:
        """Append a middleware to this scope's chain."""
        self._router._check_not_compiled()
        self._middleware.append(middleware)

    def subscope(self) -> Scope:
        """Create a child scope that inherits this scope's middleware."""
        return self._router._new_scope(parent=self)

    def handle(self, method: str, path: str, handler: Handler) -> None:
        """Bind *handler* to *method* and *path* within this scope."""
        self._router._check_not_compiled()
        self._pending.append((method.upper(), path, handler))

    @property
    def middleware(self) -> tuple[Callable[..., Any], ...]:
        """The resolved chain, outermost first."""
        inherited = self._parent.middleware if self._parent is not None else ()
        return (*inherited, *self._middleware)


class Router:
    """Compiled router with trie-based path matching.

    Usage::

        router = Router()
        router.scope().handle("GET", "/v1/users/{id:int}", handler)
        router.compile()
        match = router.match("GET", "/v1/users/42")
    """

    __slots__ = ("_compiled", "_inner", "_root", "_scopes")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._compiled = False
        self._scopes: list[Scope] = []
        self._inner: list[Callable[..., Any]] = []

    # -- Setup --

    def scope(self) -> Scope:
        """Create a new top-level scope."""
        return self._new_scope(parent=None)

    def _new_scope(self, parent: Scope | None) -> Scope:
        self._check_not_compiled()
        scope = Scope(self, parent)
        self._scopes.append(scope)
        return scope

    def use(self, middleware: Callable[..., Any]) -> None:
        """Wrap every endpoint with *middleware*, inside its scope chain."""
        self._check_not_compiled()
        self._inner.append(middleware)

    def add(self, endpoint: Endpoint) -> None:
        """Insert a resolved endpoint into the trie."""
        self._check_not_compiled()
        segments = parse_path(endpoint.path)
        node = self._root

        for seg in segments:
            if seg.is_param and seg.param_type == "path":
                if node.catch_all is None:
                    node.catch_all = _CatchAllEdge(param_name=seg.param_name or "path", endpoints={})
                self._bind(node.catch_all.endpoints, endpoint)
                return

            if seg.is_param:
                if node.param_child is None:
                    pattern, _ = CONVERTERS[seg.param_type]
                    node.param_child = _ParamEdge(
                        param_name=seg.param_name or "",
                        regex=re.compile(f"^{pattern}$"),
                        node=_TrieNode(),
                    )
                node = node.param_child.node
            else:
                node = node.children.setdefault(seg.value, _TrieNode())

        self._bind(node.endpoints, endpoint)

    @staticmethod
    def _bind(endpoints: dict[str, Endpoint], endpoint: Endpoint) -> None:
        if endpoint.method in endpoints:
            raise DuplicateRouteError(f"{endpoint.method} {endpoint.path}")
        endpoints[endpoint.method] = endpoint

    def compile(self) -> None:
        """Resolve scope chains into endpoints and freeze the router."""
        self._check_not_compiled()
        inner = tuple(self._inner)
        for scope in self._scopes:
            chain = (*scope.middleware, *inner)
            for method, path, handler in scope._pending:
                self.add(Endpoint(path=path, method=method, handler=handler, middleware=chain))
        self._compiled = True

    def _check_not_compiled(self) -> None:
        if self._compiled:
            msg = "Cannot modify the router after compilation."
            raise RuntimeError(msg)

    # -- Introspection --

    @property
    def compiled(self) -> bool:
        return self._compiled

    @property
    def endpoints(self) -> list[Endpoint]:
        """Every registered endpoint, in trie order."""
        result: list[Endpoint] = []
        self._collect(self._root, result)
        return result

    def _collect(self, node: _TrieNode, result: list[Endpoint]) -> None:
        result.extend(node.endpoints.values())
        for child in node.children.values():
            self._collect(child, result)
        if node.param_child is not None:
            self._collect(node.param_child.node, result)
        if node.catch_all is not None:
            result.extend(node.catch_all.endpoints.values())

    # -- Matching --

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request against compiled endpoints.

        Raises ``NotFound`` if no endpoint matches the path and
        ``MethodNotAllowed`` if the path matches but the method doesn't.
        """
        parts = [p for p in path.strip("/").split("/") if p]
        result = self._match_node(self._root, parts, 0, {})

        if result is None:
            raise NotFound(f"No route matches {method} {path}")

        endpoints, params = result
        if method in endpoints:
            return RouteMatch(endpoint=endpoints[method], path_params=params)
        raise MethodNotAllowed(frozenset(endpoints))

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        params: dict[str, str],
    ) -> tuple[dict[str, Endpoint], dict[str, str]] | None:
        if index == len(parts):
            if node.endpoints:
                return node.endpoints, params
            return None

        part = parts[index]

        # Static children take precedence over parameters
        if part in node.children:
            result = self._match_node(node.children[part], parts, index + 1, params)
            if result is not None:
                return result

        if node.param_child is not None:
            edge = node.param_child
            if edge.regex.match(part):
                new_params = {**params, edge.param_name: part}
                result = self._match_node(edge.node, parts, index + 1, new_params)
                if result is not None:
                    return result

        if node.catch_all is not None:
            remaining = "/".join(parts[index:])
            return node.catch_all.endpoints, {**params, node.catch_all.param_name: remaining}

        return None
