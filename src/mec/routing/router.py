"""Compiled router with trie-based path matching.

Routes are added during setup and the router is compiled (frozen) when
the app freezes. Lookup order per segment: static child, then parameter
child, then catch-all ``{name:path}``.
"""

import re

from mec.errors import MethodNotAllowed, NotFound, RouteError
from mec.routing.params import CONVERTERS, compile_converter
from mec.routing.route import PathSegment, Route, RouteMatch


def parse_path(path: str) -> list[PathSegment]:
    """Split a route path into static and parameter segments.

    Examples::

        "/users"             -> [PathSegment("users")]
        "/users/{id:int}"    -> [..., PathSegment("{id:int}", True, "id", "int")]
        "/files/{rest:path}" -> [..., PathSegment("{rest:path}", True, "rest", "path")]
    """
    segments: list[PathSegment] = []
    for part in filter(None, path.split("/")):
        if not (part.startswith("{") and part.endswith("}")):
            segments.append(PathSegment(value=part))
            continue
        name, _, param_type = part[1:-1].partition(":")
        param_type = param_type or "str"
        if not name or param_type not in CONVERTERS:
            msg = f"Invalid path parameter {part!r} in route {path!r}"
            raise RouteError(msg)
        segments.append(PathSegment(part, is_param=True, param_name=name, param_type=param_type))
    return segments


class _Node:
    """A trie node. Only mutated before the router is compiled."""

    __slots__ = ("catch_all", "param", "routes", "static")

    def __init__(self) -> None:
        self.static: dict[str, _Node] = {}
        self.param: tuple[str, re.Pattern[str], _Node] | None = None
        self.catch_all: tuple[str, _Node] | None = None
        self.routes: dict[str, Route] = {}


class Router:
    """Trie router.

    Usage::

        router = Router()
        router.add(Route("/users/{id:int}", handler, frozenset({"GET"})))
        router.compile()
        match = router.match("GET", "/users/42")
    """

    __slots__ = ("_compiled", "_root", "_routes")

    def __init__(self) -> None:
        self._root = _Node()
        self._routes: list[Route] = []
        self._compiled = False

    @property
    def routes(self) -> tuple[Route, ...]:
        """Every registered route, in registration order."""
        return tuple(self._routes)

    def add(self, route: Route) -> None:
        """Register *route*. Must be called before ``compile()``.

        Raises ``RouteError`` when another route already claims one of
        the same methods at the same path.
        """
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        node = self._root
        for segment in parse_path(route.path):
            node = self._descend(node, segment, route.path)
            if segment.param_type == "path" and segment.is_param:
                break

        taken = sorted(m for m in route.methods if m in node.routes)
        if taken:
            msg = f"Duplicate route: {', '.join(taken)} {route.path} is already registered"
            raise RouteError(msg)
        for method in route.methods:
            node.routes[method] = route
        self._routes.append(route)

    def _descend(self, node: _Node, segment: PathSegment, path: str) -> _Node:
        if not segment.is_param:
            return node.static.setdefault(segment.value, _Node())

        name = segment.param_name or ""
        if segment.param_type == "path":
            if node.catch_all is None:
                node.catch_all = (name, _Node())
            elif node.catch_all[0] != name:
                msg = f"Conflicting catch-all names at {path!r}: {node.catch_all[0]!r} vs {name!r}"
                raise RouteError(msg)
            return node.catch_all[1]

        if node.param is None:
            node.param = (name, compile_converter(segment.param_type), _Node())
        elif node.param[0] != name or node.param[1].pattern != compile_converter(segment.param_type).pattern:
            msg = f"Conflicting path parameter {segment.value!r} in route {path!r}"
            raise RouteError(msg)
        return node.param[2]

    def compile(self) -> None:
        """Freeze the router. No more routes can be added."""
        self._compiled = True

    def match(self, method: str, path: str) -> RouteMatch:
        """Resolve *method* and *path* to a route.

        Raises ``NotFound`` if no route matches the path, and
        ``MethodNotAllowed`` if the path matches under other methods only.
        HEAD falls back to the GET route when no HEAD route exists.
        """
        parts = [p for p in path.split("/") if p]
        found = self._walk(self._root, parts, 0, {})
        if found is None:
            raise NotFound(f"No route matches {method} {path!r}")

        routes, params = found
        route = routes.get(method)
        if route is None and method == "HEAD":
            route = routes.get("GET")
        if route is None:
            raise MethodNotAllowed(frozenset(routes))
        return RouteMatch(route=route, path_params=params)

    def _walk(
        self,
        node: _Node,
        parts: list[str],
        index: int,
        params: dict[str, str],
    ) -> tuple[dict[str, Route], dict[str, str]] | None:
        if index == len(parts):
            return (node.routes, params) if node.routes else None

        part = parts[index]
        child = node.static.get(part)
        if child is not None:
            found = self._walk(child, parts, index + 1, params)
            if found is not None:
                return found

        if node.param is not None:
            name, regex, param_node = node.param
            if regex.match(part):
                found = self._walk(param_node, parts, index + 1, {**params, name: part})
                if found is not None:
                    return found

        if node.catch_all is not None:
            name, tail = node.catch_all
            if tail.routes:
                return tail.routes, {**params, name: "/".join(parts[index:])}

        return None
