"""File-based routing: turn a ``routes/`` directory tree into routes.

Naming convention, for a file at ``routes/<dir>/<file>``:

=====================  ===============================================
``_index.py``          GET ``/<dir>``
``name.py``            GET ``/<dir>/name``
``name.get.py``        GET ``/<dir>/name``
``name.post.py``       POST ``/<dir>/name``, answers 501 (unsupported)
``name.gql.py``        GraphQL schema fragment (only with ``gql=True``)
=====================  ===============================================

Route modules export a ``handler`` callable. Schema modules export
``type_defs`` (SDL string) and optionally ``resolvers``.

Every module is imported once, here, at startup.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mec._internal.loader import load_module
from mec.errors import NotImplementedRoute, RouteError, SchemaError
from mec.http.request import Request
from mec.server.graphql import SchemaFragment

logger = logging.getLogger("mec.file_router")


@dataclass(frozen=True, slots=True)
class FileRoute:
    """A route derived from a file."""

    method: str
    path: str
    handler: Callable[..., Any]
    source: Path


@dataclass(slots=True)
class FileRoutes:
    """Result of a routes directory walk."""

    routes: list[FileRoute] = field(default_factory=list)
    schemas: list[SchemaFragment] = field(default_factory=list)
    unsupported: list[FileRoute] = field(default_factory=list)


def discover_routes(routes_dir: str | Path, *, gql: bool = False) -> FileRoutes:
    """Walk *routes_dir* depth-first in sorted order and collect routes.

    A missing directory is not an error: it is logged and yields an
    empty result.

    Raises:
        RouteError: A route module has no callable ``handler``, or two
            files map to the same method and path.
        SchemaError: A ``.gql.py`` module has no ``type_defs`` or its
            schema is invalid on its own.
    """
    root = Path(routes_dir)
    result = FileRoutes()
    if not root.is_dir():
        logger.debug("No file based routes found, skipping... (%s)", root)
        return result

    seen: dict[tuple[str, str], Path] = {}
    _walk(root, root, gql, result, seen)
    return result


def _walk(
    directory: Path,
    root: Path,
    gql: bool,
    result: FileRoutes,
    seen: dict[tuple[str, str], Path],
) -> None:
    for entry in sorted(directory.iterdir(), key=lambda p: p.name):
        if entry.name.startswith(".") or entry.name == "__pycache__":
            continue
        if entry.is_dir():
            _walk(entry, root, gql, result, seen)
        elif entry.is_file() and entry.suffix == ".py" and entry.name != "__init__.py":
            _register(entry, root, gql, result, seen)


def route_path_for(file: Path, root: Path) -> str:
    """URL path of the directory holding *file*, relative to *root*."""
    parts = file.parent.relative_to(root).parts
    return "/" + "/".join(parts)


def _register(
    file: Path,
    root: Path,
    gql: bool,
    result: FileRoutes,
    seen: dict[tuple[str, str], Path],
) -> None:
    blocks = file.name.split(".")
    name, file_type = blocks[0], blocks[1]
    base = route_path_for(file, root)
    api_path = f"/{name}" if base == "/" else f"{base}/{name}"

    if file_type == "py" and name == "_index":
        method, path = "GET", base
    elif file_type in ("py", "get"):
        method, path = "GET", api_path
    elif file_type == "post":
        route = FileRoute("POST", api_path, _not_implemented(file), file)
        _claim(route, seen)
        logger.warning(
            "POST file routes are not supported yet: %s answers 501 Not Implemented", file
        )
        result.unsupported.append(route)
        return
    elif file_type == "gql":
        if gql:
            result.schemas.append(_load_schema(file))
        else:
            logger.debug("GraphQL disabled, skipping schema file %s", file)
        return
    else:
        logger.debug("Unknown route file type %r, skipping %s", file_type, file)
        return

    module = load_module(file, "routes")
    handler = getattr(module, "handler", None)
    if not callable(handler):
        msg = f"Route module {file} must define a callable 'handler'"
        raise RouteError(msg)

    route = FileRoute(method, path, handler, file)
    _claim(route, seen)
    logger.debug("Registering %s %s", method, path)
    result.routes.append(route)


def _claim(route: FileRoute, seen: dict[tuple[str, str], Path]) -> None:
    key = (route.method, route.path)
    if key in seen:
        msg = (
            f"Duplicate file route {route.method} {route.path}: "
            f"{seen[key]} and {route.source}"
        )
        raise RouteError(msg)
    seen[key] = route.source


def _load_schema(file: Path) -> SchemaFragment:
    module = load_module(file, "schemas")
    type_defs = getattr(module, "type_defs", None)
    if not isinstance(type_defs, str):
        msg = f"Schema module {file} must define 'type_defs' as an SDL string"
        raise SchemaError(msg)
    fragment = SchemaFragment(
        source=str(file),
        type_defs=type_defs,
        resolvers=getattr(module, "resolvers", None) or {},
    )
    fragment.build()
    logger.debug("Collected GraphQL schema %s", file)
    return fragment


def _not_implemented(file: Path) -> Callable[[Request], Any]:
    def handler(request: Request) -> None:
        raise NotImplementedRoute(f"{request.method} {request.path} is not implemented ({file.name})")

    return handler
