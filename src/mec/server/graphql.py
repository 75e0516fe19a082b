"""GraphQL schema merging and the HTTP endpoint.

Each ``*.gql.py`` route file contributes a ``SchemaFragment``: SDL
``type_defs`` plus a ``resolvers`` mapping. Fragments are merged at boot
into one executable schema (ariadne on top of graphql-core) and served
from a single endpoint.

Merge rules, by type name:

- object, interface and input types merge their fields (a later
  definition of the same field wins) and their interfaces
- enums merge values, unions merge member types
- scalars and directive definitions are deduplicated
- type extensions are kept as written
"""

import json
import logging
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from ariadne import ObjectType, SchemaBindable, make_executable_schema
from ariadne import graphql as execute_graphql
from ariadne.explorer import ExplorerGraphiQL
from graphql import (
    DefinitionNode,
    DirectiveDefinitionNode,
    DocumentNode,
    EnumTypeDefinitionNode,
    GraphQLError,
    GraphQLSchema,
    InputObjectTypeDefinitionNode,
    InterfaceTypeDefinitionNode,
    Node,
    ObjectTypeDefinitionNode,
    ScalarTypeDefinitionNode,
    UnionTypeDefinitionNode,
    parse,
    print_ast,
)

from mec.errors import SchemaError
from mec.http.request import Request
from mec.http.response import Response

logger = logging.getLogger("mec.graphql")

# Resolver map: type name -> {field name -> resolver}, or an ariadne
# bindable such as ``ScalarType("Date", serializer=...)``.
type Resolvers = Mapping[str, Mapping[str, Callable[..., Any]] | SchemaBindable]

# Definition kind -> the attributes whose named children get merged
_MERGEABLE: dict[type, tuple[str, ...]] = {
    ObjectTypeDefinitionNode: ("fields", "interfaces"),
    InterfaceTypeDefinitionNode: ("fields", "interfaces"),
    InputObjectTypeDefinitionNode: ("fields",),
    EnumTypeDefinitionNode: ("values",),
    UnionTypeDefinitionNode: ("types",),
    ScalarTypeDefinitionNode: (),
    DirectiveDefinitionNode: (),
}


@dataclass(frozen=True, slots=True)
class SchemaFragment:
    """SDL and resolvers contributed by one source (usually a file)."""

    source: str
    type_defs: str
    resolvers: Resolvers = field(default_factory=dict)

    def build(self) -> GraphQLSchema:
        """Build this fragment on its own, raising ``SchemaError`` if invalid."""
        return _executable(self.type_defs, _bindables(self.resolvers), self.source)


def merge_type_defs(fragments: Iterable[SchemaFragment]) -> str:
    """Merge the SDL of *fragments* into one document (see module docs)."""
    merged: dict[str, Node] = {}
    extras: list[DefinitionNode] = []

    for fragment in fragments:
        try:
            document = parse(fragment.type_defs)
        except GraphQLError as exc:
            msg = f"Invalid type definitions in {fragment.source}: {exc.message}"
            raise SchemaError(msg) from exc

        for definition in document.definitions:
            kind = type(definition)
            if kind not in _MERGEABLE:
                extras.append(definition)
                continue
            name = definition.name.value
            existing = merged.get(name)
            if existing is None:
                merged[name] = definition
            elif type(existing) is not kind:
                msg = (
                    f"GraphQL type {name!r} from {fragment.source} conflicts with an "
                    f"earlier definition of a different kind"
                )
                raise SchemaError(msg)
            else:
                merged[name] = _merge_definition(existing, definition)

    document = DocumentNode(definitions=(*merged.values(), *extras))
    return print_ast(document)


def _merge_definition(first: Node, second: Node) -> Node:
    changes: dict[str, Any] = {}
    for attr in _MERGEABLE[type(first)]:
        children = {child.name.value: child for child in getattr(first, attr) or ()}
        children.update({child.name.value: child for child in getattr(second, attr) or ()})
        changes[attr] = tuple(children.values())
    if not changes:
        return second
    if second.description is not None:
        changes["description"] = second.description
    return type(first)(**{key: getattr(first, key) for key in first.keys} | changes)


def merge_resolvers(fragments: Iterable[SchemaFragment]) -> dict[str, Any]:
    """Merge resolver maps per type; a later fragment wins per field."""
    merged: dict[str, Any] = {}
    for fragment in fragments:
        for type_name, resolvers in fragment.resolvers.items():
            if isinstance(resolvers, Mapping) and isinstance(merged.get(type_name), dict):
                merged[type_name].update(resolvers)
            elif isinstance(resolvers, Mapping):
                merged[type_name] = dict(resolvers)
            else:
                merged[type_name] = resolvers
    return merged


def merge_schemas(fragments: Iterable[SchemaFragment]) -> GraphQLSchema:
    """Merge *fragments* into one executable schema."""
    fragments = list(fragments)
    if not fragments:
        msg = "GraphQL is enabled but no *.gql.py schema files were found"
        raise SchemaError(msg)
    type_defs = merge_type_defs(fragments)
    bindables = _bindables(merge_resolvers(fragments))
    sources = ", ".join(f.source for f in fragments)
    logger.debug("Merged GraphQL schema from %s", sources)
    return _executable(type_defs, bindables, sources)


def _bindables(resolvers: Mapping[str, Any]) -> list[SchemaBindable]:
    bindables: list[SchemaBindable] = []
    for type_name, value in resolvers.items():
        if not isinstance(value, Mapping):
            bindables.append(value)
            continue
        object_type = ObjectType(type_name)
        for field_name, resolver in value.items():
            object_type.set_field(field_name, resolver)
        bindables.append(object_type)
    return bindables


def _executable(type_defs: str, bindables: list[SchemaBindable], source: str) -> GraphQLSchema:
    try:
        return make_executable_schema(type_defs, *bindables)
    except (GraphQLError, TypeError, ValueError) as exc:
        msg = f"Invalid GraphQL schema ({source}): {exc}"
        raise SchemaError(msg) from exc


class GraphQLEndpoint:
    """Route handler serving a GraphQL schema.

    POST executes a query (introspection enabled); GET serves the GraphiQL
    explorer. Resolvers receive ``{"request": Request, "ctx": AppContext}``
    as ``info.context``.
    """

    __slots__ = ("_ctx", "_debug", "_explorer", "schema")

    def __init__(self, schema: GraphQLSchema, ctx: Any = None, *, debug: bool = False) -> None:
        self.schema = schema
        self._ctx = ctx
        self._debug = debug
        self._explorer = ExplorerGraphiQL(title="Mec GraphQL")

    async def __call__(self, request: Request) -> Response:
        if request.method in ("GET", "HEAD"):
            return Response(body=self._explorer.html(None) or "")

        try:
            data = await request.json()
        except (UnicodeDecodeError, json.JSONDecodeError):
            return _json_response({"errors": [{"message": "Request body is not valid JSON"}]}, 400)

        success, result = await execute_graphql(
            self.schema,
            data,
            context_value={"request": request, "ctx": self._ctx},
            debug=self._debug,
            introspection=True,
            logger="mec.graphql",
        )
        return _json_response(result, 200 if success else 400)


def _json_response(payload: Any, status: int) -> Response:
    return Response(
        body=json.dumps(payload, default=str),
        status=status,
        content_type="application/json",
    )
