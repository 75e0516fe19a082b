"""Route and RouteMatch frozen dataclasses, plus method validation."""

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from mec.errors import RouteError

# Lower-case method names accepted by ``App.add_route``. ``all`` expands
# to every other verb.
VALID_METHODS: tuple[str, ...] = (
    "all",
    "get",
    "post",
    "put",
    "delete",
    "patch",
    "options",
    "head",
)

ALL_METHODS: frozenset[str] = frozenset(m.upper() for m in VALID_METHODS if m != "all")


def normalize_methods(method: str) -> frozenset[str]:
    """Map a method name (any case) to the upper-case verbs it covers.

    Raises ``RouteError`` for names outside ``VALID_METHODS``.
    """
    lowered = method.lower()
    if lowered not in VALID_METHODS:
        msg = f"Unknown HTTP method {method!r}. Expected one of: {', '.join(VALID_METHODS)}"
        raise RouteError(msg)
    if lowered == "all":
        return ALL_METHODS
    return frozenset({lowered.upper()})


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route path.

    Static:  ``/users``  (is_param=False)
    Param:   ``/{id}``   (is_param=True, param_name="id")
    Typed:   ``/{id:int}`` (is_param=True, param_name="id", param_type="int")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None
    param_type: str = "str"


@dataclass(frozen=True, slots=True)
class Route:
    """A frozen route definition.

    ``middleware`` holds route-scoped middleware (from a ``RouteGroup``),
    run inside the app-wide chain after the route has matched.
    """

    path: str
    handler: Callable[..., Any]
    methods: frozenset[str]
    name: str | None = None
    middleware: tuple[Callable[..., Any], ...] = ()


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful route match."""

    route: Route
    path_params: dict[str, str]
