"""Mec exception hierarchy.

Shared across the app, router, file router, renderer, and CLI so every
module raises and catches the same types.
"""

from dataclasses import dataclass


class MecError(Exception):
    """Base for all mec-specific errors."""


class ConfigurationError(MecError):
    """Raised when app configuration or registration is invalid.

    Typically surfaces during ``App.create()`` at startup.
    """


class RouteError(ConfigurationError):
    """An invalid, duplicate, or incomplete route registration."""


class ViewError(ConfigurationError):
    """A client view name is unknown or its module has no ``render``."""


class SchemaError(ConfigurationError):
    """A GraphQL schema fragment cannot be built or merged."""


class ScaffoldError(MecError):
    """Raised by ``mec init`` and ``mec create`` when scaffolding fails."""


class ClientRouteNotFound(MecError):  # noqa: N818
    """No client route matches the given URL segments."""

    def __init__(self, segments: list[str] | tuple[str, ...]) -> None:
        self.segments = tuple(segments)
        super().__init__(f"No client route matches /{'/'.join(self.segments)}")


@dataclass(frozen=True, slots=True)
class HTTPError(MecError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, middleware, or handlers. The ASGI handler
    catches these and dispatches to the matching ``@app.error()`` handler.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: route exists but not for this HTTP method.

    Includes an ``Allow`` header listing the valid methods.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )


class NotImplementedRoute(HTTPError):  # noqa: N818
    """501: the route exists by file convention but has no handler support."""

    def __init__(self, detail: str = "Not Implemented") -> None:
        super().__init__(status=501, detail=detail)
