"""Request and application context.

Provides:
- ``request_var``: The current ``Request`` for this task.
- ``g``: A mutable namespace scoped to the current request.
- ``AppContext``: The explicit application context handed to handlers,
  views, models, and GraphQL resolvers (config, logger, database, models).

``request_var`` and ``g`` are set by the handler pipeline and reset after
each request.
"""

from __future__ import annotations

import logging
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from mec.config import AppConfig
from mec.http.request import Request

if TYPE_CHECKING:
    from mec.data.database import Database

request_var: ContextVar[Request] = ContextVar("mec_request")
"""The current request. Set by the ASGI handler before dispatch."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


class _RequestGlobals:
    """Per-request attribute namespace backed by a ContextVar.

    Usage::

        from mec.context import g

        # In middleware
        g.user = current_user

        # In a view
        route = g.client_route
    """

    __slots__ = ("_store",)

    def __init__(self) -> None:
        object.__setattr__(self, "_store", ContextVar("mec_g", default=None))

    def _data(self) -> dict[str, Any]:
        store: ContextVar[dict[str, Any] | None] = object.__getattribute__(self, "_store")
        data = store.get()
        if data is None:
            data = {}
            store.set(data)
        return data

    def _reset(self) -> None:
        object.__getattribute__(self, "_store").set(None)

    def __getattr__(self, name: str) -> Any:
        try:
            return self._data()[name]
        except KeyError:
            msg = f"'g' has no attribute {name!r} in the current request scope"
            raise AttributeError(msg) from None

    def __setattr__(self, name: str, value: Any) -> None:
        self._data()[name] = value

    def __delattr__(self, name: str) -> None:
        try:
            del self._data()[name]
        except KeyError:
            msg = f"'g' has no attribute {name!r} in the current request scope"
            raise AttributeError(msg) from None

    def __contains__(self, name: str) -> bool:
        return name in self._data()

    def get(self, name: str, default: Any = None) -> Any:
        """Get an attribute with a default value."""
        return self._data().get(name, default)

    def __repr__(self) -> str:
        return f"<g {self._data()!r}>"


g = _RequestGlobals()
"""Request-scoped namespace. Stores arbitrary per-request data."""


@dataclass(slots=True)
class AppContext:
    """Shared application state, passed explicitly instead of a global.

    Handlers and views receive it by annotating a parameter with
    ``AppContext`` (or naming it ``ctx``). Model ``define(ctx)`` functions
    receive it at startup and their return values land in ``models``.
    """

    config: AppConfig
    logger: logging.Logger
    db: Database | None = None
    models: dict[str, Any] = field(default_factory=dict)
