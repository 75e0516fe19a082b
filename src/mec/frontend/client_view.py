"""Client views: named server-rendered pages.

A view is a module ``views/<name>.py`` exporting ``render``, a sync or
async function returning the component markup. Its parameters are filled
by name or annotation, like route handlers:

- ``request`` -- the current ``Request``
- ``response`` -- a ``ViewResponse`` whose ``status`` and ``headers``
  the view may change
- ``ctx`` (or any parameter annotated ``AppContext``) -- the app context

Every view module is imported once at startup into a ``ViewRegistry``.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from mec._internal.invoke import invoke
from mec._internal.loader import load_module
from mec.errors import ViewError
from mec.frontend.renderer import Renderer
from mec.http.request import Request
from mec.http.response import Response
from mec.server.handler import build_kwargs

logger = logging.getLogger("mec.renderer")


@dataclass(slots=True)
class ViewResponse:
    """Mutable response metadata handed to a view's ``render``."""

    status: int = 200
    headers: dict[str, str] = field(default_factory=dict)


class ViewRegistry:
    """Name -> ``render`` callable, loaded from a views directory."""

    __slots__ = ("_views",)

    def __init__(self, views: Mapping[str, Callable[..., Any]] | None = None) -> None:
        self._views: dict[str, Callable[..., Any]] = dict(views or {})

    @classmethod
    def load(cls, views_dir: str | Path) -> ViewRegistry:
        """Import every ``*.py`` in *views_dir* (non-recursive).

        Raises ``ViewError`` when a module does not export a callable
        ``render``. A missing directory yields an empty registry.
        """
        root = Path(views_dir)
        registry = cls()
        if not root.is_dir():
            logger.debug("No views directory at %s", root)
            return registry
        for file in sorted(root.glob("*.py")):
            if file.name.startswith(("_", ".")):
                continue
            module = load_module(file, "views")
            render = getattr(module, "render", None)
            if not callable(render):
                msg = f"Component {file.stem} is not a function or could not be found! ({file})"
                raise ViewError(msg)
            registry.register(file.stem, render)
        return registry

    def register(self, name: str, render: Callable[..., Any]) -> None:
        self._views[name] = render

    def get(self, name: str) -> Callable[..., Any]:
        try:
            return self._views[name]
        except KeyError:
            msg = f"Component {name} is not a function or could not be found!"
            raise ViewError(msg) from None

    def __contains__(self, name: object) -> bool:
        return name in self._views

    def __len__(self) -> int:
        return len(self._views)

    @property
    def names(self) -> tuple[str, ...]:
        return tuple(sorted(self._views))


class ClientView:
    """A view name plus its page title."""

    __slots__ = ("name", "title")

    def __init__(self, name: str, title: str = "") -> None:
        self.name = name
        self.title = title

    async def create(
        self,
        request: Request,
        *,
        registry: ViewRegistry,
        providers: Mapping[type, Callable[..., Any]] | None = None,
        ctx: Any = None,
    ) -> Response:
        """Run the view and wrap its markup in the HTML shell."""
        render = registry.get(self.name)
        view_response = ViewResponse()
        kwargs = build_kwargs(
            render,
            request,
            providers=providers,
            extras={"response": view_response, "ctx": ctx},
        )
        markup = await invoke(render, **kwargs)
        html = Renderer(self.name).render(
            markup, request, {"title": self.title}, response=view_response
        )
        return Response(body=html, status=view_response.status).with_headers(view_response.headers)
