"""HTML shell for server-rendered views.

The shell carries the hydration handshake the browser bundles expect:
a ``dsd-pending`` body attribute, declarative shadow DOM detection, an
import map pinning framework specifiers to ``/_framework/*`` URLs, the
hydration bootstrap, and a module entrypoint importing
``/components/<name>.js``. It is a kida template shipped with mec.
"""

import logging
from collections.abc import Callable, Mapping
from functools import cache
from typing import Any

from kida import Environment, PackageLoader
from kida.template import Markup

from mec.http.request import Request

logger = logging.getLogger("mec.renderer")

SHELL_TEMPLATE = "shell.html"


@cache
def shell_environment() -> Environment:
    """The kida environment holding the shell template (built once)."""
    return Environment(loader=PackageLoader("mec.frontend", "templates"), autoescape=True)


def entrypoint_script(name: str) -> str:
    """Module script importing the client bundle for view *name*."""
    return f'<script type="module">await import("/components/{name}.js");</script>'


class Renderer:
    """Render component markup for view *name* inside the HTML shell."""

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def render(
        self,
        component: str | Callable[[Request | None, Any], str] | None,
        request: Request | None = None,
        options: Mapping[str, Any] | None = None,
        *,
        response: Any = None,
    ) -> str:
        """Return the full HTML document.

        *component* is the rendered markup, a callable producing it from
        ``(request, response)``, or ``None`` for an empty body. ``options["title"]``
        fills ``<title>`` (escaped); the markup is inserted as-is.
        """
        options = options or {}
        if callable(component):
            component = component(request, response)
        entrypoint = entrypoint_script(self.name)
        logger.debug("Entrypoint file %s", entrypoint)

        template = shell_environment().get_template(SHELL_TEMPLATE)
        return template.render(
            {
                "title": options.get("title", ""),
                "component": Markup(component or ""),
                "entrypoint": Markup(entrypoint),
            }
        )
