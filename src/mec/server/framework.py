"""Fixed ``/_framework/*`` asset table.

Browser libraries (lit, the SSR client, the declarative shadow DOM
polyfill) are served from the application's ``node_modules`` directory;
``mec.js`` and ``router.js`` ship inside this package.
"""

import logging
from importlib.resources import files
from pathlib import Path

from mec.http.request import Request
from mec.http.response import Response
from mec.middleware.protocol import Next
from mec.middleware.static import file_response

logger = logging.getLogger("mec.server")

# URL -> path segments under the framework (node_modules) directory
FRAMEWORK_PATHS: dict[str, tuple[str, ...]] = {
    "/_framework/lit-element-hydrate-support.js": (
        "@lit-labs", "ssr-client", "lit-element-hydrate-support.js",
    ),
    "/_framework/lit.js": ("lit", "index.js"),
    "/_framework/lit-html.js": ("lit-html", "lit-html.js"),
    "/_framework/lit-reactive-element.js": ("@lit", "reactive-element", "reactive-element.js"),
    "/_framework/lit-element.js": ("lit-element", "lit-element.js"),
    "/_framework/lit-html/is-server.js": ("lit-html", "is-server.js"),
    "/_framework/css-tag.js": ("@lit", "reactive-element", "css-tag.js"),
    "/_framework/lib/hydrate-lit-html.js": ("@lit-labs", "ssr-client", "lib", "hydrate-lit-html.js"),
    "/_framework/private-ssr-support.js": ("lit-html", "private-ssr-support.js"),
    "/_framework/directive.js": ("lit-html", "directive.js"),
    "/_framework/directive-helpers.js": ("lit-html", "directive-helpers.js"),
    "/_framework/template-shadowroot.js": (
        "@webcomponents", "template-shadowroot", "template-shadowroot.js",
    ),
    "/_framework/_implementation/feature_detect.js": (
        "@webcomponents", "template-shadowroot", "_implementation", "feature_detect.js",
    ),
    "/_framework/_implementation/default_implementation.js": (
        "@webcomponents", "template-shadowroot", "_implementation", "default_implementation.js",
    ),
    "/_framework/_implementation/manual_walk.js": (
        "@webcomponents", "template-shadowroot", "_implementation", "manual_walk.js",
    ),
    "/_framework/_implementation/util.js": (
        "@webcomponents", "template-shadowroot", "_implementation", "util.js",
    ),
}

# URL -> file name under mec/frontend/static
LOCAL_FRAMEWORK_PATHS: dict[str, str] = {
    "/_framework/mec.js": "mec.js",
    "/_framework/router.js": "router.js",
}


def package_static_dir() -> Path:
    """Directory holding the browser assets shipped with mec."""
    return Path(str(files("mec.frontend") / "static"))


def build_asset_table(framework_dir: str | Path) -> dict[str, Path]:
    """Resolve every ``/_framework/*`` URL to a file path."""
    root = Path(framework_dir)
    table = {url: root.joinpath(*segments) for url, segments in FRAMEWORK_PATHS.items()}
    static = package_static_dir()
    table.update({url: static / name for url, name in LOCAL_FRAMEWORK_PATHS.items()})
    return table


class FrameworkAssets:
    """Middleware serving the fixed framework asset table.

    A listed file that does not exist on disk (``npm install`` not run
    yet) answers 404 with a hint in the log.
    """

    __slots__ = ("_table",)

    def __init__(self, table: dict[str, Path]) -> None:
        self._table = table

    async def __call__(self, request: Request, next: Next) -> Response:
        path = self._table.get(request.path)
        if path is None or request.method not in ("GET", "HEAD"):
            return await next(request)
        if not path.is_file():
            logger.warning("Framework asset %s not found at %s (run npm install)", request.path, path)
            return Response(body="Not Found", status=404)
        return file_response(path, cache_control="public, max-age=3600")
