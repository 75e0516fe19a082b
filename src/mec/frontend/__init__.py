"""Server-side rendering of client views and the browser-side assets."""

from mec.frontend.client_view import ClientView, ViewRegistry, ViewResponse
from mec.frontend.renderer import Renderer
from mec.frontend.router import ClientRoute, match_client_route, split_pathname

__all__ = [
    "ClientRoute",
    "ClientView",
    "Renderer",
    "ViewRegistry",
    "ViewResponse",
    "match_client_route",
    "split_pathname",
]
