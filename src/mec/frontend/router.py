"""Client route matching.

Mirrors ``MecRouter`` in ``static/router.js`` so the server can answer
deep links into client-routed pages: a route matches when it has the same
number of path segments as the URL and every segment is equal. No
parameters, no wildcards; the first match in list order wins.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from mec.errors import ClientRouteNotFound


@dataclass(frozen=True, slots=True)
class ClientRoute:
    """A browser-side route: a literal path and the template to show."""

    path: str
    template: str = ""

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(self.path.split("/")[1:])


def split_pathname(pathname: str) -> list[str]:
    """Segments of a URL path, as the browser router computes them.

    ``"/a/b"`` -> ``["a", "b"]``; ``"/"`` -> ``[""]``.
    """
    return pathname.split("/")[1:]


def match_client_route(routes: Sequence[ClientRoute], segments: Sequence[str]) -> ClientRoute:
    """Return the first route whose segments equal *segments*.

    Raises ``ClientRouteNotFound`` when nothing matches.
    """
    wanted = tuple(segments)
    for route in routes:
        if route.segments == wanted:
            return route
    raise ClientRouteNotFound(wanted)
