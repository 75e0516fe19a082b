"""Static file serving middleware.

Serves files from a directory under a URL prefix and falls through to the
next handler for everything else. Used for ``/components``, ``/views``,
``/static``, and any directory added with ``App.add_static_directory``.
"""

import mimetypes
from pathlib import Path

from mec.http.request import Request
from mec.http.response import Response
from mec.middleware.protocol import Next


def file_response(path: Path, *, cache_control: str = "no-cache") -> Response:
    """Read *path* and build a response with a guessed content type."""
    content_type, _ = mimetypes.guess_type(path.name)
    if content_type is None:
        content_type = "application/octet-stream"
    elif content_type.startswith("text/") or content_type in {
        "application/javascript",
        "application/json",
    }:
        content_type = f"{content_type}; charset=utf-8"
    return Response(body=path.read_bytes(), content_type=content_type).with_header(
        "Cache-Control", cache_control
    )


class StaticFiles:
    """Middleware that serves static files from a directory.

    Security: resolves symlinks and verifies the final path is inside the
    configured directory. Files whose suffix is in ``exclude_suffixes``
    are never served (``/views`` hides the Python view modules).

    Usage::

        app.add_middleware(StaticFiles("./static", prefix="/static"))
    """

    __slots__ = ("_cache_control", "_directory", "_exclude", "_prefix")

    def __init__(
        self,
        directory: str | Path,
        prefix: str = "/static",
        *,
        exclude_suffixes: tuple[str, ...] = (),
        cache_control: str = "no-cache",
    ) -> None:
        self._directory = Path(directory).resolve()
        self._prefix = "/" + prefix.strip("/") if prefix.strip("/") else ""
        self._exclude = frozenset(exclude_suffixes)
        self._cache_control = cache_control

    @property
    def prefix(self) -> str:
        return self._prefix or "/"

    @property
    def directory(self) -> Path:
        return self._directory

    async def __call__(self, request: Request, next: Next) -> Response:
        """Serve a static file or fall through."""
        if request.method not in ("GET", "HEAD"):
            return await next(request)

        relative = self._relative(request.path)
        if relative is None:
            return await next(request)

        file_path = (self._directory / relative).resolve()
        if not file_path.is_relative_to(self._directory):
            return Response(body="Forbidden", status=403)
        if file_path.suffix in self._exclude or not file_path.is_file():
            return await next(request)

        return file_response(file_path, cache_control=self._cache_control)

    def _relative(self, path: str) -> str | None:
        if not self._prefix:
            return path.lstrip("/") or None
        if not path.startswith(self._prefix + "/"):
            return None
        return path[len(self._prefix) + 1 :] or None
