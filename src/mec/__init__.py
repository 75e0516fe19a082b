"""Mec: a small full-stack web framework.

File-based HTTP routes, server-rendered lit components with hydration,
optional GraphQL, and a ``mec`` CLI for scaffolding and development.

Basic usage (``app.py``)::

    from mec import App, AppConfig

    app = App(AppConfig.from_env())
    app.add_client_view("/", "mec", title="Mec")

    if __name__ == "__main__":
        app.run()

Routes under ``routes/`` are registered automatically: ``routes/api/
health.py`` exporting ``handler`` answers ``GET /api/health``.
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "AppContext",
    "ClientRoute",
    "ConfigurationError",
    "Database",
    "HTTPError",
    "MecError",
    "MethodNotAllowed",
    "Middleware",
    "Next",
    "NotFound",
    "Redirect",
    "Request",
    "Response",
    "RouteGroup",
    "g",
    "get_request",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import mec`` (and the ``mec`` CLI) fast.
    """
    if name in ("App", "RouteGroup"):
        from mec import app as _app

        return getattr(_app, name)

    if name == "AppConfig":
        from mec.config import AppConfig

        return AppConfig

    if name == "Request":
        from mec.http.request import Request

        return Request

    if name in ("Response", "Redirect"):
        from mec.http import response as _resp

        return getattr(_resp, name)

    if name in ("Middleware", "Next"):
        from mec.middleware import protocol as _mw

        return getattr(_mw, name)

    if name in ("AppContext", "g", "get_request"):
        from mec import context as _ctx

        return getattr(_ctx, name)

    if name == "ClientRoute":
        from mec.frontend.router import ClientRoute

        return ClientRoute

    if name == "Database":
        from mec.data.database import Database

        return Database

    if name in ("MecError", "ConfigurationError", "HTTPError", "MethodNotAllowed", "NotFound"):
        from mec import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
