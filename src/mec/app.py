"""Mec application class.

Mutable during setup (routes, client views, middleware, hooks).
Frozen by ``app.create()``, or on the first ASGI call, into a compiled
router plus an immutable middleware chain.
"""

import logging
import os
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from mec._internal.asgi import Receive, Scope, Send
from mec._internal.invoke import invoke
from mec.config import AppConfig
from mec.context import AppContext, g
from mec.data.database import Database
from mec.data.models import load_models
from mec.errors import ClientRouteNotFound, RouteError, ViewError
from mec.frontend.client_view import ClientView, ViewRegistry
from mec.frontend.optimize import Optimizer
from mec.frontend.router import ClientRoute, match_client_route, split_pathname
from mec.http.request import Request
from mec.http.response import Response
from mec.logger import APP_LOGGER, configure_logging
from mec.middleware.protocol import Middleware
from mec.middleware.static import StaticFiles
from mec.routing.route import VALID_METHODS, Route, normalize_methods
from mec.routing.router import Router
from mec.server.file_router import discover_routes
from mec.server.framework import FrameworkAssets, build_asset_table
from mec.server.graphql import GraphQLEndpoint, merge_schemas
from mec.server.handler import handle_request

logger = logging.getLogger("mec.server")

type Handler = Callable[..., Any]


@dataclass(slots=True)
class _PendingRoute:
    """A route waiting to be compiled."""

    path: str
    handler: Handler
    methods: frozenset[str]
    group: RouteGroup | None = None


@dataclass(slots=True)
class _PendingView:
    path: str
    name: str
    title: str
    routes: tuple[ClientRoute, ...]


def join_path(prefix: str, path: str) -> str:
    """Join a group prefix and a route path (``"/api" + "/"`` -> ``"/api"``)."""
    prefix = "/" + prefix.strip("/") if prefix.strip("/") else ""
    path = path.strip("/")
    return f"{prefix}/{path}" if path else prefix or "/"


def _validate_route(path: str, handler: Any, method: str) -> frozenset[str]:
    method = method.lower() if isinstance(method, str) else method
    if method not in VALID_METHODS or not path or handler is None:
        msg = f"Invalid route for {path} with type: '{method}' and handler: {handler}"
        raise RouteError(msg)
    return normalize_methods(method)


class RouteGroup:
    """Routes and middleware mounted under a common prefix.

    Created with ``app.create_router(prefix)``. Middleware added to a group
    runs only for the group's routes, after the app-wide middleware::

        api = app.create_router("/api")
        api.add_middleware(require_token)

        @api.route("/users")
        def users(): ...
    """

    __slots__ = ("_app", "middleware", "prefix")

    def __init__(self, app: App, prefix: str) -> None:
        self._app = app
        self.prefix = join_path(prefix, "")
        self.middleware: list[Middleware] = []

    def add_route(self, path: str, handler: Handler, method: str = "get") -> None:
        """Register *handler* for *method* at ``prefix + path``."""
        methods = _validate_route(path, handler, method)
        self._app._add_pending(join_path(self.prefix, path), handler, methods, self)

    def route(self, path: str, *, methods: Sequence[str] | None = None) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator."""

        def decorator(func: Handler) -> Handler:
            for method in methods or ("get",):
                self.add_route(path, func, method)
            return func

        return decorator

    def add_middleware(self, middleware: Middleware, *, name: str | None = None) -> None:
        """Add middleware scoped to this group's routes."""
        self._app._check_not_frozen()
        logger.debug("Middleware %s added to %s", name or _describe(middleware), self.prefix)
        self.middleware.append(middleware)


class App:
    """The mec application.

    Usage::

        app = App(AppConfig.from_env(gql=True))
        app.add_client_view("/", "mec", title="Mec")

        @app.route("/api/ping")
        def ping():
            return {"pong": True}

        app.run()

    Thread safety:
        Setup is single-threaded. The freeze uses a Lock plus a double
        check so exactly one thread compiles the app.
    """

    __slots__ = (
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_groups",
        "_middleware",
        "_middleware_list",
        "_pending_routes",
        "_pending_views",
        "_providers",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "_static_mounts",
        "_views",
        "config",
        "ctx",
    )

    def __init__(self, config: AppConfig | None = None, *, db: Database | str | None = None) -> None:
        self.config: AppConfig = config or AppConfig.from_env()
        if db is None:
            db = self.config.database_url
        if isinstance(db, str):
            db = Database(db)
        self.ctx = AppContext(config=self.config, logger=logging.getLogger(APP_LOGGER), db=db)

        self._pending_routes: list[_PendingRoute] = []
        self._pending_views: list[_PendingView] = []
        self._middleware_list: list[Middleware] = []
        self._static_mounts: list[StaticFiles] = []
        self._error_handlers: dict[int | type, Callable[..., Any]] = {}
        self._providers: dict[type, Callable[..., Any]] = {AppContext: lambda: self.ctx}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen = False
        self._freeze_lock = threading.Lock()

        # Compiled state, set by _freeze()
        self._router: Router | None = None
        self._middleware: tuple[Callable[..., Any], ...] = ()
        self._views = ViewRegistry()

        if self.config.production:
            Optimizer(self.config.components_dir, self.config.build_dir).minify_scripts()

    @property
    def db(self) -> Database:
        """The application database."""
        assert self.ctx.db is not None
        return self.ctx.db

    @property
    def routes(self) -> tuple[Route, ...]:
        """Compiled routes (empty until the app is frozen)."""
        return self._router.routes if self._router is not None else ()

    @property
    def views(self) -> ViewRegistry:
        return self._views

    # -- Route registration --

    def add_route(self, path: str, handler: Handler, method: str = "get") -> None:
        """Register *handler* for *method* at *path*.

        *method* is one of ``VALID_METHODS`` (any case); ``"all"`` covers
        every verb.

        Raises:
            RouteError: Unknown method, or empty path or handler.
        """
        self._add_pending(path, handler, _validate_route(path, handler, method))

    def route(self, path: str, *, methods: Sequence[str] | None = None) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: URL path pattern. Use ``{param}`` for path parameters.
            methods: HTTP methods. Defaults to ``["GET"]``.
        """

        def decorator(func: Handler) -> Handler:
            for method in methods or ("get",):
                self.add_route(path, func, method)
            return func

        return decorator

    def _add_pending(
        self,
        path: str,
        handler: Handler,
        methods: frozenset[str],
        group: RouteGroup | None = None,
    ) -> None:
        self._check_not_frozen()
        self._pending_routes.append(_PendingRoute(path, handler, methods, group))

    def add_client_view(
        self,
        path: str,
        name: str,
        *,
        title: str = "",
        routes: Sequence[ClientRoute | dict[str, str]] | None = None,
    ) -> None:
        """Serve view *name* at *path*, rendered inside the HTML shell.

        With *routes* (the page's client route table) the view is also
        served at every client route path so browser deep links work; the
        matching ``ClientRoute`` is available to the view as
        ``g.client_route`` (``None`` at *path* itself if no route matches).
        """
        self._check_not_frozen()
        table = tuple(
            r if isinstance(r, ClientRoute) else ClientRoute(r["path"], r.get("template", ""))
            for r in routes or ()
        )
        self._pending_views.append(_PendingView(path, name, title, table))

    def create_router(self, prefix: str) -> RouteGroup:
        """Create a nested router whose routes live under *prefix*."""
        self._check_not_frozen()
        return RouteGroup(self, prefix)

    def add_static_directory(self, url_path: str, directory: str | os.PathLike[str]) -> None:
        """Serve files from *directory* under *url_path*."""
        self._check_not_frozen()
        self._static_mounts.append(StaticFiles(directory, prefix=url_path))

    # -- Middleware, services, errors, hooks --

    def add_middleware(self, middleware: Middleware, *, name: str | None = None) -> None:
        """Add a middleware to the app-wide pipeline."""
        self._check_not_frozen()
        logger.debug("Middleware %s added", name or _describe(middleware))
        self._middleware_list.append(middleware)

    def provide(self, annotation: type, factory: Callable[..., Any]) -> None:
        """Register a provider factory for dependency injection.

        A handler or view parameter annotated with *annotation* receives
        ``factory()``. ``AppContext`` is always provided.
        """
        self._check_not_frozen()
        self._providers[annotation] = factory

    def error(self, code_or_exception: int | type[Exception]) -> Callable[[Handler], Handler]:
        """Register an error handler via decorator."""

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a startup hook, run after the database and models are ready."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a shutdown hook, run before the database closes."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Boot --

    def create(self) -> App:
        """Boot the app: configure logging, load routes and views, freeze.

        Safe to call more than once.
        """
        configure_logging(self.config)
        self._ensure_frozen()
        self.ctx.logger.info("Mec Server (PID: %d) started on port: %d", os.getpid(), self.config.port)
        return self

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Boot and serve with pounce."""
        from mec.server.dev import run_server

        self.create()
        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug,
            reload_dirs=self.config.reload_dirs,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        if scope["type"] != "http":
            await send({"type": "websocket.close", "code": 1000})
            return

        self._ensure_frozen()
        assert self._router is not None
        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            middleware=self._middleware,
            error_handlers=self._error_handlers,
            providers=self._providers,
            extras={"ctx": self.ctx},
            debug=self.config.debug,
        )

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        self._ensure_frozen()
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    await self._startup()
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await self._shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    async def _startup(self) -> None:
        """Connect and check the database, load models, run startup hooks."""
        if self.ctx.db is not None:
            await self.ctx.db.connect()
            await self.ctx.db.authenticate()
        await load_models(self.config.models_dir, self.ctx)
        for hook in self._startup_hooks:
            await invoke(hook)

    async def _shutdown(self) -> None:
        for hook in self._shutdown_hooks:
            await invoke(hook)
        if self.ctx.db is not None:
            await self.ctx.db.disconnect()

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app. MUST only be called while holding _freeze_lock."""
        config = self.config
        router = Router()

        # 1. File routes (imported once, here)
        found = discover_routes(config.routes_dir, gql=config.gql)
        for file_route in (*found.routes, *found.unsupported):
            router.add(Route(file_route.path, file_route.handler, frozenset({file_route.method})))

        # 2. Explicit routes, with group middleware attached
        for pending in self._pending_routes:
            middleware = tuple(pending.group.middleware) if pending.group else ()
            router.add(Route(pending.path, pending.handler, pending.methods, middleware=middleware))

        # 3. Client views
        self._views = ViewRegistry.load(config.views_dir)
        for view in self._pending_views:
            if view.name not in self._views:
                msg = f"Client view {view.name!r} at {view.path} has no module in {config.views_dir}"
                raise ViewError(msg)
            handler = self._client_view_handler(view)
            paths = dict.fromkeys((view.path, *(r.path for r in view.routes)))
            for path in paths:
                router.add(Route(path, handler, frozenset({"GET"}), name=view.name))

        # 4. GraphQL
        if config.gql:
            endpoint = GraphQLEndpoint(merge_schemas(found.schemas), self.ctx, debug=config.debug)
            router.add(Route(config.graphql_path, endpoint, frozenset({"GET", "POST"})))

        router.compile()
        self._router = router

        # 5. Middleware: user middleware first, then asset mounts
        assets: list[Middleware] = [
            FrameworkAssets(build_asset_table(config.framework_dir)),
            StaticFiles(config.components_root, prefix="/components"),
            StaticFiles(config.views_dir, prefix="/views", exclude_suffixes=(".py", ".pyc")),
        ]
        if config.static_dir is not None:
            assets.append(StaticFiles(config.static_dir, prefix="/static"))
        self._middleware = (*self._middleware_list, *assets, *self._static_mounts)

        self._frozen = True
        logger.debug("App frozen with %d route(s)", len(router.routes))

    def _client_view_handler(self, view: _PendingView) -> Handler:
        client_view = ClientView(view.name, view.title)

        async def render_client_view(request: Request) -> Response:
            if view.routes:
                try:
                    g.client_route = match_client_route(view.routes, split_pathname(request.path))
                except ClientRouteNotFound:
                    g.client_route = None
            return await client_view.create(
                request,
                registry=self._views,
                providers=self._providers,
                ctx=self.ctx,
            )

        return render_client_view

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has been created. "
                "Register routes, views, and middleware before app.create()."
            )
            raise RuntimeError(msg)


def _describe(middleware: Any) -> str:
    return getattr(middleware, "__name__", type(middleware).__name__)
