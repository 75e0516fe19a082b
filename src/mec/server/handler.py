"""ASGI handler: translates ASGI scope/messages to mec types.

The only component that touches raw HTTP ASGI messages. Converts the
scope to a Request, runs middleware and routing, and sends the Response
back through ASGI ``send()``.
"""

import inspect
from collections.abc import Callable, Mapping, Sequence
from typing import Any

from mec._internal.asgi import Receive, Scope, Send
from mec._internal.invoke import invoke
from mec.context import g, request_var
from mec.errors import HTTPError
from mec.http.request import Request
from mec.http.response import Response
from mec.middleware.protocol import Next
from mec.routing.route import RouteMatch
from mec.routing.router import Router
from mec.server.errors import handle_http_error, handle_internal_error
from mec.server.negotiation import negotiate
from mec.server.sender import send_response


def compose(middleware: Sequence[Callable[..., Any]], endpoint: Next) -> Next:
    """Wrap *endpoint* so *middleware* runs outermost-first."""
    handler = endpoint
    for mw in reversed(middleware):

        async def call_next(req: Request, _mw: Any = mw, _next: Next = handler) -> Response:
            return await _mw(req, _next)

        handler = call_next
    return handler


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: tuple[Callable[..., Any], ...],
    error_handlers: dict[int | type, Callable[..., Any]],
    providers: Mapping[type, Callable[..., Any]] | None = None,
    extras: Mapping[str, Any] | None = None,
    debug: bool = False,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    request = Request.from_asgi(scope, receive)
    token = request_var.set(request)

    async def dispatch(req: Request) -> Response:
        match = router.match(req.method, req.path)
        endpoint = _endpoint(match, providers, extras)
        if match.route.middleware:
            endpoint = compose(match.route.middleware, endpoint)
        return await endpoint(req)

    try:
        response = await compose(middleware, dispatch)(request)
    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, debug=debug)
    finally:
        g._reset()
        request_var.reset(token)

    await send_response(response, send, method=request.method)


def _endpoint(
    match: RouteMatch,
    providers: Mapping[type, Callable[..., Any]] | None,
    extras: Mapping[str, Any] | None,
) -> Next:
    async def call_handler(request: Request) -> Response:
        request = request.with_path_params(match.path_params)
        kwargs = build_kwargs(match.route.handler, request, providers=providers, extras=extras)
        return negotiate(await invoke(match.route.handler, **kwargs))

    return call_handler


def build_kwargs(
    func: Callable[..., Any],
    request: Request,
    *,
    providers: Mapping[type, Callable[..., Any]] | None = None,
    extras: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """Inspect *func*'s signature and build its keyword arguments.

    Resolution order:
    1. ``request`` parameter (by name or ``Request`` annotation)
    2. Path parameters (by name, converted to the annotated type)
    3. *extras* (by name, e.g. ``response`` and ``ctx`` for views)
    4. Service providers (by type annotation via ``app.provide()``)

    Parameters that resolve to nothing are left to their defaults.
    """
    kwargs: dict[str, Any] = {}
    for name, param in inspect.signature(func, eval_str=True).parameters.items():
        annotation = param.annotation
        if name == "request" or annotation is Request:
            kwargs[name] = request
        elif name in request.path_params:
            kwargs[name] = _convert(request.path_params[name], annotation)
        elif extras and name in extras:
            kwargs[name] = extras[name]
        elif providers and annotation is not inspect.Parameter.empty and annotation in providers:
            kwargs[name] = providers[annotation]()
    return kwargs


def _convert(value: str, annotation: Any) -> Any:
    if annotation in (int, float):
        try:
            return annotation(value)
        except ValueError:
            return value
    return value
