"""Error handling pipeline for mec requests.

Maps HTTPError exceptions and unexpected failures to Response objects,
using handlers registered with ``@app.error()`` or plain-text defaults.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from mec._internal.invoke import invoke
from mec.errors import HTTPError
from mec.http.request import Request
from mec.http.response import Response
from mec.server.negotiation import negotiate

logger = logging.getLogger("mec.server")


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
) -> Response:
    """Invoke a user error handler.

    Error handlers may accept zero, one (request), or two (request, exc)
    arguments, and may be sync or async.
    """
    arity = len(inspect.signature(handler).parameters)
    args = (request, exc)[: min(arity, 2)]
    return negotiate(await invoke(handler, *args))


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
) -> Response:
    """Map an HTTPError to a Response."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)

    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        # Keep the error status unless the handler chose its own
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    response = Response(body=exc.detail or f"Error {exc.status}", status=exc.status)
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    *,
    debug: bool = False,
) -> Response:
    """Log an unexpected exception and answer 500."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = error_handlers.get(type(exc)) or error_handlers.get(500)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        return response.with_status(500) if response.status == 200 else response

    body = "Internal Server Error"
    if debug:
        body = f"{body}\n\n{type(exc).__name__}: {exc}"
    return Response(body=body, status=500, content_type="text/plain; charset=utf-8")
