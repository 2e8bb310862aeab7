"""Error handling pipeline for wren requests.

Maps HTTPError exceptions and unexpected failures to Response objects,
using registered error handlers or JSON defaults.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from wren._internal.invoke import invoke
from wren.errors import HTTPError
from wren.http.context import RequestContext
from wren.http.response import Response, json_response
from wren.server.negotiation import negotiate

logger = logging.getLogger("wren.server")


async def call_error_handler(
    handler: Callable[..., Any],
    ctx: RequestContext,
    exc: Exception,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (ctx), or two (ctx, exc) args.
    Supports both sync and async error handlers.
    """
    params = list(inspect.signature(handler).parameters.values())

    if len(params) >= 2:
        result = await invoke(handler, ctx, exc)
    elif len(params) == 1:
        result = await invoke(handler, ctx)
    else:
        result = await invoke(handler)

    return negotiate(result)


async def handle_http_error(
    exc: HTTPError,
    ctx: RequestContext,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool = False,
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    logger.debug("%d %s %s — %s", exc.status, ctx.method, ctx.path, exc.detail)

    # Try exact exception type, then status code
    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        try:
            response = await call_error_handler(handler, ctx, exc)
        except Exception as handler_exc:
            logger.exception("Error handler for %d failed on %s %s", exc.status, ctx.method, ctx.path)
            return _internal_error_response(handler_exc, ctx, debug)
        # Keep the exception's status unless the handler chose its own
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    resp = json_response({"error": exc.detail or f"Error {exc.status}"}, status=exc.status)
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return resp


async def handle_internal_error(
    exc: Exception,
    ctx: RequestContext,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors.

    A registered handler that itself raises falls back to the default
    JSON body, so a response is always produced.
    """
    logger.exception("500 %s %s", ctx.method, ctx.path)

    handler = error_handlers.get(500) or error_handlers.get(type(exc))
    if handler is not None:
        try:
            response = await call_error_handler(handler, ctx, exc)
        except Exception:
            logger.exception("Error handler for 500 failed on %s %s", ctx.method, ctx.path)
        else:
            if response.status == 200:
                response = response.with_status(500)
            return response

    return _internal_error_response(exc, ctx, debug)


def _internal_error_response(exc: Exception, ctx: RequestContext, debug: bool) -> Response:
    payload: dict[str, Any] = {"error": "Internal Server Error"}
    if debug:
        payload["exception"] = repr(exc)
        payload["request"] = ctx.describe()
    return json_response(payload, status=500)
