"""ASGI handler — drives one request through the wren pipeline.

The only component that sees the raw scope, receive, and send together.
Each request moves through::

    RECEIVED -> BODY_INGESTED -> ROUTED -> HANDLER_EXECUTED -> RESPONSE_SENT

Ingestion failures answer before routing (413, 408) or, when the client
has gone away, end the request without sending anything.
"""

import logging
from collections.abc import Callable
from typing import Any

from wren._internal.asgi import Receive, Scope, Send
from wren._internal.invoke import invoke
from wren.errors import ConnectionAborted, HTTPError
from wren.http.body import ingest_body
from wren.http.context import RequestContext, RequestState
from wren.http.response import Response
from wren.routing.table import RouteTable
from wren.server.errors import handle_http_error, handle_internal_error
from wren.server.negotiation import negotiate
from wren.server.sender import send_response

logger = logging.getLogger("wren.server")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    table: RouteTable,
    before_hooks: tuple[Callable[..., Any], ...] = (),
    after_hooks: tuple[Callable[..., Any], ...] = (),
    error_handlers: dict[int | type, Callable[..., Any]] | None = None,
    max_body_bytes: int,
    read_timeout: float | None,
    debug: bool = False,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    handlers = error_handlers or {}
    ctx = RequestContext.from_asgi(scope)

    try:
        response = await _ingest_and_dispatch(
            ctx,
            receive,
            table=table,
            before_hooks=before_hooks,
            max_body_bytes=max_body_bytes,
            read_timeout=read_timeout,
        )
    except ConnectionAborted:
        logger.debug("%s %s — client disconnected mid-body, no response sent", ctx.method, ctx.path)
        return
    except HTTPError as exc:
        response = await handle_http_error(exc, ctx, handlers, debug)
    except Exception as exc:
        response = await handle_internal_error(exc, ctx, handlers, debug)

    try:
        response = await _apply_after_hooks(ctx, response, after_hooks)
        # Encode here so an unencodable body becomes a 500, not a dropped request
        response = response.with_body(response.body_bytes)
    except Exception as exc:
        response = await handle_internal_error(exc, ctx, handlers, debug)

    await send_response(response, send)
    ctx.advance(RequestState.RESPONSE_SENT)


async def _ingest_and_dispatch(
    ctx: RequestContext,
    receive: Receive,
    *,
    table: RouteTable,
    before_hooks: tuple[Callable[..., Any], ...],
    max_body_bytes: int,
    read_timeout: float | None,
) -> Response:
    """Attach the parsed body, run before hooks, then call one handler."""
    parsed = await ingest_body(
        receive,
        max_bytes=max_body_bytes,
        read_timeout=read_timeout,
        content_length=ctx.content_length,
    )
    ctx.attach_body(parsed)

    for hook in before_hooks:
        early = await invoke(hook, ctx)
        if early is not None:
            return negotiate(early)

    handler = table.resolve(ctx.method, ctx.path)
    ctx.advance(RequestState.ROUTED)

    result = await invoke(handler, ctx)
    ctx.advance(RequestState.HANDLER_EXECUTED)
    return negotiate(result)


async def _apply_after_hooks(
    ctx: RequestContext,
    response: Response,
    after_hooks: tuple[Callable[..., Any], ...],
) -> Response:
    for hook in after_hooks:
        response = await invoke(hook, ctx, response)
    return response
