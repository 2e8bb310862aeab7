"""Hooks — explicit before/after composition around dispatch.

A before hook runs after the body is ingested and before routing::

    async def hook(ctx: RequestContext) -> Response | None

An after hook sees every outgoing response, including error responses::

    async def hook(ctx: RequestContext, response: Response) -> Response

Both may be plain ``def`` functions or callable objects.

Built-in hooks:
    DefaultContentType -- Content-Type for responses that set none
    reject_malformed_body -- 400 for malformed JSON bodies (strict policy)
"""

from wren.hooks.builtin import DefaultContentType, reject_malformed_body
from wren.hooks.protocol import AfterHook, BeforeHook

__all__ = [
    "AfterHook",
    "BeforeHook",
    "DefaultContentType",
    "reject_malformed_body",
]
