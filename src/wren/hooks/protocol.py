"""Before/after hook protocols.

No base class required. The pipeline checks the shape, not the lineage.
"""

from collections.abc import Awaitable
from typing import Protocol

from wren.http.context import RequestContext
from wren.http.response import Response


class BeforeHook(Protocol):
    """Runs before routing. Returning a ``Response`` skips the handler.

    Example::

        def require_json(ctx: RequestContext) -> Response | None:
            if ctx.method == "POST" and ctx.content_type != "application/json":
                return Response("Unsupported Media Type", status=415)
            return None
    """

    def __call__(self, ctx: RequestContext) -> Response | None | Awaitable[Response | None]: ...


class AfterHook(Protocol):
    """Runs on every outgoing response and returns the response to send.

    Example::

        def powered_by(ctx: RequestContext, response: Response) -> Response:
            return response.with_header("X-Powered-By", "wren")
    """

    def __call__(
        self, ctx: RequestContext, response: Response
    ) -> Response | Awaitable[Response]: ...
