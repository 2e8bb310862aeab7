"""Built-in hooks: response content-type policy and strict body policy."""

from wren.http.body import MalformedBody
from wren.http.context import RequestContext
from wren.http.response import Response, json_response


class DefaultContentType:
    """After hook that fills in ``Content-Type`` when a response has none.

    The app installs one automatically from
    ``AppConfig.default_content_type``. Handlers that need another type
    set it on their response (either ``with_content_type`` or a raw
    ``Content-Type`` header) and this hook leaves it alone.
    """

    __slots__ = ("content_type",)

    def __init__(self, content_type: str = "application/json") -> None:
        self.content_type = content_type

    def __call__(self, ctx: RequestContext, response: Response) -> Response:  # noqa: ARG002
        if response.content_type is None and response.header("content-type") is None:
            return response.with_content_type(self.content_type)
        return response


def reject_malformed_body(ctx: RequestContext) -> Response | None:
    """Before hook: answer 400 when the body is not valid JSON.

    Installed when ``AppConfig.body_policy`` is ``BodyPolicy.STRICT``.
    Empty bodies still pass through.
    """
    if isinstance(ctx.body, MalformedBody):
        return json_response(
            {"error": "Malformed JSON body", "reason": ctx.body.reason},
            status=400,
        )
    return None
