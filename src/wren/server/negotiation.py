"""Content negotiation — maps handler return values to Response objects.

isinstance-based dispatch, no magic, fully predictable.
"""

from typing import Any

from wren.http.response import Response, json_response


def negotiate(value: Any) -> Response:
    """Convert a handler's return value to a Response.

    Dispatch order:

    1. ``Response``        -> pass through
    2. ``str``             -> 200, content type left to the after hooks
    3. ``bytes``           -> 200, application/octet-stream
    4. ``dict`` / ``list`` -> 200, compact application/json
    5. ``(value, int)``    -> negotiate value, override status

    Raises:
        TypeError: For ``None`` (a handler that produced no response)
            and any other unsupported type.
    """
    match value:
        case Response():
            return value
        case str():
            return Response(body=value)
        case bytes():
            return Response(body=value, content_type="application/octet-stream")
        case dict() | list():
            return json_response(value)
        case (inner, int() as status):
            return negotiate(inner).with_status(status)
        case None:
            msg = "Route handler returned None; every handler must produce exactly one response."
            raise TypeError(msg)
        case _:
            msg = (
                f"Cannot convert {type(value).__name__} to a response. "
                "Return a Response, str, bytes, dict, list, or (value, status)."
            )
            raise TypeError(msg)
