"""Wren — a bounded JSON ingestion and exact-match routing core for ASGI.

Every request body is drained under a size limit and a read deadline,
parsed into an explicit ``EmptyBody`` / ``JSONBody`` / ``MalformedBody``
variant, and handed to the first matching route.

Basic usage::

    from wren import App, Response
    from wren.http.response import dumps

    app = App()

    @app.route("/products", methods=["POST"])
    def create(ctx):
        return Response(dumps(ctx.body.value), status=201)

    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "BodyPolicy",
    "BodyTooLarge",
    "ConfigurationError",
    "ConnectionAborted",
    "EmptyBody",
    "HTTPError",
    "JSONBody",
    "MalformedBody",
    "MalformedJSON",
    "ParsedBody",
    "RequestContext",
    "Response",
    "RouteEntry",
    "RouteTable",
    "StreamTimeout",
    "WrenError",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import wren`` fast while providing a clean top-level API.
    """
    if name == "App":
        from wren.app import App

        return App

    if name in ("AppConfig", "BodyPolicy"):
        from wren import config as _config

        return getattr(_config, name)

    if name in ("EmptyBody", "JSONBody", "MalformedBody", "ParsedBody"):
        from wren.http import body as _body

        return getattr(_body, name)

    if name == "RequestContext":
        from wren.http.context import RequestContext

        return RequestContext

    if name == "Response":
        from wren.http.response import Response

        return Response

    if name == "RouteEntry":
        from wren.routing.route import RouteEntry

        return RouteEntry

    if name == "RouteTable":
        from wren.routing.table import RouteTable

        return RouteTable

    if name in (
        "BodyTooLarge",
        "ConfigurationError",
        "ConnectionAborted",
        "HTTPError",
        "MalformedJSON",
        "StreamTimeout",
        "WrenError",
    ):
        from wren import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
