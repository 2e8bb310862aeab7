"""The product service: two fixed routes and a Portuguese 404.

Run::

    wren run                      # wren.products:create_app on port 3333
    PORT=8080 MAX_BODY_BYTES=65536 wren run
"""

from wren.app import App
from wren.config import AppConfig
from wren.http.context import RequestContext
from wren.http.response import Response, dumps

PRODUCT_LIST_MESSAGE = "Lista de produtos!"
NOT_FOUND_MESSAGE = "Rota não encontrada!"


def create_app(config: AppConfig | None = None) -> App:
    """Build the product service. Reads the environment when *config* is None."""
    app = App(config or AppConfig.from_env())

    @app.route("/products", name="list_products")
    def list_products(ctx: RequestContext) -> Response:
        return Response(PRODUCT_LIST_MESSAGE)

    @app.route("/products", methods=["POST"], name="create_product")
    def create_product(ctx: RequestContext) -> Response:
        # Empty and malformed bodies echo back as null
        return Response(dumps(ctx.body.value), status=201)

    @app.not_found
    def route_not_found(ctx: RequestContext) -> Response:
        return Response(NOT_FOUND_MESSAGE, status=404)

    return app
