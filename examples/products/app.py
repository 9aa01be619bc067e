"""Products — one resource served at two API versions.

Every action of the products resource exists once per version. The
version is the path segment after the resource name, the way clients
call it::

    GET /api/products/v1        -> ["value1", "value2"]
    GET /api/products/v2/5      -> "value"
    GET /api/products           -> version 1.0 is assumed
    GET /api/products/v3        -> 400 UnsupportedApiVersion

Version 1.0 is still served but deprecated: its responses carry
``Deprecation: true`` and the docs index marks it.

Run:
    verso run examples.products.app:app
"""

import logging

from verso import App, AppConfig, Request, Response

logger = logging.getLogger(__name__)

app = App(AppConfig(default_version="1.0", docs_title="Api Versioning"))

app.group(
    "products",
    prefix="/api/products",
    versions=["1.0", "2.0"],
    deprecated=["1.0"],
)


# ---------------------------------------------------------------------------
# Version 1.0
# ---------------------------------------------------------------------------


@app.route("/api/products", version="1.0")
def list_products_v1() -> list[str]:
    """List products."""
    return ["value1", "value2"]


@app.route("/api/products/{id:int}", version="1.0")
def get_product_v1(id: int) -> str:
    """Get one product."""
    return "value"


@app.route("/api/products", methods=["POST"], version="1.0")
async def create_product_v1(request: Request) -> Response:
    """Create a product."""
    logger.info("v1 create: %s", await request.text())
    return Response(status=201)


@app.route("/api/products/{id:int}", methods=["PUT"], version="1.0")
async def update_product_v1(id: int, request: Request) -> Response:
    """Replace a product."""
    logger.info("v1 update %d: %s", id, await request.text())
    return Response(status=204)


@app.route("/api/products/{id:int}", methods=["DELETE"], version="1.0")
def delete_product_v1(id: int) -> Response:
    """Delete a product."""
    logger.info("v1 delete %d", id)
    return Response(status=204)


# ---------------------------------------------------------------------------
# Version 2.0
# ---------------------------------------------------------------------------


@app.route("/api/products", version="2.0")
def list_products_v2() -> list[str]:
    """List products."""
    return ["value1", "value2"]


@app.route("/api/products/{id:int}", version="2.0")
def get_product_v2(id: int) -> str:
    """Get one product."""
    return "value"


@app.route("/api/products", methods=["POST"], version="2.0")
async def create_product_v2(request: Request) -> Response:
    """Create a product."""
    logger.info("v2 create: %s", await request.text())
    return Response(status=201)


@app.route("/api/products/{id:int}", methods=["PUT"], version="2.0")
async def update_product_v2(id: int, request: Request) -> Response:
    """Replace a product."""
    logger.info("v2 update %d: %s", id, await request.text())
    return Response(status=204)


@app.route("/api/products/{id:int}", methods=["DELETE"], version="2.0")
def delete_product_v2(id: int) -> Response:
    """Delete a product."""
    logger.info("v2 delete %d", id)
    return Response(status=204)


if __name__ == "__main__":
    app.run()
