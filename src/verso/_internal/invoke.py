"""Invoke helpers — call sync or async handlers uniformly.

Route handlers and error handlers can be ``def`` or ``async def``. The
sync/async check lives here and nowhere else.

Usage::

    from verso._internal.invoke import invoke

    result = await invoke(handler, *args, **kwargs)
"""

import inspect
from typing import Any


async def invoke(handler: Any, *args: Any, **kwargs: Any) -> Any:
    """Call a handler and await the result if it's awaitable.

    Works with both sync and async callables::

        @app.route("/products", version="1.0")
        def list_products():
            return ["value1", "value2"]

        @app.route("/products", version="2.0")
        async def list_products_v2():
            return await load_products()
    """
    result = handler(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
