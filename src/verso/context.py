"""Request-scoped context via ContextVar.

Provides:
- ``request_var``: The current ``Request`` for this task/thread.
- ``version_var``: The resolved API version of the current request.

Both are set by the handler pipeline around each handler call and reset
afterwards. Outside a request, the getters raise ``LookupError``.

Thread safety:
    ``ContextVar`` is task-local under asyncio and thread-local under
    free-threading. No locks needed.
"""

from contextvars import ContextVar

from verso.http.request import Request
from verso.routing.dispatch import VersionContext

request_var: ContextVar[Request] = ContextVar("verso_request")
"""The current request. Set by the ASGI handler before dispatch."""

version_var: ContextVar[VersionContext] = ContextVar("verso_api_version")
"""The resolved version of the current request. Set once routing succeeds."""


def get_request() -> Request:
    """Return the current request.

    Raises ``LookupError`` if called outside a request context.
    """
    return request_var.get()


def get_api_version() -> VersionContext:
    """Return the resolved API version of the current request.

    Handlers shared across versions use this to vary behavior::

        @app.route("/products/{id:int}", versions=["1.0", "2.0"])
        def product(id: int):
            if get_api_version().version.major >= 2:
                return {"id": id, "name": "value"}
            return "value"

    Raises ``LookupError`` if called outside a routed request.
    """
    return version_var.get()
