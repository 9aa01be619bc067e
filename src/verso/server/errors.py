"""Error handling pipeline for verso requests.

Maps HTTPError values and unexpected failures to Response objects, using
registered error handlers or JSON error bodies.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from verso.errors import HTTPError
from verso.http.request import Request
from verso.http.response import Response
from verso.server.negotiation import negotiate

logger = logging.getLogger("verso.server")


def error_body(exc: HTTPError) -> dict[str, Any]:
    """JSON error payload for *exc*.

    Versioning errors that carry a supported set expose it so the client
    can correct the request::

        {"error": {"code": "UnsupportedApiVersion", "message": "...",
                   "supported": ["1.0", "2.0"]}}
    """
    error: dict[str, Any] = {"code": exc.code, "message": exc.detail or f"Error {exc.status}"}
    supported = getattr(exc, "supported", None)
    if supported is not None:
        error["supported"] = [str(v) for v in supported]
    return {"error": error}


async def call_error_handler(
    handler: Callable[..., Any],
    request: Request,
    exc: Exception,
) -> Response:
    """Invoke a user-registered error handler with introspected arguments.

    Error handlers may accept zero, one (request), or two (request, exc) args.
    Supports both sync and async error handlers.
    """
    sig = inspect.signature(handler)
    params = list(sig.parameters.values())

    if len(params) >= 2:
        result = handler(request, exc)
    elif len(params) == 1:
        result = handler(request)
    else:
        result = handler()

    if inspect.isawaitable(result):
        result = await result

    if isinstance(result, Response):
        return result
    return negotiate(result)


async def handle_http_error(
    exc: HTTPError,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
) -> Response:
    """Map an HTTPError to a Response using registered error handlers."""
    logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)

    # Try exact exception type, then status code
    handler = error_handlers.get(type(exc)) or error_handlers.get(exc.status)
    if handler is not None:
        response = await call_error_handler(handler, request, exc)
        # Preserve the HTTP status from the exception unless the handler
        # explicitly returned a Response with its own status
        if response.status == 200:
            response = response.with_status(exc.status)
        return response

    resp = Response.json(error_body(exc), status=exc.status)
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return resp


async def handle_internal_error(
    exc: Exception,
    request: Request,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.exception("500 %s %s", request.method, request.path)

    handler = error_handlers.get(500) or error_handlers.get(type(exc))
    if handler is not None:
        return await call_error_handler(handler, request, exc)

    message = f"{type(exc).__name__}: {exc}" if debug else "Internal Server Error"
    return Response.json(
        {"error": {"code": "InternalServerError", "message": message}},
        status=500,
    )
