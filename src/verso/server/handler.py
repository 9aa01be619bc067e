"""ASGI handler — translates ASGI scope/messages to verso types.

The only component that touches raw ASGI directly. Converts scope dicts
to typed Request objects, dispatches through the version-aware router,
and sends the Response back through ASGI send().
"""

from __future__ import annotations

import inspect
from collections.abc import Callable
from contextvars import Token
from typing import TYPE_CHECKING, Any

from verso._internal.asgi import Receive, Scope, Send
from verso._internal.invoke import invoke
from verso.context import request_var, version_var
from verso.errors import HTTPError
from verso.http.request import Request
from verso.http.response import Response
from verso.routing.dispatch import Dispatcher, Invocation, VersionContext
from verso.routing.params import typed_params
from verso.server.errors import handle_http_error, handle_internal_error
from verso.server.negotiation import negotiate
from verso.server.sender import send_response
from verso.versioning.version import Version

if TYPE_CHECKING:
    from verso.docs.site import DocsSite


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    dispatcher: Dispatcher,
    error_handlers: dict[int | type, Callable[..., Any]],
    debug: bool,
    docs: DocsSite | None = None,
    report_api_versions: bool = True,
    report_deprecated: bool = True,
) -> None:
    """Process a single HTTP request through the full pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    # Set request context var (reset after dispatch)
    token: Token[Request] = request_var.set(request)

    try:
        response = await _respond(
            request,
            dispatcher=dispatcher,
            error_handlers=error_handlers,
            docs=docs,
            report_api_versions=report_api_versions,
            report_deprecated=report_deprecated,
        )
    except HTTPError as exc:
        response = await handle_http_error(exc, request, error_handlers)
    except Exception as exc:
        response = await handle_internal_error(exc, request, error_handlers, debug)
    finally:
        request_var.reset(token)

    await send_response(response, send)


async def _respond(
    request: Request,
    *,
    dispatcher: Dispatcher,
    error_handlers: dict[int | type, Callable[..., Any]],
    docs: DocsSite | None,
    report_api_versions: bool,
    report_deprecated: bool,
) -> Response:
    # API documents are version-neutral and bypass version resolution
    if docs is not None:
        doc_response = docs.respond(request)
        if doc_response is not None:
            return doc_response

    outcome = dispatcher.dispatch(request)
    if isinstance(outcome, HTTPError):
        return await handle_http_error(outcome, request, error_handlers)

    response = await _invoke_handler(outcome)
    return version_headers(
        response,
        outcome.context,
        report_api_versions=report_api_versions,
        report_deprecated=report_deprecated,
    )


def version_headers(
    response: Response,
    context: VersionContext,
    *,
    report_api_versions: bool = True,
    report_deprecated: bool = True,
) -> Response:
    """Annotate a response with the group's reported versions.

    - ``api-supported-versions``: versions still current
    - ``api-deprecated-versions``: deprecated versions (omitted when none)
    - ``Deprecation: true``: the request resolved to a deprecated version
    """
    if report_api_versions:
        retired = set(context.deprecated_versions)
        current = [str(v) for v in context.supported if v not in retired]
        response = response.with_header("api-supported-versions", ", ".join(current))
        if retired:
            response = response.with_header(
                "api-deprecated-versions",
                ", ".join(str(v) for v in context.deprecated_versions),
            )
    if report_deprecated and context.deprecated:
        response = response.with_header("Deprecation", "true")
    return response


async def _invoke_handler(invocation: Invocation) -> Response:
    """Call the bound handler with the resolved version in context."""
    handler = invocation.handler
    kwargs = _build_handler_kwargs(handler, invocation)

    token: Token[VersionContext] = version_var.set(invocation.context)
    try:
        result = await invoke(handler, **kwargs)
    finally:
        version_var.reset(token)

    return negotiate(result)


def _build_handler_kwargs(
    handler: Callable[..., Any],
    invocation: Invocation,
) -> dict[str, Any]:
    """Inspect handler signature and build kwargs.

    Resolution order:
    1. ``request`` parameter (by name or ``Request`` annotation)
    2. ``api_version`` parameter or ``VersionContext`` annotation
    3. ``version`` parameter or ``Version`` annotation
    4. Path parameters (by name, converted by the route's converter,
       then by annotation)
    """
    sig = inspect.signature(handler, eval_str=True)
    params = typed_params(invocation.binding.segments, invocation.path_params)
    kwargs: dict[str, Any] = {}

    for name, param in sig.parameters.items():
        if name == "request" or param.annotation is Request:
            kwargs[name] = invocation.request
        elif name == "api_version" or param.annotation is VersionContext:
            kwargs[name] = invocation.context
        elif name == "version" or param.annotation is Version:
            kwargs[name] = invocation.version
        elif name in params:
            value = params[name]
            annotation = param.annotation
            if isinstance(annotation, type) and not isinstance(value, annotation):
                try:
                    kwargs[name] = annotation(value)
                except (ValueError, TypeError):
                    kwargs[name] = value
            else:
                kwargs[name] = value

    return kwargs
