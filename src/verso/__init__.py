"""Verso — version-aware request routing for web APIs.

Routes each request to the handler bound for its requested API version.
Versions are read from a path segment, query parameter, header, or media
type parameter, validated against the versions each endpoint group
declares, and matched exactly against the route table.

Basic usage::

    from verso import App

    app = App()
    app.group("products", prefix="/api/products", versions=["1.0", "2.0"])

    @app.route("/api/products", version="1.0")
    def list_products():
        return ["value1", "value2"]

    app.run()

``GET /api/v1/products`` dispatches to ``list_products``;
``GET /api/v3/products`` answers 400 ``UnsupportedApiVersion``.
"""

__version__ = "0.1.0-dev"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "DuplicateBinding",
    "HTTPError",
    "MalformedVersion",
    "NotFound",
    "Request",
    "Response",
    "RouteUnknown",
    "UnsupportedVersion",
    "Version",
    "VersionContext",
    "VersionRequired",
    "VersoError",
    "get_api_version",
    "get_request",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import verso`` fast while providing a clean top-level API.
    """
    if name == "App":
        from verso.app import App

        return App

    if name == "AppConfig":
        from verso.config import AppConfig

        return AppConfig

    if name == "Request":
        from verso.http.request import Request

        return Request

    if name == "Response":
        from verso.http.response import Response

        return Response

    if name == "Version":
        from verso.versioning.version import Version

        return Version

    if name == "VersionContext":
        from verso.routing.dispatch import VersionContext

        return VersionContext

    if name in ("get_api_version", "get_request"):
        from verso import context as _ctx

        return getattr(_ctx, name)

    if name in (
        "ConfigurationError",
        "DuplicateBinding",
        "HTTPError",
        "MalformedVersion",
        "NotFound",
        "RouteUnknown",
        "UnsupportedVersion",
        "VersionRequired",
        "VersoError",
    ):
        from verso import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
