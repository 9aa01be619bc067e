"""Verso exception hierarchy.

Shared across the registry, router, dispatcher, and app so every module
raises and catches the same types.

Startup problems (``ConfigurationError``, ``DuplicateBinding``) abort the
app before it serves anything. Per-request problems are ``HTTPError``
subclasses: the dispatcher returns them as values and the ASGI handler
renders them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from verso.versioning.version import Version


class VersoError(Exception):
    """Base for all verso-specific errors."""


class ConfigurationError(VersoError):
    """Raised when app configuration is invalid.

    Typically raised during ``App._freeze()`` at startup.
    """


class DuplicateBinding(ConfigurationError):  # noqa: N818
    """Two bindings share the same (template shape, method, version) key."""

    def __init__(self, path: str, method: str, version: Version, existing: str) -> None:
        self.path = path
        self.method = method
        self.version = version
        super().__init__(
            f"{method} {path!r} is already bound for version {version} "
            f"(by {existing!r})."
        )


@dataclass(frozen=True, slots=True)
class HTTPError(VersoError):
    """An error that maps directly to an HTTP status code.

    ``code`` is a stable machine-readable identifier rendered into error
    bodies so clients can branch on it without parsing ``detail``.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()
    code: str = "Error"

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


def _format_versions(versions: tuple[Version, ...]) -> str:
    return ", ".join(str(v) for v in versions)


class MalformedVersion(HTTPError):  # noqa: N818
    """400 — a version value was found but could not be parsed."""

    def __init__(self, value: str, detail: str = "") -> None:
        super().__init__(
            status=400,
            detail=detail
            or f"The API version {value!r} is malformed. Expected 'major[.minor][-status]'.",
            code="InvalidApiVersion",
        )
        object.__setattr__(self, "value", value)


class VersionRequired(HTTPError):  # noqa: N818
    """400 — no version was given and no default is assumed."""

    def __init__(self, group: str, detail: str = "") -> None:
        super().__init__(
            status=400,
            detail=detail or f"An API version is required for {group!r}, but was not specified.",
            code="ApiVersionUnspecified",
        )
        object.__setattr__(self, "group", group)


class UnsupportedVersion(HTTPError):  # noqa: N818
    """400 — the requested version is not declared for the group.

    ``supported`` is the group's full declared set, sorted, so the caller
    can retry with a valid version.
    """

    def __init__(
        self,
        group: str,
        requested: Version,
        supported: tuple[Version, ...],
        detail: str = "",
    ) -> None:
        super().__init__(
            status=400,
            detail=detail
            or (
                f"API version {requested} is not supported by {group!r}. "
                f"Supported versions: {_format_versions(supported)}"
            ),
            headers=(("api-supported-versions", _format_versions(supported)),),
            code="UnsupportedApiVersion",
        )
        object.__setattr__(self, "group", group)
        object.__setattr__(self, "requested", requested)
        object.__setattr__(self, "supported", supported)


class RouteUnknown(HTTPError):  # noqa: N818
    """404 — no route matches the request path and method at all."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail, code="RouteUnknown")


class NotFound(HTTPError):  # noqa: N818
    """404 — the route exists, but not at the resolved version.

    ``supported`` lists the versions bound for that path and method.
    """

    def __init__(
        self,
        requested: Version,
        supported: tuple[Version, ...],
        detail: str = "",
    ) -> None:
        super().__init__(
            status=404,
            detail=detail
            or (
                f"This endpoint is not available in API version {requested}. "
                f"Available in: {_format_versions(supported)}"
            ),
            headers=(("api-supported-versions", _format_versions(supported)),),
            code="ApiVersionNotFound",
        )
        object.__setattr__(self, "requested", requested)
        object.__setattr__(self, "supported", supported)
