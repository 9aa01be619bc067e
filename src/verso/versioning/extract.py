"""Version extraction — reads the requested API version from a request.

Each reader implements the ``VersionReader`` protocol:

- ``extract(request)`` returns a ``Version`` or ``UNSPECIFIED``. A value
  that is present but unparseable raises ``MalformedVersion``.
- ``route_path(request)`` returns the path the route table should match.
  Only the path-segment reader changes it (the version segment is erased).

Readers hold no per-request state, so one instance serves all workers.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from verso.errors import ConfigurationError
from verso.versioning.version import UNSPECIFIED, Version, VersionToken

if TYPE_CHECKING:
    from verso.config import AppConfig
    from verso.http.request import Request


class VersionReader(Protocol):
    """Reads a version token from a request."""

    def extract(self, request: Request) -> VersionToken: ...

    def route_path(self, request: Request) -> str: ...


def _split(path: str) -> list[str]:
    return [p for p in path.strip("/").split("/") if p]


@dataclass(frozen=True, slots=True)
class PathSegmentReader:
    """Version carried as a path segment: ``/api/products/v2.0/5``.

    With ``position`` unset, the first segment made of ``prefix`` followed
    by a digit is the version segment. With ``position`` set, only that
    segment index is considered, and it must start with ``prefix``.
    """

    prefix: str = "v"
    position: int | None = None

    def _find(self, parts: list[str]) -> int | None:
        if self.position is not None:
            if self.position < len(parts) and parts[self.position].startswith(self.prefix):
                return self.position
            return None
        size = len(self.prefix)
        for index, part in enumerate(parts):
            if part.startswith(self.prefix) and part[size : size + 1].isdigit():
                return index
        return None

    def extract(self, request: Request) -> VersionToken:
        parts = _split(request.path)
        index = self._find(parts)
        if index is None:
            return UNSPECIFIED
        return Version.parse(parts[index][len(self.prefix) :])

    def route_path(self, request: Request) -> str:
        parts = _split(request.path)
        index = self._find(parts)
        if index is None:
            return request.path
        del parts[index]
        return "/" + "/".join(parts)


@dataclass(frozen=True, slots=True)
class QueryReader:
    """Version carried as a query parameter: ``?api-version=2.0``."""

    name: str = "api-version"

    def extract(self, request: Request) -> VersionToken:
        value = request.query.get(self.name)
        if value is None:
            return UNSPECIFIED
        return Version.parse(value.strip())

    def route_path(self, request: Request) -> str:
        return request.path


@dataclass(frozen=True, slots=True)
class HeaderReader:
    """Version carried in a request header: ``X-Api-Version: 2.0``."""

    name: str = "X-Api-Version"

    def extract(self, request: Request) -> VersionToken:
        value = request.headers.get(self.name)
        if value is None:
            return UNSPECIFIED
        return Version.parse(value.strip())

    def route_path(self, request: Request) -> str:
        return request.path


def media_type_params(value: str) -> dict[str, str]:
    """Parse the parameters of a media type.

    ``application/json; v=2.0; charset=utf-8`` -> ``{"v": "2.0", "charset": "utf-8"}``.
    For a list of media types (``Accept``), parameters of every entry are
    merged; the first occurrence of a name wins.
    """
    params: dict[str, str] = {}
    for media_range in value.split(","):
        for piece in media_range.split(";")[1:]:
            name, sep, raw = piece.partition("=")
            if not sep:
                continue
            params.setdefault(name.strip().lower(), raw.strip().strip('"'))
    return params


@dataclass(frozen=True, slots=True)
class MediaTypeReader:
    """Version carried as a media type parameter.

    ``Content-Type: application/json; v=2.0`` is checked first, then
    ``Accept``.
    """

    name: str = "v"

    def extract(self, request: Request) -> VersionToken:
        key = self.name.lower()
        for header in ("content-type", "accept"):
            value = request.headers.get(header)
            if not value:
                continue
            params = media_type_params(value)
            if key in params:
                return Version.parse(params[key])
        return UNSPECIFIED

    def route_path(self, request: Request) -> str:
        return request.path


@dataclass(frozen=True, slots=True)
class CompositeReader:
    """Tries readers in order; the first that finds a version wins.

    The route path comes from the reader that produced the version, or
    from the first reader when none did.
    """

    readers: tuple[VersionReader, ...]

    def __post_init__(self) -> None:
        if not self.readers:
            msg = "CompositeReader needs at least one reader."
            raise ConfigurationError(msg)

    def _select(self, request: Request) -> tuple[VersionReader, VersionToken]:
        for reader in self.readers:
            token = reader.extract(request)
            if token is not UNSPECIFIED:
                return reader, token
        return self.readers[0], UNSPECIFIED

    def extract(self, request: Request) -> VersionToken:
        return self._select(request)[1]

    def route_path(self, request: Request) -> str:
        reader, _ = self._select(request)
        return reader.route_path(request)


# strategy name -> reader factory taking an optional parameter name
STRATEGIES: dict[str, type] = {
    "path-segment": PathSegmentReader,
    "query": QueryReader,
    "header": HeaderReader,
    "media-type": MediaTypeReader,
}


def create_reader(
    strategy: str | Sequence[str],
    parameter_name: str | None = None,
    *,
    position: int | None = None,
) -> VersionReader:
    """Build a reader from configuration.

    A sequence of strategy names builds a ``CompositeReader`` with that
    precedence; ``parameter_name`` then applies only to a lone strategy.

    Raises ``ConfigurationError`` for unknown strategy names.
    """
    if not isinstance(strategy, str):
        names = tuple(strategy)
        if len(names) == 1:
            return create_reader(names[0], parameter_name, position=position)
        return CompositeReader(tuple(create_reader(name, position=position) for name in names))

    if strategy not in STRATEGIES:
        known = ", ".join(sorted(STRATEGIES))
        msg = f"Unknown version extraction strategy {strategy!r}. Expected one of: {known}"
        raise ConfigurationError(msg)

    if strategy == "path-segment":
        if parameter_name is None:
            return PathSegmentReader(position=position)
        return PathSegmentReader(prefix=parameter_name, position=position)
    if parameter_name is None:
        return STRATEGIES[strategy]()
    return STRATEGIES[strategy](parameter_name)


def reader_from_config(config: AppConfig) -> VersionReader:
    """Build the reader described by an ``AppConfig``."""
    return create_reader(
        config.extraction_strategy,
        config.parameter_name,
        position=config.version_position,
    )
