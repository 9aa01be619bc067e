"""Request dispatch — extract, resolve, then route.

The pipeline is strictly sequential: a failure at any stage is the final
outcome, and later stages never run. Errors come back as values so the
caller decides how to render them; nothing raised by a stage escapes
``dispatch()``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from verso.errors import HTTPError
from verso.versioning.version import Version

if TYPE_CHECKING:
    from verso.http.request import Request
    from verso.routing.route import Binding
    from verso.routing.router import Router
    from verso.versioning.extract import VersionReader
    from verso.versioning.registry import VersionRegistry

logger = logging.getLogger("verso.routing")


@dataclass(frozen=True, slots=True)
class VersionContext:
    """The resolved API version of the current request.

    Bound in request context while the handler runs; see
    ``verso.context.get_api_version()``.
    """

    group: str
    version: Version
    deprecated: bool = False
    supported: tuple[Version, ...] = ()
    deprecated_versions: tuple[Version, ...] = ()
    assumed: bool = False


@dataclass(frozen=True, slots=True)
class Invocation:
    """A resolved handler call, ready to run.

    ``request`` already carries the matched ``path_params``.
    """

    binding: Binding
    request: Request
    context: VersionContext
    path_params: dict[str, str] = field(default_factory=dict)

    @property
    def handler(self) -> Any:
        return self.binding.handler

    @property
    def version(self) -> Version:
        return self.context.version

    @property
    def deprecated(self) -> bool:
        return self.context.deprecated


class Dispatcher:
    """Resolves a request to exactly one binding.

    Holds only references to frozen structures (reader, registry,
    router), so one instance serves every worker concurrently.

    Usage::

        dispatcher = Dispatcher(reader, registry, router)
        outcome = dispatcher.dispatch(request)
        if isinstance(outcome, HTTPError):
            ...  # render the error
        else:
            result = outcome.handler(outcome.request)
    """

    __slots__ = ("_reader", "_registry", "_router")

    def __init__(self, reader: VersionReader, registry: VersionRegistry, router: Router) -> None:
        self._reader = reader
        self._registry = registry
        self._router = router

    @property
    def registry(self) -> VersionRegistry:
        return self._registry

    @property
    def router(self) -> Router:
        return self._router

    def dispatch(self, request: Request) -> Invocation | HTTPError:
        """Resolve *request* to an ``Invocation`` or an ``HTTPError`` value."""
        try:
            return self._dispatch(request)
        except HTTPError as exc:
            logger.debug("%d %s %s — %s", exc.status, request.method, request.path, exc.detail)
            return exc

    def _dispatch(self, request: Request) -> Invocation:
        # 1. Extract the version token (MalformedVersion propagates)
        token = self._reader.extract(request)
        path = self._reader.route_path(request)

        # 2. Resolve against the owning group (errors short-circuit)
        group = self._registry.group_for(path)
        resolved = self._registry.resolve(group.name, token)

        # 3. Route on the version-erased path
        match = self._router.lookup(request.method, path, resolved.version)

        context = VersionContext(
            group=group.name,
            version=resolved.version,
            deprecated=resolved.deprecated,
            supported=group.versions,
            deprecated_versions=tuple(sorted(group.deprecated)),
            assumed=resolved.assumed,
        )
        return Invocation(
            binding=match.binding,
            request=replace(request, path_params=match.path_params),
            context=context,
            path_params=match.path_params,
        )
