"""Verso application class.

Mutable during setup (groups, routes, error handlers, hooks).
Frozen at runtime when app.run() or __call__() is first invoked.
"""

import inspect
import logging
import threading
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from verso._internal.asgi import Receive, Scope, Send
from verso._internal.types import ErrorHandler, Handler, VersionLike
from verso.config import AppConfig
from verso.docs.site import DocsSite
from verso.errors import ConfigurationError, HTTPError, MalformedVersion, RouteUnknown
from verso.http.request import Request
from verso.routing.dispatch import Dispatcher, Invocation
from verso.routing.route import Binding
from verso.routing.router import Router
from verso.server.handler import handle_request
from verso.versioning.extract import VersionReader, reader_from_config
from verso.versioning.registry import VersionGroup, VersionRegistry
from verso.versioning.reporter import CapabilityReporter, Manifest
from verso.versioning.version import Version, parse_version

logger = logging.getLogger("verso.server")

DEFAULT_GROUP = "api"


@dataclass(slots=True)
class _PendingGroup:
    """A version group waiting to be compiled."""

    name: str
    prefix: str
    versions: tuple[VersionLike, ...]
    default: VersionLike | None
    deprecated: tuple[VersionLike, ...]


@dataclass(slots=True)
class _PendingRoute:
    """A route waiting to be compiled."""

    path: str
    handler: Handler
    methods: list[str] | None
    versions: tuple[VersionLike, ...]
    group: str | None
    name: str | None


def _parse_literal(value: VersionLike, where: str) -> Version:
    """Parse a version literal from setup code, failing startup if malformed."""
    try:
        return parse_version(value)
    except MalformedVersion as exc:
        msg = f"Malformed API version {value!r} in {where}."
        raise ConfigurationError(msg) from exc


class App:
    """The verso application.

    Mutable during setup (groups, routes, error handlers).
    Frozen at runtime when ``app.run()`` or ``__call__()`` is first invoked.

    Usage::

        app = App()
        app.group("products", prefix="/api/products", versions=["1.0", "2.0"])

        @app.route("/api/products", version="1.0")
        def list_products():
            return ["value1", "value2"]

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check to ensure exactly
        one thread compiles the app, even when several ASGI workers call
        ``__call__()`` concurrently on first request. After the freeze,
        every structure used by dispatch is read-only.
    """

    __slots__ = (
        "_dispatcher",
        "_docs",
        "_error_handlers",
        "_freeze_lock",
        "_frozen",
        "_pending_groups",
        "_pending_routes",
        "_reader",
        "_registry",
        "_reporter",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(self, config: AppConfig | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        self._pending_groups: list[_PendingGroup] = []
        self._pending_routes: list[_PendingRoute] = []
        self._error_handlers: dict[int | type, ErrorHandler] = {}
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen: bool = False
        self._freeze_lock: threading.Lock = threading.Lock()

        # Compiled state, set by _freeze()
        self._registry: VersionRegistry | None = None
        self._router: Router | None = None
        self._reader: VersionReader | None = None
        self._dispatcher: Dispatcher | None = None
        self._reporter: CapabilityReporter | None = None
        self._docs: DocsSite | None = None

    # -- Version groups --

    def group(
        self,
        name: str,
        *,
        versions: Iterable[VersionLike],
        prefix: str = "",
        default: VersionLike | None = None,
        deprecated: Iterable[VersionLike] = (),
    ) -> None:
        """Declare a version group.

        Args:
            name: Group name (e.g. ``"products"``).
            versions: Every version the group serves.
            prefix: Path prefix of the group's routes (e.g. ``"/api/products"``).
                Requests are assigned to the group with the longest matching
                prefix.
            default: Version assumed when a request names none. Defaults to
                ``config.default_version`` if declared, else the lowest version.
            deprecated: Versions still served but flagged for removal.
        """
        self._check_not_frozen()
        self._pending_groups.append(
            _PendingGroup(name, prefix, tuple(versions), default, tuple(deprecated))
        )

    # -- Route registration --

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
        version: VersionLike | None = None,
        versions: Iterable[VersionLike] | None = None,
        group: str | None = None,
        name: str | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Decorators stack, so one function can serve several versions or
        paths. With neither *version* nor *versions*, the route is bound
        for every version of its group.

        Args:
            path: URL path pattern without the version segment. Use
                ``{param}`` or ``{param:int}`` for path parameters.
            methods: HTTP methods. Defaults to ``["GET"]``.
            version: The single version this handler serves.
            versions: Several versions this handler serves.
            group: Version group; defaults to the group owning *path*.
            name: Optional route name.
        """
        declared: tuple[VersionLike, ...] = ()
        if version is not None:
            declared = (version,)
        if versions is not None:
            declared = (*declared, *versions)

        def decorator(func: Handler) -> Handler:
            self._check_not_frozen()
            self._pending_routes.append(_PendingRoute(path, func, methods, declared, group, name))
            return func

        return decorator

    # -- Error handlers --

    def error(
        self,
        code_or_exception: int | type[Exception],
    ) -> Callable[[ErrorHandler], ErrorHandler]:
        """Register an error handler via decorator.

        Keyed by status code (``404``) or exception type
        (``UnsupportedVersion``); the type wins when both match.
        """

        def decorator(func: ErrorHandler) -> ErrorHandler:
            self._check_not_frozen()
            self._error_handlers[code_or_exception] = func
            return func

        return decorator

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        after the app is frozen and before it serves requests.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Introspection --

    @property
    def registry(self) -> VersionRegistry:
        """The frozen version registry (freezes the app)."""
        self._ensure_frozen()
        assert self._registry is not None
        return self._registry

    @property
    def router(self) -> Router:
        """The frozen route table (freezes the app)."""
        self._ensure_frozen()
        assert self._router is not None
        return self._router

    @property
    def dispatcher(self) -> Dispatcher:
        """The dispatcher over the frozen tables (freezes the app)."""
        self._ensure_frozen()
        assert self._dispatcher is not None
        return self._dispatcher

    @property
    def docs(self) -> DocsSite | None:
        """Served API documents, or None when ``docs_enabled`` is off."""
        self._ensure_frozen()
        return self._docs

    def describe(self) -> Manifest:
        """The capability manifest: every (group, version, deprecated)."""
        self._ensure_frozen()
        assert self._reporter is not None
        return self._reporter.describe()

    def dispatch(self, request: Request) -> Invocation | HTTPError:
        """Resolve *request* without invoking its handler."""
        return self.dispatcher.dispatch(request)

    def openapi(self, name: str) -> dict[str, Any]:
        """The OpenAPI document for one version (``"v1"``, ``"v2"``).

        Raises ``KeyError`` for unknown names, ``RuntimeError`` when
        documents are disabled.
        """
        docs = self.docs
        if docs is None:
            msg = "API documents are disabled (AppConfig.docs_enabled=False)."
            raise RuntimeError(msg)
        return docs.document(name)

    # -- Server --

    def run(
        self,
        host: str | None = None,
        port: int | None = None,
    ) -> None:
        """Start the server (dev or production based on config.debug).

        Compiles the app first, so configuration errors (duplicate
        bindings, malformed version literals) stop the process before it
        binds a socket.
        """
        self._ensure_frozen()

        from verso.server.launch import plan_launch, serve

        serve(self, plan_launch(self, host=host, port=port))

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles lifespan scopes directly, then delegates HTTP scopes to
        the request handler pipeline.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()

        assert self._dispatcher is not None

        await handle_request(
            scope,
            receive,
            send,
            dispatcher=self._dispatcher,
            error_handlers=self._error_handlers,
            debug=self.config.debug,
            docs=self._docs,
            report_api_versions=self.config.report_api_versions,
            report_deprecated=self.config.report_deprecated,
        )

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app at startup (before the first HTTP request). A
        configuration error is reported as ``lifespan.startup.failed`` so
        the server never starts serving.
        """
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    self._ensure_frozen()
                    for hook in self._startup_hooks:
                        result = hook()
                        if inspect.isawaitable(result):
                            await result
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    logger.exception("startup failed")
                    await send(
                        {
                            "type": "lifespan.startup.failed",
                            "message": str(exc),
                        }
                    )
                    return

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    result = hook()
                    if inspect.isawaitable(result):
                        await result
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking.

        Multiple ASGI worker threads could call __call__() concurrently on
        first request. This pattern ensures exactly one thread performs
        compilation.
        """
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock. Raises
        ``ConfigurationError`` (including ``DuplicateBinding``) and leaves
        the app unfrozen if the setup is invalid.
        """
        # 1. Version registry
        registry = VersionRegistry(
            assume_default_when_unspecified=self.config.assume_default_when_unspecified,
        )
        for group in self._compile_groups():
            registry.add(group)
        registry.compile()

        # 2. Route table
        router = Router()
        for pending in self._pending_routes:
            group = self._group_of(pending, registry)
            methods = frozenset(m.upper() for m in (pending.methods or ["GET"]))
            where = f"route {pending.path!r}"
            versions = (
                tuple(_parse_literal(v, where) for v in pending.versions)
                if pending.versions
                else group.versions
            )
            for version in versions:
                if version not in group.versions:
                    msg = (
                        f"Route {pending.path!r} is mapped to version {version}, which group "
                        f"{group.name!r} does not declare "
                        f"({', '.join(str(v) for v in group.versions)})."
                    )
                    raise ConfigurationError(msg)
                router.add(
                    Binding(
                        path=pending.path,
                        handler=pending.handler,
                        methods=methods,
                        version=version,
                        group=group.name,
                        name=pending.name,
                    )
                )
        router.compile()

        # 3. Extraction, dispatch, reporting
        reader = reader_from_config(self.config)
        reporter = CapabilityReporter(registry)
        docs = (
            DocsSite.build(self.config, reporter, router, registry, reader)
            if self.config.docs_enabled
            else None
        )

        self._registry = registry
        self._router = router
        self._reader = reader
        self._dispatcher = Dispatcher(reader, registry, router)
        self._reporter = reporter
        self._docs = docs
        self._frozen = True

        logger.debug(
            "frozen: %d bindings across %d groups", len(router.bindings), len(registry)
        )

    def _compile_groups(self) -> list[VersionGroup]:
        """Turn pending declarations into validated groups.

        With no declared groups, one implicit group (``"api"``, no prefix)
        serves every version named by a route, plus the configured default.
        """
        configured_default = _parse_literal(
            self.config.default_version, "AppConfig.default_version"
        )

        if not self._pending_groups:
            versions = {configured_default}
            for pending in self._pending_routes:
                where = f"route {pending.path!r}"
                versions.update(_parse_literal(v, where) for v in pending.versions)
            return [VersionGroup.create(DEFAULT_GROUP, versions, default=configured_default)]

        groups: list[VersionGroup] = []
        for pending in self._pending_groups:
            where = f"group {pending.name!r}"
            versions = [_parse_literal(v, where) for v in pending.versions]
            if pending.default is not None:
                default: Version | None = _parse_literal(pending.default, where)
            elif configured_default in versions:
                default = configured_default
            else:
                default = None
            groups.append(
                VersionGroup.create(
                    pending.name,
                    versions,
                    default=default,
                    deprecated=[_parse_literal(v, where) for v in pending.deprecated],
                    prefix=pending.prefix,
                )
            )
        return groups

    @staticmethod
    def _group_of(pending: _PendingRoute, registry: VersionRegistry) -> VersionGroup:
        path = "/" + pending.path.strip("/")
        if pending.group is not None and pending.group not in registry:
            msg = f"Route {pending.path!r} names unknown group {pending.group!r}."
            raise ConfigurationError(msg)
        try:
            owner = registry.group_for(path)
        except RouteUnknown as exc:
            msg = f"Route {pending.path!r} lies outside every group's prefix."
            raise ConfigurationError(msg) from exc
        # Dispatch resolves versions against the group owning the path
        if pending.group is not None and pending.group != owner.name:
            msg = (
                f"Route {pending.path!r} names group {pending.group!r}, but its path "
                f"is served by group {owner.name!r}."
            )
            raise ConfigurationError(msg)
        return owner

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Declare groups, routes, and handlers before calling app.run()."
            )
            raise RuntimeError(msg)
