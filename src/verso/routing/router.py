"""Compiled route table with trie-based path matching and version lookup.

Bindings are registered during setup and compiled into an immutable
lookup structure when the app freezes. Each trie node keeps its bindings
as ``method -> version -> Binding``; lookup narrows by path, then method,
then exact version.
"""

import logging
import re
from collections.abc import Iterator
from dataclasses import dataclass, replace

from verso.errors import ConfigurationError, DuplicateBinding, NotFound, RouteUnknown
from verso.routing.params import CONVERTERS
from verso.routing.route import Binding, PathSegment, RouteMatch
from verso.versioning.version import Version

logger = logging.getLogger("verso.routing")

# method -> version -> binding
_MethodTable = dict[str, dict[Version, Binding]]

_FLASK_PARAM_RE = re.compile(r"<[^<>/]+>")


def parse_path(path: str) -> list[PathSegment]:
    """Parse a route path string into segments.

    Examples::

        "/users"          -> [PathSegment("users")]
        "/users/{id}"     -> [PathSegment("users"), PathSegment("{id}", is_param=True, ...)]
        "/users/{id:int}" -> [PathSegment("{id:int}", is_param=True, param_type="int")]
        "/files/{path:path}" -> [PathSegment("{path:path}", is_param=True, param_type="path")]

    Raises ``ConfigurationError`` for ``<param>`` placeholders and unknown
    converter names.
    """
    if _FLASK_PARAM_RE.search(path):
        msg = (
            f"Route path {path!r} uses <param> placeholders. "
            "Use {param} or {param:int} instead."
        )
        raise ConfigurationError(msg)

    segments: list[PathSegment] = []
    for part in path.strip("/").split("/"):
        if not part:
            continue
        if part.startswith("{") and part.endswith("}"):
            inner = part[1:-1]
            if ":" in inner:
                param_name, param_type = inner.split(":", 1)
            else:
                param_name = inner
                param_type = "str"
            if param_type not in CONVERTERS:
                msg = f"Unknown path converter {param_type!r} in route {path!r}."
                raise ConfigurationError(msg)
            segments.append(
                PathSegment(
                    value=part,
                    is_param=True,
                    param_name=param_name,
                    param_type=param_type,
                )
            )
        else:
            segments.append(PathSegment(value=part))
    return segments


def path_shape(path: str) -> str:
    """Template with parameter names erased: ``/users/{id:int}`` -> ``/users/{:int}``.

    Two templates with the same shape and method collide.
    """
    return "/" + "/".join(s.shape for s in parse_path(path))


class _TrieNode:
    """A node in the route trie. Mutable during compilation only."""

    __slots__ = ("bindings", "catch_all", "children", "param_children")

    def __init__(self) -> None:
        # Static segment children: "users" -> node
        self.children: dict[str, _TrieNode] = {}
        # Parameter children keyed by converter type, names erased
        self.param_children: dict[str, _ParamEdge] = {}
        # Catch-all edge (path converter)
        self.catch_all: _MethodTable | None = None
        # Bindings terminating at this node
        self.bindings: _MethodTable = {}


@dataclass(slots=True)
class _ParamEdge:
    """A parameter edge in the trie."""

    param_type: str
    regex: re.Pattern[str]
    node: _TrieNode


# More specific converters are tried first.
_PARAM_ORDER = ("int", "float", "str")


class Router:
    """Compiled, version-aware route table.

    Usage::

        router = Router()
        router.add(Binding("/products", handler, frozenset({"GET"}), Version(1, 0)))
        router.add(Binding("/products", handler_v2, frozenset({"GET"}), Version(2, 0)))
        router.compile()
        match = router.lookup("GET", "/products", Version(2, 0))
    """

    __slots__ = ("_bindings", "_compiled", "_root")

    def __init__(self) -> None:
        self._root = _TrieNode()
        self._bindings: list[Binding] = []
        self._compiled = False

    def add(self, binding: Binding) -> Binding:
        """Add a binding. Must be called before compile().

        Returns the stored binding (with parsed segments attached).
        Raises ``DuplicateBinding`` if the (template shape, method, version)
        key is already taken.
        """
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)

        if not binding.segments:
            binding = replace(binding, segments=tuple(parse_path(binding.path)))

        node = self._root
        table: _MethodTable | None = None

        for seg in binding.segments:
            if seg.is_param and seg.param_type == "path":
                # Catch-all: consumes rest of path, must be last segment
                if node.catch_all is None:
                    node.catch_all = {}
                table = node.catch_all
                break

            if seg.is_param:
                edge = node.param_children.get(seg.param_type)
                if edge is None:
                    pattern, _ = CONVERTERS[seg.param_type]
                    edge = _ParamEdge(
                        param_type=seg.param_type,
                        regex=re.compile(f"^{pattern}$"),
                        node=_TrieNode(),
                    )
                    node.param_children[seg.param_type] = edge
                node = edge.node
            else:
                if seg.value not in node.children:
                    node.children[seg.value] = _TrieNode()
                node = node.children[seg.value]

        if table is None:
            table = node.bindings

        # Validate every method before registering any of them
        for method in binding.methods:
            existing = table.get(method, {}).get(binding.version)
            if existing is not None:
                raise DuplicateBinding(
                    binding.path,
                    method,
                    binding.version,
                    getattr(existing.handler, "__name__", existing.path),
                )
        for method in binding.methods:
            table.setdefault(method, {})[binding.version] = binding

        self._bindings.append(binding)
        logger.debug(
            "bind %s %s @ %s -> %s",
            ",".join(sorted(binding.methods)),
            binding.path,
            binding.version,
            getattr(binding.handler, "__name__", repr(binding.handler)),
        )
        return binding

    @property
    def bindings(self) -> tuple[Binding, ...]:
        """All registered bindings, in registration order."""
        return tuple(self._bindings)

    def compile(self) -> None:
        """Freeze the router. No more bindings can be added."""
        self._compiled = True

    def lookup(self, method: str, path: str, version: Version) -> RouteMatch:
        """Find the binding for a path, method, and exact version.

        Every template matching *path* is a candidate, most specific
        first. The first candidate bound for *method* at *version* wins.

        Raises:
            RouteUnknown: No template matches the path, or the path matches
                but nothing is bound for the method.
            NotFound: Path and method match, but not at *version*. Carries
                the versions that are bound.
        """
        candidates = self._match(path)
        if not candidates:
            raise RouteUnknown(f"No route matches {method} {path!r}")

        bound: set[Version] = set()
        for table, values in candidates:
            by_version = table.get(method)
            if not by_version:
                continue
            binding = by_version.get(version)
            if binding is not None:
                params = dict(zip(binding.param_names, values))
                return RouteMatch(binding=binding, path_params=params)
            bound.update(by_version)

        if not bound:
            allowed = ", ".join(sorted({m for table, _ in candidates for m in table}))
            raise RouteUnknown(f"No route matches {method} {path!r} (allowed: {allowed})")
        raise NotFound(version, tuple(sorted(bound)))

    def versions_for(self, method: str, path: str) -> tuple[Version, ...]:
        """Versions bound for *method* on *path*, ascending (empty if none)."""
        bound: set[Version] = set()
        for table, _ in self._match(path):
            bound.update(table.get(method, {}))
        return tuple(sorted(bound))

    def _match(self, path: str) -> list[tuple[_MethodTable, list[str]]]:
        parts = [p for p in path.strip("/").split("/") if p]
        return list(self._match_node(self._root, parts, 0, []))

    def _match_node(
        self,
        node: _TrieNode,
        parts: list[str],
        index: int,
        values: list[str],
    ) -> Iterator[tuple[_MethodTable, list[str]]]:
        """Yield every table whose template matches the remaining parts."""
        # All parts consumed: this node holds the bindings
        if index == len(parts):
            if node.bindings:
                yield node.bindings, values
            return

        part = parts[index]

        # 1. Static child first (exact match)
        if part in node.children:
            yield from self._match_node(node.children[part], parts, index + 1, values)

        # 2. Parameter children, most specific converter first
        for param_type in _PARAM_ORDER:
            edge = node.param_children.get(param_type)
            if edge is not None and edge.regex.match(part):
                yield from self._match_node(edge.node, parts, index + 1, [*values, part])

        # 3. Catch-all
        if node.catch_all:
            yield node.catch_all, [*values, "/".join(parts[index:])]
