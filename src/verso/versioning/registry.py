"""Version registry — declared versions per endpoint group.

Groups are declared during setup and frozen by ``compile()``. After that
the registry is read-only, so concurrent ``resolve()`` calls need no locks.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from verso.errors import (
    ConfigurationError,
    RouteUnknown,
    UnsupportedVersion,
    VersionRequired,
)
from verso.versioning.version import UNSPECIFIED, Version, VersionToken

logger = logging.getLogger("verso.versioning")


@dataclass(frozen=True, slots=True)
class VersionGroup:
    """One logical endpoint group (e.g. ``products``).

    ``versions`` is sorted ascending. ``prefix`` is the path prefix the
    group's routes live under; the empty prefix matches every path.
    """

    name: str
    versions: tuple[Version, ...]
    default: Version
    deprecated: frozenset[Version] = frozenset()
    prefix: str = ""

    def __post_init__(self) -> None:
        if not self.versions:
            msg = f"Group {self.name!r} declares no versions."
            raise ConfigurationError(msg)
        if self.default not in self.versions:
            msg = (
                f"Default version {self.default} of group {self.name!r} is not one of "
                f"its declared versions ({', '.join(str(v) for v in self.versions)})."
            )
            raise ConfigurationError(msg)
        stray = self.deprecated.difference(self.versions)
        if stray:
            msg = (
                f"Group {self.name!r} deprecates undeclared versions: "
                f"{', '.join(str(v) for v in sorted(stray))}"
            )
            raise ConfigurationError(msg)

    @classmethod
    def create(
        cls,
        name: str,
        versions: Iterable[Version],
        *,
        default: Version | None = None,
        deprecated: Iterable[Version] = (),
        prefix: str = "",
    ) -> VersionGroup:
        """Build a group, sorting and de-duplicating *versions*.

        *default* falls back to the lowest declared version.
        """
        ordered = tuple(sorted(set(versions)))
        if default is None and ordered:
            default = ordered[0]
        return cls(
            name=name,
            versions=ordered,
            default=default if default is not None else Version(1, 0),
            deprecated=frozenset(deprecated),
            prefix=_normalize_prefix(prefix),
        )

    def is_deprecated(self, version: Version) -> bool:
        return version in self.deprecated

    def owns(self, path: str) -> bool:
        """True if *path* lies under this group's prefix."""
        if not self.prefix:
            return True
        return path == self.prefix or path.startswith(self.prefix + "/")


def _normalize_prefix(prefix: str) -> str:
    stripped = prefix.strip("/")
    return f"/{stripped}" if stripped else ""


@dataclass(frozen=True, slots=True)
class ResolvedVersion:
    """Result of a successful ``VersionRegistry.resolve()``."""

    group: str
    version: Version
    deprecated: bool = False
    assumed: bool = False


class VersionRegistry:
    """Declared versions per group, plus the unspecified-version policy.

    Usage::

        registry = VersionRegistry(assume_default_when_unspecified=True)
        registry.add(VersionGroup.create("products", [Version(1), Version(2)]))
        registry.compile()
        registry.resolve("products", UNSPECIFIED).version  # Version(1, 0)
    """

    __slots__ = ("_assume_default", "_compiled", "_groups")

    def __init__(self, *, assume_default_when_unspecified: bool = True) -> None:
        self._groups: dict[str, VersionGroup] = {}
        self._assume_default = assume_default_when_unspecified
        self._compiled = False

    def add(self, group: VersionGroup) -> None:
        """Register a group. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add version groups after compilation."
            raise RuntimeError(msg)
        if group.name in self._groups:
            msg = f"Version group {group.name!r} is declared twice."
            raise ConfigurationError(msg)
        self._groups[group.name] = group
        logger.debug(
            "group %s: versions=%s default=%s",
            group.name,
            ", ".join(str(v) for v in group.versions),
            group.default,
        )

    def compile(self) -> None:
        """Freeze the registry. No more groups can be added."""
        self._compiled = True

    @property
    def assume_default_when_unspecified(self) -> bool:
        return self._assume_default

    @property
    def groups(self) -> tuple[VersionGroup, ...]:
        """All groups in registration order."""
        return tuple(self._groups.values())

    def __contains__(self, name: object) -> bool:
        return name in self._groups

    def __len__(self) -> int:
        return len(self._groups)

    def get(self, name: str) -> VersionGroup:
        """Return the group called *name*.

        Raises ``KeyError`` if no such group was declared.
        """
        return self._groups[name]

    def group_for(self, path: str) -> VersionGroup:
        """Return the group owning *path* (longest matching prefix).

        Raises ``RouteUnknown`` if no group's prefix matches.
        """
        best: VersionGroup | None = None
        for group in self._groups.values():
            if group.owns(path) and (best is None or len(group.prefix) > len(best.prefix)):
                best = group
        if best is None:
            raise RouteUnknown(f"No API group serves {path!r}")
        return best

    def resolve(self, group: str, token: VersionToken) -> ResolvedVersion:
        """Validate a version token against a group's declared versions.

        Raises:
            KeyError: *group* was never declared.
            VersionRequired: No token and defaults are not assumed.
            UnsupportedVersion: The token names an undeclared version.
        """
        entry = self._groups[group]

        if token is UNSPECIFIED:
            if not self._assume_default:
                raise VersionRequired(group)
            return ResolvedVersion(
                group=group,
                version=entry.default,
                deprecated=entry.is_deprecated(entry.default),
                assumed=True,
            )

        assert isinstance(token, Version)
        if token not in entry.versions:
            raise UnsupportedVersion(group, token, entry.versions)
        return ResolvedVersion(
            group=group,
            version=token,
            deprecated=entry.is_deprecated(token),
        )
