"""Capability reporting — the manifest of known API versions.

The manifest feeds documentation tooling (one OpenAPI document per
version) and the ``verso versions`` command. It reads only the frozen
registry, so it is safe to iterate repeatedly and from any thread.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from verso.versioning.registry import VersionGroup, VersionRegistry
from verso.versioning.version import Version


@dataclass(frozen=True, slots=True)
class VersionDescription:
    """One (group, version) entry of the capability manifest."""

    group: str
    version: Version
    deprecated: bool = False
    default: bool = False

    @property
    def group_name(self) -> str:
        """Document name for this version (``v1``, ``v2``)."""
        return self.version.group_name


class Manifest:
    """Lazy, restartable view over a registry's versions.

    Every ``iter()`` walks the registry afresh; nothing is cached, and
    nothing is shared between iterators.
    """

    __slots__ = ("_registry",)

    def __init__(self, registry: VersionRegistry) -> None:
        self._registry = registry

    def __iter__(self) -> Iterator[VersionDescription]:
        for group in self._registry.groups:
            for version in group.versions:
                yield VersionDescription(
                    group=group.name,
                    version=version,
                    deprecated=group.is_deprecated(version),
                    default=version == group.default,
                )

    def versions(self) -> tuple[VersionDescription, ...]:
        """Distinct versions across all groups, ascending.

        A version counts as deprecated only if every group that declares
        it deprecates it.
        """
        merged: dict[Version, bool] = {}
        for entry in self:
            merged[entry.version] = merged.get(entry.version, True) and entry.deprecated
        return tuple(
            VersionDescription(group="", version=version, deprecated=deprecated)
            for version, deprecated in sorted(merged.items())
        )


class CapabilityReporter:
    """Describes the versions a frozen registry knows about."""

    __slots__ = ("_registry",)

    def __init__(self, registry: VersionRegistry) -> None:
        self._registry = registry

    def describe(self) -> Manifest:
        """Return the manifest, ordered by group registration then version."""
        return Manifest(self._registry)


def registry_from_manifest(
    descriptions: Iterable[VersionDescription],
    *,
    assume_default_when_unspecified: bool = True,
) -> VersionRegistry:
    """Rebuild a registry from manifest entries.

    Groups keep their first-seen order. A group keeps the version flagged
    as its default; without one, the default is its lowest non-deprecated
    version (or its lowest version if all are deprecated).
    """
    versions: dict[str, list[Version]] = {}
    deprecated: dict[str, list[Version]] = {}
    defaults: dict[str, Version] = {}
    for entry in descriptions:
        if entry.default:
            defaults.setdefault(entry.group, entry.version)
        versions.setdefault(entry.group, []).append(entry.version)
        if entry.deprecated:
            deprecated.setdefault(entry.group, []).append(entry.version)

    registry = VersionRegistry(assume_default_when_unspecified=assume_default_when_unspecified)
    for name, declared in versions.items():
        retired = set(deprecated.get(name, ()))
        current = sorted(set(declared) - retired)
        default = defaults.get(name)
        if default is None:
            default = current[0] if current else min(declared)
        registry.add(
            VersionGroup.create(name, declared, default=default, deprecated=retired)
        )
    registry.compile()
    return registry
