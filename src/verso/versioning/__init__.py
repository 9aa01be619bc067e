"""Versioning — version values, extraction, registry, and reporting.

Groups and their versions are declared during setup and frozen into a
read-only registry when the app freezes.
"""

from verso.versioning.extract import (
    CompositeReader,
    HeaderReader,
    MediaTypeReader,
    PathSegmentReader,
    QueryReader,
    VersionReader,
    create_reader,
)
from verso.versioning.registry import ResolvedVersion, VersionGroup, VersionRegistry
from verso.versioning.reporter import CapabilityReporter, VersionDescription
from verso.versioning.version import UNSPECIFIED, Version, parse_version

__all__ = [
    "UNSPECIFIED",
    "CapabilityReporter",
    "CompositeReader",
    "HeaderReader",
    "MediaTypeReader",
    "PathSegmentReader",
    "QueryReader",
    "ResolvedVersion",
    "Version",
    "VersionDescription",
    "VersionGroup",
    "VersionReader",
    "VersionRegistry",
    "create_reader",
    "parse_version",
]
