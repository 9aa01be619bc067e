"""API version value type and parsing.

A ``Version`` is ``major.minor`` with an optional status label
(``"1.0"``, ``"2.1-beta"``). Versions order by ``(major, minor, status)``
and compare structurally.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Final

from verso.errors import MalformedVersion

_VERSION_RE: Final = re.compile(r"^(\d+)(?:\.(\d+))?(?:-([A-Za-z][A-Za-z0-9]*))?$")


@dataclass(frozen=True, slots=True, order=True)
class Version:
    """An immutable API version.

    An omitted minor means zero, so ``Version.parse("2") == Version(2, 0)``.
    """

    major: int
    minor: int = 0
    status: str = ""

    def __post_init__(self) -> None:
        if self.major < 0 or self.minor < 0:
            msg = f"Version numbers must be non-negative, got {self.major}.{self.minor}"
            raise ValueError(msg)

    @classmethod
    def parse(cls, text: str) -> Version:
        """Parse ``major[.minor][-status]``.

        Raises ``MalformedVersion`` for anything else, including embedded
        whitespace such as ``"2 .0"``.
        """
        match = _VERSION_RE.match(text)
        if match is None:
            raise MalformedVersion(text)
        major, minor, status = match.groups()
        return cls(int(major), int(minor or 0), status or "")

    @property
    def group_name(self) -> str:
        """Short document/group name: ``v1``, ``v1.1``, ``v2-beta``.

        The minor component is dropped when it is zero.
        """
        name = f"v{self.major}" if self.minor == 0 else f"v{self.major}.{self.minor}"
        if self.status:
            name = f"{name}-{self.status}"
        return name

    def __str__(self) -> str:
        text = f"{self.major}.{self.minor}"
        if self.status:
            return f"{text}-{self.status}"
        return text


def parse_version(value: str | Version) -> Version:
    """Coerce a version literal or ``Version`` to a ``Version``."""
    if isinstance(value, Version):
        return value
    return Version.parse(value)


class _Unspecified:
    """Sentinel for "the request carried no version token"."""

    __slots__ = ()
    _instance: _Unspecified | None = None

    def __new__(cls) -> _Unspecified:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "UNSPECIFIED"


UNSPECIFIED: Final = _Unspecified()
"""Returned by extractors when the request does not name a version."""

VersionToken = Version | _Unspecified
