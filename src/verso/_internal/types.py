"""Shared type aliases used across verso modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

from verso.versioning.version import Version

# Route handler: user-defined function with variable signature
Handler: TypeAlias = Callable[..., Any]

# Error handler: receives (request, error?) and returns a response value
ErrorHandler: TypeAlias = Callable[..., Any]

# Version literal accepted by registration APIs ("1.0", "2", Version(2, 0))
VersionLike: TypeAlias = str | Version
