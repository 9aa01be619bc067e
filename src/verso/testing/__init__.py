"""Test utilities for verso applications.

::

    from verso.testing import TestClient
"""

from verso.testing.client import TestClient

__all__ = ["TestClient"]
