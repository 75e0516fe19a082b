"""Test utilities for mec applications::

    from mec.testing import TestClient
"""

from mec.testing.client import TestClient

__all__ = ["TestClient"]
