"""Test utilities for wren servers.

    from wren.testing import TestClient, envelope_of
"""

from wren.testing.client import TestClient, envelope_of

__all__ = ["TestClient", "envelope_of"]
