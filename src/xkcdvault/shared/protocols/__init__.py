"""Protocol definitions for dependency inversion.

The index layer depends on these interfaces rather than on the concrete
HTTP client, so tests can drive it with in-memory fakes.
"""

from __future__ import annotations

from .services import ItemSourceProtocol

__all__ = ["ItemSourceProtocol"]
