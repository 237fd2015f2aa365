"""Services module for xkcdvault.

Remote API access and the local comic index.
"""

from .index import ComicIndex
from .xkcd import XkcdClient

__all__ = ["ComicIndex", "XkcdClient"]
