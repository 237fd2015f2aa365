"""xkcdvault - xkcd in your terminal, with a local searchable index."""

from xkcdvault.shared.constants import Application

__version__ = Application.VERSION

__all__ = ["__version__"]
