"""
System Constants

Application identity shared by the CLI, the HTTP client and packaging.
"""


class Application:
    """Application metadata."""

    NAME = "xkcdvault"
    VERSION = "0.1.0"
    DESCRIPTION = "xkcd in your terminal, with a local searchable index"
