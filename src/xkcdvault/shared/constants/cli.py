"""
CLI Configuration Constants

This module contains all constants related to command-line interface
configuration, default values, and user-facing messages.
"""

from .system import Application


class CLIDefaults:
    """CLI default values."""

    VERSION = Application.VERSION
    TIMEOUT_MS = 30000
    EXIT_SUCCESS = 0
    EXIT_ERROR = 1
    LATEST = "latest"


class CLICommands:
    """Command names."""

    INDEX = "index"
    INIT = "init"
    UPDATE = "update"
    SYNC = "sync"
    STATUS = "status"
    SEARCH = "search"
    INFOS = "infos"
    SHOW = "show"


class OutputTargets:
    """Special values accepted by --output."""

    STDOUT = "stdout"
    STDOUT_DASH = "-"
    STDERR = "stderr"


class CLIHelp:
    """Help texts."""

    APP_NAME = Application.NAME
    APP_DESCRIPTION = (
        "Get your daily dose of xkcd, search for a comic, or browse them, "
        "right from the terminal."
    )
    APP_STYLE = "rich"
    VERSION_TEXT = "xkcdvault {version}"

    INDEX_DESCRIPTION = (
        "In order to search comics, xkcdvault maintains an index of all "
        "available comics. Index commands manipulate this index."
    )
    INDEX_PATH_HELP = "Path to the index file."
    CONFIG_HELP = "Path to a TOML configuration file."
    JSON_HELP = "Use the JSON format for logging and output."
    OUTPUT_HELP = (
        "Output of the CLI: 'stdout', 'stderr' or a file path to append to."
    )
    TIMEOUT_HELP = "Timeout in milliseconds."
    ITEM_ARG_HELP = "Comic number, or 'latest'."

    INIT_FORCE_HELP = (
        "Force reinitialization of the index (all previous data is lost)."
    )
    INIT_OFFLINE_HELP = (
        "Initialize the index in offline mode: image content is stored in the "
        "index for offline use."
    )
    UPDATE_CHECK_HELP = "Only check if the index should be updated, do not update it."
    UPDATE_FORCE_HELP = "Force an update of the index even if it is up to date."
    WORKERS_HELP = "How many comics to process concurrently."
    SEARCH_LIMIT_HELP = "Maximum number of results."


class CLIMessages:
    """User-facing message templates."""

    NOT_INITIALIZED = "index is not initialized, run '{prog} index init' first"
    ALREADY_INITIALIZED = "index is already initialized, use --force to reinitialize"
    INDEX_BROKEN = (
        "a fatal error occurred with index: {message}, you should run "
        "'{prog} index init -f' to reinitialize it"
    )
    INITIALIZED = "Index initialized at {path} (offline: {offline})"
    UP_TO_DATE = "Index is up to date"
    OUTDATED = "index is outdated"
    UPDATED = "Indexed {stored} comics ({start}..{end}), last comic is #{last_id}"
    SKIPPED = "Skipped {count} comics that could not be fetched: {ids}"
    NO_RESULTS = "No comic matches '{query}'"
    INVALID_NUMBER = "invalid comic number: {value}"
