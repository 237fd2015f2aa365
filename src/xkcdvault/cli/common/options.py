"""
Reusable Typer Options Module

Option definitions shared by the main callback and the commands. Use them
as ``Annotated[<type>, <option>] = <default>`` in command signatures.
"""

from __future__ import annotations

import typer

from xkcdvault.shared.constants import CLIDefaults, CLIHelp

# Verbose option - count-based for multiple -v flags
verbose_option = typer.Option(
    "--verbose",
    "-v",
    count=True,
    help="Enable verbose output (equivalent to --log-level DEBUG).",
)

# Log level option - enum-based with case-insensitive choices
log_level_option = typer.Option(
    "--log-level",
    case_sensitive=False,
    help="Set the logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).",
)

json_output_option = typer.Option(
    "--json",
    "-j",
    help=CLIHelp.JSON_HELP,
)

index_path_option = typer.Option(
    "--index",
    help=CLIHelp.INDEX_PATH_HELP,
    dir_okay=True,
)

config_option = typer.Option(
    "--config",
    help=CLIHelp.CONFIG_HELP,
    exists=True,
    dir_okay=False,
)

timeout_option = typer.Option(
    "--timeout",
    "-t",
    min=1,
    help=CLIHelp.TIMEOUT_HELP,
)

output_option = typer.Option(
    "--output",
    "-o",
    help=CLIHelp.OUTPUT_HELP,
)

workers_option = typer.Option(
    "--workers",
    "-w",
    min=1,
    help=CLIHelp.WORKERS_HELP,
)


def version_callback(value: bool) -> None:
    """Print version information and exit."""
    if value:
        typer.echo(CLIHelp.VERSION_TEXT.format(version=CLIDefaults.VERSION))
        raise typer.Exit


# Version option - for main app only
version_option = typer.Option(
    "--version",
    "-V",
    callback=version_callback,
    help="Show version information and exit.",
    is_eager=True,
)
