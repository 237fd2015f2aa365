"""
xkcdvault Typer CLI Application

Get your daily dose of xkcd, search for a comic, or browse them, right from
the terminal. Global options are parsed by the main callback, which loads
the settings, configures logging and stores a CliContext for the commands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated

import typer

from xkcdvault.cli.common.context import (
    CliContext,
    LogLevel,
    get_cli_context,
    set_cli_context,
)
from xkcdvault.cli.common.error_handler import handle_cli_error
from xkcdvault.cli.common.options import (
    config_option,
    index_path_option,
    json_output_option,
    log_level_option,
    output_option,
    timeout_option,
    verbose_option,
    version_option,
    workers_option,
)
from xkcdvault.cli.index_handler import (
    handle_init,
    handle_search,
    handle_status,
    handle_sync,
    handle_update,
)
from xkcdvault.cli.item_handler import handle_infos, handle_show
from xkcdvault.config import load_settings
from xkcdvault.shared.constants import (
    CLICommands,
    CLIDefaults,
    CLIHelp,
    IndexConfig,
    OutputTargets,
)
from xkcdvault.shared.logging import setup_structured_logger

app = typer.Typer(
    name=CLIHelp.APP_NAME,
    help=CLIHelp.APP_DESCRIPTION,
    add_completion=True,
    rich_markup_mode=CLIHelp.APP_STYLE,
    no_args_is_help=True,
)

index_app = typer.Typer(
    help=CLIHelp.INDEX_DESCRIPTION,
    no_args_is_help=True,
)
app.add_typer(index_app, name=CLICommands.INDEX)


@app.callback()
def main(
    index: Annotated[Path | None, index_path_option] = None,
    config: Annotated[Path | None, config_option] = None,
    json_output: Annotated[bool, json_output_option] = False,
    verbose: Annotated[int, verbose_option] = 0,
    log_level: Annotated[LogLevel | None, log_level_option] = None,
    timeout: Annotated[int, timeout_option] = CLIDefaults.TIMEOUT_MS,
    output: Annotated[str, output_option] = OutputTargets.STDOUT,
    version: Annotated[bool, version_option] = False,
) -> None:
    """Main CLI callback: settings, logging and the CLI context."""
    try:
        overrides = {"index": {"path": str(index)}} if index is not None else None
        settings = load_settings(config, overrides)
        context = CliContext(
            settings=settings,
            verbose=verbose,
            log_level=log_level,
            json_output=json_output,
            timeout_ms=timeout,
            output=output,
        )
        setup_structured_logger(
            level=context.get_effective_log_level(),
            log_file=settings.logging.file,
            use_rich_console=not (json_output or settings.logging.json_format),
        )
    except Exception as e:  # noqa: BLE001
        exit_code = handle_cli_error(e, "main-callback", json_output=json_output)
        raise typer.Exit(exit_code) from e
    set_cli_context(context)


@index_app.command(CLICommands.INIT)
def index_init_command(
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help=CLIHelp.INIT_FORCE_HELP),
    ] = False,
    offline: Annotated[
        bool,
        typer.Option("--offline", help=CLIHelp.INIT_OFFLINE_HELP),
    ] = False,
) -> None:
    """
    Initialize the index.

    In offline mode every indexed comic image is stored inside the index,
    so `show` works without network access (the index is much bigger).

    Examples:
        xkcdvault index init
        xkcdvault --index ./comics.index index init --offline
        xkcdvault index init --force
    """
    handle_init(get_cli_context(), force=force, offline=offline)


@index_app.command(CLICommands.UPDATE)
def index_update_command(
    check: Annotated[
        bool,
        typer.Option("--check", "-c", help=CLIHelp.UPDATE_CHECK_HELP),
    ] = False,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help=CLIHelp.UPDATE_FORCE_HELP),
    ] = False,
    workers: Annotated[int | None, workers_option] = None,
) -> None:
    """
    Update the index with the comics published since the last update.

    The index is considered outdated after 24 hours (see
    `index.update_interval_hours`). With --check, exits with status 1 when
    it is outdated and does nothing else.
    """
    handle_update(get_cli_context(), check=check, force=force, workers=workers)


@index_app.command(CLICommands.SYNC)
def index_sync_command(
    start: Annotated[int, typer.Argument(min=1, help="First comic number.")],
    end: Annotated[int, typer.Argument(min=1, help="Last comic number (inclusive).")],
    workers: Annotated[int | None, workers_option] = None,
) -> None:
    """
    (Re)index an explicit range of comics.

    Comics that could not be fetched during an update are never retried
    automatically; use this command to backfill them.
    """
    handle_sync(get_cli_context(), start=start, end=end, workers=workers)


@index_app.command(CLICommands.STATUS)
def index_status_command() -> None:
    """Show the index location, mode, size and last update."""
    handle_status(get_cli_context())


@index_app.command(CLICommands.SEARCH)
def index_search_command(
    query: Annotated[str, typer.Argument(help="Text to look for.")],
    limit: Annotated[
        int,
        typer.Option("--limit", "-n", min=1, help=CLIHelp.SEARCH_LIMIT_HELP),
    ] = IndexConfig.DEFAULT_SEARCH_LIMIT,
) -> None:
    """Search indexed comics by title, alt text, transcript or news."""
    handle_search(get_cli_context(), query=query, limit=limit)


@app.command(CLICommands.INFOS)
def infos_command(
    item: Annotated[str, typer.Argument(help=CLIHelp.ITEM_ARG_HELP)] = CLIDefaults.LATEST,
) -> None:
    """
    Show the details of a comic.

    Comics found in the index are displayed without network access; others
    are fetched and added to the index.
    """
    handle_infos(get_cli_context(), item=item)


@app.command(CLICommands.SHOW)
def show_command(
    item: Annotated[str, typer.Argument(help=CLIHelp.ITEM_ARG_HELP)] = CLIDefaults.LATEST,
) -> None:
    """
    Write the image of a comic to the output.

    Examples:
        xkcdvault show 353 -o python.png
        xkcdvault show latest > latest.png
    """
    handle_show(get_cli_context(), item=item)
