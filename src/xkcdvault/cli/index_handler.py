"""Handlers of the ``index`` command group."""

from __future__ import annotations

import logging
from datetime import timedelta

from xkcdvault.cli.common.context import CliContext
from xkcdvault.cli.common.error_handler import handle_cli_errors
from xkcdvault.cli.common.output import open_console, write_bytes
from xkcdvault.cli.common.services import create_client, open_index
from xkcdvault.cli.formatters import (
    format_json_output,
    render_search_results,
    render_status,
    summary_to_dict,
)
from xkcdvault.services.index import ComicIndex, SyncSummary, UpdateStatus, update_index
from xkcdvault.shared.constants import CLIDefaults, CLIMessages
from xkcdvault.shared.errors import PersistenceError, create_index_not_initialized_error

logger = logging.getLogger(__name__)


def _require_initialized(index: ComicIndex, operation: str) -> None:
    if not index.is_initialized():
        raise create_index_not_initialized_error(str(index.path), operation)


def _print_summary(context: CliContext, command: str, summary: SyncSummary) -> None:
    warnings = []
    if summary.skipped_ids:
        warnings.append(
            CLIMessages.SKIPPED.format(
                count=len(summary.skipped_ids),
                ids=", ".join(str(i) for i in summary.skipped_ids),
            )
        )
    if context.json_output:
        payload = format_json_output(
            success=True,
            command=command,
            data={"status": UpdateStatus.UPDATED.value, "summary": summary_to_dict(summary)},
            warnings=warnings,
        )
        write_bytes(context.output, payload, newline=True)
        return
    with open_console(context.output) as console:
        console.print(
            CLIMessages.UPDATED.format(
                stored=summary.stored,
                start=summary.start,
                end=summary.end,
                last_id=summary.last_id,
            )
        )
        for warning in warnings:
            console.print(warning, style="yellow", markup=False)


@handle_cli_errors(command_name="index init")
def handle_init(context: CliContext, *, force: bool, offline: bool) -> int:
    """Create (or with ``force`` recreate) the index."""
    try:
        index = open_index(context)
    except PersistenceError:
        if not force:
            raise
        logger.warning("Existing index at %s is unreadable, recreating it", context.index_path)
        index = ComicIndex(context.index_path)

    with index:
        index.initialize(force=force, offline=offline)

    if context.json_output:
        payload = format_json_output(
            success=True,
            command="index init",
            data={"path": str(index.path), "offline": offline},
        )
        write_bytes(context.output, payload, newline=True)
    else:
        with open_console(context.output) as console:
            console.print(
                CLIMessages.INITIALIZED.format(path=index.path, offline=offline),
                markup=False,
            )
    return CLIDefaults.EXIT_SUCCESS


@handle_cli_errors(command_name="index update")
def handle_update(
    context: CliContext,
    *,
    check: bool,
    force: bool,
    workers: int | None,
) -> int:
    """Catch the index up with the latest comic."""
    settings = context.settings.index
    deadline = context.new_deadline()
    with open_index(context) as index, create_client(context) as client:
        _require_initialized(index, "index update")
        result = update_index(
            index,
            client,
            workers=workers or settings.workers,
            force=force,
            check_only=check,
            max_age=timedelta(hours=settings.update_interval_hours),
            deadline=deadline,
        )

    if result.summary is not None:
        _print_summary(context, "index update", result.summary)
        return CLIDefaults.EXIT_SUCCESS

    outdated = result.status is UpdateStatus.OUTDATED
    if context.json_output:
        payload = format_json_output(
            success=not outdated,
            command="index update",
            data={"status": result.status.value, "latest_id": result.latest_id},
        )
        write_bytes(context.output, payload, newline=True)
    else:
        with open_console(context.output) as console:
            if outdated:
                console.print(CLIMessages.OUTDATED, style="yellow")
            else:
                console.print(CLIMessages.UP_TO_DATE)
    return CLIDefaults.EXIT_ERROR if outdated else CLIDefaults.EXIT_SUCCESS


@handle_cli_errors(command_name="index sync")
def handle_sync(context: CliContext, *, start: int, end: int, workers: int | None) -> int:
    """Resync an explicit range, e.g. to backfill skipped comics."""
    deadline = context.new_deadline()
    with open_index(context) as index, create_client(context) as client:
        summary = index.sync_range(
            client,
            start,
            end,
            workers or context.settings.index.workers,
            deadline,
        )
    _print_summary(context, "index sync", summary)
    return CLIDefaults.EXIT_SUCCESS


@handle_cli_errors(command_name="index status")
def handle_status(context: CliContext) -> int:
    with open_index(context) as index:
        initialized = index.is_initialized()
        watermark = index.get_watermark()
        status = {
            "path": str(index.path),
            "initialized": initialized,
            "offline": index.is_offline,
            "items": index.count(),
            "last_sync": watermark.synced_at.isoformat() if watermark.synced_at else None,
            "last_id": watermark.last_id,
        }

    if context.json_output:
        payload = format_json_output(success=True, command="index status", data=status)
        write_bytes(context.output, payload, newline=True)
    else:
        with open_console(context.output) as console:
            render_status(console, status)
    return CLIDefaults.EXIT_SUCCESS


@handle_cli_errors(command_name="index search")
def handle_search(context: CliContext, *, query: str, limit: int) -> int:
    with open_index(context) as index:
        items = index.search(query, limit)

    if context.json_output:
        payload = format_json_output(
            success=True,
            command="index search",
            data={"query": query, "items": [item.to_dict() for item in items]},
        )
        write_bytes(context.output, payload, newline=True)
        return CLIDefaults.EXIT_SUCCESS

    with open_console(context.output) as console:
        if not items:
            console.print(CLIMessages.NO_RESULTS.format(query=query), markup=False)
        else:
            render_search_results(console, items, query)
    return CLIDefaults.EXIT_SUCCESS
