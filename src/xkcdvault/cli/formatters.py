"""
Output formatters for the xkcdvault CLI.

JSON documents are produced with orjson; human output is rendered with
rich tables. Comic text is always passed as ``Text`` so brackets in titles
are never interpreted as markup.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import TYPE_CHECKING, Any

import orjson
from rich.table import Table
from rich.text import Text

from xkcdvault.shared.errors import ErrorCode, create_cli_error

if TYPE_CHECKING:
    from rich.console import Console

    from xkcdvault.services.index import SyncSummary
    from xkcdvault.services.xkcd import Item


def format_json_output(
    success: bool,
    command: str,
    data: Any | None = None,
    errors: list[str] | None = None,
    warnings: list[str] | None = None,
) -> bytes:
    """
    Format command output as JSON.

    Args:
        success: Whether the command executed successfully
        command: The command name (e.g., "infos", "index update")
        data: The command's output data
        errors: List of error messages
        warnings: List of warning messages

    Returns:
        JSON-encoded bytes ready for output

    Example:
        >>> output = format_json_output(True, "infos", data={"id": 353})
        >>> b'"success": true' in output
        True
    """
    errors = errors or []
    warnings = warnings or []
    if errors:
        success = False

    json_data = {
        "success": success,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "command": command,
        "data": data,
        "errors": errors,
        "warnings": warnings,
    }

    try:
        return orjson.dumps(
            json_data,
            option=orjson.OPT_SORT_KEYS | orjson.OPT_INDENT_2,
        )
    except TypeError as e:
        raise create_cli_error(
            f"failed to serialize output: {e}",
            command=command,
            operation="format_json_output",
            original_error=e,
            code=ErrorCode.CLI_OUTPUT_ERROR,
        ) from e


def _field_table() -> Table:
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("field", style="bold cyan", no_wrap=True)
    table.add_column("value", overflow="fold")
    return table


def render_item(console: Console, item: Item) -> None:
    """Print the details of one comic."""
    table = _field_table()
    table.title = f"#{item.id}"
    table.add_row("Title", Text(item.title, style="bold"))
    table.add_row("Date", item.published_date.isoformat())
    table.add_row("Image", Text(item.content_url))
    if item.permalink:
        table.add_row("Link", Text(item.permalink))
    if item.alt_text:
        table.add_row("Alt", Text(item.alt_text, style="italic"))
    if item.news:
        table.add_row("News", Text(item.news))
    if item.transcript:
        table.add_row("Transcript", Text(item.transcript))
    console.print(table)


def render_search_results(console: Console, items: list[Item], query: str) -> None:
    """Print search hits as one row per comic."""
    table = Table(title=Text(f"Comics matching '{query}'"))
    table.add_column("#", justify="right", style="cyan", no_wrap=True)
    table.add_column("Date", no_wrap=True)
    table.add_column("Title", style="bold")
    table.add_column("Alt", overflow="fold")
    for item in items:
        table.add_row(
            str(item.id),
            item.published_date.isoformat(),
            Text(item.title),
            Text(item.alt_text),
        )
    console.print(table)


def render_status(console: Console, status: dict[str, Any]) -> None:
    table = _field_table()
    table.title = "Index"
    for key, value in status.items():
        label = key.replace("_", " ").capitalize()
        table.add_row(label, Text("-" if value is None else str(value)))
    console.print(table)


def summary_to_dict(summary: SyncSummary) -> dict[str, Any]:
    return {
        "start": summary.start,
        "end": summary.end,
        "stored": summary.stored,
        "skipped_ids": summary.skipped_ids,
        "last_id": summary.last_id,
        "duration_ms": round(summary.duration_ms, 1),
    }
