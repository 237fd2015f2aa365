"""Handlers of the single-comic commands: ``infos`` and ``show``."""

from __future__ import annotations

import logging

from xkcdvault.cli.common.context import CliContext
from xkcdvault.cli.common.error_handler import handle_cli_errors
from xkcdvault.cli.common.output import open_console, write_bytes
from xkcdvault.cli.common.services import create_client, open_index
from xkcdvault.cli.formatters import format_json_output, render_item
from xkcdvault.services.index import ComicIndex
from xkcdvault.services.xkcd import Item
from xkcdvault.shared.constants import CLIDefaults, CLIMessages
from xkcdvault.shared.deadline import Deadline
from xkcdvault.shared.errors import ErrorCode, RemoteError, create_cli_error
from xkcdvault.shared.protocols import ItemSourceProtocol

logger = logging.getLogger(__name__)


def resolve_item_id(
    value: str,
    index: ComicIndex,
    client: ItemSourceProtocol,
    deadline: Deadline,
) -> int:
    """Turn ``latest`` or a number into a comic id.

    ``latest`` asks the remote; when that fails, the highest indexed comic
    is used instead if there is one.

    Raises:
        CliError: If ``value`` is neither ``latest`` nor a positive integer
        RemoteError: If the latest comic is unknown and the index is empty
    """
    if value.strip().lower() == CLIDefaults.LATEST:
        try:
            return client.fetch_latest_id(deadline)
        except RemoteError as e:
            last_id = index.get_watermark().last_id
            if last_id <= 0:
                raise
            logger.warning(
                "Cannot fetch latest comic (%s), using latest indexed #%d",
                e.message,
                last_id,
            )
            return last_id

    try:
        item_id = int(value)
    except ValueError as e:
        raise create_cli_error(
            CLIMessages.INVALID_NUMBER.format(value=value),
            operation="resolve_item_id",
            original_error=e,
            exit_code=2,
            code=ErrorCode.CLI_INVALID_ARGUMENTS,
        ) from e
    if item_id <= 0:
        raise create_cli_error(
            CLIMessages.INVALID_NUMBER.format(value=value),
            operation="resolve_item_id",
            exit_code=2,
            code=ErrorCode.CLI_INVALID_ARGUMENTS,
        )
    return item_id


def _get_item(
    index: ComicIndex,
    client: ItemSourceProtocol,
    value: str,
    deadline: Deadline,
) -> Item:
    item_id = resolve_item_id(value, index, client, deadline)
    return index.get(client, item_id, deadline)


@handle_cli_errors(command_name="infos")
def handle_infos(context: CliContext, *, item: str) -> int:
    """Print the details of a comic."""
    deadline = context.new_deadline()
    with open_index(context) as index, create_client(context) as client:
        comic = _get_item(index, client, item, deadline)

    if context.json_output:
        payload = format_json_output(success=True, command="infos", data=comic.to_dict())
        write_bytes(context.output, payload, newline=True)
    else:
        with open_console(context.output) as console:
            render_item(console, comic)
    return CLIDefaults.EXIT_SUCCESS


@handle_cli_errors(command_name="show")
def handle_show(context: CliContext, *, item: str) -> int:
    """Write the image of a comic to the output.

    Comics from an offline index are served from the stored bytes.
    """
    deadline = context.new_deadline()
    with open_index(context) as index, create_client(context) as client:
        comic = _get_item(index, client, item, deadline)
        content = client.fetch_content(comic, deadline)

    write_bytes(context.output, content)
    return CLIDefaults.EXIT_SUCCESS
