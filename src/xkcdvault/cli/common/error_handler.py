"""
CLI Error Handling Utilities

Maps every exception reaching a command boundary to an exit code, a log
record and either a red console message or a JSON error document.
"""

from __future__ import annotations

import functools
import logging
import sys
from typing import Any, Callable, TypeVar

import typer
from rich.console import Console

from xkcdvault.cli.formatters import format_json_output
from xkcdvault.shared.constants import Application, CLIDefaults, CLIMessages
from xkcdvault.shared.errors import (
    CliError,
    ErrorCode,
    IndexAlreadyInitializedError,
    IndexNotInitializedError,
    PersistenceError,
    XkcdVaultError,
    create_cli_error,
)

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

_BROKEN_INDEX_CODES = frozenset(
    {
        ErrorCode.INDEX_OPEN_FAILED,
        ErrorCode.INDEX_READ_FAILED,
        ErrorCode.INDEX_SCHEMA_ERROR,
    }
)


def _user_message(error: XkcdVaultError) -> str:
    if isinstance(error, IndexNotInitializedError):
        return CLIMessages.NOT_INITIALIZED.format(prog=Application.NAME)
    if isinstance(error, IndexAlreadyInitializedError):
        return CLIMessages.ALREADY_INITIALIZED
    if isinstance(error, PersistenceError) and error.code in _BROKEN_INDEX_CODES:
        return CLIMessages.INDEX_BROKEN.format(
            message=error.message,
            prog=Application.NAME,
        )
    return error.message


def _map_error_to_cli_error(error: BaseException, command: str) -> CliError:
    """Map specific exception types to CLI errors."""
    if isinstance(error, CliError):
        return error

    if isinstance(error, XkcdVaultError):
        return CliError(
            error.code,
            _user_message(error),
            error.context,
            error,
            command,
        )

    if isinstance(error, KeyboardInterrupt):
        return create_cli_error(
            "Command interrupted by user",
            command=command,
            exit_code=130,
        )

    original = error if isinstance(error, Exception) else None
    return create_cli_error(
        f"Unexpected error: {error}",
        command=command,
        original_error=original,
    )


def handle_cli_error(
    error: BaseException,
    command: str,
    *,
    json_output: bool = False,
) -> int:
    """Handle CLI errors with consistent formatting and logging.

    Args:
        error: The exception that occurred
        command: The CLI command being executed
        json_output: Whether to output JSON format

    Returns:
        Exit code for the CLI command
    """
    cli_error = _map_error_to_cli_error(error, command)
    log_context = {
        "command": command,
        "error_type": type(error).__name__,
        "error_code": cli_error.code.value,
    }

    if isinstance(error, XkcdVaultError):
        logger.debug(
            "CLI error in %s: %s",
            command,
            cli_error.message,
            extra={"context": log_context},
            exc_info=error,
        )
    elif isinstance(error, KeyboardInterrupt):
        logger.warning("Command interrupted", extra={"context": log_context})
    else:
        logger.error(
            "Unexpected error in %s",
            command,
            extra={"context": log_context},
            exc_info=error,
        )

    if json_output:
        payload = format_json_output(
            success=False,
            command=command,
            errors=[cli_error.message],
            data={
                "error_code": cli_error.code.value,
                "error_type": type(error).__name__,
                "exit_code": cli_error.exit_code,
            },
        )
        sys.stdout.buffer.write(payload)
        sys.stdout.buffer.write(b"\n")
        sys.stdout.buffer.flush()
    else:
        Console(stderr=True, highlight=False).print(
            f"Error: {cli_error.message}",
            style="bold red",
            markup=False,
        )

    return cli_error.exit_code


def handle_cli_errors(command_name: str) -> Callable[[F], F]:
    """Decorator turning a handler's exceptions into a typer exit.

    The wrapped handler returns an exit code; non-zero codes and errors
    both end the process through ``typer.Exit``.

    Example:
        >>> @handle_cli_errors(command_name="index update")
        ... def handle_update(context, ...) -> int:
        ...     ...
    """

    def decorator(func: F) -> F:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> None:
            from xkcdvault.cli.common.context import get_cli_context

            json_output = get_cli_context().json_output
            try:
                exit_code = func(*args, **kwargs)
            except (Exception, KeyboardInterrupt) as e:  # noqa: BLE001
                exit_code = handle_cli_error(e, command_name, json_output=json_output)
            if exit_code != CLIDefaults.EXIT_SUCCESS:
                raise typer.Exit(exit_code)

        return wrapper  # type: ignore[return-value]

    return decorator
