"""Output target handling for --output.

Text goes through a rich Console bound to the target; image bytes are
written to the binary side of the same target.
"""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path
from typing import BinaryIO, TextIO

from rich.console import Console

from xkcdvault.shared.constants import OutputTargets
from xkcdvault.shared.errors import ErrorCode, create_cli_error


def _open_failed(target: str, error: OSError) -> Exception:
    return create_cli_error(
        f"cannot open output {target}: {error}",
        operation="open_output",
        original_error=error,
        code=ErrorCode.CLI_OUTPUT_ERROR,
    )


@contextmanager
def open_text_output(target: str) -> Iterator[TextIO]:
    """Yield a text stream for ``target``; files are opened for appending."""
    if target in (OutputTargets.STDOUT, OutputTargets.STDOUT_DASH):
        yield sys.stdout
        sys.stdout.flush()
        return
    if target == OutputTargets.STDERR:
        yield sys.stderr
        sys.stderr.flush()
        return
    try:
        stream = open(Path(target).expanduser(), "a", encoding="utf-8")  # noqa: SIM115
    except OSError as e:
        raise _open_failed(target, e) from e
    with stream:
        yield stream


@contextmanager
def open_binary_output(target: str) -> Iterator[BinaryIO]:
    """Yield a binary stream for ``target``; files are opened for appending."""
    if target in (OutputTargets.STDOUT, OutputTargets.STDOUT_DASH):
        yield sys.stdout.buffer
        sys.stdout.buffer.flush()
        return
    if target == OutputTargets.STDERR:
        yield sys.stderr.buffer
        sys.stderr.buffer.flush()
        return
    try:
        stream = open(Path(target).expanduser(), "ab")  # noqa: SIM115
    except OSError as e:
        raise _open_failed(target, e) from e
    with stream:
        yield stream


@contextmanager
def open_console(target: str) -> Iterator[Console]:
    """Rich console writing to ``target``."""
    with open_text_output(target) as stream:
        yield Console(file=stream, highlight=False)


def write_bytes(target: str, data: bytes, *, newline: bool = False) -> None:
    """Write raw bytes (an image or a JSON document) to ``target``."""
    with open_binary_output(target) as stream:
        stream.write(data)
        if newline:
            stream.write(b"\n")
