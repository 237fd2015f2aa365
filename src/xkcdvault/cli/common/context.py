"""
CLI Context Management Module

This module provides a centralized system for managing per-invocation CLI
state using Pydantic models and ContextVar. The main callback builds the
context once from the global options and the loaded settings; commands read
it through get_cli_context().
"""

from __future__ import annotations

import contextvars
from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from xkcdvault.config import Settings
from xkcdvault.shared.constants import CLIDefaults, OutputTargets
from xkcdvault.shared.deadline import Deadline


class LogLevel(str, Enum):
    """Log level enumeration for type safety."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class CliContext(BaseModel):
    """
    CLI context model for managing global state.

    Attributes:
        settings: Settings resolved from file, environment and --index
        verbose: Verbosity level (0 = normal, 1+ = debug logging)
        log_level: Explicit log level, None to use the configured one
        json_output: Whether to output in JSON format
        timeout_ms: Overall timeout of the command in milliseconds
        output: Output target ('stdout', 'stderr' or a file path)
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    settings: Settings = Field(default_factory=Settings)

    verbose: int = Field(
        default=0,
        ge=0,
        description="Verbosity level (0 = normal, 1+ = verbose)",
    )

    log_level: LogLevel | None = Field(
        default=None,
        description="Logging level override",
    )

    json_output: bool = Field(
        default=False,
        description="Whether to output in JSON format",
    )

    timeout_ms: int = Field(
        default=CLIDefaults.TIMEOUT_MS,
        gt=0,
        description="Command timeout in milliseconds",
    )

    output: str = Field(
        default=OutputTargets.STDOUT,
        description="Output target",
    )

    @property
    def index_path(self) -> Path:
        return self.settings.index.path

    def is_verbose(self) -> bool:
        """Check if verbose mode is enabled."""
        return self.verbose > 0

    def get_effective_log_level(self) -> str:
        """
        Get the effective log level after applying verbose override.

        If verbose is enabled, force log level to DEBUG.

        Returns:
            str: Effective log level
        """
        if self.is_verbose():
            return LogLevel.DEBUG.value
        if self.log_level is not None:
            return self.log_level.value
        return self.settings.logging.level

    def new_deadline(self) -> Deadline:
        """Deadline for one command, started now."""
        return Deadline(self.timeout_ms / 1000)


# Global context variable for thread-safe access
cli_context_var: contextvars.ContextVar[CliContext | None] = contextvars.ContextVar(
    "cli_context",
    default=None,
)


def get_cli_context() -> CliContext:
    """
    Get the current CLI context.

    Raises:
        RuntimeError: If context has not been initialized
    """
    context = cli_context_var.get()
    if context is None:
        raise RuntimeError(
            "CLI context has not been initialized. "
            "Make sure to call the main callback before accessing context.",
        )
    return context


def set_cli_context(context: CliContext) -> None:
    """Set the current CLI context."""
    cli_context_var.set(context)


def clear_cli_context() -> None:
    """Clear the current CLI context."""
    cli_context_var.set(None)
