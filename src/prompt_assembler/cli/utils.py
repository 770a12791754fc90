"""
Shared utilities for CLI commands.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, NoReturn

import click

from prompt_assembler.diagnostics import Diagnostic
from prompt_assembler.errors import (
    ConfigError,
    ConfigMissingError,
    ConfigParseError,
    InvalidDefinitionError,
    PromptAssemblerError,
    UnknownPromptError,
)
from prompt_assembler.prompts import PromptAssembler

logger = logging.getLogger(__name__)

PROG_NAME = "pa"
SCHEMA_VERSION = 1

# Exit statuses automation can branch on
EXIT_OK = 0
EXIT_UNKNOWN_PROMPT = 1
EXIT_INVALID_CONFIG = 2
EXIT_RENDER_FAILURE = 3
EXIT_UNREADABLE_CONFIG = 127


def get_context_config_dir(ctx: click.Context) -> Path:
    """Get the library directory selected by the root command."""
    config_dir: Path = ctx.obj["config_dir"]
    return config_dir


def load_assembler(ctx: click.Context) -> PromptAssembler:
    """Load configuration for the current invocation."""
    return PromptAssembler.from_directory(get_context_config_dir(ctx))


def exit_code_for(error: PromptAssemblerError) -> int:
    """Map an exception to its stable exit status."""
    if isinstance(error, ConfigMissingError):
        return EXIT_UNREADABLE_CONFIG
    if isinstance(error, ConfigError):
        return EXIT_INVALID_CONFIG
    if isinstance(error, UnknownPromptError):
        return EXIT_UNKNOWN_PROMPT
    return EXIT_RENDER_FAILURE


def echo_diagnostics(diagnostics: Iterable[Diagnostic]) -> None:
    """Print diagnostics to stderr, one per line."""
    for diagnostic in diagnostics:
        click.echo(diagnostic.format(), err=True)


def fail(error: PromptAssemblerError) -> NoReturn:
    """Report an error on stderr and exit with its status."""
    if isinstance(error, InvalidDefinitionError):
        echo_diagnostics(error.diagnostics)
    elif isinstance(error, ConfigParseError):
        echo_diagnostics([error.to_diagnostic()])
    else:
        click.echo(f"error: {error}", err=True)

    logger.debug(f"Exiting after {type(error).__name__}: {error}")
    raise SystemExit(exit_code_for(error))


@contextmanager
def handle_errors() -> Iterator[None]:
    """Turn prompt-assembler exceptions into an error message and exit status."""
    try:
        yield
    except PromptAssemblerError as e:
        fail(e)


def read_stdin_if_available() -> str | None:
    """Read piped standard input, if any.

    One trailing newline (``\\n`` or ``\\r\\n``) is removed. Returns None when
    stdin is a terminal or empty.
    """
    stream = sys.stdin
    if stream is None or stream.isatty():
        return None

    data = stream.read()
    if not data:
        return None

    if data.endswith("\n"):
        data = data[:-1]
        if data.endswith("\r"):
            data = data[:-1]
    return data


def json_envelope(**payload: Any) -> dict[str, Any]:
    """Wrap a JSON payload with schema version and generation time."""
    return {
        "schema_version": SCHEMA_VERSION,
        "generated_at": datetime.now(UTC).isoformat(timespec="seconds"),
        **payload,
    }


def echo_json(data: Any) -> None:
    click.echo(json.dumps(data, indent=2, default=str))
