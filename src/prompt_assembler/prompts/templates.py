"""
Template prompt rendering.

Template prompts are rendered with Jinja2 against a context decoded from a
JSON or TOML data file. The template may ``include`` other files from the
same search roots.
"""

from __future__ import annotations

import json
import logging
import tomllib
from collections.abc import Sequence
from pathlib import Path
from typing import Any

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from prompt_assembler.config.models import PromptDefinition
from prompt_assembler.errors import (
    InvalidDataError,
    TemplateFailureError,
    UnknownDataFormatError,
    WrongPromptKindError,
)

logger = logging.getLogger(__name__)

DATA_FORMATS = {
    ".json": "json",
    ".toml": "toml",
}


def data_format(path: Path | str) -> str | None:
    """Infer the structured data format from a file extension."""
    return DATA_FORMATS.get(Path(path).suffix.lower())


def looks_like_data_file(value: str) -> bool:
    """Check whether a CLI argument names a JSON or TOML file."""
    return data_format(value) is not None


def load_data(data_path: Path) -> dict[str, Any]:
    """Decode a structured data file into a template context.

    Args:
        data_path: Path to a .json or .toml file

    Returns:
        Mapping of string keys to decoded values

    Raises:
        UnknownDataFormatError: If the extension is not .json or .toml
        InvalidDataError: If the file cannot be read, decoded, or is not a mapping
    """
    fmt = data_format(data_path)
    if fmt is None:
        raise UnknownDataFormatError(data_path)

    try:
        content = data_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise InvalidDataError(data_path, str(e)) from e

    try:
        if fmt == "json":
            data = json.loads(content)
        else:
            data = tomllib.loads(content)
    except json.JSONDecodeError as e:
        raise InvalidDataError(data_path, f"invalid JSON: {e}") from e
    except tomllib.TOMLDecodeError as e:
        raise InvalidDataError(data_path, f"invalid TOML: {e}") from e

    if not isinstance(data, dict):
        raise InvalidDataError(
            data_path, f"top level must be a mapping, got {type(data).__name__}"
        )

    logger.debug(f"Loaded {fmt.upper()} data with {len(data)} key(s) from {data_path}")
    return data


def check_prompt_kind(
    definition: PromptDefinition,
    args: Sequence[str],
    data_path: Path | None,
) -> None:
    """Reject inputs that do not fit the prompt kind, before any rendering.

    Sequence prompts take positional arguments only; template prompts take a
    data file only.

    Raises:
        WrongPromptKindError: On a mismatch
    """
    if definition.is_sequence:
        if data_path is not None:
            raise WrongPromptKindError(definition.name, "does not accept structured data")
        return

    if data_path is None:
        raise WrongPromptKindError(
            definition.name, "requires a data file for structured context (JSON or TOML)"
        )
    if args:
        raise WrongPromptKindError(definition.name, "does not accept positional arguments")


def create_environment(search_roots: Sequence[Path]) -> Environment:
    """Create the Jinja2 environment used for template prompts."""
    return Environment(  # nosec B701 - generating raw text prompts, not HTML
        loader=FileSystemLoader([str(root) for root in search_roots]),
        autoescape=False,
        undefined=StrictUndefined,
        keep_trailing_newline=True,
    )


def render_template(
    template: str,
    search_roots: Sequence[Path],
    data_path: Path,
) -> str:
    """Render a template file against a structured data file.

    Args:
        template: Template filename, relative to the search roots
        search_roots: Ordered directories the template and its includes load from
        data_path: JSON or TOML file providing the render context

    Returns:
        Rendered text

    Raises:
        UnknownDataFormatError: If the data file extension is unsupported
        InvalidDataError: If the data file cannot be decoded
        TemplateFailureError: If Jinja2 fails to load or render the template
    """
    context = load_data(data_path)
    env = create_environment(search_roots)

    try:
        compiled = env.get_template(template)
        rendered = compiled.render(context)
    except TemplateError as e:
        logger.debug(f"Template '{template}' failed: {e!r}")
        raise TemplateFailureError(template, str(e) or type(e).__name__) from e
    except Exception as e:
        # Expressions evaluated during render raise ordinary Python errors
        logger.debug(f"Template '{template}' raised during render: {e!r}")
        raise TemplateFailureError(template, f"{type(e).__name__}: {e}") from e

    logger.debug(f"Rendered template '{template}' from {[str(r) for r in search_roots]}")
    return rendered
