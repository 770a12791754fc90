"""
Path helpers: config directory discovery and fragment search roots.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING

from prompt_assembler.errors import MissingFragmentFileError

if TYPE_CHECKING:
    from prompt_assembler.config.models import MergedConfig, PromptDefinition

logger = logging.getLogger(__name__)

APP_DIR_NAME = "prompt-assembler"


def get_config_dir() -> Path:
    """Get the prompt library directory.

    Resolution order:
    1. PA_CONFIG_DIR environment variable
    2. $XDG_CONFIG_HOME/prompt-assembler
    3. ~/.config/prompt-assembler

    Returns:
        Path to the configuration directory (not guaranteed to exist)
    """
    override = os.environ.get("PA_CONFIG_DIR")
    if override:
        return Path(override).expanduser()

    xdg_home = os.environ.get("XDG_CONFIG_HOME")
    if xdg_home:
        return Path(xdg_home).expanduser() / APP_DIR_NAME

    return Path.home() / ".config" / APP_DIR_NAME


def expand_path(raw: str, relative_to: Path) -> Path:
    """Resolve a configured path string.

    ``~`` is expanded to the home directory; other relative paths are taken
    relative to ``relative_to`` (the directory of the defining file).
    """
    candidate = Path(raw).expanduser()
    if candidate.is_absolute():
        return candidate
    return relative_to / candidate


def resolve_prompt_root(
    definition: PromptDefinition,
    library_prompt_path: Path | None,
) -> Path:
    """Determine the directory a prompt's fragments are read from.

    First match wins: the prompt's own ``prompt_path``, the library-wide
    ``prompt_path``, then the directory containing the defining file.
    """
    if definition.prompt_path is not None:
        return definition.prompt_path
    if library_prompt_path is not None:
        return library_prompt_path
    return definition.source_path.parent


def resolve_part_path(raw: str, working_dir: Path, config: MergedConfig) -> Path:
    """Locate an ad-hoc part file.

    Absolute paths must exist as given. Relative names are tried against the
    working directory, then the library ``prompt_path``, then the
    configuration directory.

    Raises:
        MissingFragmentFileError: If no candidate exists
    """
    candidate = Path(raw).expanduser()

    if candidate.is_absolute():
        if candidate.is_file():
            return candidate
        raise MissingFragmentFileError(raw)

    search_dirs = [working_dir]
    if config.library_prompt_path is not None:
        search_dirs.append(config.library_prompt_path)
    search_dirs.append(config.root)

    for search_dir in search_dirs:
        path = search_dir / candidate
        if path.is_file():
            logger.debug(f"Resolved part '{raw}' to {path}")
            return path

    raise MissingFragmentFileError(raw)
