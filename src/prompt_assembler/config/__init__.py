"""
Configuration package for prompt-assembler.

Module structure:
- models.py: Pydantic schema for config.toml / conf.d fragments and the
  immutable records built from them
- loader.py: Loading and merging of the base file and override fragments
"""

from prompt_assembler.config.loader import (
    CONF_D_DIRNAME,
    CONFIG_FILENAME,
    discover_fragments,
    load_config,
    load_fragment,
    parse_fragment,
)
from prompt_assembler.config.models import (
    ConfigFragment,
    LibraryFile,
    MergedConfig,
    PromptDefinition,
    PromptKind,
    PromptTable,
    Supersession,
)

__all__ = [
    "CONF_D_DIRNAME",
    "CONFIG_FILENAME",
    "ConfigFragment",
    "LibraryFile",
    "MergedConfig",
    "PromptDefinition",
    "PromptKind",
    "PromptTable",
    "Supersession",
    "discover_fragments",
    "load_config",
    "load_fragment",
    "parse_fragment",
]
