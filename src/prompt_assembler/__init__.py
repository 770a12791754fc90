"""
prompt-assembler - assemble prompts from reusable fragments.

Prompts are declared in ``config.toml`` (plus ``conf.d/*.toml`` overrides) as
either an ordered list of fragment files with ``{0}``..``{8}`` placeholders or
a single Jinja2 template rendered against JSON/TOML data.
"""

from prompt_assembler.config import MergedConfig, PromptDefinition, load_config
from prompt_assembler.diagnostics import Diagnostic, ValidationReport
from prompt_assembler.errors import (
    ConfigError,
    ConfigMissingError,
    ConfigParseError,
    ConfigReadError,
    InvalidDataError,
    InvalidDefinitionError,
    MissingArgumentError,
    MissingFragmentFileError,
    PromptAssemblerError,
    RenderError,
    TemplateFailureError,
    UnknownDataFormatError,
    UnknownPromptError,
    WrongPromptKindError,
)
from prompt_assembler.paths import resolve_prompt_root
from prompt_assembler.prompts import PromptAssembler, RenderRequest
from prompt_assembler.validation import validate

__version__ = "0.3.0"

__all__ = [
    "ConfigError",
    "ConfigMissingError",
    "ConfigParseError",
    "ConfigReadError",
    "Diagnostic",
    "InvalidDataError",
    "InvalidDefinitionError",
    "MergedConfig",
    "MissingArgumentError",
    "MissingFragmentFileError",
    "PromptAssembler",
    "PromptAssemblerError",
    "PromptDefinition",
    "RenderError",
    "RenderRequest",
    "TemplateFailureError",
    "UnknownDataFormatError",
    "UnknownPromptError",
    "ValidationReport",
    "WrongPromptKindError",
    "__version__",
    "load_config",
    "resolve_prompt_root",
    "validate",
]
