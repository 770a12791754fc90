"""
Prompt assembly.

Provides:
- Positional placeholder substitution for sequence prompts
- Jinja2 rendering of template prompts against JSON/TOML data
- PromptAssembler, which ties both to a merged configuration
"""

from .assembler import (
    PromptAssembler,
    PromptPart,
    PromptProfile,
    PromptSummary,
    RenderRequest,
)
from .substitution import render_sequence, scan_placeholders, substitute
from .templates import check_prompt_kind, load_data, looks_like_data_file, render_template

__all__ = [
    "PromptAssembler",
    "PromptPart",
    "PromptProfile",
    "PromptSummary",
    "RenderRequest",
    "check_prompt_kind",
    "load_data",
    "looks_like_data_file",
    "render_sequence",
    "render_template",
    "scan_placeholders",
    "substitute",
]
