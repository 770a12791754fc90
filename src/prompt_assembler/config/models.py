"""
Configuration models for the prompt library.

The TOML schema is validated with Pydantic models (``LibraryFile`` and
``PromptTable``). Validated tables are turned into immutable
``PromptDefinition`` records tagged with the file that defined them.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

PromptKind = Literal["sequence", "template"]


class PromptTable(BaseModel):
    """Schema of a single ``[prompt.<name>]`` table."""

    model_config = ConfigDict(extra="forbid")

    prompt_path: str | None = Field(
        default=None,
        description="Fragment search root for this prompt (overrides the library default)",
    )
    description: str | None = Field(
        default=None,
        description="Human readable summary shown by `pa list` and `pa show`",
    )
    tags: list[str] = Field(
        default_factory=list,
        description="Free-form labels",
    )
    prompts: list[str] | None = Field(
        default=None,
        description="Ordered fragment filenames (sequence prompt)",
    )
    template: str | None = Field(
        default=None,
        description="Template filename (template prompt)",
    )

    @field_validator("prompts")
    @classmethod
    def validate_prompts_not_empty(cls, v: list[str] | None) -> list[str] | None:
        """Validate a sequence prompt lists at least one fragment."""
        if v is not None and not v:
            raise ValueError("prompt sequence cannot be empty")
        return v

    @model_validator(mode="after")
    def validate_kind(self) -> PromptTable:
        """Validate exactly one of prompts/template is set."""
        if self.prompts is not None and self.template is not None:
            raise ValueError("prompts and template are exclusive options")
        if self.prompts is None and self.template is None:
            raise ValueError("prompt must define either 'prompts' or 'template'")
        return self


class LibraryFile(BaseModel):
    """Top-level schema of ``config.toml`` and ``conf.d/*.toml``.

    Prompt tables are kept as raw mappings here and validated one by one, so a
    single bad prompt does not hide problems in the others.
    """

    model_config = ConfigDict(extra="forbid")

    prompt_path: str | None = Field(
        default=None,
        description="Library-wide default fragment search root",
    )
    prompt: dict[str, dict[str, Any]] = Field(
        default_factory=dict,
        description="Prompt definitions keyed by name",
    )


@dataclass(frozen=True)
class PromptDefinition:
    """A prompt as defined by one configuration file."""

    name: str
    source_path: Path
    prompts: tuple[str, ...] | None = None
    template: str | None = None
    description: str | None = None
    tags: tuple[str, ...] = ()
    prompt_path: Path | None = None
    defined_at_line: int | None = None

    @property
    def kind(self) -> PromptKind:
        return "template" if self.template is not None else "sequence"

    @property
    def is_sequence(self) -> bool:
        return self.kind == "sequence"


@dataclass(frozen=True)
class ConfigFragment:
    """The parsed contents of one configuration file."""

    path: Path
    prompt_path: Path | None = None
    definitions: tuple[PromptDefinition, ...] = ()


@dataclass(frozen=True)
class Supersession:
    """Record of a later-loaded definition replacing an earlier one."""

    name: str
    superseded: PromptDefinition
    replacement: PromptDefinition


@dataclass(frozen=True)
class MergedConfig:
    """All configuration fragments folded into one prompt namespace."""

    root: Path
    library_prompt_path: Path | None = None
    prompts: Mapping[str, PromptDefinition] = field(default_factory=dict)
    sources: tuple[Path, ...] = ()
    supersessions: tuple[Supersession, ...] = ()

    def get(self, name: str) -> PromptDefinition | None:
        return self.prompts.get(name)

    def names(self) -> list[str]:
        return sorted(self.prompts)
