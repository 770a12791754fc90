"""
Exception types for prompt-assembler.

Configuration errors, unknown prompt lookups and render errors are kept in
separate families so the CLI can map each to its own exit status.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prompt_assembler.diagnostics import Diagnostic


class PromptAssemblerError(Exception):
    """Base exception for prompt-assembler errors."""

    pass


# Configuration errors
class ConfigError(PromptAssemblerError):
    """Base exception for configuration loading errors."""

    pass


class ConfigMissingError(ConfigError):
    """Raised when the base configuration file does not exist."""

    def __init__(self, path: Path, reason: str = "configuration file not found"):
        self.path = path
        self.reason = reason
        super().__init__(f"{reason}: {path}")


class ConfigReadError(ConfigMissingError):
    """Raised when a configuration file or directory exists but cannot be read."""

    def __init__(self, path: Path, detail: str):
        self.detail = detail
        super().__init__(path, reason=f"failed to read configuration ({detail})")


class ConfigParseError(ConfigError):
    """Raised when a configuration file is not valid TOML."""

    def __init__(
        self,
        path: Path,
        detail: str,
        line: int | None = None,
        column: int | None = None,
    ):
        self.path = path
        self.detail = detail
        self.line = line
        self.column = column
        location = f"{path}:{line}" if line is not None else str(path)
        super().__init__(f"{location}: invalid TOML: {detail}")

    def to_diagnostic(self) -> Diagnostic:
        from prompt_assembler.diagnostics import Diagnostic

        return Diagnostic(
            file=self.path,
            line=self.line,
            code="parse-error",
            message=f"invalid TOML: {self.detail}",
            severity="error",
        )


class InvalidDefinitionError(ConfigError):
    """Raised after merging when one or more prompt definitions are invalid."""

    def __init__(self, diagnostics: list[Diagnostic]):
        self.diagnostics = diagnostics
        count = len(diagnostics)
        noun = "problem" if count == 1 else "problems"
        super().__init__(f"invalid configuration: {count} {noun} found")


# Lookup errors
class UnknownPromptError(PromptAssemblerError):
    """Raised when a prompt name is not defined in the merged configuration."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"unknown prompt: {name}")


# Render errors
class RenderError(PromptAssemblerError):
    """Base exception for errors while assembling a prompt."""

    pass


class MissingArgumentError(RenderError):
    """Raised when a placeholder has no matching positional argument."""

    def __init__(self, index: int):
        self.index = index
        super().__init__(f"missing argument for placeholder {{{index}}}")


class WrongPromptKindError(RenderError):
    """Raised when the inputs do not match the prompt kind (sequence vs template)."""

    def __init__(self, name: str, reason: str):
        self.name = name
        self.reason = reason
        super().__init__(f"prompt '{name}' {reason}")


class UnknownDataFormatError(RenderError):
    """Raised when a data file extension is neither .json nor .toml."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(f"data file must use JSON or TOML format: {path}")


class InvalidDataError(RenderError):
    """Raised when a structured data file cannot be read or decoded."""

    def __init__(self, path: Path, detail: str):
        self.path = path
        self.detail = detail
        super().__init__(f"failed to load data file {path}: {detail}")


class TemplateFailureError(RenderError):
    """Raised when the templating backend fails to render a template."""

    def __init__(self, template: str, detail: str):
        self.template = template
        self.detail = detail
        super().__init__(f"rendering template '{template}' failed: {detail}")


class MissingFragmentFileError(RenderError):
    """Raised when a fragment or part file cannot be found or read."""

    def __init__(self, name: str, path: Path | None = None, detail: str | None = None):
        self.name = name
        self.path = path
        self.detail = detail
        message = f"missing part '{name}'"
        if path is not None:
            message += f" at {path}"
        if detail:
            message += f" ({detail})"
        super().__init__(message)
