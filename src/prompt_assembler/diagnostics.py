"""Diagnostics reported by the configuration loader and validator."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

Severity = Literal["error", "warning"]


@dataclass(frozen=True)
class Diagnostic:
    """A single problem found in a configuration file."""

    file: Path
    code: str
    message: str
    severity: Severity = "error"
    line: int | None = None
    prompt: str | None = None

    def sort_key(self) -> tuple[str, str, str, int]:
        return (str(self.file), self.prompt or "", self.code, self.line or 0)

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape used by `pa validate --json`."""
        data: dict[str, Any] = {"file": str(self.file)}
        if self.line is not None:
            data["line"] = self.line
        data["code"] = self.code
        data["message"] = self.message
        data["severity"] = self.severity
        return data

    def format(self) -> str:
        location = f"{self.file}:{self.line}" if self.line is not None else str(self.file)
        return f"{self.severity}: {location}: {self.message} ({self.code})"


@dataclass
class ValidationReport:
    """Errors and warnings for a merged configuration."""

    errors: list[Diagnostic] = field(default_factory=list)
    warnings: list[Diagnostic] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add(self, diagnostic: Diagnostic) -> None:
        if diagnostic.severity == "error":
            self.errors.append(diagnostic)
        else:
            self.warnings.append(diagnostic)

    def sort(self) -> None:
        """Order diagnostics by file path, then prompt name."""
        self.errors.sort(key=Diagnostic.sort_key)
        self.warnings.sort(key=Diagnostic.sort_key)
