"""
PromptAssembler - render prompts from a merged configuration.

Usage:
    assembler = PromptAssembler.from_directory(Path("~/.config/prompt-assembler"))
    text = assembler.render_prompt("ticket", ["ABC-123", "Check logs"])
    text = assembler.render_prompt("troubleshoot", data_path=Path("vars.json"))
    text = assembler.assemble_parts(Path.cwd(), ["intro.md", "notes.md"])
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from prompt_assembler.config.loader import load_config
from prompt_assembler.config.models import MergedConfig, PromptDefinition, PromptKind
from prompt_assembler.errors import MissingFragmentFileError, RenderError, UnknownPromptError
from prompt_assembler.paths import resolve_part_path, resolve_prompt_root
from prompt_assembler.prompts.substitution import render_sequence, scan_placeholders
from prompt_assembler.prompts.templates import check_prompt_kind, render_template

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderRequest:
    """What to render: a named prompt, or raw parts when ``raw`` is set."""

    prompt: str | None = None
    parts: tuple[str, ...] = ()
    args: tuple[str, ...] = ()
    data_path: Path | None = None
    raw: bool = False


@dataclass(frozen=True)
class PromptPart:
    """A fragment or template file and its unrendered content."""

    path: Path
    content: str

    def to_dict(self) -> dict[str, Any]:
        return {"path": str(self.path), "content": self.content}


@dataclass(frozen=True)
class PromptProfile:
    """Unrendered contents of a prompt, as shown by `pa show --json`."""

    kind: PromptKind
    content: str
    parts: tuple[PromptPart, ...] = ()
    template: PromptPart | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"kind": self.kind}
        if self.parts:
            data["parts"] = [part.to_dict() for part in self.parts]
        if self.template is not None:
            data["template"] = self.template.to_dict()
        data["content"] = self.content
        return data


@dataclass(frozen=True)
class PromptSummary:
    """Listing entry for a prompt."""

    name: str
    kind: PromptKind
    source_path: Path
    description: str | None = None
    tags: tuple[str, ...] = ()
    vars: tuple[int, ...] = ()
    stdin_supported: bool = False
    last_modified: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to the JSON shape shared by `pa list --json` and `pa show --json`."""
        data: dict[str, Any] = {"name": self.name, "kind": self.kind}
        if self.description is not None:
            data["description"] = self.description
        data["tags"] = list(self.tags)
        data["vars"] = list(self.vars)
        data["stdin_supported"] = self.stdin_supported
        if self.last_modified is not None:
            data["last_modified"] = self.last_modified
        data["source_path"] = str(self.source_path)
        return data


def read_fragment(root: Path, filename: str) -> tuple[Path, str]:
    """Read a fragment file under a search root without newline translation.

    Raises:
        MissingFragmentFileError: If the file is missing or unreadable
    """
    path = root / filename
    try:
        return path, path.read_bytes().decode("utf-8")
    except FileNotFoundError as e:
        raise MissingFragmentFileError(filename, path) from e
    except (OSError, UnicodeDecodeError) as e:
        raise MissingFragmentFileError(filename, path, detail=str(e)) from e


def _format_mtime(timestamp: float) -> str:
    return datetime.fromtimestamp(timestamp, tz=UTC).isoformat(timespec="seconds")


class PromptAssembler:
    """Renders prompts defined by a MergedConfig.

    The configuration is passed in explicitly and never mutated.
    """

    def __init__(self, config: MergedConfig):
        self._config = config

    @classmethod
    def from_directory(cls, base_dir: Path | str) -> PromptAssembler:
        """Construct an assembler by loading configuration from ``base_dir``."""
        return cls(load_config(base_dir))

    @property
    def config(self) -> MergedConfig:
        return self._config

    def has_prompts(self) -> bool:
        return bool(self._config.prompts)

    def prompt_names(self) -> list[str]:
        return self._config.names()

    def get_definition(self, name: str) -> PromptDefinition:
        """Look up a prompt definition.

        Raises:
            UnknownPromptError: If the prompt is not defined
        """
        definition = self._config.get(name)
        if definition is None:
            raise UnknownPromptError(name)
        return definition

    def search_root(self, definition: PromptDefinition) -> Path:
        return resolve_prompt_root(definition, self._config.library_prompt_path)

    def render(self, request: RenderRequest, working_dir: Path | None = None) -> str:
        """Render a request in prompt mode or raw parts mode."""
        if request.raw:
            return self.assemble_parts(working_dir or Path.cwd(), request.parts)
        if request.prompt is None:
            raise RenderError("no prompt name provided")
        return self.render_prompt(request.prompt, request.args, request.data_path)

    def render_prompt(
        self,
        name: str,
        args: Sequence[str] = (),
        data_path: Path | None = None,
    ) -> str:
        """Assemble the prompt identified by ``name``.

        Args:
            name: Prompt name
            args: Positional arguments for sequence prompts
            data_path: JSON/TOML data file for template prompts

        Returns:
            Rendered text

        Raises:
            UnknownPromptError: If the prompt is not defined
            RenderError: If the prompt cannot be rendered
        """
        definition = self.get_definition(name)
        check_prompt_kind(definition, args, data_path)
        root = self.search_root(definition)

        if definition.template is not None:
            assert data_path is not None
            logger.debug(f"Rendering template prompt '{name}' from {root}")
            return render_template(definition.template, [root], data_path)

        logger.debug(f"Rendering sequence prompt '{name}' from {root}")
        fragments = [read_fragment(root, filename) for filename in definition.prompts or ()]
        return render_sequence(fragments, args)

    def assemble_parts(self, working_dir: Path, part_names: Sequence[str]) -> str:
        """Concatenate raw part files without placeholder substitution.

        Raises:
            RenderError: If no parts are given
            MissingFragmentFileError: If a part cannot be located or read
        """
        if not part_names:
            raise RenderError("no parts provided")

        fragments: list[tuple[Path, str]] = []
        for raw_name in part_names:
            path = resolve_part_path(raw_name, working_dir, self._config)
            fragments.append(read_fragment(path.parent, path.name))
        return render_sequence(fragments, raw=True)

    def _prompt_files(self, definition: PromptDefinition) -> list[Path]:
        root = self.search_root(definition)
        if definition.template is not None:
            return [root / definition.template]
        return [root / filename for filename in definition.prompts or ()]

    def describe(self, name: str) -> PromptSummary:
        """Build the listing entry for a prompt.

        Missing fragment files are skipped here; `pa validate` reports them.
        """
        definition = self.get_definition(name)
        files = self._prompt_files(definition)

        mtimes = [path.stat().st_mtime for path in files if path.is_file()]
        last_modified = _format_mtime(max(mtimes)) if mtimes else None

        indices: set[int] = set()
        stdin_supported = False
        if definition.is_sequence:
            for position, path in enumerate(files):
                try:
                    text = path.read_bytes().decode("utf-8")
                except (OSError, UnicodeDecodeError):
                    continue
                found = scan_placeholders(text)
                if position == 0:
                    stdin_supported = 0 in found
                indices |= found

        return PromptSummary(
            name=definition.name,
            kind=definition.kind,
            source_path=definition.source_path,
            description=definition.description,
            tags=definition.tags,
            vars=tuple(sorted(indices)),
            stdin_supported=stdin_supported,
            last_modified=last_modified,
        )

    def describe_all(self) -> list[PromptSummary]:
        return [self.describe(name) for name in self.prompt_names()]

    def profile(self, name: str) -> PromptProfile:
        """Collect the unrendered content of a prompt's files.

        Raises:
            MissingFragmentFileError: If a file cannot be read
        """
        definition = self.get_definition(name)
        root = self.search_root(definition)

        if definition.template is not None:
            path, content = read_fragment(root, definition.template)
            part = PromptPart(path=path, content=content)
            return PromptProfile(kind="template", content=content, template=part)

        parts = tuple(
            PromptPart(path=path, content=content)
            for path, content in (read_fragment(root, f) for f in definition.prompts or ())
        )
        return PromptProfile(
            kind="sequence",
            content="".join(part.content for part in parts),
            parts=parts,
        )
