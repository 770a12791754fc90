"""
Configuration loading and merging.

Loads ``config.toml`` from the library directory, then every ``conf.d/*.toml``
fragment in byte-wise filename order. Prompt definitions from later files
replace earlier definitions of the same name entirely; a later library-wide
``prompt_path`` replaces an earlier one.

Structural problems (invalid prompt tables, unknown keys) are collected across
all files and reported together via InvalidDefinitionError.
"""

from __future__ import annotations

import logging
import os
import re
import tomllib
from collections.abc import Callable
from pathlib import Path
from types import MappingProxyType
from typing import Any

from pydantic import ValidationError

from prompt_assembler.config.models import (
    ConfigFragment,
    LibraryFile,
    MergedConfig,
    PromptDefinition,
    PromptTable,
    Supersession,
)
from prompt_assembler.diagnostics import Diagnostic
from prompt_assembler.errors import (
    ConfigMissingError,
    ConfigParseError,
    ConfigReadError,
    InvalidDefinitionError,
)
from prompt_assembler.paths import expand_path

logger = logging.getLogger(__name__)

CONFIG_FILENAME = "config.toml"
CONF_D_DIRNAME = "conf.d"

_LOCATION_PATTERN = re.compile(r"\s*\(at line (\d+), column (\d+)\)\s*$")


def read_toml(path: Path) -> tuple[dict[str, Any], str]:
    """Read and decode a TOML file.

    Returns:
        Tuple of (decoded document, raw text)

    Raises:
        ConfigReadError: If the file cannot be read
        ConfigParseError: If the file is not valid TOML
    """
    try:
        text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ConfigReadError(path, str(e)) from e

    try:
        return tomllib.loads(text), text
    except tomllib.TOMLDecodeError as e:
        detail, line, column = _split_decode_error(e)
        raise ConfigParseError(path, detail, line=line, column=column) from e


def _split_decode_error(err: tomllib.TOMLDecodeError) -> tuple[str, int | None, int | None]:
    """Extract message, line and column from a TOML decode error."""
    message = str(err)
    # Python 3.14+ exposes these as attributes
    line = getattr(err, "lineno", None)
    column = getattr(err, "colno", None)
    detail = getattr(err, "msg", None)

    match = _LOCATION_PATTERN.search(message)
    if match:
        if line is None:
            line, column = int(match.group(1)), int(match.group(2))
        message = message[: match.start()]

    return detail or message, line, column


def _probe(path: Path, check: Callable[[Path], bool]) -> bool:
    """Run a filesystem existence check, reporting access errors as ConfigReadError."""
    try:
        return check(path)
    except OSError as e:
        raise ConfigReadError(path, str(e)) from e


def discover_fragments(base_dir: Path) -> list[Path]:
    """List override fragments in ``conf.d`` sorted by byte-wise filename.

    A missing ``conf.d`` directory means no fragments.
    """
    conf_d = base_dir / CONF_D_DIRNAME
    if not _probe(conf_d, Path.is_dir):
        return []

    try:
        entries = [p for p in conf_d.iterdir() if p.suffix == ".toml" and p.is_file()]
    except OSError as e:
        raise ConfigReadError(conf_d, str(e)) from e

    return sorted(entries, key=lambda p: os.fsencode(p.name))


def find_definition_line(text: str, name: str) -> int | None:
    """Find the 1-based line where ``[prompt.<name>]`` is declared."""
    keys = "|".join(re.escape(k) for k in (name, f'"{name}"', f"'{name}'"))
    pattern = re.compile(
        rf"^[ \t]*(?:\[[ \t]*prompt[ \t]*\.[ \t]*(?:{keys})[ \t]*\]"
        rf"|prompt[ \t]*\.[ \t]*(?:{keys})[ \t]*[.=])",
        re.MULTILINE,
    )
    match = pattern.search(text)
    if match is None:
        return None
    return text.count("\n", 0, match.start()) + 1


def _format_error(err: Any) -> str:
    """Render one pydantic error entry as a short message."""
    loc = ".".join(str(part) for part in err.get("loc", ()))
    if err.get("type") == "extra_forbidden":
        return f"unknown key '{loc}'"

    msg = str(err.get("msg", ""))
    msg = msg.removeprefix("Value error, ")
    return f"{loc}: {msg}" if loc else msg


def parse_fragment(
    path: Path,
    data: dict[str, Any],
    text: str = "",
) -> tuple[ConfigFragment, list[Diagnostic]]:
    """Turn a decoded TOML document into a ConfigFragment.

    Args:
        path: Absolute path of the file (recorded as each definition's source)
        data: Decoded TOML document
        text: Raw file text, used to find definition line numbers

    Returns:
        Tuple of (fragment with the valid definitions, structural diagnostics)
    """
    diagnostics: list[Diagnostic] = []
    base = path.parent

    try:
        library = LibraryFile.model_validate(data)
        prompt_path_raw = library.prompt_path
        tables: dict[str, Any] = dict(library.prompt)
    except ValidationError as e:
        reported: set[str] = set()
        for err in e.errors():
            code = "unknown-key" if err.get("type") == "extra_forbidden" else "invalid-definition"
            loc = err.get("loc", ())
            prompt_name = str(loc[1]) if len(loc) > 1 and loc[0] == "prompt" else None
            if prompt_name is not None:
                reported.add(prompt_name)
            line = find_definition_line(text, prompt_name) if prompt_name else None
            diagnostics.append(
                Diagnostic(
                    file=path,
                    line=line,
                    code=code,
                    message=_format_error(err),
                    prompt=prompt_name,
                )
            )
        # Keep checking the prompt tables the top-level schema did not reject
        raw_prompts = data.get("prompt")
        tables = {}
        if isinstance(raw_prompts, dict):
            tables = {k: v for k, v in raw_prompts.items() if k not in reported}
        raw_path = data.get("prompt_path")
        prompt_path_raw = raw_path if isinstance(raw_path, str) else None

    definitions: list[PromptDefinition] = []
    for name, table in tables.items():
        definition, problems = _parse_prompt_table(path, name, table, text)
        diagnostics.extend(problems)
        if definition is not None:
            definitions.append(definition)

    prompt_path = expand_path(prompt_path_raw, base) if prompt_path_raw is not None else None
    fragment = ConfigFragment(path=path, prompt_path=prompt_path, definitions=tuple(definitions))
    return fragment, diagnostics


def _parse_prompt_table(
    path: Path,
    name: str,
    table: Any,
    text: str,
) -> tuple[PromptDefinition | None, list[Diagnostic]]:
    """Validate one ``[prompt.<name>]`` table."""
    line = find_definition_line(text, name)
    try:
        model = PromptTable.model_validate(table)
    except ValidationError as e:
        diagnostics = [
            Diagnostic(
                file=path,
                line=line,
                code="invalid-definition",
                message=f"prompt '{name}': {_format_error(err)}",
                prompt=name,
            )
            for err in e.errors()
        ]
        return None, diagnostics

    definition = PromptDefinition(
        name=name,
        source_path=path,
        prompts=tuple(model.prompts) if model.prompts is not None else None,
        template=model.template,
        description=model.description,
        tags=tuple(model.tags),
        prompt_path=(
            expand_path(model.prompt_path, path.parent) if model.prompt_path is not None else None
        ),
        defined_at_line=line,
    )
    return definition, []


def load_fragment(path: Path) -> tuple[ConfigFragment, list[Diagnostic]]:
    """Read and parse a single configuration file."""
    data, text = read_toml(path)
    fragment, diagnostics = parse_fragment(path, data, text)
    logger.debug(f"Loaded {len(fragment.definitions)} prompt(s) from {path}")
    return fragment, diagnostics


def load_config(base_dir: Path | str) -> MergedConfig:
    """
    Load and merge the prompt library configuration.

    Args:
        base_dir: Library directory containing config.toml and optional conf.d/

    Returns:
        Immutable MergedConfig

    Raises:
        ConfigMissingError: If config.toml does not exist
        ConfigReadError: If a configuration file cannot be read
        ConfigParseError: If a configuration file is not valid TOML
        InvalidDefinitionError: If any prompt definition is structurally invalid
    """
    root = Path(base_dir).expanduser().absolute()
    base_file = root / CONFIG_FILENAME

    if not _probe(base_file, Path.is_file):
        raise ConfigMissingError(base_file)

    files = [base_file, *discover_fragments(root)]

    prompts: dict[str, PromptDefinition] = {}
    supersessions: list[Supersession] = []
    library_prompt_path: Path | None = None
    diagnostics: list[Diagnostic] = []

    for path in files:
        fragment, problems = load_fragment(path)
        diagnostics.extend(problems)

        if fragment.prompt_path is not None:
            library_prompt_path = fragment.prompt_path

        for definition in fragment.definitions:
            previous = prompts.get(definition.name)
            if previous is not None:
                logger.debug(
                    f"Prompt '{definition.name}' from {previous.source_path} "
                    f"overridden by {definition.source_path}"
                )
                supersessions.append(
                    Supersession(
                        name=definition.name,
                        superseded=previous,
                        replacement=definition,
                    )
                )
            prompts[definition.name] = definition

    if diagnostics:
        diagnostics.sort(key=Diagnostic.sort_key)
        raise InvalidDefinitionError(diagnostics)

    return MergedConfig(
        root=root,
        library_prompt_path=library_prompt_path,
        prompts=MappingProxyType(prompts),
        sources=tuple(files),
        supersessions=tuple(supersessions),
    )
