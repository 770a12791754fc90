"""
Read-only validation of a merged configuration.

Checks every prompt definition and reports:
- invalid-definition: not exactly one of prompts/template (or an empty sequence)
- missing-fragment: a sequence fragment is missing or unreadable
- missing-template: a template file is missing
- duplicate-name (warning): a later file overrode an earlier definition
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from prompt_assembler.config.models import MergedConfig, PromptDefinition
from prompt_assembler.diagnostics import Diagnostic, ValidationReport
from prompt_assembler.paths import resolve_prompt_root

logger = logging.getLogger(__name__)


def _is_readable_file(path: Path) -> bool:
    return path.is_file() and os.access(path, os.R_OK)


def _check_definition(
    definition: PromptDefinition,
    library_prompt_path: Path | None,
) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []

    def error(code: str, message: str) -> Diagnostic:
        return Diagnostic(
            file=definition.source_path,
            line=definition.defined_at_line,
            code=code,
            message=message,
            severity="error",
            prompt=definition.name,
        )

    name = definition.name
    has_prompts = definition.prompts is not None
    has_template = definition.template is not None
    if has_prompts and has_template:
        message = f"prompt '{name}': prompts and template are exclusive options"
        return [error("invalid-definition", message)]
    if not has_prompts and not has_template:
        message = f"prompt '{name}' must define either 'prompts' or 'template'"
        return [error("invalid-definition", message)]
    if has_prompts and not definition.prompts:
        message = f"prompt '{name}': prompt sequence cannot be empty"
        return [error("invalid-definition", message)]

    root = resolve_prompt_root(definition, library_prompt_path)

    if definition.template is not None:
        if not _is_readable_file(root / definition.template):
            message = f"prompt '{name}': template '{definition.template}' not found in {root}"
            diagnostics.append(error("missing-template", message))
        return diagnostics

    for filename in definition.prompts or ():
        if not _is_readable_file(root / filename):
            message = f"prompt '{name}': fragment '{filename}' not found in {root}"
            diagnostics.append(error("missing-fragment", message))
    return diagnostics


def validate(config: MergedConfig) -> ValidationReport:
    """Validate a merged configuration without modifying it.

    Args:
        config: Configuration built by load_config()

    Returns:
        ValidationReport ordered by (file path, prompt name)
    """
    report = ValidationReport()

    for definition in config.prompts.values():
        for diagnostic in _check_definition(definition, config.library_prompt_path):
            report.add(diagnostic)

    for supersession in config.supersessions:
        superseded = supersession.superseded
        report.add(
            Diagnostic(
                file=superseded.source_path,
                line=superseded.defined_at_line,
                code="duplicate-name",
                message=(
                    f"prompt '{supersession.name}' is overridden by "
                    f"{supersession.replacement.source_path}"
                ),
                severity="warning",
                prompt=supersession.name,
            )
        )

    report.sort()
    logger.debug(
        f"Validated {len(config.prompts)} prompt(s): "
        f"{len(report.errors)} error(s), {len(report.warnings)} warning(s)"
    )
    return report
