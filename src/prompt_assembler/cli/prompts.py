"""
Prompt rendering and inspection commands: run, list, show, parts.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from prompt_assembler.cli.utils import (
    echo_json,
    get_context_config_dir,
    handle_errors,
    json_envelope,
    load_assembler,
    read_stdin_if_available,
)
from prompt_assembler.config import MergedConfig, load_config
from prompt_assembler.errors import (
    ConfigMissingError,
    ConfigReadError,
    MissingFragmentFileError,
    RenderError,
    WrongPromptKindError,
)
from prompt_assembler.prompts import (
    PromptAssembler,
    PromptSummary,
    RenderRequest,
    looks_like_data_file,
)

logger = logging.getLogger(__name__)


@click.command(
    "run",
    context_settings={"ignore_unknown_options": True, "allow_interspersed_args": False},
)
@click.argument("prompt")
@click.argument("args", nargs=-1, type=click.UNPROCESSED)
@click.pass_context
def run_prompt(ctx: click.Context, prompt: str, args: tuple[str, ...]) -> None:
    """Render PROMPT with positional ARGS (or a data file for template prompts).

    This is the default command: `pa NAME ARGS...` is the same as
    `pa run NAME ARGS...`.

    For sequence prompts, piped stdin becomes the first argument. A first
    argument ending in .json or .toml is treated as a data file and rejected,
    even when it was meant as literal text.
    """
    with handle_errors():
        assembler = load_assembler(ctx)
        definition = assembler.get_definition(prompt)

        positional = list(args)
        data_path: Path | None = None

        if definition.is_sequence:
            if positional and looks_like_data_file(positional[0]):
                raise WrongPromptKindError(prompt, "does not accept structured data")
            stdin_arg = read_stdin_if_available()
            if stdin_arg is not None:
                positional.insert(0, stdin_arg)
        else:
            if not positional:
                raise WrongPromptKindError(
                    prompt, "requires a data file for structured context (JSON or TOML)"
                )
            data_path = Path(positional.pop(0))

        request = RenderRequest(prompt=prompt, args=tuple(positional), data_path=data_path)
        output = assembler.render(request)

    click.echo(output, nl=False)


@click.command("list")
@click.option("--json", "json_format", is_flag=True, help="Output as JSON")
@click.pass_context
def list_prompts(ctx: click.Context, json_format: bool) -> None:
    """List available prompts."""
    with handle_errors():
        assembler = load_assembler(ctx)

        if json_format:
            summaries = assembler.describe_all()
            echo_json(json_envelope(prompts=[s.to_dict() for s in summaries]))
            return

        if not assembler.has_prompts():
            raise RenderError("no prompts defined; ensure config.toml exists with prompt entries")

        for name in assembler.prompt_names():
            click.echo(name)


def _echo_summary(summary: PromptSummary, assembler: PromptAssembler) -> None:
    definition = assembler.get_definition(summary.name)

    click.echo(f"name: {summary.name}")
    click.echo(f"kind: {summary.kind}")
    if summary.description:
        click.echo(f"description: {summary.description}")
    if summary.tags:
        click.echo(f"tags: {', '.join(summary.tags)}")
    click.echo(f"stdin supported: {'yes' if summary.stdin_supported else 'no'}")
    if summary.last_modified:
        click.echo(f"last modified: {summary.last_modified}")
    click.echo(f"source: {summary.source_path}")
    click.echo(f"search path: {assembler.search_root(definition)}")

    if definition.template is not None:
        click.echo(f"template: {definition.template}")
    else:
        click.echo("fragments:")
        for filename in definition.prompts or ():
            click.echo(f"  - {filename}")

    if summary.vars:
        click.echo("vars: " + ", ".join(f"{{{index}}}" for index in summary.vars))


@click.command("show")
@click.argument("name")
@click.option("--json", "json_format", is_flag=True, help="Output as JSON")
@click.pass_context
def show_prompt(ctx: click.Context, name: str, json_format: bool) -> None:
    """Show prompt metadata."""
    with handle_errors():
        assembler = load_assembler(ctx)
        summary = assembler.describe(name)

        if not json_format:
            _echo_summary(summary, assembler)
            return

        data = summary.to_dict()
        try:
            data["profile"] = assembler.profile(name).to_dict()
        except MissingFragmentFileError as e:
            logger.warning(f"Omitting profile for '{name}': {e}")
        echo_json(data)


@click.command("parts")
@click.argument("files", nargs=-1, required=True)
@click.pass_context
def parts(ctx: click.Context, files: tuple[str, ...]) -> None:
    """Concatenate raw prompt parts without placeholder substitution.

    FILES are looked up in the current directory, then the library
    prompt_path, then the configuration directory.
    """
    config_dir = get_context_config_dir(ctx)

    with handle_errors():
        try:
            config = load_config(config_dir)
        except ConfigReadError:
            raise
        except ConfigMissingError:
            logger.debug(f"No configuration in {config_dir}; resolving parts from cwd only")
            config = MergedConfig(root=config_dir.expanduser().absolute())

        request = RenderRequest(parts=files, raw=True)
        output = PromptAssembler(config).render(request, working_dir=Path.cwd())

    click.echo(output, nl=False)
