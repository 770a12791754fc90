"""
prompt-assembler CLI entry point.
"""

import logging
from pathlib import Path

import click
from click.shell_completion import CompletionItem

from prompt_assembler import __version__
from prompt_assembler.errors import PromptAssemblerError
from prompt_assembler.paths import get_config_dir
from prompt_assembler.prompts import PromptAssembler

from .completions import completions
from .init import init
from .prompts import list_prompts, parts, run_prompt, show_prompt
from .validate import validate_config

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """
    Configure logging for CLI.

    Logs go to stderr so rendered prompts on stdout stay clean.

    Args:
        verbose: If True, enable DEBUG level logging
    """
    log_level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


class PromptGroup(click.Group):
    """Command group that treats an unknown first word as a prompt name.

    ``pa ticket ABC-123`` is dispatched as ``pa run ticket ABC-123``.
    """

    default_command = "run"

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        if args and args[0] not in self.commands and not args[0].startswith("-"):
            args = [self.default_command, *args]
        return super().resolve_command(ctx, args)

    def shell_complete(self, ctx: click.Context, incomplete: str) -> list[CompletionItem]:
        items = super().shell_complete(ctx, incomplete)
        # The group callback does not run during completion
        config_dir = ctx.params.get("config_dir") or get_config_dir()
        try:
            names = PromptAssembler.from_directory(config_dir).prompt_names()
        except PromptAssemblerError as e:
            logger.debug(f"Prompt name completion unavailable: {e}")
            return items
        items.extend(
            CompletionItem(name, help="prompt") for name in names if name.startswith(incomplete)
        )
        return items


@click.group(cls=PromptGroup, no_args_is_help=True)
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    envvar="PA_CONFIG_DIR",
    help="Prompt library directory (default: $XDG_CONFIG_HOME/prompt-assembler)",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
@click.version_option(__version__, prog_name="pa")
@click.pass_context
def cli(ctx: click.Context, config_dir: Path | None, verbose: bool) -> None:
    """Assemble prompt snippets from your prompt library."""
    setup_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj["config_dir"] = config_dir or get_config_dir()
    logger.debug(f"Using prompt library at {ctx.obj['config_dir']}")


# Register commands
cli.add_command(run_prompt)
cli.add_command(list_prompts)
cli.add_command(show_prompt)
cli.add_command(validate_config)
cli.add_command(parts)
cli.add_command(completions)
cli.add_command(init)


def main() -> None:
    cli(prog_name="pa")
