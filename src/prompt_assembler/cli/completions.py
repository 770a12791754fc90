"""
Shell completion script generation.
"""

import click
from click.shell_completion import get_completion_class

from prompt_assembler.cli.utils import PROG_NAME, handle_errors, load_assembler

SUPPORTED_SHELLS = ("bash", "zsh", "fish")
COMPLETE_VAR = "_PA_COMPLETE"


def _prompt_list_line(shell: str, names: list[str]) -> str:
    if shell == "fish":
        return f"set -g _pa_prompt_list {' '.join(names)}"
    return f'_pa_prompt_list="{" ".join(names)}"'


@click.command("completions")
@click.argument("shell", type=click.Choice(SUPPORTED_SHELLS, case_sensitive=False))
@click.pass_context
def completions(ctx: click.Context, shell: str) -> None:
    """Generate shell completions for SHELL.

    Prompt names are completed dynamically; the current list is appended for
    reference.
    """
    shell = shell.lower()
    comp_cls = get_completion_class(shell)
    if comp_cls is None:
        raise click.BadParameter(f"unsupported shell '{shell}'", param_hint="SHELL")

    with handle_errors():
        names = load_assembler(ctx).prompt_names()

    root = ctx.find_root()
    completer = comp_cls(root.command, {}, PROG_NAME, COMPLETE_VAR)
    click.echo(completer.source())

    if names:
        click.echo("\n# prompt-assembler prompt list")
        click.echo(_prompt_list_line(shell, names))
