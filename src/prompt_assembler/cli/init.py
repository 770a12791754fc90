"""
Library initialization command.
"""

import logging
import shutil
from pathlib import Path

import click

from prompt_assembler.cli.utils import EXIT_UNREADABLE_CONFIG, get_context_config_dir
from prompt_assembler.config import CONFIG_FILENAME

logger = logging.getLogger(__name__)

# Starter files shipped with the package
DEFAULTS_DIR = Path(__file__).parent.parent / "install" / "shared"


@click.command()
@click.option("--force", is_flag=True, help="Overwrite existing starter files")
@click.pass_context
def init(ctx: click.Context, force: bool) -> None:
    """Create a starter config.toml in the configuration directory."""
    config_dir = get_context_config_dir(ctx)
    config_path = config_dir / CONFIG_FILENAME

    if config_path.exists() and not force:
        click.echo(f"Configuration already exists: {config_path}")
        return

    written: list[Path] = []
    try:
        config_dir.mkdir(parents=True, exist_ok=True)
        for source in sorted(DEFAULTS_DIR.iterdir()):
            if not source.is_file():
                continue
            target = config_dir / source.name
            if target.exists() and not force:
                logger.debug(f"Keeping existing {target}")
                continue
            shutil.copyfile(source, target)
            written.append(target)
    except OSError as e:
        click.echo(f"error: failed to initialize {config_dir}: {e}", err=True)
        raise SystemExit(EXIT_UNREADABLE_CONFIG) from e

    click.echo(f"Initialized prompt library in {config_dir}")
    for path in written:
        click.echo(f"  Created: {path}")
