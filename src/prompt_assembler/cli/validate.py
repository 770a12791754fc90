"""
Configuration validation command.
"""

import click

from prompt_assembler.cli.utils import (
    EXIT_INVALID_CONFIG,
    echo_diagnostics,
    echo_json,
    fail,
    get_context_config_dir,
    json_envelope,
)
from prompt_assembler.config import load_config
from prompt_assembler.diagnostics import ValidationReport
from prompt_assembler.errors import ConfigError, ConfigParseError, InvalidDefinitionError
from prompt_assembler.validation import validate


@click.command("validate")
@click.option("--json", "json_format", is_flag=True, help="Output as JSON")
@click.pass_context
def validate_config(ctx: click.Context, json_format: bool) -> None:
    """Validate configuration files and referenced fragments."""
    config_dir = get_context_config_dir(ctx)

    try:
        config = load_config(config_dir)
    except InvalidDefinitionError as e:
        report = ValidationReport(errors=list(e.diagnostics))
    except ConfigParseError as e:
        report = ValidationReport(errors=[e.to_diagnostic()])
    except ConfigError as e:
        fail(e)
    else:
        report = validate(config)

    if json_format:
        echo_json(
            json_envelope(
                errors=[d.to_dict() for d in report.errors],
                warnings=[d.to_dict() for d in report.warnings],
            )
        )
    else:
        echo_diagnostics(report.errors)
        echo_diagnostics(report.warnings)
        if report.ok:
            click.echo("configuration is valid")

    if not report.ok:
        raise SystemExit(EXIT_INVALID_CONFIG)
