"""Command line entry point: openapi-forge SCHEMA GENERATOR [options]"""

from __future__ import annotations

import click

from .log import configure_logging
from .options import DEFAULT_OUTPUT, LogLevel, RunOptions
from .orchestrator import generate


@click.command("openapi-forge", help="Generate source files from an OpenAPI schema.")
@click.argument("schema")
@click.argument("generator")
@click.option(
    "--output", "-o",
    default=str(DEFAULT_OUTPUT),
    show_default=True,
    envvar="OPENAPI_FORGE_OUTPUT",
    help="Directory the generated files are written to.",
)
@click.option("--exclude", "-e", default=None, help="Glob pattern of template files to skip.")
@click.option("--skip-validation", is_flag=True, help="Do not validate the schema.")
@click.option("--no-format", "no_format", is_flag=True, help="Write rendered output without reformatting.")
@click.option(
    "--log-level", "-l",
    type=click.Choice([level.value for level in LogLevel], case_sensitive=False),
    default=LogLevel.STANDARD.value,
    show_default=True,
    envvar="OPENAPI_FORGE_LOG_LEVEL",
)
@click.pass_context
def cli(context, schema, generator, output, exclude, skip_validation, no_format, log_level):
    options = RunOptions(
        output=output,
        exclude=exclude,
        skip_validation=skip_validation,
        log_level=LogLevel(log_level.lower()),
        format_output=not no_format,
    )
    configure_logging(options.log_level)
    result = generate(schema, generator, options)
    context.exit(0 if result.succeeded else 1)


def main() -> None:
    cli()
