"""Entry point of the ``calcexpr`` command.

The group loads configuration, switches the global expression cache and sets
up logging before any subcommand runs.
"""

from __future__ import annotations

import logging
from pathlib import Path

import click

from calcexpr import __version__
from calcexpr.cli.commands import check, evaluate
from calcexpr.cli.context import CLIContext, ExitCode
from calcexpr.cli.output import format_error
from calcexpr.config import apply_config, load_config
from calcexpr.exceptions import ConfigError
from calcexpr.logging import configure_logging

_CONFIGURED_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def _log_level(quiet: bool, verbose: int, configured: str) -> int:
    """-q beats -v, and either beats the configured verbosity."""
    if quiet:
        return logging.ERROR
    if verbose >= 2:
        return logging.DEBUG
    if verbose == 1:
        return logging.INFO
    return _CONFIGURED_LEVELS.get(configured, logging.WARNING)


@click.group(invoke_without_command=True)
@click.version_option(__version__, prog_name="calcexpr")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Project config file to read instead of ./calcexpr.yaml.",
)
@click.option("-v", "--verbose", count=True, help="Log more (-v info, -vv debug).")
@click.option("-q", "--quiet", is_flag=True, help="Log errors only.")
@click.pass_context
def cli(
    ctx: click.Context,
    config_file: Path | None,
    verbose: int,
    quiet: bool,
) -> None:
    """calcexpr - evaluate formulas from the command line."""
    try:
        config = load_config(config_file)
    except ConfigError as e:
        details = [f"Field: {e.field}"] if e.field else []
        if e.value is not None:
            details.append(f"Value: {e.value}")
        click.echo(format_error(e.message, details=details or None), err=True)
        ctx.exit(ExitCode.FAILURE)

    apply_config(config)
    configure_logging(level=_log_level(quiet, verbose, config.verbosity))

    ctx.obj = {
        "cli_ctx": CLIContext(
            config=config,
            config_path=config_file,
            verbosity=verbose,
            quiet=quiet,
        )
    }

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(evaluate)
cli.add_command(check)
