from __future__ import annotations

from typing import Any

import click
import yaml

from calcexpr.cli.common import cli_error_handler
from calcexpr.cli.context import CLIContext, async_command
from calcexpr.cli.output import format_json, format_value
from calcexpr.expressions import EvaluateOptions, Expression
from calcexpr.logging import get_logger


def _parse_parameters(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...]
) -> dict[str, Any]:
    """Click callback turning NAME=VALUE pairs into a parameter dict.

    Values are YAML scalars or flow collections, so ``3``, ``2.5``,
    ``true``, ``[1, 2, 3]`` and ``2024-01-31`` keep their types.
    """
    parameters: dict[str, Any] = {}
    for item in values:
        name, sep, raw = item.partition("=")
        name = name.strip()
        if not sep or not name:
            raise click.BadParameter(f"expected NAME=VALUE, got {item!r}", param=param)
        try:
            parameters[name] = yaml.safe_load(raw) if raw.strip() else ""
        except yaml.YAMLError as e:
            raise click.BadParameter(
                f"cannot parse value for {name!r}: {e}", param=param
            ) from e
    return parameters


def _apply_flag(
    options: EvaluateOptions, flag: EvaluateOptions, enabled: bool | None
) -> EvaluateOptions:
    if enabled is None:
        return options
    return options | flag if enabled else options & ~flag


@click.command("eval")
@click.argument("expression")
@click.option(
    "-p",
    "--param",
    "parameters",
    multiple=True,
    metavar="NAME=VALUE",
    callback=_parse_parameters,
    help="Parameter value (YAML syntax). Repeatable.",
)
@click.option(
    "--ignore-case/--match-case",
    default=None,
    help="Match parameter and function names case-insensitively.",
)
@click.option(
    "--iterate/--no-iterate",
    default=None,
    help="Evaluate once per element of list parameters.",
)
@click.option(
    "--no-cache/--cache",
    "no_cache",
    default=None,
    help="Bypass the compiled-expression cache.",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    default=False,
    help="Print the result as JSON.",
)
@click.pass_context
@async_command
async def evaluate(
    ctx: click.Context,
    expression: str,
    parameters: dict[str, Any],
    ignore_case: bool | None,
    iterate: bool | None,
    no_cache: bool | None,
    as_json: bool,
) -> None:
    """Evaluate EXPRESSION and print the result.

    Flags left unset fall back to the evaluation section of the config.

    Examples:
        calcexpr eval "2 + 3 * 4"
        calcexpr eval "price * qty" -p price=9.99 -p qty=3
        calcexpr eval "a * 2" -p "a=[1, 2, 3]" --iterate --json
    """
    cli_ctx: CLIContext = ctx.obj["cli_ctx"]
    logger = get_logger(__name__)

    options = cli_ctx.config.evaluation.to_options()
    options = _apply_flag(options, EvaluateOptions.IGNORE_CASE, ignore_case)
    options = _apply_flag(options, EvaluateOptions.ITERATE_PARAMETERS, iterate)
    options = _apply_flag(options, EvaluateOptions.NO_CACHE, no_cache)

    with cli_error_handler():
        formula = Expression(expression, options)
        formula.parameters = parameters
        logger.debug(
            "cli_evaluate",
            expression=expression,
            parameter_names=list(parameters),
            options=int(options),
        )
        result = await formula.evaluate_async()

        if as_json:
            click.echo(format_json({"expression": expression, "result": result}))
        else:
            click.echo(format_value(result))
