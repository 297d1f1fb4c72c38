from __future__ import annotations

import click

from calcexpr.cli.common import cli_error_handler
from calcexpr.cli.console import console
from calcexpr.cli.context import CLIContext
from calcexpr.expressions import EvaluateOptions, Expression


@click.command()
@click.argument("expression")
@click.pass_context
def check(ctx: click.Context, expression: str) -> None:
    """Check EXPRESSION for syntax errors without evaluating it.

    Prints OK, the canonical form and the parameters the formula reads.

    Examples:
        calcexpr check "price * (1 + rate)"
    """
    cli_ctx: CLIContext = ctx.obj["cli_ctx"]
    nocache = bool(cli_ctx.config.evaluation.to_options() & EvaluateOptions.NO_CACHE)

    with cli_error_handler():
        tree = Expression.compile(expression, nocache)
        formula = Expression(tree)
        names = formula.parameter_names()

        console.print("OK")
        console.print(f"Canonical: {formula}")
        console.print(f"Parameters: {', '.join(names) if names else '(none)'}")
