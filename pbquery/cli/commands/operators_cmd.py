from __future__ import annotations

import click

from pbquery.operators import Operator

from ..context import CLIContext
from ..runner import CommandOutput, run_command


@click.command(name="operators")
@click.pass_obj
def operators_cmd(ctx: CLIContext) -> None:
    """List the filter operators and their builder methods."""

    def fn(_: CLIContext, _warnings: list[str]) -> CommandOutput:
        rows = [
            {
                "name": op.name,
                "symbol": op.symbol,
                "method": op.method_name,
                "any": op.is_any,
            }
            for op in Operator
        ]
        return CommandOutput(data=rows)

    run_command(ctx, command="operators", fn=fn)
