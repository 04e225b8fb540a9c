from __future__ import annotations

import click

from pbquery.filters import query
from pbquery.operators import Operator

from ..context import CLIContext
from ..runner import CommandOutput, run_command

_BOOLEANS = {"true": True, "false": False}


@click.command(name="condition")
@click.argument("field")
@click.argument("operator")
@click.argument("value", required=False, default="")
@click.option(
    "--field",
    "allowed",
    multiple=True,
    metavar="NAME",
    help="Restrict field names (repeatable). System fields are always allowed.",
)
@click.pass_obj
def condition_cmd(
    ctx: CLIContext, field: str, operator: str, value: str, allowed: tuple[str, ...]
) -> None:
    """Encode one FIELD OPERATOR VALUE condition.

    OPERATOR is a filter symbol such as '=' or '?~'. VALUE 'true' or 'false' is
    written unquoted; an empty or missing VALUE yields an empty filter.
    """

    def fn(_: CLIContext, warnings: list[str]) -> CommandOutput:
        op = Operator.from_symbol(operator)
        parsed = _BOOLEANS.get(value, value)
        result = query(allowed or None).where(field, op, parsed).build()
        if not result:
            warnings.append("Empty value; the condition was omitted.")
        return CommandOutput(
            data={"field": field, "operator": op.name, "value": parsed, "filter": result},
            text=result,
        )

    run_command(ctx, command="condition", fn=fn)
