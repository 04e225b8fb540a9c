from __future__ import annotations

import logging

import click

from pbquery.exceptions import UsageError
from pbquery.normalize import normalize

from ..context import CLIContext
from ..runner import CommandOutput, run_command

logger = logging.getLogger(__name__)


def _read_input(text: str | None) -> str:
    if text is not None and text != "-":
        return text
    stream = click.get_text_stream("stdin")
    if stream.isatty():
        raise UsageError(
            "No filter given.",
            hint="Pass the filter as an argument or pipe it on stdin.",
        )
    return stream.read().rstrip("\r\n")


@click.command(name="normalize")
@click.argument("text", required=False)
@click.option(
    "--check",
    is_flag=True,
    help="Exit with status 1 when the input is not already normalized.",
)
@click.pass_obj
def normalize_cmd(ctx: CLIContext, text: str | None, check: bool) -> None:
    """Clean up a raw filter: drop empty groups and dangling connectives.

    TEXT is read from stdin when omitted or '-'.
    """

    def fn(_: CLIContext, warnings: list[str]) -> CommandOutput:
        raw = _read_input(text)
        result = normalize(raw)
        changed = result != raw
        logger.info(f"Normalized filter ({'changed' if changed else 'unchanged'})")
        if check and changed:
            warnings.append("Filter is not normalized.")
        return CommandOutput(
            data={"input": raw, "filter": result, "changed": changed},
            text=result,
            exit_code=1 if check and changed else 0,
        )

    run_command(ctx, command="normalize", fn=fn)
