from __future__ import annotations

from pathlib import Path

import click

import pbquery

from .context import CLIContext, default_log_file
from .logging import configure_logging, restore_logging


@click.group(
    name="pbquery",
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option(
    "--output",
    type=click.Choice(["table", "json"]),
    default="table",
)
@click.option("--json", "json_flag", is_flag=True, help="Alias for --output json.")
@click.option("-q", "--quiet", is_flag=True, help="Suppress non-essential stderr output.")
@click.option("-v", "verbose", count=True, help="Increase verbosity (-v, -vv).")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    default=None,
    help="Write debug logs to this file (default: $PBQUERY_LOG_FILE).",
)
@click.option("--no-log-file", is_flag=True, help="Disable file logging explicitly.")
@click.version_option(version=pbquery.__version__, prog_name="pbquery")
@click.pass_context
def cli(
    click_ctx: click.Context,
    *,
    output: str,
    json_flag: bool,
    quiet: bool,
    verbose: int,
    log_file: str | None,
    no_log_file: bool,
) -> None:
    if click_ctx.invoked_subcommand is None:
        click.echo(click_ctx.get_help())
        raise click.exceptions.Exit(0)

    out = "json" if json_flag else output
    effective_log_file = Path(log_file) if log_file else default_log_file()

    ctx = CLIContext(
        output=out,  # type: ignore[arg-type]
        quiet=quiet,
        verbosity=verbose,
        log_file=effective_log_file,
        enable_log_file=not no_log_file and effective_log_file is not None,
    )
    click_ctx.obj = ctx

    previous_logging = configure_logging(
        verbosity=ctx.verbosity,
        log_file=ctx.log_file,
        enable_file=ctx.enable_log_file,
    )
    click_ctx.call_on_close(lambda: restore_logging(previous_logging))


# Register commands
from .commands.condition_cmd import condition_cmd as _condition_cmd  # noqa: E402
from .commands.normalize_cmd import normalize_cmd as _normalize_cmd  # noqa: E402
from .commands.operators_cmd import operators_cmd as _operators_cmd  # noqa: E402

cli.add_command(_condition_cmd)
cli.add_command(_normalize_cmd)
cli.add_command(_operators_cmd)
