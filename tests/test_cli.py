from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import click
import pytest
from click.testing import CliRunner

import pbquery
from pbquery.cli.commands.normalize_cmd import _read_input
from pbquery.cli.context import CLIContext, error_for_exception
from pbquery.cli.logging import LoggingState, configure_logging
from pbquery.cli.main import cli
from pbquery.cli.render import RenderSettings, render_result
from pbquery.cli.results import CommandMeta, CommandResult, ErrorInfo
from pbquery.exceptions import UsageError


def test_cli_no_args_shows_help() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, [])
    assert result.exit_code == 0
    assert "Usage:" in result.output


def test_cli_version_option() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--version"])
    assert result.exit_code == 0
    assert result.output == f"pbquery, version {pbquery.__version__}\n"


def test_normalize_argument_table_output() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["normalize", '(a="1" || ) && b="2" && '])
    assert result.exit_code == 0
    assert result.output == '(a="1") && b="2"\n'


def test_normalize_stdin() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["normalize"], input='() && status="active"\n')
    assert result.exit_code == 0
    assert result.output == 'status="active"\n'


def test_normalize_json_global_flag() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--json", "normalize", "-"], input=' || x="[y]"')
    assert result.exit_code == 0
    payload = json.loads(result.output.strip())
    assert payload["command"] == "normalize"
    assert payload["data"] == {"input": ' || x="[y]"', "filter": 'x="[y]"', "changed": True}


def test_normalize_check_clean_input() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["normalize", "--check", 'a="1" && b="2"'])
    assert result.exit_code == 0


def test_normalize_check_dirty_input() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--json", "normalize", "--check", 'a="1" && '])
    assert result.exit_code == 1
    payload = json.loads(result.output.strip())
    assert payload["ok"] is True
    assert payload["data"]["filter"] == 'a="1"'
    assert payload["warnings"] == ["Filter is not normalized."]


def test_operators_json() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--output", "json", "operators"])
    assert result.exit_code == 0
    rows = json.loads(result.output.strip())["data"]
    assert len(rows) == 16
    assert {"name": "ANY_NOT_LIKE", "symbol": "?!~", "method": "any_not_like", "any": True} in rows


def test_operators_table() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["operators"])
    assert result.exit_code == 0
    assert "greater_than_or_equal" in result.output
    assert "?!=" in result.output


def test_log_file_receives_debug_records(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "pbquery.log"
    runner = CliRunner()
    result = runner.invoke(cli, ["--log-file", str(log_file), "normalize", 'a="1" || '])
    assert result.exit_code == 0
    assert "Normalized filter" in log_file.read_text(encoding="utf-8")
    # Handlers are removed again once the command finishes.
    assert not logging.getLogger("pbquery").handlers


def test_log_file_from_environment(tmp_path: Path) -> None:
    log_file = tmp_path / "env.log"
    runner = CliRunner()
    result = runner.invoke(
        cli, ["normalize", 'a="1"'], env={"PBQUERY_LOG_FILE": str(log_file)}
    )
    assert result.exit_code == 0
    assert log_file.exists()


def test_no_log_file_wins_over_environment(tmp_path: Path) -> None:
    log_file = tmp_path / "env.log"
    runner = CliRunner()
    result = runner.invoke(
        cli, ["--no-log-file", "normalize", 'a="1"'], env={"PBQUERY_LOG_FILE": str(log_file)}
    )
    assert result.exit_code == 0
    assert not log_file.exists()


def test_usage_error_renders_hint(capsys: pytest.CaptureFixture[str]) -> None:
    result = CommandResult(
        ok=False,
        command="normalize",
        meta=CommandMeta(duration_ms=0),
        error=ErrorInfo(type="usage_error", message="No filter given."),
    )
    render_result(result, settings=RenderSettings(quiet=False, verbosity=0))
    captured = capsys.readouterr()
    assert "Usage error: No filter given." in captured.err
    assert "Hint: run `pbquery normalize --help`" in captured.err


def test_quiet_suppresses_hint(capsys: pytest.CaptureFixture[str]) -> None:
    result = CommandResult(
        ok=False,
        command="normalize",
        meta=CommandMeta(duration_ms=0),
        error=ErrorInfo(type="usage_error", message="boom", hint="try again"),
    )
    render_result(result, settings=RenderSettings(quiet=True, verbosity=0))
    captured = capsys.readouterr()
    assert "boom" in captured.err
    assert "try again" not in captured.err


def test_logging_configured_from_context(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    seen: list[CLIContext] = []
    calls: list[dict[str, object]] = []

    def _configure(**kwargs: Any) -> LoggingState:
        seen.append(click.get_current_context().obj)
        calls.append(kwargs)
        return configure_logging(**kwargs)

    monkeypatch.setattr("pbquery.cli.main.configure_logging", _configure)
    log_file = tmp_path / "ctx.log"
    runner = CliRunner()
    result = runner.invoke(cli, ["-vv", "--log-file", str(log_file), "operators"])
    assert result.exit_code == 0
    ctx = seen[0]
    assert calls == [
        {"verbosity": ctx.verbosity, "log_file": ctx.log_file, "enable_file": ctx.enable_log_file}
    ]
    assert (ctx.verbosity, ctx.log_file, ctx.enable_log_file) == (2, log_file, True)


def test_condition_table_output() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["condition", "title", "~", "draft"])
    assert result.exit_code == 0
    assert result.output == 'title~"draft"\n'


def test_condition_boolean_value_json() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--json", "condition", "active", "=", "true"])
    assert result.exit_code == 0
    payload = json.loads(result.output.strip())
    assert payload["data"] == {
        "field": "active",
        "operator": "EQUAL",
        "value": True,
        "filter": "active=true",
    }


def test_condition_empty_value_is_omitted() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--json", "condition", "title", "="])
    assert result.exit_code == 0
    payload = json.loads(result.output.strip())
    assert payload["data"]["filter"] == ""
    assert payload["warnings"] == ["Empty value; the condition was omitted."]


def test_condition_unknown_operator_is_usage_error() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--json", "condition", "title", "==", "x"])
    assert result.exit_code == 2
    payload = json.loads(result.output.strip())
    assert payload["ok"] is False
    assert payload["error"]["type"] == "usage_error"
    assert payload["error"]["details"] == {"symbol": "=="}
    assert "?!~" in payload["error"]["hint"]


def test_condition_unknown_field_is_usage_error() -> None:
    runner = CliRunner()
    result = runner.invoke(
        cli, ["--json", "condition", "--field", "title", "titel", "=", "x"]
    )
    assert result.exit_code == 2
    payload = json.loads(result.output.strip())
    assert payload["error"]["type"] == "usage_error"
    details = payload["error"]["details"]
    assert details["field"] == "titel"
    assert "title" in details["allowed"]
    assert "id" in details["allowed"]


def test_condition_allowed_field_passes() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["condition", "--field", "title", "title.name", "?=", "x"])
    assert result.exit_code == 0
    assert result.output == 'title.name?="x"\n'


class _TerminalStdin:
    def isatty(self) -> bool:
        return True


def test_normalize_without_input_is_usage_error(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(click, "get_text_stream", lambda _name: _TerminalStdin())
    with pytest.raises(UsageError) as exc_info:
        _read_input(None)
    exit_code, error = error_for_exception(exc_info.value)
    assert exit_code == 2
    assert error.type == "usage_error"
    assert error.message == "No filter given."
    assert error.hint == "Pass the filter as an argument or pipe it on stdin."


def test_internal_errors_exit_one() -> None:
    exit_code, error = error_for_exception(RuntimeError("boom"))
    assert exit_code == 1
    assert error.type == "internal_error"
    assert error.message == "RuntimeError: boom"
