from __future__ import annotations

import os
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Literal

from pbquery.exceptions import PBQueryError

from .results import CommandMeta, CommandResult, ErrorInfo

OutputFormat = Literal["table", "json"]

LOG_FILE_ENV = "PBQUERY_LOG_FILE"


def default_log_file() -> Path | None:
    value = os.environ.get(LOG_FILE_ENV, "").strip()
    return Path(value).expanduser() if value else None


@dataclass
class CLIContext:
    output: OutputFormat
    quiet: bool
    verbosity: int
    log_file: Path | None
    enable_log_file: bool


def error_for_exception(exc: Exception) -> tuple[int, ErrorInfo]:
    """Exit code and error payload for an exception raised by a command."""
    if isinstance(exc, PBQueryError):
        return exc.exit_code, ErrorInfo(
            type=exc.error_type,
            message=exc.message,
            hint=exc.hint,
            details=exc.details,
        )
    if isinstance(exc, OSError):
        return 1, ErrorInfo(type="io_error", message=str(exc))
    return 1, ErrorInfo(type="internal_error", message=f"{type(exc).__name__}: {exc}")


def build_result(
    *,
    ok: bool,
    command: str,
    started_at: float,
    data: Any | None,
    warnings: list[str],
    error: ErrorInfo | None = None,
) -> CommandResult:
    duration_ms = int(max(0.0, time.time() - started_at) * 1000)
    return CommandResult(
        ok=ok,
        command=command,
        data=data,
        warnings=warnings,
        meta=CommandMeta(duration_ms=duration_ms),
        error=error,
    )
