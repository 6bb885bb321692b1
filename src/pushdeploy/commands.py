"""Subprocess helpers for the external tools a deployment drives."""

from __future__ import annotations

import logging
import os
import shlex
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path

from pushdeploy.errors import CommandError

logger = logging.getLogger(__name__)

# Variables git exports to hooks; left in place they would point the clone
# back at the bare repository's own GIT_DIR.
_GIT_HOOK_VARIABLES = (
    "GIT_DIR",
    "GIT_WORK_TREE",
    "GIT_INDEX_FILE",
    "GIT_OBJECT_DIRECTORY",
    "GIT_ALTERNATE_OBJECT_DIRECTORIES",
    "GIT_QUARANTINE_PATH",
    "GIT_PREFIX",
)


@dataclass(slots=True)
class CommandResult:
    command: str
    exit_code: int
    ok: bool
    stdout: str
    stderr: str
    duration_ms: int
    timed_out: bool = False

    @property
    def detail(self) -> str:
        return self.stderr.strip() or self.stdout.strip() or f"exit code {self.exit_code}"


def split_command(text: str) -> list[str]:
    return shlex.split(text)


def hook_environment() -> dict[str, str]:
    env = os.environ.copy()
    for key in _GIT_HOOK_VARIABLES:
        env.pop(key, None)
    return env


def run_command(
    argv: list[str],
    *,
    cwd: Path | None = None,
    timeout: float | None = None,
    env: dict[str, str] | None = None,
) -> CommandResult:
    command = shlex.join(argv)
    started = time.monotonic()
    try:
        proc = subprocess.run(
            argv,
            cwd=cwd,
            env=env if env is not None else hook_environment(),
            capture_output=True,
            text=True,
            errors="replace",
            timeout=timeout,
            check=False,
        )
    except FileNotFoundError:
        return CommandResult(
            command=command,
            exit_code=127,
            ok=False,
            stdout="",
            stderr=f"{argv[0]}: command not found",
            duration_ms=int((time.monotonic() - started) * 1000),
        )
    except subprocess.TimeoutExpired as exc:
        raw = exc.stdout or b""
        stdout = raw.decode(errors="replace") if isinstance(raw, bytes) else raw
        return CommandResult(
            command=command,
            exit_code=124,
            ok=False,
            stdout=stdout,
            stderr=f"timed out after {timeout}s",
            duration_ms=int((time.monotonic() - started) * 1000),
            timed_out=True,
        )
    duration_ms = int((time.monotonic() - started) * 1000)
    logger.debug("command %s exited %s in %sms", command, proc.returncode, duration_ms)
    return CommandResult(
        command=command,
        exit_code=proc.returncode,
        ok=proc.returncode == 0,
        stdout=proc.stdout,
        stderr=proc.stderr,
        duration_ms=duration_ms,
    )


def check_command(
    argv: list[str],
    *,
    cwd: Path | None = None,
    timeout: float | None = None,
    env: dict[str, str] | None = None,
    error_cls: type[CommandError] = CommandError,
) -> CommandResult:
    result = run_command(argv, cwd=cwd, timeout=timeout, env=env)
    if not result.ok:
        raise error_cls(
            f"{result.command} failed: {result.detail}",
            result=result,
            retryable=result.timed_out,
        )
    for stream, text in (("stdout", result.stdout), ("stderr", result.stderr)):
        for line in text.splitlines():
            logger.debug("%s %s: %s", argv[0], stream, line)
    return result
