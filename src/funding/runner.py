"""Synchronous external command execution.

The runner never retries and never interprets exit codes; callers decide
what a non-zero status means. Launch failures and timeouts are raised so
that only the retry executor sees them.
"""
import logging
import subprocess
from dataclasses import dataclass
from enum import StrEnum
from typing import Protocol, Sequence

import funding.constants as C
from funding.errors import CommandLaunchError, CommandTimeout

log = logging.getLogger("funding.runner")


class IOMode(StrEnum):
    CAPTURE = "capture"
    INHERIT = "inherit"  # child writes straight to our stdout/stderr


@dataclass(frozen=True, slots=True)
class CommandResult:
    exit_status: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.exit_status == 0


class CommandRunner(Protocol):
    def __call__(self, command: str, args: Sequence[str], io_mode: IOMode = IOMode.CAPTURE) -> CommandResult: ...


def run_command(
    command: str,
    args: Sequence[str],
    io_mode: IOMode = IOMode.CAPTURE,
    *,
    timeout: float | None = C.COMMAND_TIMEOUT,
) -> CommandResult:
    cmd = [command, *args]
    log.debug("exec: %s", " ".join(cmd))
    try:
        proc = subprocess.run(
            cmd,
            text=True,
            capture_output=io_mode == IOMode.CAPTURE,
            timeout=timeout,
        )
    except subprocess.TimeoutExpired as e:
        raise CommandTimeout(command, timeout) from e
    except OSError as e:
        raise CommandLaunchError(command, e) from e

    return CommandResult(proc.returncode, proc.stdout or "", proc.stderr or "")
