"""Exception hierarchy for the funding engine.

FundingError is the root. FatalFundingError marks the errors that end a
run: the retry executor lets them through untouched instead of counting
them as a failed attempt.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from funding.models import Readings, StepResult


class FundingError(Exception):
    """Root exception for the project."""


class ConfigError(FundingError):
    """Invalid or missing configuration values."""


# --- command runner ---


class CommandError(FundingError):
    """Base for failures to run an external command at all."""


class CommandLaunchError(CommandError):
    """The binary could not be started (missing, not executable, ...)."""

    def __init__(self, command: str, cause: OSError):
        super().__init__(f"Could not launch {command!r}: {cause}")
        self.command = command


class CommandTimeout(CommandError):
    def __init__(self, command: str, timeout: float):
        super().__init__(f"{command!r} timed out after {timeout}s")
        self.command = command
        self.timeout = timeout


class NodeQueryError(FundingError):
    """A read-only node query failed or returned something unparsable."""


# --- fatal ---


class FatalFundingError(FundingError):
    """Base for errors that terminate the run."""


class ReadinessTimeout(FatalFundingError):
    def __init__(self, url: str, attempts: int):
        super().__init__(f"Node at {url} not ready after {attempts} attempts")
        self.url = url
        self.attempts = attempts


class RetryExhausted(FatalFundingError):
    def __init__(self, step: str, attempts: int, last: StepResult | None = None):
        msg = f"Step {step!r} failed after {attempts} attempts"
        if last is not None and last.detail:
            msg += f" (last: {last.outcome}: {last.detail})"
        super().__init__(msg)
        self.step = step
        self.attempts = attempts
        self.last = last


class ValidationFailure(FatalFundingError):
    """The final read-back does not satisfy the target state."""

    def __init__(self, message: str, readings: Readings):
        super().__init__(f"{message} (allowance={readings.allowance}, balance={readings.balance})")
        self.readings = readings


class AllowanceNotConverged(ValidationFailure):
    pass


class BalanceNotConverged(ValidationFailure):
    pass
