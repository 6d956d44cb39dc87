import logging
import time
from dataclasses import dataclass

import funding.constants as C
from funding.cast import CastNode
from funding.models import Accounts, StepResult, TargetState
from funding.runner import CommandResult

log = logging.getLogger("funding.context")


@dataclass(frozen=True, slots=True)
class FundingContext:
    """Everything a step needs. Built once per run and never mutated."""

    node: CastNode
    accounts: Accounts
    target: TargetState
    settle_delay: float = C.SETTLE_DELAY
    max_retries: int = C.MAX_RETRIES

    def settle(self) -> None:
        # Give the node time to include the write before anything depends on it.
        if self.settle_delay > 0:
            log.debug("settling for %.1fs", self.settle_delay)
            time.sleep(self.settle_delay)


def from_command(result: CommandResult, what: str) -> StepResult:
    if result.ok:
        return StepResult.ok(what)
    return StepResult.fail(f"{what} exited with status {result.exit_status}")
