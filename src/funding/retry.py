import logging
from typing import Callable

import funding.constants as C
from funding.errors import FatalFundingError, RetryExhausted
from funding.models import StepOutcome, StepResult

log = logging.getLogger("funding.retry")

Step = Callable[[], StepResult | bool]


def _as_result(value: StepResult | bool) -> StepResult:
    if isinstance(value, StepResult):
        return value
    return StepResult.ok() if value else StepResult.fail()


def with_retry(step: Step, max_retries: int = C.MAX_RETRIES, *, name: str | None = None) -> StepResult:
    """Run `step` until it succeeds, at most `max_retries` times.

    Exceptions from the step count as a failed attempt (THROW). Fatal engine
    errors are re-raised immediately. Raises RetryExhausted once the budget
    is spent.
    """
    if max_retries < 1:
        raise ValueError(f"max_retries must be >= 1, got {max_retries}")
    label = str(name) if name else getattr(step, "__name__", repr(step))

    last: StepResult | None = None
    for attempt in range(1, max_retries + 1):
        try:
            result = _as_result(step())
        except FatalFundingError:
            raise
        except Exception as e:
            log.error("%s raised on attempt %d/%d: %s", label, attempt, max_retries, e,
                      exc_info=log.isEnabledFor(logging.DEBUG))
            result = StepResult.thrown(e)

        if result.succeeded:
            if attempt > 1:
                log.info("%s succeeded on attempt %d/%d", label, attempt, max_retries)
            return result

        if result.outcome is StepOutcome.FAILURE:
            log.warning("%s failed on attempt %d/%d%s", label, attempt, max_retries,
                        f": {result.detail}" if result.detail else "")
        last = result

    raise RetryExhausted(label, max_retries, last)
