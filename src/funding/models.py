"""Value types shared by the steps, the retry executor and the engine."""

from dataclasses import dataclass, field
from enum import StrEnum

from funding.constants import EngineState
from funding.errors import FundingError


class StepOutcome(StrEnum):
    SUCCESS = "Success"
    FAILURE = "Failure"
    THROW   = "Throw"


@dataclass(frozen=True, slots=True)
class StepResult:
    """Outcome of a single step attempt.

    FAILURE and THROW are both retryable; THROW means the step raised and
    the retry executor converted the exception into this value.
    """

    outcome: StepOutcome
    detail: str = ""

    @classmethod
    def ok(cls, detail: str = "") -> "StepResult":
        return cls(StepOutcome.SUCCESS, detail)

    @classmethod
    def fail(cls, detail: str = "") -> "StepResult":
        return cls(StepOutcome.FAILURE, detail)

    @classmethod
    def thrown(cls, exc: BaseException) -> "StepResult":
        return cls(StepOutcome.THROW, f"{type(exc).__name__}: {exc}")

    @property
    def succeeded(self) -> bool:
        return self.outcome is StepOutcome.SUCCESS


@dataclass(frozen=True, slots=True)
class TargetState:
    """Minimum allowance and exact balance the funding wallet must end up with."""

    allowance_floor: int
    balance_target: int

    def __post_init__(self):
        if self.allowance_floor < 0 or self.balance_target < 0:
            raise ValueError(f"Target amounts must be non-negative: {self}")


@dataclass(frozen=True, slots=True)
class Accounts:
    whale: str           # pre-funded token source
    funding_wallet: str  # converged wallet
    spender: str         # contract granted the allowance


@dataclass(frozen=True, slots=True)
class Readings:
    allowance: int
    balance: int

    def __str__(self):
        return f"Allowance: {self.allowance}\nBalance: {self.balance}"


@dataclass
class ConvergenceResult:
    state: EngineState
    readings: Readings | None = None
    error: FundingError | None = None
    history: list[EngineState] = field(default_factory=list)

    @property
    def converged(self) -> bool:
        return self.state is EngineState.CONVERGED
