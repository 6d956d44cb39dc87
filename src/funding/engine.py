"""Convergence orchestrator.

Idle -> Probing -> Running(step) -> Validating -> Converged | Failed

The whole run is a function of an immutable Settings object. Nothing is
kept between runs and a Failed run is never restarted.
"""
import logging
from typing import Callable, Sequence

from funding.cast import CastNode
from funding.config import Settings
from funding.constants import EngineState, StepName
from funding.context import FundingContext
from funding.errors import (
    AllowanceNotConverged,
    BalanceNotConverged,
    FundingError,
    ReadinessTimeout,
    ValidationFailure,
)
from funding.models import ConvergenceResult, Readings
from funding.probe import wait_until_ready
from funding.retry import with_retry
from funding.runner import IOMode
from funding.steps import STEPS, StepFn

log = logging.getLogger("funding.engine")

Probe = Callable[..., bool]


def build_node(settings: Settings, *, write_io: IOMode = IOMode.CAPTURE) -> CastNode:
    return CastNode(
        settings.rpc_url,
        settings.token,
        cast_bin=settings.cast_bin,
        timeout=settings.command_timeout,
        write_io=write_io,
    )


def build_context(settings: Settings, node: CastNode | None = None) -> FundingContext:
    return FundingContext(
        node=node or build_node(settings),
        accounts=settings.accounts,
        target=settings.target,
        settle_delay=settings.settle_delay,
        max_retries=settings.max_retries,
    )


def read_state(ctx: FundingContext) -> Readings:
    a = ctx.accounts
    return Readings(
        allowance=ctx.node.allowance(a.funding_wallet, a.spender),
        balance=ctx.node.balance_of(a.funding_wallet),
    )


def validate(ctx: FundingContext) -> Readings:
    """Re-read live state and check it against the target.

    Raises:
        AllowanceNotConverged: allowance below the floor
        BalanceNotConverged: balance not exactly at the target
    """
    readings = read_state(ctx)
    target = ctx.target

    if readings.allowance < target.allowance_floor:
        raise AllowanceNotConverged(
            f"Allowance is not set correctly: {readings.allowance} < {target.allowance_floor}", readings
        )
    if readings.balance != target.balance_target:
        side = "below" if readings.balance < target.balance_target else "above"
        raise BalanceNotConverged(
            f"Balance is not set correctly: {readings.balance} is {side} {target.balance_target}", readings
        )
    return readings


def _snapshot(ctx: FundingContext) -> Readings | None:
    """Best-effort readings to attach to a failure."""
    try:
        return read_state(ctx)
    except Exception as e:
        log.warning("Could not read state for diagnostics: %s", e)
        return None


def converge(
    settings: Settings,
    *,
    node: CastNode | None = None,
    probe: Probe = wait_until_ready,
    steps: Sequence[tuple[StepName, StepFn]] = STEPS,
) -> ConvergenceResult:
    ctx = build_context(settings, node)
    result = ConvergenceResult(state=EngineState.IDLE, history=[EngineState.IDLE])

    def transition(state: EngineState, detail: str = "") -> None:
        log.info("%s -> %s%s", result.state, state, f" ({detail})" if detail else "")
        result.state = state
        result.history.append(state)

    try:
        transition(EngineState.PROBING)
        if not probe(
            settings.rpc_url,
            settings.ready_attempts,
            settings.ready_interval,
            method=settings.block_height_method,
        ):
            raise ReadinessTimeout(settings.rpc_url, settings.ready_attempts)

        log.info("Attempting to fund the testing environment")
        for name, fn in steps:
            transition(EngineState.RUNNING, name)
            with_retry(lambda fn=fn: fn(ctx), settings.max_retries, name=name)
        log.info("Funding steps complete")

        transition(EngineState.VALIDATING)
        result.readings = validate(ctx)

    except FundingError as e:
        log.error("Funding failed: %s", e)
        result.error = e
        if isinstance(e, ValidationFailure):
            result.readings = e.readings
        elif not isinstance(e, ReadinessTimeout):
            result.readings = _snapshot(ctx)
        transition(EngineState.FAILED)
        return result

    transition(EngineState.CONVERGED)
    log.info("Funding wallet is ready for testing")
    log.info("Allowance: %s Balance: %s", result.readings.allowance, result.readings.balance)
    return result
