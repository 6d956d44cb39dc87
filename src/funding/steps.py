"""The ordered funding steps.

Each step takes the run's FundingContext and returns a StepResult. Steps do
not catch runner exceptions; the retry executor does.
"""
import logging
from typing import Callable

from funding.constants import StepName
from funding.context import FundingContext, from_command
from funding.models import StepResult
from funding.reconcile import reconcile

log = logging.getLogger("funding.steps")

StepFn = Callable[[FundingContext], StepResult]


def impersonate(ctx: FundingContext) -> StepResult:
    """Let the node sign for the whale. Re-impersonating is harmless."""
    whale = ctx.accounts.whale
    result = ctx.node.impersonate(whale)
    ctx.settle()
    return from_command(result, f"impersonate {whale}")


def approve_allowance(ctx: FundingContext) -> StepResult:
    """Approve the spender for the allowance floor, never lowering an existing allowance."""
    a = ctx.accounts
    floor = ctx.target.allowance_floor

    current = ctx.node.allowance(a.funding_wallet, a.spender)
    if current >= floor:
        log.info("Allowance %s already >= %s, skipping approve", current, floor)
        return StepResult.ok("allowance already sufficient")

    result = ctx.node.approve(a.funding_wallet, a.spender, floor)
    ctx.settle()
    return from_command(result, f"approve {floor}")


def transfer_balance(ctx: FundingContext) -> StepResult:
    return reconcile(ctx)


STEPS: tuple[tuple[StepName, StepFn], ...] = (
    (StepName.IMPERSONATE, impersonate),
    (StepName.APPROVE, approve_allowance),
    (StepName.TRANSFER, transfer_balance),
)
