"""Drive the funding wallet's token balance to exactly the target.

A prior interrupted run, or a forked node carrying old state, can leave the
wallet over-funded. Additive transfers alone could never restore the exact
target, so a surplus is sent back to the whale.
"""
import logging

from funding.constants import StepName
from funding.context import FundingContext, from_command
from funding.models import StepResult
from funding.retry import with_retry

log = logging.getLogger("funding.reconcile")


def claw_back(ctx: FundingContext) -> StepResult:
    """Return any surplus above the target from the funding wallet to the whale."""
    a = ctx.accounts
    balance = ctx.node.balance_of(a.funding_wallet)
    surplus = balance - ctx.target.balance_target
    if surplus <= 0:
        return StepResult.ok("no surplus left")

    log.info("Funding wallet over-funded by %s, clearing excess funds", surplus)
    result = ctx.node.transfer(a.funding_wallet, a.whale, surplus)
    ctx.settle()
    return from_command(result, f"claw-back of {surplus}")


def top_up(ctx: FundingContext, deficit: int) -> StepResult:
    a = ctx.accounts
    log.info("Funding wallet short by %s, transferring from whale", deficit)
    result = ctx.node.transfer(a.whale, a.funding_wallet, deficit)
    ctx.settle()
    return from_command(result, f"top-up of {deficit}")


def reconcile(ctx: FundingContext) -> StepResult:
    target = ctx.target.balance_target
    wallet = ctx.accounts.funding_wallet

    balance = ctx.node.balance_of(wallet)
    log.debug("balance=%s target=%s", balance, target)

    if balance == target:
        log.info("Funding wallet balance already at target")
        return StepResult.ok("balance at target")

    if balance > target:
        with_retry(lambda: claw_back(ctx), ctx.max_retries, name=StepName.CLAW_BACK)
        balance = ctx.node.balance_of(wallet)
        if balance == target:
            return StepResult.ok("surplus cleared")
        return StepResult.fail(f"balance {balance} != target {target} after claw-back")

    return top_up(ctx, target - balance)
