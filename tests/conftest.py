from collections import Counter, defaultdict

import pytest

import funding.constants as C
from funding.cast import CastNode
from funding.config import get_settings, load_defaults
from funding.context import FundingContext
from funding.errors import CommandLaunchError
from funding.models import Accounts, TargetState
from funding.runner import CommandResult, IOMode

RPC_URL = "http://localhost:8545"
TOKEN = str(C.Token.WXDAI)
DEFAULTS = load_defaults()

WHALE = DEFAULTS["whale"]
WALLET = DEFAULTS["funding_wallet"]
SPENDER = DEFAULTS["spender"]

ALLOWANCE_FLOOR = 999999999999999111119999999999999999
BALANCE_TARGET = 10000000000000000000000
WHALE_FUNDS = 10**30


def cast_uint(value: int) -> str:
    # newer cast versions append a scientific-notation hint
    return f"{value} [{value:.2e}]\n" if value >= 10_000 else f"{value}\n"


class FakeNode:
    """In-memory stand-in for `cast` talking to an anvil fork.

    Use `fail[op]` / `explode[op]` to force the next N invocations of an op
    ("impersonate", "approve", "transfer", "allowance", "balance") to exit
    non-zero or raise.
    """

    def __init__(self, balance: int = 0, allowance: int = 0):
        self.balances: dict[str, int] = defaultdict(int, {WHALE: WHALE_FUNDS, WALLET: balance})
        self.allowances: dict[tuple[str, str], int] = {(WALLET, SPENDER): allowance}
        self.unlocked: set[str] = {WALLET}
        self.calls: list[tuple[str, list[str]]] = []
        self.transfers: list[tuple[str, str, int]] = []
        self.fail: Counter = Counter()
        self.explode: Counter = Counter()

    def __call__(self, command, args, io_mode=IOMode.CAPTURE) -> CommandResult:
        args = list(args)
        op = self._op(args)
        self.calls.append((op, args))
        if self.explode[op] > 0:
            self.explode[op] -= 1
            raise CommandLaunchError(command, FileNotFoundError(2, "No such file or directory"))
        if self.fail[op] > 0:
            self.fail[op] -= 1
            return CommandResult(1, "", f"forced {op} failure")
        return getattr(self, f"_{op}")(args)

    @staticmethod
    def _op(args: list[str]) -> str:
        if args[0] == "rpc":
            return "impersonate"
        if args[0] == "call":
            return "allowance" if args[2] == C.ALLOWANCE_SIG else "balance"
        if args[0] == "send":
            return "approve" if args[7] == C.APPROVE_SIG else "transfer"
        raise AssertionError(f"unexpected cast invocation: {args}")

    def ops(self, name: str | None = None) -> list[str]:
        return [op for op, _ in self.calls if name is None or op == name]

    def _impersonate(self, args):
        self.unlocked.add(args[4])
        return CommandResult(0, "null\n")

    def _approve(self, args):
        owner, spender, amount = args[6], args[8], int(args[9])
        if owner not in self.unlocked:
            return CommandResult(1, "", f"No Signer available for {owner}")
        self.allowances[(owner, spender)] = amount
        return CommandResult(0, "status 1 (success)\n")

    def _transfer(self, args):
        sender, recipient, amount = args[6], args[8], int(args[9])
        if sender not in self.unlocked:
            return CommandResult(1, "", f"No Signer available for {sender}")
        if self.balances[sender] < amount:
            return CommandResult(1, "", "execution reverted: ERC20: transfer amount exceeds balance")
        self.balances[sender] -= amount
        self.balances[recipient] += amount
        self.transfers.append((sender, recipient, amount))
        return CommandResult(0, "status 1 (success)\n")

    def _allowance(self, args):
        return CommandResult(0, cast_uint(self.allowances.get((args[3], args[4]), 0)))

    def _balance(self, args):
        return CommandResult(0, cast_uint(self.balances[args[3]]))


@pytest.fixture
def fake():
    return FakeNode()


@pytest.fixture
def node(fake):
    return CastNode(RPC_URL, TOKEN, runner=fake)


@pytest.fixture
def ctx(node):
    return FundingContext(
        node=node,
        accounts=Accounts(whale=WHALE, funding_wallet=WALLET, spender=SPENDER),
        target=TargetState(ALLOWANCE_FLOOR, BALANCE_TARGET),
        settle_delay=0,
        max_retries=5,
    )


@pytest.fixture
def settings():
    return get_settings(environ={}, settle_delay=0, ready_interval=0)


def always_ready(*args, **kwargs) -> bool:
    return True
