"""Node primitives expressed as foundry `cast` invocations.

Writes return the raw CommandResult so steps can judge the exit status.
Reads return ints and raise NodeQueryError on any failure.
"""
import logging
import re
from functools import partial

import funding.constants as C
from funding.errors import NodeQueryError
from funding.runner import CommandResult, CommandRunner, IOMode, run_command

log = logging.getLogger("funding.cast")

_BRACKETED = re.compile(r"([0-9]+)\s*\[[^\]]*\]")
_HEX = re.compile(r"0x[a-fA-F0-9]+")
_DECIMAL = re.compile(r"[0-9]+")


def parse_uint(raw: str) -> int:
    """Parse a uint printed by cast.

    Accepts plain decimals, 0x-hex, and the "<uint> [<sci>]" form, e.g.
    "10000000000000000000000 [1e22]".
    """
    text = (raw or "").strip()
    if not text:
        raise NodeQueryError("Empty output where a uint was expected")
    if m := _BRACKETED.fullmatch(text):
        return int(m.group(1))
    if _HEX.fullmatch(text):
        return int(text, 16)
    if _DECIMAL.fullmatch(text):
        return int(text)
    raise NodeQueryError(f"Unable to parse uint from cast output: {text!r}")


class CastNode:
    def __init__(
        self,
        rpc_url: str,
        token: str,
        *,
        cast_bin: str = "cast",
        runner: CommandRunner | None = None,
        timeout: float = C.COMMAND_TIMEOUT,
        write_io: IOMode = IOMode.CAPTURE,
    ):
        self.rpc_url = rpc_url
        self.token = token
        self.cast_bin = cast_bin
        self.runner = runner or partial(run_command, timeout=timeout)
        self.write_io = write_io

    def _cast(self, *args: str, io_mode: IOMode = IOMode.CAPTURE) -> CommandResult:
        result = self.runner(self.cast_bin, list(args), io_mode)
        if not result.ok:
            log.warning("cast %s exited %s: %s", args[0], result.exit_status, result.stderr.strip())
        return result

    def _call(self, signature: str, *params: str) -> int:
        result = self._cast("call", self.token, signature, *params, "--rpc-url", self.rpc_url)
        if not result.ok:
            raise NodeQueryError(f"{signature} failed with exit status {result.exit_status}: {result.stderr.strip()}")
        return parse_uint(result.stdout)

    def _send(self, sender: str, signature: str, *params: str) -> CommandResult:
        return self._cast(
            "send", "--rpc-url", self.rpc_url, self.token,
            "--unlocked", "--from", sender,
            signature, *params,
            io_mode=self.write_io,
        )

    # writes
    def impersonate(self, address: str) -> CommandResult:
        return self._cast("rpc", "--rpc-url", self.rpc_url, C.IMPERSONATE_METHOD, address, io_mode=self.write_io)

    def approve(self, owner: str, spender: str, amount: int) -> CommandResult:
        return self._send(owner, C.APPROVE_SIG, spender, str(amount))

    def transfer(self, sender: str, recipient: str, amount: int) -> CommandResult:
        return self._send(sender, C.TRANSFER_SIG, recipient, str(amount))

    # reads
    def allowance(self, owner: str, spender: str) -> int:
        return self._call(C.ALLOWANCE_SIG, owner, spender)

    def balance_of(self, owner: str) -> int:
        return self._call(C.BALANCE_OF_SIG, owner)
