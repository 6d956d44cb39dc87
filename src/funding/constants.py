from typing import Final
from enum import StrEnum


class Token(StrEnum):
    DAI   = "0x6b175474e89094c44da98b954eedeac495271d0f"
    WXDAI = "0xe91d153e0b41518a2ce8dd3d7944fa863463a97d"


REWARD_TOKEN_BY_CHAIN: Final = {
    1: Token.DAI,
    100: Token.WXDAI,
    31337: Token.WXDAI,
}


class StepName(StrEnum):
    IMPERSONATE = "impersonate"
    APPROVE     = "approve_allowance"
    TRANSFER    = "transfer_balance"
    CLAW_BACK   = "claw_back"


class EngineState(StrEnum):
    IDLE       = "Idle"
    PROBING    = "Probing"
    RUNNING    = "Running"
    VALIDATING = "Validating"
    CONVERGED  = "Converged"
    FAILED     = "Failed"


# cast signatures
ALLOWANCE_SIG: Final = "allowance(address,address)(uint256)"
BALANCE_OF_SIG: Final = "balanceOf(address)(uint256)"
APPROVE_SIG: Final = "approve(address,uint256)(bool)"
TRANSFER_SIG: Final = "transfer(address,uint256)(bool)"
IMPERSONATE_METHOD: Final = "anvil_impersonateAccount"
BLOCK_HEIGHT_METHOD: Final = "eth_blockNumber"

MAX_RETRIES = 5
SETTLE_DELAY = 2.0
READY_ATTEMPTS = 5
READY_INTERVAL = 5.0
RPC_TIMEOUT = 3.0
COMMAND_TIMEOUT = 60.0

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_USAGE = 2

__all__ = [
    "ALLOWANCE_SIG",
    "APPROVE_SIG",
    "BALANCE_OF_SIG",
    "BLOCK_HEIGHT_METHOD",
    "COMMAND_TIMEOUT",
    "EXIT_FAILED",
    "EXIT_OK",
    "EXIT_USAGE",
    "IMPERSONATE_METHOD",
    "MAX_RETRIES",
    "READY_ATTEMPTS",
    "READY_INTERVAL",
    "REWARD_TOKEN_BY_CHAIN",
    "RPC_TIMEOUT",
    "SETTLE_DELAY",
    "TRANSFER_SIG",

    ######
    "EngineState",
    "StepName",
    "Token",
]
