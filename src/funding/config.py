import logging
import os
import tomllib
from pathlib import Path
from typing import Annotated, Any

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeFloat,
    NonNegativeInt,
    PositiveFloat,
    PositiveInt,
    ValidationError,
    field_validator,
    model_validator,
)

import funding.constants as C
from funding.errors import ConfigError
from funding.models import Accounts, TargetState

log = logging.getLogger("funding.config")

pkg_root = Path(__file__).parent
config_file = pkg_root / "config.toml"

Address = Annotated[str, Field(pattern=r"^0x[0-9a-fA-F]{40}$")]

# setting name -> environment variable
ENV_VARS = {
    "rpc_url": "FUNDING_RPC_URL",
    "chain_id": "FUNDING_CHAIN_ID",
    "whale": "FUNDING_WHALE",
    "funding_wallet": "FUNDING_WALLET",
    "spender": "FUNDING_SPENDER",
    "token": "FUNDING_TOKEN",
    "allowance_floor": "FUNDING_ALLOWANCE_FLOOR",
    "balance_target": "FUNDING_BALANCE_TARGET",
    "max_retries": "FUNDING_MAX_RETRIES",
    "settle_delay": "FUNDING_SETTLE_DELAY",
    "ready_attempts": "FUNDING_READY_ATTEMPTS",
    "ready_interval": "FUNDING_READY_INTERVAL",
    "command_timeout": "FUNDING_COMMAND_TIMEOUT",
    "cast_bin": "FUNDING_CAST_BIN",
}


class Settings(BaseModel):
    """Immutable configuration for one funding run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    rpc_url: str
    chain_id: PositiveInt
    block_height_method: str = C.BLOCK_HEIGHT_METHOD

    whale: Address
    funding_wallet: Address
    spender: Address
    token: Address

    allowance_floor: NonNegativeInt
    balance_target: NonNegativeInt

    max_retries: PositiveInt = C.MAX_RETRIES
    settle_delay: NonNegativeFloat = C.SETTLE_DELAY
    ready_attempts: PositiveInt = C.READY_ATTEMPTS
    ready_interval: NonNegativeFloat = C.READY_INTERVAL
    command_timeout: PositiveFloat = C.COMMAND_TIMEOUT
    cast_bin: str = "cast"

    @model_validator(mode="before")
    @classmethod
    def _default_token(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("token"):
            chain_id = int(data.get("chain_id") or 0)
            token = C.REWARD_TOKEN_BY_CHAIN.get(chain_id)
            if token is None:
                raise ValueError(f"No token configured and no reward token known for chain {chain_id}")
            data = {**data, "token": str(token)}
        return data

    @field_validator("allowance_floor", "balance_target", mode="before")
    @classmethod
    def _big_int(cls, v: Any) -> Any:
        # pydantic's str->int coercion is not guaranteed past 64 bits
        if isinstance(v, str):
            return int(v.strip())
        return v

    @field_validator("rpc_url")
    @classmethod
    def _http_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError(f"rpc_url must be http(s), got {v!r}")
        return v

    @property
    def target(self) -> TargetState:
        return TargetState(self.allowance_floor, self.balance_target)

    @property
    def accounts(self) -> Accounts:
        return Accounts(
            whale=self.whale,
            funding_wallet=self.funding_wallet,
            spender=self.spender,
        )


def load_defaults(path: Path = config_file) -> dict[str, Any]:
    cfg = tomllib.loads(Path(path).read_text())
    rpc = cfg.get("rpc", {})
    retry = cfg.get("retry", {})
    cast = cfg.get("cast", {})
    flat = {
        "rpc_url": rpc.get("url"),
        "chain_id": rpc.get("chain_id"),
        "block_height_method": rpc.get("block_height_method"),
        **cfg.get("accounts", {}),
        **cfg.get("target", {}),
        **retry,
        "cast_bin": cast.get("bin"),
        "command_timeout": cast.get("command_timeout"),
    }
    return {k: v for k, v in flat.items() if v is not None}


def env_overrides(environ: dict[str, str] | None = None) -> dict[str, str]:
    environ = os.environ if environ is None else environ
    return {name: environ[var] for name, var in ENV_VARS.items() if environ.get(var)}


def get_settings(*, config_path: Path = config_file, environ: dict[str, str] | None = None, **overrides) -> Settings:
    """Merge packaged defaults, environment, then explicit overrides."""
    data = load_defaults(config_path)
    data.update(env_overrides(environ))
    data.update({k: v for k, v in overrides.items() if v is not None})
    try:
        settings = Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid funding configuration:\n{e}") from e
    log.debug("settings: %s", settings.model_dump())
    return settings
