"""Tests for funding.config: layering, token resolution and validation."""

import pytest
from pydantic import ValidationError

import funding.constants as C
from funding.config import Settings, get_settings, load_defaults
from funding.errors import ConfigError
from funding.models import TargetState


def test_packaged_defaults():
    s = get_settings(environ={})
    assert s.rpc_url == "http://localhost:8545"
    assert s.chain_id == 100
    assert s.token == C.Token.WXDAI
    assert s.whale == "0xefC0e701A824943b469a694aC564Aa1efF7Ab7dd"
    assert s.funding_wallet == "0x70997970C51812dc3A010C7d01b50e0d17dc79C8"
    assert s.spender == "0x000000000022D473030F116dDEE9F6B43aC78BA3"
    assert s.target == TargetState(999999999999999111119999999999999999, 10000000000000000000000)
    assert s.max_retries == 5
    assert s.settle_delay == 2.0
    assert s.ready_attempts == 5
    assert s.ready_interval == 5.0


def test_big_amounts_survive_toml():
    d = load_defaults()
    assert d["allowance_floor"] == "999999999999999111119999999999999999"


def test_env_overrides_defaults():
    env = {
        "FUNDING_RPC_URL": "http://anvil:8545",
        "FUNDING_MAX_RETRIES": "3",
        "FUNDING_SETTLE_DELAY": "0.5",
        "FUNDING_BALANCE_TARGET": "123456789012345678901234567890",
    }
    s = get_settings(environ=env)
    assert s.rpc_url == "http://anvil:8545"
    assert s.max_retries == 3
    assert s.settle_delay == 0.5
    assert s.balance_target == 123456789012345678901234567890


def test_explicit_overrides_beat_env():
    s = get_settings(environ={"FUNDING_MAX_RETRIES": "3"}, max_retries=7, token=None)
    assert s.max_retries == 7
    # None means "not given"
    assert s.token == C.Token.WXDAI


@pytest.mark.parametrize("chain_id, token", [(1, C.Token.DAI), (100, C.Token.WXDAI), (31337, C.Token.WXDAI)])
def test_token_follows_chain(chain_id, token):
    assert get_settings(environ={}, chain_id=chain_id).token == token


def test_explicit_token_wins_over_chain():
    addr = "0x" + "ab" * 20
    assert get_settings(environ={}, chain_id=1, token=addr).token == addr


def test_unknown_chain_without_token():
    with pytest.raises(ConfigError, match="chain 5"):
        get_settings(environ={}, chain_id=5)


@pytest.mark.parametrize("overrides", [
    {"whale": "0x1234"},
    {"rpc_url": "localhost:8545"},
    {"max_retries": 0},
    {"settle_delay": -1},
    {"balance_target": "-10"},
    {"allowance_floor": "lots"},
    {"unexpected": 1},
])
def test_invalid_settings(overrides):
    with pytest.raises(ConfigError):
        get_settings(environ={}, **overrides)


def test_settings_are_frozen():
    s = get_settings(environ={})
    with pytest.raises(ValidationError):
        s.max_retries = 1


def test_accounts_view():
    s = get_settings(environ={})
    a = s.accounts
    assert (a.whale, a.funding_wallet, a.spender) == (s.whale, s.funding_wallet, s.spender)
    assert isinstance(s, Settings)
