import argparse
import logging
import sys

import funding.constants as C
from funding.engine import build_context, build_node, converge, validate
from funding.errors import ConfigError, FundingError
from funding.logging_config import setup_logging
from funding.config import get_settings
from funding.runner import IOMode
from funding.spinner import Spinner

log = logging.getLogger("funding.cli")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        prog="fund-testnet",
        description="Converge the test funding wallet's token allowance and balance.",
    )
    parser.add_argument("command", nargs="?", choices=["fund", "check"], default="fund",
                        help="fund: converge the wallet (default). check: read-only validation.",
                        )
    parser.add_argument("--rpc-url", help="Node JSON-RPC endpoint.")
    parser.add_argument("--chain-id", type=int, help="Chain id used to pick the reward token.")
    parser.add_argument("--token", help="Token contract address.")
    parser.add_argument("--allowance-floor", type=int, help="Minimum allowance for the spender.")
    parser.add_argument("--balance-target", type=int, help="Exact funding wallet balance.")
    parser.add_argument("--max-retries", type=int, help="Attempts per step.")
    parser.add_argument("--settle-delay", type=float, help="Seconds to wait after each write.")
    parser.add_argument("--ready-attempts", type=int, help="Readiness probes before giving up.")
    parser.add_argument("--ready-interval", type=float, help="Seconds between readiness probes.")
    parser.add_argument("--stream-output", action="store_true",
                        help="Let cast write to the terminal instead of capturing its output.",
                        )
    parser.add_argument("--no-spinner", action="store_true", help="Disable the progress spinner.")
    return parser.parse_args(argv)


def overrides(a) -> dict:
    o = {
        "rpc_url": a.rpc_url,
        "chain_id": a.chain_id,
        "token": a.token,
        "allowance_floor": a.allowance_floor,
        "balance_target": a.balance_target,
        "max_retries": a.max_retries,
        "settle_delay": a.settle_delay,
        "ready_attempts": a.ready_attempts,
        "ready_interval": a.ready_interval,
    }
    return {k: v for k, v in o.items() if v is not None}


def check(settings) -> int:
    try:
        readings = validate(build_context(settings))
    except FundingError as e:
        print(f"Not converged: {e}", file=sys.stderr)
        return C.EXIT_FAILED
    print(f"Funding wallet is ready for testing\n{readings}")
    return C.EXIT_OK


def fund(settings, *, write_io: IOMode, spinner: bool) -> int:
    node = build_node(settings, write_io=write_io)
    with Spinner(enabled=None if spinner else False):
        result = converge(settings, node=node)

    if not result.converged:
        print(f"Funding failed: {result.error}", file=sys.stderr)
        return C.EXIT_FAILED
    print(f"Funding wallet is ready for testing\n{result.readings}")
    return C.EXIT_OK


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging()
    try:
        settings = get_settings(**overrides(args))
    except ConfigError as e:
        print(e, file=sys.stderr)
        return C.EXIT_USAGE

    if args.command == "check":
        return check(settings)
    write_io = IOMode.INHERIT if args.stream_output else IOMode.CAPTURE
    return fund(settings, write_io=write_io, spinner=not args.no_spinner)


def cli():
    sys.exit(main())


if __name__ == "__main__":
    cli()
