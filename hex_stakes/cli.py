"""CLI and main logic."""

import argparse
import os
import sys

from tqdm import tqdm

from hex_stakes.console import format_totals, print_account_report
from hex_stakes.constants import GRACE_PERIOD
from hex_stakes.contracts import hex_contract, parse_chain, rpc_urls
from hex_stakes.errors import ChainAccessError, ConfigurationError, HexStakesError, PriceFeedError
from hex_stakes.models import Account, Chain, HexState
from hex_stakes.onchain import get_balance, get_current_day, get_daily_data_range, get_global_info, get_stakes
from hex_stakes.prices import fetch_ohlcv, latest_price
from hex_stakes.state import (
    accounts_for_chain,
    apply_balance,
    apply_current_day,
    apply_daily_data,
    apply_global_info,
    apply_stake_list,
    favorites_stakes,
    favorites_total,
    register_account,
    set_loading,
)
from hex_stakes.validation import missing_days

# Internal defaults (not exposed as CLI flags)
DEFAULT_TIMEOUT = 30


def parse_args(argv: list[str]) -> argparse.Namespace:
    """Parse command-line arguments."""
    p = argparse.ArgumentParser(description="Track HEX stakes: status, accrued interest and account totals.")
    p.add_argument(
        "--address",
        action="append",
        required=True,
        help="Wallet address to track. Repeat for several addresses.",
    )
    p.add_argument(
        "--favorite",
        action="append",
        default=[],
        help="Address to include in the favourites group totals. Repeatable.",
    )
    p.add_argument(
        "--chain",
        action="append",
        default=None,
        help="Chain to read (ethereum, pulsechain). Repeatable. Default: both.",
    )
    p.add_argument(
        "--rpc-url",
        default=None,
        help="RPC URL (single chain only). Default: ETH_RPC_URL / PULSECHAIN_RPC_URL or a public endpoint.",
    )
    p.add_argument(
        "--grace-period",
        type=int,
        default=GRACE_PERIOD,
        help=f"Days after the served day before an unclaimed stake starts bleeding. Default: {GRACE_PERIOD}.",
    )
    p.add_argument(
        "--price",
        action="store_true",
        help="Fetch the HEX/USD price (requires BITQUERY_API_KEY) and show USD values.",
    )
    p.add_argument(
        "--no-cache",
        action="store_true",
        help="Disable caching for this run (fetch all daily data fresh from the node).",
    )
    return p.parse_args(argv)


def connect(web3_cls, chain: Chain, rpc_url: str | None):
    """Return a connected Web3 instance for `chain`, or None if no endpoint answered."""
    for url in rpc_urls(chain, rpc_url):
        w3 = web3_cls(web3_cls.HTTPProvider(url, request_kwargs={"timeout": DEFAULT_TIMEOUT}))
        if w3.is_connected():
            return w3
        print(f"⚠️  Failed to connect to {chain} RPC at {url}", file=sys.stderr)
    return None


def refresh_chain(state: HexState, w3, chain: Chain, *, grace_period: int, use_cache: bool) -> tuple[HexState, int]:
    """
    Fetch everything for one chain and apply it to `state`.

    Failed reads leave the previously applied values in place. Returns the new state and
    the number of accounts whose stakes were refreshed.
    """
    contract = hex_contract(w3, chain)
    current_day = get_current_day(contract)
    state = apply_current_day(state, chain, current_day, grace_period)
    try:
        state = apply_global_info(state, chain, get_global_info(contract))
    except (ChainAccessError, ConfigurationError) as ex:
        print(f"⚠️  globalInfo unavailable on {chain} (Big Pay Day bonus omitted): {ex}", file=sys.stderr)

    refreshed = 0
    accounts = accounts_for_chain(state, chain)
    with tqdm(accounts, desc=f"🔗 Fetching stakes ({chain})", unit="account", file=sys.stderr) as pbar:
        for data in pbar:
            key = data.account.key
            pbar.set_postfix(address=data.account.address[:10])
            state = set_loading(state, key, True)
            try:
                records = get_stakes(w3, contract, data.account.address)
                balance = get_balance(w3, contract, data.account.address)
                state = apply_stake_list(state, key, records, grace_period)
                state = apply_balance(state, key, balance)
                refreshed += 1
            except HexStakesError as ex:
                tqdm.write(f"⚠️  {data.account.address} on {chain}: {ex}", file=sys.stderr)
                state = set_loading(state, key, False)

    try:
        daily = get_daily_data_range(contract, chain, 0, current_day, current_day=current_day, use_cache=use_cache)
    except HexStakesError as ex:
        print(f"⚠️  Daily data unavailable on {chain}, interest not updated: {ex}", file=sys.stderr)
        return state, refreshed

    for data in accounts_for_chain(state, chain):
        for issue in missing_days(data.stakes, daily, current_day=current_day):
            print(f"⚠️  {issue}", file=sys.stderr)
        state = apply_daily_data(state, data.account.key, daily)
    return state, refreshed


def fetch_price() -> float | None:
    api_key = os.getenv("BITQUERY_API_KEY")
    if not api_key:
        print("⚠️  BITQUERY_API_KEY is not set; USD values are omitted.", file=sys.stderr)
        return None
    try:
        return latest_price(fetch_ohlcv(api_key, timeout_s=DEFAULT_TIMEOUT))
    except PriceFeedError as ex:
        print(f"⚠️  {ex}", file=sys.stderr)
        return None


def main(argv: list[str]) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        chains = [parse_chain(c) for c in args.chain] if args.chain else list(Chain)
    except ConfigurationError as ex:
        print(f"Error: {ex}", file=sys.stderr)
        return 2
    if args.rpc_url and len(chains) > 1:
        print("Error: --rpc-url requires exactly one --chain.", file=sys.stderr)
        return 2
    if args.grace_period < 0:
        print("Error: --grace-period must be >= 0.", file=sys.stderr)
        return 2

    try:
        from web3 import Web3
    except ImportError as ex:  # pragma: no cover
        print("Missing dependency. Run: pip install -e .", file=sys.stderr)
        raise SystemExit(2) from ex

    favorites = {a.lower() for a in args.favorite}
    state = HexState()
    for chain in chains:
        for address in args.address:
            account = Account(address=address, chain=chain, is_favorite=address.lower() in favorites)
            state = register_account(state, account)

    refreshed = 0
    for chain in chains:
        w3 = connect(Web3, chain, args.rpc_url)
        if w3 is None:
            print(f"⚠️  Skipping {chain}: no RPC endpoint reachable.", file=sys.stderr)
            continue
        try:
            state, count = refresh_chain(state, w3, chain, grace_period=args.grace_period, use_cache=not args.no_cache)
        except ChainAccessError as ex:
            print(f"⚠️  Skipping {chain}: {ex}", file=sys.stderr)
            continue
        refreshed += count

    if refreshed == 0:
        print("No stake data could be fetched.", file=sys.stderr)
        return 1

    price = fetch_price() if args.price else None

    print("")
    for key in sorted(state.accounts_data, key=lambda k: (k[1].value, k[0])):
        data = state.accounts_data[key]
        current_day = state.current_day.get(data.account.chain)
        if current_day is None:
            continue
        print_account_report(data, current_day=current_day, price=price)

    if state.favorites:
        title = f"Favourites ({len(state.favorites)} accounts)"
        print(format_totals(title, favorites_total(state), favorites_stakes(state), price=price))
        print("")

    return 0


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
