"""State transforms for tracked accounts.

The caller owns a single HexState value and replaces it with the value returned by
each transform. Transforms never mutate their input, so results from independent
fetches (e.g. Ethereum and PulseChain) can be applied in any order.
"""

from collections.abc import Iterable
from dataclasses import replace

from hex_stakes.aggregation import aggregate, group_totals, remove_account_totals, upsert_account_totals
from hex_stakes.constants import GRACE_PERIOD
from hex_stakes.errors import AccountNotFoundError, ConfigurationError
from hex_stakes.models import (
    Account,
    AccountData,
    AccountTotals,
    Chain,
    DailyDataRange,
    GlobalInfo,
    HexState,
    Stake,
    StakeRecord,
    Totals,
)
from hex_stakes.payouts import accrue_stake
from hex_stakes.stakes import derive_stake, rederive_stake, replace_stakes, sort_stakes

AccountKey = tuple[str, Chain]


def get_account_data(state: HexState, key: AccountKey) -> AccountData:
    """Look up an account; raises AccountNotFoundError if it is not registered."""
    data = state.accounts_data.get(key)
    if data is None:
        raise AccountNotFoundError(key)
    return data


def get_current_day(state: HexState, chain: Chain) -> int:
    """Current protocol day on `chain`; raises ConfigurationError if it was never applied."""
    day = state.current_day.get(chain)
    if day is None:
        raise ConfigurationError(f"Current day for {chain} is unknown")
    return day


def accounts_for_chain(state: HexState, chain: Chain) -> list[AccountData]:
    return [d for d in state.accounts_data.values() if d.account.chain == chain]


def _put(state: HexState, data: AccountData) -> HexState:
    accounts_data = {**state.accounts_data, data.account.key: data}
    favorites = state.favorites
    if data.account.is_favorite:
        favorites = upsert_account_totals(favorites, AccountTotals(key=data.account.key, total=data.total))
    else:
        favorites = remove_account_totals(favorites, data.account.key)
    return replace(state, accounts_data=accounts_data, favorites=favorites)


def _with_stakes(data: AccountData, stakes: Iterable[Stake]) -> AccountData:
    stakes = sort_stakes(stakes)
    return replace(data, stakes=stakes, total=aggregate(stakes))


def register_account(state: HexState, account: Account) -> HexState:
    """Start tracking an account, or update its name/favourite flag if already tracked."""
    data = state.accounts_data.get(account.key)
    if data is None:
        data = AccountData(account=account)
    else:
        data = replace(data, account=account)
    return _put(state, data)


def remove_account(state: HexState, key: AccountKey) -> HexState:
    get_account_data(state, key)
    accounts_data = {k: v for k, v in state.accounts_data.items() if k != key}
    return replace(state, accounts_data=accounts_data, favorites=remove_account_totals(state.favorites, key))


def set_loading(state: HexState, key: AccountKey, is_loading: bool) -> HexState:
    return _put(state, replace(get_account_data(state, key), is_loading=is_loading))


def apply_current_day(state: HexState, chain: Chain, day: int, grace_period_days: int = GRACE_PERIOD) -> HexState:
    """Record a new current day and refresh status/percent of every stake on that chain."""
    state = replace(state, current_day={**state.current_day, chain: day})
    for data in accounts_for_chain(state, chain):
        stakes = [rederive_stake(s, day, grace_period_days) for s in data.stakes]
        state = _put(state, _with_stakes(data, stakes))
    return state


def apply_global_info(state: HexState, chain: Chain, global_info: GlobalInfo) -> HexState:
    return replace(state, global_info={**state.global_info, chain: global_info})


def apply_stake_list(
    state: HexState,
    key: AccountKey,
    records: Iterable[StakeRecord],
    grace_period_days: int = GRACE_PERIOD,
) -> HexState:
    """Replace an account's stakes with a fresh stakeLists read, keeping known accruals until daily data arrives."""
    data = get_account_data(state, key)
    current_day = get_current_day(state, data.account.chain)
    fresh = [derive_stake(r, current_day, grace_period_days) for r in records]
    stakes = replace_stakes(data.stakes, fresh)
    return _put(state, replace(_with_stakes(data, stakes), is_loading=False))


def apply_daily_data(state: HexState, key: AccountKey, daily_data: DailyDataRange) -> HexState:
    """Accrue interest for every stake of an account and recompute its totals."""
    data = get_account_data(state, key)
    chain = data.account.chain
    current_day = get_current_day(state, chain)
    global_info = state.global_info.get(chain)
    stakes = [accrue_stake(s, daily_data, current_day, global_info) for s in data.stakes]
    return _put(state, _with_stakes(data, stakes))


def apply_balance(state: HexState, key: AccountKey, liquid_balance_hearts: int) -> HexState:
    return _put(state, replace(get_account_data(state, key), liquid_balance_hearts=liquid_balance_hearts))


def favorites_total(state: HexState) -> Totals:
    """Rollup of every favourite account's totals."""
    return group_totals(state.favorites)


def favorites_stakes(state: HexState) -> tuple[Stake, ...]:
    """Stakes of every favourite account, in favourites order."""
    return tuple(s for entry in state.favorites for s in get_account_data(state, entry.key).stakes)
