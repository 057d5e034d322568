"""Stake and account rollups."""

from collections.abc import Iterable

from hex_stakes.models import AccountTotals, Chain, Stake, StakeStatus, Totals
from hex_stakes.validation import check_uint256

_TOTALS_FIELDS = (
    "stake_shares",
    "staked_hearts",
    "interest_hearts",
    "interest_daily_hearts",
    "interest_seven_day_hearts",
    "interest_monthly_hearts",
    "big_pay_day_hearts",
    "active_stake_shares",
    "active_staked_hearts",
)


def _checked(totals: dict[str, int]) -> Totals:
    for name, value in totals.items():
        check_uint256(value, name)
    return Totals(**totals)


def aggregate(stakes: Iterable[Stake]) -> Totals:
    """Compute totals across stakes. Order-independent; an absent Big Pay Day counts as zero."""
    stake_shares = 0
    staked_hearts = 0
    interest_hearts = 0
    interest_daily_hearts = 0
    interest_seven_day_hearts = 0
    interest_monthly_hearts = 0
    big_pay_day_hearts = 0
    active_stake_shares = 0
    active_staked_hearts = 0

    for s in stakes:
        stake_shares += s.stake_shares
        staked_hearts += s.staked_hearts
        interest_hearts += s.interest_hearts
        interest_daily_hearts += s.interest_daily_hearts
        interest_seven_day_hearts += s.interest_seven_day_hearts
        interest_monthly_hearts += s.interest_monthly_hearts
        big_pay_day_hearts += s.big_pay_day_hearts or 0

        if s.status is StakeStatus.ACTIVE:
            active_stake_shares += s.stake_shares
            active_staked_hearts += s.staked_hearts

    return _checked(
        {
            "stake_shares": stake_shares,
            "staked_hearts": staked_hearts,
            "interest_hearts": interest_hearts,
            "interest_daily_hearts": interest_daily_hearts,
            "interest_seven_day_hearts": interest_seven_day_hearts,
            "interest_monthly_hearts": interest_monthly_hearts,
            "big_pay_day_hearts": big_pay_day_hearts,
            "active_stake_shares": active_stake_shares,
            "active_staked_hearts": active_staked_hearts,
        }
    )


def combine_totals(totals: Iterable[Totals]) -> Totals:
    """Sum several Totals (e.g. one per account) into a group rollup."""
    out = dict.fromkeys(_TOTALS_FIELDS, 0)
    for t in totals:
        for name in _TOTALS_FIELDS:
            out[name] += getattr(t, name)
    return _checked(out)


def upsert_account_totals(entries: Iterable[AccountTotals], entry: AccountTotals) -> tuple[AccountTotals, ...]:
    """Replace the entry with the same account key in place, else append it."""
    out: list[AccountTotals] = []
    replaced = False
    for e in entries:
        if e.key == entry.key:
            out.append(entry)
            replaced = True
        else:
            out.append(e)
    if not replaced:
        out.append(entry)
    return tuple(out)


def remove_account_totals(entries: Iterable[AccountTotals], key: tuple[str, Chain]) -> tuple[AccountTotals, ...]:
    return tuple(e for e in entries if e.key != key)


def group_totals(entries: Iterable[AccountTotals]) -> Totals:
    return combine_totals(e.total for e in entries)
