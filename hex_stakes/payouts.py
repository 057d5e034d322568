"""Payout accrual for stakes.

All arithmetic is exact integer arithmetic with truncating division, matching the
contract's own payout calculation, so the results never exceed what the chain pays.
"""

from collections.abc import Iterable
from dataclasses import replace

from hex_stakes.constants import (
    BIG_PAY_DAY,
    CLAIMABLE_BTC_ADDR_COUNT,
    CLAIMABLE_SATOSHIS_TOTAL,
    DAILY_WINDOW_DAYS,
    HEARTS_PER_SATOSHI,
    MONTHLY_WINDOW_DAYS,
    SEVEN_DAY_WINDOW_DAYS,
)
from hex_stakes.models import DailyDataRange, GlobalInfo, Payout, Stake


def daily_payout(stake_shares: int, payout: int, shares: int) -> int:
    """This stake's pro-rata slice of one day's payout. A day without shares pays nothing."""
    if shares == 0:
        return 0
    return stake_shares * payout // shares


def big_pay_day_slice(stake_shares: int, daily_data: DailyDataRange) -> int | None:
    """Share of the unclaimed-satoshi pool distributed on the Big Pay Day, or None if that day is not decoded."""
    day = daily_data.get(BIG_PAY_DAY)
    if day is None:
        return None
    return daily_payout(stake_shares, day.sats * HEARTS_PER_SATOSHI, day.shares)


def adoption_bonus(payout: int, global_info: GlobalInfo) -> int:
    """Viral and critical-mass bonuses paid on top of the Big Pay Day slice."""
    viral = payout * global_info.claimed_btc_addr_count // CLAIMABLE_BTC_ADDR_COUNT
    crit = payout * global_info.claimed_satoshis_total // CLAIMABLE_SATOSHIS_TOTAL
    return viral + crit


def compute_interest(
    stake: Stake,
    daily_data: DailyDataRange,
    begin_day: int,
    end_day: int,
    global_info: GlobalInfo | None = None,
) -> Payout:
    """
    Accrue payouts for `stake` over protocol days [begin_day, end_day).

    Days with zero total shares or outside the decoded range contribute nothing.
    The Big Pay Day bonus is reported separately and only when that day is in range.
    """
    payout = 0
    for d in range(begin_day, end_day):
        day = daily_data.get(d)
        if day is None:
            continue
        payout += daily_payout(stake.stake_shares, day.payout, day.shares)

    big_pay_day = None
    if begin_day <= BIG_PAY_DAY < end_day:
        big_pay_day = big_pay_day_slice(stake.stake_shares, daily_data)
        if big_pay_day is not None and global_info is not None:
            big_pay_day += adoption_bonus(big_pay_day, global_info)

    return Payout(payout=payout, big_pay_day=big_pay_day)


def accrual_end_day(stake: Stake, current_day: int) -> int:
    """Exclusive end of the accrued range: the served day, or today if the term is still running."""
    return min(stake.served_days, current_day)


def window_days(stake: Stake, current_day: int, days: int) -> int:
    """Actual length of a trailing window of `days`, clamped to the stake's locked day."""
    if stake.locked_day > current_day:
        return 0
    end = accrual_end_day(stake, current_day)
    return max(0, end - max(end - days, stake.locked_day))


def daily_rate(interest_hearts: int, days: int) -> int:
    """Average interest per day over a window of `days`."""
    if days <= 0:
        return 0
    return interest_hearts // days


_WINDOW_FIELDS = {
    DAILY_WINDOW_DAYS: "interest_daily_hearts",
    SEVEN_DAY_WINDOW_DAYS: "interest_seven_day_hearts",
    MONTHLY_WINDOW_DAYS: "interest_monthly_hearts",
}


def window_daily_rate(stakes: Iterable[Stake], days: int) -> int:
    """
    Combined interest per day over a trailing window of `days` (1, 7 or 30).

    Each stake's window sum is divided by that stake's actual window length at its
    accrual day, so stakes younger than the window are not diluted.
    """
    field_name = _WINDOW_FIELDS[days]
    rate = 0
    for stake in stakes:
        if stake.accrued_day is None:
            continue
        rate += daily_rate(getattr(stake, field_name), window_days(stake, stake.accrued_day, days))
    return rate


def accrue_stake(
    stake: Stake,
    daily_data: DailyDataRange,
    current_day: int,
    global_info: GlobalInfo | None = None,
) -> Stake:
    """Return `stake` with its lifetime and trailing-window interest fields recomputed for `current_day`."""
    if stake.locked_day > current_day:
        return replace(
            stake,
            interest_hearts=0,
            interest_daily_hearts=0,
            interest_seven_day_hearts=0,
            interest_monthly_hearts=0,
            big_pay_day_hearts=None,
            accrued_day=current_day,
        )

    start = stake.locked_day
    end = accrual_end_day(stake, current_day)

    def trailing(days: int) -> int:
        return compute_interest(stake, daily_data, max(end - days, start), end).payout

    total = compute_interest(stake, daily_data, start, end, global_info)
    return replace(
        stake,
        interest_hearts=total.payout,
        interest_daily_hearts=trailing(DAILY_WINDOW_DAYS),
        interest_seven_day_hearts=trailing(SEVEN_DAY_WINDOW_DAYS),
        interest_monthly_hearts=trailing(MONTHLY_WINDOW_DAYS),
        big_pay_day_hearts=total.big_pay_day,
        accrued_day=current_day,
    )
