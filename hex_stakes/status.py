"""Stake lifecycle classification."""

from typing import Protocol

from hex_stakes.constants import EARLY_PENALTY_MIN_DAYS, GRACE_PERIOD
from hex_stakes.errors import ConfigurationError
from hex_stakes.models import StakeStatus


class StakeDays(Protocol):
    """Day fields shared by StakeRecord and Stake."""

    stake_id: int
    locked_day: int
    staked_days: int
    unlocked_day: int


def served_days(stake: StakeDays) -> int:
    """Day the stake's term completes: lockedDay + stakedDays."""
    return stake.locked_day + stake.staked_days


def penalty_days(staked_days: int) -> int:
    """Early-end penalty window: half the term rounded up, never less than EARLY_PENALTY_MIN_DAYS."""
    return max((staked_days + 1) // 2, EARLY_PENALTY_MIN_DAYS)


def percent_complete(stake: StakeDays, current_day: int) -> float:
    """Fraction of the term elapsed at `current_day`, clamped to [0, 1]."""
    if stake.staked_days == 0:
        raise ConfigurationError(f"Stake {stake.stake_id}: stakedDays is 0, percent complete is undefined")
    return max(0.0, min(1.0, (current_day - stake.locked_day) / stake.staked_days))


def classify(stake: StakeDays, current_day: int, grace_period_days: int = GRACE_PERIOD) -> StakeStatus:
    """
    Classify a stake. The first matching rule wins; ranges are half-open.

    1. ended before the term was served                      -> EMERGENCY_END
    2. ended within [served, served + grace)                 -> GOOD_ACCOUNTING
    3. not ended, current day within [served, served + grace) -> GRACE_PERIOD
    4. not ended, current day past served + grace            -> BLEEDING
    5. anything else                                         -> ACTIVE
    """
    served = served_days(stake)
    grace_end = served + grace_period_days
    unlocked = stake.unlocked_day

    if unlocked > 0 and unlocked < served:
        return StakeStatus.EMERGENCY_END
    if unlocked > 0 and served <= unlocked < grace_end:
        return StakeStatus.GOOD_ACCOUNTING
    if unlocked == 0 and served <= current_day < grace_end:
        return StakeStatus.GRACE_PERIOD
    if unlocked == 0 and current_day > grace_end:
        return StakeStatus.BLEEDING
    return StakeStatus.ACTIVE
