"""Stake derivation, canonical ordering and merging."""

from collections.abc import Iterable
from dataclasses import replace

from hex_stakes.constants import GRACE_PERIOD
from hex_stakes.formatters import day_to_date
from hex_stakes.models import Stake, StakeRecord
from hex_stakes.status import classify, penalty_days, percent_complete, served_days
from hex_stakes.validation import validate_stake_record


def derive_stake(record: StakeRecord, current_day: int, grace_period_days: int = GRACE_PERIOD) -> Stake:
    """Build a Stake from an on-chain record. Interest fields start empty until daily data is applied."""
    validate_stake_record(record)
    served = served_days(record)
    return Stake(
        stake_id=record.stake_id,
        staked_hearts=record.staked_hearts,
        stake_shares=record.stake_shares,
        locked_day=record.locked_day,
        staked_days=record.staked_days,
        unlocked_day=record.unlocked_day,
        is_auto_stake=record.is_auto_stake,
        penalty_days=penalty_days(record.staked_days),
        served_days=served,
        percent_complete=percent_complete(record, current_day),
        status=classify(record, current_day, grace_period_days),
        start_date=day_to_date(record.locked_day),
        end_date=day_to_date(served),
    )


def rederive_stake(stake: Stake, current_day: int, grace_period_days: int = GRACE_PERIOD) -> Stake:
    """Refresh the current-day dependent fields (status, percent complete)."""
    return replace(
        stake,
        percent_complete=percent_complete(stake, current_day),
        status=classify(stake, current_day, grace_period_days),
    )


def stake_sort_key(stake: Stake | StakeRecord) -> tuple[int, int]:
    """Canonical order: maturity day first, then the immutable stake id."""
    return (stake.locked_day + stake.staked_days, stake.stake_id)


def sort_stakes(stakes: Iterable[Stake]) -> tuple[Stake, ...]:
    return tuple(sorted(stakes, key=stake_sort_key))


def _carry_accrual(known: Stake, incoming: Stake) -> Stake:
    # Keep the last computed interest until daily data is applied to the fresh record.
    return replace(
        incoming,
        interest_hearts=known.interest_hearts,
        interest_daily_hearts=known.interest_daily_hearts,
        interest_seven_day_hearts=known.interest_seven_day_hearts,
        interest_monthly_hearts=known.interest_monthly_hearts,
        big_pay_day_hearts=known.big_pay_day_hearts,
        accrued_day=known.accrued_day,
    )


def merge_stakes(known: Iterable[Stake], incoming: Iterable[Stake]) -> tuple[Stake, ...]:
    """
    Union two stake collections by stake id, in canonical order.

    The incoming record replaces the known one. If the incoming record has no accrual yet
    and the known one does, the known interest fields are carried over.
    """
    by_id: dict[int, Stake] = {s.stake_id: s for s in known}
    for stake in incoming:
        prev = by_id.get(stake.stake_id)
        if prev is not None and stake.accrued_day is None and prev.accrued_day is not None:
            stake = _carry_accrual(prev, stake)
        by_id[stake.stake_id] = stake
    return sort_stakes(by_id.values())


def replace_stakes(known: Iterable[Stake], incoming: Iterable[Stake]) -> tuple[Stake, ...]:
    """
    Like merge_stakes, but the incoming list is authoritative: known stakes missing from it are dropped.

    Used for a full stakeLists refresh, where ended stakes disappear from the contract's list.
    """
    known_by_id = {s.stake_id: s for s in known}
    fresh = list(incoming)
    return merge_stakes([known_by_id[s.stake_id] for s in fresh if s.stake_id in known_by_id], fresh)
