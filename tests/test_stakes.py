import random
from dataclasses import replace
from datetime import datetime, timezone

import pytest
from conftest import make_record

from hex_stakes.errors import ArithmeticOverflow, ConfigurationError
from hex_stakes.models import StakeStatus
from hex_stakes.stakes import derive_stake, merge_stakes, rederive_stake, replace_stakes, sort_stakes, stake_sort_key


def test_derive_stake_fields():
    stake = derive_stake(make_record(9, locked_day=100, staked_days=365, is_auto_stake=True), 200)
    assert stake.stake_id == 9
    assert stake.served_days == 465
    assert stake.served_days == stake.locked_day + stake.staked_days
    assert stake.penalty_days == 183
    assert stake.status is StakeStatus.ACTIVE
    assert stake.percent_complete == pytest.approx(100 / 365)
    assert stake.is_auto_stake is True
    assert stake.start_date == datetime(2020, 3, 12, tzinfo=timezone.utc)
    assert stake.end_date == datetime(2021, 3, 12, tzinfo=timezone.utc)
    assert stake.interest_hearts == 0
    assert stake.big_pay_day_hearts is None
    assert stake.accrued_day is None


def test_derive_stake_rejects_zero_duration():
    with pytest.raises(ConfigurationError):
        derive_stake(make_record(staked_days=0), 10)


def test_derive_stake_rejects_oversized_fields():
    with pytest.raises(ArithmeticOverflow):
        derive_stake(make_record(staked_hearts=1 << 72), 10)


def test_rederive_stake_tracks_current_day():
    stake = derive_stake(make_record(locked_day=0, staked_days=10), 5)
    assert stake.status is StakeStatus.ACTIVE
    later = rederive_stake(stake, 30)
    assert later.status is StakeStatus.BLEEDING
    assert later.percent_complete == 1.0


def test_sort_by_maturity_then_id():
    a = derive_stake(make_record(5, locked_day=0, staked_days=10), 0)
    b = derive_stake(make_record(2, locked_day=5, staked_days=5), 0)
    c = derive_stake(make_record(1, locked_day=0, staked_days=30), 0)
    assert [s.stake_id for s in sort_stakes([c, a, b])] == [2, 5, 1]
    assert stake_sort_key(a) == (10, 5)


def test_sort_is_deterministic():
    stakes = [derive_stake(make_record(i, locked_day=i % 7, staked_days=1 + i % 5), 0) for i in range(1, 40)]
    shuffled = list(stakes)
    random.Random(1234).shuffle(shuffled)
    first = sort_stakes(shuffled)
    assert sort_stakes(first) == first
    assert sort_stakes(reversed(stakes)) == first
    keys = [stake_sort_key(s) for s in first]
    assert keys == sorted(keys)
    assert len(set(keys)) == len(keys)


def test_merge_dedups_by_stake_id_incoming_wins():
    old = replace(derive_stake(make_record(1, staked_hearts=10), 5), interest_hearts=3, accrued_day=5)
    new = replace(derive_stake(make_record(1, staked_hearts=10), 6), interest_hearts=4, accrued_day=6)
    other = derive_stake(make_record(2, locked_day=1), 6)

    merged = merge_stakes([old], [new, other])
    assert [s.stake_id for s in merged] == [1, 2]
    assert merged[0].interest_hearts == 4
    assert merged[0].accrued_day == 6


def test_merge_keeps_known_accrual_for_fresh_record():
    known = replace(
        derive_stake(make_record(1, locked_day=0, staked_days=10), 5),
        interest_hearts=500,
        interest_seven_day_hearts=70,
        big_pay_day_hearts=9,
        accrued_day=5,
    )
    fresh = derive_stake(make_record(1, locked_day=0, staked_days=10, unlocked_day=7), 8)

    (merged,) = merge_stakes([known], [fresh])
    assert merged.unlocked_day == 7
    assert merged.status is StakeStatus.EMERGENCY_END
    assert merged.interest_hearts == 500
    assert merged.interest_seven_day_hearts == 70
    assert merged.big_pay_day_hearts == 9
    assert merged.accrued_day == 5


def test_replace_stakes_drops_stakes_missing_from_refresh():
    known = [
        replace(derive_stake(make_record(1), 5), interest_hearts=1, accrued_day=5),
        replace(derive_stake(make_record(2), 5), interest_hearts=2, accrued_day=5),
    ]
    fresh = [derive_stake(make_record(2), 6), derive_stake(make_record(3), 6)]
    result = replace_stakes(known, fresh)
    assert [s.stake_id for s in result] == [2, 3]
    assert result[0].interest_hearts == 2
    assert result[1].accrued_day is None


def test_roi_and_apy():
    stake = derive_stake(make_record(1, staked_hearts=100_000, locked_day=2, staked_days=30), 40)
    assert stake.roi == 0.0
    assert stake.apy == 0.0

    accrued = replace(stake, interest_hearts=29_000, big_pay_day_hearts=1_000, accrued_day=40)
    assert accrued.balance_hearts == 130_000
    assert accrued.roi == pytest.approx(0.3)
    # Elapsed days stop at the served day (32), not the accrual day.
    assert accrued.apy == pytest.approx(0.3 * 365 / 30)
