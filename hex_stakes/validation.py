"""Validation logic for on-chain stake and daily data inputs."""

from collections.abc import Iterable, Sequence

from hex_stakes.constants import HEARTS_MASK, UINT256_MAX
from hex_stakes.errors import ArithmeticOverflow, ConfigurationError
from hex_stakes.models import DailyDataRange, Stake, StakeRecord

UINT16_MAX = (1 << 16) - 1
UINT40_MAX = (1 << 40) - 1


def check_uint256(value: int, name: str) -> int:
    """Return value unchanged if it fits uint256, else raise ArithmeticOverflow."""
    if value < 0 or value > UINT256_MAX:
        raise ArithmeticOverflow(f"{name}={value} does not fit uint256")
    return value


def validate_packed_length(packed: Sequence[int], *, begin: int, end: int) -> None:
    """dailyDataRange(begin, end) returns exactly one word per day."""
    if begin < 0 or end < begin:
        raise ConfigurationError(f"Invalid daily data range [{begin}, {end})")
    if len(packed) != end - begin:
        raise ConfigurationError(
            f"Malformed daily data: got {len(packed)} packed values for range [{begin}, {end}) "
            f"(expected {end - begin})"
        )


def validate_stake_record(record: StakeRecord, *, warn_only: bool = False) -> list[str]:
    """
    Validate stake record invariants against the contract's storage widths.

    Returns list of validation warnings/errors. If warn_only=False, raises on critical errors.
    """
    issues: list[str] = []

    # 1. Zero-duration stakes cannot exist on-chain (startStake requires stakedDays >= 1).
    if record.staked_days == 0:
        msg = f"Stake {record.stake_id}: stakedDays is 0"
        issues.append(msg)
        if not warn_only:
            raise ConfigurationError(msg)

    # 2. Storage widths: uint40 id, uint72 hearts/shares, uint16 days.
    widths = {
        "stakeId": (record.stake_id, UINT40_MAX),
        "stakedHearts": (record.staked_hearts, HEARTS_MASK),
        "stakeShares": (record.stake_shares, HEARTS_MASK),
        "lockedDay": (record.locked_day, UINT16_MAX),
        "stakedDays": (record.staked_days, UINT16_MAX),
        "unlockedDay": (record.unlocked_day, UINT16_MAX),
    }
    for name, (value, limit) in widths.items():
        if value < 0 or value > limit:
            msg = f"Stake {record.stake_id}: {name}={value} out of range [0, {limit}]"
            issues.append(msg)
            if not warn_only:
                raise ArithmeticOverflow(msg)

    # 3. A stake can only be ended on or after the day it was locked.
    if 0 < record.unlocked_day < record.locked_day:
        msg = f"Stake {record.stake_id}: unlockedDay {record.unlocked_day} precedes lockedDay {record.locked_day}"
        issues.append(msg)
        if not warn_only:
            raise ConfigurationError(msg)

    return issues


def missing_days(stakes: Iterable[Stake], daily_data: DailyDataRange, *, current_day: int) -> list[str]:
    """
    Report stakes whose accrual range is not covered by the decoded daily data.

    Missing days contribute zero interest; the caller should re-fetch the range.
    """
    issues: list[str] = []
    for stake in stakes:
        if stake.locked_day > current_day:
            continue
        end = min(stake.served_days, current_day)
        if end <= stake.locked_day:
            continue
        if stake.locked_day < daily_data.begin_day or end > daily_data.end_day:
            issues.append(
                f"Stake {stake.stake_id}: days [{stake.locked_day}, {end}) not covered by daily data "
                f"[{daily_data.begin_day}, {daily_data.end_day})"
            )
    return issues
