"""Decoding of raw HEX contract return values."""

from collections.abc import Sequence
from typing import Any

from hex_stakes.constants import HEARTS_MASK, HEARTS_UINT_SHIFT, SATS_MASK
from hex_stakes.errors import ConfigurationError
from hex_stakes.formatters import as_int
from hex_stakes.models import DailyData, DailyDataRange, GlobalInfo, StakeRecord
from hex_stakes.validation import check_uint256, validate_packed_length

GLOBAL_INFO_FIELDS = (
    "locked_hearts_total",
    "next_stake_shares_total",
    "share_rate",
    "stake_penalty_total",
    "daily_data_count",
    "stake_shares_total",
    "latest_stake_id",
    "unclaimed_satoshis_total",
    "claimed_satoshis_total",
    "claimed_btc_addr_count",
    "block_timestamp",
    "total_supply",
    "current_xf_lobby",
)

STAKE_ENTRY_FIELDS = (
    "stakeId",
    "stakedHearts",
    "stakeShares",
    "lockedDay",
    "stakedDays",
    "unlockedDay",
    "isAutoStake",
)


def decode_daily_data_word(value: int) -> DailyData:
    """Unpack one dailyDataRange word: payout (low), shares (middle), sats (high)."""
    check_uint256(value, "dailyData")
    payout = value & HEARTS_MASK
    value >>= HEARTS_UINT_SHIFT
    shares = value & HEARTS_MASK
    value >>= HEARTS_UINT_SHIFT
    sats = value & SATS_MASK
    return DailyData(payout=payout, shares=shares, sats=sats)


def decode_daily_data(packed: Sequence[Any], *, begin: int = 0, end: int | None = None) -> DailyDataRange:
    """
    Decode the result of dailyDataRange(begin, end).

    Args:
        packed: One packed uint256 per day (ints, or hex/decimal strings)
        begin: Protocol day of the first word
        end: Exclusive end day of the request; when given, the length is checked against it

    Returns:
        DailyDataRange whose entry for day `d` is days[d - begin]
    """
    if end is not None:
        validate_packed_length(packed, begin=begin, end=end)
    days = tuple(decode_daily_data_word(as_int(v)) for v in packed)
    return DailyDataRange(begin_day=begin, days=days)


def concat_daily_data(ranges: Sequence[DailyDataRange]) -> DailyDataRange:
    """Join adjacent ranges (as fetched in chunks) into one."""
    if not ranges:
        return DailyDataRange(begin_day=0, days=())
    ordered = sorted(ranges, key=lambda r: r.begin_day)
    days: list[DailyData] = []
    expected = ordered[0].begin_day
    for r in ordered:
        if r.begin_day != expected:
            raise ConfigurationError(
                f"Daily data chunks are not contiguous: expected day {expected}, got {r.begin_day}"
            )
        days.extend(r.days)
        expected = r.end_day
    return DailyDataRange(begin_day=ordered[0].begin_day, days=tuple(days))


def parse_stake_entry(entry: Any) -> StakeRecord:
    """Parse a HEX.stakeLists entry.

    StakeStore struct fields (7 total):
        0: stakeId (uint40)
        1: stakedHearts (uint72)
        2: stakeShares (uint72)
        3: lockedDay (uint16)
        4: stakedDays (uint16)
        5: unlockedDay (uint16)
        6: isAutoStake (bool)
    """
    if isinstance(entry, dict):
        fields = [entry.get(name) for name in STAKE_ENTRY_FIELDS]
    else:
        # Tuple format (web3.py decodes multiple outputs as a list/tuple)
        try:
            fields = list(entry)
        except TypeError as ex:
            raise ConfigurationError(f"Unexpected stakeLists entry: {entry!r}") from ex
        if len(fields) < len(STAKE_ENTRY_FIELDS):
            raise ConfigurationError(f"Unexpected stakeLists entry (expected 7 fields): {entry!r}")
    try:
        return StakeRecord(
            stake_id=as_int(fields[0]),
            staked_hearts=as_int(fields[1]),
            stake_shares=as_int(fields[2]),
            locked_day=as_int(fields[3]),
            staked_days=as_int(fields[4]),
            unlocked_day=as_int(fields[5]),
            is_auto_stake=bool(fields[6]),
        )
    except (TypeError, ValueError) as ex:
        raise ConfigurationError(f"Malformed stakeLists entry {entry!r}: {ex}") from ex


def parse_global_info(values: Sequence[Any]) -> GlobalInfo:
    """Parse the uint256[13] returned by HEX.globalInfo()."""
    if len(values) < len(GLOBAL_INFO_FIELDS):
        raise ConfigurationError(f"Unexpected globalInfo length: {len(values)} (expected {len(GLOBAL_INFO_FIELDS)})")
    try:
        return GlobalInfo(**{name: as_int(v) for name, v in zip(GLOBAL_INFO_FIELDS, values)})
    except (TypeError, ValueError) as ex:
        raise ConfigurationError(f"Malformed globalInfo values: {ex}") from ex
