"""On-chain reads from the HEX contract."""

import sys
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from tqdm import tqdm

from hex_stakes.cache import load_daily_chunk, store_daily_chunk
from hex_stakes.constants import DAILY_DATA_CHUNK_DAYS
from hex_stakes.errors import ChainAccessError, ConfigurationError
from hex_stakes.formatters import as_int
from hex_stakes.models import Chain, DailyDataRange, GlobalInfo, StakeRecord
from hex_stakes.parsing import concat_daily_data, decode_daily_data, parse_global_info, parse_stake_entry

if TYPE_CHECKING:
    from web3 import Web3  # pragma: no cover


def _call(fn: Any, what: str, **kwargs: Any) -> Any:
    try:
        return fn.call(**kwargs)
    except Exception as ex:  # pylint: disable=broad-exception-caught
        raise ChainAccessError(f"{what} failed: {ex}") from ex


def checksum_address(w3: "Web3", address: str) -> str:
    """EIP-55 form of `address`; raises ConfigurationError for anything that is not a 20-byte hex address."""
    try:
        return w3.to_checksum_address(address)
    except (TypeError, ValueError) as ex:
        raise ConfigurationError(f"Invalid address {address!r}: {ex}") from ex


def iter_day_ranges(begin: int, end: int, chunk_size: int) -> Iterable[tuple[int, int]]:
    """Iterate over half-open day ranges [a, b) in chunks."""
    if chunk_size <= 0:
        raise ValueError("chunk_size must be > 0")
    cur = begin
    while cur < end:
        yield cur, min(end, cur + chunk_size)
        cur += chunk_size


def get_current_day(contract: Any) -> int:
    return as_int(_call(contract.functions.currentDay(), "currentDay()"))


def get_global_info(contract: Any) -> GlobalInfo:
    return parse_global_info(_call(contract.functions.globalInfo(), "globalInfo()"))


def get_balance(w3: "Web3", contract: Any, address: str) -> int:
    addr = checksum_address(w3, address)
    return as_int(_call(contract.functions.balanceOf(addr), f"balanceOf({addr})"))


def get_stakes(w3: "Web3", contract: Any, address: str) -> list[StakeRecord]:
    """Read every open stake of `address` (stakeCount, then stakeLists for each index)."""
    addr = checksum_address(w3, address)
    count = as_int(_call(contract.functions.stakeCount(addr), f"stakeCount({addr})"))
    out: list[StakeRecord] = []
    for index in range(count):
        entry = _call(contract.functions.stakeLists(addr, index), f"stakeLists({addr}, {index})")
        out.append(parse_stake_entry(entry))
    return out


def get_daily_data_chunk(
    contract: Any,
    chain: Chain,
    begin: int,
    end: int,
    *,
    current_day: int,
    use_cache: bool = True,
) -> DailyDataRange:
    """Read dailyDataRange(begin, end). Chunks that end on or before the current day never change and are cached."""
    cacheable = use_cache and end <= current_day
    if cacheable:
        cached = load_daily_chunk(chain, begin, end)
        if cached is not None:
            return decode_daily_data(cached, begin=begin, end=end)

    raw = _call(contract.functions.dailyDataRange(begin, end), f"dailyDataRange({begin}, {end})")
    packed = [as_int(v) for v in raw]
    daily = decode_daily_data(packed, begin=begin, end=end)
    if cacheable:
        store_daily_chunk(chain, begin, end, packed)
    return daily


def get_daily_data_range(
    contract: Any,
    chain: Chain,
    begin: int,
    end: int,
    *,
    current_day: int,
    chunk_size: int = DAILY_DATA_CHUNK_DAYS,
    use_cache: bool = True,
) -> DailyDataRange:
    """Read and decode daily data for days [begin, end) in chunks."""
    ranges = list(iter_day_ranges(begin, end, chunk_size))
    chunks: list[DailyDataRange] = []
    with tqdm(total=len(ranges), desc=f"📥 Daily data ({chain})", unit="chunk", file=sys.stderr, leave=False) as pbar:
        for a, b in ranges:
            pbar.set_postfix(days=f"{a}-{b}")
            chunks.append(get_daily_data_chunk(contract, chain, a, b, current_day=current_day, use_cache=use_cache))
            pbar.update(1)
    if not chunks:
        return DailyDataRange(begin_day=begin, days=())
    return concat_daily_data(chunks)
