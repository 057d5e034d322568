import json
import re
from pathlib import Path
from types import SimpleNamespace

import pytest

from hex_stakes.constants import HEARTS_UINT_SHIFT
from hex_stakes.models import DailyData, DailyDataRange, StakeRecord

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


def pack(payout: int, shares: int, sats: int = 0) -> int:
    """Pack one dailyDataRange word the way HEX.sol does."""
    return payout | (shares << HEARTS_UINT_SHIFT) | (sats << (HEARTS_UINT_SHIFT * 2))


def make_record(
    stake_id: int = 1,
    *,
    staked_hearts: int = 100_000,
    stake_shares: int = 10,
    locked_day: int = 0,
    staked_days: int = 10,
    unlocked_day: int = 0,
    is_auto_stake: bool = False,
) -> StakeRecord:
    return StakeRecord(
        stake_id=stake_id,
        staked_hearts=staked_hearts,
        stake_shares=stake_shares,
        locked_day=locked_day,
        staked_days=staked_days,
        unlocked_day=unlocked_day,
        is_auto_stake=is_auto_stake,
    )


def uniform_daily_data(days: int, *, payout: int = 1000, shares: int = 100, begin: int = 0) -> DailyDataRange:
    day = DailyData(payout=payout, shares=shares, sats=0)
    return DailyDataRange(begin_day=begin, days=(day,) * days)


class FakeCall:
    def __init__(self, result):
        self.result = result

    def call(self, **_kwargs):
        if isinstance(self.result, Exception):
            raise self.result
        return self.result


class FakeFunctions:
    """Stands in for `contract.functions` of the HEX contract."""

    def __init__(self, *, current_day=0, stakes=None, daily_words=(), global_info=None, balances=None):
        self.current_day = current_day
        self.stakes = stakes or {}
        self.daily_words = list(daily_words)
        self.global_info = global_info if global_info is not None else [0] * 13
        self.balances = balances or {}
        self.daily_calls: list[tuple[int, int]] = []

    def currentDay(self):
        return FakeCall(self.current_day)

    def stakeCount(self, addr):
        return FakeCall(len(self.stakes.get(addr, [])))

    def stakeLists(self, addr, index):
        return FakeCall(self.stakes[addr][index])

    def dailyDataRange(self, begin, end):
        self.daily_calls.append((begin, end))
        return FakeCall(self.daily_words[begin:end])

    def globalInfo(self):
        return FakeCall(self.global_info)

    def balanceOf(self, addr):
        return FakeCall(self.balances.get(addr, 0))


class FakeContract:
    def __init__(self, functions: FakeFunctions):
        self.functions = functions


class FakeWeb3:
    def __init__(self, contract: FakeContract):
        self.eth = SimpleNamespace(contract=lambda address, abi: contract)

    @staticmethod
    def to_checksum_address(address: str) -> str:
        if not isinstance(address, str) or not re.fullmatch(r"0x[0-9a-fA-F]{40}", address):
            raise ValueError(f"Unknown format {address!r}, attempted to normalize to hex address")
        return address


@pytest.fixture
def account_sample() -> dict:
    return json.loads((FIXTURES_DIR / "account_sample.json").read_text(encoding="utf-8"))


@pytest.fixture(autouse=True)
def isolated_cache(tmp_path, monkeypatch):
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
