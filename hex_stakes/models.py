"""Data models for HEX stake tracking."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from hex_stakes.constants import DAYS_PER_YEAR
from hex_stakes.errors import MissingDailyData


class Chain(str, Enum):
    """Networks the HEX contract is tracked on."""

    ETHEREUM = "ethereum"
    PULSECHAIN = "pulsechain"

    def __str__(self) -> str:
        return self.value


class StakeStatus(str, Enum):
    """Lifecycle state of a stake relative to the current day."""

    ACTIVE = "active"
    EMERGENCY_END = "emergency_end"
    GOOD_ACCOUNTING = "good_accounting"
    GRACE_PERIOD = "grace_period"
    BLEEDING = "bleeding"

    @property
    def description(self) -> str:
        return self.value.replace("_", " ").title()


@dataclass(frozen=True)
class ChainConfig:
    """Connection settings for one chain."""

    chain: Chain
    chain_id: int
    rpc_env_var: str
    default_rpc_urls: tuple[str, ...]
    contract_address: str


@dataclass(frozen=True)
class StakeRecord:
    """A stake exactly as returned by HEX.stakeLists(address, index)."""

    stake_id: int
    staked_hearts: int
    stake_shares: int
    locked_day: int
    staked_days: int
    unlocked_day: int
    is_auto_stake: bool


@dataclass(frozen=True)
class Stake:
    """A stake with the fields derived from the current day and daily data."""

    stake_id: int
    staked_hearts: int
    stake_shares: int
    locked_day: int
    staked_days: int
    unlocked_day: int
    is_auto_stake: bool
    penalty_days: int
    served_days: int
    percent_complete: float
    status: StakeStatus
    start_date: datetime
    end_date: datetime
    interest_hearts: int = 0
    interest_daily_hearts: int = 0
    interest_seven_day_hearts: int = 0
    interest_monthly_hearts: int = 0
    # None unless the Big Pay Day falls inside the stake's accrued range.
    big_pay_day_hearts: int | None = None
    # Current day the interest fields were computed for; None until daily data was applied.
    accrued_day: int | None = None

    @property
    def balance_hearts(self) -> int:
        return self.staked_hearts + self.interest_hearts + (self.big_pay_day_hearts or 0)

    @property
    def roi(self) -> float:
        if self.staked_hearts == 0:
            return 0.0
        return (self.balance_hearts - self.staked_hearts) / self.staked_hearts

    @property
    def apy(self) -> float:
        """ROI annualised over the days accrued so far (0 before any accrual)."""
        if self.accrued_day is None:
            return 0.0
        elapsed = min(self.accrued_day, self.served_days) - self.locked_day
        if elapsed <= 0:
            return 0.0
        return self.roi * DAYS_PER_YEAR / elapsed


@dataclass(frozen=True)
class DailyData:
    """One protocol day of network-wide payout data."""

    payout: int
    shares: int
    sats: int


@dataclass(frozen=True)
class DailyDataRange:
    """Decoded daily data, index-aligned so that days[0] is protocol day `begin_day`."""

    begin_day: int
    days: tuple[DailyData, ...]

    @property
    def end_day(self) -> int:
        return self.begin_day + len(self.days)

    def __len__(self) -> int:
        return len(self.days)

    def __contains__(self, day: object) -> bool:
        return isinstance(day, int) and self.begin_day <= day < self.end_day

    def __getitem__(self, day: int) -> DailyData:
        if day not in self:
            raise MissingDailyData(f"Day {day} is outside decoded range [{self.begin_day}, {self.end_day})")
        return self.days[day - self.begin_day]

    def get(self, day: int) -> DailyData | None:
        """Return the entry for a protocol day, or None when it was not decoded."""
        if day not in self:
            return None
        return self.days[day - self.begin_day]


@dataclass(frozen=True)
class Payout:
    """Result of a payout accrual over a day range."""

    payout: int
    big_pay_day: int | None = None


@dataclass(frozen=True)
class GlobalInfo:
    """HEX.globalInfo() decoded in contract order."""

    locked_hearts_total: int
    next_stake_shares_total: int
    share_rate: int
    stake_penalty_total: int
    daily_data_count: int
    stake_shares_total: int
    latest_stake_id: int
    unclaimed_satoshis_total: int
    claimed_satoshis_total: int
    claimed_btc_addr_count: int
    block_timestamp: int
    total_supply: int
    current_xf_lobby: int


@dataclass(frozen=True)
class Totals:
    """Rollup of a collection of stakes."""

    stake_shares: int = 0
    staked_hearts: int = 0
    interest_hearts: int = 0
    interest_daily_hearts: int = 0
    interest_seven_day_hearts: int = 0
    interest_monthly_hearts: int = 0
    big_pay_day_hearts: int = 0
    # Same sums restricted to ACTIVE stakes.
    active_stake_shares: int = 0
    active_staked_hearts: int = 0


@dataclass(frozen=True)
class Account:
    """A wallet address tracked on one chain."""

    address: str
    chain: Chain
    name: str = ""
    is_favorite: bool = False

    @property
    def key(self) -> tuple[str, Chain]:
        return (self.address.lower(), self.chain)


@dataclass(frozen=True)
class AccountData:
    """Everything derived for one account."""

    account: Account
    stakes: tuple[Stake, ...] = ()
    total: Totals = field(default_factory=Totals)
    liquid_balance_hearts: int = 0
    is_loading: bool = False


@dataclass(frozen=True)
class AccountTotals:
    """One account's entry in a cross-account group rollup."""

    key: tuple[str, Chain]
    total: Totals


@dataclass(frozen=True)
class HexState:
    """Value of the single store owned by the caller. Transforms in `hex_stakes.state` return new instances."""

    current_day: dict[Chain, int] = field(default_factory=dict)
    global_info: dict[Chain, GlobalInfo] = field(default_factory=dict)
    accounts_data: dict[tuple[str, Chain], AccountData] = field(default_factory=dict)
    favorites: tuple[AccountTotals, ...] = ()


@dataclass(frozen=True)
class OHLCVData:
    """One price candle from the price feed."""

    time: datetime
    open: float
    high: float
    low: float
    close: float
    volume: float
