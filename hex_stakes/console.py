"""Console output formatting."""

from collections.abc import Iterable

from hex_stakes.constants import MONTHLY_WINDOW_DAYS, SEVEN_DAY_WINDOW_DAYS
from hex_stakes.formatters import format_hex, format_percent, format_shares, format_usd
from hex_stakes.models import AccountData, Stake, StakeStatus, Totals
from hex_stakes.payouts import daily_rate, window_daily_rate, window_days

STATUS_EMOJI = {
    StakeStatus.ACTIVE: "🟢",
    StakeStatus.GRACE_PERIOD: "🟡",
    StakeStatus.BLEEDING: "🔴",
    StakeStatus.GOOD_ACCOUNTING: "✅",
    StakeStatus.EMERGENCY_END: "🟠",
}


def _with_usd(hearts: int, price: float | None) -> str:
    usd = format_usd(hearts, price)
    return f"{format_hex(hearts)} ({usd})" if usd else format_hex(hearts)


def format_stake_line(stake: Stake, *, current_day: int, price: float | None = None) -> str:
    """One stake as a compact multi-line block."""
    emoji = STATUS_EMOJI[stake.status]
    week_days = window_days(stake, current_day, SEVEN_DAY_WINDOW_DAYS)
    lines = [
        f"{emoji} Stake #{stake.stake_id}  •  {stake.status.description}"
        + ("  •  auto-stake" if stake.is_auto_stake else ""),
        f"   {stake.start_date:%Y-%m-%d} → {stake.end_date:%Y-%m-%d}  "
        f"(day {stake.locked_day} + {stake.staked_days})  •  {format_percent(stake.percent_complete)} complete",
        f"   Principal: {_with_usd(stake.staked_hearts, price)}  •  Shares: {format_shares(stake.stake_shares)}",
        f"   Interest:  {_with_usd(stake.interest_hearts, price)}"
        f"  •  7d avg: {format_hex(daily_rate(stake.interest_seven_day_hearts, week_days))}/day",
    ]
    if stake.big_pay_day_hearts is not None:
        lines.append(f"   Big Pay Day: {_with_usd(stake.big_pay_day_hearts, price)}")
    lines.append(f"   ROI: {format_percent(stake.roi, decimals=2)}  •  APY: {format_percent(stake.apy, decimals=2)}")
    return "\n".join(lines)


def format_totals(title: str, totals: Totals, stakes: Iterable[Stake], *, price: float | None = None) -> str:
    """Totals block for an account or a group. Per-day averages come from each of `stakes` at its own window length."""
    stakes = tuple(stakes)
    lines = [
        f"Σ {title}",
        f"   Principal:     {_with_usd(totals.staked_hearts, price)}",
        f"   Shares:        {format_shares(totals.stake_shares)}",
        f"   Active:        {_with_usd(totals.active_staked_hearts, price)}"
        f"  •  {format_shares(totals.active_stake_shares)}",
        f"   Interest:      {_with_usd(totals.interest_hearts, price)}",
        f"   Last day:      {format_hex(totals.interest_daily_hearts)}",
        f"   Last 7 days:   {format_hex(totals.interest_seven_day_hearts)}"
        f"  (~{format_hex(window_daily_rate(stakes, SEVEN_DAY_WINDOW_DAYS))}/day)",
        f"   Last 30 days:  {format_hex(totals.interest_monthly_hearts)}"
        f"  (~{format_hex(window_daily_rate(stakes, MONTHLY_WINDOW_DAYS))}/day)",
    ]
    if totals.big_pay_day_hearts:
        lines.append(f"   Big Pay Day:   {_with_usd(totals.big_pay_day_hearts, price)}")
    return "\n".join(lines)


def print_account_report(data: AccountData, *, current_day: int, price: float | None = None) -> None:
    """Print an account's stakes (canonical order) and totals."""
    account = data.account
    label = f"{account.name} ({account.address})" if account.name else account.address
    star = "⭐ " if account.is_favorite else ""
    print("=" * 70)
    print(f"{star}📊 {label}  •  {account.chain}  •  day {current_day}")
    print(f"   Liquid balance: {_with_usd(data.liquid_balance_hearts, price)}")
    print("=" * 70)
    if not data.stakes:
        print("   (no open stakes)")
    for stake in data.stakes:
        print(format_stake_line(stake, current_day=current_day, price=price))
    print("")
    print(format_totals("Account totals", data.total, data.stakes, price=price))
    print("")
