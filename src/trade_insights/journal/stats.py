"""Aggregate performance statistics over a trade snapshot.

Totals, win rate, profit factor, expectancy, risk/reward, win/loss streaks,
max drawdown and holding time.  Win / loss / breakeven are derived from the
sign of ``profit_loss``, never from the stored ``result`` label, and every
profit metric only considers *valid closed* trades (closed with a finite
P&L).  Position counts (buy / sell / lots) use every trade, pending ones
included.

"No data" is ambiguous with a genuine zero in this domain, so each metric
that can lack data also carries a ``has_*`` flag and a display sentinel.

Usage::

    stats = compute_stats(trades)
    print(stats.winrate_display)        # "60.0%" or "--"
    print(stats.profit_factor_display)  # "3.33" or "∞"
"""

from __future__ import annotations

import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from trade_insights.core.config import StatsConfig
from trade_insights.core.enums import Direction, StreakType, TradeResult
from trade_insights.core.models import Trade, ensure_trade_list, sort_chronologically
from trade_insights.core.numbers import (
    INFINITY,
    clamp,
    round_half_up,
    safe_ratio,
)

logger = logging.getLogger(__name__)

NO_DATA = "--"
INFINITY_DISPLAY = "∞"


@dataclass(frozen=True)
class CurrentStreak:
    type: StreakType = StreakType.NONE
    count: int = 0


@dataclass(frozen=True)
class EquityPoint:
    date: datetime
    equity: float


@dataclass(frozen=True)
class AggregateStats:
    """Derived performance metrics for one snapshot of trades."""

    # Counts
    total_trades: int = 0
    closed_trades: int = 0
    valid_closed_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0
    breakeven_trades: int = 0
    pending_trades: int = 0

    # Positions (all trades)
    buy_positions: int = 0
    sell_positions: int = 0
    total_lots: float = 0.0
    avg_lot_size: float = 0.0

    # Win rate
    winrate: float = 0.0
    has_closed_data: bool = False
    winrate_display: str = NO_DATA

    # Profit / loss
    total_profit: float = 0.0
    total_loss: float = 0.0
    net_profit: float = 0.0
    best_profit: float = 0.0
    worst_loss: float = 0.0

    # Averages
    avg_profit_per_win: float = 0.0
    avg_loss_per_loss: float = 0.0
    avg_trade_result: float = 0.0

    # Risk metrics
    profit_factor: float = 0.0
    profit_factor_display: str = NO_DATA
    avg_risk_reward: float = 0.0
    avg_risk_reward_display: str = NO_DATA
    is_rr_below_one: bool = False
    expectancy: float = 0.0
    expectancy_percent: float = 0.0

    # Streaks
    longest_win_streak: int = 0
    longest_loss_streak: int = 0
    current_streak: CurrentStreak = field(default_factory=CurrentStreak)

    # Drawdown
    max_drawdown: float = 0.0
    max_drawdown_percent: float = 0.0

    # Time in position
    has_duration_data: bool = False
    avg_trade_duration_seconds: float = 0.0
    total_time_in_position_seconds: float = 0.0
    avg_trade_duration_display: str = NO_DATA
    total_time_in_position_display: str = NO_DATA

    @property
    def is_profit_factor_infinite(self) -> bool:
        return self.profit_factor == INFINITY

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["current_streak"]["type"] = self.current_streak.type.value
        return data


# ---------------------------------------------------------------------- #
# Helpers                                                                  #
# ---------------------------------------------------------------------- #


def format_duration(seconds: float) -> str:
    """Compact holding-time label, e.g. ``"1d 2h 5m"``; ``"0m"`` for zero."""
    minutes = seconds / 60
    if minutes <= 0:
        return "0m"
    days = int(minutes // (60 * 24))
    hours = int((minutes % (60 * 24)) // 60)
    mins = int(minutes % 60)

    parts = []
    if days > 0:
        parts.append(f"{days}d")
    if hours > 0:
        parts.append(f"{hours}h")
    if mins > 0 or not parts:
        parts.append(f"{mins}m")
    return " ".join(parts)


def _ratio_display(value: float, has_data: bool) -> str:
    if not has_data:
        return NO_DATA
    if value == INFINITY:
        return INFINITY_DISPLAY
    return f"{value:.2f}"


def calculate_streaks(trades: list[Trade]) -> tuple[int, int, CurrentStreak]:
    """Longest win / loss streaks and the streak in progress.

    Only wins and losses take part; breakeven trades are skipped entirely
    and neither extend nor reset a streak.
    """
    decided = [
        t for t in sort_chronologically(trades)
        if t.is_valid_closed and t.outcome in (TradeResult.WIN, TradeResult.LOSS)
    ]
    if not decided:
        return 0, 0, CurrentStreak()

    longest_win = longest_loss = 0
    run_win = run_loss = 0
    for trade in decided:
        if trade.outcome == TradeResult.WIN:
            run_win += 1
            run_loss = 0
            longest_win = max(longest_win, run_win)
        else:
            run_loss += 1
            run_win = 0
            longest_loss = max(longest_loss, run_loss)

    last = decided[-1].outcome
    count = 0
    for trade in reversed(decided):
        if trade.outcome != last:
            break
        count += 1
    streak_type = StreakType.WIN if last == TradeResult.WIN else StreakType.LOSS
    return longest_win, longest_loss, CurrentStreak(type=streak_type, count=count)


def calculate_max_drawdown(
    pnls: list[float], starting_capital: float = 10_000.0,
) -> tuple[float, float]:
    """Largest peak-to-trough decline of the simulated equity curve.

    Walks *pnls* in order from *starting_capital*.  Returns
    ``(amount, percent)`` where percent is relative to the peak the
    drawdown was measured from.
    """
    peak = balance = starting_capital
    max_dd = 0.0
    max_dd_pct = 0.0
    for pnl in pnls:
        balance += pnl
        if balance > peak:
            peak = balance
        dd = peak - balance
        if dd > max_dd:
            max_dd = dd
            max_dd_pct = (dd / peak) * 100 if peak > 0 else 0.0
    return max_dd, max_dd_pct


def equity_curve(trades: list[Trade]) -> list[EquityPoint]:
    """Cumulative P&L after each valid closed trade, in chronological order."""
    trades = ensure_trade_list(trades)
    cumulative = 0.0
    points: list[EquityPoint] = []
    for trade in sort_chronologically(trades):
        if not trade.is_valid_closed:
            continue
        cumulative += trade.profit_loss
        points.append(EquityPoint(date=trade.trade_date, equity=round_half_up(cumulative, 2)))
    return points


# ---------------------------------------------------------------------- #
# Engine                                                                   #
# ---------------------------------------------------------------------- #


def compute_stats(
    trades: list[Trade], config: StatsConfig | None = None,
) -> AggregateStats:
    """Compute aggregate statistics from a trade snapshot.

    Pure: the input is not modified and equal inputs give equal outputs.
    """
    trades = ensure_trade_list(trades)
    cfg = config or StatsConfig()

    closed = [t for t in trades if t.is_closed]
    valid = [t for t in closed if t.has_finite_pnl]
    if len(valid) < len(closed):
        logger.debug(
            "Excluded %d closed trades without a finite profit_loss",
            len(closed) - len(valid),
        )

    pnls = [t.profit_loss for t in valid]
    wins = [p for p in pnls if p > 0]
    losses = [p for p in pnls if p < 0]
    n_valid = len(valid)
    n_breakeven = n_valid - len(wins) - len(losses)

    # Positions use every trade, pending included
    buy_positions = sum(1 for t in trades if t.direction == Direction.LONG)
    sell_positions = sum(1 for t in trades if t.direction == Direction.SHORT)
    total_lots = sum(t.lot_size for t in trades)
    avg_lot_size = total_lots / len(trades) if trades else 0.0

    # Win rate
    has_closed_data = n_valid > 0
    win_rate_decimal = len(wins) / n_valid if has_closed_data else 0.0
    winrate = clamp(round_half_up(win_rate_decimal * 100, 1), 0.0, 100.0)
    winrate_display = f"{winrate:.1f}%" if has_closed_data else NO_DATA

    # Profit / loss
    total_profit = sum(wins)
    total_loss = abs(sum(losses))
    net_profit = total_profit - total_loss

    avg_win = total_profit / len(wins) if wins else 0.0
    avg_loss = total_loss / len(losses) if losses else 0.0
    avg_trade_result = net_profit / n_valid if has_closed_data else 0.0

    profit_factor = safe_ratio(total_profit, total_loss)
    avg_rr = safe_ratio(avg_win, avg_loss)

    # Expectancy: loss rate is the complement of the win rate so that
    # breakeven trades keep expectancy consistent with the win rate.
    loss_rate_decimal = 1 - win_rate_decimal if has_closed_data else 0.0
    expectancy = win_rate_decimal * avg_win - loss_rate_decimal * avg_loss
    avg_notional = (
        sum(t.notional for t in trades) / len(trades) if trades else 0.0
    )
    expectancy_percent = (expectancy / avg_notional) * 100 if avg_notional > 0 else 0.0

    longest_win, longest_loss, current = calculate_streaks(valid)

    drawdown, drawdown_pct = calculate_max_drawdown(
        [t.profit_loss for t in sort_chronologically(valid)],
        starting_capital=cfg.starting_capital,
    )

    durations = [
        d for d in (t.resolved_duration_seconds for t in trades) if d is not None
    ]
    has_duration_data = bool(durations)
    total_duration = sum(durations)
    avg_duration = total_duration / len(durations) if durations else 0.0

    return AggregateStats(
        total_trades=len(trades),
        closed_trades=len(closed),
        valid_closed_trades=n_valid,
        winning_trades=len(wins),
        losing_trades=len(losses),
        breakeven_trades=n_breakeven,
        pending_trades=len(trades) - len(closed),
        buy_positions=buy_positions,
        sell_positions=sell_positions,
        total_lots=round_half_up(total_lots, 2),
        avg_lot_size=round_half_up(avg_lot_size, 2),
        winrate=winrate,
        has_closed_data=has_closed_data,
        winrate_display=winrate_display,
        total_profit=round_half_up(total_profit, 2),
        total_loss=round_half_up(total_loss, 2),
        net_profit=round_half_up(net_profit, 2),
        best_profit=round_half_up(max(pnls), 2) if pnls else 0.0,
        worst_loss=round_half_up(min(pnls), 2) if pnls else 0.0,
        avg_profit_per_win=round_half_up(avg_win, 2),
        avg_loss_per_loss=round_half_up(avg_loss, 2),
        avg_trade_result=round_half_up(avg_trade_result, 2),
        profit_factor=round_half_up(profit_factor, 2),
        profit_factor_display=_ratio_display(profit_factor, has_closed_data),
        avg_risk_reward=round_half_up(avg_rr, 2),
        avg_risk_reward_display=_ratio_display(avg_rr, has_closed_data),
        is_rr_below_one=avg_loss > 0 and avg_rr < 1,
        expectancy=round_half_up(expectancy, 2),
        expectancy_percent=round_half_up(expectancy_percent, 1),
        longest_win_streak=longest_win,
        longest_loss_streak=longest_loss,
        current_streak=current,
        max_drawdown=round_half_up(drawdown, 2),
        max_drawdown_percent=round_half_up(drawdown_pct, 1),
        has_duration_data=has_duration_data,
        avg_trade_duration_seconds=round_half_up(avg_duration, 2),
        total_time_in_position_seconds=round_half_up(total_duration, 2),
        avg_trade_duration_display=(
            format_duration(avg_duration) if has_duration_data else NO_DATA
        ),
        total_time_in_position_display=(
            format_duration(total_duration) if has_duration_data else NO_DATA
        ),
    )
