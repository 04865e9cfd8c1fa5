"""Tests for aggregate statistics."""

from __future__ import annotations

from datetime import timedelta

import pytest

from trade_insights.core.config import StatsConfig
from trade_insights.core.enums import Direction, StreakType, TradeResult
from trade_insights.core.errors import InvalidInputError
from trade_insights.core.numbers import INFINITY
from trade_insights.journal.stats import (
    INFINITY_DISPLAY,
    NO_DATA,
    calculate_max_drawdown,
    compute_stats,
    equity_curve,
    format_duration,
)

from ...factories import BASE_TIME, make_series, make_trade


class TestComputeStats:
    def test_scenario_totals(self, scenario_a_trades):
        stats = compute_stats(scenario_a_trades)
        assert stats.winrate == 60.0
        assert stats.winrate_display == "60.0%"
        assert stats.total_profit == 500
        assert stats.total_loss == 150
        assert stats.net_profit == 350
        assert stats.profit_factor == 3.33
        assert stats.profit_factor_display == "3.33"
        assert stats.expectancy == 35.0
        assert stats.avg_risk_reward == 2.22
        assert not stats.is_rr_below_one

    def test_empty(self):
        stats = compute_stats([])
        assert stats.total_trades == 0
        assert not stats.has_closed_data
        assert stats.winrate_display == NO_DATA
        assert stats.profit_factor_display == NO_DATA
        assert stats.avg_trade_duration_display == NO_DATA

    def test_profit_factor_infinite_without_losses(self):
        stats = compute_stats(make_series([10, 20]))
        assert stats.profit_factor == INFINITY
        assert stats.is_profit_factor_infinite
        assert stats.profit_factor_display == INFINITY_DISPLAY

    def test_stale_label_uses_pnl_sign(self):
        stats = compute_stats([make_trade(-25, result=TradeResult.WIN)])
        assert stats.winning_trades == 0
        assert stats.losing_trades == 1
        assert stats.winrate == 0.0

    def test_invalid_pnl_excluded(self):
        trades = [
            make_trade(100),
            make_trade(None, result=TradeResult.WIN),
            make_trade(float("nan"), result=TradeResult.LOSS),
        ]
        stats = compute_stats(trades)
        assert stats.closed_trades == 3
        assert stats.valid_closed_trades == 1
        assert stats.winrate == 100.0

    def test_positions_include_pending(self):
        trades = [
            make_trade(10, lot_size=1.0),
            make_trade(None, direction=Direction.SHORT, lot_size=2.0),
        ]
        stats = compute_stats(trades)
        assert stats.pending_trades == 1
        assert stats.buy_positions == 1
        assert stats.sell_positions == 1
        assert stats.total_lots == 3.0
        assert stats.avg_lot_size == 1.5

    def test_breakeven_counts_in_winrate_denominator(self):
        stats = compute_stats(make_series([10, 0, -5, 0]))
        assert stats.breakeven_trades == 2
        assert stats.winrate == 25.0

    def test_streaks_skip_breakeven(self):
        stats = compute_stats(make_series([10, 10, 0, -5]))
        assert stats.longest_win_streak == 2
        assert stats.longest_loss_streak == 1
        assert stats.current_streak.type == StreakType.LOSS
        assert stats.current_streak.count == 1

    def test_streaks_follow_chronology_not_input_order(self):
        trades = make_series([-5, 10, 10])
        stats = compute_stats(list(reversed(trades)))
        assert stats.current_streak.type == StreakType.WIN
        assert stats.current_streak.count == 2

    def test_duration(self):
        trades = [
            make_trade(10, duration_seconds=3600),
            make_trade(10, exit_timestamp=BASE_TIME + timedelta(minutes=30)),
            make_trade(10),
        ]
        stats = compute_stats(trades)
        assert stats.has_duration_data
        assert stats.avg_trade_duration_seconds == 2700
        assert stats.total_time_in_position_display == "1h 30m"

    def test_drawdown_uses_starting_capital(self):
        stats = compute_stats(make_series([500, -300, 600]), StatsConfig(starting_capital=1000))
        assert stats.max_drawdown == 300
        assert stats.max_drawdown_percent == 20.0

    def test_rejects_none(self):
        with pytest.raises(InvalidInputError):
            compute_stats(None)

    def test_to_dict(self, scenario_a_trades):
        data = compute_stats(scenario_a_trades).to_dict()
        assert data["current_streak"]["type"] in ("win", "loss", "none")
        assert data["winrate"] == 60.0


class TestDrawdown:
    def test_peak_relative_percent(self):
        amount, percent = calculate_max_drawdown([500, -300, 600])
        assert amount == 300
        assert percent == pytest.approx(300 / 10_500 * 100)

    def test_no_drawdown(self):
        assert calculate_max_drawdown([10, 20]) == (0.0, 0.0)


class TestEquityCurve:
    def test_cumulative(self):
        points = equity_curve(make_series([10, None, -5, 20]))
        assert [p.equity for p in points] == [10, 5, 25]


class TestFormatDuration:
    @pytest.mark.parametrize(
        "seconds, expected",
        [(0, "0m"), (59, "0m"), (90 * 60, "1h 30m"), (26 * 3600 + 5 * 60, "1d 2h 5m"), (86400, "1d")],
    )
    def test_labels(self, seconds, expected):
        assert format_duration(seconds) == expected
