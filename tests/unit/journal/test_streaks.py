"""Tests for the rule-violation streak engine."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

from trade_insights.core.clock import FixedClock
from trade_insights.core.config import StreakRulesConfig
from trade_insights.core.enums import ViolationType
from trade_insights.journal.streaks import check_day, compute_streaks

from ...factories import BASE_TIME, make_series, make_trade


def _clean_day(offset: int, count: int = 2):
    start = BASE_TIME + timedelta(days=offset)
    return make_series([10] * count, start=start, step=timedelta(hours=1))


def _at(day: int) -> datetime:
    return datetime(2024, 1, day, 12, 0, tzinfo=timezone.utc)


class TestCheckDay:
    def test_clean(self):
        trades = _clean_day(0)
        check = check_day(trades[0].trading_day, trades)
        assert check.passed
        assert check.violations == []

    def test_overtrading(self):
        trades = _clean_day(0, count=6)
        check = check_day(trades[0].trading_day, trades)
        [violation] = check.violations
        assert violation.type == ViolationType.OVERTRADING
        assert violation.count == 6

    def test_excessive_losses_use_pnl_sign(self):
        trades = make_series([-5, -5, -5, -5], step=timedelta(hours=1))
        types = [v.type for v in check_day(trades[0].trading_day, trades).violations]
        assert ViolationType.EXCESSIVE_LOSSES in types

    def test_missing_stop_loss_and_setup(self):
        trades = [make_trade(10, stop_loss=None, setup=None)]
        types = [v.type for v in check_day(trades[0].trading_day, trades).violations]
        assert types == [ViolationType.NO_STOP_LOSS, ViolationType.NO_SETUP]

    def test_revenge_trade(self):
        trades = [
            make_trade(-10, trade_date=BASE_TIME),
            make_trade(10, trade_date=BASE_TIME + timedelta(minutes=10)),
        ]
        [violation] = check_day(trades[0].trading_day, trades).violations
        assert violation.type == ViolationType.REVENGE_TRADING

    def test_wait_after_loss_is_fine(self):
        trades = [
            make_trade(-10, trade_date=BASE_TIME),
            make_trade(10, trade_date=BASE_TIME + timedelta(minutes=15)),
        ]
        assert check_day(trades[0].trading_day, trades).passed

    def test_custom_limits(self):
        trades = _clean_day(0, count=6)
        cfg = StreakRulesConfig(max_trades_per_day=6)
        assert check_day(trades[0].trading_day, trades, cfg).passed


class TestComputeStreaks:
    def test_empty(self):
        result = compute_streaks([], now=_at(5))
        assert result.current_streak == 0
        assert result.discipline_score == 100
        assert not result.is_streak_active

    def test_active_streak_after_violation(self):
        broken = [make_trade(10, trade_date=BASE_TIME + timedelta(days=2), stop_loss=None)]
        trades = _clean_day(0) + _clean_day(1) + broken + _clean_day(3) + _clean_day(4)
        result = compute_streaks(trades, now=_at(6))

        assert result.current_streak == 2
        assert result.is_streak_active
        assert result.longest_streak == 2
        [record] = result.streak_history
        assert record.days == 2
        assert record.broken_by == ViolationType.NO_STOP_LOSS
        assert record.end_date == (BASE_TIME + timedelta(days=1)).date()
        assert result.discipline_score == 80

    def test_stale_streak_not_counted(self):
        broken = [make_trade(10, trade_date=BASE_TIME, setup=None)]
        trades = broken + _clean_day(1) + _clean_day(2) + _clean_day(3)
        result = compute_streaks(trades, now=_at(20))
        assert not result.is_streak_active
        assert result.longest_streak == 0
        assert result.current_streak == 3

    def test_staleness_boundary(self):
        trades = _clean_day(0)
        assert compute_streaks(trades, now=_at(4)).is_streak_active
        assert not compute_streaks(trades, now=_at(5)).is_streak_active

    def test_clock_injection(self):
        trades = _clean_day(0)
        result = compute_streaks(trades, clock=FixedClock(_at(2)))
        assert result.is_streak_active

    def test_unsorted_input(self):
        trades = _clean_day(0) + _clean_day(1)
        result = compute_streaks(list(reversed(trades)), now=_at(3))
        assert result.current_streak == 2

    def test_windows_are_capped(self):
        trades = []
        for offset in range(0, 40):
            trades += [make_trade(10, trade_date=BASE_TIME + timedelta(days=offset), stop_loss=None)]
        result = compute_streaks(trades, now=_at(1) + timedelta(days=40))
        assert len(result.daily_checks) == 30
        assert len(result.violations) == 20
        assert result.discipline_score == 0

    def test_to_dict(self):
        data = compute_streaks(_clean_day(0), now=_at(2)).to_dict()
        assert data["daily_checks"][0] == {"date": "2024-01-01", "passed": True, "violations": []}
