"""Discipline streaks: consecutive rule-abiding trading days.

Each calendar day with trades is checked against a fixed rule set:

* overtrading: more than ``max_trades_per_day`` trades
* excessive losses: more than ``max_losses_per_day`` losing trades
* missing stop loss / missing setup on any trade of the day
* revenge trading: a trade opened less than ``revenge_window_minutes``
  after a losing trade on the same day

A day passes when no rule fires.  Consecutive passing days form a
streak.  The score here is the share of clean days, which is a different
model from ``discipline.compute_discipline`` and is kept separate.

Usage::

    analysis = compute_streaks(trades, now=clock.now())
    if not analysis.is_streak_active:
        ...
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any

from trade_insights.core.clock import IClock, resolve_now
from trade_insights.core.config import StreakRulesConfig
from trade_insights.core.enums import ViolationType
from trade_insights.core.models import Trade, ensure_trade_list, sort_chronologically
from trade_insights.core.numbers import round_int

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Violation:
    """One rule breach on one day.

    ``count`` is the number of offending trades (or the day's trade /
    loss count for the daily limits).
    """

    date: date
    type: ViolationType
    count: int = 1

    def to_dict(self) -> dict[str, Any]:
        return {"date": self.date.isoformat(), "type": self.type.value, "count": self.count}


@dataclass(frozen=True)
class DailyCheck:
    date: date
    passed: bool
    violations: list[Violation] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "passed": self.passed,
            "violations": [v.type.value for v in self.violations],
        }


@dataclass(frozen=True)
class StreakRecord:
    """A finished streak and the rule that ended it."""

    start_date: date
    end_date: date
    days: int
    broken_by: ViolationType | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "days": self.days,
            "broken_by": self.broken_by.value if self.broken_by else None,
        }


@dataclass(frozen=True)
class StreakAnalysis:
    current_streak: int = 0
    longest_streak: int = 0
    is_streak_active: bool = False
    streak_history: list[StreakRecord] = field(default_factory=list)
    discipline_score: int = 100
    violations: list[Violation] = field(default_factory=list)
    daily_checks: list[DailyCheck] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "current_streak": self.current_streak,
            "longest_streak": self.longest_streak,
            "is_streak_active": self.is_streak_active,
            "streak_history": [s.to_dict() for s in self.streak_history],
            "discipline_score": self.discipline_score,
            "violations": [v.to_dict() for v in self.violations],
            "daily_checks": [c.to_dict() for c in self.daily_checks],
        }


def check_day(
    day: date, day_trades: list[Trade], config: StreakRulesConfig | None = None,
) -> DailyCheck:
    """Evaluate one day's trades against the streak rules."""
    cfg = config or StreakRulesConfig()
    found: list[Violation] = []

    if len(day_trades) > cfg.max_trades_per_day:
        found.append(Violation(day, ViolationType.OVERTRADING, len(day_trades)))

    losses = sum(1 for t in day_trades if t.is_loss)
    if losses > cfg.max_losses_per_day:
        found.append(Violation(day, ViolationType.EXCESSIVE_LOSSES, losses))

    without_sl = sum(1 for t in day_trades if not t.has_stop_loss)
    if without_sl:
        found.append(Violation(day, ViolationType.NO_STOP_LOSS, without_sl))

    without_setup = sum(1 for t in day_trades if not t.setup_label)
    if without_setup:
        found.append(Violation(day, ViolationType.NO_SETUP, without_setup))

    ordered = sort_chronologically(day_trades)
    window = cfg.revenge_window_minutes * 60
    revenge = sum(
        1
        for prev, curr in zip(ordered, ordered[1:])
        if prev.is_loss and (curr.trade_date - prev.trade_date).total_seconds() < window
    )
    if revenge:
        found.append(Violation(day, ViolationType.REVENGE_TRADING, revenge))

    return DailyCheck(date=day, passed=not found, violations=found)


def compute_streaks(
    trades: list[Trade],
    now: datetime | None = None,
    config: StreakRulesConfig | None = None,
    clock: IClock | None = None,
) -> StreakAnalysis:
    """Walk trading days in order and build the streak analysis.

    Args:
        trades: Trade snapshot (not modified).
        now: Evaluation instant for the staleness check.  Falls back to
            *clock*, then wall time.
        config: Rule thresholds.
    """
    trades = ensure_trade_list(trades)
    cfg = config or StreakRulesConfig()

    if not trades:
        return StreakAnalysis()

    by_day: dict[date, list[Trade]] = defaultdict(list)
    for trade in trades:
        by_day[trade.trading_day].append(trade)
    days = sorted(by_day)

    checks: list[DailyCheck] = []
    violations: list[Violation] = []
    history: list[StreakRecord] = []
    run_start: date | None = None
    run_days = 0
    longest = 0

    for index, day in enumerate(days):
        check = check_day(day, by_day[day], cfg)
        checks.append(check)
        violations.extend(check.violations)

        if check.passed:
            if run_start is None:
                run_start = day
            run_days += 1
            continue

        if run_start is not None:
            history.append(StreakRecord(
                start_date=run_start,
                end_date=days[index - 1],
                days=run_days,
                broken_by=check.violations[0].type,
            ))
            longest = max(longest, run_days)
        run_start = None
        run_days = 0

    # An unfinished streak only counts once it is confirmed as still live
    last_day = days[-1]
    today = resolve_now(now, clock).date()
    is_active = run_days > 0 and (today - last_day).days <= cfg.active_streak_days
    if is_active:
        longest = max(longest, run_days)
    elif run_days:
        logger.debug("Streak of %d days ending %s is stale", run_days, last_day)

    clean_days = sum(1 for c in checks if c.passed)
    return StreakAnalysis(
        current_streak=run_days,
        longest_streak=longest,
        is_streak_active=is_active,
        streak_history=history[-cfg.max_history:],
        discipline_score=round_int(clean_days / len(checks) * 100),
        violations=violations[-cfg.max_violations:],
        daily_checks=checks[-cfg.max_daily_checks:],
    )
