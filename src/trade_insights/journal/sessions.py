"""Market-session and calendar performance breakdowns.

Two views over the same trades:

``analyze_sessions``
    Asia / London / New York buckets by UTC entry hour, with the London
    overlaps (07:00-08:00 with Asia, 12:00-16:00 with New York) split out.
``build_heatmap``
    A 7 x 24 weekday / hour grid with P&L intensity in [-1, 1], plus
    per-day and per-hour summaries.

Usage::

    sessions = analyze_sessions(trades)
    print(sessions.best_session)          # MarketSession.LONDON or None
    heatmap = build_heatmap(trades)
    print(heatmap.best_day)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timezone
from typing import Any

from trade_insights.core.config import SessionConfig
from trade_insights.core.enums import MarketSession
from trade_insights.core.models import Trade, ensure_trade_list, sort_chronologically
from trade_insights.core.numbers import round_half_up

from .buckets import PerformanceBucket
from .patterns import WEEKDAYS

logger = logging.getLogger(__name__)

# Session definitions (UTC hours, inclusive start, exclusive end)
SESSION_HOURS = {
    MarketSession.ASIA: (0, 8),
    MarketSession.LONDON: (7, 16),
    MarketSession.NEW_YORK: (12, 21),
}
_OVERLAPS = ((12, 16), (7, 8))


def session_for_hour(hour: int) -> MarketSession:
    """Map a UTC hour to its market session; overlaps take precedence."""
    if any(start <= hour < end for start, end in _OVERLAPS):
        return MarketSession.OVERLAP
    for session in (MarketSession.LONDON, MarketSession.NEW_YORK):
        start, end = SESSION_HOURS[session]
        if start <= hour < end:
            return session
    return MarketSession.ASIA


@dataclass(frozen=True)
class SessionStats:
    session: MarketSession
    trades: int
    wins: int
    losses: int
    win_rate: int
    pnl: float
    drawdown: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "session": self.session.value,
            "trades": self.trades,
            "wins": self.wins,
            "losses": self.losses,
            "win_rate": self.win_rate,
            "pnl": self.pnl,
            "drawdown": self.drawdown,
        }


@dataclass(frozen=True)
class SessionAnalysis:
    sessions: list[SessionStats] = field(default_factory=list)
    best_session: MarketSession | None = None

    @property
    def total_by_session(self) -> dict[MarketSession, int]:
        return {s.session: s.trades for s in self.sessions}

    def to_dict(self) -> dict[str, Any]:
        return {
            "sessions": [s.to_dict() for s in self.sessions],
            "best_session": self.best_session.value if self.best_session else None,
        }


def _pnl_drawdown(trades: list[Trade]) -> float:
    """Peak-to-trough decline of cumulative P&L starting from zero."""
    peak = running = worst = 0.0
    for trade in sort_chronologically(trades):
        if trade.has_finite_pnl:
            running += trade.profit_loss
        peak = max(peak, running)
        worst = max(worst, peak - running)
    return worst


def analyze_sessions(
    trades: list[Trade], config: SessionConfig | None = None,
) -> SessionAnalysis:
    """Break performance down by market session."""
    trades = ensure_trade_list(trades)
    cfg = config or SessionConfig()

    grouped: dict[MarketSession, list[Trade]] = {
        s: [] for s in (
            MarketSession.LONDON, MarketSession.NEW_YORK, MarketSession.ASIA, MarketSession.OVERLAP,
        )
    }
    for trade in trades:
        hour = trade.trade_date.astimezone(timezone.utc).hour
        grouped[session_for_hour(hour)].append(trade)

    sessions: list[SessionStats] = []
    for session, members in grouped.items():
        bucket = PerformanceBucket()
        for trade in members:
            bucket.record(trade)
        sessions.append(SessionStats(
            session=session,
            trades=bucket.trades,
            wins=bucket.wins,
            losses=bucket.losses,
            win_rate=bucket.win_rate,
            pnl=round_half_up(bucket.total_pnl, 2),
            drawdown=round_half_up(_pnl_drawdown(members), 2),
        ))

    best: MarketSession | None = None
    best_rate = 0
    for stats in sessions:
        if stats.trades >= cfg.min_trades and stats.win_rate > best_rate:
            best, best_rate = stats.session, stats.win_rate
    if best is None:
        logger.debug("No session reached %d trades; no best session", cfg.min_trades)

    return SessionAnalysis(sessions=sessions, best_session=best)


# ---------------------------------------------------------------------- #
# Heatmap                                                                  #
# ---------------------------------------------------------------------- #


@dataclass(frozen=True)
class HeatmapCell:
    weekday: int  # 0 = Monday
    hour: int
    pnl: float
    trades: int
    win_rate: int
    intensity: float  # -1 (worst) .. 1 (best)

    def to_dict(self) -> dict[str, Any]:
        return {
            "weekday": self.weekday,
            "hour": self.hour,
            "pnl": self.pnl,
            "trades": self.trades,
            "win_rate": self.win_rate,
            "intensity": self.intensity,
        }


@dataclass(frozen=True)
class PerformanceHeatmap:
    cells: list[HeatmapCell] = field(default_factory=list)
    by_day: dict[str, dict[str, Any]] = field(default_factory=dict)
    by_hour: dict[int, dict[str, Any]] = field(default_factory=dict)
    best_day: str | None = None
    worst_day: str | None = None
    best_hour: int | None = None
    worst_hour: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "cells": [c.to_dict() for c in self.cells],
            "by_day": self.by_day,
            "by_hour": {str(h): v for h, v in self.by_hour.items()},
            "best_day": self.best_day,
            "worst_day": self.worst_day,
            "best_hour": self.best_hour,
            "worst_hour": self.worst_hour,
        }


def build_heatmap(trades: list[Trade]) -> PerformanceHeatmap:
    """Weekday x hour P&L grid in each trade's recorded offset."""
    trades = ensure_trade_list(trades)

    cells = {(d, h): PerformanceBucket() for d in range(7) for h in range(24)}
    days = {d: PerformanceBucket() for d in range(7)}
    hours = {h: PerformanceBucket() for h in range(24)}
    for trade in trades:
        day, hour = trade.trade_date.weekday(), trade.trade_date.hour
        cells[(day, hour)].record(trade)
        days[day].record(trade)
        hours[hour].record(trade)

    scale = max([abs(b.total_pnl) for b in cells.values()] + [1.0])
    grid = [
        HeatmapCell(
            weekday=d,
            hour=h,
            pnl=round_half_up(b.total_pnl, 2),
            trades=b.trades,
            win_rate=b.win_rate,
            intensity=round_half_up(b.total_pnl / scale, 4) if b.trades else 0.0,
        )
        for (d, h), b in cells.items()
    ]

    traded_days = {WEEKDAYS[d]: b for d, b in days.items() if b.trades}
    traded_hours = {h: b for h, b in hours.items() if b.trades}

    def extreme(items: dict, pick):  # first key wins ties
        if not items:
            return None
        return pick(items, key=lambda k: items[k].total_pnl)

    return PerformanceHeatmap(
        cells=grid,
        by_day={WEEKDAYS[d]: b.to_dict() for d, b in days.items()},
        by_hour={h: b.to_dict() for h, b in hours.items()},
        best_day=extreme(traded_days, max),
        worst_day=extreme(traded_days, min),
        best_hour=extreme(traded_hours, max),
        worst_hour=extreme(traded_hours, min),
    )
