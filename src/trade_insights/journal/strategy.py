"""Per-setup (strategy) performance and setup categories."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any

from trade_insights.core.config import StrategyConfig
from trade_insights.core.models import Trade, ensure_trade_list
from trade_insights.core.numbers import INFINITY, round_half_up

from .buckets import PerformanceBucket

logger = logging.getLogger(__name__)

OTHER_CATEGORY = "other"


@dataclass(frozen=True)
class StrategyStats:
    strategy: str
    trades: int
    wins: int
    losses: int
    win_rate: int
    profit_factor: float  # INFINITY when there are no losing P&L
    expectancy: float  # Average P&L per trade
    total_pnl: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "strategy": self.strategy,
            "trades": self.trades,
            "wins": self.wins,
            "losses": self.losses,
            "win_rate": self.win_rate,
            # JSON has no infinity
            "profit_factor": None if self.profit_factor == INFINITY else self.profit_factor,
            "expectancy": self.expectancy,
            "total_pnl": self.total_pnl,
        }


@dataclass(frozen=True)
class StrategyAnalysis:
    strategies: list[StrategyStats] = field(default_factory=list)
    best_strategy: str | None = None
    worst_strategy: str | None = None
    categories: dict[str, list[str]] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "strategies": [s.to_dict() for s in self.strategies],
            "best_strategy": self.best_strategy,
            "worst_strategy": self.worst_strategy,
            "categories": {k: list(v) for k, v in self.categories.items()},
        }


def categorize_setup(setup: str, categories: dict[str, list[str]]) -> str:
    """First category with a keyword contained in *setup*, else ``"other"``."""
    lowered = setup.lower()
    for category, keywords in categories.items():
        if any(kw.lower() in lowered for kw in keywords):
            return category
    return OTHER_CATEGORY


def analyze_strategies(
    trades: list[Trade], config: StrategyConfig | None = None,
) -> StrategyAnalysis:
    """Win rate, profit factor and expectancy per setup."""
    trades = ensure_trade_list(trades)
    cfg = config or StrategyConfig()

    buckets: dict[str, PerformanceBucket] = defaultdict(PerformanceBucket)
    for trade in trades:
        buckets[trade.setup_label or cfg.unknown_label].record(trade)

    strategies = [
        StrategyStats(
            strategy=name,
            trades=b.trades,
            wins=b.wins,
            losses=b.losses,
            win_rate=b.win_rate,
            profit_factor=b.profit_factor,
            expectancy=b.avg_pnl,
            total_pnl=round_half_up(b.total_pnl, 2),
        )
        for name, b in sorted(buckets.items(), key=lambda item: (-item[1].trades, item[0]))
    ]

    qualified = [s for s in strategies if s.trades >= cfg.min_trades]
    best = max(qualified, key=lambda s: s.win_rate).strategy if qualified else None
    worst = min(qualified, key=lambda s: s.win_rate).strategy if qualified else None
    if not qualified:
        logger.debug("No setup reached %d trades; no best or worst strategy", cfg.min_trades)

    categories: dict[str, list[str]] = defaultdict(list)
    for stats in strategies:
        categories[categorize_setup(stats.strategy, cfg.categories)].append(stats.strategy)

    return StrategyAnalysis(
        strategies=strategies,
        best_strategy=best,
        worst_strategy=worst,
        categories=dict(categories),
    )
