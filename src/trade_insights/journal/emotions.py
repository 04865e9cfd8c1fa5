"""Emotion / result correlation.

Groups trades by their self-reported emotion tag and compares each group's
win rate to the overall one.  Untagged trades fall into a neutral group.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any

from trade_insights.core.config import EmotionConfig
from trade_insights.core.enums import EmotionImpact
from trade_insights.core.models import Trade, ensure_trade_list
from trade_insights.core.numbers import round_half_up

from .buckets import PerformanceBucket

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmotionCorrelation:
    emotion: str
    trades: int
    win_rate: int
    avg_pnl: float
    total_pnl: float
    avg_lot_size: float
    impact: EmotionImpact

    def to_dict(self) -> dict[str, Any]:
        return {
            "emotion": self.emotion,
            "trades": self.trades,
            "win_rate": self.win_rate,
            "avg_pnl": self.avg_pnl,
            "total_pnl": self.total_pnl,
            "avg_lot_size": self.avg_lot_size,
            "impact": self.impact.value,
        }


@dataclass(frozen=True)
class EmotionAnalysis:
    correlations: list[EmotionCorrelation] = field(default_factory=list)
    best_emotion: str | None = None
    worst_emotion: str | None = None
    calm_pnl: float = 0.0
    stress_pnl: float = 0.0
    calm_win_rate: int = 0
    stress_win_rate: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "correlations": [c.to_dict() for c in self.correlations],
            "best_emotion": self.best_emotion,
            "worst_emotion": self.worst_emotion,
            "calm_pnl": self.calm_pnl,
            "stress_pnl": self.stress_pnl,
            "calm_win_rate": self.calm_win_rate,
            "stress_win_rate": self.stress_win_rate,
        }


def _merge(buckets: dict[str, PerformanceBucket], tags: list[str]) -> PerformanceBucket:
    merged = PerformanceBucket()
    wanted = {t.lower() for t in tags}
    for emotion, bucket in buckets.items():
        if emotion.lower() in wanted:
            merged.trades += bucket.trades
            merged.wins += bucket.wins
            merged.losses += bucket.losses
            merged.total_pnl += bucket.total_pnl
    return merged


def analyze_emotions(
    trades: list[Trade], config: EmotionConfig | None = None,
) -> EmotionAnalysis:
    """Correlate emotion tags with trade results."""
    trades = ensure_trade_list(trades)
    cfg = config or EmotionConfig()

    if not trades:
        logger.debug("No trades; emotion analysis has no data")
        return EmotionAnalysis()

    buckets: dict[str, PerformanceBucket] = defaultdict(PerformanceBucket)
    for trade in trades:
        tag = (trade.emotions or "").strip() or cfg.untagged_label
        buckets[tag].record(trade)

    overall_rate = sum(1 for t in trades if t.is_win) / len(trades) * 100

    def impact(rate: int) -> EmotionImpact:
        if rate > overall_rate + cfg.impact_margin:
            return EmotionImpact.POSITIVE
        if rate < overall_rate - cfg.impact_margin:
            return EmotionImpact.NEGATIVE
        return EmotionImpact.NEUTRAL

    # Most used first; name breaks ties so output is stable
    ordered = sorted(buckets.items(), key=lambda item: (-item[1].trades, item[0]))
    correlations = [
        EmotionCorrelation(
            emotion=emotion,
            trades=b.trades,
            win_rate=b.win_rate,
            avg_pnl=b.avg_pnl,
            total_pnl=round_half_up(b.total_pnl, 2),
            avg_lot_size=b.avg_lot_size,
            impact=impact(b.win_rate),
        )
        for emotion, b in ordered
    ]

    qualified = [c for c in correlations if c.trades >= cfg.min_trades]
    best = max(qualified, key=lambda c: c.win_rate).emotion if qualified else None
    worst = min(qualified, key=lambda c: c.win_rate).emotion if qualified else None

    calm = _merge(buckets, cfg.calm_tags)
    stress = _merge(buckets, cfg.stress_tags)
    return EmotionAnalysis(
        correlations=correlations,
        best_emotion=best,
        worst_emotion=worst,
        calm_pnl=round_half_up(calm.total_pnl, 2),
        stress_pnl=round_half_up(stress.total_pnl, 2),
        calm_win_rate=calm.win_rate,
        stress_win_rate=stress.win_rate,
    )
