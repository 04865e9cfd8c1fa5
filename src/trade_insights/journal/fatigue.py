"""Mental fatigue index.

Five additive contributions evaluated against an injected ``now``:

    Factor              Points
    ───────────────────────────────────────────────────────
    session duration    10 / 20 / 30 at 4 / 6 / 8 hours today
    trade count         3 per trade today, capped at 30
    successive losses   5 / 15 / 25 / 35 for 1 / 2 / 3-4 / 5+
    negative P&L        5 / 10 / 20 below 0 / -50 / -100 today
    weekly intensity    8 / 15 above 5 / 10 trades per day (7 days)

The total is capped at 100.  High and critical levels ask for a pause.
"Today" is the calendar day of ``now`` in ``now``'s own timezone.

Usage::

    index = compute_fatigue(trades, now=clock.now())
    if index.should_pause:
        ...
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any

from trade_insights.core.clock import IClock, resolve_now
from trade_insights.core.config import FatigueConfig
from trade_insights.core.enums import FatigueFactorName, FatigueLevel, FatigueRecommendation
from trade_insights.core.models import Trade, ensure_trade_list, sort_chronologically

logger = logging.getLogger(__name__)

_RECOMMENDATIONS = {
    FatigueLevel.CRITICAL: FatigueRecommendation.STOP_TRADING_NOW,
    FatigueLevel.HIGH: FatigueRecommendation.TAKE_A_BREAK,
    FatigueLevel.MODERATE: FatigueRecommendation.STAY_VIGILANT,
    FatigueLevel.LOW: FatigueRecommendation.GOOD_TO_TRADE,
}


@dataclass(frozen=True)
class FatigueFactor:
    name: FatigueFactorName
    contribution: int
    detail: str

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name.value, "contribution": self.contribution, "detail": self.detail}


@dataclass(frozen=True)
class FatigueIndex:
    score: int = 0
    level: FatigueLevel = FatigueLevel.LOW
    factors: list[FatigueFactor] = field(default_factory=list)
    recommendation: FatigueRecommendation = FatigueRecommendation.GOOD_TO_TRADE
    should_pause: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "level": self.level.value,
            "factors": [f.to_dict() for f in self.factors],
            "recommendation": self.recommendation.value,
            "should_pause": self.should_pause,
        }


def fatigue_level(score: int, cfg: FatigueConfig | None = None) -> FatigueLevel:
    cfg = cfg or FatigueConfig()
    if score >= cfg.critical_level:
        return FatigueLevel.CRITICAL
    if score >= cfg.high_level:
        return FatigueLevel.HIGH
    if score >= cfg.moderate_level:
        return FatigueLevel.MODERATE
    return FatigueLevel.LOW


def _trailing_losses(today: list[Trade]) -> int:
    count = 0
    for trade in reversed(today):
        if not trade.is_loss:
            break
        count += 1
    return count


def compute_fatigue(
    trades: list[Trade],
    now: datetime | None = None,
    config: FatigueConfig | None = None,
    clock: IClock | None = None,
) -> FatigueIndex:
    """Compute the fatigue index at *now* (or the clock's time)."""
    trades = ensure_trade_list(trades)
    cfg = config or FatigueConfig()
    at = resolve_now(now, clock)
    tz = at.tzinfo

    today = sort_chronologically(
        t for t in trades if t.trade_date.astimezone(tz).date() == at.date()
    )
    week_start = at - timedelta(days=cfg.rolling_days)
    week_count = sum(1 for t in trades if week_start <= t.trade_date <= at)

    factors: list[FatigueFactor] = []

    if today:
        span = today[-1].trade_date - today[0].trade_date
        hours = int(span.total_seconds() // 3600)
        points = next((p for h, p in cfg.session_hour_bands if hours >= h), 0)
        factors.append(FatigueFactor(FatigueFactorName.SESSION_DURATION, points, f"{hours}h"))

        points = min(cfg.trade_count_cap, len(today) * cfg.points_per_trade)
        factors.append(FatigueFactor(FatigueFactorName.TRADE_COUNT, points, f"{len(today)} trades"))

    losses = _trailing_losses(today)
    if losses:
        points = next((p for n, p in cfg.loss_streak_bands if losses >= n), 0)
        factors.append(
            FatigueFactor(FatigueFactorName.SUCCESSIVE_LOSSES, points, f"{losses} losses")
        )

    today_pnl = sum(t.profit_loss for t in today if t.has_finite_pnl)
    if today_pnl < 0:
        points = next((p for limit, p in cfg.negative_pnl_bands if today_pnl < limit), 0)
        factors.append(
            FatigueFactor(FatigueFactorName.NEGATIVE_PNL, points, f"{today_pnl:.2f}")
        )

    avg_per_day = week_count / cfg.rolling_days
    points = next((p for limit, p in cfg.intensity_bands if avg_per_day > limit), 0)
    if points:
        factors.append(
            FatigueFactor(FatigueFactorName.WEEKLY_INTENSITY, points, f"{avg_per_day:.1f}/day")
        )

    score = min(cfg.score_cap, sum(f.contribution for f in factors))
    level = fatigue_level(score, cfg)
    logger.debug("Fatigue score %d (%s) from %d trades today", score, level.value, len(today))
    return FatigueIndex(
        score=score,
        level=level,
        factors=factors,
        recommendation=_RECOMMENDATIONS[level],
        should_pause=level in (FatigueLevel.HIGH, FatigueLevel.CRITICAL),
    )
