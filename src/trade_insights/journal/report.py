"""Full journal report: every engine over one snapshot.

The engines are independent, so the order they run in is irrelevant; the
only shared input is the trade list and a single evaluation instant, which
keeps the time-dependent engines consistent with each other.

Usage::

    settings = load_settings("insights.toml")
    report = build_report(trades, now=clock.now(), settings=settings)
    payload = report.to_dict()
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from trade_insights.core.clock import IClock, resolve_now
from trade_insights.core.config import Settings
from trade_insights.core.models import Trade, ensure_trade_list
from trade_insights.observability.logger import bind_report_context

from .discipline import DisciplineAnalysis, compute_discipline
from .emotions import EmotionAnalysis, analyze_emotions
from .execution import ExecutionQuality, compute_execution_quality
from .fatigue import FatigueIndex, compute_fatigue
from .patterns import PatternReport, detect_patterns
from .profile import TraderProfile, classify_trader_profile
from .rewards import ChallengeProgress, RewardChests, compute_challenges, compute_reward_chests
from .sabotage import SelfSabotageAnalysis, detect_self_sabotage
from .sessions import PerformanceHeatmap, SessionAnalysis, analyze_sessions, build_heatmap
from .stats import AggregateStats, compute_stats
from .strategy import StrategyAnalysis, analyze_strategies
from .streaks import StreakAnalysis, compute_streaks

logger = logging.getLogger(__name__)


def json_safe(value: Any) -> Any:
    """Replace non-finite floats (JSON has no infinity) with ``None``."""
    if isinstance(value, float) and not math.isfinite(value):
        return None
    if isinstance(value, dict):
        return {k: json_safe(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [json_safe(v) for v in value]
    return value


@dataclass(frozen=True)
class JournalReport:
    generated_at: datetime
    stats: AggregateStats
    discipline: DisciplineAnalysis
    streaks: StreakAnalysis
    execution: ExecutionQuality
    profile: TraderProfile | None
    fatigue: FatigueIndex
    patterns: PatternReport
    sabotage: SelfSabotageAnalysis
    emotions: EmotionAnalysis
    sessions: SessionAnalysis
    heatmap: PerformanceHeatmap
    strategies: StrategyAnalysis
    chests: RewardChests
    challenges: list[ChallengeProgress]

    def to_dict(self) -> dict[str, Any]:
        return json_safe({
            "generated_at": self.generated_at.isoformat(),
            "stats": self.stats.to_dict(),
            "discipline": self.discipline.to_dict(),
            "streaks": self.streaks.to_dict(),
            "execution": self.execution.to_dict(),
            "profile": self.profile.to_dict() if self.profile else None,
            "fatigue": self.fatigue.to_dict(),
            "patterns": self.patterns.to_dict(),
            "sabotage": self.sabotage.to_dict(),
            "emotions": self.emotions.to_dict(),
            "sessions": self.sessions.to_dict(),
            "heatmap": self.heatmap.to_dict(),
            "strategies": self.strategies.to_dict(),
            "chests": self.chests.to_dict(),
            "challenges": [c.to_dict() for c in self.challenges],
        })


def build_report(
    trades: list[Trade],
    now: datetime | None = None,
    settings: Settings | None = None,
    clock: IClock | None = None,
) -> JournalReport:
    """Run every analytics engine over *trades*."""
    trades = ensure_trade_list(trades)
    settings = settings or Settings()
    at = resolve_now(now, clock)

    with bind_report_context(trade_count=len(trades)):
        stats = compute_stats(trades, settings.stats)
        discipline = compute_discipline(trades, settings.discipline)
        report = JournalReport(
            generated_at=at,
            stats=stats,
            discipline=discipline,
            streaks=compute_streaks(trades, now=at, config=settings.streaks),
            execution=compute_execution_quality(trades, settings.execution),
            profile=classify_trader_profile(trades, settings.profile),
            fatigue=compute_fatigue(trades, now=at, config=settings.fatigue),
            patterns=detect_patterns(trades, settings.patterns),
            sabotage=detect_self_sabotage(trades, settings.sabotage),
            emotions=analyze_emotions(trades, settings.emotions),
            sessions=analyze_sessions(trades, settings.sessions),
            heatmap=build_heatmap(trades),
            strategies=analyze_strategies(trades, settings.strategy),
            chests=compute_reward_chests(trades, discipline=discipline),
            challenges=compute_challenges(trades, stats),
        )
        logger.info(
            "Built journal report: %d trades, discipline %d, fatigue %s",
            len(trades), discipline.overall_score, report.fatigue.level.value,
        )
    return report
