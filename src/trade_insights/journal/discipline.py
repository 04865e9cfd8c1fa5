"""Discipline scoring: adherence to risk-management rules.

Five component rates, each the share of trades (or trading days)
satisfying a rule:

    Component         Rule
    ─────────────────────────────────────────────────────────
    stop_loss         trade has a stop loss
    take_profit       trade has a take profit
    plan              trade has a documented setup
    risk_management   lot size within 50% of the mean lot size
    no_overtrading    day has at most ``daily_trade_limit`` trades

The overall score averages the components that have data; a component
without data is dropped from the denominator rather than scored as 0.
A separate day-level score (30/25/25/20 weighting) drives the history
and the streak of good days.

This is one of two discipline models; see ``streaks`` for the rule
violation model.  They are deliberately independent.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any

from trade_insights.core.config import DisciplineConfig
from trade_insights.core.enums import DisciplineComponent, Grade, ImprovementTip
from trade_insights.core.models import Trade, ensure_trade_list
from trade_insights.core.numbers import round_int

logger = logging.getLogger(__name__)

# Minimum score for each grade
_GRADE_THRESHOLDS: list[tuple[float, Grade]] = [
    (90.0, Grade.A),
    (75.0, Grade.B),
    (60.0, Grade.C),
    (40.0, Grade.D),
    (0.0, Grade.F),
]


def score_to_grade(score: float) -> Grade:
    """Convert a discipline score (0-100) to a letter grade."""
    for threshold, grade in _GRADE_THRESHOLDS:
        if score >= threshold:
            return grade
    return Grade.F


@dataclass(frozen=True)
class DisciplineMetrics:
    sl_respect: int = 0
    tp_respect: int = 0
    plan_respect: int = 0
    risk_management: int = 0
    no_overtrading: int = 100

    def as_components(self) -> dict[DisciplineComponent, int]:
        return {
            DisciplineComponent.STOP_LOSS: self.sl_respect,
            DisciplineComponent.TAKE_PROFIT: self.tp_respect,
            DisciplineComponent.PLAN: self.plan_respect,
            DisciplineComponent.RISK_MANAGEMENT: self.risk_management,
            DisciplineComponent.NO_OVERTRADING: self.no_overtrading,
        }


@dataclass(frozen=True)
class DailyDiscipline:
    date: date
    score: int
    trades: int


@dataclass(frozen=True)
class DisciplineAnalysis:
    overall_score: int = 0
    metrics: DisciplineMetrics = field(default_factory=DisciplineMetrics)
    history: list[DailyDiscipline] = field(default_factory=list)
    streak: int = 0
    best_streak: int = 0
    grade: Grade = Grade.F
    improvements: list[ImprovementTip] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "overall_score": self.overall_score,
            "metrics": asdict(self.metrics),
            "history": [
                {"date": d.date.isoformat(), "score": d.score, "trades": d.trades}
                for d in self.history
            ],
            "streak": self.streak,
            "best_streak": self.best_streak,
            "grade": self.grade.value,
            "improvements": [tip.value for tip in self.improvements],
        }


def _pct(count: int, total: int) -> int:
    return round_int(count / total * 100) if total else 0


def _lot_consistency(trades: list[Trade], threshold: float) -> int:
    lots = [t.lot_size for t in trades]
    avg_lot = sum(lots) / len(lots)
    if avg_lot <= 0:
        return 0
    consistent = sum(1 for lot in lots if abs(lot - avg_lot) / avg_lot <= threshold)
    return _pct(consistent, len(lots))


def _day_score(day_trades: list[Trade], cfg: DisciplineConfig) -> int:
    n = len(day_trades)
    sl = sum(1 for t in day_trades if t.has_stop_loss) / n
    tp = sum(1 for t in day_trades if t.has_take_profit) / n
    setup = sum(1 for t in day_trades if t.setup_label) / n
    overtrading = 1.0 if n <= cfg.daily_trade_limit else cfg.overtrading_day_factor
    return round_int(
        (
            sl * cfg.day_weight_sl
            + tp * cfg.day_weight_tp
            + setup * cfg.day_weight_setup
            + overtrading * cfg.day_weight_overtrading
        ) * 100
    )


def _good_day_streaks(history: list[DailyDiscipline], good_score: int) -> tuple[int, int]:
    """(current, best) runs of consecutive days scoring at least *good_score*."""
    best = run = 0
    for day in history:
        if day.score >= good_score:
            run += 1
            best = max(best, run)
        else:
            run = 0
    return run, best


def _improvements(metrics: DisciplineMetrics, cfg: DisciplineConfig) -> list[ImprovementTip]:
    tips: list[ImprovementTip] = []
    if metrics.sl_respect < cfg.sl_tip_below:
        tips.append(ImprovementTip.ALWAYS_SET_STOP_LOSS)
    if metrics.tp_respect < cfg.tp_tip_below:
        tips.append(ImprovementTip.ALWAYS_SET_TAKE_PROFIT)
    if metrics.plan_respect < cfg.plan_tip_below:
        tips.append(ImprovementTip.DOCUMENT_SETUP)
    if metrics.risk_management < cfg.risk_tip_below:
        tips.append(ImprovementTip.CONSISTENT_LOT_SIZE)
    if metrics.no_overtrading < cfg.overtrading_tip_below:
        tips.append(ImprovementTip.LIMIT_DAILY_TRADES)
    return tips


def compute_discipline(
    trades: list[Trade], config: DisciplineConfig | None = None,
) -> DisciplineAnalysis:
    """Score rule adherence across a trade snapshot."""
    trades = ensure_trade_list(trades)
    cfg = config or DisciplineConfig()

    if not trades:
        return DisciplineAnalysis()

    n = len(trades)
    by_day: dict[date, list[Trade]] = defaultdict(list)
    for trade in trades:
        by_day[trade.trading_day].append(trade)

    days_traded = len(by_day)
    days_overtraded = sum(
        1 for day_trades in by_day.values() if len(day_trades) > cfg.daily_trade_limit
    )

    metrics = DisciplineMetrics(
        sl_respect=_pct(sum(1 for t in trades if t.has_stop_loss), n),
        tp_respect=_pct(sum(1 for t in trades if t.has_take_profit), n),
        plan_respect=_pct(sum(1 for t in trades if t.setup_label), n),
        risk_management=_lot_consistency(trades, cfg.lot_variance_threshold),
        no_overtrading=(
            _pct(days_traded - days_overtraded, days_traded) if days_traded else 100
        ),
    )

    # Every per-trade component has data once there is a trade; the
    # overtrading component needs at least one trading day.
    has_data = {
        DisciplineComponent.STOP_LOSS: True,
        DisciplineComponent.TAKE_PROFIT: True,
        DisciplineComponent.PLAN: True,
        DisciplineComponent.RISK_MANAGEMENT: True,
        DisciplineComponent.NO_OVERTRADING: days_traded > 0,
    }
    weighted = 0.0
    total_weight = 0.0
    for component, rate in metrics.as_components().items():
        if not has_data[component]:
            continue
        weight = cfg.component_weights.get(component, 0.0)
        weighted += rate * weight
        total_weight += weight
    overall = round_int(weighted / total_weight) if total_weight > 0 else 0

    history = sorted(
        (
            DailyDiscipline(date=day, score=_day_score(day_trades, cfg), trades=len(day_trades))
            for day, day_trades in by_day.items()
        ),
        key=lambda d: d.date,
    )[-cfg.history_days:]
    current, best = _good_day_streaks(history, cfg.good_day_score)

    logger.debug(
        "Discipline score %d over %d trades / %d days", overall, n, days_traded
    )
    return DisciplineAnalysis(
        overall_score=overall,
        metrics=metrics,
        history=history,
        streak=current,
        best_streak=best,
        grade=score_to_grade(overall),
        improvements=_improvements(metrics, cfg),
    )
