"""Self-sabotage detection.

Counts five behaviours over the chronological trade sequence and raises an
alert once a behaviour recurs often enough:

- trading again less than 30 minutes after a loss
- raising the lot size by more than 50% right after a win
- trades tagged with a negative emotion
- revenge trading: re-entering within an hour after a run of losses ends
- overtrading days (more than 10 trades)

The sabotage score (0-100, lower is better) weights each occurrence and
scales by the number of trades.
"""

from __future__ import annotations

import logging
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from trade_insights.core.config import SabotageConfig
from trade_insights.core.enums import SabotageRecommendation, SabotageType, Severity
from trade_insights.core.models import Trade, ensure_trade_list, sort_chronologically
from trade_insights.core.numbers import is_finite_number, round_int

logger = logging.getLogger(__name__)

_RECOMMENDATIONS = {
    SabotageType.TRADING_AFTER_LOSS: SabotageRecommendation.WAIT_AFTER_LOSS,
    SabotageType.LOT_INCREASE_AFTER_WIN: SabotageRecommendation.CONSTANT_POSITION_SIZE,
    SabotageType.EMOTIONAL_TRADING: SabotageRecommendation.AVOID_EMOTIONAL_TRADING,
}


@dataclass(frozen=True)
class SabotageAlert:
    type: SabotageType
    severity: Severity
    count: int
    details: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "severity": self.severity.value,
            "count": self.count,
            "details": list(self.details),
        }


@dataclass(frozen=True)
class SelfSabotageAnalysis:
    alerts: list[SabotageAlert] = field(default_factory=list)
    sabotage_score: int = 0
    counts: dict[SabotageType, int] = field(
        default_factory=lambda: {t: 0 for t in SabotageType}
    )
    recommendations: list[SabotageRecommendation] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "alerts": [a.to_dict() for a in self.alerts],
            "sabotage_score": self.sabotage_score,
            "counts": {t.value: n for t, n in self.counts.items()},
            "recommendations": [r.value for r in self.recommendations],
        }


def is_negative_emotion(emotions: str | None, vocabulary: list[str]) -> bool:
    """True when the emotion tag mentions any word from *vocabulary*."""
    if not emotions:
        return False
    text = emotions.lower()
    return any(word in text for word in vocabulary)


def detect_self_sabotage(
    trades: list[Trade], config: SabotageConfig | None = None,
) -> SelfSabotageAnalysis:
    """Scan a trade history for self-sabotaging behaviour."""
    trades = ensure_trade_list(trades)
    cfg = config or SabotageConfig()

    if len(trades) < 2:
        return SelfSabotageAnalysis()

    ordered = sort_chronologically(trades)
    found: dict[SabotageType, list[str]] = {t: [] for t in SabotageType}
    quick_window = cfg.quick_trade_minutes * 60
    revenge_window = cfg.revenge_window_hours * 3600

    for index, (prev, curr) in enumerate(zip(ordered, ordered[1:]), start=2):
        gap = (curr.trade_date - prev.trade_date).total_seconds()
        if prev.is_loss and 0 <= gap < quick_window:
            found[SabotageType.TRADING_AFTER_LOSS].append(
                f"trade {index}: {int(gap // 60)}min after loss"
            )
        # A sizing change is only measurable against a positive, finite base lot
        sized = is_finite_number(prev.lot_size) and prev.lot_size > 0
        if prev.is_win and sized and curr.lot_size > prev.lot_size * cfg.lot_increase_factor:
            increase = round_int((curr.lot_size / prev.lot_size - 1) * 100)
            found[SabotageType.LOT_INCREASE_AFTER_WIN].append(
                f"lot {prev.lot_size:g} -> {curr.lot_size:g} (+{increase}%)"
            )

    for trade in ordered:
        if is_negative_emotion(trade.emotions, cfg.negative_emotions):
            found[SabotageType.EMOTIONAL_TRADING].append(
                f"{trade.asset or trade.id}: {trade.emotions}"
            )

    # The trade that ends a losing run is followed quickly by another one
    losing_run = 0
    for index, trade in enumerate(ordered):
        if trade.is_loss:
            losing_run += 1
            continue
        if losing_run >= cfg.revenge_min_losses and index + 1 < len(ordered):
            gap = (ordered[index + 1].trade_date - trade.trade_date).total_seconds()
            if 0 <= gap < revenge_window:
                found[SabotageType.REVENGE_TRADING].append(
                    f"after {losing_run} consecutive losses"
                )
        losing_run = 0

    per_day = Counter(t.trading_day for t in ordered)
    for day in sorted(per_day):
        if per_day[day] > cfg.overtrading_day_limit:
            found[SabotageType.OVERTRADING].append(f"{day.isoformat()}: {per_day[day]} trades")

    counts = {t: len(details) for t, details in found.items()}

    alerts: list[SabotageAlert] = []
    for sabotage_type, details in found.items():
        warning_at, danger_at = cfg.alert_thresholds[sabotage_type]
        count = len(details)
        if count < warning_at:
            continue
        severity = (
            Severity.DANGER if danger_at is not None and count >= danger_at else Severity.WARNING
        )
        alerts.append(SabotageAlert(
            type=sabotage_type,
            severity=severity,
            count=count,
            details=details[: cfg.max_alert_details],
        ))

    issues = sum(counts[t] * cfg.score_weights.get(t, 0) for t in SabotageType)
    expected = max(len(trades) * cfg.expected_issue_ratio, 1)
    score = min(100, round_int(issues / expected * 100))

    recommendations = [
        rec for sabotage_type, rec in _RECOMMENDATIONS.items() if counts[sabotage_type] > 0
    ]
    logger.debug("Sabotage score %d with %d alerts", score, len(alerts))
    return SelfSabotageAnalysis(
        alerts=alerts,
        sabotage_score=score,
        counts=counts,
        recommendations=recommendations,
    )
