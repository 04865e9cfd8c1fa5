"""Trader profile classification.

Accumulates four trait scores (impulsivity, patience, hesitancy,
aggressiveness) from fixed point contributions of six behavioural signals,
then picks an archetype.  The point values encode domain judgment and are
kept as-is.

Returns ``None`` when there are too few closed trades to classify; that is
a valid outcome, not an error.
"""

from __future__ import annotations

import logging
import math
from collections import Counter, defaultdict
from dataclasses import dataclass, field
from datetime import date
from typing import Any

from trade_insights.core.config import ProfileConfig
from trade_insights.core.enums import ProfileType, Trait
from trade_insights.core.models import Trade, ensure_trade_list, sort_chronologically
from trade_insights.core.numbers import round_int

logger = logging.getLogger(__name__)

# Emotion tags (lower-cased, French and English spellings) per signal
_IMPULSIVE_TAGS = frozenset({"impulsif", "impulsive"})
_STRESSED_TAGS = frozenset({"stressé", "stressed"})
_CALM_TAGS = frozenset({"calme", "calm"})
_PATIENT_TAGS = frozenset({"patient"})
_FEARFUL_TAGS = frozenset({"craintif", "fearful"})

# Static advice codes per archetype, rendered by the presentation layer
ADVICE: dict[ProfileType, tuple[str, ...]] = {
    ProfileType.IMPULSIVE: (
        "wait_before_each_trade",
        "use_pre_trade_checklist",
        "limit_three_trades_per_day",
        "breathe_before_trading",
    ),
    ProfileType.PATIENT: (
        "maintain_discipline",
        "avoid_excessive_caution",
        "set_setup_alerts",
        "document_best_entries",
    ),
    ProfileType.HESITANT: (
        "define_clear_entry_rules",
        "start_with_smaller_positions",
        "journal_missed_opportunities",
        "build_confidence_on_demo",
    ),
    ProfileType.AGGRESSIVE: (
        "halve_position_size",
        "always_use_stop_loss",
        "risk_at_most_two_percent",
        "pause_after_two_losses",
    ),
    ProfileType.BALANCED: (
        "follow_trading_plan",
        "document_best_practices",
        "share_experience",
        "optimise_existing_performance",
    ),
}

# Tie-break order for dominant traits
_TRAIT_PROFILE: list[tuple[Trait, ProfileType]] = [
    (Trait.IMPULSIVITY, ProfileType.IMPULSIVE),
    (Trait.PATIENCE, ProfileType.PATIENT),
    (Trait.HESITANCY, ProfileType.HESITANT),
    (Trait.AGGRESSIVENESS, ProfileType.AGGRESSIVE),
]


@dataclass(frozen=True)
class TraderProfile:
    type: ProfileType
    characteristics: dict[Trait, int] = field(default_factory=dict)
    advice: tuple[str, ...] = ()
    raw_scores: dict[Trait, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "characteristics": {t.value: v for t, v in self.characteristics.items()},
            "advice": list(self.advice),
        }


# ---------------------------------------------------------------------- #
# Signals                                                                  #
# ---------------------------------------------------------------------- #


def _frequency_points(closed: list[Trade], scores: dict[Trait, int]) -> None:
    per_day: dict[date, int] = defaultdict(int)
    for trade in closed:
        per_day[trade.trading_day] += 1
    avg_per_day = sum(per_day.values()) / len(per_day)
    if avg_per_day > 5:
        scores[Trait.IMPULSIVITY] += 30
        scores[Trait.AGGRESSIVENESS] += 20
    elif avg_per_day < 2:
        scores[Trait.PATIENCE] += 30
        scores[Trait.HESITANCY] += 20


def _duration_points(closed: list[Trade], scores: dict[Trait, int]) -> None:
    durations = [
        d for d in (t.resolved_duration_seconds for t in closed) if d is not None
    ]
    if not durations:
        return
    avg_minutes = sum(durations) / len(durations) / 60
    if avg_minutes < 15:
        scores[Trait.IMPULSIVITY] += 25
        scores[Trait.AGGRESSIVENESS] += 15
    elif avg_minutes > 240:
        scores[Trait.PATIENCE] += 25
    elif avg_minutes > 60:
        scores[Trait.PATIENCE] += 15


def _emotion_points(closed: list[Trade], scores: dict[Trait, int]) -> None:
    tags = [t.emotions.strip().lower() for t in closed if t.emotions and t.emotions.strip()]
    if not tags:
        return
    counts = Counter(tags)
    total = len(tags)

    def share(group: frozenset[str], points: int) -> int:
        return round_int(sum(counts[tag] for tag in group) / total * points)

    scores[Trait.IMPULSIVITY] += share(_IMPULSIVE_TAGS, 40) + share(_STRESSED_TAGS, 20)
    scores[Trait.PATIENCE] += share(_CALM_TAGS, 30) + share(_PATIENT_TAGS, 40)
    scores[Trait.HESITANCY] += share(_FEARFUL_TAGS, 40)


def _lot_variation_points(closed: list[Trade], scores: dict[Trait, int]) -> None:
    lots = [t.lot_size for t in closed]
    avg_lot = sum(lots) / len(lots)
    variance = sum((lot - avg_lot) ** 2 for lot in lots) / len(lots)
    cv = math.sqrt(variance) / avg_lot if avg_lot > 0 else 0.0
    if cv > 0.5:
        scores[Trait.AGGRESSIVENESS] += 30
    elif cv < 0.2:
        scores[Trait.PATIENCE] += 15


def _loss_streak_points(
    closed: list[Trade], scores: dict[Trait, int], quick_minutes: float,
) -> None:
    """Quick re-entries once a losing run reaches two trades."""
    ordered = sort_chronologically(closed)
    run = after_streak = quick = 0
    for prev, curr in zip(ordered, ordered[1:]):
        if not prev.is_loss:
            run = 0
            continue
        run += 1
        if run >= 2:
            after_streak += 1
            if (curr.trade_date - prev.trade_date).total_seconds() < quick_minutes * 60:
                quick += 1

    if after_streak and quick / after_streak > 0.5:
        scores[Trait.IMPULSIVITY] += 20
        scores[Trait.AGGRESSIVENESS] += 15


def _protection_points(closed: list[Trade], scores: dict[Trait, int]) -> None:
    sl_usage = sum(1 for t in closed if t.has_stop_loss) / len(closed)
    tp_usage = sum(1 for t in closed if t.has_take_profit) / len(closed)
    if sl_usage < 0.5:
        scores[Trait.AGGRESSIVENESS] += 20
        scores[Trait.IMPULSIVITY] += 10
    if sl_usage > 0.8 and tp_usage > 0.8:
        scores[Trait.PATIENCE] += 20
    if sl_usage > 0.9:
        scores[Trait.HESITANCY] += 15


# ---------------------------------------------------------------------- #
# Classification                                                           #
# ---------------------------------------------------------------------- #


def pick_profile(scores: dict[Trait, int], threshold: int = 50) -> ProfileType:
    """Map trait scores to an archetype.

    Combination rules win when both traits exceed *threshold*; otherwise
    the single dominant trait (within 80% of the maximum, first in
    impulsive / patient / hesitant / aggressive order) is used.
    """
    top = max(scores.values())
    if top <= threshold:
        return ProfileType.BALANCED

    if scores[Trait.IMPULSIVITY] > threshold and scores[Trait.AGGRESSIVENESS] > threshold:
        return ProfileType.AGGRESSIVE
    if scores[Trait.PATIENCE] > threshold and scores[Trait.HESITANCY] > threshold:
        return ProfileType.HESITANT

    for trait, profile_type in _TRAIT_PROFILE:
        if scores[trait] >= top * 0.8:
            return profile_type
    return ProfileType.BALANCED


def classify_trader_profile(
    trades: list[Trade], config: ProfileConfig | None = None,
) -> TraderProfile | None:
    """Classify the trader's behavioural archetype.

    Returns:
        A ``TraderProfile``, or ``None`` with fewer than
        ``min_closed_trades`` closed trades.
    """
    trades = ensure_trade_list(trades)
    cfg = config or ProfileConfig()

    closed = [t for t in trades if t.is_closed]
    if len(closed) < cfg.min_closed_trades:
        logger.debug(
            "Profile needs %d closed trades, got %d", cfg.min_closed_trades, len(closed)
        )
        return None

    scores = {trait: 0 for trait in Trait}
    _frequency_points(closed, scores)
    _duration_points(closed, scores)
    _emotion_points(closed, scores)
    _lot_variation_points(closed, scores)
    _loss_streak_points(closed, scores, cfg.quick_trade_minutes)
    _protection_points(closed, scores)

    profile_type = pick_profile(scores, cfg.dominant_threshold)
    return TraderProfile(
        type=profile_type,
        characteristics={t: min(cfg.score_cap, s) for t, s in scores.items()},
        advice=ADVICE[profile_type],
        raw_scores=dict(scores),
    )
