"""Personal pattern and cognitive bias detection.

Needs at least ``min_trades`` trades; below that the report is empty.

Personal patterns are win-rate slices that stand out: hour of day, day of
week, setup, and the trade right after a loss.  Each slice is gated on its
own minimum sample size *before* its win-rate threshold is applied.

Biases (each independently gated):

- confirmation: long/short count imbalance above 40% of all trades
- recency: recent average lot size differs from the rest by over 30%
- overconfidence: at least 40% of wins followed by a 20%+ larger position
- loss aversion: losers held over 50% longer than winners

Trades are evaluated in chronological order.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from collections.abc import Callable, Hashable
from dataclasses import dataclass, field
from typing import Any

from trade_insights.core.config import PatternConfig
from trade_insights.core.enums import BiasType, PatternCategory, PatternKind
from trade_insights.core.models import Trade, ensure_trade_list, sort_chronologically
from trade_insights.core.numbers import mean, round_half_up, round_int

logger = logging.getLogger(__name__)

WEEKDAYS = ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
UNKNOWN_SETUP = "unknown"

_MITIGATIONS = {
    BiasType.CONFIRMATION: "analyse_both_directions",
    BiasType.RECENCY: "use_long_term_data",
    BiasType.OVERCONFIDENCE: "keep_position_size_constant",
    BiasType.LOSS_AVERSION: "cut_losses_per_plan",
}


@dataclass(frozen=True)
class PersonalPattern:
    kind: PatternKind
    category: PatternCategory
    key: str  # Hour ("14"), weekday ("monday"), setup name or "after_loss"
    win_rate: int
    frequency: int
    suggestion: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "category": self.category.value,
            "key": self.key,
            "win_rate": self.win_rate,
            "frequency": self.frequency,
            "suggestion": self.suggestion,
        }


@dataclass(frozen=True)
class CognitiveBias:
    type: BiasType
    confidence: float
    evidence: list[str] = field(default_factory=list)

    @property
    def mitigation(self) -> str:
        return _MITIGATIONS[self.type]

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "confidence": self.confidence,
            "evidence": list(self.evidence),
            "mitigation": self.mitigation,
        }


@dataclass(frozen=True)
class PatternReport:
    personal_patterns: list[PersonalPattern] = field(default_factory=list)
    cognitive_biases: list[CognitiveBias] = field(default_factory=list)
    strengths: list[str] = field(default_factory=list)
    weaknesses: list[str] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not (
            self.personal_patterns or self.cognitive_biases or self.strengths or self.weaknesses
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "personal_patterns": [p.to_dict() for p in self.personal_patterns],
            "cognitive_biases": [b.to_dict() for b in self.cognitive_biases],
            "strengths": list(self.strengths),
            "weaknesses": list(self.weaknesses),
        }


@dataclass
class _Bucket:
    wins: int = 0
    total: int = 0

    @property
    def win_rate(self) -> float:
        return self.wins / self.total * 100 if self.total else 0.0


def _bucket_by(trades: list[Trade], key: Callable[[Trade], Hashable]) -> dict[Any, _Bucket]:
    buckets: dict[Any, _Bucket] = defaultdict(_Bucket)
    for trade in trades:
        bucket = buckets[key(trade)]
        bucket.total += 1
        if trade.is_win:
            bucket.wins += 1
    return buckets


# ---------------------------------------------------------------------- #
# Personal patterns                                                        #
# ---------------------------------------------------------------------- #


def _time_patterns(
    buckets: dict[Any, _Bucket],
    category: PatternCategory,
    label: Callable[[Any], str],
    cfg: PatternConfig,
    patterns: list[PersonalPattern],
    strengths: list[str],
    weaknesses: list[str],
) -> None:
    eligible = sorted(
        ((k, b) for k, b in buckets.items() if b.total >= cfg.min_bucket_trades),
        key=lambda item: item[0],
    )
    if not eligible:
        return

    # First bucket wins ties, in key order
    best_key, best = max(eligible, key=lambda item: item[1].win_rate)
    worst_key, worst = min(eligible, key=lambda item: item[1].win_rate)

    best_rate = round_int(best.win_rate)
    if best_rate >= cfg.strong_bucket_win_rate:
        patterns.append(PersonalPattern(
            PatternKind.POSITIVE, category, label(best_key), best_rate, best.total,
            suggestion=f"focus_on_{category.value}",
        ))
        strengths.append(f"strong_{category.value}:{label(best_key)}")

    worst_rate = round_int(worst.win_rate)
    if worst.total >= cfg.min_weak_bucket_trades and worst_rate < cfg.weak_bucket_win_rate:
        patterns.append(PersonalPattern(
            PatternKind.NEGATIVE, category, label(worst_key), worst_rate, worst.total,
            suggestion=f"avoid_{category.value}",
        ))
        weaknesses.append(f"weak_{category.value}:{label(worst_key)}")


def _setup_patterns(
    trades: list[Trade], cfg: PatternConfig, patterns: list[PersonalPattern],
) -> None:
    buckets = _bucket_by(trades, lambda t: t.setup_label or UNKNOWN_SETUP)
    for setup in sorted(buckets):
        bucket = buckets[setup]
        if bucket.total < cfg.min_setup_trades:
            continue
        rate = bucket.win_rate
        if rate >= cfg.strong_setup_win_rate:
            patterns.append(PersonalPattern(
                PatternKind.POSITIVE, PatternCategory.SETUP, setup, round_int(rate),
                bucket.total, suggestion="prioritise_setup",
            ))
        elif rate < cfg.weak_setup_win_rate:
            patterns.append(PersonalPattern(
                PatternKind.NEGATIVE, PatternCategory.SETUP, setup, round_int(rate),
                bucket.total, suggestion="reconsider_setup",
            ))


def _post_loss_pattern(
    ordered: list[Trade],
    cfg: PatternConfig,
    patterns: list[PersonalPattern],
    strengths: list[str],
    weaknesses: list[str],
) -> None:
    wins = losses = 0
    for prev, curr in zip(ordered, ordered[1:]):
        if not prev.is_loss:
            continue
        if curr.is_win:
            wins += 1
        elif curr.is_loss:
            losses += 1

    pairs = wins + losses
    if pairs < cfg.min_post_loss_pairs:
        return
    rate = wins / pairs * 100
    if rate < cfg.weak_post_loss_win_rate:
        patterns.append(PersonalPattern(
            PatternKind.NEGATIVE, PatternCategory.BEHAVIOR, "after_loss", round_int(rate),
            pairs, suggestion="pause_after_loss",
        ))
        weaknesses.append("slow_recovery_after_loss")
    elif rate >= cfg.strong_post_loss_win_rate:
        strengths.append("good_recovery_after_loss")


# ---------------------------------------------------------------------- #
# Biases                                                                   #
# ---------------------------------------------------------------------- #


def _confirmation_bias(ordered: list[Trade], cfg: PatternConfig) -> CognitiveBias | None:
    longs = sum(1 for t in ordered if t.is_long)
    shorts = len(ordered) - longs
    gap = abs(longs - shorts)
    if gap <= len(ordered) * cfg.direction_imbalance:
        return None
    return CognitiveBias(
        BiasType.CONFIRMATION,
        confidence=round_half_up(min(cfg.confirmation_confidence_cap, gap / len(ordered) * 100), 1),
        evidence=[f"{longs} longs vs {shorts} shorts"],
    )


def _recency_bias(ordered: list[Trade], cfg: PatternConfig) -> CognitiveBias | None:
    size = min(cfg.recent_max_trades, int(len(ordered) * cfg.recent_fraction))
    if size < cfg.recent_min_trades:
        return None
    recent, older = ordered[-size:], ordered[:-size]
    if len(older) < cfg.older_min_trades:
        return None

    recent_avg = mean([t.lot_size for t in recent])
    older_avg = mean([t.lot_size for t in older])
    if older_avg <= 0:
        return None
    shift = abs(recent_avg - older_avg) / older_avg
    if shift <= cfg.recency_lot_shift:
        return None
    return CognitiveBias(
        BiasType.RECENCY,
        confidence=round_half_up(min(cfg.recency_confidence_cap, shift * 100), 1),
        evidence=[f"recent avg lot {recent_avg:.2f} vs historical {older_avg:.2f}"],
    )


def _overconfidence(ordered: list[Trade], cfg: PatternConfig) -> CognitiveBias | None:
    wins_with_next = sized_up = 0
    for prev, curr in zip(ordered, ordered[1:]):
        if not prev.is_win:
            continue
        wins_with_next += 1
        if curr.lot_size > prev.lot_size * cfg.size_up_factor:
            sized_up += 1

    if wins_with_next < cfg.min_wins_with_next:
        return None
    ratio = sized_up / wins_with_next
    if ratio < cfg.overconfidence_ratio:
        return None
    return CognitiveBias(
        BiasType.OVERCONFIDENCE,
        confidence=round_half_up(min(cfg.overconfidence_confidence_cap, ratio * 100), 1),
        evidence=[f"{sized_up}/{wins_with_next} wins followed by a larger position"],
    )


def _loss_aversion(ordered: list[Trade], cfg: PatternConfig) -> CognitiveBias | None:
    win_durations = [
        t.resolved_duration_seconds for t in ordered
        if t.is_win and t.resolved_duration_seconds is not None
    ]
    loss_durations = [
        t.resolved_duration_seconds for t in ordered
        if t.is_loss and t.resolved_duration_seconds is not None
    ]
    if min(len(win_durations), len(loss_durations)) < cfg.min_duration_samples:
        return None

    avg_win = mean(win_durations)
    avg_loss = mean(loss_durations)
    if avg_loss <= avg_win * cfg.hold_time_ratio:
        return None
    return CognitiveBias(
        BiasType.LOSS_AVERSION,
        confidence=round_half_up(
            min(cfg.loss_aversion_confidence_cap, (avg_loss / avg_win - 1) * 50), 1
        ),
        evidence=[
            f"avg loss duration {round_int(avg_loss / 60)}min"
            f" vs win {round_int(avg_win / 60)}min"
        ],
    )


# ---------------------------------------------------------------------- #
# Engine                                                                   #
# ---------------------------------------------------------------------- #


def detect_patterns(
    trades: list[Trade], config: PatternConfig | None = None,
) -> PatternReport:
    """Detect personal performance patterns and cognitive biases."""
    trades = ensure_trade_list(trades)
    cfg = config or PatternConfig()

    if len(trades) < cfg.min_trades:
        logger.debug("Pattern detection needs %d trades, got %d", cfg.min_trades, len(trades))
        return PatternReport()

    ordered = sort_chronologically(trades)
    patterns: list[PersonalPattern] = []
    strengths: list[str] = []
    weaknesses: list[str] = []

    _time_patterns(
        _bucket_by(ordered, lambda t: t.trade_date.hour),
        PatternCategory.TIMING, str, cfg, patterns, strengths, weaknesses,
    )
    _time_patterns(
        _bucket_by(ordered, lambda t: t.trade_date.weekday()),
        PatternCategory.DAY_OF_WEEK, lambda d: WEEKDAYS[d], cfg, patterns, strengths, weaknesses,
    )
    _setup_patterns(ordered, cfg, patterns)
    _post_loss_pattern(ordered, cfg, patterns, strengths, weaknesses)

    detectors = (_confirmation_bias, _recency_bias, _overconfidence, _loss_aversion)
    biases = [bias for bias in (d(ordered, cfg) for d in detectors) if bias is not None]
    if any(b.type == BiasType.OVERCONFIDENCE for b in biases):
        weaknesses.append("overconfidence_after_wins")

    return PatternReport(
        personal_patterns=patterns,
        cognitive_biases=biases,
        strengths=strengths,
        weaknesses=weaknesses,
    )
