"""Execution quality of closed trades.

Three components, each scored 0-100, plus their unweighted mean:

- entry timing: where the entry sits between stop loss and take profit
  (result used as a proxy when either level is missing)
- stop-loss sizing: SL distance as a percentage of the entry price
- take-profit optimisation: how far the exit travelled towards the TP

Each component carries a categorical ``ExecutionLabel`` and a detail code;
wording is left to the presentation layer.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from trade_insights.core.config import ExecutionConfig
from trade_insights.core.enums import ExecutionLabel, TradeResult
from trade_insights.core.models import Trade, ensure_trade_list
from trade_insights.core.numbers import round_int

logger = logging.getLogger(__name__)

# Detail code per label
_DETAILS: dict[ExecutionLabel, str] = {
    ExecutionLabel.NO_DATA: "",
    ExecutionLabel.OPTIMAL: "well_executed",
    ExecutionLabel.ACCEPTABLE: "timing_can_improve",
    ExecutionLabel.TOO_LATE: "enters_after_move",
    ExecutionLabel.TOO_EARLY: "enters_before_confirmation",
    ExecutionLabel.NOT_SET: "set_levels",
    ExecutionLabel.TOO_TIGHT: "premature_exit_risk",
    ExecutionLabel.TOO_WIDE: "large_loss_risk",
    ExecutionLabel.OPTIMIZED: "targets_well_placed",
    ExecutionLabel.NOT_OPTIMIZED: "targets_rarely_hit",
    ExecutionLabel.PARTIAL: "frequent_partial_profits",
}


@dataclass(frozen=True)
class ComponentScore:
    score: int = 0
    label: ExecutionLabel = ExecutionLabel.NO_DATA
    samples: int = 0

    @property
    def detail(self) -> str:
        return _DETAILS[self.label]

    def to_dict(self) -> dict[str, Any]:
        return {
            "score": self.score,
            "label": self.label.value,
            "detail": self.detail,
            "samples": self.samples,
        }


@dataclass(frozen=True)
class ExecutionQuality:
    entry_timing: ComponentScore = field(default_factory=ComponentScore)
    sl_sizing: ComponentScore = field(default_factory=ComponentScore)
    tp_optimization: ComponentScore = field(default_factory=ComponentScore)
    overall_score: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "entry_timing": self.entry_timing.to_dict(),
            "sl_sizing": self.sl_sizing.to_dict(),
            "tp_optimization": self.tp_optimization.to_dict(),
            "overall_score": self.overall_score,
        }


# ---------------------------------------------------------------------- #
# Components                                                               #
# ---------------------------------------------------------------------- #


def classify_entry(trade: Trade, cfg: ExecutionConfig) -> str:
    """Return ``"good"``, ``"early"`` or ``"late"`` for one closed trade."""
    if trade.has_stop_loss and trade.has_take_profit and trade.take_profit != trade.stop_loss:
        position = abs(trade.entry_price - trade.stop_loss) / abs(
            trade.take_profit - trade.stop_loss
        )
        if trade.is_long:
            if position < cfg.good_entry_long:
                return "good"
            return "early" if position < cfg.early_entry_long else "late"
        if position > cfg.good_entry_short:
            return "good"
        return "early" if position > cfg.early_entry_short else "late"

    # No usable geometry: the outcome stands in for timing
    outcome = trade.outcome
    if outcome == TradeResult.WIN:
        return "good"
    if outcome == TradeResult.LOSS:
        return "late"
    return "early"


def _entry_timing(closed: list[Trade], cfg: ExecutionConfig) -> ComponentScore:
    tally = {"good": 0, "early": 0, "late": 0}
    for trade in closed:
        tally[classify_entry(trade, cfg)] += 1

    score = round_int(tally["good"] / len(closed) * 100)
    if score >= cfg.entry_optimal_score:
        label = ExecutionLabel.OPTIMAL
    elif score >= cfg.entry_acceptable_score:
        label = ExecutionLabel.ACCEPTABLE
    elif tally["late"] > tally["early"]:
        label = ExecutionLabel.TOO_LATE
    else:
        label = ExecutionLabel.TOO_EARLY
    return ComponentScore(score=score, label=label, samples=len(closed))


def _sl_sizing(closed: list[Trade], cfg: ExecutionConfig) -> ComponentScore:
    with_sl = [t for t in closed if t.has_stop_loss and t.entry_price > 0]
    if not with_sl:
        return ComponentScore(label=ExecutionLabel.NOT_SET)

    tight = optimal = wide = 0
    for trade in with_sl:
        pct = abs(trade.entry_price - trade.stop_loss) / trade.entry_price * 100
        if pct < cfg.tight_sl_pct:
            tight += 1
        elif pct <= cfg.wide_sl_pct:
            optimal += 1
        else:
            wide += 1

    score = round_int(optimal / len(with_sl) * 100)
    if score >= cfg.sl_optimal_score:
        label = ExecutionLabel.OPTIMAL
    elif tight > wide:
        label = ExecutionLabel.TOO_TIGHT
    else:
        label = ExecutionLabel.TOO_WIDE
    return ComponentScore(score=score, label=label, samples=len(with_sl))


def _tp_optimization(closed: list[Trade], cfg: ExecutionConfig) -> ComponentScore:
    with_tp = [t for t in closed if t.has_take_profit and t.has_exit_price]
    if not with_tp:
        return ComponentScore(label=ExecutionLabel.NOT_SET)

    hit = partial = missed = 0
    for trade in with_tp:
        # Signed move in the trade's favour, and the distance to target
        sign = 1 if trade.is_long else -1
        travelled = (trade.exit_price - trade.entry_price) * sign
        target = (trade.take_profit - trade.entry_price) * sign
        if travelled >= target * cfg.tp_hit_fraction:
            hit += 1
        elif travelled >= 0:
            partial += 1
        else:
            missed += 1

    score = round_int((hit + partial * 0.5) / len(with_tp) * 100)
    if score >= cfg.tp_optimized_score:
        label = ExecutionLabel.OPTIMIZED
    elif hit < missed:
        label = ExecutionLabel.NOT_OPTIMIZED
    else:
        label = ExecutionLabel.PARTIAL
    return ComponentScore(score=score, label=label, samples=len(with_tp))


# ---------------------------------------------------------------------- #
# Engine                                                                   #
# ---------------------------------------------------------------------- #


def compute_execution_quality(
    trades: list[Trade], config: ExecutionConfig | None = None,
) -> ExecutionQuality:
    """Score entry timing, SL sizing and TP placement over closed trades."""
    trades = ensure_trade_list(trades)
    cfg = config or ExecutionConfig()

    closed = [t for t in trades if t.is_closed]
    if not closed:
        logger.debug("No closed trades; execution quality has no data")
        return ExecutionQuality()

    entry = _entry_timing(closed, cfg)
    sl = _sl_sizing(closed, cfg)
    tp = _tp_optimization(closed, cfg)
    return ExecutionQuality(
        entry_timing=entry,
        sl_sizing=sl,
        tp_optimization=tp,
        overall_score=round_int((entry.score + sl.score + tp.score) / 3),
    )
