"""Tests for personal pattern and cognitive bias detection."""

from __future__ import annotations

from datetime import timedelta

from trade_insights.core.enums import BiasType, PatternCategory, PatternKind
from trade_insights.journal.patterns import detect_patterns

from ...factories import BASE_TIME, make_series, make_trade


def _at(day: int, hour: int):
    return BASE_TIME.replace(hour=hour) + timedelta(days=day)


def _alternating(pnls, **kwargs):
    """Series with alternating long / short directions."""
    return [
        make_trade(
            pnl,
            trade_date=BASE_TIME + timedelta(hours=i),
            direction="long" if i % 2 == 0 else "short",
            **kwargs,
        )
        for i, pnl in enumerate(pnls)
    ]


def _bias(report, bias_type):
    return next((b for b in report.cognitive_biases if b.type == bias_type), None)


class TestDetectPatterns:
    def test_too_few_trades(self):
        report = detect_patterns(make_series([10] * 9))
        assert report.is_empty

    def test_hour_patterns_and_recovery(self):
        afternoon = [make_trade(10, trade_date=_at(d, 14)) for d in range(4)]
        morning = [make_trade(-10, trade_date=_at(d, 9)) for d in range(6)]
        report = detect_patterns(afternoon + morning)

        assert "strong_timing:14" in report.strengths
        assert "weak_timing:9" in report.weaknesses
        assert "good_recovery_after_loss" in report.strengths
        timing = [p for p in report.personal_patterns if p.category == PatternCategory.TIMING]
        assert [(p.kind, p.key, p.win_rate) for p in timing] == [
            (PatternKind.POSITIVE, "14", 100),
            (PatternKind.NEGATIVE, "9", 0),
        ]

    def test_weak_bucket_needs_five_trades(self):
        afternoon = [make_trade(10, trade_date=_at(d, 14)) for d in range(6)]
        morning = [make_trade(-10, trade_date=_at(d, 9)) for d in range(4)]
        report = detect_patterns(afternoon + morning)
        assert not any(w.startswith("weak_timing") for w in report.weaknesses)

    def test_setup_needs_five_trades(self):
        trades = _alternating([10] * 4, setup="fvg") + _alternating([10, -10] * 3, setup="range")
        report = detect_patterns(trades)
        setups = [p for p in report.personal_patterns if p.category == PatternCategory.SETUP]
        assert not any(p.key == "fvg" for p in setups)

    def test_strong_and_weak_setups(self):
        trades = (
            _alternating([10] * 5, setup="fvg")
            + _alternating([-10] * 5, setup="news")
        )
        report = detect_patterns(trades)
        setups = {
            p.key: p.kind for p in report.personal_patterns if p.category == PatternCategory.SETUP
        }
        assert setups == {"fvg": PatternKind.POSITIVE, "news": PatternKind.NEGATIVE}

    def test_slow_recovery_after_loss(self):
        trades = _alternating([-10, -10, -10, -10, -10, -10, 10, 10, 10, 10])
        report = detect_patterns(trades)
        assert "slow_recovery_after_loss" in report.weaknesses


class TestBiases:
    def test_confirmation_bias(self):
        report = detect_patterns(make_series([10, -10] * 5))
        bias = _bias(report, BiasType.CONFIRMATION)
        assert bias.confidence == 80
        assert bias.mitigation == "analyse_both_directions"

    def test_balanced_directions_have_no_confirmation_bias(self):
        report = detect_patterns(_alternating([10, -10] * 5))
        assert _bias(report, BiasType.CONFIRMATION) is None

    def test_recency_bias(self):
        older = _alternating([10, -10] * 10, lot_size=1.0)
        recent = [
            make_trade(10, trade_date=BASE_TIME + timedelta(days=2, hours=i),
                       direction="long" if i % 2 else "short", lot_size=2.0)
            for i in range(5)
        ]
        bias = _bias(detect_patterns(older + recent), BiasType.RECENCY)
        assert bias.confidence == 70

    def test_recency_needs_enough_recent_trades(self):
        trades = _alternating([10, -10] * 12, lot_size=1.0)
        assert _bias(detect_patterns(trades), BiasType.RECENCY) is None

    def test_overconfidence(self):
        trades = [
            make_trade(
                10,
                trade_date=BASE_TIME + timedelta(hours=i),
                direction="long" if i % 2 == 0 else "short",
                lot_size=1.0 if i % 2 == 0 else 2.0,
            )
            for i in range(10)
        ]
        report = detect_patterns(trades)
        bias = _bias(report, BiasType.OVERCONFIDENCE)
        assert bias.confidence == 55.6
        assert "overconfidence_after_wins" in report.weaknesses

    def test_loss_aversion(self):
        wins = _alternating([10, 10, 10], duration_seconds=600)
        losses = [
            make_trade(-10, trade_date=BASE_TIME + timedelta(days=1, hours=i),
                       direction="long" if i % 2 else "short", duration_seconds=1800)
            for i in range(3)
        ]
        filler = [
            make_trade(None, trade_date=BASE_TIME + timedelta(days=2, hours=i),
                       direction="long" if i % 2 else "short")
            for i in range(4)
        ]
        bias = _bias(detect_patterns(wins + losses + filler), BiasType.LOSS_AVERSION)
        assert bias.confidence == 80
        assert bias.evidence == ["avg loss duration 30min vs win 10min"]

    def test_order_independent(self):
        trades = _alternating([10, -10, -10, 10, 10, -10, 10, -10, 10, 10])
        assert detect_patterns(trades) == detect_patterns(list(reversed(trades)))
