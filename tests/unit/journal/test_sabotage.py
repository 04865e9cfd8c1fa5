"""Tests for self-sabotage detection."""

from __future__ import annotations

from datetime import timedelta

from trade_insights.core.enums import SabotageRecommendation, SabotageType, Severity
from trade_insights.journal.sabotage import detect_self_sabotage, is_negative_emotion

from ...factories import BASE_TIME, make_series, make_trade


def _alerts(analysis):
    return {a.type: a for a in analysis.alerts}


class TestIsNegativeEmotion:
    def test_substring_match(self):
        assert is_negative_emotion("Très STRESSÉ", ["stressé"])

    def test_no_tag(self):
        assert not is_negative_emotion(None, ["stressé"])
        assert not is_negative_emotion("calme", ["stressé"])


class TestDetectSelfSabotage:
    def test_too_few_trades(self):
        analysis = detect_self_sabotage([make_trade(-10)])
        assert analysis.sabotage_score == 0
        assert analysis.alerts == []
        assert set(analysis.counts) == set(SabotageType)

    def test_trading_after_loss(self):
        trades = make_series([-10, -10, -10, -10, 10], step=timedelta(minutes=10))
        analysis = detect_self_sabotage(trades)
        alert = _alerts(analysis)[SabotageType.TRADING_AFTER_LOSS]
        assert alert.count == 4
        assert alert.severity == Severity.WARNING
        assert len(alert.details) == 3
        assert alert.details[0] == "trade 2: 10min after loss"
        assert analysis.recommendations == [SabotageRecommendation.WAIT_AFTER_LOSS]
        assert analysis.sabotage_score == 100

    def test_lot_increase_after_win(self):
        trades = make_series([10] * 5, step=timedelta(hours=2))
        trades = [
            t.model_copy(update={"lot_size": 2.0 if i % 2 else 1.0}) for i, t in enumerate(trades)
        ]
        alert = _alerts(detect_self_sabotage(trades))[SabotageType.LOT_INCREASE_AFTER_WIN]
        assert alert.count == 2
        assert alert.details[0] == "lot 1 -> 2 (+100%)"

    def test_unmeasurable_base_lot_skipped(self):
        first, second = make_series([10, 10], step=timedelta(hours=2))
        first = first.model_copy(update={"lot_size": 0.0})
        analysis = detect_self_sabotage([first, second])
        assert SabotageType.LOT_INCREASE_AFTER_WIN not in _alerts(analysis)
        assert analysis.sabotage_score == 0

    def test_emotional_trading_danger(self):
        trades = make_series([10] * 10, step=timedelta(hours=2), emotions="frustrated")
        alert = _alerts(detect_self_sabotage(trades))[SabotageType.EMOTIONAL_TRADING]
        assert alert.count == 10
        assert alert.severity == Severity.DANGER

    def test_revenge_trading(self):
        times = [(0, 0), (2, 0), (4, 0), (4, 30), (7, 0), (9, 0), (11, 0), (11, 30)]
        pnls = [-10, -10, 10, 10, -10, -10, 10, 10]
        trades = [
            make_trade(pnl, trade_date=BASE_TIME + timedelta(hours=h, minutes=m))
            for pnl, (h, m) in zip(pnls, times)
        ]
        analysis = detect_self_sabotage(trades)
        alert = _alerts(analysis)[SabotageType.REVENGE_TRADING]
        assert alert.count == 2
        assert alert.severity == Severity.DANGER
        assert analysis.counts[SabotageType.TRADING_AFTER_LOSS] == 0

    def test_overtrading_never_danger(self):
        day_one = make_series([10] * 11, step=timedelta(minutes=10))
        day_two = make_series([10] * 11, start=BASE_TIME + timedelta(days=1), step=timedelta(minutes=10))
        alert = _alerts(detect_self_sabotage(day_one + day_two))[SabotageType.OVERTRADING]
        assert alert.count == 2
        assert alert.severity == Severity.WARNING

    def test_score_scales_with_trade_count(self):
        trades = make_series([10] * 20, step=timedelta(hours=2))
        trades[5] = trades[5].model_copy(update={"emotions": "Stressé"})
        analysis = detect_self_sabotage(trades)
        assert analysis.alerts == []
        assert analysis.sabotage_score == 17
        assert analysis.recommendations == [SabotageRecommendation.AVOID_EMOTIONAL_TRADING]

    def test_clean_history(self):
        analysis = detect_self_sabotage(make_series([10, -10, 10], step=timedelta(hours=2)))
        assert analysis.sabotage_score == 0
        assert analysis.to_dict()["counts"]["revenge_trading"] == 0
