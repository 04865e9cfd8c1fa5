"""Tests for emotion / result correlation."""

from __future__ import annotations

from trade_insights.core.enums import EmotionImpact
from trade_insights.journal.emotions import analyze_emotions

from ...factories import make_series


class TestAnalyzeEmotions:
    def test_empty(self):
        analysis = analyze_emotions([])
        assert analysis.correlations == []
        assert analysis.best_emotion is None

    def test_empty_is_logged(self, caplog):
        with caplog.at_level("DEBUG", logger="trade_insights.journal.emotions"):
            analyze_emotions([])
        assert "emotion analysis has no data" in caplog.text

    def test_impact_and_extremes(self):
        trades = (
            make_series([10, 10, 10], emotions="calm")
            + make_series([-10, -10, -10], emotions=" Stressé ")
            + make_series([10, -10])
        )
        analysis = analyze_emotions(trades)
        by_tag = {c.emotion: c for c in analysis.correlations}

        assert set(by_tag) == {"calm", "Stressé", "neutral"}
        assert by_tag["calm"].impact == EmotionImpact.POSITIVE
        assert by_tag["Stressé"].impact == EmotionImpact.NEGATIVE
        assert by_tag["neutral"].impact == EmotionImpact.NEUTRAL
        assert analysis.best_emotion == "calm"
        assert analysis.worst_emotion == "Stressé"

        assert analysis.calm_pnl == 30
        assert analysis.calm_win_rate == 100
        assert analysis.stress_pnl == -30
        assert analysis.stress_win_rate == 0

    def test_small_groups_not_ranked(self):
        trades = make_series([10, 10], emotions="euphoric") + make_series([-10, -10, 10])
        analysis = analyze_emotions(trades)
        assert analysis.best_emotion == "neutral"
        assert analysis.worst_emotion == "neutral"

    def test_most_used_first(self):
        trades = make_series([10], emotions="calm") + make_series([10, 10], emotions="focused")
        assert [c.emotion for c in analyze_emotions(trades).correlations] == ["focused", "calm"]

    def test_calm_tags_merge_case_insensitively(self):
        trades = make_series([10], emotions="Calme") + make_series([-5], emotions="calm")
        analysis = analyze_emotions(trades)
        assert analysis.calm_pnl == 5
        assert analysis.calm_win_rate == 50

    def test_to_dict(self):
        data = analyze_emotions(make_series([10], emotions="calm")).to_dict()
        assert data["correlations"][0]["impact"] == "neutral"
