"""Tests for reward chests, challenges and levels."""

from __future__ import annotations

from datetime import timedelta

from trade_insights.journal.discipline import DisciplineAnalysis
from trade_insights.journal.rewards import (
    CHESTS,
    USER_LEVELS,
    compute_challenges,
    compute_reward_chests,
    level_for_points,
)

from ...factories import BASE_TIME, make_series


def _good_days(count: int):
    trades = []
    for offset in range(count):
        trades += make_series([10], start=BASE_TIME + timedelta(days=offset))
    return trades


class TestRewardChests:
    def test_no_trades(self):
        chests = compute_reward_chests([])
        assert chests.streak == 0
        assert chests.unlocked == []
        assert chests.next_chest == CHESTS[0]
        assert chests.progress == 0

    def test_three_day_streak(self):
        chests = compute_reward_chests(_good_days(3))
        assert [c.id for c in chests.unlocked] == ["chest_3_days"]
        assert chests.next_chest.id == "chest_7_days"
        assert chests.progress == 43

    def test_precomputed_discipline(self):
        chests = compute_reward_chests([], discipline=DisciplineAnalysis(best_streak=100))
        assert len(chests.unlocked) == len(CHESTS)
        assert chests.next_chest is None
        assert chests.progress == 100
        assert chests.to_dict()["next_chest"] is None


class TestChallenges:
    def test_progress(self, scenario_a_trades):
        progress = {c.id: c for c in compute_challenges(scenario_a_trades)}
        assert progress["first_trade"].completed
        assert progress["ten_trades"].completed
        assert progress["active_week"].progress == 1
        assert progress["winning_streak"].progress == 5
        assert progress["winning_streak"].completed
        assert progress["winrate_55"].progress == 10
        assert not progress["winrate_55"].completed
        assert progress["legend"].progress == 10

    def test_winrate_goal_completes(self):
        trades = make_series([10] * 15 + [-10] * 5)
        progress = {c.id: c for c in compute_challenges(trades)}
        assert progress["winrate_55"].completed
        assert progress["winrate_elite"].progress == 20

    def test_empty(self):
        assert all(c.progress == 0 for c in compute_challenges([]))


class TestLevels:
    def test_first_level(self):
        status = level_for_points(0)
        assert status.current.level == 1
        assert status.next.level == 2
        assert status.progress_to_next == 0.0

    def test_mid_level(self):
        status = level_for_points(150)
        assert status.current.title == "apprentice"
        assert status.progress_to_next == 25.0

    def test_max_level(self):
        status = level_for_points(25_000)
        assert status.current == USER_LEVELS[-1]
        assert status.next is None
        assert status.progress_to_next == 100.0

    def test_negative_points(self):
        assert level_for_points(-50).progress_to_next == 0.0
