"""Gamification counters: reward chests, challenge progress and levels.

Only the derivation lives here.  Persisting progress, awarding points and
deciding when to show a popup belong to the gamification layer.

Chests unlock from the best streak of good discipline days (see
``discipline``); challenges count trades, trading days and win-rate goals
from the same snapshot and its ``AggregateStats``.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from trade_insights.core.config import DisciplineConfig
from trade_insights.core.enums import ChallengeDifficulty, ChestRarity, RewardType
from trade_insights.core.models import Trade, ensure_trade_list
from trade_insights.core.numbers import round_half_up, round_int

from .discipline import DisciplineAnalysis, compute_discipline
from .stats import AggregateStats, compute_stats


# ---------------------------------------------------------------------- #
# Chests                                                                   #
# ---------------------------------------------------------------------- #


@dataclass(frozen=True)
class ChestDefinition:
    id: str
    required_days: int
    rarity: ChestRarity
    reward_type: RewardType
    reward_value: str | int


CHESTS: tuple[ChestDefinition, ...] = (
    ChestDefinition("chest_3_days", 3, ChestRarity.COMMON, RewardType.BADGE, "disciplined_starter"),
    ChestDefinition("chest_7_days", 7, ChestRarity.COMMON, RewardType.POINTS, 100),
    ChestDefinition("chest_14_days", 14, ChestRarity.RARE, RewardType.BADGE, "consistent_trader"),
    ChestDefinition("chest_21_days", 21, ChestRarity.RARE, RewardType.POINTS, 500),
    ChestDefinition("chest_30_days", 30, ChestRarity.EPIC, RewardType.TITLE, "master_of_discipline"),
    ChestDefinition("chest_60_days", 60, ChestRarity.LEGENDARY, RewardType.BADGE, "trading_legend"),
    ChestDefinition("chest_100_days", 100, ChestRarity.LEGENDARY, RewardType.TITLE, "trading_god"),
)


@dataclass(frozen=True)
class RewardChests:
    streak: int = 0
    unlocked: list[ChestDefinition] = field(default_factory=list)
    locked: list[ChestDefinition] = field(default_factory=lambda: list(CHESTS))
    progress: int = 0  # Percent towards the next chest; 100 when all unlocked

    @property
    def next_chest(self) -> ChestDefinition | None:
        return self.locked[0] if self.locked else None

    def to_dict(self) -> dict[str, Any]:
        return {
            "streak": self.streak,
            "unlocked": [c.id for c in self.unlocked],
            "locked": [c.id for c in self.locked],
            "next_chest": self.next_chest.id if self.next_chest else None,
            "progress": self.progress,
        }


def compute_reward_chests(
    trades: list[Trade],
    discipline: DisciplineAnalysis | None = None,
    config: DisciplineConfig | None = None,
) -> RewardChests:
    """Unlock chests from the best streak of good discipline days.

    Pass a precomputed *discipline* analysis to avoid recomputing it.
    """
    trades = ensure_trade_list(trades)
    if discipline is None:
        discipline = compute_discipline(trades, config)

    streak = discipline.best_streak
    unlocked = [c for c in CHESTS if streak >= c.required_days]
    locked = [c for c in CHESTS if streak < c.required_days]
    progress = round_int(streak / locked[0].required_days * 100) if locked else 100
    return RewardChests(streak=streak, unlocked=unlocked, locked=locked, progress=progress)


# ---------------------------------------------------------------------- #
# Challenges                                                               #
# ---------------------------------------------------------------------- #


def _trading_days(trades: list[Trade], stats: AggregateStats) -> int:
    return len({t.trading_day for t in trades})


def _winrate_goal(target: int, min_winrate: float) -> Callable[[list[Trade], AggregateStats], int]:
    """Full progress once *target* closed trades beat *min_winrate*."""

    def progress(trades: list[Trade], stats: AggregateStats) -> int:
        closed = stats.closed_trades
        if closed >= target and stats.winrate > min_winrate:
            return target
        return min(closed, target - 1)

    return progress


def _legend(trades: list[Trade], stats: AggregateStats) -> int:
    if stats.winrate > 55:
        return len(trades)
    return min(len(trades), 999)


@dataclass(frozen=True)
class ChallengeDefinition:
    id: str
    target: int
    difficulty: ChallengeDifficulty
    points: int
    measure: Callable[[list[Trade], AggregateStats], int] = field(repr=False, compare=False)


def _trade_count(trades: list[Trade], stats: AggregateStats) -> int:
    return len(trades)


CHALLENGES: tuple[ChallengeDefinition, ...] = (
    ChallengeDefinition("first_trade", 1, ChallengeDifficulty.EASY, 10, _trade_count),
    ChallengeDefinition("active_week", 5, ChallengeDifficulty.EASY, 25, _trading_days),
    ChallengeDefinition("ten_trades", 10, ChallengeDifficulty.EASY, 30, _trade_count),
    ChallengeDefinition(
        "winning_streak", 5, ChallengeDifficulty.MEDIUM, 50,
        lambda trades, stats: stats.longest_win_streak,
    ),
    ChallengeDefinition("fifty_trades", 50, ChallengeDifficulty.MEDIUM, 75, _trade_count),
    ChallengeDefinition("winrate_55", 20, ChallengeDifficulty.MEDIUM, 100, _winrate_goal(20, 55)),
    ChallengeDefinition("centurion", 100, ChallengeDifficulty.HARD, 150, _trade_count),
    ChallengeDefinition("winrate_elite", 50, ChallengeDifficulty.HARD, 200, _winrate_goal(50, 60)),
    ChallengeDefinition("legend", 1000, ChallengeDifficulty.EXPERT, 500, _legend),
)


@dataclass(frozen=True)
class ChallengeProgress:
    id: str
    difficulty: ChallengeDifficulty
    progress: int
    target: int
    points: int

    @property
    def completed(self) -> bool:
        return self.progress >= self.target

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "difficulty": self.difficulty.value,
            "progress": self.progress,
            "target": self.target,
            "completed": self.completed,
            "points": self.points,
        }


def compute_challenges(
    trades: list[Trade], stats: AggregateStats | None = None,
) -> list[ChallengeProgress]:
    """Progress counter for every challenge, capped at its target."""
    trades = ensure_trade_list(trades)
    if stats is None:
        stats = compute_stats(trades)
    return [
        ChallengeProgress(
            id=c.id,
            difficulty=c.difficulty,
            progress=min(c.measure(trades, stats), c.target),
            target=c.target,
            points=c.points,
        )
        for c in CHALLENGES
    ]


# ---------------------------------------------------------------------- #
# Levels                                                                   #
# ---------------------------------------------------------------------- #


@dataclass(frozen=True)
class UserLevel:
    level: int
    title: str
    min_points: int


USER_LEVELS: tuple[UserLevel, ...] = (
    UserLevel(1, "beginner", 0),
    UserLevel(2, "apprentice", 100),
    UserLevel(3, "trader", 300),
    UserLevel(4, "confirmed", 600),
    UserLevel(5, "expert", 1000),
    UserLevel(6, "master", 2000),
    UserLevel(7, "champion", 5000),
    UserLevel(8, "legend", 10000),
)


@dataclass(frozen=True)
class LevelStatus:
    current: UserLevel
    next: UserLevel | None
    progress_to_next: float  # Percent

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.current.level,
            "title": self.current.title,
            "next_level": self.next.level if self.next else None,
            "progress_to_next": self.progress_to_next,
        }


def level_for_points(points: int) -> LevelStatus:
    """Highest level whose threshold *points* reaches."""
    current = USER_LEVELS[0]
    for level in USER_LEVELS:
        if points >= level.min_points:
            current = level
    index = USER_LEVELS.index(current)
    nxt = USER_LEVELS[index + 1] if index + 1 < len(USER_LEVELS) else None
    if nxt is None:
        progress = 100.0
    else:
        span = nxt.min_points - current.min_points
        progress = round_half_up(max(0, points - current.min_points) / span * 100, 1)
    return LevelStatus(current=current, next=nxt, progress_to_next=progress)
