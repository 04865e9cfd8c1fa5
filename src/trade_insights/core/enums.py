"""Enumerations used across the analytics core."""

from enum import Enum


class Direction(str, Enum):
    LONG = "long"
    SHORT = "short"


class TradeResult(str, Enum):
    WIN = "win"
    LOSS = "loss"
    BREAKEVEN = "breakeven"
    PENDING = "pending"


CLOSED_RESULTS = frozenset({TradeResult.WIN, TradeResult.LOSS, TradeResult.BREAKEVEN})


class StreakType(str, Enum):
    WIN = "win"
    LOSS = "loss"
    NONE = "none"


class Grade(str, Enum):
    A = "A"
    B = "B"
    C = "C"
    D = "D"
    F = "F"


class DisciplineComponent(str, Enum):
    STOP_LOSS = "stop_loss"
    TAKE_PROFIT = "take_profit"
    PLAN = "plan"
    RISK_MANAGEMENT = "risk_management"
    NO_OVERTRADING = "no_overtrading"


class ImprovementTip(str, Enum):
    """Rule-based improvement suggestions (rendered by the presentation layer)."""

    ALWAYS_SET_STOP_LOSS = "always_set_stop_loss"
    ALWAYS_SET_TAKE_PROFIT = "always_set_take_profit"
    DOCUMENT_SETUP = "document_setup"
    CONSISTENT_LOT_SIZE = "consistent_lot_size"
    LIMIT_DAILY_TRADES = "limit_daily_trades"


class ViolationType(str, Enum):
    OVERTRADING = "overtrading"
    EXCESSIVE_LOSSES = "excessive_losses"
    NO_STOP_LOSS = "no_sl"
    NO_SETUP = "no_setup"
    REVENGE_TRADING = "revenge_trading"


class ExecutionLabel(str, Enum):
    NO_DATA = "no_data"
    NOT_SET = "not_set"
    OPTIMAL = "optimal"
    ACCEPTABLE = "acceptable"
    TOO_LATE = "too_late"
    TOO_EARLY = "too_early"
    TOO_TIGHT = "too_tight"
    TOO_WIDE = "too_wide"
    OPTIMIZED = "optimized"
    NOT_OPTIMIZED = "not_optimized"
    PARTIAL = "partial"


class ProfileType(str, Enum):
    IMPULSIVE = "impulsive"
    PATIENT = "patient"
    HESITANT = "hesitant"
    AGGRESSIVE = "aggressive"
    BALANCED = "balanced"


class Trait(str, Enum):
    IMPULSIVITY = "impulsivity"
    PATIENCE = "patience"
    HESITANCY = "hesitancy"
    AGGRESSIVENESS = "aggressiveness"


class FatigueLevel(str, Enum):
    LOW = "low"
    MODERATE = "moderate"
    HIGH = "high"
    CRITICAL = "critical"


class FatigueFactorName(str, Enum):
    SESSION_DURATION = "session_duration"
    TRADE_COUNT = "trade_count"
    SUCCESSIVE_LOSSES = "successive_losses"
    NEGATIVE_PNL = "negative_pnl"
    WEEKLY_INTENSITY = "weekly_intensity"


class FatigueRecommendation(str, Enum):
    STOP_TRADING_NOW = "stop_trading_now"
    TAKE_A_BREAK = "take_a_break"
    STAY_VIGILANT = "stay_vigilant"
    GOOD_TO_TRADE = "good_to_trade"


class PatternKind(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"


class PatternCategory(str, Enum):
    TIMING = "timing"
    DAY_OF_WEEK = "day_of_week"
    SETUP = "setup"
    BEHAVIOR = "behavior"


class BiasType(str, Enum):
    CONFIRMATION = "confirmation_bias"
    RECENCY = "recency_bias"
    OVERCONFIDENCE = "overconfidence"
    LOSS_AVERSION = "loss_aversion"


class SabotageType(str, Enum):
    TRADING_AFTER_LOSS = "trading_after_loss"
    LOT_INCREASE_AFTER_WIN = "lot_increase_after_win"
    EMOTIONAL_TRADING = "emotional_trading"
    REVENGE_TRADING = "revenge_trading"
    OVERTRADING = "overtrading"


class Severity(str, Enum):
    WARNING = "warning"
    DANGER = "danger"


class SabotageRecommendation(str, Enum):
    WAIT_AFTER_LOSS = "wait_after_loss"
    CONSTANT_POSITION_SIZE = "constant_position_size"
    AVOID_EMOTIONAL_TRADING = "avoid_emotional_trading"


class EmotionImpact(str, Enum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class MarketSession(str, Enum):
    LONDON = "london"
    NEW_YORK = "new_york"
    ASIA = "asia"
    OVERLAP = "overlap"


class ChestRarity(str, Enum):
    COMMON = "common"
    RARE = "rare"
    EPIC = "epic"
    LEGENDARY = "legendary"


class RewardType(str, Enum):
    BADGE = "badge"
    TITLE = "title"
    POINTS = "points"


class ChallengeDifficulty(str, Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"
    EXPERT = "expert"
