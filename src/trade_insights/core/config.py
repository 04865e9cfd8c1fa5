"""Configuration management.

Every heuristic threshold used by the engines is a named policy constant
here, so thresholds can be tuned and tested independently of the
algorithms.  Loads from an optional TOML file + environment variables,
using pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings

from .enums import DisciplineComponent, SabotageType
from .errors import ConfigError


# ---------------------------------------------------------------------------
# Engine configs
# ---------------------------------------------------------------------------

class StatsConfig(BaseModel):
    starting_capital: float = 10_000.0  # Notional equity for drawdown simulation


class DisciplineConfig(BaseModel):
    daily_trade_limit: int = 10
    lot_variance_threshold: float = 0.5  # 50% deviation from mean lot allowed
    history_days: int = 30
    good_day_score: int = 70  # Day score counted towards the streak
    overtrading_day_factor: float = 0.5  # Day-level credit when over the limit
    # Overall score weights; a component without data is dropped from the
    # denominator.  Equal weights give a straight average.
    component_weights: dict[DisciplineComponent, float] = Field(
        default_factory=lambda: {c: 1.0 for c in DisciplineComponent}
    )
    # Day score weights: SL / TP / setup / overtrading
    day_weight_sl: float = 0.30
    day_weight_tp: float = 0.25
    day_weight_setup: float = 0.25
    day_weight_overtrading: float = 0.20
    # Improvement tip thresholds (percent)
    sl_tip_below: float = 80
    tp_tip_below: float = 80
    plan_tip_below: float = 70
    risk_tip_below: float = 70
    overtrading_tip_below: float = 80


class StreakRulesConfig(BaseModel):
    max_trades_per_day: int = 5
    max_losses_per_day: int = 3
    revenge_window_minutes: float = 15.0
    active_streak_days: int = 3  # Last trading day must be this recent
    max_history: int = 10
    max_violations: int = 20
    max_daily_checks: int = 30


class ExecutionConfig(BaseModel):
    good_entry_long: float = 0.3
    early_entry_long: float = 0.5
    good_entry_short: float = 0.7
    early_entry_short: float = 0.5
    tight_sl_pct: float = 0.3
    wide_sl_pct: float = 2.0
    tp_hit_fraction: float = 0.95  # Share of the TP distance that counts as a hit
    entry_optimal_score: int = 70
    entry_acceptable_score: int = 50
    sl_optimal_score: int = 60
    tp_optimized_score: int = 70


class ProfileConfig(BaseModel):
    min_closed_trades: int = 5
    dominant_threshold: int = 50
    score_cap: int = 100
    quick_trade_minutes: float = 30.0


class FatigueConfig(BaseModel):
    # (threshold, points) bands, checked in order; first match wins
    session_hour_bands: list[tuple[float, int]] = Field(
        default_factory=lambda: [(8, 30), (6, 20), (4, 10)]  # hours >= threshold
    )
    loss_streak_bands: list[tuple[int, int]] = Field(
        default_factory=lambda: [(5, 35), (3, 25), (2, 15), (1, 5)]  # losses >= threshold
    )
    negative_pnl_bands: list[tuple[float, int]] = Field(
        default_factory=lambda: [(-100, 20), (-50, 10), (0, 5)]  # pnl < threshold
    )
    intensity_bands: list[tuple[float, int]] = Field(
        default_factory=lambda: [(10, 15), (5, 8)]  # trades/day > threshold
    )
    points_per_trade: int = 3
    trade_count_cap: int = 30
    rolling_days: int = 7
    critical_level: int = 70
    high_level: int = 50
    moderate_level: int = 30
    score_cap: int = 100


class PatternConfig(BaseModel):
    min_trades: int = 10
    min_bucket_trades: int = 3
    min_weak_bucket_trades: int = 5
    strong_bucket_win_rate: float = 60
    weak_bucket_win_rate: float = 40
    min_setup_trades: int = 5
    strong_setup_win_rate: float = 70
    weak_setup_win_rate: float = 35
    min_post_loss_pairs: int = 5
    weak_post_loss_win_rate: float = 35
    strong_post_loss_win_rate: float = 60
    # Confirmation bias
    direction_imbalance: float = 0.4
    confirmation_confidence_cap: float = 80
    # Recency bias
    recent_fraction: float = 0.2
    recent_max_trades: int = 10
    recent_min_trades: int = 5
    older_min_trades: int = 10
    recency_lot_shift: float = 0.3
    recency_confidence_cap: float = 70
    # Overconfidence
    min_wins_with_next: int = 5
    size_up_factor: float = 1.2
    overconfidence_ratio: float = 0.4
    overconfidence_confidence_cap: float = 80
    # Loss aversion
    min_duration_samples: int = 3
    hold_time_ratio: float = 1.5
    loss_aversion_confidence_cap: float = 80


class SabotageConfig(BaseModel):
    quick_trade_minutes: float = 30.0
    lot_increase_factor: float = 1.5
    revenge_window_hours: float = 1.0
    revenge_min_losses: int = 2
    overtrading_day_limit: int = 10
    # (warning_at, danger_at) occurrence counts per alert; None = never danger
    alert_thresholds: dict[SabotageType, tuple[int, int | None]] = Field(
        default_factory=lambda: {
            SabotageType.TRADING_AFTER_LOSS: (3, 5),
            SabotageType.LOT_INCREASE_AFTER_WIN: (2, 4),
            SabotageType.EMOTIONAL_TRADING: (5, 10),
            SabotageType.REVENGE_TRADING: (2, 2),
            SabotageType.OVERTRADING: (2, None),
        }
    )
    score_weights: dict[SabotageType, int] = Field(
        default_factory=lambda: {
            SabotageType.TRADING_AFTER_LOSS: 2,
            SabotageType.LOT_INCREASE_AFTER_WIN: 3,
            SabotageType.EMOTIONAL_TRADING: 1,
            SabotageType.REVENGE_TRADING: 4,
            SabotageType.OVERTRADING: 2,
        }
    )
    expected_issue_ratio: float = 0.3  # Issues per trade that maps to score 100
    max_alert_details: int = 3
    negative_emotions: list[str] = Field(
        default_factory=lambda: [
            "stressé", "stressed", "impulsif", "impulsive", "frustré",
            "frustrated", "anxieux", "anxious", "fatigué", "tired",
            "euphorique", "euphoric",
        ]
    )


class EmotionConfig(BaseModel):
    min_trades: int = 3  # Needed to rank best / worst emotion
    impact_margin: float = 10  # Win-rate points from the overall rate
    untagged_label: str = "neutral"
    calm_tags: list[str] = Field(default_factory=lambda: ["calme", "calm"])
    stress_tags: list[str] = Field(default_factory=lambda: ["stressé", "stressed"])


class SessionConfig(BaseModel):
    min_trades: int = 3  # Needed to be named best session


class StrategyConfig(BaseModel):
    min_trades: int = 3
    unknown_label: str = "unknown"
    # Keyword (case-insensitive substring) per category; first match wins
    categories: dict[str, list[str]] = Field(
        default_factory=lambda: {
            "scalping": ["scalping", "quick trade", "m1", "m5"],
            "day_trading": ["day trading", "intraday", "h1", "h4"],
            "swing": ["swing", "d1", "w1", "position"],
            "ict": ["ict", "order block", "fvg", "liquidity", "bos", "choch", "mitigation"],
            "smc": ["smc", "smart money", "institutional"],
            "technical": ["rsi", "macd", "moving average", "ema", "sma", "bollinger"],
            "price_action": ["breakout", "support/resistance", "trendline", "channel", "pattern"],
        }
    )


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: str = "json"  # "json" or "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level analytics settings.

    Loaded from TOML config files, overridden by environment variables.
    """

    stats: StatsConfig = Field(default_factory=StatsConfig)
    discipline: DisciplineConfig = Field(default_factory=DisciplineConfig)
    streaks: StreakRulesConfig = Field(default_factory=StreakRulesConfig)
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)
    profile: ProfileConfig = Field(default_factory=ProfileConfig)
    fatigue: FatigueConfig = Field(default_factory=FatigueConfig)
    patterns: PatternConfig = Field(default_factory=PatternConfig)
    sabotage: SabotageConfig = Field(default_factory=SabotageConfig)
    emotions: EmotionConfig = Field(default_factory=EmotionConfig)
    sessions: SessionConfig = Field(default_factory=SessionConfig)
    strategy: StrategyConfig = Field(default_factory=StrategyConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "TRADE_INSIGHTS_", "env_nested_delimiter": "__"}


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).
        overrides: Dict of overrides to apply on top.

    Raises:
        ConfigError: if *config_path* is given but does not exist or is not
            valid TOML, or if the merged values fail validation.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        import tomli

        with open(path, "rb") as f:
            try:
                data = tomli.load(f)
            except tomli.TOMLDecodeError as exc:
                raise ConfigError(f"Invalid TOML in {path}: {exc}") from exc

    if overrides:
        data.update(overrides)

    try:
        return Settings(**data)
    except ValidationError as exc:
        raise ConfigError(f"Invalid settings: {exc}") from exc
