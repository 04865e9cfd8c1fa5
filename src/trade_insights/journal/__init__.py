"""Journal analytics: derived metrics over a snapshot of journaled trades.

Every engine is a pure function of the trade list (plus an explicit
``now`` where time matters).  Inputs are never mutated and equal inputs
give equal outputs.

Key components
--------------
**Core engines**

compute_stats               Aggregate performance statistics
compute_discipline          Rule-adherence score with daily history and grade
compute_streaks             Rule-violation streaks of clean trading days
compute_execution_quality   Entry timing, SL sizing and TP placement
classify_trader_profile     Behavioural archetype (or None under 5 trades)
compute_fatigue             Mental fatigue index at a given instant
detect_patterns             Personal patterns and cognitive biases

**Supplementary breakdowns**

detect_self_sabotage        Self-sabotaging behaviour alerts
analyze_emotions            Emotion tag / result correlation
analyze_sessions            Market session performance
build_heatmap               Weekday x hour P&L grid
analyze_strategies          Per-setup performance
compute_reward_chests       Discipline streak rewards
compute_challenges          Challenge progress counters

**Facade**

build_report                Runs every engine into a JournalReport
"""

from .discipline import DisciplineAnalysis, compute_discipline
from .emotions import EmotionAnalysis, analyze_emotions
from .execution import ExecutionQuality, compute_execution_quality
from .fatigue import FatigueIndex, compute_fatigue
from .patterns import PatternReport, detect_patterns
from .profile import TraderProfile, classify_trader_profile
from .report import JournalReport, build_report
from .rewards import compute_challenges, compute_reward_chests, level_for_points
from .sabotage import SelfSabotageAnalysis, detect_self_sabotage
from .sessions import PerformanceHeatmap, SessionAnalysis, analyze_sessions, build_heatmap
from .stats import AggregateStats, compute_stats, equity_curve
from .strategy import StrategyAnalysis, analyze_strategies
from .streaks import StreakAnalysis, compute_streaks

__all__ = [
    "AggregateStats",
    "compute_stats",
    "equity_curve",
    "DisciplineAnalysis",
    "compute_discipline",
    "StreakAnalysis",
    "compute_streaks",
    "ExecutionQuality",
    "compute_execution_quality",
    "TraderProfile",
    "classify_trader_profile",
    "FatigueIndex",
    "compute_fatigue",
    "PatternReport",
    "detect_patterns",
    "SelfSabotageAnalysis",
    "detect_self_sabotage",
    "EmotionAnalysis",
    "analyze_emotions",
    "SessionAnalysis",
    "analyze_sessions",
    "PerformanceHeatmap",
    "build_heatmap",
    "StrategyAnalysis",
    "analyze_strategies",
    "compute_reward_chests",
    "compute_challenges",
    "level_for_points",
    "JournalReport",
    "build_report",
]
