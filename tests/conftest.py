"""Shared fixtures for the trade-insights test suite."""

from __future__ import annotations

from datetime import datetime, timezone

import pytest

from trade_insights.core.clock import FixedClock
from trade_insights.core.config import Settings

from .factories import make_series


@pytest.fixture
def fixed_clock() -> FixedClock:
    return FixedClock(datetime(2024, 3, 15, 18, 0, tzinfo=timezone.utc))


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def scenario_a_trades():
    """10 closed trades: 6 wins (500 total), 4 losses (150 total)."""
    return make_series([50, 50, 50, 100, 100, 150, -30, -30, -40, -50])
