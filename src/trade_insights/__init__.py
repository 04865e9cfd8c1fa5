"""Trade Insights: behavioural analytics for a personal trading journal."""

__version__ = "0.1.0"
