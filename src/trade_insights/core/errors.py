"""Custom exception hierarchy for the analytics core.

Missing or insufficient data is never an error: engines return empty or
``None`` results instead.  These exceptions cover genuinely invalid input.
"""


class InsightsError(Exception):
    """Base exception for all trade-insights errors."""


# --- Configuration ---
class ConfigError(InsightsError):
    """Invalid or missing configuration."""


# --- Input ---
class InvalidInputError(InsightsError):
    """Input is not a trade collection (e.g. ``None`` instead of a list)."""
