"""Core domain model: the journaled trade.

A Trade is a read-only snapshot supplied by the persistence layer.  The
engines never mutate it; every derived value is a property.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, Field, TypeAdapter, ValidationError, field_validator

from .clock import ensure_aware
from .enums import CLOSED_RESULTS, Direction, TradeResult
from .errors import InvalidInputError
from .numbers import is_finite_number

logger = logging.getLogger(__name__)

_DATETIME = TypeAdapter(datetime)

# Broker-style side names accepted for direction
_DIRECTION_ALIASES = {"buy": "long", "sell": "short"}


class Trade(BaseModel):
    """A single journaled position entry/exit with its metadata."""

    model_config = {"frozen": True}

    id: str
    direction: Direction
    entry_price: float
    exit_price: float | None = None
    stop_loss: float | None = None
    take_profit: float | None = None
    lot_size: float = Field(gt=0, allow_inf_nan=False)
    result: TradeResult | None = None
    profit_loss: float | None = None  # None while the trade is open
    setup: str | None = None
    custom_setup: str | None = None
    notes: str | None = None
    emotions: str | None = None
    trade_date: datetime  # Entry time; ordering key
    exit_timestamp: datetime | None = None
    duration_seconds: float | None = None
    timeframe: str | None = None
    asset: str | None = None
    risk_amount: float | None = None

    # ------------------------------------------------------------------ #
    # Validation                                                           #
    # ------------------------------------------------------------------ #

    @field_validator("direction", mode="before")
    @classmethod
    def _normalise_direction(cls, value: Any) -> Any:
        if isinstance(value, str):
            lowered = value.strip().lower()
            return _DIRECTION_ALIASES.get(lowered, lowered)
        return value

    @field_validator("trade_date")
    @classmethod
    def _aware_trade_date(cls, value: datetime) -> datetime:
        return ensure_aware(value)

    @field_validator("exit_timestamp", mode="before")
    @classmethod
    def _tolerant_exit_timestamp(cls, value: Any) -> datetime | None:
        # An unparseable exit time only costs the trade its duration.
        if value is None or value == "":
            return None
        try:
            parsed = _DATETIME.validate_python(value)
        except ValidationError:
            logger.debug("Ignoring unparseable exit_timestamp %r", value)
            return None
        return ensure_aware(parsed)

    # ------------------------------------------------------------------ #
    # Lifecycle                                                            #
    # ------------------------------------------------------------------ #

    @property
    def is_closed(self) -> bool:
        """Result is terminal (win / loss / breakeven)."""
        return self.result in CLOSED_RESULTS

    @property
    def has_finite_pnl(self) -> bool:
        return is_finite_number(self.profit_loss)

    @property
    def is_valid_closed(self) -> bool:
        """Closed with a finite, present ``profit_loss``."""
        return self.is_closed and self.has_finite_pnl

    @property
    def outcome(self) -> TradeResult | None:
        """Canonical win / loss / breakeven classification.

        The sign of ``profit_loss`` wins over the stored ``result`` label,
        which may be stale.  The label is only used when no finite P&L is
        recorded.  Open trades have no outcome.
        """
        if not self.is_closed:
            return None
        if self.has_finite_pnl:
            if self.profit_loss > 0:
                return TradeResult.WIN
            if self.profit_loss < 0:
                return TradeResult.LOSS
            return TradeResult.BREAKEVEN
        return self.result

    @property
    def is_win(self) -> bool:
        return self.outcome == TradeResult.WIN

    @property
    def is_loss(self) -> bool:
        return self.outcome == TradeResult.LOSS

    # ------------------------------------------------------------------ #
    # Risk controls and plan                                               #
    # ------------------------------------------------------------------ #

    @property
    def has_stop_loss(self) -> bool:
        return is_finite_number(self.stop_loss) and self.stop_loss > 0

    @property
    def has_take_profit(self) -> bool:
        return is_finite_number(self.take_profit) and self.take_profit > 0

    @property
    def has_exit_price(self) -> bool:
        return is_finite_number(self.exit_price) and self.exit_price > 0

    @property
    def setup_label(self) -> str | None:
        """Strategy label; a custom setup overrides the standard one."""
        for label in (self.custom_setup, self.setup):
            if label and label.strip():
                return label.strip()
        return None

    @property
    def is_long(self) -> bool:
        return self.direction == Direction.LONG

    # ------------------------------------------------------------------ #
    # Timing                                                               #
    # ------------------------------------------------------------------ #

    @property
    def trading_day(self) -> date:
        """Calendar day of entry, in the offset the trade was recorded with."""
        return self.trade_date.date()

    @property
    def resolved_duration_seconds(self) -> float | None:
        """Holding time in seconds, or None when there is no usable data.

        Prefers the stored ``duration_seconds``; otherwise derives it from
        ``exit_timestamp - trade_date`` when the exit is after the entry.
        """
        stored = self.duration_seconds
        if is_finite_number(stored) and stored > 0:
            return float(stored)
        if self.exit_timestamp is None:
            return None
        seconds = (self.exit_timestamp - self.trade_date).total_seconds()
        if seconds > 0 and math.isfinite(seconds):
            return seconds
        return None

    @property
    def notional(self) -> float:
        """Entry price times lot size."""
        return self.entry_price * self.lot_size


# ---------------------------------------------------------------------- #
# Collection helpers                                                       #
# ---------------------------------------------------------------------- #


def load_trades(records: Iterable[Mapping[str, Any]]) -> list[Trade]:
    """Build trades from plain dicts (e.g. rows fetched by the persistence layer)."""
    return [Trade.model_validate(dict(r)) for r in records]


def ensure_trade_list(trades: Any) -> list[Trade]:
    """Validate the engine input and return it as a list.

    Raises:
        InvalidInputError: for ``None`` or items that are not ``Trade``
            instances.  An empty list is valid input.
    """
    if trades is None:
        raise InvalidInputError("Expected a collection of trades, got None")
    if isinstance(trades, (str, bytes, Mapping)):
        raise InvalidInputError(
            f"Expected a collection of trades, got {type(trades).__name__}"
        )
    items = list(trades)
    for item in items:
        if not isinstance(item, Trade):
            raise InvalidInputError(
                f"Expected Trade instances, got {type(item).__name__}"
            )
    return items


def sort_chronologically(trades: Iterable[Trade]) -> list[Trade]:
    """Return a new list ordered by ``trade_date`` (stable for ties)."""
    return sorted(trades, key=lambda t: t.trade_date)
