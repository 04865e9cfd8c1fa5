"""Per-bucket performance accumulator shared by the breakdown engines."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from trade_insights.core.models import Trade
from trade_insights.core.numbers import round_half_up, round_int, safe_ratio


@dataclass
class PerformanceBucket:
    """Accumulator for one slice of trades (emotion, session, setup, cell)."""

    trades: int = 0
    wins: int = 0
    losses: int = 0
    total_pnl: float = 0.0
    gross_profit: float = 0.0
    gross_loss: float = 0.0
    total_lots: float = 0.0

    def record(self, trade: Trade) -> None:
        pnl = trade.profit_loss if trade.has_finite_pnl else 0.0
        self.trades += 1
        self.total_pnl += pnl
        self.total_lots += trade.lot_size
        if trade.is_win:
            self.wins += 1
            self.gross_profit += pnl
        elif trade.is_loss:
            self.losses += 1
            self.gross_loss += abs(pnl)

    @property
    def win_rate(self) -> int:
        """Wins over all trades in the bucket, pending included."""
        return round_int(self.wins / self.trades * 100) if self.trades else 0

    @property
    def avg_pnl(self) -> float:
        return round_half_up(self.total_pnl / self.trades, 2) if self.trades else 0.0

    @property
    def avg_lot_size(self) -> float:
        return round_half_up(self.total_lots / self.trades, 2) if self.trades else 0.0

    @property
    def profit_factor(self) -> float:
        return round_half_up(safe_ratio(self.gross_profit, self.gross_loss), 2)

    def to_dict(self) -> dict[str, Any]:
        return {
            "trades": self.trades,
            "wins": self.wins,
            "losses": self.losses,
            "win_rate": self.win_rate,
            "total_pnl": round_half_up(self.total_pnl, 2),
            "avg_pnl": self.avg_pnl,
        }
