"""Text reports for finished agents."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .models.ledger import LedgerSnapshot, Position
from .models.trade import Trade


@dataclass
class AgentReport:
    """Final state of one agent's ledger."""
    username: str
    cash: float
    starting_cash: float
    positions: Dict[str, Position] = field(default_factory=dict)
    trades: List[Trade] = field(default_factory=list)
    skipped: int = 0
    error: Optional[str] = None

    @classmethod
    def from_snapshot(cls, snapshot: LedgerSnapshot, skipped: int = 0,
                      error: Optional[str] = None) -> 'AgentReport':
        return cls(
            username=snapshot.username,
            cash=snapshot.cash,
            starting_cash=snapshot.starting_cash,
            positions=snapshot.positions,
            trades=snapshot.trades,
            skipped=skipped,
            error=error,
        )

    @property
    def pnl(self) -> float:
        """Realized cash change; open positions are not marked."""
        return self.cash - self.starting_cash

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'username': self.username,
            'cash': self.cash,
            'starting_cash': self.starting_cash,
            'positions': {k: v.to_dict() for k, v in self.positions.items()},
            'trades': [t.to_dict() for t in self.trades],
            'skipped': self.skipped,
            'error': self.error,
        }


def format_trade(trade: Trade) -> str:
    verb = "bought" if trade.side == "buy" else "sold"
    return f"{trade.username} {verb} {trade.quantity} shares of {trade.symbol} at {trade.price:.2f}"


def format_report(report: AgentReport) -> List[str]:
    """Render a report as lines of text."""
    lines = [
        f"{report.username}'s Portfolio:",
        f"Cash: {report.cash:.2f}",
        "Stocks:",
    ]
    for symbol in sorted(report.positions):
        pos = report.positions[symbol]
        lines.append(f"{symbol}: Price: {pos.price:.2f}, Volume: {pos.volume}")
    if report.error:
        lines.append(f"Error: {report.error}")
    return lines
