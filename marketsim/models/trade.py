"""Trade data model."""

from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class Trade:
    """Represents a committed buy or sell against a ledger."""
    username: str
    symbol: str
    side: str  # "buy" or "sell"
    price: float
    quantity: int
    cash_after: float
    timestamp: datetime = field(default_factory=datetime.now)

    @property
    def value(self) -> float:
        return self.price * self.quantity

    @property
    def cash_delta(self) -> float:
        """Signed change this trade applied to the ledger's cash."""
        return -self.value if self.side == "buy" else self.value

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'username': self.username,
            'symbol': self.symbol,
            'side': self.side,
            'price': self.price,
            'quantity': self.quantity,
            'cash_after': self.cash_after,
            'timestamp': self.timestamp.isoformat()
        }
