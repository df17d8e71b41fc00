"""Holdings ledger data model."""

import threading
from dataclasses import dataclass, field, replace
from typing import Dict, List, Mapping, Optional

from ..exceptions import InsufficientFunds, InsufficientPosition, InvalidOrder
from .trade import Trade


@dataclass
class Position:
    """Ledger position in an instrument."""
    symbol: str
    price: float
    volume: int

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            'symbol': self.symbol,
            'price': self.price,
            'volume': self.volume
        }


@dataclass(frozen=True)
class LedgerSnapshot:
    """Cash and positions of a ledger read under one lock acquisition."""
    username: str
    cash: float
    starting_cash: float
    positions: Dict[str, Position] = field(default_factory=dict)
    trades: List[Trade] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            'username': self.username,
            'cash': self.cash,
            'starting_cash': self.starting_cash,
            'positions': {k: v.to_dict() for k, v in self.positions.items()},
            'trades': [t.to_dict() for t in self.trades],
        }


def _check_order(price: float, quantity: int):
    if quantity <= 0:
        raise InvalidOrder(f"Quantity must be positive, got {quantity}")
    if price < 0:
        raise InvalidOrder(f"Price must be non-negative, got {price}")


class Ledger:
    """One agent's cash balance and holdings.

    All state changes go through ``buy`` and ``sell``. Each runs its whole
    check-then-apply sequence under the ledger's lock, so concurrent calls on
    the same ledger are linearized and calls on different ledgers never
    block each other.
    """

    def __init__(self, username: str, starting_cash: float):
        if starting_cash < 0:
            raise ValueError("Starting cash must be non-negative")
        self.username = username
        self.starting_cash = float(starting_cash)
        self._cash = float(starting_cash)
        self._positions: Dict[str, Position] = {}
        self._trades: List[Trade] = []
        self._lock = threading.Lock()

    @property
    def cash(self) -> float:
        with self._lock:
            return self._cash

    def get_position(self, symbol: str) -> Optional[Position]:
        """Get a copy of the position for a symbol."""
        with self._lock:
            pos = self._positions.get(symbol)
            return replace(pos) if pos else None

    def positions(self) -> Dict[str, Position]:
        with self._lock:
            return {k: replace(v) for k, v in self._positions.items()}

    def trades(self) -> List[Trade]:
        with self._lock:
            return list(self._trades)

    def buy(self, symbol: str, price: float, quantity: int) -> Trade:
        """Buy ``quantity`` of ``symbol`` at ``price``.

        Raises:
            InvalidOrder: quantity is not positive or price is negative
            InsufficientFunds: cash is below price * quantity
        """
        _check_order(price, quantity)
        cost = price * quantity
        with self._lock:
            if self._cash < cost:
                raise InsufficientFunds(symbol, cost, self._cash)
            pos = self._positions.get(symbol)
            if pos is None:
                pos = Position(symbol, price, 0)
                self._positions[symbol] = pos
            pos.price = price
            pos.volume += quantity
            self._cash -= cost
            return self._record(symbol, "buy", price, quantity)

    def sell(self, symbol: str, price: float, quantity: int) -> Trade:
        """Sell ``quantity`` of ``symbol`` at ``price``.

        The position is removed once its volume reaches zero.

        Raises:
            InvalidOrder: quantity is not positive or price is negative
            InsufficientPosition: no position, or held volume below quantity
        """
        _check_order(price, quantity)
        with self._lock:
            pos = self._positions.get(symbol)
            held = pos.volume if pos else 0
            if pos is None or held < quantity:
                raise InsufficientPosition(symbol, quantity, held)
            pos.price = price
            pos.volume -= quantity
            self._cash += price * quantity
            if pos.volume == 0:
                del self._positions[symbol]
            return self._record(symbol, "sell", price, quantity)

    def _record(self, symbol: str, side: str, price: float, quantity: int) -> Trade:
        # Caller holds the lock.
        trade = Trade(
            username=self.username,
            symbol=symbol,
            side=side,
            price=price,
            quantity=quantity,
            cash_after=self._cash,
        )
        self._trades.append(trade)
        return trade

    def snapshot(self) -> LedgerSnapshot:
        """Read cash, positions and trade history consistently."""
        with self._lock:
            return LedgerSnapshot(
                username=self.username,
                cash=self._cash,
                starting_cash=self.starting_cash,
                positions={k: replace(v) for k, v in self._positions.items()},
                trades=list(self._trades),
            )

    def market_value(self, prices: Optional[Mapping[str, float]] = None) -> float:
        """Cash plus positions marked at ``prices``.

        Symbols missing from ``prices`` are marked at their last traded price.
        """
        prices = prices or {}
        snap = self.snapshot()
        total = snap.cash
        for symbol, pos in snap.positions.items():
            total += pos.volume * prices.get(symbol, pos.price)
        return total

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        return self.snapshot().to_dict()

    def __repr__(self) -> str:
        return f"Ledger(username={self.username!r}, cash={self.cash:.2f})"
