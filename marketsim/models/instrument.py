"""Instrument data model."""

import threading
from typing import Callable, Tuple

# Lowest price an update may commit.
PRICE_FLOOR = 0.01


class Instrument:
    """A tradable instrument whose price and volume change together.

    Price and volume are only ever touched while holding the instrument's
    lock, so ``snapshot`` always returns a pair committed by one ``update``.
    """

    def __init__(self, symbol: str, price: float, volume: int, depth: int = 0):
        if price <= 0:
            raise ValueError(f"Initial price for {symbol} must be positive")
        if volume < 0:
            raise ValueError(f"Initial volume for {symbol} must be non-negative")
        if depth < 0:
            raise ValueError(f"Order book depth for {symbol} must be non-negative")
        self._symbol = symbol
        self._price = float(price)
        self._volume = int(volume)
        self._depth = int(depth)
        self._lock = threading.Lock()

    @property
    def symbol(self) -> str:
        return self._symbol

    @property
    def depth(self) -> int:
        return self._depth

    def snapshot(self) -> Tuple[float, int]:
        """Read price and volume as one consistent pair."""
        with self._lock:
            return self._price, self._volume

    def update(self, price_fn: Callable[[float], float],
               volume_fn: Callable[[int], int]) -> Tuple[float, int]:
        """Recompute price and volume from their current values.

        Both functions run under the lock and the results are floored
        (price at PRICE_FLOOR, volume at zero) before being committed.

        Returns:
            The committed (price, volume) pair
        """
        with self._lock:
            price = max(PRICE_FLOOR, float(price_fn(self._price)))
            volume = max(0, int(volume_fn(self._volume)))
            self._price = price
            self._volume = volume
            return price, volume

    def to_dict(self) -> dict:
        """Convert to dictionary for reporting."""
        price, volume = self.snapshot()
        return {
            'symbol': self._symbol,
            'price': price,
            'volume': volume,
            'depth': self._depth,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Instrument':
        """Create from a seed dictionary."""
        return cls(
            symbol=data['symbol'],
            price=float(data.get('price', 100.0)),
            volume=int(data.get('volume', 1000)),
            depth=int(data.get('depth', 10)),
        )

    def __repr__(self) -> str:
        price, volume = self.snapshot()
        return f"Instrument(symbol={self._symbol!r}, price={price:.2f}, volume={volume}, depth={self._depth})"
