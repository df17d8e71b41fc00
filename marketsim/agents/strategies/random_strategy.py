"""Uniformly random buy/sell strategy."""

import random
from typing import Optional

from .base_strategy import BaseStrategy, MarketContext, TradingDecision

ACTIONS = ("buy", "sell")


class RandomStrategy(BaseStrategy):
    """Picks a symbol, a quantity in [1, max_quantity] and a side at random.

    The price is the instrument's snapshot at decision time; the ledger trades
    at that price even if the instrument moves before the trade commits.
    """

    def __init__(self, max_quantity: int = 10, rng: Optional[random.Random] = None):
        if max_quantity < 1:
            raise ValueError("Max quantity must be at least 1")
        self.max_quantity = max_quantity
        self.rng = rng or random.Random()

    def decide(self, context: MarketContext) -> Optional[TradingDecision]:
        if not context.symbols:
            return None
        symbol = self.rng.choice(context.symbols)
        price, _ = context.snapshot(symbol)
        quantity = self.rng.randint(1, self.max_quantity)
        action = self.rng.choice(ACTIONS)
        return TradingDecision(action=action, symbol=symbol, price=price, quantity=quantity)
