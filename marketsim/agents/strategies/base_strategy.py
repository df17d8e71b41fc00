"""Base strategy interface."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple


@dataclass
class MarketContext:
    """Market context for strategy decisions."""
    username: str
    symbols: List[str]
    snapshot: Callable[[str], Tuple[float, int]]  # symbol -> (price, volume)
    cash: float
    iteration: int


@dataclass
class TradingDecision:
    """Trading decision result."""
    action: str  # "buy" or "sell"
    symbol: str
    price: float
    quantity: int


class BaseStrategy(ABC):
    """Base class for trading strategies."""

    @abstractmethod
    def decide(self, context: MarketContext) -> Optional[TradingDecision]:
        """
        Make a trading decision based on market context.

        Returns:
            TradingDecision if action should be taken, None to skip
        """
        pass
