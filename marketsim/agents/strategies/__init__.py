"""Trading strategies for simulated agents."""

from .base_strategy import BaseStrategy, MarketContext, TradingDecision
from .random_strategy import RandomStrategy

__all__ = ['BaseStrategy', 'MarketContext', 'TradingDecision', 'RandomStrategy']
