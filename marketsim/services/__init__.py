"""Services for the market simulator."""

from .instrument_registry import InstrumentRegistry
from .ledger_registry import LedgerRegistry
from .market_feed import MarketFeed, FeedManager, next_price, next_volume

__all__ = [
    'InstrumentRegistry',
    'LedgerRegistry',
    'MarketFeed',
    'FeedManager',
    'next_price',
    'next_volume',
]
