"""Data models for the market simulator."""

from .instrument import Instrument, PRICE_FLOOR
from .ledger import Ledger, LedgerSnapshot, Position
from .trade import Trade

__all__ = ['Instrument', 'PRICE_FLOOR', 'Ledger', 'LedgerSnapshot', 'Position', 'Trade']
