"""Registry of per-agent holdings ledgers."""

import logging
import threading
from typing import Dict, List, Optional

from ..models.ledger import Ledger

logger = logging.getLogger(__name__)


class LedgerRegistry:
    """Maps usernames to ledgers, creating them on first touch.

    The registry lock only guards the mapping. It is released before the
    caller touches the ledger, so ledger operations on different usernames
    never contend here.
    """

    def __init__(self, starting_cash: float = 1000.0):
        if starting_cash < 0:
            raise ValueError("Starting cash must be non-negative")
        self.starting_cash = starting_cash
        self._ledgers: Dict[str, Ledger] = {}
        self._lock = threading.Lock()

    def get_or_create(self, username: str) -> Ledger:
        """Get the ledger for a username, creating it if absent."""
        with self._lock:
            ledger = self._ledgers.get(username)
            if ledger is None:
                ledger = Ledger(username, self.starting_cash)
                self._ledgers[username] = ledger
                logger.debug("Created ledger for %s with cash %.2f", username, self.starting_cash)
            return ledger

    def get(self, username: str) -> Optional[Ledger]:
        with self._lock:
            return self._ledgers.get(username)

    def usernames(self) -> List[str]:
        with self._lock:
            return list(self._ledgers)

    def list_ledgers(self) -> List[Ledger]:
        with self._lock:
            return list(self._ledgers.values())

    def total_value(self, prices: Dict[str, float]) -> float:
        """Sum of every ledger's cash and marked positions."""
        return sum(ledger.market_value(prices) for ledger in self.list_ledgers())

    def __len__(self) -> int:
        with self._lock:
            return len(self._ledgers)
